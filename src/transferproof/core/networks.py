"""
Flare network metadata.

Chain ids, public RPC endpoints and data-availability endpoints for the
networks the Data Connector is deployed on.
"""

from dataclasses import dataclass

from transferproof.core.types import Network


@dataclass(frozen=True)
class NetworkInfo:
    """Static description of a Flare network."""

    chain_id: int
    name: str
    rpc_url: str
    explorer_url: str
    da_layer_url: str
    native_symbol: str
    native_decimals: int = 18
    systems_explorer_url: str | None = None


NETWORKS: dict[Network, NetworkInfo] = {
    Network.FLARE: NetworkInfo(
        chain_id=14,
        name="Flare Network",
        rpc_url="https://flare-api.flare.network/ext/C/rpc",
        explorer_url="https://flare-explorer.flare.network",
        da_layer_url="https://flr-data-availability.flare.network/",
        native_symbol="FLR",
    ),
    Network.COSTON2: NetworkInfo(
        chain_id=114,
        name="Coston2 Testnet",
        rpc_url="https://coston2-api.flare.network/ext/C/rpc",
        explorer_url="https://coston2-explorer.flare.network",
        da_layer_url="https://ctn2-data-availability.flare.network/",
        native_symbol="C2FLR",
        systems_explorer_url="https://coston2-systems-explorer.flare.rocks",
    ),
}

# Network the consuming contract is deployed on
DEFAULT_NETWORK = Network.COSTON2


def get_network_info(network: Network | str) -> NetworkInfo:
    """Look up metadata for a network."""
    if isinstance(network, str):
        network = Network.from_string(network)
    return NETWORKS[network]


def get_network_by_chain_id(chain_id: int) -> Network | None:
    """Reverse lookup by chain id."""
    for network, info in NETWORKS.items():
        if info.chain_id == chain_id:
            return network
    return None


def get_round_explorer_url(network: Network, round_id: int) -> str | None:
    """Systems-explorer page for a voting round, where one exists."""
    info = NETWORKS[network]
    if not info.systems_explorer_url:
        return None
    return f"{info.systems_explorer_url}/voting-epoch/{round_id}?tab=fdc"
