"""
Contract address resolution through the FlareContractRegistry.

Components never hardcode FDC contract addresses; they ask an
AddressResolver by name at runtime.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from transferproof.core.contracts import (
    CONTRACT_REGISTRY_ABI,
    CONTRACT_REGISTRY_ADDRESS,
    ZERO_ADDRESS,
)
from transferproof.core.exceptions import (
    ChainError,
    ContractNotFoundError,
    RegistryLookupError,
)
from transferproof.core.logging import get_logger

if TYPE_CHECKING:
    from transferproof.chain.rpc import ChainClient

logger = get_logger("chain.registry")


class AddressResolver(Protocol):
    """Anything that maps a contract name to an address."""

    async def resolve(self, name: str) -> str: ...


def _is_zero_address(address: str | None) -> bool:
    if not address:
        return True
    try:
        return int(address, 16) == 0
    except ValueError:
        return address.lower() == ZERO_ADDRESS


class ContractRegistry:
    """Resolves FDC contract names with ``getContractAddressByName``."""

    def __init__(self, chain: ChainClient, address: str = CONTRACT_REGISTRY_ADDRESS) -> None:
        self._chain = chain
        self._address = address

    @property
    def address(self) -> str:
        return self._address

    async def resolve(self, name: str) -> str:
        """
        Resolve a contract name.

        Raises:
            ContractNotFoundError: Registry returned the zero address
            RegistryLookupError: Registry call failed
        """
        try:
            address = await self._chain.call(
                self._address, CONTRACT_REGISTRY_ABI, "getContractAddressByName", name
            )
        except ChainError as e:
            raise RegistryLookupError(
                f"Failed to get contract address for {name}: {e}", contract_name=name
            ) from e

        if _is_zero_address(address):
            raise ContractNotFoundError(
                f"{name} contract not found in registry", contract_name=name
            )

        logger.debug(f"{name} address: {address}")
        return address


class StaticRegistry:
    """Fixed name → address table, for pinned deployments."""

    def __init__(self, addresses: dict[str, str]) -> None:
        self._addresses = dict(addresses)

    async def resolve(self, name: str) -> str:
        address = self._addresses.get(name)
        if _is_zero_address(address):
            raise ContractNotFoundError(
                f"{name} contract not found in registry", contract_name=name
            )
        return address  # type: ignore[return-value]
