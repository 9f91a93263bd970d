"""
Configuration management for transferproof.

Handles loading configuration from environment variables and validation.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any

from transferproof.core.exceptions import ConfigurationError
from transferproof.core.networks import DEFAULT_NETWORK, get_network_info
from transferproof.core.types import Network

# Environment variable names, matching the dApp's .env files
ENV_VERIFIER_URL = "WEB2JSON_VERIFIER_URL_TESTNET"
ENV_VERIFIER_API_KEY = "VERIFIER_API_KEY_TESTNET"
ENV_DA_LAYER_URLS = {
    Network.COSTON2: "COSTON2_DA_LAYER_URL",
    Network.FLARE: "FLARE_DA_LAYER_URL",
}
ENV_TRANSFER_LIST_ADDRESS = "WISE_TRANSFER_LIST_ADDRESS"
ENV_NETWORK = "TRANSFERPROOF_NETWORK"
ENV_RPC_URL = "TRANSFERPROOF_RPC_URL"
ENV_PRIVATE_KEY = "TRANSFERPROOF_PRIVATE_KEY"
ENV_LOG_LEVEL = "TRANSFERPROOF_LOG_LEVEL"
ENV_LOG_JSON = "TRANSFERPROOF_LOG_JSON"


def _get_env_var(name: str, default: str | None = None) -> str | None:
    """Get environment variable with optional default; blank counts as unset."""
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()


@dataclass(frozen=True)
class Config:
    """Attestation lifecycle configuration."""

    verifier_url: str
    verifier_api_key: str
    network: Network = DEFAULT_NETWORK
    da_layer_url: str = ""
    rpc_url: str = ""
    transfer_list_address: str | None = None
    private_key: str | None = None
    log_level: str = "INFO"
    log_json: bool = False

    # Timeouts (seconds)
    request_timeout: float = 30.0
    receipt_timeout: float = 300.0

    # Finalization wait: 18 polls x 10s is roughly three minutes
    finalization_poll_interval: float = 10.0
    finalization_max_attempts: int | None = 18
    finalization_max_wait: float | None = None
    settle_delay: float = 5.0

    # Proof wait: 36 polls x 5s
    proof_poll_interval: float = 5.0
    proof_max_attempts: int = 36

    # Backoff for transient DA layer / RPC errors
    retry_max_attempts: int = 5
    retry_min_wait: float = 1.0
    retry_max_wait: float = 16.0

    # Safety margin added to gas estimates for addTransfer
    gas_buffer: float = 0.2

    def __post_init__(self) -> None:
        missing = []
        if not self.verifier_url:
            missing.append(ENV_VERIFIER_URL)
        if not self.verifier_api_key:
            missing.append(ENV_VERIFIER_API_KEY)
        if missing:
            raise ConfigurationError(
                f"Missing required settings: {', '.join(missing)}", missing=missing
            )
        if self.finalization_max_attempts is not None and self.finalization_max_attempts < 1:
            raise ConfigurationError("finalization_max_attempts must be at least 1")
        if self.proof_max_attempts < 1:
            raise ConfigurationError("proof_max_attempts must be at least 1")
        if self.gas_buffer < 0:
            raise ConfigurationError("gas_buffer must not be negative")

        if not isinstance(self.network, Network):
            try:
                object.__setattr__(self, "network", Network.from_string(self.network))
            except ValueError as e:
                raise ConfigurationError(str(e)) from e

        # Fill network defaults for endpoints that were left blank
        info = get_network_info(self.network)
        if not self.da_layer_url:
            object.__setattr__(self, "da_layer_url", info.da_layer_url)
        if not self.rpc_url:
            object.__setattr__(self, "rpc_url", info.rpc_url)

    @property
    def chain_id(self) -> int:
        """Chain id the deployment expects."""
        return get_network_info(self.network).chain_id

    @classmethod
    def from_env(cls, **overrides: Any) -> Config:
        """
        Load configuration from environment variables.

        Keyword overrides take precedence over the environment. Every missing
        required setting is reported at once.
        """
        verifier_url = overrides.pop("verifier_url", None) or _get_env_var(ENV_VERIFIER_URL)
        verifier_api_key = overrides.pop("verifier_api_key", None) or _get_env_var(
            ENV_VERIFIER_API_KEY
        )

        missing = []
        if not verifier_url:
            missing.append(ENV_VERIFIER_URL)
        if not verifier_api_key:
            missing.append(ENV_VERIFIER_API_KEY)
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}",
                missing=missing,
            )

        network = overrides.pop("network", None) or _get_env_var(ENV_NETWORK)
        if network is None:
            network = DEFAULT_NETWORK
        elif isinstance(network, str):
            try:
                network = Network.from_string(network)
            except ValueError as e:
                raise ConfigurationError(str(e)) from e

        return cls(
            verifier_url=verifier_url,  # type: ignore
            verifier_api_key=verifier_api_key,  # type: ignore
            network=network,
            da_layer_url=overrides.pop("da_layer_url", None)
            or _get_env_var(ENV_DA_LAYER_URLS[network], ""),  # type: ignore
            rpc_url=overrides.pop("rpc_url", None) or _get_env_var(ENV_RPC_URL, ""),  # type: ignore
            transfer_list_address=overrides.pop("transfer_list_address", None)
            or _get_env_var(ENV_TRANSFER_LIST_ADDRESS),
            private_key=overrides.pop("private_key", None) or _get_env_var(ENV_PRIVATE_KEY),
            log_level=overrides.pop("log_level", None) or _get_env_var(ENV_LOG_LEVEL, "INFO"),  # type: ignore
            log_json=overrides.pop("log_json", None)
            or (_get_env_var(ENV_LOG_JSON) or "").lower() in ("1", "true", "yes"),
            **overrides,
        )

    def with_updates(self, **updates: Any) -> Config:
        """Create a new Config with updated values."""
        known = {f.name for f in fields(self)}
        unknown = set(updates) - known
        if unknown:
            raise ConfigurationError(f"Unknown config fields: {sorted(unknown)}")
        if "network" in updates and updates["network"] != self.network:
            # Endpoints filled from the old network must not carry over
            updates.setdefault("rpc_url", "")
            updates.setdefault("da_layer_url", "")
        return replace(self, **updates)

    def require_transfer_list_address(self) -> str:
        """Address of the consuming contract, or ConfigurationError."""
        if not self.transfer_list_address:
            raise ConfigurationError(
                "Contract address not configured. Deploy the WiseTransferList contract "
                f"and set {ENV_TRANSFER_LIST_ADDRESS}.",
                missing=[ENV_TRANSFER_LIST_ADDRESS],
            )
        return self.transfer_list_address

    def masked_api_key(self) -> str:
        """Return verifier API key with most characters masked for safe logging."""
        if len(self.verifier_api_key) <= 8:
            return "****"
        return self.verifier_api_key[:4] + "..." + self.verifier_api_key[-4:]
