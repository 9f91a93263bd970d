"""Tests for contract address resolution."""

import pytest

from transferproof.chain.registry import ContractRegistry, StaticRegistry
from transferproof.core.contracts import CONTRACT_REGISTRY_ADDRESS, ZERO_ADDRESS
from transferproof.core.exceptions import ChainError, ContractNotFoundError, RegistryLookupError

from conftest import CONTRACT_ADDRESSES


class TestContractRegistry:
    """Tests for on-chain registry lookups."""

    def test_default_address(self, ledger) -> None:
        assert ContractRegistry(ledger).address == "0xaD67FE66660Fb8dFE9d6b1b4240d8650e30F6019"
        assert CONTRACT_REGISTRY_ADDRESS == ContractRegistry(ledger).address

    @pytest.mark.asyncio
    async def test_resolve(self, ledger) -> None:
        registry = ContractRegistry(ledger)

        assert await registry.resolve("FdcHub") == CONTRACT_ADDRESSES["FdcHub"]
        assert ledger.count("getContractAddressByName") == 1

    @pytest.mark.asyncio
    async def test_zero_address_is_not_found(self, ledger) -> None:
        registry = ContractRegistry(ledger)

        with pytest.raises(ContractNotFoundError, match="Unknown contract not found in registry") as exc_info:
            await registry.resolve("Unknown")

        assert exc_info.value.contract_name == "Unknown"

    @pytest.mark.asyncio
    async def test_call_failure_wrapped(self, ledger) -> None:
        ledger.handlers["getContractAddressByName"] = lambda name: ChainError("timeout")
        registry = ContractRegistry(ledger)

        with pytest.raises(RegistryLookupError, match="Failed to get contract address for Relay"):
            await registry.resolve("Relay")


class TestStaticRegistry:
    """Tests for pinned address tables."""

    @pytest.mark.asyncio
    async def test_resolve(self) -> None:
        registry = StaticRegistry({"Relay": "0x97702e350CaEda540935d92aAf213307e9069784"})
        assert await registry.resolve("Relay") == "0x97702e350CaEda540935d92aAf213307e9069784"

    @pytest.mark.asyncio
    async def test_missing_and_zero(self) -> None:
        registry = StaticRegistry({"FdcHub": ZERO_ADDRESS})

        with pytest.raises(ContractNotFoundError):
            await registry.resolve("FdcHub")
        with pytest.raises(ContractNotFoundError):
            await registry.resolve("Relay")
