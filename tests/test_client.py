"""
Unit tests for the TransferProof client.

Runs the whole lifecycle for transfer 1614003520 against the fake ledger and
mocked verifier / DA layer endpoints.
"""

import logging
import os
from unittest.mock import patch

import httpx
import pytest

from transferproof import TransferProof
from transferproof.core.config import Config
from transferproof.core.exceptions import ConfigurationError, DuplicateTransferError
from transferproof.core.logging import LOGGER_NAME, JsonFormatter
from transferproof.core.types import LifecycleState, Network

from conftest import (
    CONTRACT_ADDRESSES,
    SIGNER_ADDRESS,
    TRANSFER_ID,
    TRANSFER_LIST_ADDRESS,
    proof_payload,
    verifier_handler,
)

TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


@pytest.fixture
def config() -> Config:
    return Config(
        verifier_url="https://verifier.test",
        verifier_api_key="verifier-key-1234",
        da_layer_url="https://da.test",
        transfer_list_address=TRANSFER_LIST_ADDRESS,
        private_key=TEST_PRIVATE_KEY,
        log_level="WARNING",
    )


@pytest.fixture
def http_client(proof) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "verifier.test":
            return verifier_handler(request)
        return httpx.Response(200, json=proof_payload(proof))

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def client(config, http_client, ledger, registry, fake_clock) -> TransferProof:
    return TransferProof(
        config,
        http_client=http_client,
        chain=ledger,
        registry=registry,
        sleep=fake_clock.sleep,
        clock=fake_clock,
    )


class TestClientInitialization:
    """Tests for client initialization."""

    def test_init_with_config(self, client, config) -> None:
        assert client.config is config
        assert client.config.network == Network.COSTON2

    def test_init_from_env(self, ledger, registry) -> None:
        env_vars = {
            "WEB2JSON_VERIFIER_URL_TESTNET": "https://verifier.env",
            "VERIFIER_API_KEY_TESTNET": "env-key-abcdefgh",
        }

        with patch.dict(os.environ, env_vars, clear=True):
            tp = TransferProof(chain=ledger, registry=registry)

        assert tp.config.verifier_url == "https://verifier.env"

    def test_init_overrides(self, config, ledger, registry) -> None:
        tp = TransferProof(config, chain=ledger, registry=registry, proof_max_attempts=3)
        assert tp.config.proof_max_attempts == 3

    def test_missing_env_fails_fast(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError):
                TransferProof()

    def test_identity_from_private_key(self, client) -> None:
        identity = client.identity

        assert identity.address == SIGNER_ADDRESS
        assert identity.account is not None
        assert client.identity is identity

    def test_identity_requires_key(self, config, ledger, registry) -> None:
        tp = TransferProof(config.with_updates(private_key=None), chain=ledger, registry=registry)

        with pytest.raises(ConfigurationError, match="TRANSFERPROOF_PRIVATE_KEY"):
            _ = tp.identity

    def test_json_logging_from_config(self, config, ledger, registry) -> None:
        TransferProof(config.with_updates(log_json=True), chain=ledger, registry=registry)

        handler = logging.getLogger(LOGGER_NAME).handlers[0]
        assert isinstance(handler.formatter, JsonFormatter)

    def test_lifecycle_is_fresh(self, client) -> None:
        first = client.lifecycle()
        second = client.lifecycle()

        assert first is not second
        assert first.state == LifecycleState.PREPARING


class TestVerifyTransfer:
    """End-to-end runs through all four stages."""

    @pytest.mark.asyncio
    async def test_verify_transfer(self, client, ledger, identity) -> None:
        result = await client.verify_transfer(TRANSFER_ID, "wise-token", identity=identity)

        assert result.decoded.id == int(TRANSFER_ID)
        assert result.transfer_ids == [int(TRANSFER_ID)]
        assert [tx.function for tx in ledger.sent] == ["requestAttestation", "addTransfer"]
        assert ledger.sent[0].address == CONTRACT_ADDRESSES["FdcHub"]
        assert ledger.sent[1].address == TRANSFER_LIST_ADDRESS

        transfers = await client.get_transfers()
        assert [t.id for t in transfers] == [int(TRANSFER_ID)]
        record = await client.get_transfer(int(TRANSFER_ID))
        assert record.target_value == 1001
        assert await client.get_transfer(1) is None

    @pytest.mark.asyncio
    async def test_second_run_is_duplicate(self, client, ledger, identity) -> None:
        await client.verify_transfer(TRANSFER_ID, "wise-token", identity=identity)

        with pytest.raises(DuplicateTransferError) as exc_info:
            await client.verify_transfer(TRANSFER_ID, "wise-token", identity=identity)

        assert exc_info.value.stage == "interacting"
        assert [tx.function for tx in ledger.sent] == [
            "requestAttestation",
            "addTransfer",
            "requestAttestation",
        ]

    @pytest.mark.asyncio
    async def test_requires_contract_address(self, config, http_client, ledger, registry, identity) -> None:
        tp = TransferProof(
            config.with_updates(transfer_list_address=None),
            http_client=http_client,
            chain=ledger,
            registry=registry,
        )

        with pytest.raises(ConfigurationError, match="WISE_TRANSFER_LIST_ADDRESS"):
            await tp.verify_transfer(TRANSFER_ID, "wise-token", identity=identity)

        assert ledger.sent == []


class TestClose:
    """Tests for resource cleanup."""

    @pytest.mark.asyncio
    async def test_context_manager_keeps_injected_clients(self, config, http_client, ledger, registry) -> None:
        async with TransferProof(config, http_client=http_client, chain=ledger, registry=registry) as tp:
            assert tp.chain is ledger

        assert not http_client.is_closed

    @pytest.mark.asyncio
    async def test_close_owned_http_client(self, config, ledger, registry) -> None:
        tp = TransferProof(config, chain=ledger, registry=registry)
        owned = tp._http_client

        await tp.close()

        assert owned.is_closed
