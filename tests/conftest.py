"""Shared fixtures: an in-memory ledger, a fake clock and proof payloads."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable

import httpx
import pytest

from transferproof.chain.identity import SigningIdentity
from transferproof.chain.registry import StaticRegistry
from transferproof.chain.rpc import TransactionOutcome
from transferproof.consumer.codec import (
    decode_transfer_data,
    encode_attestation_response,
    encode_transfer_data,
)
from transferproof.core.exceptions import ChainError, NetworkMismatchError
from transferproof.core.types import AttestationResponse, DecodedResponse, Proof, RequestBody

TRANSFER_ID = "1614003520"
SIGNER_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"
USER_MESSAGE_ADDRESS = "0x5B38Da6a701c568545dCfcB03FcB875f56beddC4"
TRANSFER_LIST_ADDRESS = "0x1111111111111111111111111111111111111111"

CONTRACT_ADDRESSES = {
    "FdcHub": "0x48aC463d7975828989331F4De43341627b9c5f1D",
    "FdcRequestFeeConfigurations": "0x191a1282Ac700edE65c5B0AaF313BAcC3eA7fC7e",
    "FlareSystemsManager": "0xA90Db6D10F856799b10ef2A77EBCbF460aC71e52",
    "FdcVerification": "0x075bf301fF07C4920e5261f93a0609640F53487D",
    "Relay": "0x97702e350CaEda540935d92aAf213307e9069784",
}

FIRST_ROUND_START_TS = 1_658_430_000
EPOCH_DURATION = 90
REQUEST_FEE = 1_000_000_000_000_000  # 0.001 native
PROTOCOL_ID = 200
ENCODED_REQUEST_HEX = "0x" + "57" * 32 + "ab" * 64


@dataclass
class SentTransaction:
    address: str
    function: str
    args: tuple[Any, ...]
    value: int
    gas: int | None
    sender: str


@dataclass
class FakeLedger:
    """
    In-memory chain with the ChainClient surface.

    View calls are answered by ``handlers`` (function name → callable). Writes
    are recorded in ``sent`` and applied through ``write_handlers``.
    """

    chain_id: int = 114
    block_number: int = 1_000
    now: int = FIRST_ROUND_START_TS + 1_000 * EPOCH_DURATION + 30
    balances: dict[str, int] = field(default_factory=dict)
    block_timestamps: dict[int, int] = field(default_factory=dict)
    transfers: dict[int, tuple[Any, ...]] = field(default_factory=dict)
    finalize_on_poll: int = 1
    gas_estimate: int = 250_000
    sent: list[SentTransaction] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)
    handlers: dict[str, Callable[..., Any]] = field(default_factory=dict)
    write_handlers: dict[str, Callable[..., Any]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.handlers.update(
            {
                "getContractAddressByName": lambda name: CONTRACT_ADDRESSES.get(
                    name, "0x0000000000000000000000000000000000000000"
                ),
                "getRequestFee": lambda data: REQUEST_FEE,
                "firstVotingRoundStartTs": lambda: FIRST_ROUND_START_TS,
                "votingEpochDurationSeconds": lambda: EPOCH_DURATION,
                "getCurrentVotingEpochId": lambda: (self.now - FIRST_ROUND_START_TS) // EPOCH_DURATION,
                "fdcProtocolId": lambda: PROTOCOL_ID,
                "isFinalized": self._is_finalized,
                "transfers": self._get_transfer,
                "getAllTransfers": lambda: list(self.transfers.values()),
            }
        )
        self.write_handlers.update(
            {
                "requestAttestation": lambda data: None,
                "addTransfer": self._add_transfer,
            }
        )

    def count(self, function: str) -> int:
        return self.calls.count(function)

    def _is_finalized(self, protocol_id: int, round_id: int) -> bool:
        return self.count("isFinalized") >= self.finalize_on_poll

    def _get_transfer(self, transfer_id: int) -> tuple[Any, ...]:
        return self.transfers.get(
            transfer_id, (0, 0, False, "0x0000000000000000000000000000000000000000", 0, "")
        )

    def _add_transfer(self, proof: tuple[Any, ...]) -> None:
        decoded = decode_transfer_data(proof[1][5][0])
        if decoded.id in self.transfers:
            raise ChainError("execution reverted: transfer already exists")
        self.transfers[decoded.id] = (
            decoded.id,
            decoded.target_account,
            decoded.status == "outgoing_payment_sent",
            decoded.user_message,
            decoded.target_value,
            decoded.target_currency,
        )

    # ─── ChainClient surface ───

    async def get_chain_id(self) -> int:
        return self.chain_id

    async def ensure_chain_id(self, expected: int) -> None:
        if self.chain_id != expected:
            raise NetworkMismatchError(
                f"Connected to chain {self.chain_id}, expected chain {expected}.",
                expected_chain_id=expected,
                actual_chain_id=self.chain_id,
            )

    async def call(self, address: str, abi: list, function: str, *args: Any) -> Any:
        self.calls.append(function)
        result = self.handlers[function](*args)
        if isinstance(result, Exception):
            raise result
        return result

    async def get_balance(self, address: str) -> int:
        return self.balances.get(address, 0)

    async def get_block_timestamp(self, block_number: int) -> int:
        if block_number not in self.block_timestamps:
            raise ChainError(f"Could not get block information for block {block_number}")
        return self.block_timestamps[block_number]

    async def estimate_gas(self, identity, address, abi, function, args=(), value=0) -> int:
        return self.gas_estimate

    async def transact(self, identity, address, abi, function, args=(), value=0, gas=None):
        self.write_handlers[function](*args)
        self.sent.append(
            SentTransaction(
                address=address,
                function=function,
                args=tuple(args),
                value=value,
                gas=gas,
                sender=identity.address,
            )
        )
        self.balances[identity.address] = self.balances.get(identity.address, 0) - value
        self.block_number += 1
        self.block_timestamps[self.block_number] = self.now
        return TransactionOutcome(
            transaction_hash="0x" + f"{len(self.sent):064x}",
            block_number=self.block_number,
            gas_used=21_000,
        )

    async def close(self) -> None:
        pass


class FakeClock:
    """Monotonic clock that only moves when slept on."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def make_decoded(transfer_id: int = int(TRANSFER_ID)) -> DecodedResponse:
    return DecodedResponse(
        id=transfer_id,
        target_account=701_234_567,
        status="outgoing_payment_sent",
        user_message=USER_MESSAGE_ADDRESS,
        target_value=1001,
        target_currency="EUR",
    )


def make_proof(decoded: DecodedResponse | None = None, voting_round: int = 1_000) -> Proof:
    decoded = decoded or make_decoded()
    response = AttestationResponse(
        attestation_type=b"Web2Json".ljust(32, b"\x00"),
        source_id=b"PublicWeb2".ljust(32, b"\x00"),
        voting_round=voting_round,
        lowest_used_timestamp=FIRST_ROUND_START_TS,
        request_body=RequestBody(
            url=f"https://api.transferwise.com/v1/transfers/{decoded.id}",
            http_method="GET",
            headers="{}",
            query_params="{}",
            body="{}",
            post_process_jq=".",
            abi_signature="{}",
        ),
        abi_encoded_data=encode_transfer_data(decoded),
    )
    return Proof(
        response_hex=encode_attestation_response(response),
        attestation_type="0x" + response.attestation_type.hex(),
        merkle_proof=["0x" + "11" * 32, "0x" + "22" * 32],
    )


def proof_payload(proof: Proof) -> dict[str, Any]:
    """DA layer JSON for a proof."""
    return {
        "response_hex": proof.response_hex,
        "attestation_type": proof.attestation_type,
        "proof": proof.merkle_proof,
    }


def verifier_handler(request: httpx.Request) -> httpx.Response:
    body = json.loads(request.content)
    assert request.headers["X-API-KEY"] == "verifier-key-1234"
    assert body["attestationType"].startswith("0x576562324a736f6e")
    return httpx.Response(200, json={"status": "VALID", "abiEncodedRequest": ENCODED_REQUEST_HEX})


@pytest.fixture
def ledger() -> FakeLedger:
    fake = FakeLedger()
    fake.balances[SIGNER_ADDRESS] = 10 * 10**18
    return fake


@pytest.fixture
def registry() -> StaticRegistry:
    return StaticRegistry(CONTRACT_ADDRESSES)


@pytest.fixture
def identity() -> SigningIdentity:
    return SigningIdentity(address=SIGNER_ADDRESS)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def proof() -> Proof:
    return make_proof()
