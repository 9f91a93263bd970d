"""
Type definitions for transferproof.

This module contains the enums and data classes passed between the four
attestation stages.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Network(str, Enum):
    """Flare networks with a Data Connector deployment."""

    FLARE = "flare"
    COSTON2 = "coston2"

    @classmethod
    def from_string(cls, value: str) -> "Network":
        value_lower = value.lower().strip()
        for member in cls:
            if member.value == value_lower:
                return member
        raise ValueError(f"Unknown network: {value}. Supported: {[n.value for n in cls]}")


class LifecycleState(str, Enum):
    """State of one attestation lifecycle run."""

    PREPARING = "preparing"  # Waiting for the verifier to encode the request
    SUBMITTING = "submitting"  # Encoded request held, not yet on-chain
    RETRIEVING = "retrieving"  # Submitted, waiting for finalization and proof
    INTERACTING = "interacting"  # Proof held, not yet applied to the contract
    COMPLETE = "complete"  # Proof applied

    def next(self) -> "LifecycleState":
        order = list(LifecycleState)
        index = order.index(self)
        if index == len(order) - 1:
            raise ValueError("COMPLETE has no successor")
        return order[index + 1]


@dataclass(frozen=True)
class RequestBody:
    """Web2Json request body: what the verifier fetches and how it projects it."""

    url: str
    http_method: str
    headers: str
    query_params: str
    body: str
    post_process_jq: str
    abi_signature: str

    def to_api_dict(self) -> dict[str, str]:
        """Convert to verifier API format."""
        return {
            "url": self.url,
            "httpMethod": self.http_method,
            "headers": self.headers,
            "queryParams": self.query_params,
            "body": self.body,
            "postProcessJq": self.post_process_jq,
            "abiSignature": self.abi_signature,
        }

    def to_tuple(self) -> tuple[str, ...]:
        """Field order of ``IWeb2Json.RequestBody``."""
        return (
            self.url,
            self.http_method,
            self.headers,
            self.query_params,
            self.body,
            self.post_process_jq,
            self.abi_signature,
        )


@dataclass(frozen=True)
class AttestationRequest:
    """Verifier-facing attestation request. Immutable once built."""

    attestation_type: str
    source_id: str
    request_body: RequestBody

    def to_api_dict(self) -> dict[str, Any]:
        return {
            "attestationType": self.attestation_type,
            "sourceId": self.source_id,
            "requestBody": self.request_body.to_api_dict(),
        }


@dataclass(frozen=True)
class EncodedRequest:
    """
    Opaque ABI-encoded request returned by the verifier.

    Carried from the prepare stage into submission and proof retrieval; the
    client never looks inside it.
    """

    raw: bytes

    def __post_init__(self) -> None:
        if not self.raw:
            raise ValueError("Encoded request must not be empty")

    @classmethod
    def from_hex(cls, value: str) -> "EncodedRequest":
        cleaned = value[2:] if value.startswith(("0x", "0X")) else value
        return cls(raw=bytes.fromhex(cleaned))

    @property
    def hex(self) -> str:
        return "0x" + self.raw.hex()

    def startswith(self, prefix: bytes) -> bool:
        return self.raw.startswith(prefix)

    def __len__(self) -> int:
        return len(self.raw)


@dataclass(frozen=True)
class SubmissionReceipt:
    """Result of an included attestation request transaction."""

    transaction_hash: str
    block_number: int
    round_id: int
    fee_paid: int  # wei


@dataclass
class Proof:
    """Proof payload served by the data-availability layer."""

    response_hex: str
    attestation_type: str | None = None
    merkle_proof: list[str] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Proof":
        return cls(
            response_hex=data["response_hex"],
            attestation_type=data.get("attestation_type"),
            merkle_proof=list(data.get("proof") or []),
        )


@dataclass
class DecodedResponse:
    """Transfer fields projected out of the provider response."""

    id: int
    target_account: int
    status: str
    user_message: str  # address-shaped message reference
    target_value: int  # minor units (value * 100, floored)
    target_currency: str

    def to_tuple(self) -> tuple[int, int, str, str, int, str]:
        return (
            self.id,
            self.target_account,
            self.status,
            self.user_message,
            self.target_value,
            self.target_currency,
        )


@dataclass
class AttestationResponse:
    """Decoded ``IWeb2Json.Response`` envelope carried in ``response_hex``."""

    attestation_type: bytes
    source_id: bytes
    voting_round: int
    lowest_used_timestamp: int
    request_body: RequestBody
    abi_encoded_data: bytes

    def to_contract_tuple(self) -> tuple[Any, ...]:
        """Shape of the ``data`` member of ``IWeb2Json.Proof``."""
        return (
            self.attestation_type,
            self.source_id,
            self.voting_round,
            self.lowest_used_timestamp,
            self.request_body.to_tuple(),
            (self.abi_encoded_data,),
        )


@dataclass
class TransferRecord:
    """A transfer as stored by the consuming contract."""

    id: int
    target_account: int
    status: bool
    user_message: str
    target_value: int
    target_currency: str

    @classmethod
    def from_contract_tuple(cls, data: tuple[Any, ...] | list[Any]) -> "TransferRecord":
        return cls(
            id=int(data[0]),
            target_account=int(data[1]),
            status=bool(data[2]),
            user_message=str(data[3]),
            target_value=int(data[4]),
            target_currency=str(data[5]),
        )


@dataclass
class ContractResult:
    """Outcome of applying a proof to the consuming contract."""

    transaction_hash: str
    block_number: int
    decoded: DecodedResponse
    transfers: list[TransferRecord] = field(default_factory=list)

    @property
    def transfer_ids(self) -> list[int]:
        return [t.id for t in self.transfers]


@dataclass
class StageFailure:
    """Last stage failure recorded by the lifecycle controller."""

    stage: LifecycleState
    message: str
    error: Exception
