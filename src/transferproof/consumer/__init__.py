"""Proof decoding and delivery to the consuming contract."""

from transferproof.consumer.codec import (
    decode_attestation_response,
    decode_transfer_data,
    encode_attestation_response,
    encode_transfer_data,
    merkle_proof_to_bytes,
    scale_amount,
)
from transferproof.consumer.transfer_list import ProofConsumer, TransferListContract

__all__ = [
    "ProofConsumer",
    "TransferListContract",
    "decode_attestation_response",
    "decode_transfer_data",
    "encode_attestation_response",
    "encode_transfer_data",
    "merkle_proof_to_bytes",
    "scale_amount",
]
