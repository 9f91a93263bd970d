"""Attestation request preparation."""

from transferproof.attestation.request import (
    ABI_SIGNATURE,
    ATTESTATION_TYPE_NAME,
    POST_PROCESS_JQ,
    SOURCE_ID_NAME,
    VerifierClient,
    build_and_submit_verifier_request,
    build_transfer_request,
    to_utf8_hex_string,
)

__all__ = [
    "ABI_SIGNATURE",
    "ATTESTATION_TYPE_NAME",
    "POST_PROCESS_JQ",
    "SOURCE_ID_NAME",
    "VerifierClient",
    "build_and_submit_verifier_request",
    "build_transfer_request",
    "to_utf8_hex_string",
]
