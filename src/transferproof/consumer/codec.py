"""
ABI codec for Web2Json proof payloads.

The DA layer serves ``response_hex`` as an ABI-encoded ``IWeb2Json.Response``;
its ``abiEncodedData`` holds the projected transfer fields, encoded with the
same signature the request declared.
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal, InvalidOperation
from typing import Any

from eth_abi import decode, encode
from web3 import AsyncWeb3

from transferproof.core.contracts import ATTESTATION_RESPONSE_TYPE, TRANSFER_DATA_TYPE
from transferproof.core.exceptions import DecodeError
from transferproof.core.types import AttestationResponse, DecodedResponse, RequestBody


def _hex_to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, bytes):
        return value
    cleaned = value[2:] if value.startswith(("0x", "0X")) else value
    try:
        return bytes.fromhex(cleaned)
    except ValueError as e:
        raise DecodeError(f"Not a hex string: {value[:20]}...") from e


def scale_amount(value: Any) -> int:
    """
    Minor units the way the jq projection computes them: ``floor(value * 100)``.

    Decimal arithmetic, so 10.01 scales to 1001 and not 1000.
    """
    try:
        scaled = Decimal(str(value)) * 100
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {value!r}") from e
    return int(scaled.to_integral_value(rounding=ROUND_FLOOR))


def encode_transfer_data(decoded: DecodedResponse) -> bytes:
    return encode([TRANSFER_DATA_TYPE], [decoded.to_tuple()])


def decode_transfer_data(data: str | bytes) -> DecodedResponse:
    """
    Decode ``abiEncodedData`` into transfer fields.

    Raises:
        DecodeError: Data does not match the transfer tuple
    """
    raw = _hex_to_bytes(data)
    try:
        (fields,) = decode([TRANSFER_DATA_TYPE], raw)
    except Exception as e:
        raise DecodeError(f"Failed to decode transfer data: {e}") from e

    return DecodedResponse(
        id=int(fields[0]),
        target_account=int(fields[1]),
        status=str(fields[2]),
        user_message=AsyncWeb3.to_checksum_address(fields[3]),
        target_value=int(fields[4]),
        target_currency=str(fields[5]),
    )


def encode_attestation_response(response: AttestationResponse) -> str:
    """Hex encoding of a response envelope, as the DA layer serves it."""
    encoded = encode(
        [ATTESTATION_RESPONSE_TYPE],
        [
            (
                response.attestation_type,
                response.source_id,
                response.voting_round,
                response.lowest_used_timestamp,
                response.request_body.to_tuple(),
                (response.abi_encoded_data,),
            )
        ],
    )
    return "0x" + encoded.hex()


def decode_attestation_response(response_hex: str | bytes) -> AttestationResponse:
    """
    Decode ``response_hex`` into the response envelope.

    Raises:
        DecodeError: Payload does not match ``IWeb2Json.Response``
    """
    raw = _hex_to_bytes(response_hex)
    if not raw:
        raise DecodeError("Empty response_hex")
    try:
        (envelope,) = decode([ATTESTATION_RESPONSE_TYPE], raw)
    except Exception as e:
        raise DecodeError(f"Failed to decode attestation response: {e}") from e

    attestation_type, source_id, voting_round, lowest_used_timestamp, body, response_body = envelope
    return AttestationResponse(
        attestation_type=attestation_type,
        source_id=source_id,
        voting_round=int(voting_round),
        lowest_used_timestamp=int(lowest_used_timestamp),
        request_body=RequestBody(*body),
        abi_encoded_data=response_body[0],
    )


def merkle_proof_to_bytes(proof: list[str]) -> list[bytes]:
    """``bytes32[]`` argument for the contract call."""
    nodes = []
    for node in proof:
        raw = _hex_to_bytes(node)
        if len(raw) != 32:
            raise DecodeError(f"Merkle proof node is {len(raw)} bytes, expected 32")
        nodes.append(raw)
    return nodes
