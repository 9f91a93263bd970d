"""
Web2Json attestation request encoder.

Builds the verifier-facing request for a Wise transfer lookup and asks the
attestation verifier to ABI-encode it. The encoded request is the only
artifact handed to the submission stage.
"""

from __future__ import annotations

import json

import httpx

from transferproof.core.exceptions import (
    MalformedVerifierResponseError,
    ValidationError,
    VerifierError,
    VerifierRejectedError,
)
from transferproof.core.logging import get_logger
from transferproof.core.types import AttestationRequest, EncodedRequest, RequestBody

logger = get_logger("attestation.request")

ATTESTATION_TYPE_NAME = "Web2Json"
SOURCE_ID_NAME = "PublicWeb2"

TRANSFER_API_URL = "https://api.transferwise.com/v1/transfers/{transfer_id}"
PREPARE_REQUEST_PATH = "Web2Json/prepareRequest"

# Projection of the Wise transfer JSON into the 6-field output tuple
POST_PROCESS_JQ = (
    "{id: .id, targetAccount: .targetAccount, status: .status, "
    "userMessage: .reference, targetValue: (.targetValue * 100 | floor), "
    "targetCurrency: .targetCurrency}"
)

ABI_SIGNATURE = json.dumps(
    {
        "components": [
            {"internalType": "uint256", "name": "id", "type": "uint256"},
            {"internalType": "uint256", "name": "targetAccount", "type": "uint256"},
            {"internalType": "string", "name": "status", "type": "string"},
            {"internalType": "address", "name": "userMessage", "type": "address"},
            {"internalType": "uint256", "name": "targetValue", "type": "uint256"},
            {"internalType": "string", "name": "targetCurrency", "type": "string"},
        ],
        "name": "task",
        "type": "tuple",
    },
    separators=(",", ":"),
)


def to_utf8_hex_string(name: str) -> str:
    """
    Encode a provider name as a 32-byte identifier.

    The UTF-8 bytes sit at the start of the word and the rest is zero-filled,
    e.g. ``Web2Json`` -> ``0x576562324a736f6e0000...``.
    """
    raw = name.encode("utf-8")
    if len(raw) > 32:
        raise ValueError(f"Identifier {name!r} is longer than 32 bytes")
    return "0x" + raw.ljust(32, b"\x00").hex()


def build_transfer_request(transfer_id: str, credential: str) -> AttestationRequest:
    """
    Build the attestation request for one Wise transfer.

    Args:
        transfer_id: Wise transfer id
        credential: Bearer token for the Wise API

    Returns:
        Immutable AttestationRequest
    """
    transfer_id = (transfer_id or "").strip()
    if not transfer_id:
        raise ValidationError("Transfer ID is required")
    if not credential:
        raise ValidationError("Transfer API credential is required")

    headers = json.dumps(
        {"Content-Type": "application/json", "Authorization": f"Bearer {credential}"}
    )
    body = RequestBody(
        url=TRANSFER_API_URL.format(transfer_id=transfer_id),
        http_method="GET",
        headers=headers,
        query_params="{}",
        body="{}",
        post_process_jq=POST_PROCESS_JQ,
        abi_signature=ABI_SIGNATURE,
    )
    return AttestationRequest(
        attestation_type=to_utf8_hex_string(ATTESTATION_TYPE_NAME),
        source_id=to_utf8_hex_string(SOURCE_ID_NAME),
        request_body=body,
    )


class VerifierClient:
    """
    Client for the Web2Json attestation verifier.

    Example:
        >>> verifier = VerifierClient("https://verifier.example/", api_key="...")
        >>> encoded = await verifier.prepare_request("1614003520", wise_token)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize verifier client.

        Args:
            base_url: Verifier base URL
            api_key: Verifier API key, sent as X-API-KEY
            timeout: Request timeout in seconds
            http_client: Shared httpx client
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._http_client = http_client
        self._owns_client = False

    @property
    def prepare_url(self) -> str:
        return f"{self._base_url}/{PREPARE_REQUEST_PATH}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Lazy-init HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        return self._http_client

    async def close(self) -> None:
        """Close owned HTTP client."""
        if self._owns_client and self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def submit(self, request: AttestationRequest) -> EncodedRequest:
        """
        Send a built request to the verifier's prepare endpoint.

        Raises:
            VerifierRejectedError: Non-200 response
            MalformedVerifierResponseError: 200 without abiEncodedRequest
            VerifierError: Transport failure
        """
        url = self.prepare_url
        client = await self._get_client()
        logger.info(f"Preparing attestation request at {url}")
        logger.debug(f"Request URL: {request.request_body.url}")

        try:
            response = await client.post(
                url,
                json=request.to_api_dict(),
                headers={"X-API-KEY": self._api_key, "Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            raise VerifierError(f"Verifier request failed: {e}", url=url) from e

        if response.status_code != 200:
            raise VerifierRejectedError(
                f"Response status is not OK, status {response.status_code} "
                f"{response.reason_phrase}: {response.text}",
                status_code=response.status_code,
                url=url,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedVerifierResponseError(
                "Verifier response is not valid JSON", status_code=200, url=url
            ) from e

        encoded = data.get("abiEncodedRequest") if isinstance(data, dict) else None
        if not encoded:
            raise MalformedVerifierResponseError(
                "Failed to get abiEncodedRequest from verifier",
                status_code=200,
                url=url,
                details={"status": data.get("status") if isinstance(data, dict) else None},
            )

        try:
            result = EncodedRequest.from_hex(encoded)
        except (TypeError, ValueError) as e:
            raise MalformedVerifierResponseError(
                f"abiEncodedRequest is not valid hex: {e}", status_code=200, url=url
            ) from e

        logger.info(f"Attestation request prepared ({len(result)} bytes)")
        return result

    async def prepare_request(self, transfer_id: str, credential: str) -> EncodedRequest:
        """Build the Wise transfer request and have the verifier encode it."""
        request = build_transfer_request(transfer_id, credential)
        return await self.submit(request)


async def build_and_submit_verifier_request(
    transfer_id: str,
    credential: str,
    verifier_url: str,
    verifier_key: str,
    http_client: httpx.AsyncClient | None = None,
) -> EncodedRequest:
    """One-shot helper: build, submit and close."""
    verifier = VerifierClient(verifier_url, verifier_key, http_client=http_client)
    try:
        return await verifier.prepare_request(transfer_id, credential)
    finally:
        await verifier.close()
