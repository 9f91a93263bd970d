"""Tests for the Web2Json request encoder and verifier client."""

import json

import httpx
import pytest

from transferproof.attestation.request import (
    ABI_SIGNATURE,
    POST_PROCESS_JQ,
    VerifierClient,
    build_and_submit_verifier_request,
    build_transfer_request,
    to_utf8_hex_string,
)
from transferproof.core.exceptions import (
    MalformedVerifierResponseError,
    ValidationError,
    VerifierError,
    VerifierRejectedError,
)

from conftest import ENCODED_REQUEST_HEX, TRANSFER_ID, verifier_handler


def make_verifier(handler) -> VerifierClient:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return VerifierClient("https://verifier.test/", "verifier-key-1234", http_client=client)


class TestIdentifiers:
    """Tests for 32-byte provider identifiers."""

    def test_web2json(self) -> None:
        value = to_utf8_hex_string("Web2Json")

        assert value == "0x576562324a736f6e" + "00" * 24
        assert len(value) == 2 + 64

    def test_public_web2(self) -> None:
        assert to_utf8_hex_string("PublicWeb2").startswith("0x5075626c696357656232")

    def test_too_long_rejected(self) -> None:
        with pytest.raises(ValueError, match="longer than 32 bytes"):
            to_utf8_hex_string("x" * 33)


class TestBuildTransferRequest:
    """Tests for the Wise transfer request shape."""

    def test_request_fields(self) -> None:
        request = build_transfer_request(TRANSFER_ID, "wise-token")
        body = request.request_body

        assert body.url == "https://api.transferwise.com/v1/transfers/1614003520"
        assert body.http_method == "GET"
        assert json.loads(body.headers)["Authorization"] == "Bearer wise-token"
        assert body.query_params == "{}"
        assert body.body == "{}"
        assert body.post_process_jq == POST_PROCESS_JQ
        assert body.abi_signature == ABI_SIGNATURE

    def test_abi_signature_components(self) -> None:
        """Test the declared output tuple matches the six transfer fields."""
        signature = json.loads(ABI_SIGNATURE)
        types = [c["type"] for c in signature["components"]]

        assert types == ["uint256", "uint256", "string", "address", "uint256", "string"]

    def test_jq_scales_value(self) -> None:
        assert "(.targetValue * 100 | floor)" in POST_PROCESS_JQ
        assert "userMessage: .reference" in POST_PROCESS_JQ

    def test_transfer_id_is_trimmed(self) -> None:
        request = build_transfer_request("  42 ", "token")
        assert request.request_body.url.endswith("/transfers/42")

    def test_empty_transfer_id(self) -> None:
        with pytest.raises(ValidationError, match="Transfer ID is required"):
            build_transfer_request("  ", "token")

    def test_empty_credential(self) -> None:
        with pytest.raises(ValidationError):
            build_transfer_request(TRANSFER_ID, "")

    def test_api_dict(self) -> None:
        data = build_transfer_request(TRANSFER_ID, "token").to_api_dict()

        assert set(data) == {"attestationType", "sourceId", "requestBody"}
        assert data["requestBody"]["httpMethod"] == "GET"


class TestVerifierClient:
    """Tests for prepare_request against a mocked verifier."""

    @pytest.mark.asyncio
    async def test_prepare_request_success(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return verifier_handler(request)

        verifier = make_verifier(handler)
        encoded = await verifier.prepare_request(TRANSFER_ID, "wise-token")

        assert encoded.hex == ENCODED_REQUEST_HEX
        assert str(seen[0].url) == "https://verifier.test/Web2Json/prepareRequest"
        assert seen[0].method == "POST"

    @pytest.mark.asyncio
    async def test_non_200_is_rejected(self) -> None:
        verifier = make_verifier(lambda request: httpx.Response(401, text="bad key"))

        with pytest.raises(VerifierRejectedError) as exc_info:
            await verifier.prepare_request(TRANSFER_ID, "wise-token")

        assert exc_info.value.status_code == 401
        assert "bad key" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_missing_encoded_request(self) -> None:
        verifier = make_verifier(
            lambda request: httpx.Response(200, json={"status": "INVALID"})
        )

        with pytest.raises(MalformedVerifierResponseError, match="abiEncodedRequest"):
            await verifier.prepare_request(TRANSFER_ID, "wise-token")

    @pytest.mark.asyncio
    async def test_non_json_body(self) -> None:
        verifier = make_verifier(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(MalformedVerifierResponseError):
            await verifier.prepare_request(TRANSFER_ID, "wise-token")

    @pytest.mark.asyncio
    async def test_invalid_hex(self) -> None:
        verifier = make_verifier(
            lambda request: httpx.Response(200, json={"abiEncodedRequest": "0xzz"})
        )

        with pytest.raises(MalformedVerifierResponseError, match="not valid hex"):
            await verifier.prepare_request(TRANSFER_ID, "wise-token")

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        verifier = make_verifier(handler)

        with pytest.raises(VerifierError, match="Verifier request failed"):
            await verifier.prepare_request(TRANSFER_ID, "wise-token")

    @pytest.mark.asyncio
    async def test_one_shot_helper(self) -> None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(verifier_handler))

        encoded = await build_and_submit_verifier_request(
            TRANSFER_ID, "wise-token", "https://verifier.test", "verifier-key-1234", http_client=client
        )

        assert encoded.hex == ENCODED_REQUEST_HEX
