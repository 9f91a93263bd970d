"""
Finalization & proof poller.

Waits for the voting round holding an attestation request to be finalized
on-chain, then asks the data-availability layer for the proof.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable

import httpx

from transferproof.core.contracts import FDC_VERIFICATION, FDC_VERIFICATION_ABI, RELAY, RELAY_ABI
from transferproof.core.exceptions import (
    ChainError,
    FinalizationTimeoutError,
    ProofNotReadyError,
    ProofRetrievalError,
)
from transferproof.core.logging import get_logger
from transferproof.core.types import EncodedRequest, Proof
from transferproof.resilience.retry import DEFAULT_RETRY_POLICY, RetryPolicy, execute_with_retry
from transferproof.retrieval.polling import PollDecision, PollPolicy, poll_until

if TYPE_CHECKING:
    from transferproof.chain.registry import AddressResolver
    from transferproof.chain.rpc import ChainClient

PROOF_BY_ROUND_PATH = "api/v1/fdc/proof-by-request-round-raw"

DEFAULT_FINALIZATION_POLICY = PollPolicy(interval=10.0, max_attempts=18)
DEFAULT_PROOF_POLICY = PollPolicy(interval=5.0, max_attempts=36)
DEFAULT_SETTLE_DELAY = 5.0


def finalization_step(is_finalized: bool) -> PollDecision[bool]:
    if is_finalized:
        return PollDecision.done(True)
    return PollDecision.keep_polling("round not finalized yet")


def proof_step(payload: dict[str, Any]) -> PollDecision[Proof]:
    """A DA response without ``response_hex`` means the proof is not ready yet."""
    if payload.get("response_hex"):
        return PollDecision.done(Proof.from_api_response(payload))
    return PollDecision.keep_polling("proof not ready")


class DALayerClient:
    """Client for the FDC data-availability layer."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client
        self._owns_client = False
        self._logger = get_logger("retrieval.da_layer")

    @property
    def proof_url(self) -> str:
        return f"{self._base_url}/{PROOF_BY_ROUND_PATH}"

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

    async def fetch_proof(self, round_id: int, encoded_request: EncodedRequest) -> dict[str, Any]:
        """
        One proof-by-round request.

        Raises:
            ProofRetrievalError: Transport error, non-success status or non-JSON body
        """
        url = self.proof_url
        client = await self._get_client()
        try:
            response = await client.post(
                url,
                json={"votingRoundId": round_id, "requestBytes": encoded_request.hex},
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            raise ProofRetrievalError(f"DA Layer request failed: {e}", url=url) from e

        if not response.is_success:
            raise ProofRetrievalError(
                f"DA Layer request failed: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                url=url,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProofRetrievalError(
                "DA Layer returned a non-JSON body", status_code=response.status_code, url=url
            ) from e
        return data if isinstance(data, dict) else {}


class ProofPoller:
    """
    Stage 3 of the lifecycle: finalization wait, then proof wait.

    Example:
        >>> poller = ProofPoller(chain, registry, DALayerClient(da_url))
        >>> proof = await poller.await_proof(encoded, receipt.round_id)
    """

    def __init__(
        self,
        chain: ChainClient,
        registry: AddressResolver,
        da_client: DALayerClient,
        finalization_policy: PollPolicy = DEFAULT_FINALIZATION_POLICY,
        proof_policy: PollPolicy = DEFAULT_PROOF_POLICY,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._chain = chain
        self._registry = registry
        self._da_client = da_client
        self._finalization_policy = finalization_policy
        self._proof_policy = proof_policy
        self._settle_delay = settle_delay
        self._retry_policy = retry_policy
        self._sleep = sleep
        self._clock = clock
        self._logger = get_logger("retrieval.poller")

    async def _read(self, address: str, abi: list[dict[str, Any]], function: str, *args: Any) -> Any:
        try:
            return await execute_with_retry(
                self._chain.call,
                address,
                abi,
                function,
                *args,
                retry_on=ChainError,
                policy=self._retry_policy,
                sleep=self._sleep,
            )
        except ChainError as e:
            raise ProofRetrievalError(f"Chain read {function} failed: {e}") from e

    async def get_protocol_id(self) -> int:
        verification = await self._registry.resolve(FDC_VERIFICATION)
        return int(await self._read(verification, FDC_VERIFICATION_ABI, "fdcProtocolId"))

    async def wait_for_finalization(
        self,
        round_id: int,
        cancel_event: asyncio.Event | None = None,
    ) -> int:
        """
        Poll ``Relay.isFinalized`` until the round is final.

        Returns:
            Number of polls made

        Raises:
            FinalizationTimeoutError: Policy caps exhausted
        """
        relay = await self._registry.resolve(RELAY)
        protocol_id = await self.get_protocol_id()
        self._logger.info(f"Checking finalization of round {round_id} (protocol {protocol_id})")

        async def fetch() -> bool:
            return bool(await self._read(relay, RELAY_ABI, "isFinalized", protocol_id, round_id))

        def exhausted(attempts: int, elapsed: float) -> Exception:
            return FinalizationTimeoutError(
                f"Round {round_id} not finalized after {attempts} polls ({elapsed:.0f}s)",
                round_id=round_id,
                attempts=attempts,
            )

        outcome = await poll_until(
            fetch,
            finalization_step,
            self._finalization_policy,
            exhausted,
            sleep=self._sleep,
            clock=self._clock,
            cancel_event=cancel_event,
            label=f"Round {round_id} finalization",
        )
        self._logger.info(f"Round {round_id} finalized")
        return outcome.attempts

    async def wait_for_proof(
        self,
        encoded_request: EncodedRequest,
        round_id: int,
        cancel_event: asyncio.Event | None = None,
    ) -> Proof:
        """
        Poll the DA layer until it serves a proof for the request.

        Raises:
            ProofNotReadyError: DA layer kept answering without a proof
            ProofRetrievalError: DA layer unreachable after backoff retries
        """

        async def fetch() -> dict[str, Any]:
            return await execute_with_retry(
                self._da_client.fetch_proof,
                round_id,
                encoded_request,
                retry_on=ProofRetrievalError,
                policy=self._retry_policy,
                sleep=self._sleep,
            )

        def exhausted(attempts: int, elapsed: float) -> Exception:
            return ProofNotReadyError(
                f"Proof not generated for round {round_id} after {attempts} polls ({elapsed:.0f}s)",
                round_id=round_id,
                attempts=attempts,
            )

        self._logger.info("Requesting proof from DA Layer...")
        outcome = await poll_until(
            fetch,
            proof_step,
            self._proof_policy,
            exhausted,
            sleep=self._sleep,
            clock=self._clock,
            cancel_event=cancel_event,
            label=f"Round {round_id} proof",
        )
        self._logger.info(f"Proof retrieved after {outcome.attempts} polls")
        return outcome.value

    async def await_proof(
        self,
        encoded_request: EncodedRequest,
        round_id: int,
        cancel_event: asyncio.Event | None = None,
    ) -> Proof:
        """Finalization wait, settling delay, then proof wait."""
        await self.wait_for_finalization(round_id, cancel_event)
        if self._settle_delay > 0:
            await self._sleep(self._settle_delay)
        return await self.wait_for_proof(encoded_request, round_id, cancel_event)
