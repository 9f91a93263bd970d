"""
Attestation lifecycle controller.

Drives one transfer through the four stages in order:

    PREPARING → SUBMITTING → RETRIEVING → INTERACTING → COMPLETE

Each stage consumes the artifact of the previous one. A failed stage leaves
the lifecycle where it was, so the caller can retry that stage or ``reset()``.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Awaitable, Callable, Protocol, TypeVar

from transferproof.core.exceptions import (
    ConfigurationError,
    InvalidLifecycleStateError,
    TransferProofError,
)
from transferproof.core.logging import get_logger, get_stage_logger
from transferproof.core.types import (
    ContractResult,
    EncodedRequest,
    LifecycleState,
    Proof,
    StageFailure,
    SubmissionReceipt,
)

if TYPE_CHECKING:
    from transferproof.chain.identity import SigningIdentity
    from transferproof.chain.rpc import ChainClient
    from transferproof.chain.submission import SubmissionEngine
    from transferproof.consumer.transfer_list import ProofConsumer
    from transferproof.retrieval.poller import ProofPoller

T = TypeVar("T")


class RequestPreparer(Protocol):
    async def prepare_request(self, transfer_id: str, credential: str) -> EncodedRequest: ...


class AttestationLifecycle:
    """
    One attestation run for one transfer.

    Example:
        >>> lifecycle = client.lifecycle()
        >>> await lifecycle.prepare("1614003520", wise_token)
        >>> await lifecycle.submit(identity)
        >>> await lifecycle.retrieve()
        >>> result = await lifecycle.interact(identity)
        >>> lifecycle.state
        <LifecycleState.COMPLETE: 'complete'>
    """

    def __init__(
        self,
        verifier: RequestPreparer,
        submission: SubmissionEngine,
        poller: ProofPoller,
        consumer: ProofConsumer,
        chain: ChainClient | None = None,
        expected_chain_id: int | None = None,
        contract_address: str | None = None,
    ) -> None:
        """
        Args:
            verifier: Encodes requests (stage 1)
            submission: Pays and submits (stage 2)
            poller: Waits for finalization and proof (stage 3)
            consumer: Applies the proof (stage 4)
            chain: Used for the chain id check before each stage
            expected_chain_id: Required chain id, None to skip the check
            contract_address: Default consuming contract for ``interact``
        """
        if expected_chain_id is not None and chain is None:
            raise ValueError("expected_chain_id needs a chain client")

        self._verifier = verifier
        self._submission = submission
        self._poller = poller
        self._consumer = consumer
        self._chain = chain
        self._expected_chain_id = expected_chain_id
        self._contract_address = contract_address
        self._lock = asyncio.Lock()
        self._logger = get_logger("lifecycle")
        self._running: LifecycleState | None = None
        self._clear()

    def _clear(self) -> None:
        self._state = LifecycleState.PREPARING
        self._encoded_request: EncodedRequest | None = None
        self._receipt: SubmissionReceipt | None = None
        self._proof: Proof | None = None
        self._result: ContractResult | None = None
        self._last_failure: StageFailure | None = None

    # ─── State ───

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    @property
    def is_complete(self) -> bool:
        return self._state is LifecycleState.COMPLETE

    @property
    def encoded_request(self) -> EncodedRequest | None:
        return self._encoded_request

    @property
    def receipt(self) -> SubmissionReceipt | None:
        return self._receipt

    @property
    def proof(self) -> Proof | None:
        return self._proof

    @property
    def result(self) -> ContractResult | None:
        return self._result

    @property
    def last_failure(self) -> StageFailure | None:
        return self._last_failure

    # ─── Stage runner ───

    async def _run_stage(self, stage: LifecycleState, operation: Callable[[], Awaitable[T]]) -> T:
        if self._lock.locked():
            running = self._running.value if self._running else "unknown"
            raise InvalidLifecycleStateError(
                f"Cannot start {stage.value}: stage {running} is still running",
                current_state=self._state.value,
                expected_state=stage.value,
            )

        async with self._lock:
            if self._state is not stage:
                raise InvalidLifecycleStateError(
                    f"Cannot run {stage.value} while lifecycle is {self._state.value}",
                    current_state=self._state.value,
                    expected_state=stage.value,
                )

            self._running = stage
            log = get_stage_logger(self._logger, stage.value)
            log.info(f"Stage {stage.value} started")
            try:
                if self._expected_chain_id is not None:
                    await self._chain.ensure_chain_id(self._expected_chain_id)  # type: ignore[union-attr]
                result = await operation()
            except Exception as e:
                if isinstance(e, TransferProofError) and e.stage is None:
                    e.stage = stage.value
                self._last_failure = StageFailure(stage=stage, message=str(e), error=e)
                log.error(f"Stage {stage.value} failed: {e}")
                raise
            finally:
                self._running = None

            self._state = stage.next()
            self._last_failure = None
            log.info(f"Stage {stage.value} complete, lifecycle now {self._state.value}")
            return result

    # ─── Stages ───

    async def prepare(self, transfer_id: str, credential: str) -> EncodedRequest:
        """Stage 1: have the verifier encode the attestation request."""

        async def operation() -> EncodedRequest:
            encoded = await self._verifier.prepare_request(transfer_id, credential)
            self._encoded_request = encoded
            return encoded

        return await self._run_stage(LifecycleState.PREPARING, operation)

    async def submit(self, identity: SigningIdentity) -> SubmissionReceipt:
        """Stage 2: pay the fee and submit the encoded request."""

        async def operation() -> SubmissionReceipt:
            receipt = await self._submission.submit(self._encoded_request, identity)  # type: ignore[arg-type]
            self._receipt = receipt
            return receipt

        return await self._run_stage(LifecycleState.SUBMITTING, operation)

    async def retrieve(self, cancel_event: asyncio.Event | None = None) -> Proof:
        """Stage 3: wait for the round to finalize and fetch the proof."""

        async def operation() -> Proof:
            proof = await self._poller.await_proof(
                self._encoded_request,  # type: ignore[arg-type]
                self._receipt.round_id,  # type: ignore[union-attr]
                cancel_event,
            )
            self._proof = proof
            return proof

        return await self._run_stage(LifecycleState.RETRIEVING, operation)

    async def interact(
        self,
        identity: SigningIdentity,
        contract_address: str | None = None,
    ) -> ContractResult:
        """Stage 4: apply the proof to the consuming contract."""
        address = contract_address or self._contract_address

        async def operation() -> ContractResult:
            if not address:
                raise ConfigurationError(
                    "No transfer list contract address given",
                    missing=["WISE_TRANSFER_LIST_ADDRESS"],
                )
            result = await self._consumer.apply(self._proof, address, identity)  # type: ignore[arg-type]
            self._result = result
            return result

        return await self._run_stage(LifecycleState.INTERACTING, operation)

    def reset(self) -> None:
        """Back to PREPARING with every artifact discarded."""
        if self._lock.locked():
            raise InvalidLifecycleStateError(
                "Cannot reset while a stage is running",
                current_state=self._state.value,
            )
        self._clear()
        self._logger.info("Lifecycle reset")
