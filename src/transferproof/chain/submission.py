"""
Fee & submission engine.

Pays for and submits an encoded attestation request to the FdcHub, then
derives the voting round the request landed in.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from transferproof.core.contracts import (
    FDC_HUB,
    FDC_HUB_ABI,
    FDC_REQUEST_FEE_CONFIGURATIONS,
    FDC_REQUEST_FEE_CONFIGURATIONS_ABI,
    FLARE_SYSTEMS_MANAGER,
    FLARE_SYSTEMS_MANAGER_ABI,
)
from transferproof.core.exceptions import (
    ChainError,
    FeeQueryError,
    InsufficientBalanceError,
    SubmissionError,
)
from transferproof.core.logging import get_logger
from transferproof.core.networks import get_round_explorer_url
from transferproof.core.types import EncodedRequest, Network, SubmissionReceipt
from transferproof.utils.gas import check_fee_coverage, format_native

if TYPE_CHECKING:
    from transferproof.chain.identity import SigningIdentity
    from transferproof.chain.registry import AddressResolver
    from transferproof.chain.rpc import ChainClient


def compute_round_id(block_timestamp: int, first_round_start_ts: int, epoch_duration: int) -> int:
    """
    Voting round containing a timestamp.

    ``floor((T - T0) / D)``; validators derive the round the same way, so this
    must not be rounded any other way.
    """
    if epoch_duration <= 0:
        raise ValueError("Voting epoch duration must be positive")
    if block_timestamp < first_round_start_ts:
        raise ValueError(
            f"Block timestamp {block_timestamp} precedes the first voting round "
            f"({first_round_start_ts})"
        )
    return (block_timestamp - first_round_start_ts) // epoch_duration


class SubmissionEngine:
    """
    Submits attestation requests with their fee attached.

    Example:
        >>> engine = SubmissionEngine(chain, ContractRegistry(chain))
        >>> receipt = await engine.submit(encoded, identity)
        >>> receipt.round_id
        1043221
    """

    def __init__(
        self,
        chain: ChainClient,
        registry: AddressResolver,
        network: Network = Network.COSTON2,
    ) -> None:
        self._chain = chain
        self._registry = registry
        self._network = network
        self._logger = get_logger("chain.submission")

    async def get_request_fee(self, encoded_request: EncodedRequest, fee_config: str | None = None) -> int:
        """Fee in wei the hub expects for this request."""
        if fee_config is None:
            fee_config = await self._registry.resolve(FDC_REQUEST_FEE_CONFIGURATIONS)
        try:
            fee = await self._chain.call(
                fee_config,
                FDC_REQUEST_FEE_CONFIGURATIONS_ABI,
                "getRequestFee",
                encoded_request.raw,
            )
        except ChainError as e:
            raise FeeQueryError(f"Failed to get request fee: {e}") from e
        return int(fee)

    async def calculate_round_id(self, block_number: int, systems_manager: str | None = None) -> int:
        """Derive the voting round from the including block's timestamp."""
        if systems_manager is None:
            systems_manager = await self._registry.resolve(FLARE_SYSTEMS_MANAGER)

        block_timestamp = await self._chain.get_block_timestamp(block_number)
        first_round_start = int(
            await self._chain.call(
                systems_manager, FLARE_SYSTEMS_MANAGER_ABI, "firstVotingRoundStartTs"
            )
        )
        epoch_duration = int(
            await self._chain.call(
                systems_manager, FLARE_SYSTEMS_MANAGER_ABI, "votingEpochDurationSeconds"
            )
        )
        self._logger.debug(
            f"Block timestamp: {block_timestamp}, first voting round start ts: "
            f"{first_round_start}, voting epoch duration seconds: {epoch_duration}"
        )

        round_id = compute_round_id(block_timestamp, first_round_start, epoch_duration)

        # Informational only: the current epoch may already be ahead of the request's round
        current = await self._chain.call(
            systems_manager, FLARE_SYSTEMS_MANAGER_ABI, "getCurrentVotingEpochId"
        )
        self._logger.info(f"Calculated round id: {round_id} (current voting epoch: {int(current)})")
        return round_id

    async def submit(self, encoded_request: EncodedRequest, identity: SigningIdentity) -> SubmissionReceipt:
        """
        Pay the request fee and submit the encoded request.

        Raises:
            RegistryLookupError: FDC contract could not be resolved
            FeeQueryError: Fee lookup failed
            InsufficientBalanceError: Balance below fee; nothing was sent
            SubmissionError: Transaction failed or round derivation failed
        """
        self._logger.info("Submitting attestation request")

        hub = await self._registry.resolve(FDC_HUB)
        fee_config = await self._registry.resolve(FDC_REQUEST_FEE_CONFIGURATIONS)
        systems_manager = await self._registry.resolve(FLARE_SYSTEMS_MANAGER)

        fee = await self.get_request_fee(encoded_request, fee_config)

        try:
            balance = await self._chain.get_balance(identity.address)
        except ChainError as e:
            raise SubmissionError(f"Failed to read signer balance: {e}") from e

        self._logger.info(
            f"Wallet balance: {format_native(balance)}, required fee: {format_native(fee)}"
        )
        covered, message = check_fee_coverage(self._network, balance, fee)
        if not covered:
            raise InsufficientBalanceError(
                message,
                current_balance=balance,
                required_amount=fee,
                address=identity.address,
            )

        try:
            outcome = await self._chain.transact(
                identity,
                hub,
                FDC_HUB_ABI,
                "requestAttestation",
                args=(encoded_request.raw,),
                value=fee,
            )
        except ChainError as e:
            raise SubmissionError(
                f"Failed to submit attestation request: {e}", tx_hash=e.tx_hash
            ) from e

        try:
            round_id = await self.calculate_round_id(outcome.block_number, systems_manager)
        except (ChainError, ValueError) as e:
            raise SubmissionError(
                f"Request included but round id could not be derived: {e}",
                tx_hash=outcome.transaction_hash,
                details={"block_number": outcome.block_number},
            ) from e

        explorer = get_round_explorer_url(self._network, round_id)
        if explorer:
            self._logger.info(f"Check round progress at: {explorer}")

        return SubmissionReceipt(
            transaction_hash=outcome.transaction_hash,
            block_number=outcome.block_number,
            round_id=round_id,
            fee_paid=fee,
        )
