"""
Exception hierarchy for transferproof.

All package-specific exceptions inherit from TransferProofError for easy catching.
Each error may carry the lifecycle stage it was raised in; the lifecycle
controller fills ``stage`` in when a component left it empty.
"""

from __future__ import annotations

from typing import Any


class TransferProofError(Exception):
    """
    Base exception for all transferproof errors.

    Catch this to handle any attestation-related exception.

    Example:
        >>> try:
        ...     await lifecycle.submit(identity)
        ... except TransferProofError as e:
        ...     print(f"[{e.stage}] {e}")
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        stage: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.stage = stage

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(TransferProofError):
    """
    Configuration is missing or invalid.

    Raised when:
    - Required settings (verifier URL, verifier key, ...) are not provided
    - Settings fail validation
    - A stage needs a setting the config does not carry
    """

    def __init__(
        self,
        message: str,
        missing: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.missing = missing or []


class NetworkMismatchError(TransferProofError):
    """
    Connected chain is not the deployment's chain.

    A hard precondition failure; switching networks is the only fix.
    """

    def __init__(self, message: str, expected_chain_id: int, actual_chain_id: int) -> None:
        super().__init__(message)
        self.expected_chain_id = expected_chain_id
        self.actual_chain_id = actual_chain_id


class ValidationError(TransferProofError):
    """
    Input validation error.

    Raised when:
    - Required parameters are missing
    - Parameter values are invalid
    """

    pass


class ChainError(TransferProofError):
    """Raw RPC or transaction failure from the chain client."""

    def __init__(
        self,
        message: str,
        tx_hash: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.tx_hash = tx_hash


class VerifierError(TransferProofError):
    """
    Attestation verifier call failed.

    Raised when:
    - The verifier is unreachable
    - The verifier rejected the request
    - The verifier response has no encoded request
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code
        self.url = url


class VerifierRejectedError(VerifierError):
    """Verifier answered with a non-200 status."""

    pass


class MalformedVerifierResponseError(VerifierError):
    """Verifier answered 200 without an ``abiEncodedRequest``."""

    pass


class RegistryLookupError(TransferProofError):
    """Contract address could not be resolved through the contract registry."""

    def __init__(
        self,
        message: str,
        contract_name: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.contract_name = contract_name


class ContractNotFoundError(RegistryLookupError):
    """Registry resolved a contract name to the zero address."""

    pass


class FeeQueryError(TransferProofError):
    """Request fee could not be read from the fee-configuration contract."""

    pass


class InsufficientBalanceError(TransferProofError):
    """
    Signer does not have enough native currency to pay the request fee.

    Raised before any transaction is sent.
    """

    def __init__(
        self,
        message: str,
        current_balance: int,
        required_amount: int,
        address: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.current_balance = current_balance
        self.required_amount = required_amount
        self.address = address
        self.shortfall = required_amount - current_balance

    def __str__(self) -> str:
        return (
            f"{self.message} | "
            f"Balance: {self.current_balance}, Required: {self.required_amount}, "
            f"Shortfall: {self.shortfall}"
        )


class SubmissionError(TransferProofError):
    """
    Attestation request transaction failed.

    Raised when:
    - The transaction reverted
    - The transaction was not mined within the receipt timeout
    - The voting round could not be derived after inclusion
    """

    def __init__(
        self,
        message: str,
        tx_hash: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.tx_hash = tx_hash


class FinalizationTimeoutError(TransferProofError):
    """Voting round was not finalized within the configured bound."""

    def __init__(
        self,
        message: str,
        round_id: int,
        attempts: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.round_id = round_id
        self.attempts = attempts


class ProofRetrievalError(TransferProofError):
    """
    Data-availability layer could not be reached.

    Transport errors and non-success statuses land here once the backoff
    retries are exhausted.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code
        self.url = url


class ProofNotReadyError(TransferProofError):
    """Data-availability layer answered, but never with a proof payload."""

    def __init__(
        self,
        message: str,
        round_id: int,
        attempts: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.round_id = round_id
        self.attempts = attempts


class PollCancelledError(TransferProofError):
    """A polling loop observed its cancellation signal."""

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class DecodeError(TransferProofError):
    """Proof response could not be decoded against the expected ABI."""

    pass


class DuplicateTransferError(TransferProofError):
    """
    Transfer is already recorded by the consuming contract.

    The idempotency guard: the same attested transfer is never applied twice.
    """

    def __init__(
        self,
        message: str,
        transfer_id: int,
        contract_address: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.transfer_id = transfer_id
        self.contract_address = contract_address


class ContractCallError(TransferProofError):
    """Call or transaction against the consuming contract failed."""

    def __init__(
        self,
        message: str,
        contract_address: str | None = None,
        tx_hash: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.contract_address = contract_address
        self.tx_hash = tx_hash


class InvalidLifecycleStateError(TransferProofError):
    """
    Stage operation invoked out of order.

    Raised when:
    - A stage is called while the lifecycle is in another state
    - A stage is called while another stage is still running
    """

    def __init__(self, message: str, current_state: str, expected_state: str | None = None) -> None:
        super().__init__(message)
        self.current_state = current_state
        self.expected_state = expected_state
