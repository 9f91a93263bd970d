"""
transferproof - Prove Wise transfers on Flare with the Data Connector.

Runs the four-stage Web2Json attestation lifecycle for a Wise transfer:
prepare the request with a verifier, submit it to the FdcHub, wait for the
voting round to finalize and fetch the proof, then apply the proof to a
WiseTransferList contract.

Usage:
    >>> from transferproof import TransferProof
    >>>
    >>> async with TransferProof() as tp:
    ...     result = await tp.verify_transfer("1614003520", wise_token)
    ...     print(result.transfer_ids)
"""

from transferproof.chain.identity import SigningIdentity
from transferproof.chain.registry import ContractRegistry, StaticRegistry
from transferproof.chain.rpc import ChainClient
from transferproof.client import TransferProof
from transferproof.core.config import Config
from transferproof.core.exceptions import (
    ChainError,
    ConfigurationError,
    ContractCallError,
    ContractNotFoundError,
    DecodeError,
    DuplicateTransferError,
    FeeQueryError,
    FinalizationTimeoutError,
    InsufficientBalanceError,
    InvalidLifecycleStateError,
    MalformedVerifierResponseError,
    NetworkMismatchError,
    PollCancelledError,
    ProofNotReadyError,
    ProofRetrievalError,
    RegistryLookupError,
    SubmissionError,
    TransferProofError,
    ValidationError,
    VerifierError,
    VerifierRejectedError,
)
from transferproof.core.types import (
    AttestationRequest,
    AttestationResponse,
    ContractResult,
    DecodedResponse,
    EncodedRequest,
    LifecycleState,
    Network,
    Proof,
    RequestBody,
    StageFailure,
    SubmissionReceipt,
    TransferRecord,
)
from transferproof.lifecycle.controller import AttestationLifecycle

__version__ = "0.1.0"

__all__ = [
    # Main client
    "TransferProof",
    "AttestationLifecycle",
    # Config
    "Config",
    "Network",
    # Chain
    "ChainClient",
    "ContractRegistry",
    "SigningIdentity",
    "StaticRegistry",
    # Types
    "AttestationRequest",
    "AttestationResponse",
    "ContractResult",
    "DecodedResponse",
    "EncodedRequest",
    "LifecycleState",
    "Proof",
    "RequestBody",
    "StageFailure",
    "SubmissionReceipt",
    "TransferRecord",
    # Exceptions
    "TransferProofError",
    "ChainError",
    "ConfigurationError",
    "ContractCallError",
    "ContractNotFoundError",
    "DecodeError",
    "DuplicateTransferError",
    "FeeQueryError",
    "FinalizationTimeoutError",
    "InsufficientBalanceError",
    "InvalidLifecycleStateError",
    "MalformedVerifierResponseError",
    "NetworkMismatchError",
    "PollCancelledError",
    "ProofNotReadyError",
    "ProofRetrievalError",
    "RegistryLookupError",
    "SubmissionError",
    "ValidationError",
    "VerifierError",
    "VerifierRejectedError",
]
