"""On-chain access: signing identity, RPC client, registry and submission."""

from transferproof.chain.identity import SigningIdentity
from transferproof.chain.registry import AddressResolver, ContractRegistry, StaticRegistry
from transferproof.chain.rpc import ChainClient, TransactionOutcome
from transferproof.chain.submission import SubmissionEngine, compute_round_id

__all__ = [
    "AddressResolver",
    "ChainClient",
    "ContractRegistry",
    "SigningIdentity",
    "StaticRegistry",
    "SubmissionEngine",
    "TransactionOutcome",
    "compute_round_id",
]
