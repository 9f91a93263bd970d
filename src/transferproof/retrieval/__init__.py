"""Finalization and proof retrieval."""

from transferproof.retrieval.poller import (
    DALayerClient,
    ProofPoller,
    finalization_step,
    proof_step,
)
from transferproof.retrieval.polling import (
    PollAction,
    PollDecision,
    PollOutcome,
    PollPolicy,
    poll_until,
)

__all__ = [
    "DALayerClient",
    "PollAction",
    "PollDecision",
    "PollOutcome",
    "PollPolicy",
    "ProofPoller",
    "finalization_step",
    "poll_until",
    "proof_step",
]
