"""Four-stage attestation lifecycle."""

from transferproof.lifecycle.controller import AttestationLifecycle, RequestPreparer

__all__ = ["AttestationLifecycle", "RequestPreparer"]
