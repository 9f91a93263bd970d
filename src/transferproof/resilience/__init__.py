"""
Resilience Layer for transferproof.

Provides the bounded backoff used inside polling stages.
"""

from .retry import DEFAULT_RETRY_POLICY, RetryPolicy, execute_with_retry

__all__ = [
    "DEFAULT_RETRY_POLICY",
    "RetryPolicy",
    "execute_with_retry",
]
