"""Explicit signing identity passed into every stage that sends a transaction."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from eth_account import Account
from eth_account.signers.local import LocalAccount

from transferproof.core.exceptions import ConfigurationError


@dataclass(frozen=True)
class SigningIdentity:
    """
    Address plus the key material that signs for it.

    An identity without an account can read (balances, views) but not sign.
    """

    address: str
    account: LocalAccount | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_private_key(cls, private_key: str) -> "SigningIdentity":
        """Build an identity from a hex private key."""
        if not private_key:
            raise ConfigurationError("Private key is required to sign transactions")
        account = Account.from_key(private_key)
        return cls(address=account.address, account=account)

    def sign_transaction(self, tx: dict[str, Any]) -> Any:
        """Sign a built transaction dict."""
        if self.account is None:
            raise ConfigurationError(f"Identity {self.address} has no signing key")
        return self.account.sign_transaction(tx)
