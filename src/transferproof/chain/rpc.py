"""
Chain client: a thin async wrapper over web3.py.

Every on-chain read and write in the lifecycle goes through this class, so
components can be exercised against an in-memory ledger with the same
surface. Raw web3 / transport failures come out as ChainError; the calling
component wraps them into its own error kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from web3 import AsyncWeb3

from transferproof.chain.identity import SigningIdentity
from transferproof.core.exceptions import ChainError, ConfigurationError, NetworkMismatchError
from transferproof.core.logging import get_logger
from transferproof.core.networks import get_network_by_chain_id

logger = get_logger("chain.rpc")


def _describe_chain(chain_id: int) -> str:
    network = get_network_by_chain_id(chain_id)
    if network is None:
        return f"chain {chain_id}"
    return f"{network.value} (chain {chain_id})"


@dataclass(frozen=True)
class TransactionOutcome:
    """An included, successful transaction."""

    transaction_hash: str
    block_number: int
    gas_used: int = 0


class ChainClient:
    """
    Async JSON-RPC client for Flare networks.

    Usage:
        chain = ChainClient("https://coston2-api.flare.network/ext/C/rpc")
        await chain.ensure_chain_id(114)
        fee = await chain.call(fee_config, FDC_REQUEST_FEE_CONFIGURATIONS_ABI, "getRequestFee", data)
    """

    def __init__(
        self,
        rpc_url: str | None = None,
        w3: AsyncWeb3 | None = None,
        receipt_timeout: float = 300.0,
        request_timeout: float = 30.0,
    ) -> None:
        """
        Args:
            rpc_url: RPC endpoint, ignored when ``w3`` is given
            w3: Pre-built AsyncWeb3 instance
            receipt_timeout: Seconds to wait for a transaction to be mined
            request_timeout: Seconds per JSON-RPC request
        """
        if w3 is None:
            if not rpc_url:
                raise ValueError("rpc_url or w3 is required")
            w3 = AsyncWeb3(
                AsyncWeb3.AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout})
            )
        self._w3 = w3
        self._receipt_timeout = receipt_timeout

    @property
    def w3(self) -> AsyncWeb3:
        return self._w3

    def contract(self, address: str, abi: list[dict[str, Any]]) -> Any:
        """Bind an ABI to a checksummed address."""
        return self._w3.eth.contract(address=AsyncWeb3.to_checksum_address(address), abi=abi)

    async def get_chain_id(self) -> int:
        try:
            return int(await self._w3.eth.chain_id)
        except Exception as e:
            raise ChainError(f"Failed to read chain id: {e}") from e

    async def ensure_chain_id(self, expected: int) -> None:
        """Fail hard when connected to the wrong chain."""
        actual = await self.get_chain_id()
        if actual != expected:
            raise NetworkMismatchError(
                f"Connected to {_describe_chain(actual)}, expected {_describe_chain(expected)}. "
                "Switch networks and retry.",
                expected_chain_id=expected,
                actual_chain_id=actual,
            )

    async def call(self, address: str, abi: list[dict[str, Any]], function: str, *args: Any) -> Any:
        """Execute a view call and return the decoded result."""
        try:
            fn = getattr(self.contract(address, abi).functions, function)(*args)
            return await fn.call()
        except Exception as e:
            raise ChainError(f"Call {function} on {address} failed: {e}") from e

    async def get_balance(self, address: str) -> int:
        """Native balance in wei."""
        try:
            return int(await self._w3.eth.get_balance(AsyncWeb3.to_checksum_address(address)))
        except Exception as e:
            raise ChainError(f"Failed to read balance of {address}: {e}") from e

    async def get_block_timestamp(self, block_number: int) -> int:
        try:
            block = await self._w3.eth.get_block(block_number)
        except Exception as e:
            raise ChainError(f"Failed to read block {block_number}: {e}") from e
        if not block:
            raise ChainError(f"Could not get block information for block {block_number}")
        return int(block["timestamp"])

    async def estimate_gas(
        self,
        identity: SigningIdentity,
        address: str,
        abi: list[dict[str, Any]],
        function: str,
        args: tuple[Any, ...] = (),
        value: int = 0,
    ) -> int:
        try:
            fn = getattr(self.contract(address, abi).functions, function)(*args)
            return int(await fn.estimate_gas({"from": identity.address, "value": value}))
        except Exception as e:
            raise ChainError(f"Gas estimation for {function} failed: {e}") from e

    async def transact(
        self,
        identity: SigningIdentity,
        address: str,
        abi: list[dict[str, Any]],
        function: str,
        args: tuple[Any, ...] = (),
        value: int = 0,
        gas: int | None = None,
    ) -> TransactionOutcome:
        """
        Build, sign, send and wait for one transaction.

        Raises:
            ChainError: Build/send failure, receipt timeout or revert
        """
        tx_hash_hex: str | None = None
        try:
            fn = getattr(self.contract(address, abi).functions, function)(*args)
            tx_params: dict[str, Any] = {
                "from": identity.address,
                "value": value,
                "chainId": int(await self._w3.eth.chain_id),
                "nonce": await self._w3.eth.get_transaction_count(identity.address, "pending"),
            }
            if gas is not None:
                tx_params["gas"] = gas
            tx = await fn.build_transaction(tx_params)
            signed = identity.sign_transaction(tx)
            tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
            tx_hash_hex = AsyncWeb3.to_hex(tx_hash)
            logger.info(f"Transaction submitted: {tx_hash_hex}")

            receipt = await self._w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._receipt_timeout
            )
        except ConfigurationError:
            raise
        except Exception as e:
            raise ChainError(f"Transaction {function} failed: {e}", tx_hash=tx_hash_hex) from e

        if receipt["status"] != 1:
            raise ChainError(f"Transaction {function} reverted", tx_hash=tx_hash_hex)

        logger.info(f"Transaction mined in block: {receipt['blockNumber']}")
        return TransactionOutcome(
            transaction_hash=tx_hash_hex,
            block_number=int(receipt["blockNumber"]),
            gas_used=int(receipt.get("gasUsed", 0)),
        )

    async def close(self) -> None:
        """Close the provider's HTTP session, if it has one."""
        disconnect = getattr(self._w3.provider, "disconnect", None)
        if disconnect is not None:
            await disconnect()
