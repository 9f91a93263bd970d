"""TransferProof - main entry point."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable

import httpx

from transferproof.attestation.request import VerifierClient
from transferproof.chain.identity import SigningIdentity
from transferproof.chain.registry import AddressResolver, ContractRegistry
from transferproof.chain.rpc import ChainClient
from transferproof.chain.submission import SubmissionEngine
from transferproof.consumer.transfer_list import ProofConsumer, TransferListContract
from transferproof.core.config import ENV_PRIVATE_KEY, Config
from transferproof.core.exceptions import ConfigurationError
from transferproof.core.logging import configure_logging, get_logger
from transferproof.core.types import ContractResult, TransferRecord
from transferproof.lifecycle.controller import AttestationLifecycle
from transferproof.resilience.retry import RetryPolicy
from transferproof.retrieval.poller import DALayerClient, ProofPoller
from transferproof.retrieval.polling import PollPolicy


class TransferProof:
    """
    Main client for attesting Wise transfers through the Flare Data Connector.

    Builds every lifecycle component from one Config and owns the HTTP and
    Web3 handles they share.

    Usage:
        >>> async with TransferProof() as tp:
        ...     result = await tp.verify_transfer("1614003520", wise_token)
        ...     print(result.transaction_hash)
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        chain: ChainClient | None = None,
        registry: AddressResolver | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        **overrides: Any,
    ) -> None:
        """
        Initialize TransferProof.

        Args:
            config: Full configuration; read from the environment when omitted
            http_client: Shared httpx client for verifier and DA layer calls
            chain: Pre-built chain client (defaults to one on ``config.rpc_url``)
            registry: Contract resolver (defaults to the on-chain registry)
            sleep: Awaitable sleep used by the polling loops
            clock: Monotonic clock used by the polling loops
            **overrides: Passed to ``Config.from_env`` when ``config`` is omitted
        """
        if config is None:
            config = Config.from_env(**overrides)
        elif overrides:
            config = config.with_updates(**overrides)
        self._config = config

        configure_logging(level=config.log_level, json_format=config.log_json)
        self._logger = get_logger("client")
        self._logger.info(
            f"Initializing TransferProof (Network: {config.network.value}, "
            f"verifier key: {config.masked_api_key()})"
        )

        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=config.request_timeout)
        self._owns_chain = chain is None
        self._chain = chain or ChainClient(
            config.rpc_url,
            receipt_timeout=config.receipt_timeout,
            request_timeout=config.request_timeout,
        )
        self._registry = registry or ContractRegistry(self._chain)

        self._retry_policy = RetryPolicy(
            max_attempts=config.retry_max_attempts,
            min_wait=config.retry_min_wait,
            max_wait=config.retry_max_wait,
        )
        self._verifier = VerifierClient(
            config.verifier_url,
            config.verifier_api_key,
            timeout=config.request_timeout,
            http_client=self._http_client,
        )
        self._submission = SubmissionEngine(self._chain, self._registry, config.network)
        self._poller = ProofPoller(
            self._chain,
            self._registry,
            DALayerClient(config.da_layer_url, config.request_timeout, self._http_client),
            finalization_policy=PollPolicy(
                interval=config.finalization_poll_interval,
                max_attempts=config.finalization_max_attempts,
                max_wait=config.finalization_max_wait,
            ),
            proof_policy=PollPolicy(
                interval=config.proof_poll_interval,
                max_attempts=config.proof_max_attempts,
            ),
            settle_delay=config.settle_delay,
            retry_policy=self._retry_policy,
            sleep=sleep,
            clock=clock,
        )
        self._consumer = ProofConsumer(self._chain, gas_buffer=config.gas_buffer)
        self._identity: SigningIdentity | None = None

    @property
    def config(self) -> Config:
        """Get configuration."""
        return self._config

    @property
    def chain(self) -> ChainClient:
        return self._chain

    @property
    def identity(self) -> SigningIdentity:
        """Signing identity built from the configured private key."""
        if self._identity is None:
            if not self._config.private_key:
                raise ConfigurationError(
                    f"No private key configured. Set {ENV_PRIVATE_KEY} or pass an identity.",
                    missing=[ENV_PRIVATE_KEY],
                )
            self._identity = SigningIdentity.from_private_key(self._config.private_key)
        return self._identity

    def lifecycle(self) -> AttestationLifecycle:
        """A fresh lifecycle bound to this client's components."""
        return AttestationLifecycle(
            verifier=self._verifier,
            submission=self._submission,
            poller=self._poller,
            consumer=self._consumer,
            chain=self._chain,
            expected_chain_id=self._config.chain_id,
            contract_address=self._config.transfer_list_address,
        )

    def transfer_list(self) -> TransferListContract:
        return self._consumer.contract(self._config.require_transfer_list_address())

    async def verify_transfer(
        self,
        transfer_id: str,
        credential: str,
        identity: SigningIdentity | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ContractResult:
        """
        Run all four stages for one transfer.

        Args:
            transfer_id: Wise transfer id
            credential: Wise API bearer token
            identity: Signer for submission and contract call (defaults to ``self.identity``)
            cancel_event: Set to abandon the polling stage

        Returns:
            ContractResult of the ``addTransfer`` call
        """
        contract_address = self._config.require_transfer_list_address()
        signer = identity or self.identity

        lifecycle = self.lifecycle()
        await lifecycle.prepare(transfer_id, credential)
        receipt = await lifecycle.submit(signer)
        self._logger.info(f"Transfer {transfer_id} submitted in round {receipt.round_id}")
        await lifecycle.retrieve(cancel_event)
        return await lifecycle.interact(signer, contract_address)

    async def get_transfers(self) -> list[TransferRecord]:
        """All transfers held by the configured WiseTransferList."""
        return await self.transfer_list().get_all_transfers()

    async def get_transfer(self, transfer_id: int) -> TransferRecord | None:
        return await self.transfer_list().get_transfer(transfer_id)

    async def close(self) -> None:
        """Close owned HTTP and RPC handles."""
        if self._owns_http_client:
            await self._http_client.aclose()
        if self._owns_chain:
            await self._chain.close()

    async def __aenter__(self) -> TransferProof:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
