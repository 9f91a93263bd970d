"""
Proof consumer for the WiseTransferList contract.

Decodes a retrieved proof, refuses transfers the contract already holds,
and submits the proof with ``addTransfer``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from transferproof.consumer.codec import (
    decode_attestation_response,
    decode_transfer_data,
    merkle_proof_to_bytes,
)
from transferproof.core.contracts import TRANSFER_LIST_ABI
from transferproof.core.exceptions import ChainError, ContractCallError, DuplicateTransferError
from transferproof.core.logging import get_logger
from transferproof.core.types import ContractResult, Proof, TransferRecord
from transferproof.utils.gas import apply_gas_buffer

if TYPE_CHECKING:
    from transferproof.chain.identity import SigningIdentity
    from transferproof.chain.rpc import ChainClient


class TransferListContract:
    """
    One deployed WiseTransferList.

    Example:
        >>> contract = TransferListContract(chain, "0x1234...")
        >>> result = await contract.apply(proof, identity)
        >>> result.transfer_ids
        [1614003520]
    """

    def __init__(self, chain: ChainClient, address: str, gas_buffer: float = 0.2) -> None:
        self._chain = chain
        self._address = address
        self._gas_buffer = gas_buffer
        self._logger = get_logger("consumer.transfer_list")

    @property
    def address(self) -> str:
        return self._address

    async def _call(self, function: str, *args: Any) -> Any:
        try:
            return await self._chain.call(self._address, TRANSFER_LIST_ABI, function, *args)
        except ChainError as e:
            raise ContractCallError(
                f"{function} failed: {e}", contract_address=self._address
            ) from e

    async def get_transfer(self, transfer_id: int) -> TransferRecord | None:
        """Stored transfer, or None when the id is unknown to the contract."""
        record = TransferRecord.from_contract_tuple(await self._call("transfers", transfer_id))
        if record.id == 0:
            return None
        return record

    async def get_all_transfers(self) -> list[TransferRecord]:
        rows = await self._call("getAllTransfers")
        return [TransferRecord.from_contract_tuple(row) for row in rows]

    async def apply(self, proof: Proof, identity: SigningIdentity) -> ContractResult:
        """
        Submit a proof to the contract.

        Raises:
            DecodeError: Proof payload does not decode
            DuplicateTransferError: Contract already holds this transfer id
            ContractCallError: Duplicate check, gas estimate or transaction failed
        """
        response = decode_attestation_response(proof.response_hex)
        decoded = decode_transfer_data(response.abi_encoded_data)
        merkle_proof = merkle_proof_to_bytes(proof.merkle_proof)
        self._logger.info(
            f"Decoded transfer {decoded.id}: status={decoded.status}, "
            f"value={decoded.target_value} {decoded.target_currency}"
        )

        existing = await self.get_transfer(decoded.id)
        if existing is not None:
            raise DuplicateTransferError(
                f"Transfer with ID {decoded.id} already exists",
                transfer_id=decoded.id,
                contract_address=self._address,
            )

        proof_arg = (merkle_proof, response.to_contract_tuple())

        try:
            estimate = await self._chain.estimate_gas(
                identity, self._address, TRANSFER_LIST_ABI, "addTransfer", args=(proof_arg,)
            )
        except ChainError as e:
            raise ContractCallError(
                f"Gas estimation for addTransfer failed: {e}", contract_address=self._address
            ) from e

        gas = apply_gas_buffer(estimate, self._gas_buffer)
        self._logger.info(f"Gas estimate: {estimate}, sending with gas limit {gas}")

        try:
            outcome = await self._chain.transact(
                identity,
                self._address,
                TRANSFER_LIST_ABI,
                "addTransfer",
                args=(proof_arg,),
                gas=gas,
            )
        except ChainError as e:
            raise ContractCallError(
                f"addTransfer failed: {e}", contract_address=self._address, tx_hash=e.tx_hash
            ) from e

        self._logger.info(f"Transaction successful: {outcome.transaction_hash}")
        transfers = await self.get_all_transfers()

        return ContractResult(
            transaction_hash=outcome.transaction_hash,
            block_number=outcome.block_number,
            decoded=decoded,
            transfers=transfers,
        )


class ProofConsumer:
    """Applies proofs to any WiseTransferList address."""

    def __init__(self, chain: ChainClient, gas_buffer: float = 0.2) -> None:
        self._chain = chain
        self._gas_buffer = gas_buffer

    def contract(self, address: str) -> TransferListContract:
        return TransferListContract(self._chain, address, self._gas_buffer)

    async def apply(self, proof: Proof, contract_address: str, identity: SigningIdentity) -> ContractResult:
        return await self.contract(contract_address).apply(proof, identity)
