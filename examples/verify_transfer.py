"""
Example: Attest a Wise transfer end to end

Runs all four lifecycle stages for one transfer, printing each artifact as
it is produced.

Reads from the environment (or a .env file):
    WEB2JSON_VERIFIER_URL_TESTNET, VERIFIER_API_KEY_TESTNET,
    WISE_TRANSFER_LIST_ADDRESS, TRANSFERPROOF_PRIVATE_KEY, WISE_API_TOKEN
"""

import asyncio
import os
import sys

from dotenv import load_dotenv
load_dotenv()

from transferproof import TransferProof, TransferProofError


async def main(transfer_id: str):
    print("=== TransferProof: Wise transfer attestation ===\n")

    wise_token = os.environ.get("WISE_API_TOKEN")
    if not wise_token:
        print("❌ WISE_API_TOKEN is not set")
        return

    async with TransferProof() as tp:
        identity = tp.identity
        print(f"✅ Signer: {identity.address}")

        lifecycle = tp.lifecycle()
        try:
            encoded = await lifecycle.prepare(transfer_id, wise_token)
            print(f"✅ Request prepared: {encoded.hex[:66]}...")

            receipt = await lifecycle.submit(identity)
            print(f"✅ Submitted in tx {receipt.transaction_hash}")
            print(f"   Round: {receipt.round_id}, fee: {receipt.fee_paid} wei")

            proof = await lifecycle.retrieve()
            print(f"✅ Proof retrieved ({len(proof.merkle_proof)} merkle nodes)")

            result = await lifecycle.interact(identity)
            print(f"✅ addTransfer mined in block {result.block_number}")
            print(f"   Transfer {result.decoded.id}: {result.decoded.status}")
        except TransferProofError as e:
            print(f"❌ [{e.stage}] {e}")
            return

        print("\nTransfers on contract:")
        for record in await tp.get_transfers():
            print(f"   {record.id}: {record.target_value / 100:.2f} {record.target_currency}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "1614003520"))
