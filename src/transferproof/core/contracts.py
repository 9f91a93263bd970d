"""
Flare Data Connector contract interface.

Provides the contract registry address, the registry names of the FDC
contracts, and minimal ABIs (as Python dicts) for every contract the
attestation lifecycle touches.

Reference: https://dev.flare.network/fdc/overview
"""

from __future__ import annotations

# ───────────────────────────────────────────────────────────────────
# Registry
# ───────────────────────────────────────────────────────────────────

# FlareContractRegistry is deployed at the same address on every network
CONTRACT_REGISTRY_ADDRESS = "0xaD67FE66660Fb8dFE9d6b1b4240d8650e30F6019"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Names accepted by getContractAddressByName
FDC_HUB = "FdcHub"
FDC_REQUEST_FEE_CONFIGURATIONS = "FdcRequestFeeConfigurations"
FLARE_SYSTEMS_MANAGER = "FlareSystemsManager"
FDC_VERIFICATION = "FdcVerification"
RELAY = "Relay"


# ───────────────────────────────────────────────────────────────────
# Contract ABIs (only the functions used here)
# ───────────────────────────────────────────────────────────────────

CONTRACT_REGISTRY_ABI = [
    # read: getContractAddressByName(string) → address
    {
        "name": "getContractAddressByName",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "_name", "type": "string"}],
        "outputs": [{"name": "", "type": "address"}],
    },
]

FDC_HUB_ABI = [
    # write: requestAttestation(bytes) payable
    {
        "name": "requestAttestation",
        "type": "function",
        "stateMutability": "payable",
        "inputs": [{"name": "_data", "type": "bytes"}],
        "outputs": [],
    },
]

FDC_REQUEST_FEE_CONFIGURATIONS_ABI = [
    # read: getRequestFee(bytes) → uint256
    {
        "name": "getRequestFee",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "_data", "type": "bytes"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]

FLARE_SYSTEMS_MANAGER_ABI = [
    {
        "name": "firstVotingRoundStartTs",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint64"}],
    },
    {
        "name": "votingEpochDurationSeconds",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint64"}],
    },
    {
        "name": "getCurrentVotingEpochId",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint32"}],
    },
]

RELAY_ABI = [
    # read: isFinalized(uint256, uint256) → bool
    {
        "name": "isFinalized",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "_protocolId", "type": "uint256"},
            {"name": "_votingRoundId", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]

FDC_VERIFICATION_ABI = [
    # read: fdcProtocolId() → uint8
    {
        "name": "fdcProtocolId",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
]


# ─── Web2Json structs ───

_REQUEST_BODY_COMPONENTS = [
    {"internalType": "string", "name": "url", "type": "string"},
    {"internalType": "string", "name": "httpMethod", "type": "string"},
    {"internalType": "string", "name": "headers", "type": "string"},
    {"internalType": "string", "name": "queryParams", "type": "string"},
    {"internalType": "string", "name": "body", "type": "string"},
    {"internalType": "string", "name": "postProcessJq", "type": "string"},
    {"internalType": "string", "name": "abiSignature", "type": "string"},
]

_TRANSFER_COMPONENTS = [
    {"internalType": "uint256", "name": "id", "type": "uint256"},
    {"internalType": "uint256", "name": "targetAccount", "type": "uint256"},
    {"internalType": "bool", "name": "status", "type": "bool"},
    {"internalType": "address", "name": "userMessage", "type": "address"},
    {"internalType": "uint256", "name": "targetValue", "type": "uint256"},
    {"internalType": "string", "name": "targetCurrency", "type": "string"},
]

TRANSFER_LIST_ABI = [
    # write: addTransfer(IWeb2Json.Proof)
    {
        "name": "addTransfer",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {
                "name": "data",
                "type": "tuple",
                "internalType": "struct IWeb2Json.Proof",
                "components": [
                    {"internalType": "bytes32[]", "name": "merkleProof", "type": "bytes32[]"},
                    {
                        "name": "data",
                        "type": "tuple",
                        "internalType": "struct IWeb2Json.Response",
                        "components": [
                            {"internalType": "bytes32", "name": "attestationType", "type": "bytes32"},
                            {"internalType": "bytes32", "name": "sourceId", "type": "bytes32"},
                            {"internalType": "uint256", "name": "votingRound", "type": "uint256"},
                            {"internalType": "uint256", "name": "lowestUsedTimestamp", "type": "uint256"},
                            {
                                "name": "requestBody",
                                "type": "tuple",
                                "internalType": "struct IWeb2Json.RequestBody",
                                "components": _REQUEST_BODY_COMPONENTS,
                            },
                            {
                                "name": "responseBody",
                                "type": "tuple",
                                "internalType": "struct IWeb2Json.ResponseBody",
                                "components": [
                                    {"internalType": "bytes", "name": "abiEncodedData", "type": "bytes"},
                                ],
                            },
                        ],
                    },
                ],
            }
        ],
        "outputs": [],
    },
    # read: getAllTransfers() → WiseTransfer[]
    {
        "name": "getAllTransfers",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {
                "name": "",
                "type": "tuple[]",
                "internalType": "struct WiseTransfer[]",
                "components": _TRANSFER_COMPONENTS,
            }
        ],
    },
    # read: transferIds(uint256) → uint256
    {
        "name": "transferIds",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
    },
    # read: transfers(uint256) → WiseTransfer fields
    {
        "name": "transfers",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "outputs": _TRANSFER_COMPONENTS,
    },
]


# ───────────────────────────────────────────────────────────────────
# eth_abi type strings
# ───────────────────────────────────────────────────────────────────

# Output tuple of the Web2Json projection (matches the abiSignature sent to the verifier)
TRANSFER_DATA_TYPE = "(uint256,uint256,string,address,uint256,string)"

# IWeb2Json.Response as served in the DA layer's response_hex
ATTESTATION_RESPONSE_TYPE = (
    "(bytes32,bytes32,uint64,uint64,"
    "(string,string,string,string,string,string,string),"
    "(bytes))"
)


__all__ = [
    "CONTRACT_REGISTRY_ADDRESS",
    "ZERO_ADDRESS",
    "FDC_HUB",
    "FDC_REQUEST_FEE_CONFIGURATIONS",
    "FLARE_SYSTEMS_MANAGER",
    "FDC_VERIFICATION",
    "RELAY",
    "CONTRACT_REGISTRY_ABI",
    "FDC_HUB_ABI",
    "FDC_REQUEST_FEE_CONFIGURATIONS_ABI",
    "FLARE_SYSTEMS_MANAGER_ABI",
    "RELAY_ABI",
    "FDC_VERIFICATION_ABI",
    "TRANSFER_LIST_ABI",
    "TRANSFER_DATA_TYPE",
    "ATTESTATION_RESPONSE_TYPE",
]
