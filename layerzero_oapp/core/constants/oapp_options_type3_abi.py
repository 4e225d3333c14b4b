"""ABI for the LayerZero ``OAppOptionsType3`` facet (enforced options + Ownable)."""

OAPP_OPTIONS_TYPE3_ABI = [
    {
        "inputs": [{"internalType": "bytes", "name": "options", "type": "bytes"}],
        "name": "InvalidOptions",
        "type": "error",
    },
    {
        "inputs": [{"internalType": "address", "name": "owner", "type": "address"}],
        "name": "OwnableInvalidOwner",
        "type": "error",
    },
    {
        "inputs": [{"internalType": "address", "name": "account", "type": "address"}],
        "name": "OwnableUnauthorizedAccount",
        "type": "error",
    },
    {
        "anonymous": False,
        "inputs": [
            {
                "components": [
                    {"internalType": "uint32", "name": "eid", "type": "uint32"},
                    {"internalType": "uint16", "name": "msgType", "type": "uint16"},
                    {"internalType": "bytes", "name": "options", "type": "bytes"},
                ],
                "indexed": False,
                "internalType": "struct EnforcedOptionParam[]",
                "name": "_enforcedOptions",
                "type": "tuple[]",
            }
        ],
        "name": "EnforcedOptionSet",
        "type": "event",
    },
    {
        "anonymous": False,
        "inputs": [
            {
                "indexed": True,
                "internalType": "address",
                "name": "previousOwner",
                "type": "address",
            },
            {
                "indexed": True,
                "internalType": "address",
                "name": "newOwner",
                "type": "address",
            },
        ],
        "name": "OwnershipTransferred",
        "type": "event",
    },
    {
        "inputs": [
            {"internalType": "uint32", "name": "_eid", "type": "uint32"},
            {"internalType": "uint16", "name": "_msgType", "type": "uint16"},
            {"internalType": "bytes", "name": "_extraOptions", "type": "bytes"},
        ],
        "name": "combineOptions",
        "outputs": [{"internalType": "bytes", "name": "", "type": "bytes"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "uint32", "name": "eid", "type": "uint32"},
            {"internalType": "uint16", "name": "msgType", "type": "uint16"},
        ],
        "name": "enforcedOptions",
        "outputs": [
            {"internalType": "bytes", "name": "enforcedOption", "type": "bytes"}
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "owner",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "renounceOwnership",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {
                "components": [
                    {"internalType": "uint32", "name": "eid", "type": "uint32"},
                    {"internalType": "uint16", "name": "msgType", "type": "uint16"},
                    {"internalType": "bytes", "name": "options", "type": "bytes"},
                ],
                "internalType": "struct EnforcedOptionParam[]",
                "name": "_enforcedOptions",
                "type": "tuple[]",
            }
        ],
        "name": "setEnforcedOptions",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "address", "name": "newOwner", "type": "address"}
        ],
        "name": "transferOwnership",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]
