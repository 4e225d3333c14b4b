CHAIN_ID_ETHEREUM = 1
CHAIN_ID_OPTIMISM = 10
CHAIN_ID_BSC = 56
CHAIN_ID_POLYGON = 137
CHAIN_ID_HYPEREVM = 999
CHAIN_ID_BASE = 8453
CHAIN_ID_ARBITRUM = 42161
CHAIN_ID_AVALANCHE = 43114

CHAIN_CODE_TO_ID = {
    "ethereum": CHAIN_ID_ETHEREUM,
    "mainnet": CHAIN_ID_ETHEREUM,
    "optimism": CHAIN_ID_OPTIMISM,
    "bsc": CHAIN_ID_BSC,
    "polygon": CHAIN_ID_POLYGON,
    "hyperevm": CHAIN_ID_HYPEREVM,
    "base": CHAIN_ID_BASE,
    "arbitrum": CHAIN_ID_ARBITRUM,
    "arbitrum-one": CHAIN_ID_ARBITRUM,
    "avalanche": CHAIN_ID_AVALANCHE,
}

CHAIN_ID_TO_CODE: dict[int, str] = {
    v: k for k, v in CHAIN_CODE_TO_ID.items() if k not in ("arbitrum-one", "mainnet")
}

SUPPORTED_CHAINS = [
    CHAIN_ID_ETHEREUM,
    CHAIN_ID_OPTIMISM,
    CHAIN_ID_BSC,
    CHAIN_ID_POLYGON,
    CHAIN_ID_HYPEREVM,
    CHAIN_ID_BASE,
    CHAIN_ID_ARBITRUM,
    CHAIN_ID_AVALANCHE,
]

# LayerZero v2 mainnet endpoint ids (eid). These are what `enforcedOptions`
# and `combineOptions` are keyed by, not EVM chain ids.
CHAIN_ID_TO_LZ_EID: dict[int, int] = {
    CHAIN_ID_ETHEREUM: 30101,
    CHAIN_ID_BSC: 30102,
    CHAIN_ID_AVALANCHE: 30106,
    CHAIN_ID_POLYGON: 30109,
    CHAIN_ID_ARBITRUM: 30110,
    CHAIN_ID_OPTIMISM: 30111,
    CHAIN_ID_BASE: 30184,
    CHAIN_ID_HYPEREVM: 30367,
}

LZ_EID_TO_CHAIN_ID: dict[int, int] = {v: k for k, v in CHAIN_ID_TO_LZ_EID.items()}

POA_MIDDLEWARE_CHAIN_IDS: set[int] = {
    CHAIN_ID_BSC,
    CHAIN_ID_POLYGON,
    CHAIN_ID_AVALANCHE,
}

PRE_EIP_1559_CHAIN_IDS: set[int] = {
    CHAIN_ID_BSC,
    CHAIN_ID_ARBITRUM,
}

CHAIN_EXPLORER_URLS: dict[int, str] = {
    CHAIN_ID_ETHEREUM: "https://etherscan.io/",
    CHAIN_ID_OPTIMISM: "https://optimistic.etherscan.io/",
    CHAIN_ID_BSC: "https://bscscan.com/",
    CHAIN_ID_POLYGON: "https://polygonscan.com/",
    CHAIN_ID_HYPEREVM: "https://hyperevmscan.io/",
    CHAIN_ID_BASE: "https://basescan.org/",
    CHAIN_ID_ARBITRUM: "https://arbiscan.io/",
    CHAIN_ID_AVALANCHE: "https://snowtrace.io/",
}


def lz_eid_for_chain(chain_id: int) -> int:
    eid = CHAIN_ID_TO_LZ_EID.get(int(chain_id))
    if eid is None:
        raise ValueError(f"No LayerZero endpoint id known for chain_id={chain_id}")
    return eid


def get_explorer_transaction_link(chain_id: int, txn_hash: str) -> str | None:
    base = CHAIN_EXPLORER_URLS.get(int(chain_id))
    if not base:
        return None
    if not txn_hash.startswith("0x"):
        txn_hash = f"0x{txn_hash}"
    return f"{base}tx/{txn_hash}"
