GAS_BUFFER_MULTIPLIER = 1.1
SUGGESTED_PRIORITY_FEE_MULTIPLIER = 1.5
SUGGESTED_GAS_PRICE_MULTIPLIER = 1.5
MAX_BASE_FEE_GROWTH_MULTIPLIER = 2

# Timeout constants (seconds)
DEFAULT_TRANSACTION_TIMEOUT = 300
DEFAULT_CONFIRMATIONS = 3

ADAPTER_OAPP_OPTIONS = "OAPP_OPTIONS"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

MAX_UINT16 = 2**16 - 1
MAX_UINT32 = 2**32 - 1
MAX_UINT128 = 2**128 - 1
