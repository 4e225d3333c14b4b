"""Wire constants for LayerZero v2 options (type 3) and OApp message types."""

# Options header: a big-endian uint16 option format version.
TYPE_1 = 1  # legacy: uint16 type | uint256 gas
TYPE_2 = 2  # legacy: uint16 type | uint256 gas | uint256 amount | bytes dst
TYPE_3 = 3

OPTIONS_TYPE_SIZE = 2

# Worker ids
EXECUTOR_WORKER_ID = 1
DVN_WORKER_ID = 2

# Executor option types
EXECUTOR_OPTION_TYPE_LZRECEIVE = 1
EXECUTOR_OPTION_TYPE_NATIVE_DROP = 2
EXECUTOR_OPTION_TYPE_LZCOMPOSE = 3
EXECUTOR_OPTION_TYPE_ORDERED_EXECUTION = 4

# DVN option types
DVN_OPTION_TYPE_PRECRIME = 1

EXECUTOR_OPTION_NAMES: dict[int, str] = {
    EXECUTOR_OPTION_TYPE_LZRECEIVE: "lzReceive",
    EXECUTOR_OPTION_TYPE_NATIVE_DROP: "nativeDrop",
    EXECUTOR_OPTION_TYPE_LZCOMPOSE: "lzCompose",
    EXECUTOR_OPTION_TYPE_ORDERED_EXECUTION: "orderedExecution",
}

DVN_OPTION_NAMES: dict[int, str] = {
    DVN_OPTION_TYPE_PRECRIME: "preCrime",
}

# Message types used by OFT-style OApps when configuring enforced options.
MSG_TYPE_SEND = 1
MSG_TYPE_SEND_AND_CALL = 2
