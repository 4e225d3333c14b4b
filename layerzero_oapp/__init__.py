__version__ = "0.1.0"

from layerzero_oapp.core import (
    BaseAdapter,
    ConnectedContract,
    ContractInterface,
    ContractRunner,
    OAppOptionsType3Contract,
    OAppOptionsType3Factory,
)
from layerzero_oapp.core.options.builder import OptionsBuilder, decode_options

__all__ = [
    "__version__",
    "BaseAdapter",
    "ConnectedContract",
    "ContractInterface",
    "ContractRunner",
    "OAppOptionsType3Contract",
    "OAppOptionsType3Factory",
    "OptionsBuilder",
    "decode_options",
]
