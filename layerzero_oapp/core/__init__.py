from layerzero_oapp.core.adapters.BaseAdapter import BaseAdapter
from layerzero_oapp.core.contracts.interface import ContractInterface
from layerzero_oapp.core.contracts.oapp_options_type3 import (
    OAppOptionsType3Contract,
    OAppOptionsType3Factory,
)
from layerzero_oapp.core.contracts.proxy import ConnectedContract, ContractRunner

__all__ = [
    "BaseAdapter",
    "ConnectedContract",
    "ContractInterface",
    "ContractRunner",
    "OAppOptionsType3Contract",
    "OAppOptionsType3Factory",
]
