from layerzero_oapp.core.constants.base import ZERO_ADDRESS
from layerzero_oapp.core.constants.chains import SUPPORTED_CHAINS
from layerzero_oapp.core.constants.oapp_options_type3_abi import (
    OAPP_OPTIONS_TYPE3_ABI,
)

__all__ = [
    "OAPP_OPTIONS_TYPE3_ABI",
    "SUPPORTED_CHAINS",
    "ZERO_ADDRESS",
]
