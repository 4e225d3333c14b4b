"""Binding for LayerZero's ``OAppOptionsType3`` facet.

    iface = OAppOptionsType3Factory.create_interface()
    iface.selector("setEnforcedOptions")

    oapp = OAppOptionsType3Factory.connect(address, ContractRunner(chain_id=42161))
    await oapp.enforced_options(30184, 1)
"""

from __future__ import annotations

import copy
from collections.abc import Iterable
from typing import Any

from layerzero_oapp.core.constants.oapp_options_type3_abi import (
    OAPP_OPTIONS_TYPE3_ABI,
)
from layerzero_oapp.core.contracts.interface import ContractInterface
from layerzero_oapp.core.contracts.proxy import ConnectedContract, ContractRunner


class OAppOptionsType3Contract(ConnectedContract):
    """Connected ``OAppOptionsType3`` with snake_case helpers over ``functions``."""

    def __init__(self, address: str, runner: ContractRunner | None = None):
        super().__init__(address, OAppOptionsType3Factory.create_interface(), runner)

    def connect(self, runner: ContractRunner | None) -> OAppOptionsType3Contract:
        return OAppOptionsType3Contract(self.address, runner)

    async def combine_options(
        self, eid: int, msg_type: int, extra_options: bytes | str = b""
    ) -> bytes:
        return await self.functions.combineOptions(eid, msg_type, extra_options).call()

    async def enforced_options(self, eid: int, msg_type: int) -> bytes:
        return await self.functions.enforcedOptions(eid, msg_type).call()

    async def owner(self) -> str:
        return await self.functions.owner().call()

    async def set_enforced_options(
        self,
        params: Iterable[Any],
        *,
        wait_for_receipt: bool = True,
    ) -> str:
        return await self.functions.setEnforcedOptions(list(params)).transact(
            wait_for_receipt=wait_for_receipt
        )

    async def transfer_ownership(
        self, new_owner: str, *, wait_for_receipt: bool = True
    ) -> str:
        return await self.functions.transferOwnership(new_owner).transact(
            wait_for_receipt=wait_for_receipt
        )

    async def renounce_ownership(self, *, wait_for_receipt: bool = True) -> str:
        return await self.functions.renounceOwnership().transact(
            wait_for_receipt=wait_for_receipt
        )


class OAppOptionsType3Factory:
    @staticmethod
    def abi() -> list[dict[str, Any]]:
        """A fresh copy of the declared ABI."""
        return copy.deepcopy(OAPP_OPTIONS_TYPE3_ABI)

    @staticmethod
    def create_interface() -> ContractInterface:
        return ContractInterface(OAPP_OPTIONS_TYPE3_ABI)

    @staticmethod
    def connect(
        address: str, runner: ContractRunner | None = None
    ) -> OAppOptionsType3Contract:
        return OAppOptionsType3Contract(address, runner)
