from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from eth_utils import to_checksum_address
from hexbytes import HexBytes

from layerzero_oapp.core.adapters.BaseAdapter import BaseAdapter, require_wallet
from layerzero_oapp.core.adapters.decorators import status_tuple
from layerzero_oapp.core.adapters.models import (
    EnforcedOptionParam,
    OptionsUpdate,
    OwnershipUpdate,
)
from layerzero_oapp.core.constants.base import ADAPTER_OAPP_OPTIONS, ZERO_ADDRESS
from layerzero_oapp.core.constants.chains import (
    LZ_EID_TO_CHAIN_ID,
    get_explorer_transaction_link,
)
from layerzero_oapp.core.contracts.interface import DecodedEvent
from layerzero_oapp.core.contracts.oapp_options_type3 import (
    OAppOptionsType3Contract,
    OAppOptionsType3Factory,
)
from layerzero_oapp.core.options.builder import assert_type3, describe_options
from layerzero_oapp.core.utils.logs import get_logs_bounded
from layerzero_oapp.core.utils.web3 import web3_from_chain_id

DEFAULT_MAX_LOGS = 500


def _as_param(value: Any) -> EnforcedOptionParam:
    if isinstance(value, EnforcedOptionParam):
        return value
    if isinstance(value, dict):
        return EnforcedOptionParam.model_validate(value)
    eid, msg_type, options = value
    return EnforcedOptionParam(eid=eid, msg_type=msg_type, options=options)


class OAppOptionsAdapter(BaseAdapter):
    """Read and govern enforced options on one OApp deployment."""

    adapter_type = ADAPTER_OAPP_OPTIONS

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        *,
        chain_id: int,
        oapp_address: str,
        sign_callback=None,
        wallet_address: str | None = None,
    ) -> None:
        super().__init__(
            "oapp_options_adapter",
            config,
            chain_id=chain_id,
            sign_callback=sign_callback,
            wallet_address=wallet_address,
        )
        self.oapp_address = to_checksum_address(oapp_address)
        self.interface = OAppOptionsType3Factory.create_interface()

    @property
    def contract(self) -> OAppOptionsType3Contract:
        return OAppOptionsType3Factory.connect(self.oapp_address, self.runner)

    @status_tuple
    async def get_owner(self) -> str:
        return await self.contract.owner()

    @status_tuple
    async def get_enforced_options(self, eid: int, msg_type: int) -> dict[str, Any]:
        raw = await self.contract.enforced_options(eid, msg_type)
        return {
            "eid": int(eid),
            "chain_id": LZ_EID_TO_CHAIN_ID.get(int(eid)),
            "msg_type": int(msg_type),
            "options": "0x" + bytes(raw).hex(),
            "decoded": describe_options(raw),
        }

    @status_tuple
    async def combine_options(
        self, eid: int, msg_type: int, extra_options: bytes | str = b""
    ) -> dict[str, Any]:
        extra = bytes(HexBytes(extra_options))
        if extra:
            assert_type3(extra)
        combined = await self.contract.combine_options(eid, msg_type, extra)
        return {
            "eid": int(eid),
            "msg_type": int(msg_type),
            "options": "0x" + bytes(combined).hex(),
            "decoded": describe_options(combined),
        }

    @require_wallet
    @status_tuple
    async def set_enforced_options(self, params: Iterable[Any]) -> OptionsUpdate:
        parsed = [_as_param(p) for p in params]
        if not parsed:
            raise ValueError("params must contain at least one enforced option")
        for param in parsed:
            assert_type3(param.options)

        self.logger.info(
            f"Setting {len(parsed)} enforced option(s) on {self.oapp_address}: "
            + ", ".join(f"eid={p.eid}/msgType={p.msg_type}" for p in parsed)
        )
        tx_hash = await self.contract.set_enforced_options(
            [p.as_abi_tuple() for p in parsed]
        )
        return OptionsUpdate(
            transaction_hash=tx_hash,
            transaction_chain_id=self.chain_id,
            oapp_address=self.oapp_address,
            params=parsed,
            explorer_url=get_explorer_transaction_link(self.chain_id, tx_hash),
        )

    @require_wallet
    @status_tuple
    async def transfer_ownership(self, new_owner: str) -> OwnershipUpdate:
        new_owner = to_checksum_address(new_owner)
        if new_owner == ZERO_ADDRESS:
            raise ValueError("use renounce_ownership to give up ownership")
        tx_hash = await self.contract.transfer_ownership(new_owner)
        return OwnershipUpdate(
            transaction_hash=tx_hash,
            transaction_chain_id=self.chain_id,
            oapp_address=self.oapp_address,
            previous_owner=self.wallet_address,
            new_owner=new_owner,
            explorer_url=get_explorer_transaction_link(self.chain_id, tx_hash),
        )

    @require_wallet
    @status_tuple
    async def renounce_ownership(self) -> OwnershipUpdate:
        self.logger.warning(f"Renouncing ownership of {self.oapp_address}")
        tx_hash = await self.contract.renounce_ownership()
        return OwnershipUpdate(
            transaction_hash=tx_hash,
            transaction_chain_id=self.chain_id,
            oapp_address=self.oapp_address,
            previous_owner=self.wallet_address,
            new_owner=ZERO_ADDRESS,
            explorer_url=get_explorer_transaction_link(self.chain_id, tx_hash),
        )

    async def _events(
        self,
        event_name: str,
        *,
        from_block: int,
        to_block: int | None,
        max_logs: int,
    ) -> list[DecodedEvent]:
        topic = self.interface.event_topic(event_name)
        async with web3_from_chain_id(self.chain_id) as web3:
            if to_block is None:
                to_block = await web3.eth.block_number
            logs = await get_logs_bounded(
                web3,
                from_block=from_block,
                to_block=to_block,
                address=self.oapp_address,
                topics=[topic],
                max_logs=max_logs,
            )
        return [self.interface.parse_log(log) for log in logs]

    @status_tuple
    async def get_enforced_option_events(
        self,
        *,
        from_block: int = 0,
        to_block: int | None = None,
        max_logs: int = DEFAULT_MAX_LOGS,
    ) -> list[dict[str, Any]]:
        events = await self._events(
            "EnforcedOptionSet",
            from_block=from_block,
            to_block=to_block,
            max_logs=max_logs,
        )
        return [
            {
                "block_number": ev.block_number,
                "transaction_hash": ev.transaction_hash,
                "enforced_options": [
                    {
                        "eid": item["eid"],
                        "msg_type": item["msgType"],
                        "options": "0x" + bytes(item["options"]).hex(),
                    }
                    for item in ev.args["_enforcedOptions"]
                ],
            }
            for ev in events
        ]

    @status_tuple
    async def get_ownership_events(
        self,
        *,
        from_block: int = 0,
        to_block: int | None = None,
        max_logs: int = DEFAULT_MAX_LOGS,
    ) -> list[dict[str, Any]]:
        events = await self._events(
            "OwnershipTransferred",
            from_block=from_block,
            to_block=to_block,
            max_logs=max_logs,
        )
        return [
            {
                "block_number": ev.block_number,
                "transaction_hash": ev.transaction_hash,
                "previous_owner": ev.args["previousOwner"],
                "new_owner": ev.args["newOwner"],
            }
            for ev in events
        ]
