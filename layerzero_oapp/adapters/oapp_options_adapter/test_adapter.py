from __future__ import annotations

from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

import layerzero_oapp.adapters.oapp_options_adapter.adapter as oapp_adapter
from layerzero_oapp.adapters.oapp_options_adapter.adapter import OAppOptionsAdapter
from layerzero_oapp.core.adapters.models import (
    EnforcedOptionParam,
    OptionsUpdate,
    OwnershipUpdate,
)
from layerzero_oapp.core.constants.base import ZERO_ADDRESS
from layerzero_oapp.core.contracts.errors import OAppContractError
from layerzero_oapp.core.contracts.oapp_options_type3 import (
    OAppOptionsType3Contract,
    OAppOptionsType3Factory,
)
from layerzero_oapp.core.options.builder import OptionsBuilder

OAPP = "0x1111111111111111111111111111111111111111"
WALLET = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
NEW_OWNER = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"
TX_HASH = "0x" + "ab" * 32
LZ_RECEIVE_200K = OptionsBuilder.new_options().add_executor_lz_receive_option(200_000)


async def _sign(tx: dict) -> bytes:
    return b"signed"


@pytest.fixture
def adapter() -> OAppOptionsAdapter:
    return OAppOptionsAdapter(chain_id=42161, oapp_address=OAPP.lower())


@pytest.fixture
def signer_adapter() -> OAppOptionsAdapter:
    return OAppOptionsAdapter(
        chain_id=42161,
        oapp_address=OAPP,
        sign_callback=_sign,
        wallet_address=WALLET.lower(),
    )


class TestAdapterBasics:
    def test_adapter_type(self, adapter):
        assert adapter.adapter_type == "OAPP_OPTIONS"
        assert adapter.name == "oapp_options_adapter"

    def test_addresses_are_checksummed(self, signer_adapter):
        assert signer_adapter.oapp_address == OAPP
        assert signer_adapter.wallet_address == WALLET

    def test_contract_is_bound_to_runner(self, signer_adapter):
        contract = signer_adapter.contract
        assert isinstance(contract, OAppOptionsType3Contract)
        assert contract.runner.chain_id == 42161
        assert contract.runner.from_address == WALLET
        assert contract.read_only is False

    def test_read_only_adapter(self, adapter):
        assert adapter.contract.read_only is True


@pytest.mark.asyncio
class TestReads:
    async def test_get_owner(self, adapter, monkeypatch):
        monkeypatch.setattr(
            OAppOptionsType3Contract, "owner", AsyncMock(return_value=WALLET)
        )
        assert await adapter.get_owner() == (True, WALLET)

    async def test_get_enforced_options_decodes(self, adapter, monkeypatch):
        enforced = AsyncMock(return_value=LZ_RECEIVE_200K.to_bytes())
        monkeypatch.setattr(OAppOptionsType3Contract, "enforced_options", enforced)

        ok, result = await adapter.get_enforced_options(30184, 1)

        assert ok is True
        assert result == {
            "eid": 30184,
            "chain_id": 8453,
            "msg_type": 1,
            "options": LZ_RECEIVE_200K.to_hex(),
            "decoded": [
                {"worker": "executor", "type": "lzReceive", "gas": 200_000, "value": 0}
            ],
        }
        enforced.assert_awaited_once_with(30184, 1)

    async def test_get_enforced_options_unset_slot(self, adapter, monkeypatch):
        monkeypatch.setattr(
            OAppOptionsType3Contract, "enforced_options", AsyncMock(return_value=b"")
        )
        ok, result = await adapter.get_enforced_options(40000, 2)
        assert ok is True
        assert result["options"] == "0x"
        assert result["decoded"] == []
        assert result["chain_id"] is None

    async def test_combine_options_validates_extra(self, adapter, monkeypatch):
        combine = AsyncMock()
        monkeypatch.setattr(OAppOptionsType3Contract, "combine_options", combine)

        ok, err = await adapter.combine_options(30184, 1, "0x0001")

        assert ok is False
        assert "Expected options type 3" in err
        combine.assert_not_awaited()

    async def test_combine_options_empty_extra(self, adapter, monkeypatch):
        combine = AsyncMock(return_value=LZ_RECEIVE_200K.to_bytes())
        monkeypatch.setattr(OAppOptionsType3Contract, "combine_options", combine)

        ok, result = await adapter.combine_options(30184, 1, "0x")

        assert ok is True
        assert result["options"] == LZ_RECEIVE_200K.to_hex()
        combine.assert_awaited_once_with(30184, 1, b"")

    async def test_contract_revert_is_reported(self, adapter, monkeypatch):
        iface = OAppOptionsType3Factory.create_interface()
        data = iface.encode_error_result("InvalidOptions", ["0x0001"])
        decoded = iface.parse_error(data)
        monkeypatch.setattr(
            OAppOptionsType3Contract,
            "combine_options",
            AsyncMock(
                side_effect=OAppContractError(
                    decoded.name, decoded.args, selector=decoded.selector, data=data
                )
            ),
        )

        ok, err = await adapter.combine_options(30184, 1, LZ_RECEIVE_200K.to_hex())

        assert ok is False
        assert err.startswith("InvalidOptions(")


@pytest.mark.asyncio
class TestWrites:
    async def test_set_enforced_options_requires_wallet(self, adapter):
        ok, err = await adapter.set_enforced_options(
            [{"eid": 30184, "msg_type": 1, "options": LZ_RECEIVE_200K.to_hex()}]
        )
        assert ok is False
        assert err == "wallet address not configured"

    async def test_requires_sign_callback(self):
        adapter = OAppOptionsAdapter(
            chain_id=42161, oapp_address=OAPP, wallet_address=WALLET
        )
        ok, err = await adapter.renounce_ownership()
        assert ok is False
        assert err == "sign_callback not configured"

    async def test_set_enforced_options(self, signer_adapter, monkeypatch):
        send = AsyncMock(return_value=TX_HASH)
        monkeypatch.setattr(OAppOptionsType3Contract, "set_enforced_options", send)

        ok, result = await signer_adapter.set_enforced_options(
            [
                {"eid": 30184, "msgType": 1, "options": LZ_RECEIVE_200K.to_hex()},
                (30101, 2, LZ_RECEIVE_200K.to_bytes()),
            ]
        )

        assert ok is True
        assert isinstance(result, OptionsUpdate)
        assert result.transaction_hash == TX_HASH
        assert result.transaction_chain_id == 42161
        assert result.oapp_address == OAPP
        assert result.explorer_url == f"https://arbiscan.io/tx/{TX_HASH}"
        assert result.params[1] == EnforcedOptionParam(
            eid=30101, msg_type=2, options=LZ_RECEIVE_200K.to_bytes()
        )
        send.assert_awaited_once_with(
            [
                (30184, 1, LZ_RECEIVE_200K.to_bytes()),
                (30101, 2, LZ_RECEIVE_200K.to_bytes()),
            ]
        )
        dumped = result.model_dump(mode="json")
        assert dumped["params"][0]["options"] == LZ_RECEIVE_200K.to_hex()

    @pytest.mark.parametrize(
        "params, message",
        [
            ([], "at least one enforced option"),
            (
                [{"eid": 30184, "msg_type": 1, "options": "0x0001"}],
                "Expected options type 3",
            ),
            ([{"eid": 30184, "msg_type": 2**16, "options": "0x0003"}], "65535"),
            ([{"eid": -1, "msg_type": 1, "options": "0x0003"}], "greater than or equal to 0"),
        ],
    )
    async def test_set_enforced_options_rejects_bad_params(
        self, signer_adapter, monkeypatch, params, message
    ):
        send = AsyncMock()
        monkeypatch.setattr(OAppOptionsType3Contract, "set_enforced_options", send)

        ok, err = await signer_adapter.set_enforced_options(params)

        assert ok is False
        assert message in err
        send.assert_not_awaited()

    async def test_transfer_ownership(self, signer_adapter, monkeypatch):
        transfer = AsyncMock(return_value=TX_HASH)
        monkeypatch.setattr(OAppOptionsType3Contract, "transfer_ownership", transfer)

        ok, result = await signer_adapter.transfer_ownership(NEW_OWNER.lower())

        assert ok is True
        assert isinstance(result, OwnershipUpdate)
        assert result.previous_owner == WALLET
        assert result.new_owner == NEW_OWNER
        transfer.assert_awaited_once_with(NEW_OWNER)

    async def test_transfer_to_zero_address_is_refused(self, signer_adapter, monkeypatch):
        transfer = AsyncMock()
        monkeypatch.setattr(OAppOptionsType3Contract, "transfer_ownership", transfer)

        ok, err = await signer_adapter.transfer_ownership(ZERO_ADDRESS)

        assert ok is False
        assert "renounce_ownership" in err
        transfer.assert_not_awaited()

    async def test_renounce_ownership(self, signer_adapter, monkeypatch):
        monkeypatch.setattr(
            OAppOptionsType3Contract,
            "renounce_ownership",
            AsyncMock(return_value=TX_HASH),
        )
        ok, result = await signer_adapter.renounce_ownership()
        assert ok is True
        assert result.new_owner == ZERO_ADDRESS


@pytest.mark.asyncio
class TestEvents:
    @pytest.fixture
    def iface(self):
        return OAppOptionsType3Factory.create_interface()

    def _patch_chain(self, monkeypatch, logs, *, head: int = 1_000):
        class _Eth:
            @property
            def block_number(self):
                return AsyncMock(return_value=head)()

        web3 = SimpleNamespace(eth=_Eth())

        @asynccontextmanager
        async def _ctx(chain_id: int):
            assert chain_id == 42161
            yield web3

        bounded = AsyncMock(return_value=logs)
        monkeypatch.setattr(oapp_adapter, "web3_from_chain_id", _ctx)
        monkeypatch.setattr(oapp_adapter, "get_logs_bounded", bounded)
        return bounded

    async def test_enforced_option_events(self, adapter, monkeypatch, iface):
        log = {
            **iface.encode_event_log(
                "EnforcedOptionSet",
                [[(30184, 1, LZ_RECEIVE_200K.to_bytes())]],
            ),
            "address": OAPP,
            "blockNumber": 900,
            "logIndex": 0,
            "transactionHash": TX_HASH,
        }
        bounded = self._patch_chain(monkeypatch, [log])

        ok, events = await adapter.get_enforced_option_events(from_block=100)

        assert ok is True
        assert events == [
            {
                "block_number": 900,
                "transaction_hash": TX_HASH,
                "enforced_options": [
                    {"eid": 30184, "msg_type": 1, "options": LZ_RECEIVE_200K.to_hex()}
                ],
            }
        ]
        kwargs = bounded.await_args.kwargs
        assert kwargs["from_block"] == 100
        assert kwargs["to_block"] == 1_000
        assert kwargs["address"] == OAPP
        assert kwargs["topics"] == [iface.event_topic("EnforcedOptionSet")]

    async def test_ownership_events(self, adapter, monkeypatch, iface):
        log = {
            **iface.encode_event_log(
                "OwnershipTransferred",
                {"previousOwner": ZERO_ADDRESS, "newOwner": WALLET},
            ),
            "blockNumber": 5,
            "transactionHash": TX_HASH,
        }
        bounded = self._patch_chain(monkeypatch, [log])

        ok, events = await adapter.get_ownership_events(to_block=10, max_logs=1)

        assert ok is True
        assert events == [
            {
                "block_number": 5,
                "transaction_hash": TX_HASH,
                "previous_owner": ZERO_ADDRESS,
                "new_owner": WALLET,
            }
        ]
        assert bounded.await_args.kwargs["to_block"] == 10
        assert bounded.await_args.kwargs["max_logs"] == 1
