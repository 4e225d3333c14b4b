"""Tests for the layerzero-oapp command line."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest
from click.testing import CliRunner

from layerzero_oapp.adapters.oapp_options_adapter.adapter import OAppOptionsAdapter
from layerzero_oapp.cli import cli
from layerzero_oapp.core.constants.oapp_options_type3_abi import OAPP_OPTIONS_TYPE3_ABI

LZ_RECEIVE_200K = "0x00030100110100000000000000000000000000030d40"
DEV_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEV_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


# --- offline commands ---


def test_abi_prints_declared_abi(runner):
    result = runner.invoke(cli, ["abi"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == OAPP_OPTIONS_TYPE3_ABI


def test_selectors(runner):
    result = runner.invoke(cli, ["selectors"])
    assert result.exit_code == 0, result.output
    table = json.loads(result.output)
    assert table["owner()"] == "0x8da5cb5b"
    assert table["transferOwnership(address)"] == "0xf2fde38b"
    assert "setEnforcedOptions((uint32,uint16,bytes)[])" in table


def test_build_options(runner):
    result = runner.invoke(cli, ["build-options", "--lz-receive-gas", "200000"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["options"] == LZ_RECEIVE_200K
    assert payload["decoded"] == [
        {"worker": "executor", "type": "lzReceive", "gas": 200000, "value": 0}
    ]


def test_build_options_multiple_workers(runner):
    result = runner.invoke(
        cli,
        [
            "build-options",
            "--compose",
            "0:50000",
            "--ordered",
            "--precrime",
            "1",
        ],
    )
    assert result.exit_code == 0, result.output
    types = [o["type"] for o in json.loads(result.output)["decoded"]]
    assert types == ["lzCompose", "orderedExecution", "preCrime"]


def test_build_options_rejects_malformed_pair(runner):
    result = runner.invoke(cli, ["build-options", "--native-drop", "100"])
    assert result.exit_code != 0
    assert "Malformed --native-drop" in result.output


def test_decode_options(runner):
    result = runner.invoke(cli, ["decode-options", LZ_RECEIVE_200K])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)[0]["gas"] == 200000


def test_decode_options_invalid(runner):
    result = runner.invoke(cli, ["decode-options", "0x0002"])
    assert result.exit_code == 1
    assert json.loads(result.output)["ok"] is False


def test_eids(runner):
    result = runner.invoke(cli, ["eids"])
    assert result.exit_code == 0, result.output
    table = json.loads(result.output)
    assert table["arbitrum"] == {"chain_id": 42161, "eid": 30110}
    assert table["base"] == {"chain_id": 8453, "eid": 30184}


# --- on-chain commands (adapter mocked) ---


def test_owner_uses_configured_oapp(runner, monkeypatch):
    get_owner = AsyncMock(return_value=(True, DEV_ADDRESS))
    monkeypatch.setattr(OAppOptionsAdapter, "get_owner", get_owner)

    result = runner.invoke(cli, ["owner", "--chain", "arbitrum"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"ok": True, "result": DEV_ADDRESS}


def test_owner_without_address(runner):
    result = runner.invoke(cli, ["owner", "--chain", "base"])
    assert result.exit_code != 0
    assert "no oapp address configured for chain 8453" in result.output


def test_unknown_chain(runner):
    result = runner.invoke(cli, ["owner", "--chain", "solana"])
    assert result.exit_code != 0
    assert "Unknown chain: solana" in result.output


def test_enforced_options_accepts_chain_code_for_eid(runner, monkeypatch):
    get_enforced = AsyncMock(return_value=(True, {"eid": 30184, "options": "0x"}))
    monkeypatch.setattr(OAppOptionsAdapter, "get_enforced_options", get_enforced)

    result = runner.invoke(
        cli, ["enforced-options", "--chain", "42161", "--eid", "base", "--msg-type", "2"]
    )

    assert result.exit_code == 0, result.output
    get_enforced.assert_awaited_once_with(30184, 2)


def test_failed_read_exits_non_zero(runner, monkeypatch):
    monkeypatch.setattr(
        OAppOptionsAdapter,
        "get_enforced_options",
        AsyncMock(return_value=(False, "boom")),
    )
    result = runner.invoke(cli, ["enforced-options", "--chain", "arbitrum", "--eid", "30184"])
    assert result.exit_code == 1
    assert json.loads(result.output) == {"ok": False, "error": "boom"}


def test_set_enforced_options_needs_key(runner, monkeypatch):
    monkeypatch.delenv("LAYERZERO_OAPP_PRIVATE_KEY", raising=False)
    result = runner.invoke(
        cli,
        [
            "set-enforced-options",
            "--chain",
            "arbitrum",
            "--eid",
            "30184",
            "--options",
            LZ_RECEIVE_200K,
        ],
    )
    assert result.exit_code != 0
    assert "No signing key" in result.output


def test_set_enforced_options_with_env_key(runner, monkeypatch):
    monkeypatch.setenv("LAYERZERO_OAPP_PRIVATE_KEY", DEV_KEY)
    captured: dict = {}

    async def _set(self, params):
        captured["wallet"] = self.wallet_address
        captured["params"] = params
        return True, {"transaction_hash": "0x" + "ab" * 32}

    monkeypatch.setattr(OAppOptionsAdapter, "set_enforced_options", _set)

    result = runner.invoke(
        cli,
        [
            "set-enforced-options",
            "--chain",
            "arbitrum",
            "--eid",
            "base",
            "--options",
            LZ_RECEIVE_200K,
        ],
    )

    assert result.exit_code == 0, result.output
    assert captured["wallet"] == DEV_ADDRESS
    assert captured["params"] == [
        {"eid": 30184, "msg_type": 1, "options": LZ_RECEIVE_200K}
    ]


def test_msg_type_help_names_both_message_types(runner):
    result = runner.invoke(cli, ["enforced-options", "--help"], terminal_width=200)
    assert result.exit_code == 0, result.output
    assert "1=send, 2=send-and-call" in result.output
