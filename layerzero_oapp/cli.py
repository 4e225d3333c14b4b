from __future__ import annotations

import asyncio
import json
import sys
from typing import Any

import click
from eth_account import Account
from loguru import logger

from layerzero_oapp.adapters.oapp_options_adapter.adapter import (
    DEFAULT_MAX_LOGS,
    OAppOptionsAdapter,
)
from layerzero_oapp.core.config import get_oapp_address, load_config, load_private_key
from layerzero_oapp.core.constants.chains import (
    CHAIN_CODE_TO_ID,
    CHAIN_ID_TO_CODE,
    CHAIN_ID_TO_LZ_EID,
    lz_eid_for_chain,
)
from layerzero_oapp.core.constants.layerzero import MSG_TYPE_SEND, MSG_TYPE_SEND_AND_CALL
from layerzero_oapp.core.contracts.oapp_options_type3 import OAppOptionsType3Factory
from layerzero_oapp.core.options.builder import (
    InvalidOptionsError,
    OptionsBuilder,
    describe_options,
)
from layerzero_oapp.core.utils.transaction import local_sign_callback


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _echo_status(ok: bool, result: Any) -> None:
    if hasattr(result, "model_dump"):
        result = result.model_dump(mode="json")
    if ok:
        _echo_json({"ok": True, "result": result})
    else:
        _echo_json({"ok": False, "error": result})
        sys.exit(1)


def _parse_chain(value: str) -> int:
    if value.isdigit():
        return int(value)
    chain_id = CHAIN_CODE_TO_ID.get(value.lower())
    if chain_id is None:
        raise click.BadParameter(f"Unknown chain: {value}")
    return chain_id


def _parse_eid(value: str) -> int:
    if value.isdigit():
        return int(value)
    try:
        return lz_eid_for_chain(_parse_chain(value))
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


def _build_adapter(chain: str, address: str | None, *, signer: bool = False) -> OAppOptionsAdapter:
    chain_id = _parse_chain(chain)
    oapp_address = address or get_oapp_address(chain_id)
    if not oapp_address:
        raise click.UsageError(
            f"No --address given and no oapp address configured for chain {chain_id}"
        )
    sign_callback = None
    wallet_address = None
    if signer:
        private_key = load_private_key()
        if not private_key:
            raise click.UsageError(
                "No signing key: set wallet_private_key in config.json or LAYERZERO_OAPP_PRIVATE_KEY"
            )
        wallet_address = Account.from_key(private_key).address
        sign_callback = local_sign_callback(private_key)
    return OAppOptionsAdapter(
        chain_id=chain_id,
        oapp_address=oapp_address,
        sign_callback=sign_callback,
        wallet_address=wallet_address,
    )


def _split_ints(value: str, expected: tuple[int, ...], what: str) -> list[str]:
    parts = value.split(":")
    if len(parts) not in expected:
        raise click.BadParameter(f"Malformed {what}: {value}")
    return parts


chain_option = click.option(
    "--chain", "chain", required=True, help="Chain id or code (e.g. 42161, arbitrum)."
)
address_option = click.option(
    "--address", default=None, help="OApp address (defaults to config `oapp`)."
)
eid_option = click.option(
    "--eid",
    required=True,
    callback=lambda _ctx, _param, value: _parse_eid(value),
    help="LayerZero endpoint id or chain code (e.g. 30184, base).",
)
msg_type_option = click.option(
    "--msg-type",
    type=int,
    default=MSG_TYPE_SEND,
    show_default=True,
    help=f"OApp message type ({MSG_TYPE_SEND}=send, {MSG_TYPE_SEND_AND_CALL}=send-and-call).",
)


@click.group(name="layerzero-oapp", help="LayerZero OAppOptionsType3 tooling.")
@click.option("--config", "config_path", default=None, help="Path to config.json.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
)
def cli(config_path: str | None, log_level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=str(log_level).upper())
    if config_path:
        load_config(config_path, require_exists=True)


@cli.command(name="abi", help="Print the OAppOptionsType3 ABI.")
@click.option("--indent", type=int, default=2, show_default=True)
def abi_cmd(indent: int) -> None:
    click.echo(OAppOptionsType3Factory.create_interface().format_json(indent=indent))


@cli.command(name="selectors", help="Print function/error selectors and event topics.")
def selectors_cmd() -> None:
    _echo_json(OAppOptionsType3Factory.create_interface().selectors())


@cli.command(name="build-options", help="Build type-3 options bytes.")
@click.option("--lz-receive-gas", type=int, default=None)
@click.option("--lz-receive-value", type=int, default=0, show_default=True)
@click.option(
    "--native-drop", multiple=True, help="AMOUNT:RECEIVER, may be repeated."
)
@click.option(
    "--compose", multiple=True, help="INDEX:GAS[:VALUE], may be repeated."
)
@click.option("--ordered/--no-ordered", default=False, show_default=True)
@click.option("--precrime", type=int, multiple=True, help="DVN index, may be repeated.")
def build_options_cmd(
    lz_receive_gas: int | None,
    lz_receive_value: int,
    native_drop: tuple[str, ...],
    compose: tuple[str, ...],
    ordered: bool,
    precrime: tuple[int, ...],
) -> None:
    builder = OptionsBuilder.new_options()
    try:
        if lz_receive_gas is not None:
            builder.add_executor_lz_receive_option(lz_receive_gas, lz_receive_value)
        for item in native_drop:
            amount, receiver = _split_ints(item, (2,), "--native-drop")
            builder.add_executor_native_drop_option(int(amount), receiver)
        for item in compose:
            parts = _split_ints(item, (2, 3), "--compose")
            builder.add_executor_compose_option(*(int(p) for p in parts))
        if ordered:
            builder.add_executor_ordered_execution_option()
        for dvn_index in precrime:
            builder.add_dvn_pre_crime_option(dvn_index)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    _echo_json({"options": builder.to_hex(), "decoded": describe_options(builder.to_bytes())})


@cli.command(name="decode-options", help="Decode type-3 options bytes.")
@click.argument("options")
def decode_options_cmd(options: str) -> None:
    try:
        _echo_json(describe_options(options))
    except InvalidOptionsError as exc:
        _echo_json({"ok": False, "error": str(exc)})
        sys.exit(1)


@cli.command(name="owner", help="Read owner().")
@chain_option
@address_option
def owner_cmd(chain: str, address: str | None) -> None:
    adapter = _build_adapter(chain, address)
    _echo_status(*asyncio.run(adapter.get_owner()))


@cli.command(name="enforced-options", help="Read enforcedOptions(eid, msgType).")
@chain_option
@address_option
@eid_option
@msg_type_option
def enforced_options_cmd(chain: str, address: str | None, eid: int, msg_type: int) -> None:
    adapter = _build_adapter(chain, address)
    _echo_status(*asyncio.run(adapter.get_enforced_options(eid, msg_type)))


@cli.command(name="combine-options", help="Call combineOptions(eid, msgType, extra).")
@chain_option
@address_option
@eid_option
@msg_type_option
@click.option("--extra-options", default="0x", show_default=True)
def combine_options_cmd(
    chain: str, address: str | None, eid: int, msg_type: int, extra_options: str
) -> None:
    adapter = _build_adapter(chain, address)
    _echo_status(*asyncio.run(adapter.combine_options(eid, msg_type, extra_options)))


@cli.command(name="set-enforced-options", help="Send setEnforcedOptions for one eid/msgType.")
@chain_option
@address_option
@eid_option
@msg_type_option
@click.option("--options", "options_hex", required=True)
def set_enforced_options_cmd(
    chain: str, address: str | None, eid: int, msg_type: int, options_hex: str
) -> None:
    adapter = _build_adapter(chain, address, signer=True)
    params = [{"eid": eid, "msg_type": msg_type, "options": options_hex}]
    _echo_status(*asyncio.run(adapter.set_enforced_options(params)))


@cli.command(name="transfer-ownership", help="Send transferOwnership(newOwner).")
@chain_option
@address_option
@click.option("--new-owner", required=True)
def transfer_ownership_cmd(chain: str, address: str | None, new_owner: str) -> None:
    adapter = _build_adapter(chain, address, signer=True)
    _echo_status(*asyncio.run(adapter.transfer_ownership(new_owner)))


@cli.command(name="renounce-ownership", help="Send renounceOwnership().")
@chain_option
@address_option
@click.confirmation_option(prompt="Renouncing ownership is irreversible. Continue?")
def renounce_ownership_cmd(chain: str, address: str | None) -> None:
    adapter = _build_adapter(chain, address, signer=True)
    _echo_status(*asyncio.run(adapter.renounce_ownership()))


@cli.command(name="events", help="List EnforcedOptionSet or OwnershipTransferred logs.")
@chain_option
@address_option
@click.option(
    "--kind",
    type=click.Choice(["enforced-options", "ownership"]),
    default="enforced-options",
    show_default=True,
)
@click.option("--from-block", type=int, default=0, show_default=True)
@click.option("--to-block", type=int, default=None)
@click.option("--max-logs", type=int, default=DEFAULT_MAX_LOGS, show_default=True)
def events_cmd(
    chain: str,
    address: str | None,
    kind: str,
    from_block: int,
    to_block: int | None,
    max_logs: int,
) -> None:
    adapter = _build_adapter(chain, address)
    reader = (
        adapter.get_enforced_option_events
        if kind == "enforced-options"
        else adapter.get_ownership_events
    )
    _echo_status(
        *asyncio.run(reader(from_block=from_block, to_block=to_block, max_logs=max_logs))
    )


@cli.command(name="eids", help="Print known chain -> LayerZero endpoint ids.")
def eids_cmd() -> None:
    _echo_json(
        {
            CHAIN_ID_TO_CODE.get(chain_id, str(chain_id)): {
                "chain_id": chain_id,
                "eid": eid,
            }
            for chain_id, eid in CHAIN_ID_TO_LZ_EID.items()
        }
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
