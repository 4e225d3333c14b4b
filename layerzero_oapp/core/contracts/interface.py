"""Offline encoder/decoder for a single contract interface.

``ContractInterface`` wraps an address-less web3 contract built from a copy
of the ABI. Calldata goes through ``encode_abi`` / ``decode_function_input``,
event logs through ``get_event_data`` and results / revert bodies through
``w3.codec``. Decoded values are handed back keyed by ABI names with
checksummed addresses. It never touches the network.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import encode_hex, function_abi_to_4byte_selector, to_checksum_address
from eth_utils.abi import collapse_if_tuple
from hexbytes import HexBytes
from web3 import Web3
from web3._utils.events import event_abi_to_log_topic, get_event_data
from web3.exceptions import Web3Exception

from layerzero_oapp.core.contracts.errors import MalformedDataError, UnknownMemberError
from layerzero_oapp.core.utils.abi_caster import cast_args

SELECTOR_SIZE = 4

_DECODE_ERRORS = (DecodingError, Web3Exception)
_ENCODE_ERRORS = (EncodingError, Web3Exception)

# get_event_data copies these off the log entry.
_LOG_DEFAULTS = {
    "address": None,
    "blockHash": None,
    "blockNumber": None,
    "logIndex": None,
    "transactionHash": None,
    "transactionIndex": None,
}


@dataclass(frozen=True)
class DecodedCall:
    name: str
    selector: str
    args: dict[str, Any]


@dataclass(frozen=True)
class DecodedError:
    name: str
    selector: str
    args: dict[str, Any]
    data: str


@dataclass(frozen=True)
class DecodedEvent:
    name: str
    topic: str
    args: dict[str, Any]
    address: str | None = None
    block_number: int | None = None
    log_index: int | None = None
    transaction_hash: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)


def member_signature(entry: Mapping[str, Any]) -> str:
    types = ",".join(collapse_if_tuple(dict(p)) for p in entry.get("inputs", []))
    return f"{entry['name']}({types})"


def _types(params: Sequence[Mapping[str, Any]]) -> list[str]:
    return [collapse_if_tuple(dict(p)) for p in params]


def _as_bytes(data: Any) -> bytes:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        try:
            return bytes(HexBytes(data))
        except ValueError as exc:
            raise MalformedDataError(f"Not a hex string: {data!r}") from exc
    raise MalformedDataError(f"Expected bytes or hex string, got {type(data).__name__}")


def _normalize(value: Any, param: Mapping[str, Any]) -> Any:
    """web3 output -> plain Python: struct dicts, lists, bytes, checksum addresses."""
    t = str(param["type"])
    if t.endswith("]"):
        element = {**param, "type": t[: t.rindex("[")]}
        return [_normalize(v, element) for v in value]
    if t == "tuple":
        components = param.get("components", [])
        if isinstance(value, Mapping):
            value = [value[c["name"]] for c in components]
        return {
            (c.get("name") or str(i)): _normalize(v, c)
            for i, (v, c) in enumerate(zip(value, components, strict=True))
        }
    if t == "address":
        return to_checksum_address(value)
    if t.startswith("bytes"):
        return bytes(value)
    return value


def _named(values: Sequence[Any], params: Sequence[Mapping[str, Any]]) -> dict[str, Any]:
    return {
        (p.get("name") or str(i)): _normalize(v, p)
        for i, (v, p) in enumerate(zip(values, params, strict=True))
    }


def _ordered_args(
    args: Sequence[Any] | Mapping[str, Any] | None,
    params: Sequence[Mapping[str, Any]],
) -> list[Any]:
    if args is None:
        return []
    if isinstance(args, Mapping):
        missing = [p.get("name") for p in params if p.get("name") not in args]
        if missing:
            raise ValueError(f"Missing arguments: {', '.join(map(str, missing))}")
        return [args[p["name"]] for p in params]
    return list(args)


class ContractInterface:
    """Encoder/decoder and selector table for one contract ABI."""

    def __init__(self, abi: Sequence[Mapping[str, Any]]):
        self._abi: list[dict[str, Any]] = copy.deepcopy([dict(e) for e in abi])
        self._w3 = Web3()
        self._contract = self._w3.eth.contract(abi=self._abi)
        self.functions: dict[str, dict[str, Any]] = {}
        self.events: dict[str, dict[str, Any]] = {}
        self.errors: dict[str, dict[str, Any]] = {}
        self._by_selector: dict[bytes, dict[str, Any]] = {}
        self._by_topic: dict[bytes, dict[str, Any]] = {}

        for entry in self._abi:
            kind = entry.get("type", "function")
            if kind == "function":
                self.functions[entry["name"]] = entry
                self._by_selector[function_abi_to_4byte_selector(entry)] = entry
            elif kind == "error":
                self.errors[entry["name"]] = entry
                self._by_selector[function_abi_to_4byte_selector(entry)] = entry
            elif kind == "event":
                self.events[entry["name"]] = entry
                if not entry.get("anonymous", False):
                    self._by_topic[bytes(event_abi_to_log_topic(entry))] = entry

    @property
    def abi(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._abi)

    def format_json(self, *, indent: int | None = None) -> str:
        return json.dumps(self._abi, indent=indent)

    # ---- lookups -------------------------------------------------------

    def _member(self, name: str) -> dict[str, Any]:
        for table in (self.functions, self.errors, self.events):
            if name in table:
                return table[name]
        raise UnknownMemberError("member", name)

    def get_function(self, name: str) -> dict[str, Any]:
        try:
            return self.functions[name]
        except KeyError:
            raise UnknownMemberError("function", name) from None

    def get_event(self, name: str) -> dict[str, Any]:
        try:
            return self.events[name]
        except KeyError:
            raise UnknownMemberError("event", name) from None

    def get_error(self, name: str) -> dict[str, Any]:
        try:
            return self.errors[name]
        except KeyError:
            raise UnknownMemberError("error", name) from None

    def signature(self, name: str) -> str:
        return member_signature(self._member(name))

    def selector(self, name: str) -> str:
        """4-byte selector of a function or error as ``0x``-prefixed hex."""
        entry = self._member(name)
        if entry.get("type") == "event":
            raise ValueError(f"{name} is an event; use event_topic()")
        return encode_hex(function_abi_to_4byte_selector(entry))

    def event_topic(self, name: str) -> str:
        return encode_hex(event_abi_to_log_topic(self.get_event(name)))

    def selectors(self) -> dict[str, str]:
        """Every member's selector (functions, errors) or topic (events), in ABI order."""
        out: dict[str, str] = {}
        for entry in self._abi:
            name = entry.get("name")
            if not name:
                continue
            if entry.get("type") == "event":
                out[member_signature(entry)] = self.event_topic(name)
            elif entry.get("type") in ("function", "error"):
                out[member_signature(entry)] = self.selector(name)
        return out

    # ---- codec ---------------------------------------------------------

    def _encode(self, params: Sequence[Mapping[str, Any]], values: list[Any]) -> bytes:
        try:
            return self._w3.codec.encode(_types(params), cast_args(values, list(params)))
        except _ENCODE_ERRORS as exc:
            raise ValueError(str(exc)) from exc

    def _decode(self, params: Sequence[Mapping[str, Any]], data: bytes) -> tuple:
        try:
            return tuple(self._w3.codec.decode(_types(params), data))
        except _DECODE_ERRORS as exc:
            raise MalformedDataError(str(exc)) from exc

    # ---- functions -----------------------------------------------------

    def encode_function_data(
        self, name: str, args: Sequence[Any] | Mapping[str, Any] | None = None
    ) -> str:
        params = self.get_function(name).get("inputs", [])
        values = cast_args(_ordered_args(args, params), list(params))
        try:
            return self._contract.encode_abi(name, args=values)
        except _ENCODE_ERRORS as exc:
            raise ValueError(f"Failed to encode {name}: {exc}") from exc

    def decode_function_data(self, name: str, data: Any) -> dict[str, Any]:
        entry = self.get_function(name)
        raw = _as_bytes(data)
        selector = function_abi_to_4byte_selector(entry)
        if raw[:SELECTOR_SIZE] != selector:
            raise MalformedDataError(
                f"Calldata selector {encode_hex(raw[:SELECTOR_SIZE])} does not match {name} ({encode_hex(selector)})"
            )
        try:
            _fn, decoded = self._contract.decode_function_input(HexBytes(raw))
        except _DECODE_ERRORS as exc:
            raise MalformedDataError(str(exc)) from exc
        params = entry.get("inputs", [])
        return _named([decoded[p["name"]] for p in params], params)

    def parse_transaction(self, data: Any) -> DecodedCall:
        raw = _as_bytes(data)
        entry = self._by_selector.get(raw[:SELECTOR_SIZE])
        if entry is None or entry.get("type") != "function":
            raise UnknownMemberError("function selector", encode_hex(raw[:SELECTOR_SIZE]))
        return DecodedCall(
            name=entry["name"],
            selector=encode_hex(raw[:SELECTOR_SIZE]),
            args=self.decode_function_data(entry["name"], raw),
        )

    def encode_function_result(
        self, name: str, values: Sequence[Any] | None = None
    ) -> str:
        outputs = self.get_function(name).get("outputs", [])
        return encode_hex(self._encode(outputs, list(values or [])))

    def decode_function_result(self, name: str, data: Any) -> tuple:
        outputs = self.get_function(name).get("outputs", [])
        decoded = self._decode(outputs, _as_bytes(data))
        return tuple(_normalize(v, p) for v, p in zip(decoded, outputs, strict=True))

    # ---- errors --------------------------------------------------------

    def encode_error_result(
        self, name: str, args: Sequence[Any] | Mapping[str, Any] | None = None
    ) -> str:
        entry = self.get_error(name)
        params = entry.get("inputs", [])
        body = self._encode(params, _ordered_args(args, params))
        return encode_hex(function_abi_to_4byte_selector(entry) + body)

    def parse_error(self, data: Any) -> DecodedError | None:
        """Decode revert data into a declared custom error.

        Returns ``None`` for empty data or a selector this ABI does not
        declare (e.g. ``Error(string)`` or another contract's error).
        """
        raw = _as_bytes(data)
        if len(raw) < SELECTOR_SIZE:
            return None
        entry = self._by_selector.get(raw[:SELECTOR_SIZE])
        if entry is None or entry.get("type") != "error":
            return None
        params = entry.get("inputs", [])
        return DecodedError(
            name=entry["name"],
            selector=encode_hex(raw[:SELECTOR_SIZE]),
            args=_named(self._decode(params, raw[SELECTOR_SIZE:]), params),
            data=encode_hex(raw),
        )

    # ---- events --------------------------------------------------------

    def encode_event_log(
        self, name: str, args: Sequence[Any] | Mapping[str, Any]
    ) -> dict[str, Any]:
        entry = self.get_event(name)
        params = entry.get("inputs", [])
        values = cast_args(_ordered_args(args, params), list(params))

        topics: list[str] = []
        if not entry.get("anonymous", False):
            topics.append(encode_hex(event_abi_to_log_topic(entry)))
        data_params: list[Mapping[str, Any]] = []
        data_values: list[Any] = []
        for param, value in zip(params, values, strict=True):
            if param.get("indexed"):
                topics.append(encode_hex(self._w3.codec.encode(_types([param]), [value])))
            else:
                data_params.append(param)
                data_values.append(value)
        data = self._w3.codec.encode(_types(data_params), data_values)
        return {"topics": topics, "data": encode_hex(data)}

    def parse_log(self, log: Mapping[str, Any]) -> DecodedEvent:
        topics = [HexBytes(_as_bytes(t)) for t in log.get("topics") or []]
        if not topics:
            raise MalformedDataError("Log has no topics")
        entry = self._by_topic.get(bytes(topics[0]))
        if entry is None:
            raise UnknownMemberError("event topic", encode_hex(topics[0]))

        params = entry.get("inputs", [])
        indexed = [p for p in params if p.get("indexed")]
        if len(topics) - 1 != len(indexed):
            raise MalformedDataError(
                f"{entry['name']} expects {len(indexed)} indexed topics, got {len(topics) - 1}"
            )

        log_entry = {
            **_LOG_DEFAULTS,
            **log,
            "topics": topics,
            "data": HexBytes(_as_bytes(log.get("data") or b"")),
        }
        try:
            event = get_event_data(self._w3.codec, entry, log_entry)
        except _DECODE_ERRORS as exc:
            raise MalformedDataError(str(exc)) from exc
        args = _named([event["args"][p["name"]] for p in params], params)

        tx_hash = log.get("transactionHash")
        block_number = log.get("blockNumber")
        log_index = log.get("logIndex")
        return DecodedEvent(
            name=entry["name"],
            topic=encode_hex(topics[0]),
            args=args,
            address=to_checksum_address(log["address"]) if log.get("address") else None,
            block_number=int(block_number) if block_number is not None else None,
            log_index=int(log_index) if log_index is not None else None,
            transaction_hash=encode_hex(_as_bytes(tx_hash)) if tx_hash else None,
            raw=dict(log),
        )
