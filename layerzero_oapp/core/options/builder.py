"""Build and read LayerZero v2 type-3 message options.

Type-3 options are what ``setEnforcedOptions`` stores and what
``combineOptions`` merges with caller-supplied extras::

    uint16 optionsType (= 3)
    repeated:
      executor: uint8 workerId=1 | uint16 size | uint8 optionType | params
      dvn:      uint8 workerId=2 | uint16 size | uint8 dvnIdx | uint8 optionType | params

``size`` counts everything after the size field.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from eth_abi.packed import encode_packed
from eth_utils import encode_hex, to_checksum_address
from hexbytes import HexBytes

from layerzero_oapp.core.constants.base import MAX_UINT16, MAX_UINT128
from layerzero_oapp.core.constants.layerzero import (
    DVN_OPTION_NAMES,
    DVN_OPTION_TYPE_PRECRIME,
    DVN_WORKER_ID,
    EXECUTOR_OPTION_NAMES,
    EXECUTOR_OPTION_TYPE_LZCOMPOSE,
    EXECUTOR_OPTION_TYPE_LZRECEIVE,
    EXECUTOR_OPTION_TYPE_NATIVE_DROP,
    EXECUTOR_OPTION_TYPE_ORDERED_EXECUTION,
    EXECUTOR_WORKER_ID,
    OPTIONS_TYPE_SIZE,
    TYPE_1,
    TYPE_2,
    TYPE_3,
)


class InvalidOptionsError(ValueError):
    """Options bytes are not a well-formed type-3 payload."""


def _as_bytes(options: bytes | str) -> bytes:
    if isinstance(options, (bytes, bytearray, memoryview)):
        return bytes(options)
    try:
        return bytes(HexBytes(options))
    except ValueError as exc:
        raise InvalidOptionsError(f"Options are not valid hex: {options!r}") from exc


def _check_uint(value: int, maximum: int, what: str) -> int:
    value = int(value)
    if not 0 <= value <= maximum:
        raise ValueError(f"{what} out of range: {value}")
    return value


def _to_bytes32(receiver: str | bytes) -> bytes:
    if isinstance(receiver, (bytes, bytearray)):
        raw = bytes(receiver)
    else:
        raw = bytes(HexBytes(receiver))
    if len(raw) > 32:
        raise ValueError(f"Receiver does not fit in bytes32: {len(raw)} bytes")
    return raw.rjust(32, b"\x00")


def _uint(raw: bytes) -> int:
    return int.from_bytes(raw, "big")


@dataclass(frozen=True)
class WorkerOption:
    worker_id: int
    option_type: int
    params: bytes
    dvn_index: int | None = None

    @property
    def name(self) -> str:
        names = (
            EXECUTOR_OPTION_NAMES
            if self.worker_id == EXECUTOR_WORKER_ID
            else DVN_OPTION_NAMES
        )
        return names.get(self.option_type, f"unknown({self.option_type})")

    def encode(self) -> bytes:
        if self.worker_id == EXECUTOR_WORKER_ID:
            return encode_packed(
                ["uint8", "uint16", "uint8"],
                [self.worker_id, len(self.params) + 1, self.option_type],
            ) + self.params
        return encode_packed(
            ["uint8", "uint16", "uint8", "uint8"],
            [self.worker_id, len(self.params) + 2, self.dvn_index or 0, self.option_type],
        ) + self.params

    def decoded(self) -> dict[str, Any]:
        """Field view of ``params`` for the known option types."""
        p = self.params
        is_executor = self.worker_id == EXECUTOR_WORKER_ID
        out: dict[str, Any] = {
            "worker": "executor" if is_executor else "dvn",
            "type": self.name,
        }
        if self.worker_id == DVN_WORKER_ID:
            out["dvn_index"] = self.dvn_index
            if self.option_type != DVN_OPTION_TYPE_PRECRIME:
                out["params"] = encode_hex(p)
            return out

        if self.option_type == EXECUTOR_OPTION_TYPE_LZRECEIVE:
            if len(p) not in (16, 32):
                raise InvalidOptionsError(f"lzReceive option has {len(p)} bytes")
            out["gas"] = _uint(p[:16])
            out["value"] = _uint(p[16:32]) if len(p) == 32 else 0
        elif self.option_type == EXECUTOR_OPTION_TYPE_NATIVE_DROP:
            if len(p) != 48:
                raise InvalidOptionsError(f"nativeDrop option has {len(p)} bytes")
            out["amount"] = _uint(p[:16])
            receiver = p[16:48]
            out["receiver"] = (
                to_checksum_address(receiver[12:])
                if receiver[:12] == b"\x00" * 12
                else encode_hex(receiver)
            )
        elif self.option_type == EXECUTOR_OPTION_TYPE_LZCOMPOSE:
            if len(p) not in (18, 34):
                raise InvalidOptionsError(f"lzCompose option has {len(p)} bytes")
            out["index"] = _uint(p[:2])
            out["gas"] = _uint(p[2:18])
            out["value"] = _uint(p[18:34]) if len(p) == 34 else 0
        elif self.option_type == EXECUTOR_OPTION_TYPE_ORDERED_EXECUTION:
            if p:
                raise InvalidOptionsError("orderedExecution option carries no params")
        else:
            out["params"] = encode_hex(p)
        return out


def options_type(options: bytes | str) -> int:
    raw = _as_bytes(options)
    if len(raw) < OPTIONS_TYPE_SIZE:
        raise InvalidOptionsError(f"Options too short for a type header: {encode_hex(raw)}")
    return _uint(raw[:OPTIONS_TYPE_SIZE])


def assert_type3(options: bytes | str) -> bytes:
    """Raise ``InvalidOptionsError`` unless ``options`` carries a type-3 header."""
    raw = _as_bytes(options)
    kind = options_type(raw)
    if kind != TYPE_3:
        label = f"legacy type {kind}" if kind in (TYPE_1, TYPE_2) else str(kind)
        raise InvalidOptionsError(
            f"Expected options type {TYPE_3}, got {label}: {encode_hex(raw)}"
        )
    return raw


def decode_options(options: bytes | str) -> list[WorkerOption]:
    """Split type-3 options into worker options, in wire order.

    Empty input (an unset ``enforcedOptions`` slot) decodes to ``[]``.
    """
    raw = _as_bytes(options)
    if not raw:
        return []
    assert_type3(raw)

    result: list[WorkerOption] = []
    cursor = OPTIONS_TYPE_SIZE
    while cursor < len(raw):
        if cursor + 3 > len(raw):
            raise InvalidOptionsError(f"Truncated option header at byte {cursor}")
        worker_id = raw[cursor]
        size = _uint(raw[cursor + 1 : cursor + 3])
        body_start = cursor + 3
        body_end = body_start + size
        if body_end > len(raw):
            raise InvalidOptionsError(
                f"Option at byte {cursor} declares {size} bytes, only {len(raw) - body_start} left"
            )
        body = raw[body_start:body_end]

        if worker_id == EXECUTOR_WORKER_ID:
            if size < 1:
                raise InvalidOptionsError(f"Empty executor option at byte {cursor}")
            result.append(WorkerOption(worker_id, body[0], body[1:]))
        elif worker_id == DVN_WORKER_ID:
            if size < 2:
                raise InvalidOptionsError(f"Short DVN option at byte {cursor}")
            result.append(WorkerOption(worker_id, body[1], body[2:], dvn_index=body[0]))
        else:
            raise InvalidOptionsError(f"Unknown worker id {worker_id} at byte {cursor}")
        cursor = body_end
    return result


def describe_options(options: bytes | str) -> list[dict[str, Any]]:
    return [opt.decoded() for opt in decode_options(options)]


class OptionsBuilder:
    """Fluent builder mirroring LayerZero's ``OptionsBuilder`` library.

    >>> OptionsBuilder.new_options().add_executor_lz_receive_option(200_000).to_hex()
    '0x00030100110100000000000000000000000000030d40'
    """

    def __init__(self, options: list[WorkerOption] | None = None):
        self._options: list[WorkerOption] = list(options or [])

    @classmethod
    def new_options(cls) -> OptionsBuilder:
        return cls()

    @classmethod
    def from_options(cls, options: bytes | str) -> OptionsBuilder:
        return cls(decode_options(options))

    @property
    def options(self) -> list[WorkerOption]:
        return list(self._options)

    def _add(self, option: WorkerOption) -> OptionsBuilder:
        self._options.append(option)
        return self

    def add_executor_lz_receive_option(self, gas: int, value: int = 0) -> OptionsBuilder:
        gas = _check_uint(gas, MAX_UINT128, "gas")
        value = _check_uint(value, MAX_UINT128, "value")
        params = encode_packed(["uint128"], [gas])
        if value > 0:
            params += encode_packed(["uint128"], [value])
        return self._add(WorkerOption(EXECUTOR_WORKER_ID, EXECUTOR_OPTION_TYPE_LZRECEIVE, params))

    def add_executor_native_drop_option(
        self, amount: int, receiver: str | bytes
    ) -> OptionsBuilder:
        amount = _check_uint(amount, MAX_UINT128, "amount")
        params = encode_packed(["uint128"], [amount]) + _to_bytes32(receiver)
        return self._add(
            WorkerOption(EXECUTOR_WORKER_ID, EXECUTOR_OPTION_TYPE_NATIVE_DROP, params)
        )

    def add_executor_compose_option(
        self, index: int, gas: int, value: int = 0
    ) -> OptionsBuilder:
        index = _check_uint(index, MAX_UINT16, "index")
        gas = _check_uint(gas, MAX_UINT128, "gas")
        value = _check_uint(value, MAX_UINT128, "value")
        params = encode_packed(["uint16", "uint128"], [index, gas])
        if value > 0:
            params += encode_packed(["uint128"], [value])
        return self._add(WorkerOption(EXECUTOR_WORKER_ID, EXECUTOR_OPTION_TYPE_LZCOMPOSE, params))

    def add_executor_ordered_execution_option(self) -> OptionsBuilder:
        return self._add(
            WorkerOption(EXECUTOR_WORKER_ID, EXECUTOR_OPTION_TYPE_ORDERED_EXECUTION, b"")
        )

    def add_dvn_pre_crime_option(self, dvn_index: int) -> OptionsBuilder:
        dvn_index = _check_uint(dvn_index, 255, "dvn_index")
        return self._add(
            WorkerOption(DVN_WORKER_ID, DVN_OPTION_TYPE_PRECRIME, b"", dvn_index=dvn_index)
        )

    def to_bytes(self) -> bytes:
        header = encode_packed(["uint16"], [TYPE_3])
        return header + b"".join(opt.encode() for opt in self._options)

    def to_hex(self) -> str:
        return encode_hex(self.to_bytes())

    def __len__(self) -> int:
        return len(self._options)
