"""Casting of loosely-typed Python values to Solidity ABI values.

Accepts what a CLI or JSON payload naturally produces (decimal or ``0x`` hex
strings, lowercase addresses, dicts for structs) and returns values
web3's contract encoder accepts. ``bytes`` values given as strings are
always read as hex, with or without the ``0x`` prefix. Integer widths and
fixed ``bytesN`` sizes are checked here so that mistakes surface before a
transaction is built.
"""

from __future__ import annotations

import re
from typing import Any

from hexbytes import HexBytes
from web3 import Web3

_INT_TYPE_RE = re.compile(r"^(u?)int(\d*)$")
_FIXED_BYTES_RE = re.compile(r"^bytes(\d+)$")


def _to_int(arg: Any) -> int:
    if isinstance(arg, bool):
        return int(arg)
    if isinstance(arg, str):
        s = arg.strip()
        if s.lower().startswith("0x"):
            return int(s, 16)
        return int(s)
    return int(arg)


def _to_bytes(arg: Any) -> bytes:
    if isinstance(arg, (bytes, bytearray, memoryview)):
        return bytes(arg)
    if isinstance(arg, str):
        # hex with or without 0x, same as EnforcedOptionParam
        try:
            return bytes(HexBytes(arg.strip()))
        except ValueError as exc:
            raise ValueError(f"Expected hex for bytes value, got {arg!r}") from exc
    raise TypeError(f"Expected bytes or hex string, got {type(arg).__name__}")


def cast_single(arg: Any, abi_type: str) -> Any:
    """Cast a single Python value to its Solidity ABI type."""
    t = abi_type.strip()

    if t == "bool":
        if isinstance(arg, bool):
            return arg
        if isinstance(arg, str):
            return arg.lower() in ("true", "1", "yes")
        return bool(arg)

    m = _INT_TYPE_RE.match(t)
    if m:
        value = _to_int(arg)
        bits = int(m.group(2) or 256)
        if m.group(1):
            lo, hi = 0, 2**bits - 1
        else:
            lo, hi = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1
        if not lo <= value <= hi:
            raise ValueError(f"Value {value} out of range for {t}")
        return value

    if t == "address":
        return Web3.to_checksum_address(str(arg))

    if t == "string":
        return str(arg)

    if t == "bytes":
        return _to_bytes(arg)

    m = _FIXED_BYTES_RE.match(t)
    if m:
        value = _to_bytes(arg)
        size = int(m.group(1))
        if len(value) > size:
            raise ValueError(f"Value of {len(value)} bytes too long for {t}")
        return value

    return arg


def cast_args(args: list[Any], abi_inputs: list[dict[str, Any]]) -> list[Any]:
    """Recursively cast a list of arguments to match ABI input definitions.

    Each entry in *abi_inputs* must have at least ``"type"`` and optionally
    ``"components"`` for tuple/struct types.
    """
    if len(args) != len(abi_inputs):
        raise ValueError(
            f"Argument count mismatch: got {len(args)}, expected {len(abi_inputs)}"
        )
    return [_cast_value(arg, inp) for arg, inp in zip(args, abi_inputs, strict=True)]


def _component_value(arg: dict[str, Any], component: dict[str, Any], idx: int) -> Any:
    name = component.get("name", "")
    if name in arg:
        return arg[name]
    # accept snake_case keys for camelCase struct fields (msgType -> msg_type)
    snake = re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()
    if snake in arg:
        return arg[snake]
    if str(idx) in arg:
        return arg[str(idx)]
    raise KeyError(f"Missing struct field '{name}'")


def _cast_value(arg: Any, inp: dict[str, Any]) -> Any:
    t = inp.get("type", "").strip()
    components = inp.get("components")

    # Array types: e.g. "uint256[]", "address[3]", "tuple[]"
    if t.endswith("]"):
        bracket = t.rindex("[")
        element_type = t[:bracket]
        size = t[bracket + 1 : -1]
        if not isinstance(arg, (list, tuple)):
            raise TypeError(f"Expected list for {t}, got {type(arg).__name__}")
        if size and len(arg) != int(size):
            raise ValueError(f"Expected {size} items for {t}, got {len(arg)}")
        element_inp: dict[str, Any] = {"type": element_type}
        if components:
            element_inp["components"] = components
        return [_cast_value(item, element_inp) for item in arg]

    # Tuple/struct types
    if t == "tuple" and components:
        if isinstance(arg, dict):
            ordered = [_component_value(arg, c, i) for i, c in enumerate(components)]
            return tuple(cast_args(ordered, components))
        if isinstance(arg, (list, tuple)):
            return tuple(cast_args(list(arg), components))
        if hasattr(arg, "model_dump"):
            return _cast_value(arg.model_dump(), inp)
        raise TypeError(
            f"Expected dict/list/tuple for tuple type, got {type(arg).__name__}"
        )

    return cast_single(arg, t)
