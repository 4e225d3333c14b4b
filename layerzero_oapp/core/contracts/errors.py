from __future__ import annotations

from typing import Any


class MalformedDataError(ValueError):
    """Bytes did not decode against the expected ABI layout."""


class UnknownMemberError(KeyError):
    """A function, event or error name/selector is not part of the ABI."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"Unknown {kind}: {key}")

    def __str__(self) -> str:
        return f"Unknown {self.kind}: {self.key}"


class ReadOnlyContractError(RuntimeError):
    """The proxy has no runner (or no signer) for the requested operation."""


class OAppContractError(RuntimeError):
    """A contract call reverted with one of the ABI's declared custom errors."""

    def __init__(
        self,
        error_name: str,
        args: dict[str, Any],
        *,
        selector: str,
        data: str,
    ):
        self.error_name = error_name
        self.args_by_name = args
        self.selector = selector
        self.data = data
        rendered = ", ".join(f"{k}={v!r}" for k, v in args.items())
        super().__init__(f"{error_name}({rendered})")
