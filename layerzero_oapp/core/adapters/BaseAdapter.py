from __future__ import annotations

import functools
from abc import ABC
from collections.abc import Callable
from typing import Any

from eth_utils import to_checksum_address
from loguru import logger

from layerzero_oapp.core.contracts.proxy import ContractRunner
from layerzero_oapp.core.utils.transaction import SignCallback


def require_wallet(fn: Callable) -> Callable:
    """Return ``(False, ...)`` early if the adapter cannot sign."""

    @functools.wraps(fn)
    async def wrapper(self: BaseAdapter, *args: Any, **kwargs: Any) -> Any:
        if not getattr(self, "wallet_address", None):
            return False, "wallet address not configured"
        if getattr(self, "sign_callback", None) is None:
            return False, "sign_callback not configured"
        return await fn(self, *args, **kwargs)

    return wrapper


class BaseAdapter(ABC):
    """Chain-bound adapter: one chain, an optional wallet, a bound logger."""

    adapter_type: str | None = None

    def __init__(
        self,
        name: str,
        config: dict[str, Any] | None = None,
        *,
        chain_id: int,
        sign_callback: SignCallback | None = None,
        wallet_address: str | None = None,
    ):
        self.name = name
        self.config = config or {}
        self.chain_id = int(chain_id)
        self.sign_callback = sign_callback
        self.wallet_address: str | None = (
            to_checksum_address(wallet_address) if wallet_address else None
        )
        self.logger = logger.bind(adapter=self.__class__.__name__, chain_id=self.chain_id)

    @property
    def runner(self) -> ContractRunner:
        return ContractRunner(
            chain_id=self.chain_id,
            sign_callback=self.sign_callback,
            from_address=self.wallet_address,
        )
