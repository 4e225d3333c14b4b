"""Sign, broadcast and confirm transactions built by contract proxies.

Callers hand over an unsigned dict (``chainId``, ``from``, ``to``, ``data``,
``value``), normally with ``gas`` already taken from the contract call's
simulation. Nonce and fee fields are filled from one failover-backed
connection; the receipt is awaited on every configured RPC and the first
answer wins.
"""

import asyncio
import math
from collections.abc import Awaitable, Callable
from typing import Any

from eth_account import Account
from eth_utils import encode_hex
from loguru import logger
from web3 import AsyncWeb3

from layerzero_oapp.core.constants.base import (
    DEFAULT_CONFIRMATIONS,
    DEFAULT_TRANSACTION_TIMEOUT,
    GAS_BUFFER_MULTIPLIER,
    MAX_BASE_FEE_GROWTH_MULTIPLIER,
    SUGGESTED_GAS_PRICE_MULTIPLIER,
    SUGGESTED_PRIORITY_FEE_MULTIPLIER,
)
from layerzero_oapp.core.constants.chains import PRE_EIP_1559_CHAIN_IDS
from layerzero_oapp.core.utils.web3 import (
    get_transaction_chain_id,
    web3_from_chain_id,
    web3s_from_chain_id,
)

SignCallback = Callable[[dict[str, Any]], Awaitable[bytes]]


class TransactionRevertedError(RuntimeError):
    """A mined transaction came back with ``status == 0``."""

    def __init__(
        self,
        txn_hash: str,
        receipt: dict[str, Any] | None = None,
        gas_limit: int | None = None,
    ):
        self.txn_hash = txn_hash
        self.receipt = dict(receipt or {})
        gas_used = int(self.receipt.get("gasUsed") or 0)
        message = f"Transaction reverted (status=0): {txn_hash}"
        if gas_used or gas_limit:
            message += f" gasUsed={gas_used} gasLimit={gas_limit or 0}"
            if gas_used and gas_limit and gas_used >= gas_limit:
                message += " (likely out of gas)"
        super().__init__(message)


def buffered_gas(estimate: int) -> int:
    return math.ceil(int(estimate) * GAS_BUFFER_MULTIPLIER)


def _get_transaction_from_address(transaction: dict) -> str:
    if "from" not in transaction:
        raise ValueError("Transaction does not contain from address")
    return AsyncWeb3.to_checksum_address(transaction["from"])


async def _fee_fields(web3: AsyncWeb3, chain_id: int) -> dict[str, int]:
    if chain_id in PRE_EIP_1559_CHAIN_IDS:
        gas_price = await web3.eth.gas_price
        return {"gasPrice": int(gas_price * SUGGESTED_GAS_PRICE_MULTIPLIER)}

    block = await web3.eth.get_block("latest")
    priority_fee = int(
        (await web3.eth.max_priority_fee) * SUGGESTED_PRIORITY_FEE_MULTIPLIER
    )
    return {
        "maxFeePerGas": int(block["baseFeePerGas"] * MAX_BASE_FEE_GROWTH_MULTIPLIER)
        + priority_fee,
        "maxPriorityFeePerGas": priority_fee,
    }


async def prepare_transaction(web3: AsyncWeb3, transaction: dict) -> dict:
    """Fill ``gas`` (when missing), ``nonce`` and fee fields."""
    tx = dict(transaction)
    from_address = _get_transaction_from_address(tx)
    tx["from"] = from_address
    if not tx.get("gas"):
        estimate = await web3.eth.estimate_gas(tx, block_identifier="pending")
        tx["gas"] = buffered_gas(estimate)
    tx["nonce"] = await web3.eth.get_transaction_count(
        from_address, block_identifier="pending"
    )
    tx.update(await _fee_fields(web3, get_transaction_chain_id(tx)))
    return tx


async def _head(web3: AsyncWeb3) -> int:
    return await web3.eth.block_number


async def wait_for_transaction_receipt(
    chain_id: int,
    txn_hash: str,
    *,
    poll_interval: float = 0.1,
    timeout: int = DEFAULT_TRANSACTION_TIMEOUT,
    confirmations: int = DEFAULT_CONFIRMATIONS,
) -> dict:
    """First receipt any RPC returns, once ``confirmations`` blocks deep.

    Reverted receipts are returned immediately; the caller decides what a
    revert means.
    """
    async with web3s_from_chain_id(chain_id) as web3s:
        waiters = [
            asyncio.create_task(
                web3.eth.wait_for_transaction_receipt(
                    txn_hash, timeout=timeout, poll_latency=poll_interval
                )
            )
            for web3 in web3s
        ]
        done, pending = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        receipt = done.pop().result()

        if int(receipt.get("status", 1)) == 0:
            return receipt

        target_block = receipt["blockNumber"] + confirmations - 1
        while max(await asyncio.gather(*[_head(w) for w in web3s])) < target_block:
            await asyncio.sleep(poll_interval)
    return receipt


async def send_transaction(
    transaction: dict, sign_callback: SignCallback | None, wait_for_receipt=True
) -> str:
    if sign_callback is None:
        raise ValueError("sign_callback must be provided to send transaction")

    chain_id = get_transaction_chain_id(transaction)
    async with web3_from_chain_id(chain_id) as web3:
        tx = await prepare_transaction(web3, transaction)
        signed = await sign_callback(tx)
        txn_hash = encode_hex(await web3.eth.send_raw_transaction(signed))
    logger.info(
        f"Broadcast {txn_hash} on chain {chain_id} (nonce={tx['nonce']}, gas={tx['gas']})"
    )

    if wait_for_receipt:
        receipt = await wait_for_transaction_receipt(chain_id, txn_hash)
        if int(receipt.get("status", 1)) == 0:
            raise TransactionRevertedError(txn_hash, receipt, gas_limit=tx["gas"])
    return txn_hash


def local_sign_callback(private_key: str) -> SignCallback:
    account = Account.from_key(private_key)

    async def sign_callback(tx: dict) -> bytes:
        signed = account.sign_transaction(tx)
        return signed.raw_transaction

    return sign_callback
