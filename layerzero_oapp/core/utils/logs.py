from __future__ import annotations

from typing import Any

from eth_utils import to_checksum_address
from loguru import logger
from web3.exceptions import Web3RPCError


async def get_logs_bounded(
    web3: Any,
    *,
    from_block: int,
    to_block: int,
    address: str,
    topics: list[Any] | None,
    max_logs: int,
    initial_chunk_size: int = 2000,
) -> list[Any]:
    """
    Fetch logs while respecting common RPC limits (e.g. "too many results"),
    walking backward from `to_block` until `max_logs` is reached or `from_block`
    is hit. Returned logs are oldest-first.
    """
    if max_logs <= 0:
        return []

    address = to_checksum_address(address)
    topics = topics or []
    from_block = int(from_block)
    to_block = int(to_block)
    if from_block > to_block:
        return []

    chunk = max(1, int(initial_chunk_size))
    cur_to = to_block
    logs: list[Any] = []

    while cur_to >= from_block and len(logs) < max_logs:
        cur_from = max(from_block, cur_to - chunk + 1)
        try:
            batch = await web3.eth.get_logs(
                {
                    "fromBlock": cur_from,
                    "toBlock": cur_to,
                    "address": address,
                    "topics": topics,
                }
            )
        except Web3RPCError:
            # Provider refused due to response size; reduce chunk and retry.
            if chunk == 1:
                raise
            chunk = max(1, chunk // 2)
            logger.debug(f"get_logs refused for [{cur_from}, {cur_to}]; chunk -> {chunk}")
            continue

        if batch:
            logs.extend(batch)
            logs.sort(
                key=lambda lg: (
                    int(lg.get("blockNumber", 0)),
                    int(lg.get("logIndex", 0)),
                )
            )
            if len(logs) > max_logs:
                logs = logs[-max_logs:]

        cur_to = cur_from - 1

    return logs
