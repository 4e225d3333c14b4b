import pytest
from web3.exceptions import Web3RPCError

from layerzero_oapp.core.utils.logs import get_logs_bounded

OAPP = "0x" + "11" * 20


class _FakeEth:
    def __init__(self, max_span: int | None = None):
        self.max_span = max_span
        self.calls: list[dict[str, object]] = []

    async def get_logs(self, params: dict[str, object]):
        self.calls.append(params)
        from_block = int(params["fromBlock"])  # type: ignore[arg-type]
        to_block = int(params["toBlock"])  # type: ignore[arg-type]
        if self.max_span is not None and to_block - from_block + 1 > self.max_span:
            raise Web3RPCError("query returned more than 10000 results")
        return [
            {"blockNumber": bn, "logIndex": 0} for bn in range(from_block, to_block + 1)
        ]


class _FakeWeb3:
    def __init__(self, max_span: int | None = None):
        self.eth = _FakeEth(max_span)


@pytest.mark.asyncio
async def test_reduces_chunk_and_truncates_to_newest():
    web3 = _FakeWeb3(max_span=3)
    logs = await get_logs_bounded(
        web3,
        from_block=0,
        to_block=9,
        address=OAPP,
        topics=["0x0"],
        max_logs=5,
        initial_chunk_size=8,
    )
    assert [lg["blockNumber"] for lg in logs] == [5, 6, 7, 8, 9]
    assert len(web3.eth.calls) >= 2


@pytest.mark.asyncio
async def test_walks_whole_range_oldest_first():
    web3 = _FakeWeb3()
    logs = await get_logs_bounded(
        web3,
        from_block=10,
        to_block=14,
        address=OAPP,
        topics=None,
        max_logs=100,
        initial_chunk_size=2,
    )
    assert [lg["blockNumber"] for lg in logs] == [10, 11, 12, 13, 14]
    assert [(c["fromBlock"], c["toBlock"]) for c in web3.eth.calls] == [
        (13, 14),
        (11, 12),
        (10, 10),
    ]
    checksummed = "0x1111111111111111111111111111111111111111"
    assert all(c["address"] == checksummed for c in web3.eth.calls)
    assert all(c["topics"] == [] for c in web3.eth.calls)


@pytest.mark.asyncio
async def test_single_block_refusal_is_raised():
    web3 = _FakeWeb3(max_span=0)
    with pytest.raises(Web3RPCError):
        await get_logs_bounded(
            web3,
            from_block=0,
            to_block=3,
            address=OAPP,
            topics=None,
            max_logs=10,
            initial_chunk_size=4,
        )


@pytest.mark.asyncio
@pytest.mark.parametrize("from_block, to_block, max_logs", [(5, 4, 10), (0, 4, 0)])
async def test_empty_requests_do_not_hit_rpc(from_block, to_block, max_logs):
    web3 = _FakeWeb3()
    logs = await get_logs_bounded(
        web3,
        from_block=from_block,
        to_block=to_block,
        address=OAPP,
        topics=None,
        max_logs=max_logs,
    )
    assert logs == []
    assert web3.eth.calls == []
