"""Address-bound contract proxies.

A ``ConnectedContract`` pairs an address and an ABI with an optional
``ContractRunner``. Calls are executed by web3's own contract object, bound
inside ``web3_from_chain_id``: reads via ``.call()`` and writes via a
``.call()`` + ``.estimate_gas()`` simulation followed by the shared send
pipeline. Without a runner the proxy can still encode calldata but cannot
talk to a chain; without a signer it cannot transact.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from loguru import logger
from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError

from layerzero_oapp.core.contracts.errors import (
    OAppContractError,
    ReadOnlyContractError,
)
from layerzero_oapp.core.contracts.interface import ContractInterface, member_signature
from layerzero_oapp.core.utils.abi_caster import cast_args
from layerzero_oapp.core.utils.transaction import (
    SignCallback,
    buffered_gas,
    send_transaction,
)
from layerzero_oapp.core.utils.web3 import web3_from_chain_id

_READ_ONLY_MUTABILITIES = ("view", "pure")


@dataclass(frozen=True)
class ContractRunner:
    """Connection handle: the chain to talk to and, optionally, who signs."""

    chain_id: int
    sign_callback: SignCallback | None = None
    from_address: str | None = None

    @property
    def can_sign(self) -> bool:
        return self.sign_callback is not None and bool(self.from_address)


def _revert_data(exc: ContractLogicError) -> str | bytes | None:
    data = getattr(exc, "data", None)
    if isinstance(data, dict):
        data = data.get("data")
    if isinstance(data, (str, bytes)):
        return data
    return None


class ContractCall:
    """A function bound to concrete arguments, ready to call or transact."""

    def __init__(self, function: ContractFunction, args: list[Any]):
        self.function = function
        self.args = args
        self.abi_args = cast_args(list(args), function.inputs)
        self.calldata = function.contract.interface.encode_function_data(
            function.name, self.abi_args
        )

    def __repr__(self) -> str:
        return f"<ContractCall {self.function.signature} args={self.args!r}>"

    @property
    def _contract(self) -> ConnectedContract:
        return self.function.contract

    def _require_runner(self) -> ContractRunner:
        runner = self._contract.runner
        if runner is None:
            raise ReadOnlyContractError(
                f"Cannot call {self.function.name}: contract has no runner"
            )
        return runner

    def _require_signer(self) -> ContractRunner:
        runner = self._contract.runner
        if runner is None or not runner.can_sign:
            raise ReadOnlyContractError(
                f"Cannot send {self.function.name}: contract runner has no signer"
            )
        return runner

    def _raise_decoded(self, exc: ContractLogicError) -> None:
        data = _revert_data(exc)
        decoded = self._contract.interface.parse_error(data) if data else None
        if decoded is None:
            raise exc
        raise OAppContractError(
            decoded.name, decoded.args, selector=decoded.selector, data=decoded.data
        ) from exc

    def _bind(self, web3: AsyncWeb3) -> Any:
        contract = web3.eth.contract(
            address=AsyncWeb3.to_checksum_address(self._contract.address),
            abi=self._contract.abi,
        )
        fn = contract.get_function_by_signature(self.function.signature)
        return fn(*self.abi_args)

    @staticmethod
    def _tx_params(runner: ContractRunner, value: int = 0) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if runner.from_address:
            params["from"] = AsyncWeb3.to_checksum_address(runner.from_address)
        if value:
            params["value"] = int(value)
        return params

    async def call(self, block_identifier: Any = "latest") -> Any:
        """Execute via ``eth_call``.

        Single-output functions return the bare value, multi-output functions
        a list and zero-output functions ``None``.
        """
        runner = self._require_runner()
        async with web3_from_chain_id(runner.chain_id) as web3:
            bound = self._bind(web3)
            try:
                result = await bound.call(
                    self._tx_params(runner), block_identifier=block_identifier
                )
            except ContractLogicError as exc:
                self._raise_decoded(exc)
                raise
        if not self.function.outputs:
            return None
        return result

    def build_transaction(self, value: int = 0) -> dict[str, Any]:
        """Unsigned transaction dict; gas, nonce and fees are filled on send."""
        runner = self._require_runner()
        if not runner.from_address:
            raise ReadOnlyContractError(
                f"Cannot build {self.function.name} transaction: runner has no from_address"
            )
        return {
            "chainId": int(runner.chain_id),
            "from": AsyncWeb3.to_checksum_address(runner.from_address),
            "to": AsyncWeb3.to_checksum_address(self._contract.address),
            "data": self.calldata,
            "value": int(value),
        }

    async def transact(self, value: int = 0, wait_for_receipt: bool = True) -> str:
        """Simulate, then sign and broadcast. Returns the transaction hash."""
        runner = self._require_signer()
        tx = self.build_transaction(value=value)
        params = self._tx_params(runner, value)
        async with web3_from_chain_id(runner.chain_id) as web3:
            bound = self._bind(web3)
            try:
                # Surface declared custom errors before paying for gas.
                await bound.call(params, block_identifier="pending")
                gas = await bound.estimate_gas(params, block_identifier="pending")
            except ContractLogicError as exc:
                self._raise_decoded(exc)
                raise
        tx["gas"] = buffered_gas(gas)
        logger.info(
            f"Sending {self.function.signature} to {self._contract.address} on chain {runner.chain_id}"
        )
        return await send_transaction(
            tx, runner.sign_callback, wait_for_receipt=wait_for_receipt
        )


class ContractFunction:
    def __init__(self, contract: ConnectedContract, entry: Mapping[str, Any]):
        self.contract = contract
        self.abi = dict(entry)
        self.name: str = entry["name"]
        self.inputs: list[dict[str, Any]] = list(entry.get("inputs", []))
        self.outputs: list[dict[str, Any]] = list(entry.get("outputs", []))
        self.state_mutability: str = entry.get("stateMutability", "nonpayable")
        self.signature = member_signature(entry)

    @property
    def is_read_only(self) -> bool:
        return self.state_mutability in _READ_ONLY_MUTABILITIES

    @property
    def selector(self) -> str:
        return self.contract.interface.selector(self.name)

    def __call__(self, *args: Any, **kwargs: Any) -> ContractCall:
        if args and kwargs:
            raise TypeError(f"{self.name}() takes positional or keyword arguments, not both")
        if kwargs:
            unknown = set(kwargs) - {p["name"] for p in self.inputs}
            if unknown:
                raise TypeError(
                    f"{self.name}() got unexpected keyword arguments: {', '.join(sorted(unknown))}"
                )
            values = [kwargs.get(p["name"]) for p in self.inputs]
            given = len(kwargs)
        else:
            values = list(args)
            given = len(values)
        if given != len(self.inputs):
            raise TypeError(
                f"{self.name}() takes {len(self.inputs)} arguments ({given} given)"
            )
        return ContractCall(self, values)

    def __repr__(self) -> str:
        return f"<ContractFunction {self.signature} {self.state_mutability}>"


class ContractFunctions:
    """Attribute/item access to a contract's functions, in ABI order."""

    def __init__(self, contract: ConnectedContract):
        self._functions: dict[str, ContractFunction] = {
            name: ContractFunction(contract, entry)
            for name, entry in contract.interface.functions.items()
        }

    def __getattr__(self, name: str) -> ContractFunction:
        try:
            return self.__dict__["_functions"][name]
        except KeyError:
            raise AttributeError(f"Contract has no function '{name}'") from None

    def __getitem__(self, name: str) -> ContractFunction:
        return self._functions[name]

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __iter__(self) -> Iterator[ContractFunction]:
        return iter(self._functions.values())

    def __len__(self) -> int:
        return len(self._functions)

    @property
    def names(self) -> list[str]:
        return list(self._functions)


class ConnectedContract:
    def __init__(
        self,
        address: str,
        abi: Sequence[Mapping[str, Any]] | ContractInterface,
        runner: ContractRunner | None = None,
    ):
        self.address = address
        self.interface = (
            abi if isinstance(abi, ContractInterface) else ContractInterface(abi)
        )
        self.runner = runner
        self.functions = ContractFunctions(self)

    @property
    def abi(self) -> list[dict[str, Any]]:
        return self.interface.abi

    @property
    def read_only(self) -> bool:
        return self.runner is None or not self.runner.can_sign

    def connect(self, runner: ContractRunner | None) -> ConnectedContract:
        """Same address and ABI, different runner."""
        return type(self)(self.address, self.interface, runner)

    def __repr__(self) -> str:
        chain = self.runner.chain_id if self.runner else None
        return f"<{type(self).__name__} {self.address} chain={chain} read_only={self.read_only}>"
