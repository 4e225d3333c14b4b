import time
from contextlib import asynccontextmanager
from typing import Any

from loguru import logger
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.middleware import ExtraDataToPOAMiddleware

from layerzero_oapp.core.config import get_rpc_urls
from layerzero_oapp.core.constants.chains import POA_MIDDLEWARE_CHAIN_IDS

# Rate-limit failover policy:
# - Fail over only for provider rate limiting (HTTP 429 / known RPC codes / known messages)
# - Do not fail over for client errors or on-chain execution errors (reverts)
_RATE_LIMIT_HTTP_STATUS = 429
_RATE_LIMIT_RPC_ERROR_CODES = {429, -32005, -33200, -33300, -33400}
_RATE_LIMIT_MESSAGE_MARKERS = (
    "too many requests",
    "rate limit",
    "request rate exceeded",
    "limit exceeded",
    "compute units per second",
    "concurrent requests",
)
_DEFAULT_RATE_LIMIT_COOLDOWN_SECONDS = 60.0
_RPC_RATE_LIMIT_COOLDOWN_UNTIL: dict[tuple[int, str], float] = {}


def _decode_rpc_response_with_id(
    provider: AsyncHTTPProvider, raw_response: bytes, request_id: Any
) -> dict[str, Any]:
    response = provider.decode_rpc_response(raw_response)
    if isinstance(response, dict) and "id" not in response:
        response["id"] = request_id
    return response


async def _perform_rpc_request(
    provider: AsyncHTTPProvider,
    *,
    method: str,
    request_data: bytes,
    request_id: Any,
) -> dict[str, Any]:
    raw_response = await provider._make_request(method, request_data)
    return _decode_rpc_response_with_id(provider, raw_response, request_id)


def _extract_http_status(exc: Exception) -> int | None:
    status = getattr(exc, "status", None)
    if isinstance(status, int):
        return status
    status_code = getattr(exc, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    response = getattr(exc, "response", None)
    if response is not None:
        code = getattr(response, "status_code", None)
        if isinstance(code, int):
            return code
    return None


def _extract_retry_after_seconds_from_exception(exc: Exception) -> float | None:
    response = getattr(exc, "response", None)
    headers = getattr(response, "headers", None) if response is not None else None
    if not headers:
        return None
    value = headers.get("Retry-After")
    if value is None:
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def _rpc_error_text(error: dict[str, Any]) -> str:
    msg = str(error.get("message") or "").lower()
    details = str(error.get("details") or "").lower()
    return f"{msg} {details}".strip()


def _is_rate_limited_rpc_error(error: dict[str, Any]) -> bool:
    code = error.get("code")
    if isinstance(code, int) and code in _RATE_LIMIT_RPC_ERROR_CODES:
        return True
    text = _rpc_error_text(error)
    return any(marker in text for marker in _RATE_LIMIT_MESSAGE_MARKERS)


def _is_rate_limited_exception(exc: Exception) -> bool:
    return _extract_http_status(exc) == _RATE_LIMIT_HTTP_STATUS


def _extract_cooldown_seconds_from_rpc_error(error: dict[str, Any]) -> float | None:
    data = error.get("data")
    if not isinstance(data, dict):
        return None
    for key in ("backoff_seconds", "retry_after", "retry_after_seconds"):
        try:
            parsed = float(data.get(key))
        except (TypeError, ValueError):
            continue
        if parsed > 0:
            return parsed
    return None


def _is_in_rate_limit_cooldown(chain_id: int, endpoint_uri: str) -> bool:
    key = (chain_id, endpoint_uri)
    until = _RPC_RATE_LIMIT_COOLDOWN_UNTIL.get(key, 0.0)
    if until <= time.monotonic():
        _RPC_RATE_LIMIT_COOLDOWN_UNTIL.pop(key, None)
        return False
    return True


def _mark_rate_limit_cooldown(
    chain_id: int, endpoint_uri: str, cooldown_seconds: float
) -> None:
    key = (chain_id, endpoint_uri)
    _RPC_RATE_LIMIT_COOLDOWN_UNTIL[key] = time.monotonic() + max(
        0.0, float(cooldown_seconds)
    )


def _clear_rate_limit_cooldowns() -> None:
    _RPC_RATE_LIMIT_COOLDOWN_UNTIL.clear()


class _FailoverRpcProvider(AsyncHTTPProvider):
    """HTTP provider that moves to the chain's other configured RPCs when rate-limited."""

    def __init__(
        self,
        rpc: str,
        chain_id: int,
        failover_rpcs: list[str] | None = None,
        request_kwargs: dict | None = None,
    ):
        super().__init__(rpc, request_kwargs=request_kwargs)
        self.chain_id = chain_id
        self.failover_providers = [
            AsyncHTTPProvider(url, request_kwargs=request_kwargs)
            for url in (failover_rpcs or [])
            if url != rpc
        ]

    async def disconnect(self) -> None:
        primary_exc: Exception | None = None
        try:
            await super().disconnect()
        except Exception as exc:  # noqa: BLE001
            primary_exc = exc
        for provider in self.failover_providers:
            try:
                await provider.disconnect()
            except Exception:
                if primary_exc is None:
                    raise
        if primary_exc is not None:
            raise primary_exc

    async def _request_via_failover(
        self, *, method: str, request_data: bytes, request_id: Any
    ) -> dict[str, Any]:
        last_response: dict[str, Any] | None = None
        last_exc: Exception | None = None
        for provider in self.failover_providers:
            if _is_in_rate_limit_cooldown(self.chain_id, provider.endpoint_uri):
                continue
            try:
                response = await _perform_rpc_request(
                    provider,
                    method=method,
                    request_data=request_data,
                    request_id=request_id,
                )
            except Exception as exc:
                if not _is_rate_limited_exception(exc):
                    raise
                _mark_rate_limit_cooldown(
                    self.chain_id,
                    provider.endpoint_uri,
                    _extract_retry_after_seconds_from_exception(exc)
                    or _DEFAULT_RATE_LIMIT_COOLDOWN_SECONDS,
                )
                last_exc = exc
                continue

            error = response.get("error")
            if isinstance(error, dict) and _is_rate_limited_rpc_error(error):
                _mark_rate_limit_cooldown(
                    self.chain_id,
                    provider.endpoint_uri,
                    _extract_cooldown_seconds_from_rpc_error(error)
                    or _DEFAULT_RATE_LIMIT_COOLDOWN_SECONDS,
                )
                last_response = response
                continue

            logger.info(
                f"RPC failover succeeded chain={self.chain_id} endpoint={provider.endpoint_uri} method={method} id={request_id}"
            )
            return response

        if last_response is not None:
            return last_response
        if last_exc is not None:
            raise last_exc
        raise RuntimeError(
            f"All RPCs for chain {self.chain_id} are rate-limited or in cooldown"
        )

    async def make_request(self, method, params):  # type: ignore[override]
        req = self.form_request(method, params)
        request_data = self.encode_rpc_dict(req)
        request_id = req.get("id")

        if self.failover_providers and _is_in_rate_limit_cooldown(
            self.chain_id, self.endpoint_uri
        ):
            logger.debug(
                f"Primary RPC is in rate-limit cooldown for chain {self.chain_id}; using failover RPCs"
            )
            return await self._request_via_failover(
                method=method, request_data=request_data, request_id=request_id
            )

        try:
            response = await _perform_rpc_request(
                self, method=method, request_data=request_data, request_id=request_id
            )
        except Exception as exc:
            if not self.failover_providers or not _is_rate_limited_exception(exc):
                raise
            cooldown_s = (
                _extract_retry_after_seconds_from_exception(exc)
                or _DEFAULT_RATE_LIMIT_COOLDOWN_SECONDS
            )
            _mark_rate_limit_cooldown(self.chain_id, self.endpoint_uri, cooldown_s)
            logger.warning(
                f"Primary RPC rate-limited for chain {self.chain_id}; failing over. Error: {exc}"
            )
            return await self._request_via_failover(
                method=method, request_data=request_data, request_id=request_id
            )

        error = response.get("error")
        if not isinstance(error, dict) or not self.failover_providers:
            return response
        if _is_rate_limited_rpc_error(error):
            cooldown_s = (
                _extract_cooldown_seconds_from_rpc_error(error)
                or _DEFAULT_RATE_LIMIT_COOLDOWN_SECONDS
            )
            _mark_rate_limit_cooldown(self.chain_id, self.endpoint_uri, cooldown_s)
            logger.warning(
                f"Primary RPC returned rate-limit JSON-RPC error for chain {self.chain_id}; failing over. Error: {error}"
            )
            return await self._request_via_failover(
                method=method, request_data=request_data, request_id=request_id
            )
        return response


def _get_rpcs_for_chain_id(chain_id: int) -> list[str]:
    mapping = get_rpc_urls()
    rpcs = mapping.get(str(chain_id))
    if rpcs is None:
        rpcs = mapping.get(chain_id)  # allow int keys
    if not rpcs:
        raise ValueError(f"No RPCs configured for chain ID {chain_id}")
    if isinstance(rpcs, str):
        return [rpcs]
    return list(rpcs)


def _get_web3(rpc: str, chain_id: int, failover_rpcs: list[str] | None = None) -> AsyncWeb3:
    provider = _FailoverRpcProvider(
        rpc,
        chain_id,
        failover_rpcs=failover_rpcs,
        request_kwargs={"headers": AsyncHTTPProvider.get_request_headers()},
    )
    web3 = AsyncWeb3(provider)
    if chain_id in POA_MIDDLEWARE_CHAIN_IDS:
        web3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    return web3


def get_transaction_chain_id(transaction: dict) -> int:
    if "chainId" not in transaction:
        raise ValueError("Transaction does not contain chainId")
    return int(transaction["chainId"])


def get_web3s_from_chain_id(chain_id: int) -> list[AsyncWeb3]:
    """One web3 per configured RPC; each fails over to the others when rate-limited."""
    rpcs = _get_rpcs_for_chain_id(chain_id)
    return [_get_web3(rpc, chain_id, failover_rpcs=rpcs) for rpc in rpcs]


@asynccontextmanager
async def web3s_from_chain_id(chain_id: int):
    web3s = get_web3s_from_chain_id(chain_id)
    try:
        yield web3s
    finally:
        for web3 in web3s:
            await web3.provider.disconnect()


@asynccontextmanager
async def web3_from_chain_id(chain_id: int):
    rpcs = _get_rpcs_for_chain_id(chain_id)
    web3 = _get_web3(rpcs[0], chain_id, failover_rpcs=rpcs)
    try:
        yield web3
    finally:
        await web3.provider.disconnect()
