"""JSON-RPC query adapter for the ledger endpoint.

Only the read-side queries used by the health battery are implemented.  Each
request passes through the client's :class:`RateLimiter` when one is set;
retries are left to the caller so the retry policy stays visible at the call
site.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Protocol, runtime_checkable

import httpx
from solders.pubkey import Pubkey

from ..resilience.rate_limit import RateLimiter

LOGGER = logging.getLogger(__name__)

DEFAULT_COMMITMENT = "confirmed"
DEFAULT_TIMEOUT_SEC = 10.0

_INVALID_PARAMS = -32602
_ACCOUNT_NOT_FOUND_MARKERS = ("could not find account", "account not found")


class LedgerRpcError(RuntimeError):
    """JSON-RPC level failure reported by the endpoint."""

    def __init__(self, method: str, message: str, code: int | None = None) -> None:
        self.method = method
        self.code = code
        self.rpc_message = message
        detail = f"{method} failed: {message}"
        if code is not None:
            detail = f"{detail} (code {code})"
        super().__init__(detail)


class AccountNotFoundError(LedgerRpcError):
    """The queried token account does not exist on the ledger."""

    def __init__(self, method: str, address: str, message: str = "could not find account") -> None:
        self.address = address
        super().__init__(method, f"{message}: {address}", _INVALID_PARAMS)


@runtime_checkable
class LedgerQueryClient(Protocol):
    async def check_connectivity(self) -> int:
        ...

    async def account_exists(self, address: str | Pubkey) -> bool:
        ...

    async def get_balance(self, address: str | Pubkey) -> int:
        ...

    async def get_token_account_balance(self, address: str | Pubkey) -> int:
        ...


def _is_account_missing(error: dict[str, Any]) -> bool:
    message = str(error.get("message") or "").lower()
    return any(marker in message for marker in _ACCOUNT_NOT_FOUND_MARKERS)


class SolanaRpcClient:
    def __init__(
        self,
        url: str,
        *,
        commitment: str = DEFAULT_COMMITMENT,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        limiter: RateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._commitment = commitment
        self._limiter = limiter
        self._ids = itertools.count(1)
        self._http = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )

    async def __aenter__(self) -> "SolanaRpcClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, params: list[Any]) -> dict[str, Any]:
        if self._limiter is not None:
            await self._limiter.enforce_delay()
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        response = await self._http.post(self._url, json=payload)
        response.raise_for_status()
        try:
            body = response.json()
        except ValueError as exc:
            raise LedgerRpcError(method, f"malformed JSON response: {exc}") from exc
        if not isinstance(body, dict):
            raise LedgerRpcError(method, f"unexpected response type {type(body).__name__}")
        return body

    @staticmethod
    def _raise_for_error(method: str, body: dict[str, Any]) -> None:
        error = body.get("error")
        if not error:
            return
        if not isinstance(error, dict):
            raise LedgerRpcError(method, str(error))
        raise LedgerRpcError(method, str(error.get("message") or "unknown error"), error.get("code"))

    async def _call(self, method: str, params: list[Any]) -> Any:
        body = await self._request(method, params)
        self._raise_for_error(method, body)
        if "result" not in body:
            raise LedgerRpcError(method, "response has neither result nor error")
        return body["result"]

    @staticmethod
    def _value(method: str, result: Any) -> Any:
        if not isinstance(result, dict) or "value" not in result:
            raise LedgerRpcError(method, f"unexpected result shape: {result!r}")
        return result["value"]

    async def check_connectivity(self) -> int:
        """Return the current slot; any failure means the endpoint is unusable."""

        slot = await self._call("getSlot", [{"commitment": self._commitment}])
        return int(slot)

    async def account_exists(self, address: str | Pubkey) -> bool:
        result = await self._call(
            "getAccountInfo",
            [str(address), {"encoding": "base64", "commitment": self._commitment}],
        )
        return self._value("getAccountInfo", result) is not None

    async def get_balance(self, address: str | Pubkey) -> int:
        result = await self._call("getBalance", [str(address), {"commitment": self._commitment}])
        return int(self._value("getBalance", result))

    async def get_token_account_balance(self, address: str | Pubkey) -> int:
        method = "getTokenAccountBalance"
        body = await self._request(method, [str(address), {"commitment": self._commitment}])
        error = body.get("error")
        if isinstance(error, dict) and _is_account_missing(error):
            raise AccountNotFoundError(method, str(address))
        self._raise_for_error(method, body)
        value = self._value(method, body.get("result"))
        if value is None:
            raise AccountNotFoundError(method, str(address))
        try:
            return int(value["amount"])
        except (KeyError, TypeError, ValueError) as exc:
            raise LedgerRpcError(method, f"unexpected token amount payload: {value!r}") from exc


__all__ = [
    "AccountNotFoundError",
    "LedgerQueryClient",
    "LedgerRpcError",
    "SolanaRpcClient",
]
