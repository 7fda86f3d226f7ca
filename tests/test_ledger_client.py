from __future__ import annotations

import json

import httpx
import pytest
from solders.pubkey import Pubkey

from tokenguard.ledger.client import AccountNotFoundError, LedgerQueryClient, LedgerRpcError, SolanaRpcClient
from tokenguard.resilience.rate_limit import RateLimiter
from tests.fakes.fake_ledger import FakeClock, FakeLedgerClient, FakeSleep


def _rpc_transport(responder, seen: list[dict] | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        if seen is not None:
            seen.append(payload)
        body = responder(payload)
        if isinstance(body, httpx.Response):
            return body
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], **body})

    return httpx.MockTransport(handler)


def _client(responder, seen: list[dict] | None = None, **kwargs) -> SolanaRpcClient:
    return SolanaRpcClient("http://rpc.test", transport=_rpc_transport(responder, seen), **kwargs)


def test_fake_client_satisfies_protocol():
    assert isinstance(FakeLedgerClient(), LedgerQueryClient)


@pytest.mark.asyncio
async def test_check_connectivity_returns_slot():
    seen: list[dict] = []
    async with _client(lambda payload: {"result": 4242}, seen) as client:
        assert await client.check_connectivity() == 4242
    assert seen[0]["method"] == "getSlot"
    assert seen[0]["params"] == [{"commitment": "confirmed"}]
    assert seen[0]["jsonrpc"] == "2.0"


@pytest.mark.asyncio
async def test_request_ids_increase():
    seen: list[dict] = []
    async with _client(lambda payload: {"result": 1}, seen) as client:
        await client.check_connectivity()
        await client.check_connectivity()
    assert [entry["id"] for entry in seen] == [1, 2]


@pytest.mark.asyncio
async def test_account_exists():
    present = str(Pubkey.new_unique())

    def responder(payload):
        address = payload["params"][0]
        if address == present:
            return {"result": {"context": {"slot": 1}, "value": {"lamports": 1, "data": ["", "base64"]}}}
        return {"result": {"context": {"slot": 1}, "value": None}}

    async with _client(responder) as client:
        assert await client.account_exists(present) is True
        assert await client.account_exists(Pubkey.new_unique()) is False


@pytest.mark.asyncio
async def test_get_balance():
    async with _client(lambda payload: {"result": {"context": {"slot": 1}, "value": 5_000_000}}) as client:
        assert await client.get_balance(Pubkey.new_unique()) == 5_000_000


@pytest.mark.asyncio
async def test_get_token_account_balance():
    result = {"context": {"slot": 1}, "value": {"amount": "1500", "decimals": 9, "uiAmount": 1.5e-6}}
    async with _client(lambda payload: {"result": result}) as client:
        assert await client.get_token_account_balance(Pubkey.new_unique()) == 1500


@pytest.mark.asyncio
async def test_missing_token_account_raises_not_found():
    error = {"code": -32602, "message": "Invalid param: could not find account"}
    address = Pubkey.new_unique()
    async with _client(lambda payload: {"error": error}) as client:
        with pytest.raises(AccountNotFoundError) as excinfo:
            await client.get_token_account_balance(address)
    assert excinfo.value.address == str(address)


@pytest.mark.asyncio
async def test_rpc_error_is_raised_with_code():
    error = {"code": -32005, "message": "Node is behind"}
    async with _client(lambda payload: {"error": error}) as client:
        with pytest.raises(LedgerRpcError) as excinfo:
            await client.check_connectivity()
    assert excinfo.value.code == -32005
    assert "Node is behind" in str(excinfo.value)
    assert not isinstance(excinfo.value, AccountNotFoundError)


@pytest.mark.asyncio
async def test_http_errors_propagate():
    async with _client(lambda payload: httpx.Response(503, text="unavailable")) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await client.check_connectivity()


@pytest.mark.asyncio
async def test_malformed_json_is_rpc_error():
    async with _client(lambda payload: httpx.Response(200, content=b"not json")) as client:
        with pytest.raises(LedgerRpcError):
            await client.check_connectivity()


@pytest.mark.asyncio
async def test_unexpected_result_shape_is_rpc_error():
    async with _client(lambda payload: {"result": 17}) as client:
        with pytest.raises(LedgerRpcError):
            await client.get_balance(Pubkey.new_unique())


@pytest.mark.asyncio
async def test_requests_pass_through_limiter():
    clock = FakeClock()
    sleep = FakeSleep(clock)
    limiter = RateLimiter.from_millis(200, clock=clock, sleep=sleep)
    async with _client(lambda payload: {"result": 1}, limiter=limiter) as client:
        await client.check_connectivity()
        await client.check_connectivity()
    assert sleep.calls == [pytest.approx(0.2)]
