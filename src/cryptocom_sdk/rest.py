"""
rest.py – REST clients (sync and async) for the Crypto.com Exchange.

Public endpoints are sent as GET with a query string.  Private endpoints
are sent as POST with a signed JSON envelope.  Either way the reply is
decoded into a BaseResponse and its (HTTP status, code) pair is classified:

  - transport failures and undecodable bodies raise TransportError
  - a non-zero exchange code raises the matching ResponseError subclass
  - invalid arguments raise InvalidParameterError before anything is sent

Each call is a single attempt; retrying is left to the caller.

Usage – sync
------------
    from cryptocom_sdk import CryptoComAuth, CryptoComRestClient

    auth = CryptoComAuth(api_key="...", secret_key="...")
    with CryptoComRestClient(auth) as client:
        book = client.get_book("BTC_USDT", depth=10)
        client.cancel_all_orders("BTC_USDT")

Usage – async
-------------
    async with AsyncCryptoComRestClient(auth) as client:
        trades = await client.get_trades(GetTradesRequest(instrument_name="BTC_USDT"))

    # cancellation and deadlines are plain asyncio:
    async with asyncio.timeout(2):
        await client.cancel_all_orders("BTC_USDT")
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, TypeVar

import aiohttp
import requests
from pydantic import ValidationError

from . import methods
from .auth import Clock, CryptoComAuth, IDGenerator, RequestBuilder
from .errors import TransportError, check_error_response
from .methods import Call
from .signing import SignatureGenerator, format_scalar, normalize_params
from .types import (
    Account,
    BaseResponse,
    BookResult,
    CreateOrderRequest,
    CreateOrderResult,
    GetOpenOrdersRequest,
    GetOrderHistoryRequest,
    GetTradesRequest,
    Instrument,
    OpenOrdersResult,
    Order,
    OrderDetail,
    RequestEnvelope,
    Ticker,
    Trade,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_JSON_HEADERS = {"Content-Type": "application/json"}


# ---------------------------------------------------------------------------
# Helpers shared by sync and async clients
# ---------------------------------------------------------------------------

def _query_params(params: dict[str, Any]) -> dict[str, str]:
    """Render public call params as query-string values."""
    return {k: format_scalar(v) for k, v in normalize_params(params).items()}


def _decode_response(status_code: int, body: bytes, method: str) -> BaseResponse:
    try:
        return BaseResponse.model_validate_json(body)
    except ValidationError as exc:
        raise TransportError(
            f"could not decode {method} response [{status_code}]: {body[:200]!r}",
            status_code=status_code,
        ) from exc


def _finish(call: Call[T], status_code: int, response: BaseResponse) -> T:
    """Classify the reply and parse its result."""
    error = check_error_response(
        status_code, response.code, method=call.method, message=response.message,
    )
    if error is not None:
        raise error
    try:
        return call.parse(response.result)
    except ValidationError as exc:
        raise TransportError(
            f"malformed {call.method} result", status_code=status_code,
        ) from exc


# ---------------------------------------------------------------------------
# Synchronous client
# ---------------------------------------------------------------------------

class CryptoComRestClient:
    """
    Synchronous REST client for the Crypto.com Exchange.

    Parameters
    ----------
    auth                : CryptoComAuth holding key, secret and environment
    timeout             : HTTP timeout in seconds for each call
    clock               : Callable returning Unix ms, used for nonces
    id_generator        : Callable returning a fresh request id
    signature_generator : Callable[[SignatureRequest], str]
    session             : requests.Session to send through; one is created
                          (and closed by close()) when omitted
    """

    def __init__(
        self,
        auth: CryptoComAuth,
        timeout: float = 10.0,
        *,
        clock: Optional[Clock] = None,
        id_generator: Optional[IDGenerator] = None,
        signature_generator: Optional[SignatureGenerator] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._auth         = auth
        self._timeout      = timeout
        self._builder      = RequestBuilder(
            auth,
            clock=clock,
            id_generator=id_generator,
            signature_generator=signature_generator,
        )
        self._session      = session if session is not None else requests.Session()
        self._owns_session = session is None

    def __enter__(self) -> "CryptoComRestClient":
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    # ------------------------------------------------------------------
    # Internal request helpers
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        *,
        envelope: Optional[RequestEnvelope] = None,
        query: Optional[dict[str, str]] = None,
    ) -> tuple[int, BaseResponse]:
        """
        Send one HTTP request and decode the response envelope.

        GET with ``query`` when envelope is None, otherwise POST the
        envelope.  Returns (HTTP status, decoded envelope); a non-zero
        exchange code is not an error at this level.
        """
        url = self._auth.url_for(method)
        try:
            if envelope is None:
                logger.debug("GET %s  params=%s", url, query)
                resp = self._session.request("GET", url, params=query, timeout=self._timeout)
            else:
                logger.debug("POST %s  id=%d", url, envelope.id)
                resp = self._session.request(
                    "POST", url,
                    data=envelope.to_wire(),
                    headers=_JSON_HEADERS,
                    timeout=self._timeout,
                )
        except requests.RequestException as exc:
            raise TransportError(f"request to {method} failed: {exc}") from exc

        return resp.status_code, _decode_response(resp.status_code, resp.content, method)

    def _execute(self, call: Call[T]) -> T:
        if call.public:
            status, response = self._request(call.method, query=_query_params(call.params))
        else:
            envelope = self._builder.build(call.method, call.params)
            status, response = self._request(call.method, envelope=envelope)
        return _finish(call, status, response)

    # ------------------------------------------------------------------
    # Market data (public)
    # ------------------------------------------------------------------

    def get_instruments(self) -> list[Instrument]:
        """List every instrument supported by the exchange."""
        return self._execute(methods.get_instruments())

    def get_book(self, instrument_name: str, depth: int = 10) -> BookResult:
        """Fetch the order book for an instrument (1 ≤ depth ≤ 150)."""
        return self._execute(methods.get_book(instrument_name, depth))

    def get_tickers(self, instrument_name: Optional[str] = None) -> list[Ticker]:
        """Fetch tickers for one instrument, or all when omitted."""
        return self._execute(methods.get_tickers(instrument_name))

    # ------------------------------------------------------------------
    # Account (private)
    # ------------------------------------------------------------------

    def get_account_summary(self, currency: Optional[str] = None) -> list[Account]:
        """Balances for one currency, or every currency when omitted."""
        return self._execute(methods.get_account_summary(currency))

    # ------------------------------------------------------------------
    # Order management (private)
    # ------------------------------------------------------------------

    def create_order(self, req: CreateOrderRequest) -> CreateOrderResult:
        """Place a new order."""
        return self._execute(methods.create_order(req))

    def cancel_order(self, instrument_name: str, order_id: str) -> None:
        """Request cancellation of one order.  Completion is asynchronous on the exchange."""
        return self._execute(methods.cancel_order(instrument_name, order_id))

    def cancel_all_orders(self, instrument_name: str) -> None:
        """Cancel every open order for an instrument."""
        return self._execute(methods.cancel_all_orders(instrument_name))

    def get_order_history(self, req: Optional[GetOrderHistoryRequest] = None) -> list[Order]:
        return self._execute(methods.get_order_history(req))

    def get_open_orders(self, req: Optional[GetOpenOrdersRequest] = None) -> OpenOrdersResult:
        return self._execute(methods.get_open_orders(req))

    def get_order_detail(self, order_id: str) -> OrderDetail:
        return self._execute(methods.get_order_detail(order_id))

    def get_trades(self, req: Optional[GetTradesRequest] = None) -> list[Trade]:
        """Fetch the account's own trades, newest first."""
        return self._execute(methods.get_trades(req))


# ---------------------------------------------------------------------------
# Async client
# ---------------------------------------------------------------------------

class AsyncCryptoComRestClient:
    """
    Async REST client for the Crypto.com Exchange (aiohttp-based).

    Takes the same parameters as CryptoComRestClient; ``session`` is an
    aiohttp.ClientSession.  When omitted one is created on first use and
    closed by close().

    Calls honour asyncio cancellation: cancelling the awaiting task (or an
    enclosing asyncio.timeout) aborts the in-flight HTTP request and
    asyncio.CancelledError propagates unchanged.
    """

    def __init__(
        self,
        auth: CryptoComAuth,
        timeout: float = 10.0,
        *,
        clock: Optional[Clock] = None,
        id_generator: Optional[IDGenerator] = None,
        signature_generator: Optional[SignatureGenerator] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._auth         = auth
        self._timeout      = timeout
        self._builder      = RequestBuilder(
            auth,
            clock=clock,
            id_generator=id_generator,
            signature_generator=signature_generator,
        )
        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None

    async def __aenter__(self) -> "AsyncCryptoComRestClient":
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            if not self._session.closed:
                await self._session.close()
            self._session = None

    # ------------------------------------------------------------------
    # Internal async request helpers
    # ------------------------------------------------------------------

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session      = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def _request(
        self,
        method: str,
        *,
        envelope: Optional[RequestEnvelope] = None,
        query: Optional[dict[str, str]] = None,
    ) -> tuple[int, BaseResponse]:
        session = self._get_session()
        url     = self._auth.url_for(method)
        timeout = aiohttp.ClientTimeout(total=self._timeout)
        try:
            if envelope is None:
                logger.debug("GET %s  params=%s", url, query)
                async with session.request("GET", url, params=query, timeout=timeout) as resp:
                    status = resp.status
                    body   = await resp.read()
            else:
                logger.debug("POST %s  id=%d", url, envelope.id)
                async with session.request(
                    "POST", url,
                    data=envelope.to_wire(),
                    headers=_JSON_HEADERS,
                    timeout=timeout,
                ) as resp:
                    status = resp.status
                    body   = await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TransportError(f"request to {method} failed: {exc!r}") from exc

        return status, _decode_response(status, body, method)

    async def _execute(self, call: Call[T]) -> T:
        if call.public:
            status, response = await self._request(call.method, query=_query_params(call.params))
        else:
            envelope = self._builder.build(call.method, call.params)
            status, response = await self._request(call.method, envelope=envelope)
        return _finish(call, status, response)

    # ------------------------------------------------------------------
    # Market data (public)
    # ------------------------------------------------------------------

    async def get_instruments(self) -> list[Instrument]:
        return await self._execute(methods.get_instruments())

    async def get_book(self, instrument_name: str, depth: int = 10) -> BookResult:
        return await self._execute(methods.get_book(instrument_name, depth))

    async def get_tickers(self, instrument_name: Optional[str] = None) -> list[Ticker]:
        return await self._execute(methods.get_tickers(instrument_name))

    # ------------------------------------------------------------------
    # Account (private)
    # ------------------------------------------------------------------

    async def get_account_summary(self, currency: Optional[str] = None) -> list[Account]:
        return await self._execute(methods.get_account_summary(currency))

    # ------------------------------------------------------------------
    # Order management (private)
    # ------------------------------------------------------------------

    async def create_order(self, req: CreateOrderRequest) -> CreateOrderResult:
        return await self._execute(methods.create_order(req))

    async def cancel_order(self, instrument_name: str, order_id: str) -> None:
        return await self._execute(methods.cancel_order(instrument_name, order_id))

    async def cancel_all_orders(self, instrument_name: str) -> None:
        return await self._execute(methods.cancel_all_orders(instrument_name))

    async def get_order_history(self, req: Optional[GetOrderHistoryRequest] = None) -> list[Order]:
        return await self._execute(methods.get_order_history(req))

    async def get_open_orders(self, req: Optional[GetOpenOrdersRequest] = None) -> OpenOrdersResult:
        return await self._execute(methods.get_open_orders(req))

    async def get_order_detail(self, order_id: str) -> OrderDetail:
        return await self._execute(methods.get_order_detail(order_id))

    async def get_trades(self, req: Optional[GetTradesRequest] = None) -> list[Trade]:
        return await self._execute(methods.get_trades(req))
