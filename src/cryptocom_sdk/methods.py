"""
methods.py – Per-endpoint validation, parameter building and result parsing.

Each function here describes one RPC call as a Call: the method name, the
params to send and how to turn ``result`` into a model.  Validation runs
when the Call is built, so a rejected argument raises
InvalidParameterError before the client consumes an id, a nonce or a
signature, and before any network I/O.

The sync and async REST clients share these builders and differ only in
how they execute a Call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Generic, Optional, TypeVar

from .errors import InvalidParameterError
from .types import (
    Account,
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
    OrderType,
    Ticker,
    Trade,
    datetime_to_ms,
)

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Method names
# ---------------------------------------------------------------------------

METHOD_GET_INSTRUMENTS     = "public/get-instruments"
METHOD_GET_BOOK            = "public/get-book"
METHOD_GET_TICKER          = "public/get-ticker"
METHOD_GET_ACCOUNT_SUMMARY = "private/get-account-summary"
METHOD_CREATE_ORDER        = "private/create-order"
METHOD_CANCEL_ORDER        = "private/cancel-order"
METHOD_CANCEL_ALL_ORDERS   = "private/cancel-all-orders"
METHOD_GET_ORDER_HISTORY   = "private/get-order-history"
METHOD_GET_OPEN_ORDERS     = "private/get-open-orders"
METHOD_GET_ORDER_DETAIL    = "private/get-order-detail"
METHOD_GET_TRADES          = "private/get-trades"

# Exchange-documented limits
MAX_BOOK_DEPTH     = 150
MAX_PAGE_SIZE      = 200
MAX_CLIENT_OID_LEN = 36


@dataclass(frozen=True)
class Call(Generic[T]):
    """A validated RPC call ready to be executed."""
    method: str
    parse:  Callable[[Any], T]
    params: dict[str, Any] = field(default_factory=dict)
    public: bool = False


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _require(value: Optional[str], parameter: str) -> None:
    if not value:
        raise InvalidParameterError(parameter, "cannot be empty")


def _check_paging(page_size: int, page: int) -> None:
    if page_size < 0:
        raise InvalidParameterError("page_size", "cannot be less than 0")
    if page_size > MAX_PAGE_SIZE:
        raise InvalidParameterError("page_size", f"cannot be greater than {MAX_PAGE_SIZE}")
    if page < 0:
        raise InvalidParameterError("page", "cannot be less than 0")


def _check_positive(value: Optional[Decimal], parameter: str) -> None:
    if value is not None and value <= 0:
        raise InvalidParameterError(parameter, "must be greater than 0")


def _paged_params(req: GetTradesRequest) -> dict[str, Any]:
    _check_paging(req.page_size, req.page)
    start_ts = datetime_to_ms(req.start) if req.start is not None else None
    end_ts   = datetime_to_ms(req.end) if req.end is not None else None
    if start_ts is not None and end_ts is not None and end_ts < start_ts:
        raise InvalidParameterError("end", "cannot be before start")

    params: dict[str, Any] = {"page": req.page}
    if req.instrument_name:
        params["instrument_name"] = req.instrument_name
    if req.page_size > 0:
        params["page_size"] = req.page_size
    if start_ts is not None:
        params["start_ts"] = start_ts
    if end_ts is not None:
        params["end_ts"] = end_ts
    return params


# ---------------------------------------------------------------------------
# Result parsers
# ---------------------------------------------------------------------------

def _result_dict(result: Any) -> dict[str, Any]:
    return result if isinstance(result, dict) else {}


def _parse_instruments(result: Any) -> list[Instrument]:
    return [Instrument.model_validate(i) for i in _result_dict(result).get("instruments", [])]


def _parse_tickers(result: Any) -> list[Ticker]:
    data = _result_dict(result).get("data", [])
    # a single-instrument query returns an object instead of a list
    if isinstance(data, dict):
        data = [data]
    return [Ticker.model_validate(t) for t in data]


def _parse_accounts(result: Any) -> list[Account]:
    return [Account.model_validate(a) for a in _result_dict(result).get("accounts", [])]


def _parse_orders(result: Any) -> list[Order]:
    return [Order.model_validate(o) for o in _result_dict(result).get("order_list", [])]


def _parse_trades(result: Any) -> list[Trade]:
    return [Trade.model_validate(t) for t in _result_dict(result).get("trade_list", [])]


def _ignore(result: Any) -> None:
    return None


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------

def get_instruments() -> Call[list[Instrument]]:
    return Call(METHOD_GET_INSTRUMENTS, _parse_instruments, public=True)


def get_book(instrument_name: str, depth: int = 10) -> Call[BookResult]:
    _require(instrument_name, "instrument_name")
    if depth < 1:
        raise InvalidParameterError("depth", "cannot be less than 1")
    if depth > MAX_BOOK_DEPTH:
        raise InvalidParameterError("depth", f"cannot be greater than {MAX_BOOK_DEPTH}")
    return Call(
        METHOD_GET_BOOK,
        BookResult.model_validate,
        {"instrument_name": instrument_name, "depth": depth},
        public=True,
    )


def get_tickers(instrument_name: Optional[str] = None) -> Call[list[Ticker]]:
    params = {"instrument_name": instrument_name} if instrument_name else {}
    return Call(METHOD_GET_TICKER, _parse_tickers, params, public=True)


# ---------------------------------------------------------------------------
# Private endpoints
# ---------------------------------------------------------------------------

def get_account_summary(currency: Optional[str] = None) -> Call[list[Account]]:
    params = {"currency": currency} if currency else {}
    return Call(METHOD_GET_ACCOUNT_SUMMARY, _parse_accounts, params)


def create_order(req: CreateOrderRequest) -> Call[CreateOrderResult]:
    _require(req.instrument_name, "instrument_name")
    _check_positive(req.price, "price")
    _check_positive(req.quantity, "quantity")
    _check_positive(req.notional, "notional")
    _check_positive(req.trigger_price, "trigger_price")

    if req.type in (OrderType.LIMIT, OrderType.STOP_LIMIT, OrderType.TAKE_PROFIT_LIMIT):
        if req.price is None:
            raise InvalidParameterError("price", f"is required for {req.type.value} orders")
        if req.quantity is None:
            raise InvalidParameterError("quantity", f"is required for {req.type.value} orders")
    elif req.quantity is None and req.notional is None:
        raise InvalidParameterError("quantity", f"or notional is required for {req.type.value} orders")

    if req.type in (
        OrderType.STOP_LOSS, OrderType.STOP_LIMIT,
        OrderType.TAKE_PROFIT, OrderType.TAKE_PROFIT_LIMIT,
    ) and req.trigger_price is None:
        raise InvalidParameterError("trigger_price", f"is required for {req.type.value} orders")

    if req.client_oid is not None and len(req.client_oid) > MAX_CLIENT_OID_LEN:
        raise InvalidParameterError(
            "client_oid", f"cannot be longer than {MAX_CLIENT_OID_LEN} characters"
        )

    params: dict[str, Any] = {
        "instrument_name": req.instrument_name,
        "side":            req.side.value,
        "type":            req.type.value,
        "price":           req.price,
        "quantity":        req.quantity,
        "notional":        req.notional,
        "client_oid":      req.client_oid,
        "time_in_force":   req.time_in_force.value if req.time_in_force else None,
        "exec_inst":       req.exec_inst.value if req.exec_inst else None,
        "trigger_price":   req.trigger_price,
    }
    return Call(METHOD_CREATE_ORDER, CreateOrderResult.model_validate, params)


def cancel_order(instrument_name: str, order_id: str) -> Call[None]:
    _require(instrument_name, "instrument_name")
    _require(order_id, "order_id")
    return Call(
        METHOD_CANCEL_ORDER,
        _ignore,
        {"instrument_name": instrument_name, "order_id": order_id},
    )


def cancel_all_orders(instrument_name: str) -> Call[None]:
    _require(instrument_name, "instrument_name")
    return Call(METHOD_CANCEL_ALL_ORDERS, _ignore, {"instrument_name": instrument_name})


def get_order_history(req: Optional[GetOrderHistoryRequest] = None) -> Call[list[Order]]:
    return Call(METHOD_GET_ORDER_HISTORY, _parse_orders, _paged_params(req or GetOrderHistoryRequest()))


def get_open_orders(req: Optional[GetOpenOrdersRequest] = None) -> Call[OpenOrdersResult]:
    req = req or GetOpenOrdersRequest()
    _check_paging(req.page_size, req.page)

    params: dict[str, Any] = {"page": req.page}
    if req.instrument_name:
        params["instrument_name"] = req.instrument_name
    if req.page_size > 0:
        params["page_size"] = req.page_size
    return Call(METHOD_GET_OPEN_ORDERS, OpenOrdersResult.model_validate, params)


def get_order_detail(order_id: str) -> Call[OrderDetail]:
    _require(order_id, "order_id")
    return Call(METHOD_GET_ORDER_DETAIL, OrderDetail.model_validate, {"order_id": order_id})


def get_trades(req: Optional[GetTradesRequest] = None) -> Call[list[Trade]]:
    return Call(METHOD_GET_TRADES, _parse_trades, _paged_params(req or GetTradesRequest()))
