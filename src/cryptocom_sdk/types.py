"""
types.py – Pydantic v2 models for the Crypto.com Exchange v2 API.

Maps to the JSON-RPC schema documented at
https://exchange-docs.crypto.com/spot/index.html (v2).

Crypto.com returns prices, quantities and fees as JSON numbers; models
keep them as float.  Timestamps arrive as Unix milliseconds and are
exposed as timezone-aware UTC datetimes.

Deserialisation
---------------
Use Model.model_validate(raw_dict) to parse API results:

    orders = OpenOrdersResult.model_validate(raw["result"]).order_list
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum, unique
from typing import Annotated, Any, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

@unique
class CryptoComEnv(str, Enum):
    """Crypto.com deployment environment."""
    PRODUCTION = "production"
    UAT        = "uat"

    @property
    def label(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

@unique
class OrderSide(str, Enum):
    BUY  = "BUY"
    SELL = "SELL"


@unique
class OrderType(str, Enum):
    LIMIT             = "LIMIT"
    MARKET            = "MARKET"
    STOP_LOSS         = "STOP_LOSS"
    STOP_LIMIT        = "STOP_LIMIT"
    TAKE_PROFIT       = "TAKE_PROFIT"
    TAKE_PROFIT_LIMIT = "TAKE_PROFIT_LIMIT"


@unique
class TimeInForce(str, Enum):
    GOOD_TILL_CANCEL    = "GOOD_TILL_CANCEL"
    FILL_OR_KILL        = "FILL_OR_KILL"
    IMMEDIATE_OR_CANCEL = "IMMEDIATE_OR_CANCEL"


@unique
class ExecInst(str, Enum):
    POST_ONLY = "POST_ONLY"


@unique
class OrderStatus(str, Enum):
    ACTIVE   = "ACTIVE"
    CANCELED = "CANCELED"
    FILLED   = "FILLED"
    REJECTED = "REJECTED"
    EXPIRED  = "EXPIRED"


@unique
class LiquidityIndicator(str, Enum):
    TAKER = "TAKER"
    MAKER = "MAKER"


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def ms_to_datetime(v: Any) -> Any:
    """Convert Unix milliseconds to an aware UTC datetime; pass others through."""
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return datetime.fromtimestamp(v / 1000, tz=timezone.utc)
    return v


def datetime_to_ms(dt: datetime) -> int:
    """Unix milliseconds for dt; naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


# datetime field that accepts the exchange's millisecond timestamps
MsDatetime = Annotated[datetime, BeforeValidator(ms_to_datetime)]


# ---------------------------------------------------------------------------
# Wire envelopes
# ---------------------------------------------------------------------------

class RequestEnvelope(BaseModel):
    """
    Signed body of a private request.

    Built once per call by RequestBuilder and never mutated; ``sig`` is
    computed over exactly the ``params`` stored here.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id:        int
    method:    str
    api_key:   str
    params:    dict[str, Any] = {}
    nonce:     int
    signature: str = Field(alias="sig")

    def to_wire(self) -> str:
        """JSON body exactly as sent to the exchange."""
        return self.model_dump_json(by_alias=True)


class BaseResponse(BaseModel):
    """Common envelope of every Crypto.com reply."""
    id:      int                   = 0
    method:  str                   = ""
    code:    Union[int, str, None] = 0
    message: Optional[str]         = None
    result:  Any                   = None


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class CreateOrderRequest(BaseModel):
    """
    Parameters for private/create-order.

    LIMIT orders need price and quantity.  MARKET orders need quantity,
    or notional for a MARKET BUY.  client_oid is echoed back on the order
    (max 36 characters).
    """
    instrument_name: str
    side:            OrderSide
    type:            OrderType
    price:           Optional[Decimal]     = None
    quantity:        Optional[Decimal]     = None
    notional:        Optional[Decimal]     = None
    client_oid:      Optional[str]         = None
    time_in_force:   Optional[TimeInForce] = None
    exec_inst:       Optional[ExecInst]    = None
    trigger_price:   Optional[Decimal]     = None


class GetTradesRequest(BaseModel):
    """
    Parameters for private/get-trades.

    Leave instrument_name unset for all instruments.  page_size 0 uses the
    exchange default (20); the maximum is 200.
    """
    instrument_name: Optional[str]      = None
    start:           Optional[datetime] = None
    end:             Optional[datetime] = None
    page_size:       int                = 0
    page:            int                = 0


class GetOrderHistoryRequest(GetTradesRequest):
    """Parameters for private/get-order-history (same shape as get-trades)."""


class GetOpenOrdersRequest(BaseModel):
    instrument_name: Optional[str] = None
    page_size:       int           = 0
    page:            int           = 0


# ---------------------------------------------------------------------------
# Market data models
# ---------------------------------------------------------------------------

class Instrument(BaseModel):
    """A tradeable currency pair, e.g. BTC_USDT."""
    instrument_name:            str
    quote_currency:             str
    base_currency:              str
    price_decimals:             int
    quantity_decimals:          int
    margin_trading_enabled:     bool                 = False
    margin_trading_enabled_5x:  bool                 = False
    margin_trading_enabled_10x: bool                 = False
    max_quantity:               Optional[str]        = None
    min_quantity:               Optional[str]        = None
    max_price:                  Optional[str]        = None
    min_price:                  Optional[str]        = None
    last_update_date:           Optional[MsDatetime] = None
    quantity_tick_size:         Optional[str]        = None
    price_tick_size:            Optional[str]        = None


class Book(BaseModel):
    """
    One order book snapshot.

    Each level is [price, quantity, number of orders].
    """
    model_config = ConfigDict(populate_by_name=True)

    bids:      list[list[float]]    = []
    asks:      list[list[float]]    = []
    timestamp: Optional[MsDatetime] = Field(default=None, alias="t")


class BookResult(BaseModel):
    instrument_name: str        = ""
    depth:           int        = 0
    data:            list[Book] = []


class Ticker(BaseModel):
    """Ticker fields use the exchange's single-letter keys as aliases."""
    model_config = ConfigDict(populate_by_name=True)

    instrument_name: str                  = Field(alias="i")
    bid:             Optional[float]      = Field(default=None, alias="b")
    ask:             Optional[float]      = Field(default=None, alias="k")
    latest_trade:    Optional[float]      = Field(default=None, alias="a")
    timestamp:       Optional[MsDatetime] = Field(default=None, alias="t")
    volume:          Optional[float]      = Field(default=None, alias="v")
    high:            Optional[float]      = Field(default=None, alias="h")
    low:             Optional[float]      = Field(default=None, alias="l")
    change:          Optional[float]      = Field(default=None, alias="c")


# ---------------------------------------------------------------------------
# Account / order models
# ---------------------------------------------------------------------------

class Account(BaseModel):
    """Balance of a single currency."""
    currency:  str
    balance:   float = 0.0
    available: float = 0.0
    order:     float = 0.0
    stake:     float = 0.0


class CreateOrderResult(BaseModel):
    order_id:   str
    client_oid: Optional[str] = None


class Order(BaseModel):
    """An order as reported by get-order-history / get-open-orders."""
    order_id:            str
    instrument_name:     str
    status:              OrderStatus
    side:                OrderSide
    type:                OrderType
    price:               float                     = 0.0
    quantity:            float                     = 0.0
    avg_price:           float                     = 0.0
    cumulative_quantity: float                     = 0.0
    cumulative_value:    float                     = 0.0
    client_oid:          Optional[str]             = None
    reason:              Optional[Union[int, str]] = None
    fee_currency:        Optional[str]             = None
    time_in_force:       Optional[TimeInForce]     = None
    exec_inst:           Optional[ExecInst]        = None
    trigger_price:       Optional[float]           = None
    create_time:         Optional[MsDatetime]      = None
    update_time:         Optional[MsDatetime]      = None

    @field_validator("exec_inst", mode="before")
    @classmethod
    def empty_exec_inst(cls, v: Any) -> Any:
        # the exchange sends "" when no instruction is set
        return v or None


class Trade(BaseModel):
    """A private fill from get-trades / get-order-detail."""
    trade_id:            str
    order_id:            str
    instrument_name:     str
    side:                OrderSide
    traded_price:        float
    traded_quantity:     float
    fee:                 float                        = 0.0
    fee_currency:        str                          = ""
    create_time:         Optional[MsDatetime]         = None
    liquidity_indicator: Optional[LiquidityIndicator] = None


class OpenOrdersResult(BaseModel):
    count:      int         = 0
    order_list: list[Order] = []


class OrderDetail(BaseModel):
    trade_list: list[Trade] = []
    order_info: Order
