"""
Crypto.com SDK – Python SDK for the Crypto.com Exchange v2 API.

Provides:
  - Unified façade                     (client.py  → CryptoComClient)
  - HMAC-SHA256 request signing        (signing.py → generate_signature)
  - Credentials and envelope building  (auth.py    → CryptoComAuth, RequestBuilder)
  - Typed Pydantic v2 models           (types.py)
  - Synchronous REST client            (rest.py    → CryptoComRestClient)
  - Async REST client                  (rest.py    → AsyncCryptoComRestClient)
  - Error taxonomy and classification  (errors.py  → ResponseError, check_error_response)

Quickstart
----------
    import asyncio
    from cryptocom_sdk import CryptoComClient, CryptoComEnv, IllegalIPError

    async def main() -> None:
        async with CryptoComClient(api_key="...", secret_key="...",
                                   env=CryptoComEnv.UAT) as client:
            book = await client.rest.get_book("BTC_USDT", depth=5)
            try:
                await client.rest.cancel_all_orders("BTC_USDT")
            except IllegalIPError:
                print("whitelist this host's IP for the API key")

    asyncio.run(main())
"""

from .types import (
    # Environment
    CryptoComEnv,
    # Enums
    OrderSide,
    OrderType,
    TimeInForce,
    ExecInst,
    OrderStatus,
    LiquidityIndicator,
    # Envelopes
    RequestEnvelope,
    BaseResponse,
    # Requests
    CreateOrderRequest,
    GetTradesRequest,
    GetOrderHistoryRequest,
    GetOpenOrdersRequest,
    # Results
    Instrument,
    Book,
    BookResult,
    Ticker,
    Account,
    CreateOrderResult,
    Order,
    Trade,
    OpenOrdersResult,
    OrderDetail,
)
from .errors import (
    CryptoComError,
    InvalidParameterError,
    SignatureError,
    TransportError,
    ResponseError,
    UnexpectedResponseError,
    UnauthorizedError,
    IllegalIPError,
    TooManyRequestsError,
    InvalidNonceError,
    InsufficientBalanceError,
    check_error_response,
)
from .signing import (
    SignatureRequest,
    SignatureGenerator,
    canonicalize_params,
    generate_signature,
    normalize_params,
)
from .auth import (
    Clock,
    IDGenerator,
    CryptoComAuth,
    RequestBuilder,
    SequentialIDGenerator,
    system_clock,
)
from .rest import CryptoComRestClient, AsyncCryptoComRestClient
from .client import CryptoComClient

__all__ = [
    # Environment
    "CryptoComEnv",
    # Enums
    "OrderSide",
    "OrderType",
    "TimeInForce",
    "ExecInst",
    "OrderStatus",
    "LiquidityIndicator",
    # Envelopes
    "RequestEnvelope",
    "BaseResponse",
    # Requests
    "CreateOrderRequest",
    "GetTradesRequest",
    "GetOrderHistoryRequest",
    "GetOpenOrdersRequest",
    # Results
    "Instrument",
    "Book",
    "BookResult",
    "Ticker",
    "Account",
    "CreateOrderResult",
    "Order",
    "Trade",
    "OpenOrdersResult",
    "OrderDetail",
    # Errors
    "CryptoComError",
    "InvalidParameterError",
    "SignatureError",
    "TransportError",
    "ResponseError",
    "UnexpectedResponseError",
    "UnauthorizedError",
    "IllegalIPError",
    "TooManyRequestsError",
    "InvalidNonceError",
    "InsufficientBalanceError",
    "check_error_response",
    # Signing
    "SignatureRequest",
    "SignatureGenerator",
    "canonicalize_params",
    "generate_signature",
    "normalize_params",
    # Auth
    "Clock",
    "IDGenerator",
    "CryptoComAuth",
    "RequestBuilder",
    "SequentialIDGenerator",
    "system_clock",
    # Clients
    "CryptoComRestClient",
    "AsyncCryptoComRestClient",
    "CryptoComClient",
]

__version__ = "0.1.0"
