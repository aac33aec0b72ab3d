"""
examples/quickstart.py – End-to-end demo of the Crypto.com SDK.

Walks through the request pipeline:
  1. Load credentials from the environment
  2. Fetch public market data (instruments, order book, ticker)
  3. Place a far-from-market POST_ONLY limit order
  4. List open orders, then cancel everything on the instrument
  5. Run concurrent signed calls with the async client and a deadline

HOW TO RUN
----------
    export CRYPTOCOM_API_KEY="your_api_key"
    export CRYPTOCOM_SECRET_KEY="your_secret_key"
    export CRYPTOCOM_ENV="uat"              # or "production"
    python examples/quickstart.py

    Set CRYPTOCOM_PLACE_ORDER=1 to actually submit the demo order.
"""

from __future__ import annotations

import asyncio
import logging
import os
from decimal import Decimal

from cryptocom_sdk import (
    CreateOrderRequest,
    CryptoComAuth,
    CryptoComClient,
    CryptoComRestClient,
    ExecInst,
    GetOpenOrdersRequest,
    GetTradesRequest,
    IllegalIPError,
    OrderSide,
    OrderType,
    ResponseError,
    TimeInForce,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s – %(message)s",
)
logger = logging.getLogger("quickstart")

INSTRUMENT  = "BTC_USDT"
PLACE_ORDER = os.environ.get("CRYPTOCOM_PLACE_ORDER") == "1"


# ---------------------------------------------------------------------------
# Part 1 – sync REST: market data + order management
# ---------------------------------------------------------------------------

def rest_demo() -> None:
    logger.info("=== sync REST demo ===")

    auth = CryptoComAuth.from_env()
    logger.info("Using %s", auth.base_url)

    with CryptoComRestClient(auth) as client:
        instruments = client.get_instruments()
        logger.info("Instruments listed: %d", len(instruments))

        book = client.get_book(INSTRUMENT, depth=5)
        snapshot = book.data[0] if book.data else None
        if snapshot and snapshot.bids and snapshot.asks:
            logger.info(
                "Best bid: %s @ %s  |  Best ask: %s @ %s",
                snapshot.bids[0][1], snapshot.bids[0][0],
                snapshot.asks[0][1], snapshot.asks[0][0],
            )
        else:
            logger.info("Order book is empty")

        for ticker in client.get_tickers(INSTRUMENT):
            logger.info("Ticker %s  last=%s  24h vol=%s", ticker.instrument_name, ticker.latest_trade, ticker.volume)

        try:
            if PLACE_ORDER:
                result = client.create_order(CreateOrderRequest(
                    instrument_name=INSTRUMENT,
                    side=OrderSide.BUY,
                    type=OrderType.LIMIT,
                    price=Decimal("1000"),        # far below market, will rest
                    quantity=Decimal("0.0001"),
                    time_in_force=TimeInForce.GOOD_TILL_CANCEL,
                    exec_inst=ExecInst.POST_ONLY,
                ))
                logger.info("Order submitted – id=%s", result.order_id)

            open_orders = client.get_open_orders(GetOpenOrdersRequest(instrument_name=INSTRUMENT))
            logger.info("Open orders: %d", open_orders.count)

            client.cancel_all_orders(INSTRUMENT)
            logger.info("Cancel-all requested for %s", INSTRUMENT)
        except IllegalIPError:
            logger.error("This host's IP is not whitelisted for the API key")
        except ResponseError as exc:
            logger.warning("Exchange rejected request: %s", exc)


# ---------------------------------------------------------------------------
# Part 2 – async REST: concurrent calls under one deadline
# ---------------------------------------------------------------------------

async def async_demo() -> None:
    logger.info("=== async REST demo ===")

    async with CryptoComClient.from_env(rest_timeout=5.0) as client:
        try:
            async with asyncio.timeout(10):
                accounts, trades = await asyncio.gather(
                    client.rest.get_account_summary(),
                    client.rest.get_trades(GetTradesRequest(instrument_name=INSTRUMENT, page_size=10)),
                )
        except TimeoutError:
            logger.warning("Deadline exceeded; in-flight requests were cancelled")
            return
        except ResponseError as exc:
            logger.warning("Exchange rejected request: %s", exc)
            return

    for account in accounts:
        if account.balance:
            logger.info("Balance %-6s  available=%s  in orders=%s", account.currency, account.available, account.order)
    logger.info("Recent trades on %s: %d", INSTRUMENT, len(trades))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main() -> None:
    rest_demo()
    asyncio.run(async_demo())


if __name__ == "__main__":
    main()
