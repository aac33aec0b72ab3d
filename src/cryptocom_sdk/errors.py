"""
errors.py – Exception taxonomy and response classification.

Every exception raised by this SDK derives from CryptoComError:

  InvalidParameterError  – bad caller input, raised before any I/O
  SignatureError         – key material or canonicalisation failure
  TransportError         – connection / timeout / undecodable body
  ResponseError          – the exchange answered with a non-zero code

ResponseError has one subclass per exchange code the SDK knows about, so
callers branch with ``except IllegalIPError`` or ``isinstance`` while the
raw code stays available on every instance:

    try:
        client.cancel_all_orders("BTC_USDT")
    except IllegalIPError:
        ...                      # whitelist this host
    except ResponseError as exc:
        print(exc.http_status_code, exc.code, exc.raw_code)

Codes the SDK does not know surface as UnexpectedResponseError.
"""

from __future__ import annotations

from typing import ClassVar, Optional, Union


class CryptoComError(Exception):
    """Base class for every error raised by the SDK."""


class InvalidParameterError(CryptoComError, ValueError):
    """Caller input rejected before any request was built."""

    def __init__(self, parameter: str, reason: str) -> None:
        self.parameter = parameter
        self.reason    = reason
        super().__init__(f"invalid parameter {parameter}: {reason}")


class SignatureError(CryptoComError):
    """The request could not be signed."""


class TransportError(CryptoComError):
    """
    The exchange could not be reached, or its reply could not be decoded.

    The underlying requests / aiohttp / JSON exception is available as
    ``__cause__``.  status_code is set when an HTTP response was received.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


# ---------------------------------------------------------------------------
# Response errors
# ---------------------------------------------------------------------------

class ResponseError(CryptoComError):
    """
    The exchange reported a failure.

    Attributes
    ----------
    code             : numeric exchange code, None if it was not an integer
    http_status_code : HTTP status of the reply
    raw_code         : code exactly as it appeared in the body
    method           : RPC method that failed
    message          : exchange-supplied message, if any
    """

    known_code: ClassVar[Optional[int]] = None
    reason:     ClassVar[str]           = "UNKNOWN"

    def __init__(
        self,
        code: Optional[int],
        http_status_code: int,
        raw_code: Optional[str] = None,
        method: str = "",
        message: Optional[str] = None,
    ) -> None:
        self.code             = code
        self.http_status_code = http_status_code
        self.raw_code         = raw_code if raw_code is not None else str(code)
        self.method           = method
        self.message          = message
        location = f" {method}" if method else ""
        detail   = f": {message}" if message else ""
        super().__init__(
            f"crypto.com API error [{http_status_code}]{location} "
            f"code={self.raw_code} ({self.reason}){detail}"
        )


class UnexpectedResponseError(ResponseError):
    """Non-success reply carrying a code this SDK does not recognise."""


# 1xxxx – request / session level

class ExchangeSystemError(ResponseError):
    known_code, reason = 10001, "SYS_ERROR"


class UnauthorizedError(ResponseError):
    known_code, reason = 10002, "UNAUTHORIZED"


class IllegalIPError(ResponseError):
    """The calling IP address is not whitelisted for this API key."""
    known_code, reason = 10003, "IP_ILLEGAL"


class BadRequestError(ResponseError):
    known_code, reason = 10004, "BAD_REQUEST"


class UserTierInvalidError(ResponseError):
    known_code, reason = 10005, "USER_TIER_INVALID"


class TooManyRequestsError(ResponseError):
    known_code, reason = 10006, "TOO_MANY_REQUESTS"


class InvalidNonceError(ResponseError):
    """Nonce is more than 30 s away from server time, or was replayed."""
    known_code, reason = 10007, "INVALID_NONCE"


class MethodNotFoundError(ResponseError):
    known_code, reason = 10008, "METHOD_NOT_FOUND"


class InvalidDateRangeError(ResponseError):
    known_code, reason = 10009, "INVALID_DATE_RANGE"


# 2xxxx – account level

class DuplicateRecordError(ResponseError):
    known_code, reason = 20001, "DUPLICATE_RECORD"


class InsufficientBalanceError(ResponseError):
    known_code, reason = 20002, "NEGATIVE_BALANCE"


# 3xxxx – order validation

class SymbolNotFoundError(ResponseError):
    known_code, reason = 30003, "SYMBOL_NOT_FOUND"


class SideNotSupportedError(ResponseError):
    known_code, reason = 30004, "SIDE_NOT_SUPPORTED"


class OrderTypeNotSupportedError(ResponseError):
    known_code, reason = 30005, "ORDERTYPE_NOT_SUPPORTED"


class MinPriceViolatedError(ResponseError):
    known_code, reason = 30006, "MIN_PRICE_VIOLATED"


class MaxPriceViolatedError(ResponseError):
    known_code, reason = 30007, "MAX_PRICE_VIOLATED"


class MinQuantityViolatedError(ResponseError):
    known_code, reason = 30008, "MIN_QUANTITY_VIOLATED"


class MaxQuantityViolatedError(ResponseError):
    known_code, reason = 30009, "MAX_QUANTITY_VIOLATED"


class MissingArgumentError(ResponseError):
    known_code, reason = 30010, "MISSING_ARGUMENT"


class InvalidPricePrecisionError(ResponseError):
    known_code, reason = 30013, "INVALID_PRICE_PRECISION"


class InvalidQuantityPrecisionError(ResponseError):
    known_code, reason = 30014, "INVALID_QUANTITY_PRECISION"


class MinNotionalViolatedError(ResponseError):
    known_code, reason = 30016, "MIN_NOTIONAL_VIOLATED"


class MaxNotionalViolatedError(ResponseError):
    known_code, reason = 30017, "MAX_NOTIONAL_VIOLATED"


class MinAmountViolatedError(ResponseError):
    known_code, reason = 30023, "MIN_AMOUNT_VIOLATED"


class MaxAmountViolatedError(ResponseError):
    known_code, reason = 30024, "MAX_AMOUNT_VIOLATED"


class AmountPrecisionOverflowError(ResponseError):
    known_code, reason = 30025, "AMOUNT_PRECISION_OVERFLOW"


# 4xxxx – margin

class InvalidAccountStatusError(ResponseError):
    known_code, reason = 40001, "MG_INVALID_ACCOUNT_STATUS"


class TransferActiveLoanError(ResponseError):
    known_code, reason = 40002, "MG_TRANSFER_ACTIVE_LOAN"


class InvalidLoanCurrencyError(ResponseError):
    known_code, reason = 40003, "MG_INVALID_LOAN_CURRENCY"


class InvalidRepayAmountError(ResponseError):
    known_code, reason = 40004, "MG_INVALID_REPAY_AMOUNT"


class NoActiveLoanError(ResponseError):
    known_code, reason = 40005, "MG_NO_ACTIVE_LOAN"


class BlockedBorrowError(ResponseError):
    known_code, reason = 40006, "MG_BLOCKED_BORROW"


class BlockedNewOrderError(ResponseError):
    known_code, reason = 40007, "MG_BLOCKED_NEW_ORDER"


# 5xxxx – deposit / withdrawal

class CreditLineNotMaintainedError(ResponseError):
    known_code, reason = 50001, "DW_CREDIT_LINE_NOT_MAINTAINED"


_ERRORS_BY_CODE: dict[int, type[ResponseError]] = {
    cls.known_code: cls
    for cls in ResponseError.__subclasses__()
    if cls.known_code is not None
}


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def parse_code(code: Union[int, str, None]) -> Optional[int]:
    """
    Normalise an exchange code to an int.

    None and "" mean success (0).  Returns None when the code is not an
    integer at all.
    """
    if code is None:
        return 0
    if isinstance(code, bool):
        return None
    if isinstance(code, int):
        return code
    text = str(code).strip()
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        return None


def error_class_for(code: Optional[int]) -> type[ResponseError]:
    """Return the ResponseError subclass registered for code."""
    if code is None:
        return UnexpectedResponseError
    return _ERRORS_BY_CODE.get(code, UnexpectedResponseError)


def check_error_response(
    status_code: int,
    code: Union[int, str, None],
    method: str = "",
    message: Optional[str] = None,
) -> Optional[ResponseError]:
    """
    Classify an (HTTP status, exchange code) pair.

    Returns None for success (2xx and a zero code), otherwise an instance
    of the matching ResponseError subclass.  The error is returned, not
    raised; raising is left to the caller.
    """
    parsed = parse_code(code)
    if 200 <= status_code < 300 and parsed == 0:
        return None

    raw = "" if code is None else str(code)
    return error_class_for(parsed)(
        code=parsed,
        http_status_code=status_code,
        raw_code=raw,
        method=method,
        message=message,
    )
