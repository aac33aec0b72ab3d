"""
signing.py – Request parameter canonicalisation and HMAC signing.

Crypto.com private endpoints are authenticated with an HMAC-SHA256
signature over a single string:

    method + id + api_key + <canonical params> + nonce

The canonical params string is built from the ``params`` object:

1. Keys are sorted; each key is emitted immediately followed by its
   value – no separators.
2. Nested objects recurse with the same rule.
3. Lists emit each element in order (lists are NOT sorted).
4. ``None`` values are skipped, so an omitted parameter and an explicit
   ``None`` sign identically.

Numbers
-------
A request frequently passes through a float on its way to the wire (JSON
decoders, pandas, user code).  ``page=1`` and ``page=1.0`` must sign the
same, so integral floats render without a fractional part.  Non-integral
values render as the shortest digits that round-trip, in positional
notation (``1e-07`` → ``0.0000001``), because the exchange rejects
signatures over exponent forms.

JSON encoders write small floats in exponent form (``1e-07``) and floats
cannot carry every Decimal exactly, so ``normalize_params`` sends
non-integral numbers as their canonical text (``"0.0000001"``).  Always
sign the output of ``normalize_params`` and send that same dict in the
body – RequestBuilder does this for you.

Usage
-----
    from cryptocom_sdk.signing import SignatureRequest, generate_signature

    sig = generate_signature(SignatureRequest(
        api_key="k", secret_key="s", id=1, method="private/get-trades",
        timestamp=1_700_000_000_000, params={"page": 0},
    ))
"""

from __future__ import annotations

import hashlib
import hmac
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Union

from .errors import SignatureError

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------

Scalar     = Union[str, int, float, bool, Decimal]
ParamValue = Union[Scalar, Mapping[str, Any], list[Any], tuple[Any, ...], None]
Params     = Mapping[str, ParamValue]


# ---------------------------------------------------------------------------
# Canonicalisation
# ---------------------------------------------------------------------------

def _format_decimal(value: Decimal) -> str:
    if not value.is_finite():
        raise SignatureError(f"cannot sign non-finite number {value!r}")
    if value == value.to_integral_value():
        return str(int(value))
    # positional digits of the exact value, trailing zeros dropped
    return format(value, "f").rstrip("0").rstrip(".")


def format_scalar(value: Scalar) -> str:
    """
    Render a scalar parameter value as text.

    Used for both the signature payload and public query strings.
    """
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise SignatureError(f"cannot sign non-finite number {value!r}")
        # repr() gives the shortest round-trip digits
        return _format_decimal(Decimal(repr(value)))
    if isinstance(value, Decimal):
        return _format_decimal(value)
    if isinstance(value, str):
        return value
    raise SignatureError(f"unsupported parameter type {type(value).__name__}")


def _canonical_value(value: ParamValue) -> str:
    if isinstance(value, Mapping):
        return canonicalize_params(value)
    if isinstance(value, (list, tuple)):
        return "".join(_canonical_value(v) for v in value if v is not None)
    return format_scalar(value)  # type: ignore[arg-type]


def canonicalize_params(params: Params) -> str:
    """
    Deterministically serialise params into the string that gets signed.

    Equal mappings canonicalise identically regardless of insertion order.
    An empty mapping yields "".
    """
    parts: list[str] = []
    for key in sorted(params):
        value = params[key]
        if value is None:
            continue
        parts.append(key)
        parts.append(_canonical_value(value))
    return "".join(parts)


def _normalize_value(value: Any) -> Any:
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, (float, Decimal)):
        text = format_scalar(value)
        # integral values stay JSON numbers, the rest go as exact text
        return text if "." in text else int(text)
    if isinstance(value, Mapping):
        return normalize_params(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_value(v) for v in value if v is not None]
    return value


def normalize_params(params: Params) -> dict[str, Any]:
    """
    Return a JSON-ready copy of params that signs the same as it encodes.

    - keys with a None value are dropped
    - integral floats / Decimals become ints
    - other floats / Decimals become their canonical decimal string
      (``Decimal("1E-7")`` -> ``"0.0000001"``), so the body carries the
      exact digits that were signed
    - tuples become lists
    """
    return {k: _normalize_value(v) for k, v in params.items() if v is not None}


# ---------------------------------------------------------------------------
# Signature generation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SignatureRequest:
    """Everything that goes into one request signature."""
    api_key:    str
    secret_key: str = field(repr=False)
    id:         int
    method:     str
    timestamp:  int
    params:     Params = field(default_factory=dict)

    def payload(self) -> str:
        """The exact string the HMAC is computed over."""
        return (
            f"{self.method}{self.id}{self.api_key}"
            f"{canonicalize_params(self.params)}{self.timestamp}"
        )


# Callable that turns a SignatureRequest into a hex signature.
SignatureGenerator = Callable[[SignatureRequest], str]


def generate_signature(request: SignatureRequest) -> str:
    """
    Compute the lowercase hex HMAC-SHA256 signature for a request.

    Raises SignatureError if the key material is missing or the params
    contain a value that cannot be canonicalised.
    """
    if not request.api_key:
        raise SignatureError("api_key cannot be empty")
    if not request.secret_key:
        raise SignatureError("secret_key cannot be empty")

    return hmac.new(
        request.secret_key.encode("utf-8"),
        request.payload().encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
