"""
auth.py – Credentials, request identity and signed envelope construction.

Crypto.com authenticates every private call individually – there is no
session.  Each request body carries:

    id       request correlation id (unique per client)
    api_key  the account's API key
    nonce    current time in ms; the exchange rejects stale or replayed nonces
    sig      HMAC-SHA256 over method + id + api_key + params + nonce

RequestBuilder assembles that body.  Its clock, id generator and
signature generator are plain callables so tests can pin them:

    builder = RequestBuilder(
        auth,
        clock=lambda: 1_700_000_000_000,
        id_generator=lambda: 1234,
    )
    envelope = builder.build("private/cancel-all-orders",
                             {"instrument_name": "BTC_USDT"})

Configuration
-------------
    auth = CryptoComAuth(api_key="...", secret_key="...", env=CryptoComEnv.UAT)

    # or from CRYPTOCOM_API_KEY / CRYPTOCOM_SECRET_KEY / CRYPTOCOM_ENV /
    # CRYPTOCOM_BASE_URL
    auth = CryptoComAuth.from_env()
"""

from __future__ import annotations

import logging
import os
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Union

from .errors import InvalidParameterError, SignatureError
from .signing import SignatureGenerator, SignatureRequest, generate_signature, normalize_params
from .types import CryptoComEnv, RequestEnvelope

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Environment base URLs
# ---------------------------------------------------------------------------

_ENDPOINTS: dict[str, str] = {
    "production": "https://api.crypto.com/v2/",
    "uat":        "https://uat-api.3ona.co/v2/",
}

_ENV_API_KEY    = "CRYPTOCOM_API_KEY"
_ENV_SECRET_KEY = "CRYPTOCOM_SECRET_KEY"
_ENV_ENV        = "CRYPTOCOM_ENV"
_ENV_BASE_URL   = "CRYPTOCOM_BASE_URL"


def _env_label(env: Union[CryptoComEnv, str]) -> str:
    """Normalise a CryptoComEnv enum or string to a lowercase label key."""
    if isinstance(env, CryptoComEnv):
        return env.label
    return env.lower()


# ---------------------------------------------------------------------------
# Identity providers
# ---------------------------------------------------------------------------

# Callable with no args returning the current Unix time in milliseconds
Clock = Callable[[], int]

# Callable with no args returning a fresh request id
IDGenerator = Callable[[], int]


def system_clock() -> int:
    """Default clock: wall-clock Unix time in ms."""
    return time.time_ns() // 1_000_000


class SequentialIDGenerator:
    """
    Thread-safe increasing request ids.

    Seeded from the clock so ids from a restarted process do not collide
    with the previous run's in-flight requests.
    """

    def __init__(self, start: Optional[int] = None) -> None:
        self._next = system_clock() if start is None else start
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
        return value


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CryptoComAuth:
    """
    API credentials plus the environment they belong to.

    Parameters
    ----------
    api_key    : Crypto.com API key
    secret_key : matching secret; never logged or included in repr()
    env        : CryptoComEnv.PRODUCTION / CryptoComEnv.UAT, or the
                 equivalent strings "production" / "uat"
    base_url   : overrides the environment URL (e.g. for a proxy or a
                 local test server).  A missing trailing "/" is added.
    """

    api_key:    str
    secret_key: str = field(repr=False)
    env:        Union[CryptoComEnv, str] = CryptoComEnv.PRODUCTION
    base_url_override: Optional[str] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.api_key:
            raise InvalidParameterError("api_key", "cannot be empty")
        if not self.secret_key:
            raise InvalidParameterError("secret_key", "cannot be empty")
        if self.base_url_override is None and _env_label(self.env) not in _ENDPOINTS:
            raise InvalidParameterError("env", f"unknown environment {self.env!r}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CryptoComAuth":
        """Build credentials from CRYPTOCOM_* environment variables."""
        environ = os.environ if environ is None else environ
        return cls(
            api_key=environ.get(_ENV_API_KEY, ""),
            secret_key=environ.get(_ENV_SECRET_KEY, ""),
            env=environ.get(_ENV_ENV, CryptoComEnv.PRODUCTION.value),
            base_url_override=environ.get(_ENV_BASE_URL) or None,
        )

    @property
    def base_url(self) -> str:
        if self.base_url_override:
            return self.base_url_override.rstrip("/") + "/"
        return _ENDPOINTS[_env_label(self.env)]

    def url_for(self, method: str) -> str:
        """Full URL for an RPC method, e.g. ``private/get-trades``."""
        return self.base_url + method


# ---------------------------------------------------------------------------
# Envelope builder
# ---------------------------------------------------------------------------

class RequestBuilder:
    """
    Turns (method, params) into a signed RequestEnvelope.

    Holds no per-call state; safe to share between concurrent calls as long
    as the injected id generator is (the default one is).
    """

    def __init__(
        self,
        auth: CryptoComAuth,
        *,
        clock: Optional[Clock] = None,
        id_generator: Optional[IDGenerator] = None,
        signature_generator: Optional[SignatureGenerator] = None,
    ) -> None:
        self._auth                = auth
        self._clock               = clock or system_clock
        self._id_generator        = id_generator or SequentialIDGenerator()
        self._signature_generator = signature_generator or generate_signature

    @property
    def clock(self) -> Clock:
        return self._clock

    def build(self, method: str, params: Mapping[str, Any]) -> RequestEnvelope:
        """
        Consume one id and one nonce and sign params.

        The params stored on the envelope are the normalised ones that were
        signed.  Any failure of the signature generator is raised as
        SignatureError with the original exception chained.
        """
        wire_params = normalize_params(params)
        request_id  = self._id_generator()
        nonce       = self._clock()

        request = SignatureRequest(
            api_key=self._auth.api_key,
            secret_key=self._auth.secret_key,
            id=request_id,
            method=method,
            timestamp=nonce,
            params=wire_params,
        )
        try:
            signature = self._signature_generator(request)
        except SignatureError:
            raise
        except Exception as exc:
            raise SignatureError(f"failed to generate signature for {method}") from exc

        logger.debug("Signed %s id=%d nonce=%d", method, request_id, nonce)
        return RequestEnvelope(
            id=request_id,
            method=method,
            api_key=self._auth.api_key,
            params=wire_params,
            nonce=nonce,
            signature=signature,
        )
