"""
tests/test_auth.py – Unit tests for credentials and RequestBuilder.

Verifies that:
  1. CryptoComAuth validates its inputs and never exposes the secret.
  2. Environment URLs and CRYPTOCOM_* configuration resolve correctly.
  3. RequestBuilder consumes exactly one id and one nonce per envelope.
  4. Signature generator failures surface as SignatureError.
  5. SequentialIDGenerator hands out unique ids across threads.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import threading
from unittest.mock import MagicMock

import pytest

from cryptocom_sdk import (
    CryptoComAuth,
    CryptoComEnv,
    InvalidParameterError,
    RequestBuilder,
    SequentialIDGenerator,
    SignatureError,
    SignatureRequest,
    system_clock,
)

from conftest import API_KEY, NOW_MS, REQUEST_ID, SECRET_KEY


class TestCryptoComAuth:
    def test_production_url(self) -> None:
        auth = CryptoComAuth(api_key="k", secret_key="s")
        assert auth.base_url == "https://api.crypto.com/v2/"
        assert auth.url_for("private/get-trades") == "https://api.crypto.com/v2/private/get-trades"

    def test_uat_url_from_enum_or_string(self) -> None:
        a = CryptoComAuth(api_key="k", secret_key="s", env=CryptoComEnv.UAT)
        b = CryptoComAuth(api_key="k", secret_key="s", env="UAT")
        assert a.base_url == b.base_url == "https://uat-api.3ona.co/v2/"

    def test_base_url_override(self) -> None:
        auth = CryptoComAuth(api_key="k", secret_key="s", base_url_override="http://localhost:8080/")
        assert auth.url_for("public/get-book") == "http://localhost:8080/public/get-book"

    @pytest.mark.parametrize("override", ["http://localhost:8080/v2", "http://localhost:8080/v2/"])
    def test_base_url_override_trailing_slash(self, override: str) -> None:
        auth = CryptoComAuth(api_key="k", secret_key="s", base_url_override=override)
        assert auth.base_url == "http://localhost:8080/v2/"
        assert auth.url_for("private/get-trades") == "http://localhost:8080/v2/private/get-trades"

    @pytest.mark.parametrize("field", ["api_key", "secret_key"])
    def test_empty_credentials_rejected(self, field: str) -> None:
        kwargs = {"api_key": "k", "secret_key": "s", field: ""}
        with pytest.raises(InvalidParameterError) as exc_info:
            CryptoComAuth(**kwargs)
        assert exc_info.value.parameter == field

    def test_unknown_env_rejected(self) -> None:
        with pytest.raises(InvalidParameterError, match="env"):
            CryptoComAuth(api_key="k", secret_key="s", env="staging")

    def test_secret_not_in_repr(self) -> None:
        auth = CryptoComAuth(api_key="k", secret_key="super-secret")
        assert "super-secret" not in repr(auth)

    def test_from_env(self) -> None:
        auth = CryptoComAuth.from_env({
            "CRYPTOCOM_API_KEY":    "k",
            "CRYPTOCOM_SECRET_KEY": "s",
            "CRYPTOCOM_ENV":        "uat",
        })
        assert auth.api_key == "k"
        assert auth.base_url == "https://uat-api.3ona.co/v2/"

    def test_from_env_base_url(self) -> None:
        auth = CryptoComAuth.from_env({
            "CRYPTOCOM_API_KEY":    "k",
            "CRYPTOCOM_SECRET_KEY": "s",
            "CRYPTOCOM_BASE_URL":   "http://proxy.local/v2/",
        })
        assert auth.base_url == "http://proxy.local/v2/"

    def test_from_env_missing_key(self) -> None:
        with pytest.raises(InvalidParameterError):
            CryptoComAuth.from_env({"CRYPTOCOM_SECRET_KEY": "s"})

    def test_from_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRYPTOCOM_API_KEY", "env-key")
        monkeypatch.setenv("CRYPTOCOM_SECRET_KEY", "env-secret")
        monkeypatch.delenv("CRYPTOCOM_ENV", raising=False)
        monkeypatch.delenv("CRYPTOCOM_BASE_URL", raising=False)
        auth = CryptoComAuth.from_env()
        assert auth.api_key == "env-key"
        assert auth.base_url == "https://api.crypto.com/v2/"


class TestRequestBuilder:
    def test_envelope_fields(self, auth, clock, id_generator) -> None:
        builder = RequestBuilder(auth, clock=clock, id_generator=id_generator)
        envelope = builder.build("private/cancel-all-orders", {"instrument_name": "BTC_USDT"})

        assert envelope.id == REQUEST_ID
        assert envelope.nonce == NOW_MS
        assert envelope.api_key == API_KEY
        assert envelope.params == {"instrument_name": "BTC_USDT"}
        expected = hmac.new(
            SECRET_KEY.encode(),
            f"private/cancel-all-orders{REQUEST_ID}{API_KEY}instrument_nameBTC_USDT{NOW_MS}".encode(),
            hashlib.sha256,
        ).hexdigest()
        assert envelope.signature == expected

    def test_consumes_one_id_and_one_nonce(self, auth, clock, id_generator) -> None:
        builder = RequestBuilder(auth, clock=clock, id_generator=id_generator)
        builder.build("private/get-trades", {"page": 0})
        assert id_generator.call_count == 1
        assert clock.call_count == 1

    def test_signature_generator_sees_normalised_params(
        self, auth, clock, id_generator, signature_generator
    ) -> None:
        builder = RequestBuilder(
            auth, clock=clock, id_generator=id_generator, signature_generator=signature_generator,
        )
        envelope = builder.build("private/get-trades", {"page": 1.0, "page_size": None})

        (request,), _ = signature_generator.call_args
        assert isinstance(request, SignatureRequest)
        assert request.params == {"page": 1}
        assert request.id == REQUEST_ID
        assert request.timestamp == NOW_MS
        assert envelope.signature == "some signature"
        assert envelope.params == request.params

    def test_wire_format(self, auth, clock, id_generator, signature_generator) -> None:
        builder = RequestBuilder(
            auth, clock=clock, id_generator=id_generator, signature_generator=signature_generator,
        )
        body = json.loads(builder.build("private/get-order-detail", {"order_id": "1"}).to_wire())
        assert body == {
            "id":      REQUEST_ID,
            "method":  "private/get-order-detail",
            "api_key": API_KEY,
            "params":  {"order_id": "1"},
            "nonce":   NOW_MS,
            "sig":     "some signature",
        }

    def test_generator_failure_wrapped(self, auth, clock, id_generator) -> None:
        boom = RuntimeError("hsm offline")
        builder = RequestBuilder(
            auth, clock=clock, id_generator=id_generator,
            signature_generator=MagicMock(side_effect=boom),
        )
        with pytest.raises(SignatureError) as exc_info:
            builder.build("private/get-trades", {})
        assert exc_info.value.__cause__ is boom

    def test_signature_error_passes_through(self, auth, clock, id_generator) -> None:
        original = SignatureError("bad key")
        builder = RequestBuilder(
            auth, clock=clock, id_generator=id_generator,
            signature_generator=MagicMock(side_effect=original),
        )
        with pytest.raises(SignatureError) as exc_info:
            builder.build("private/get-trades", {})
        assert exc_info.value is original

    def test_default_clock(self, auth) -> None:
        assert RequestBuilder(auth).clock is system_clock


class TestSequentialIDGenerator:
    def test_increasing(self) -> None:
        ids = SequentialIDGenerator(start=10)
        assert [ids(), ids(), ids()] == [10, 11, 12]

    def test_seeded_from_clock(self) -> None:
        before = system_clock()
        assert SequentialIDGenerator()() >= before

    def test_unique_across_threads(self) -> None:
        ids = SequentialIDGenerator(start=0)
        seen: list[int] = []
        lock = threading.Lock()

        def worker() -> None:
            local = [ids() for _ in range(500)]
            with lock:
                seen.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(seen) == 4000
        assert len(set(seen)) == 4000
