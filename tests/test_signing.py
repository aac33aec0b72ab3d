"""
tests/test_signing.py – Unit tests for canonicalisation and HMAC signing.

These tests run entirely offline (no network calls).
They verify that:
  1. canonicalize_params() is key-order independent and list-order sensitive.
  2. Integral floats canonicalise like ints; other floats never use exponents.
  3. None values are dropped exactly like omitted keys.
  4. generate_signature() is deterministic and matches a hand-built HMAC.
  5. normalize_params() yields a body that signs the same as it encodes,
     with non-integral numbers sent as exact positional text.
"""

from __future__ import annotations

import hashlib
import hmac
import json
from decimal import Decimal

import pytest

from cryptocom_sdk.auth import CryptoComAuth, RequestBuilder
from cryptocom_sdk.errors import SignatureError
from cryptocom_sdk.signing import (
    SignatureRequest,
    canonicalize_params,
    format_scalar,
    generate_signature,
    normalize_params,
)


def _request(**kwargs) -> SignatureRequest:
    defaults = dict(
        api_key="k",
        secret_key="s",
        id=1234,
        method="private/cancel-all-orders",
        timestamp=1_700_000_000_000,
        params={"instrument_name": "BTC_USDT"},
    )
    return SignatureRequest(**{**defaults, **kwargs})


# ---------------------------------------------------------------------------
# canonicalize_params
# ---------------------------------------------------------------------------

class TestCanonicalize:
    def test_empty_mapping(self) -> None:
        assert canonicalize_params({}) == ""

    def test_keys_sorted_and_concatenated(self) -> None:
        params = {"page": 0, "instrument_name": "BTC_USDT", "page_size": 100}
        assert canonicalize_params(params) == "instrument_nameBTC_USDTpage0page_size100"

    def test_insertion_order_irrelevant(self) -> None:
        a = {"b": 1, "a": "x", "c": {"z": 1, "y": 2}}
        b = {"c": {"y": 2, "z": 1}, "a": "x", "b": 1}
        assert canonicalize_params(a) == canonicalize_params(b)

    def test_sequence_order_is_significant(self) -> None:
        assert canonicalize_params({"ids": ["a", "b"]}) != canonicalize_params({"ids": ["b", "a"]})

    def test_sequence_of_mappings(self) -> None:
        params = {"orders": [{"side": "BUY", "price": 1}, {"side": "SELL", "price": 2}]}
        assert canonicalize_params(params) == "ordersprice1sideBUYprice2sideSELL"

    def test_nested_mapping_sorted(self) -> None:
        assert canonicalize_params({"outer": {"b": 2, "a": 1}}) == "outera1b2"

    def test_booleans_lowercase(self) -> None:
        assert canonicalize_params({"flag": True, "other": False}) == "flagtrueotherfalse"

    def test_none_same_as_omitted(self) -> None:
        assert canonicalize_params({"a": 1, "b": None}) == canonicalize_params({"a": 1})

    def test_none_inside_list_is_skipped(self) -> None:
        assert canonicalize_params({"a": [1, None, 2]}) == "a12"

    @pytest.mark.parametrize("page", [1, 1.0, Decimal("1"), Decimal("1.000")])
    def test_integral_numbers_render_as_int(self, page) -> None:
        assert canonicalize_params({"page": page}) == canonicalize_params({"page": 1}) == "page1"

    @pytest.mark.parametrize(
        "value, expected",
        [
            (0.1, "0.1"),
            (0.014, "0.014"),
            (1e-07, "0.0000001"),
            (1e20, "100000000000000000000"),
            (12345.678, "12345.678"),
            (-0.5, "-0.5"),
            (-0.0, "0"),
            (Decimal("0.10"), "0.1"),
            (Decimal("1E-8"), "0.00000001"),
            (Decimal("0.12345678901234567890123456789012"), "0.12345678901234567890123456789012"),
        ],
    )
    def test_non_integral_rendering(self, value, expected: str) -> None:
        assert format_scalar(value) == expected

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), Decimal("NaN")])
    def test_non_finite_rejected(self, value) -> None:
        with pytest.raises(SignatureError):
            canonicalize_params({"price": value})

    def test_unsupported_type_rejected(self) -> None:
        with pytest.raises(SignatureError, match="unsupported"):
            canonicalize_params({"when": object()})


# ---------------------------------------------------------------------------
# generate_signature
# ---------------------------------------------------------------------------

class TestGenerateSignature:
    def test_matches_hand_built_hmac(self) -> None:
        expected = hmac.new(
            b"s",
            b"private/cancel-all-orders1234kinstrument_nameBTC_USDT1700000000000",
            hashlib.sha256,
        ).hexdigest()
        assert generate_signature(_request()) == expected

    def test_lowercase_hex(self) -> None:
        sig = generate_signature(_request())
        assert len(sig) == 64
        assert sig == sig.lower()
        int(sig, 16)

    def test_deterministic(self) -> None:
        assert generate_signature(_request()) == generate_signature(_request())

    def test_float_and_int_params_sign_identically(self) -> None:
        assert generate_signature(_request(params={"page": 1})) == generate_signature(
            _request(params={"page": 1.0})
        )

    @pytest.mark.parametrize(
        "field, value",
        [("id", 1235), ("timestamp", 1_700_000_000_001), ("api_key", "k2"),
         ("secret_key", "s2"), ("method", "private/get-trades")],
    )
    def test_every_input_affects_signature(self, field: str, value) -> None:
        assert generate_signature(_request(**{field: value})) != generate_signature(_request())

    def test_empty_secret_rejected(self) -> None:
        with pytest.raises(SignatureError, match="secret_key"):
            generate_signature(_request(secret_key=""))

    def test_empty_api_key_rejected(self) -> None:
        with pytest.raises(SignatureError, match="api_key"):
            generate_signature(_request(api_key=""))

    def test_secret_not_in_repr(self) -> None:
        assert "s2ecret" not in repr(_request(secret_key="s2ecret"))

    def test_payload_layout(self) -> None:
        assert _request().payload() == (
            "private/cancel-all-orders1234kinstrument_nameBTC_USDT1700000000000"
        )


# ---------------------------------------------------------------------------
# normalize_params
# ---------------------------------------------------------------------------

class TestNormalizeParams:
    def test_drops_none_and_coerces_integral_floats(self) -> None:
        assert normalize_params({"page": 1.0, "page_size": None, "name": "x"}) == {
            "page": 1, "name": "x",
        }

    def test_integral_decimal_becomes_int(self) -> None:
        out = normalize_params({"price": Decimal("50000"), "quantity": Decimal("0.01")})
        assert out == {"price": 50000, "quantity": "0.01"}
        assert isinstance(out["price"], int)

    @pytest.mark.parametrize(
        "value, expected",
        [
            (Decimal("65432.12345678901234"), "65432.12345678901234"),
            (Decimal("0.123456789012345678"), "0.123456789012345678"),
            (Decimal("1E-7"), "0.0000001"),
            (Decimal("0.000010"), "0.00001"),
            (1.5e-9, "0.0000000015"),
        ],
    )
    def test_non_integral_sent_as_exact_text(self, value, expected: str) -> None:
        assert normalize_params({"quantity": value}) == {"quantity": expected}
        assert Decimal(expected) == Decimal(str(value))

    def test_nested_and_tuples(self) -> None:
        out = normalize_params({"a": ({"b": 2.0, "c": None},)})
        assert out == {"a": [{"b": 2}]}

    def test_booleans_untouched(self) -> None:
        assert normalize_params({"flag": True}) == {"flag": True}

    def test_encoded_body_signs_like_original(self) -> None:
        params = {"price": Decimal("0.10"), "page": 2.0, "ids": [3, 1], "skip": None}
        decoded = json.loads(json.dumps(normalize_params(params)))
        assert canonicalize_params(decoded) == canonicalize_params(params)

    @pytest.mark.parametrize(
        "value", [1e-7, 1.5e-9, Decimal("1E-7"), Decimal("0.00001"), Decimal("65432.12345678901234")],
    )
    def test_envelope_body_signs_like_original(self, value) -> None:
        builder = RequestBuilder(
            CryptoComAuth(api_key="k", secret_key="s"),
            clock=lambda: 1_700_000_000_000,
            id_generator=lambda: 1234,
        )
        params = {"instrument_name": "BTC_USDT", "quantity": value}
        envelope = builder.build("private/create-order", params)

        sent = json.loads(envelope.to_wire())["params"]
        assert canonicalize_params(sent) == canonicalize_params(params)
        assert "e" not in str(sent["quantity"]).lower()
        assert envelope.signature == generate_signature(SignatureRequest(
            api_key="k", secret_key="s", id=1234, method="private/create-order",
            timestamp=1_700_000_000_000, params=sent,
        ))
