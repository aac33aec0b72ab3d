"""
tests/conftest.py – Shared fixtures and the --integration switch.

Unit tests run offline with a pinned clock and id generator so request
bodies and signatures are fully deterministic.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from cryptocom_sdk import CryptoComAuth

API_KEY    = "some api key"
SECRET_KEY = "some secret key"
REQUEST_ID = 1234
NOW_MS     = 1_700_000_000_000


# ---------------------------------------------------------------------------
# pytest plugin: --integration flag + skip logic
# ---------------------------------------------------------------------------

def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="Run integration tests against the Crypto.com UAT sandbox",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    if config.getoption("--integration"):
        return
    skip_integration = pytest.mark.skip(reason="pass --integration to run against UAT")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def auth() -> CryptoComAuth:
    return CryptoComAuth(api_key=API_KEY, secret_key=SECRET_KEY, base_url_override="http://exchange.test/v2/")


@pytest.fixture
def clock() -> MagicMock:
    return MagicMock(return_value=NOW_MS)


@pytest.fixture
def id_generator() -> MagicMock:
    return MagicMock(return_value=REQUEST_ID)


@pytest.fixture
def signature_generator() -> MagicMock:
    return MagicMock(return_value="some signature")
