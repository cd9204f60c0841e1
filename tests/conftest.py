"""
Pytest configuration and shared fixtures for portfolio tracker tests.

Usage:
    @pytest.fixture functions are automatically available to all tests.
    Database-backed tests request `db` (or a fixture that depends on it) to
    get a fresh SQLite file installed as the global database manager.
"""
import sys
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock

import pytest


def pytest_configure():
    """
    Ensure the project root is on sys.path for the flat package layout.
    This keeps tests runnable without requiring an editable install.
    """
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def db(tmp_path, monkeypatch):
    """Fresh SQLite database installed as the global manager."""
    from config import AuthConfig, config
    from db import DatabaseManager, set_db

    # Minimum bcrypt cost keeps auth tests fast
    monkeypatch.setattr(config, "auth", AuthConfig(bcrypt_rounds=4))

    manager = DatabaseManager(f"sqlite:///{tmp_path / 'test.db'}")
    manager.create_tables()
    set_db(manager)
    yield manager
    set_db(None)
    manager.dispose()


@pytest.fixture
def user(db):
    """A registered user."""
    from services.auth_service import register_user

    result = register_user("asha@example.com", "secret123", display_name="Asha")
    assert result.success, result.message
    return result.user


@pytest.fixture
def other_user(db):
    """A second registered user, for ownership checks."""
    from services.auth_service import register_user

    result = register_user("ravi@example.com", "secret456")
    assert result.success, result.message
    return result.user


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@dataclass
class FakeInvestment:
    """Plain holding record for pure analytics tests."""
    name: str
    category: str
    amount_invested: float
    current_value: float
    date_purchased: date | None = None
    institution: str | None = None
    units: float | None = None
    symbol: str | None = None


@pytest.fixture
def sample_investments() -> list[FakeInvestment]:
    """Mixed-category holdings with known totals (invested 50000, current 56500)."""
    return [
        FakeInvestment("Infosys", "Stock", 10000, 12000, date(2023, 1, 1), "Zerodha", 8, "INFY"),
        FakeInvestment("HDFC Bank", "Stock", 10000, 9000, date(2023, 1, 1), "Zerodha", 6, "HDFCBANK"),
        FakeInvestment("Flexi Cap", "Mutual Fund", 20000, 24000, date(2023, 1, 1)),
        FakeInvestment("SBI FD", "Fixed Deposit", 10000, 11500, date(2023, 1, 1), "SBI"),
    ]


@pytest.fixture
def stock_fields() -> dict:
    """Valid add_investment keyword arguments for a listed stock."""
    return {
        "symbol": "infy",
        "amount_invested": 58000,
        "current_value": Decimal("63200.50"),
        "units": 40,
        "purchase_price": 1450.0,
        "date_purchased": "2023-04-12",
        "institution": "Zerodha",
    }


# =============================================================================
# Market Data Fixtures
# =============================================================================

@pytest.fixture
def nse_payload() -> dict:
    """Shape of the NSE quote-equity response used by the client."""
    return {
        "info": {"symbol": "INFY"},
        "priceInfo": {
            "lastPrice": 1580.5,
            "change": 12.3,
            "pChange": 0.78,
            "previousClose": 1568.2,
            "open": 1570.0,
            "intraDayHighLow": {"min": 1561.0, "max": 1589.9},
        },
    }


@pytest.fixture
def mock_http_session(nse_payload) -> MagicMock:
    """requests.Session stand-in returning the NSE payload."""
    response = MagicMock()
    response.json.return_value = nse_payload
    response.raise_for_status.return_value = None

    session = MagicMock()
    session.headers = {}
    session.get.return_value = response
    return session


@pytest.fixture(autouse=True)
def no_request_delay(monkeypatch):
    """Skip rate-limit sleeps between batched provider calls."""
    monkeypatch.setattr("data.market_data.time.sleep", lambda _seconds: None)
    monkeypatch.setattr("data.stock_metadata.time.sleep", lambda _seconds: None)
