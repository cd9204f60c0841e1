from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from data.market_data import NSEQuote
from data.stock_metadata import fallback_metadata
from db import InvestmentCategory, TransactionType
from services.investment_service import add_investment
from services.transaction_service import (
    add_transaction,
    compute_total_amount,
    delete_transaction,
    list_linkable_investments,
    list_transactions,
    lookup_symbol,
    parse_ratio,
    validate_transaction,
)


def test_total_amount_buy_adds_charges():
    assert compute_total_amount("buy", 10, 100, 20, 5, 1) == 1026.0


def test_total_amount_sell_subtracts_charges():
    assert compute_total_amount(TransactionType.SELL, 10, 100, 20, 5, 1) == 974.0


def test_total_amount_other_types_ignore_charges():
    assert compute_total_amount("dividend", 10, 2.5, 20, 0, 0) == 25.0


def test_total_amount_rounds_and_tolerates_none():
    assert compute_total_amount("buy", 3, 33.333, None, None, None) == 100.0
    assert compute_total_amount("buy", None, None) == 0.0


def test_parse_ratio():
    assert parse_ratio("1:2") == (1.0, 2.0)
    for bad in ("12", "a:b", "0:1", "1:2:3", ""):
        with pytest.raises(ValueError):
            parse_ratio(bad)


@pytest.mark.parametrize(
    "kwargs, expected",
    [
        ({"transaction_type": "buy", "symbol": ""}, "Symbol is required"),
        ({"transaction_type": "hold", "symbol": "INFY"}, "Transaction type must be one of"),
        ({"transaction_type": "sell", "symbol": "INFY", "quantity": 5}, "Quantity and price are required"),
        ({"transaction_type": "split", "symbol": "INFY"}, "Split ratio is required"),
        ({"transaction_type": "bonus", "symbol": "INFY", "bonus_ratio": "x"}, "Ratio must look like"),
    ],
)
def test_validate_transaction_errors(kwargs, expected):
    errors = validate_transaction(**kwargs)
    assert any(expected in error for error in errors)


def test_validate_transaction_ok():
    assert validate_transaction("buy", "INFY", 10, 1500) == []
    assert validate_transaction("split", "INFY", split_ratio="1:5") == []
    assert validate_transaction("dividend", "INFY") == []


def test_add_buy_transaction(user):
    result = add_transaction(
        user.id, "buy", " infy ",
        transaction_date="2024-02-01",
        quantity=10, price_per_unit=100,
        brokerage_fee=20, stt_charges=5, other_charges=1,
    )
    assert result.success, result.message
    tx = result.transaction
    assert tx.symbol == "INFY"
    assert tx.stock_name == "INFY"
    assert tx.transaction_type is TransactionType.BUY
    assert tx.transaction_date == date(2024, 2, 1)
    assert tx.total_amount == Decimal("1026.00")
    assert tx.total_charges == pytest.approx(26.0)
    assert tx.investment_id is None


def test_add_dividend_keeps_explicit_total(user):
    result = add_transaction(user.id, "dividend", "ITC", total_amount=412.5)
    assert result.success
    assert result.transaction.total_amount == Decimal("412.50")
    assert result.transaction.transaction_date == date.today()


def test_add_transaction_rejects_invalid(user):
    result = add_transaction(user.id, "split", "INFY")
    assert not result.success
    assert result.message.startswith("❌")

    bad_date = add_transaction(user.id, "dividend", "ITC", transaction_date="01-02-2024")
    assert not bad_date.success
    assert list_transactions(user.id) == []


def test_add_transaction_links_owned_investment(user, other_user):
    investment_id = add_investment(user.id, "Stock", "Infosys", symbol="INFY").investment.id

    linked = add_transaction(user.id, "bonus", "INFY", bonus_ratio="1:1", investment_id=investment_id)
    assert linked.success
    assert linked.transaction.investment_id == investment_id
    assert linked.transaction.investment_category is InvestmentCategory.STOCK

    foreign = add_transaction(other_user.id, "bonus", "INFY", bonus_ratio="1:1", investment_id=investment_id)
    assert not foreign.success
    assert list_transactions(other_user.id) == []


def test_list_and_delete_transactions(user, other_user):
    first = add_transaction(user.id, "buy", "INFY", transaction_date=date(2024, 1, 1), quantity=1, price_per_unit=10)
    add_transaction(user.id, "sell", "INFY", transaction_date=date(2024, 6, 1), quantity=1, price_per_unit=12)

    assert [tx.transaction_type for tx in list_transactions(user.id)] == [TransactionType.SELL, TransactionType.BUY]
    assert len(list_transactions(user.id, transaction_type="buy")) == 1

    assert not delete_transaction(other_user.id, first.transaction.id).success
    assert delete_transaction(user.id, first.transaction.id).success
    assert len(list_transactions(user.id)) == 1


def test_list_linkable_investments(user):
    add_investment(user.id, "Stock", "Infosys")
    add_investment(user.id, "Fixed Deposit", "SBI FD")
    assert [inv.name for inv in list_linkable_investments(user.id)] == ["Infosys"]


def test_lookup_symbol(monkeypatch):
    client = MagicMock()
    client.get_quote.return_value = NSEQuote(
        symbol="INFY", last_price=1580.5, change=0, p_change=0,
        previous_close=1580.5, open=1580.5, high=1580.5, low=1580.5, timestamp="",
    )
    monkeypatch.setattr("services.transaction_service.get_market_data_client", lambda: client)
    monkeypatch.setattr(
        "services.transaction_service.fetch_stock_metadata",
        lambda symbol: fallback_metadata(symbol),
    )

    found = lookup_symbol("infy.ns")
    assert found.symbol == "INFY"
    assert found.stock_name == "INFY"
    assert found.price_per_unit == 1580.5
    client.get_quote.assert_called_once_with("INFY")


def test_lookup_symbol_without_quote(monkeypatch):
    client = MagicMock()
    client.get_quote.return_value = None
    monkeypatch.setattr("services.transaction_service.get_market_data_client", lambda: client)
    monkeypatch.setattr(
        "services.transaction_service.fetch_stock_metadata",
        lambda symbol: fallback_metadata(symbol),
    )
    assert lookup_symbol("XYZ").price_per_unit is None
