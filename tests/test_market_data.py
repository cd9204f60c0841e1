from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import requests

from data.market_data import MarketDataClient, NSEQuote, QuoteCache, normalize_symbol


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _quote(symbol: str, price: float = 100.0) -> NSEQuote:
    return NSEQuote(symbol=symbol, last_price=price, change=0, p_change=0, previous_close=price,
                    open=price, high=price, low=price, timestamp="")


def _fast_info(last_price=1500.0, previous_close=1480.0):
    return SimpleNamespace(
        last_price=last_price,
        previous_close=previous_close,
        open=1490.0,
        day_high=1510.0,
        day_low=1475.0,
    )


def test_normalize_symbol():
    assert normalize_symbol(" infy.ns ") == "INFY"
    assert normalize_symbol("M&M") == "M&M"


def test_cache_expires_after_ttl():
    clock = FakeClock()
    cache = QuoteCache(ttl_seconds=60, clock=clock)
    cache.set("infy", _quote("INFY"))

    clock.now += 59
    assert cache.get("INFY.NS") is not None
    clock.now += 1
    assert cache.get("INFY") is None
    assert len(cache) == 1


def test_cache_set_overwrites():
    cache = QuoteCache(ttl_seconds=60, clock=FakeClock())
    cache.set("INFY", _quote("INFY", 100))
    cache.set("INFY", _quote("INFY", 101))
    assert cache.get("INFY").last_price == 101
    cache.clear()
    assert len(cache) == 0


def test_fetch_nse_quote_parses_payload(mock_http_session):
    client = MarketDataClient(session=mock_http_session, cache=QuoteCache(clock=FakeClock()))
    quote = client.fetch_nse_quote("infy")

    assert quote.symbol == "INFY"
    assert quote.last_price == 1580.5
    assert quote.high == 1589.9
    assert quote.low == 1561.0
    assert quote.source == "nse"
    _, kwargs = mock_http_session.get.call_args
    assert kwargs["params"] == {"symbol": "INFY"}


def test_fetch_quote_falls_back_to_yahoo(monkeypatch, mock_http_session):
    mock_http_session.get.side_effect = requests.ConnectionError("blocked")
    ticker = MagicMock()
    ticker.fast_info = _fast_info()
    ticker_cls = MagicMock(return_value=ticker)
    monkeypatch.setattr("data.market_data.yf.Ticker", ticker_cls)

    client = MarketDataClient(session=mock_http_session, cache=QuoteCache(clock=FakeClock()))
    quote = client.fetch_quote("INFY")

    ticker_cls.assert_called_once_with("INFY.NS")
    assert quote.source == "yahoo"
    assert quote.last_price == 1500.0
    assert quote.change == pytest.approx(20.0)
    assert quote.p_change == pytest.approx(20.0 / 1480.0 * 100)
    assert client.cache.get("INFY") is quote


def test_fetch_quote_returns_none_when_all_sources_fail(monkeypatch, mock_http_session):
    mock_http_session.get.side_effect = requests.Timeout("slow")
    monkeypatch.setattr("data.market_data.yf.Ticker", MagicMock(side_effect=RuntimeError("down")))

    client = MarketDataClient(session=mock_http_session, cache=QuoteCache(clock=FakeClock()))
    assert client.fetch_quote("INFY") is None
    assert len(client.cache) == 0


def test_get_quote_uses_cache(mock_http_session):
    client = MarketDataClient(session=mock_http_session, cache=QuoteCache(clock=FakeClock()))
    first = client.get_quote("INFY")
    second = client.get_quote("infy.ns")
    assert first is second
    assert mock_http_session.get.call_count == 1


def test_fetch_multiple_quotes_skips_missing(monkeypatch, mock_http_session):
    client = MarketDataClient(session=mock_http_session, cache=QuoteCache(clock=FakeClock()))
    monkeypatch.setattr(client, "get_quote", lambda symbol: None if symbol == "BAD" else _quote(symbol))

    quotes = client.fetch_multiple_quotes(["INFY", "BAD", "tcs"])
    assert list(quotes) == ["INFY", "TCS"]


def test_fetch_nifty50(monkeypatch, mock_http_session):
    ticker = MagicMock()
    ticker.fast_info = SimpleNamespace(last_price=22150.4)
    monkeypatch.setattr("data.market_data.yf.Ticker", MagicMock(return_value=ticker))

    client = MarketDataClient(session=mock_http_session)
    assert client.fetch_nifty50() == 22150.4
