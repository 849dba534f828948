"""Payload normalization for Gamma, Data API and CLOB responses."""

from decimal import Decimal

from polyorder.ingestion.polymarket.normalize import (
    pair_outcomes,
    parse_book,
    parse_position,
    parse_search_event,
    parse_trade,
)


def test_pair_outcomes():
    assert pair_outcomes('["Yes", "No"]', '["1", "2"]') == [("Yes", "1"), ("No", "2")]
    assert pair_outcomes(["Yes"], ["1"]) == [("Yes", "1")]


def test_pair_outcomes_rejects_mismatch():
    assert pair_outcomes('["Yes", "No"]', '["1"]') is None
    assert pair_outcomes("[]", "[]") is None
    assert pair_outcomes("not json", '["1"]') is None
    assert pair_outcomes(None, None) is None
    assert pair_outcomes('{"a": 1}', '["1"]') is None


def test_parse_search_event_falls_back_to_raw():
    event = parse_search_event(
        {
            "id": "42",
            "title": "Weather",
            "markets": [
                {"id": "1", "question": "Rain?", "outcomes": '["Yes", "No"]', "clobTokenIds": '["11", "12"]'},
                {"id": "2", "question": "Snow?", "outcomes": '["Yes", "No"]', "clobTokenIds": '["21"]'},
            ],
        }
    )
    assert event.event_id == "42"
    rain, snow = event.markets
    assert [(o.name, o.token_id) for o in rain.outcomes] == [("Yes", "11"), ("No", "12")]
    assert snow.outcomes == []
    assert snow.raw_token_ids == '["21"]'


def test_parse_book_accepts_buys_sells_and_skips_bad_levels():
    book = parse_book(
        {
            "buys": [{"price": "0.4", "size": "10"}, {"price": "oops", "size": "1"}, "junk"],
            "sells": [{"price": "0.6", "size": "5"}, {"price": "1.5", "size": "5"}],
        },
        "99",
    )
    assert book.token_id == "99"
    assert len(book.bids) == 1 and len(book.asks) == 1
    assert book.midpoint() == Decimal("0.5")


def test_parse_position():
    pos = parse_position(
        {"asset": "77", "conditionId": "0xabc", "size": 10.5, "avgPrice": "0.45", "title": "Rain?", "outcome": "Yes"}
    )
    assert pos.token_id == "77"
    assert pos.size == Decimal("10.5")
    assert pos.avg_price == Decimal("0.45")


def test_parse_trade_unknown_side():
    assert parse_trade({"side": "HOLD", "price": "0.5", "size": "1"}) is None
    trade = parse_trade({"side": "buy", "price": "0.5", "size": "2", "asset": "7", "timestamp": 1700000000})
    assert trade.side == "BUY"
    assert trade.timestamp == 1_700_000_000
