from __future__ import annotations

from datetime import date

import pytest

from farmbook.services.calculations import (
    DerivedLedger,
    RawEntry,
    StockSnapshot,
    derive_ledger,
    is_valid_label,
    next_label,
    parse_label,
    production_rate,
)
from farmbook.utils import round2

DAY1 = date(2024, 3, 1)
DAY2 = date(2024, 3, 2)


@pytest.mark.parametrize(
    "previous", [None, "", "abc", "23", "x.3", "3.x", ".", "-1.2", "-0.4", "+3.2", "1_0.2", "3.+2"]
)
def test_next_label_restarts_on_missing_or_unreadable(previous):
    assert next_label(previous) == "1.1"


@pytest.mark.parametrize(
    "previous, expected",
    [
        ("23.2", "23.3"),
        ("23.7", "24.1"),
        ("5.6", "5.7"),
        ("5.7", "6.1"),
        ("1.1", "1.2"),
        ("0.7", "1.1"),
    ],
)
def test_next_label_sequence(previous, expected):
    assert next_label(previous) == expected


def test_next_label_never_goes_back_a_week():
    for week in range(0, 60):
        for day in range(1, 8):
            nw, nd = parse_label(next_label(f"{week}.{day}"))
            assert nw >= week
            if day < 7:
                assert (nw, nd) == (week, day + 1)
            else:
                assert (nw, nd) == (week + 1, 1)


def test_parse_label():
    assert parse_label("27.6") == (27, 6)
    assert parse_label(" 4 . 2 ") == (4, 2)
    assert parse_label("27") is None
    assert parse_label("1_0.2") is None
    assert parse_label("+3.2") is None
    assert parse_label("١.٢") is None
    assert is_valid_label("1.1")
    assert not is_valid_label(None)


def test_round2_is_half_up():
    assert round2(12.345678) == 12.35
    assert round2(0.125) == 0.13
    assert round2(75.0) == 75.0


def test_production_rate():
    assert production_rate(10, 400) == 75.0
    assert production_rate(10, 0) == 0
    assert production_rate(7, 300) == 70.0
    assert production_rate(1, 3) == 1000.0
    assert production_rate(1, 7) == 428.57


def test_first_day_for_a_unit():
    current = RawEntry(stock_normal=40, stock_doubles=5, stock_small=2)

    ledger = derive_ledger(DAY1, "U1", current)

    assert ledger.production_normal == 40
    assert ledger.production_doubles == 5
    assert ledger.production_small == 2
    assert ledger.production_total == 47
    assert ledger.starting_population == 0
    assert ledger.starting_stock == 0
    assert ledger.production_rate_percent == 0
    assert ledger.production_delta == -47
    assert ledger.ending_population == 0
    assert ledger.opening_stock == 0
    assert ledger.closing_stock == 47
    assert ledger.sequence_label == "1.1"


def test_second_day_continues_from_history():
    previous_ledger = DerivedLedger(date=DAY1, unit="U1", ending_population=0, production_total=47, closing_stock=47)
    previous_stock = StockSnapshot(40, 5, 2)
    current = RawEntry(stock_normal=42, stock_doubles=5, stock_small=2, direct_sales=3)

    ledger = derive_ledger(DAY2, "U1", current, previous_ledger, previous_stock, "1.1")

    assert ledger.production_normal == 5
    assert ledger.production_doubles == 3
    assert ledger.production_small == 3
    assert ledger.production_total == 11
    assert ledger.production_rate_percent == 0
    assert ledger.production_delta == 36
    assert ledger.ending_population == 0
    assert ledger.starting_stock == 47
    assert ledger.opening_stock == 47
    assert ledger.closing_stock == 49
    assert ledger.sequence_label == "1.2"


def test_conservation_without_history():
    current = RawEntry(stock_normal=12, stock_doubles=3, stock_small=1, direct_sales=4, sales_breakage=2, set_breakage=1)

    ledger = derive_ledger(DAY1, "B1", current, None, None, None)

    losses = 4 + 2 + 1
    assert ledger.production_normal == 12 + losses
    assert ledger.production_doubles == 3 + losses
    assert ledger.production_small == 1 + losses


def test_population_and_rate():
    previous_ledger = DerivedLedger(date=DAY1, unit="B1", ending_population=400, production_total=12)
    current = RawEntry(stock_normal=10, mortality=3, culls_in=5)

    ledger = derive_ledger(DAY2, "B1", current, previous_ledger, StockSnapshot(), "9.3")

    assert ledger.starting_population == 400
    assert ledger.production_total == 10
    assert ledger.production_rate_percent == 75.0
    assert ledger.production_delta == 2
    assert ledger.ending_population == 402
    assert ledger.mortality == 3
    assert ledger.culls_in == 5


def test_typed_label_wins_over_sequence():
    current = RawEntry(stock_normal=1, sequence_label=" 27.6 ")

    assert derive_ledger(DAY1, "B1", current, latest_label="3.2").sequence_label == "27.6"
    assert derive_ledger(DAY1, "B1", RawEntry(sequence_label="  "), latest_label="3.2").sequence_label == "3.3"


def test_negative_input_is_propagated_not_rejected():
    current = RawEntry(stock_normal=-5, mortality=-1)

    ledger = derive_ledger(DAY1, "B1", current, previous_stock=StockSnapshot(stock_normal=10))

    assert ledger.production_normal == -15
    assert ledger.ending_population == 1


def test_identical_input_gives_identical_output():
    args = (
        DAY2,
        "B4",
        RawEntry(stock_normal=42.5, stock_doubles=5, stock_small=2, direct_sales=3, mortality=1),
        DerivedLedger(date=DAY1, unit="B4", ending_population=321, production_total=47, closing_stock=47),
        StockSnapshot(40, 5, 2),
        "23.7",
    )

    first = derive_ledger(*args)
    second = derive_ledger(*args)

    assert first == second
    assert repr(first) == repr(second)
    assert first.sequence_label == "24.1"
