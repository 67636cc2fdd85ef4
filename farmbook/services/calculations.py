"""
Daily ledger calculation.

Everything here is a pure function of its arguments: the caller reads the
previous day's ledger, the previous day's stock counts and the latest label,
and persists what comes back. No database or Streamlit imports in this module.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from farmbook.utils import round2

Number = Union[int, float]

START_LABEL = "1.1"
DAYS_PER_WEEK = 7

# Monthly-equivalent production rate: total * 30 / population * 100
RATE_DAYS = 30

_LABEL_RE = re.compile(r"\s*([0-9]+)\s*\.\s*([0-9]+)\s*")


@dataclass(frozen=True)
class RawEntry:
    stock_normal: Number = 0
    stock_doubles: Number = 0
    stock_small: Number = 0
    direct_sales: Number = 0
    sales_breakage: Number = 0
    set_breakage: Number = 0
    mortality: int = 0
    culls_in: int = 0
    sequence_label: Optional[str] = None
    vendor: Optional[str] = None

    @property
    def total_losses(self) -> Number:
        return self.direct_sales + self.sales_breakage + self.set_breakage


@dataclass(frozen=True)
class StockSnapshot:
    stock_normal: Number = 0
    stock_doubles: Number = 0
    stock_small: Number = 0


@dataclass(frozen=True)
class DerivedLedger:
    date: date
    unit: str
    starting_population: Number = 0
    starting_stock: Number = 0
    production_normal: Number = 0
    production_doubles: Number = 0
    production_small: Number = 0
    production_total: Number = 0
    production_rate_percent: float = 0.0
    production_delta: Number = 0
    direct_sales: Number = 0
    sales_breakage: Number = 0
    set_breakage: Number = 0
    mortality: int = 0
    culls_in: int = 0
    ending_population: Number = 0
    opening_stock: Number = 0
    closing_stock: Number = 0
    sequence_label: Optional[str] = None


def parse_label(label: Optional[str]) -> Optional[tuple[int, int]]:
    """Return ``(week, day)`` for a ``"<week>.<day>"`` label, else None."""
    if not label:
        return None
    match = _LABEL_RE.fullmatch(str(label))
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def is_valid_label(label: Optional[str]) -> bool:
    return parse_label(label) is not None


def next_label(previous: Optional[str]) -> str:
    """
    Next "<week>.<day>" label after `previous`.

      "23.2" -> "23.3"   (same week, next day)
      "23.7" -> "24.1"   (roll to next week)

    Anything that does not parse (None, "", "abc", "3.x") restarts at "1.1".
    """
    parsed = parse_label(previous)
    if parsed is None:
        return START_LABEL

    week, day = parsed
    next_day = day + 1
    if next_day <= DAYS_PER_WEEK:
        return f"{week}.{next_day}"
    return f"{week + 1}.1"


def production_rate(production_total: Number, starting_population: Number) -> float:
    if starting_population == 0:
        return 0.0
    return round2(production_total * RATE_DAYS / starting_population * 100)


def derive_ledger(
    day: date,
    unit: str,
    current: RawEntry,
    previous_ledger: Optional[DerivedLedger] = None,
    previous_stock: Optional[StockSnapshot] = None,
    latest_label: Optional[str] = None,
) -> DerivedLedger:
    """
    Build the ledger row for `unit` on `day`.

    Production per grade is reconstructed from stock conservation:
      production = stock today + everything that left today - stock yesterday
    The three loss columns are one aggregate, applied to every grade.

    Missing history (first day of a unit) counts as zero.
    """
    prev_ending_population = previous_ledger.ending_population if previous_ledger else 0
    prev_production_total = previous_ledger.production_total if previous_ledger else 0
    prev_closing_stock = previous_ledger.closing_stock if previous_ledger else 0
    prev_stock = previous_stock or StockSnapshot()

    starting_population = prev_ending_population
    starting_stock = prev_closing_stock

    losses = current.total_losses
    production_normal = current.stock_normal + losses - prev_stock.stock_normal
    production_doubles = current.stock_doubles + losses - prev_stock.stock_doubles
    production_small = current.stock_small + losses - prev_stock.stock_small
    production_total = production_normal + production_doubles + production_small

    label = current.sequence_label.strip() if current.sequence_label else ""

    return DerivedLedger(
        date=day,
        unit=unit,
        starting_population=starting_population,
        starting_stock=starting_stock,
        production_normal=production_normal,
        production_doubles=production_doubles,
        production_small=production_small,
        production_total=production_total,
        production_rate_percent=production_rate(production_total, starting_population),
        production_delta=prev_production_total - production_total,
        direct_sales=current.direct_sales,
        sales_breakage=current.sales_breakage,
        set_breakage=current.set_breakage,
        mortality=current.mortality,
        culls_in=current.culls_in,
        ending_population=starting_population - current.mortality + current.culls_in,
        opening_stock=starting_stock,
        closing_stock=current.stock_normal + current.stock_doubles + current.stock_small,
        sequence_label=label or next_label(latest_label),
    )
