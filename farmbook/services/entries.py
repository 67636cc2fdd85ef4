from __future__ import annotations

import logging
from dataclasses import dataclass, asdict, fields
from datetime import date
from typing import Iterable, Optional

from farmbook.db import q, x
from farmbook.services.calculations import RawEntry, StockSnapshot, is_valid_label
from farmbook.utils import iso_day, iso_now

logger = logging.getLogger(__name__)

NUMERIC_FIELDS = (
    "stock_normal",
    "stock_doubles",
    "stock_small",
    "direct_sales",
    "sales_breakage",
    "set_breakage",
    "mortality",
    "culls_in",
)
INTEGER_FIELDS = ("mortality", "culls_in")

FIELD_LABELS = {
    "stock_normal": "Stock - Normal",
    "stock_doubles": "Stock - Doubles",
    "stock_small": "Stock - Small",
    "direct_sales": "Direct Sales",
    "sales_breakage": "Sales Breakage",
    "set_breakage": "Set Breakage",
    "mortality": "Mortality",
    "culls_in": "Culls In",
}


@dataclass
class EntryInput:
    """Form payload for one unit on one day (not yet validated)."""

    stock_normal: float = 0
    stock_doubles: float = 0
    stock_small: float = 0
    direct_sales: float = 0
    sales_breakage: float = 0
    set_breakage: float = 0
    mortality: int = 0
    culls_in: int = 0
    sequence_label: Optional[str] = None
    vendor: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "EntryInput":
        keys = row.keys()
        data = {f.name: row[f.name] for f in fields(cls) if f.name in keys}
        for name in NUMERIC_FIELDS:
            if name in data:
                data[name] = _from_db(data[name])
        return cls(**data)

    def to_raw(self) -> RawEntry:
        return RawEntry(**asdict(self))

    @property
    def total_stock(self) -> float:
        return self.stock_normal + self.stock_doubles + self.stock_small

    @property
    def total_loss(self) -> float:
        return self.sales_breakage + self.set_breakage + self.mortality

    def has_data(self) -> bool:
        return any(getattr(self, f) for f in NUMERIC_FIELDS)


def _from_db(value):
    # SQLite REAL columns come back as 40.0; keep whole counts as ints.
    if value is None:
        return 0
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _normalize_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s if s else None


def _number(value, name: str, *, integer: bool = False):
    if value is None or value == "":
        return 0
    try:
        num = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{FIELD_LABELS[name]} must be a number.")
    if num < 0:
        raise ValueError(f"{FIELD_LABELS[name]} cannot be negative.")
    if integer:
        if not num.is_integer():
            raise ValueError(f"{FIELD_LABELS[name]} must be a whole number.")
        return int(num)
    return int(num) if num.is_integer() else num


def validate_unit(unit: str, units: Optional[Iterable[str]] = None) -> str:
    code = str(unit or "").strip().upper()
    if not code:
        raise ValueError("Unit is required.")
    if units is not None and code not in set(units):
        raise ValueError(f"Unknown unit: {code}.")
    return code


def validate_entry(entry: EntryInput) -> EntryInput:
    """
    Reject what the ledger calculation silently propagates: negative or
    non-numeric counts and a typed label that is not "<week>.<day>".
    Returns a cleaned copy.
    """
    values = {
        name: _number(getattr(entry, name), name, integer=name in INTEGER_FIELDS)
        for name in NUMERIC_FIELDS
    }
    label = _normalize_text(entry.sequence_label)
    if label is not None and not is_valid_label(label):
        raise ValueError(f"Week label '{label}' must look like <week>.<day>, e.g. 23.4.")

    return EntryInput(**values, sequence_label=label, vendor=_normalize_text(entry.vendor))


def save_entry(conn, day: date, unit: str, entry: EntryInput, *, units: Optional[Iterable[str]] = None) -> EntryInput:
    """Upsert the raw entry for (day, unit); a later save replaces the earlier one."""
    unit = validate_unit(unit, units)
    clean = validate_entry(entry)
    now = iso_now()

    x(
        conn,
        """
        INSERT INTO daily_entries (
            entry_date, unit,
            stock_normal, stock_doubles, stock_small,
            direct_sales, sales_breakage, set_breakage,
            mortality, culls_in,
            sequence_label, vendor,
            created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT (entry_date, unit) DO UPDATE SET
            stock_normal=excluded.stock_normal,
            stock_doubles=excluded.stock_doubles,
            stock_small=excluded.stock_small,
            direct_sales=excluded.direct_sales,
            sales_breakage=excluded.sales_breakage,
            set_breakage=excluded.set_breakage,
            mortality=excluded.mortality,
            culls_in=excluded.culls_in,
            sequence_label=excluded.sequence_label,
            vendor=excluded.vendor,
            updated_at=excluded.updated_at
        """,
        (
            iso_day(day),
            unit,
            clean.stock_normal,
            clean.stock_doubles,
            clean.stock_small,
            clean.direct_sales,
            clean.sales_breakage,
            clean.set_breakage,
            int(clean.mortality),
            int(clean.culls_in),
            clean.sequence_label,
            clean.vendor,
            now,
            now,
        ),
    )
    logger.debug("Saved entry %s %s", iso_day(day), unit)
    return clean


def get_entry(conn, day: date, unit: str) -> Optional[EntryInput]:
    rows = q(
        conn,
        "SELECT * FROM daily_entries WHERE entry_date=? AND unit=?",
        (iso_day(day), str(unit)),
    )
    return EntryInput.from_row(rows[0]) if rows else None


def get_raw_stock(conn, day: date, unit: str) -> Optional[StockSnapshot]:
    rows = q(
        conn,
        """
        SELECT stock_normal, stock_doubles, stock_small
        FROM daily_entries
        WHERE entry_date=? AND unit=?
        """,
        (iso_day(day), str(unit)),
    )
    if not rows:
        return None
    r = rows[0]
    return StockSnapshot(
        stock_normal=_from_db(r["stock_normal"]),
        stock_doubles=_from_db(r["stock_doubles"]),
        stock_small=_from_db(r["stock_small"]),
    )


def entries_for_date(conn, day: date, units: Iterable[str]) -> dict[str, EntryInput]:
    """Every unit's entry for the day; units with nothing saved get a zero entry."""
    rows = q(conn, "SELECT * FROM daily_entries WHERE entry_date=?", (iso_day(day),))
    saved = {str(r["unit"]): EntryInput.from_row(r) for r in rows}
    return {u: saved.get(u, EntryInput()) for u in units}


def units_with_entries(conn, day: date) -> list[str]:
    rows = q(
        conn,
        "SELECT unit FROM daily_entries WHERE entry_date=? ORDER BY unit",
        (iso_day(day),),
    )
    return [str(r["unit"]) for r in rows]


def dates_with_entries(conn, date_from: date, date_to: date) -> dict[str, int]:
    """ISO date -> number of units with an entry, for marking the calendar."""
    rows = q(
        conn,
        """
        SELECT entry_date, COUNT(*) AS n
        FROM daily_entries
        WHERE entry_date BETWEEN ? AND ?
        GROUP BY entry_date
        ORDER BY entry_date
        """,
        (iso_day(date_from), iso_day(date_to)),
    )
    return {str(r["entry_date"]): int(r["n"]) for r in rows}
