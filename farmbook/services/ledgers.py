from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from datetime import date, timedelta
from typing import Iterable, Optional

from farmbook.db import q, x
from farmbook.services.calculations import (
    DerivedLedger,
    StockSnapshot,
    derive_ledger,
    is_valid_label,
)
from farmbook.services.entries import (
    EntryInput,
    get_entry,
    get_raw_stock,
    save_entry,
    units_with_entries,
    validate_unit,
)
from farmbook.utils import iso_day, iso_now

logger = logging.getLogger(__name__)

LEDGER_COLUMNS = tuple(f.name for f in fields(DerivedLedger) if f.name not in {"date", "unit"})


@dataclass
class LedgerContext:
    """What the calculation saw for the previous day (shown next to the result)."""

    previous_ledger: Optional[DerivedLedger]
    previous_stock: Optional[StockSnapshot]
    latest_label: Optional[str]

    @property
    def label_reset(self) -> bool:
        return bool(self.latest_label) and not is_valid_label(self.latest_label)


@dataclass
class GenerationResult:
    day: date
    ledgers: dict[str, DerivedLedger] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _value(v):
    if isinstance(v, float) and v.is_integer():
        return int(v)
    return v


def _row_to_ledger(row) -> DerivedLedger:
    data = {name: _value(row[name]) for name in LEDGER_COLUMNS if name != "production_rate_percent"}
    return DerivedLedger(
        date=date.fromisoformat(str(row["entry_date"])),
        unit=str(row["unit"]),
        production_rate_percent=float(row["production_rate_percent"] or 0),
        **data,
    )


def get_ledger(conn, day: date, unit: str) -> Optional[DerivedLedger]:
    rows = q(
        conn,
        "SELECT * FROM ledgers WHERE entry_date=? AND unit=?",
        (iso_day(day), str(unit)),
    )
    return _row_to_ledger(rows[0]) if rows else None


def get_latest_label(conn, unit: str, *, before: Optional[date] = None) -> Optional[str]:
    """
    Most recent non-empty label for `unit`, from generated ledgers or typed
    entries, whichever carries the later date (ledgers win a same-day tie).
    With `before`, only dates strictly earlier than it are considered.
    """
    where = "unit=? AND sequence_label IS NOT NULL AND TRIM(sequence_label) <> ''"
    params: list = [str(unit)]
    if before is not None:
        where += " AND entry_date < ?"
        params.append(iso_day(before))

    rows = q(
        conn,
        f"""
        SELECT entry_date, sequence_label, 0 AS source_rank FROM ledgers WHERE {where}
        UNION ALL
        SELECT entry_date, sequence_label, 1 AS source_rank FROM daily_entries WHERE {where}
        ORDER BY entry_date DESC, source_rank ASC
        LIMIT 1
        """,
        params + params,
    )
    return str(rows[0]["sequence_label"]).strip() if rows else None


def upsert_ledger(conn, ledger: DerivedLedger) -> None:
    """Insert or replace the ledger row for (date, unit); last write wins."""
    now = iso_now()
    cols = ", ".join(LEDGER_COLUMNS)
    marks = ", ".join("?" for _ in LEDGER_COLUMNS)
    updates = ", ".join(f"{c}=excluded.{c}" for c in LEDGER_COLUMNS)
    x(
        conn,
        f"""
        INSERT INTO ledgers (entry_date, unit, {cols}, created_at, updated_at)
        VALUES (?, ?, {marks}, ?, ?)
        ON CONFLICT (entry_date, unit) DO UPDATE SET {updates}, updated_at=excluded.updated_at
        """,
        (
            iso_day(ledger.date),
            ledger.unit,
            *(getattr(ledger, c) for c in LEDGER_COLUMNS),
            now,
            now,
        ),
    )


def resolve_history(conn, day: date, unit: str) -> LedgerContext:
    previous_day = day - timedelta(days=1)
    return LedgerContext(
        previous_ledger=get_ledger(conn, previous_day, unit),
        previous_stock=get_raw_stock(conn, previous_day, unit),
        latest_label=get_latest_label(conn, unit, before=day),
    )


def generate_ledger(conn, day: date, unit: str) -> tuple[DerivedLedger, LedgerContext]:
    """
    Recompute and store the ledger for one unit on one day from its saved
    entry and the previous day's history.
    """
    entry = get_entry(conn, day, unit)
    if entry is None:
        raise ValueError(f"No entry saved for {unit} on {iso_day(day)}.")

    ctx = resolve_history(conn, day, unit)
    ledger = derive_ledger(
        day,
        unit,
        entry.to_raw(),
        previous_ledger=ctx.previous_ledger,
        previous_stock=ctx.previous_stock,
        latest_label=ctx.latest_label,
    )

    if ctx.label_reset and not entry.sequence_label:
        logger.warning(
            "Unreadable week label %r for %s before %s; restarted at %s",
            ctx.latest_label,
            unit,
            iso_day(day),
            ledger.sequence_label,
        )

    upsert_ledger(conn, ledger)
    logger.info(
        "Generated ledger %s %s: production=%s closing_stock=%s label=%s",
        iso_day(day),
        unit,
        ledger.production_total,
        ledger.closing_stock,
        ledger.sequence_label,
    )
    return ledger, ctx


def generate_ledgers(conn, day: date, units: Optional[Iterable[str]] = None) -> GenerationResult:
    """
    Generate every unit with an entry on `day`. Units are independent chains,
    so one unit failing is recorded and the rest carry on.
    """
    result = GenerationResult(day=day)
    saved = units_with_entries(conn, day)
    targets = list(units) if units is not None else saved

    for unit in targets:
        if unit not in saved:
            result.skipped.append(unit)
            continue
        try:
            ledger, _ = generate_ledger(conn, day, unit)
            result.ledgers[unit] = ledger
        except Exception as e:
            logger.exception("Ledger generation failed for %s on %s", unit, iso_day(day))
            result.errors[unit] = str(e)
    return result


def save_and_generate(
    conn,
    day: date,
    unit: str,
    entry: EntryInput,
    *,
    units: Optional[Iterable[str]] = None,
) -> tuple[DerivedLedger, LedgerContext]:
    """The form's "Save & Generate Ledger" action."""
    unit = validate_unit(unit, units)
    save_entry(conn, day, unit, entry, units=units)
    return generate_ledger(conn, day, unit)


def ledgers_for_date(conn, day: date, units: Iterable[str]) -> dict[str, Optional[DerivedLedger]]:
    """Every unit's ledger for the day; None where nothing has been generated."""
    rows = q(conn, "SELECT * FROM ledgers WHERE entry_date=?", (iso_day(day),))
    found = {str(r["unit"]): _row_to_ledger(r) for r in rows}
    return {u: found.get(u) for u in units}


def ledgers_between(conn, date_from: date, date_to: date, *, unit: Optional[str] = None) -> list[DerivedLedger]:
    sql = "SELECT * FROM ledgers WHERE entry_date BETWEEN ? AND ?"
    params: list = [iso_day(date_from), iso_day(date_to)]
    if unit:
        sql += " AND unit=?"
        params.append(str(unit))
    sql += " ORDER BY entry_date DESC, unit ASC"
    return [_row_to_ledger(r) for r in q(conn, sql, params)]
