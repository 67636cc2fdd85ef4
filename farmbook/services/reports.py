from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Iterable, Optional

import pandas as pd

from farmbook.services.calculations import DerivedLedger
from farmbook.utils import iso_day

# Export column order follows the paper ledger sheet, left to right.
EXPORT_COLUMNS = {
    "date": "Date",
    "unit": "Unit",
    "sequence_label": "Week",
    "starting_population": "Starting Population",
    "starting_stock": "Starting Stock",
    "production_normal": "Normal Production",
    "production_doubles": "Double Production",
    "production_small": "Small Production",
    "production_total": "Total Production",
    "production_rate_percent": "Production %",
    "production_delta": "Production Difference",
    "direct_sales": "Direct Sales",
    "sales_breakage": "Sales Breakage",
    "set_breakage": "Set Breakage",
    "mortality": "Mortality",
    "culls_in": "Culls",
    "ending_population": "Ending Population",
    "opening_stock": "Opening Stock",
    "closing_stock": "Closing Stock",
}


def ledger_frame(ledgers: Iterable[DerivedLedger]) -> pd.DataFrame:
    rows = [asdict(l) for l in ledgers]
    df = pd.DataFrame(rows, columns=list(EXPORT_COLUMNS))
    if not df.empty:
        df["date"] = df["date"].map(iso_day)
        df["sequence_label"] = df["sequence_label"].fillna("")
    return df


def filter_ledgers(df: pd.DataFrame, *, unit: Optional[str] = None, search: str = "") -> pd.DataFrame:
    """Unit filter ("All"/None for every unit) plus a case-insensitive search on unit or week label."""
    out = df
    if unit and unit != "All":
        out = out[out["unit"] == unit]

    term = (search or "").strip().lower()
    if term:
        hit = out["unit"].str.lower().str.contains(term, regex=False) | out["sequence_label"].astype(str).str.lower().str.contains(
            term, regex=False
        )
        out = out[hit]
    return out


def daily_totals(df: pd.DataFrame) -> pd.DataFrame:
    """One row per date, newest first: number of units and total production."""
    if df.empty:
        return pd.DataFrame(columns=["date", "entries", "production_total"])
    totals = (
        df.groupby("date", as_index=False)
        .agg(entries=("unit", "count"), production_total=("production_total", "sum"))
        .sort_values("date", ascending=False)
        .reset_index(drop=True)
    )
    return totals


def group_by_date(df: pd.DataFrame) -> list[tuple[str, pd.DataFrame]]:
    if df.empty:
        return []
    groups = []
    for day in sorted(df["date"].unique(), reverse=True):
        groups.append((str(day), df[df["date"] == day].reset_index(drop=True)))
    return groups


def to_csv(df: pd.DataFrame) -> str:
    return df[list(EXPORT_COLUMNS)].rename(columns=EXPORT_COLUMNS).to_csv(index=False)


def export_filename(date_from: date, date_to: date) -> str:
    return f"ledger-{iso_day(date_from)}-to-{iso_day(date_to)}.csv"
