from __future__ import annotations

import logging
import random
from datetime import date, timedelta
from typing import Optional, Sequence

from farmbook.db import ensure_schema
from farmbook.services.entries import EntryInput
from farmbook.services.ledgers import save_and_generate

logger = logging.getLogger(__name__)

DEMO_UNITS = ("B1", "B2", "B3")


def wipe_all(conn) -> None:
    # Keep schema, delete data.
    for t in ["ledgers", "daily_entries"]:
        conn.execute(f"DELETE FROM {t};")
    conn.commit()
    logger.info("Wiped all entries and ledgers")


def load_demo_data(
    conn,
    *,
    seed: int = 7,
    days: int = 10,
    units: Sequence[str] = DEMO_UNITS,
    end: Optional[date] = None,
) -> int:
    """
    Type in `days` consecutive entries per unit, ending yesterday, and generate
    each day's ledger the same way the data-entry form does. Returns the
    number of ledgers generated.
    """
    rng = random.Random(seed)
    ensure_schema(conn)

    end = end or (date.today() - timedelta(days=1))
    start = end - timedelta(days=days - 1)

    generated = 0
    for unit in units:
        flock = rng.randint(400, 900)
        stock = [rng.randint(20, 60), rng.randint(2, 8), rng.randint(1, 5)]
        week = rng.randint(1, 30)

        for i in range(days):
            day = start + timedelta(days=i)
            sold = rng.randint(0, 15)
            stock = [max(0, s + rng.randint(-3, 6)) for s in stock]

            entry = EntryInput(
                stock_normal=stock[0],
                stock_doubles=stock[1],
                stock_small=stock[2],
                direct_sales=sold,
                sales_breakage=rng.choice([0, 0, 1, 2]),
                set_breakage=rng.choice([0, 0, 0, 1]),
                mortality=rng.choice([0, 0, 0, 1, 2]),
                # First day brings the flock in.
                culls_in=flock if i == 0 else rng.choice([0, 0, 0, 0, 5]),
                sequence_label=f"{week}.1" if i == 0 else None,
                vendor="Demo Vendor" if sold else None,
            )
            save_and_generate(conn, day, unit, entry, units=units)
            generated += 1

    logger.info("Loaded demo data: %s ledgers for %s", generated, ", ".join(units))
    return generated
