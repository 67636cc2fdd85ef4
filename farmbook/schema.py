SCHEMA_SQL = r"""
-- Daily raw entries (one per date x unit, typed in by the user)
CREATE TABLE IF NOT EXISTS daily_entries (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  entry_date TEXT NOT NULL,              -- ISO date
  unit TEXT NOT NULL,                    -- production unit / set (B1, B2, ...)

  -- Stock on hand at day's end, by grade
  stock_normal REAL NOT NULL DEFAULT 0,
  stock_doubles REAL NOT NULL DEFAULT 0,
  stock_small REAL NOT NULL DEFAULT 0,

  -- Items leaving circulation
  direct_sales REAL NOT NULL DEFAULT 0,
  sales_breakage REAL NOT NULL DEFAULT 0,
  set_breakage REAL NOT NULL DEFAULT 0,

  -- Live population changes
  mortality INTEGER NOT NULL DEFAULT 0,
  culls_in INTEGER NOT NULL DEFAULT 0,

  sequence_label TEXT,                   -- "<week>.<day>", optional
  vendor TEXT,

  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL,

  UNIQUE (entry_date, unit)
);

-- Derived ledger rows (output of the daily calculation)
CREATE TABLE IF NOT EXISTS ledgers (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  entry_date TEXT NOT NULL,
  unit TEXT NOT NULL,

  starting_population INTEGER NOT NULL DEFAULT 0,
  starting_stock REAL NOT NULL DEFAULT 0,

  production_normal REAL NOT NULL DEFAULT 0,
  production_doubles REAL NOT NULL DEFAULT 0,
  production_small REAL NOT NULL DEFAULT 0,
  production_total REAL NOT NULL DEFAULT 0,
  production_rate_percent REAL NOT NULL DEFAULT 0,
  production_delta REAL NOT NULL DEFAULT 0,

  direct_sales REAL NOT NULL DEFAULT 0,
  sales_breakage REAL NOT NULL DEFAULT 0,
  set_breakage REAL NOT NULL DEFAULT 0,
  mortality INTEGER NOT NULL DEFAULT 0,
  culls_in INTEGER NOT NULL DEFAULT 0,

  ending_population INTEGER NOT NULL DEFAULT 0,
  opening_stock REAL NOT NULL DEFAULT 0,
  closing_stock REAL NOT NULL DEFAULT 0,

  sequence_label TEXT,

  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL,

  UNIQUE (entry_date, unit)
);

CREATE INDEX IF NOT EXISTS idx_daily_entries_unit_date ON daily_entries (unit, entry_date);
CREATE INDEX IF NOT EXISTS idx_ledgers_unit_date ON ledgers (unit, entry_date);
"""
