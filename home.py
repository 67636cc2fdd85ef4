from __future__ import annotations

import streamlit as st

from farmbook.config import get_settings
from farmbook.db import get_conn, ensure_schema
from farmbook.logging_config import configure_logging

st.set_page_config(page_title="Farmbook", page_icon="🐔", layout="wide")

st.title("🐔 Farmbook — Daily Farm Ledger")
st.caption("Daily stock, sales and loss counts per unit, turned into a production ledger with a rolling week.day label.")

settings = get_settings()
configure_logging(settings.log_level)
conn = get_conn(settings.db_path)
ensure_schema(conn)

with st.sidebar:
    st.subheader("Environment")
    st.write(f"**Data directory:** `{settings.data_dir}`")
    st.write(f"**Database:** `{settings.db_path.name}`")
    st.write(f"**Units:** {', '.join(settings.units)}")

st.info(
    "Use the left sidebar navigation. Enter the day's counts in **📝 Data Entry**, then **Save & Generate Ledger**. "
    "Review a day in **📒 Daily Ledger** and export ranges from **📊 Ledger Reports**. "
    "**🧪 Data Management** can load demo history.",
    icon="ℹ️",
)
