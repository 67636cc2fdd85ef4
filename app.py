from __future__ import annotations

import streamlit as st

st.set_page_config(page_title="Farmbook", page_icon="🐔", layout="wide")

pages = [
    st.Page("home.py", title="Home", icon="🏠"),
    st.Page("pages/1_📝_Data_Entry.py", title="Data Entry", icon="📝"),
    st.Page("pages/2_📒_Daily_Ledger.py", title="Daily Ledger", icon="📒"),
    st.Page("pages/3_📊_Ledger_Reports.py", title="Ledger Reports", icon="📊"),
    st.Page("pages/4_🧪_Data_Management.py", title="Data Management", icon="🧪"),
]

st.navigation(pages).run()
