from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import date
from typing import Optional

import streamlit as st

STATE_KEY = "farmbook_state"
FLASH_KEY = "farmbook_flash"


@dataclass
class AppState:
    """UI selections shared between pages, kept under one session key."""

    selected_date: Optional[date] = None
    selected_unit: Optional[str] = None

    def picked_date(self, today: Optional[date] = None) -> date:
        """The selected date for a date picker, never later than today."""
        today = today or date.today()
        return min(self.selected_date or today, today)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["selected_date"] = self.selected_date.isoformat() if self.selected_date else None
        return data

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "AppState":
        if not data:
            return cls()
        raw_date = data.get("selected_date")
        return cls(
            selected_date=date.fromisoformat(raw_date) if raw_date else None,
            selected_unit=data.get("selected_unit") or None,
        )


def get_state() -> AppState:
    return AppState.from_dict(st.session_state.get(STATE_KEY))


def put_state(state: AppState) -> None:
    st.session_state[STATE_KEY] = state.to_dict()
