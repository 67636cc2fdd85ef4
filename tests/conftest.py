from __future__ import annotations

import pytest

from farmbook.db import _connect, ensure_schema


@pytest.fixture
def conn(tmp_path):
    c = _connect(tmp_path / "farmbook.db")
    ensure_schema(c)
    yield c
    c.close()
