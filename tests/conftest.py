import time

import pytest


@pytest.fixture
def eastern_tz(monkeypatch):
    """Pin the process local zone to UTC-5 without daylight saving."""
    monkeypatch.setenv("TZ", "EST5")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()
