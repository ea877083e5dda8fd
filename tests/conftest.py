from __future__ import annotations

import json
from pathlib import Path

import pytest

from conciergerie.config.settings import Settings
from conciergerie.store.documents import DocumentStore

CALENDAR_A = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Test//Bookings//EN
BEGIN:VEVENT
UID:second@test
DTSTART:20250310T150000Z
DTEND:20250312T184500Z
SUMMARY:Reserved
END:VEVENT
BEGIN:VTODO
UID:todo@test
SUMMARY:Not an event
END:VTODO
BEGIN:VEVENT
UID:first@test
DTSTART;VALUE=DATE:20250301
DTEND;VALUE=DATE:20250303
SUMMARY:Reserved
END:VEVENT
END:VCALENDAR
"""

CALENDAR_B = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Test//Bookings//EN
BEGIN:VEVENT
UID:b1@test
DTSTART:20250305T100000Z
DTEND:20250305T133000Z
SUMMARY:Reserved
END:VEVENT
END:VCALENDAR
"""


class FakeFetch:
    """Serves calendars from a dict; values that are exceptions are raised."""

    def __init__(self, feeds: dict):
        self.feeds = feeds
        self.calls: list[tuple[str, float]] = []

    def __call__(self, url: str, timeout: float = 10):
        self.calls.append((url, timeout))
        feed = self.feeds[url]
        if isinstance(feed, Exception):
            raise feed
        return feed


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(data_root=tmp_path / "clients", fetch_timeout=3)


@pytest.fixture()
def store() -> DocumentStore:
    return DocumentStore()


@pytest.fixture()
def tenant(settings: Settings) -> Path:
    path = settings.data_root / "acme"
    path.mkdir(parents=True)
    return path


def write_json(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def read_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))
