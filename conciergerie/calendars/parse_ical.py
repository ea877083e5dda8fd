import logging
from datetime import date, datetime, timedelta, timezone
from typing import List

from icalendar import Calendar

logger = logging.getLogger(__name__)


def to_utc(value) -> datetime:
    """
    Normalizes an iCal DATE / DATE-TIME value to an aware UTC datetime.
    All-day dates start at midnight UTC, floating times are read as UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    raise ValueError(f"Unsupported iCal date value: {value!r}")


def _event_end(component, dtstart):
    dtend = component.get("DTEND")
    if dtend is not None:
        return dtend.dt

    duration = component.get("DURATION")
    if duration is not None:
        return dtstart + duration.dt

    # RFC 5545: an all-day event without end lasts one day
    if not isinstance(dtstart, datetime):
        return dtstart + timedelta(days=1)
    return dtstart


def parse_ical(ical_text: str) -> List[dict]:
    """
    Parses raw iCal text and extracts the VEVENT entries.
    Returns a list of dicts sorted by start, each with UTC `start` / `end`.
    """

    cal = Calendar.from_ical(ical_text)
    events = []

    for component in cal.walk():
        if component.name != "VEVENT":
            continue

        dtstart = component.get("DTSTART")
        if dtstart is None:
            logger.warning("Skipping event without DTSTART (uid=%s)", component.get("UID", ""))
            continue

        start = dtstart.dt
        end = _event_end(component, start)

        events.append({
            "start": to_utc(start),
            "end": to_utc(end),
            "summary": str(component.get("SUMMARY", "")),
            "uid": str(component.get("UID", "")),
        })

    # Stable sort: events sharing a start keep their feed order
    events.sort(key=lambda e: e["start"])

    return events
