from datetime import datetime, timedelta, timezone
from typing import Dict, List


def format_timestamp(dt: datetime) -> str:
    """
    UTC ISO-8601 with milliseconds, e.g. "2025-03-01T10:00:00.000Z".
    Used both for stored start/end values and for task ids.
    """
    dt = dt.astimezone(timezone.utc)
    return f"{dt.strftime('%Y-%m-%dT%H:%M:%S')}.{dt.microsecond // 1000:03d}Z"


def format_duration(delta: timedelta) -> str:
    """
    Formats a duration as "<days>j <hours>h". Minutes are dropped.
    Example: 2 days 5 hours 40 minutes -> "2j 5h"
    """
    minutes = int(delta.total_seconds() // 60)
    total_hours = minutes // 60
    days = total_hours // 24
    hours = total_hours % 24
    return f"{days}j {hours}h"


def task_id(house_name: str, start: datetime) -> str:
    return f"{house_name}-{format_timestamp(start)}"


def build_tasks(house: Dict, events: List[Dict]) -> List[Dict]:
    """
    Turns the parsed calendar events of one house into cleaning tasks.
    Every task starts unassigned and not done.
    """

    tasks = []
    name = house.get("nom")

    for event in events:
        start = event["start"]
        end = event["end"]
        start_iso = format_timestamp(start)

        tasks.append({
            "id": task_id(name, start),
            "maison": name,
            "start": start_iso,
            "end": format_timestamp(end),
            "date": start_iso[:10],
            "duration": format_duration(end - start),
            "done": False,
            "employe": "",
            "tempsMenage": house.get("tempsMenage") or 0,
        })

    return tasks
