"""
Calendar synchronisation.

Rebuilds a client's whole task list from the ICS feeds of its houses:
fetch each feed, parse the VEVENTs, derive one task per event and overwrite
taches.json. Manual edits (employe, done, ad-hoc tasks) do not survive a sync.

Standalone usage:
    conciergerie-sync <client-id>
"""

import argparse
import logging
import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from conciergerie.calendars.fetch_calendars import fetch_calendar
from conciergerie.calendars.parse_ical import parse_ical
from conciergerie.config.settings import Settings, load_config
from conciergerie.errors import ConciergerieError
from conciergerie.logging_setup import setup_logging
from conciergerie.schedule.generate_tasks import build_tasks
from conciergerie.store.documents import HOUSES_FILE, TASKS_FILE, DocumentStore
from conciergerie.store.tenants import validate_client_id

logger = logging.getLogger(__name__)

STATUS_COMPLETED = "completed"
STATUS_MISSING_HOUSES = "missing_houses"


@dataclass
class SyncResult:
    client_id: str
    status: str
    task_count: int = 0
    houses_synced: int = 0
    houses_skipped: int = 0
    houses_failed: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def completed(self) -> bool:
        return self.status == STATUS_COMPLETED

    def to_dict(self) -> dict:
        data = asdict(self)
        data["houses_failed"] = [{"nom": n, "error": e} for n, e in self.houses_failed]
        return data


def process_house(house: dict, fetch: Callable, timeout: float) -> Optional[list]:
    """
    Downloads and converts one house calendar.
    Returns None when the house has no calendar URL.
    Fetch and parse errors propagate to the caller.
    """
    name = house.get("nom")
    url = house.get("icsUrl")

    if not url:
        logger.warning("No ICS URL for house: %s", name)
        return None

    logger.info("Downloading ICS for: %s", name)
    raw_ical = fetch(url, timeout=timeout)
    events = parse_ical(raw_ical)
    return build_tasks(house, events)


def sync_client(
    client_id: str,
    settings: Settings | None = None,
    store: DocumentStore | None = None,
    fetch: Callable = fetch_calendar,
) -> SyncResult:
    settings = settings or load_config()
    store = store or DocumentStore()

    client_id = validate_client_id(client_id)
    tenant_path = Path(settings.data_root) / client_id

    if not (tenant_path / HOUSES_FILE).exists():
        logger.error("%s not found for client %s", HOUSES_FILE, client_id)
        return SyncResult(client_id=client_id, status=STATUS_MISSING_HOUSES)

    houses = store.load(tenant_path, HOUSES_FILE).data.get("maisons") or []
    result = SyncResult(client_id=client_id, status=STATUS_COMPLETED)
    all_tasks = []

    # One house at a time; a failing feed only loses that house's tasks
    for house in houses:
        name = house.get("nom") if isinstance(house, dict) else None
        try:
            if not isinstance(house, dict):
                raise ValueError(f"invalid house entry: {house!r}")
            tasks = process_house(house, fetch, settings.fetch_timeout)
        except Exception as e:
            logger.error("Sync failed for house %s: %s", name, e)
            result.houses_failed.append((str(name), str(e)))
            continue

        if tasks is None:
            result.houses_skipped += 1
            continue

        all_tasks.extend(tasks)
        result.houses_synced += 1

    store.replace(tenant_path, TASKS_FILE, {"taches": all_tasks})
    result.task_count = len(all_tasks)

    logger.info(
        "Sync finished for %s: %d tasks, %d houses synced, %d skipped, %d failed",
        client_id, result.task_count, result.houses_synced,
        result.houses_skipped, len(result.houses_failed),
    )
    return result


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="conciergerie-sync",
        description="Rebuild a client's tasks from its houses' ICS calendars.",
    )
    parser.add_argument("client_id", nargs="?", help="client id (x-client-id)")
    parser.add_argument("--config", help="path to the YAML config file")
    args = parser.parse_args(argv)

    settings = load_config(args.config)
    setup_logging(settings.log_level, settings.log_dir)

    if not args.client_id:
        parser.print_usage(sys.stderr)
        logger.error("A client id is required")
        return 1

    try:
        sync_client(args.client_id, settings=settings)
    except ConciergerieError as e:
        logger.error("Sync aborted for %s: %s", args.client_id, e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
