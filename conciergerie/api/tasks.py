from pathlib import Path
from typing import Any

from conciergerie.errors import TaskNotFound
from conciergerie.store.documents import TASKS_FILE, DocumentStore


def list_tasks(store: DocumentStore, tenant_path: Path) -> list:
    doc = store.load(tenant_path, TASKS_FILE)
    return doc.data.get("taches") or []


def add_task(store: DocumentStore, tenant_path: Path, task: Any):
    """
    Appends the payload as-is. No validation and no id assignment.
    """
    with store.edit(tenant_path, TASKS_FILE) as doc:
        doc.data["taches"] = doc.data.get("taches") or []
        doc.data["taches"].append(task)


def _update_first(store: DocumentStore, tenant_path: Path, task_id, field: str, value):
    # Raising inside edit() skips the save, so a miss leaves the file untouched
    with store.edit(tenant_path, TASKS_FILE) as doc:
        for task in doc.data.get("taches") or []:
            if isinstance(task, dict) and task.get("id") == task_id:
                task[field] = value
                return
        raise TaskNotFound()


def assign_employee(store: DocumentStore, tenant_path: Path, task_id, employe):
    _update_first(store, tenant_path, task_id, "employe", employe)


def set_status(store: DocumentStore, tenant_path: Path, task_id, etat):
    """
    Stores `etat` verbatim in `done` (booleans, colour names, ...).
    """
    _update_first(store, tenant_path, task_id, "done", etat)


def tasks_for_date(store: DocumentStore, tenant_path: Path, date: str) -> list:
    return [
        t for t in list_tasks(store, tenant_path)
        if isinstance(t, dict) and t.get("date") == date
    ]
