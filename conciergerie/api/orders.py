from pathlib import Path
from typing import Any

from conciergerie.store.documents import ORDER_FILE, DocumentStore


def order_key(value: Any) -> str:
    """
    JSON object keys are strings: 42 -> "42", True -> "true", None -> "null".
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def get_order(store: DocumentStore, tenant_path: Path, date: str) -> dict:
    """
    Returns {employee: ordre} for one day, or {} when nothing was saved.
    """
    doc = store.load(tenant_path, ORDER_FILE)
    return doc.data.get(order_key(date)) or {}


def save_order(store: DocumentStore, tenant_path: Path, date: Any, employe: Any, ordre: Any):
    date_key = order_key(date)
    with store.edit(tenant_path, ORDER_FILE) as doc:
        if not isinstance(doc.data.get(date_key), dict):
            doc.data[date_key] = {}
        doc.data[date_key][order_key(employe)] = ordre
