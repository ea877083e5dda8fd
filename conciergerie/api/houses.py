from pathlib import Path

from conciergerie.store.documents import HOUSES_FILE, DocumentStore


def list_houses(store: DocumentStore, tenant_path: Path) -> list:
    doc = store.load(tenant_path, HOUSES_FILE)
    return doc.data.get("maisons") or []


def delete_house(store: DocumentStore, tenant_path: Path, nom):
    """
    Removes every house named `nom`, not only the first one.
    """
    with store.edit(tenant_path, HOUSES_FILE) as doc:
        doc.data["maisons"] = [
            m for m in doc.data.get("maisons") or []
            if not (isinstance(m, dict) and m.get("nom") == nom)
        ]
