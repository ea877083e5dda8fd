import re
from pathlib import Path

from conciergerie.errors import InvalidTenantError, MissingTenantError

# Tenant ids become directory names under the data root
_TENANT_ID_RE = re.compile(r"[A-Za-z0-9_-][A-Za-z0-9._-]{0,127}")


def validate_client_id(client_id: str | None) -> str:
    """
    Returns the client id unchanged if it is safe to use as a directory name.
    Raises MissingTenantError when absent, InvalidTenantError when it could
    escape the data root (separators, "..", leading dot, odd characters).
    """
    if client_id is None or not client_id.strip():
        raise MissingTenantError()

    if not _TENANT_ID_RE.fullmatch(client_id) or ".." in client_id:
        raise InvalidTenantError()

    return client_id


def resolve_tenant_path(data_root: Path, client_id: str | None) -> Path:
    """
    Maps a client id to its storage directory, creating it (and the
    data root) if missing.
    """
    client_id = validate_client_id(client_id)
    tenant_path = Path(data_root) / client_id
    tenant_path.mkdir(parents=True, exist_ok=True)
    return tenant_path
