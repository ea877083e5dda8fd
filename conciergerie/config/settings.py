import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import load_dotenv

DEFAULT_CONFIG_FILE = "config.yaml"


@dataclass(frozen=True)
class Settings:
    data_root: Path = Path("data/clients")
    host: str = "0.0.0.0"
    port: int = 3000
    fetch_timeout: float = 10.0
    log_level: str = "INFO"
    log_dir: Path | None = None
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    sync_on_startup: list[str] = field(default_factory=list)


def _split(raw: str) -> list[str]:
    return [p.strip() for p in raw.split(",") if p.strip()]


def _as_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return _split(value)
    return [str(v) for v in value]


def load_config(path: str | None = None) -> Settings:
    """
    Loads the YAML configuration file and returns a Settings object.

    The file is looked up from the explicit path, then CONCIERGERIE_CONFIG,
    then config.yaml in the working directory. A missing file means defaults.
    Environment variables (and a local .env) override the file values.
    """
    load_dotenv(override=False)

    config_path = path or os.getenv("CONCIERGERIE_CONFIG") or DEFAULT_CONFIG_FILE

    raw = {}
    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    defaults = Settings()

    def pick(env_name: str, key: str, default):
        # Only unset or blank values fall through; an explicit 0 is kept
        env_value = os.getenv(env_name)
        if env_value is not None and env_value.strip() != "":
            return env_value
        if raw.get(key) is not None:
            return raw[key]
        return default

    data_root = pick("CONCIERGERIE_DATA_ROOT", "data_root", defaults.data_root)
    host = pick("CONCIERGERIE_HOST", "host", defaults.host)
    port = pick("PORT", "port", defaults.port)
    fetch_timeout = pick("CONCIERGERIE_FETCH_TIMEOUT", "fetch_timeout", defaults.fetch_timeout)
    log_level = pick("CONCIERGERIE_LOG_LEVEL", "log_level", defaults.log_level)
    log_dir = pick("CONCIERGERIE_LOG_DIR", "log_dir", None)

    origins_env = os.getenv("ALLOWED_ORIGINS")
    allowed_origins = _split(origins_env) if origins_env else _as_list(raw.get("allowed_origins"))

    startup_env = os.getenv("CONCIERGERIE_SYNC_ON_STARTUP")
    sync_on_startup = _split(startup_env) if startup_env else _as_list(raw.get("sync_on_startup"))

    return Settings(
        data_root=Path(data_root).expanduser(),
        host=str(host),
        port=int(port),
        fetch_timeout=float(fetch_timeout),
        log_level=str(log_level).upper(),
        log_dir=Path(log_dir).expanduser() if log_dir else None,
        allowed_origins=allowed_origins or ["*"],
        sync_on_startup=sync_on_startup,
    )
