import logging
import sys
from pathlib import Path


def setup_logging(level: str = "INFO", log_dir: Path | None = None) -> None:
    """
    Configure the root logger once, early in process startup:
    - console handler on stderr at the requested level
    - optional file handler with everything (DEBUG) in log_dir/conciergerie.log
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Avoid duplicate handlers when called twice (server reload, tests)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(getattr(logging, level.upper(), logging.INFO))
    console.setFormatter(fmt)
    root.addHandler(console)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_dir / "conciergerie.log"), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    # Third-party request logs are noisy at INFO
    logging.getLogger("urllib3").setLevel(logging.WARNING)
