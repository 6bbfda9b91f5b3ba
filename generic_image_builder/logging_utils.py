from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

FALLBACK_LOG_NAME = "generic-image-builder.log"

_FORMAT = logging.Formatter(
    fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S%z",
)


def default_log_path(workdir: Path) -> Path:
    """Log file sitting next to the workdir, e.g. build/jammy.log for build/jammy.

    The workdir itself must not exist before phase0, so the log cannot go in it.
    """

    return workdir.parent / f"{workdir.name}.log"


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Set the root level and attach the console handler once.

    File output is added later by add_log_file(), once the config (and with
    it the workdir) is known.
    """

    root = logging.getLogger()
    root.setLevel(level)

    if not getattr(root, "_image_builder_console", False):
        console = logging.StreamHandler()
        console.setFormatter(_FORMAT)
        root.addHandler(console)
        setattr(root, "_image_builder_console", True)
    return root


def add_log_file(log_path: str, *, fallback: Optional[str] = None) -> str:
    """Mirror all log records into log_path.

    An explicitly requested path must be writable: without a fallback the
    OSError propagates. With one, an unwritable log_path falls back to it.

    Returns the path actually used.
    """

    root = logging.getLogger()
    wanted = str(Path(log_path).absolute())
    for h in root.handlers:
        if isinstance(h, logging.FileHandler) and h.baseFilename == wanted:
            return log_path

    try:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path)
        chosen = log_path
    except OSError:
        if fallback is None:
            raise
        handler = logging.FileHandler(fallback)
        chosen = fallback

    handler.setFormatter(_FORMAT)
    root.addHandler(handler)

    logging.getLogger(__name__).info("Logging to %s (requested=%s)", chosen, log_path)
    return chosen
