from __future__ import annotations

import logging
import shutil
from typing import Callable, Optional, Sequence

from .build_config import BuildConfig
from .errors import ToolMissingError, ValidationError
from .lib.layout import MIN_ROOT_SIZE

logger = logging.getLogger(__name__)


REQUIRED_TOOLS = (
    "sfdisk",
    "debootstrap",
    "mount",
    "dd",
    "losetup",
    "mkfs.vfat",
    "mkfs.ext4",
    "chroot",
    "apt",
)


def validate_config(cfg: BuildConfig) -> None:
    """Check config preconditions before any phase runs; no side effects."""

    if cfg.workdir.exists():
        raise ValidationError(f"workdir in config already exists: {cfg.workdir}")

    if not cfg.content.base.exists():
        raise ValidationError(f"content directory {cfg.content.base} should exist")

    pkg_dir = cfg.content.local_package_dir
    if pkg_dir is not None and not pkg_dir.exists():
        raise ValidationError(f"local package directory {pkg_dir} should exist")

    if cfg.image.size < MIN_ROOT_SIZE:
        raise ValidationError(f"image.size {cfg.image.size} bytes is below the minimum root size of {MIN_ROOT_SIZE} bytes")

    logger.info("Config valid (workdir=%s)", cfg.workdir)


def check_required_tools(
    tools: Sequence[str] = REQUIRED_TOOLS,
    *,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> None:
    missing = [t for t in tools if not which(t)]
    if missing:
        raise ToolMissingError(missing)
    logger.info("All required tools found: %s", ", ".join(tools))
