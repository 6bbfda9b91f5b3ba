from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import LoopDeviceError
from .command import CommandExecutor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoopDevice:
    path: str

    def boot_partition(self) -> str:
        return f"{self.path}p1"

    def root_partition(self) -> str:
        return f"{self.path}p2"

    def __str__(self) -> str:
        return self.path


def attach_loop_device(executor: CommandExecutor, image_path: str, *, cwd: str | None = None) -> LoopDevice:
    """Attach image_path with partition scanning and return its loop device.

    losetup may print more than one line; only the first is used.
    """

    lines = executor.output_lines(["losetup", "--show", "-fP", image_path], cwd=cwd)
    if not lines:
        raise LoopDeviceError(image_path)

    if len(lines) > 1:
        logger.warning("losetup returned %d devices for %s, using %s", len(lines), image_path, lines[0])

    return LoopDevice(lines[0].strip())


def describe_loop_device(executor: CommandExecutor, loop: LoopDevice, *, cwd: str | None = None) -> None:
    """Log losetup status and the partition table of an attached device."""

    logger.info("losetup:\n%s", executor.output(["losetup", "-l", loop.path], cwd=cwd).rstrip())
    for line in executor.output_lines(["fdisk", "-l", loop.path], cwd=cwd):
        logger.info("fdisk: %s", line)
