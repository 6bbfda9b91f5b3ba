from __future__ import annotations

import logging

from .command import CommandExecutor
from .layout import DiskLayout, render_sfdisk_script
from .loopdev import LoopDevice

logger = logging.getLogger(__name__)


def allocate_sparse_image(
    executor: CommandExecutor, image_path: str, layout: DiskLayout, *, cwd: str | None = None
) -> None:
    # count=0 + seek: size the file without writing any blocks
    executor.run(
        ["dd", "if=/dev/zero", f"of={image_path}", "bs=1", "count=0", f"seek={layout.disk_size}"],
        cwd=cwd,
    )


def partition_image(
    executor: CommandExecutor, image_path: str, layout: DiskLayout, *, cwd: str | None = None
) -> None:
    """Write the GPT: ESP at sector 2048, Linux root after it."""

    logger.info("Partitioning %s root_sectors=%d", image_path, layout.root_sectors)
    executor.run(["sfdisk", image_path], cwd=cwd, input_text=render_sfdisk_script(layout))


def format_partitions(executor: CommandExecutor, loop: LoopDevice, *, cwd: str | None = None) -> None:
    executor.run(["mkfs.vfat", "-F", "32", loop.boot_partition()], cwd=cwd)
    executor.run(["mkfs.ext4", "-F", loop.root_partition()], cwd=cwd)


def mount_partition(executor: CommandExecutor, device: str, mountpoint: str, *, cwd: str | None = None) -> None:
    executor.run(["mount", device, mountpoint], cwd=cwd)
