from __future__ import annotations

import logging

from .command import CommandExecutor

logger = logging.getLogger(__name__)

DEFAULT_MIRROR = "http://archive.ubuntu.com/ubuntu"
DEFAULT_ARCH = "amd64"

BASE_PACKAGES = (
    "ca-certificates",
    "cron",
    "iptables",
    "isc-dhcp-client",
    "libnss-myhostname",
    "ntp",
    "ntpdate",
    "rsyslog",
    "ssh",
    "sudo",
    "dialog",
    "whiptail",
    "man-db",
    "curl",
    "dosfstools",
    "e2fsck-static",
)


def debootstrap_rootfs(
    executor: CommandExecutor,
    *,
    target_root: str,
    suite: str,
    mirror: str = DEFAULT_MIRROR,
    arch: str = DEFAULT_ARCH,
    cwd: str | None = None,
) -> list[str]:
    argv = [
        "debootstrap",
        f"--arch={arch}",
        "--variant=minbase",
        "--components",
        "main,universe",
        "--include",
        ",".join(BASE_PACKAGES),
        suite,
        target_root,
        mirror,
    ]
    lines = executor.output_lines(argv, cwd=cwd)
    logger.info("debootstrap %s finished (%d lines of output)", suite, len(lines))
    return lines
