from __future__ import annotations

from dataclasses import dataclass

from ..errors import ValidationError

MIB = 1024 * 1024

SECTOR_SIZE = 512
FIRST_LBA = 2048
# Backup GPT header + partition entries at the end of the disk.
GPT_BACKUP_SECTORS = 34
ESP_SIZE = 512 * MIB
# Smallest root size that still leaves one root sector.
MIN_ROOT_SIZE = (FIRST_LBA + GPT_BACKUP_SECTORS + 1) * SECTOR_SIZE


@dataclass(frozen=True)
class DiskLayout:
    root_size: int
    esp_size: int
    disk_size: int
    root_sectors: int


def plan_disk_layout(root_size: int) -> DiskLayout:
    """Compute image size and root partition length.

    The disk is the fixed ESP plus the requested root size. The root
    partition gets root_size/512 sectors minus the 2048 sectors in front of
    the ESP and the 34 sectors the backup GPT occupies at the end.
    """

    if root_size < MIN_ROOT_SIZE:
        raise ValidationError(f"root size too small for a partition: {root_size} bytes (minimum {MIN_ROOT_SIZE})")

    root_sectors = root_size // SECTOR_SIZE - FIRST_LBA - GPT_BACKUP_SECTORS

    return DiskLayout(
        root_size=root_size,
        esp_size=ESP_SIZE,
        disk_size=ESP_SIZE + root_size,
        root_sectors=root_sectors,
    )


def render_sfdisk_script(layout: DiskLayout) -> str:
    esp_mib = layout.esp_size // MIB
    return (
        "label: gpt\n"
        "unit: sectors\n"
        f"first-lba: {FIRST_LBA}\n"
        f"sector-size: {SECTOR_SIZE}\n"
        "\n"
        f"{FIRST_LBA} +{esp_mib}M U\n"
        f"- {layout.root_sectors} L\n"
    )
