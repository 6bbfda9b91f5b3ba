from __future__ import annotations

import logging
import shutil
from typing import Callable, List, Optional

from .build_config import BuildConfig, load_build_config
from .build_state import BuildState, Error, Phase0, Phase1, Phase2
from .errors import BuildError, ImageBuilderError, StateError
from .lib.command import CommandExecutor
from .lib.layout import plan_disk_layout
from .lib.loopdev import attach_loop_device, describe_loop_device
from .lib.pkg import debootstrap_rootfs
from .lib.storage import allocate_sparse_image, format_partitions, mount_partition, partition_image
from .preflight import check_required_tools, validate_config

logger = logging.getLogger(__name__)


class ImageBuilder:
    """Drives a build through Phase0 -> Phase1 -> Phase2.

    Every path is derived from the absolute workdir and every command runs
    with cwd=workdir; the process cwd is never changed.
    """

    def __init__(self, cfg: BuildConfig, executor: Optional[CommandExecutor] = None):
        self.cfg = cfg
        self.executor = executor or CommandExecutor()
        # Host resources created so far; reported (not released) on failure.
        self.leftovers: List[str] = []

    @classmethod
    def create(
        cls,
        config_path: str,
        *,
        executor: Optional[CommandExecutor] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
    ) -> "ImageBuilder":
        cfg = load_build_config(config_path)
        validate_config(cfg)
        check_required_tools(which=which)
        return cls(cfg, executor=executor)

    @property
    def _cwd(self) -> str:
        return str(self.cfg.workdir)

    @staticmethod
    def _log(state: BuildState, message: str, *, level: int = logging.INFO) -> None:
        logger.log(level, "%s %s", state, message)

    def phase0(self) -> BuildState:
        # exist_ok=False: the build must own a fresh workdir
        self.cfg.workdir.mkdir(parents=True)
        state = Phase0()
        self._log(state, f"created workdir {self.cfg.workdir}")
        return state

    def phase1(self, state: BuildState) -> BuildState:
        """Create, partition, attach and format the disk image."""

        if not isinstance(state, Phase0):
            raise StateError("Phase0", state)

        layout = plan_disk_layout(self.cfg.image.size)
        image = str(self.cfg.image_path)

        self._log(state, f"create diskimage {image} ({layout.disk_size} bytes)")
        allocate_sparse_image(self.executor, image, layout, cwd=self._cwd)
        self.leftovers.append(image)

        partition_image(self.executor, image, layout, cwd=self._cwd)

        loop = attach_loop_device(self.executor, image, cwd=self._cwd)
        self.leftovers.append(loop.path)
        self._log(state, f"attached {image} to {loop}")
        describe_loop_device(self.executor, loop, cwd=self._cwd)

        self._log(state, f"format {loop.boot_partition()} (vfat) and {loop.root_partition()} (ext4)")
        format_partitions(self.executor, loop, cwd=self._cwd)

        return Phase1(loop)

    def phase2(self, state: BuildState) -> BuildState:
        """Mount root and ESP under chroot/ and debootstrap the base system."""

        if not isinstance(state, Phase1):
            raise StateError("Phase1", state)

        if not self.cfg.workdir.is_dir():
            raise FileNotFoundError(f"workdir {self.cfg.workdir} no longer exists")

        loop = state.loop
        chroot_dir = self.cfg.chroot_dir
        efi_dir = self.cfg.efi_dir

        self._log(state, "create and mount root")
        chroot_dir.mkdir()
        mount_partition(self.executor, loop.root_partition(), str(chroot_dir), cwd=self._cwd)
        self.leftovers.append(str(chroot_dir))

        self._log(state, "create and mount boot/efi")
        efi_dir.mkdir(parents=True, exist_ok=True)
        mount_partition(self.executor, loop.boot_partition(), str(efi_dir), cwd=self._cwd)
        self.leftovers.append(str(efi_dir))

        image = self.cfg.image
        self._log(state, f"install {image.distro} bootstrap from {image.mirror}")
        debootstrap_rootfs(
            self.executor,
            target_root=str(chroot_dir),
            suite=str(image.distro),
            mirror=image.mirror,
            arch=image.arch,
            cwd=self._cwd,
        )

        return Phase2(loop)

    def run(self) -> BuildState:
        """Run all phases; any failure lands in the terminal Error state."""

        phase = "phase0"
        try:
            state = self.phase0()
            phase = "phase1"
            state = self.phase1(state)
            phase = "phase2"
            state = self.phase2(state)
        except (ImageBuilderError, OSError) as e:
            failed = Error(reason=str(e), phase=phase)
            self._log(failed, f"{phase} failed: {e}", level=logging.ERROR)
            if self.leftovers:
                logger.error("Left in place for inspection: %s", ", ".join(self.leftovers))
            raise BuildError(failed, phase) from e

        self._log(state, "build complete")
        return state
