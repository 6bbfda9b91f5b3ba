from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ValidationError
from .lib.pkg import DEFAULT_ARCH, DEFAULT_MIRROR


class Distribution(enum.Enum):
    NOBLE = "noble"
    JAMMY = "jammy"

    def __str__(self) -> str:
        return self.value


_SIZE_RE = re.compile(r"^\s*(\d+)\s*([KMGT]?)(i?)(B?)\s*$", re.IGNORECASE)
_SIZE_POWERS = {"": 0, "K": 1, "M": 2, "G": 3, "T": 4}


def parse_size(value: Any) -> int:
    """Parse a byte quantity such as 8GiB, 512MiB, 2GB or 4096.

    Ki/Mi/Gi/Ti are binary units; K/M/G/T (with or without B) are decimal.
    """

    if isinstance(value, bool):
        raise ValueError(f"Invalid size: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"Size must not be negative: {value}")
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid size: {value!r}")

    m = _SIZE_RE.match(value)
    if not m:
        raise ValueError(f"Invalid size: {value!r}")

    n = int(m.group(1))
    unit = m.group(2).upper()
    binary = bool(m.group(3))
    if binary and not unit:
        raise ValueError(f"Invalid size: {value!r}")

    base = 1024 if binary else 1000
    return n * base ** _SIZE_POWERS[unit]


@dataclass(frozen=True)
class BuilderConfig:
    workdir: Path


@dataclass(frozen=True)
class ImageConfig:
    name: str
    distro: Distribution
    size: int
    arch: str = DEFAULT_ARCH
    mirror: str = DEFAULT_MIRROR


@dataclass(frozen=True)
class ImageContent:
    base: Path
    apt_packages: List[str] = field(default_factory=list)
    local_package_dir: Optional[Path] = None
    local_packages: List[str] = field(default_factory=list)
    scripts: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class BuildConfig:
    builder: BuilderConfig
    image: ImageConfig
    content: ImageContent

    @property
    def workdir(self) -> Path:
        return self.builder.workdir

    @property
    def image_path(self) -> Path:
        return self.workdir / self.image.name

    @property
    def chroot_dir(self) -> Path:
        return self.workdir / "chroot"

    @property
    def efi_dir(self) -> Path:
        return self.chroot_dir / "boot/efi"


def _abs(p: Any) -> Path:
    return Path(str(p)).expanduser().absolute()


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    sec = raw.get(key)
    if not isinstance(sec, dict):
        raise ValidationError(f"config section '{key}' must be a mapping")
    return sec


def _required(sec: Dict[str, Any], section: str, key: str) -> Any:
    value = sec.get(key)
    if value is None or value == "":
        raise ValidationError(f"{section}.{key} is required")
    return value


def _str_list(sec: Dict[str, Any], section: str, key: str) -> List[str]:
    value = sec.get(key) or []
    if not isinstance(value, list):
        raise ValidationError(f"{section}.{key} must be a list")
    return [str(v) for v in value]


def parse_build_config(raw: Dict[str, Any]) -> BuildConfig:
    builder = _section(raw, "config")
    image = _section(raw, "image")
    content = _section(raw, "content")

    distro = str(_required(image, "image", "distro"))
    try:
        dist = Distribution(distro.lower())
    except ValueError as e:
        allowed = ", ".join(d.value for d in Distribution)
        raise ValidationError(f"image.distro must be one of {allowed}, got: {distro}") from e

    try:
        size = parse_size(_required(image, "image", "size"))
    except ValueError as e:
        raise ValidationError(f"image.size: {e}") from e

    local_package_dir = content.get("local_package_dir")

    return BuildConfig(
        builder=BuilderConfig(workdir=_abs(_required(builder, "config", "workdir"))),
        image=ImageConfig(
            name=str(_required(image, "image", "name")),
            distro=dist,
            size=size,
            arch=str(image.get("arch") or DEFAULT_ARCH),
            mirror=str(image.get("mirror") or DEFAULT_MIRROR),
        ),
        content=ImageContent(
            base=_abs(_required(content, "content", "base")),
            apt_packages=_str_list(content, "content", "apt_packages"),
            local_package_dir=_abs(local_package_dir) if local_package_dir else None,
            local_packages=_str_list(content, "content", "local_packages"),
            scripts=_str_list(content, "content", "scripts"),
        ),
    )


def load_build_config(path: str) -> BuildConfig:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValidationError("build config must be YAML")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise ValidationError(f"Unable to parse {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ValidationError("build config must contain a mapping/object")

    return parse_build_config(raw)
