"""Generic image builder (Python-first, phase-driven).

Builds a bootable GPT disk image from a declarative YAML config:
- Sparse backing file, ESP (FAT32) + root (ext4)
- Loop device attach with partition scan
- Minimal Debian-family base system via debootstrap
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
