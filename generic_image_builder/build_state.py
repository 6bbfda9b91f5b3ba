"""Build state: exactly one of Phase0, Phase1, Phase2 or Error.

Phase1 and Phase2 carry the attached loop device. The state owns no OS
resources; the loop device and mounts it names are host-global and outlive it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .lib.loopdev import LoopDevice


@dataclass(frozen=True)
class Phase0:
    def __str__(self) -> str:
        return "PHASE0:"


@dataclass(frozen=True)
class Phase1:
    loop: LoopDevice

    def __str__(self) -> str:
        return f"PHASE1:{self.loop}:"


@dataclass(frozen=True)
class Phase2:
    loop: LoopDevice

    def __str__(self) -> str:
        return f"PHASE2:{self.loop}:"


@dataclass(frozen=True)
class Error:
    reason: str = ""
    phase: str = ""

    def __str__(self) -> str:
        return "Error"


BuildState = Union[Phase0, Phase1, Phase2, Error]
