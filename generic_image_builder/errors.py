"""Exceptions raised while building an image.

Exception Hierarchy:
    ImageBuilderError (base)
        ├── ValidationError
        ├── ToolMissingError
        ├── StateError
        ├── LoopDeviceError
        ├── CommandExecutionError
        └── BuildError
"""

from __future__ import annotations

from typing import Any, Sequence


class ImageBuilderError(Exception):
    """Base exception for all image builder failures."""


class ValidationError(ImageBuilderError):
    """Config precondition not met before the build starts."""


class ToolMissingError(ImageBuilderError):
    """One or more required host programs are not on PATH."""

    def __init__(self, tools: Sequence[str]):
        self.tools = list(tools)
        super().__init__(f"Required tools not installed: {', '.join(self.tools)}")


class StateError(ImageBuilderError):
    """A phase was invoked from the wrong predecessor state."""

    def __init__(self, expected: str, actual: Any):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Invalid state {actual!r}: expected {expected}")


class LoopDeviceError(ImageBuilderError):
    """losetup returned no usable device path."""

    def __init__(self, image: str, output: str = ""):
        self.image = image
        self.output = output
        msg = f"No loop device returned for {image}"
        if output:
            msg += f": {output}"
        super().__init__(msg)


class CommandExecutionError(ImageBuilderError):
    """An external program failed to spawn or exited non-zero."""

    def __init__(self, argv: Sequence[str], returncode: int, stdout: str = "", stderr: str = ""):
        self.argv = list(argv)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        detail = (stderr or stdout or "").strip()
        msg = f"Command failed ({returncode}): {' '.join(self.argv)}"
        if detail:
            msg += f"\n{detail}"
        super().__init__(msg)


class BuildError(ImageBuilderError):
    """A phase failed; the build is in its terminal Error state."""

    def __init__(self, state: Any, phase: str):
        self.state = state
        self.phase = phase
        super().__init__(f"{phase} failed: {getattr(state, 'reason', '')}")
