"""
Pytest configuration and shared fixtures for generic-image-builder tests.

No test here touches a real block device: phases run against
RecordingExecutor, which records every command and returns canned output.
"""

from pathlib import Path
from types import SimpleNamespace
from typing import Dict, Iterable, List, Optional

import pytest
import yaml

from generic_image_builder.build_config import load_build_config
from generic_image_builder.errors import CommandExecutionError
from generic_image_builder.lib.command import CmdResult, CommandExecutor


class RecordingExecutor(CommandExecutor):
    """CommandExecutor that records calls instead of spawning processes."""

    def __init__(
        self,
        responses: Optional[Dict[str, str]] = None,
        fail_on: Iterable[str] = (),
    ):
        super().__init__()
        self.calls: List[SimpleNamespace] = []
        self.responses = dict(responses or {})
        self.fail_on = set(fail_on)

    def run(self, argv, *, check=True, cwd=None, input_text=None):
        argv = list(argv)
        self.calls.append(SimpleNamespace(argv=argv, cwd=cwd, input_text=input_text))
        if argv[0] in self.fail_on:
            raise CommandExecutionError(argv, 1, stderr=f"{argv[0]}: failed")
        return CmdResult(argv=argv, returncode=0, stdout=self.responses.get(argv[0], ""), stderr="")

    @property
    def programs(self) -> List[str]:
        return [c.argv[0] for c in self.calls]

    def calls_to(self, program: str) -> List[SimpleNamespace]:
        return [c for c in self.calls if c.argv[0] == program]


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor(responses={"losetup": "/dev/loop7\n"})


@pytest.fixture
def raw_config(tmp_path: Path) -> dict:
    content = tmp_path / "content"
    content.mkdir()
    return {
        "config": {"workdir": str(tmp_path / "work")},
        "image": {"name": "disk.img", "distro": "jammy", "size": "2GiB"},
        "content": {"base": str(content), "apt_packages": ["vim"]},
    }


@pytest.fixture
def write_config(tmp_path: Path):
    def _write(raw: dict, name: str = "image.yaml") -> Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(raw), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def config_path(raw_config, write_config) -> Path:
    return write_config(raw_config)


@pytest.fixture
def build_config(config_path):
    return load_build_config(str(config_path))


@pytest.fixture
def all_tools_present():
    return lambda name: f"/usr/bin/{name}"


@pytest.fixture
def make_executor():
    return RecordingExecutor
