from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

from ..errors import CommandExecutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def lines(self) -> list[str]:
        return [line for line in self.stdout.splitlines() if line.strip()]


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - Captures stdout/stderr; both are logged at DEBUG.
    - A spawn failure, or a non-zero exit when check is set, raises
      CommandExecutionError.
    """

    argv_list = list(argv)
    logger.info("CMD %s", _fmt_argv(argv_list))

    try:
        p = subprocess.run(
            argv_list,
            input=input_text,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=cwd,
            env=dict(os.environ, **(env or {})),
        )
    except OSError as e:
        raise CommandExecutionError(argv_list, 127, stderr=str(e)) from e

    if p.stdout:
        logger.debug("STDOUT %s", p.stdout.strip())
    if p.stderr:
        logger.debug("STDERR %s", p.stderr.strip())

    if check and p.returncode != 0:
        raise CommandExecutionError(argv_list, p.returncode, stdout=p.stdout, stderr=p.stderr)

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)


class CommandExecutor:
    """Single seam for every device and filesystem mutation.

    Phases only talk to the host through this object, so tests can swap in
    a recording subclass without touching real block devices.
    """

    def __init__(self, *, env: Mapping[str, str] | None = None):
        self.env = dict(env or {})

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        cwd: str | None = None,
        input_text: str | None = None,
    ) -> CmdResult:
        return run_cmd(argv, check=check, env=self.env, cwd=cwd, input_text=input_text)

    def output(self, argv: Sequence[str], *, cwd: str | None = None, input_text: str | None = None) -> str:
        return self.run(argv, cwd=cwd, input_text=input_text).stdout

    def output_lines(
        self, argv: Sequence[str], *, cwd: str | None = None, input_text: str | None = None
    ) -> list[str]:
        return self.run(argv, cwd=cwd, input_text=input_text).lines
