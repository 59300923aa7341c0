# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/execution/runner.py
from __future__ import annotations

import logging
import shlex
import subprocess
import time
from dataclasses import dataclass
from typing import Optional, Sequence

from hostprep.errors import CommandError

log = logging.getLogger("hostprep")


@dataclass(frozen=True)
class CommandResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def format_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(a)) for a in argv)


@dataclass
class CommandRunner:
    """
    Runs local commands, logging the command line, its output and exit code.
    Blocks until the command finishes; there is no timeout.
    """

    label: Optional[str] = None

    def run(self, argv: Sequence[str], *, check: bool = True) -> CommandResult:
        label = self.label or "cmd"
        argv_list = [str(a) for a in argv]
        log.debug("[%s] $ %s", label, format_argv(argv_list))

        start = time.time()
        p = subprocess.run(
            argv_list,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
        duration = time.time() - start

        if p.stdout:
            log.debug("[%s][stdout]\n%s", label, p.stdout.rstrip())
        if p.stderr:
            log.debug("[%s][stderr]\n%s", label, p.stderr.rstrip())
        log.debug("[%s][exit %s] (%.2fs)", label, p.returncode, duration)

        if check and p.returncode != 0:
            raise CommandError(argv_list, p.returncode, p.stderr or "")

        return CommandResult(
            argv=argv_list,
            returncode=p.returncode,
            stdout=p.stdout or "",
            stderr=p.stderr or "",
        )
