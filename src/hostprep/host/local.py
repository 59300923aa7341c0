# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/host/local.py

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

from hostprep.execution.runner import CommandResult, CommandRunner

log = logging.getLogger("hostprep")

# undecodable bytes in system files survive a read/modify/write cycle
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


class LocalHost:
    """
    The machine hostprep is running on. Paths handed to the file primitives
    and paths embedded in commands both refer to the running system.
    """

    kind = "local"

    def __init__(self, runner: Optional[CommandRunner] = None):
        self.runner = runner or CommandRunner(label="local")
        self.address: Optional[str] = None

    def run(self, argv: Sequence[str], *, check: bool = True) -> CommandResult:
        return self.runner.run(argv, check=check)

    def effective_uid(self) -> int:
        return os.geteuid()

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def glob(self, directory: str, pattern: str) -> List[str]:
        base = Path(directory)
        if not base.is_dir():
            return []
        found = sorted(p for p in base.glob(pattern) if p.is_file())
        return [f"{directory.rstrip('/')}/{p.name}" for p in found]

    def read_text(self, path: str) -> str:
        return Path(path).read_text(encoding=_ENCODING, errors=_ERRORS)

    def write_text(self, path: str, content: str) -> None:
        # truncating in place keeps the existing owner and mode
        Path(path).write_text(content, encoding=_ENCODING, errors=_ERRORS)

    def chmod(self, path: str, mode: int) -> None:
        log.debug("chmod %s %s", oct(mode)[2:], path)
        os.chmod(path, mode)

    def chown(self, path: str, owner: str, group: str) -> None:
        self.run(["chown", f"{owner}:{group}", path])

    def makedirs(self, path: str) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def close(self) -> None:
        pass
