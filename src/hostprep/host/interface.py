# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/host/interface.py

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from hostprep.execution.runner import CommandResult


class Host(Protocol):
    """
    Primitive operations the convergence steps need on the target machine.
    Paths are absolute paths as seen by the target. Every method raises
    CommandError (or OSError for local file access) on failure.
    """

    kind: str                  # "local" | "ssh"
    address: Optional[str]

    def run(self, argv: Sequence[str], *, check: bool = True) -> CommandResult: ...

    def effective_uid(self) -> int: ...

    def exists(self, path: str) -> bool: ...

    def glob(self, directory: str, pattern: str) -> List[str]: ...

    def read_text(self, path: str) -> str: ...

    def write_text(self, path: str, content: str) -> None: ...

    def chmod(self, path: str, mode: int) -> None: ...

    def chown(self, path: str, owner: str, group: str) -> None: ...

    def makedirs(self, path: str) -> None: ...

    def close(self) -> None: ...
