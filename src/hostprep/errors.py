# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/errors.py
from __future__ import annotations

from typing import Sequence


class ProvisionError(RuntimeError):
    """Base class for every failure that aborts a provisioning run."""


class PrecheckFailure(ProvisionError):
    """Raised when the host is not in a state where provisioning can start."""


class ExternalToolFailure(ProvisionError):
    """Raised when netplan, apt, systemctl or useradd report an error."""


class ConfigError(ProvisionError):
    """Raised when the host configuration cannot be loaded or validated."""


class CommandError(ProvisionError):
    """Raised by the command runners on a non-zero exit status."""

    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = ""):
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr and stderr.strip() else ""
        super().__init__(
            f"Command failed ({returncode}): {' '.join(self.argv)}{detail}"
        )
