# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/converge/steps/packages.py

from __future__ import annotations

import logging
from typing import List

from hostprep.config.models import HostConfig
from hostprep.converge.models import Outcome, StepResult
from hostprep.errors import CommandError, ExternalToolFailure
from hostprep.host.interface import Host

log = logging.getLogger("hostprep")

APT_ENV = ["env", "DEBIAN_FRONTEND=noninteractive"]


def is_installed(host: Host, package: str) -> bool:
    r = host.run(["dpkg-query", "-W", "-f=${Status}", package], check=False)
    return r.ok and "install ok installed" in r.stdout


class PackagesStep:
    """
    apt-get is always invoked; it is a no-op for packages already present.
    The outcome only reports whether anything was missing beforehand.
    """

    name = "packages"

    def ensure(self, host: Host, cfg: HostConfig) -> StepResult:
        packages: List[str] = list(cfg.packages)
        if not packages:
            return StepResult(self.name, Outcome.SATISFIED, "no packages requested")

        missing = [p for p in packages if not is_installed(host, p)]

        log.info("Installing required software packages.")
        try:
            host.run([*APT_ENV, "apt-get", "update", "-y"])
            host.run([*APT_ENV, "apt-get", "install", "-y", *packages])
        except CommandError as e:
            raise ExternalToolFailure("Failed to install required software.") from e

        if not missing:
            return StepResult(self.name, Outcome.SATISFIED, f"already installed: {', '.join(packages)}")
        return StepResult(self.name, Outcome.APPLIED, f"installed: {', '.join(missing)}", changes=missing)
