# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/converge/steps/services.py

from __future__ import annotations

import logging
from typing import List

from hostprep.config.models import HostConfig
from hostprep.converge.models import Outcome, StepResult
from hostprep.errors import CommandError, ExternalToolFailure
from hostprep.host.interface import Host

log = logging.getLogger("hostprep")


def is_enabled_and_active(host: Host, service: str) -> bool:
    enabled = host.run(["systemctl", "is-enabled", "--quiet", service], check=False)
    active = host.run(["systemctl", "is-active", "--quiet", service], check=False)
    return enabled.ok and active.ok


class ServicesStep:
    name = "services"

    def ensure(self, host: Host, cfg: HostConfig) -> StepResult:
        services: List[str] = list(cfg.services)
        if not services:
            return StepResult(self.name, Outcome.SATISFIED, "no services requested")

        pending = [s for s in services if not is_enabled_and_active(host, s)]

        log.info("Enabling and starting services.")
        try:
            host.run(["systemctl", "enable", "--now", *services])
        except CommandError as e:
            raise ExternalToolFailure("Failed to start required services.") from e

        if not pending:
            return StepResult(self.name, Outcome.SATISFIED, f"already running: {', '.join(services)}")
        return StepResult(self.name, Outcome.APPLIED, f"enabled and started: {', '.join(pending)}", changes=pending)
