# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/converge/steps/precheck.py

from __future__ import annotations

import logging

from hostprep.config.models import HostConfig
from hostprep.converge.models import Outcome, StepResult
from hostprep.errors import PrecheckFailure
from hostprep.host.interface import Host

log = logging.getLogger("hostprep")


class PrivilegeCheck:
    name = "precheck"

    def ensure(self, host: Host, cfg: HostConfig) -> StepResult:
        uid = host.effective_uid()
        if uid != 0:
            raise PrecheckFailure("hostprep must be run as root. Use sudo.")
        return StepResult(self.name, Outcome.SATISFIED, "running as root")
