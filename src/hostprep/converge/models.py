# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/converge/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Protocol

from hostprep.config.models import HostConfig
from hostprep.host.interface import Host


class Outcome(str, Enum):
    SATISFIED = "SATISFIED"     # already matched the desired state
    APPLIED = "APPLIED"         # state was changed
    FAILED = "FAILED"


@dataclass
class StepResult:
    name: str
    outcome: Outcome
    message: str = ""
    changes: List[str] = field(default_factory=list)


class Step(Protocol):
    """
    One configuration domain. ensure() checks the current state, changes it
    when needed, and raises ProvisionError when it cannot.
    """

    name: str

    def ensure(self, host: Host, cfg: HostConfig) -> StepResult:
        ...
