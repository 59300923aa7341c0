# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/converge/executor.py

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from hostprep.config.models import HostConfig
from hostprep.host.interface import Host

# Observer bits
from hostprep.observers.dispatcher import EventBus
from hostprep.observers.events import (
    RunStarted,
    RunSummary,
    StepFailed,
    StepStarted,
    StepSucceeded,
    new_ctx,
)

from .models import Outcome, Step, StepResult
from .steps import (
    HostsEntryStep,
    NetworkStep,
    PackagesStep,
    PrivilegeCheck,
    PrivilegedGrantStep,
    ServicesStep,
    UsersStep,
)

log = logging.getLogger("hostprep")

# canonical order; the privilege check always runs first
STEP_ORDER: List[str] = [
    "precheck",
    "network",
    "hosts",
    "packages",
    "services",
    "users",
    "privileged",
]

SELECTABLE_STEPS: List[str] = STEP_ORDER[1:]


def _step_factories() -> Dict[str, Step]:
    return {
        "precheck": PrivilegeCheck(),
        "network": NetworkStep(),
        "hosts": HostsEntryStep(),
        "packages": PackagesStep(),
        "services": ServicesStep(),
        "users": UsersStep(),
        "privileged": PrivilegedGrantStep(),
    }


def resolve_selection(only: Optional[str]) -> List[str]:
    """
    Resolve the --only flag into step names in canonical order.

    - No flag or "all" -> every step
    - Otherwise the named steps, with the privilege check prepended
    """
    if not only:
        return list(STEP_ORDER)

    items = {i.strip() for i in only.split(",") if i.strip()}
    if "all" in items:
        return list(STEP_ORDER)

    unknown = items - set(SELECTABLE_STEPS)
    if unknown:
        raise ValueError(
            f"Unknown steps: {', '.join(sorted(unknown))}. "
            f"Valid steps: {', '.join(SELECTABLE_STEPS)}"
        )
    return ["precheck"] + [s for s in SELECTABLE_STEPS if s in items]


def build_steps(names: Optional[Sequence[str]] = None) -> List[Step]:
    factories = _step_factories()
    return [factories[n] for n in (names or STEP_ORDER)]


@dataclass
class ConvergeReport:
    results: List[StepResult] = field(default_factory=list)

    def add(self, result: StepResult) -> None:
        self.results.append(result)

    def count(self, outcome: Outcome) -> int:
        return sum(1 for r in self.results if r.outcome == outcome)

    @property
    def ok(self) -> bool:
        return self.count(Outcome.FAILED) == 0

    def summary(self) -> str:
        return (
            f"SATISFIED={self.count(Outcome.SATISFIED)} "
            f"APPLIED={self.count(Outcome.APPLIED)} "
            f"FAILED={self.count(Outcome.FAILED)}"
        )


def _emit_summary(bus: EventBus, report: ConvergeReport, run_ctx: dict) -> None:
    bus.emit(
        RunSummary(
            satisfied=report.count(Outcome.SATISFIED),
            applied=report.count(Outcome.APPLIED),
            failed=report.count(Outcome.FAILED),
            status="OK" if report.ok else "FAILED",
            **run_ctx,
        )
    )


def converge(
    host: Host,
    cfg: HostConfig,
    steps: Optional[Sequence[Step]] = None,
    observers: Optional[List] = None,
    run_ctx: Optional[dict] = None,
    report: Optional[ConvergeReport] = None,
) -> ConvergeReport:
    """
    Run steps strictly in order. The first failure is recorded, reported and
    re-raised; steps that already ran are left as they are.
    """
    steps = list(steps) if steps is not None else build_steps()
    report = report if report is not None else ConvergeReport()

    bus = EventBus(observers or [])
    run_ctx = run_ctx or new_ctx(env=host.kind, context=host.address)

    bus.emit(RunStarted(steps=[s.name for s in steps], **run_ctx))

    for step in steps:
        bus.emit(StepStarted(name=step.name, **run_ctx))
        t0 = time.time()
        try:
            result = step.ensure(host, cfg)
        except Exception as e:
            report.add(StepResult(step.name, Outcome.FAILED, str(e)))
            bus.emit(StepFailed(name=step.name, error=str(e), **run_ctx))
            _emit_summary(bus, report, run_ctx)
            raise

        duration_ms = int((time.time() - t0) * 1000)
        report.add(result)
        log.debug("[%s] %s: %s", step.name, result.outcome.value, result.message)
        bus.emit(
            StepSucceeded(
                name=step.name,
                outcome=result.outcome.value,
                message=result.message,
                duration_ms=duration_ms,
                **run_ctx,
            )
        )

    _emit_summary(bus, report, run_ctx)
    return report
