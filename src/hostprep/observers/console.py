# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/observers/console.py
from __future__ import annotations

import typer

from .events import BaseEvent

_BASE_FIELDS = ("ts", "run_id", "env", "context")


class ConsoleObserver:
    def notify(self, event: BaseEvent) -> None:
        d = event.dict()
        k = event.__class__.__name__
        data = ", ".join(f"{x}={y}" for x, y in d.items() if x not in _BASE_FIELDS)
        typer.echo(f"[{d['ts']}] {k} run={d['run_id']} env={d['env']} host={d['context']} data={{{data}}}")
