# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/observers/logger.py

from __future__ import annotations

import logging

from .events import BaseEvent

# the formatter stamps the time; run_id is logged when the run starts
_SKIP = ("ts", "run_id")


class LoggerObserver:
    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def notify(self, event: BaseEvent) -> None:
        fields = ", ".join(f"{k}={v}" for k, v in event.dict().items() if k not in _SKIP)
        self.logger.debug("[EVENT] %s: %s", event.__class__.__name__, fields)
