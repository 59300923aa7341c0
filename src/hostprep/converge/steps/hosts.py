# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/converge/steps/hosts.py

from __future__ import annotations

import logging

from hostprep.config.models import HostConfig
from hostprep.converge.models import Outcome, StepResult
from hostprep.host.interface import Host

log = logging.getLogger("hostprep")


def rewrite_hosts(text: str, ip: str, hostname: str) -> str:
    """
    Drop every line mentioning hostname (substring match, comments included)
    and append "<ip> <hostname>".
    """
    kept = [ln for ln in text.splitlines() if hostname not in ln]
    out = "\n".join(kept)
    if out:
        out += "\n"
    return out + f"{ip} {hostname}\n"


class HostsEntryStep:
    name = "hosts"

    def ensure(self, host: Host, cfg: HostConfig) -> StepResult:
        entry = cfg.hosts_entry
        text = host.read_text(entry.path) if host.exists(entry.path) else ""

        if entry.line in text:
            log.info("%s is already configured.", entry.path)
            return StepResult(self.name, Outcome.SATISFIED, f"{entry.line!r} present")

        log.info("Updating %s file.", entry.path)
        host.write_text(entry.path, rewrite_hosts(text, entry.ip, entry.hostname))
        return StepResult(self.name, Outcome.APPLIED, f"mapped {entry.hostname} to {entry.ip}", changes=[entry.path])
