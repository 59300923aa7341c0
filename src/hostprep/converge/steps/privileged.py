# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/converge/steps/privileged.py

from __future__ import annotations

import logging
from typing import List

from hostprep.config.models import HostConfig, UserSpec
from hostprep.converge.models import Outcome, StepResult
from hostprep.host.interface import Host

from .users import user_exists

log = logging.getLogger("hostprep")


def in_group(host: Host, username: str, group: str) -> bool:
    r = host.run(["id", "-nG", username], check=False)
    return r.ok and group in r.stdout.split()


def append_line(text: str, line: str) -> str:
    if text and not text.endswith("\n"):
        text += "\n"
    return text + line + "\n"


class PrivilegedGrantStep:
    """
    Admin group membership plus one extra authorized key.

    Unless dedupe_extra_key is set the key line is appended on every run, so
    the step is only idempotent when the users step rebuilt authorized_keys
    earlier in the same run.
    """

    name = "privileged"

    def ensure(self, host: Host, cfg: HostConfig) -> StepResult:
        grant = cfg.privileged
        if not user_exists(host, grant.username):
            log.info("User %s does not exist, skipping privileged grant.", grant.username)
            return StepResult(self.name, Outcome.SATISFIED, f"{grant.username} absent, skipped")

        user = cfg.by_name().get(grant.username) or UserSpec(name=grant.username)
        changes: List[str] = []

        log.info("Granting %s privileges to %s.", grant.group, grant.username)
        was_member = in_group(host, grant.username, grant.group)
        host.run(["usermod", "-aG", grant.group, grant.username])
        if not was_member:
            changes.append(f"group:{grant.group}")

        path = user.authorized_keys
        current = host.read_text(path) if host.exists(path) else ""
        if grant.dedupe_extra_key and grant.extra_key in current.splitlines():
            log.info("Extra key already present for %s.", grant.username)
        else:
            host.write_text(path, append_line(current, grant.extra_key))
            changes.append(f"key:{path}")

        if changes:
            return StepResult(self.name, Outcome.APPLIED, ", ".join(changes), changes=changes)
        return StepResult(self.name, Outcome.SATISFIED, f"{grant.username} already granted")
