# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/converge/steps/users.py

from __future__ import annotations

import logging
from typing import List

from hostprep.config.models import HostConfig, KeySpec, UserSpec
from hostprep.converge.models import Outcome, StepResult
from hostprep.errors import CommandError, ExternalToolFailure
from hostprep.host.interface import Host

log = logging.getLogger("hostprep")


def user_exists(host: Host, name: str) -> bool:
    return host.run(["id", name], check=False).ok


def ensure_account(host: Host, user: UserSpec) -> bool:
    """Create the account with a home directory. Returns True if created."""
    if user_exists(host, user.name):
        log.info("User %s already exists.", user.name)
        return False

    log.info("Creating user %s.", user.name)
    argv = ["useradd", "-m", "-s", user.shell]
    if user.home:
        argv += ["-d", user.home]
    try:
        host.run([*argv, user.name])
    except CommandError as e:
        raise ExternalToolFailure(f"Failed to create user {user.name}.") from e
    return True


def ensure_ssh_dir(host: Host, user: UserSpec) -> None:
    # unconditional: fixes owner and mode on every run
    host.makedirs(user.ssh_dir)
    host.chown(user.ssh_dir, user.name, user.name)
    host.chmod(user.ssh_dir, 0o700)


def keygen_argv(user: UserSpec, key: KeySpec) -> List[str]:
    argv = ["sudo", "-u", user.name, "ssh-keygen", "-t", key.algorithm]
    if key.bits:
        argv += ["-b", str(key.bits)]
    return argv + ["-N", "", "-f", f"{user.ssh_dir}/{key.filename}"]


def ensure_key(host: Host, user: UserSpec, key: KeySpec) -> bool:
    """Generate the key pair unless its public half exists. Returns True if generated."""
    if host.exists(f"{user.ssh_dir}/{key.public_filename}"):
        return False
    label = "RSA" if key.algorithm == "rsa" else "Ed25519"
    log.info("Generating %s SSH key for %s.", label, user.name)
    host.run(keygen_argv(user, key))
    return True


def rebuild_authorized_keys(host: Host, user: UserSpec) -> str:
    """
    Replace authorized_keys with the concatenation of the user's public keys.
    Keys added by hand are dropped.
    """
    content = "".join(
        host.read_text(f"{user.ssh_dir}/{key.public_filename}") for key in user.keys
    )
    host.write_text(user.authorized_keys, content)
    host.chown(user.authorized_keys, user.name, user.name)
    host.chmod(user.authorized_keys, 0o600)
    return content


class UsersStep:
    """
    Accounts, key pairs and authorized_keys for every configured user, in
    order. authorized_keys is rewritten on every run and does not count as a
    change in the outcome.
    """

    name = "users"

    def ensure(self, host: Host, cfg: HostConfig) -> StepResult:
        changes: List[str] = []

        for user in cfg.users:
            if ensure_account(host, user):
                changes.append(f"user:{user.name}")

            ensure_ssh_dir(host, user)

            for key in user.keys:
                if ensure_key(host, user, key):
                    changes.append(f"key:{user.name}/{key.filename}")

            rebuild_authorized_keys(host, user)

        if changes:
            return StepResult(self.name, Outcome.APPLIED, f"{len(changes)} change(s)", changes=changes)
        return StepResult(self.name, Outcome.SATISFIED, f"{len(cfg.users)} user(s) up to date")
