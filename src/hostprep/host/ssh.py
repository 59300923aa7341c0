# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/host/ssh.py

from __future__ import annotations

import itertools
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

import paramiko

from hostprep.errors import CommandError
from hostprep.execution.runner import CommandResult, format_argv

log = logging.getLogger("hostprep")

# unique temp names for uploads
_counter = itertools.count(1)

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def _q(s: str) -> str:
    """
    Quote for bash -lc.
    """
    return "'" + s.replace("'", "'\"'\"'") + "'"


def open_ssh(
    address: str,
    *,
    username: str = "root",
    port: int = 22,
    pkey_path: Optional[Path] = None,
    password: Optional[str] = None,
    connect_timeout: float = 30.0,
) -> paramiko.SSHClient:
    client = paramiko.SSHClient()
    client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    pkey = None
    if pkey_path:
        for key_cls in (
            paramiko.Ed25519Key,
            paramiko.RSAKey,
            paramiko.ECDSAKey,
        ):
            try:
                pkey = key_cls.from_private_key_file(str(pkey_path))
                break
            except paramiko.SSHException:
                continue
        if pkey is None:
            raise RuntimeError(f"Unsupported private key format for {pkey_path}")

    client.connect(
        hostname=address,
        port=port,
        username=username,
        password=password if not pkey else None,
        pkey=pkey,
        look_for_keys=pkey is None and password is None,
        allow_agent=pkey is None and password is None,
        timeout=connect_timeout,
    )
    return client


class SshHost:
    """
    A remote machine reached over SSH. When the login user is not root every
    command is wrapped in ``sudo -n`` so passwordless sudo is required.
    """

    kind = "ssh"

    def __init__(self, client: paramiko.SSHClient, *, address: str, username: str = "root"):
        self.client = client
        self.address: Optional[str] = address
        self.username = username
        self.sudo = username != "root"

    def _exec_raw(self, cmd: str) -> tuple[bytes, bytes, int]:
        final = f"{'sudo -n ' if self.sudo else ''}bash -lc {_q(cmd)}"
        log.debug("[%s] $ %s", self.address, cmd)

        stdin, stdout, stderr = self.client.exec_command(final)
        out = stdout.read()
        err = stderr.read()
        rc = stdout.channel.recv_exit_status()
        return out, err, rc

    def _exec(self, cmd: str, *, check: bool, argv: Sequence[str]) -> CommandResult:
        raw_out, raw_err, rc = self._exec_raw(cmd)
        out = raw_out.decode("utf-8", errors="replace")
        err = raw_err.decode("utf-8", errors="replace")

        if out:
            log.debug("[%s][stdout]\n%s", self.address, out.rstrip())
        if err:
            log.debug("[%s][stderr]\n%s", self.address, err.rstrip())
        log.debug("[%s][exit %s]", self.address, rc)

        if check and rc != 0:
            raise CommandError(list(argv), rc, err)
        return CommandResult(argv=list(argv), returncode=rc, stdout=out, stderr=err)

    def run(self, argv: Sequence[str], *, check: bool = True) -> CommandResult:
        return self._exec(format_argv(argv), check=check, argv=argv)

    def effective_uid(self) -> int:
        # uid the commands will actually run as, sudo included
        return int(self.run(["id", "-u"]).stdout.strip())

    def exists(self, path: str) -> bool:
        return self.run(["test", "-e", path], check=False).ok

    def glob(self, directory: str, pattern: str) -> List[str]:
        r = self.run(
            ["find", directory, "-maxdepth", "1", "-type", "f", "-name", pattern],
            check=False,
        )
        if not r.ok:
            return []
        return sorted(ln.strip() for ln in r.stdout.splitlines() if ln.strip())

    def read_text(self, path: str) -> str:
        # raw bytes, so anything undecodable is written back unchanged
        argv = ["cat", path]
        out, err, rc = self._exec_raw(format_argv(argv))
        log.debug("[%s][exit %s]", self.address, rc)
        if rc != 0:
            raise CommandError(argv, rc, err.decode("utf-8", errors="replace"))
        return out.decode(_ENCODING, errors=_ERRORS)

    def write_text(self, path: str, content: str) -> None:
        """
        Upload to a temp path, then copy over the target so an existing file
        keeps its owner and mode.
        """
        tmp_remote = f"/tmp/.hostprep_tmp_{os.getpid()}_{next(_counter)}"
        sftp = self.client.open_sftp()
        try:
            with sftp.file(tmp_remote, "w") as f:
                f.write(content.encode(_ENCODING, errors=_ERRORS))
        finally:
            sftp.close()
        self._exec(
            f"cp {_q(tmp_remote)} {_q(path)}; rc=$?; rm -f {_q(tmp_remote)}; exit $rc",
            check=True,
            argv=["cp", tmp_remote, path],
        )

    def chmod(self, path: str, mode: int) -> None:
        self.run(["chmod", oct(mode)[2:], path])

    def chown(self, path: str, owner: str, group: str) -> None:
        self.run(["chown", f"{owner}:{group}", path])

    def makedirs(self, path: str) -> None:
        self.run(["mkdir", "-p", path])

    def close(self) -> None:
        self.client.close()
