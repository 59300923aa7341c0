import types
from typing import Dict, List, Optional, Set

import pytest

from hostprep.errors import CommandError
from hostprep.execution.runner import CommandResult


class FakeHost:
    """
    In-memory stand-in for a target machine. Files live in a dict, accounts in
    a set, and the handful of commands the steps use are simulated.
    """

    kind = "fake"

    def __init__(self, uid: int = 0):
        self.address = "fake-host"
        self.uid = uid
        self.files: Dict[str, str] = {}
        self.modes: Dict[str, int] = {}
        self.owners: Dict[str, str] = {}
        self.dirs: Set[str] = set()
        self.users: Set[str] = set()
        self.groups: Dict[str, Set[str]] = {}
        self.packages: Set[str] = set()
        self.services: Set[str] = set()
        self.commands: List[List[str]] = []
        self.writes: List[str] = []
        self.mode_history: List[tuple] = []
        self.fail_on: Dict[str, int] = {}    # argv[0] or "apt-get install" -> rc
        self.keygen_count = 0
        self.closed = False

    # -- simulated commands --

    def _rc_for(self, argv: List[str]) -> Optional[int]:
        for key, rc in self.fail_on.items():
            if " ".join(argv).find(key) != -1:
                return rc
        return None

    def run(self, argv, *, check: bool = True) -> CommandResult:
        argv = [str(a) for a in argv]
        self.commands.append(argv)
        rc, out = 0, ""

        forced = self._rc_for(argv)
        if forced is not None:
            rc = forced
        elif argv[0] == "id":
            name = argv[-1]
            if name not in self.users:
                rc = 1
            elif "-nG" in argv:
                out = " ".join([name] + sorted(g for g, m in self.groups.items() if name in m))
        elif argv[0] == "useradd":
            self.users.add(argv[-1])
            self.dirs.add(f"/home/{argv[-1]}")
        elif argv[0] == "usermod":
            self.groups.setdefault(argv[2], set()).add(argv[3])
        elif argv[0] == "chown":
            self.owners[argv[2]] = argv[1]
        elif argv[:2] == ["sudo", "-u"]:
            path = argv[argv.index("-f") + 1]
            algo = argv[argv.index("-t") + 1]
            self.keygen_count += 1
            self.files[path] = f"PRIVATE {algo}\n"
            self.files[path + ".pub"] = f"ssh-{algo} KEY{self.keygen_count} {argv[2]}@fake\n"
        elif argv[0] == "dpkg-query":
            if argv[-1] in self.packages:
                out = "install ok installed"
            else:
                rc = 1
        elif "apt-get" in argv and "install" in argv:
            self.packages.update(argv[argv.index("-y") + 1:])
        elif argv[0] == "systemctl" and argv[1] in ("is-enabled", "is-active"):
            rc = 0 if argv[-1] in self.services else 3
        elif argv[:3] == ["systemctl", "enable", "--now"]:
            self.services.update(argv[3:])

        if check and rc != 0:
            raise CommandError(argv, rc, "simulated failure")
        return CommandResult(argv=argv, returncode=rc, stdout=out, stderr="")

    # -- file primitives --

    def effective_uid(self) -> int:
        return self.uid

    def exists(self, path: str) -> bool:
        return path in self.files or path in self.dirs

    def glob(self, directory: str, pattern: str):
        import fnmatch
        prefix = directory.rstrip("/") + "/"
        return sorted(
            p for p in self.files
            if p.startswith(prefix) and "/" not in p[len(prefix):]
            and fnmatch.fnmatch(p[len(prefix):], pattern)
        )

    def read_text(self, path: str) -> str:
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def write_text(self, path: str, content: str) -> None:
        self.writes.append(path)
        self.files[path] = content

    def chmod(self, path: str, mode: int) -> None:
        self.modes[path] = mode
        self.mode_history.append((path, mode))

    def chown(self, path: str, owner: str, group: str) -> None:
        self.run(["chown", f"{owner}:{group}", path])

    def makedirs(self, path: str) -> None:
        self.dirs.add(path)

    def close(self) -> None:
        self.closed = True

    def ran(self, *prefix: str) -> bool:
        return any(c[: len(prefix)] == list(prefix) for c in self.commands)


@pytest.fixture
def fake_host():
    h = FakeHost()
    h.files["/etc/netplan/50-cloud-init.yaml"] = "network:\n  version: 2\n  ethernets:\n    eth0:\n      dhcp4: true\n"
    h.files["/etc/hosts"] = "127.0.0.1 localhost\n127.0.1.1 server1\n"
    return h


@pytest.fixture(autouse=True)
def _reset_hostprep_logger():
    yield
    import logging
    logger = logging.getLogger("hostprep")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
