import pytest

from hostprep.config.models import DEFAULT_USERS, HostConfig, UserSpec
from hostprep.converge.models import Outcome
from hostprep.converge.steps.users import UsersStep, keygen_argv
from hostprep.errors import CommandError, ExternalToolFailure


def test_keygen_argv_matches_algorithms():
    user = UserSpec(name="aubrey")
    rsa, ed = user.keys
    assert keygen_argv(user, rsa) == [
        "sudo", "-u", "aubrey", "ssh-keygen", "-t", "rsa", "-b", "4096",
        "-N", "", "-f", "/home/aubrey/.ssh/id_rsa",
    ]
    assert keygen_argv(user, ed) == [
        "sudo", "-u", "aubrey", "ssh-keygen", "-t", "ed25519",
        "-N", "", "-f", "/home/aubrey/.ssh/id_ed25519",
    ]


def test_fresh_host_creates_every_account(fake_host):
    result = UsersStep().ensure(fake_host, HostConfig())

    assert result.outcome == Outcome.APPLIED
    assert fake_host.users == set(DEFAULT_USERS)
    created = [c[-1] for c in fake_host.commands if c[0] == "useradd"]
    assert created == DEFAULT_USERS
    assert fake_host.ran("useradd", "-m", "-s", "/bin/bash", "dennis")

    for name in DEFAULT_USERS:
        ssh = f"/home/{name}/.ssh"
        assert fake_host.modes[ssh] == 0o700
        assert fake_host.owners[ssh] == f"{name}:{name}"
        ak = f"{ssh}/authorized_keys"
        assert fake_host.files[ak] == fake_host.files[f"{ssh}/id_rsa.pub"] + fake_host.files[f"{ssh}/id_ed25519.pub"]
        assert fake_host.modes[ak] == 0o600
        assert fake_host.owners[ak] == f"{name}:{name}"
        assert len(fake_host.files[ak].splitlines()) == 2


def test_rerun_keeps_keys_but_rebuilds_authorized_keys(fake_host):
    cfg = HostConfig(users=["aubrey"])
    step = UsersStep()
    step.ensure(fake_host, cfg)
    keys_before = fake_host.keygen_count
    rsa_pub = fake_host.files["/home/aubrey/.ssh/id_rsa.pub"]

    ak = "/home/aubrey/.ssh/authorized_keys"
    fake_host.files[ak] += "ssh-ed25519 MANUAL added@by-hand\n"
    writes_before = fake_host.writes.count(ak)

    result = step.ensure(fake_host, cfg)

    assert result.outcome == Outcome.SATISFIED
    assert fake_host.keygen_count == keys_before
    assert fake_host.files["/home/aubrey/.ssh/id_rsa.pub"] == rsa_pub
    assert fake_host.writes.count(ak) == writes_before + 1
    assert "MANUAL" not in fake_host.files[ak]
    assert sum(1 for c in fake_host.commands if c[0] == "useradd") == 1


def test_existing_account_only_gets_missing_key(fake_host):
    fake_host.users.add("yoda")
    fake_host.files["/home/yoda/.ssh/id_rsa.pub"] = "ssh-rsa EXISTING yoda@old\n"

    result = UsersStep().ensure(fake_host, HostConfig(users=["yoda"]))

    assert result.changes == ["key:yoda/id_ed25519"]
    assert not any(c[0] == "useradd" for c in fake_host.commands)
    assert fake_host.files["/home/yoda/.ssh/authorized_keys"].startswith("ssh-rsa EXISTING yoda@old\n")


def test_custom_home_is_passed_to_useradd(fake_host):
    cfg = HostConfig(users=[{"name": "svc", "home": "/srv/svc", "shell": "/bin/sh"}])
    UsersStep().ensure(fake_host, cfg)
    assert fake_host.ran("useradd", "-m", "-s", "/bin/sh", "-d", "/srv/svc", "svc")
    assert "/srv/svc/.ssh/authorized_keys" in fake_host.files


def test_account_creation_failure_is_fatal(fake_host):
    fake_host.fail_on["useradd -m -s /bin/bash aubrey"] = 9
    with pytest.raises(ExternalToolFailure, match="Failed to create user aubrey."):
        UsersStep().ensure(fake_host, HostConfig())
    # users before aubrey were provisioned and stay in place
    assert "dennis" in fake_host.users
    assert "/home/dennis/.ssh/authorized_keys" in fake_host.files


def test_keygen_failure_propagates_unwrapped(fake_host):
    fake_host.fail_on["ssh-keygen -t ed25519"] = 1
    with pytest.raises(CommandError) as ei:
        UsersStep().ensure(fake_host, HostConfig(users=["cindy"]))
    assert not isinstance(ei.value, ExternalToolFailure)
    assert ei.value.returncode == 1
