from hostprep.config.models import HostConfig, HostsEntrySpec
from hostprep.converge.models import Outcome
from hostprep.converge.steps.hosts import HostsEntryStep, rewrite_hosts


def test_rewrite_replaces_every_line_mentioning_hostname():
    text = "127.0.0.1 localhost\n127.0.1.1 server1\n10.0.0.9 server1 server1.lan\n::1 ip6-localhost\n"
    out = rewrite_hosts(text, "192.168.16.21", "server1")
    assert out == "127.0.0.1 localhost\n::1 ip6-localhost\n192.168.16.21 server1\n"


def test_rewrite_uses_substring_match():
    # server10 contains server1 and is dropped too
    out = rewrite_hosts("10.0.0.10 server10\n", "192.168.16.21", "server1")
    assert out == "192.168.16.21 server1\n"


def test_rewrite_empty_file():
    assert rewrite_hosts("", "10.1.1.1", "db") == "10.1.1.1 db\n"


def test_hosts_entry_applied_then_satisfied(fake_host):
    step = HostsEntryStep()
    cfg = HostConfig()

    first = step.ensure(fake_host, cfg)
    assert first.outcome == Outcome.APPLIED
    text = fake_host.files["/etc/hosts"]
    assert text == "127.0.0.1 localhost\n192.168.16.21 server1\n"
    assert sum(1 for ln in text.splitlines() if "server1" in ln) == 1

    second = step.ensure(fake_host, cfg)
    assert second.outcome == Outcome.SATISFIED
    assert fake_host.files["/etc/hosts"] == text
    assert fake_host.writes == ["/etc/hosts"]


def test_existing_mapping_is_left_alone(fake_host):
    fake_host.files["/etc/hosts"] = "192.168.16.21 server1 # keep me\n10.0.0.2 server1-old\n"
    result = HostsEntryStep().ensure(fake_host, HostConfig())
    assert result.outcome == Outcome.SATISFIED
    assert fake_host.writes == []


def test_missing_hosts_file_is_created(fake_host):
    del fake_host.files["/etc/hosts"]
    cfg = HostConfig(hosts_entry=HostsEntrySpec(ip="10.9.9.9", hostname="web"))
    HostsEntryStep().ensure(fake_host, cfg)
    assert fake_host.files["/etc/hosts"] == "10.9.9.9 web\n"
