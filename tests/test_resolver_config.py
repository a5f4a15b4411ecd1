import asyncio

import pytest

import dns_optimizer.resolver_config as rc_mod
from dns_optimizer.errors import ApplyFailed, CommandTimeout, CommandUnavailable, ReadFailed
from dns_optimizer.models import ResolverState
from dns_optimizer.resolver_config import (
    InMemoryResolverConfig,
    ResolvectlResolverConfig,
    ScutilResolverConfig,
    create_resolver_config,
    parse_resolvectl_dns,
    parse_scutil_dns,
)
from dns_optimizer.system import CommandResult


SCUTIL_OUTPUT = """\
DNS configuration

resolver #1
  search domain[0] : lan
  nameserver[0] : 1.1.1.1
  nameserver[1] : 8.8.8.8
  if_index : 6 (en0)
  flags    : Request A records
  reach    : 0x00000002 (Reachable)

resolver #2
  domain   : local
  options  : mdns
  timeout  : 5
  flags    : Request A records
  reach    : 0x00000000 (Not Reachable)
  order    : 300000

DNS configuration (for scoped queries)

resolver #1
  search domain[0] : lan
  nameserver[0] : 192.168.1.1
  if_index : 6 (en0)
  flags    : Scoped, Request A records
  reach    : 0x00020002 (Reachable,Directly Reachable Address)
"""

SCUTIL_NO_SERVERS = """\
DNS configuration

resolver #1
  domain   : local
  options  : mdns

DNS configuration (for scoped queries)

resolver #1
  nameserver[0] : 192.168.1.1
"""


def _fake_run(calls, stdout="", returncode=0, exc=None):
    async def fake_run_command(args, timeout=None):
        calls.append(tuple(args))
        if exc is not None:
            raise exc
        return CommandResult(tuple(args), returncode, stdout, "")
    return fake_run_command


def test_parse_scutil_excludes_scoped_section():
    state = parse_scutil_dns(SCUTIL_OUTPUT)

    assert state == ResolverState(("1.1.1.1", "8.8.8.8"))
    assert "192.168.1.1" not in state.addresses


def test_parse_scutil_without_nameservers_is_automatic():
    state = parse_scutil_dns(SCUTIL_NO_SERVERS)

    assert state.is_automatic
    assert list(state) == []


@pytest.mark.parametrize("output", ["", "scutil: command failed\n", "nameserver[0] : 1.1.1.1\n"])
def test_parse_scutil_rejects_unrecognised_output(output):
    with pytest.raises(ReadFailed):
        parse_scutil_dns(output)


def test_parse_resolvectl_for_interface():
    output = "Global:\nLink 2 (eth0): 10.0.0.53\nLink 3 (wlan0): 1.1.1.1 1.0.0.1\n"

    assert parse_resolvectl_dns(output, "wlan0") == ResolverState(("1.1.1.1", "1.0.0.1"))


def test_parse_resolvectl_empty_link_is_automatic():
    assert parse_resolvectl_dns("Link 3 (wlan0):\n", "wlan0").is_automatic


def test_parse_resolvectl_missing_interface():
    with pytest.raises(ReadFailed):
        parse_resolvectl_dns("Link 2 (eth0): 10.0.0.53\n", "wlan0")


def test_scutil_read(monkeypatch):
    calls = []
    monkeypatch.setattr(rc_mod, "run_command", _fake_run(calls, stdout=SCUTIL_OUTPUT))

    state = asyncio.run(ScutilResolverConfig("Wi-Fi").read())

    assert calls == [("scutil", "--dns")]
    assert list(state) == ["1.1.1.1", "8.8.8.8"]


def test_scutil_read_missing_tool_is_read_failed(monkeypatch):
    calls = []
    monkeypatch.setattr(rc_mod, "run_command", _fake_run(calls, exc=CommandUnavailable("scutil")))

    with pytest.raises(ReadFailed) as exc:
        asyncio.run(ScutilResolverConfig("Wi-Fi").read())
    assert isinstance(exc.value.cause, CommandUnavailable)


def test_scutil_read_nonzero_exit_is_read_failed(monkeypatch):
    monkeypatch.setattr(rc_mod, "run_command", _fake_run([], returncode=1))

    with pytest.raises(ReadFailed):
        asyncio.run(ScutilResolverConfig("Wi-Fi").read())


def test_networksetup_commands(monkeypatch):
    calls = []
    monkeypatch.setattr(rc_mod, "run_command", _fake_run(calls))
    config = ScutilResolverConfig("Wi-Fi")

    asyncio.run(config.reset_to_automatic())
    asyncio.run(config.apply("9.9.9.9"))

    assert calls == [
        ("networksetup", "-setdnsservers", "Wi-Fi", "empty"),
        ("networksetup", "-setdnsservers", "Wi-Fi", "9.9.9.9"),
    ]


def test_networksetup_failure_is_apply_failed(monkeypatch):
    monkeypatch.setattr(rc_mod, "run_command", _fake_run([], returncode=4))

    with pytest.raises(ApplyFailed) as exc:
        asyncio.run(ScutilResolverConfig("Wi-Fi").apply("9.9.9.9"))
    assert exc.value.address == "9.9.9.9"


def test_apply_timeout_is_apply_failed(monkeypatch):
    monkeypatch.setattr(rc_mod, "run_command", _fake_run([], exc=CommandTimeout("networksetup", 15.0)))

    with pytest.raises(ApplyFailed) as exc:
        asyncio.run(ScutilResolverConfig("Wi-Fi").reset_to_automatic())
    assert exc.value.address is None
    assert isinstance(exc.value.cause, CommandTimeout)


def test_resolvectl_commands(monkeypatch):
    calls = []
    monkeypatch.setattr(rc_mod, "run_command", _fake_run(calls, stdout="Link 3 (wlan0): 8.8.8.8\n"))
    config = ResolvectlResolverConfig("wlan0")

    asyncio.run(config.reset_to_automatic())
    asyncio.run(config.apply("8.8.8.8"))
    state = asyncio.run(config.read())

    assert calls == [
        ("resolvectl", "revert", "wlan0"),
        ("resolvectl", "dns", "wlan0", "8.8.8.8"),
        ("resolvectl", "dns", "wlan0"),
    ]
    assert list(state) == ["8.8.8.8"]


def test_create_resolver_config_per_platform():
    assert isinstance(create_resolver_config("Wi-Fi", "macos"), ScutilResolverConfig)
    assert isinstance(create_resolver_config("wlan0", "linux"), ResolvectlResolverConfig)
    with pytest.raises(CommandUnavailable):
        create_resolver_config("Ethernet", "windows")


def test_in_memory_apply_then_read_is_single_address():
    config = InMemoryResolverConfig(addresses=["192.168.1.1", "192.168.1.2"])

    asyncio.run(config.apply("1.1.1.1"))

    assert list(asyncio.run(config.read())) == ["1.1.1.1"]


def test_in_memory_reset_then_read_is_automatic():
    config = InMemoryResolverConfig(addresses=["1.1.1.1"])

    asyncio.run(config.reset_to_automatic())

    assert asyncio.run(config.read()).is_automatic


def test_in_memory_operations_are_idempotent():
    config = InMemoryResolverConfig()

    asyncio.run(config.apply("9.9.9.9"))
    first = asyncio.run(config.read())
    asyncio.run(config.apply("9.9.9.9"))
    second = asyncio.run(config.read())

    assert first == second == ResolverState(("9.9.9.9",))

    asyncio.run(config.reset_to_automatic())
    asyncio.run(config.reset_to_automatic())
    assert asyncio.run(config.read()).is_automatic
    assert config.applied == ["9.9.9.9", "9.9.9.9"]
