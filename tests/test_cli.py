import functools
import json
import logging

import pytest
from click.testing import CliRunner

import dns_optimizer.cli as cli_mod
from dns_optimizer.applier import ConfigurationApplier, no_settle
from dns_optimizer.models import ProbeStatus
from dns_optimizer.prober import StaticProber
from dns_optimizer.resolver_config import InMemoryResolverConfig


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def fake_system(monkeypatch):
    """Route the CLI to in-memory DNS configuration and a static prober."""
    state = {
        "config": InMemoryResolverConfig(interface="Wi-Fi", addresses=["192.168.1.1"]),
        "prober": StaticProber({
            "10.0.0.1": 25.0,
            "10.0.0.2": 8.0,
            "1.1.1.1": 4.0,
            "10.0.0.9": ProbeStatus.TIMEOUT,
        }),
    }

    def fake_create_resolver_config(interface, command_timeout=15.0):
        state["config"].interface = interface
        return state["config"]

    monkeypatch.setattr(cli_mod, "create_resolver_config", fake_create_resolver_config)
    monkeypatch.setattr(cli_mod, "create_prober", lambda **kwargs: state["prober"])
    monkeypatch.setattr(cli_mod, "check_elevated_privileges", lambda: True)
    monkeypatch.setattr(cli_mod, "ConfigurationApplier", functools.partial(ConfigurationApplier, settle=no_settle))
    return state


def test_run_applies_fastest_custom_resolver(fake_system):
    result = CliRunner().invoke(cli_mod.main, ["run", "-c", "10.0.0.1", "-c", "10.0.0.2", "--plain"])

    assert result.exit_code == 0, result.output
    assert fake_system["config"].applied == ["10.0.0.2"]
    assert "Latency Test Results:" in result.output
    assert "8.00ms" in result.output


def test_no_command_runs_full_catalog(fake_system):
    result = CliRunner().invoke(cli_mod.main, [])

    assert result.exit_code == 0, result.output
    assert len(fake_system["prober"].probed) == 19
    assert fake_system["config"].addresses == ["1.1.1.1"]


def test_no_command_prints_plain_results_table(fake_system):
    result = CliRunner().invoke(cli_mod.main, [])

    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    start = lines.index("Latency Test Results:")
    assert lines[start + 1] == "-" * 50
    assert "1.1.1.1" in lines[start + 2]
    assert lines[start + 2].endswith(": 4.00ms")


def test_rich_flag_renders_rich_table(fake_system):
    result = CliRunner().invoke(cli_mod.main, ["run", "-c", "10.0.0.2", "--rich"])

    assert result.exit_code == 0, result.output
    assert "Latency Test Results" in result.stdout
    assert "-" * 50 not in result.stdout
    assert "8.00ms" in result.stdout


@pytest.mark.parametrize("args", [
    ["--timeout", "0"],
    ["--timeout", "-1"],
    ["--settle-delay", "-0.5"],
])
def test_non_positive_timings_are_rejected(fake_system, args):
    result = CliRunner().invoke(cli_mod.main, ["run", "-c", "10.0.0.1", *args])

    assert result.exit_code == 2
    assert fake_system["config"].calls == []


def test_zero_settle_delay_is_allowed(fake_system):
    result = CliRunner().invoke(cli_mod.main, ["run", "-c", "10.0.0.1", "--settle-delay", "0"])

    assert result.exit_code == 0, result.output
    assert fake_system["config"].applied == ["10.0.0.1"]


def test_all_unreachable_exits_zero_and_stays_automatic(fake_system):
    result = CliRunner().invoke(cli_mod.main, ["run", "-c", "10.0.0.9", "-c", "203.0.113.7", "--plain"])

    assert result.exit_code == 0, result.output
    assert fake_system["config"].applied == []
    assert fake_system["config"].addresses == []
    assert "No reachable resolver" in result.output


def test_apply_failure_exits_nonzero(fake_system):
    fake_system["config"].fail_apply = True

    result = CliRunner().invoke(cli_mod.main, ["run", "-c", "10.0.0.1", "--plain"])

    assert result.exit_code == 1
    assert "Error during reset_automatic" in result.output


def test_json_output_and_interface(fake_system):
    result = CliRunner().invoke(cli_mod.main, ["run", "-i", "en5", "-r", "cloudflare", "--json", "-q"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["metadata"]["interface"] == "en5"
    assert data["winner"]["address"] == "1.1.1.1"


def test_output_file_by_extension(fake_system, tmp_path):
    csv_path = tmp_path / "report.csv"
    json_path = tmp_path / "report.txt"
    runner = CliRunner()

    runner.invoke(cli_mod.main, ["run", "-c", "10.0.0.2", "-q", "-o", str(csv_path)])
    runner.invoke(cli_mod.main, ["run", "-c", "10.0.0.2", "-q", "-o", str(json_path)])

    assert csv_path.read_text().startswith("rank,name,address")
    assert json.loads((tmp_path / "report.json").read_text())["winner"]["address"] == "10.0.0.2"


def test_dry_run_leaves_system_untouched(fake_system):
    real = fake_system["config"]

    result = CliRunner().invoke(cli_mod.main, ["run", "-c", "10.0.0.1", "--dry-run", "--plain"])

    assert result.exit_code == 0, result.output
    assert real.calls == [("read", None)]
    assert real.addresses == ["192.168.1.1"]


def test_unknown_resolver_is_rejected(fake_system):
    result = CliRunner().invoke(cli_mod.main, ["run", "-r", "nosuchdns"])

    assert result.exit_code == 1
    assert "Unknown resolver" in result.output


def test_list_available():
    result = CliRunner().invoke(cli_mod.main, ["list-available"])

    assert result.exit_code == 0
    assert "149.112.112.112" in result.output


def test_info_shows_current_servers(fake_system):
    result = CliRunner().invoke(cli_mod.main, ["info"])

    assert result.exit_code == 0
    assert "192.168.1.1" in result.output


def test_info_read_failure(monkeypatch):
    def broken(interface, command_timeout=15.0):
        return InMemoryResolverConfig(interface, fail_read=True)

    monkeypatch.setattr(cli_mod, "create_resolver_config", broken)

    result = CliRunner().invoke(cli_mod.main, ["info"])

    assert result.exit_code == 1
    assert "Could not read DNS configuration" in result.output
