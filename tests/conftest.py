import pytest

from dns_optimizer.applier import ConfigurationApplier, no_settle
from dns_optimizer.models import Candidate, ProbeStatus
from dns_optimizer.prober import StaticProber
from dns_optimizer.resolver_config import InMemoryResolverConfig


@pytest.fixture
def catalog():
    return [
        Candidate("A", "10.0.0.1"),
        Candidate("B", "10.0.0.2"),
        Candidate("C", "10.0.0.3"),
        Candidate("D", "10.0.0.4"),
    ]


@pytest.fixture
def mixed_prober():
    """A:30ms, B:10ms, C:20ms, D times out."""
    return StaticProber({
        "10.0.0.1": 30.0,
        "10.0.0.2": 10.0,
        "10.0.0.3": 20.0,
        "10.0.0.4": ProbeStatus.TIMEOUT,
    })


@pytest.fixture
def memory_config():
    return InMemoryResolverConfig(interface="test0", addresses=["192.168.1.1"])


@pytest.fixture
def instant_applier(memory_config):
    return ConfigurationApplier(memory_config, settle_delay=0.0, settle=no_settle)
