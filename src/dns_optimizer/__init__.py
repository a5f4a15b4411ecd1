"""
DNS Optimizer - find and apply the fastest DNS resolver.

Probes a catalog of public resolvers, ranks them by latency and sets
the fastest as the resolver for a network interface.
"""

__version__ = "1.0.0"
__author__ = "DNS Optimizer Team"

from .models import Candidate, ProbeOutcome, ProbeStatus, ResolverState, RunReport, Stage
from .prober import PingProber, StaticProber
from .resolver_config import InMemoryResolverConfig, ResolverConfig, create_resolver_config
from .runner import OptimizerRunner

__all__ = [
    "__version__",
    "Candidate",
    "ProbeOutcome",
    "ProbeStatus",
    "ResolverState",
    "RunReport",
    "Stage",
    "PingProber",
    "StaticProber",
    "InMemoryResolverConfig",
    "ResolverConfig",
    "create_resolver_config",
    "OptimizerRunner",
]
