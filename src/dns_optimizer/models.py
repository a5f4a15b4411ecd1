"""
Data models for DNS Optimizer.

Defines structured types for candidate resolvers, probe outcomes,
resolver state and the report of a single optimization run.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

import numpy as np


class ProbeStatus(Enum):
    """Result status of a latency probe."""
    SUCCESS = "success"
    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"


class LatencyMode(Enum):
    """How probe latency is derived from the echo command."""
    RTT = "rtt"              # mean of reported round-trip times
    WALLCLOCK = "wallclock"  # elapsed command time divided by count


class Stage(Enum):
    """Pipeline stages, in the order the runner visits them."""
    INIT = "init"
    READ_INITIAL = "read_initial"
    RESET_AUTOMATIC = "reset_automatic"
    PROBING = "probing"
    RANKING = "ranking"
    APPLYING = "applying"
    NONE_FOUND = "none_found"
    READ_FINAL = "read_final"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class Candidate:
    """A named resolver address to be probed."""
    name: str
    address: str
    description: Optional[str] = None


@dataclass(frozen=True)
class ResolverState:
    """Resolver addresses configured for an interface, in order."""
    addresses: tuple[str, ...] = ()

    @property
    def is_automatic(self) -> bool:
        """No manual resolvers: the interface uses DHCP defaults."""
        return not self.addresses

    def __iter__(self):
        return iter(self.addresses)

    def __len__(self) -> int:
        return len(self.addresses)


@dataclass
class ProbeOutcome:
    """Result of probing a single candidate."""
    candidate: Candidate
    status: ProbeStatus
    latency_ms: Optional[float] = None
    samples: list[float] = field(default_factory=list)
    error_message: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def is_success(self) -> bool:
        """Check if the probe measured a latency."""
        return self.status == ProbeStatus.SUCCESS

    @property
    def min_ms(self) -> Optional[float]:
        if not self.samples:
            return None
        return float(np.min(self.samples))

    @property
    def max_ms(self) -> Optional[float]:
        if not self.samples:
            return None
        return float(np.max(self.samples))

    @property
    def jitter_ms(self) -> float:
        """Standard deviation of the round-trip samples."""
        if len(self.samples) < 2:
            return 0.0
        return float(np.std(self.samples))


@dataclass
class RunReport:
    """Complete record of one optimization run."""
    interface: str
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    initial_state: Optional[ResolverState] = None
    final_state: Optional[ResolverState] = None

    # Outcomes in catalog order, and the same outcomes ranked
    outcomes: list[ProbeOutcome] = field(default_factory=list)
    ranked: list[ProbeOutcome] = field(default_factory=list)
    winner: Optional[ProbeOutcome] = None

    stages: list[Stage] = field(default_factory=lambda: [Stage.INIT])
    failed_stage: Optional[Stage] = None
    error: Optional[Exception] = None

    @property
    def stage(self) -> Stage:
        """The stage the run ended in (or is currently in)."""
        return self.stages[-1]

    @property
    def succeeded(self) -> bool:
        return self.stage == Stage.DONE

    @property
    def duration_seconds(self) -> float:
        """Total run duration in seconds."""
        end = self.completed_at or datetime.now()
        return (end - self.started_at).total_seconds()
