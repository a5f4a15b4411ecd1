"""
Latency probers.

Provides prober classes that measure reachability latency of a
candidate resolver:
- PingProber: ICMP echo via the system ping command
- StaticProber: fixed results for tests

A prober never raises for an unreachable candidate; every failure is
reported in the returned ProbeOutcome.
"""

import asyncio
import logging
import re
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional, Union

import numpy as np

from .errors import CommandTimeout, CommandUnavailable, ProbeError, ProbeTimeout, ProbeUnreachable
from .models import Candidate, LatencyMode, ProbeOutcome, ProbeStatus
from .system import run_command

logger = logging.getLogger(__name__)


RTT_RE = re.compile(r"time[=<]\s*([\d.]+)\s*ms")
RECEIVED_RE = re.compile(r"(\d+)\s+(?:packets\s+)?received")


def parse_ping_output(output: str) -> tuple[list[float], Optional[int]]:
    """
    Parse ping output.

    Returns:
        Tuple of (round-trip times in ms, received packet count or None)
    """
    samples = [float(m.group(1)) for m in RTT_RE.finditer(output)]
    received_match = RECEIVED_RE.search(output)
    received = int(received_match.group(1)) if received_match else None
    return samples, received


class BaseProber(ABC):
    """Base class for latency probers."""

    @abstractmethod
    async def probe(self, candidate: Candidate) -> ProbeOutcome:
        """Measure latency to ``candidate``."""
        pass


class PingProber(BaseProber):
    """
    Measures latency with the system ping command.

    In RTT mode latency is the mean of the round-trip times ping reports.
    In WALLCLOCK mode it is the elapsed time of the whole command divided
    by the echo count, which includes process start-up overhead.
    """

    def __init__(
        self,
        count: int = 3,
        timeout: float = 5.0,
        retries: int = 0,
        mode: LatencyMode = LatencyMode.RTT,
        clock: Callable[[], int] = time.perf_counter_ns,
    ):
        """
        Initialize the prober.

        Args:
            count: Echo requests per probe
            timeout: Limit in seconds for the replies, on top of the one
                second ping waits between echo requests
            retries: Extra attempts after a failed probe
            mode: Latency measurement semantics
            clock: Nanosecond clock used in WALLCLOCK mode
        """
        if count < 1:
            raise ValueError("count must be at least 1")
        self.count = count
        self.timeout = timeout
        self.retries = retries
        self.mode = mode
        self.clock = clock

    @property
    def command_timeout(self) -> float:
        """Limit for one ping invocation, which spaces echoes one second apart."""
        return self.timeout + (self.count - 1)

    async def probe(self, candidate: Candidate) -> ProbeOutcome:
        logger.info("Testing latency for %s", candidate.address)

        last_error: Optional[ProbeError] = None

        for attempt in range(self.retries + 1):
            try:
                latency, samples = await self._measure(candidate.address)
            except ProbeError as e:
                last_error = e
                logger.debug("Probe of %s failed (attempt %d): %s", candidate.address, attempt + 1, e)
            else:
                logger.info("Latency for %s: %.2fms", candidate.address, latency)
                return ProbeOutcome(
                    candidate=candidate,
                    status=ProbeStatus.SUCCESS,
                    latency_ms=latency,
                    samples=samples,
                )

            # Wait briefly before retry
            if attempt < self.retries:
                await asyncio.sleep(0.1)

        status = ProbeStatus.TIMEOUT if isinstance(last_error, ProbeTimeout) else ProbeStatus.UNREACHABLE
        logger.warning("%s (%s) is %s: %s", candidate.name, candidate.address, status.value, last_error)
        return ProbeOutcome(
            candidate=candidate,
            status=status,
            error_message=str(last_error),
        )

    async def _measure(self, address: str) -> tuple[float, list[float]]:
        args = ["ping", "-n", "-c", str(self.count), address]

        start = self.clock()
        try:
            result = await run_command(args, timeout=self.command_timeout)
        except CommandTimeout as e:
            raise ProbeTimeout(f"No answer within {self.command_timeout}s") from e
        except CommandUnavailable as e:
            raise ProbeUnreachable(str(e)) from e
        elapsed_ms = (self.clock() - start) / 1_000_000

        samples, received = parse_ping_output(result.stdout)
        if received is None:
            received = len(samples)
        if received == 0:
            raise ProbeUnreachable(f"0 of {self.count} echo requests answered")

        if self.mode == LatencyMode.WALLCLOCK:
            return elapsed_ms / self.count, samples

        if not samples:
            raise ProbeUnreachable("No round-trip times in ping output")
        return float(np.mean(samples)), samples


# Result for one address in a StaticProber table
StaticResult = Union[float, ProbeStatus]


class StaticProber(BaseProber):
    """
    Prober that returns predetermined results.

    ``results`` maps an address to a latency in ms or a failure status.
    Unknown addresses are unreachable. ``delays`` maps an address to
    seconds to sleep before answering, to reorder completions.
    """

    def __init__(
        self,
        results: dict[str, StaticResult],
        delays: Optional[dict[str, float]] = None,
    ):
        self.results = results
        self.delays = delays or {}
        self.probed: list[str] = []

    async def probe(self, candidate: Candidate) -> ProbeOutcome:
        delay = self.delays.get(candidate.address, 0.0)
        if delay:
            await asyncio.sleep(delay)
        self.probed.append(candidate.address)

        result = self.results.get(candidate.address, ProbeStatus.UNREACHABLE)
        if isinstance(result, ProbeStatus):
            return ProbeOutcome(
                candidate=candidate,
                status=result,
                error_message=f"{candidate.address} {result.value}",
            )
        return ProbeOutcome(
            candidate=candidate,
            status=ProbeStatus.SUCCESS,
            latency_ms=float(result),
            samples=[float(result)],
        )


def create_prober(
    count: int = 3,
    timeout: float = 5.0,
    retries: int = 0,
    mode: LatencyMode = LatencyMode.RTT,
) -> BaseProber:
    """Create the system prober."""
    return PingProber(count=count, timeout=timeout, retries=retries, mode=mode)
