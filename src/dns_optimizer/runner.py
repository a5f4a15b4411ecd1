"""
Pipeline runner for DNS optimization.

Orchestrates one run through the stages:
- Read the initial resolver configuration
- Reset to automatic (DHCP) so probes use a neutral baseline
- Probe every candidate with bounded concurrency
- Rank the outcomes and apply the fastest resolver
- Read the final resolver configuration
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from .applier import ConfigurationApplier
from .errors import ApplyFailed, NoReachableResolver, ReadFailed
from .models import Candidate, ProbeOutcome, ResolverState, RunReport, Stage
from .prober import BaseProber
from .ranking import rank, select_winner
from .resolver_config import ResolverConfig

logger = logging.getLogger(__name__)


# Type for progress callback
ProgressCallback = Callable[[str, int, int], None]


class OptimizerRunner:
    """
    Runs the read → reset → probe → rank → apply → read pipeline.

    Fatal errors (ReadFailed, ApplyFailed) end the run in Stage.FAILED;
    they are recorded on the returned RunReport rather than raised.
    """

    def __init__(
        self,
        candidates: list[Candidate],
        resolver_config: ResolverConfig,
        prober: BaseProber,
        applier: Optional[ConfigurationApplier] = None,
        parallel: int = 4,
    ):
        """
        Initialize the runner.

        Args:
            candidates: Resolvers to probe, in catalog order
            resolver_config: Backend for the target interface
            prober: Latency prober
            applier: Applier wrapping ``resolver_config`` (default: 2s settle)
            parallel: Maximum concurrent probes (1 = sequential)
        """
        if parallel < 1:
            raise ValueError("parallel must be at least 1")
        self.candidates = candidates
        self.resolver_config = resolver_config
        self.prober = prober
        self.applier = applier or ConfigurationApplier(resolver_config)
        self.parallel = parallel

    async def run(
        self,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> RunReport:
        """
        Execute the full pipeline once.

        Args:
            progress_callback: Optional callback for probe progress updates

        Returns:
            RunReport; ``report.stage`` is DONE or FAILED
        """
        report = RunReport(interface=self.resolver_config.interface)
        stage = Stage.INIT

        try:
            stage = self._enter(report, Stage.READ_INITIAL)
            logger.info("Checking current DNS configuration...")
            report.initial_state = await self.resolver_config.read()
            self._log_state(report.initial_state)

            stage = self._enter(report, Stage.RESET_AUTOMATIC)
            logger.info("Resetting to automatic DNS...")
            await self.applier.reset_to_automatic()

            stage = self._enter(report, Stage.PROBING)
            logger.info("Starting DNS latency tests (%d resolvers)...", len(self.candidates))
            report.outcomes = await self.probe_all(progress_callback)

            stage = self._enter(report, Stage.RANKING)
            report.ranked = rank(report.outcomes)

            try:
                report.winner = select_winner(report.ranked)
            except NoReachableResolver as e:
                stage = self._enter(report, Stage.NONE_FOUND)
                logger.warning("%s; leaving DNS in automatic mode", e)
            else:
                stage = self._enter(report, Stage.APPLYING)
                winner = report.winner
                logger.info(
                    "Setting DNS to fastest server: %s (%s) with latency %.2fms",
                    winner.candidate.name,
                    winner.candidate.address,
                    winner.latency_ms,
                )
                await self.applier.apply(winner.candidate.address)

            stage = self._enter(report, Stage.READ_FINAL)
            logger.info("Final DNS configuration:")
            report.final_state = await self.resolver_config.read()
            self._log_state(report.final_state)

        except (ReadFailed, ApplyFailed) as e:
            logger.error("DNS optimization failed during %s: %s", stage.value, e)
            report.failed_stage = stage
            report.error = e
            self._enter(report, Stage.FAILED)
        else:
            self._enter(report, Stage.DONE)
            logger.info("DNS optimization completed!")
        finally:
            report.completed_at = datetime.now()

        return report

    async def probe_all(
        self,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> list[ProbeOutcome]:
        """
        Probe every candidate with controlled concurrency.

        Returns:
            One outcome per candidate, in catalog order
        """
        semaphore = asyncio.Semaphore(self.parallel)
        total = len(self.candidates)
        completed = 0

        async def limited_probe(candidate: Candidate) -> ProbeOutcome:
            nonlocal completed
            async with semaphore:
                outcome = await self.prober.probe(candidate)
            completed += 1
            if progress_callback:
                progress_callback(f"Probed {candidate.name}", completed, total)
            return outcome

        tasks = [limited_probe(candidate) for candidate in self.candidates]

        return list(await asyncio.gather(*tasks))

    @staticmethod
    def _enter(report: RunReport, stage: Stage) -> Stage:
        report.stages.append(stage)
        logger.debug("Stage: %s", stage.value)
        return stage

    @staticmethod
    def _log_state(state: ResolverState) -> None:
        logger.info("Current DNS servers:")
        if state.is_automatic:
            logger.info("  • Automatic (DHCP)")
        else:
            for address in state:
                logger.info("  • %s", address)
