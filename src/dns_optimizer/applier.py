"""
Configuration applier.

Wraps a ResolverConfig backend with logging and a settle wait, because
the OS applies resolver changes asynchronously.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from .resolver_config import ResolverConfig

logger = logging.getLogger(__name__)


# Awaitable wait, called with the delay in seconds
Settle = Callable[[float], Awaitable[None]]


async def no_settle(delay: float) -> None:
    """Settle hook that returns immediately."""
    return None


class ConfigurationApplier:
    """Applies resolver changes and waits for them to become observable."""

    def __init__(
        self,
        resolver_config: ResolverConfig,
        settle_delay: float = 2.0,
        settle: Settle = asyncio.sleep,
    ):
        """
        Args:
            resolver_config: Backend that performs the change
            settle_delay: Seconds to wait after each change
            settle: Awaitable used for the wait (replaceable in tests)
        """
        self.resolver_config = resolver_config
        self.settle_delay = settle_delay
        self.settle = settle

    async def reset_to_automatic(self) -> None:
        """Clear manual resolvers. Raises ApplyFailed."""
        logger.info("Setting DNS to automatic (empty)")
        await self.resolver_config.reset_to_automatic()
        await self._settle()
        logger.info("DNS set to automatic mode")

    async def apply(self, address: str) -> None:
        """Use ``address`` as the only resolver. Raises ApplyFailed."""
        logger.info("Setting DNS servers to: %s", address)
        await self.resolver_config.apply(address)
        await self._settle()
        logger.info("DNS settings applied")

    async def _settle(self) -> None:
        if self.settle_delay > 0:
            logger.debug("Waiting %.1fs for DNS changes to take effect", self.settle_delay)
        await self.settle(self.settle_delay)
