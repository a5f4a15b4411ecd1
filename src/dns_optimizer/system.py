"""
Cross-platform system command utilities.

Every external tool (scutil, networksetup, resolvectl, ping) is run
through ``run_command`` so callers only deal with CommandResult and
the OptimizerError taxonomy.
"""

import asyncio
import logging
import os
import platform
from dataclasses import dataclass
from typing import Optional, Sequence

from .errors import CommandTimeout, CommandUnavailable

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Captured output of a finished command."""
    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def describe_failure(self) -> str:
        """Short human-readable reason for a non-zero exit."""
        detail = self.stderr.strip() or self.stdout.strip()
        message = f"{self.args[0]} exited with status {self.returncode}"
        if detail:
            message = f"{message}: {detail.splitlines()[-1]}"
        return message


def get_platform() -> str:
    """Get the current platform name."""
    system = platform.system().lower()
    if system == "darwin":
        return "macos"
    return system  # "windows" or "linux"


def check_elevated_privileges() -> bool:
    """Check if running with elevated privileges."""
    if get_platform() == "windows":
        return False
    return os.geteuid() == 0


async def run_command(
    args: Sequence[str],
    timeout: Optional[float] = None,
) -> CommandResult:
    """
    Run an external command and capture its output.

    Args:
        args: Program and arguments
        timeout: Seconds to wait before killing the process (None = no limit)

    Returns:
        CommandResult with decoded stdout/stderr

    Raises:
        CommandUnavailable: The program could not be executed
        CommandTimeout: The program did not finish within ``timeout``
    """
    args = tuple(args)
    logger.debug("Running: %s", " ".join(args))

    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (FileNotFoundError, PermissionError) as e:
        raise CommandUnavailable(args[0], f"Cannot execute {args[0]}: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise CommandTimeout(args[0], timeout) from None

    return CommandResult(
        args=args,
        returncode=process.returncode,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
    )
