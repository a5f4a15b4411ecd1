"""
Resolver configuration backends.

Provides read/reset/apply access to the system resolver configuration
of one network interface:
- macOS: scutil (read) and networksetup (write)
- Linux: resolvectl (systemd-resolved)
- In-memory: deterministic stand-in for tests and dry runs
"""

import re
from abc import ABC, abstractmethod
from typing import Optional

from .errors import ApplyFailed, CommandTimeout, CommandUnavailable, ReadFailed
from .models import ResolverState
from .system import CommandResult, get_platform, run_command


SCOPED_SECTION_MARKER = "DNS configuration (for scoped queries)"
SCUTIL_HEADER = "DNS configuration"
NAMESERVER_RE = re.compile(r"nameserver\[\d+\]\s*:\s*(\S+)")
RESOLVECTL_LINK_RE = re.compile(r"^Link\s+\d+\s+\((?P<iface>[^)]+)\):(?P<servers>.*)$")

# networksetup sentinel that clears manual servers
AUTOMATIC_SENTINEL = "empty"


def parse_scutil_dns(output: str) -> ResolverState:
    """
    Extract nameservers from ``scutil --dns`` output.

    Only the primary section is parsed; the scoped-query section repeats
    per-interface entries and is discarded.

    Raises:
        ReadFailed: Output does not look like an scutil DNS report
    """
    primary = output.split(SCOPED_SECTION_MARKER, 1)[0]
    if SCUTIL_HEADER not in primary:
        raise ReadFailed("Unrecognised scutil --dns output")

    addresses = []
    for line in primary.splitlines():
        line = line.strip()
        if not line.startswith("nameserver"):
            continue
        match = NAMESERVER_RE.match(line)
        if match:
            addresses.append(match.group(1))

    return ResolverState(tuple(addresses))


def parse_resolvectl_dns(output: str, interface: str) -> ResolverState:
    """
    Extract nameservers for ``interface`` from ``resolvectl dns`` output.

    Raises:
        ReadFailed: No line for the interface was found
    """
    for line in output.splitlines():
        match = RESOLVECTL_LINK_RE.match(line.strip())
        if match and match.group("iface") == interface:
            return ResolverState(tuple(match.group("servers").split()))
    raise ReadFailed(f"No resolvectl entry for interface {interface}")


class ResolverConfig(ABC):
    """Read and mutate the resolver configuration of one interface."""

    interface: str

    @abstractmethod
    async def read(self) -> ResolverState:
        """Return the addresses currently configured for the interface."""
        pass

    @abstractmethod
    async def reset_to_automatic(self) -> None:
        """Remove manual resolvers so DHCP-provided ones apply."""
        pass

    @abstractmethod
    async def apply(self, address: str) -> None:
        """Replace the interface's resolvers with the single ``address``."""
        pass


class CommandResolverConfig(ResolverConfig):
    """Shared command handling for the OS-backed implementations."""

    def __init__(self, interface: str, command_timeout: float = 15.0):
        self.interface = interface
        self.command_timeout = command_timeout

    async def _read_command(self, args: list[str]) -> CommandResult:
        try:
            result = await run_command(args, timeout=self.command_timeout)
        except (CommandUnavailable, CommandTimeout) as e:
            raise ReadFailed("Could not query resolver configuration", cause=e) from e
        if not result.ok:
            raise ReadFailed(result.describe_failure())
        return result

    async def _write_command(self, args: list[str], address: Optional[str]) -> None:
        target = address or "automatic"
        try:
            result = await run_command(args, timeout=self.command_timeout)
        except (CommandUnavailable, CommandTimeout) as e:
            raise ApplyFailed(f"Failed to set DNS to {target}", address=address, cause=e) from e
        if not result.ok:
            raise ApplyFailed(
                f"Failed to set DNS to {target}: {result.describe_failure()}",
                address=address,
            )


class ScutilResolverConfig(CommandResolverConfig):
    """macOS: read with scutil, write with networksetup."""

    async def read(self) -> ResolverState:
        result = await self._read_command(["scutil", "--dns"])
        return parse_scutil_dns(result.stdout)

    async def reset_to_automatic(self) -> None:
        await self._write_command(
            ["networksetup", "-setdnsservers", self.interface, AUTOMATIC_SENTINEL],
            None,
        )

    async def apply(self, address: str) -> None:
        await self._write_command(
            ["networksetup", "-setdnsservers", self.interface, address],
            address,
        )


class ResolvectlResolverConfig(CommandResolverConfig):
    """Linux (systemd-resolved): read and write with resolvectl."""

    async def read(self) -> ResolverState:
        result = await self._read_command(["resolvectl", "dns", self.interface])
        return parse_resolvectl_dns(result.stdout, self.interface)

    async def reset_to_automatic(self) -> None:
        await self._write_command(["resolvectl", "revert", self.interface], None)

    async def apply(self, address: str) -> None:
        await self._write_command(["resolvectl", "dns", self.interface, address], address)


class InMemoryResolverConfig(ResolverConfig):
    """
    Resolver configuration held in memory.

    Records every call in ``calls`` as ``(operation, argument)`` tuples.
    Setting ``fail_read``/``fail_apply`` makes the matching operations
    raise like a broken system tool would.
    """

    def __init__(
        self,
        interface: str = "test0",
        addresses: Optional[list[str]] = None,
        fail_read: bool = False,
        fail_apply: bool = False,
    ):
        self.interface = interface
        self.addresses = list(addresses or [])
        self.fail_read = fail_read
        self.fail_apply = fail_apply
        self.calls: list[tuple[str, Optional[str]]] = []

    async def read(self) -> ResolverState:
        self.calls.append(("read", None))
        if self.fail_read:
            raise ReadFailed("Simulated read failure")
        return ResolverState(tuple(self.addresses))

    async def reset_to_automatic(self) -> None:
        self.calls.append(("reset", None))
        if self.fail_apply:
            raise ApplyFailed("Simulated reset failure")
        self.addresses = []

    async def apply(self, address: str) -> None:
        self.calls.append(("apply", address))
        if self.fail_apply:
            raise ApplyFailed("Simulated apply failure", address=address)
        self.addresses = [address]

    @property
    def applied(self) -> list[str]:
        """Addresses passed to apply(), in call order."""
        return [arg for op, arg in self.calls if op == "apply"]


def create_resolver_config(
    interface: str,
    platform_name: Optional[str] = None,
    command_timeout: float = 15.0,
) -> ResolverConfig:
    """Create the resolver configuration backend for the current platform."""
    system = platform_name or get_platform()
    if system == "macos":
        return ScutilResolverConfig(interface, command_timeout=command_timeout)
    if system == "linux":
        return ResolvectlResolverConfig(interface, command_timeout=command_timeout)
    raise CommandUnavailable(
        "resolver-config",
        f"No resolver configuration backend for platform: {system}",
    )
