"""
Command-line interface for DNS Optimizer.

Running the tool without a command probes the built-in resolver
catalog and applies the fastest resolver to the configured interface.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich import box
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .applier import ConfigurationApplier
from .errors import OptimizerError
from .logging_utils import configure_logging
from .models import LatencyMode
from .output import ConsoleOutput, CSVOutput, JSONOutput, RichConsoleOutput
from .prober import create_prober
from .resolver_config import InMemoryResolverConfig, create_resolver_config
from .resolvers import (
    RESOLVERS,
    create_custom_candidate,
    default_catalog,
    get_candidate,
    list_candidates,
)
from .runner import OptimizerRunner
from .settings import settings
from .system import check_elevated_privileges, get_platform


def create_progress_callback(console: Console):
    """Create a progress callback backed by a rich spinner."""
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn("{task.completed}/{task.total}"),
        console=console,
        transient=True,
    )

    task_id = None

    def callback(message: str, current: int, total: int):
        nonlocal task_id
        if task_id is None:
            progress.start()
            task_id = progress.add_task(message, total=total)
        progress.update(task_id, description=message, completed=current)

    return progress, callback


@click.group(invoke_without_command=True)
@click.version_option(__version__)
@click.pass_context
def main(ctx: click.Context):
    """
    DNS Optimizer - apply the fastest public DNS resolver.

    Without a command, runs the full optimization with default settings:
    reset DNS to automatic, probe every known resolver, and configure
    the fastest one.
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@main.command()
@click.option(
    "--interface", "-i",
    default=settings.interface,
    show_default=True,
    help="Network interface (macOS service name or Linux link) to configure",
)
@click.option(
    "--resolver", "-r",
    multiple=True,
    help="Resolver to test (can specify multiple). Options: " + ", ".join(list_candidates()),
)
@click.option(
    "--custom-resolver", "-c",
    multiple=True,
    help="Custom resolver IP address",
)
@click.option(
    "--count", "-n",
    type=click.IntRange(min=1),
    default=settings.ping_count,
    show_default=True,
    help="Echo requests per resolver",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=settings.probe_timeout_s,
    show_default=True,
    help="Per-resolver probe timeout in seconds",
)
@click.option(
    "--retries",
    type=click.IntRange(min=0),
    default=settings.probe_retries,
    show_default=True,
    help="Extra probe attempts for an unreachable resolver",
)
@click.option(
    "--parallel", "-p",
    type=click.IntRange(min=1),
    default=settings.parallel,
    show_default=True,
    help="Maximum concurrent probes (1 probes sequentially)",
)
@click.option(
    "--latency-mode",
    type=click.Choice([mode.value for mode in LatencyMode]),
    default=settings.latency_mode,
    show_default=True,
    help="rtt: mean of reported round trips; wallclock: command duration / count",
)
@click.option(
    "--settle-delay",
    type=click.FloatRange(min=0),
    default=settings.settle_delay_s,
    show_default=True,
    help="Seconds to wait after each DNS change",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Probe and rank, but do not change the system DNS configuration",
)
@click.option(
    "--output", "-o",
    type=click.Path(),
    help="Output file path (JSON or CSV based on extension)",
)
@click.option(
    "--json",
    is_flag=True,
    help="Output results as JSON to stdout",
)
@click.option(
    "--rich/--plain", "use_rich",
    default=False,
    show_default=True,
    help="Render results as a rich table instead of the plain text table",
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    help="Only log warnings and errors",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Log debug detail, including every command run",
)
def run(
    interface: str,
    resolver: tuple,
    custom_resolver: tuple,
    count: int,
    timeout: float,
    retries: int,
    parallel: int,
    latency_mode: str,
    settle_delay: float,
    dry_run: bool,
    output: Optional[str],
    json: bool,
    use_rich: bool,
    quiet: bool,
    verbose: bool,
):
    """
    Probe resolvers and apply the fastest one.

    Examples:

    \b
      # Optimize the Wi-Fi service with the full catalog
      sudo dns-optimizer

    \b
      # Compare specific resolvers without touching the system
      dns-optimizer run -r cloudflare -r google -c 192.168.1.1 --dry-run

    \b
      # Linux interface, sequential probing, JSON report
      sudo dns-optimizer run -i wlan0 -p 1 -o results.json
    """
    err_console = Console(stderr=True)
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    configure_logging(level, console=err_console)
    logger = logging.getLogger("dns_optimizer")

    # Parse resolvers
    candidates = []

    for name in resolver:
        try:
            candidates.append(get_candidate(name))
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    for ip in custom_resolver:
        candidates.append(create_custom_candidate(ip))

    if not candidates:
        candidates = default_catalog()

    if not dry_run and not check_elevated_privileges():
        click.echo("Warning: Changing DNS settings may require elevated privileges", err=True)

    async def run_optimizer():
        resolver_config = create_resolver_config(interface, command_timeout=settings.command_timeout_s)
        if dry_run:
            current = await resolver_config.read()
            resolver_config = InMemoryResolverConfig(interface, list(current))
            logger.info("Dry run: DNS changes are simulated in memory")

        prober = create_prober(
            count=count,
            timeout=timeout,
            retries=retries,
            mode=LatencyMode(latency_mode),
        )
        runner = OptimizerRunner(
            candidates=candidates,
            resolver_config=resolver_config,
            prober=prober,
            applier=ConfigurationApplier(
                resolver_config,
                settle_delay=0.0 if dry_run else settle_delay,
            ),
            parallel=parallel,
        )

        progress_ctx, progress_callback = None, None
        if not quiet and not json:
            progress_ctx, progress_callback = create_progress_callback(err_console)
        try:
            return await runner.run(progress_callback=progress_callback)
        finally:
            if progress_ctx:
                progress_ctx.stop()

    logger.info("=== DNS Optimization Tool ===")
    try:
        report = asyncio.run(run_optimizer())
    except OptimizerError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if json:
        click.echo(JSONOutput.format(report))
    elif use_rich:
        RichConsoleOutput.print(report)
    else:
        ConsoleOutput.print(report)

    if output:
        path = Path(output)
        if path.suffix.lower() == ".csv":
            CSVOutput.save(report, path)
        else:
            if path.suffix.lower() != ".json":
                path = path.with_suffix(".json")
            JSONOutput.save(report, path)
        if not quiet and not json:
            click.echo(f"Results saved to {path}")

    if not report.succeeded:
        stage = report.failed_stage.value if report.failed_stage else "unknown"
        click.echo(f"Error during {stage}: {report.error}", err=True)
        sys.exit(1)


@main.command()
def list_available():
    """List all built-in DNS resolvers."""
    console = Console()
    table = Table(
        title="Available DNS Resolvers",
        box=box.ROUNDED,
        header_style="bold cyan",
    )

    table.add_column("Key", style="green")
    table.add_column("Name")
    table.add_column("IP", style="cyan", no_wrap=True)
    table.add_column("Description")

    for key, candidate in RESOLVERS.items():
        table.add_row(key, candidate.name, candidate.address, candidate.description or "")

    console.print(table)


@main.command()
@click.option(
    "--interface", "-i",
    default=settings.interface,
    show_default=True,
    help="Network interface to inspect",
)
def info(interface: str):
    """Show the current DNS configuration."""
    click.echo(f"Platform: {get_platform()}")
    click.echo(f"Elevated: {check_elevated_privileges()}")
    click.echo(f"Interface: {interface}")
    click.echo()

    try:
        resolver_config = create_resolver_config(interface, command_timeout=settings.command_timeout_s)
        state = asyncio.run(resolver_config.read())
    except OptimizerError as e:
        click.echo(f"Could not read DNS configuration: {e}", err=True)
        sys.exit(1)

    click.echo("Current DNS servers:")
    if state.is_automatic:
        click.echo("  • Automatic (DHCP)")
    for address in state:
        click.echo(f"  • {address}")


if __name__ == "__main__":
    main()
