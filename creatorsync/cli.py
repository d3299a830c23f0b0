"""
CreatorSync Command Line
========================

Usage:
    creatorsync --help                          # Show all commands
    creatorsync check-config                    # Validate configuration
    creatorsync sync                            # Sync the target in the current directory
    creatorsync sync-all                        # Sweep every target under the targets directory
    creatorsync discover-feed https://blog.example.com
    creatorsync update-manifest                 # Regenerate creators/manifest.json
"""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from .config.settings import CreatorSyncSettings, load_settings
from .fleet.manifest import write_manifest
from .fleet.orchestrator import FleetOrchestrator, TargetState
from .fleet.runner import InProcessRunner, SubprocessRunner
from .ingestion.feed_discovery import FeedDiscoverer, get_feed_candidates, is_substack_url
from .ingestion.sync import sync_target
from .utils.exceptions import ConfigurationError, CreatorSyncError
from .utils.logging import configure_application_logging

console = Console()


def _init_settings(debug: bool = False) -> CreatorSyncSettings:
    """Load settings and configure logging, exiting on configuration errors."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    if debug:
        settings = settings.model_copy(update={"debug": True})

    configure_application_logging(
        log_level=settings.get_effective_log_level(),
        log_file=settings.logging.file_path,
        enable_console=settings.logging.console_logging,
        structured_logging=settings.logging.structured_logging,
    )
    return settings


def _settings_from_context(ctx: click.Context) -> CreatorSyncSettings:
    root = ctx.find_root()
    if isinstance(root.obj, dict) and "settings" in root.obj:
        return root.obj["settings"]
    # invoked standalone (python -m creatorsync.ingestion)
    return _init_settings()


@click.group(invoke_without_command=True)
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, debug):
    """CreatorSync - keep per-creator post archives in sync with their feeds."""
    ctx.ensure_object(dict)
    ctx.obj['settings'] = _init_settings(debug)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.option('--root', type=click.Path(file_okay=False, path_type=Path), default='.',
              help='Target directory holding creator.json (default: current directory)')
@click.pass_context
def sync(ctx, root):
    """Sync one target's posts from its feeds and archive."""
    settings = _settings_from_context(ctx)

    try:
        result = sync_target(root, settings)
    except ConfigurationError as e:
        click.echo(e.message, err=True)
        sys.exit(1)
    except CreatorSyncError as e:
        click.echo(f"Sync failed: {e}", err=True)
        sys.exit(1)

    # last stdout line is what the fleet sweep reports
    click.echo(result.summary())


@cli.command(name='sync-all')
@click.option('--root', type=click.Path(file_okay=False, path_type=Path), help='Index repository root')
@click.option('--targets-dir', type=click.Path(file_okay=False, path_type=Path),
              help='Directory with one sub-directory per target')
@click.option('--delay', type=float, help='Seconds between target invocations (default: 3)')
@click.option('--rounds', type=int, help='Sweep rounds including the first (default: 2)')
@click.option('--in-process', is_flag=True, help='Run targets in this process instead of subprocesses')
@click.pass_context
def sync_all(ctx, root, targets_dir, delay, rounds, in_process):
    """Sync every target, retrying failures."""
    settings = _settings_from_context(ctx).with_overrides(
        root_dir=root, targets_dir=targets_dir, delay_seconds=delay, retry_rounds=rounds
    )
    runner = InProcessRunner(settings) if in_process else SubprocessRunner(settings)

    console.print(f"[bold blue]Syncing targets under {settings.paths.resolve_targets_dir()}[/bold blue]")
    try:
        result = FleetOrchestrator(settings, runner=runner).run()
    except CreatorSyncError as e:
        console.print(f"[bold red]Sweep error: {e}[/bold red]")
        sys.exit(1)

    if not result.targets:
        console.print("[yellow]No targets (creator.json + entry point) found[/yellow]")
        return

    table = Table(title="Sync Results")
    table.add_column("Target", style="cyan")
    table.add_column("Status")
    table.add_column("Details")
    for name in result.targets:
        if result.states.get(name) == TargetState.SUCCEEDED:
            table.add_row(name, "[green]ok[/green]", result.outputs.get(name, ""))
        else:
            table.add_row(name, "[red]failed[/red]", result.failures[name].error_snippet)
    console.print(table)

    summary = f"Done: {len(result.succeeded)} ok, {len(result.failed)} failed"
    if result.manifest_path:
        console.print(f"[bold yellow]{summary}; see {result.manifest_path}[/bold yellow]")
    else:
        console.print(f"[bold green]{summary}[/bold green]")


@cli.command(name='discover-feed')
@click.argument('blog_url')
@click.option('--offline', is_flag=True, help='List candidate feed URLs without network access')
@click.pass_context
def discover_feed(ctx, blog_url, offline):
    """Find the RSS/Atom feed of a blog."""
    candidates = get_feed_candidates(blog_url)
    if not candidates:
        console.print(f"[bold red]Not a usable URL: {blog_url}[/bold red]")
        sys.exit(1)

    if offline:
        for candidate in candidates:
            click.echo(candidate)
        return

    settings = _settings_from_context(ctx)
    with FeedDiscoverer(settings.http) as discoverer:
        feed_url = discoverer.resolve(blog_url)
    kind = "Substack" if is_substack_url(blog_url) else "custom domain"
    console.print(f"[cyan]{kind}[/cyan] feed: [bold]{feed_url}[/bold]")


@cli.command(name='update-manifest')
@click.option('--root', type=click.Path(file_okay=False, path_type=Path), help='Index repository root')
@click.option('--targets-dir', type=click.Path(file_okay=False, path_type=Path),
              help='Directory with one sub-directory per target')
@click.option('--output', type=click.Path(dir_okay=False, path_type=Path), help='Manifest file to write')
@click.pass_context
def update_manifest(ctx, root, targets_dir, output):
    """Regenerate the creators manifest from the targets."""
    settings = _settings_from_context(ctx).with_overrides(root_dir=root, targets_dir=targets_dir)
    path = output or settings.paths.resolve_creators_manifest()

    try:
        entries = write_manifest(
            settings.paths.resolve_targets_dir(),
            path,
            config_filename=settings.fleet.config_filename,
            metadata_dir=settings.storage.metadata_dir,
            posts_dir=settings.storage.posts_dir,
        )
    except CreatorSyncError as e:
        console.print(f"[bold red]{e}[/bold red]")
        sys.exit(1)

    console.print(f"[green]Wrote {len(entries)} creator(s) to {path}[/green]")


@cli.command(name='check-config')
@click.pass_context
def check_config(ctx):
    """Show the effective configuration."""
    settings = _settings_from_context(ctx)

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    targets_dir = settings.paths.resolve_targets_dir()
    rows = [
        ("Root directory", str(settings.paths.root_dir)),
        ("Targets directory", f"{targets_dir}{'' if targets_dir.is_dir() else ' (missing)'}"),
        ("Failure manifest", str(settings.paths.resolve_failure_manifest())),
        ("Delay between targets", f"{settings.fleet.delay_seconds}s"),
        ("Sweep rounds", str(settings.fleet.retry_rounds)),
        ("Entry point", settings.fleet.entry_point),
        ("Request timeout", f"{settings.http.request_timeout}s"),
        ("Log level", settings.get_effective_log_level()),
    ]
    for name, value in rows:
        table.add_row(name, value)

    console.print(table)
    console.print("[bold green]Configuration is valid[/bold green]")


def main(argv: Optional[list] = None) -> None:
    try:
        cli(args=argv)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
