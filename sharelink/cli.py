"""sharelink CLI — the main entry point."""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from sharelink import __version__
from sharelink.errors import ConfigurationError
from sharelink.models.targets import OutcomeKind, ReconciliationOutcome, RunReport

console = Console()


def _configure_logging(verbose: bool) -> None:
    root = logging.getLogger("sharelink")
    root.handlers.clear()
    root.addHandler(
        RichHandler(console=Console(stderr=True), show_path=verbose, show_time=False)
    )
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.option("--config", "config_path", default=None, type=click.Path(dir_okay=False),
              help="Config file (default: ~/.config/sharelink/config.yaml)")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool):
    """sharelink — point every consumer tool at one shared directory.

    Run without a command to link everything. Existing symlinks are left
    alone; real directories are moved aside to <path>.backup first.
    """
    from sharelink.config.settings import load_settings

    _configure_logging(verbose)

    try:
        ctx.obj = load_settings(config_path)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/] {escape(str(e))}")
        ctx.exit(1)

    if ctx.invoked_subcommand is None:
        ctx.invoke(link)


# ── Link ─────────────────────────────────────────────────────────────


@main.command()
@click.pass_context
def link(ctx: click.Context):
    """Link every consumer target to the shared directory."""
    settings = ctx.obj
    report = _run(ctx, dry_run=False)

    console.print(f"\n[bold]{report.summary()}[/]")
    console.print(f"All consumers now use: [cyan]{escape(str(settings.shared_dir))}[/]")
    console.print("\nTo update from upstream:")
    for command in settings.upstream.commands(settings.shared_dir, settings.home):
        console.print(f"  {escape(command)}")


# ── Status ───────────────────────────────────────────────────────────


@main.command()
@click.pass_context
def status(ctx: click.Context):
    """Show what linking would do, without changing anything."""
    report = _run(ctx, dry_run=True)
    console.print(Panel(report.summary(), title="Status (nothing changed)"))


# ── Targets ──────────────────────────────────────────────────────────


@main.command()
@click.pass_context
def targets(ctx: click.Context):
    """List the configured consumer targets."""
    settings = ctx.obj

    source = str(settings.source) if settings.source else "built-in defaults"
    table = Table(title=f"Consumer targets ({escape(source)})")
    table.add_column("Label", style="cyan")
    table.add_column("Kind")
    table.add_column("Path")

    for target in settings.targets:
        table.add_row(escape(target.label), target.kind.value, escape(str(target.path)))

    console.print(table)
    console.print(f"Shared directory: {escape(str(settings.shared_dir))}")


# ── Helpers ──────────────────────────────────────────────────────────


def _run(ctx: click.Context, dry_run: bool) -> RunReport:
    from sharelink.reconcile.reconciler import LinkReconciler

    settings = ctx.obj
    console.print(
        f"\n[bold blue]sharelink[/] — Linking {escape(str(settings.shared_dir))} "
        f"to {len(settings.targets)} consumer target(s)\n"
    )

    reconciler = LinkReconciler(settings.shared_dir, dry_run=dry_run)
    try:
        report = reconciler.run(settings.targets)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/] {escape(str(e))}")
        ctx.exit(1)

    for outcome in report.outcomes:
        _print_outcome(outcome)
    return report


_MARKS = {
    OutcomeKind.ALREADY_LINKED: "[green]✓[/]",
    OutcomeKind.CREATED: "[green]✓[/]",
    OutcomeKind.BACKED_UP_AND_CREATED: "[cyan]→[/]",
    OutcomeKind.SKIPPED: "[yellow]⚠[/]",
}


def _print_outcome(outcome: ReconciliationOutcome) -> None:
    console.print(f"  {_MARKS[outcome.kind]} {escape(outcome.describe())}")
    if outcome.host_missing and outcome.target.install_hint:
        console.print(f"    {escape(outcome.target.install_hint)}")


if __name__ == "__main__":
    main()
