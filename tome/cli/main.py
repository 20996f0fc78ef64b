"""Main CLI entry point for tome."""
import logging
import sys
from io import StringIO
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from tome import __version__


CONFIG_TEMPLATE = """# tome configuration
# Skills are discovered from sources, linked into the library,
# then distributed to every enabled target.

# Where the consolidated skill library lives
library_dir: ~/.local/share/tome/skills

# Skills to leave out, by name
exclude: []

# Skill sources; earlier sources win when two provide the same skill
sources:
  # - name: plugins
  #   path: ~/.claude/plugins/cache
  #   type: claude-plugins
  # - name: standalone
  #   path: ~/.claude/skills
  #   type: directory

# Distribution targets
targets:
  # claude:
  #   enabled: true
  #   method: symlink
  #   skills_dir: ~/.claude/skills
  # codex:
  #   enabled: true
  #   method: mcp
  #   mcp_config: ~/.codex/.mcp.json
"""


def _configure_logging(verbose: bool, quiet: bool) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
    )
    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)


def _error(message: str) -> None:
    click.echo(click.style("Error: ", fg="red", bold=True) + message)


def _load_config(ctx: click.Context):
    """Load and validate the configuration selected on the command line."""
    from tome.core.config import load_config_or_default
    from tome.core.errors import TomeError

    try:
        config = load_config_or_default(ctx.obj["config_path"])
        config.validate()
    except TomeError as e:
        _error(str(e))
        raise click.Abort()
    return config


def _format_counts(result, created_label: str = "created") -> str:
    line = (
        f"{click.style(str(result.created), fg='cyan')} {created_label}, "
        f"{result.unchanged} unchanged, {result.updated} updated"
    )
    if result.skipped:
        line += f", {click.style(str(result.skipped), fg='yellow')} skipped (path conflict)"
    return line


@click.group()
@click.version_option(version=__version__)
@click.option(
    '--config', 'config_path',
    type=click.Path(path_type=Path),
    help='Path to config file (default: ~/.config/tome/config.yaml)'
)
@click.option('--dry-run', is_flag=True, help='Preview changes without modifying filesystem')
@click.option('--verbose', '-v', is_flag=True, help='Detailed output')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[Path],
    dry_run: bool,
    verbose: bool,
    quiet: bool,
) -> None:
    """tome - Sync AI coding skills across tools

    \b
    Examples:
      tome init
      tome sync --dry-run
      tome status
      tome list
      tome doctor
    """
    ctx.ensure_object(dict)
    ctx.obj.update(
        config_path=config_path,
        dry_run=dry_run,
        verbose=verbose,
        quiet=quiet,
    )
    _configure_logging(verbose, quiet)


@cli.command()
def version() -> None:
    """Show tome version."""
    click.echo(f"tome version {__version__}")


@cli.command()
@click.option('--force', is_flag=True, help='Overwrite existing config file')
@click.pass_context
def init(ctx: click.Context, force: bool) -> None:
    """Create a config file to edit."""
    from tome.core.config import default_config_path, expand_tilde

    config_path = ctx.obj["config_path"]
    config_path = expand_tilde(config_path) if config_path else default_config_path()

    if config_path.exists() and not force:
        _error(f"{config_path} already exists. Use --force to overwrite.")
        raise click.Abort()

    if ctx.obj["dry_run"]:
        click.echo(f"[dry-run] Would create {config_path}")
        return

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(CONFIG_TEMPLATE)

    click.echo(
        click.style("✓ ", fg="green") +
        f"Created {config_path}"
    )
    click.echo("  Edit this file to add sources and targets, then run: tome sync")


@cli.command()
@click.option('--force', is_flag=True, help='Recreate links even if already correct')
@click.pass_context
def sync(ctx: click.Context, force: bool) -> None:
    """Discover, consolidate, and distribute skills."""
    from tome.core.errors import TomeError
    from tome.core.pipeline import sync as run_sync

    config = _load_config(ctx)
    dry_run = ctx.obj["dry_run"]
    quiet = ctx.obj["quiet"]

    if dry_run and not quiet:
        click.echo(click.style("[dry-run] No changes will be made", fg="yellow", bold=True))

    try:
        report = run_sync(config, dry_run=dry_run, force=force)
    except TomeError as e:
        _error(str(e))
        raise click.Abort()

    if not report.skills:
        if not quiet:
            click.echo("No skills found. Run `tome init` to configure sources.")
        return

    if not quiet:
        click.echo(click.style("Sync complete", fg="green", bold=True))
        click.echo(f"  Library: {_format_counts(report.library)}")

        for name, result in report.targets.items():
            label = click.style(name, bold=True)
            if result.disabled:
                click.echo(f"  {label}: disabled")
            elif not result.ok:
                click.echo(f"  {label}: " + click.style(f"failed - {result.error}", fg="red"))
            else:
                click.echo(f"  {label}: {_format_counts(result, 'linked')}")

        if report.library_cleanup.removed:
            click.echo(
                f"  Cleaned {click.style(str(report.library_cleanup.removed), fg='yellow')}"
                " stale link(s)"
            )
        if report.removed_from_targets:
            click.echo(
                f"  Cleaned {click.style(str(report.removed_from_targets), fg='yellow')}"
                " stale target link(s)"
            )

    if report.failed_targets:
        sys.exit(1)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show current state of skills, symlinks, and targets."""
    from tome.core.status import gather_status

    config = _load_config(ctx)
    report = gather_status(config)

    click.echo(click.style("Library: ", bold=True) + str(report.library_dir))
    if report.library_count is None:
        click.echo(click.style("  ? ", fg="yellow") + f"could not read library: {report.library_error}")
    else:
        click.echo(f"  {click.style(str(report.library_count), fg='cyan')} skills consolidated")
    click.echo()

    click.echo(click.style("Sources:", bold=True))
    if not report.sources:
        click.echo("  (none configured)")
    for source in report.sources:
        click.echo(
            f"  {source.name:<20} {source.kind.value:<15} "
            f"{click.style(str(source.skill_count), fg='cyan')} skills  "
            f"{click.style(str(source.path), dim=True)}"
        )
    click.echo()

    click.echo(click.style("Targets:", bold=True))
    if not report.targets:
        click.echo("  (none configured)")
    for target in report.targets:
        state = (
            click.style("enabled", fg="green") if target.enabled
            else click.style("disabled", dim=True)
        )
        click.echo(
            f"  {target.name:<20} {state}  {target.method.value:<8} "
            f"{click.style(str(target.location), dim=True)}"
        )


@cli.command(name="list")
@click.pass_context
def list_skills(ctx: click.Context) -> None:
    """List all discovered skills with their sources."""
    from tome.core.discovery import discover_all

    config = _load_config(ctx)
    skills, _ = discover_all(config.sources, config.exclude)

    if ctx.obj["quiet"]:
        return

    if not skills:
        click.echo("No skills found. Run `tome init` to configure sources.")
        return

    table = Table(box=None)
    table.add_column("SKILL", style="cyan", no_wrap=True)
    table.add_column("SOURCE", style="magenta")
    table.add_column("PATH", style="white")
    for skill in skills:
        table.add_row(skill.name, skill.source_name, str(skill.origin_path))

    console = Console(file=StringIO(), width=200)
    console.print(table)
    click.echo(console.file.getvalue().rstrip("\n"))
    click.echo()
    click.echo(f"{len(skills)} skill(s) total")


cli.add_command(list_skills, name="ls")


@cli.command()
@click.option('--yes', '-y', is_flag=True, help='Repair without asking')
@click.pass_context
def doctor(ctx: click.Context, yes: bool) -> None:
    """Diagnose and repair broken symlinks or config issues."""
    from tome.core.doctor import diagnose, doctor as run_doctor
    from tome.core.errors import TomeError

    config = _load_config(ctx)
    dry_run = ctx.obj["dry_run"]

    try:
        diagnosis = diagnose(config)
    except TomeError as e:
        _error(str(e))
        raise click.Abort()

    if not diagnosis.configured:
        click.echo("tome is not configured yet. Run `tome init` to get started.")
        return

    sections = [
        ("Checking library...", ("missing_library", "broken_link")),
        ("Checking targets...", ("missing_target_dir", "stale_link")),
        ("Checking config...", ("missing_source",)),
    ]
    for title, kinds in sections:
        click.echo(click.style(title, bold=True))
        issues = [issue for issue in diagnosis.issues if issue.kind in kinds]
        if not issues:
            click.echo(click.style("  ok ", fg="green") + "no issues")
        for issue in issues:
            prefix = f"{issue.target_name}: " if issue.target_name else ""
            click.echo(click.style("  x ", fg="red") + prefix + issue.message)

    click.echo()
    if diagnosis.healthy:
        click.echo(click.style("No issues found.", fg="green", bold=True))
        return

    click.echo(click.style(f"Found {len(diagnosis.issues)} issue(s).", fg="yellow", bold=True))

    if dry_run:
        click.echo("  (dry run - no changes made)")
        return

    if not yes and not click.confirm("Repair these issues?", default=True):
        return

    click.echo()
    click.echo(click.style("Repairing...", bold=True))
    try:
        repaired = run_doctor(config, dry_run=False, repair=True)
    except TomeError as e:
        _error(str(e))
        raise click.Abort()

    if repaired.library_cleanup and repaired.library_cleanup.removed:
        click.echo(
            click.style("  fixed ", fg="green") +
            f"Removed {repaired.library_cleanup.removed} broken symlink(s) from library"
        )
    for name, result in repaired.target_cleanups.items():
        if result.removed:
            click.echo(
                click.style("  fixed ", fg="green") +
                f"Removed {result.removed} stale symlink(s) from {name}"
            )

    remaining = len(repaired.issues)
    if remaining:
        click.echo(f"{remaining} issue(s) need manual attention.")


@cli.command()
@click.pass_context
def serve(ctx: click.Context) -> None:
    """Start the MCP server on stdio."""
    from tome.mcp.server import serve as run_server

    config = _load_config(ctx)
    run_server(config)


@cli.command(name="config")
@click.option('--path', 'path_only', is_flag=True, help='Print config file path only')
@click.pass_context
def show_config(ctx: click.Context, path_only: bool) -> None:
    """Show configuration."""
    import yaml
    from tome.core.config import default_config_path, expand_tilde

    if path_only:
        config_path = ctx.obj["config_path"]
        click.echo(str(expand_tilde(config_path) if config_path else default_config_path()))
        return

    config = _load_config(ctx)
    click.echo(yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False))


if __name__ == "__main__":
    cli()
