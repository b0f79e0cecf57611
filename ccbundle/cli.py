"""Click-based CLI for ccbundle - configuration bundle installer for Claude Code."""

from __future__ import annotations

import functools
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Optional

import click
import yaml
from pydantic import ValidationError
from rich.markup import escape

from ccbundle import __version__
from ccbundle.backup import create_backup, list_backups, load_backup
from ccbundle.config import (
    BundleConfig,
    ensure_config_exists,
    get_config_path,
    load_or_default_config,
    validate_config_file,
)
from ccbundle.config.schema import Category, PeerTool
from ccbundle.errors import BundleError
from ccbundle.git import clone_or_update
from ccbundle.install import install_from_source, install_scripts_dependencies
from ccbundle.output import Console, create_console
from ccbundle.remote import GitHubClient
from ccbundle.symlink import ContentType, link_tools
from ccbundle.sync import (
    StateManager,
    SyncStatus,
    analyze_changes,
    apply_hooks,
    apply_items,
    select_changes,
)
from ccbundle.utils.paths import ensure_dir
from ccbundle.utils.platform import PlatformContext, detect_platform

logger = logging.getLogger(__name__)

_FOLDER_OPTION = click.option(
    "--folder",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Target directory (default: target.path from config)",
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _get_config(ctx: click.Context) -> BundleConfig:
    """Load the configuration once per invocation."""
    if ctx.obj.get("config") is None:
        ctx.obj["config"] = load_or_default_config(ctx.obj.get("config_path"))
    return ctx.obj["config"]


def _get_console(ctx: click.Context) -> Console:
    if ctx.obj.get("console") is None:
        config = _get_config(ctx)
        ctx.obj["console"] = create_console(
            verbose=ctx.obj.get("verbose") or config.output.verbose,
            colored=config.output.colored,
        )
    return ctx.obj["console"]


def _get_platform(ctx: click.Context) -> PlatformContext:
    """Detect the platform once and keep it on the context."""
    if ctx.obj.get("platform") is None:
        ctx.obj["platform"] = detect_platform()
    return ctx.obj["platform"]


def _make_client(ctx: click.Context, config: BundleConfig) -> GitHubClient:
    factory = ctx.obj.get("client_factory") or GitHubClient.from_config
    return factory(config.remote, ignore=config.target.ignore_set)


def _target_dir(config: BundleConfig, folder: Optional[Path]) -> Path:
    return folder.expanduser() if folder else config.target_dir


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Turn ccbundle and config errors into a red message and exit code 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (BundleError, ValidationError, yaml.YAMLError, OSError) as e:
            ctx = click.get_current_context()
            console = ctx.obj.get("console") or create_console(colored=False)
            console.print_error(escape(str(e)))
            logger.debug("Command failed", exc_info=True)
            sys.exit(1)

    return wrapper


@click.group()
@click.version_option(version=__version__, prog_name="ccbundle")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Configuration file (default: ~/.config/ccbundle/config.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output and debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool) -> None:
    """ccbundle - install and sync Claude Code configuration bundles.

    Downloads commands, agents, skills, scripts and hooks from a GitHub
    repository into ~/.claude and keeps them up to date.

    \b
    Categories: commands/ agents/ skills/ scripts/
    Hooks:      settings.json (merged, never replaced)
    """
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


# ============================================================================
# Sync Commands
# ============================================================================


@cli.command()
@_FOLDER_OPTION
@click.option("--delete", "include_deleted", is_flag=True, help="Also remove files that no longer exist upstream")
@click.option(
    "--select",
    "patterns",
    multiple=True,
    metavar="PATTERN",
    help="Only apply changes matching PATTERN, e.g. 'skills/foo' or 'settings.json:*' (repeatable)",
)
@click.option("--yes", "-y", is_flag=True, help="Apply without asking for confirmation")
@click.option("--dry-run", "-n", is_flag=True, help="Preview changes without applying")
@click.pass_context
@handle_errors
def sync(
    ctx: click.Context,
    folder: Optional[Path],
    include_deleted: bool,
    patterns: tuple[str, ...],
    yes: bool,
    dry_run: bool,
) -> None:
    """Update the target tree from the remote bundle.

    Compares every file by content hash and only downloads what changed.
    Hooks from the bundle's settings.json are merged into the local one.

    \b
    Modes:
      default        new and modified files and hooks
      --delete       also remove local files absent upstream
      --select PAT   only changes matching PAT
    """
    config = _get_config(ctx)
    console = _get_console(ctx)
    platform = _get_platform(ctx)
    target = _target_dir(config, folder)
    tool_dir = config.target.tool_dir
    state_manager = StateManager(target)

    with _make_client(ctx, config) as client:
        console.print_info(f"Comparing {config.remote.repository} with {target}")
        analysis = analyze_changes(
            client,
            target,
            platform,
            categories=config.target.categories,
            ignore=config.target.ignore_set,
            tool_dir=tool_dir,
            state=state_manager.state,
        )
        console.print_analysis(analysis)

        if not analysis.has_changes:
            console.print_success("Everything is up to date")
            return

        selection = select_changes(analysis, include_deleted=include_deleted, patterns=list(patterns) or None)
        if selection.is_empty:
            console.print_info("No changes selected")
            return

        if dry_run:
            console.print_info(f"Dry run: {selection.count} change(s) would be applied")
            return

        if not yes and not console.confirm(f"Apply {selection.count} change(s) to {target}?"):
            console.print("Cancelled")
            return

        if config.backup.enabled:
            backup_path = create_backup(target, config.backup_root)
            if backup_path:
                console.print_info(f"Backup created: {backup_path}")

        result = apply_items(
            client,
            target,
            selection.items,
            platform,
            tool_dir=tool_dir,
            on_progress=console.print_progress,
            state=state_manager.state,
        )
        state_manager.save()
        result += apply_hooks(
            target,
            selection.hooks,
            platform,
            tool_dir=tool_dir,
            on_progress=console.print_progress,
        )

    scripts_changed = any(
        item.category == Category.SCRIPTS and item.status != SyncStatus.DELETED for item in selection.items
    )
    if scripts_changed:
        console.print_dependency_results(
            install_scripts_dependencies(target, timeout=config.cache.install_timeout)
        )

    console.print_apply_result(result)
    if not result.ok:
        sys.exit(1)


@cli.command()
@_FOLDER_OPTION
@click.pass_context
@handle_errors
def status(ctx: click.Context, folder: Optional[Path]) -> None:
    """Show what a sync would change, without changing anything."""
    config = _get_config(ctx)
    console = _get_console(ctx)
    target = _target_dir(config, folder)

    with _make_client(ctx, config) as client:
        analysis = analyze_changes(
            client,
            target,
            _get_platform(ctx),
            categories=config.target.categories,
            ignore=config.target.ignore_set,
            tool_dir=config.target.tool_dir,
            state=StateManager(target).state,
        )

    console.print_analysis(analysis)
    if not analysis.has_changes:
        console.print_success("Everything is up to date")


@cli.command()
@_FOLDER_OPTION
@click.option("--skip-hooks", is_flag=True, help="Do not merge hooks into settings.json")
@click.option("--skip-dependencies", is_flag=True, help="Do not install script dependencies")
@click.option("--force-statusline", is_flag=True, help="Replace an existing statusLine")
@click.pass_context
@handle_errors
def setup(
    ctx: click.Context,
    folder: Optional[Path],
    skip_hooks: bool,
    skip_dependencies: bool,
    force_statusline: bool,
) -> None:
    """Install the full bundle from a cached clone of the repository."""
    config = _get_config(ctx)
    console = _get_console(ctx)
    platform = _get_platform(ctx)
    target = _target_dir(config, folder)

    cache_dir = Path(config.cache.dir) / config.remote.repository.replace("/", "__")
    console.print_info(f"Fetching {config.remote.clone_url}")
    checkout = clone_or_update(
        config.remote.clone_url,
        cache_dir,
        branch=config.remote.branch,
        timeout=config.cache.git_timeout,
    )
    source_dir = checkout / config.remote.base_path if config.remote.base_path else checkout

    if config.backup.enabled:
        backup_path = create_backup(target, config.backup_root)
        if backup_path:
            console.print_info(f"Backup created: {backup_path}")

    ensure_dir(target)
    state_manager = StateManager(target)
    result = install_from_source(
        source_dir,
        target,
        platform,
        categories=config.target.categories,
        include_hooks=not skip_hooks,
        force_status_line=force_statusline,
        ignore=config.target.ignore_set,
        tool_dir=config.target.tool_dir,
        state=state_manager.state,
    )
    state_manager.save()
    console.print_install_result(result)

    if not skip_dependencies:
        console.print_dependency_results(install_scripts_dependencies(target, timeout=config.cache.install_timeout))

    console.print_success(f"Installed {result.total_files} files into {target}")


# ============================================================================
# Backup Commands
# ============================================================================


@cli.group()
def backup() -> None:
    """Create, list and restore backups of the target tree.

    \b
    Backed up: commands/ agents/ skills/ scripts/ song/ settings.json
    """
    pass


@backup.command("create")
@_FOLDER_OPTION
@click.pass_context
@handle_errors
def backup_create(ctx: click.Context, folder: Optional[Path]) -> None:
    """Snapshot the target tree now."""
    config = _get_config(ctx)
    console = _get_console(ctx)
    target = _target_dir(config, folder)

    backup_path = create_backup(target, config.backup_root)
    if backup_path is None:
        console.print_warning(f"Nothing to back up in {target}")
        return
    console.print_success(f"Backup created: {backup_path}")


@backup.command("list")
@click.pass_context
@handle_errors
def backup_list(ctx: click.Context) -> None:
    """List available backups, newest first."""
    config = _get_config(ctx)
    _get_console(ctx).print_backups(list_backups(config.backup_root))


@backup.command("load")
@click.argument("name", required=False)
@_FOLDER_OPTION
@click.option("--yes", "-y", is_flag=True, help="Restore without asking for confirmation")
@click.pass_context
@handle_errors
def backup_load(ctx: click.Context, name: Optional[str], folder: Optional[Path], yes: bool) -> None:
    """Restore a backup (the newest one when NAME is omitted).

    The current state is backed up first.
    """
    config = _get_config(ctx)
    console = _get_console(ctx)
    target = _target_dir(config, folder)

    backups = list_backups(config.backup_root)
    if not backups:
        raise BundleError(f"No backups found in {config.backup_root}")

    if name is None:
        selected = backups[0]
    else:
        selected = next((b for b in backups if b.name == name), None)
        if selected is None:
            raise BundleError(f"Backup not found: {name}")

    if not yes and not console.confirm(f"Restore {selected.name} into {target}?"):
        console.print("Cancelled")
        return

    current = create_backup(target, config.backup_root)
    if current is not None:
        console.print_info(f"Current state saved to {current}")

    restored = load_backup(selected.path, target)
    console.print_success(f"Restored {', '.join(restored) or 'nothing'} from {selected.name}")


# ============================================================================
# Peer Tool Commands
# ============================================================================


@cli.command()
@click.option(
    "--from",
    "source",
    type=click.Choice([t.value for t in PeerTool]),
    default=PeerTool.CLAUDE_CODE.value,
    show_default=True,
    help="Tool that owns the content",
)
@click.option(
    "--to",
    "destinations",
    type=click.Choice([t.value for t in PeerTool]),
    multiple=True,
    required=True,
    help="Tool receiving the links (repeatable)",
)
@click.option(
    "--content",
    type=click.Choice([c.value for c in ContentType]),
    default=ContentType.COMMANDS.value,
    show_default=True,
    help="What to link",
)
@click.pass_context
@handle_errors
def symlink(ctx: click.Context, source: str, destinations: tuple[str, ...], content: str) -> None:
    """Share commands and agents with Codex, OpenCode or FactoryAI.

    \b
    Codex:     ~/.codex/prompts            (commands)
    OpenCode:  ~/.config/opencode/command  (commands)
    FactoryAI: ~/.factory/commands, droids (commands, agents)
    """
    config = _get_config(ctx)
    console = _get_console(ctx)

    custom_folders = {
        PeerTool.CLAUDE_CODE: config.target.path,
        PeerTool.CODEX: config.peers.codex,
        PeerTool.OPENCODE: config.peers.opencode,
        PeerTool.FACTORYAI: config.peers.factoryai,
    }
    results = link_tools(
        PeerTool(source),
        [PeerTool(d) for d in destinations],
        ContentType(content),
        custom_folders=custom_folders,
        home=_get_platform(ctx).home,
    )
    if not results:
        console.print_warning("No compatible destinations for the selected content")
        return
    console.print_link_results(results)


# ============================================================================
# Configuration Commands
# ============================================================================


@cli.group()
def config() -> None:
    """Manage the ccbundle configuration file."""
    pass


@config.command("init")
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing configuration")
@click.pass_context
def config_init(ctx: click.Context, force: bool) -> None:
    """Create a configuration file with default values."""
    console = create_console()
    path = ctx.obj.get("config_path") or get_config_path()

    if force and path.exists():
        path.unlink()

    path, created = ensure_config_exists(path)
    if created:
        console.print_success(f"Configuration created: {path}")
    else:
        console.print_warning(f"Configuration already exists: {path} (use --force to overwrite)")


@config.command("show")
@click.pass_context
@handle_errors
def config_show(ctx: click.Context) -> None:
    """Show the effective configuration."""
    config = _get_config(ctx)
    console = _get_console(ctx)

    data = config.model_dump(mode="json")
    if data["remote"].get("token"):
        data["remote"]["token"] = "***"

    console.print_config_summary(ctx.obj.get("config_path") or get_config_path(), config.remote.repository, config.target_dir)
    console.print(yaml.dump(data, default_flow_style=False, sort_keys=False), markup=False)


@config.command("validate")
@click.pass_context
def config_validate(ctx: click.Context) -> None:
    """Validate the configuration file."""
    console = create_console()
    path = ctx.obj.get("config_path") or get_config_path()

    ok, errors = validate_config_file(path)
    if ok:
        console.print_success(f"Configuration is valid: {path}")
        return

    console.print_error(f"Invalid configuration: {path}")
    for error in errors:
        console.print(f"  [red]✗[/red] {escape(error)}")
    sys.exit(1)


@config.command("path")
@click.pass_context
def config_path_cmd(ctx: click.Context) -> None:
    """Print the configuration file path."""
    click.echo(str(ctx.obj.get("config_path") or get_config_path()))


if __name__ == "__main__":
    cli()
