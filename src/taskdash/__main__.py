"""CLI entry point for taskdash."""

import shutil
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich.console import Console
from rich.markup import escape

from taskdash import __version__
from taskdash.config import Config, default_config, load_config, save_config
from taskdash.dashboard import ReplayOutcome, launch_dashboard, replay_dashboard
from taskdash.errors import StoreNotFoundError, TaskdashError
from taskdash.hook import HOOK_ARG_COUNT, HookEvent
from taskdash.tmux_manager import DryRunSurface, SurfaceService, TmuxSurface
from taskdash.xdg_paths import get_config_file_path, get_store_file_path

app = typer.Typer(
    name="taskdash",
    help="Taskwarrior dashboard in tmux, refreshed from the on-exit hook.",
    no_args_is_help=False,
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"taskdash {__version__}")
        raise typer.Exit()


def _make_surface(config: Config, dry_run: bool) -> SurfaceService:
    tmux = TmuxSurface(tmux_binary=config.tmux_binary)
    if not dry_run:
        return tmux
    # Real session state is read so previews reflect attach vs create
    running = shutil.which(config.tmux_binary) is not None and tmux.session_exists(config.session_name)
    existing = {config.session_name} if running else set()
    return DryRunSurface(existing_sessions=existing, tmux_binary=config.tmux_binary)


def _print_commands(surface: SurfaceService) -> None:
    console.print("[yellow]Commands that would be executed:[/]")
    for cmd in surface.commands:
        console.print(f"  {escape(cmd)}")


def _run_hook(event: HookEvent, config_path: Path | None, dry_run: bool, verbose: int) -> None:
    # Classify first so read-only task commands never touch config, tmux, or the store
    if not event.is_mutating:
        if verbose > 1:
            console.print(f"[dim]Ignoring non-mutating command: {escape(event.command)}[/]")
        return

    config = load_config(config_path)
    surface = _make_surface(config, dry_run)
    result = replay_dashboard(event, config, surface)

    if result.outcome == ReplayOutcome.NO_SESSION and verbose > 0:
        console.print(f"[dim]No '{escape(config.session_name)}' session running, nothing to refresh.[/]")
    elif result.outcome == ReplayOutcome.REPLAYED and verbose > 0:
        console.print(
            f"[green]Refreshed {len(result.sent)} pane(s)[/]"
            + (f" [dim]({len(result.suppressed)} skipped)[/]" if result.suppressed else "")
        )
    if dry_run:
        _print_commands(surface)


def _run_launch(config_path: Path | None, dry_run: bool, attach: bool, verbose: int, debug: bool) -> None:
    config = load_config(config_path)
    if debug or verbose > 1:
        console.print(f"[dim]Config file: {config_path or get_config_file_path()}[/]")
        console.print(f"[dim]Session: {escape(config.session_name)}:{escape(config.window_name)}[/]")
        console.print(f"[dim]Pane store: {get_store_file_path()}[/]")

    surface = _make_surface(config, dry_run)
    result = launch_dashboard(config, surface, attach=attach, persist=not dry_run)

    if verbose > 0 or dry_run:
        if result.created:
            console.print(f"[green]Created dashboard:[/] {escape(config.session_name)} ({len(result.pane_map)} panes)")
        else:
            console.print(f"[blue]Dashboard already running:[/] {escape(config.session_name)}")
    if debug:
        for pane_id, command in result.pane_map.items():
            console.print(f"[dim]  {pane_id} -> {escape(command)}[/]")
    if dry_run:
        _print_commands(surface)


@app.command()
def main(
    hook_args: Annotated[
        list[str] | None,
        typer.Argument(help="Taskwarrior hook arguments (api: args: command: rc: data: version:).", show_default=False),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-C", help="Config file path."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Preview tmux commands without executing."),
    ] = False,
    no_attach: Annotated[
        bool,
        typer.Option("--no-attach", help="Create the dashboard without attaching to it."),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", "-D", help="Enable debug output."),
    ] = False,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity."),
    ] = 0,
    init_config: Annotated[
        bool,
        typer.Option("--init-config", help="Write a starter configuration file and exit."),
    ] = False,
    dump_config: Annotated[
        bool,
        typer.Option("--dump-config", help="Output current configuration."),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version."),
    ] = None,
) -> None:
    """Launch the dashboard, or refresh it when run as a Taskwarrior hook."""
    args = hook_args or []
    if args and len(args) != HOOK_ARG_COUNT:
        err_console.print(f"[red]Error:[/] Expected 0 or {HOOK_ARG_COUNT} arguments, got {len(args)}.")
        raise typer.Exit(2)

    try:
        if init_config:
            path = config_path or get_config_file_path()
            if path.exists():
                err_console.print(f"[yellow]Config file already exists:[/] {path}")
                raise typer.Exit(1)
            save_config(default_config(), path)
            console.print(f"[green]✓[/] Created config file: {path}")
            return

        if dump_config:
            config = load_config(config_path)
            console.print(escape(yaml.safe_dump(config.model_dump(), default_flow_style=False, sort_keys=False)))
            return

        if args:
            _run_hook(HookEvent.from_args(args), config_path, dry_run, verbose)
        else:
            _run_launch(config_path, dry_run, not no_attach, verbose, debug)
    except StoreNotFoundError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        err_console.print("[dim]Run taskdash once to create the dashboard.[/]")
        raise typer.Exit(1) from None
    except TaskdashError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1) from None


if __name__ == "__main__":
    app()
