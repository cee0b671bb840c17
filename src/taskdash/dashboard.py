"""Dashboard launch and hook-triggered replay."""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from taskdash.commands import MarkedCommand, sanitize_command
from taskdash.config import Config
from taskdash.hook import HookEvent
from taskdash.layouts import PaneCommandMap, SplitContext, split_pane_tree
from taskdash.pane_store import load_pane_commands, save_pane_commands
from taskdash.tmux_manager import SurfaceService
from taskdash.utils import terminal_size


class ReplayOutcome(StrEnum):
    """How a hook invocation ended."""

    SKIPPED_COMMAND = "skipped-command"  # command does not modify tasks
    NO_SESSION = "no-session"  # dashboard is not running
    REPLAYED = "replayed"


@dataclass
class LaunchResult:
    """Result of launching (or re-attaching to) the dashboard."""

    created: bool
    pivot_pane_id: str = ""
    pane_map: PaneCommandMap = field(default_factory=dict)


@dataclass
class ReplayResult:
    """Result of a hook-triggered replay."""

    outcome: ReplayOutcome
    sent: list[str] = field(default_factory=list)
    suppressed: list[str] = field(default_factory=list)


def launch_dashboard(
    config: Config,
    surface: SurfaceService,
    store_path: Path | None = None,
    attach: bool = True,
    persist: bool = True,
) -> LaunchResult:
    """Create the dashboard session, lay out panes, start their commands.

    If the session already exists nothing is created; we only attach.

    Args:
        config: Loaded configuration.
        surface: Surface service to drive.
        store_path: Optional pane store path. Uses default if None.
        attach: Attach to the session when done.
        persist: Save the pane-command map for later replays.

    Returns:
        LaunchResult describing what was created.
    """
    if surface.session_exists(config.session_name):
        if attach:
            surface.attach(config.session_name)
        return LaunchResult(created=False)

    # Validate before the first tmux mutation
    tree = config.layout_tree()

    width, height = terminal_size(config.width, config.height)
    pivot = surface.create_session(
        config.session_name,
        config.window_name,
        width,
        height,
        config.startup_command,
    )

    ctx = SplitContext(session_name=config.session_name, window_name=config.window_name, surface=surface)
    pane_map = split_pane_tree(ctx, tree, pivot)

    for pane_id, raw in pane_map.items():
        marked = MarkedCommand.parse(raw)
        if marked.select_on_create:
            surface.focus(pane_id)
        surface.send_text(pane_id, sanitize_command(marked.command, config.task_binary))

    # Persist the raw strings so replay re-checks the markers
    if persist:
        save_pane_commands(pane_map, store_path)

    if attach:
        surface.attach(config.session_name)
    return LaunchResult(created=True, pivot_pane_id=pivot, pane_map=pane_map)


def replay_dashboard(
    event: HookEvent,
    config: Config,
    surface: SurfaceService,
    store_path: Path | None = None,
) -> ReplayResult:
    """Re-send stored pane commands after a mutating tracker command.

    Args:
        event: The decoded hook invocation.
        config: Loaded configuration.
        surface: Surface service to drive.
        store_path: Optional pane store path. Uses default if None.

    Returns:
        ReplayResult with the panes that were refreshed or skipped.

    Raises:
        StoreError: If the pane store is missing or unreadable.
    """
    if not event.is_mutating:
        return ReplayResult(outcome=ReplayOutcome.SKIPPED_COMMAND)

    if not surface.session_exists(config.session_name):
        return ReplayResult(outcome=ReplayOutcome.NO_SESSION)

    pane_map = load_pane_commands(store_path)

    result = ReplayResult(outcome=ReplayOutcome.REPLAYED)
    for pane_id, raw in pane_map.items():
        marked = MarkedCommand.parse(raw)
        if marked.suppress_replay:
            result.suppressed.append(pane_id)
            continue
        surface.send_text(pane_id, sanitize_command(marked.command, config.task_binary))
        result.sent.append(pane_id)
    return result
