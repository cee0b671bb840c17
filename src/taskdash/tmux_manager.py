"""Tmux surface management for taskdash.

The layout engine talks to tmux only through the ``SurfaceService`` protocol.
``TmuxSurface`` runs the real binary; ``DryRunSurface`` records the same
commands and hands out fake pane IDs so layouts can be previewed.
"""

import os
import re
import shlex
import subprocess
from typing import Protocol

from taskdash.errors import ExternalServiceError
from taskdash.split_spec import SplitAxis

PANE_ID_RE = re.compile(r"%[0-9]+")

_PANE_ID_FORMAT = "#{pane_id}"


class SurfaceService(Protocol):
    """Operations the layout engine needs from the terminal multiplexer."""

    commands: list[str]

    def create_session(
        self,
        session_name: str,
        window_name: str,
        width: int,
        height: int,
        startup_command: str | None = None,
    ) -> str: ...

    def split(self, pane_id: str, axis: SplitAxis, size: str, before: bool) -> str: ...

    def focus(self, pane_id: str) -> None: ...

    def send_text(self, pane_id: str, text: str) -> None: ...

    def session_exists(self, session_name: str) -> bool: ...

    def attach(self, session_name: str) -> None: ...


def is_inside_tmux() -> bool:
    """Check if we're running inside a tmux session."""
    return os.environ.get("TMUX") is not None


def validate_pane_id(pane_id: str, context: str = "") -> str:
    """Validate that a captured pane ID looks correct.

    Args:
        pane_id: The pane ID string (should be % followed by digits).
        context: Description for error messages.

    Returns:
        The validated pane ID.

    Raises:
        ExternalServiceError: If pane ID is empty or malformed.
    """
    if not PANE_ID_RE.fullmatch(pane_id):
        label = f" ({context})" if context else ""
        raise ExternalServiceError(f"Invalid pane ID{label}: {pane_id!r}")
    return pane_id


def _new_session_args(
    session_name: str,
    window_name: str,
    width: int,
    height: int,
    startup_command: str | None,
) -> list[str]:
    args = [
        "new-session",
        "-d",
        "-P",
        "-F",
        _PANE_ID_FORMAT,
        "-s",
        session_name,
        "-n",
        window_name,
        "-x",
        str(width),
        "-y",
        str(height),
    ]
    if startup_command:
        args.append(startup_command)
    return args


def _split_args(pane_id: str, axis: SplitAxis, size: str, before: bool) -> list[str]:
    # -d keeps focus where it is; panes are selected explicitly via markers
    args = ["split-window", "-d", "-P", "-F", _PANE_ID_FORMAT, "-t", pane_id, f"-{axis.value}"]
    if before:
        args.append("-b")
    args.extend(["-l", size])
    return args


def _attach_args(session_name: str) -> list[str]:
    if is_inside_tmux():
        return ["switch-client", "-t", session_name]
    return ["attach-session", "-t", session_name]


class TmuxSurface:
    """SurfaceService backed by the tmux binary."""

    def __init__(self, tmux_binary: str = "tmux") -> None:
        self.tmux_binary = tmux_binary
        self.commands: list[str] = []

    def _run_tmux(self, args: list[str], capture: bool = True) -> subprocess.CompletedProcess[str]:
        """Run a tmux subcommand, raising on failure.

        Args:
            args: Arguments after the tmux binary.
            capture: Capture stdout/stderr (disable for interactive attach).

        Returns:
            CompletedProcess result.

        Raises:
            ExternalServiceError: If tmux is missing or exits non-zero.
        """
        cmd = [self.tmux_binary, *args]
        self.commands.append(shlex.join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=capture, text=True, check=False)
        except FileNotFoundError as e:
            raise ExternalServiceError(f"{self.tmux_binary} not found on PATH") from e
        if result.returncode != 0:
            details = (result.stderr or "").strip() if capture else ""
            raise ExternalServiceError(details or f"tmux {args[0]} failed with exit code {result.returncode}")
        return result

    def create_session(
        self,
        session_name: str,
        window_name: str,
        width: int,
        height: int,
        startup_command: str | None = None,
    ) -> str:
        """Create a detached session and return the ID of its first pane."""
        result = self._run_tmux(_new_session_args(session_name, window_name, width, height, startup_command))
        return validate_pane_id(result.stdout.strip(), "new session")

    def split(self, pane_id: str, axis: SplitAxis, size: str, before: bool) -> str:
        """Split a pane and return the new pane's ID."""
        result = self._run_tmux(_split_args(pane_id, axis, size, before))
        return validate_pane_id(result.stdout.strip(), f"split of {pane_id}")

    def focus(self, pane_id: str) -> None:
        """Select a pane."""
        self._run_tmux(["select-pane", "-t", pane_id])

    def send_text(self, pane_id: str, text: str) -> None:
        """Type text into a pane and press Enter."""
        # Literal text and Enter go in separate calls so text is never parsed as a key name
        if text:
            self._run_tmux(["send-keys", "-t", pane_id, "-l", text])
        self._run_tmux(["send-keys", "-t", pane_id, "C-m"])

    def session_exists(self, session_name: str) -> bool:
        """Check if a tmux session with the given name exists."""
        cmd = [self.tmux_binary, "has-session", "-t", session_name]
        try:
            result = subprocess.run(cmd, capture_output=True, check=False)
        except FileNotFoundError as e:
            raise ExternalServiceError(f"{self.tmux_binary} not found on PATH") from e
        return result.returncode == 0

    def attach(self, session_name: str) -> None:
        """Attach to (or switch the current client to) a session."""
        self._run_tmux(_attach_args(session_name), capture=False)


class DryRunSurface:
    """SurfaceService that records tmux commands without running them."""

    def __init__(self, existing_sessions: set[str] | None = None, tmux_binary: str = "tmux") -> None:
        self.tmux_binary = tmux_binary
        self.commands: list[str] = []
        self.existing_sessions = set(existing_sessions or ())
        self._next_pane = 0

    def _record(self, args: list[str]) -> None:
        self.commands.append(shlex.join([self.tmux_binary, *args]))

    def _allocate(self) -> str:
        pane_id = f"%{self._next_pane}"
        self._next_pane += 1
        return pane_id

    def create_session(
        self,
        session_name: str,
        window_name: str,
        width: int,
        height: int,
        startup_command: str | None = None,
    ) -> str:
        self._record(_new_session_args(session_name, window_name, width, height, startup_command))
        self.existing_sessions.add(session_name)
        return self._allocate()

    def split(self, pane_id: str, axis: SplitAxis, size: str, before: bool) -> str:
        self._record(_split_args(pane_id, axis, size, before))
        return self._allocate()

    def focus(self, pane_id: str) -> None:
        self._record(["select-pane", "-t", pane_id])

    def send_text(self, pane_id: str, text: str) -> None:
        if text:
            self._record(["send-keys", "-t", pane_id, "-l", text])
        self._record(["send-keys", "-t", pane_id, "C-m"])

    def session_exists(self, session_name: str) -> bool:
        return session_name in self.existing_sessions

    def attach(self, session_name: str) -> None:
        self._record(_attach_args(session_name))
