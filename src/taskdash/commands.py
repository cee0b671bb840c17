"""Pane command markers and tracker command sanitization.

Leaf commands in a layout may carry two leading markers:

* ``*`` selects the pane when the dashboard is first created.
* ``!`` keeps the command from being re-sent when a hook triggers a replay.

``*`` is only recognised at position 0 and ``!`` only directly after it (or at
position 0 when there is no ``*``). The raw marked string is what gets
persisted; replay decisions are always made by parsing it again.
"""

from dataclasses import dataclass

SELECT_MARKER = "*"
NO_REPLAY_MARKER = "!"

# Injected after the tracker binary so refresh output uses labels and the
# dashboard's own commands never fire the hook again.
TRACKER_OVERRIDES = ("rc.verbose=label", "rc.hooks=off")

DEFAULT_TASK_BINARY = "task"


@dataclass(frozen=True)
class MarkedCommand:
    """A pane command together with its markers."""

    command: str
    select_on_create: bool = False
    suppress_replay: bool = False

    @classmethod
    def parse(cls, raw: str) -> "MarkedCommand":
        """Split a raw command string into its markers and bare command.

        Args:
            raw: Command string as written in the layout or store.

        Returns:
            The parsed MarkedCommand.
        """
        rest = raw
        select = rest.startswith(SELECT_MARKER)
        if select:
            rest = rest[len(SELECT_MARKER) :]
        suppress = rest.startswith(NO_REPLAY_MARKER)
        if suppress:
            rest = rest[len(NO_REPLAY_MARKER) :]
        return cls(command=rest, select_on_create=select, suppress_replay=suppress)

    def serialize(self) -> str:
        """Rebuild the raw marked string."""
        prefix = ""
        if self.select_on_create:
            prefix += SELECT_MARKER
        if self.suppress_replay:
            prefix += NO_REPLAY_MARKER
        return prefix + self.command


def sanitize_command(command: str, task_binary: str = DEFAULT_TASK_BINARY) -> str:
    """Inject tracker overrides into commands that invoke the tracker.

    Args:
        command: Bare command (markers already stripped).
        task_binary: Name of the tracker executable.

    Returns:
        The command with overrides inserted after the binary, or unchanged if
        its first word is not the tracker.
    """
    parts = command.strip().split(maxsplit=1)
    if not parts or parts[0] != task_binary:
        return command
    return " ".join([parts[0], *TRACKER_OVERRIDES, *parts[1:]])
