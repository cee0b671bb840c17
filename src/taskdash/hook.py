"""Taskwarrior hook argument handling.

Taskwarrior runs ``on-exit`` hooks with six ``key:value`` arguments::

    api:2 args:task done 3 command:done rc:/home/me/.taskrc data:/home/me/.task version:2.6.2

Only commands that change task data should refresh the dashboard.
"""

from dataclasses import dataclass

from taskdash.errors import HookArgumentError

HOOK_ARG_KEYS = ("api", "args", "command", "rc", "data", "version")
HOOK_ARG_COUNT = len(HOOK_ARG_KEYS)

MUTATING_COMMANDS = frozenset(
    {
        "add",
        "annotate",
        "denotate",
        "append",
        "config",
        "delete",
        "done",
        "duplicate",
        "edit",
        "import",
        "log",
        "modify",
        "prepend",
        "start",
        "stop",
        "synchronize",
        "undo",
        "context",
    }
)


@dataclass(frozen=True)
class HookEvent:
    """Decoded hook invocation."""

    api: str
    args: str
    command: str
    rc: str
    data: str
    version: str

    @classmethod
    def from_args(cls, argv: list[str]) -> "HookEvent":
        """Decode the positional hook arguments.

        Args:
            argv: The six positional arguments, in Taskwarrior's order.

        Returns:
            The decoded HookEvent.

        Raises:
            HookArgumentError: If the count or any key prefix is wrong.
        """
        if len(argv) != HOOK_ARG_COUNT:
            raise HookArgumentError(f"Hook mode expects {HOOK_ARG_COUNT} arguments, got {len(argv)}")

        values: list[str] = []
        for key, arg in zip(HOOK_ARG_KEYS, argv, strict=True):
            prefix = f"{key}:"
            if not arg.startswith(prefix):
                raise HookArgumentError(f"Expected hook argument starting with {prefix!r}, got {arg!r}")
            values.append(arg[len(prefix) :])
        return cls(*values)

    @property
    def is_mutating(self) -> bool:
        """Whether the executed command may have changed task data."""
        return is_mutating_command(self.command)


def is_mutating_command(command: str) -> bool:
    """Check a Taskwarrior command name against the mutating set (case-sensitive)."""
    return command in MUTATING_COMMANDS
