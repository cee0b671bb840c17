"""Utility functions for taskdash."""

import re
import shutil

# Used when the terminal size cannot be determined (e.g. running detached)
FALLBACK_TERMINAL_SIZE = (200, 50)


def sanitize_session_name(name: str) -> str:
    """Sanitize a name to be a valid tmux session name.

    Args:
        name: The original name.

    Returns:
        A sanitized session name (lowercase, hyphens, no special chars).
    """
    # Convert to lowercase
    result = name.lower()
    # Replace underscores, spaces, dots and colons with hyphens (tmux rejects . and :)
    result = re.sub(r"[_ .:]", "-", result)
    # Remove any character that isn't alphanumeric or hyphen
    result = re.sub(r"[^a-z0-9-]", "", result)
    # Collapse multiple hyphens
    result = re.sub(r"-+", "-", result)
    # Remove leading/trailing hyphens
    result = result.strip("-")
    # Ensure we have something left
    return result or "taskdash"


def terminal_size(width: int | None = None, height: int | None = None) -> tuple[int, int]:
    """Resolve the dashboard size, filling gaps from the current terminal.

    Args:
        width: Configured width in cells, or None.
        height: Configured height in cells, or None.

    Returns:
        Tuple of (width, height).
    """
    size = shutil.get_terminal_size(FALLBACK_TERMINAL_SIZE)
    return (width or size.columns, height or size.lines)
