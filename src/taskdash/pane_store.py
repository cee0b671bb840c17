"""Persistence of the pane-command map between launch and hook replays.

Each save is a full snapshot written through a temp file and renamed into
place. There is no locking: concurrent launches and hooks race and the last
writer wins.
"""

import tempfile
from pathlib import Path

import yaml

from taskdash.errors import StoreError, StoreNotFoundError
from taskdash.layouts import PaneCommandMap
from taskdash.tmux_manager import PANE_ID_RE
from taskdash.xdg_paths import get_store_file_path


def save_pane_commands(pane_map: PaneCommandMap, store_path: Path | None = None) -> Path:
    """Save the pane-command map, replacing any previous snapshot.

    Args:
        pane_map: Mapping of pane ID to raw (marked) command.
        store_path: Optional path to store file. Uses default if None.

    Returns:
        The path written.

    Raises:
        StoreError: If the file cannot be written.
    """
    path = store_path or get_store_file_path()
    data = yaml.safe_dump(dict(pane_map), default_flow_style=False, sort_keys=False, allow_unicode=True)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    except OSError as e:
        raise StoreError(f"Cannot write pane store {path}: {e}") from e

    try:
        with open(tmp_fd, "w", encoding="utf-8") as f:
            f.write(data)
        Path(tmp_path).replace(path)
    except OSError as e:
        Path(tmp_path).unlink(missing_ok=True)
        raise StoreError(f"Cannot write pane store {path}: {e}") from e
    return path


def load_pane_commands(store_path: Path | None = None) -> PaneCommandMap:
    """Load the pane-command map saved by the last launch.

    Args:
        store_path: Optional path to store file. Uses default if None.

    Returns:
        Mapping of pane ID to raw (marked) command.

    Raises:
        StoreNotFoundError: If no dashboard has been launched yet.
        StoreError: If the file cannot be read, is not a flat mapping, or holds
            a key that is not a tmux pane ID.
    """
    path = store_path or get_store_file_path()

    if not path.exists():
        raise StoreNotFoundError(f"No pane store at {path}; dashboard has not been launched yet")

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise StoreError(f"Pane store {path} is not valid YAML: {e}") from e
    except OSError as e:
        raise StoreError(f"Cannot read pane store {path}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise StoreError(f"Pane store {path} must contain a mapping, got {type(raw).__name__}")

    pane_map: PaneCommandMap = {}
    for pane_id, command in raw.items():
        if not isinstance(pane_id, str) or not isinstance(command, str):
            raise StoreError(f"Pane store {path} has a non-string entry: {pane_id!r}: {command!r}")
        if not PANE_ID_RE.fullmatch(pane_id):
            raise StoreError(f"Pane store {path} has an invalid pane ID: {pane_id!r}")
        pane_map[pane_id] = command
    return pane_map
