"""Configuration management for taskdash."""

from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from taskdash.commands import DEFAULT_TASK_BINARY
from taskdash.errors import ConfigurationError
from taskdash.layouts import LayoutNode
from taskdash.utils import sanitize_session_name
from taskdash.xdg_paths import get_config_file_path

DEFAULT_LAYOUT: dict[str, list[Any]] = {
    "h:~:40%": [
        "*task next",
        {
            "v:~:50%": [
                "task summary",
                "!task burndown.daily",
            ]
        },
    ]
}


class Config(BaseModel):
    """Configuration settings for taskdash."""

    session_name: str = "taskdash"
    window_name: str = "dashboard"
    width: int | None = None  # None = current terminal width
    height: int | None = None  # None = current terminal height
    startup_command: str | None = None
    task_binary: str = DEFAULT_TASK_BINARY
    tmux_binary: str = "tmux"

    layout: dict[str, list[Any]]

    @field_validator("session_name")
    @classmethod
    def _session_name_valid(cls, value: str) -> str:
        return sanitize_session_name(value)

    @field_validator("width", "height")
    @classmethod
    def _dimension_positive(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            raise ValueError("must be a positive number of cells")
        return value

    def layout_tree(self) -> LayoutNode:
        """Build the validated layout tree.

        Raises:
            ConfigurationError: If the layout is malformed.
        """
        return LayoutNode.from_config(self.layout)


def default_config() -> Config:
    """Get a starter configuration with a sample layout."""
    return Config(layout=DEFAULT_LAYOUT)


def _load_yaml_file(path: Path) -> dict[str, object]:
    """Load a YAML file that must contain a mapping.

    Args:
        path: Path to the YAML file.

    Returns:
        The parsed mapping.

    Raises:
        ConfigurationError: If the file is missing, unreadable, or not a mapping.
    """
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")
    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"YAML parse error in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"File read error for {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return cast(dict[str, object], raw)


def _format_validation_error(path: Path, error: ValidationError) -> str:
    lines = [f"Invalid config {path}:"]
    for item in error.errors():
        field_path = ".".join(str(loc) for loc in item["loc"]) or "(root)"
        lines.append(f"  {field_path}: {item['msg']}")
    return "\n".join(lines)


def load_config(config_path: Path | None = None) -> Config:
    """Load and validate the configuration, including its layout tree.

    Args:
        config_path: Optional path to config file. Uses default if None.

    Returns:
        The loaded Config.

    Raises:
        ConfigurationError: If the file is missing or invalid.
    """
    path = config_path or get_config_file_path()
    data = _load_yaml_file(path)

    try:
        config = Config.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(path, e)) from e

    # Fail on a malformed layout before anything touches tmux
    config.layout_tree()
    return config


def save_config(config: Config, config_path: Path | None = None) -> Path:
    """Save configuration to YAML file.

    Args:
        config: The configuration to save.
        config_path: Optional path to config file. Uses default if None.

    Returns:
        The path written.

    Raises:
        ConfigurationError: If the file or its directory cannot be written.
    """
    path = config_path or get_config_file_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        raise ConfigurationError(f"Cannot write config file {path}: {e}") from e
    return path
