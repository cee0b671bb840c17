"""XDG-compliant path management for taskdash."""

from pathlib import Path

from xdg_base_dirs import xdg_config_home, xdg_data_home

APP_NAME = "taskdash"


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    return xdg_config_home() / APP_NAME


def get_data_dir() -> Path:
    """Get the data directory path."""
    return xdg_data_home() / APP_NAME


def get_config_file_path() -> Path:
    """Get the config.yaml file path."""
    return get_config_dir() / "config.yaml"


def get_store_file_path() -> Path:
    """Get the panes.yaml file path holding the pane-command map."""
    return get_data_dir() / "panes.yaml"
