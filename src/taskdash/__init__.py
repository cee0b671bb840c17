"""Taskwarrior tmux dashboard with hook-driven pane refresh."""

__version__ = "0.1.0"
