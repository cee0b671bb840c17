"""Tests for the taskdash command line."""

from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from conftest import RecordingSurface
from typer.testing import CliRunner

from taskdash.__main__ import app
from taskdash.pane_store import load_pane_commands, save_pane_commands

runner = CliRunner()

LAYOUT = {"v:10:~:20": ["*task next", "task summary", {"h:~:30": ["task projects", "!htop"]}]}


def _hook_args(command: str) -> list[str]:
    return [
        "api:2",
        f"args:task {command}",
        f"command:{command}",
        "rc:/home/user/.taskrc",
        "data:/home/user/.task",
        "version:2.6.2",
    ]


@pytest.fixture
def xdg_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG config/data homes into tmp_path."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    return tmp_path


@pytest.fixture
def config_file(xdg_home: Path) -> Path:
    """A valid config file."""
    path = xdg_home / "taskdash.yaml"
    path.write_text(yaml.safe_dump({"width": 100, "height": 30, "layout": LAYOUT}), encoding="utf-8")
    return path


@pytest.fixture
def store_file(xdg_home: Path) -> Path:
    """Default pane store location under the patched XDG data home."""
    return xdg_home / "data" / "taskdash" / "panes.yaml"


class TestLaunch:
    """Tests for interactive launch."""

    def test_launch_creates_and_persists(
        self, config_file: Path, store_file: Path, surface: RecordingSurface
    ) -> None:
        """Should build the dashboard and save the pane map."""
        with patch("taskdash.__main__.TmuxSurface", return_value=surface):
            result = runner.invoke(app, ["--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert len(surface.calls_of("split")) == 3
        assert load_pane_commands(store_file) == {
            "%1": "*task next",
            "%0": "task summary",
            "%2": "task projects",
            "%3": "!htop",
        }
        assert surface.calls_of("attach") == [("attach", "taskdash")]

    def test_already_running_is_noop(
        self, config_file: Path, store_file: Path, surface: RecordingSurface
    ) -> None:
        """Should only attach when the dashboard already runs."""
        surface.existing_sessions.add("taskdash")
        with patch("taskdash.__main__.TmuxSurface", return_value=surface):
            result = runner.invoke(app, ["--config", str(config_file), "-v"])

        assert result.exit_code == 0
        assert "already running" in result.output
        assert surface.calls_of("split") == []
        assert not store_file.exists()

    def test_no_attach(self, config_file: Path, surface: RecordingSurface) -> None:
        """Should not attach with --no-attach."""
        with patch("taskdash.__main__.TmuxSurface", return_value=surface):
            result = runner.invoke(app, ["--config", str(config_file), "--no-attach"])
        assert result.exit_code == 0
        assert surface.calls_of("attach") == []

    def test_missing_config(self, xdg_home: Path) -> None:
        """Should exit non-zero without a config."""
        result = runner.invoke(app, ["--config", str(xdg_home / "missing.yaml")])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_malformed_layout(self, xdg_home: Path, surface: RecordingSurface) -> None:
        """Should exit non-zero before touching tmux."""
        path = xdg_home / "bad.yaml"
        path.write_text(yaml.safe_dump({"layout": {"v:10:~:20": ["a", "b"]}}), encoding="utf-8")
        with patch("taskdash.__main__.TmuxSurface", return_value=surface):
            result = runner.invoke(app, ["--config", str(path)])
        assert result.exit_code == 1
        assert surface.calls == []

    def test_tmux_failure(self, config_file: Path) -> None:
        """Should exit non-zero when tmux fails."""
        failing = RecordingSurface()

        def _fail(*args: object, **kwargs: object) -> str:
            from taskdash.errors import ExternalServiceError

            raise ExternalServiceError("no server running")

        failing.create_session = _fail  # type: ignore[method-assign]
        with patch("taskdash.__main__.TmuxSurface", return_value=failing):
            result = runner.invoke(app, ["--config", str(config_file)])
        assert result.exit_code == 1
        assert "no server running" in result.output

    def test_dry_run_prints_commands(self, config_file: Path, store_file: Path) -> None:
        """Should preview tmux commands without running or persisting."""
        with (
            patch("taskdash.__main__.shutil.which", return_value=None),
            patch("taskdash.tmux_manager.subprocess.run") as mock_run,
        ):
            result = runner.invoke(app, ["--config", str(config_file), "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "Commands that would be executed" in result.output
        assert "split-window" in result.output
        mock_run.assert_not_called()
        assert not store_file.exists()


class TestHookMode:
    """Tests for hook invocations."""

    def test_non_mutating_command(self, xdg_home: Path, surface: RecordingSurface) -> None:
        """A read-only command exits 0 without touching anything."""
        with patch("taskdash.__main__.TmuxSurface", return_value=surface):
            result = runner.invoke(app, _hook_args("list"))
        assert result.exit_code == 0
        assert surface.calls == []

    def test_no_session(self, config_file: Path, store_file: Path, surface: RecordingSurface) -> None:
        """A mutating command with no dashboard exits 0."""
        with patch("taskdash.__main__.TmuxSurface", return_value=surface):
            result = runner.invoke(app, [*_hook_args("done"), "--config", str(config_file)])
        assert result.exit_code == 0
        assert surface.calls == [("exists", "taskdash")]

    def test_replay(self, config_file: Path, store_file: Path, surface: RecordingSurface) -> None:
        """A mutating command re-sends every non-suppressed command."""
        save_pane_commands({"%1": "*task next", "%0": "!htop"}, store_file)
        surface.existing_sessions.add("taskdash")
        with patch("taskdash.__main__.TmuxSurface", return_value=surface):
            result = runner.invoke(app, [*_hook_args("modify"), "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert surface.calls_of("send") == [("send", "%1", "task rc.verbose=label rc.hooks=off next")]

    def test_replay_missing_store(self, config_file: Path, surface: RecordingSurface) -> None:
        """A running session without a store is fatal for the hook."""
        surface.existing_sessions.add("taskdash")
        with patch("taskdash.__main__.TmuxSurface", return_value=surface):
            result = runner.invoke(app, [*_hook_args("add"), "--config", str(config_file)])
        assert result.exit_code == 1
        assert "Run taskdash once" in result.output

    def test_malformed_hook_args(self, xdg_home: Path) -> None:
        """Arguments with wrong prefixes are an error."""
        args = _hook_args("done")
        args[0] = "2"
        result = runner.invoke(app, args)
        assert result.exit_code == 1

    def test_wrong_argument_count(self) -> None:
        """Anything but zero or six positional arguments is a usage error."""
        result = runner.invoke(app, ["one", "two"])
        assert result.exit_code == 2


class TestConfigFlags:
    """Tests for --init-config and --dump-config."""

    def test_init_config(self, xdg_home: Path) -> None:
        """Should write a starter config to the XDG path."""
        result = runner.invoke(app, ["--init-config"])
        assert result.exit_code == 0
        assert (xdg_home / "config" / "taskdash" / "config.yaml").exists()

    def test_init_config_refuses_overwrite(self, config_file: Path) -> None:
        """Should not overwrite an existing config."""
        before = config_file.read_text(encoding="utf-8")
        result = runner.invoke(app, ["--init-config", "--config", str(config_file)])
        assert result.exit_code == 1
        assert config_file.read_text(encoding="utf-8") == before

    def test_dump_config(self, config_file: Path) -> None:
        """Should print the loaded configuration."""
        result = runner.invoke(app, ["--dump-config", "--config", str(config_file)])
        assert result.exit_code == 0
        assert "session_name: taskdash" in result.output

    def test_version(self) -> None:
        """Should print the version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "taskdash" in result.output

    def test_init_config_unwritable(self, xdg_home: Path) -> None:
        """Should report a write failure instead of a traceback."""
        blocker = xdg_home / "blocker"
        blocker.write_text("", encoding="utf-8")
        result = runner.invoke(app, ["--init-config", "--config", str(blocker / "config.yaml")])
        assert result.exit_code == 1
        assert "Error" in result.output
        assert isinstance(result.exception, SystemExit)
