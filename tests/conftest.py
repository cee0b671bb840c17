"""Shared fixtures for taskdash tests."""

from dataclasses import dataclass, field

import pytest

from taskdash.split_spec import SplitAxis


@dataclass
class RecordingSurface:
    """In-memory surface service that records every call."""

    existing_sessions: set[str] = field(default_factory=set)
    calls: list[tuple[object, ...]] = field(default_factory=list)
    commands: list[str] = field(default_factory=list)
    next_pane: int = 1

    def _allocate(self) -> str:
        pane_id = f"%{self.next_pane}"
        self.next_pane += 1
        return pane_id

    def create_session(
        self,
        session_name: str,
        window_name: str,
        width: int,
        height: int,
        startup_command: str | None = None,
    ) -> str:
        self.calls.append(("create", session_name, window_name, width, height, startup_command))
        self.existing_sessions.add(session_name)
        return "%0"

    def split(self, pane_id: str, axis: SplitAxis, size: str, before: bool) -> str:
        new_id = self._allocate()
        self.calls.append(("split", pane_id, axis, size, before, new_id))
        return new_id

    def focus(self, pane_id: str) -> None:
        self.calls.append(("focus", pane_id))

    def send_text(self, pane_id: str, text: str) -> None:
        self.calls.append(("send", pane_id, text))

    def session_exists(self, session_name: str) -> bool:
        self.calls.append(("exists", session_name))
        return session_name in self.existing_sessions

    def attach(self, session_name: str) -> None:
        self.calls.append(("attach", session_name))

    def calls_of(self, kind: str) -> list[tuple[object, ...]]:
        return [call for call in self.calls if call[0] == kind]


@pytest.fixture
def surface() -> RecordingSurface:
    """A fresh recording surface with no running sessions."""
    return RecordingSurface()
