import threading
from typing import List, Optional

import pytest

from cbq.core.clipboard import ClipboardPort
from cbq.core.exceptions import ClipboardError
from cbq.core.queue import QueueManager
from cbq.core.storage import QueueMode, QueueState, StateStore


class FakeClipboard(ClipboardPort):
    """In-memory clipboard recording every write"""

    def __init__(self, content: str = ""):
        self.content = content
        self.writes: List[str] = []
        self.fail_reads = False
        self.fail_writes = False
        self._lock = threading.Lock()

    def read(self) -> str:
        if self.fail_reads:
            raise ClipboardError("clipboard unavailable")
        with self._lock:
            return self.content

    def write(self, text: str) -> None:
        if self.fail_writes:
            raise ClipboardError("clipboard unavailable")
        with self._lock:
            self.content = text
            self.writes.append(text)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.cbq"""
    home = tmp_path / "cbq-home"
    monkeypatch.setenv("CBQ_HOME", str(home))
    return home


@pytest.fixture()
def clipboard():
    return FakeClipboard()


@pytest.fixture()
def store(tmp_path):
    return StateStore(str(tmp_path / "state.json"))


@pytest.fixture()
def manager(store, clipboard):
    return QueueManager(store, clipboard)


@pytest.fixture()
def seed(store):
    """Write a state directly to the store"""

    def _seed(items: Optional[List[str]] = None, active: bool = True, mode: QueueMode = QueueMode.QUEUE):
        state = QueueState(items=list(items or []), active=active, mode=mode)
        store.save(state)
        return state

    return _seed
