"""Queue manager keeping the persisted queue and the system clipboard in step"""

import threading
from dataclasses import dataclass
from typing import Optional
from loguru import logger

from ..clipboard.port import ClipboardPort
from ..exceptions import ClipboardError, EmptyQueueError
from ..storage.state import QueueMode, QueueState
from ..storage.store import StateStore


@dataclass
class PopResult:
    """Outcome of a pop that also refreshed the clipboard"""
    item: str
    sync_error: Optional[ClipboardError] = None

    @property
    def synced(self) -> bool:
        return self.sync_error is None


class QueueManager:
    """
    Owns every state transition of the clipboard queue.

    Each public operation holds the manager lock for its whole
    load, mutate, persist and clipboard-write sequence. State is re-read from
    the store at the start of every operation so that changes written by
    other processes are picked up.
    """

    def __init__(self, store: StateStore, clipboard: ClipboardPort):
        """
        Initialize queue manager

        Args:
            store: Persistent state store
            clipboard: Clipboard used for synchronization
        """
        self.store = store
        self.clipboard = clipboard
        self._lock = threading.RLock()

    def add(self, item: str) -> bool:
        """
        Append an item while the queue is active

        Args:
            item: Copied text

        Returns:
            True if the item was appended
        """
        with self._lock:
            return self._add(self.store.load(), item)

    def add_and_sync(self, item: str) -> bool:
        """
        Append an item and put the front item back on the clipboard

        In queue mode the copy the user just made is replaced by the oldest
        pending item; in stack mode the new item already is the front.

        Args:
            item: Copied text

        Returns:
            True if the item was appended
        """
        with self._lock:
            state = self.store.load()
            added = self._add(state, item)
            if added:
                try:
                    self._sync(state)
                except ClipboardError as e:
                    logger.warning(f"Clipboard sync after add failed: {e}")
            return added

    def _add(self, state: QueueState, item: str) -> bool:
        if not state.active:
            return False

        if state.items and state.items[-1] == item:
            logger.debug("Skipped consecutive duplicate")
            return False

        state.items.append(item)
        self.store.save(state)
        logger.debug(f"Added item ({len(item)} characters), queue size {len(state.items)}")
        return True

    def pop(self, use_stack: bool) -> str:
        """
        Remove and return one item without touching the clipboard

        Args:
            use_stack: Take the newest item (LIFO) instead of the oldest (FIFO)

        Returns:
            The removed item

        Raises:
            EmptyQueueError: If there is nothing to pop
        """
        with self._lock:
            state = self.store.load()
            return self._pop(state, use_stack)

    def pop_and_sync(self) -> PopResult:
        """
        Pop using the persisted mode, then pre-load the next item

        A clipboard failure does not undo the pop; it is returned in the
        result instead.

        Raises:
            EmptyQueueError: If there is nothing to pop
        """
        with self._lock:
            state = self.store.load()
            item = self._pop(state, state.is_stack)

            sync_error = None
            try:
                self._sync(state)
            except ClipboardError as e:
                logger.warning(f"Popped item but could not prepare next one: {e}")
                sync_error = e

            return PopResult(item=item, sync_error=sync_error)

    def _pop(self, state: QueueState, use_stack: bool) -> str:
        if not state.items:
            raise EmptyQueueError()

        item = state.items.pop() if use_stack else state.items.pop(0)
        self.store.save(state)
        logger.debug(f"Popped item ({'LIFO' if use_stack else 'FIFO'}), {len(state.items)} remaining")
        return item

    def set_active(self, active: bool) -> None:
        """Set the active flag; pending items are discarded either way"""
        with self._lock:
            state = self.store.load()
            state.active = active
            state.items = []
            self.store.save(state)
        logger.info(f"Queue {'activated' if active else 'deactivated'}")

    def set_stack_mode(self, is_stack: bool) -> None:
        """Switch between stack and queue order; callers sync the clipboard if needed"""
        self.set_mode(QueueMode.from_flag(is_stack))

    def set_mode(self, mode: QueueMode) -> None:
        with self._lock:
            state = self.store.load()
            state.mode = QueueMode(mode)
            self.store.save(state)
        logger.info(f"Mode set to {state.mode.value}")

    def sync_clipboard(self) -> bool:
        """
        Write the current front item to the clipboard

        Returns:
            True if something was written, False if the queue is empty

        Raises:
            ClipboardError: If the clipboard write failed
        """
        with self._lock:
            return self._sync(self.store.load())

    def _sync(self, state: QueueState) -> bool:
        front = state.front
        if front is None:
            return False
        self.clipboard.write(front)
        return True

    def get_status(self) -> QueueState:
        """Latest persisted state"""
        with self._lock:
            return self.store.load()

    def clear(self) -> None:
        """Empty the queue"""
        with self._lock:
            self.store.clear()
