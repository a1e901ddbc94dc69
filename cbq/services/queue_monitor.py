"""Background monitor wiring hotkeys and the clipboard poller to the queue manager"""

import threading
import time
from datetime import datetime
from typing import Callable, Dict, Optional
from loguru import logger

from ..core.clipboard.monitor import ClipboardMonitor
from ..core.clipboard.port import ClipboardPort
from ..core.exceptions import ClipboardError, EmptyQueueError, StorageError
from ..core.queue.manager import QueueManager
from ..utils.config_manager import ConfigManager
from .hotkeys import HotkeyListener
from .notifier import Notifier


class PasteGuard:
    """Allows at most one pop in flight; extra triggers are dropped, not queued"""

    def __init__(self):
        self._lock = threading.Lock()
        self._popping = False

    def try_acquire(self) -> bool:
        with self._lock:
            if self._popping:
                return False
            self._popping = True
            return True

    def release(self) -> None:
        with self._lock:
            self._popping = False

    @property
    def in_progress(self) -> bool:
        with self._lock:
            return self._popping


class QueueMonitor:
    """Turns copy, paste, start and stop events into queue manager operations"""

    def __init__(self, manager: QueueManager, clipboard: ClipboardPort,
                 config: Optional[ConfigManager] = None,
                 notifier: Optional[Notifier] = None,
                 listener_factory: Callable[[Dict[str, Callable]], HotkeyListener] = HotkeyListener):
        """
        Initialize queue monitor

        Args:
            manager: Queue manager all events are routed to
            clipboard: Clipboard read by the poller and copy hotkey
            config: Application configuration (defaults if None)
            notifier: Desktop notifier (disabled if None)
            listener_factory: Builds the hotkey listener from chord bindings
        """
        self.manager = manager
        self.clipboard = clipboard
        self.config = config or ConfigManager()
        self.notifier = notifier or Notifier(enabled=False)
        self.listener_factory = listener_factory

        self.capture = self.config.get('monitor.capture', 'poll')
        self.copy_delay = self.config.get('monitor.copy_settle_delay', 100) / 1000.0
        self.paste_delay = self.config.get('monitor.paste_settle_delay', 50) / 1000.0

        self.poller = ClipboardMonitor(clipboard, self.config.get('monitor.poll_interval', 250))
        self.poller.add_callback(self.on_clipboard_change)
        self.paste_guard = PasteGuard()
        self.hotkeys: Optional[HotkeyListener] = None

    @property
    def polling_enabled(self) -> bool:
        return self.capture in ('poll', 'both')

    def bindings(self) -> Dict[str, Callable]:
        """Hotkey chord -> handler map for the configured capture mode"""
        bindings = {
            self.config.get('hotkeys.activate'): self.on_activate,
            self.config.get('hotkeys.deactivate'): self.on_deactivate,
            self.config.get('hotkeys.paste'): self.on_paste,
        }
        if self.capture in ('hotkey', 'both'):
            bindings[self.config.get('hotkeys.copy')] = self.on_copy
        return bindings

    def start(self) -> None:
        """Restore clipboard and polling from the previous session, then register hotkeys"""
        try:
            self.manager.sync_clipboard()
        except ClipboardError as e:
            logger.warning(f"Initial clipboard sync failed: {e}")
        except StorageError as e:
            logger.error(f"Could not read queue state: {e}")

        try:
            if self.manager.get_status().active and self.polling_enabled:
                logger.info("Resuming active queue from previous session")
                self.poller.start()
        except StorageError as e:
            logger.error(f"Could not read queue state: {e}")

        self.hotkeys = self.listener_factory(self.bindings())
        self.hotkeys.start()

    def stop(self) -> None:
        """Stop polling and release the hotkeys"""
        self.poller.stop()
        if self.hotkeys is not None:
            self.hotkeys.stop()
            self.hotkeys = None

    def on_activate(self) -> None:
        try:
            self.manager.set_active(True)
        except StorageError as e:
            logger.error(f"Error activating: {e}")
            return

        if self.polling_enabled:
            self.poller.stop()
            self.poller.start()
        logger.info("Queue STARTED")
        self.notifier.notify("CBQ", "Queue started, recording copies")

    def on_deactivate(self) -> None:
        try:
            self.manager.set_active(False)
        except StorageError as e:
            logger.error(f"Error deactivating: {e}")
            return

        self.poller.stop()
        logger.info("Queue STOPPED")
        self.notifier.notify("CBQ", "Queue stopped")

    def on_copy(self) -> threading.Timer:
        """Capture the clipboard once the OS has finished the copy"""
        timer = threading.Timer(self.copy_delay, self._capture_copy)
        timer.daemon = True
        timer.start()
        return timer

    def _capture_copy(self) -> None:
        try:
            text = self.clipboard.read()
        except ClipboardError as e:
            logger.warning(f"Could not read copied text: {e}")
            return

        if not text:
            logger.debug("Copy hotkey fired with an empty clipboard")
            return

        try:
            if self.manager.add_and_sync(text):
                logger.info(f"Captured: {text!r}")
        except StorageError as e:
            logger.error(f"Error adding to queue: {e}")

    def on_paste(self) -> Optional[threading.Thread]:
        """
        Let the OS paste the front item, then advance to the next one

        Returns:
            The worker thread doing the pop, or None if the trigger was ignored
        """
        try:
            state = self.manager.get_status()
        except StorageError as e:
            logger.error(f"Error reading state: {e}")
            return None

        if not state.active or not state.items:
            return None

        # Make sure the OS pastes the right item
        try:
            self.manager.sync_clipboard()
        except ClipboardError as e:
            logger.warning(f"Clipboard sync failed: {e}")
        except StorageError as e:
            logger.error(f"Error reading state: {e}")
            return None

        if not self.paste_guard.try_acquire():
            logger.debug("Pop already in progress, ignoring paste")
            return None

        worker = threading.Thread(target=self._pop_after_paste, name="cbq-paste", daemon=True)
        worker.start()
        return worker

    def _pop_after_paste(self) -> None:
        try:
            time.sleep(self.paste_delay)
            result = self.manager.pop_and_sync()
            logger.info(f"Popped: {result.item!r}")
        except EmptyQueueError:
            pass
        except StorageError as e:
            logger.error(f"Error popping: {e}")
        finally:
            self.paste_guard.release()

    def on_clipboard_change(self, content: str, timestamp: datetime) -> None:
        """Poller callback: capture a new copy unless the queue already holds it"""
        try:
            state = self.manager.get_status()
            # Values already queued were written back by synchronization
            if content in state.items:
                return

            if self.manager.add_and_sync(content):
                logger.info(f"Captured: {content!r}")
        except StorageError as e:
            logger.error(f"Poller: error adding to queue: {e}")
