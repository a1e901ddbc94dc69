"""Clipboard polling service for capturing copies that hotkeys cannot see"""

import threading
import hashlib
from typing import Optional, Callable, Set
from datetime import datetime
from loguru import logger

from .port import ClipboardPort
from ..exceptions import ClipboardError


class ClipboardMonitor:
    """Polls the clipboard and reports changed content to callbacks"""

    def __init__(self, clipboard: ClipboardPort, check_interval: int = 250):
        """
        Initialize clipboard monitor

        Args:
            clipboard: Clipboard to poll
            check_interval: Check interval in milliseconds
        """
        self.clipboard = clipboard
        self.check_interval = check_interval / 1000.0  # Convert to seconds
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._last_hash: str = ""
        self._callbacks: Set[Callable] = set()
        self._lock = threading.RLock()

        logger.debug(f"ClipboardMonitor initialized with {check_interval}ms interval")

    def add_callback(self, callback: Callable[[str, datetime], None]) -> None:
        """
        Add a callback for clipboard changes

        Args:
            callback: Function to call when clipboard changes (content, timestamp)
        """
        with self._lock:
            self._callbacks.add(callback)
            logger.debug(f"Added callback: {getattr(callback, '__name__', callback)}")

    def start(self) -> None:
        """Start polling, ignoring whatever is on the clipboard right now"""
        with self._lock:
            if self.is_running:
                logger.warning("Monitor already running")
                return

            self.seed()
            # One event per run; a thread left over from a timed-out stop() keeps its own
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._monitor_loop,
                args=(self._stop_event,),
                name="cbq-poller",
                daemon=True
            )
            self._thread.start()
            logger.info("Clipboard polling started")

    def stop(self) -> None:
        """Stop polling"""
        with self._lock:
            thread = self._thread
            self._thread = None
            self._stop_event.set()

        if thread is None:
            return

        if thread is not threading.current_thread():
            thread.join(timeout=5.0)

        logger.info("Clipboard polling stopped")

    def seed(self) -> None:
        """Record the current clipboard as already seen"""
        try:
            self._has_changed(self.clipboard.read())
        except ClipboardError as e:
            logger.warning(f"Could not seed clipboard monitor: {e}")
            self._last_hash = ""

    def _monitor_loop(self, stop_event: threading.Event) -> None:
        """Main monitoring loop"""
        logger.debug("Monitor loop started")

        while not stop_event.wait(self.check_interval):
            try:
                self.check_once()
            except Exception as e:
                logger.error(f"Error in monitor loop: {e}")

        logger.debug("Monitor loop ended")

    def check_once(self) -> bool:
        """
        Poll the clipboard a single time

        Returns:
            True if changed content was reported to the callbacks
        """
        try:
            current_content = self.clipboard.read()
        except ClipboardError as e:
            logger.debug(f"Clipboard read failed: {e}")
            return False

        if not current_content or not self._has_changed(current_content):
            return False

        self._notify_callbacks(current_content, datetime.now())
        return True

    def _has_changed(self, content: str) -> bool:
        content_hash = hashlib.sha256(content.encode('utf-8', 'surrogatepass')).hexdigest()

        if content_hash != self._last_hash:
            self._last_hash = content_hash
            return True

        return False

    def _notify_callbacks(self, content: str, timestamp: datetime) -> None:
        with self._lock:
            callbacks = self._callbacks.copy()

        for callback in callbacks:
            try:
                callback(content, timestamp)
            except Exception as e:
                logger.error(f"Error in callback {getattr(callback, '__name__', callback)}: {e}")

    @property
    def is_running(self) -> bool:
        """Check if monitor is running"""
        return self._thread is not None and self._thread.is_alive()
