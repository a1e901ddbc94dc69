"""Global hotkey listener"""

import threading
from typing import Callable, Dict, Optional
from loguru import logger

from ..core.exceptions import ConfigurationError


class HotkeyListener:
    """Global hotkeys via pynput, one callback per chord"""

    def __init__(self, bindings: Dict[str, Callable[[], None]]):
        """
        Initialize hotkey listener

        Args:
            bindings: pynput chord string (e.g. '<cmd>+v') -> callback
        """
        self.bindings = dict(bindings)
        self._listener = None
        self._lock = threading.Lock()

    def start(self) -> None:
        """
        Start listening on a background thread

        Raises:
            ConfigurationError: If a chord cannot be parsed
        """
        # pynput picks its platform backend at import time and fails without a display
        from pynput import keyboard

        with self._lock:
            if self._listener is not None:
                logger.warning("Hotkey listener already running")
                return

            try:
                self._listener = keyboard.GlobalHotKeys(self.bindings)
            except ValueError as e:
                raise ConfigurationError("Invalid hotkey binding", e) from e

            self._listener.daemon = True
            self._listener.start()

        logger.info(f"Hotkeys registered: {', '.join(self.bindings)}")

    def stop(self) -> None:
        """Release the hotkey capture"""
        with self._lock:
            listener = self._listener
            self._listener = None

        if listener is not None:
            listener.stop()
            logger.info("Hotkey listener stopped")

    def join(self, timeout: Optional[float] = None) -> None:
        """Block until the listener stops"""
        listener = self._listener
        if listener is not None:
            listener.join(timeout)

    @property
    def is_running(self) -> bool:
        listener = self._listener
        return listener is not None and listener.is_alive()
