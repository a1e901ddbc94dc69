"""Background clipboard queue application"""

import sys
import signal
import threading
from typing import Optional
from loguru import logger

from . import __version__
from .core.clipboard import SystemClipboard
from .core.exceptions import ConfigurationError
from .core.queue import QueueManager
from .core.storage import StateStore
from .services import Notifier, QueueMonitor
from .utils import ConfigManager


def setup_logging(config: ConfigManager, console_level: Optional[str] = None) -> None:
    """
    Configure loguru sinks

    Args:
        config: Application configuration
        console_level: Override for the stderr sink level
    """
    logger.remove()  # Remove default handler

    # Console logging
    logger.add(
        sys.stderr,
        level=console_level or config.get('logging.level', 'INFO'),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"
    )

    # File logging
    if config.get('logging.file_logging'):
        log_dir = config.log_dir
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_dir / "cbq_{time:YYYY-MM-DD}.log",
            rotation=config.get('logging.rotation', '1 day'),
            retention=config.get('logging.retention', '7 days'),
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
        )


class ClipboardQueueApp:
    """Long-running monitor process"""

    def __init__(self, config_manager: Optional[ConfigManager] = None, console_level: Optional[str] = None):
        self.config_manager = config_manager
        self.console_level = console_level
        self.store = None
        self.manager = None
        self.monitor = None

        self._shutdown_event = threading.Event()

    def initialize(self) -> bool:
        """Initialize all components"""
        if self.config_manager is None:
            self.config_manager = ConfigManager()

        setup_logging(self.config_manager, self.console_level)

        logger.info("=" * 60)
        logger.info(f"CBQ {__version__} starting")
        logger.info("=" * 60)

        if not self.config_manager.validate():
            logger.error("Invalid configuration")
            return False

        clipboard = SystemClipboard()
        self.store = StateStore(self.config_manager.state_path)
        self.manager = QueueManager(self.store, clipboard)
        self.monitor = QueueMonitor(
            self.manager,
            clipboard,
            self.config_manager,
            Notifier(bool(self.config_manager.get('ui.show_notifications')))
        )
        return True

    def start(self) -> None:
        """Start the monitor and block until shutdown"""
        try:
            self.monitor.start()
        except (ConfigurationError, ImportError) as e:
            # pynput raises ImportError when no supported keyboard backend is available
            logger.error(f"Failed to register hotkeys: {e}")
            self.shutdown()
            raise

        hotkeys = self.config_manager.get('hotkeys')
        logger.info("CBQ monitor started.")
        logger.info(f"  {hotkeys['activate']}  start (clears queue)")
        logger.info(f"  {hotkeys['deactivate']}  stop  (clears queue)")
        logger.info(f"  {hotkeys['paste']}  paste & advance")
        if self.monitor.polling_enabled:
            logger.info("  (all clipboard changes captured automatically while active)")

        while not self._shutdown_event.wait(0.5):
            if self.monitor.hotkeys is not None and not self.monitor.hotkeys.is_running:
                logger.warning("Hotkey listener exited")
                self.shutdown()

        logger.info("CBQ monitor stopped.")

    def shutdown(self) -> None:
        """Stop polling and release the hotkeys"""
        if self._shutdown_event.is_set():
            return

        logger.info("Shutting down...")
        try:
            if self.monitor:
                self.monitor.stop()
        finally:
            self._shutdown_event.set()


def run_monitor(config_manager: Optional[ConfigManager] = None, console_level: Optional[str] = None) -> int:
    """Entry point for `cbq start`"""
    app = ClipboardQueueApp(config_manager, console_level)

    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}")
        app.shutdown()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    if not app.initialize():
        logger.error("Failed to initialize application")
        return 1

    try:
        app.start()
    except (ConfigurationError, ImportError):
        return 1
    return 0
