"""Application services"""

from .hotkeys import HotkeyListener
from .notifier import Notifier
from .queue_monitor import QueueMonitor, PasteGuard

__all__ = ['HotkeyListener', 'Notifier', 'QueueMonitor', 'PasteGuard']
