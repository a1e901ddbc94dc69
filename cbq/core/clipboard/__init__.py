"""Clipboard access and monitoring"""

from .port import ClipboardPort, SystemClipboard
from .monitor import ClipboardMonitor

__all__ = ['ClipboardPort', 'SystemClipboard', 'ClipboardMonitor']
