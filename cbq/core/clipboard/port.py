"""Access to the live system clipboard"""

from abc import ABC, abstractmethod
import pyperclip
from loguru import logger

from ..exceptions import ClipboardError


class ClipboardPort(ABC):
    """Minimal clipboard capability used by the queue manager"""

    @abstractmethod
    def read(self) -> str:
        """Return the current clipboard text"""

    @abstractmethod
    def write(self, text: str) -> None:
        """Replace the clipboard text"""


class SystemClipboard(ClipboardPort):
    """OS clipboard backed by pyperclip"""

    def read(self) -> str:
        try:
            return pyperclip.paste() or ""
        except pyperclip.PyperclipException as e:
            raise ClipboardError("Failed to read clipboard", e) from e

    def write(self, text: str) -> None:
        try:
            pyperclip.copy(text)
            logger.debug(f"Clipboard set: {len(text)} characters")
        except pyperclip.PyperclipException as e:
            raise ClipboardError("Failed to write clipboard", e) from e
