"""Queue state model persisted between operations"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class QueueMode(str, Enum):
    """Order in which pending items are handed back"""
    QUEUE = "queue"  # FIFO
    STACK = "stack"  # LIFO

    @classmethod
    def from_flag(cls, is_stack: bool) -> 'QueueMode':
        return cls.STACK if is_stack else cls.QUEUE


@dataclass
class QueueState:
    """Pending clipboard items plus the active and mode flags"""
    items: List[str] = field(default_factory=list)
    active: bool = False
    mode: QueueMode = QueueMode.QUEUE

    @property
    def is_stack(self) -> bool:
        return self.mode == QueueMode.STACK

    @property
    def front(self) -> Optional[str]:
        """
        Item the next pop would return under the current mode

        Returns:
            First item in queue mode, last item in stack mode, None if empty
        """
        if not self.items:
            return None
        return self.items[-1] if self.is_stack else self.items[0]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'items': list(self.items),
            'active': self.active,
            'is_stack': self.is_stack,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QueueState':
        """
        Create from dictionary, ignoring unknown keys

        Args:
            data: Decoded JSON object

        Returns:
            QueueState with absent fields defaulted
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

        items = data.get('items') or []
        if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
            raise ValueError("'items' must be a list of strings")

        for key in ('active', 'is_stack'):
            if key in data and not isinstance(data[key], bool):
                raise ValueError(f"'{key}' must be true or false, got {data[key]!r}")

        if 'is_stack' in data:
            mode = QueueMode.from_flag(data['is_stack'])
        elif 'mode' in data:
            mode = QueueMode(str(data['mode']).lower())
        else:
            mode = QueueMode.QUEUE

        return cls(items=list(items), active=data.get('active', False), mode=mode)
