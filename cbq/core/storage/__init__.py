"""Queue state persistence"""

from .state import QueueState, QueueMode
from .store import StateStore, get_app_dir

__all__ = ['QueueState', 'QueueMode', 'StateStore', 'get_app_dir']
