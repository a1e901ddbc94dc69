"""Queue state machine"""

from .manager import QueueManager, PopResult

__all__ = ['QueueManager', 'PopResult']
