"""JSON file persistence for the queue state with atomic replace"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional
from loguru import logger

from .state import QueueState
from ..exceptions import StorageError


def get_app_dir() -> Path:
    """Application data directory (~/.cbq unless CBQ_HOME is set)"""
    return Path(os.environ.get('CBQ_HOME') or Path.home() / '.cbq')


class StateStore:
    """Loads and saves the queue state file"""

    def __init__(self, state_path: Optional[str] = None):
        """
        Initialize state store

        Args:
            state_path: Path to the state file (defaults to app data directory)
        """
        if state_path is None:
            state_path = str(get_app_dir() / 'state.json')

        self.state_path = Path(state_path).expanduser()
        logger.debug(f"StateStore using {self.state_path}")

    @property
    def exists(self) -> bool:
        return self.state_path.exists()

    def load(self) -> QueueState:
        """
        Load the persisted state

        Returns:
            Stored state, or the default state when no file exists yet

        Raises:
            StorageError: If the file exists but cannot be read or decoded
        """
        try:
            with open(self.state_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return QueueState()
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read state from {self.state_path}", e) from e

        try:
            return QueueState.from_dict(data)
        except ValueError as e:
            raise StorageError(f"Malformed state file {self.state_path}", e) from e

    def save(self, state: QueueState) -> None:
        """
        Atomically replace the state file

        The new content goes to a temp file in the same directory which is
        then renamed over the target, so readers only ever see a complete file.

        Args:
            state: State to persist

        Raises:
            StorageError: On any serialization or I/O failure
        """
        try:
            payload = json.dumps(state.to_dict(), ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as e:
            raise StorageError("Failed to serialize queue state", e) from e

        directory = self.state_path.parent
        tmp_path = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(directory), prefix=f".{self.state_path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.state_path)
            tmp_path = None
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to write state to {self.state_path}", e) from e
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    logger.debug(f"Could not remove temp file {tmp_path}")

        logger.debug(f"State saved: {len(state.items)} items, active={state.active}, mode={state.mode.value}")

    def clear(self) -> None:
        """Empty the pending items, keeping the flags"""
        state = self.load()
        state.items = []
        self.save(state)
        logger.info("Queue cleared")
