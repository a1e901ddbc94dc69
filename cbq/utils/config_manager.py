"""Configuration management module"""

import os
import sys
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from loguru import logger

from ..core.storage.store import get_app_dir

CAPTURE_MODES = ('poll', 'hotkey', 'both')


def _default_modifier() -> str:
    return '<cmd>' if sys.platform == 'darwin' else '<ctrl>'


class ConfigManager:
    """Manages application configuration"""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration manager

        Args:
            config_path: Path to configuration file
        """
        if config_path is None:
            config_path = str(get_app_dir() / 'settings.yaml')

        self.config_path = config_path
        self.config: Dict[str, Any] = {}
        self._create_default_config()
        self._load_config()

    def _create_default_config(self):
        """Create default configuration in memory"""
        mod = _default_modifier()
        self.config = {
            'monitor': {
                'poll_interval': 250,
                'copy_settle_delay': 100,
                'paste_settle_delay': 50,
                'capture': 'poll'
            },
            'hotkeys': {
                'activate': f'{mod}+i',
                'deactivate': f'{mod}+r',
                'paste': f'{mod}+v',
                'copy': f'{mod}+c'
            },
            'storage': {
                'state_path': None
            },
            'ui': {
                'show_notifications': True
            },
            'logging': {
                'level': 'INFO',
                'file_logging': True,
                'rotation': '1 day',
                'retention': '7 days'
            }
        }

    def _load_config(self):
        """Load user configuration"""
        if not os.path.exists(self.config_path):
            logger.debug(f"No user configuration at {self.config_path}, using defaults")
            return

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                user_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load user config: {e}")
            return

        if not isinstance(user_config, dict):
            logger.error(f"Ignoring {self.config_path}: top level must be a mapping")
            return

        self._merge_config(self.config, user_config)
        logger.info(f"Loaded user configuration from {self.config_path}")

    def _merge_config(self, base: Dict, updates: Dict):
        """
        Recursively merge configuration dictionaries

        Args:
            base: Base configuration
            updates: Updates to apply
        """
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def save(self) -> bool:
        """Save current configuration to file"""
        try:
            os.makedirs(os.path.dirname(self.config_path) or '.', exist_ok=True)

            with open(self.config_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(self.config, f, default_flow_style=False)

            logger.info(f"Configuration saved to {self.config_path}")
            return True

        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to save configuration: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value

        Args:
            key: Configuration key (dot notation supported)
            default: Default value if not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """
        Set configuration value

        Args:
            key: Configuration key (dot notation supported)
            value: Value to set
        """
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value
        logger.debug(f"Set config: {key} = {value}")

    def get_all(self) -> Dict[str, Any]:
        """Get entire configuration"""
        return self.config.copy()

    def reset(self):
        """Reset to default configuration"""
        self._create_default_config()
        logger.info("Configuration reset to defaults")

    @property
    def state_path(self) -> Optional[str]:
        return self.get('storage.state_path')

    @property
    def log_dir(self) -> Path:
        return Path(self.config_path).parent / 'logs'

    def validate(self) -> bool:
        """
        Validate configuration

        Returns:
            True if valid
        """
        required = [
            'monitor.poll_interval',
            'monitor.paste_settle_delay',
            'monitor.capture',
            'hotkeys.activate',
            'hotkeys.deactivate',
            'hotkeys.paste'
        ]

        for key in required:
            if self.get(key) is None:
                logger.error(f"Missing required config: {key}")
                return False

        try:
            if int(self.get('monitor.poll_interval')) < 50:
                logger.error("Poll interval too small (min 50ms)")
                return False

            for key in ('monitor.copy_settle_delay', 'monitor.paste_settle_delay'):
                if int(self.get(key, 0)) < 0:
                    logger.error(f"{key} must not be negative")
                    return False
        except (TypeError, ValueError) as e:
            logger.error(f"Invalid numeric setting: {e}")
            return False

        if self.get('monitor.capture') not in CAPTURE_MODES:
            logger.error(f"monitor.capture must be one of {', '.join(CAPTURE_MODES)}")
            return False

        if self.get('monitor.capture') != 'poll' and not self.get('hotkeys.copy'):
            logger.error("hotkeys.copy is required when capturing copies by hotkey")
            return False

        for name, chord in (self.get('hotkeys') or {}).items():
            if chord is not None and not str(chord).strip():
                logger.error(f"Hotkey '{name}' is empty")
                return False

        return True
