"""Configuration settings for filtergrid."""

import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .log import get_logger

logger = get_logger("config")

# Default configuration structure
DEFAULT_CONFIG = {
    'filter': {
        'auto_apply': True,
        'debounce_ms': 500,
    },
    'columns': {
        'min_width': 50,  # px
    },
    'export': {
        'file_name': 'export',
        'directory': None,  # None = current working directory
    },
    'logging': {
        'level': 'INFO',
        'log_file': None,
    },
}


@dataclass
class TableSettings:
    """Runtime settings consumed by the table core"""
    auto_apply: bool = True
    debounce_ms: int = 500
    min_column_width: int = 50
    export_file_name: str = "export"
    export_directory: Optional[str] = None


class Config:
    """Configuration manager."""

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        """Initialize configuration."""
        self.config_dir = Path(config_dir) if config_dir else Path.home() / '.config' / 'filtergrid'
        self.config_file = self.config_dir / 'config.json'
        self.config: Dict[str, Any] = {}  # Start empty, load will merge with defaults
        self.load_config()
        self._ensure_defaults()

    def _ensure_defaults(self):
        """Ensure all default keys exist in the loaded config."""
        changed = False
        for key, default_value in DEFAULT_CONFIG.items():
            if key not in self.config or not isinstance(self.config[key], dict):
                self.config[key] = copy.deepcopy(default_value)
                changed = True
                continue
            for sub_key, sub_default_value in default_value.items():
                if sub_key not in self.config[key]:
                    self.config[key][sub_key] = sub_default_value
                    changed = True
        if changed:
            self.save_config()

    def load_config(self):
        """Load configuration from file."""
        try:
            if self.config_file.exists():
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)
                self.config = loaded if isinstance(loaded, dict) else {}
            else:
                # If no config file, start with defaults
                self.config = copy.deepcopy(DEFAULT_CONFIG)
                self.save_config()
        except json.JSONDecodeError:
            logger.warning("Error decoding config file %s. Starting with defaults.", self.config_file)
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            self.save_config()
        except OSError as e:
            logger.error("Error loading config: %s. Starting with defaults.", e)
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            # No save here to avoid overwriting potentially recoverable file

    def save_config(self):
        """Save configuration to file."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(self.config, f, indent=4)
        except OSError as e:
            logger.error("Error saving config: %s", e)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Get a single value from a config section."""
        return self.config.get(section, {}).get(key, default)

    def set(self, section: str, key: str, value: Any) -> None:
        """Set a single value and persist it."""
        self.config.setdefault(section, {})[key] = value
        self.save_config()

    def get_filter_config(self) -> Dict[str, Any]:
        return self.config.get('filter', DEFAULT_CONFIG['filter'])

    def set_filter_config(self, **kwargs):
        """Set filter configuration parameters."""
        self.config.setdefault('filter', {}).update(kwargs)
        self.save_config()

    def get_export_config(self) -> Dict[str, Any]:
        return self.config.get('export', DEFAULT_CONFIG['export'])

    def set_export_config(self, **kwargs):
        """Set export configuration parameters."""
        self.config.setdefault('export', {}).update(kwargs)
        self.save_config()

    def get_logging_config(self) -> Dict[str, Any]:
        return self.config.get('logging', DEFAULT_CONFIG['logging'])

    def table_settings(self) -> TableSettings:
        """Build the settings object handed to the table core."""
        filter_config = self.get_filter_config()
        export_config = self.get_export_config()
        return TableSettings(
            auto_apply=bool(filter_config.get('auto_apply', True)),
            debounce_ms=int(filter_config.get('debounce_ms', 500)),
            min_column_width=int(self.get('columns', 'min_width', 50)),
            export_file_name=export_config.get('file_name') or "export",
            export_directory=export_config.get('directory'),
        )
