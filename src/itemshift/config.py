"""
Converter Configuration

Loads configuration from a YAML file and environment variables.
Settings here are the defaults the CLI uses; command line flags win.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

# Default configuration file locations (checked in order)
CONFIG_SEARCH_PATHS = [
    Path.home() / ".itemshift" / "config.yaml",
    Path(__file__).parent / "config.yaml",
]

DEFAULT_CONFIG = {
    "default_format": "compact",
    "namespace": "QBShared",             # Table name written in Lua headers
    "craft_constructor": "createCraftable",

    # Chunked conversion
    "chunk_size": 1000,                  # Items per batch
    "pause_every": 5,                    # Batches between pause() calls

    # Tried in order when reading source files
    "encoding_fallbacks": ["utf-8-sig", "utf-8", "latin-1"],
}

ENV_MAPPINGS = {
    "ITEMSHIFT_FORMAT": "default_format",
    "ITEMSHIFT_CHUNK_SIZE": "chunk_size",
    "ITEMSHIFT_NAMESPACE": "namespace",
}


class ConfigError(ValueError):
    """A configuration value has the wrong type or range."""


class ConverterConfig:
    """Configuration for conversions and the command line tool."""

    def __init__(self, config_path: Optional[Path] = None):
        self._config: Dict[str, Any] = dict(DEFAULT_CONFIG)
        self._config_path: Optional[Path] = None

        # Load from file if found
        self._load_config(config_path)

        # Override with environment variables
        self._apply_env_overrides()

    def _load_config(self, explicit_path: Optional[Path] = None) -> None:
        """Load configuration from YAML file."""
        search_paths = [Path(explicit_path)] if explicit_path else CONFIG_SEARCH_PATHS

        for config_path in search_paths:
            if not config_path.exists():
                continue
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    user_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config from {config_path}: {e}")
                continue
            if not isinstance(user_config, dict):
                logger.warning(f"Ignoring {config_path}: expected a mapping at top level")
                continue
            self._config.update(user_config)
            self._config_path = config_path
            logger.debug(f"Loaded config from {config_path}")
            return

        if explicit_path:
            logger.warning(f"Config file {explicit_path} not found, using defaults")

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        for env_var, config_key in ENV_MAPPINGS.items():
            if env_var in os.environ:
                self._config[config_key] = os.environ[env_var]

    def _positive_int(self, key: str) -> int:
        value = self._config.get(key, DEFAULT_CONFIG[key])
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"{key} must be an integer, got {value!r}") from None
        if number < 1:
            raise ConfigError(f"{key} must be at least 1, got {number}")
        return number

    @property
    def config_path(self) -> Optional[Path]:
        """Path to loaded config file, or None if using defaults."""
        return self._config_path

    @property
    def default_format(self) -> str:
        return str(self._config.get("default_format", DEFAULT_CONFIG["default_format"]))

    @property
    def namespace(self) -> str:
        return str(self._config.get("namespace", DEFAULT_CONFIG["namespace"]))

    @property
    def craft_constructor(self) -> str:
        return str(self._config.get("craft_constructor", DEFAULT_CONFIG["craft_constructor"]))

    @property
    def chunk_size(self) -> int:
        """Items per conversion batch."""
        return self._positive_int("chunk_size")

    @property
    def pause_every(self) -> int:
        """Batches between cooperative pauses."""
        return self._positive_int("pause_every")

    @property
    def encoding_fallbacks(self) -> List[str]:
        encodings = self._config.get("encoding_fallbacks") or DEFAULT_CONFIG["encoding_fallbacks"]
        if isinstance(encodings, str):
            encodings = [encodings]
        return [str(e) for e in encodings]

    def to_dict(self) -> Dict[str, Any]:
        """Export current configuration as dict."""
        return {
            "default_format": self.default_format,
            "namespace": self.namespace,
            "craft_constructor": self.craft_constructor,
            "chunk_size": self.chunk_size,
            "pause_every": self.pause_every,
            "encoding_fallbacks": self.encoding_fallbacks,
            "config_file": str(self._config_path) if self._config_path else None,
        }


# Global config instance (lazy-loaded)
_config: Optional[ConverterConfig] = None


def get_config(config_path: Optional[Path] = None) -> ConverterConfig:
    """Get the global config instance, loading if needed."""
    global _config
    if _config is None or config_path is not None:
        _config = ConverterConfig(config_path)
    return _config


def write_default_config(path: Optional[Path] = None) -> Path:
    """
    Write a default configuration file.

    Returns the path where config was written.
    """
    if path is None:
        path = CONFIG_SEARCH_PATHS[0]
    path = Path(path)

    path.parent.mkdir(parents=True, exist_ok=True)

    config_content = """# itemshift configuration
#
# Defaults for `itemshift convert`. Command line flags override these,
# and ITEMSHIFT_FORMAT / ITEMSHIFT_CHUNK_SIZE / ITEMSHIFT_NAMESPACE
# override this file.

# Output format: original, compact, json, csv or minimal
default_format: compact

# Shared table name used in Lua output headers
namespace: QBShared

# Constructor name recognized by the craft dialect
craft_constructor: createCraftable

# Chunked conversion
chunk_size: 1000        # Items per batch
pause_every: 5          # Batches between pauses

# Source encodings, tried in order
encoding_fallbacks:
  - utf-8-sig
  - utf-8
  - latin-1
"""

    with open(path, 'w', encoding='utf-8') as f:
        f.write(config_content)

    return path
