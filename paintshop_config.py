"""
paintshop_config.py

Central configuration management for Paintshop.
Stores and loads settings persistently in a JSON file.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from component_8_logging_config import get_logger

logger = get_logger(__name__)


# ============================================================================
# DEFAULT CONFIGURATION
# ============================================================================

DEFAULT_CONFIG = {
    # Parser
    "max_width": 100000,  # Largest accepted width line
    # Search
    "branching_strategy": "single",  # "single" or "exhaustive"
    "parallel_search_enabled": False,
    "parallel_max_workers": None,  # None = auto-detect (CPU cores, max 8)
    "parallel_depth": 4,  # Branch levels that may fork onto the pool
    # Search trace
    "search_explanation_enabled": False,
    "max_explanation_steps": 5000,
    # Driver
    "result_caching_enabled": True,
    "result_cache_size": 128,
    # Logging (applied by the command line entry point)
    "console_log_level": "WARNING",
    "file_log_level": "DEBUG",
    "file_logging_enabled": False,
    "performance_logging": True,
}


# ============================================================================
# CONFIGURATION MANAGER
# ============================================================================


class PaintshopConfig:
    """
    Singleton holding the Paintshop configuration.

    Settings persist in 'paintshop_config.json' next to this module.
    """

    _instance: Optional["PaintshopConfig"] = None
    _config: Dict[str, Any] = {}
    _config_file: Path = Path(__file__).parent / "paintshop_config.json"

    def __new__(cls):
        """Singleton: only one instance"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._load_config()
        return cls._instance

    def _load_config(self):
        """Load configuration from JSON or fall back to defaults"""
        if self._config_file.exists():
            try:
                with open(self._config_file, "r", encoding="utf-8") as f:
                    self._config = json.load(f)
                logger.info("Configuration loaded", extra={"file": str(self._config_file)})

                # Merge with defaults (settings added in newer versions)
                for key, value in DEFAULT_CONFIG.items():
                    if key not in self._config:
                        self._config[key] = value
                        logger.debug("Default value added", extra={"key": key, "value": value})

            except (OSError, ValueError) as e:
                logger.error("Failed to load configuration", extra={"error": str(e)})
                self._config = DEFAULT_CONFIG.copy()
        else:
            logger.debug("No configuration file found, using defaults")
            self._config = DEFAULT_CONFIG.copy()

    def _save_config(self):
        """Write current configuration to the JSON file"""
        try:
            with open(self._config_file, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=4, ensure_ascii=False)
            logger.debug("Configuration saved", extra={"file": str(self._config_file)})
        except OSError as e:
            logger.error("Failed to save configuration", extra={"error": str(e)})

    def reload(self):
        """Re-read the configuration file"""
        self._load_config()

    def get(self, key: str, default: Any = None) -> Any:
        """Return a configuration value"""
        return self._config.get(key, default)

    def set(self, key: str, value: Any):
        """Set a configuration value and persist it"""
        self._config[key] = value
        self._save_config()
        logger.info("Configuration updated", extra={"key": key, "value": value})

    def update(self, settings: Dict[str, Any]):
        """Update several configuration values at once"""
        self._config.update(settings)
        self._save_config()
        logger.info("Configuration updated", extra={"updated_keys": list(settings.keys())})

    def get_all(self) -> Dict[str, Any]:
        """Return a copy of the whole configuration"""
        return self._config.copy()

    def reset_to_defaults(self):
        """Reset configuration to defaults"""
        self._config = DEFAULT_CONFIG.copy()
        self._save_config()
        logger.warning("Configuration reset to defaults")

    # ========================================================================
    # CONVENIENCE PROPERTIES
    # ========================================================================

    @property
    def max_width(self) -> int:
        """Largest width accepted by the parser"""
        return int(self.get("max_width", 100000))

    @property
    def branching_strategy(self) -> str:
        """'single' (one position per step) or 'exhaustive'"""
        return str(self.get("branching_strategy", "single"))

    @property
    def parallel_search_enabled(self) -> bool:
        return bool(self.get("parallel_search_enabled", False))

    @property
    def parallel_max_workers(self) -> Optional[int]:
        """Worker threads for parallel branches (None = auto-detect)"""
        return self.get("parallel_max_workers", None)

    @property
    def parallel_depth(self) -> int:
        return int(self.get("parallel_depth", 4))

    @property
    def search_explanation_enabled(self) -> bool:
        """Record a search trace during solving?"""
        return bool(self.get("search_explanation_enabled", False))

    @property
    def max_explanation_steps(self) -> int:
        return int(self.get("max_explanation_steps", 5000))

    @property
    def result_caching_enabled(self) -> bool:
        return bool(self.get("result_caching_enabled", True))

    @property
    def result_cache_size(self) -> int:
        return int(self.get("result_cache_size", 128))


# ============================================================================
# GLOBAL INSTANCE
# ============================================================================

config = PaintshopConfig()


def get_config() -> PaintshopConfig:
    """Return the global config instance"""
    return config
