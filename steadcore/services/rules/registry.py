"""The process-wide Config.

The config is loaded exactly once per process, either installed explicitly
(e.g. by the build step or tests) or loaded lazily on first use from the
location named in settings. A second initialization is an error rather than
a silent replacement, since handles held elsewhere would stop matching.
"""

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from steadcore.config import Settings, get_settings

from .content import Config
from .parse import yaml_and_verify
from .snapshot import read_binary_snapshot

logger = logging.getLogger(__name__)


def load_config_from_settings(settings: Settings) -> Config:
    """Load the config from wherever settings point."""
    if settings.CONFIG_SOURCE == "yaml":
        logger.info("Loading config from YAML: path=%s", settings.CONFIG_PATH)
        return yaml_and_verify(settings.CONFIG_PATH, settings)

    path = Path(settings.binary_snapshot_path)
    logger.info("Loading config snapshot: path=%s", path)
    return read_binary_snapshot(path)


class ConfigRegistry:
    """Holds one Config, initialized at most once."""

    def __init__(self, loader: Callable[[], Config] | None = None):
        self._loader = loader or (lambda: load_config_from_settings(get_settings()))
        self._config: Config | None = None
        self._lock = threading.RLock()
        self._loading = False

    @property
    def is_initialized(self) -> bool:
        return self._config is not None

    def initialize(self, config: Config) -> Config:
        """Install a config. Raises RuntimeError if one is already installed."""
        with self._lock:
            if self._config is not None or self._loading:
                raise RuntimeError("Config has already been initialized")
            self._config = config
        logger.info(
            "Config initialized: items=%d, plants=%d",
            len(config.possession_archetypes),
            len(config.plant_archetypes),
        )
        return config

    def get(self) -> Config:
        """Return the config, loading it on first use."""
        if self._config is not None:
            return self._config
        with self._lock:
            if self._config is not None:
                return self._config
            if self._loading:
                raise RuntimeError("Config requested while it is being loaded")
            self._loading = True
            try:
                config = self._loader()
            finally:
                self._loading = False
            self._config = config
        logger.info(
            "Config loaded: items=%d, plants=%d",
            len(config.possession_archetypes),
            len(config.plant_archetypes),
        )
        return config


_registry = ConfigRegistry()


def get_config() -> Config:
    return _registry.get()


def init_config(config: Config) -> Config:
    return _registry.initialize(config)
