"""TOML-based configuration provider.

Config loading priority (highest to lowest):
1. Explicit file passed by the caller (e.g. `--config`)
2. Global: ~/.config/zcash-local-net/config.toml (user defaults)
3. Built-in defaults
"""

import logging
from pathlib import Path

from zcash_local_net.domain.config import LocalNetConfig
from zcash_local_net.domain.exceptions import ConfigError
from zcash_local_net.shared.config_io import get_global_config_path, load_config_data

logger = logging.getLogger(__name__)


class TomlConfigProvider:
    """Configuration provider that loads from TOML files.

    A missing or invalid global config is logged and skipped. An explicitly
    requested file must exist and be valid.
    """

    def load(self, config_path: Path | None = None) -> LocalNetConfig:
        """Load configuration with global fallback.

        Args:
            config_path: Optional explicit config file overriding the global one

        Returns:
            LocalNetConfig with merged values

        Raises:
            ConfigError: If `config_path` is missing or invalid
        """
        config = LocalNetConfig.default()

        global_path = get_global_config_path()
        if global_path.exists():
            try:
                global_data = load_config_data(global_path)
                config = LocalNetConfig.from_partial(config, global_data)
                logger.debug("Loaded global config from %s", global_path)
            except (FileNotFoundError, ValueError, TypeError) as e:
                logger.warning(f"Ignoring invalid global config {global_path}: {e}")

        if config_path is not None:
            try:
                data = load_config_data(config_path)
                config = LocalNetConfig.from_partial(config, data)
            except (FileNotFoundError, ValueError, TypeError) as e:
                raise ConfigError(
                    f"Could not load config {config_path}: {e}",
                    hint="Run 'zcash-local-net config show' to see the effective config",
                ) from e
            logger.debug("Loaded config from %s", config_path)

        return config
