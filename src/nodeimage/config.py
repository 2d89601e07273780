"""Configuration management module.

Loads image provider settings from a TOML file, with environment variable
overrides for the values a controller deployment usually injects.

Config file lookup:
- Explicit path (--config)
- ~/.nodeimage/config.toml

Settings may sit at the top level or under a [nodeimage] table.
"""

import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import tomli

logger = logging.getLogger(__name__)

ENV_PREFIX = "NODEIMAGE_"


class ConfigError(Exception):
    """Raised when configuration operations fail."""

    pass


_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


def _coerce(field_type: Any, value: Any, source: str) -> Any:
    """Convert a raw setting to its field type.

    Args:
        field_type: Dataclass field type (bool, int or str)
        value: Raw value from TOML or the environment
        source: Setting name used in error messages

    Raises:
        ConfigError: If the value cannot represent the field type
    """
    if field_type in (bool, "bool"):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in _TRUE_VALUES:
                return True
            if normalized in _FALSE_VALUES:
                return False
        raise ConfigError(f"Invalid boolean for {source}: {value!r}")

    if field_type in (int, "int"):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError as e:
                raise ConfigError(f"Invalid integer for {source}: {value!r}") from e
        raise ConfigError(f"Invalid integer for {source}: {value!r}")

    if not isinstance(value, str):
        raise ConfigError(f"Invalid string for {source}: {value!r}")
    return value


@dataclass
class ImageProviderConfig:
    """Image provider configuration.

    Attributes:
        location: Azure region node images are resolved in
        subscription_id: Cluster subscription
        use_sig: Resolve default images from shared galleries instead of
            community galleries
        sig_subscription_id: Subscription hosting the shared galleries
        image_cache_ttl: Seconds a resolved image ID stays cached
        image_cache_cleanup_interval: Seconds between cache sweeps
        kubernetes_version_cache_ttl: Seconds the cluster version stays cached
    """

    location: str = ""
    subscription_id: str = ""
    use_sig: bool = False
    sig_subscription_id: str = ""
    image_cache_ttl: int = 259200  # 3 days
    image_cache_cleanup_interval: int = 3600  # 1 hour
    kubernetes_version_cache_ttl: int = 900  # 15 minutes

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImageProviderConfig":
        """Create from dictionary, ignoring unknown keys.

        Raises:
            ConfigError: If a value does not match its setting's type
        """
        types = {f.name: f.type for f in fields(cls)}
        unknown = set(data) - set(types)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")
        return cls(**{k: _coerce(types[k], v, k) for k, v in data.items() if k in types})

    def apply_env(self, environ: dict[str, str] | None = None) -> "ImageProviderConfig":
        """Override fields from NODEIMAGE_* environment variables.

        Args:
            environ: Environment mapping (default: os.environ)

        Returns:
            self

        Raises:
            ConfigError: If a variable does not match its setting's type
        """
        environ = os.environ if environ is None else environ
        for f in fields(self):
            raw = environ.get(f"{ENV_PREFIX}{f.name.upper()}")
            if raw is None:
                continue
            setattr(self, f.name, _coerce(f.type, raw, f"{ENV_PREFIX}{f.name.upper()}"))
        return self

    def validate(self) -> None:
        """Check required settings.

        Raises:
            ConfigError: If a required setting is missing or invalid
        """
        missing = [name for name in ("location", "subscription_id") if not getattr(self, name)]
        if self.use_sig and not self.sig_subscription_id:
            missing.append("sig_subscription_id")
        if missing:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")
        for name in (
            "image_cache_ttl",
            "image_cache_cleanup_interval",
            "kubernetes_version_cache_ttl",
        ):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive, got {getattr(self, name)}")


class ConfigManager:
    """Load image provider configuration.

    Configuration is read from ~/.nodeimage/config.toml unless a path is given.
    """

    DEFAULT_CONFIG_DIR = Path.home() / ".nodeimage"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

    @classmethod
    def get_config_path(cls, custom_path: str | None = None) -> Path:
        """Get configuration file path.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            Path to config file

        Raises:
            ConfigError: If a custom path does not exist
        """
        if custom_path:
            path = Path(custom_path).expanduser().resolve()
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}")
            return path

        return cls.DEFAULT_CONFIG_FILE

    @classmethod
    def load_config(
        cls, custom_path: str | None = None, environ: dict[str, str] | None = None
    ) -> ImageProviderConfig:
        """Load configuration from file and environment.

        Args:
            custom_path: Custom config file path (optional)
            environ: Environment mapping (default: os.environ)

        Returns:
            ImageProviderConfig object

        Raises:
            ConfigError: If loading fails
        """
        config_path = cls.get_config_path(custom_path)

        if not config_path.exists():
            logger.debug("Config file not found, using defaults")
            return ImageProviderConfig().apply_env(environ)

        try:
            with open(config_path, "rb") as f:
                data = tomli.load(f)
        except (OSError, tomli.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to load config: {e}") from e

        section = data.get("nodeimage", data)
        logger.debug(f"Loaded config from: {config_path}")
        return ImageProviderConfig.from_dict(section).apply_env(environ)


__all__ = ["ConfigError", "ConfigManager", "ImageProviderConfig"]
