"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a YAML
configuration file (``~/.seaplane/config.yaml``). Nested YAML tables are
flattened into dotted keys such as ``account.api_key``.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv

from seaplanecli.domain.errors import ConfigurationError
from seaplanecli.domain.models.request import TransportOptions

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".seaplane"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"
ENV_PREFIX = "SEAPLANE_"
# Conventional shorthand for SEAPLANE_ACCOUNT_API_KEY.
API_KEY_ENV_VAR = "SEAPLANE_API_KEY"

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}  # For testing purposes


def flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flattens nested mappings into dotted keys."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(flatten(value, prefix=f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def env_var_for(key: str) -> str:
    """``account.api_key`` -> ``SEAPLANE_ACCOUNT_API_KEY``."""
    return ENV_PREFIX + key.upper().replace(".", "_").replace("-", "_")


def load_configuration(
    config_file: Path = DEFAULT_CONFIG_FILE,
    env_file: Optional[Path] = None,
    stateless: bool = False,
) -> Dict[str, Any]:
    """Loads configuration from the YAML file and the .env file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
        stateless: Skip both files; only environment variables apply.

    Returns:
        The flattened YAML configuration.
    """
    global _config
    _config = {}

    if stateless:
        logger.debug("Stateless mode, skipping configuration files")
        return dict(_config)

    # 1. YAML file (lowest priority)
    if config_file.is_file():
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
        else:
            if isinstance(yaml_config, dict):
                _config.update(flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a mapping.")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. .env file; override=False lets real environment variables win
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path and load_dotenv(dotenv_path=dotenv_path, override=False):
        logger.info(f"Loaded environment variables from: {dotenv_path}")

    return dict(_config)


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by dotted key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable (``SEAPLANE_<KEY>``)
    3. YAML config
    4. Default value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = env_var_for(key)
    if env_key in os.environ:
        return os.environ[env_key]

    if key in _config:
        return _config[key]

    return default


def as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """Set configuration values that override every other source."""
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()


@dataclass(frozen=True)
class SeaplaneSettings:
    """Resolved settings consumed by the composition root."""

    api_key: Optional[str] = None
    identity_url: Optional[str] = None
    metadata_url: Optional[str] = None
    locks_url: Optional[str] = None
    restrict_url: Optional[str] = None
    allow_insecure_urls: bool = False
    allow_invalid_certs: bool = False
    log_level: Optional[str] = None
    log_file: Optional[str] = None
    log_format: Optional[str] = None
    config_file: Path = DEFAULT_CONFIG_FILE

    def transport_options(self) -> TransportOptions:
        return TransportOptions(
            allow_insecure_transport=self.allow_insecure_urls,
            allow_invalid_certificates=self.allow_invalid_certs,
        )

    def __repr__(self) -> str:
        return (
            f"SeaplaneSettings(api_key={'<set>' if self.api_key else None}, "
            f"identity_url={self.identity_url!r}, metadata_url={self.metadata_url!r}, "
            f"locks_url={self.locks_url!r}, restrict_url={self.restrict_url!r}, "
            f"allow_insecure_urls={self.allow_insecure_urls}, allow_invalid_certs={self.allow_invalid_certs}, "
            f"config_file={str(self.config_file)!r})"
        )


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def load_settings(
    config_file: Optional[Path] = None,
    env_file: Optional[Path] = None,
    stateless: bool = False,
    api_key: Optional[str] = None,
) -> SeaplaneSettings:
    """Loads every configuration layer and resolves it into SeaplaneSettings.

    Args:
        config_file: YAML file to read, defaults to ``~/.seaplane/config.yaml``.
        env_file: .env file to read, searched upwards from cwd if None.
        stateless: Ignore configuration files.
        api_key: Command line API key, wins over every other source.
    """
    path = config_file or DEFAULT_CONFIG_FILE
    load_configuration(path, env_file=env_file, stateless=stateless)

    key = api_key or os.environ.get(API_KEY_ENV_VAR) or get_config("account.api_key")
    settings = SeaplaneSettings(
        api_key=_optional_str(key),
        identity_url=_optional_str(get_config("api.identity_url")),
        metadata_url=_optional_str(get_config("api.metadata_url")),
        locks_url=_optional_str(get_config("api.locks_url")),
        restrict_url=_optional_str(get_config("api.restrict_url")),
        allow_insecure_urls=as_bool(get_config("danger_zone.allow_insecure_urls", False)),
        allow_invalid_certs=as_bool(get_config("danger_zone.allow_invalid_certs", False)),
        log_level=_optional_str(get_config("logging.level")),
        log_file=_optional_str(get_config("logging.file")),
        log_format=_optional_str(get_config("logging.format")),
        config_file=path,
    )
    logger.debug(f"Resolved {settings!r}")
    return settings


def _read_yaml(config_file: Path) -> Any:
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"{config_file} is not valid YAML: {e}") from e


def read_api_key(config_file: Path = DEFAULT_CONFIG_FILE) -> Optional[str]:
    """Returns the API key stored in ``config_file``, if any.

    Raises:
        ConfigurationError: If the file is not valid YAML.
    """
    if not config_file.is_file():
        return None
    data = _read_yaml(config_file) or {}
    if not isinstance(data, dict):
        return None
    return _optional_str(flatten(data).get("account.api_key"))


def save_api_key(config_file: Path, api_key: str) -> Path:
    """Persists ``api_key`` as ``account.api_key`` in ``config_file``, keeping other settings.

    Raises:
        OSError: If the file cannot be written.
        ConfigurationError: If the existing file is not valid YAML.
    """
    data: Dict[str, Any] = {}
    if config_file.is_file():
        loaded = _read_yaml(config_file)
        if isinstance(loaded, dict):
            data = loaded

    account = data.get("account")
    if not isinstance(account, dict):
        account = {}
    account["api_key"] = api_key
    data["account"] = account

    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    logger.info(f"Saved API key to {config_file}")
    return config_file
