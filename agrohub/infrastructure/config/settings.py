"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
YAML configuration file (~/.agrohub/config.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from agrohub.domain.models.common import BackoffPolicy

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".agrohub"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"
ENV_PREFIX = "AGROHUB_"

DEFAULT_PROVIDER = "gemini"
DEFAULT_MAX_RETRIES = 1
DEFAULT_INITIAL_BACKOFF_S = 2.0
DEFAULT_BACKOFF_FACTOR = 2.0
DEFAULT_QUOTA_COOLDOWN_SECONDS = 300.0
DEFAULT_CACHE_BACKEND = "disk"
DEFAULT_CACHE_DIR = DEFAULT_CONFIG_DIR / "cache"
DEFAULT_CACHE_NAMESPACE = "agrohub_loc_v2"

# Provider specific key variables, checked after the generic ones
_PROVIDER_KEY_VARS = {
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "openai": ("OPENAI_API_KEY",),
    "groq": ("GROQ_API_KEY",),
}

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}  # For testing purposes
_loaded = False


def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None, force: bool = False) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values passed to get_config

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
        force: Reload even if configuration was already loaded.
    """
    global _config, _loaded
    if _loaded and not force:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. Load from YAML file (Lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(yaml_config)
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. Load from .env file (Medium priority)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        # override=False: ENV VARS take precedence
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("Skipping .env file loading (no .env found at or above current directory).")

    # 3. Environment Variables (Highest priority) are handled in get_config
    _loaded = True
    logger.info("Configuration loading process completed.")


def _coerce_env_value(value: str) -> Any:
    """Converts common string forms from the environment to Python types."""
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False
    try:
        if '.' in value:
            return float(value)
        return int(value)
    except (ValueError, TypeError):
        return value


def _lookup_loaded(key: str) -> Any:
    """Finds `key` in the YAML config, flat ('ai.model') or nested (ai: {model: ...})."""
    if key in _config:
        return _config[key]
    node: Any = _config
    for part in key.split('.'):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable (AGROHUB_AI_MODEL, then AI_MODEL for 'ai.model')
    3. YAML config
    4. Default value

    Args:
        key: The configuration key
        default: Default value if the key is not found

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = key.upper().replace('.', '_')
    for candidate in (f"{ENV_PREFIX}{env_key}", env_key):
        if candidate in os.environ:
            return _coerce_env_value(os.environ[candidate])

    value = _lookup_loaded(key)
    if value is not None:
        return value

    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


# --- Convenience Functions ---

def get_default_provider() -> str:
    """Gets the AI provider ('gemini', 'openai' or 'groq')."""
    provider = get_config('ai.provider', DEFAULT_PROVIDER)
    return str(provider).lower() if provider is not None else DEFAULT_PROVIDER


def get_api_key(provider: Optional[str] = None) -> Optional[str]:
    """Gets the API credential for the provider.

    Checks AGROHUB_API_KEY / API_KEY / ai.api_key first, then the provider's
    conventional variable (e.g. GEMINI_API_KEY). Absence is not an error here.
    """
    key = get_config('api_key') or get_config('ai.api_key')
    if key is None:
        selected_provider = provider or get_default_provider()
        for env_var in _PROVIDER_KEY_VARS.get(selected_provider, ()):
            if os.environ.get(env_var):
                key = os.environ[env_var]
                break
    return str(key) if key is not None else None


def get_default_model(provider: Optional[str] = None) -> Optional[str]:
    """Gets the model for a provider; None lets the client pick its default."""
    selected_provider = provider or get_default_provider()
    model = get_config(f'ai.{selected_provider}.model') or get_config('ai.model')
    return str(model) if model is not None else None


def get_base_url(provider: Optional[str] = None) -> Optional[str]:
    """Gets an alternative endpoint for OpenAI-compatible providers."""
    selected_provider = provider or get_default_provider()
    url = get_config(f'ai.{selected_provider}.base_url') or get_config('ai.base_url')
    return str(url) if url is not None else None


def get_request_timeout() -> Optional[float]:
    timeout = get_config('ai.timeout_s')
    return float(timeout) if timeout is not None else None


def get_retry_policy() -> BackoffPolicy:
    """Gets the retry bound and backoff parameters."""
    return BackoffPolicy(
        max_retries=int(get_config('retry.max_retries', DEFAULT_MAX_RETRIES)),
        initial_delay=float(get_config('retry.initial_backoff_s', DEFAULT_INITIAL_BACKOFF_S)),
        factor=float(get_config('retry.backoff_factor', DEFAULT_BACKOFF_FACTOR)),
    )


def get_quota_cooldown_seconds() -> float:
    return float(get_config('quota.cooldown_seconds', DEFAULT_QUOTA_COOLDOWN_SECONDS))


def get_cache_backend() -> str:
    """Gets the location cache backend ('disk' or 'memory')."""
    return str(get_config('cache.backend', DEFAULT_CACHE_BACKEND)).lower()


def get_cache_dir() -> Path:
    return Path(str(get_config('cache.dir', DEFAULT_CACHE_DIR))).expanduser()


def get_cache_namespace() -> str:
    return str(get_config('cache.namespace', DEFAULT_CACHE_NAMESPACE))


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
