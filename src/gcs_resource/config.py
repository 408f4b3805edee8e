"""
Local defaults for gcs-resource.

An optional YAML file supplies `source` defaults that are merged under every
request's `source`, and a default `log_level`. Request values always win.
"""

import os
from typing import Any, Dict, Optional

import platformdirs
import yaml

from gcs_resource.constants import APP_NAME, CONFIG_FILE_NAME, CONFIG_PATH_ENV_VAR
from gcs_resource.exceptions import ConfigFileError
from gcs_resource.log_utils import logger


def default_config_path() -> str:
    return os.path.join(platformdirs.user_config_dir(APP_NAME), CONFIG_FILE_NAME)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the defaults file.

    The file is `path` if given, else the one named by GCS_RESOURCE_CONFIG,
    else `config.yaml` in the platformdirs user config directory.

    Returns:
        dict: The parsed configuration; empty when the default file does not exist.

    Raises:
        ConfigFileError: If an explicitly named file is missing, or any file is
            unreadable, malformed, or not a mapping.
    """
    explicit_path = path or os.environ.get(CONFIG_PATH_ENV_VAR)
    config_path = explicit_path or default_config_path()

    if not os.path.exists(config_path):
        if explicit_path:
            raise ConfigFileError("configuration file not found", details=config_path)
        logger.debug("No configuration file at %s", config_path)
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigFileError(
            f"could not read configuration file {config_path}", details=str(e)
        ) from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigFileError(
            f"configuration file {config_path} must contain a mapping"
        )
    if not isinstance(config.get("source", {}), dict):
        raise ConfigFileError(
            f"'source' in configuration file {config_path} must be a mapping"
        )

    logger.debug("Loaded configuration from %s", config_path)
    return config


def merge_source_defaults(payload: Any, config: Dict[str, Any]) -> Any:
    """
    Return `payload` with the configured source defaults merged under its `source`.

    Payloads that are not JSON objects, or whose `source` is not one, are
    returned unchanged so that request parsing reports the problem.
    """
    defaults = config.get("source") or {}
    if not defaults or not isinstance(payload, dict):
        return payload

    source = payload.get("source")
    if source is None:
        source = {}
    if not isinstance(source, dict):
        return payload

    return {**payload, "source": {**defaults, **source}}
