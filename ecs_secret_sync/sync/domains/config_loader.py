"""Configuration loader for ecs-secret-sync."""
import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60
CONFIG_PATH_ENV = "ECS_SECRET_SYNC_CONFIG"

# Environment variable -> SyncConfig field
ENV_VARS = {
    "AWS_REGION": "region",
    "AWS_SECRET_NAME": "secret_id",
    "ECS_TASK_DEFINITION": "task_definition",
    "CHECK_INTERVAL": "interval_seconds",
}


class ConfigError(Exception):
    """Configuration error exception."""
    pass


@dataclass
class SyncConfig:
    """Settings for the reconciler and its scheduler."""
    secret_id: str
    task_definition: str
    interval_seconds: int = DEFAULT_INTERVAL_SECONDS
    region: Optional[str] = None
    dry_run: bool = False


def default_config_path() -> Path:
    return Path.home() / ".config" / "ecs-secret-sync" / "config.yml"


def find_config_path(explicit_path: Optional[str] = None,
                     environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """
    Get config file path.

    Priority order:
    1. Explicit path (--config)
    2. ECS_SECRET_SYNC_CONFIG environment variable
    3. Default location: ~/.config/ecs-secret-sync/config.yml

    Returns:
        Path to config file, or None when no file is configured and the
        default location does not exist

    Raises:
        ConfigError: If an explicitly requested file doesn't exist
    """
    environ = os.environ if environ is None else environ

    requested = explicit_path or environ.get(CONFIG_PATH_ENV)
    if requested:
        config_path = Path(requested).expanduser()
        if not config_path.is_file():
            raise ConfigError(
                f"Configuration file not found at: {config_path}\n"
                f"Check --config or the {CONFIG_PATH_ENV} environment variable."
            )
        logger.info(f"Using config file: {config_path}")
        return str(config_path)

    default_config = default_config_path()
    if default_config.is_file():
        logger.info(f"Using default config location: {default_config}")
        return str(default_config)

    logger.debug("No config file found, using environment only")
    return None


def _read_config_file(config_path: str) -> Dict[str, Any]:
    """Load the YAML file and flatten it into SyncConfig field names."""
    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}")

    if not data:
        raise ConfigError(f"Config file at {config_path} is empty")

    if not isinstance(data, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping")

    values: Dict[str, Any] = {}

    aws = data.get("aws") or {}
    if not isinstance(aws, dict):
        raise ConfigError(f"'aws' section in {config_path} must be a mapping")
    if aws.get("region"):
        values["region"] = aws["region"]

    sync = data.get("sync") or {}
    if not isinstance(sync, dict):
        raise ConfigError(f"'sync' section in {config_path} must be a mapping")
    for key in ("secret_id", "task_definition", "interval_seconds", "dry_run"):
        if sync.get(key) is not None:
            values[key] = sync[key]

    return values


def _parse_interval(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"Invalid check interval: {value!r}")
    try:
        interval = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid check interval: {value!r} (expected whole seconds)")
    if interval <= 0:
        raise ConfigError(f"Check interval must be positive, got {interval}")
    return interval


def _parse_dry_run(value: Any) -> bool:
    # YAML already maps unquoted true/false/yes/no to bool; anything else is a mistake
    if not isinstance(value, bool):
        raise ConfigError(f"Invalid dry_run value: {value!r} (expected true or false, unquoted)")
    return value


def load_config(config_path: Optional[str] = None,
                overrides: Optional[Mapping[str, Any]] = None,
                environ: Optional[Mapping[str, str]] = None) -> SyncConfig:
    """
    Resolve configuration from file, environment and explicit overrides.

    Args:
        config_path: Explicit YAML file path (takes precedence over discovery)
        overrides: Values from the command line; None entries are ignored
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated SyncConfig

    Raises:
        ConfigError: If the file is invalid or required settings are missing
    """
    environ = os.environ if environ is None else environ

    values: Dict[str, Any] = {}

    path = find_config_path(config_path, environ)
    if path:
        values.update(_read_config_file(path))

    for env_var, key in ENV_VARS.items():
        if environ.get(env_var):
            values[key] = environ[env_var]

    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value

    missing = [key for key in ("secret_id", "task_definition") if not values.get(key)]
    if missing:
        raise ConfigError(
            f"Missing required setting(s): {', '.join(missing)}\n"
            f"Set AWS_SECRET_NAME / ECS_TASK_DEFINITION, pass --secret-id / "
            f"--task-definition, or add them under 'sync:' in {default_config_path()}"
        )

    config = SyncConfig(
        secret_id=str(values["secret_id"]),
        task_definition=str(values["task_definition"]),
        interval_seconds=_parse_interval(values.get("interval_seconds", DEFAULT_INTERVAL_SECONDS)),
        region=values.get("region"),
        dry_run=_parse_dry_run(values.get("dry_run", False)),
    )

    logger.debug(f"Resolved configuration: {config}")
    return config
