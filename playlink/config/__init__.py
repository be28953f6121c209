# Playlink Configuration Module
# Handles YAML-based configuration loading, validation, and defaults

from playlink.config.defaults import DEFAULT_CONFIG, default_config, generate_default_config
from playlink.config.loader import (
    ensure_config_exists,
    get_config_path,
    load_config,
    load_config_or_default,
    validate_config_file,
)
from playlink.config.schema import (
    ChatConfig,
    HooksConfig,
    HostConfig,
    IdentifierConfig,
    MalformedPolicy,
    OutputConfig,
    PlaylinkConfig,
    RemoteConfig,
    ScheduleConfig,
    ServerConfig,
)

__all__ = [
    # Schema
    "PlaylinkConfig",
    "ServerConfig",
    "RemoteConfig",
    "ScheduleConfig",
    "IdentifierConfig",
    "HooksConfig",
    "ChatConfig",
    "HostConfig",
    "OutputConfig",
    "MalformedPolicy",
    # Loader
    "load_config",
    "load_config_or_default",
    "get_config_path",
    "ensure_config_exists",
    "validate_config_file",
    # Defaults
    "DEFAULT_CONFIG",
    "default_config",
    "generate_default_config",
]
