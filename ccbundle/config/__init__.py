# CCBundle Configuration Module
# Handles YAML-based configuration loading, validation, and defaults

from ccbundle.config.defaults import DEFAULT_CONFIG, generate_default_config
from ccbundle.config.loader import (
    ensure_config_exists,
    get_config_path,
    load_config,
    load_or_default_config,
    save_config,
    validate_config_file,
)
from ccbundle.config.schema import (
    BackupConfig,
    BundleConfig,
    CacheConfig,
    Category,
    OutputConfig,
    PeerTool,
    PeerToolsConfig,
    RemoteConfig,
    TargetConfig,
)

__all__ = [
    # Schema
    "BundleConfig",
    "RemoteConfig",
    "TargetConfig",
    "BackupConfig",
    "CacheConfig",
    "PeerToolsConfig",
    "OutputConfig",
    "Category",
    "PeerTool",
    # Loader
    "load_config",
    "load_or_default_config",
    "save_config",
    "get_config_path",
    "ensure_config_exists",
    "validate_config_file",
    # Defaults
    "DEFAULT_CONFIG",
    "generate_default_config",
]
