"""Project configuration model and persistence."""

from .types import CodeStyle, PluginConfig, ProjectConfig, Settings, create_default_config, define_config
from .loader import (
    ConfigStore,
    JsonConfigCodec,
    YamlConfigCodec,
    config_exists,
    get_codec,
    load_config,
    save_config,
    serialize_config,
    deserialize_config,
)

__all__ = [
    "CodeStyle",
    "PluginConfig",
    "ProjectConfig",
    "Settings",
    "create_default_config",
    "define_config",
    "ConfigStore",
    "JsonConfigCodec",
    "YamlConfigCodec",
    "config_exists",
    "get_codec",
    "load_config",
    "save_config",
    "serialize_config",
    "deserialize_config",
]
