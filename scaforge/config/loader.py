"""Configuration loader - reads and writes the project's scaforge config file."""

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

import yaml

from scaforge.config.types import ProjectConfig, define_config
from scaforge.errors import ConfigInvalidError, ConfigNotFoundError

logger = logging.getLogger(__name__)


class ConfigCodec(Protocol):
    """Converts a ProjectConfig to and from its persisted text form."""

    file_name: str

    def dumps(self, config: ProjectConfig) -> str:
        ...

    def loads(self, text: str) -> ProjectConfig:
        ...


class JsonConfigCodec:
    """scaforge.json"""

    file_name = "scaforge.json"

    def __init__(self, indent: int = 2):
        self.indent = indent

    def dumps(self, config: ProjectConfig) -> str:
        data = config.model_dump(mode="json")
        return json.dumps(data, indent=self.indent, ensure_ascii=False) + "\n"

    def loads(self, text: str) -> ProjectConfig:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigInvalidError(f"invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigInvalidError("config root must be an object")
        return define_config(data)


class YamlConfigCodec:
    """scaforge.yaml"""

    file_name = "scaforge.yaml"

    def dumps(self, config: ProjectConfig) -> str:
        data = config.model_dump(mode="json")
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)

    def loads(self, text: str) -> ProjectConfig:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigInvalidError(f"invalid YAML: {e}") from e
        if not isinstance(data, dict):
            raise ConfigInvalidError("config root must be a mapping")
        return define_config(data)


CODECS: Dict[str, ConfigCodec] = {
    "json": JsonConfigCodec(),
    "yaml": YamlConfigCodec(),
}


def get_codec(config_format: str) -> ConfigCodec:
    """Get the codec registered for a format name ("json" or "yaml")."""
    try:
        return CODECS[config_format.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown config format '{config_format}'. Available formats: {list(CODECS)}"
        ) from None


class ConfigStore:
    """Loads and saves one project's configuration file.

    Without an explicit codec, the first existing file among the known
    formats is used; new projects default to JSON.
    """

    def __init__(self, project_root: Path, codec: Optional[ConfigCodec] = None):
        self.project_root = Path(project_root)
        self.codec = codec or self._detect_codec()

    def _detect_codec(self) -> ConfigCodec:
        for codec in CODECS.values():
            if (self.project_root / codec.file_name).exists():
                return codec
        return CODECS["json"]

    @property
    def path(self) -> Path:
        return self.project_root / self.codec.file_name

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> ProjectConfig:
        """Load and validate the project configuration.

        Raises:
            ConfigNotFoundError: if the config file does not exist
            ConfigInvalidError: if it cannot be parsed or fails validation
        """
        if not self.exists():
            raise ConfigNotFoundError(self.codec.file_name)

        with open(self.path, "r", encoding="utf-8") as f:
            config = self.codec.loads(f.read())
        logger.debug(f"Loaded project config from {self.path}")
        return config

    def save(self, config: ProjectConfig) -> None:
        """Save the project configuration."""
        self.project_root.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(self.codec.dumps(config))
        logger.info(f"Saved project config to {self.path}")


def config_exists(project_root: Path) -> bool:
    return ConfigStore(project_root).exists()


def load_config(project_root: Path, codec: Optional[ConfigCodec] = None) -> ProjectConfig:
    return ConfigStore(project_root, codec).load()


def save_config(project_root: Path, config: ProjectConfig, codec: Optional[ConfigCodec] = None) -> None:
    ConfigStore(project_root, codec).save(config)


def serialize_config(config: ProjectConfig) -> str:
    """Serialize a config to JSON text."""
    return CODECS["json"].dumps(config)


def deserialize_config(text: str) -> ProjectConfig:
    """Parse and validate JSON text produced by serialize_config."""
    return CODECS["json"].loads(text)
