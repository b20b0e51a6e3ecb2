"""Project configuration model - the persisted state the resolver operates on."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from scaforge.errors import ConfigInvalidError
from scaforge.plugins.manifest import FrameworkTarget


class PluginConfig(BaseModel):
    """Per-project state of one plugin."""

    enabled: bool = Field(..., description="Whether the plugin is enabled")
    options: Dict[str, Any] = Field(default_factory=dict, description="Plugin-specific options")


class CodeStyle(BaseModel):
    """Code style preferences for generated files."""

    semicolons: bool = True
    single_quote: bool = True
    tab_width: int = Field(default=2, ge=1, le=8)


class Settings(BaseModel):
    """Global project settings, not used for resolution."""

    generate_examples: bool = True
    code_style: Optional[CodeStyle] = None


class ProjectConfig(BaseModel):
    """Project configuration: framework target, installed plugins and settings."""

    name: str = Field(..., min_length=1, max_length=214, description="Project name")
    target: FrameworkTarget = Field(..., description="Framework the project is generated for")
    plugins: Dict[str, PluginConfig] = Field(default_factory=dict)
    settings: Optional[Settings] = None

    def enabled_plugins(self) -> List[str]:
        """Names of plugins whose entry has enabled=True, in insertion order."""
        return [name for name, plugin in self.plugins.items() if plugin.enabled]


def define_config(data: Dict[str, Any]) -> ProjectConfig:
    """Validate a raw mapping into a ProjectConfig.

    Raises:
        ConfigInvalidError: on schema violations
    """
    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigInvalidError(
            str(e),
            errors=e.errors(include_url=False, include_context=False, include_input=False),
        ) from e


def create_default_config(name: str, target: FrameworkTarget) -> ProjectConfig:
    """Create the configuration of a freshly initialized project."""
    return ProjectConfig(
        name=name,
        target=target,
        plugins={},
        settings=Settings(
            generate_examples=True,
            code_style=CodeStyle(semicolons=True, single_quote=True, tab_width=2),
        ),
    )
