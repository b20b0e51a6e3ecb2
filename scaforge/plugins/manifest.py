"""Plugin manifest model - describes a plugin's metadata and compatibility rules."""

from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Type, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model, field_validator

from scaforge.errors import ConfigInvalidError


class PluginCategory(str, Enum):
    """Plugin categories, used for integration patterns and grouping."""

    API = "api"
    CMS = "cms"
    AUTH = "auth"
    DATABASE = "database"
    PAYMENTS = "payments"
    EMAIL = "email"
    STORAGE = "storage"
    ANALYTICS = "analytics"
    MONITORING = "monitoring"
    CACHING = "caching"
    JOBS = "jobs"
    SEARCH = "search"
    FLAGS = "flags"
    SMS = "sms"
    PUSH = "push"
    REALTIME = "realtime"
    AI = "ai"
    VECTOR = "vector"
    I18N = "i18n"
    FORMS = "forms"
    STATE = "state"
    TESTING = "testing"
    SECURITY = "security"
    MEDIA = "media"
    MAPS = "maps"
    CHARTS = "charts"
    PDF = "pdf"
    SEO = "seo"
    SCHEDULING = "scheduling"
    COMMENTS = "comments"
    NOTIFICATIONS = "notifications"
    ADMIN = "admin"
    CONTENT = "content"
    INDONESIAN = "indonesian"


class FrameworkTarget(str, Enum):
    """Host frameworks a project can be generated for."""

    NEXTJS = "nextjs"
    TANSTACK = "tanstack"
    NUXT = "nuxt"
    HYDROGEN = "hydrogen"


@runtime_checkable
class ConfigSchema(Protocol):
    """Anything that can validate plugin options and produce their defaults."""

    def validate(self, options: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def defaults(self) -> Dict[str, Any]:
        ...


class PydanticConfigSchema:
    """ConfigSchema backed by a pydantic model class."""

    def __init__(self, model: Type[BaseModel]):
        self.model = model

    def validate(self, options: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return self.model(**(options or {})).model_dump()
        except ValidationError as e:
            raise ConfigInvalidError(
                str(e),
                errors=e.errors(include_url=False, include_context=False, include_input=False),
            ) from e

    def defaults(self) -> Dict[str, Any]:
        return {
            name: field.get_default(call_default_factory=True)
            for name, field in self.model.model_fields.items()
            if not field.is_required()
        }


def schema_from_json(schema: Dict[str, Any], name: str = "PluginOptions") -> PydanticConfigSchema:
    """Build a ConfigSchema from a JSON-Schema-like ``properties`` block.

    Only ``default`` and ``required`` are honoured; values are not type checked.
    """
    required = set(schema.get("required", []))
    fields = {}
    for key, spec in schema.get("properties", {}).items():
        if key in required or "default" not in spec:
            fields[key] = (Any, ...) if key in required else (Any, None)
        else:
            fields[key] = (Any, spec["default"])
    return PydanticConfigSchema(create_model(name, **fields))


class PluginFile(BaseModel):
    """Descriptor of a file a plugin or integration generates."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Project-relative output path")
    overwrite: bool = Field(default=False, description="Overwrite an existing file")
    condition: Optional[List[str]] = Field(
        default=None,
        description="Only generated when all of these plugins are installed",
    )


class PluginIntegration(BaseModel):
    """Files a plugin contributes when another plugin is also installed."""

    model_config = ConfigDict(frozen=True)

    plugin: str = Field(..., description="Target plugin name")
    type: str = Field(..., description="Integration type, e.g. middleware | context | provider")
    files: List[PluginFile] = Field(default_factory=list)


class PluginManifest(BaseModel):
    """Static plugin definition, immutable once registered."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(
        ...,
        pattern=r"^[a-z0-9]+(-[a-z0-9]+)+$",
        description="Unique plugin identifier (category-slug), e.g. 'auth-clerk'",
    )
    display_name: str = Field(default="", description="Human-readable plugin name")
    description: str = Field(default="", description="Plugin description")
    version: str = Field(default="1.0.0", description="Plugin version")
    category: PluginCategory = Field(..., description="Plugin category")
    supported_targets: List[FrameworkTarget] = Field(
        ...,
        min_length=1,
        description="Framework targets this plugin can be installed into",
    )
    dependencies: List[str] = Field(default_factory=list, description="Plugins that must be enabled too")
    conflicts: List[str] = Field(default_factory=list, description="Plugins that must not be enabled together")
    integrations: List[PluginIntegration] = Field(default_factory=list)
    config_schema: Optional[Any] = Field(
        default=None,
        exclude=True,
        description="Validator and default provider for plugin options",
    )
    post_install: Optional[str] = Field(default=None, description="Notes shown after installation")

    @field_validator("config_schema")
    @classmethod
    def _check_config_schema(cls, value: Any) -> Any:
        if value is not None and not isinstance(value, ConfigSchema):
            raise ValueError("config_schema must provide validate() and defaults()")
        return value

    def supports(self, target: str) -> bool:
        """Check if the plugin can be installed into a framework target."""
        return target in self.supported_targets

    def resolve_options(self, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Validate options through the config schema, filling defaults.

        Raises:
            ConfigInvalidError: if the schema rejects the options
        """
        if self.config_schema is None:
            return dict(options or {})
        return self.config_schema.validate(dict(options or {}))

    def to_dict(self) -> dict:
        """Serialize manifest to dict for API responses."""
        data = self.model_dump(mode="json")
        data["has_config_schema"] = self.config_schema is not None
        return data
