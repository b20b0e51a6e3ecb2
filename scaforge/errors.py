"""Error taxonomy for plugin resolution and project configuration."""

import json
import re
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Error codes raised by the catalog, resolver and config layer."""

    PLUGIN_NOT_FOUND = "PLUGIN_NOT_FOUND"
    PLUGIN_ALREADY_INSTALLED = "PLUGIN_ALREADY_INSTALLED"
    PLUGIN_NOT_INSTALLED = "PLUGIN_NOT_INSTALLED"
    TEMPLATE_NOT_SUPPORTED = "TEMPLATE_NOT_SUPPORTED"
    PLUGIN_CONFLICT = "PLUGIN_CONFLICT"
    PLUGIN_DEPENDENCY_MISSING = "PLUGIN_DEPENDENCY_MISSING"
    PLUGIN_HAS_DEPENDENTS = "PLUGIN_HAS_DEPENDENTS"
    PLUGIN_DEPENDENCY_CYCLE = "PLUGIN_DEPENDENCY_CYCLE"
    CONFIG_INVALID = "CONFIG_INVALID"
    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"


ERROR_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.PLUGIN_NOT_FOUND: 'Plugin "{name}" not found in registry',
    ErrorCode.PLUGIN_ALREADY_INSTALLED: 'Plugin "{name}" is already installed',
    ErrorCode.PLUGIN_NOT_INSTALLED: 'Plugin "{name}" is not installed',
    ErrorCode.TEMPLATE_NOT_SUPPORTED: 'Plugin "{name}" does not support {target} template',
    ErrorCode.PLUGIN_CONFLICT: 'Plugin "{name}" conflicts with installed plugins: {conflicts}',
    ErrorCode.PLUGIN_DEPENDENCY_MISSING: 'Plugin "{name}" requires these plugins to be installed first: {missing}',
    ErrorCode.PLUGIN_HAS_DEPENDENTS: 'Cannot remove "{name}": {dependents} depend on it',
    ErrorCode.PLUGIN_DEPENDENCY_CYCLE: 'Plugin "{name}" has a dependency cycle: {cycle}',
    ErrorCode.CONFIG_INVALID: "Invalid configuration: {details}",
    ErrorCode.CONFIG_NOT_FOUND: "{path} not found. Is this a Scaforge project?",
}

_PLACEHOLDER = re.compile(r"\{(\w+)\}")

# Keys already rendered into the message, skipped by format_error_for_display
_MESSAGE_KEYS = {"name", "target", "conflicts", "missing", "dependents", "cycle", "details", "path"}


def get_error_message(code: ErrorCode, details: Optional[Dict[str, Any]] = None) -> str:
    """Render the message template for an error code.

    Unknown placeholders are left in place, list values are joined with ", ".
    """
    template = ERROR_MESSAGES[code]
    if not details:
        return template

    def _replace(match: re.Match) -> str:
        value = details.get(match.group(1))
        if value is None:
            return match.group(0)
        if isinstance(value, (list, tuple)):
            return ", ".join(str(v) for v in value)
        return str(value)

    return _PLACEHOLDER.sub(_replace, template)


class ScaforgeError(Exception):
    """Base error carrying a code and the offending names."""

    code: ErrorCode = ErrorCode.CONFIG_INVALID

    def __init__(self, code: Optional[ErrorCode] = None, **details: Any):
        if code is not None:
            self.code = code
        self.details: Dict[str, Any] = details
        self.message = get_error_message(self.code, details)
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Serialize the error for API responses."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class PluginNotFoundError(ScaforgeError):
    code = ErrorCode.PLUGIN_NOT_FOUND

    def __init__(self, name: str, required_by: Optional[str] = None):
        details: Dict[str, Any] = {"name": name}
        if required_by:
            details["required_by"] = required_by
        super().__init__(**details)
        self.name = name


class PluginAlreadyInstalledError(ScaforgeError):
    code = ErrorCode.PLUGIN_ALREADY_INSTALLED

    def __init__(self, name: str):
        super().__init__(name=name)
        self.name = name


class PluginNotInstalledError(ScaforgeError):
    code = ErrorCode.PLUGIN_NOT_INSTALLED

    def __init__(self, name: str):
        super().__init__(name=name)
        self.name = name


class TargetNotSupportedError(ScaforgeError):
    code = ErrorCode.TEMPLATE_NOT_SUPPORTED

    def __init__(self, name: str, target: str, supported_targets: List[str]):
        super().__init__(name=name, target=target, supported_targets=list(supported_targets))
        self.name = name
        self.target = target
        self.supported_targets = list(supported_targets)


class PluginConflictError(ScaforgeError):
    code = ErrorCode.PLUGIN_CONFLICT

    def __init__(self, name: str, conflicts: List[str]):
        super().__init__(name=name, conflicts=list(conflicts))
        self.name = name
        self.conflicts = list(conflicts)


class DependencyMissingError(ScaforgeError):
    code = ErrorCode.PLUGIN_DEPENDENCY_MISSING

    def __init__(self, name: str, missing: List[str]):
        super().__init__(name=name, missing=list(missing))
        self.name = name
        self.missing = list(missing)


class HasDependentsError(ScaforgeError):
    code = ErrorCode.PLUGIN_HAS_DEPENDENTS

    def __init__(self, name: str, dependents: List[str]):
        super().__init__(name=name, dependents=list(dependents))
        self.name = name
        self.dependents = list(dependents)


class DependencyCycleError(ScaforgeError):
    """A plugin reaches itself through its dependency chain."""

    code = ErrorCode.PLUGIN_DEPENDENCY_CYCLE

    def __init__(self, name: str, cycle: List[str]):
        super().__init__(name=name, cycle=" -> ".join(cycle))
        self.name = name
        self.cycle = list(cycle)


class ConfigInvalidError(ScaforgeError):
    code = ErrorCode.CONFIG_INVALID

    def __init__(self, details: str, errors: Optional[List[dict]] = None):
        super().__init__(details=details, errors=errors or [])
        self.errors = errors or []


class ConfigNotFoundError(ScaforgeError):
    code = ErrorCode.CONFIG_NOT_FOUND

    def __init__(self, path: str):
        super().__init__(path=path)
        self.path = path


def is_scaforge_error(error: BaseException) -> bool:
    return isinstance(error, ScaforgeError)


def format_error_for_display(error: ScaforgeError) -> str:
    """Format an error for terminal output, including extra context keys."""
    lines = [f"Error [{error.code.value}]: {error.message}"]

    extra = [
        f"  {key}: {json.dumps(value, default=str)}"
        for key, value in error.details.items()
        if key not in _MESSAGE_KEYS and value not in (None, [], {})
    ]
    if extra:
        lines.append("Additional details:")
        lines.extend(extra)

    return "\n".join(lines)
