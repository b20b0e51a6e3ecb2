"""Auto-integration rules and manifest integration engine."""

from .rules import (
    DEFAULT_RULES,
    AutoIntegrationRule,
    IntegrationAction,
    IntegrationActionType,
    MatchedRule,
    RuleEngine,
    matches_pattern,
    rule_applies,
)
from .engine import (
    IntegrationResult,
    find_integrations_targeting,
    get_applicable_integrations,
    get_integration_files,
    has_integration,
    run_integrations,
)

__all__ = [
    "DEFAULT_RULES",
    "AutoIntegrationRule",
    "IntegrationAction",
    "IntegrationActionType",
    "MatchedRule",
    "RuleEngine",
    "matches_pattern",
    "rule_applies",
    "IntegrationResult",
    "find_integrations_targeting",
    "get_applicable_integrations",
    "get_integration_files",
    "has_integration",
    "run_integrations",
]
