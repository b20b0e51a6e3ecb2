"""Auto-integration rules - cross-plugin actions unlocked by plugin pairs."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from scaforge.plugins.manifest import PluginCategory

logger = logging.getLogger(__name__)

WILDCARD_SUFFIX = "-*"


class IntegrationActionType(str, Enum):
    ADD_MIDDLEWARE = "add-middleware"
    ADD_CONTEXT = "add-context"
    ADD_PROCEDURES = "add-procedures"
    ADD_PROVIDER = "add-provider"
    ADD_HOOK = "add-hook"


@dataclass(frozen=True)
class IntegrationAction:
    """What the code generator should do when a rule matches."""

    type: IntegrationActionType
    description: str
    template_hint: Optional[str] = None


@dataclass(frozen=True)
class AutoIntegrationRule:
    """Two plugin patterns that, when both present, unlock an action.

    Patterns are either an exact plugin name or a category wildcard such
    as ``auth-*``. Higher priority rules are reported first.
    """

    id: str
    description: str
    when: Tuple[str, str]
    action: Optional[IntegrationAction]
    priority: int = 0


@dataclass(frozen=True)
class MatchedRule:
    rule: AutoIntegrationRule
    matched_plugins: Tuple[str, str]

    def to_dict(self) -> dict:
        action = self.rule.action
        return {
            "rule": self.rule.id,
            "description": self.rule.description,
            "priority": self.rule.priority,
            "plugins": list(self.matched_plugins),
            "action": {
                "type": action.type.value,
                "description": action.description,
                "template_hint": action.template_hint,
            } if action else None,
        }


DEFAULT_RULES: List[AutoIntegrationRule] = [
    AutoIntegrationRule(
        id="auth-api-middleware",
        description="Add auth middleware to API routes",
        when=("auth-*", "api-*"),
        action=IntegrationAction(
            type=IntegrationActionType.ADD_MIDDLEWARE,
            description="Adds authentication middleware to protect API routes",
            template_hint="src/server/middleware/auth.ts",
        ),
        priority=100,
    ),
    AutoIntegrationRule(
        id="db-api-context",
        description="Add database client to API context",
        when=("db-*", "api-*"),
        action=IntegrationAction(
            type=IntegrationActionType.ADD_CONTEXT,
            description="Adds database client to API context for data access",
            template_hint="src/server/context/db.ts",
        ),
        priority=90,
    ),
    AutoIntegrationRule(
        id="cms-api-procedures",
        description="Add CMS procedures to API router",
        when=("cms-*", "api-*"),
        action=IntegrationAction(
            type=IntegrationActionType.ADD_PROCEDURES,
            description="Adds CMS-related procedures/resolvers to the API",
            template_hint="src/server/routers/cms.ts",
        ),
        priority=80,
    ),
    AutoIntegrationRule(
        id="auth-db-adapter",
        description="Configure auth adapter for database",
        when=("auth-*", "db-*"),
        action=IntegrationAction(
            type=IntegrationActionType.ADD_PROVIDER,
            description="Configures authentication to use database for session/user storage",
            template_hint="src/lib/auth/adapter.ts",
        ),
        priority=95,
    ),
    AutoIntegrationRule(
        id="analytics-api-hook",
        description="Add analytics tracking to API calls",
        when=("analytics-*", "api-*"),
        action=IntegrationAction(
            type=IntegrationActionType.ADD_HOOK,
            description="Adds analytics tracking hooks to API endpoints",
            template_hint="src/server/hooks/analytics.ts",
        ),
        priority=50,
    ),
    AutoIntegrationRule(
        id="cache-db-layer",
        description="Add caching layer for database queries",
        when=("cache-*", "db-*"),
        action=IntegrationAction(
            type=IntegrationActionType.ADD_MIDDLEWARE,
            description="Adds caching middleware for database query results",
            template_hint="src/lib/db/cache.ts",
        ),
        priority=70,
    ),
    AutoIntegrationRule(
        id="storage-api-routes",
        description="Add file upload routes to API",
        when=("storage-*", "api-*"),
        action=IntegrationAction(
            type=IntegrationActionType.ADD_PROCEDURES,
            description="Adds file upload and management routes to the API",
            template_hint="src/server/routers/storage.ts",
        ),
        priority=60,
    ),
    AutoIntegrationRule(
        id="email-auth-verification",
        description="Configure email for auth verification",
        when=("email-*", "auth-*"),
        action=IntegrationAction(
            type=IntegrationActionType.ADD_PROVIDER,
            description="Configures email provider for authentication verification emails",
            template_hint="src/lib/auth/email.ts",
        ),
        priority=85,
    ),
]


def matches_pattern(plugin_name: str, pattern: str) -> bool:
    """Check if a plugin name matches a pattern.

    ``auth-*`` matches every name starting with ``auth-``; any other
    pattern must equal the name exactly.
    """
    if pattern.endswith(WILDCARD_SUFFIX):
        return plugin_name.startswith(pattern[:-1])
    return plugin_name == pattern


def rule_applies(rule: AutoIntegrationRule, plugin_a: str, plugin_b: str) -> bool:
    """Check a rule against two plugins, in either order."""
    pattern_a, pattern_b = rule.when
    return (
        (matches_pattern(plugin_a, pattern_a) and matches_pattern(plugin_b, pattern_b))
        or (matches_pattern(plugin_a, pattern_b) and matches_pattern(plugin_b, pattern_a))
    )


class RuleEngine:
    """Matches auto-integration rules against a set of installed plugins."""

    def __init__(self, rules: Optional[Sequence[AutoIntegrationRule]] = None):
        self.rules: List[AutoIntegrationRule] = list(DEFAULT_RULES if rules is None else rules)

    def find_matching_rules(self, installed: Iterable[str]) -> List[MatchedRule]:
        """Find every (rule, plugin pair) match among installed plugins.

        Each rule yields one match per pair of distinct plugins matching its
        two patterns. Results are sorted by priority, highest first; equal
        priorities keep their encounter order.
        """
        names = list(installed)
        matches: List[MatchedRule] = []

        for rule in self.rules:
            pattern_a, pattern_b = rule.when
            side_a = [n for n in names if matches_pattern(n, pattern_a)]
            side_b = [n for n in names if matches_pattern(n, pattern_b)]

            for plugin_a in side_a:
                for plugin_b in side_b:
                    if plugin_a != plugin_b:
                        matches.append(MatchedRule(rule=rule, matched_plugins=(plugin_a, plugin_b)))

        # sorted() is stable
        return sorted(matches, key=lambda m: m.rule.priority, reverse=True)

    def get_rules_for_new_plugin(self, new_plugin: str, existing: Iterable[str]) -> List[MatchedRule]:
        """Get the matches a newly added plugin takes part in."""
        all_plugins = list(existing)
        if new_plugin not in all_plugins:
            all_plugins.append(new_plugin)
        return [
            match for match in self.find_matching_rules(all_plugins)
            if new_plugin in match.matched_plugins
        ]

    def get_rules_for_categories(
        self,
        prefix_a: Union[PluginCategory, str],
        prefix_b: Union[PluginCategory, str],
    ) -> List[AutoIntegrationRule]:
        """Get rules whose wildcard pair is exactly these two name prefixes.

        Wildcards match plugin name prefixes, which is not always the
        category value (``db-prisma`` has category ``database``).
        """
        pattern_a = f"{getattr(prefix_a, 'value', prefix_a)}{WILDCARD_SUFFIX}"
        pattern_b = f"{getattr(prefix_b, 'value', prefix_b)}{WILDCARD_SUFFIX}"
        return [
            rule for rule in self.rules
            if rule.when == (pattern_a, pattern_b) or rule.when == (pattern_b, pattern_a)
        ]

    def validate_rules(self) -> List[str]:
        """Check the rule table is well-formed.

        Returns:
            Validation errors, empty if all rules are valid
        """
        errors = []
        seen_ids = set()

        for rule in self.rules:
            if rule.id in seen_ids:
                errors.append(f"Duplicate rule ID: {rule.id}")
            seen_ids.add(rule.id)

            for pattern in rule.when:
                if not isinstance(pattern, str) or not pattern:
                    errors.append(f"Rule {rule.id} has empty pattern")

            if rule.action is None or not rule.action.type:
                errors.append(f"Rule {rule.id} has invalid action")

        for error in errors:
            logger.warning(error)
        return errors
