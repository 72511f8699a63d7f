"""Rule registry for validation and business rules.

Rules carry an optional condition and an optional action.  Both may be
plain callables; the action may also be a coroutine function.

Example
-------
>>> registry = RuleRegistry(EventBus())
>>> registry.register(RegistryItem(
...     id="no-orphans", type="validation", name="No orphans",
...     config=RuleConfig(id="no-orphans", name="No orphans", type="validation"),
... ))
>>> await registry.execute_rule("no-orphans", {})
True
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Callable, Literal

from bpm_workflow_core.events.bus import EventBus
from bpm_workflow_core.registry.base import Registry

logger = logging.getLogger(__name__)

RuleType = Literal["validation", "connection", "execution", "custom"]
RuleScope = Literal["global", "node", "edge", "workflow"]


@dataclass
class RuleConfig:
    """Configuration of a single rule."""

    id: str
    name: str
    type: RuleType = "custom"
    enabled: bool = True
    description: str | None = None
    priority: int = 0
    scope: RuleScope | None = None
    condition: str | Callable[[object], bool] | None = None
    action: Callable[[object], object] | None = None
    properties: dict[str, object] = field(default_factory=dict)


class RuleRegistry(Registry[RuleConfig]):
    """Registry of :class:`RuleConfig` objects."""

    def __init__(self, event_bus: EventBus) -> None:
        super().__init__("RuleRegistry", event_bus)

    async def execute_rule(self, rule_id: str, context: object) -> bool:
        """Run one rule against *context*.

        Returns
        -------
        bool
            ``True`` when the rule is missing, disabled, its condition does
            not hold, or its action completed.  ``False`` when the action or
            the condition raised.
        """
        rule = self.get_config(rule_id)
        if rule is None or not rule.enabled:
            return True

        try:
            if rule.condition is not None:
                if callable(rule.condition):
                    if not rule.condition(context):
                        return True
                else:
                    logger.warning(
                        "Rule '%s' uses a string condition; string conditions are not evaluated",
                        rule_id,
                    )

            if rule.action is not None:
                outcome = rule.action(context)
                if inspect.isawaitable(outcome):
                    await outcome
            return True
        except Exception:  # noqa: BLE001
            logger.exception("Error executing rule '%s'", rule_id)
            return False

    async def execute_rules(self, rule_ids: list[str], context: object) -> list[bool]:
        """Run several rules concurrently and return their outcomes in order."""
        return list(
            await asyncio.gather(*(self.execute_rule(rule_id, context) for rule_id in rule_ids))
        )

    def get_rules_by_scope(self, scope: RuleScope) -> list[RuleConfig]:
        """Return the rules of *scope* sorted by ascending priority."""
        rules = [item.config for item in self.get_all() if item.config.scope == scope]
        return sorted(rules, key=lambda rule: rule.priority or 0)

    def get_enabled_rules(self) -> list[RuleConfig]:
        return [item.config for item in self.get_all() if item.config.enabled]
