"""
HostGuard - Rule Registry

This module provides the ordered, id-unique collection of rule instances
that the evaluator and the report aggregator iterate over.
"""

import inspect
from typing import Iterable, Iterator, Optional

from .rule import BaseRule


class RuleRegistry:
    """Ordered registry of compliance rules.

    Registration order is significant: rules are evaluated and reported in
    the order they were registered, and categories appear in the order of
    their first rule.

    Example:
        registry = RuleRegistry(build_rules("hardening"))

        for category in registry.categories():
            for rule in registry.by_category(category):
                print(rule.id, rule.title)
    """

    def __init__(self, rules: Optional[Iterable[BaseRule]] = None) -> None:
        """Initialize the registry.

        Args:
            rules: Optional rules to register in order
        """
        self._rules: dict[str, BaseRule] = {}
        for rule in rules or []:
            self.register(rule)

    def register(self, rule: BaseRule) -> None:
        """Register a rule instance.

        Args:
            rule: An instance of a BaseRule subclass

        Raises:
            TypeError: If rule is not a BaseRule instance
            ValueError: If the rule has no id or the id is already registered
        """
        if inspect.isclass(rule):
            raise TypeError(f"Expected a rule instance, got class {rule.__name__}")

        if not isinstance(rule, BaseRule):
            raise TypeError(
                f"Rule must inherit from BaseRule, got {type(rule).__name__}"
            )

        if not rule.id:
            raise ValueError(f"Rule {type(rule).__name__} has no id")

        if rule.id in self._rules:
            raise ValueError(
                f"Rule with id '{rule.id}' is already registered "
                f"({type(self._rules[rule.id]).__name__})"
            )

        self._rules[rule.id] = rule

    def get(self, rule_id: str) -> Optional[BaseRule]:
        """Get a registered rule by id, None if unknown."""
        return self._rules.get(rule_id)

    def require(self, rule_id: str) -> BaseRule:
        """Get a registered rule by id.

        Raises:
            KeyError: If the rule_id is not registered
        """
        rule = self._rules.get(rule_id)
        if rule is None:
            raise KeyError(f"Rule with id '{rule_id}' is not registered")
        return rule

    def rules(self) -> list[BaseRule]:
        """Get all rules in registration order."""
        return list(self._rules.values())

    def rule_ids(self) -> list[str]:
        """Get all rule ids in registration order."""
        return list(self._rules.keys())

    def categories(self) -> list[str]:
        """Get category names in order of first appearance."""
        seen: dict[str, None] = {}
        for rule in self._rules.values():
            seen.setdefault(rule.category, None)
        return list(seen)

    def by_category(self, category: str) -> list[BaseRule]:
        """Get the rules of one category in registration order."""
        return [rule for rule in self._rules.values() if rule.category == category]

    def __len__(self) -> int:
        """Return the number of registered rules."""
        return len(self._rules)

    def __iter__(self) -> Iterator[BaseRule]:
        """Iterate over rules in registration order."""
        return iter(list(self._rules.values()))

    def __contains__(self, rule_id: object) -> bool:
        """Check if a rule id is registered."""
        return rule_id in self._rules
