"""
HostGuard - Evaluation Session

Status evaluation of a rule set and the remediation executor that applies
one rule's fix and re-verifies it.
"""

from dataclasses import dataclass
import itertools
from typing import Any, Iterable, Optional

from .rule import BaseRule, FixOutcome, Status


NO_FIX_MESSAGE = "no automated fix for this rule; apply the recommendation manually"
ALREADY_PASSING_MESSAGE = "rule already passes; nothing to do"
STILL_FAILING_MESSAGE = "re-check still fails; the change did not take effect"


@dataclass(frozen=True)
class FixRecord:
    """Before/after record of one remediation attempt.

    Attributes:
        sequence: Per-session attempt number, starting at 1
        rule_id: Rule the fix was applied to
        before: Status observed before the fix
        after: Status observed by the re-check
        outcome: What the fix reported
    """
    sequence: int
    rule_id: str
    before: Status
    after: Status
    outcome: FixOutcome

    @property
    def improved(self) -> bool:
        """True if the re-check moved the rule to PASS."""
        return self.after is Status.PASS and self.before is not Status.PASS

    def to_dict(self) -> dict[str, Any]:
        """Convert the record to a dictionary for JSON serialization."""
        return {
            "sequence": self.sequence,
            "rule_id": self.rule_id,
            "before": self.before.value,
            "after": self.after.value,
            "outcome": self.outcome.to_dict(),
        }


def evaluate(rules: Iterable[BaseRule]) -> dict[str, Status]:
    """Evaluate every rule in order.

    A check that fails internally yields UNKNOWN for that rule only.

    Args:
        rules: Rules in registry order

    Returns:
        Map of rule id to observed status, in evaluation order
    """
    return {rule.id: rule.evaluate() for rule in rules}


def apply_fix(rule: BaseRule, session: "EvaluationSession") -> FixOutcome:
    """Apply a rule's fix and store the re-checked status in the session.

    See EvaluationSession.apply_fix().
    """
    return session.apply_fix(rule)


class EvaluationSession:
    """Per-invocation status map of a rule set.

    The map is filled by ``evaluate()`` and changed afterwards only by
    ``apply_fix()``, one rule at a time. Nothing is persisted.

    Example:
        session = EvaluationSession(build_rules("baseline"))
        session.evaluate()

        rule = session.rule("perms-sshd-config")
        outcome = session.apply_fix(rule)
        print(outcome.message, session.status(rule.id))
    """

    def __init__(self, rules: Iterable[BaseRule]) -> None:
        """Initialize a session over a rule set.

        Args:
            rules: Rules in registry order
        """
        self._rules: list[BaseRule] = list(rules)
        self._statuses: dict[str, Status] = {}
        self._fix_records: list[FixRecord] = []
        self._sequence = itertools.count(1)

    @property
    def rules(self) -> list[BaseRule]:
        """Get the session's rules in registry order."""
        return list(self._rules)

    @property
    def statuses(self) -> dict[str, Status]:
        """Get a copy of the current status map."""
        return dict(self._statuses)

    @property
    def fix_records(self) -> list[FixRecord]:
        """Get the remediation attempts made in this session."""
        return list(self._fix_records)

    def rule(self, rule_id: str) -> Optional[BaseRule]:
        """Get a session rule by id, None if unknown."""
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def status(self, rule_id: str) -> Status:
        """Get the current status of a rule (UNKNOWN if never evaluated)."""
        return self._statuses.get(rule_id, Status.UNKNOWN)

    def evaluate(self) -> dict[str, Status]:
        """Evaluate all rules, replacing the whole status map.

        Returns:
            Copy of the new status map
        """
        self._statuses = evaluate(self._rules)
        return self.statuses

    def apply_fix(self, rule: BaseRule) -> FixOutcome:
        """Apply one rule's fix and re-verify it.

        Rules without a fix and rules already passing are left alone. Otherwise
        the fix runs (an exception becomes a failed outcome), the check runs
        again and its status replaces the session entry whatever the fix
        reported. A fix that claims success while the re-check still fails
        is reported as failed.

        Args:
            rule: Rule to remediate

        Returns:
            FixOutcome reported by the fix
        """
        before = self.status(rule.id)

        if not rule.has_fix:
            return FixOutcome.failed(NO_FIX_MESSAGE)
        if before is Status.PASS:
            return FixOutcome.applied(ALREADY_PASSING_MESSAGE)

        try:
            outcome = rule.fix()
        except Exception as e:
            outcome = FixOutcome.failed(f"fix failed with error: {type(e).__name__}: {e}")
        if not isinstance(outcome, FixOutcome):
            outcome = FixOutcome.failed(f"fix returned {type(outcome).__name__}, expected FixOutcome")

        after = rule.evaluate()
        if outcome.ok and after is Status.FAIL:
            outcome = FixOutcome.failed(f"{outcome.message}\n{STILL_FAILING_MESSAGE}")
        self._statuses[rule.id] = after
        self._fix_records.append(
            FixRecord(
                sequence=next(self._sequence),
                rule_id=rule.id,
                before=before,
                after=after,
                outcome=outcome,
            )
        )
        return outcome

    def count(self, status: Status) -> int:
        """Count session rules currently in a given status."""
        return sum(1 for rule in self._rules if self.status(rule.id) is status)
