"""
Text report tests.

Validates category grouping, recommendation lines, the summary tally and
the rendered header.
"""

import sys
from datetime import datetime
from pathlib import Path

# Add project root to import path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from hostguard.core.rule import BaseRule, Status
from hostguard.core.session import EvaluationSession
from hostguard.output.text_report import (
    UNKNOWN_HOST,
    ReportSection,
    Tally,
    TextReport,
    aggregate,
    render,
    tally,
)


def make_rule(rule_id: str, rule_category: str, status: Status) -> BaseRule:
    """Create a rule instance with a fixed check result."""

    class FixedRule(BaseRule):
        id = rule_id
        category = rule_category
        title = f"Title of {rule_id}"
        hint = f"Hint for {rule_id}"

        def check(self) -> Status:
            return status

    return FixedRule()


def ten_rules() -> list[BaseRule]:
    """6 pass, 2 fail, 1 warn, 1 unknown across three categories."""
    plan = [
        ("ssh-a", "SSH", Status.PASS),
        ("ssh-b", "SSH", Status.FAIL),
        ("ssh-c", "SSH", Status.PASS),
        ("net-a", "Сеть", Status.PASS),
        ("net-b", "Сеть", Status.WARN),
        ("net-c", "Сеть", Status.PASS),
        ("audit-a", "Аудит", Status.UNKNOWN),
        ("audit-b", "Аудит", Status.PASS),
        ("audit-c", "Аудит", Status.FAIL),
        ("audit-d", "Аудит", Status.PASS),
    ]
    return [make_rule(*entry) for entry in plan]


class TestTally:
    """Tests for status counting."""

    def test_summary_line_excludes_unknown(self) -> None:
        """Scenario: 10 rules, unknown is listed per rule but not tallied."""
        rules = ten_rules()
        session = EvaluationSession(rules)
        session.evaluate()

        counts = tally(rules, session)

        assert counts == Tally(passed=6, failed=2, warned=1, unknown=1)
        assert counts.total == 10
        assert counts.summary_line() == "Итого: ✓ 6 пройдено  ✗ 2 не пройдено  ⚠ 1 предупреждений"

    def test_tally_accepts_status_mapping(self) -> None:
        rules = ten_rules()[:2]
        counts = tally(rules, {"ssh-a": Status.PASS})
        assert counts == Tally(passed=1, unknown=1)


class TestAggregate:
    """Tests for section building."""

    def test_sections_follow_first_appearance(self) -> None:
        rules = ten_rules()
        session = EvaluationSession(rules)
        session.evaluate()

        sections = aggregate(rules, session)

        assert [s.title for s in sections] == ["SSH", "Сеть", "Аудит"]

    def test_recommendation_only_for_non_passing(self) -> None:
        rules = ten_rules()[:3]
        session = EvaluationSession(rules)
        session.evaluate()

        [section] = aggregate(rules, session)

        assert section.lines == (
            "  [✓] Title of ssh-a",
            "  [✗] Title of ssh-b",
            "       Рекомендация: Hint for ssh-b",
            "  [✓] Title of ssh-c",
        )

    def test_unknown_rule_is_listed(self) -> None:
        rules = ten_rules()
        sections = aggregate(rules, {rule.id: rule.evaluate() for rule in rules})

        audit = sections[2]
        assert "  [?] Title of audit-a" in audit.lines
        assert "       Рекомендация: Hint for audit-a" in audit.lines


class TestRender:
    """Tests for report rendering."""

    def test_header_and_layout(self) -> None:
        text = render(
            [ReportSection(title="SSH", lines=("  [✓] Root login disabled",))],
            title="Отчёт харденинга Linux",
            timestamp=datetime(2026, 3, 5, 9, 7, 1),
            hostname="web01",
            summary=Tally(passed=1),
        )

        assert text == (
            "=== Отчёт харденинга Linux ===\n"
            "Дата: 05.03.2026, 09:07:01\n"
            "Хост: web01\n"
            "\n"
            "── SSH ──\n"
            "  [✓] Root login disabled\n"
            "\n"
            "Итого: ✓ 1 пройдено  ✗ 0 не пройдено  ⚠ 0 предупреждений\n"
        )

    def test_unknown_hostname(self) -> None:
        text = render([], title="T", timestamp=datetime(2026, 1, 1), hostname=None, summary=Tally())
        assert f"Хост: {UNKNOWN_HOST}\n" in text


class TestTextReport:
    """Tests for the report facade."""

    def test_write_to_file(self, tmp_path: Path) -> None:
        rules = ten_rules()
        session = EvaluationSession(rules)
        session.evaluate()
        report = TextReport(title="CIS Baseline — РедОС / RHEL")
        output = tmp_path / "report.txt"

        report.write_to_file(session, output, datetime(2026, 3, 5, 12, 0, 0), "db01")

        content = output.read_text(encoding="utf-8")
        assert content.startswith("=== CIS Baseline — РедОС / RHEL ===\n")
        assert content == report.format(session, datetime(2026, 3, 5, 12, 0, 0), "db01")
        assert content.count("Рекомендация:") == 4
