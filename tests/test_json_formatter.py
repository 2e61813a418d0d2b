"""
HostGuard - JSON Formatter Tests

Tests for the JSON export of evaluation sessions.
"""

import json
import pytest
import sys
from datetime import datetime
from pathlib import Path

# Add project root to import path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from hostguard import __version__
from hostguard.core.rule import BaseRule, FixOutcome, Status
from hostguard.core.session import EvaluationSession
from hostguard.output.json_formatter import JSONFormatter, DateTimeEncoder

from doubles import platform_context


class PassingRule(BaseRule):
    id = "json-pass"
    category = "JSON"
    title = "Always passes"
    hint = "Nothing to do"

    def check(self) -> Status:
        return Status.PASS


class FixableRule(BaseRule):
    id = "json-fixable"
    category = "JSON"
    title = "Passes after fix"
    hint = "Run the fix"

    def __init__(self) -> None:
        super().__init__()
        self.fixed = False

    def check(self) -> Status:
        return Status.PASS if self.fixed else Status.FAIL

    def fix(self) -> FixOutcome:
        self.fixed = True
        return FixOutcome.applied("fixed")


class UnknownRule(BaseRule):
    id = "json-unknown"
    category = "Other"
    title = "Cannot be judged"
    hint = "Install the tool"

    def check(self) -> Status:
        return Status.UNKNOWN


TIMESTAMP = datetime(2026, 3, 5, 12, 30, 45)


@pytest.fixture
def session() -> EvaluationSession:
    result = EvaluationSession([PassingRule(), FixableRule(), UnknownRule()])
    result.evaluate()
    return result


class TestDateTimeEncoder:
    """Tests for the DateTimeEncoder class."""

    def test_datetime_serialization(self) -> None:
        """Test that datetime objects are serialized to ISO format."""
        encoder = DateTimeEncoder()
        assert encoder.default(TIMESTAMP) == "2026-03-05T12:30:45"

    def test_status_serialization(self) -> None:
        """Test that Status enums are serialized to their value."""
        encoder = DateTimeEncoder()
        assert encoder.default(Status.WARN) == "warn"

    def test_default_fallback(self) -> None:
        """Test that unknown types fall back to default behavior."""
        encoder = DateTimeEncoder()
        with pytest.raises(TypeError):
            encoder.default(object())


class TestJSONFormatter:
    """Tests for the JSON document layout."""

    def test_metadata(self, session: EvaluationSession) -> None:
        output = json.loads(JSONFormatter().format(
            session,
            catalogue="hardening",
            timestamp=TIMESTAMP,
            hostname="web01",
            privileged=True,
            platform_context=platform_context("rhel"),
        ))

        metadata = output["metadata"]
        assert metadata["schema_version"] == JSONFormatter.SCHEMA_VERSION
        assert metadata["tool_version"] == __version__
        assert metadata["catalogue"] == "hardening"
        assert metadata["timestamp"] == "2026-03-05T12:30:45"
        assert metadata["hostname"] == "web01"
        assert metadata["privileged"] is True
        assert metadata["platform_profile"] == "rhel"
        assert metadata["package_manager"] == "rpm"
        assert metadata["service_manager"] == "systemd"

    def test_metadata_without_platform(self, session: EvaluationSession) -> None:
        output = json.loads(JSONFormatter().format(session, catalogue="baseline", timestamp=TIMESTAMP))

        assert output["metadata"]["platform_profile"] == "unknown"
        assert output["metadata"]["package_manager"] == "unknown"
        assert output["metadata"]["hostname"] is None

    def test_summary_and_rules(self, session: EvaluationSession) -> None:
        output = json.loads(JSONFormatter().format(session, catalogue="hardening", timestamp=TIMESTAMP))

        assert output["summary"] == {
            "total_rules": 3,
            "pass": 1,
            "fail": 1,
            "warn": 0,
            "unknown": 1,
        }
        assert [rule["id"] for rule in output["rules"]] == ["json-pass", "json-fixable", "json-unknown"]
        fixable = output["rules"][1]
        assert fixable["status"] == "fail"
        assert fixable["fixable"] is True
        assert fixable["hint"] == "Run the fix"
        assert output["rules"][0]["fixable"] is False
        assert output["fixes"] == []

    def test_fix_records_exported(self, session: EvaluationSession) -> None:
        session.apply_fix(session.rule("json-fixable"))

        output = json.loads(JSONFormatter().format(session, catalogue="hardening", timestamp=TIMESTAMP))

        assert output["fixes"] == [{
            "sequence": 1,
            "rule_id": "json-fixable",
            "before": "fail",
            "after": "pass",
            "outcome": {"ok": True, "message": "fixed"},
        }]
        assert output["summary"]["pass"] == 2

    def test_pretty_output(self, session: EvaluationSession) -> None:
        compact = JSONFormatter().format(session, catalogue="hardening", timestamp=TIMESTAMP)
        pretty = JSONFormatter(pretty=True).format(session, catalogue="hardening", timestamp=TIMESTAMP)

        assert "\n" not in compact
        assert "\n  " in pretty
        assert json.loads(compact) == json.loads(pretty)

    def test_non_ascii_kept(self) -> None:
        class RussianRule(PassingRule):
            id = "json-russian"
            title = "Таймаут сессии"

        session = EvaluationSession([RussianRule()])
        session.evaluate()

        content = JSONFormatter().format(session, catalogue="baseline", timestamp=TIMESTAMP)

        assert "Таймаут сессии" in content

    def test_write_to_file(self, session: EvaluationSession, tmp_path: Path) -> None:
        formatter = JSONFormatter(pretty=True)
        content = formatter.format(session, catalogue="hardening", timestamp=TIMESTAMP)
        output = tmp_path / "report.json"

        formatter.write_to_file(output, content)

        assert json.loads(output.read_text(encoding="utf-8"))["summary"]["total_rules"] == 3
