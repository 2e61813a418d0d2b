"""
HostGuard - Text Report

Groups evaluated rules by category and renders the plain-text report.
Rendering is a pure function of its arguments: the timestamp and host name
are passed in, never read here.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
import sys
from typing import Iterable, Mapping, Optional, Union

from ..core.rule import BaseRule, Status
from ..core.session import EvaluationSession


UNKNOWN_HOST = "неизвестно"
TIMESTAMP_FORMAT = "%d.%m.%Y, %H:%M:%S"


@dataclass(frozen=True)
class ReportSection:
    """One category of the report.

    Attributes:
        title: Category name
        lines: Icon line per rule, plus a recommendation line for each
            rule that does not pass
    """
    title: str
    lines: tuple[str, ...]


@dataclass(frozen=True)
class Tally:
    """Status counts over a rule set."""

    passed: int = 0
    failed: int = 0
    warned: int = 0
    unknown: int = 0

    @property
    def total(self) -> int:
        """Number of rules counted."""
        return self.passed + self.failed + self.warned + self.unknown

    def summary_line(self) -> str:
        """Headline tally; unknown rules are listed per rule, not here."""
        return (
            f"Итого: {Status.PASS.icon} {self.passed} пройдено  "
            f"{Status.FAIL.icon} {self.failed} не пройдено  "
            f"{Status.WARN.icon} {self.warned} предупреждений"
        )


StatusSource = Union[EvaluationSession, Mapping[str, Status]]


def _statuses(rules: Iterable[BaseRule], session: StatusSource) -> list[tuple[BaseRule, Status]]:
    if isinstance(session, EvaluationSession):
        return [(rule, session.status(rule.id)) for rule in rules]
    return [(rule, session.get(rule.id, Status.UNKNOWN)) for rule in rules]


def tally(rules: Iterable[BaseRule], session: StatusSource) -> Tally:
    """Count the session status of every rule.

    Args:
        rules: Rules to count
        session: Evaluated session or a rule id -> Status map

    Returns:
        Tally whose total equals the number of rules
    """
    statuses = [status for _, status in _statuses(rules, session)]
    return Tally(
        passed=statuses.count(Status.PASS),
        failed=statuses.count(Status.FAIL),
        warned=statuses.count(Status.WARN),
        unknown=statuses.count(Status.UNKNOWN),
    )


def aggregate(rules: Iterable[BaseRule], session: StatusSource) -> list[ReportSection]:
    """Group rules into report sections.

    Sections follow the order in which categories first appear among the
    rules; rules keep their order inside a section.

    Args:
        rules: Rules in registry order
        session: Evaluated session or a rule id -> Status map

    Returns:
        One ReportSection per category
    """
    grouped: dict[str, list[str]] = {}
    for rule, status in _statuses(rules, session):
        lines = grouped.setdefault(rule.category, [])
        lines.append(f"  [{status.icon}] {rule.title}")
        if status is not Status.PASS:
            lines.append(f"       Рекомендация: {rule.hint}")

    return [ReportSection(title=title, lines=tuple(lines)) for title, lines in grouped.items()]


def render(
    sections: Iterable[ReportSection],
    *,
    title: str,
    timestamp: datetime,
    hostname: Optional[str],
    summary: Tally,
) -> str:
    """Render sections into the report text.

    Args:
        sections: Sections from aggregate()
        title: Report title
        timestamp: Report time, formatted as DD.MM.YYYY, HH:MM:SS
        hostname: Host name, None or empty when it could not be determined
        summary: Tally of the same rules

    Returns:
        Report text ending with a newline
    """
    lines = [
        f"=== {title} ===",
        f"Дата: {timestamp.strftime(TIMESTAMP_FORMAT)}",
        f"Хост: {hostname or UNKNOWN_HOST}",
        "",
    ]
    for section in sections:
        lines.append(f"── {section.title} ──")
        lines.extend(section.lines)
        lines.append("")
    lines.append(summary.summary_line())
    return "\n".join(lines) + "\n"


class TextReport:
    """Text report of an evaluation session.

    Example:
        report = TextReport(title=HARDENING.title)
        text = report.format(session, timestamp=datetime.now(), hostname="web01")
        report.write_to_file(session, Path("hardening-report.txt"), ...)
    """

    def __init__(self, title: str) -> None:
        """Initialize the report.

        Args:
            title: Report title shown in the header
        """
        self._title = title

    @property
    def title(self) -> str:
        """Get the report title."""
        return self._title

    def format(
        self,
        session: EvaluationSession,
        timestamp: datetime,
        hostname: Optional[str] = None,
    ) -> str:
        """Render the whole session as report text."""
        rules = session.rules
        return render(
            aggregate(rules, session),
            title=self._title,
            timestamp=timestamp,
            hostname=hostname,
            summary=tally(rules, session),
        )

    def write_to_file(
        self,
        session: EvaluationSession,
        output_path: Path,
        timestamp: datetime,
        hostname: Optional[str] = None,
    ) -> None:
        """Write the report verbatim to a file (UTF-8)."""
        output_path.write_text(self.format(session, timestamp, hostname), encoding="utf-8")

    def write_to_stdout(
        self,
        session: EvaluationSession,
        timestamp: datetime,
        hostname: Optional[str] = None,
    ) -> None:
        """Write the report to stdout."""
        sys.stdout.write(self.format(session, timestamp, hostname))
