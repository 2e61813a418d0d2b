"""
HostGuard - JSON Output Formatter

This module provides JSON export of an evaluation session.
"""

import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from .. import __version__
from ..core.platform import PlatformContext
from ..core.rule import Status
from ..core.session import EvaluationSession
from .text_report import tally


class DateTimeEncoder(json.JSONEncoder):
    """Custom JSON encoder to handle datetime and Status serialization."""

    def default(self, o: Any) -> Any:
        """Convert datetime objects to ISO strings and statuses to their value."""
        if isinstance(o, datetime):
            return o.isoformat()
        if isinstance(o, Status):
            return o.value
        return super().default(o)


class JSONFormatter:
    """Formatter for evaluation sessions in JSON format.

    Example:
        formatter = JSONFormatter(pretty=True)
        print(formatter.format(session, catalogue="hardening",
                               timestamp=datetime.now(timezone.utc)))
    """

    SCHEMA_VERSION = "1.0"

    def __init__(self, pretty: bool = False) -> None:
        """Initialize the JSON formatter.

        Args:
            pretty: If True, output formatted JSON with indentation
        """
        self._pretty = pretty

    def format(
        self,
        session: EvaluationSession,
        catalogue: str,
        timestamp: datetime,
        hostname: Optional[str] = None,
        privileged: bool = False,
        platform_context: Optional[PlatformContext] = None,
    ) -> str:
        """Format a session as JSON.

        Args:
            session: Evaluated session
            catalogue: Name of the evaluated catalogue
            timestamp: Report time
            hostname: Host name, None if unknown
            privileged: Whether the tool ran as root
            platform_context: Optional platform context for distro metadata

        Returns:
            JSON string
        """
        output = {
            "metadata": self._build_metadata(
                catalogue, timestamp, hostname, privileged, platform_context
            ),
            "summary": self._build_summary(session),
            "rules": self._build_rules(session),
            "fixes": [record.to_dict() for record in session.fix_records],
        }

        if self._pretty:
            return json.dumps(output, cls=DateTimeEncoder, indent=2, ensure_ascii=False)
        return json.dumps(output, cls=DateTimeEncoder, separators=(',', ':'), ensure_ascii=False)

    def _build_metadata(
        self,
        catalogue: str,
        timestamp: datetime,
        hostname: Optional[str],
        privileged: bool,
        platform_context: Optional[PlatformContext],
    ) -> dict[str, Any]:
        """Build the metadata section."""
        profile_id = "unknown"
        distro_id = "unknown"
        distro_version = "unknown"
        distro_name = "unknown"
        package_manager = "unknown"
        service_manager = "unknown"

        if platform_context is not None:
            profile_id = platform_context.profile_id
            distro_id = platform_context.distro.os_id
            distro_version = platform_context.distro.version_id
            distro_name = platform_context.distro.pretty_name
            package_manager = platform_context.package_manager_name
            service_manager = platform_context.service_manager_name

        return {
            "schema_version": self.SCHEMA_VERSION,
            "tool_version": __version__,
            "catalogue": catalogue,
            "timestamp": timestamp,
            "hostname": hostname,
            "privileged": privileged,
            "platform_profile": profile_id,
            "distribution": distro_id,
            "distribution_version": distro_version,
            "distribution_name": distro_name,
            "package_manager": package_manager,
            "service_manager": service_manager,
        }

    def _build_summary(self, session: EvaluationSession) -> dict[str, int]:
        """Build the summary section with status counts."""
        counts = tally(session.rules, session)
        return {
            "total_rules": counts.total,
            "pass": counts.passed,
            "fail": counts.failed,
            "warn": counts.warned,
            "unknown": counts.unknown,
        }

    def _build_rules(self, session: EvaluationSession) -> list[dict[str, Any]]:
        """Build the per-rule array in registry order."""
        return [
            {
                **rule.get_metadata(),
                "status": session.status(rule.id),
            }
            for rule in session.rules
        ]

    def write_to_file(self, output_path: Path, content: str) -> None:
        """Write formatted JSON to a file."""
        output_path.write_text(content, encoding='utf-8')

    def write_to_stdout(self, content: str) -> None:
        """Write formatted JSON to stdout."""
        sys.stdout.write(content)
        if self._pretty:
            sys.stdout.write('\n')
