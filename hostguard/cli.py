"""
HostGuard - Command Line Interface

This module provides the CLI argument parsing, privilege handling,
and main entry point for the hardening audit tool.
"""

import argparse
from datetime import datetime
import os
from pathlib import Path
import socket
import sys
import traceback
from typing import Optional

from hostguard.core.platform import (
    PlatformContext,
    get_platform_context,
    list_available_profiles,
    profile_exists,
)
from hostguard.core.privilege import PrivilegedExecutor
from hostguard.core.probe import SystemProbe
from hostguard.core.registry import RuleRegistry
from hostguard.core.rule import RuleContext, Status
from hostguard.core.session import EvaluationSession
from hostguard.output.json_formatter import JSONFormatter
from hostguard.output.text_report import TextReport
from hostguard.rules import CATALOGUES, build_registry, get_catalogue


class PrivilegeChecker:
    """Decides how remediation commands are elevated.

    Checks only read the system and run unprivileged. Fixes run through the
    profile's non-interactive elevation command unless the process is
    already root or elevation was disabled with --no-sudo.
    """

    def __init__(self, skip_sudo: bool = False) -> None:
        """Initialize the privilege checker.

        Args:
            skip_sudo: If True, never prefix privileged commands
        """
        self._skip_sudo = skip_sudo
        self._has_root = False
        self._warnings: list[str] = []

    def check_privileges(self) -> bool:
        """Check if the process runs as root.

        Returns:
            True if the effective uid is 0, False otherwise
        """
        self._has_root = os.geteuid() == 0

        if self._has_root:
            return True

        if self._skip_sudo:
            self._warnings.append(
                "Elevation disabled (--no-sudo). Fixes will run unprivileged and may fail."
            )
        else:
            self._warnings.append(
                "Not running as root. Fixes will use non-interactive sudo "
                "and fail if it asks for a password."
            )
        return False

    def elevation_command(self, platform_context: PlatformContext) -> list[str]:
        """Get the prefix for privileged commands.

        Args:
            platform_context: Active platform profile

        Returns:
            Empty list when running as root or with --no-sudo, else the
            profile's elevation command
        """
        if self._has_root or self._skip_sudo:
            return []
        return platform_context.elevation_command

    def print_warnings(self) -> None:
        """Print any privilege-related warnings to stderr."""
        for warning in self._warnings:
            print(f"WARNING: {warning}", file=sys.stderr)

    @property
    def has_warnings(self) -> bool:
        """Check if any warnings were generated."""
        return len(self._warnings) > 0


class CLI:
    """Command Line Interface for the hardening audit tool.

    Handles argument parsing, privilege checking and orchestrates
    evaluation, explicitly requested fixes and report output.
    """

    def __init__(self) -> None:
        """Initialize the CLI."""
        self.args: Optional[argparse.Namespace] = None
        self.platform_context: Optional[PlatformContext] = None
        self.privilege_checker = PrivilegeChecker()

    def parse_args(self, argv: Optional[list[str]] = None) -> argparse.Namespace:
        """Parse command line arguments.

        Args:
            argv: Command line arguments (defaults to sys.argv[1:])

        Returns:
            Parsed arguments namespace
        """
        parser = argparse.ArgumentParser(
            prog="hostguard",
            description="Linux host hardening audit tool",
            epilog="Exit codes: 0=all rules passed, 1=error, 2=some rules not passing"
        )

        parser.add_argument(
            "--catalogue", "-c",
            choices=sorted(CATALOGUES),
            default="hardening",
            help="Rule catalogue to evaluate (default: hardening)"
        )

        parser.add_argument(
            "--output", "-o",
            type=str,
            default=None,
            help="Output file path (default: stdout)"
        )

        parser.add_argument(
            "--format", "-f",
            choices=["text", "json"],
            default="text",
            help="Report format (default: text)"
        )

        parser.add_argument(
            "--pretty",
            action="store_true",
            help="Pretty-print JSON output with indentation"
        )

        parser.add_argument(
            "--fix",
            action="append",
            default=[],
            metavar="RULE_ID",
            help="Apply the automated fix of a rule after evaluation (repeatable)"
        )

        parser.add_argument(
            "--list",
            action="store_true",
            help="List the rules of the catalogue and exit"
        )

        parser.add_argument(
            "--profile",
            type=str,
            default=None,
            help=(
                "Platform profile override (e.g., rhel, debian). "
                "Defaults to auto-detection from /etc/os-release"
            ),
        )

        parser.add_argument(
            "--no-sudo",
            action="store_true",
            help="Do not prefix privileged commands with sudo"
        )

        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Enable verbose output"
        )

        self.args = parser.parse_args(argv)
        return self.args

    def _ensure_platform_context(self) -> PlatformContext:
        """Load and cache the active platform context.

        Returns:
            PlatformContext selected by CLI profile override or auto-detection
        """
        if self.platform_context is None:
            profile_id = None
            if self.args is not None and self.args.profile:
                profile_id = self.args.profile
                if not profile_exists(profile_id):
                    available = ", ".join(list_available_profiles())
                    raise ValueError(
                        f"Unknown platform profile '{profile_id}'. "
                        f"Available profiles: {available}"
                    )
            self.platform_context = get_platform_context(profile_id=profile_id)
        return self.platform_context

    def build_context(self) -> RuleContext:
        """Wire the probe, executor and platform shared by all rules."""
        platform_context = self._ensure_platform_context()
        probe = SystemProbe()
        executor = PrivilegedExecutor(
            probe,
            elevation_command=self.privilege_checker.elevation_command(platform_context),
            write_helper=platform_context.write_helper,
        )
        return RuleContext(probe=probe, executor=executor, platform=platform_context)

    def list_rules(self, registry: RuleRegistry) -> int:
        """Print the rule ids of the catalogue grouped by category."""
        for category in registry.categories():
            print(f"{category}:")
            for rule in registry.by_category(category):
                marker = "fix" if rule.has_fix else "   "
                print(f"  {rule.id:<22} {marker}  {rule.title}")
        return 0

    def validate_fix_ids(self, registry: RuleRegistry) -> None:
        """Reject the run before anything is evaluated or changed.

        Raises:
            ValueError: If a requested rule id is not in the catalogue
        """
        for rule_id in self.args.fix:
            if rule_id not in registry:
                raise ValueError(
                    f"Unknown rule id '{rule_id}' for catalogue '{self.args.catalogue}'"
                )

    def apply_fixes(self, registry: RuleRegistry, session: EvaluationSession) -> None:
        """Apply each requested fix in order and report it on stderr."""
        for rule_id in self.args.fix:
            rule = registry.require(rule_id)
            before = session.status(rule_id)
            if self.args.verbose:
                print(f"Applying fix for {rule_id}...", file=sys.stderr)
            outcome = session.apply_fix(rule)
            after = session.status(rule_id)
            print(
                f"[{before.icon} -> {after.icon}] {rule_id}: {outcome.message}",
                file=sys.stderr,
            )

    def run_audit(self) -> int:
        """Evaluate the catalogue, apply requested fixes and write the report.

        Returns:
            Exit code (0=all rules pass, 1=error, 2=some rules not passing)
        """
        catalogue = get_catalogue(self.args.catalogue)
        registry = build_registry(catalogue.name, self.build_context())
        self.validate_fix_ids(registry)

        if self.args.list:
            return self.list_rules(registry)

        if self.args.verbose:
            print(
                f"Evaluating {len(registry)} rules of catalogue '{catalogue.name}' "
                f"(profile: {self._ensure_platform_context().profile_id})",
                file=sys.stderr,
            )

        session = EvaluationSession(registry.rules())
        session.evaluate()

        if self.args.fix:
            self.apply_fixes(registry, session)

        timestamp = datetime.now()
        hostname = _hostname()

        try:
            if self.args.format == "json":
                formatter = JSONFormatter(pretty=self.args.pretty)
                content = formatter.format(
                    session,
                    catalogue=catalogue.name,
                    timestamp=timestamp,
                    hostname=hostname,
                    privileged=os.geteuid() == 0,
                    platform_context=self._ensure_platform_context(),
                )
                if self.args.output:
                    formatter.write_to_file(Path(self.args.output), content)
                else:
                    formatter.write_to_stdout(content)
            else:
                report = TextReport(title=catalogue.title)
                if self.args.output:
                    report.write_to_file(session, Path(self.args.output), timestamp, hostname)
                else:
                    report.write_to_stdout(session, timestamp, hostname)
        except BrokenPipeError:
            # Common when piping to tools like `head`; treat as graceful termination.
            return 0
        except (OSError, UnicodeError) as e:
            print(f"Error writing report: {e}", file=sys.stderr)
            return 1

        if self.args.output and self.args.verbose:
            print(f"Report written to {self.args.output}", file=sys.stderr)

        if session.count(Status.PASS) < len(session.rules):
            return 2
        return 0

    def main(self, argv: Optional[list[str]] = None) -> int:
        """Main entry point for the CLI.

        Args:
            argv: Command line arguments (defaults to sys.argv[1:])

        Returns:
            Exit code (0=all rules pass, 1=error, 2=some rules not passing)
        """
        try:
            self.parse_args(argv)

            # Validate platform profile selection early for clearer errors.
            self._ensure_platform_context()

            self.privilege_checker = PrivilegeChecker(skip_sudo=self.args.no_sudo)
            self.privilege_checker.check_privileges()
            if self.args.fix:
                self.privilege_checker.print_warnings()

            return self.run_audit()

        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        except KeyboardInterrupt:
            print("\nAudit interrupted by user", file=sys.stderr)
            return 1
        except Exception as e:
            print(f"Unexpected error: {e}", file=sys.stderr)
            if self.args and self.args.verbose:
                traceback.print_exc()
            return 1


def _hostname() -> Optional[str]:
    """Get the host name, None if it cannot be determined."""
    try:
        return socket.gethostname() or None
    except OSError:
        return None


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the hardening audit CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=all rules pass, 1=error, 2=some rules not passing)
    """
    cli = CLI()
    return cli.main(argv)


if __name__ == "__main__":
    sys.exit(main())
