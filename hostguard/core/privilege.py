"""
HostGuard - Privilege-Escalation Executor

Runs remediation commands through a non-interactive elevation command
(``sudo -n`` by default) and classifies the result into a FixOutcome.
"""

from __future__ import annotations

import re
from typing import Optional, Sequence

from .probe import CommandResult, SystemProbe
from .rule import FixOutcome


DEFAULT_ELEVATION_COMMAND: tuple[str, ...] = ("sudo", "-n")
DEFAULT_WRITE_HELPER: tuple[str, ...] = ("tee",)

ELEVATION_REQUIRED_MESSAGE = "elevated privilege required — re-run as administrator"

# stderr markers of an elevation tool refusing to run without credentials
_CREDENTIALS_PATTERN = re.compile(
    r"password is required|a password|a terminal is required|no askpass|"
    r"authentication is required|not in the sudoers",
    re.IGNORECASE,
)


class PrivilegedExecutor:
    """Execute commands under elevated privilege without prompting.

    When the elevation command would need a password it fails immediately
    (``sudo -n``) and the outcome asks the operator to re-run as
    administrator. An empty elevation command runs the argv directly, which
    is what the CLI selects when the process already runs as root.

    Example:
        executor = PrivilegedExecutor(SystemProbe())
        outcome = executor.run_privileged(["systemctl", "enable", "--now", "auditd"])
        if not outcome.ok:
            print(outcome.message)
    """

    def __init__(
        self,
        probe: Optional[SystemProbe] = None,
        elevation_command: Sequence[str] = DEFAULT_ELEVATION_COMMAND,
        write_helper: Sequence[str] = DEFAULT_WRITE_HELPER,
    ) -> None:
        """Initialize the executor.

        Args:
            probe: Process runner (defaults to a real SystemProbe)
            elevation_command: Non-interactive elevation prefix, may be empty
            write_helper: Command that copies stdin to the path appended to it
        """
        self._probe = probe if probe is not None else SystemProbe()
        self._elevation_command = tuple(elevation_command)
        self._write_helper = tuple(write_helper)

    @property
    def elevation_command(self) -> tuple[str, ...]:
        """Get the elevation prefix applied to every command."""
        return self._elevation_command

    def run_privileged(self, argv: Sequence[str]) -> FixOutcome:
        """Run a command under elevated privilege.

        Args:
            argv: Command and arguments

        Returns:
            FixOutcome classified from the exit code and output
        """
        command = self._elevate(argv)
        result = self._probe.run_command(command)
        if result is None:
            return FixOutcome.failed(f"cannot execute {command[0]}: command not found")
        return self.classify(result)

    def write_privileged(self, path: str, content: str) -> FixOutcome:
        """Replace a file's content with elevated privilege.

        The content is streamed to the write helper's standard input since
        this process may not be allowed to open the path itself.

        Args:
            path: Target file path
            content: Full new content of the file

        Returns:
            FixOutcome of the write
        """
        command = self._elevate([*self._write_helper, path])
        result = self._probe.run_command(command, input=content)
        if result is None:
            return FixOutcome.failed(f"cannot execute {command[0]}: command not found")

        outcome = self.classify(result)
        if outcome.ok:
            # tee echoes the content back; report the write instead
            return FixOutcome.applied(f"written {path}")
        return outcome

    def read_privileged(self, path: str) -> Optional[str]:
        """Read a file this process is not allowed to open itself.

        Args:
            path: File to read

        Returns:
            File content, or None if the elevated read failed
        """
        result = self._probe.run_command(self._elevate(["cat", path]))
        if result is None or not result.ok:
            return None
        return result.stdout

    @staticmethod
    def classify(result: CommandResult) -> FixOutcome:
        """Map a finished privileged process to a FixOutcome.

        Args:
            result: Captured process result

        Returns:
            ok with stdout on success; the elevation message when credentials
            were required; raw diagnostics otherwise
        """
        stdout = result.stdout.strip()
        stderr = result.stderr.strip()

        if result.exit_code == 0:
            return FixOutcome.applied(stdout or "applied")

        if _CREDENTIALS_PATTERN.search(stderr):
            return FixOutcome.failed(ELEVATION_REQUIRED_MESSAGE)

        return FixOutcome.failed(stderr or stdout or f"exit {result.exit_code}")

    def _elevate(self, argv: Sequence[str]) -> list[str]:
        """Prefix a command with the elevation command."""
        return [*self._elevation_command, *argv]
