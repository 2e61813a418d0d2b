"""
HostGuard - System Probe Adapter

Side-effect-free queries against the local system (file reads, directory
listings, permission bits, subprocess execution). Every failure mode is
reported as ``None`` so that rule checks can map it to ``unknown`` instead
of crashing.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
import shutil
import stat
import subprocess
from typing import Optional, Sequence


class ProbeUnavailable(Exception):
    """A probe could not answer (file missing, tool missing, parse miss).

    Raised by rule helpers that require a value; collapsed to
    ``Status.UNKNOWN`` by ``BaseRule.evaluate()``.
    """


@dataclass(frozen=True)
class CommandResult:
    """Captured output of a finished child process."""

    argv: tuple[str, ...]
    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        """True if the process exited with status zero."""
        return self.exit_code == 0


class SystemProbe:
    """Read-only access to files and commands of the running host.

    Example:
        probe = SystemProbe()
        content = probe.read_text_file("/etc/ssh/sshd_config")
        if content is None:
            ...  # file missing or unreadable

        result = probe.run_command(["systemctl", "is-active", "firewalld"])
        if result is None:
            ...  # systemctl not installed
    """

    def read_text_file(self, path: str) -> Optional[str]:
        """Read a text file.

        Args:
            path: Absolute path of the file

        Returns:
            File content, or None if it is missing or unreadable
        """
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                return f.read()
        except (OSError, UnicodeDecodeError):
            return None

    def run_command(
        self,
        argv: Sequence[str],
        input: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Optional[CommandResult]:
        """Run a command once and capture its output.

        Args:
            argv: Command and arguments, no shell interpretation
            input: Optional text fed to the child's standard input
            timeout: Optional timeout in seconds (none by default)

        Returns:
            CommandResult, or None if the command could not be spawned
        """
        if not argv:
            return None

        try:
            proc = subprocess.run(
                list(argv),
                input=input,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except (subprocess.TimeoutExpired, FileNotFoundError, PermissionError, OSError):
            return None

        return CommandResult(
            argv=tuple(argv),
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            exit_code=proc.returncode,
        )

    def list_dir(self, path: str) -> Optional[list[str]]:
        """List directory entries in sorted order, None if unavailable."""
        try:
            return sorted(os.listdir(path))
        except OSError:
            return None

    def file_mode(self, path: str) -> Optional[int]:
        """Get permission bits (``st_mode & 0o7777``) of a path."""
        try:
            return stat.S_IMODE(os.stat(path).st_mode)
        except OSError:
            return None

    def path_exists(self, path: str) -> bool:
        """Check whether a path exists."""
        return os.path.exists(path)

    def which(self, binary: str) -> Optional[str]:
        """Resolve a binary on PATH, None if it is not installed."""
        return shutil.which(binary)
