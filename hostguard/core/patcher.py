"""
HostGuard - Config-Directive Patcher

Idempotent single-line edits of configuration files. Writes go through the
PrivilegedExecutor; reads go through the SystemProbe.
"""

from __future__ import annotations

import re
from typing import Optional, Pattern, Union

from .privilege import PrivilegedExecutor
from .probe import SystemProbe
from .rule import FixOutcome


PatternLike = Union[str, Pattern[str]]


def directive_pattern(key: str, assignment: bool = False) -> Pattern[str]:
    """Build a case-insensitive pattern for a configuration directive.

    The pattern tolerates leading whitespace and comment markers so a
    disabled directive (``#PermitRootLogin yes``) is rewritten in place.

    Args:
        key: Directive name (matched literally)
        assignment: True for ``key = value`` files (sysctl, pwquality),
            False for ``Key value`` files (sshd_config)

    Returns:
        Compiled pattern
    """
    separator = r"\s*=" if assignment else r"(?:\s|$)"
    return re.compile(rf"^\s*#*\s*{re.escape(key)}{separator}", re.IGNORECASE)


def patch_content(content: str, pattern: PatternLike, new_line: str) -> str:
    """Compute patched file content without touching the filesystem.

    The first line matching ``pattern`` is replaced by ``new_line``; when no
    line matches, ``new_line`` is appended and the result ends with a newline.

    Args:
        content: Current file content ("" for a missing file)
        pattern: Regular expression (strings are compiled case-insensitively)
        new_line: Replacement line without trailing newline

    Returns:
        New file content

    Raises:
        ValueError: If ``pattern`` does not match ``new_line`` (the edit
            could not be idempotent)
    """
    regex = _compile(pattern)
    if not regex.search(new_line):
        raise ValueError(
            f"Pattern {regex.pattern!r} does not match replacement line {new_line!r}"
        )

    lines = content.split("\n")
    for index, line in enumerate(lines):
        if regex.search(line):
            lines[index] = new_line
            return "\n".join(lines)

    body = content.rstrip("\n")
    if not body:
        return f"{new_line}\n"
    return f"{body}\n{new_line}\n"


class ConfigPatcher:
    """Rewrite or append single directive lines in configuration files.

    Example:
        patcher = ConfigPatcher(probe, executor)
        outcome = patcher.patch_directive(
            "/etc/ssh/sshd_config",
            directive_pattern("PermitRootLogin"),
            "PermitRootLogin no",
        )
    """

    def __init__(
        self,
        probe: Optional[SystemProbe] = None,
        executor: Optional[PrivilegedExecutor] = None,
    ) -> None:
        """Initialize the patcher.

        Args:
            probe: Used to read current file content
            executor: Used for the privileged write
        """
        self._probe = probe if probe is not None else SystemProbe()
        self._executor = executor if executor is not None else PrivilegedExecutor(self._probe)

    def patch_directive(
        self,
        path: str,
        pattern: PatternLike,
        new_line: str,
    ) -> FixOutcome:
        """Idempotently set one directive line in a file.

        Args:
            path: Configuration file (created if absent)
            pattern: Matches the directive, commented or not
            new_line: Line to write in place of the first match

        Returns:
            FixOutcome of the write; ok without writing when the file
            already has the desired content. Failed without writing when
            an existing file cannot be read, even with elevation, or when
            ``pattern`` does not match ``new_line``.
        """
        current = self._probe.read_text_file(path)
        if current is None and self._probe.path_exists(path):
            current = self._executor.read_privileged(path)
            if current is None:
                return FixOutcome.failed(f"cannot read {path}; refusing to overwrite it")

        content = current if current is not None else ""
        try:
            patched = patch_content(content, pattern, new_line)
        except ValueError as e:
            return FixOutcome.failed(str(e))

        if current is not None and patched == current:
            return FixOutcome.applied(f"{path}: {new_line} (unchanged)")

        outcome = self._executor.write_privileged(path, patched)
        if not outcome.ok:
            return outcome
        return FixOutcome.applied(f"{path}: {new_line}")

    def apply_sysctl(self, param: str, value: str, conf_path: str) -> FixOutcome:
        """Set a kernel parameter live, then persist it.

        A persistence failure does not undo the runtime change; it is
        reported as partial success.

        Args:
            param: sysctl key, e.g. ``net.ipv4.tcp_syncookies``
            value: Desired value
            conf_path: File that persists the value across reboots

        Returns:
            FixOutcome of the two-phase apply
        """
        runtime = self._executor.run_privileged(["sysctl", "-w", f"{param}={value}"])
        if not runtime.ok:
            return runtime

        persisted = self.patch_directive(
            conf_path,
            directive_pattern(param, assignment=True),
            f"{param} = {value}",
        )
        if not persisted.ok:
            return FixOutcome.applied(
                f"{param} = {value} (applied at runtime; persistence failed: "
                f"{persisted.message})"
            )
        return FixOutcome.applied(f"{param} = {value}")


def _compile(pattern: PatternLike) -> Pattern[str]:
    """Compile string patterns case-insensitively."""
    if isinstance(pattern, str):
        return re.compile(pattern, re.IGNORECASE)
    return pattern
