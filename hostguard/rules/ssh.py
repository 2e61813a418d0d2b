"""
HostGuard Rules: SSH daemon hardening

Checks directives of /etc/ssh/sshd_config. sshd honours the first
occurrence of a keyword, so the first active line is the effective value.
An absent directive is reported as a warning since distro defaults differ.
"""

import re
from typing import Optional

from hostguard.core.patcher import directive_pattern
from hostguard.core.rule import BaseRule, FixOutcome, Status


def sshd_directive(content: str, key: str) -> Optional[str]:
    """Find the effective value of a ``Key value`` directive.

    Args:
        content: sshd_config content
        key: Directive keyword (case-insensitive)

    Returns:
        Lower-cased value of the first active occurrence, None if absent
    """
    match = re.search(
        rf"^\s*{re.escape(key)}\s+(\S+)",
        content,
        re.IGNORECASE | re.MULTILINE,
    )
    return match.group(1).lower() if match else None


class SshDirectiveRule(BaseRule):
    """Shared behaviour of rules backed by one sshd_config directive."""

    directive: str = ""
    fix_value: str = ""

    def judge(self, value: str) -> Status:
        """Map the directive's value to a status."""
        raise NotImplementedError

    def check(self) -> Status:
        content = self._require_file(self._path("sshd_config"))
        value = sshd_directive(content, self.directive)
        if value is None:
            return Status.WARN
        return self.judge(value)

    def fix(self) -> FixOutcome:
        written = self.patcher.patch_directive(
            self._path("sshd_config"),
            directive_pattern(self.directive),
            f"{self.directive} {self.fix_value}",
        )
        if not written.ok:
            return written

        restarted = self._restart_sshd()
        return FixOutcome(
            ok=restarted.ok,
            message=f"{self.directive} {self.fix_value}\n{restarted.message}",
        )

    def _restart_sshd(self) -> FixOutcome:
        """Restart the SSH daemon so the new directive takes effect."""
        restarted = self._systemctl(["restart"], "sshd")
        if restarted.ok:
            return restarted
        return FixOutcome.failed(
            f"directive written; restart SSH manually ({restarted.message})"
        )


class SshPermitRootLoginRule(SshDirectiveRule):
    """Root must not log in with a password."""

    id = "ssh-root"
    category = "SSH"
    title = "PermitRootLogin = no / prohibit-password"
    hint = "Установите: PermitRootLogin no  в /etc/ssh/sshd_config"

    directive = "PermitRootLogin"
    fix_value = "no"

    def judge(self, value: str) -> Status:
        if value in ("no", "prohibit-password", "without-password"):
            return Status.PASS
        return Status.FAIL


class SshPasswordAuthenticationRule(SshDirectiveRule):
    """Only key-based SSH authentication is allowed."""

    id = "ssh-passauth"
    category = "SSH"
    title = "PasswordAuthentication = no"
    hint = "Установите: PasswordAuthentication no  в /etc/ssh/sshd_config"

    directive = "PasswordAuthentication"
    fix_value = "no"

    def judge(self, value: str) -> Status:
        return Status.PASS if value == "no" else Status.FAIL

    def fix(self) -> FixOutcome:
        outcome = super().fix()
        if not outcome.ok:
            return outcome
        return FixOutcome.applied(
            f"{outcome.message}\n⚠ make sure SSH keys are configured before logging out"
        )


class SshMaxAuthTriesRule(SshDirectiveRule):
    """Limit authentication attempts per connection."""

    id = "ssh-maxauth"
    category = "SSH"
    title = "MaxAuthTries ≤ 5"
    hint = "Установите: MaxAuthTries 3  в /etc/ssh/sshd_config"

    directive = "MaxAuthTries"
    fix_value = "3"
    MAX_TRIES = 5

    def judge(self, value: str) -> Status:
        try:
            tries = int(value)
        except ValueError:
            return Status.UNKNOWN
        return Status.PASS if tries <= self.MAX_TRIES else Status.FAIL
