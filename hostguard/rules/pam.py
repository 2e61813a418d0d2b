"""
HostGuard Rules: PAM password policy

pam_pwquality settings and the PAM password stack. PAM stacks are never
edited automatically: a broken stack can lock every user out.
"""

import re

from hostguard.core.patcher import directive_pattern
from hostguard.core.rule import BaseRule, FixOutcome, Status


PWQUALITY_MODULES = re.compile(r"pam_pwquality|pam_cracklib")


def pwquality_setting(content: str, key: str) -> int | None:
    """Read an integer ``key = value`` setting from pwquality.conf content."""
    match = re.search(
        rf"^\s*{re.escape(key)}\s*=\s*(\d+)",
        content,
        re.IGNORECASE | re.MULTILINE,
    )
    return int(match.group(1)) if match else None


class PamMinLenRule(BaseRule):
    """Minimum password length of at least 8 characters."""

    id = "pam-minlen"
    category = "PAM / Пароли"
    title = "Минимальная длина пароля ≥ 8"
    hint = "Установите minlen = 8  в /etc/security/pwquality.conf"

    MIN_LENGTH = 8

    def check(self) -> Status:
        pwquality = self.probe.read_text_file(self._path("pwquality_conf"))
        if pwquality is not None:
            minlen = pwquality_setting(pwquality, "minlen")
            if minlen is not None:
                return Status.PASS if minlen >= self.MIN_LENGTH else Status.FAIL

        # minlen= passed as a module argument in the PAM stack
        for path in self._paths("pam_password"):
            content = self.probe.read_text_file(path)
            if content is None:
                continue
            match = re.search(r"minlen=(\d+)", content, re.IGNORECASE)
            if match:
                return Status.PASS if int(match.group(1)) >= self.MIN_LENGTH else Status.FAIL

        return Status.UNKNOWN

    def fix(self) -> FixOutcome:
        return self.patcher.patch_directive(
            self._path("pwquality_conf"),
            directive_pattern("minlen", assignment=True),
            f"minlen = {self.MIN_LENGTH}",
        )


class PamPwqualityRule(BaseRule):
    """The password stack enforces quality checks."""

    id = "pam-pwquality"
    category = "PAM / Пароли"
    title = "pam_pwquality или pam_cracklib подключён"
    hint = "Добавьте в /etc/pam.d/common-password: password requisite pam_pwquality.so"

    def check(self) -> Status:
        contents = [
            content
            for content in (self.probe.read_text_file(p) for p in self._paths("pam_password"))
            if content is not None
        ]
        if not contents:
            return Status.UNKNOWN
        return Status.PASS if any(PWQUALITY_MODULES.search(c) for c in contents) else Status.FAIL
