"""
HostGuard Rules: Authentication and session policy (CIS baseline)
"""

import re

from hostguard.core.rule import BaseRule, FixOutcome, Status
from hostguard.rules.pam import pwquality_setting


class PwqualityPolicyRule(BaseRule):
    """Password length and character-class requirements."""

    id = "auth-pwquality"
    category = "Аутентификация"
    title = "Парольная политика: minlen ≥ 8, minclass ≥ 3"
    hint = "Настройте /etc/security/pwquality.conf: minlen = 8, minclass = 3"

    def check(self) -> Status:
        content = self._require_file(self._path("pwquality_conf"))
        minlen = pwquality_setting(content, "minlen")
        minclass = pwquality_setting(content, "minclass")

        length_ok = minlen is not None and minlen >= 8
        class_ok = minclass is not None and minclass >= 3
        if length_ok and class_ok:
            return Status.PASS
        if length_ok or class_ok:
            return Status.WARN
        return Status.FAIL


class FaillockRule(BaseRule):
    """Accounts are locked after repeated failed logins."""

    id = "auth-faillock"
    category = "Аутентификация"
    title = "Блокировка после неудачных попыток (pam_faillock)"
    hint = "Настройте faillock: deny = 5, unlock_time = 900"

    def check(self) -> Status:
        contents = [
            content
            for content in (self.probe.read_text_file(p) for p in self._paths("pam_auth"))
            if content is not None
        ]
        if not contents:
            return Status.UNKNOWN
        return Status.PASS if any("pam_faillock" in c for c in contents) else Status.FAIL


class SessionTimeoutRule(BaseRule):
    """Idle shells are logged out after at most 15 minutes."""

    id = "auth-tmout"
    category = "Аутентификация"
    title = "Таймаут сессии (TMOUT ≤ 900)"
    hint = "Добавьте TMOUT=900 в /etc/profile.d/tmout.sh"

    MAX_TIMEOUT = 900
    TMOUT_PATTERN = re.compile(
        r"^\s*(?:export\s+|readonly\s+|declare\s+-\w+\s+)?TMOUT\s*=\s*(\d+)",
        re.MULTILINE | re.IGNORECASE,
    )

    def _candidate_files(self) -> list[str]:
        files = list(self._paths("shell_profiles"))
        profile_dir = self._path("profile_dir")
        for name in self.probe.list_dir(profile_dir) or []:
            files.append(f"{profile_dir}/{name}")
        return files

    def check(self) -> Status:
        for path in self._candidate_files():
            content = self.probe.read_text_file(path)
            if content is None:
                continue
            match = self.TMOUT_PATTERN.search(content)
            if match and 0 < int(match.group(1)) <= self.MAX_TIMEOUT:
                return Status.PASS
        return Status.FAIL

    def fix(self) -> FixOutcome:
        return self.executor.write_privileged(
            self._path("tmout_script"),
            f"readonly TMOUT={self.MAX_TIMEOUT}\nexport TMOUT\n",
        )


class UmaskRule(BaseRule):
    """Default umask withholds group write and all world access."""

    id = "auth-umask"
    category = "Аутентификация"
    title = "Umask ≥ 027"
    hint = "Установите umask 027 в /etc/bashrc и /etc/profile"

    REQUIRED_MASK = 0o027

    def check(self) -> Status:
        content = "\n".join(
            self.probe.read_text_file(path) or "" for path in self._paths("shell_profiles")
        )
        match = re.search(r"^\s*umask\s+([0-7]{1,4})\b", content, re.MULTILINE)
        if not match:
            return Status.WARN
        umask = int(match.group(1), 8)
        if (umask & self.REQUIRED_MASK) == self.REQUIRED_MASK:
            return Status.PASS
        return Status.FAIL
