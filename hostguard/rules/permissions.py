"""
HostGuard Rules: Permissions of privileged files

A file complies when it has no permission bit outside the allowed mask
(e.g. 0640 allows 0600 and 0000 but not 0644).
"""

from hostguard.core.rule import BaseRule, FixOutcome, Status


def within_mask(mode: int, allowed: int) -> bool:
    """True if ``mode`` sets no bit that ``allowed`` does not set."""
    return (mode & ~allowed) == 0


class FilePermissionsRule(BaseRule):
    """Rule satisfied when every listed file stays within its mask."""

    # path -> (allowed mask, mode applied by the fix)
    files: dict[str, tuple[int, str]] = {}

    def check(self) -> Status:
        for path, (allowed, _) in self.files.items():
            if not within_mask(self._require_mode(path), allowed):
                return Status.FAIL
        return Status.PASS

    def fix(self) -> FixOutcome:
        return FixOutcome.combine(
            self.executor.run_privileged(["chmod", mode, path])
            for path, (_, mode) in self.files.items()
        )


class PasswdShadowPermissionsRule(FilePermissionsRule):
    id = "perms-passwd"
    category = "Права файлов"
    title = "/etc/passwd — 644, /etc/shadow — 000 или 640"
    hint = "chmod 644 /etc/passwd; chmod 000 /etc/shadow"

    files = {
        "/etc/passwd": (0o644, "644"),
        "/etc/shadow": (0o640, "000"),
    }


class GroupGshadowPermissionsRule(FilePermissionsRule):
    id = "perms-group"
    category = "Права файлов"
    title = "/etc/group — 644, /etc/gshadow — 000 или 640"
    hint = "chmod 644 /etc/group; chmod 000 /etc/gshadow"

    files = {
        "/etc/group": (0o644, "644"),
        "/etc/gshadow": (0o640, "000"),
    }


class SshdConfigPermissionsRule(FilePermissionsRule):
    id = "perms-sshd-config"
    category = "Права файлов"
    title = "/etc/ssh/sshd_config — 600"
    hint = "chmod 600 /etc/ssh/sshd_config"

    @property
    def files(self) -> dict[str, tuple[int, str]]:
        return {self._path("sshd_config"): (0o600, "600")}


class CronPermissionsRule(BaseRule):
    """crontab is owner-only; cron directories are owner-only when present."""

    id = "perms-crontab"
    category = "Права файлов"
    title = "/etc/crontab — 600, cron-директории — 700"
    hint = "chmod 600 /etc/crontab; chmod 700 /etc/cron.*"

    def check(self) -> Status:
        if not within_mask(self._require_mode(self._path("crontab")), 0o600):
            return Status.FAIL
        for directory in self._paths("cron_dirs"):
            mode = self.probe.file_mode(directory)
            if mode is not None and not within_mask(mode, 0o700):
                return Status.FAIL
        return Status.PASS

    def fix(self) -> FixOutcome:
        steps = [self.executor.run_privileged(["chmod", "600", self._path("crontab")])]
        for directory in self._paths("cron_dirs"):
            if self.probe.path_exists(directory):
                steps.append(self.executor.run_privileged(["chmod", "700", directory]))
        return FixOutcome.combine(steps)
