"""
HostGuard Rules: Filesystem mount options

Partitioning cannot be changed safely by a running tool, so these rules
have no automated fix.
"""

from typing import Optional

from hostguard.core.rule import BaseRule, Status


def mount_options(mounts: str, mountpoint: str) -> Optional[set[str]]:
    """Find the options of a mountpoint in /proc/mounts content.

    Args:
        mounts: /proc/mounts content
        mountpoint: Mountpoint to look up

    Returns:
        Set of mount options, None if the path is not a separate mount
    """
    options: Optional[set[str]] = None
    for line in mounts.splitlines():
        fields = line.split()
        if len(fields) >= 4 and fields[1] == mountpoint:
            # later entries shadow earlier ones at the same mountpoint
            options = set(fields[3].split(","))
    return options


class TmpPartitionRule(BaseRule):
    """/tmp is a separate mount with noexec, nosuid and nodev."""

    id = "fs-tmp-separate"
    category = "Файловые системы"
    title = "/tmp — отдельный раздел с noexec,nosuid,nodev"
    hint = "Выделите /tmp в отдельный раздел. Добавьте noexec,nosuid,nodev в /etc/fstab"

    REQUIRED_OPTIONS = {"noexec", "nosuid", "nodev"}

    def check(self) -> Status:
        mounts = self._require_file(self._path("proc_mounts"))
        options = mount_options(mounts, "/tmp")
        if options is None:
            return Status.FAIL
        return Status.PASS if self.REQUIRED_OPTIONS <= options else Status.WARN


class VarTmpPartitionRule(BaseRule):
    """/var/tmp is a separate mount or a bind mount."""

    id = "fs-vartmp"
    category = "Файловые системы"
    title = "/var/tmp — отдельный раздел или bind-mount"
    hint = "Выделите /var/tmp в отдельный раздел или смонтируйте bind к /tmp"

    def check(self) -> Status:
        mounts = self._require_file(self._path("proc_mounts"))
        return Status.PASS if mount_options(mounts, "/var/tmp") is not None else Status.WARN
