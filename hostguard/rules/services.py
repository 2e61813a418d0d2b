"""
HostGuard Rules: System services
"""

from hostguard.core.rule import BaseRule, FixOutcome, Status


class XinetdRemovedRule(BaseRule):
    """The legacy xinetd super-server is not installed."""

    id = "svc-xinetd"
    category = "Сервисы"
    title = "xinetd не установлен"
    hint = "Удалите: dnf remove xinetd"

    def check(self) -> Status:
        return Status.FAIL if self._package_installed("xinetd") else Status.PASS


class TimeSyncRule(BaseRule):
    """Time synchronization runs (chronyd, or ntpd as an alternative)."""

    id = "svc-chrony"
    category = "Сервисы"
    title = "chronyd настроен (синхронизация времени)"
    hint = "Установите и запустите: dnf install chrony && systemctl enable --now chronyd"

    def check(self) -> Status:
        if self._service_active("chronyd") or self._service_active("ntpd"):
            return Status.PASS
        return Status.FAIL

    def fix(self) -> FixOutcome:
        return self._systemctl(["enable", "--now"], "chronyd")


class AvahiDisabledRule(BaseRule):
    """mDNS/DNS-SD announcements are off."""

    id = "svc-avahi"
    category = "Сервисы"
    title = "avahi-daemon отключён"
    hint = "Отключите: systemctl disable --now avahi-daemon"

    def check(self) -> Status:
        return Status.FAIL if self._service_active("avahi-daemon") else Status.PASS

    def fix(self) -> FixOutcome:
        return self._systemctl(["disable", "--now"], "avahi-daemon")


class CupsDisabledRule(BaseRule):
    """The print server is off unless the host prints."""

    id = "svc-cups"
    category = "Сервисы"
    title = "cups отключён (если не нужен)"
    hint = "Отключите: systemctl disable --now cups"

    def check(self) -> Status:
        return Status.WARN if self._service_active("cups") else Status.PASS

    def fix(self) -> FixOutcome:
        return self._systemctl(["disable", "--now"], "cups")


class UnnecessaryServicesRule(BaseRule):
    """No general-purpose network servers run unexpectedly."""

    id = "svc-unnecessary"
    category = "Сервисы"
    title = "Ненужные сетевые сервисы отключены"
    hint = "Проверьте: dhcpd, named, vsftpd, httpd, dovecot, smb, squid"

    SERVICES = ["dhcpd", "named", "vsftpd", "httpd", "dovecot", "smb", "squid"]

    def check(self) -> Status:
        if any(self._service_active(service) for service in self.SERVICES):
            return Status.WARN
        return Status.PASS
