"""
HostGuard Rules: Audit and logging subsystem
"""

from hostguard.core.rule import BaseRule, FixOutcome, Status


IDENTITY_FILES = ["/etc/passwd", "/etc/shadow", "/etc/group", "/etc/gshadow"]


class AuditdRunningRule(BaseRule):
    """The audit daemon is running."""

    id = "auditd"
    category = "auditd"
    title = "Служба auditd запущена"
    hint = "Установите и запустите: apt install auditd && systemctl enable --now auditd"

    def check(self) -> Status:
        if any(self.probe.path_exists(path) for path in self._paths("auditd_pid")):
            return Status.PASS
        if self.probe.which("systemctl") is None:
            return Status.UNKNOWN
        return Status.PASS if self._service_active("auditd") else Status.FAIL

    def fix(self) -> FixOutcome:
        return self._systemctl(["enable", "--now"], "auditd")


class AuditdEnabledRule(BaseRule):
    """The audit daemon is running and starts at boot."""

    id = "audit-auditd"
    category = "Аудит"
    title = "auditd запущен и включён"
    hint = "Запустите: systemctl enable --now auditd"

    def check(self) -> Status:
        if self.probe.which("systemctl") is None:
            return Status.UNKNOWN
        if not self._service_active("auditd"):
            return Status.FAIL
        return Status.PASS if self._service_enabled("auditd") else Status.WARN

    def fix(self) -> FixOutcome:
        return self._systemctl(["enable", "--now"], "auditd")


class AuditIdentityRulesRule(BaseRule):
    """Changes to the account databases are audited."""

    id = "audit-rules-identity"
    category = "Аудит"
    title = "Аудит изменений /etc/passwd, /etc/shadow, /etc/group"
    hint = "Добавьте правила в /etc/audit/rules.d/identity.rules"

    def check(self) -> Status:
        # auditctl -l needs root; without it the loaded rules are unknown
        loaded = self._command_output(["auditctl", "-l"])
        if not loaded:
            return Status.UNKNOWN

        covered = [path for path in IDENTITY_FILES if path in loaded]
        if len(covered) == len(IDENTITY_FILES):
            return Status.PASS
        if covered:
            return Status.WARN
        return Status.FAIL

    def fix(self) -> FixOutcome:
        rules = "".join(f"-w {path} -p wa -k identity\n" for path in IDENTITY_FILES)
        written = self.executor.write_privileged(self._path("audit_identity_rules"), rules)
        if not written.ok:
            return written
        loaded = self.executor.run_privileged(["augenrules", "--load"])
        return FixOutcome.combine([written, loaded])


class RsyslogRule(BaseRule):
    """System logging daemon is running."""

    id = "audit-rsyslog"
    category = "Аудит"
    title = "rsyslog запущен"
    hint = "Запустите: systemctl enable --now rsyslog"

    def check(self) -> Status:
        return Status.PASS if self._service_active("rsyslog") else Status.FAIL

    def fix(self) -> FixOutcome:
        return self._systemctl(["enable", "--now"], "rsyslog")
