"""
HostGuard Rules: Firewall service and SELinux state
"""

from hostguard.core.patcher import directive_pattern
from hostguard.core.rule import BaseRule, FixOutcome, Status


class FirewalldActiveRule(BaseRule):
    """firewalld is installed and running."""

    id = "firewall"
    category = "Firewall"
    title = "firewalld активен"
    hint = "Запустите: sudo systemctl enable --now firewalld"

    def check(self) -> Status:
        if self.probe.which("firewall-cmd") is None:
            return Status.UNKNOWN
        return Status.PASS if self._service_active("firewalld") else Status.FAIL

    def fix(self) -> FixOutcome:
        return self._systemctl(["enable", "--now"], "firewalld")


class SELinuxEnforcingRule(BaseRule):
    """SELinux runs in enforcing mode.

    Permissive mode is a warning (policy loaded, denials only logged);
    disabled is a failure. Hosts without ``getenforce`` cannot be judged.
    """

    id = "selinux"
    category = "SELinux"
    title = "SELinux в режиме enforcing"
    hint = "Установите SELINUX=enforcing в /etc/selinux/config и выполните: setenforce 1"

    def _mode(self) -> str | None:
        result = self.probe.run_command(["getenforce"])
        if result is None or not result.ok:
            return None
        return result.stdout.strip().lower()

    def check(self) -> Status:
        mode = self._mode()
        if mode == "enforcing":
            return Status.PASS
        if mode == "permissive":
            return Status.WARN
        if mode == "disabled":
            return Status.FAIL
        return Status.UNKNOWN

    def fix(self) -> FixOutcome:
        mode = self._mode()
        persisted = self.patcher.patch_directive(
            self._path("selinux_config"),
            directive_pattern("SELINUX", assignment=True),
            "SELINUX=enforcing",
        )
        if mode != "permissive":
            # setenforce cannot leave the disabled state without a reboot
            if not persisted.ok:
                return persisted
            return FixOutcome.failed(
                f"{persisted.message}\nSELinux is {mode or 'unavailable'}: "
                "reboot with an autorelabel to enable enforcing mode"
            )

        runtime = self.executor.run_privileged(["setenforce", "1"])
        return FixOutcome.combine([runtime, persisted])
