"""
HostGuard Rules: Kernel runtime parameters (sysctl)

Values are read live from /proc/sys. Fixes set them with ``sysctl -w`` and
persist them in a sysctl configuration file.
"""

from hostguard.core.probe import ProbeUnavailable
from hostguard.core.rule import BaseRule, FixOutcome, Status


class SysctlRule(BaseRule):
    """Rule satisfied when every parameter has its expected value."""

    # parameter -> expected value
    params: dict[str, str] = {}
    # path key of the file the fix persists to
    conf_key: str = "sysctl_baseline_conf"

    def _values(self) -> dict[str, str]:
        values = {}
        for param in self.params:
            value = self._sysctl_value(param)
            if value is None:
                raise ProbeUnavailable(f"sysctl {param} is not available")
            values[param] = value
        return values

    def judge(self, values: dict[str, str]) -> Status:
        """Map observed values to a status (all must match by default)."""
        if all(values[param] == expected for param, expected in self.params.items()):
            return Status.PASS
        return Status.FAIL

    def check(self) -> Status:
        return self.judge(self._values())

    def fix(self) -> FixOutcome:
        conf_path = self._path(self.conf_key)
        return FixOutcome.combine(
            self.patcher.apply_sysctl(param, value, conf_path)
            for param, value in self.params.items()
        )


class KernelAslrRule(SysctlRule):
    """Full address space layout randomization."""

    id = "kernel-aslr"
    category = "Ядро"
    title = "ASLR включён (randomize_va_space = 2)"
    hint = "Добавьте в /etc/sysctl.conf: kernel.randomize_va_space = 2"

    params = {"kernel.randomize_va_space": "2"}
    conf_key = "sysctl_conf"

    def judge(self, values: dict[str, str]) -> Status:
        value = values["kernel.randomize_va_space"]
        if value == "2":
            return Status.PASS
        if value == "1":
            return Status.WARN
        return Status.FAIL


class KernelSynCookiesRule(SysctlRule):
    """SYN flood protection."""

    id = "kernel-syncookies"
    category = "Ядро"
    title = "SYN-cookies включены (tcp_syncookies = 1)"
    hint = "Добавьте в /etc/sysctl.conf: net.ipv4.tcp_syncookies = 1"

    params = {"net.ipv4.tcp_syncookies": "1"}
    conf_key = "sysctl_conf"


class IpForwardingRule(SysctlRule):
    """The host does not route packets."""

    id = "net-ipforward"
    category = "Сеть"
    title = "IP forwarding отключён"
    hint = "Установите: net.ipv4.ip_forward = 0 в sysctl"

    params = {"net.ipv4.ip_forward": "0"}


class IcmpRedirectsRule(SysctlRule):
    """ICMP redirects are ignored."""

    id = "net-icmp-redirect"
    category = "Сеть"
    title = "ICMP redirects отключены"
    hint = "Установите: net.ipv4.conf.all.accept_redirects = 0"

    params = {
        "net.ipv4.conf.all.accept_redirects": "0",
        "net.ipv4.conf.default.accept_redirects": "0",
    }


class SourceRoutingRule(SysctlRule):
    """Source-routed packets are rejected."""

    id = "net-source-route"
    category = "Сеть"
    title = "Source routing отключён"
    hint = "Установите: net.ipv4.conf.all.accept_source_route = 0"

    params = {
        "net.ipv4.conf.all.accept_source_route": "0",
        "net.ipv4.conf.default.accept_source_route": "0",
    }


class NetSynCookiesRule(SysctlRule):
    """SYN flood protection (baseline)."""

    id = "net-syncookies"
    category = "Сеть"
    title = "TCP SYN cookies включены"
    hint = "Установите: net.ipv4.tcp_syncookies = 1"

    params = {"net.ipv4.tcp_syncookies": "1"}
