"""
HostGuard - Rule Catalogues

This package contains all rule implementations and the two fixed
catalogues built from them. Each catalogue lists its rule classes in report
order; building a catalogue only instantiates classes and performs no I/O.
"""

from dataclasses import dataclass
from typing import Optional, Type

from hostguard.core.registry import RuleRegistry
from hostguard.core.rule import BaseRule, FixOutcome, RuleContext, Status

# SSH hardening
from hostguard.rules.ssh import (
    SshMaxAuthTriesRule,
    SshPasswordAuthenticationRule,
    SshPermitRootLoginRule,
)

# PAM and authentication
from hostguard.rules.pam import PamMinLenRule, PamPwqualityRule
from hostguard.rules.accounts import (
    FaillockRule,
    PwqualityPolicyRule,
    SessionTimeoutRule,
    UmaskRule,
)

# Firewall, SELinux, audit
from hostguard.rules.firewall import FirewalldActiveRule, SELinuxEnforcingRule
from hostguard.rules.audit import (
    AuditdEnabledRule,
    AuditdRunningRule,
    AuditIdentityRulesRule,
    RsyslogRule,
)

# Kernel modules, parameters, filesystems
from hostguard.rules.modules import RareFilesystemsBlockedRule, UsbStorageBlockedRule
from hostguard.rules.kernel import (
    IcmpRedirectsRule,
    IpForwardingRule,
    KernelAslrRule,
    KernelSynCookiesRule,
    NetSynCookiesRule,
    SourceRoutingRule,
)
from hostguard.rules.filesystem import TmpPartitionRule, VarTmpPartitionRule

# Services and permissions
from hostguard.rules.services import (
    AvahiDisabledRule,
    CupsDisabledRule,
    TimeSyncRule,
    UnnecessaryServicesRule,
    XinetdRemovedRule,
)
from hostguard.rules.permissions import (
    CronPermissionsRule,
    GroupGshadowPermissionsRule,
    PasswdShadowPermissionsRule,
    SshdConfigPermissionsRule,
)


@dataclass(frozen=True)
class Catalogue:
    """A named, ordered rule set with its report title."""

    name: str
    title: str
    rule_classes: tuple[Type[BaseRule], ...]


HARDENING = Catalogue(
    name="hardening",
    title="Отчёт харденинга Linux",
    rule_classes=(
        SshPermitRootLoginRule,
        SshPasswordAuthenticationRule,
        SshMaxAuthTriesRule,
        PamMinLenRule,
        PamPwqualityRule,
        FirewalldActiveRule,
        SELinuxEnforcingRule,
        AuditdRunningRule,
        UsbStorageBlockedRule,
        KernelAslrRule,
        KernelSynCookiesRule,
    ),
)

BASELINE = Catalogue(
    name="baseline",
    title="CIS Baseline — РедОС / RHEL",
    rule_classes=(
        TmpPartitionRule,
        VarTmpPartitionRule,
        RareFilesystemsBlockedRule,
        XinetdRemovedRule,
        TimeSyncRule,
        AvahiDisabledRule,
        CupsDisabledRule,
        UnnecessaryServicesRule,
        IpForwardingRule,
        IcmpRedirectsRule,
        SourceRoutingRule,
        NetSynCookiesRule,
        AuditdEnabledRule,
        AuditIdentityRulesRule,
        RsyslogRule,
        PwqualityPolicyRule,
        FaillockRule,
        SessionTimeoutRule,
        UmaskRule,
        PasswdShadowPermissionsRule,
        GroupGshadowPermissionsRule,
        SshdConfigPermissionsRule,
        CronPermissionsRule,
    ),
)

CATALOGUES: dict[str, Catalogue] = {
    HARDENING.name: HARDENING,
    BASELINE.name: BASELINE,
}


def get_catalogue(name: str) -> Catalogue:
    """Get a catalogue by name.

    Raises:
        ValueError: If no catalogue has this name
    """
    catalogue = CATALOGUES.get(name)
    if catalogue is None:
        available = ", ".join(CATALOGUES)
        raise ValueError(f"Unknown catalogue '{name}'. Available catalogues: {available}")
    return catalogue


def build_registry(
    catalogue: str = "hardening",
    context: Optional[RuleContext] = None,
) -> RuleRegistry:
    """Instantiate a catalogue's rules into a registry.

    Args:
        catalogue: Catalogue name
        context: Shared collaborators (default: real system access)

    Returns:
        RuleRegistry in catalogue order

    Raises:
        ValueError: On an unknown catalogue or a duplicate rule id
    """
    shared = context if context is not None else RuleContext()
    return RuleRegistry(
        rule_class(shared) for rule_class in get_catalogue(catalogue).rule_classes
    )


def build_rules(
    catalogue: str = "hardening",
    context: Optional[RuleContext] = None,
) -> list[BaseRule]:
    """Build the ordered rule list of a catalogue."""
    return build_registry(catalogue, context).rules()


__all__ = [
    "BaseRule",
    "FixOutcome",
    "RuleContext",
    "Status",
    "Catalogue",
    "CATALOGUES",
    "HARDENING",
    "BASELINE",
    "get_catalogue",
    "build_registry",
    "build_rules",
]
