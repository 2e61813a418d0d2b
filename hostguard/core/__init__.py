"""
HostGuard - Core Module

This module contains the check/fix engine: system probes, privileged
execution, config patching, the rule model, the registry and the
evaluation session.
"""

from .probe import (
    CommandResult,
    ProbeUnavailable,
    SystemProbe,
)
from .rule import (
    BaseRule,
    FixOutcome,
    RuleContext,
    Status,
)
from .privilege import (
    PrivilegedExecutor,
)
from .patcher import (
    ConfigPatcher,
    directive_pattern,
    patch_content,
)
from .registry import (
    RuleRegistry,
)
from .session import (
    EvaluationSession,
    FixRecord,
    apply_fix,
    evaluate,
)
from .platform import (
    DistroInfo,
    PlatformContext,
    get_platform_context,
    list_available_profiles,
    profile_exists,
    load_platform_context,
    parse_os_release,
)

__all__ = [
    "CommandResult",
    "ProbeUnavailable",
    "SystemProbe",
    "BaseRule",
    "FixOutcome",
    "RuleContext",
    "Status",
    "PrivilegedExecutor",
    "ConfigPatcher",
    "directive_pattern",
    "patch_content",
    "RuleRegistry",
    "EvaluationSession",
    "FixRecord",
    "apply_fix",
    "evaluate",
    "DistroInfo",
    "PlatformContext",
    "get_platform_context",
    "list_available_profiles",
    "profile_exists",
    "load_platform_context",
    "parse_os_release",
]
