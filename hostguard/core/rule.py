"""
HostGuard - Base Rule Class

This module provides the abstract base class for all compliance rules,
the Status enum produced by rule checks and the FixOutcome dataclass
returned by remediations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
import re
from typing import Any, Iterable, Optional, TYPE_CHECKING

from .probe import ProbeUnavailable, SystemProbe

if TYPE_CHECKING:
    from .patcher import ConfigPatcher
    from .platform import PlatformContext
    from .privilege import PrivilegedExecutor


class Status(Enum):
    """Outcome of evaluating a rule.

    Attributes:
        PASS: Rule satisfied
        FAIL: Rule violated with a known, actionable state
        WARN: Ambiguous or distro-dependent state (e.g. directive absent)
        UNKNOWN: Evaluation could not complete (tool or file missing)
    """
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"
    UNKNOWN = "unknown"

    @property
    def icon(self) -> str:
        """Single-character icon used in reports."""
        return _ICONS[self]


_ICONS = {
    Status.PASS: "✓",
    Status.FAIL: "✗",
    Status.WARN: "⚠",
    Status.UNKNOWN: "?",
}


@dataclass(frozen=True)
class FixOutcome:
    """Result of a remediation attempt.

    Attributes:
        ok: True if every step of the remediation succeeded
        message: What was done, or why it failed (may be multi-line)
    """
    ok: bool
    message: str

    def __post_init__(self) -> None:
        """Validate the outcome after initialization."""
        if not self.ok and not self.message:
            raise ValueError("A failed outcome must carry a message")

    def to_dict(self) -> dict[str, Any]:
        """Convert the outcome to a dictionary for JSON serialization."""
        return {"ok": self.ok, "message": self.message}

    @classmethod
    def applied(cls, message: str = "applied") -> "FixOutcome":
        """Create a successful outcome."""
        return cls(ok=True, message=message)

    @classmethod
    def failed(cls, message: str) -> "FixOutcome":
        """Create a failed outcome."""
        return cls(ok=False, message=message)

    @classmethod
    def combine(cls, outcomes: Iterable["FixOutcome"]) -> "FixOutcome":
        """Merge the outcomes of a multi-step remediation.

        The merged outcome is ok only if every step was ok; messages are
        joined one per line in step order.

        Args:
            outcomes: Outcomes of the individual steps

        Returns:
            Combined FixOutcome
        """
        steps = list(outcomes)
        if not steps:
            return cls.applied()
        return cls(
            ok=all(step.ok for step in steps),
            message="\n".join(step.message for step in steps if step.message),
        )


@dataclass
class RuleContext:
    """Collaborators shared by every rule of a registry.

    Attributes:
        probe: Read-only system access used by checks
        executor: Privileged command runner used by fixes
        patcher: Idempotent config-line editor used by fixes
        platform: Distro profile; loaded lazily on first access
    """
    probe: SystemProbe = field(default_factory=SystemProbe)
    executor: Optional["PrivilegedExecutor"] = None
    patcher: Optional["ConfigPatcher"] = None
    platform: Optional["PlatformContext"] = None

    def __post_init__(self) -> None:
        """Wire default executor and patcher around the probe."""
        from .patcher import ConfigPatcher
        from .privilege import PrivilegedExecutor

        if self.executor is None:
            self.executor = PrivilegedExecutor(self.probe)
        if self.patcher is None:
            self.patcher = ConfigPatcher(self.probe, self.executor)

    def get_platform(self) -> "PlatformContext":
        """Get the platform context, loading the default one if needed."""
        if self.platform is None:
            from .platform import get_platform_context

            self.platform = get_platform_context()
        return self.platform


_ID_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class BaseRule(ABC):
    """Abstract base class for all compliance rules.

    A rule carries its metadata as class attributes, a side-effect-free
    ``check()`` and, when remediation is safe to automate, a ``fix()``.

    Example:
        class SshMaxAuthTriesRule(BaseRule):
            id = "ssh-maxauth"
            category = "SSH"
            title = "MaxAuthTries ≤ 5"
            hint = "Установите: MaxAuthTries 3  в /etc/ssh/sshd_config"

            def check(self) -> Status:
                content = self._require_file(self._path("sshd_config"))
                ...

            def fix(self) -> FixOutcome:
                return self.patcher.patch_directive(...)
    """

    # Rule metadata - must be overridden by concrete rules
    id: str = ""  # Stable unique identifier (e.g., "ssh-root")
    category: str = ""  # Report section the rule belongs to
    title: str = ""  # Human-readable assertion
    hint: str = ""  # Remediation guidance shown for non-passing rules

    def __init_subclass__(cls, **kwargs: Any) -> None:
        """Validate metadata of concrete rules.

        Intermediate helper bases do not define an ``id`` of their own and
        are not validated.
        """
        super().__init_subclass__(**kwargs)

        if "id" not in cls.__dict__:
            return

        if not cls.id:
            raise ValueError(f"Rule class {cls.__name__} must define 'id'")
        if not cls.category:
            raise ValueError(f"Rule class {cls.__name__} must define 'category'")
        if not cls.title:
            raise ValueError(f"Rule class {cls.__name__} must define 'title'")
        if not cls.hint:
            raise ValueError(f"Rule class {cls.__name__} must define 'hint'")

        if not _ID_PATTERN.match(cls.id):
            raise ValueError(
                f"Rule id '{cls.id}' must be lowercase alphanumeric with hyphens only"
            )

    def __init__(self, context: Optional[RuleContext] = None) -> None:
        """Initialize the rule.

        Args:
            context: Shared collaborators; a default context is created if omitted
        """
        self._context = context if context is not None else RuleContext()

    @property
    def context(self) -> RuleContext:
        """Get the shared rule context."""
        return self._context

    @property
    def probe(self) -> SystemProbe:
        """Get the system probe used by checks."""
        return self._context.probe

    @property
    def executor(self) -> "PrivilegedExecutor":
        """Get the privileged executor used by fixes."""
        return self._context.executor

    @property
    def patcher(self) -> "ConfigPatcher":
        """Get the config patcher used by fixes."""
        return self._context.patcher

    @property
    def platform(self) -> "PlatformContext":
        """Get the platform context (lazily loaded)."""
        return self._context.get_platform()

    @property
    def has_fix(self) -> bool:
        """True if the rule defines an automated remediation."""
        return type(self).fix is not BaseRule.fix

    @abstractmethod
    def check(self) -> Status:
        """Inspect system state and return the rule's status.

        Must not mutate the system. May raise ProbeUnavailable when a
        required file or tool is missing.
        """

    def fix(self) -> FixOutcome:
        """Mutate system state so that the rule passes.

        Rules without an automated remediation keep this default.
        """
        raise NotImplementedError(f"Rule '{self.id}' has no automated fix")

    def evaluate(self) -> Status:
        """Run ``check()`` and collapse any failure to UNKNOWN.

        This is the single place where probe errors and unexpected
        exceptions raised by a check become a status.

        Returns:
            Status observed by the check, or Status.UNKNOWN
        """
        try:
            status = self.check()
        except ProbeUnavailable:
            return Status.UNKNOWN
        except Exception:
            return Status.UNKNOWN

        if not isinstance(status, Status):
            return Status.UNKNOWN
        return status

    def get_metadata(self) -> dict[str, Any]:
        """Get rule metadata as a dictionary."""
        return {
            "id": self.id,
            "category": self.category,
            "title": self.title,
            "hint": self.hint,
            "fixable": self.has_fix,
        }

    # ─── probe helpers ─────────────────────────────────────────────────────

    def _path(self, key: str) -> str:
        """Get the first configured path for a logical path key."""
        paths = self.platform.get_paths(key)
        if not paths:
            raise ProbeUnavailable(f"no path configured for '{key}'")
        return paths[0]

    def _paths(self, key: str) -> list[str]:
        """Get all configured paths for a logical path key."""
        return self.platform.get_paths(key)

    def _require_file(self, path: str) -> str:
        """Read a file or raise ProbeUnavailable if it cannot be read."""
        content = self.probe.read_text_file(path)
        if content is None:
            raise ProbeUnavailable(f"cannot read {path}")
        return content

    def _require_mode(self, path: str) -> int:
        """Get permission bits of a path or raise ProbeUnavailable."""
        mode = self.probe.file_mode(path)
        if mode is None:
            raise ProbeUnavailable(f"cannot stat {path}")
        return mode

    def _command_ok(self, argv: list[str]) -> bool:
        """Run a command and report whether it exited with status zero."""
        result = self.probe.run_command(argv)
        return bool(result and result.ok)

    def _command_output(self, argv: list[str]) -> Optional[str]:
        """Run a command and return its trimmed stdout, None if it failed."""
        result = self.probe.run_command(argv)
        if result is None or not result.ok:
            return None
        return result.stdout.strip()

    def _service_active(self, service: str) -> bool:
        """Check whether a service (or one of its aliases) is active."""
        return any(
            self._command_ok(["systemctl", "is-active", "--quiet", name])
            for name in self.platform.resolve_service_names(service)
        )

    def _service_enabled(self, service: str) -> bool:
        """Check whether a service (or one of its aliases) is enabled."""
        return any(
            self._command_ok(["systemctl", "is-enabled", "--quiet", name])
            for name in self.platform.resolve_service_names(service)
        )

    def _systemctl(self, action: list[str], service: str) -> FixOutcome:
        """Run a privileged systemctl action against a service or its aliases.

        Args:
            action: systemctl arguments before the unit name, e.g. ["enable", "--now"]
            service: Logical service name

        Returns:
            Outcome of the first alias that succeeded, else of the last attempt
        """
        outcome = FixOutcome.failed(f"no unit name for service '{service}'")
        for name in self.platform.resolve_service_names(service):
            outcome = self.executor.run_privileged(["systemctl", *action, name])
            if outcome.ok:
                return FixOutcome.applied(f"systemctl {' '.join(action)} {name}")
        return outcome

    def _package_installed(self, package: str) -> bool:
        """Check package installation via the profile's query commands.

        Raises:
            ProbeUnavailable: If no query command could be run at all
        """
        commands = self.platform.package_query_commands(package)
        ran_any = False
        for argv in commands:
            result = self.probe.run_command(argv)
            if result is None:
                continue
            ran_any = True
            if result.ok:
                return True
        if not ran_any:
            raise ProbeUnavailable(f"no package manager available to query '{package}'")
        return False

    def _sysctl_value(self, param: str) -> Optional[str]:
        """Read a kernel parameter from /proc/sys, falling back to sysctl."""
        proc_path = "/proc/sys/" + param.replace(".", "/")
        content = self.probe.read_text_file(proc_path)
        if content is not None and content.strip():
            return content.strip()
        return self._command_output(["sysctl", "-n", param]) or None
