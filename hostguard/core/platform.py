"""
Platform abstraction and profile loading for multi-distro support.

This module centralizes OS-level assumptions (configuration file paths,
service names, package query commands and the privilege-elevation command)
behind a config-driven platform profile model.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
import threading
from typing import Any, Optional


_PLATFORMS_DIR = Path(__file__).resolve().parent.parent / "platforms"

# Distributions without ID_LIKE, or whose ID_LIKE does not name a profile.
_PROFILE_ALIASES = {
    "fedora": "rhel",
    "centos": "rhel",
    "rocky": "rhel",
    "almalinux": "rhel",
    "ol": "rhel",
    "redos": "rhel",
    "ubuntu": "debian",
    "linuxmint": "debian",
    "astra": "debian",
}


@dataclass(frozen=True)
class DistroInfo:
    """Normalized distro information from /etc/os-release."""

    os_id: str
    version_id: str
    id_like: list[str]
    pretty_name: str


@dataclass
class PlatformContext:
    """Runtime platform context with profile-backed helper methods."""

    profile_id: str
    distro: DistroInfo
    profile: dict[str, Any]

    @property
    def package_manager_name(self) -> str:
        """Get package manager name from profile."""
        return str(self.profile.get("package_manager", {}).get("name", "unknown"))

    @property
    def service_manager_name(self) -> str:
        """Get service manager name from profile."""
        return str(self.profile.get("service_manager", {}).get("name", "unknown"))

    @property
    def elevation_command(self) -> list[str]:
        """Get the non-interactive privilege-elevation prefix."""
        command = self.profile.get("privilege", {}).get("command", ["sudo", "-n"])
        return [str(part) for part in command]

    @property
    def write_helper(self) -> list[str]:
        """Get the command that writes its stdin to a file path."""
        command = self.profile.get("privilege", {}).get("write_helper", ["tee"])
        return [str(part) for part in command]

    def resolve_service_names(self, service: str) -> list[str]:
        """Resolve service aliases for the current distro profile.

        Args:
            service: Logical service name

        Returns:
            Ordered list of service names to try
        """
        aliases = self.profile.get("service_manager", {}).get("service_aliases", {})
        values = aliases.get(service, [])

        resolved = [service]
        for alias in values:
            alias_str = str(alias)
            if alias_str not in resolved:
                resolved.append(alias_str)
        return resolved

    def package_query_commands(self, package: str) -> list[list[str]]:
        """Render the profile's "is this package installed" commands.

        Args:
            package: Package name

        Returns:
            Commands to try in order; exit status zero means installed
        """
        specs = self.profile.get("package_manager", {}).get("query_installed", [])
        commands: list[list[str]] = []
        for spec in specs:
            if isinstance(spec, list) and spec:
                commands.append(_render_command([str(part) for part in spec], package=package))
        return commands

    def get_paths(self, key: str) -> list[str]:
        """Get path candidates for a logical path key.

        Args:
            key: Logical path key from profile

        Returns:
            Ordered list of candidate paths
        """
        paths = self.profile.get("paths", {})
        values = paths.get(key, [])
        if isinstance(values, str):
            return [values]
        return [str(v) for v in values]


def parse_os_release(file_path: str = "/etc/os-release") -> dict[str, str]:
    """Parse /etc/os-release into a dictionary.

    Args:
        file_path: Path to os-release file

    Returns:
        Parsed key/value map (upper-case keys as in file)
    """
    data: dict[str, str] = {}
    path = Path(file_path)
    if not path.exists():
        return data

    try:
        with open(path, "r", encoding="utf-8") as f:
            for raw_line in f:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, value = line.split("=", 1)
                value = value.strip().strip('"').strip("'")
                data[key.strip()] = value
    except (OSError, UnicodeDecodeError):
        return {}

    return data


def load_platform_context(
    profile_id: Optional[str] = None,
    os_release_path: str = "/etc/os-release",
) -> PlatformContext:
    """Load platform context from profile files and os-release data.

    Args:
        profile_id: Explicit profile id (e.g., "rhel")
        os_release_path: Path to os-release file

    Returns:
        PlatformContext instance
    """
    os_release = parse_os_release(os_release_path)
    detected_profile = profile_id or _select_profile_id(os_release)

    base_profile = _load_profile_file("base")
    selected_profile = _load_profile_file(detected_profile) if detected_profile != "base" else {}

    if not selected_profile:
        detected_profile = "base"

    merged_profile = _deep_merge(base_profile, selected_profile)

    distro = DistroInfo(
        os_id=str(os_release.get("ID", "unknown")).lower(),
        version_id=str(os_release.get("VERSION_ID", "unknown")),
        id_like=[
            token.lower()
            for token in str(os_release.get("ID_LIKE", "")).split()
            if token.strip()
        ],
        pretty_name=str(os_release.get("PRETTY_NAME", "unknown")),
    )

    return PlatformContext(
        profile_id=detected_profile,
        distro=distro,
        profile=merged_profile,
    )


_DEFAULT_CONTEXT: Optional[PlatformContext] = None
_LOCK = threading.Lock()


def list_available_profiles(include_base: bool = False) -> list[str]:
    """List available platform profile IDs from profile directory.

    Args:
        include_base: Whether to include the internal base profile

    Returns:
        Sorted list of profile identifiers
    """
    if not _PLATFORMS_DIR.exists():
        return []

    profiles: list[str] = []
    for path in _PLATFORMS_DIR.glob("*.json"):
        profile_id = path.stem
        if profile_id == "base" and not include_base:
            continue
        profiles.append(profile_id)

    return sorted(profiles)


def profile_exists(profile_id: str) -> bool:
    """Check whether a platform profile file exists."""
    if not profile_id:
        return False
    return (_PLATFORMS_DIR / f"{profile_id}.json").exists()


def get_platform_context(
    profile_id: Optional[str] = None,
    refresh: bool = False,
) -> PlatformContext:
    """Get cached platform context.

    Args:
        profile_id: Optional explicit profile id. If provided, bypasses cache.
        refresh: Reload cached default context

    Returns:
        PlatformContext
    """
    global _DEFAULT_CONTEXT

    if profile_id:
        return load_platform_context(profile_id=profile_id)

    with _LOCK:
        if refresh or _DEFAULT_CONTEXT is None:
            _DEFAULT_CONTEXT = load_platform_context()
        return _DEFAULT_CONTEXT


def _select_profile_id(os_release: dict[str, str]) -> str:
    """Select best profile id based on os-release data."""
    os_id = str(os_release.get("ID", "")).strip().lower()
    id_like = [
        token.lower() for token in str(os_release.get("ID_LIKE", "")).split() if token.strip()
    ]

    candidates: list[str] = []
    for token in [os_id, *id_like]:
        if not token:
            continue
        candidates.append(token)
        if token in _PROFILE_ALIASES:
            candidates.append(_PROFILE_ALIASES[token])

    for candidate in candidates:
        if candidate != "base" and (_PLATFORMS_DIR / f"{candidate}.json").exists():
            return candidate

    return "base"


def _load_profile_file(profile_id: str) -> dict[str, Any]:
    """Load a platform profile JSON file by id."""
    path = _PLATFORMS_DIR / f"{profile_id}.json"
    if not path.exists():
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return {}

    return {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two dictionaries."""
    merged: dict[str, Any] = dict(base)

    for key, value in override.items():
        if (
            key in merged
            and isinstance(merged[key], dict)
            and isinstance(value, dict)
        ):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value

    return merged


def _render_command(command: list[str], **kwargs: Any) -> list[str]:
    """Render command template tokens with format placeholders."""
    rendered: list[str] = []
    for part in command:
        try:
            rendered.append(part.format(**kwargs))
        except (KeyError, ValueError):
            rendered.append(part)
    return rendered
