"""
HostGuard Rules: Kernel module blocking (removable media, rare filesystems)
"""

import re

from hostguard.core.rule import BaseRule, FixOutcome, Status


class ModuleBlockingRule(BaseRule):
    """Shared modprobe.d inspection helpers."""

    def _module_blocked(self, module_pattern: str) -> bool:
        """Check whether any modprobe.d file blacklists or stubs out a module.

        Args:
            module_pattern: Regular expression for the module name
        """
        modprobe_dir = self._path("modprobe_dir")
        directive = re.compile(
            rf"^\s*(?:blacklist|install)\s+{module_pattern}\b",
            re.IGNORECASE | re.MULTILINE,
        )
        for name in self.probe.list_dir(modprobe_dir) or []:
            content = self.probe.read_text_file(f"{modprobe_dir}/{name}")
            if content and directive.search(content):
                return True
        return False

    def _loaded_modules(self) -> set[str]:
        """Get names of currently loaded kernel modules."""
        listing = self._command_output(["lsmod"])
        if listing is None:
            listing = self.probe.read_text_file("/proc/modules") or ""
        return {line.split()[0] for line in listing.splitlines() if line.strip()}


class UsbStorageBlockedRule(ModuleBlockingRule):
    """USB mass storage driver cannot be loaded."""

    id = "usb-blocked"
    category = "USB"
    title = "usb-storage заблокирован в modprobe"
    hint = "Добавьте в /etc/modprobe.d/usb-block.conf: blacklist usb-storage"

    def check(self) -> Status:
        return Status.PASS if self._module_blocked(r"usb[-_]storage") else Status.FAIL

    def fix(self) -> FixOutcome:
        return self.executor.write_privileged(
            self._path("usb_block_conf"),
            "blacklist usb-storage\ninstall usb-storage /bin/false\n",
        )


class RareFilesystemsBlockedRule(ModuleBlockingRule):
    """Rarely needed filesystem drivers are blocked."""

    id = "fs-cramfs"
    category = "Файловые системы"
    title = "cramfs, squashfs, udf заблокированы"
    hint = "Добавьте blacklist в /etc/modprobe.d/ и install <mod> /bin/false"

    MODULES = ["cramfs", "squashfs", "udf"]

    def check(self) -> Status:
        loaded = self._loaded_modules()
        if any(module in loaded for module in self.MODULES):
            return Status.FAIL
        if all(self._module_blocked(module) for module in self.MODULES):
            return Status.PASS
        return Status.WARN

    def fix(self) -> FixOutcome:
        lines = []
        for module in self.MODULES:
            lines.append(f"blacklist {module}")
            lines.append(f"install {module} /bin/false")
        return self.executor.write_privileged(self._path("fs_block_conf"), "\n".join(lines) + "\n")
