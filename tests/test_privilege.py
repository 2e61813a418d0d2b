"""
Probe and privileged executor tests.

Validates command spawning through the real SystemProbe and the mapping of
elevated process results to fix outcomes.
"""

import sys
from pathlib import Path

# Add project root to import path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from hostguard.core.privilege import (
    ELEVATION_REQUIRED_MESSAGE,
    PrivilegedExecutor,
)
from hostguard.core.probe import CommandResult, SystemProbe

from doubles import FakeProbe, SUDO


class TestSystemProbe:
    """Tests for the real probe against temporary files."""

    def test_read_missing_file_returns_none(self, tmp_path: Path) -> None:
        """Missing files are reported as None, not raised."""
        probe = SystemProbe()
        assert probe.read_text_file(str(tmp_path / "missing.conf")) is None

    def test_read_and_mode(self, tmp_path: Path) -> None:
        """Reads content and permission bits of an existing file."""
        path = tmp_path / "sshd_config"
        path.write_text("PermitRootLogin no\n", encoding="utf-8")
        path.chmod(0o600)

        probe = SystemProbe()
        assert probe.read_text_file(str(path)) == "PermitRootLogin no\n"
        assert probe.file_mode(str(path)) == 0o600
        assert probe.path_exists(str(path))

    def test_list_dir_sorted(self, tmp_path: Path) -> None:
        """Directory listings come back sorted."""
        for name in ("b.conf", "a.conf"):
            (tmp_path / name).write_text("", encoding="utf-8")

        assert SystemProbe().list_dir(str(tmp_path)) == ["a.conf", "b.conf"]
        assert SystemProbe().list_dir(str(tmp_path / "nope")) is None

    def test_missing_binary_returns_none(self) -> None:
        """A command that cannot be spawned yields None."""
        probe = SystemProbe()
        assert probe.run_command(["hostguard-no-such-binary-xyz"]) is None
        assert probe.run_command([]) is None

    def test_run_command_captures_output_and_input(self) -> None:
        """stdin is fed to the child and stdout captured."""
        script = "import sys; print(sys.stdin.read().upper())"
        result = SystemProbe().run_command([sys.executable, "-c", script], input="abc")

        assert result is not None
        assert result.ok
        assert result.stdout.strip() == "ABC"


class TestPrivilegedExecutor:
    """Tests for privileged command execution."""

    def test_run_privileged_prefixes_sudo(self) -> None:
        """Commands are prefixed with the non-interactive elevation command."""
        probe = FakeProbe(commands={("systemctl", "restart", "sshd"): (0, "")})
        executor = PrivilegedExecutor(probe, elevation_command=SUDO)

        outcome = executor.run_privileged(["systemctl", "restart", "sshd"])

        assert outcome.ok
        assert probe.calls == [["sudo", "-n", "systemctl", "restart", "sshd"]]

    def test_password_required_maps_to_elevation_message(self) -> None:
        """sudo refusing without a password asks to re-run as administrator."""
        probe = FakeProbe(sudo_requires_password=True)
        executor = PrivilegedExecutor(probe, elevation_command=SUDO)

        outcome = executor.run_privileged(["systemctl", "enable", "--now", "firewalld"])

        assert not outcome.ok
        assert outcome.message == ELEVATION_REQUIRED_MESSAGE
        assert "elevated privilege" in outcome.message

    def test_failed_command_reports_stderr(self) -> None:
        """Other failures carry the command's diagnostics."""
        probe = FakeProbe(commands={
            ("systemctl", "restart", "sshd"): (5, "", "Unit sshd.service not found.\n"),
        })
        executor = PrivilegedExecutor(probe, elevation_command=SUDO)

        outcome = executor.run_privileged(["systemctl", "restart", "sshd"])

        assert not outcome.ok
        assert outcome.message == "Unit sshd.service not found."

    def test_missing_elevation_tool(self) -> None:
        """An elevation tool that cannot be spawned is a failed outcome."""
        probe = FakeProbe()
        executor = PrivilegedExecutor(probe, elevation_command=SUDO)

        outcome = executor.run_privileged(["true"])

        assert not outcome.ok
        assert "command not found" in outcome.message

    def test_empty_elevation_runs_directly(self) -> None:
        """Running as root uses no prefix."""
        probe = FakeProbe(commands={("setenforce", "1"): (0, "")})
        executor = PrivilegedExecutor(probe, elevation_command=())

        assert executor.run_privileged(["setenforce", "1"]).ok
        assert probe.calls == [["setenforce", "1"]]

    def test_write_privileged_streams_content_to_tee(self) -> None:
        """File writes go through the write helper's stdin."""
        probe = FakeProbe()
        executor = PrivilegedExecutor(probe, elevation_command=SUDO)

        outcome = executor.write_privileged("/etc/profile.d/tmout.sh", "TMOUT=900\n")

        assert outcome.ok
        assert outcome.message == "written /etc/profile.d/tmout.sh"
        assert probe.calls == [["sudo", "-n", "tee", "/etc/profile.d/tmout.sh"]]
        assert probe.writes == [("/etc/profile.d/tmout.sh", "TMOUT=900\n")]

    def test_write_privileged_without_credentials(self) -> None:
        """A write refused by sudo leaves the file untouched."""
        probe = FakeProbe(sudo_requires_password=True)
        executor = PrivilegedExecutor(probe, elevation_command=SUDO)

        outcome = executor.write_privileged("/etc/sysctl.conf", "x = 1\n")

        assert not outcome.ok
        assert outcome.message == ELEVATION_REQUIRED_MESSAGE
        assert probe.writes == []

    def test_read_privileged_uses_cat(self) -> None:
        probe = FakeProbe(files={"/etc/ssh/sshd_config": "Port 22\n"}, binaries=["cat"],
                          unreadable=["/etc/ssh/sshd_config"])
        executor = PrivilegedExecutor(probe, elevation_command=SUDO)

        assert executor.read_privileged("/etc/ssh/sshd_config") == "Port 22\n"
        assert probe.calls == [["sudo", "-n", "cat", "/etc/ssh/sshd_config"]]

    def test_read_privileged_failure_returns_none(self) -> None:
        probe = FakeProbe(files={"/etc/shadow": "root:!:19000::::::\n"}, binaries=["cat"],
                          sudo_requires_password=True)
        executor = PrivilegedExecutor(probe, elevation_command=SUDO)

        assert executor.read_privileged("/etc/shadow") is None


class TestClassify:
    """Tests for result classification."""

    def test_success_uses_stdout(self) -> None:
        result = CommandResult(("sysctl",), "kernel.randomize_va_space = 2\n", "", 0)
        outcome = PrivilegedExecutor.classify(result)
        assert outcome.ok
        assert outcome.message == "kernel.randomize_va_space = 2"

    def test_success_without_output(self) -> None:
        outcome = PrivilegedExecutor.classify(CommandResult(("chmod",), "", "", 0))
        assert outcome.ok
        assert outcome.message == "applied"

    def test_failure_without_output_reports_exit_code(self) -> None:
        outcome = PrivilegedExecutor.classify(CommandResult(("false",), "", "", 3))
        assert not outcome.ok
        assert outcome.message == "exit 3"
