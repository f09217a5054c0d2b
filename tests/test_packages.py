#!/usr/bin/env python3
"""
Tests for package manager detection and dispatch.
"""

import pytest

from dotsync.core.errors import BackendNotFound
from dotsync.core.packages import Backend, PackageAction, PackageManager

from conftest import FakeRunner

BASE = ["bash", "vim", "starship", "stow"]
AUX = ["bat", "fzf", "starship"]
BOOTSTRAP_URL = "https://example.invalid/install.sh"

VERSION_TOOLS = {
    Backend.APT: "dpkg",
    Backend.YAY: "yay",
    Backend.PACMAN: "pacman",
}


def only_tools(*available):
    """Runner on which only the given backends' tools answer --version."""
    names = {VERSION_TOOLS[backend] for backend in available}
    runner = FakeRunner()
    runner.fail_when(
        lambda args: args[1:] == ["--version"] and args[0] in VERSION_TOOLS.values() and args[0] not in names,
        "not installed"
    )
    return runner


def make_manager(runner, bootstrap_url=BOOTSTRAP_URL):
    return PackageManager(runner, BASE, AUX, bootstrap_url)


class TestDetection:
    """Test backend detection order."""

    @pytest.mark.parametrize("backend", [Backend.APT, Backend.YAY, Backend.PACMAN])
    def test_single_backend_detected(self, backend):
        """Test that each backend is detected on its own."""
        manager = make_manager(only_tools(backend))
        assert manager.detect() == backend

    def test_apt_wins_over_arch_tools(self):
        """Test that apt takes priority."""
        manager = make_manager(only_tools(Backend.APT, Backend.YAY, Backend.PACMAN))
        assert manager.detect() == Backend.APT

    def test_yay_wins_over_pacman(self):
        """Test that yay takes priority over pacman."""
        manager = make_manager(only_tools(Backend.YAY, Backend.PACMAN))
        assert manager.detect() == Backend.YAY

    def test_detection_order(self):
        """Test the order tools are checked in."""
        runner = only_tools(Backend.PACMAN)
        make_manager(runner).detect()
        assert [call[0] for call in runner.calls] == ["dpkg", "yay", "pacman"]

    def test_stops_at_first_match(self):
        """Test that detection stops at the first match."""
        runner = only_tools(Backend.APT, Backend.PACMAN)
        make_manager(runner).detect()
        assert runner.calls == [["dpkg", "--version"]]

    def test_no_backend_raises(self):
        """Test that no supported tool raises BackendNotFound."""
        manager = make_manager(only_tools())
        with pytest.raises(BackendNotFound, match="No supported package manager"):
            manager.detect()

    def test_spawn_errors_count_as_missing(self):
        """Test that missing executables count as absent tools."""
        runner = FakeRunner(missing=["dpkg", "yay"])
        assert make_manager(runner).detect() == Backend.PACMAN


class TestCommands:
    """Test command construction per backend."""

    @pytest.mark.parametrize("backend,action,expected", [
        (Backend.APT, PackageAction.UPDATE, ["sudo", "apt", "update", "-y"]),
        (Backend.APT, PackageAction.UPGRADE, ["sudo", "apt", "upgrade", "-y"]),
        (Backend.YAY, PackageAction.UPDATE, ["yay", "-Sy"]),
        (Backend.YAY, PackageAction.UPGRADE, ["yay", "-Syu", "--noconfirm"]),
        (Backend.PACMAN, PackageAction.UPDATE, ["sudo", "pacman", "-Sy"]),
        (Backend.PACMAN, PackageAction.UPGRADE, ["sudo", "pacman", "-Syu", "--noconfirm"]),
    ])
    def test_update_and_upgrade(self, backend, action, expected):
        """Test update and upgrade command lines."""
        assert make_manager(FakeRunner()).build_command(action, backend) == expected

    def test_apt_install_uses_base_set_only(self):
        """Test that apt installs only the base set."""
        command = make_manager(FakeRunner()).build_command(PackageAction.INSTALL, Backend.APT)
        assert command == ["sudo", "apt", "install", "-y"] + BASE

    def test_arch_install_adds_aux_set_without_duplicates(self):
        """Test that Arch installs add the auxiliary set once."""
        command = make_manager(FakeRunner()).build_command(PackageAction.INSTALL, Backend.PACMAN)
        assert command[:5] == ["sudo", "pacman", "-S", "--noconfirm", "--needed"]
        assert command[5:] == ["bash", "vim", "starship", "stow", "bat", "fzf"]

    def test_yay_runs_without_sudo(self):
        """Test that yay commands are not run through sudo."""
        command = make_manager(FakeRunner()).build_command(PackageAction.INSTALL, Backend.YAY)
        assert command[0] == "yay"


class TestDispatch:
    """Test dispatch outcomes."""

    def test_update_success(self):
        """Test a successful update."""
        runner = FakeRunner()
        status = make_manager(runner).dispatch(PackageAction.UPDATE, Backend.PACMAN)

        assert status.success
        assert status.text == "Packages updated successfully with pacman!"
        assert runner.calls == [["sudo", "pacman", "-Sy"]]

    def test_failure_carries_command_error(self):
        """Test that a failed command's error reaches the status."""
        runner = FakeRunner()
        runner.fail_when(lambda args: args[:2] == ["sudo", "apt"], "E: Could not get lock")
        status = make_manager(runner).dispatch(PackageAction.UPGRADE, Backend.APT)

        assert not status.success
        assert "E: Could not get lock" in status.text

    def test_none_backend(self):
        """Test dispatching without a backend."""
        runner = FakeRunner()
        status = make_manager(runner).dispatch(PackageAction.INSTALL, Backend.NONE)

        assert not status.success
        assert status.text == "No supported package manager found!"
        assert runner.calls == []

    def test_apt_install_runs_bootstrap_then_base_set(self):
        """Test that the bootstrap runs before the apt install."""
        runner = FakeRunner()
        status = make_manager(runner).dispatch(PackageAction.INSTALL, Backend.APT)

        assert status.success
        assert status.text == "Packages installed with apt!"
        assert runner.calls[0][:3] == ["curl", "-fsSL", BOOTSTRAP_URL]
        assert runner.calls[1][0] == "sh"
        assert runner.calls[-1] == ["sudo", "apt", "install", "-y"] + BASE

    def test_bootstrap_failure_does_not_block_base_install(self):
        """Test that a failed bootstrap is only a note."""
        runner = FakeRunner()
        runner.fail_when(lambda args: args[0] == "curl", "Could not resolve host")
        status = make_manager(runner).dispatch(PackageAction.INSTALL, Backend.APT)

        assert status.success
        assert status.text.startswith("Packages installed with apt!")
        assert "bootstrap failed: Could not resolve host" in status.text
        assert runner.commands_starting_with("sudo", "apt", "install")
        # script is never run when the download fails
        assert not runner.commands_starting_with("sh")

    def test_base_failure_reported_alongside_bootstrap_failure(self):
        """Test that both failures are reported."""
        runner = FakeRunner()
        runner.fail_when(lambda args: args[0] == "sh", "installer crashed")
        runner.fail_when(lambda args: args[:3] == ["sudo", "apt", "install"], "E: Unable to locate package")
        status = make_manager(runner).dispatch(PackageAction.INSTALL, Backend.APT)

        assert not status.success
        assert "E: Unable to locate package" in status.text
        assert "installer crashed" in status.text

    def test_arch_install_skips_bootstrap(self):
        """Test that Arch installs never bootstrap."""
        runner = FakeRunner()
        make_manager(runner).dispatch(PackageAction.INSTALL, Backend.YAY)

        assert not runner.commands_starting_with("curl")
        assert len(runner.calls) == 1

    def test_no_bootstrap_url_skips_bootstrap(self):
        """Test that an empty bootstrap URL disables it."""
        runner = FakeRunner()
        make_manager(runner, bootstrap_url=None).dispatch(PackageAction.INSTALL, Backend.APT)
        assert runner.calls == [["sudo", "apt", "install", "-y"] + BASE]
