#!/usr/bin/env python3
"""
Tests for the command-line interface.
"""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from dotsync.cli import cli
from dotsync.core.controller import Action
from dotsync.core.errors import BackendNotFound
from dotsync.core.status import Status


@pytest.fixture
def runner():
    return CliRunner()


def flat(output):
    """Collapse rich line wrapping."""
    return " ".join(output.split())


def invoke(runner, home, *args):
    log_file = home / "test.log"
    return runner.invoke(cli, ["--log-file", str(log_file), *args])


def json_document(output):
    """The JSON object printed by `info --format json`."""
    return json.loads(output[output.index("{"):output.rindex("}") + 1])


class TestCommands:
    """Test single-action commands."""

    @pytest.mark.parametrize("command,action", [
        ("update", Action.UPDATE_PACKAGES),
        ("upgrade", Action.UPGRADE_PACKAGES),
        ("install", Action.INSTALL_PACKAGES),
        ("clone", Action.CLONE_REPO),
        ("sync", Action.SYNC_DOTFILES),
        ("link", Action.LINK_DOTFILES),
        ("unlink", Action.UNLINK_DOTFILES),
    ])
    def test_command_runs_action(self, runner, home, command, action):
        """Test that each command runs its controller action once."""
        with patch("dotsync.cli.Controller.run", return_value=Status.ok("all good")) as run:
            result = invoke(runner, home, command)

        assert result.exit_code == 0
        assert "all good" in result.output
        run.assert_called_once_with(action)

    def test_failed_status_exits_non_zero(self, runner, home):
        """Test that a failed status gives exit code 1."""
        with patch("dotsync.cli.Controller.run",
                   return_value=Status.failed("Conflicts detected, resolve manually.")):
            result = invoke(runner, home, "sync")

        assert result.exit_code == 1
        assert "Conflicts detected" in flat(result.output)

    def test_sync_without_clone(self, runner, home):
        """Test syncing before the repository is cloned."""
        result = invoke(runner, home, "sync")

        assert result.exit_code == 1
        assert "Clone it first" in flat(result.output)

    def test_unlink_without_repository(self, runner, home):
        """Test unlinking before the repository is cloned."""
        result = invoke(runner, home, "unlink")

        assert result.exit_code == 1
        assert "not found" in flat(result.output)

    def test_clone_onto_file(self, runner, home):
        """Test that cloning onto a plain file fails cleanly."""
        (home / ".dotfiles").write_text("not a repository\n")

        result = invoke(runner, home, "clone")

        assert result.exit_code == 1
        assert "not a directory" in flat(result.output)
        assert (home / ".dotfiles").read_text() == "not a repository\n"

    def test_bad_config_file(self, runner, home, tmp_path):
        """Test that an invalid config file aborts with a message."""
        config = tmp_path / "bad.yaml"
        config.write_text("- not\n- a mapping\n")

        result = runner.invoke(cli, ["--config", str(config), "info"])

        assert result.exit_code == 1
        assert "mapping" in result.output

    def test_log_file_written(self, runner, home):
        """Test that --log-file creates the log."""
        with patch("dotsync.cli.Controller.run", return_value=Status.ok("done")):
            invoke(runner, home, "-v", "clone")
        assert (home / "test.log").exists()


class TestInfo:
    """Test the info command."""

    def test_info_shows_settings(self, runner, home):
        """Test the settings table."""
        with patch("dotsync.cli.Controller.backend") as backend:
            backend.return_value.value = "pacman"
            result = invoke(runner, home, "info")

        assert result.exit_code == 0
        assert "pacman" in result.output
        assert "Stow packages" in result.output

    def test_info_shows_system_details(self, runner, home):
        """Test that host details appear in the table."""
        with patch("dotsync.cli.Controller.backend") as backend:
            backend.return_value.value = "apt"
            result = invoke(runner, home, "info")

        assert result.exit_code == 0
        assert "Platform" in result.output
        assert "Machine" in result.output
        assert "Python" in result.output

    def test_info_without_backend(self, runner, home):
        """Test that a missing package manager is reported, not raised."""
        with patch("dotsync.cli.Controller.backend", side_effect=BackendNotFound()):
            result = invoke(runner, home, "info")

        assert result.exit_code == 0
        assert "No supported package manager found!" in flat(result.output)

    def test_info_json(self, runner, home):
        """Test JSON output of settings and host details."""
        with patch("dotsync.cli.Controller.backend") as backend:
            backend.return_value.value = "yay"
            result = invoke(runner, home, "info", "--format", "json")

        assert result.exit_code == 0
        data = json_document(result.output)
        assert data["package_manager"] == "yay"
        assert data["repository_present"] is False
        assert data["settings"]["repo_path"] == str(home / ".dotfiles")
        assert data["settings"]["stow_packages"][0] == "bash"
        assert data["system"]["home_directory"] == str(home)

    def test_info_json_without_backend(self, runner, home):
        """Test that JSON output uses null for a missing package manager."""
        with patch("dotsync.cli.Controller.backend", side_effect=BackendNotFound()):
            result = invoke(runner, home, "info", "--format", "json")

        assert result.exit_code == 0
        assert json_document(result.output)["package_manager"] is None


class TestMenu:
    """Test the interactive menu loop."""

    def test_quit_immediately(self, runner, home):
        """Test that choosing Quit ends the loop."""
        result = runner.invoke(
            cli, ["--log-file", str(home / "test.log"), "menu"], input="9\n"
        )

        assert result.exit_code == 0
        assert "Update Packages" in result.output

    def test_advanced_menu_and_back(self, runner, home):
        """Test entering the advanced menu and returning."""
        result = runner.invoke(
            cli, ["--log-file", str(home / "test.log"), "menu"], input="8\n1\n9\n"
        )

        assert result.exit_code == 0
        assert "Back to Main Menu" in result.output
        assert "Returned to main menu" in flat(result.output)
