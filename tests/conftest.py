"""
Shared fixtures for the dotsync test suite.
"""

import sys
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import pytest

# Add src directory to path so tests can import dotsync modules
src_dir = Path(__file__).parent.parent / 'src'
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from dotsync.core.config import Settings  # noqa: E402
from dotsync.core.runner import CommandResult  # noqa: E402


class FakeRunner:
    """Stands in for ProcessRunner and records every command it is given.

    `failures` maps a predicate over the argument list to the stderr text
    the command should fail with; anything not matched succeeds.
    """

    def __init__(self, failures: Optional[List[tuple]] = None, missing: Sequence[str] = ()):
        self.calls: List[List[str]] = []
        self.failures = failures or []
        self.missing = set(missing)

    def fail_when(self, predicate: Callable[[List[str]], bool], stderr: str):
        self.failures.append((predicate, stderr))

    def run(self, args, cwd=None) -> CommandResult:
        args = [str(arg) for arg in args]
        self.calls.append(args)

        if args[0] in self.missing:
            return CommandResult(args=args, error=f"Command not found: {args[0]}")
        for predicate, stderr in self.failures:
            if predicate(args):
                return CommandResult(args=args, returncode=1, stderr=stderr)
        return CommandResult(args=args, returncode=0)

    def succeeds(self, args) -> bool:
        return self.run(args).ok

    def commands_starting_with(self, *prefix) -> List[List[str]]:
        return [call for call in self.calls if call[:len(prefix)] == list(prefix)]


@pytest.fixture
def home(tmp_path, monkeypatch):
    """An isolated home directory exported as HOME."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture
def settings(home):
    return Settings(home=home)


@pytest.fixture
def fake_runner():
    return FakeRunner()
