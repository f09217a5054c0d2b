#!/usr/bin/env python3
"""
External process execution for dotsync.

Every package-manager, stow and bootstrap invocation goes through
ProcessRunner. A nonzero exit status or a spawn error is the only failure
signal; output is kept for logs and failure reasons, never parsed.
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..utils.logger import get_logger


@dataclass
class CommandResult:
    """Outcome of one external command."""
    args: List[str]
    returncode: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.returncode == 0

    @property
    def command(self) -> str:
        return " ".join(self.args)

    @property
    def reason(self) -> str:
        """Human-readable failure reason."""
        if self.error:
            return self.error
        detail = self.stderr.strip() or self.stdout.strip()
        if detail:
            return detail
        return f"'{self.command}' exited with status {self.returncode}"


@dataclass
class ProcessRunner:
    """Runs external commands synchronously.

    No timeout is applied unless one is configured; a hung command blocks
    the caller until it exits.
    """
    timeout: Optional[float] = None

    def __post_init__(self):
        self.logger = get_logger(f"{__name__}.ProcessRunner")

    def run(self, args: Sequence[str], cwd: Optional[Union[str, Path]] = None) -> CommandResult:
        """Run a command and capture its result."""
        args = [str(arg) for arg in args]
        result = CommandResult(args=args)
        self.logger.debug(f"Running: {result.command}")

        try:
            completed = subprocess.run(
                args,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            result.error = f"Command not found: {args[0]}"
        except subprocess.TimeoutExpired:
            result.error = f"'{result.command}' timed out after {self.timeout} seconds"
        except OSError as e:
            result.error = f"Failed to run '{result.command}': {e}"
        else:
            result.returncode = completed.returncode
            result.stdout = completed.stdout or ""
            result.stderr = completed.stderr or ""

        if result.ok:
            self.logger.debug(f"Succeeded: {result.command}")
        else:
            self.logger.debug(f"Failed: {result.command}: {result.reason}")
        return result

    def succeeds(self, args: Sequence[str]) -> bool:
        """True when the command runs and exits 0."""
        return self.run(args).ok
