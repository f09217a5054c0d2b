#!/usr/bin/env python3
"""
Symlink management for dotfiles via GNU Stow.

Linking works from a static, known-good package list and is all or nothing:
a single stow invocation checks every package for conflicts before it
changes anything. Unlinking works from whatever the repository actually
contains, so each package is handled on its own and failures are collected.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .errors import PreconditionError
from .runner import ProcessRunner
from .status import Status
from ..utils.logger import get_logger


@dataclass
class LinkResult:
    """Outcome of stowing or unstowing one package."""
    package: str
    success: bool
    reason: str = ""


@dataclass
class BatchResult:
    """Per-package outcomes of an unlink run."""
    processed: List[str] = field(default_factory=list)
    succeeded: List[str] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)

    def record(self, result: LinkResult):
        self.processed.append(result.package)
        if result.success:
            self.succeeded.append(result.package)
        else:
            self.failures.append((result.package, result.reason))

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    def summary(self) -> str:
        if not self.processed:
            return "No packages found to unstow."

        message = f"Unstowed {self.success_count} of {len(self.processed)} packages."
        if self.failures:
            details = "; ".join(f"{package}: {reason}" for package, reason in self.failures)
            message += f" Failed: {details}"
        return message


class StowManager:
    """Applies and removes stow packages between a source tree and home."""

    def __init__(self, runner: ProcessRunner, home: Path, repo_path: Path,
                 link_roots: Sequence[Path], packages: Sequence[str]):
        self.logger = get_logger(f"{__name__}.StowManager")
        self.runner = runner
        self.home = Path(home)
        self.repo_path = Path(repo_path)
        self.link_roots = [Path(root) for root in link_roots]
        self.packages = list(packages)

    def stow_available(self) -> bool:
        return self.runner.succeeds(["stow", "--version"])

    def resolve_source_root(self) -> Path:
        """
        First existing candidate directory.

        Raises:
            PreconditionError: If no candidate exists
        """
        for candidate in self.link_roots:
            if candidate.is_dir():
                self.logger.debug(f"Using dotfiles source root {candidate}")
                return candidate

        searched = ", ".join(str(root) for root in self.link_roots)
        raise PreconditionError(f"No dotfiles directory found (looked in {searched})")

    def link(self, source_root: Optional[Path] = None,
             packages: Optional[Sequence[str]] = None) -> Status:
        """Stow every configured package from the resolved source root.

        All packages go to a single stow invocation rather than one per
        package: stow checks the whole set for conflicts before touching
        home, so either every package is linked or none is.
        """
        if not self.stow_available():
            self.logger.error("stow is not installed")
            return Status.failed("stow is not installed. Install packages first.")

        try:
            root = Path(source_root) if source_root else self.resolve_source_root()
        except PreconditionError as e:
            self.logger.error(str(e))
            return Status.failed(str(e))

        packages = list(packages) if packages is not None else self.packages
        if not packages:
            return Status.failed("No packages configured to stow.")

        command = ["stow", "-d", str(root), "-t", str(self.home)] + packages
        self.logger.info(f"Stowing {len(packages)} packages from {root}")
        result = self.runner.run(command)

        if not result.ok:
            self.logger.error(f"Stow failed: {result.reason}")
            return Status.failed(f"Failed to stow dotfiles: {result.reason}")
        return Status.ok(f"Dotfiles stowed successfully from {root}!")

    def discover_packages(self) -> List[str]:
        """Immediate, non-hidden subdirectories of the repository."""
        return sorted(
            entry.name for entry in self.repo_path.iterdir()
            if entry.is_dir() and not entry.name.startswith('.')
        )

    def unlink_package(self, package: str) -> LinkResult:
        result = self.runner.run(
            ["stow", "-D", "-d", str(self.repo_path), "-t", str(self.home), package]
        )
        if result.ok:
            self.logger.debug(f"Unstowed {package}")
            return LinkResult(package, True)

        self.logger.warning(f"Failed to unstow {package}: {result.reason}")
        return LinkResult(package, False, result.reason)

    def unlink(self) -> BatchResult:
        """
        Unstow every package found in the repository.

        Raises:
            PreconditionError: If the repository directory does not exist
        """
        if not self.repo_path.is_dir():
            raise PreconditionError(f"Dotfiles repository not found at {self.repo_path}")

        batch = BatchResult()
        for package in self.discover_packages():
            batch.record(self.unlink_package(package))

        self.logger.info(batch.summary())
        return batch

    def unlink_status(self) -> Status:
        """Unlink and fold the batch into a single status."""
        try:
            batch = self.unlink()
        except PreconditionError as e:
            self.logger.error(str(e))
            return Status.failed(str(e))

        if not batch.processed:
            return Status.failed(batch.summary())
        return Status(batch.summary(), batch.failure_count == 0)
