#!/usr/bin/env python3
"""
Git repository handler for dotsync.

This module clones the dotfiles repository and keeps it in sync with its
remote: fetch, merge the remote-tracking branch, stop on conflicts, and
commit the merge when git leaves one in progress.
"""

import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from git import Actor, Repo, GitCommandError, InvalidGitRepositoryError, NoSuchPathError
from git.refs.remote import RemoteReference

from .status import Status
from ..utils.logger import get_logger

# Files git keeps while a merge is in progress
MERGE_STATE_FILES = ('MERGE_HEAD', 'MERGE_MSG', 'MERGE_MODE', 'AUTO_MERGE')


class SyncState(Enum):
    """Terminal states of a clone or sync."""
    CLONED = "cloned"
    UP_TO_DATE = "up_to_date"
    FAST_FORWARDED = "fast_forwarded"
    MERGED_CLEAN = "merged_clean"
    MERGED_WITH_CONFLICTS = "merged_with_conflicts"
    FAILED = "failed"


@dataclass
class SyncOutcome:
    """Result of a synchronization attempt."""
    state: SyncState
    message: str
    reason: Optional[str] = None
    commit: Optional[str] = None

    @classmethod
    def failed(cls, message: str, reason: Optional[str] = None) -> 'SyncOutcome':
        text = f"{message}: {reason}" if reason else message
        return cls(SyncState.FAILED, text, reason=reason or message)

    @property
    def success(self) -> bool:
        return self.state not in (SyncState.FAILED, SyncState.MERGED_WITH_CONFLICTS)

    def to_status(self) -> Status:
        return Status(self.message, self.success)


def _git_error_text(error: Exception) -> str:
    """The library's error text, verbatim but trimmed."""
    if isinstance(error, GitCommandError):
        detail = error.stderr.strip() if error.stderr else ""
        return detail or str(error).strip()
    return str(error).strip()


class GitHandler:
    """Clones and synchronizes the single dotfiles repository."""

    def __init__(self, repo_path: Union[str, Path], remote_url: str):
        """
        Initialize Git handler.

        Args:
            repo_path: Fixed local path of the dotfiles repository
            remote_url: Remote repository URL
        """
        self.logger = get_logger(f"{__name__}.GitHandler")
        self.repo_path = Path(repo_path)
        self.remote_url = remote_url

    @property
    def exists(self) -> bool:
        return self.repo_path.exists()

    def clone(self) -> SyncOutcome:
        """Clone the remote into the local path."""
        conflict = self._destination_conflict()
        if conflict:
            self.logger.error(f"Cannot clone into {self.repo_path}: {conflict}")
            return SyncOutcome.failed("Clone failed", conflict)

        self.logger.info(f"Cloning {self.remote_url} into {self.repo_path}")
        try:
            repo = Repo.clone_from(self.remote_url, self.repo_path)
        except GitCommandError as e:
            reason = _git_error_text(e)
            self.logger.error(f"Failed to clone repository: {reason}")
            self._discard_partial_clone()
            return SyncOutcome.failed("Clone failed", reason)

        head = repo.head.commit.hexsha if repo.head.is_valid() else None
        self.logger.info(f"Cloned repository from {self.remote_url} to {self.repo_path}")
        return SyncOutcome(SyncState.CLONED, "Repository cloned successfully!", commit=head)

    def _destination_conflict(self) -> Optional[str]:
        """Why the local path cannot take a clone, or None if it can."""
        path = self.repo_path
        try:
            if not path.exists() and not path.is_symlink():
                return None
            if not path.is_dir():
                return f"destination path '{path}' already exists and is not a directory"
            if any(path.iterdir()):
                return f"destination path '{path}' already exists and is not empty"
        except OSError as e:
            return f"cannot inspect destination path '{path}': {e}"
        return None

    def _discard_partial_clone(self):
        """Remove what a failed clone left behind.

        Clones only ever target a missing or empty directory, so nothing
        but the failed clone can be lost here.
        """
        try:
            if self.repo_path.is_dir():
                shutil.rmtree(self.repo_path)
        except OSError as e:
            self.logger.warning(f"Could not remove partial clone at {self.repo_path}: {e}")

    def update(self) -> SyncOutcome:
        """Fetch, merge and, when git asks for one, commit the merge."""
        if not self.repo_path.exists():
            return SyncOutcome.failed(
                f"Repository not found at {self.repo_path}. Clone it first."
            )

        try:
            repo = Repo(self.repo_path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            return SyncOutcome.failed("Failed to open repository", _git_error_text(e) or str(self.repo_path))

        if not repo.remotes:
            return SyncOutcome.failed("Fetch failed", "repository has no remotes")

        for remote in repo.remotes:
            try:
                self.logger.debug(f"Fetching {remote.name}")
                remote.fetch()
            except GitCommandError as e:
                reason = _git_error_text(e)
                self.logger.error(f"Failed to fetch from {remote.name}: {reason}")
                return SyncOutcome.failed(f"Fetch from '{remote.name}' failed", reason)

        if repo.head.is_detached:
            return SyncOutcome.failed("Cannot sync", "HEAD is detached, check out a branch first")
        branch = repo.active_branch
        if not branch.is_valid():
            return SyncOutcome.failed("Cannot sync", f"branch '{branch.name}' has no commits")

        tracking = self._find_tracking_ref(repo, branch.name)
        if tracking is None:
            return SyncOutcome.failed(f"No matching remote branch for '{branch.name}'")

        prior_head = repo.head.commit
        fetched = tracking.commit
        self.logger.info(f"Merging {tracking.name} into {branch.name}")

        try:
            repo.git.merge('--no-commit', fetched.hexsha)
        except GitCommandError as e:
            if self._has_conflicts(repo):
                self.logger.warning("Merge conflicts detected")
                return SyncOutcome(
                    SyncState.MERGED_WITH_CONFLICTS,
                    "Conflicts detected, resolve manually.",
                    reason=_git_error_text(e)
                )
            reason = _git_error_text(e)
            self.logger.error(f"Merge failed: {reason}")
            return SyncOutcome.failed("Merge failed", reason)

        if self._has_conflicts(repo):
            return SyncOutcome(SyncState.MERGED_WITH_CONFLICTS, "Conflicts detected, resolve manually.")

        if self._merge_in_progress(repo):
            return self._commit_merge(repo, prior_head, fetched, tracking.name)

        current = repo.head.commit
        if current == prior_head:
            return SyncOutcome(SyncState.UP_TO_DATE, "Dotfiles already up to date.", commit=current.hexsha)
        return SyncOutcome(
            SyncState.FAST_FORWARDED,
            f"Dotfiles fast-forwarded to {current.hexsha[:8]}.",
            commit=current.hexsha
        )

    @staticmethod
    def _find_tracking_ref(repo: Repo, branch_name: str) -> Optional[RemoteReference]:
        """Upstream of the branch, otherwise the first <remote>/<branch> ref."""
        upstream = repo.heads[branch_name].tracking_branch()
        if upstream is not None and upstream.is_valid():
            return upstream

        for remote in repo.remotes:
            for ref in remote.refs:
                if ref.remote_head == branch_name:
                    return ref
        return None

    @staticmethod
    def _has_conflicts(repo: Repo) -> bool:
        return len(repo.index.unmerged_blobs()) > 0

    @staticmethod
    def _merge_in_progress(repo: Repo) -> bool:
        return (Path(repo.git_dir) / 'MERGE_HEAD').exists()

    def _commit_merge(self, repo: Repo, prior_head, fetched, ref_name: str) -> SyncOutcome:
        """Record the merge with both parents and clear the merge state."""
        reader = repo.config_reader()
        author = Actor.author(reader)
        committer = Actor.committer(reader)
        message = f"Merge remote-tracking branch '{ref_name}'"

        try:
            commit = repo.index.commit(
                message,
                parent_commits=[prior_head, fetched],
                head=True,
                author=author,
                committer=committer,
            )
        except (GitCommandError, OSError, ValueError) as e:
            reason = _git_error_text(e)
            self.logger.error(f"Failed to commit merge: {reason}")
            return SyncOutcome.failed("Failed to commit merge", reason)

        self._cleanup_merge_state(repo)
        self.logger.info(f"Created merge commit {commit.hexsha[:8]}")
        return SyncOutcome(
            SyncState.MERGED_CLEAN,
            f"Dotfiles merged with {ref_name} ({commit.hexsha[:8]}).",
            commit=commit.hexsha
        )

    @staticmethod
    def _cleanup_merge_state(repo: Repo):
        git_dir = Path(repo.git_dir)
        for name in MERGE_STATE_FILES:
            state_file = git_dir / name
            if state_file.exists():
                state_file.unlink()
