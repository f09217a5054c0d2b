"""
Core modules for dotsync.

This package contains the environment synchronization engine: process
execution, package manager dispatch, stow management, git synchronization
and the controller that routes actions between them.
"""

from .config import Settings, load_settings
from .controller import Action, Controller
from .errors import DotsyncError, BackendNotFound, ConfigError, PreconditionError
from .git_handler import GitHandler, SyncOutcome, SyncState
from .packages import Backend, PackageAction, PackageManager
from .runner import CommandResult, ProcessRunner
from .status import Status
from .stow import BatchResult, LinkResult, StowManager

__all__ = [
    'Settings',
    'load_settings',
    'Action',
    'Controller',
    'DotsyncError',
    'BackendNotFound',
    'ConfigError',
    'PreconditionError',
    'GitHandler',
    'SyncOutcome',
    'SyncState',
    'Backend',
    'PackageAction',
    'PackageManager',
    'CommandResult',
    'ProcessRunner',
    'Status',
    'BatchResult',
    'LinkResult',
    'StowManager',
]
