"""
dotsync - provision a Linux host and keep its dotfiles in sync

This package detects the host's package manager, installs a fixed software
set, clones and merges a dotfiles repository, and manages the GNU Stow
symlink tree that activates it.
"""

__version__ = "1.0.0"
__author__ = "dotsync contributors"
__description__ = "Provision a Linux host and keep its dotfiles in sync"

from .core.config import Settings, load_settings
from .core.controller import Action, Controller
from .core.git_handler import GitHandler, SyncOutcome, SyncState
from .core.packages import Backend, PackageAction, PackageManager
from .core.runner import ProcessRunner
from .core.status import Status
from .core.stow import StowManager, BatchResult
from .utils.logger import get_logger

# Version info
VERSION = __version__
VERSION_INFO = tuple(map(int, __version__.split('.')))

__all__ = [
    'Settings',
    'load_settings',
    'Action',
    'Controller',
    'GitHandler',
    'SyncOutcome',
    'SyncState',
    'Backend',
    'PackageAction',
    'PackageManager',
    'ProcessRunner',
    'Status',
    'StowManager',
    'BatchResult',
    'get_logger',
    'VERSION',
    'VERSION_INFO',
]
