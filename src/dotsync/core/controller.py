#!/usr/bin/env python3
"""
Action dispatch for dotsync.

The controller owns the menu selection and the last status. Each action maps
to one handler that calls exactly one engine component and returns a Status;
the controller stores it, replacing whatever was there before.
"""

from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .config import Settings
from .errors import BackendNotFound
from .git_handler import GitHandler
from .packages import Backend, PackageAction, PackageManager
from .runner import ProcessRunner
from .status import Status
from .stow import StowManager
from ..utils.logger import get_logger

WELCOME_MESSAGE = "Welcome! Select an option and press Enter to execute."
RETURNED_MESSAGE = "Returned to main menu. Select an option."
ADVANCED_MESSAGE = "Advanced options. Select Back to return to the main menu."


class Action(Enum):
    """Every action a menu can address."""
    UPDATE_PACKAGES = "update_packages"
    UPGRADE_PACKAGES = "upgrade_packages"
    INSTALL_PACKAGES = "install_packages"
    CLONE_REPO = "clone_repo"
    SYNC_DOTFILES = "sync_dotfiles"
    LINK_DOTFILES = "link_dotfiles"
    UNLINK_DOTFILES = "unlink_dotfiles"
    ADVANCED_OPTIONS = "advanced_options"
    BACK = "back"
    QUIT = "quit"


MAIN_MENU: List[Tuple[str, Action]] = [
    ("Update Packages", Action.UPDATE_PACKAGES),
    ("Upgrade Packages", Action.UPGRADE_PACKAGES),
    ("Install Packages", Action.INSTALL_PACKAGES),
    ("Clone Repository", Action.CLONE_REPO),
    ("Sync Dotfiles", Action.SYNC_DOTFILES),
    ("Stow Dotfiles", Action.LINK_DOTFILES),
    ("Unstow Dotfiles", Action.UNLINK_DOTFILES),
    ("Advanced Options", Action.ADVANCED_OPTIONS),
    ("Quit", Action.QUIT),
]

# Advanced actions are not implemented yet, only navigation back
ADVANCED_MENU: List[Tuple[str, Action]] = [
    ("Back to Main Menu", Action.BACK),
]

NAVIGATION_ACTIONS = (Action.ADVANCED_OPTIONS, Action.BACK, Action.QUIT)


class Controller:
    """Routes menu actions to the package, stow and git components."""

    def __init__(
        self,
        settings: Settings,
        runner: Optional[ProcessRunner] = None,
        packages: Optional[PackageManager] = None,
        stow: Optional[StowManager] = None,
        git: Optional[GitHandler] = None
    ):
        self.logger = get_logger(f"{__name__}.Controller")
        self.settings = settings
        self.runner = runner or ProcessRunner(timeout=settings.command_timeout)
        self.packages = packages or PackageManager(
            self.runner,
            settings.base_packages,
            settings.aux_packages,
            settings.bootstrap_url,
        )
        self.stow = stow or StowManager(
            self.runner,
            settings.home,
            settings.repo_path,
            settings.link_roots,
            settings.stow_packages,
        )
        self.git = git or GitHandler(settings.repo_path, settings.repo_url)

        self._backend: Optional[Backend] = None
        self._status = Status.ok(WELCOME_MESSAGE)
        self.menu_state = 0
        self.in_advanced_menu = False
        self.quit_requested = False

        self._handlers: Dict[Action, Callable[[], Status]] = {
            Action.UPDATE_PACKAGES: lambda: self._package_action(PackageAction.UPDATE),
            Action.UPGRADE_PACKAGES: lambda: self._package_action(PackageAction.UPGRADE),
            Action.INSTALL_PACKAGES: lambda: self._package_action(PackageAction.INSTALL),
            Action.CLONE_REPO: lambda: self.git.clone().to_status(),
            Action.SYNC_DOTFILES: lambda: self.git.update().to_status(),
            Action.LINK_DOTFILES: self.stow.link,
            Action.UNLINK_DOTFILES: self.stow.unlink_status,
        }

    @property
    def current_status(self) -> str:
        return self._status.text

    @property
    def last_status(self) -> Status:
        return self._status

    @property
    def menu_items(self) -> List[Tuple[str, Action]]:
        return ADVANCED_MENU if self.in_advanced_menu else MAIN_MENU

    @property
    def menu_title(self) -> str:
        return "Advanced Options" if self.in_advanced_menu else "Menu"

    @property
    def selected_action(self) -> Action:
        return self.menu_items[self.menu_state][1]

    def select_next(self):
        self.menu_state = (self.menu_state + 1) % len(self.menu_items)

    def select_previous(self):
        self.menu_state = (self.menu_state - 1) % len(self.menu_items)

    def select(self, index: int):
        if not 0 <= index < len(self.menu_items):
            raise IndexError(f"No menu item at position {index}")
        self.menu_state = index

    def run_selected(self) -> Status:
        return self.run(self.selected_action)

    def run(self, action: Action) -> Status:
        """Run one action and store its status."""
        if action in NAVIGATION_ACTIONS:
            self._navigate(action)
            return self._status

        self.logger.debug(f"Running action {action.value}")
        self._status = self._handlers[action]()
        if self._status.success:
            self.logger.info(self._status.text)
        else:
            self.logger.warning(self._status.text)
        return self._status

    def back(self):
        """Leave the advanced menu if it is open."""
        if self.in_advanced_menu:
            self._navigate(Action.BACK)

    def _navigate(self, action: Action):
        if action == Action.QUIT:
            self.quit_requested = True
        elif action == Action.ADVANCED_OPTIONS:
            self.in_advanced_menu = True
            self.menu_state = 0
            self._status = Status.ok(ADVANCED_MESSAGE)
        elif action == Action.BACK:
            self.in_advanced_menu = False
            self.menu_state = 0
            self._status = Status.ok(RETURNED_MESSAGE)

    def backend(self) -> Backend:
        """Detect the backend once and reuse it."""
        if self._backend is None:
            self._backend = self.packages.detect()
        return self._backend

    def _package_action(self, action: PackageAction) -> Status:
        try:
            backend = self.backend()
        except BackendNotFound as e:
            return Status.failed(str(e))
        return self.packages.dispatch(action, backend)
