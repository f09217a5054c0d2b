#!/usr/bin/env python3
"""
Configuration for dotsync.

Settings are static for the lifetime of a run: the dotfiles remote, the
package sets and the stow packages to link. Defaults can be overridden by
an optional YAML file at ~/.config/dotsync/config.yaml.
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .errors import ConfigError
from ..utils.logger import get_logger
from ..utils.platform import get_home_dir

DEFAULT_REPO_URL = "https://github.com/farukerdem34/dotfiles.git"
DEFAULT_BOOTSTRAP_URL = "https://starship.rs/install.sh"

DEFAULT_BASE_PACKAGES = [
    "bash",
    "btop",
    "fastfetch",
    "kitty",
    "nvim",
    "starship",
    "tmux",
    "vim",
    "zsh",
    "zoxide",
    "stow",
]

DEFAULT_AUX_PACKAGES = ["bat", "fzf", "starship"]

DEFAULT_STOW_PACKAGES = [
    "bash",
    "btop",
    "fastfetch",
    "kitty",
    "nvim",
    "starship",
    "tmux",
    "vim",
    "zsh",
]

# Checked in this order, first existing directory wins
DEFAULT_LINK_CANDIDATES = ["dotfiles", ".dotfiles"]

REPO_DIR_NAME = ".dotfiles"

logger = get_logger(__name__)


@dataclass
class Settings:
    """Everything the engine needs to know about this user and host."""
    home: Path
    repo_url: str = DEFAULT_REPO_URL
    base_packages: List[str] = field(default_factory=lambda: list(DEFAULT_BASE_PACKAGES))
    aux_packages: List[str] = field(default_factory=lambda: list(DEFAULT_AUX_PACKAGES))
    stow_packages: List[str] = field(default_factory=lambda: list(DEFAULT_STOW_PACKAGES))
    link_candidates: List[str] = field(default_factory=lambda: list(DEFAULT_LINK_CANDIDATES))
    bootstrap_url: str = DEFAULT_BOOTSTRAP_URL
    command_timeout: Optional[float] = None

    def __post_init__(self):
        self.home = Path(self.home)

    @property
    def repo_path(self) -> Path:
        """The dotfiles repository always lives at ~/.dotfiles."""
        return self.home / REPO_DIR_NAME

    @property
    def link_roots(self) -> List[Path]:
        """Candidate source roots for linking, in search order."""
        return [self.home / name for name in self.link_candidates]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'home': str(self.home),
            'repo_url': self.repo_url,
            'repo_path': str(self.repo_path),
            'base_packages': list(self.base_packages),
            'aux_packages': list(self.aux_packages),
            'stow_packages': list(self.stow_packages),
            'link_candidates': list(self.link_candidates),
            'bootstrap_url': self.bootstrap_url,
            'command_timeout': self.command_timeout,
        }


def default_config_path(home: Path) -> Path:
    return Path(home) / '.config' / 'dotsync' / 'config.yaml'


def _as_string_list(key: str, value: Any) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return value


def load_settings(
    path: Optional[Union[str, Path]] = None,
    home: Optional[Union[str, Path]] = None
) -> Settings:
    """
    Build Settings from defaults and an optional YAML file.

    Args:
        path: Config file to read; defaults to ~/.config/dotsync/config.yaml
        home: Home directory override; defaults to $HOME

    Returns:
        Settings instance

    Raises:
        ConfigError: If the file exists but cannot be parsed
    """
    home = Path(home) if home else get_home_dir()
    config_path = Path(path) if path else default_config_path(home)

    if not config_path.exists():
        if path:
            raise ConfigError(f"Config file not found: {config_path}")
        logger.debug(f"No config file at {config_path}, using defaults")
        return Settings(home=home)

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read config file {config_path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    known = {f.name for f in fields(Settings)} - {'home'}
    kwargs: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            logger.warning(f"Ignoring unknown config key '{key}' in {config_path}")
            continue
        if key.endswith('_packages') or key == 'link_candidates':
            value = _as_string_list(key, value)
        elif key == 'command_timeout' and value is not None:
            # bool is an int subclass
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ConfigError("'command_timeout' must be a positive number")
        elif key in ('repo_url', 'bootstrap_url') and not isinstance(value, str):
            raise ConfigError(f"'{key}' must be a string")
        kwargs[key] = value

    logger.debug(f"Loaded config from {config_path}")
    return Settings(home=home, **kwargs)
