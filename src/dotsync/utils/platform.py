#!/usr/bin/env python3
"""
Platform detection and host utilities for dotsync.

dotsync only manages Linux hosts; this module answers where home is and
whether we are on Linux.
"""

import os
import platform
from pathlib import Path
from typing import Dict, Optional
from enum import Enum


class OSType(Enum):
    """Operating system families."""
    LINUX = "linux"
    MACOS = "darwin"
    WINDOWS = "windows"
    UNKNOWN = "unknown"


class PlatformDetector:
    """Handles platform detection and home directory resolution."""

    def __init__(self, home: Optional[Path] = None):
        self._os_type = self._detect_os()
        self._home_dir = Path(home) if home else self._resolve_home()

    @staticmethod
    def _detect_os() -> OSType:
        """Detect the current operating system."""
        system = platform.system().lower()

        if system == "linux":
            return OSType.LINUX
        elif system == "darwin":
            return OSType.MACOS
        elif system == "windows":
            return OSType.WINDOWS
        else:
            return OSType.UNKNOWN

    @staticmethod
    def _resolve_home() -> Path:
        """HOME is the only environment variable dotsync reads."""
        home = os.environ.get('HOME')
        if home:
            return Path(home)
        return Path.home()

    @property
    def os_type(self) -> OSType:
        return self._os_type

    @property
    def is_linux(self) -> bool:
        return self._os_type == OSType.LINUX

    @property
    def home_dir(self) -> Path:
        """Get the user's home directory."""
        return self._home_dir

    def get_system_info(self) -> Dict[str, str]:
        """Get detailed system information."""
        return {
            'os_type': self.os_type.value,
            'platform': platform.platform(),
            'machine': platform.machine(),
            'python_version': platform.python_version(),
            'home_directory': str(self.home_dir),
        }


def get_home_dir() -> Path:
    """Resolve the user's home directory from HOME."""
    return PlatformDetector().home_dir
