"""
Utility modules for dotsync.

This package contains logging setup and host detection helpers used
throughout dotsync.
"""

from .logger import get_logger, setup_logging
from .platform import PlatformDetector, OSType, get_home_dir

__all__ = [
    'get_logger',
    'setup_logging',
    'PlatformDetector',
    'OSType',
    'get_home_dir',
]
