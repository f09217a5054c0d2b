#!/usr/bin/env python3
"""
Logging utilities for dotsync.

This module provides a centralized logging system with rich console output,
an optional colorama-coloured plain console mode, and rotating file logging.
Engine components only ever log; printing belongs to the command line.
"""

import os
import sys
import logging
import logging.handlers
from pathlib import Path
from typing import Optional, Dict

from colorama import init as colorama_init, Fore, Style
from rich.console import Console
from rich.logging import RichHandler

colorama_init()

ROOT_LOGGER_NAME = 'dotsync'
FILE_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "%(filename)s:%(lineno)d - %(message)s"
)
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Formatter that colours the level name for plain console logging."""

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.MAGENTA,
    }

    def __init__(self, fmt: str = None, datefmt: str = None, use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)

        # Save original levelname
        original_levelname = record.levelname
        color = self.COLORS.get(record.levelname, '')
        record.levelname = f"{color}{record.levelname}{Style.RESET_ALL}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


class DotsyncLogger:
    """Thin wrapper around a stdlib logger configured for dotsync."""

    def __init__(self, name: str = ROOT_LOGGER_NAME):
        self.name = name
        self.logger = logging.getLogger(name)

        # Children propagate to the root dotsync logger, which owns the handlers
        if name != ROOT_LOGGER_NAME:
            return

        self.logger.setLevel(logging.INFO)
        if self.logger.handlers:
            return
        self._setup_handlers()

    def _setup_handlers(self):
        """Attach the rich console handler."""
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
            rich_tracebacks=True
        )
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        console_handler.setLevel(logging.INFO)
        self.logger.addHandler(console_handler)

    def use_plain_console(self):
        """Replace the rich console handler with a colorama-coloured one."""
        for handler in list(self.logger.handlers):
            if isinstance(handler, RichHandler):
                self.logger.removeHandler(handler)

        if any(type(handler) is logging.StreamHandler for handler in self.logger.handlers):
            return
        plain_handler = logging.StreamHandler(sys.stderr)
        plain_handler.setFormatter(ColoredFormatter("[%(levelname)s] %(name)s: %(message)s"))
        plain_handler.setLevel(self.logger.level)
        self.logger.addHandler(plain_handler)

    def add_file_handler(self, log_file: Path, rotating: bool = True):
        """Log everything at DEBUG to the given file."""
        log_file = Path(log_file)
        for handler in self.logger.handlers:
            if isinstance(handler, logging.FileHandler) and handler.baseFilename == os.path.abspath(log_file):
                return
        log_file.parent.mkdir(parents=True, exist_ok=True)

        if rotating:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=5 * 1024 * 1024,  # 5MB
                backupCount=5
            )
        else:
            file_handler = logging.FileHandler(log_file)

        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        self.logger.addHandler(file_handler)

    def set_level(self, level: str):
        """Set the logging level."""
        log_level = logging.getLevelName(level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO

        self.logger.setLevel(log_level)
        for handler in self.logger.handlers:
            if not isinstance(handler, logging.FileHandler):
                handler.setLevel(log_level)

    def debug(self, message: str, *args, **kwargs):
        self.logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs):
        self.logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs):
        self.logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs):
        self.logger.error(message, *args, **kwargs)


# Global logger instances
_loggers: Dict[str, DotsyncLogger] = {}


def get_logger(name: str = ROOT_LOGGER_NAME) -> DotsyncLogger:
    """Get or create a logger instance."""
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    if ROOT_LOGGER_NAME not in _loggers:
        _loggers[ROOT_LOGGER_NAME] = DotsyncLogger(ROOT_LOGGER_NAME)
    if name not in _loggers:
        _loggers[name] = DotsyncLogger(name)
    return _loggers[name]


def default_log_file(home: Optional[Path] = None) -> Path:
    """Location of the rotating log file."""
    home = Path(home) if home else Path.home()
    return home / '.config' / 'dotsync' / 'logs' / 'dotsync.log'


def setup_logging(
    level: str = 'INFO',
    log_file: Optional[Path] = None,
    verbose: bool = False,
    plain: bool = False,
    home: Optional[Path] = None
):
    """Setup logging configuration for a command-line run."""
    if verbose:
        level = 'DEBUG'

    logger = get_logger()
    if plain:
        logger.use_plain_console()
    logger.set_level(level)

    target = Path(log_file) if log_file else default_log_file(home)
    try:
        logger.add_file_handler(target, rotating=log_file is None)
        logger.debug(f"Logging to file: {target}")
    except OSError as e:
        # If we can't setup file logging, just continue with console
        logger.warning(f"Could not setup file logging at {target}: {e}")
