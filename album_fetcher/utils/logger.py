"""
Logging configuration and utilities for album-fetcher
Provides colored console output and file logging with separation between user and technical messages
"""

import logging
import logging.handlers
import re
import sys
import time
from pathlib import Path
from typing import Optional
import colorama
from colorama import Fore, Back, Style
from tqdm import tqdm

from ..config.settings import get_settings


# Initialize colorama for Windows compatibility
colorama.init()


EXTERNAL_LIBS = ['urllib3', 'requests', 'PIL', 'urllib3.connectionpool']


class ConsoleMessageFilter(logging.Filter):
    """Filter to allow only user-facing messages to console"""

    def filter(self, record):
        # Allow all WARNING+ messages
        if record.levelno >= logging.WARNING:
            return True

        # Allow messages explicitly marked for console
        if getattr(record, 'console_output', False):
            return True

        # Allow messages from specific console loggers
        if record.name.endswith('.console'):
            return True

        # Block everything else (DEBUG/INFO technical messages)
        return False


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colored output for console"""

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.RED + Back.WHITE + Style.BRIGHT,
    }

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True):
        """
        Initialize colored formatter

        Args:
            fmt: Log format string
            use_colors: Whether to use colored output
        """
        super().__init__()
        self.use_colors = use_colors
        self.fmt = fmt or '%(message)s'

    def format(self, record: logging.LogRecord) -> str:
        """Format log record, coloring warnings and errors"""
        formatter = logging.Formatter(self.fmt)
        message = formatter.format(record)
        if self.use_colors and record.levelno >= logging.WARNING and record.levelname in self.COLORS:
            return f"{self.COLORS[record.levelname]}{message}{Style.RESET_ALL}"
        return message


class ProgressHandler(logging.Handler):
    """Handler that writes through tqdm so messages don't break progress bars"""

    def __init__(self, stream=None):
        super().__init__()
        self.stream = stream or sys.stdout

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


def parse_size(size_str: str) -> int:
    """
    Parse size string to bytes

    Args:
        size_str: Size string like "10MB", "1GB", "500KB"

    Returns:
        Size in bytes

    Raises:
        ValueError: If the string is not a recognised size
    """
    size_str = size_str.upper().strip()

    multipliers = {
        'B': 1,
        'KB': 1024,
        'MB': 1024 ** 2,
        'GB': 1024 ** 3,
    }

    match = re.match(r'^(\d+(?:\.\d+)?)\s*([KMG]?B)$', size_str)
    if not match:
        raise ValueError(f"Invalid size format: {size_str}")

    number, unit = match.groups()
    return int(float(number) * multipliers[unit])


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    console_output: bool = True,
    colored_output: bool = True,
    max_size: str = "10MB",
    backup_count: int = 3
) -> None:
    """
    Setup application logging configuration with separated console/file output

    Args:
        level: Logging level for the log file (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (None to disable file logging)
        console_output: Enable console logging
        colored_output: Enable colored console output
        max_size: Maximum log file size before rotation
        backup_count: Number of backup log files to keep
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture everything, filter at handler level

    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    # Console handler - only user-facing messages (WARNING+ or explicitly marked)
    if console_output:
        console_handler = ProgressHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)
        console_handler.addFilter(ConsoleMessageFilter())
        console_handler.setFormatter(ColoredFormatter(fmt='%(message)s', use_colors=colored_output))
        root_logger.addHandler(console_handler)

    # File handler with full detail logging
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=parse_size(max_size),
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(
            fmt='%(asctime)s | %(name)-30s | %(levelname)-8s | %(funcName)-20s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        root_logger.addHandler(file_handler)

    for lib in EXTERNAL_LIBS:
        logging.getLogger(lib).setLevel(logging.WARNING)

    logger = logging.getLogger('album_fetcher')
    logger.debug(f"Logging initialized - Level: {level}, Console: {console_output}, File: {log_file}")


def get_current_log_file() -> Optional[Path]:
    """
    Get the current log file path from active file handlers

    Returns:
        Path to current log file or None if no file logging
    """
    for handler in logging.getLogger().handlers:
        if isinstance(handler, logging.handlers.RotatingFileHandler):
            return Path(handler.baseFilename)
    return None


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance for a module

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance with console helper methods attached
    """
    logger = logging.getLogger(name)

    def console_info(message: str):
        """Log message that should appear on console for user"""
        logger.info(message, extra={'console_output': True})

    def console_warning(message: str):
        """Log warning that should appear on console"""
        logger.warning(message)

    def console_error(message: str):
        """Log error that should appear on console"""
        logger.error(message)

    logger.console_info = console_info
    logger.console_warning = console_warning
    logger.console_error = console_error

    return logger


def configure_from_settings() -> None:
    """Configure logging from application settings"""
    settings = get_settings()

    log_file_path = None
    if settings.logging.file:
        if Path(settings.logging.file).expanduser().is_absolute():
            log_file_path = Path(settings.logging.file).expanduser()
        else:
            log_file_path = settings.get_config_directory() / settings.logging.file

    setup_logging(
        level=settings.logging.level,
        log_file=str(log_file_path) if log_file_path else None,
        console_output=settings.logging.console_output,
        colored_output=settings.logging.colored_output,
        max_size=settings.logging.max_size,
        backup_count=settings.logging.backup_count
    )


class OperationLogger:
    """Logger for tracking long-running operations with a progress bar"""

    def __init__(self, logger: logging.Logger, operation_name: str):
        """
        Initialize operation logger

        Args:
            logger: Base logger instance (from get_logger)
            operation_name: Name of the operation
        """
        self.logger = logger
        self.operation_name = operation_name
        self.start_time: Optional[float] = None
        self.progress_bar: Optional[tqdm] = None

    def start(self, message: Optional[str] = None) -> None:
        """Start tracking operation - show to user"""
        self.start_time = time.time()
        self.logger.console_info(message or f"🚀 {self.operation_name}")
        self.logger.debug(f"Operation started: {self.operation_name}")

    def progress(self, message: str, current: Optional[int] = None, total: Optional[int] = None) -> None:
        """Log progress update, driving a progress bar when counts are known"""
        if current is not None and total is not None:
            self.logger.debug(f"{self.operation_name}: {message} ({current}/{total})")

            if self.progress_bar is None:
                self.progress_bar = tqdm(
                    total=total,
                    desc=f"⚡ {self.operation_name}",
                    bar_format="{desc} {n}/{total} {bar} {percentage:3.0f}%",
                    ncols=100,
                    colour='cyan',
                    leave=False
                )

            self.progress_bar.n = current
            self.progress_bar.refresh()
        else:
            self.logger.debug(f"{self.operation_name}: {message}")
            if not self.progress_bar:
                self.logger.console_info(f"⏳ {message}")

    def _close_bar(self) -> None:
        if self.progress_bar:
            self.progress_bar.close()
            self.progress_bar = None

    def complete(self, message: Optional[str] = None) -> None:
        """Mark operation as complete - close progress bar"""
        self._close_bar()
        self.logger.console_info(message or f"✅ {self.operation_name} completed")
        if self.start_time:
            duration = time.time() - self.start_time
            self.logger.debug(f"Operation completed: {self.operation_name} in {duration:.2f}s")

    def error(self, message: str, exception: Optional[Exception] = None) -> None:
        """Log operation error - close progress bar first"""
        self._close_bar()
        self.logger.console_error(f"❌ {self.operation_name} failed: {message}")
        if exception:
            self.logger.debug(f"Operation failed: {self.operation_name}", exc_info=exception)

    def warning(self, message: str) -> None:
        """Log operation warning - show to user"""
        self.logger.console_warning(f"⚠️  {message}")
