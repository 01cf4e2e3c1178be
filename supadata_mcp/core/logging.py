"""
Logging System for the Supadata Command Dispatcher

Console output goes to stderr because stdout carries command replies.
An optional rotating log file receives the detailed records.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Dict, Any, Mapping
import json


LOGGER_NAME = 'supadata_mcp'


class LoggingManager:
    """
    Centralized logging manager with file rotation and structured context
    """

    def __init__(self):
        self.logger: Optional[logging.Logger] = None
        self.file_handler: Optional[logging.handlers.RotatingFileHandler] = None
        self.console_handler: Optional[logging.StreamHandler] = None
        self._setup_complete = False

    def setup_logging(self, level: str = "INFO", log_file: Optional[str] = None,
                      max_size: str = "10MB", backup_count: int = 3) -> None:
        """
        Set up logging system with stderr output and optional file rotation

        Args:
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: Path to log file, or None for console only
            max_size: Maximum size before rotation (e.g., "10MB")
            backup_count: Number of backup files to keep
        """
        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self.logger.propagate = False

        self.close()
        self.logger.handlers.clear()

        detailed_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            self.file_handler = logging.handlers.RotatingFileHandler(
                log_file, maxBytes=self._parse_size(max_size),
                backupCount=backup_count, encoding='utf-8'
            )
            self.file_handler.setLevel(logging.DEBUG)
            self.file_handler.setFormatter(detailed_formatter)
            self.logger.addHandler(self.file_handler)

        self.console_handler = logging.StreamHandler(sys.stderr)
        self.console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
        self.console_handler.setFormatter(console_formatter)
        self.logger.addHandler(self.console_handler)

        self._setup_complete = True
        self.logger.debug("Logging system initialized")

    def _parse_size(self, size_str: str) -> int:
        """Parse size string like '10MB' to bytes"""
        size_str = size_str.upper().strip()

        if size_str.endswith('KB'):
            return int(size_str[:-2]) * 1024
        elif size_str.endswith('MB'):
            return int(size_str[:-2]) * 1024 * 1024
        elif size_str.endswith('GB'):
            return int(size_str[:-2]) * 1024 * 1024 * 1024
        else:
            return int(size_str)

    def get_logger(self) -> logging.Logger:
        """Get the configured logger, or the bare package logger before setup"""
        if not self._setup_complete or not self.logger:
            return logging.getLogger(LOGGER_NAME)
        return self.logger

    def log_command_received(self, name: str, args: Optional[Mapping[str, Any]] = None) -> None:
        """Record an incoming command"""
        logger = self.get_logger()
        logger.info(f"Command received: {name}")
        if args:
            logger.debug("Arguments for %s: %r", name, dict(args))

    def log_command_completed(self, name: str, duration_ms: float, is_error: bool) -> None:
        """Record the outcome of a command"""
        self.get_logger().info(
            f"Command completed: {name} in {duration_ms:.0f}ms (error={is_error})"
        )

    def log_warning(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Log a warning with optional context"""
        context_str = ""
        if context:
            context_str = f" | Context: {json.dumps(context, default=str)}"

        self.get_logger().warning(f"{message}{context_str}")

    def close(self) -> None:
        """Close logging handlers"""
        if self.file_handler:
            self.file_handler.close()
            self.file_handler = None
        if self.console_handler:
            self.console_handler.close()
            self.console_handler = None


# Global logging manager instance
logging_manager = LoggingManager()


def get_logger() -> logging.Logger:
    """Get the global logger instance"""
    return logging_manager.get_logger()


def setup_logging(level: str = "INFO", log_file: Optional[str] = None,
                  max_size: str = "10MB", backup_count: int = 3) -> None:
    """Set up global logging system"""
    logging_manager.setup_logging(level, log_file, max_size, backup_count)
