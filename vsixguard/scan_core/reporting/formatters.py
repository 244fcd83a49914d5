"""Terminal output formatters with color and emoji support."""
from __future__ import annotations

import logging
import os
import sys
from typing import Dict

from vsixguard.scan_core.models import Severity


class Colors:
    """ANSI color codes for terminal output."""

    RED = "\033[31m"
    YELLOW = "\033[33m"
    GREEN = "\033[32m"
    BLUE = "\033[34m"
    BOLD = "\033[1m"
    RESET = "\033[0m"

    _enabled = True

    @classmethod
    def disable(cls) -> None:
        """Disable all color output."""
        cls._enabled = False

    @classmethod
    def enable(cls) -> None:
        cls._enabled = True

    @classmethod
    def is_enabled(cls) -> bool:
        return cls._enabled

    @classmethod
    def colorize(cls, text: str, color: str) -> str:
        """Apply color to text if colors are enabled."""
        if not cls._enabled or not color:
            return text
        return f"{color}{text}{cls.RESET}"

    @classmethod
    def supports_color(cls) -> bool:
        """Check if the terminal supports color output."""
        # Respect NO_COLOR environment variable (https://no-color.org/)
        if os.environ.get("NO_COLOR"):
            return False
        if not hasattr(sys.stdout, "isatty") or not sys.stdout.isatty():
            return False
        return True


class Emojis:
    """Emoji indicators for report lines."""

    CRITICAL = "🚨"
    HIGH = "⚠️ "
    MEDIUM = "⚡"
    LOW = "ℹ️ "
    WARNING = "⚠️"
    INFO = "ℹ️ "
    CLEAN = "✅"
    PACKAGE = "📦"
    LOCK = "🔒"
    UPGRADE = "⬆️"
    DOWNGRADE = "⬇️"
    REINSTALL = "🔄"

    _enabled = True

    @classmethod
    def disable(cls) -> None:
        """Disable all emoji output."""
        cls._enabled = False

    @classmethod
    def enable(cls) -> None:
        cls._enabled = True

    @classmethod
    def get(cls, emoji: str) -> str:
        """Return emoji if enabled, empty string otherwise."""
        return emoji if cls._enabled else ""

    @classmethod
    def prefix(cls, emoji: str, text: str) -> str:
        """Prepend an emoji and a space, or nothing when emojis are off."""
        icon = cls.get(emoji)
        return f"{icon} {text}" if icon else text

    @classmethod
    def supports_emoji(cls) -> bool:
        """Check if terminal supports emoji rendering."""
        term = os.environ.get("TERM", "")
        if term == "dumb" or not sys.stdout.isatty():
            return False
        return True


SEVERITY_EMOJIS: Dict[Severity, str] = {
    Severity.CRITICAL: Emojis.CRITICAL,
    Severity.HIGH: Emojis.HIGH,
    Severity.MEDIUM: Emojis.MEDIUM,
    Severity.LOW: Emojis.LOW,
}

SEVERITY_COLORS: Dict[Severity, str] = {
    Severity.CRITICAL: Colors.RED + Colors.BOLD,
    Severity.HIGH: Colors.RED,
    Severity.MEDIUM: Colors.YELLOW,
    Severity.LOW: Colors.BLUE,
}


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI color support."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.RED + Colors.BOLD,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        levelname = record.levelname
        if Colors.is_enabled():
            color = self.LEVEL_COLORS.get(record.levelno, "")
            record.levelname = Colors.colorize(levelname, color)
        result = super().format(record)
        record.levelname = levelname
        return result

