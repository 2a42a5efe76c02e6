"""Colorful console logging formatter with local timestamps."""

import logging
import re
from datetime import datetime

# ANSI color codes
COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "magenta": "\033[35m",
    "cyan": "\033[36m",
    "white": "\033[37m",
    "bright_black": "\033[90m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_yellow": "\033[93m",
    "bright_blue": "\033[94m",
    "bright_magenta": "\033[95m",
    "bright_cyan": "\033[96m",
    "bg_red": "\033[41m",
}

LEVEL_COLORS = {
    "DEBUG": COLORS["bright_black"],
    "INFO": COLORS["bright_green"],
    "WARNING": COLORS["bright_yellow"],
    "ERROR": COLORS["bright_red"],
    "CRITICAL": COLORS["bg_red"] + COLORS["white"] + COLORS["bold"],
}

# Component colors for logger names, most specific first
COMPONENT_COLORS = {
    "sandbox_mcp.server": COLORS["bright_cyan"],
    "sandbox_mcp.services.transfer": COLORS["bright_magenta"],
    "sandbox_mcp.services": COLORS["magenta"],
    "sandbox_mcp.archive": COLORS["bright_blue"],
    "sandbox_mcp.tools": COLORS["blue"],
    "sandbox_mcp.middleware": COLORS["yellow"],
    "sandbox_mcp.config": COLORS["green"],
    "default": COLORS["white"],
}

PACKAGE_PREFIX = "sandbox_mcp."

_URL_PATTERN = re.compile(r"(https?://[^\s]+)")
_DURATION_PATTERN = re.compile(r"(\d+\.?\d*ms)")
_SIZE_PATTERN = re.compile(r"(\d+(?:\.\d+)? (?:B|KB|MB|GB)\b|\d+ bytes\b)")
_PHASE_PATTERN = re.compile(r"(\[phase=\w+\]|in \w+ phase)")
_MACHINE_PATTERN = re.compile(r"(machine \S+)")


class ColorfulFormatter(logging.Formatter):
    """Colorful log formatter with local timestamps and component highlighting."""

    def __init__(self, use_colors: bool = True) -> None:
        """Initialize the formatter.

        Args:
            use_colors: Whether to use ANSI colors.
        """
        super().__init__()
        self.use_colors = use_colors

    def _colorize(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{color}{text}{COLORS['reset']}"

    def _get_component_color(self, name: str) -> str:
        for prefix, color in COMPONENT_COLORS.items():
            if prefix != "default" and name.startswith(prefix):
                return color
        return COMPONENT_COLORS["default"]

    def _format_timestamp(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created).astimezone()
        return f"{dt.strftime('%H:%M:%S')}.{int(record.msecs):03d} {dt.strftime('%m/%d')}"

    def _format_level(self, record: logging.LogRecord) -> str:
        level = record.levelname
        color = LEVEL_COLORS.get(level, COLORS["white"])
        return self._colorize(f"{level:<8}", color)

    def _format_component(self, record: logging.LogRecord) -> str:
        name = record.name
        if name.startswith(PACKAGE_PREFIX):
            name = name[len(PACKAGE_PREFIX):]
        color = self._get_component_color(record.name)
        return self._colorize(f"{name:<20}", color)

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with colors and a local timestamp."""
        timestamp = self._colorize(self._format_timestamp(record), COLORS["dim"])
        level = self._format_level(record)
        component = self._format_component(record)
        sep = self._colorize("|", COLORS["dim"])
        message = self._highlight_message(record.getMessage())

        line = f"{timestamp} {sep} {level} {sep} {component} {sep} {message}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line

    def _highlight(self, pattern: re.Pattern[str], message: str, color: str) -> str:
        return pattern.sub(f"{color}\\1{COLORS['reset']}", message)

    def _highlight_message(self, message: str) -> str:
        """Highlight URLs, durations, sizes, phases and machine ids."""
        if not self.use_colors:
            return message

        if "://" in message:
            message = self._highlight(_URL_PATTERN, message, COLORS["bright_blue"])
        if "ms" in message:
            message = self._highlight(
                _DURATION_PATTERN, message, COLORS["bright_yellow"]
            )
        if "B" in message or "bytes" in message:
            message = self._highlight(_SIZE_PATTERN, message, COLORS["cyan"])
        if "phase" in message:
            message = self._highlight(_PHASE_PATTERN, message, COLORS["bright_red"])
        if "machine " in message:
            message = self._highlight(
                _MACHINE_PATTERN, message, COLORS["bright_magenta"]
            )
        return message


class MCPRequestFormatter(ColorfulFormatter):
    """Extended formatter that prefixes transfer lifecycle events."""

    def format(self, record: logging.LogRecord) -> str:
        """Format with a short marker for notable events."""
        base = super().format(record)
        if not self.use_colors:
            return base

        message = record.getMessage().lower()

        if "starting" in message or "ready" in message:
            return f"{COLORS['bright_green']}>>>{COLORS['reset']} {base}"
        elif "shutting down" in message or "shutdown" in message:
            return f"{COLORS['bright_red']}<<<{COLORS['reset']} {base}"
        elif "error" in message or "failed" in message:
            return f"{COLORS['bright_red']}!!{COLORS['reset']}  {base}"
        elif "warning" in message or "slow" in message:
            return f"{COLORS['bright_yellow']}!{COLORS['reset']}   {base}"
        elif "successfully" in message or "completed" in message:
            return f"{COLORS['bright_green']}OK{COLORS['reset']}  {base}"
        elif "packed" in message or "uploading" in message:
            return f"{COLORS['bright_cyan']}^{COLORS['reset']}   {base}"
        elif "extracted" in message or "downloading" in message:
            return f"{COLORS['bright_cyan']}v{COLORS['reset']}   {base}"

        return f"    {base}"
