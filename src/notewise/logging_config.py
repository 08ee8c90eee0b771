"""Logging setup for the Notewise CLI and server.

Log messages carry a bracketed service tag (``[LLM]``, ``[TASK]``,
``[PARSER]``, ``[API]``, ``[STARTUP]``). On a terminal the level and the tag
are colored; when stderr is piped, or ``NO_COLOR`` is set, output is plain.
"""

import logging
import os
import re
import sys
from typing import Optional

RESET = "\033[0m"
BOLD = "\033[1m"

LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}

TAG_COLORS = {
    "LLM": "\033[93m",
    "TASK": "\033[97m",
    "PARSER": "\033[96m",
    "API": "\033[95m",
    "STARTUP": "\033[94m",
}

_TAG = re.compile(r"\[(" + "|".join(TAG_COLORS) + r")\]")

QUIET_LOGGERS = ("httpx", "httpcore", "openai", "uvicorn.access")


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name and known service tags."""

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None, use_color: bool = True):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def _color_tag(self, match: re.Match) -> str:
        tag = match.group(1)
        return f"{TAG_COLORS[tag]}{BOLD}[{tag}]{RESET}"

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color:
            return super().format(record)

        levelname, msg = record.levelname, record.msg
        record.levelname = f"{LEVEL_COLORS.get(levelname, '')}{levelname:<7}{RESET}"
        if isinstance(msg, str):
            record.msg = _TAG.sub(self._color_tag, msg)
        try:
            return super().format(record)
        finally:
            # Other handlers may format the same record
            record.levelname, record.msg = levelname, msg


def _stream_supports_color(stream) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def setup_colored_logging(verbose: bool = False, stream=None) -> None:
    """Configure the root logger.

    Args:
        verbose: DEBUG level (payload previews) instead of INFO.
        stream: Where to write; defaults to stderr so stdout stays clean
            for command output.
    """
    stream = stream or sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        ColoredFormatter(
            fmt="%(asctime)s %(levelname)s %(message)s",
            datefmt="%H:%M:%S",
            use_color=_stream_supports_color(stream),
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for existing_handler in root_logger.handlers[:]:
        root_logger.removeHandler(existing_handler)
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
