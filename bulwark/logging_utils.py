"""Console output for verbose planning sessions.

Each line starts with a tag naming what kind of event it reports, so a
session log reads the same with or without a colour terminal:

    [i] session start/end    [•] lane and candidate analysis
    [~] seeded random draw   [!] rejected candidates
    [✓] committed placement

Set ``BULWARK_NO_COLOR`` to drop the ANSI escapes (CI logs, files).
"""

import os
from enum import Enum


class Color(Enum):
    """ANSI escape sequences used by the planner log."""

    BLUE = "\033[94m"      # analysis
    YELLOW = "\033[93m"    # rng draws
    RED = "\033[91m"       # rejections
    GREEN = "\033[92m"     # commits
    CYAN = "\033[96m"      # session info

    BOLD = "\033[1m"
    RESET = "\033[0m"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Return ``text`` wrapped in ``color`` unless BULWARK_NO_COLOR is set."""
    if os.getenv("BULWARK_NO_COLOR"):
        return text
    start = (Color.BOLD.value if bold else "") + color.value
    return f"{start}{text}{Color.RESET.value}"


LOG_TAG_DETERMINISTIC = "[•]"
LOG_TAG_RANDOM = "[~]"
LOG_TAG_ERROR = "[!]"
LOG_TAG_SUCCESS = "[✓]"
LOG_TAG_INFO = "[i]"


def _emit(tag: str, color: Color, message: str) -> None:
    print(colored(f"{tag} {message}", color))


def log_deterministic(message: str) -> None:
    """Lane counts, candidate totals: anything a seed cannot change."""
    _emit(LOG_TAG_DETERMINISTIC, Color.BLUE, message)


def log_random(message: str) -> None:
    """Reference route draws and epsilon-greedy picks."""
    _emit(LOG_TAG_RANDOM, Color.YELLOW, message)


def log_error(message: str) -> None:
    _emit(LOG_TAG_ERROR, Color.RED, message)


def log_success(message: str) -> None:
    _emit(LOG_TAG_SUCCESS, Color.GREEN, message)


def log_info(message: str) -> None:
    _emit(LOG_TAG_INFO, Color.CYAN, message)
