"""Coloured console reporting for the tmpl CLI."""
import os
import sys
from typing import Optional, TextIO


class Colors:
    """ANSI color codes for terminal output."""
    BLUE = "\033[34m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    RESET = "\033[0m"


def _colored(color: str, symbol: str, msg: str) -> str:
    if os.environ.get("NO_COLOR"):
        return f"[{symbol}] {msg}"
    return f"{color}[{symbol}]{Colors.RESET} {msg}"


def _emit(line: str, stream: Optional[TextIO] = None) -> None:
    print(line, file=stream or sys.stdout)


def print_info(msg: str) -> None:
    """Print a neutral progress line."""
    _emit(_colored(Colors.GREEN, "…", msg))


def print_option(msg: str) -> None:
    _emit(_colored(Colors.GREEN, "…", msg))


def print_success(msg: str) -> None:
    _emit(_colored(Colors.GREEN, "✔", msg))


def print_warning(msg: str) -> None:
    _emit(_colored(Colors.YELLOW, "!", msg), sys.stderr)


def print_error(msg: str) -> None:
    _emit(_colored(Colors.RED, "✘", msg), sys.stderr)


def question(msg: str) -> str:
    """Format a prompt line without printing it."""
    return _colored(Colors.BLUE, "?", msg)


def print_question(msg: str) -> None:
    _emit(question(msg))
