"""
Centralized logging utility for the UTA library
Provides color-coded console output with consistent formatting

Everything goes to stderr so tools built on the library keep stdout for
their own output.
"""

import sys


# ANSI Color Codes
class Colors:
    """ANSI escape codes for terminal colors"""
    RESET = '\033[0m'
    ORANGE = '\033[38;5;214m'
    GREEN = '\033[38;5;46m'
    RED = '\033[38;5;196m'
    YELLOW = '\033[38;5;208m'
    CYAN = '\033[38;5;51m'


class Logger:
    """
    Centralized logging with color support.

    Warnings and errors are always printed; success, info and debug output
    only appear when ``verbose`` is set.
    """

    # Class variable for verbose mode
    verbose: bool = False

    @staticmethod
    def _emit(text: str) -> None:
        print(text, file=sys.stderr)

    @staticmethod
    def success(message: str) -> None:
        """Print success message with green checkmark"""
        if Logger.verbose:
            Logger._emit(f"{Colors.GREEN}✓{Colors.RESET} {message}")

    @staticmethod
    def error(message: str) -> None:
        """Print error message with red X"""
        Logger._emit(f"{Colors.RED}✗{Colors.RESET} {message}")

    @staticmethod
    def info(message: str) -> None:
        """Print info message with cyan color"""
        if Logger.verbose:
            Logger._emit(f"{Colors.CYAN}[INFO]{Colors.RESET} {message}")

    @staticmethod
    def warning(message: str) -> None:
        """Print warning message with yellow color"""
        Logger._emit(f"{Colors.YELLOW}[WARNING]{Colors.RESET} {message}")

    @staticmethod
    def debug(tag: str, message: str) -> None:
        """Print debug message with orange color"""
        if Logger.verbose:
            Logger._emit(f"{Colors.ORANGE}[{tag}]{Colors.RESET} {message}")

    @staticmethod
    def section(title: str) -> None:
        """Print section header with cyan color"""
        if Logger.verbose:
            Logger._emit(f"\n{Colors.CYAN}=== {title} ==={Colors.RESET}")
