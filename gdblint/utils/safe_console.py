"""Terminal-safe Console wrapper for the Rich library.

Wraps Rich's Console to sanitize Unicode icons when the stream it writes
to (stdout, or stderr for the warning console) cannot encode UTF-8.
"""
from rich.console import Console
from typing import Any
from .logger import sanitize_for_terminal


class SafeConsole(Console):
    """Console that sanitizes Unicode output for non-UTF-8 streams.

    The check runs against the console's current file on every print, so
    redirection and captured streams are honored.
    """

    def print(self, *objects: Any, **kwargs) -> None:
        """Print with automatic Unicode sanitization.

        Args:
            *objects: Objects to print (same as Rich Console.print)
            **kwargs: Keyword arguments (same as Rich Console.print)
        """
        stream = self.file
        objects = tuple(
            sanitize_for_terminal(obj, stream) if isinstance(obj, str) else obj
            for obj in objects
        )
        super().print(*objects, **kwargs)

    def warn(self, message: str) -> None:
        """Print a highlighted warning line."""
        self.print(f"[bold yellow]⚠ Warning:[/bold yellow] {message}")

    def error(self, message: str) -> None:
        """Print a highlighted error line."""
        self.print(f"[bold red]Error:[/bold red] {message}")
