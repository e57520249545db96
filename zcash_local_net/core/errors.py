"""CLI error handling with actionable hints."""

import functools

import click

from zcash_local_net.domain.exceptions import LocalNetError, ProcessFailedError


class LocalNetCliError(click.ClickException):
    """CLI error with actionable hint for users.

    Attributes:
        message: The primary error message.
        hint: Optional actionable suggestion for the user.
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint

    def format_message(self) -> str:
        """Format the error message with hint if present."""
        msg = self.message
        if self.hint:
            msg += f"\nHint: {self.hint}"
        return msg


def handle_cli_errors(command_name: str):
    """Decorator converting library errors into LocalNetCliError.

    Args:
        command_name: Name of the command for error messages.

    Returns:
        Decorated function with error handling.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except LocalNetCliError:
                raise
            except ProcessFailedError as e:
                # Keep the daemon's own output; it is usually the only clue
                raise LocalNetCliError(str(e), hint=e.hint) from e
            except LocalNetError as e:
                raise LocalNetCliError(e.message, hint=e.hint) from e
            except ValueError as e:
                raise LocalNetCliError(f"Invalid value in {command_name}: {e}") from e

        return wrapper

    return decorator
