"""Exception handling for the CLI: translate domain errors to exit codes.

Each domain exception maps to a specific exit status and a single
``error: <message>`` line on stderr.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Callable, TypeVar

import click

from git_fallback.domain.exceptions import (
    AccessDeniedError,
    AlreadyExistsError,
    BaseNotFoundError,
    ConfigurationError,
    GitFallbackError,
    InvalidObjectError,
    InvalidRemoteUrlError,
    MaterializationError,
    NativeGitError,
    NotAGitRepositoryError,
    NotFoundError,
    TransportError,
    UnsupportedEncodingError,
    UnsupportedHostError,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., object])

# First match wins, so subclasses must precede their bases.
_EXCEPTION_EXIT_CODES: list[tuple[type[GitFallbackError], int]] = [
    (BaseNotFoundError, 3),
    (NotFoundError, 2),
    (AlreadyExistsError, 4),
    (InvalidObjectError, 5),
    (UnsupportedEncodingError, 6),
    (MaterializationError, 7),
    (AccessDeniedError, 8),
    (TransportError, 9),
    (NativeGitError, 10),
    (NotAGitRepositoryError, 128),
    (InvalidRemoteUrlError, 128),
    (UnsupportedHostError, 64),
    (ConfigurationError, 78),
]


def exit_code_for(exc: GitFallbackError) -> int:
    for exc_type, code in _EXCEPTION_EXIT_CODES:
        if isinstance(exc, exc_type):
            return code
    return 1


def handle_errors(func: F) -> F:
    """Decorate a click command so domain errors end the process cleanly."""

    @wraps(func)
    def wrapper(*args, **kwargs):  # type: ignore[no-untyped-def]
        try:
            return func(*args, **kwargs)
        except GitFallbackError as exc:
            logger.info("%s: %s", type(exc).__name__, exc)
            click.echo(f"error: {exc}", err=True)
            raise SystemExit(exit_code_for(exc)) from exc
        except (click.ClickException, click.Abort, click.exceptions.Exit):
            raise
        except Exception:
            logger.exception("Unhandled exception")
            click.echo("error: an unexpected error occurred", err=True)
            raise SystemExit(1) from None

    return wrapper  # type: ignore[return-value]
