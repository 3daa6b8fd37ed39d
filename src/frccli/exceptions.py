"""Exception hierarchy for frccli.

All exceptions inherit from :class:`FrccliError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`frccli.exit_codes`.
The top-level error handler in :func:`frccli.app.main` catches
``FrccliError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    FrccliError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- AuthError           (exit 3)
    +-- NotFoundError       (exit 4)
    +-- ServerError         (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- PathTraversalError  (exit 7)
    +-- ConfigError         (exit 1)
"""

from __future__ import annotations

from typing import Any, Sequence

from frccli.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_PATH_ERROR,
    EXIT_SERVER_ERROR,
)


class FrccliError(Exception):
    """Base exception for all frccli errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`frccli.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(FrccliError):
    """Raised for invalid CLI arguments or query parameters."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(FrccliError):
    """Raised when the API rejects the token (401/403) or no token is configured."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(FrccliError):
    """Raised when the API returns HTTP 404 (resource not found)."""

    exit_code = EXIT_NOT_FOUND


class ServerError(FrccliError):
    """Raised when the API returns an HTTP 5xx server error."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(FrccliError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ConfigError(FrccliError):
    """Raised for configuration problems (invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE


class PathTraversalError(FrccliError):
    """Raised when a property path cannot be followed through a record.

    Fired for an empty path, for an intermediate segment that is missing or
    lands on ``None`` / a primitive, and for a segment applied to a value that
    is not a container. A missing *terminal* key is never an error.

    Attributes:
        path: The full path that was being traversed.
        index: Position of the offending segment within :attr:`path`.
    """

    exit_code = EXIT_PATH_ERROR

    def __init__(self, message: str, path: Sequence[Any] = (), index: int = 0):
        super().__init__(message)
        self.path = tuple(path)
        self.index = index
