"""Base exceptions shared by every stage of the relay pipeline.

Each request-time failure is a :class:`RelayError` carrying the HTTP status
the webhook source receives.  Failures detected before the listener binds
are :class:`StartupError` and terminate the process.
"""

from __future__ import annotations

from http import HTTPStatus


class RelayError(Exception):
    """Base class for errors that end a single webhook request.

    Attributes
    ----------
    status
        HTTP status reported to the webhook source.

    """

    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR


class StartupError(Exception):
    """Raised when the relay cannot start with its current configuration."""
