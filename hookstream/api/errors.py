"""Listener errors and the Falcon handler for every relay error.

Pipeline stages raise :class:`~hookstream.errors.RelayError` subclasses at
the point of detection.  :class:`RelayErrorHandler` turns them into a bare
status code: no response body is written for any outcome.

Usage
-----
Register the handler on the Falcon app::

    from hookstream.api.errors import RelayErrorHandler
    from hookstream.errors import RelayError

    app.add_error_handler(RelayError, RelayErrorHandler().handle)

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

from hookstream.api.observability import RelayEventLogger
from hookstream.errors import RelayError

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["BodyReadError", "MethodError", "RelayErrorHandler"]

ALLOWED_METHOD = "POST"


class MethodError(RelayError):
    """Raised for any request method other than POST."""

    status = HTTPStatus.METHOD_NOT_ALLOWED

    @classmethod
    def not_allowed(cls, method: str) -> MethodError:
        """Return an error for *method*."""
        return cls(f"method {method} not allowed")


class BodyReadError(RelayError):
    """Raised when the request body cannot be read."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR

    @classmethod
    def from_exception(cls, exc: BaseException) -> BodyReadError:
        """Return an error wrapping the underlying I/O failure."""
        return cls(f"error reading body: {exc}")

    @classmethod
    def truncated(cls, received: int, expected: int) -> BodyReadError:
        """Return an error for a body shorter than its Content-Length."""
        return cls(
            f"error reading body: received {received} of {expected} bytes"
        )


class RelayErrorHandler:
    """Map relay errors to their HTTP status and log the outcome.

    Parameters
    ----------
    event_logger
        Logger receiving one rejection or failure event per error.

    """

    def __init__(self, event_logger: RelayEventLogger | None = None) -> None:
        """Initialise with an optional event logger."""
        self._events = event_logger or RelayEventLogger()

    async def handle(
        self,
        req: Request,
        resp: Response,
        ex: RelayError,
        _params: dict[str, typ.Any],
    ) -> None:
        """Set the status for *ex* and leave the body empty.

        Parameters
        ----------
        req
            Falcon request, used for log context.
        resp
            Falcon response whose status is set.
        ex
            The relay error raised by the pipeline.
        _params
            URI template parameters (unused).

        """
        self._events.log_outcome(method=req.method, path=req.path, error=ex)
        resp.status = ex.status
        if isinstance(ex, MethodError):
            resp.set_header("Allow", ALLOWED_METHOD)
