"""Catch-all webhook relay resource.

Each delivery runs through one forward-only pipeline::

    method check -> read body -> authenticate -> ping filter
        -> decode -> render channel -> publish

Any stage may raise a :class:`~hookstream.errors.RelayError`, which ends the
request with that error's status and no further work.

Usage
-----
Mount the resource as a sink so it receives every path::

    resource = WebhookRelayResource(template=template, publisher=publisher)
    app.add_sink(resource.on_request)

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

from hookstream.api.errors import ALLOWED_METHOD, BodyReadError, MethodError
from hookstream.api.observability import RelayEventLogger
from hookstream.webhook import authenticate, decode_envelope, render_channel

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from hookstream.transport.protocol import ChannelPublisher
    from hookstream.webhook import ChannelTemplate

__all__ = [
    "EVENT_HEADER",
    "PING_EVENT",
    "SIGNATURE_256_HEADER",
    "SIGNATURE_HEADER",
    "WebhookRelayResource",
]

SIGNATURE_HEADER = "X-Hub-Signature"
SIGNATURE_256_HEADER = "X-Hub-Signature-256"
EVENT_HEADER = "X-GitHub-Event"
PING_EVENT = "ping"


async def read_body(req: Request) -> bytes:
    """Read the whole request body into memory.

    No size limit is applied beyond the server's own.  Falcon ends the
    stream early when the client disconnects, so a body shorter than the
    declared ``Content-Length`` is treated as a failed read.

    Raises
    ------
    BodyReadError
        If the body stream fails or ends before ``Content-Length`` bytes.

    """
    try:
        body = await req.stream.read()
    except OSError as exc:
        raise BodyReadError.from_exception(exc) from exc
    expected = req.content_length
    if expected is not None and len(body) < expected:
        raise BodyReadError.truncated(len(body), expected)
    return body


class WebhookRelayResource:
    """Authenticate, route, and publish GitHub webhook deliveries.

    Parameters
    ----------
    template
        Compiled channel template.
    publisher
        Shared transport handle.
    secret
        Shared webhook secret, or ``None`` to run unauthenticated.
    event_logger
        Logger receiving published and ignored events.

    """

    def __init__(
        self,
        *,
        template: ChannelTemplate,
        publisher: ChannelPublisher,
        secret: str | None = None,
        event_logger: RelayEventLogger | None = None,
    ) -> None:
        """Initialise the resource with its startup-time collaborators."""
        self._template = template
        self._publisher = publisher
        self._secret = secret
        self._events = event_logger or RelayEventLogger()

    async def on_request(
        self, req: Request, resp: Response, **_params: typ.Any
    ) -> None:
        """Relay one delivery, whatever its path.

        Parameters
        ----------
        req
            Falcon request carrying the delivery.
        resp
            Falcon response; only its status is set.
        _params
            Sink route parameters (unused).

        """
        if req.method != ALLOWED_METHOD:
            raise MethodError.not_allowed(req.method)

        body = await read_body(req)

        signature = req.get_header(SIGNATURE_256_HEADER) or req.get_header(
            SIGNATURE_HEADER
        )
        authenticate(signature, self._secret, body)

        event = req.get_header(EVENT_HEADER) or ""
        if event == PING_EVENT:
            # Pings carry no repository block
            self._events.log_ignored(event=event)
            resp.status = HTTPStatus.OK
            return

        envelope = decode_envelope(body)
        channel = render_channel(self._template, envelope.owner, envelope.repo, event)
        await self._publisher.publish(channel, body)

        self._events.log_published(channel=channel, event=event, size=len(body))
        resp.status = HTTPStatus.OK
