"""Lifespan middleware that owns the publisher's connection.

The publisher is connected once per worker process when the ASGI server
sends ``lifespan.startup`` and closed on ``lifespan.shutdown``.  A startup
failure propagates to Falcon, which reports ``lifespan.startup.failed`` so
the server exits before serving any delivery.

Usage
-----
Register the middleware when creating the Falcon app::

    app = falcon.asgi.App(middleware=[PublisherLifecycle(publisher)])

"""

from __future__ import annotations

import typing as typ

from hookstream.errors import StartupError
from hookstream.logging import get_logger, log_error, log_info

if typ.TYPE_CHECKING:
    from hookstream.transport.protocol import ChannelPublisher

__all__ = ["PublisherLifecycle"]

logger = get_logger(__name__)


class PublisherLifecycle:
    """Falcon middleware connecting and closing a :class:`ChannelPublisher`.

    Parameters
    ----------
    publisher
        Transport handle shared by all requests.

    """

    def __init__(self, publisher: ChannelPublisher) -> None:
        """Initialise the middleware with the shared publisher."""
        self._publisher = publisher

    async def process_startup(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Connect the publisher before the server accepts requests.

        Raises
        ------
        StartupError
            If the publisher cannot connect.

        """
        try:
            await self._publisher.start()
        except StartupError as exc:
            log_error(logger, "Publisher startup failed: %s", exc)
            raise
        log_info(logger, "Publisher %s started", type(self._publisher).__name__)

    async def process_shutdown(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Close the publisher when the server shuts down."""
        await self._publisher.close()
