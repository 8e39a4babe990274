"""Application factory for the hookstream Falcon ASGI application.

This module provides ``create_app()`` which wires the relay resource,
publisher lifespan middleware, and error handler into one Falcon app.  All
collaborators are passed in through :class:`AppDependencies`, so tests can
substitute a fake publisher.

Usage
-----
Create an app around an in-memory publisher::

    from hookstream.api.app import AppDependencies, create_app
    from hookstream.transport import InMemoryPublisher
    from hookstream.webhook import ChannelTemplate

    deps = AppDependencies(
        publisher=InMemoryPublisher(),
        template=ChannelTemplate.compile("{{.Owner}}.{{.Repo}}.{{.Event}}"),
    )
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from hookstream.api.errors import RelayErrorHandler
from hookstream.api.middleware import PublisherLifecycle
from hookstream.api.observability import RelayEventLogger
from hookstream.api.resources import WebhookRelayResource
from hookstream.errors import RelayError

if typ.TYPE_CHECKING:
    from hookstream.transport.protocol import ChannelPublisher
    from hookstream.webhook import ChannelTemplate

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Startup-time collaborators for the relay application.

    Attributes
    ----------
    publisher
        Transport handle, connected by the lifespan middleware.
    template
        Compiled channel template.
    secret
        Shared webhook secret; ``None`` disables authentication.
    event_logger
        Optional event logger shared by the resource and error handler.

    """

    publisher: ChannelPublisher
    template: ChannelTemplate
    secret: str | None = None
    event_logger: RelayEventLogger | None = None


def create_app(dependencies: AppDependencies) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Every path and method is routed to :class:`WebhookRelayResource`
    through a sink, which rejects anything but POST.

    Parameters
    ----------
    dependencies
        Application collaborators.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    events = dependencies.event_logger or RelayEventLogger()

    app = falcon.asgi.App(  # type: ignore[no-matching-overload]  # Falcon stubs
        middleware=[PublisherLifecycle(dependencies.publisher)]
    )

    resource = WebhookRelayResource(
        template=dependencies.template,
        publisher=dependencies.publisher,
        secret=dependencies.secret,
        event_logger=events,
    )
    app.add_sink(resource.on_request)

    app.add_error_handler(RelayError, RelayErrorHandler(events).handle)

    return app
