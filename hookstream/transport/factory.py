"""Factory for building the configured ChannelPublisher."""

from __future__ import annotations

import typing as typ

from hookstream.config import TransportBackend
from hookstream.transport.memory import InMemoryPublisher

if typ.TYPE_CHECKING:
    from hookstream.config import RelayConfig
    from hookstream.transport.protocol import ChannelPublisher


def create_publisher(config: RelayConfig) -> ChannelPublisher:
    """Create the publisher selected by ``config.backend``.

    The returned publisher is not connected; the application's startup
    hook calls ``start()``.

    Examples
    --------
    >>> from hookstream.config import RelayConfig, TransportBackend
    >>> publisher = create_publisher(RelayConfig(backend=TransportBackend.MEMORY))
    >>> isinstance(publisher, InMemoryPublisher)
    True

    """
    if config.backend is TransportBackend.MEMORY:
        return InMemoryPublisher()

    from hookstream.transport.nats_publisher import NatsPublisher

    return NatsPublisher(config.nats)
