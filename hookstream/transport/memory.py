"""In-process publisher for local runs and tests."""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True, slots=True)
class PublishedMessage:
    """A payload recorded by :class:`InMemoryPublisher`."""

    channel: str
    payload: bytes


class InMemoryPublisher:
    """Record published payloads in memory instead of sending them.

    Every call to :meth:`publish` appends a message; nothing is
    deduplicated.

    Examples
    --------
    >>> import asyncio
    >>> publisher = InMemoryPublisher()
    >>> asyncio.run(publisher.publish("octo.reef.push", b"{}"))
    >>> publisher.messages
    [PublishedMessage(channel='octo.reef.push', payload=b'{}')]

    """

    def __init__(self) -> None:
        """Initialise with an empty message log."""
        self.messages: list[PublishedMessage] = []
        self.started = False

    async def start(self) -> None:
        """Mark the publisher as started."""
        self.started = True

    async def publish(self, channel: str, payload: bytes) -> None:
        """Record *payload* for *channel*."""
        self.messages.append(PublishedMessage(channel=channel, payload=payload))

    async def close(self) -> None:
        """Mark the publisher as stopped; recorded messages are kept."""
        self.started = False
