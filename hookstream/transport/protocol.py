"""ChannelPublisher protocol for the relay's outbound transport."""

from __future__ import annotations

import typing as typ


@typ.runtime_checkable
class ChannelPublisher(typ.Protocol):
    """Long-lived handle that publishes payloads onto named channels.

    One instance is created per process and shared by every in-flight
    request, so ``publish`` must be safe to await concurrently.

    Examples
    --------
    >>> from hookstream.transport import ChannelPublisher, InMemoryPublisher
    >>> isinstance(InMemoryPublisher(), ChannelPublisher)
    True

    """

    async def start(self) -> None:
        """Open transport connections.

        Raises
        ------
        TransportStartupError
            If the transport cannot be reached.

        """
        ...

    async def publish(self, channel: str, payload: bytes) -> None:
        """Publish *payload* on *channel* and wait for acknowledgement.

        Raises
        ------
        PublishError
            If the transport is unavailable or rejects the message.

        """
        ...

    async def close(self) -> None:
        """Release transport connections."""
        ...
