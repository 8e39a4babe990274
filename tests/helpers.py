"""Shared test doubles for relay tests."""

from __future__ import annotations

from hookstream.transport import PublishError


class FailingPublisher:
    """Publisher whose every publish fails like an unreachable transport."""

    def __init__(self) -> None:
        self.attempts: list[str] = []

    async def start(self) -> None:
        """Connect nothing."""

    async def publish(self, channel: str, payload: bytes) -> None:
        """Record the attempt and fail."""
        del payload
        self.attempts.append(channel)
        raise PublishError.transport_failure(channel, "nats: no servers available")

    async def close(self) -> None:
        """Close nothing."""


class FakeLogger:
    """Collects femtologging-style log calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None, bool]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        """Record the call."""
        self.calls.append((level, message, exc_info, stack_info))
        return message
