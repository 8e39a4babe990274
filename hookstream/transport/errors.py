"""Errors raised by channel publishers."""

from __future__ import annotations

from http import HTTPStatus

from hookstream.errors import RelayError, StartupError


class PublishError(RelayError):
    """Raised when a payload could not be published.

    Maps to HTTP 503 so the webhook source retries per its own policy.

    Attributes
    ----------
    channel
        Channel the publish targeted, when known.

    """

    status = HTTPStatus.SERVICE_UNAVAILABLE

    def __init__(self, message: str, *, channel: str | None = None) -> None:
        """Initialise with a message and the targeted channel."""
        self.channel = channel
        super().__init__(message)

    @classmethod
    def not_connected(cls, channel: str) -> PublishError:
        """Return an error for a publish attempted before startup."""
        return cls("publisher is not connected", channel=channel)

    @classmethod
    def transport_failure(cls, channel: str, detail: object) -> PublishError:
        """Return an error wrapping a transport failure for *channel*."""
        return cls(f"publish error on {channel!r}: {detail}", channel=channel)


class TransportStartupError(StartupError):
    """Raised when the publisher cannot connect at startup."""

    @classmethod
    def connect_failed(cls, url: str, detail: object) -> TransportStartupError:
        """Return an error for an unreachable or rejecting message bus."""
        return cls(f"could not connect to NATS at {url}: {detail}")

    @classmethod
    def bad_tls_material(cls, detail: object) -> TransportStartupError:
        """Return an error for unreadable client certificate or key files."""
        return cls(f"could not load NATS TLS client certificate: {detail}")
