"""Outbound publishers for relayed webhook payloads."""

from __future__ import annotations

from .errors import PublishError, TransportStartupError
from .factory import create_publisher
from .memory import InMemoryPublisher, PublishedMessage
from .protocol import ChannelPublisher

__all__ = [
    "ChannelPublisher",
    "InMemoryPublisher",
    "PublishError",
    "PublishedMessage",
    "TransportStartupError",
    "create_publisher",
]
