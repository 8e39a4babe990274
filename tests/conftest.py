"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import falcon.testing
import pytest

from hookstream.api.app import AppDependencies, create_app
from hookstream.transport import InMemoryPublisher
from hookstream.webhook import ChannelTemplate

if typ.TYPE_CHECKING:
    from hookstream.transport.protocol import ChannelPublisher

ROUTED_TEMPLATE = "{{.Owner}}.{{.Repo}}.{{.Event}}"


class RelayClientFactory(typ.Protocol):
    """Callable fixture building a test client around a publisher."""

    def __call__(
        self,
        *,
        secret: str | None = None,
        template: str = ROUTED_TEMPLATE,
        publisher: ChannelPublisher | None = None,
    ) -> falcon.testing.TestClient: ...


@pytest.fixture
def publisher() -> InMemoryPublisher:
    """Return a fresh in-memory publisher."""
    return InMemoryPublisher()


@pytest.fixture
def make_client(publisher: InMemoryPublisher) -> RelayClientFactory:
    """Return a factory for relay test clients.

    Clients use the ``publisher`` fixture unless another is passed.
    """
    default_publisher = publisher

    def _make(
        *,
        secret: str | None = None,
        template: str = ROUTED_TEMPLATE,
        publisher: ChannelPublisher | None = None,
    ) -> falcon.testing.TestClient:
        deps = AppDependencies(
            publisher=publisher if publisher is not None else default_publisher,
            template=ChannelTemplate.compile(template),
            secret=secret,
        )
        return falcon.testing.TestClient(create_app(deps))

    return _make
