"""NATS JetStream publisher.

The publisher owns one NATS connection and the JetStream context built on
it.  Both are opened by :meth:`NatsPublisher.start` during application
startup and shared by every request.  nats-py multiplexes concurrent
publishes over a single connection within one event loop, so no lock is
held around :meth:`NatsPublisher.publish`.

Usage
-----
Open, publish, and close from a running event loop::

    publisher = NatsPublisher(NatsConfig(url="nats://localhost:4222"))
    await publisher.start()
    await publisher.publish("octo.reef.push", body)
    await publisher.close()

"""

from __future__ import annotations

import ssl
import typing as typ

import nats
from nats.errors import Error as NatsError

from hookstream.logging import get_logger, log_info, log_warning
from hookstream.transport.errors import PublishError, TransportStartupError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from nats.aio.client import Client as NatsClient
    from nats.js import JetStreamContext

    from hookstream.config import NatsConfig

ConnectFn: typ.TypeAlias = "cabc.Callable[..., cabc.Awaitable[NatsClient]]"

logger = get_logger(__name__)


def build_tls_context(config: NatsConfig) -> ssl.SSLContext | None:
    """Return a client TLS context carrying the configured certificate pair.

    Raises
    ------
    TransportStartupError
        If the certificate or key cannot be loaded.

    """
    if config.tls_cert is None or config.tls_key is None:
        return None
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    try:
        context.load_cert_chain(certfile=config.tls_cert, keyfile=config.tls_key)
    except OSError as exc:
        # ssl.SSLError is an OSError subclass
        raise TransportStartupError.bad_tls_material(exc) from exc
    return context


class NatsPublisher:
    """Publish relay payloads to NATS JetStream with synchronous acks.

    Parameters
    ----------
    config
        NATS connection settings.
    connect
        Coroutine function used to open the connection; defaults to
        ``nats.connect``.

    """

    def __init__(self, config: NatsConfig, *, connect: ConnectFn | None = None) -> None:
        """Initialise without connecting."""
        self._config = config
        self._connect: ConnectFn = connect if connect is not None else nats.connect
        self._client: NatsClient | None = None
        self._jetstream: JetStreamContext | None = None

    @property
    def connected(self) -> bool:
        """Return True once :meth:`start` has succeeded."""
        return self._jetstream is not None

    async def start(self) -> None:
        """Connect to NATS and open the JetStream context.

        Calling ``start`` on a connected publisher is a no-op.

        Raises
        ------
        TransportStartupError
            If the server is unreachable or rejects the connection.

        """
        if self.connected:
            return
        tls = build_tls_context(self._config)
        try:
            client = await self._connect(
                servers=[self._config.url],
                name=self._config.client_id,
                tls=tls,
            )
        except (NatsError, OSError) as exc:
            raise TransportStartupError.connect_failed(self._config.url, exc) from exc
        self._client = client
        self._jetstream = client.jetstream(domain=self._config.cluster_id)
        log_info(
            logger,
            "Connected to NATS at %s (client=%s, domain=%s)",
            self._config.url,
            self._config.client_id,
            self._config.cluster_id,
        )

    async def publish(self, channel: str, payload: bytes) -> None:
        """Publish *payload* on *channel* and wait for the JetStream ack.

        Raises
        ------
        PublishError
            If the publisher is not connected, the server has no stream for
            the subject, or the ack does not arrive.

        """
        if self._jetstream is None:
            raise PublishError.not_connected(channel)
        try:
            await self._jetstream.publish(channel, payload)
        except (NatsError, OSError) as exc:
            # TimeoutError is an OSError subclass
            raise PublishError.transport_failure(channel, exc) from exc

    async def close(self) -> None:
        """Drain and close the NATS connection."""
        client, self._client, self._jetstream = self._client, None, None
        if client is None:
            return
        try:
            await client.drain()
        except (NatsError, OSError) as exc:
            log_warning(logger, "NATS drain failed: %s", exc)


__all__ = ["NatsPublisher", "build_tls_context"]
