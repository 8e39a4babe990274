"""hookstream runtime entrypoint.

This module provides the Granian factory entrypoint
``hookstream.runtime:create_app`` and the ``hookstream`` console script.

Configuration is driven by environment variables:

- ``HOOKSTREAM_HOST``: Bind address (default ``0.0.0.0``)
- ``HOOKSTREAM_PORT``: Listen port (default ``8080``)
- ``HOOKSTREAM_HTTP_TLS_CERT`` / ``HOOKSTREAM_HTTP_TLS_KEY``: Serve HTTPS
- ``HOOKSTREAM_LOG_LEVEL``: Log level (default ``INFO``)
- ``HOOKSTREAM_NATS_URL``: NATS address (default ``nats://localhost:4222``)
- ``HOOKSTREAM_NATS_TLS_CERT`` / ``HOOKSTREAM_NATS_TLS_KEY``: NATS mutual TLS
- ``HOOKSTREAM_STREAM_CLUSTER``: JetStream domain (optional)
- ``HOOKSTREAM_STREAM_CLIENT``: Client name (default ``github-webhook``)
- ``HOOKSTREAM_CHANNEL_TEMPLATE``: Channel template (default ``github.events``)
- ``HOOKSTREAM_GITHUB_SECRET``: Shared webhook secret (optional)
- ``HOOKSTREAM_TRANSPORT_BACKEND``: ``nats`` (default) or ``memory``

Run the service with ``hookstream`` or ``python -m hookstream.runtime``.
"""

from __future__ import annotations

import typing as typ

from hookstream.config import ListenerConfig, RelayConfig
from hookstream.errors import StartupError
from hookstream.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)
from hookstream.webhook import ChannelTemplate

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "main"]

logger = get_logger(__name__)


def create_app() -> falcon.asgi.App:
    """Create the relay application from environment configuration.

    Granian calls this once per worker process.  The publisher is built
    here but connected during ASGI lifespan startup.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    Raises
    ------
    StartupError
        If the configuration or channel template is invalid.

    """
    from hookstream.api.app import AppDependencies
    from hookstream.api.app import create_app as _create_api_app
    from hookstream.transport import create_publisher

    config = RelayConfig.from_env()
    deps = AppDependencies(
        publisher=create_publisher(config),
        template=ChannelTemplate.compile(config.channel_template),
        secret=config.secret,
    )
    return _create_api_app(deps)


def _load_config() -> tuple[ListenerConfig, RelayConfig]:
    """Load and validate all settings, exiting on invalid configuration."""
    try:
        listener = ListenerConfig.from_env()
        relay = RelayConfig.from_env()
        ChannelTemplate.compile(relay.channel_template)
    except StartupError as exc:
        # Validation failures need no traceback
        log_error(logger, "Invalid configuration: %s", exc)
        raise SystemExit(1) from exc
    return listener, relay


def main() -> None:
    """Start the relay server using Granian.

    Configuration and the channel template are validated before the
    listener binds, so a bad template stops the process immediately.
    """
    from granian import Granian
    from granian.constants import Interfaces

    listener, relay = _load_config()

    normalized_level, invalid_level = configure_logging(listener.log_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid HOOKSTREAM_LOG_LEVEL %r, falling back to %s",
            listener.log_level,
            normalized_level,
        )

    if relay.secret is None:
        log_warning(
            logger, "HOOKSTREAM_GITHUB_SECRET is unset; signatures are not verified"
        )

    log_info(
        logger,
        "Starting hookstream on %s:%d (tls=%s, backend=%s, channel=%r, log_level=%s)",
        listener.host,
        listener.port,
        listener.tls_enabled,
        relay.backend,
        relay.channel_template,
        normalized_level,
    )

    server = Granian(
        "hookstream.runtime:create_app",
        address=listener.host,
        port=listener.port,
        interface=Interfaces.ASGI,
        factory=True,
        ssl_cert=listener.tls_cert,
        ssl_key=listener.tls_key,
    )
    server.serve()


if __name__ == "__main__":
    main()
