"""Environment configuration for the relay.

All settings are read once at process start and never reloaded.  Empty or
whitespace-only variables are treated as unset.

Usage
-----
>>> import os
>>> os.environ["HOOKSTREAM_CHANNEL_TEMPLATE"] = "{{.Owner}}.{{.Repo}}"
>>> RelayConfig.from_env().channel_template
'{{.Owner}}.{{.Repo}}'

"""

from __future__ import annotations

import dataclasses
import enum
import os
from pathlib import Path

from hookstream.errors import StartupError
from hookstream.webhook.channel import DEFAULT_CHANNEL_TEMPLATE

_DEFAULT_HOST = "0.0.0.0"  # noqa: S104 - bind all interfaces for container
_DEFAULT_PORT = 8080
_DEFAULT_NATS_URL = "nats://localhost:4222"
_DEFAULT_CLIENT_ID = "github-webhook"

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


class ConfigError(StartupError):
    """Raised when environment configuration is invalid."""

    @classmethod
    def invalid_port(cls, raw: str) -> ConfigError:
        """Return an error for a port outside 1-65535 or not an integer."""
        return cls(
            f"Invalid HOOKSTREAM_PORT value: {raw!r} (must be {_MIN_PORT}-{_MAX_PORT})"
        )

    @classmethod
    def incomplete_tls_pair(cls, prefix: str) -> ConfigError:
        """Return an error when only one half of a TLS pair is configured."""
        return cls(f"{prefix}_TLS_CERT and {prefix}_TLS_KEY must be set together")

    @classmethod
    def invalid_backend(cls, name: str) -> ConfigError:
        """Return an error for an unrecognised transport backend."""
        valid = ", ".join(f"'{backend}'" for backend in TransportBackend)
        return cls(f"Invalid transport backend {name!r}. Valid options are: {valid}")


class TransportBackend(enum.StrEnum):
    """Publisher implementations selectable by configuration."""

    NATS = "nats"
    MEMORY = "memory"


def _env(name: str) -> str | None:
    raw = os.environ.get(name, "")
    value = raw.strip()
    return value or None


def _tls_pair(prefix: str) -> tuple[Path | None, Path | None]:
    cert = _env(f"{prefix}_TLS_CERT")
    key = _env(f"{prefix}_TLS_KEY")
    if (cert is None) != (key is None):
        raise ConfigError.incomplete_tls_pair(prefix)
    if cert is None or key is None:
        return (None, None)
    return (Path(cert), Path(key))


@dataclasses.dataclass(frozen=True, slots=True)
class ListenerConfig:
    """Inbound HTTP listener settings.

    Attributes
    ----------
    host
        Bind address.
    port
        Bind port.
    tls_cert, tls_key
        Certificate and key for serving HTTPS.  Both or neither.
    log_level
        Raw log level; normalized when logging is configured.

    """

    host: str = _DEFAULT_HOST
    port: int = _DEFAULT_PORT
    tls_cert: Path | None = None
    tls_key: Path | None = None
    log_level: str = "INFO"

    @property
    def tls_enabled(self) -> bool:
        """Return True when the listener serves HTTPS."""
        return self.tls_cert is not None and self.tls_key is not None

    @staticmethod
    def _parse_port(raw: str) -> int:
        try:
            port = int(raw)
        except ValueError as exc:
            raise ConfigError.invalid_port(raw) from exc
        if not _MIN_PORT <= port <= _MAX_PORT:
            raise ConfigError.invalid_port(raw)
        return port

    @classmethod
    def from_env(cls) -> ListenerConfig:
        """Build listener settings from the environment.

        Reads ``HOOKSTREAM_HOST``, ``HOOKSTREAM_PORT``,
        ``HOOKSTREAM_HTTP_TLS_CERT``, ``HOOKSTREAM_HTTP_TLS_KEY`` and
        ``HOOKSTREAM_LOG_LEVEL``.

        Raises
        ------
        ConfigError
            If the port is invalid or the TLS pair is incomplete.

        """
        raw_port = _env("HOOKSTREAM_PORT")
        port = _DEFAULT_PORT if raw_port is None else cls._parse_port(raw_port)
        tls_cert, tls_key = _tls_pair("HOOKSTREAM_HTTP")
        return cls(
            host=_env("HOOKSTREAM_HOST") or _DEFAULT_HOST,
            port=port,
            tls_cert=tls_cert,
            tls_key=tls_key,
            log_level=_env("HOOKSTREAM_LOG_LEVEL") or "INFO",
        )


@dataclasses.dataclass(frozen=True, slots=True)
class NatsConfig:
    """Connection settings for the NATS message bus.

    Attributes
    ----------
    url
        NATS server address.
    tls_cert, tls_key
        Client certificate and key for mutual TLS.  Both or neither.
    cluster_id
        Streaming cluster identifier, used as the JetStream domain.  ``None``
        selects the server's default domain.
    client_id
        Client identifier, sent as the NATS connection name.

    """

    url: str = _DEFAULT_NATS_URL
    tls_cert: Path | None = None
    tls_key: Path | None = None
    cluster_id: str | None = None
    client_id: str = _DEFAULT_CLIENT_ID

    @classmethod
    def from_env(cls) -> NatsConfig:
        """Build NATS settings from ``HOOKSTREAM_NATS_*`` and ``HOOKSTREAM_STREAM_*``."""
        tls_cert, tls_key = _tls_pair("HOOKSTREAM_NATS")
        return cls(
            url=_env("HOOKSTREAM_NATS_URL") or _DEFAULT_NATS_URL,
            tls_cert=tls_cert,
            tls_key=tls_key,
            cluster_id=_env("HOOKSTREAM_STREAM_CLUSTER"),
            client_id=_env("HOOKSTREAM_STREAM_CLIENT") or _DEFAULT_CLIENT_ID,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class RelayConfig:
    """Settings for the webhook relay pipeline.

    Attributes
    ----------
    channel_template
        Channel template source, compiled at startup.
    secret
        Shared webhook secret.  ``None`` disables signature checks and makes
        any presented signature a rejection.
    backend
        Publisher implementation.
    nats
        NATS settings, used by the ``nats`` backend.

    """

    channel_template: str = DEFAULT_CHANNEL_TEMPLATE
    secret: str | None = None
    backend: TransportBackend = TransportBackend.NATS
    nats: NatsConfig = dataclasses.field(default_factory=NatsConfig)

    @staticmethod
    def _parse_backend() -> TransportBackend:
        raw = _env("HOOKSTREAM_TRANSPORT_BACKEND")
        if raw is None:
            return TransportBackend.NATS
        try:
            return TransportBackend(raw.lower())
        except ValueError as exc:
            raise ConfigError.invalid_backend(raw) from exc

    @classmethod
    def from_env(cls) -> RelayConfig:
        """Build relay settings from the environment.

        Reads ``HOOKSTREAM_CHANNEL_TEMPLATE``, ``HOOKSTREAM_GITHUB_SECRET``,
        ``HOOKSTREAM_TRANSPORT_BACKEND`` and the NATS variables.

        Raises
        ------
        ConfigError
            If the backend name or a TLS pair is invalid.

        """
        # Secrets are used verbatim, surrounding whitespace included.
        raw_secret = os.environ.get("HOOKSTREAM_GITHUB_SECRET", "")
        secret = raw_secret if raw_secret.strip() else None
        return cls(
            channel_template=_env("HOOKSTREAM_CHANNEL_TEMPLATE")
            or DEFAULT_CHANNEL_TEMPLATE,
            secret=secret,
            backend=cls._parse_backend(),
            nats=NatsConfig.from_env(),
        )


__all__ = [
    "ConfigError",
    "ListenerConfig",
    "NatsConfig",
    "RelayConfig",
    "TransportBackend",
]
