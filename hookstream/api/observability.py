"""Structured log events for webhook deliveries.

Every delivery ends in exactly one event: published, ignored, rejected
(4xx) or failed (5xx).  Events are emitted as ``[event.type] key=value``
lines so log aggregators can parse them.

Usage
-----
>>> events = RelayEventLogger()
>>> events.log_published(channel="octo.reef.push", event="push", size=512)

"""

from __future__ import annotations

import enum
import typing as typ

from hookstream.logging import get_logger, log_error, log_info, log_warning
from hookstream.transport.errors import PublishError

if typ.TYPE_CHECKING:
    from hookstream.errors import RelayError

logger = get_logger(__name__)

# Statuses at or above this are failures rather than rejections
_SERVER_ERROR_THRESHOLD = 500


class RelayEventType(enum.StrEnum):
    """Structured log event types for webhook deliveries."""

    PUBLISHED = "relay.webhook.published"
    IGNORED = "relay.webhook.ignored"
    REJECTED = "relay.webhook.rejected"
    FAILED = "relay.webhook.failed"


class RelayEventLogger:
    """Emit delivery outcome events via femtologging."""

    def log_published(self, *, channel: str, event: str, size: int) -> None:
        """Log a payload published on *channel*."""
        log_info(
            logger,
            "[%s] channel=%s event=%s bytes=%d",
            RelayEventType.PUBLISHED,
            channel,
            event,
            size,
        )

    def log_ignored(self, *, event: str) -> None:
        """Log a delivery accepted without publishing, such as ``ping``."""
        log_info(logger, "[%s] event=%s", RelayEventType.IGNORED, event)

    def log_outcome(self, *, method: str, path: str, error: RelayError) -> None:
        """Log a delivery that ended with *error*.

        4xx outcomes are logged at WARNING as rejections; 5xx outcomes are
        logged at ERROR as failures, with the originating exception
        attached when there is one.  Publish failures also name the
        channel.
        """
        status = int(error.status)
        if isinstance(error, PublishError) and error.channel is not None:
            log_error(
                logger,
                "[%s] method=%s path=%s status=%d channel=%s reason=%s",
                RelayEventType.FAILED,
                method,
                path,
                status,
                error.channel,
                error,
                exc_info=error.__cause__,
            )
            return
        if status >= _SERVER_ERROR_THRESHOLD:
            log_error(
                logger,
                "[%s] method=%s path=%s status=%d reason=%s",
                RelayEventType.FAILED,
                method,
                path,
                status,
                error,
                exc_info=error.__cause__,
            )
            return
        log_warning(
            logger,
            "[%s] method=%s path=%s status=%d reason=%s",
            RelayEventType.REJECTED,
            method,
            path,
            status,
            error,
        )


__all__ = ["RelayEventLogger", "RelayEventType"]
