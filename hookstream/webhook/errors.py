"""Errors raised while authenticating and routing a webhook delivery."""

from __future__ import annotations

from http import HTTPStatus

from hookstream.errors import RelayError, StartupError

# Preview length for invalid templates in error messages
_TEMPLATE_PREVIEW_LIMIT = 80


class AuthError(RelayError):
    """Raised when a delivery fails signature authentication."""

    status = HTTPStatus.UNAUTHORIZED

    @classmethod
    def missing_signature(cls) -> AuthError:
        """Return an error for a secured relay receiving no signature."""
        return cls("signature not present")

    @classmethod
    def invalid_signature(cls) -> AuthError:
        """Return an error for a signature that does not match the body."""
        return cls("signature did not match")

    @classmethod
    def unexpected_signature(cls) -> AuthError:
        """Return an error for a signature sent to a relay with no secret."""
        return cls("signature present but no secret is configured")


class DecodeError(RelayError):
    """Raised when the payload lacks the repository fields used for routing."""

    status = HTTPStatus.UNPROCESSABLE_ENTITY

    @classmethod
    def from_msgspec(cls, detail: str) -> DecodeError:
        """Return an error wrapping a msgspec decode or validation message."""
        return cls(f"could not parse event: {detail}")


class RenderError(RelayError):
    """Raised when the channel template cannot produce a channel name."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR

    @classmethod
    def empty_channel(cls, template: str) -> RenderError:
        """Return an error for a template that rendered to an empty string."""
        return cls(f"channel template {template!r} rendered an empty channel name")


class TemplateSyntaxError(StartupError):
    """Raised when the configured channel template cannot be compiled."""

    @staticmethod
    def _preview(source: str) -> str:
        if len(source) > _TEMPLATE_PREVIEW_LIMIT:
            return source[:_TEMPLATE_PREVIEW_LIMIT] + "..."
        return source

    @classmethod
    def unknown_field(cls, source: str, field: str) -> TemplateSyntaxError:
        """Return an error for a placeholder naming an unsupported field."""
        return cls(
            f"bad channel template {cls._preview(source)!r}: "
            f"unknown field {field!r} (expected Owner, Repo or Event)"
        )

    @classmethod
    def unbalanced(cls, source: str, offset: int) -> TemplateSyntaxError:
        """Return an error for an unterminated or malformed placeholder."""
        return cls(
            f"bad channel template {cls._preview(source)!r}: "
            f"malformed placeholder at offset {offset}"
        )

    @classmethod
    def empty(cls) -> TemplateSyntaxError:
        """Return an error for an empty template."""
        return cls("bad channel template: template must be non-empty")
