"""Authentication and routing for GitHub webhook deliveries."""

from __future__ import annotations

from .channel import (
    DEFAULT_CHANNEL_TEMPLATE,
    ChannelTemplate,
    ChannelVars,
    render_channel,
)
from .envelope import WebhookEnvelope, decode_envelope
from .errors import AuthError, DecodeError, RenderError, TemplateSyntaxError
from .signature import authenticate, sign_body, verify_signature

__all__ = [
    "DEFAULT_CHANNEL_TEMPLATE",
    "AuthError",
    "ChannelTemplate",
    "ChannelVars",
    "DecodeError",
    "RenderError",
    "TemplateSyntaxError",
    "WebhookEnvelope",
    "authenticate",
    "decode_envelope",
    "render_channel",
    "sign_body",
    "verify_signature",
]
