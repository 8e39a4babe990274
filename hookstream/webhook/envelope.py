"""Partial decoding of GitHub webhook payloads.

Only the fields needed to route a delivery are modelled.  msgspec ignores
any other field, so new fields added to GitHub's event schema never cause a
decode failure.  Routing fields that are absent or ``null`` decode as empty
strings: organization, team and installation events carry no repository
and are still relayed.
"""

from __future__ import annotations

import msgspec

from hookstream.webhook.errors import DecodeError


class RepositoryOwner(msgspec.Struct, frozen=True):
    """Owner of the repository that produced the event."""

    login: str | None = None


class RepositoryRef(msgspec.Struct, frozen=True):
    """Repository block of a webhook payload."""

    name: str | None = None
    owner: RepositoryOwner | None = None


class WebhookEnvelope(msgspec.Struct, frozen=True):
    """Routing view of a webhook payload.

    Attributes
    ----------
    repository
        Repository the event belongs to, or ``None`` for events that are
        not tied to one.

    """

    repository: RepositoryRef | None = None

    @property
    def owner(self) -> str:
        """Return the repository owner login, or ``""`` when absent."""
        if self.repository is None or self.repository.owner is None:
            return ""
        return self.repository.owner.login or ""

    @property
    def repo(self) -> str:
        """Return the repository name, or ``""`` when absent."""
        if self.repository is None:
            return ""
        return self.repository.name or ""


_decoder = msgspec.json.Decoder(WebhookEnvelope)


def decode_envelope(body: bytes) -> WebhookEnvelope:
    """Decode the routing fields from a raw webhook body.

    Parameters
    ----------
    body
        Raw request body as received.

    Returns
    -------
    WebhookEnvelope
        Decoded routing fields.

    Raises
    ------
    DecodeError
        If the body is not a JSON object, or a routing field present in the
        body has the wrong type.

    """
    try:
        return _decoder.decode(body)
    except msgspec.DecodeError as exc:
        # ValidationError is a DecodeError subclass
        raise DecodeError.from_msgspec(str(exc)) from exc


__all__ = ["RepositoryOwner", "RepositoryRef", "WebhookEnvelope", "decode_envelope"]
