"""Unit tests for the webhook relay pipeline through the Falcon app.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_relay.py

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

import pytest

from hookstream.transport import InMemoryPublisher, PublishedMessage
from hookstream.webhook import sign_body
from tests.helpers import FailingPublisher

if typ.TYPE_CHECKING:
    from tests.conftest import RelayClientFactory

SECRET = "s3cret"
PUSH_BODY = b'{"repository":{"name":"r","owner":{"login":"o"}},"ref":"refs/heads/main"}'
PING_BODY = b'{"zen":"Design for failure.","hook_id":1}'


def _headers(event: str, signature: str | None = None) -> dict[str, str]:
    headers = {"X-GitHub-Event": event, "Content-Type": "application/json"}
    if signature is not None:
        headers["X-Hub-Signature"] = signature
    return headers


class TestMethod:
    """Tests for method enforcement."""

    @pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "PATCH", "HEAD"])
    def test_non_post_is_405(
        self,
        make_client: RelayClientFactory,
        publisher: InMemoryPublisher,
        method: str,
    ) -> None:
        """Any non-POST method is rejected regardless of headers and body."""
        client = make_client(secret=SECRET)
        result = client.simulate_request(
            method,
            "/",
            body=PUSH_BODY,
            headers=_headers("push", sign_body(PUSH_BODY, SECRET)),
        )
        assert result.status_code == HTTPStatus.METHOD_NOT_ALLOWED
        assert result.headers.get("allow") == "POST"
        assert publisher.messages == []

    def test_any_path_is_accepted(
        self, make_client: RelayClientFactory, publisher: InMemoryPublisher
    ) -> None:
        """The relay listens on every path."""
        client = make_client()
        for path in ("/", "/github", "/hooks/github/events"):
            result = client.simulate_post(path, body=PUSH_BODY, headers=_headers("push"))
            assert result.status_code == HTTPStatus.OK, f"expected 200 for {path}"
        assert len(publisher.messages) == 3


class TestAuthentication:
    """Tests for the signature policy at the HTTP boundary."""

    def test_secret_without_signature_is_401(
        self, make_client: RelayClientFactory, publisher: InMemoryPublisher
    ) -> None:
        """Unsigned deliveries to a secured relay are rejected unpublished."""
        result = make_client(secret=SECRET).simulate_post(
            "/", body=PUSH_BODY, headers=_headers("push")
        )
        assert result.status_code == HTTPStatus.UNAUTHORIZED
        assert result.content == b""
        assert publisher.messages == []

    def test_secret_with_bad_signature_is_401(
        self, make_client: RelayClientFactory, publisher: InMemoryPublisher
    ) -> None:
        """Signatures made with another secret are rejected."""
        result = make_client(secret=SECRET).simulate_post(
            "/", body=PUSH_BODY, headers=_headers("push", sign_body(PUSH_BODY, "nope"))
        )
        assert result.status_code == HTTPStatus.UNAUTHORIZED
        assert publisher.messages == []

    def test_signature_over_other_body_is_401(
        self, make_client: RelayClientFactory, publisher: InMemoryPublisher
    ) -> None:
        """Tampered bodies fail verification."""
        signature = sign_body(PUSH_BODY, SECRET)
        result = make_client(secret=SECRET).simulate_post(
            "/", body=PUSH_BODY + b" ", headers=_headers("push", signature)
        )
        assert result.status_code == HTTPStatus.UNAUTHORIZED
        assert publisher.messages == []

    def test_secret_with_good_signature_is_published(
        self, make_client: RelayClientFactory, publisher: InMemoryPublisher
    ) -> None:
        """A correctly signed delivery proceeds to publish."""
        result = make_client(secret=SECRET).simulate_post(
            "/", body=PUSH_BODY, headers=_headers("push", sign_body(PUSH_BODY, SECRET))
        )
        assert result.status_code == HTTPStatus.OK
        assert publisher.messages == [PublishedMessage("o.r.push", PUSH_BODY)]

    def test_sha256_header_is_preferred(
        self, make_client: RelayClientFactory, publisher: InMemoryPublisher
    ) -> None:
        """X-Hub-Signature-256 is verified when present."""
        headers = _headers("push", "sha1=stale")
        headers["X-Hub-Signature-256"] = sign_body(
            PUSH_BODY, SECRET, algorithm="sha256"
        )
        result = make_client(secret=SECRET).simulate_post(
            "/", body=PUSH_BODY, headers=headers
        )
        assert result.status_code == HTTPStatus.OK
        assert len(publisher.messages) == 1

    def test_header_names_are_case_insensitive(
        self, make_client: RelayClientFactory, publisher: InMemoryPublisher
    ) -> None:
        """Lower-case header names are recognised."""
        headers = {
            "x-github-event": "push",
            "x-hub-signature": sign_body(PUSH_BODY, SECRET),
        }
        result = make_client(secret=SECRET).simulate_post(
            "/", body=PUSH_BODY, headers=headers
        )
        assert result.status_code == HTTPStatus.OK
        assert publisher.messages[0].channel == "o.r.push"

    def test_signature_without_secret_is_401(
        self, make_client: RelayClientFactory, publisher: InMemoryPublisher
    ) -> None:
        """An unexpected signature is rejected when no secret is configured."""
        result = make_client(secret=None).simulate_post(
            "/", body=PUSH_BODY, headers=_headers("push", sign_body(PUSH_BODY, SECRET))
        )
        assert result.status_code == HTTPStatus.UNAUTHORIZED
        assert publisher.messages == []

    def test_no_secret_no_signature_is_published(
        self, make_client: RelayClientFactory, publisher: InMemoryPublisher
    ) -> None:
        """Unauthenticated mode relays unsigned deliveries."""
        result = make_client(secret=None).simulate_post(
            "/", body=PUSH_BODY, headers=_headers("push")
        )
        assert result.status_code == HTTPStatus.OK
        assert len(publisher.messages) == 1


class TestPing:
    """Tests for the ping short-circuit."""

    @pytest.mark.parametrize("body", [PING_BODY, b""], ids=["with-body", "empty"])
    def test_ping_is_200_without_publish(
        self,
        make_client: RelayClientFactory,
        publisher: InMemoryPublisher,
        body: bytes,
    ) -> None:
        """Pings are acknowledged and never decoded or published."""
        result = make_client().simulate_post("/", body=body, headers=_headers("ping"))
        assert result.status_code == HTTPStatus.OK
        assert result.content == b""
        assert publisher.messages == []

    def test_signed_ping_on_secured_relay(
        self, make_client: RelayClientFactory, publisher: InMemoryPublisher
    ) -> None:
        """Signed pings are acknowledged by a secured relay."""
        result = make_client(secret=SECRET).simulate_post(
            "/", body=PING_BODY, headers=_headers("ping", sign_body(PING_BODY, SECRET))
        )
        assert result.status_code == HTTPStatus.OK
        assert publisher.messages == []

    def test_unsigned_ping_on_secured_relay_is_401(
        self, make_client: RelayClientFactory
    ) -> None:
        """Authentication runs before the ping filter."""
        result = make_client(secret=SECRET).simulate_post(
            "/", body=PING_BODY, headers=_headers("ping")
        )
        assert result.status_code == HTTPStatus.UNAUTHORIZED


class TestRouting:
    """Tests for decoding and channel derivation."""

    def test_publishes_original_bytes_on_rendered_channel(
        self, make_client: RelayClientFactory, publisher: InMemoryPublisher
    ) -> None:
        """The body is published unmodified on Owner.Repo.Event."""
        body = b'{"repository":{"name":"r","owner":{"login":"o"}}}'
        result = make_client().simulate_post("/", body=body, headers=_headers("push"))
        assert result.status_code == HTTPStatus.OK
        assert result.content == b""
        assert publisher.messages == [PublishedMessage("o.r.push", body)]

    def test_payload_formatting_is_preserved(
        self, make_client: RelayClientFactory, publisher: InMemoryPublisher
    ) -> None:
        """Whitespace, key order and unknown fields survive the relay."""
        body = (
            b'{\n  "zzz": [1, 2.50, "\\u00e9"],\n'
            b'  "repository": {"owner": {"login": "octo"}, "name": "reef"}\n}'
        )
        make_client().simulate_post("/", body=body, headers=_headers("issues"))
        assert publisher.messages == [PublishedMessage("octo.reef.issues", body)]

    def test_static_template(
        self, make_client: RelayClientFactory, publisher: InMemoryPublisher
    ) -> None:
        """The default template routes everything to one channel."""
        client = make_client(template="github.events")
        client.simulate_post("/", body=PUSH_BODY, headers=_headers("push"))
        client.simulate_post("/", body=PUSH_BODY, headers=_headers("issues"))
        assert [m.channel for m in publisher.messages] == [
            "github.events",
            "github.events",
        ]

    @pytest.mark.parametrize(
        "body",
        [
            b"not json",
            b"[1, 2]",
            b'{"repository":"o/r"}',
            b'{"repository":{"name":5}}',
        ],
        ids=["not-json", "array", "repository-not-object", "wrong-types"],
    )
    def test_malformed_body_is_422(
        self,
        make_client: RelayClientFactory,
        publisher: InMemoryPublisher,
        body: bytes,
    ) -> None:
        """Authenticated but undecodable bodies are unprocessable."""
        client = make_client(secret=SECRET)
        result = client.simulate_post(
            "/", body=body, headers=_headers("push", sign_body(body, SECRET))
        )
        assert result.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
        assert result.content == b""
        assert publisher.messages == []

    def test_event_without_repository_is_published(
        self, make_client: RelayClientFactory, publisher: InMemoryPublisher
    ) -> None:
        """Organization-level events are relayed on the static channel."""
        body = b'{"action":"member_added","organization":{"login":"octo"}}'
        result = make_client(template="github.events").simulate_post(
            "/", body=body, headers=_headers("organization")
        )
        assert result.status_code == HTTPStatus.OK
        assert publisher.messages == [PublishedMessage("github.events", body)]

    def test_missing_repository_renders_empty_fields(
        self, make_client: RelayClientFactory, publisher: InMemoryPublisher
    ) -> None:
        """Absent owner and repo substitute as empty strings."""
        result = make_client(template="gh.{{.Event}}").simulate_post(
            "/", body=b"{}", headers=_headers("installation")
        )
        assert result.status_code == HTTPStatus.OK
        assert publisher.messages == [PublishedMessage("gh.installation", b"{}")]

    def test_empty_channel_is_500(
        self, make_client: RelayClientFactory, publisher: InMemoryPublisher
    ) -> None:
        """A template rendering to nothing is an internal error."""
        client = make_client(template="{{.Event}}")
        result = client.simulate_post("/", body=PUSH_BODY)
        assert result.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
        assert publisher.messages == []


class TestPublish:
    """Tests for publish outcomes."""

    def test_publish_failure_is_503(self, make_client: RelayClientFactory) -> None:
        """Transport failures tell the source to retry later."""
        failing = FailingPublisher()
        result = make_client(publisher=failing).simulate_post(
            "/", body=PUSH_BODY, headers=_headers("push")
        )
        assert result.status_code == HTTPStatus.SERVICE_UNAVAILABLE
        assert result.content == b""
        assert failing.attempts == ["o.r.push"]

    def test_duplicates_are_not_suppressed(
        self, make_client: RelayClientFactory, publisher: InMemoryPublisher
    ) -> None:
        """Each identical delivery produces its own publish."""
        client = make_client(secret=SECRET)
        headers = _headers("push", sign_body(PUSH_BODY, SECRET))
        for _ in range(3):
            result = client.simulate_post("/", body=PUSH_BODY, headers=headers)
            assert result.status_code == HTTPStatus.OK
        assert publisher.messages == [PublishedMessage("o.r.push", PUSH_BODY)] * 3
