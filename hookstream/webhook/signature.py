"""HMAC signature verification for GitHub webhook deliveries.

GitHub signs each delivery body with the webhook secret and sends the result
as ``<algorithm>=<hex digest>``: ``X-Hub-Signature`` carries ``sha1`` and
``X-Hub-Signature-256`` carries ``sha256``.

Usage
-----
>>> sig = sign_body(b"{}", "s3cret")
>>> sig.startswith("sha1=")
True
>>> verify_signature(sig, "s3cret", b"{}")
True

"""

from __future__ import annotations

import hashlib
import hmac

from hookstream.webhook.errors import AuthError

DEFAULT_ALGORITHM = "sha1"

_DIGESTS = {
    "sha1": hashlib.sha1,
    "sha256": hashlib.sha256,
}


def sign_body(body: bytes, secret: str, *, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Return the tagged hex HMAC of *body* keyed by *secret*.

    Raises
    ------
    KeyError
        If *algorithm* is not ``sha1`` or ``sha256``.

    """
    mac = hmac.new(secret.encode("utf-8"), body, _DIGESTS[algorithm])
    return f"{algorithm}={mac.hexdigest()}"


def verify_signature(signature: str, secret: str, body: bytes) -> bool:
    """Return whether *signature* is the HMAC of *body* under *secret*.

    The algorithm tag before ``=`` selects the digest.  Unknown tags never
    verify.  The final comparison is ``hmac.compare_digest`` over the whole
    tagged string, so timing does not depend on where a mismatch occurs.
    """
    algorithm, sep, _ = signature.partition("=")
    if not sep or algorithm not in _DIGESTS:
        return False
    expected = sign_body(body, secret, algorithm=algorithm)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))


def authenticate(signature: str | None, secret: str | None, body: bytes) -> None:
    """Apply the relay's signature policy to one delivery.

    ============  ===========  =========================
    secret        signature    outcome
    ============  ===========  =========================
    set           absent       reject
    set           present      accept iff it verifies
    unset         present      reject
    unset         absent       accept (unauthenticated)
    ============  ===========  =========================

    Raises
    ------
    AuthError
        When the delivery is rejected.

    """
    if secret:
        if not signature:
            raise AuthError.missing_signature()
        if not verify_signature(signature, secret, body):
            raise AuthError.invalid_signature()
    elif signature:
        raise AuthError.unexpected_signature()


__all__ = ["DEFAULT_ALGORITHM", "authenticate", "sign_body", "verify_signature"]
