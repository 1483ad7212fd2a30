# src/todoist_recent/webhook/signature.py

from __future__ import annotations

import base64
import hashlib
import hmac

from ..core.ports import SignatureVerifier
from ..errors import UnverifiedPayload

SIGNATURE_HEADER = "X-Todoist-Hmac-SHA256"


def sign(raw_body: bytes, secret: str) -> str:
    """Todoist signs the raw request body: base64(HMAC-SHA256(client_secret, body))."""
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


class HmacSignatureVerifier:
    def verify(self, raw_body: bytes, signature: str | None, secret: str) -> bool:
        if not signature or not secret:
            return False
        # Header values arrive latin-1 decoded; compare bytes so non-ASCII input is a mismatch.
        expected = sign(raw_body, secret).encode("ascii")
        given = signature.strip().encode("utf-8", "surrogateescape")
        return hmac.compare_digest(expected, given)


def require_verified(
    verifier: SignatureVerifier,
    raw_body: bytes,
    signature: str | None,
    secret: str,
) -> None:
    """Raise UnverifiedPayload unless the body carries a valid signature."""
    if not signature:
        raise UnverifiedPayload("Missing signature")
    if not verifier.verify(raw_body, signature, secret):
        raise UnverifiedPayload("Invalid signature")
