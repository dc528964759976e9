"""HS256 compact token minting and verification.

A token is ``base64url(header) "." base64url(claims) "." base64url(mac)`` where
the MAC is HMAC-SHA-256 over the first two segments, keyed with the secret
recovered from the web front-end. Segments are unpadded and the JSON is
serialized without whitespace.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import logging
import time
from typing import Any

from pydantic import ValidationError

from dewatermark.config import TOKEN_TTL_SECONDS
from dewatermark.errors import SigningError
from dewatermark.models import TokenClaims
from dewatermark.utils.rounding import round_half_up

logger = logging.getLogger(__name__)

_HEADER = {"alg": "HS256", "typ": "JWT"}


def mint_token(
    secret: bytes,
    is_pro: bool = False,
    *,
    subject: str = "ignore",
    platform: str = "web",
    now: float | None = None,
) -> str:
    """Sign a fresh token that expires ``TOKEN_TTL_SECONDS`` after *now*."""

    key = _import_key(secret)
    issued_at = time.time() if now is None else now
    claims = TokenClaims(
        sub=subject,
        platform=platform,
        is_pro=is_pro,
        exp=round_half_up(issued_at) + TOKEN_TTL_SECONDS,
    )
    signing_input = f"{_b64url_json(_HEADER)}.{_b64url_json(claims.model_dump())}"
    signature = _b64url_encode(_sign(key, signing_input))
    logger.debug("Minted token exp=%s is_pro=%s", claims.exp, claims.is_pro)
    return f"{signing_input}.{signature}"


def decode_claims(token: str) -> TokenClaims:
    """Parse the claim segment without checking the signature."""

    _, payload, _ = _split(token)
    try:
        return TokenClaims.model_validate(json.loads(_b64url_decode(payload)))
    except (ValueError, ValidationError) as exc:
        raise SigningError("Malformed token claims") from exc


def verify_token(token: str, secret: bytes, *, check_expiry: bool = True, now: float | None = None) -> TokenClaims:
    """Return the claims of *token* if it was signed with *secret*.

    Raises
    ------
    SigningError
        On a malformed token, unexpected header, signature mismatch or (when
        ``check_expiry``) an expired token.
    """

    key = _import_key(secret)
    header, payload, signature = _split(token)
    try:
        header_json = json.loads(_b64url_decode(header))
        received = _b64url_decode(signature)
    except ValueError as exc:
        raise SigningError("Malformed token") from exc
    if not isinstance(header_json, dict) or header_json.get("alg") != "HS256":
        raise SigningError(f"Unsupported token header: {header_json}")

    expected = _sign(key, f"{header}.{payload}")
    if not hmac.compare_digest(expected, received):
        raise SigningError("Invalid token signature")

    claims = decode_claims(token)
    if check_expiry:
        current = time.time() if now is None else now
        if claims.exp <= current:
            raise SigningError(f"Token expired at {claims.exp}")
    return claims


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _import_key(secret: Any) -> bytes:
    if not isinstance(secret, (bytes, bytearray, memoryview)):
        raise SigningError(f"HMAC key must be bytes, got {type(secret).__name__}")
    key = bytes(secret)
    if not key:
        raise SigningError("HMAC key must not be empty")
    return key


def _sign(key: bytes, signing_input: str) -> bytes:
    return hmac.new(key=key, msg=signing_input.encode("ascii"), digestmod=hashlib.sha256).digest()


def _split(token: str) -> tuple[str, str, str]:
    parts = token.split(".") if isinstance(token, str) else []
    if len(parts) != 3 or not all(parts):
        raise SigningError("Token must have three non-empty segments")
    return parts[0], parts[1], parts[2]


def _b64url_json(obj: dict[str, Any]) -> str:
    return _b64url_encode(json.dumps(obj, separators=(",", ":")).encode("utf-8"))


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(segment: str) -> bytes:
    try:
        return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Invalid base64url segment: {segment[:16]}") from exc
