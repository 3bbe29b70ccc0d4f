from __future__ import annotations

from dataclasses import dataclass
import json
import time
from typing import Any

import jwt
from jwt.utils import base64url_decode

from toiletcheck.core.config import get_settings
from toiletcheck.core.errors import TokenError


@dataclass(frozen=True)
class TokenClaims:
    sub: str
    exp: int | None = None


def parse_authorization_header(value: str | None) -> str | None:
    # Only "Bearer <token>" is accepted; the scheme is case-sensitive.
    if not value or not value.startswith("Bearer "):
        return None
    token = value[len("Bearer "):].strip()
    return token or None


def _read_payload_segment(token: str) -> Any:
    # Only the middle segment is read; header and signature are left to the provider.
    parts = token.split(".")
    if len(parts) != 3 or not parts[1]:
        raise TokenError("Token must have three segments")
    try:
        return json.loads(base64url_decode(parts[1]))
    except ValueError as exc:
        raise TokenError(f"Token payload is not valid base64url JSON: {exc}") from exc


def decode_bearer_token(token: str, *, now: float | None = None) -> TokenClaims:
    """Decode an access token issued by the hosted auth provider.

    Without ``auth_jwt_secret`` only the payload is read: the provider already
    verified the signature when it issued the session. Expiry is checked here
    in both modes so an expired token is rejected even if the provider is not
    consulted.
    """
    settings = get_settings()
    try:
        if settings.auth_jwt_secret:
            options = {"verify_exp": False, "verify_aud": bool(settings.auth_jwt_audience)}
            payload = jwt.decode(
                token,
                settings.auth_jwt_secret,
                algorithms=["HS256"],
                audience=settings.auth_jwt_audience,
                options=options,
            )
        else:
            payload = _read_payload_segment(token)
    except jwt.PyJWTError as exc:
        raise TokenError(f"Token decode failed: {exc}") from exc

    if not isinstance(payload, dict):
        raise TokenError("Token payload is not an object")
    subject = payload.get("sub")
    if not subject or not isinstance(subject, str):
        raise TokenError("No user ID in token")

    exp = payload.get("exp")
    if exp is not None and not isinstance(exp, (int, float)):
        raise TokenError("Token exp claim is not numeric")
    current = time.time() if now is None else now
    # A zero or missing exp never expires, matching the provider's session tokens.
    if exp and current >= exp:
        raise TokenError("Token expired")
    return TokenClaims(sub=subject, exp=int(exp) if exp is not None else None)
