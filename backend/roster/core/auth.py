"""Google Sign-In: ID token validation against Google's published keys."""

from __future__ import annotations

import json
import logging
import time
import urllib.error
import urllib.request
from typing import Any

from fastapi import HTTPException, status
from jose import jwk, jwt
from jose.constants import Algorithms
from jose.exceptions import ExpiredSignatureError, JWSSignatureError, JWTClaimsError, JWTError

logger = logging.getLogger("google_auth")

GOOGLE_JWKS_URI = "https://www.googleapis.com/oauth2/v3/certs"
GOOGLE_ISSUERS = ("https://accounts.google.com", "accounts.google.com")

_JWKS_TTL_SECONDS = 24 * 60 * 60

# Google rotates its keys every few days; a day-old copy is still usable.
_jwks_cache: dict[str, Any] = {"keys": None, "fetched_at": 0.0}

_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_aud": True,
    "verify_iss": True,
    "verify_exp": True,
    "verify_at_hash": False,
    "require_exp": True,
    "require_iss": True,
    "require_aud": True,
    "require_sub": True,
}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _fetch_jwks() -> dict[str, Any]:
    logger.info("Fetching Google signing keys from %s", GOOGLE_JWKS_URI)
    req = urllib.request.Request(GOOGLE_JWKS_URI)  # noqa: S310
    with urllib.request.urlopen(req, timeout=15) as resp:  # noqa: S310
        return json.loads(resp.read().decode())


def get_jwks() -> dict[str, Any]:
    cached = _jwks_cache["keys"]
    if cached is not None and time.time() - _jwks_cache["fetched_at"] < _JWKS_TTL_SECONDS:
        return cached

    try:
        jwks = _fetch_jwks()
    except (urllib.error.URLError, json.JSONDecodeError) as e:
        if cached is not None:
            logger.warning("Could not refresh Google signing keys (%s); using cached copy", e)
            return cached
        logger.error("Could not fetch Google signing keys: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Could not fetch JWKS: {e}",
        ) from e

    _jwks_cache.update(keys=jwks, fetched_at=time.time())
    return jwks


def get_signing_key(token: str) -> dict[str, str]:
    try:
        kid = jwt.get_unverified_header(token).get("kid")
    except JWTError as e:
        raise _unauthorized(f"Invalid token header: {e}") from e
    if not kid:
        raise _unauthorized("Token has no 'kid' in header")

    key = next((k for k in get_jwks().get("keys", []) if k.get("kid") == kid), None)
    if key is None:
        raise _unauthorized(f"No matching signing key for kid: {kid}")
    return key


def validate_token(token: str, client_id: str) -> dict[str, Any]:
    """Verify a Google ID token for *client_id* and return its claims."""
    if not client_id:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Missing Google client configuration",
        )

    key = get_signing_key(token)
    algorithm = key.get("alg", Algorithms.RS256)

    try:
        return jwt.decode(
            token,
            jwk.construct(key, algorithm=algorithm),
            algorithms=[algorithm],
            audience=client_id,
            issuer=GOOGLE_ISSUERS,
            options=_DECODE_OPTIONS,
        )
    except ExpiredSignatureError as e:
        raise _unauthorized("Token is expired") from e
    except JWSSignatureError as e:
        raise _unauthorized("Invalid token signature") from e
    except JWTClaimsError as e:
        message = str(e).lower()
        if "audience" in message:
            raise _unauthorized("Invalid token audience") from e
        if "issuer" in message:
            raise _unauthorized(f"Invalid token issuer. Expected one of: {list(GOOGLE_ISSUERS)}") from e
        raise _unauthorized(f"Invalid token claims: {e}") from e
    except JWTError as e:
        raise _unauthorized("Invalid authentication credentials") from e


def is_allowed_editor(email: str | None, allowed: list[str]) -> bool:
    """An empty allow-list lets every signed-in user edit."""
    if not allowed:
        return True
    return bool(email) and email.lower() in {entry.strip().lower() for entry in allowed}
