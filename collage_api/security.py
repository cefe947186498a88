import logging
import re
import time
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Security
from fastapi.security.api_key import APIKeyHeader
from jose import JWTError, jwt
from starlette.status import HTTP_401_UNAUTHORIZED

from collage_api.settings import Settings, settings

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
ALGORITHM = "HS256"
AUTH_HEADER_NAME = "Authorization"
auth_header = APIKeyHeader(name=AUTH_HEADER_NAME, auto_error=False)

_BEARER_RE = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)


def get_settings() -> Settings:
    """Small wrapper to allow dependency overrides in tests."""
    return settings


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    match = _BEARER_RE.match(authorization or "")
    if not match:
        return None
    return match.group(1).strip() or None


def decode_admin_token(token: str, secret: str) -> Optional[Dict[str, Any]]:
    """
    Verify an HS256 admin token and return its payload.

    Returns None for a missing secret, a non-HS256 header, a bad signature,
    an expired ``exp`` or a payload whose role is not admin.
    """
    if not token or not secret:
        return None
    try:
        header = jwt.get_unverified_header(token)
        if header.get("alg") != ALGORITHM:
            logger.debug(f"Rejected token with alg {header.get('alg')!r}")
            return None
        payload = jwt.decode(
            token, secret, algorithms=[ALGORITHM], options={"verify_aud": False}
        )
    except JWTError as e:
        logger.debug(f"Rejected admin token: {e}")
        return None

    if not isinstance(payload, dict) or payload.get("role") != ADMIN_ROLE:
        logger.debug("Rejected token without admin role")
        return None
    return payload


def issue_admin_token(secret: str, ttl_seconds: int, **claims: Any) -> str:
    if not secret:
        raise ValueError("ADMIN_JWT_SECRET is not configured")
    now = int(time.time())
    payload = {**claims, "role": ADMIN_ROLE, "iat": now, "exp": now + ttl_seconds}
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def get_admin(
    authorization: Optional[str] = Security(auth_header),
    current_settings: Settings = Depends(get_settings),
) -> Optional[Dict[str, Any]]:
    token = extract_bearer_token(authorization)
    if token is None:
        return None
    return decode_admin_token(token, current_settings.ADMIN_JWT_SECRET)


def require_admin(admin: Optional[Dict[str, Any]] = Depends(get_admin)):
    if admin is None:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return admin
