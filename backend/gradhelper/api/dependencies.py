"""
API Dependencies

FastAPI dependency injection for the session identity and the messaging
service.

Security: JWT tokens are verified cryptographically, either against a JWKS
endpoint (ES256/RS256) or with the shared HS256 secret. Never decode without
verification. The messaging engine trusts the identity returned here.
"""

import asyncio
import logging
from functools import lru_cache
from typing import AsyncGenerator, Optional

import jwt
from jwt import PyJWKClient
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import ValidationError as PydanticValidationError

from gradhelper.config.settings import Settings, get_settings
from gradhelper.domain.messaging import Role, Viewer
from gradhelper.infrastructure.memory_repository import InMemoryMessageRepository
from gradhelper.infrastructure.services.messaging_service import MessagingService


logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# Cached JWKS client — avoids re-fetching keys on every request.
_jwks_client: Optional[PyJWKClient] = None

REQUIRED_CLAIMS = ["exp", "sub"]


def _get_jwks_client(jwks_url: str) -> PyJWKClient:
    """Return a singleton PyJWKClient for the configured JWKS endpoint."""
    global _jwks_client
    if _jwks_client is None:
        _jwks_client = PyJWKClient(jwks_url, cache_keys=True)
    return _jwks_client


def _decode_options(settings: Settings) -> dict:
    required = list(REQUIRED_CLAIMS)
    if settings.jwt_issuer:
        required.append("iss")
    return {"require": required}


def _decode_with_jwks(token: str, settings: Settings) -> dict:
    """Verify JWT using the JWKS endpoint (asymmetric keys)."""
    client = _get_jwks_client(settings.jwt_jwks_url)
    signing_key = client.get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=["ES256", "RS256"],
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        options=_decode_options(settings),
    )


def _decode_with_secret(token: str, settings: Settings) -> dict:
    """Verify JWT using the HS256 shared secret."""
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=["HS256"],
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        options=_decode_options(settings),
    )


def _viewer_from_claims(payload: dict) -> Viewer:
    """Map verified token claims onto the session identity."""
    try:
        return Viewer(
            id=payload["sub"],
            name=payload.get("name") or payload["sub"],
            role=payload.get("role") or Role.STUDENT,
            avatar=payload.get("avatar"),
        )
    except PydanticValidationError as e:
        logger.warning("Token claims rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: unsupported role",
        )


async def get_current_viewer(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Viewer:
    """
    Extract and verify the session identity from a bearer JWT.

    Verification strategy (in order):
      1. JWKS — when ``JWT_JWKS_URL`` is configured.
      2. HS256 with ``JWT_SECRET``.

    Returns:
        Viewer built from the ``sub``, ``name``, ``role`` and ``avatar``
        claims.

    Raises:
        HTTPException 401: token missing, expired, or invalid.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials
    settings = get_settings()

    payload: Optional[dict] = None

    # --- Strategy 1: JWKS ---
    if settings.jwt_jwks_url:
        try:
            payload = _decode_with_jwks(token, settings)
        except (jwt.exceptions.PyJWKClientError, jwt.InvalidTokenError) as jwks_err:
            logger.debug("JWKS verification failed, trying HS256 fallback: %s", jwks_err)

    # --- Strategy 2: HS256 ---
    if payload is None and settings.jwt_secret:
        try:
            payload = _decode_with_secret(token, settings)
        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
            )
        except jwt.InvalidTokenError as e:
            logger.warning("HS256 JWT verification failed: %s", e)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or unverifiable token",
        )

    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing user ID",
        )

    return _viewer_from_claims(payload)


# =============================================================================
# Messaging service providers
# =============================================================================

@lru_cache
def get_write_lock() -> asyncio.Lock:
    """Process-wide lock shared by every MessagingService this module builds."""
    return asyncio.Lock()


@lru_cache
def get_memory_messaging_service() -> MessagingService:
    """Process-wide service over the in-memory repository."""
    return MessagingService(InMemoryMessageRepository(), lock=get_write_lock())


async def get_messaging_service() -> AsyncGenerator[MessagingService, None]:
    """
    Dependency provider for MessagingService.

    Uses the database repository (one session per request) when
    STORAGE_BACKEND=database, else the shared in-memory service. Both
    share the process-wide write lock.
    """
    settings = get_settings()
    if settings.storage_backend == "database":
        from gradhelper.infrastructure.db.database import get_session_context
        from gradhelper.infrastructure.db.repositories.message_repository import (
            MessageRepository,
        )

        async with get_session_context() as session:
            yield MessagingService(
                MessageRepository(session), settings, lock=get_write_lock()
            )
    else:
        yield get_memory_messaging_service()
