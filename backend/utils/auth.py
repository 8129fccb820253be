"""
Identity Resolution
===================
One resolver turns a request's credential into an optional principal;
routes that need a caller compose it with require_principal.

Credentials are HS256 access tokens (issued elsewhere) sent either as
`Authorization: Bearer <token>` or in the access cookie.

Usage:
    @router.post("/reports")
    async def create(principal: Principal = Depends(require_principal)):
        ...

    @router.post("/summaries/{report_id}")
    async def retry(principal: Optional[Principal] = Depends(resolve_principal)):
        ...
"""

from dataclasses import dataclass
from typing import Optional
import logging

from fastapi import Depends, Request
from jose import JWTError, jwt

from config import settings
from exceptions import Unauthorized

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """Verified identity of the caller."""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None


def extract_token(request: Request) -> Optional[str]:
    """Bearer header first, then the access cookie."""
    auth = request.headers.get("authorization")
    if auth and auth.startswith("Bearer "):
        return auth[7:]
    return request.cookies.get(settings.ACCESS_COOKIE_NAME) or None


def decode_principal(token: str) -> Optional[Principal]:
    """Verify `token` and build a Principal, or None if it does not check out."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_ACCESS_SECRET,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        logger.debug(f"Rejected access token: {e}")
        return None

    principal_id = payload.get("id") or payload.get("sub")
    if not principal_id:
        return None
    return Principal(
        id=str(principal_id),
        email=payload.get("email"),
        name=payload.get("name")
    )


async def resolve_principal(request: Request) -> Optional[Principal]:
    """FastAPI dependency: the caller's principal if a valid credential is present. Never rejects."""
    token = extract_token(request)
    if not token:
        return None
    return decode_principal(token)


async def require_principal(
    principal: Optional[Principal] = Depends(resolve_principal)
) -> Principal:
    """FastAPI dependency: like resolve_principal, but 401 when there is no caller."""
    if principal is None:
        raise Unauthorized()
    return principal
