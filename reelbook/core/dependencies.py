"""FastAPI dependencies for injection into route handlers."""

import hmac
from dataclasses import dataclass
from typing import Protocol

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reelbook.core.auth import ACCESS, read_token
from reelbook.core.config import settings
from reelbook.core.database import get_db
from reelbook.core.errors import Unauthorized
from reelbook.models.member import User, UserRole

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Actor:
    """Who is making the request. ``id`` is None for static-key admin calls."""

    id: int | None
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Resolve the bearer token to a user, or None when no token was sent."""
    if credentials is None:
        return None

    try:
        user_id = read_token(credentials.credentials, ACCESS)
    except JWTError:
        raise Unauthorized("Invalid token") from None

    result = await db.execute(select(User).where(User.id == user_id, User.is_active.is_(True)))
    user = result.scalar_one_or_none()
    if user is None:
        raise Unauthorized("User not found")
    return user


async def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    """Require a logged-in user."""
    if user is None:
        raise Unauthorized("Authentication required")
    return user


# ---------------------------------------------------------------------------
# Admin authorization
# ---------------------------------------------------------------------------


class AdminAuthenticator(Protocol):
    """Decides whether a request carries admin rights.

    Returns the admin Actor, or None to let the next authenticator try.
    """

    async def authenticate(self, request: Request, user: User | None) -> Actor | None: ...


class StaticKeyAuthenticator:
    """Shared secret in the ``admin-key`` header, compared in constant time."""

    header = "admin-key"

    def __init__(self, key: str):
        self.key = key

    async def authenticate(self, request: Request, user: User | None) -> Actor | None:
        supplied = request.headers.get(self.header)
        if not self.key or supplied is None:
            return None
        if hmac.compare_digest(supplied.encode(), self.key.encode()):
            return Actor(id=user.id if user else None, role=UserRole.ADMIN)
        return None


class BearerRoleAuthenticator:
    """Logged-in user whose account role is admin."""

    async def authenticate(self, request: Request, user: User | None) -> Actor | None:
        if user is not None and user.is_admin:
            return Actor(id=user.id, role=UserRole.ADMIN)
        return None


def get_admin_authenticators() -> list[AdminAuthenticator]:
    """The authenticators tried, in order, for admin endpoints.

    Override this dependency to swap the strategy without touching routes.
    """
    authenticators: list[AdminAuthenticator] = [BearerRoleAuthenticator()]
    if settings.admin_api_key:
        authenticators.append(StaticKeyAuthenticator(settings.admin_api_key))
    return authenticators


async def _admin_actor(
    request: Request, user: User | None, authenticators: list[AdminAuthenticator]
) -> Actor | None:
    for authenticator in authenticators:
        actor = await authenticator.authenticate(request, user)
        if actor is not None:
            return actor
    return None


async def require_admin(
    request: Request,
    user: User | None = Depends(get_optional_user),
    authenticators: list[AdminAuthenticator] = Depends(get_admin_authenticators),
) -> Actor:
    actor = await _admin_actor(request, user, authenticators)
    if actor is None:
        raise Unauthorized("Admin access required")
    return actor


async def get_actor(
    request: Request,
    user: User | None = Depends(get_optional_user),
    authenticators: list[AdminAuthenticator] = Depends(get_admin_authenticators),
) -> Actor:
    """Any authenticated caller: admin via any authenticator, else the logged-in customer."""
    actor = await _admin_actor(request, user, authenticators)
    if actor is not None:
        return actor
    if user is None:
        raise Unauthorized("Authentication required")
    return Actor(id=user.id, role=user.role)
