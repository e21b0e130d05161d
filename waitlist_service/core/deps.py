from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from waitlist_service.core.errors import ErrorCode, WaitlistError
from waitlist_service.core.options import WaitlistOptions
from waitlist_service.core.security import ACCESS_TOKEN, decode_token
from waitlist_service.db.session import get_db
from waitlist_service.models.user import User
from waitlist_service.services.access import Principal
from waitlist_service.services.store import WaitlistStore
from waitlist_service.services.waitlist import WaitlistService

bearer_scheme = HTTPBearer(auto_error=False)


def get_waitlist_options(request: Request) -> WaitlistOptions:
    return request.app.state.waitlist_options


def get_waitlist_service(
    db: AsyncSession = Depends(get_db),
    options: WaitlistOptions = Depends(get_waitlist_options),
) -> WaitlistService:
    return WaitlistService(WaitlistStore(db, options.additional_fields), options)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    if credentials is None:
        return None
    data = decode_token(credentials.credentials, expected_type=ACCESS_TOKEN)
    if not data or not data.get("sub"):
        return None
    result = await db.execute(select(User).where(User.email == data["sub"]))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        return None
    return user


async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise WaitlistError(ErrorCode.UNAUTHORIZED)
    return user


async def get_current_principal(
    user: Optional[User] = Depends(get_optional_user),
) -> Optional[Principal]:
    """The acting principal, or None for anonymous callers."""
    if user is None:
        return None
    return Principal(id=user.id, email=user.email, role=user.role.value)
