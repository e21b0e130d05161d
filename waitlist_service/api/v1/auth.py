import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from waitlist_service.core.deps import get_current_user, get_waitlist_service
from waitlist_service.core.errors import ErrorCode, WaitlistError
from waitlist_service.core.options import mask_email, normalize_email
from waitlist_service.core.security import (
    REFRESH_TOKEN, create_access_token, create_refresh_token,
    decode_token, hash_password, verify_password,
)
from waitlist_service.db.session import get_db
from waitlist_service.models.user import User, UserRole
from waitlist_service.schemas.auth import (
    LoginRequest, RefreshRequest, RegisterRequest,
    TokenResponse, UserRead,
)
from waitlist_service.services.waitlist import WaitlistService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


async def _require_waitlist_approval(service: WaitlistService, email: str) -> None:
    """While the waitlist gates access, only approved emails may sign up or in."""
    options = service.options
    if not (options.enabled and options.disable_sign_in_and_sign_up):
        return
    if not await service.is_approved(email):
        logger.info("Sign-in/up blocked for %s: no approved waitlist entry", mask_email(email))
        raise WaitlistError(ErrorCode.WAITLIST_APPROVAL_REQUIRED)


def _tokens(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user.email, user.role.value),
        refresh_token=create_refresh_token(user.email, user.role.value),
    )


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    service: WaitlistService = Depends(get_waitlist_service),
):
    email = normalize_email(payload.email)
    await _require_waitlist_approval(service, email)
    user = User(
        email=email,
        hashed_password=hash_password(payload.password),
        role=UserRole.user,
        full_name=payload.full_name,
    )
    db.add(user)
    try:
        await db.commit()
        await db.refresh(user)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )
    return user


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
    service: WaitlistService = Depends(get_waitlist_service),
):
    email = normalize_email(payload.email)
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")
    if user.role != UserRole.admin:
        await _require_waitlist_approval(service, email)
    return _tokens(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(payload: RefreshRequest, db: AsyncSession = Depends(get_db)):
    data = decode_token(payload.refresh_token, expected_type=REFRESH_TOKEN)
    if not data:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        )
    result = await db.execute(select(User).where(User.email == data["sub"]))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return _tokens(user)


@router.get("/me", response_model=UserRead)
async def me(user: User = Depends(get_current_user)):
    return user
