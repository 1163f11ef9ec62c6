# timebank/routers/auth.py
import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from timebank.config import settings
from timebank.database import get_db
from timebank.models.profile import LoginCode, Profile
from timebank.schemas.user import OtpRequest, OtpVerify, RefreshRequest, ProfileResponse, Token
from timebank.core.auth import get_current_user, load_profile_from_token
from timebank.core.security import generate_login_code, hash_login_code, token_pair, verify_login_code
from timebank.services import mailer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

OTP_SENT_MESSAGE = "If this address is invited, a login code has been sent."


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


@router.post("/otp")
async def send_login_code(request: OtpRequest, db: AsyncSession = Depends(get_db)):
    # Checked before the lookup so the 503 says nothing about the address
    if not settings.smtp_configured:
        logger.warning("Login code requested but email delivery is not configured")
        raise HTTPException(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            f"Email delivery is not configured. Missing environment variables: "
            f"{', '.join(settings.missing_smtp_settings)}",
        )

    result = await db.execute(select(Profile).where(Profile.email == request.email))
    profile = result.scalar_one_or_none()

    # Same answer either way so the endpoint does not reveal who is invited
    if not profile or not profile.active:
        logger.info("Login code requested for uninvited address")
        return {"success": True, "message": OTP_SENT_MESSAGE}

    code = generate_login_code()
    db.add(LoginCode(
        profile_id=profile.id,
        code_hash=hash_login_code(code),
        expires_at=datetime.now(timezone.utc) + timedelta(minutes=settings.OTP_EXPIRE_MINUTES),
    ))
    try:
        await mailer.send_login_code(profile.email, code)
    except Exception:
        await db.rollback()
        raise
    await db.commit()

    logger.info("Login code sent to profile %s", profile.id)
    return {"success": True, "message": OTP_SENT_MESSAGE}


@router.post("/verify", response_model=Token)
async def exchange_login_code(request: OtpVerify, db: AsyncSession = Depends(get_db)):
    invalid = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired code",
        headers={"WWW-Authenticate": "Bearer"},
    )
    result = await db.execute(select(Profile).where(Profile.email == request.email))
    profile = result.scalar_one_or_none()
    # Uninvited and unknown addresses look the same, as in send_login_code
    if not profile or not profile.active:
        raise invalid

    now = datetime.now(timezone.utc)
    result = await db.execute(
        select(LoginCode)
        .where(LoginCode.profile_id == profile.id)
        .where(LoginCode.used_at.is_(None))
        .order_by(LoginCode.created_at.desc())
    )
    matched = None
    for login_code in result.scalars().all():
        if _as_utc(login_code.expires_at) < now:
            continue
        if verify_login_code(request.code, login_code.code_hash):
            matched = login_code
            break
    if not matched:
        raise invalid

    matched.used_at = now
    db.add(matched)
    await db.commit()

    return Token(**token_pair(profile), user=ProfileResponse.model_validate(profile))


@router.post("/refresh", response_model=Token)
async def refresh_session(request: RefreshRequest, db: AsyncSession = Depends(get_db)):
    profile = await load_profile_from_token(db, request.refresh_token, "refresh")
    if not profile.active:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "not_invited")
    return Token(**token_pair(profile), user=ProfileResponse.model_validate(profile))


@router.get("/me", response_model=ProfileResponse)
async def read_users_me(current_user: Profile = Depends(get_current_user)):
    return current_user


@router.post("/logout")
async def sign_out(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    # Outstanding tokens carry the old version and stop validating
    current_user.session_version = (current_user.session_version or 0) + 1
    db.add(current_user)
    await db.execute(
        delete(LoginCode)
        .where(LoginCode.profile_id == current_user.id)
        .where(LoginCode.used_at.is_(None))
    )
    await db.commit()
    return {"success": True, "message": "Signed out"}
