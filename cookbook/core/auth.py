import logging
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pwdlib import PasswordHash
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cookbook.core.config import settings
from cookbook.core.database import get_db_session
from cookbook.models.user import User

logger = logging.getLogger(__name__)

pwd_hash = PasswordHash.recommended()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_hash.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    return pwd_hash.hash(password)


def _encode(data: dict, expires_delta: timedelta, token_type: str) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta, "type": token_type})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(data: dict) -> str:
    return _encode(data, timedelta(minutes=settings.access_token_expire_minutes), "access")


def create_refresh_token(data: dict) -> str:
    return _encode(data, timedelta(days=settings.refresh_token_expire_days), "refresh")


def create_tokens(user: User) -> dict:
    """Access token carries the role claim; refresh token only identifies the user."""
    return {
        "access_token": create_access_token({"sub": str(user.id), "role": user.role.value}),
        "refresh_token": create_refresh_token({"sub": str(user.id)}),
        "token_type": "bearer",
    }


def _decode_token(token: str, expected_type: str) -> int:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        logger.warning("Rejected %s token: %s", expected_type, exc)
        raise credentials_exception

    user_id: str | None = payload.get("sub")
    token_type: str | None = payload.get("type")
    if user_id is None or token_type != expected_type:
        logger.warning("Rejected token: expected type %s, got %s", expected_type, token_type)
        raise credentials_exception
    return int(user_id)


async def _active_user(user_id: int, db: AsyncSession, headers: dict | None = None) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers=headers,
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user",
        )
    return user


async def get_current_user(token: str = Depends(oauth2_scheme), db: AsyncSession = Depends(get_db_session)) -> User:
    user_id = _decode_token(token, expected_type="access")
    return await _active_user(user_id, db, headers={"WWW-Authenticate": "Bearer"})


async def get_refresh_user(token: str, db: AsyncSession) -> User:
    user_id = _decode_token(token, expected_type="refresh")
    return await _active_user(user_id, db)
