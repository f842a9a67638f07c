"""
Password hashing, bearer tokens and the auth dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from toiletmap.config import get_settings
from toiletmap.db import Role, UserRecord

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Identity carried by a verified bearer token."""

    user_id: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def can_modify(self, owner_id: Optional[str]) -> bool:
        return self.is_admin or self.user_id == owner_id


@lru_cache(maxsize=1)
def _pwd_context() -> CryptContext:
    return CryptContext(
        schemes=["bcrypt"],
        deprecated="auto",
        bcrypt__rounds=get_settings().bcrypt_rounds,
    )


def hash_password(password: str) -> str:
    return _pwd_context().hash(password)


def verify_password(password: str, hashed: str) -> bool:
    try:
        return _pwd_context().verify(password, hashed)
    except ValueError:
        # Malformed or placeholder hashes never match.
        return False


def create_access_token(user: UserRecord, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.jwt_expires_minutes)
    )
    claims = {
        "userId": user.user_id,
        "email": user.email,
        "role": Role(user.role).value,
        "exp": expire,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> CurrentUser:
    settings = get_settings()
    invalid = HTTPException(status_code=401, detail="Invalid token")
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        raise invalid
    user_id = payload.get("userId")
    if not user_id:
        raise invalid
    try:
        role = Role(payload.get("role", Role.USER.value))
    except ValueError:
        raise invalid
    return CurrentUser(user_id=user_id, email=payload.get("email", ""), role=role)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    if credentials is None:
        raise HTTPException(status_code=401, detail="No token")
    return decode_access_token(credentials.credentials)


def require_role(role: Role):
    """Allow callers with ``role``; ADMIN is always allowed."""

    async def role_dep(current_user: CurrentUser = Depends(get_current_user)):
        if current_user.role != role and not current_user.is_admin:
            raise HTTPException(status_code=403, detail="Forbidden")
        return current_user

    return role_dep
