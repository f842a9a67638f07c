"""
Registration, login and the current-user profile.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from toiletmap.db import DbClient, UserRecord
from toiletmap.dependencies import get_db_client
from toiletmap.schemas import (
    AuthResponse,
    Envelope,
    LoginRequest,
    RegisterRequest,
    UserOut,
)
from toiletmap.security import (
    CurrentUser,
    create_access_token,
    get_current_user,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(payload: RegisterRequest, db: DbClient = Depends(get_db_client)):
    if db.get_user_by_email(payload.email):
        raise HTTPException(status_code=400, detail="Email exists")

    user = db.save_user(
        UserRecord(
            name=payload.name,
            email=payload.email,
            password_hash=hash_password(payload.password),
        )
    )
    logger.info("Registered user %s", user.user_id)
    return AuthResponse(token=create_access_token(user), user=UserOut.model_validate(user))


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: DbClient = Depends(get_db_client)):
    user = db.get_user_by_email(payload.email)
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account disabled")
    return AuthResponse(token=create_access_token(user), user=UserOut.model_validate(user))


@router.get("/me", response_model=Envelope[UserOut])
def me(
    current_user: CurrentUser = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    user = db.get_user(current_user.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="Not found")
    return Envelope[UserOut](data=UserOut.model_validate(user))
