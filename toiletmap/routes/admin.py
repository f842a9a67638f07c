"""
Moderation of submitted listings.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from toiletmap.db import DbClient, Role
from toiletmap.dependencies import get_db_client
from toiletmap.routes.toilets import get_toilet_or_404, toilet_out
from toiletmap.schemas import Envelope, RejectRequest, RejectResponse, ToiletOut
from toiletmap.security import CurrentUser, require_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

admin_only = require_role(Role.ADMIN)


@router.get("/pending", response_model=Envelope[list[ToiletOut]])
def pending_toilets(
    _: CurrentUser = Depends(admin_only),
    db: DbClient = Depends(get_db_client),
):
    pending = db.list_toilets(active=False)
    return Envelope[list[ToiletOut]](data=[toilet_out(t) for t in pending])


@router.put("/approve/{toilet_id}", response_model=Envelope[ToiletOut])
def approve_toilet(
    toilet_id: str,
    current_user: CurrentUser = Depends(admin_only),
    db: DbClient = Depends(get_db_client),
):
    toilet = get_toilet_or_404(db, toilet_id)
    toilet.is_active = True
    toilet.touch()
    db.save_toilet(toilet)
    logger.info("Toilet %s approved by %s", toilet_id, current_user.user_id)
    return Envelope[ToiletOut](
        data=toilet_out(toilet), message="Approved and user notified"
    )


@router.put("/reject/{toilet_id}", response_model=RejectResponse)
def reject_toilet(
    toilet_id: str,
    payload: Optional[RejectRequest] = Body(None),
    current_user: CurrentUser = Depends(admin_only),
    db: DbClient = Depends(get_db_client),
):
    get_toilet_or_404(db, toilet_id)
    for review in db.list_reviews(toilet_id):
        review.is_deleted = True
        review.touch()
        db.save_review(review)
    db.delete_toilet(toilet_id)
    reason = payload.reason if payload else None
    logger.info(
        "Toilet %s rejected by %s (reason: %s)", toilet_id, current_user.user_id, reason
    )
    return RejectResponse(message="Rejected and user notified", reason=reason)
