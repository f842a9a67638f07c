"""
Reviews: rating a toilet, editing, soft deletion and likes.

Every change to a review's ratings or visibility recomputes the listing's
aggregate ratings.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from toiletmap.aggregates import recompute_toilet_aggregates
from toiletmap.db import RATING_FIELDS, DbClient, ReviewRecord
from toiletmap.dependencies import get_db_client
from toiletmap.routes.toilets import get_toilet_or_404, photo_records
from toiletmap.schemas import Envelope, ReviewCreate, ReviewOut, ReviewUpdate
from toiletmap.security import CurrentUser, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["reviews"])

ALREADY_RATED = "You have already rated this toilet"


def get_review_or_404(
    db: DbClient, review_id: str, *, include_deleted: bool = True
) -> ReviewRecord:
    review = db.get_review(review_id)
    if not review or (review.is_deleted and not include_deleted):
        raise HTTPException(status_code=404, detail="Not found")
    return review


def get_owned_review(
    db: DbClient, review_id: str, current_user: CurrentUser
) -> ReviewRecord:
    review = get_review_or_404(db, review_id)
    if not current_user.can_modify(review.user_id):
        raise HTTPException(status_code=403, detail="Forbidden")
    return review


@router.post("", response_model=Envelope[ReviewOut], status_code=201)
def create_review(
    payload: ReviewCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    get_toilet_or_404(db, payload.toilet_id)
    if db.find_active_review(payload.toilet_id, current_user.user_id):
        raise HTTPException(status_code=409, detail=ALREADY_RATED)

    review = db.save_review(
        ReviewRecord(
            toilet_id=payload.toilet_id,
            user_id=current_user.user_id,
            overall_rating=payload.overall_rating,
            cleanliness_rating=payload.cleanliness_rating,
            layout_rating=payload.layout_rating,
            spaciousness_rating=payload.spaciousness_rating,
            amenities_rating=payload.amenities_rating,
            comment=payload.comment,
            photos=photo_records(payload.photos),
        )
    )
    recompute_toilet_aggregates(db, review.toilet_id)
    return Envelope[ReviewOut](data=ReviewOut.model_validate(review))


@router.get("/toilet/{toilet_id}", response_model=Envelope[list[ReviewOut]])
def list_reviews_for_toilet(toilet_id: str, db: DbClient = Depends(get_db_client)):
    reviews = [ReviewOut.model_validate(r) for r in db.list_reviews(toilet_id)]
    return Envelope[list[ReviewOut]](data=reviews)


@router.put("/{review_id}", response_model=Envelope[ReviewOut])
def update_review(
    review_id: str,
    payload: ReviewUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    review = get_owned_review(db, review_id, current_user)

    updates = payload.model_dump(exclude_unset=True)
    if "overall_rating" in updates and updates["overall_rating"] is None:
        raise HTTPException(status_code=400, detail="overallRating cannot be null")
    for name in RATING_FIELDS:
        if name in updates:
            setattr(review, name, updates[name])
    if updates.get("comment") is not None:
        review.comment = payload.comment
    if updates.get("photos") is not None:
        review.photos = photo_records(payload.photos)
    review.touch()
    db.save_review(review)
    recompute_toilet_aggregates(db, review.toilet_id)
    return Envelope[ReviewOut](data=ReviewOut.model_validate(review))


@router.delete("/{review_id}", response_model=Envelope[ReviewOut])
def delete_review(
    review_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    review = get_owned_review(db, review_id, current_user)
    review.is_deleted = True
    review.touch()
    db.save_review(review)
    recompute_toilet_aggregates(db, review.toilet_id)
    return Envelope[ReviewOut](data=ReviewOut.model_validate(review), message="Deleted")


@router.post("/{review_id}/restore", response_model=Envelope[ReviewOut])
def restore_review(
    review_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    review = get_owned_review(db, review_id, current_user)
    if review.is_deleted:
        active = db.find_active_review(review.toilet_id, review.user_id)
        if active and active.review_id != review.review_id:
            raise HTTPException(status_code=409, detail=ALREADY_RATED)
        review.is_deleted = False
        review.touch()
        db.save_review(review)
        recompute_toilet_aggregates(db, review.toilet_id)
        logger.info("Review %s restored by %s", review_id, current_user.user_id)
    return Envelope[ReviewOut](data=ReviewOut.model_validate(review), message="Restored")


@router.post("/{review_id}/like", response_model=Envelope[ReviewOut])
def like_review(
    review_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    review = get_review_or_404(db, review_id, include_deleted=False)
    review.like(current_user.user_id)
    db.save_review(review)
    return Envelope[ReviewOut](data=ReviewOut.model_validate(review))


@router.post("/{review_id}/dislike", response_model=Envelope[ReviewOut])
def dislike_review(
    review_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    review = get_review_or_404(db, review_id, include_deleted=False)
    review.dislike(current_user.user_id)
    db.save_review(review)
    return Envelope[ReviewOut](data=ReviewOut.model_validate(review))
