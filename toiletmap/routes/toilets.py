"""
Toilet listings: browse, submit, edit and deactivate.
"""

from __future__ import annotations

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from toiletmap.config import get_settings
from toiletmap.db import DbClient, Location, ToiletRecord, new_id
from toiletmap.dependencies import get_db_client
from toiletmap.geo import filter_by_radius, find_duplicate
from toiletmap.schemas import (
    DuplicateToiletResponse,
    Envelope,
    Photo,
    ReviewOut,
    ToiletCreate,
    ToiletDetail,
    ToiletOut,
    ToiletUpdate,
)
from toiletmap.security import CurrentUser, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/toilets", tags=["toilets"])

DUPLICATE_MESSAGE = (
    "A similar toilet is already listed. Would you like to review it instead?"
)
CREATED_MESSAGE = "Your toilet is successfully added! Pending admin approval."


def toilet_out(toilet: ToiletRecord, distance: Optional[float] = None) -> ToiletOut:
    out = ToiletOut.model_validate(toilet)
    if distance is not None:
        out.distance_meters = round(distance, 1)
    return out


def photo_records(photos: list[Photo]) -> list[dict]:
    return [
        {"id": photo.id or new_id(), "url": photo.url, "caption": photo.caption}
        for photo in photos
    ]


def split_amenities(values: Optional[list[str]]) -> list[str]:
    wanted: list[str] = []
    for value in values or []:
        wanted.extend(part.strip() for part in value.split(",") if part.strip())
    return wanted


def get_toilet_or_404(db: DbClient, toilet_id: str) -> ToiletRecord:
    toilet = db.get_toilet(toilet_id)
    if not toilet:
        raise HTTPException(status_code=404, detail="Not found")
    return toilet


@router.get("", response_model=Envelope[list[ToiletOut]])
def list_toilets(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: Optional[float] = Query(None, gt=0),
    min_rating: Optional[float] = Query(None, alias="minRating", ge=0, le=5),
    amenities: Optional[list[str]] = Query(None),
    sort: Optional[Literal["high_to_low", "low_to_high"]] = Query(None),
    db: DbClient = Depends(get_db_client),
):
    """
    List approved toilets.

    ``lat``/``lng`` restrict results to ``radius`` meters, nearest first.
    ``sort`` orders by average rating and takes precedence over distance.
    """
    toilets = db.list_toilets(active=True)
    if min_rating is not None:
        toilets = [t for t in toilets if t.average_rating >= min_rating]
    wanted = split_amenities(amenities)
    if wanted:
        toilets = [t for t in toilets if all(a in t.amenities for a in wanted)]

    if lat is not None and lng is not None:
        radius = radius or get_settings().default_search_radius_meters
        results = [
            toilet_out(toilet, distance)
            for toilet, distance in filter_by_radius(toilets, lat, lng, radius)
        ]
    else:
        results = [toilet_out(toilet) for toilet in toilets]

    if sort == "high_to_low":
        results.sort(key=lambda t: t.average_rating, reverse=True)
    elif sort == "low_to_high":
        results.sort(key=lambda t: t.average_rating)
    return Envelope[list[ToiletOut]](data=results)


@router.get("/{toilet_id}", response_model=Envelope[ToiletDetail])
def get_toilet(toilet_id: str, db: DbClient = Depends(get_db_client)):
    toilet = get_toilet_or_404(db, toilet_id)
    reviews = [ReviewOut.model_validate(r) for r in db.list_reviews(toilet_id)]
    return Envelope[ToiletDetail](
        data=ToiletDetail(toilet=toilet_out(toilet), reviews=reviews)
    )


@router.post(
    "",
    response_model=Envelope[ToiletOut],
    status_code=201,
    responses={409: {"model": DuplicateToiletResponse}},
)
def create_toilet(
    payload: ToiletCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    settings = get_settings()
    lat, lng = payload.location.lat, payload.location.lng
    existing = find_duplicate(
        db.list_toilets(), lat, lng, settings.duplicate_threshold_meters
    )
    if existing:
        logger.info(
            "Rejected toilet near (%s, %s): duplicate of %s",
            lat,
            lng,
            existing.toilet_id,
        )
        body = DuplicateToiletResponse(
            message=DUPLICATE_MESSAGE, existing=toilet_out(existing)
        )
        return JSONResponse(
            status_code=409, content=body.model_dump(mode="json", by_alias=True)
        )

    toilet = db.save_toilet(
        ToiletRecord(
            name=payload.name,
            location=Location(lat=lat, lng=lng),
            description=payload.description,
            photos=photo_records(payload.photos),
            amenities=list(payload.amenities),
            wheelchair_accessible=payload.wheelchair_accessible,
            is_active=False,
            created_by=current_user.user_id,
        )
    )
    logger.info("Toilet %s submitted by %s", toilet.toilet_id, current_user.user_id)
    return Envelope[ToiletOut](data=toilet_out(toilet), message=CREATED_MESSAGE)


@router.put("/{toilet_id}", response_model=Envelope[ToiletOut])
def update_toilet(
    toilet_id: str,
    payload: ToiletUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    toilet = get_toilet_or_404(db, toilet_id)
    if not current_user.can_modify(toilet.created_by):
        raise HTTPException(status_code=403, detail="Forbidden")

    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in updates:
        toilet.name = payload.name
    if "location" in updates:
        toilet.location = Location(lat=payload.location.lat, lng=payload.location.lng)
    if "description" in updates:
        toilet.description = payload.description
    if "photos" in updates:
        toilet.photos = photo_records(payload.photos)
    if "amenities" in updates:
        toilet.amenities = list(payload.amenities)
    if "wheelchair_accessible" in updates:
        toilet.wheelchair_accessible = payload.wheelchair_accessible
    toilet.touch()
    db.save_toilet(toilet)
    return Envelope[ToiletOut](data=toilet_out(toilet))


@router.delete("/{toilet_id}", response_model=Envelope[ToiletOut])
def deactivate_toilet(
    toilet_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    toilet = get_toilet_or_404(db, toilet_id)
    if not current_user.can_modify(toilet.created_by):
        raise HTTPException(status_code=403, detail="Forbidden")

    toilet.is_active = False
    toilet.touch()
    db.save_toilet(toilet)
    logger.info("Toilet %s deactivated by %s", toilet_id, current_user.user_id)
    return Envelope[ToiletOut](data=toilet_out(toilet), message="Deactivated")
