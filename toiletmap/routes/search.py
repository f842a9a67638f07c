"""
Proximity search over approved toilets.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from toiletmap.config import get_settings
from toiletmap.db import DbClient
from toiletmap.dependencies import get_db_client
from toiletmap.geo import filter_by_radius
from toiletmap.routes.toilets import toilet_out
from toiletmap.schemas import Envelope, ToiletOut

router = APIRouter(prefix="/search", tags=["search"])


@router.get("/nearby", response_model=Envelope[list[ToiletOut]])
def nearby(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: Optional[float] = Query(None, gt=0, description="Radius in meters"),
    db: DbClient = Depends(get_db_client),
):
    if lat is None or lng is None:
        raise HTTPException(status_code=400, detail="lat & lng required")
    radius = radius or get_settings().default_search_radius_meters
    matches = filter_by_radius(db.list_toilets(active=True), lat, lng, radius)
    return Envelope[list[ToiletOut]](
        data=[toilet_out(toilet, distance) for toilet, distance in matches]
    )
