"""
Pydantic schemas for the Toilet Map API.

JSON bodies use camelCase; Python code uses the snake_case field names.
"""

from __future__ import annotations

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from toiletmap.db import Role

DataT = TypeVar("DataT")


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(ApiModel, Generic[DataT]):
    success: bool = True
    data: Optional[DataT] = None
    message: Optional[str] = None


class LocationModel(ApiModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class Photo(ApiModel):
    id: Optional[str] = None
    url: str
    caption: Optional[str] = None


# Auth


class RegisterRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserOut(ApiModel):
    user_id: str
    name: str
    email: str
    role: Role
    profile_photo_url: Optional[str] = None
    points: int = 0
    ranking: int = 0
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class AuthResponse(ApiModel):
    success: bool = True
    token: str
    user: UserOut


# Toilets


class ToiletCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=200)
    location: LocationModel
    description: str = Field(default="", max_length=2000)
    photos: list[Photo] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    wheelchair_accessible: bool = False


class ToiletUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    location: Optional[LocationModel] = None
    description: Optional[str] = Field(default=None, max_length=2000)
    photos: Optional[list[Photo]] = None
    amenities: Optional[list[str]] = None
    wheelchair_accessible: Optional[bool] = None


class ToiletOut(ApiModel):
    toilet_id: str
    name: str
    location: LocationModel
    description: str = ""
    photos: list[Photo] = Field(default_factory=list)
    average_rating: float = 0.0
    cleanliness_rating: float = 0.0
    layout_rating: float = 0.0
    spaciousness_rating: float = 0.0
    amenities_rating: float = 0.0
    review_count: int = 0
    amenities: list[str] = Field(default_factory=list)
    wheelchair_accessible: bool = False
    is_active: bool = False
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    distance_meters: Optional[float] = None


class DuplicateToiletResponse(ApiModel):
    success: bool = False
    message: str
    existing: ToiletOut


# Reviews


class Reply(ApiModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    text: str = ""
    created_at: Optional[datetime] = None


class ReviewCreate(ApiModel):
    toilet_id: str = Field(..., min_length=1)
    overall_rating: float = Field(..., ge=0, le=5)
    cleanliness_rating: Optional[float] = Field(default=None, ge=0, le=5)
    layout_rating: Optional[float] = Field(default=None, ge=0, le=5)
    spaciousness_rating: Optional[float] = Field(default=None, ge=0, le=5)
    amenities_rating: Optional[float] = Field(default=None, ge=0, le=5)
    comment: str = Field(default="", max_length=2000)
    photos: list[Photo] = Field(default_factory=list)


class ReviewUpdate(ApiModel):
    overall_rating: Optional[float] = Field(default=None, ge=0, le=5)
    cleanliness_rating: Optional[float] = Field(default=None, ge=0, le=5)
    layout_rating: Optional[float] = Field(default=None, ge=0, le=5)
    spaciousness_rating: Optional[float] = Field(default=None, ge=0, le=5)
    amenities_rating: Optional[float] = Field(default=None, ge=0, le=5)
    comment: Optional[str] = Field(default=None, max_length=2000)
    photos: Optional[list[Photo]] = None


class ReviewOut(ApiModel):
    review_id: str
    toilet_id: str
    user_id: str
    overall_rating: float
    cleanliness_rating: Optional[float] = None
    layout_rating: Optional[float] = None
    spaciousness_rating: Optional[float] = None
    amenities_rating: Optional[float] = None
    comment: str = ""
    photos: list[Photo] = Field(default_factory=list)
    likes: int = 0
    dislikes: int = 0
    liked_by: list[str] = Field(default_factory=list)
    disliked_by: list[str] = Field(default_factory=list)
    replies: list[Reply] = Field(default_factory=list)
    is_deleted: bool = False
    created_at: datetime
    updated_at: datetime


class ToiletDetail(ApiModel):
    toilet: ToiletOut
    reviews: list[ReviewOut]


# Admin


class RejectRequest(ApiModel):
    reason: Optional[str] = Field(default=None, max_length=1024)


class RejectResponse(ApiModel):
    success: bool = True
    message: str
    reason: Optional[str] = None
