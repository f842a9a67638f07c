"""
Database abstraction for SQL backends and an in-memory implementation.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Protocol

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    create_engine,
    delete,
    select,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from toiletmap.errors import ApiError

RATING_FIELDS = (
    "overall_rating",
    "cleanliness_rating",
    "layout_rating",
    "spaciousness_rating",
    "amenities_rating",
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


class Role(str, Enum):
    USER = "USER"
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"


class DbClient(Protocol):
    """Interface for database access."""

    def save_user(self, user: "UserRecord") -> "UserRecord":
        ...

    def get_user(self, user_id: str) -> Optional["UserRecord"]:
        ...

    def get_user_by_email(self, email: str) -> Optional["UserRecord"]:
        ...

    def save_toilet(self, toilet: "ToiletRecord") -> "ToiletRecord":
        ...

    def get_toilet(self, toilet_id: str) -> Optional["ToiletRecord"]:
        ...

    def list_toilets(
        self, *, active: Optional[bool] = None, limit: Optional[int] = None
    ) -> list["ToiletRecord"]:
        ...

    def delete_toilet(self, toilet_id: str) -> bool:
        ...

    def save_review(self, review: "ReviewRecord") -> "ReviewRecord":
        ...

    def get_review(self, review_id: str) -> Optional["ReviewRecord"]:
        ...

    def list_reviews(
        self, toilet_id: str, *, include_deleted: bool = False
    ) -> list["ReviewRecord"]:
        ...

    def find_active_review(
        self, toilet_id: str, user_id: str
    ) -> Optional["ReviewRecord"]:
        ...

    def reset(self) -> None:
        ...


@dataclass
class Location:
    lat: float
    lng: float


@dataclass
class UserRecord:
    name: str
    email: str
    password_hash: str
    user_id: str = field(default_factory=new_id)
    role: Role = Role.USER
    profile_photo_url: Optional[str] = None
    points: int = 0
    ranking: int = 0
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class ToiletRecord:
    name: str
    location: Location
    created_by: Optional[str] = None
    toilet_id: str = field(default_factory=new_id)
    description: str = ""
    photos: list[dict] = field(default_factory=list)
    average_rating: float = 0.0
    cleanliness_rating: float = 0.0
    layout_rating: float = 0.0
    spaciousness_rating: float = 0.0
    amenities_rating: float = 0.0
    review_count: int = 0
    amenities: list[str] = field(default_factory=list)
    wheelchair_accessible: bool = False
    is_active: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def touch(self) -> None:
        self.updated_at = utcnow()


@dataclass
class ReviewRecord:
    toilet_id: str
    user_id: str
    overall_rating: float
    review_id: str = field(default_factory=new_id)
    cleanliness_rating: Optional[float] = None
    layout_rating: Optional[float] = None
    spaciousness_rating: Optional[float] = None
    amenities_rating: Optional[float] = None
    comment: str = ""
    photos: list[dict] = field(default_factory=list)
    liked_by: list[str] = field(default_factory=list)
    disliked_by: list[str] = field(default_factory=list)
    replies: list[dict] = field(default_factory=list)
    is_deleted: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def likes(self) -> int:
        return len(self.liked_by)

    @property
    def dislikes(self) -> int:
        return len(self.disliked_by)

    def like(self, user_id: str) -> None:
        """Record a like, dropping any earlier dislike by the same user."""
        self.disliked_by = [u for u in self.disliked_by if u != user_id]
        if user_id not in self.liked_by:
            self.liked_by.append(user_id)
        self.touch()

    def dislike(self, user_id: str) -> None:
        """Record a dislike, dropping any earlier like by the same user."""
        self.liked_by = [u for u in self.liked_by if u != user_id]
        if user_id not in self.disliked_by:
            self.disliked_by.append(user_id)
        self.touch()

    def touch(self) -> None:
        self.updated_at = utcnow()


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.users: Dict[str, UserRecord] = {}
        self.toilets: Dict[str, ToiletRecord] = {}
        self.reviews: Dict[str, ReviewRecord] = {}

    def save_user(self, user: UserRecord) -> UserRecord:
        self.users[user.user_id] = user
        return user

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        return self.users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        for user in self.users.values():
            if user.email == email:
                return user
        return None

    def save_toilet(self, toilet: ToiletRecord) -> ToiletRecord:
        self.toilets[toilet.toilet_id] = toilet
        return toilet

    def get_toilet(self, toilet_id: str) -> Optional[ToiletRecord]:
        return self.toilets.get(toilet_id)

    def list_toilets(
        self, *, active: Optional[bool] = None, limit: Optional[int] = None
    ) -> list[ToiletRecord]:
        items: list[ToiletRecord] = []
        for toilet in self.toilets.values():
            if active is not None and toilet.is_active != active:
                continue
            items.append(toilet)
            if limit is not None and len(items) >= limit:
                break
        return items

    def delete_toilet(self, toilet_id: str) -> bool:
        return self.toilets.pop(toilet_id, None) is not None

    def save_review(self, review: ReviewRecord) -> ReviewRecord:
        self.reviews[review.review_id] = review
        return review

    def get_review(self, review_id: str) -> Optional[ReviewRecord]:
        return self.reviews.get(review_id)

    def list_reviews(
        self, toilet_id: str, *, include_deleted: bool = False
    ) -> list[ReviewRecord]:
        return [
            review
            for review in self.reviews.values()
            if review.toilet_id == toilet_id
            and (include_deleted or not review.is_deleted)
        ]

    def find_active_review(
        self, toilet_id: str, user_id: str
    ) -> Optional[ReviewRecord]:
        for review in self.reviews.values():
            if (
                review.toilet_id == toilet_id
                and review.user_id == user_id
                and not review.is_deleted
            ):
                return review
        return None

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.users.clear()
        self.toilets.clear()
        self.reviews.clear()


class SqlDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    # Users

    def _to_user_record(self, row: "UserRow") -> UserRecord:
        return UserRecord(
            user_id=row.user_id,
            name=row.name,
            email=row.email,
            password_hash=row.password_hash,
            role=Role(row.role),
            profile_photo_url=row.profile_photo_url,
            points=row.points,
            ranking=row.ranking,
            is_active=row.is_active,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def save_user(self, user: UserRecord) -> UserRecord:
        with self.Session() as session:
            session.merge(
                UserRow(
                    user_id=user.user_id,
                    name=user.name,
                    email=user.email,
                    password_hash=user.password_hash,
                    role=Role(user.role).value,
                    profile_photo_url=user.profile_photo_url,
                    points=user.points,
                    ranking=user.ranking,
                    is_active=user.is_active,
                    created_at=user.created_at,
                    updated_at=user.updated_at,
                )
            )
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ApiError("Email exists", status=409) from exc
        return user

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.get(UserRow, user_id)
            return self._to_user_record(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self.Session() as session:
            stmt = select(UserRow).where(UserRow.email == email).limit(1)
            row = session.execute(stmt).scalar_one_or_none()
            return self._to_user_record(row) if row else None

    # Toilets

    def _to_toilet_record(self, row: "ToiletRow") -> ToiletRecord:
        return ToiletRecord(
            toilet_id=row.toilet_id,
            name=row.name,
            location=Location(lat=row.lat, lng=row.lng),
            description=row.description or "",
            photos=list(row.photos or []),
            average_rating=row.average_rating,
            cleanliness_rating=row.cleanliness_rating,
            layout_rating=row.layout_rating,
            spaciousness_rating=row.spaciousness_rating,
            amenities_rating=row.amenities_rating,
            review_count=row.review_count,
            amenities=list(row.amenities or []),
            wheelchair_accessible=row.wheelchair_accessible,
            is_active=row.is_active,
            created_by=row.created_by,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def save_toilet(self, toilet: ToiletRecord) -> ToiletRecord:
        with self.Session() as session:
            session.merge(
                ToiletRow(
                    toilet_id=toilet.toilet_id,
                    name=toilet.name,
                    lat=toilet.location.lat,
                    lng=toilet.location.lng,
                    description=toilet.description,
                    photos=copy.deepcopy(toilet.photos),
                    average_rating=toilet.average_rating,
                    cleanliness_rating=toilet.cleanliness_rating,
                    layout_rating=toilet.layout_rating,
                    spaciousness_rating=toilet.spaciousness_rating,
                    amenities_rating=toilet.amenities_rating,
                    review_count=toilet.review_count,
                    amenities=list(toilet.amenities),
                    wheelchair_accessible=toilet.wheelchair_accessible,
                    is_active=toilet.is_active,
                    created_by=toilet.created_by,
                    created_at=toilet.created_at,
                    updated_at=toilet.updated_at,
                )
            )
            session.commit()
        return toilet

    def get_toilet(self, toilet_id: str) -> Optional[ToiletRecord]:
        with self.Session() as session:
            row = session.get(ToiletRow, toilet_id)
            return self._to_toilet_record(row) if row else None

    def list_toilets(
        self, *, active: Optional[bool] = None, limit: Optional[int] = None
    ) -> list[ToiletRecord]:
        with self.Session() as session:
            stmt = select(ToiletRow)
            if active is not None:
                stmt = stmt.where(ToiletRow.is_active == active)
            stmt = stmt.order_by(ToiletRow.created_at.asc())
            if limit is not None:
                stmt = stmt.limit(limit)
            rows = session.execute(stmt).scalars().all()
            return [self._to_toilet_record(row) for row in rows]

    def delete_toilet(self, toilet_id: str) -> bool:
        with self.Session() as session:
            row = session.get(ToiletRow, toilet_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    # Reviews

    def _to_review_record(self, row: "ReviewRow") -> ReviewRecord:
        return ReviewRecord(
            review_id=row.review_id,
            toilet_id=row.toilet_id,
            user_id=row.user_id,
            overall_rating=row.overall_rating,
            cleanliness_rating=row.cleanliness_rating,
            layout_rating=row.layout_rating,
            spaciousness_rating=row.spaciousness_rating,
            amenities_rating=row.amenities_rating,
            comment=row.comment or "",
            photos=list(row.photos or []),
            liked_by=list(row.liked_by or []),
            disliked_by=list(row.disliked_by or []),
            replies=list(row.replies or []),
            is_deleted=row.is_deleted,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def save_review(self, review: ReviewRecord) -> ReviewRecord:
        with self.Session() as session:
            session.merge(
                ReviewRow(
                    review_id=review.review_id,
                    toilet_id=review.toilet_id,
                    user_id=review.user_id,
                    overall_rating=review.overall_rating,
                    cleanliness_rating=review.cleanliness_rating,
                    layout_rating=review.layout_rating,
                    spaciousness_rating=review.spaciousness_rating,
                    amenities_rating=review.amenities_rating,
                    comment=review.comment,
                    photos=copy.deepcopy(review.photos),
                    liked_by=list(review.liked_by),
                    disliked_by=list(review.disliked_by),
                    replies=copy.deepcopy(review.replies),
                    is_deleted=review.is_deleted,
                    created_at=review.created_at,
                    updated_at=review.updated_at,
                )
            )
            session.commit()
        return review

    def get_review(self, review_id: str) -> Optional[ReviewRecord]:
        with self.Session() as session:
            row = session.get(ReviewRow, review_id)
            return self._to_review_record(row) if row else None

    def list_reviews(
        self, toilet_id: str, *, include_deleted: bool = False
    ) -> list[ReviewRecord]:
        with self.Session() as session:
            stmt = select(ReviewRow).where(ReviewRow.toilet_id == toilet_id)
            if not include_deleted:
                stmt = stmt.where(ReviewRow.is_deleted.is_(False))
            stmt = stmt.order_by(ReviewRow.created_at.asc())
            rows = session.execute(stmt).scalars().all()
            return [self._to_review_record(row) for row in rows]

    def find_active_review(
        self, toilet_id: str, user_id: str
    ) -> Optional[ReviewRecord]:
        with self.Session() as session:
            stmt = (
                select(ReviewRow)
                .where(
                    ReviewRow.toilet_id == toilet_id,
                    ReviewRow.user_id == user_id,
                    ReviewRow.is_deleted.is_(False),
                )
                .limit(1)
            )
            row = session.execute(stmt).scalar_one_or_none()
            return self._to_review_record(row) if row else None

    def reset(self) -> None:
        with self.Session() as session:
            session.execute(delete(ReviewRow))
            session.execute(delete(ToiletRow))
            session.execute(delete(UserRow))
            session.commit()


Base = declarative_base()


class UserRow(Base):
    __tablename__ = "users"

    user_id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    profile_photo_url = Column(String, nullable=True)
    role = Column(String, nullable=False, default=Role.USER.value)
    points = Column(Integer, nullable=False, default=0)
    ranking = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class ToiletRow(Base):
    __tablename__ = "toilets"

    toilet_id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    description = Column(Text, nullable=True)
    photos = Column(JSON, nullable=False, default=list)
    average_rating = Column(Float, nullable=False, default=0.0)
    cleanliness_rating = Column(Float, nullable=False, default=0.0)
    layout_rating = Column(Float, nullable=False, default=0.0)
    spaciousness_rating = Column(Float, nullable=False, default=0.0)
    amenities_rating = Column(Float, nullable=False, default=0.0)
    review_count = Column(Integer, nullable=False, default=0)
    amenities = Column(JSON, nullable=False, default=list)
    wheelchair_accessible = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=False, index=True)
    created_by = Column(String, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class ReviewRow(Base):
    __tablename__ = "reviews"

    review_id = Column(String, primary_key=True)
    toilet_id = Column(String, nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    overall_rating = Column(Float, nullable=False)
    cleanliness_rating = Column(Float, nullable=True)
    layout_rating = Column(Float, nullable=True)
    spaciousness_rating = Column(Float, nullable=True)
    amenities_rating = Column(Float, nullable=True)
    comment = Column(Text, nullable=True)
    photos = Column(JSON, nullable=False, default=list)
    liked_by = Column(JSON, nullable=False, default=list)
    disliked_by = Column(JSON, nullable=False, default=list)
    replies = Column(JSON, nullable=False, default=list)
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
