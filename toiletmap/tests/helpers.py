"""
Shared fixtures for the API tests.
"""

from __future__ import annotations

import unittest
from typing import Iterable, Optional

from fastapi.testclient import TestClient

from toiletmap.app import create_app
from toiletmap.db import (
    InMemoryDbClient,
    Location,
    ReviewRecord,
    Role,
    ToiletRecord,
    UserRecord,
    new_id,
)
from toiletmap.dependencies import get_db_client
from toiletmap.security import create_access_token

ATHENS = (37.9838, 23.7275)


class ApiTestCase(unittest.TestCase):
    """Runs each test against a fresh app backed by an empty in-memory store."""

    def setUp(self):
        self.db = InMemoryDbClient()
        self.app = create_app()
        self.app.dependency_overrides[get_db_client] = lambda: self.db
        self.client = TestClient(self.app)

    def tearDown(self):
        self.app.dependency_overrides.clear()

    def make_user(
        self, name: str = "Test User", *, role: Role = Role.USER
    ) -> tuple[UserRecord, dict]:
        user = self.db.save_user(
            UserRecord(
                name=name,
                email=f"{new_id()[:12]}@example.com",
                password_hash="not-a-real-hash",
                role=role,
            )
        )
        return user, {"Authorization": f"Bearer {create_access_token(user)}"}

    def make_toilet(
        self,
        name: str = "Test Toilet",
        lat: float = ATHENS[0],
        lng: float = ATHENS[1],
        *,
        active: bool = True,
        created_by: Optional[str] = None,
        amenities: Iterable[str] = (),
        average_rating: float = 0.0,
    ) -> ToiletRecord:
        return self.db.save_toilet(
            ToiletRecord(
                name=name,
                location=Location(lat=lat, lng=lng),
                is_active=active,
                created_by=created_by,
                amenities=list(amenities),
                average_rating=average_rating,
            )
        )

    def make_review(
        self, toilet_id: str, user_id: str, overall: float, **ratings
    ) -> ReviewRecord:
        return self.db.save_review(
            ReviewRecord(
                toilet_id=toilet_id,
                user_id=user_id,
                overall_rating=overall,
                **ratings,
            )
        )
