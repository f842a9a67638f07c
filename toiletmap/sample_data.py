"""
Demo dataset for in-memory mode and the seed script.
"""

from __future__ import annotations

import logging

from toiletmap.aggregates import recompute_toilet_aggregates
from toiletmap.db import DbClient, Location, ReviewRecord, Role, ToiletRecord, UserRecord
from toiletmap.security import hash_password

logger = logging.getLogger(__name__)

SAMPLE_USERS = [
    {
        "key": "admin",
        "name": "Admin User",
        "email": "admin@example.com",
        "password": "Admin123!",
        "role": Role.ADMIN,
        "points": 0,
        "ranking": 1,
    },
    {
        "key": "maria",
        "name": "Maria Pap",
        "email": "maria@example.com",
        "password": "Maria123!",
        "role": Role.USER,
        "points": 120,
        "ranking": 3,
    },
    {
        "key": "john",
        "name": "John Smith",
        "email": "john@example.com",
        "password": "John123!",
        "role": Role.USER,
        "points": 50,
        "ranking": 2,
    },
]

SAMPLE_TOILETS = [
    {
        "name": "Syntagma Public Toilet",
        "location": (37.9755, 23.7348),
        "description": "Central and often busy, average cleanliness",
        "amenities": ["toilet_paper", "soap"],
        "wheelchair_accessible": True,
        "created_by": "maria",
    },
    {
        "name": "Monastiraki Metro WC",
        "location": (37.9763, 23.7258),
        "description": "Good condition most of the day",
        "amenities": ["toilet_paper", "soap", "airblower"],
        "wheelchair_accessible": False,
        "created_by": "john",
    },
    {
        "name": "Coffee Island WC - Thessaloniki",
        "location": (40.6401, 22.9444),
        "description": "Available to customers",
        "amenities": ["soap"],
        "wheelchair_accessible": False,
        "created_by": "admin",
    },
    {
        "name": "Neapoli Park WC",
        "location": (37.9934, 23.7030),
        "description": "Municipal toilet inside the park",
        "amenities": ["toilet_paper"],
        "wheelchair_accessible": True,
        "created_by": "maria",
    },
    {
        "name": "Shopping Mall WC - Golden Hall",
        "location": (38.0208, 23.8030),
        "description": "Very clean toilet in a shopping centre",
        "amenities": ["soap", "airblower", "toilet_paper"],
        "wheelchair_accessible": True,
        "created_by": "john",
    },
]

# (toilet index, user key, (overall, cleanliness, layout, spaciousness, amenities), comment)
SAMPLE_REVIEWS = [
    (0, "maria", (4, 4, 4, 4, 4), "Good overall."),
    (0, "john", (3, 3, 3, 3, 3), "Average."),
    (1, "maria", (5, 5, 5, 5, 5), "Very clean!"),
    (3, "john", (3.5, 3, 4, 3.5, 3), "Fine for a public one."),
    (4, "maria", (4.5, 5, 4, 4.5, 5), "Very good!"),
]


def seed_sample_data(db: DbClient) -> dict[str, int]:
    """
    Insert the demo users, listings and reviews and compute listing ratings.

    Returns counts of inserted records.
    """
    users: dict[str, UserRecord] = {}
    for entry in SAMPLE_USERS:
        user = UserRecord(
            name=entry["name"],
            email=entry["email"],
            password_hash=hash_password(entry["password"]),
            role=entry["role"],
            points=entry["points"],
            ranking=entry["ranking"],
        )
        users[entry["key"]] = db.save_user(user)

    toilets: list[ToiletRecord] = []
    for entry in SAMPLE_TOILETS:
        lat, lng = entry["location"]
        toilet = ToiletRecord(
            name=entry["name"],
            location=Location(lat=lat, lng=lng),
            description=entry["description"],
            amenities=list(entry["amenities"]),
            wheelchair_accessible=entry["wheelchair_accessible"],
            is_active=True,
            created_by=users[entry["created_by"]].user_id,
        )
        toilets.append(db.save_toilet(toilet))

    for index, user_key, ratings, comment in SAMPLE_REVIEWS:
        overall, cleanliness, layout, spaciousness, amenities = ratings
        db.save_review(
            ReviewRecord(
                toilet_id=toilets[index].toilet_id,
                user_id=users[user_key].user_id,
                overall_rating=overall,
                cleanliness_rating=cleanliness,
                layout_rating=layout,
                spaciousness_rating=spaciousness,
                amenities_rating=amenities,
                comment=comment,
            )
        )

    for toilet in toilets:
        recompute_toilet_aggregates(db, toilet.toilet_id)

    counts = {
        "users": len(users),
        "toilets": len(toilets),
        "reviews": len(SAMPLE_REVIEWS),
    }
    logger.info("Seeded sample data: %s", counts)
    return counts
