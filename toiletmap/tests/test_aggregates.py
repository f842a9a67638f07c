import unittest

from toiletmap.aggregates import (
    RatingAggregates,
    compute_aggregates,
    recompute_toilet_aggregates,
    round_rating,
)
from toiletmap.db import InMemoryDbClient, Location, ReviewRecord, ToiletRecord


def _review(overall, clean=None, layout=None, space=None, amenities=None, deleted=False):
    return ReviewRecord(
        toilet_id="t1",
        user_id="u1",
        overall_rating=overall,
        cleanliness_rating=clean,
        layout_rating=layout,
        spaciousness_rating=space,
        amenities_rating=amenities,
        is_deleted=deleted,
    )


class ComputeAggregatesTests(unittest.TestCase):
    def test_no_reviews_is_all_zero(self):
        self.assertEqual(compute_aggregates([]), RatingAggregates())

    def test_means_are_rounded_to_two_decimals(self):
        aggregates = compute_aggregates(
            [
                _review(5, 5, 4, 3, 2),
                _review(4, 4, 4, 4, 4),
                _review(4, 3, 5, 5, 5),
            ]
        )
        self.assertEqual(aggregates.review_count, 3)
        self.assertEqual(aggregates.average_rating, 4.33)
        self.assertEqual(aggregates.cleanliness_rating, 4.0)
        self.assertEqual(aggregates.layout_rating, 4.33)
        self.assertEqual(aggregates.spaciousness_rating, 4.0)
        self.assertEqual(aggregates.amenities_rating, 3.67)

    def test_ties_round_half_up(self):
        aggregates = compute_aggregates(
            [_review(r) for r in (5, 5, 5, 4, 4, 4, 3, 3)]
        )
        self.assertEqual(aggregates.average_rating, 4.13)

        aggregates = compute_aggregates(
            [_review(r) for r in (5, 5, 5, 5, 5, 4, 4, 4)]
        )
        self.assertEqual(aggregates.average_rating, 4.63)

    def test_round_rating(self):
        self.assertEqual(round_rating(4.125), 4.13)
        self.assertEqual(round_rating(4.124), 4.12)
        self.assertEqual(round_rating(1 / 3), 0.33)
        self.assertEqual(round_rating(0), 0.0)

    def test_deleted_reviews_are_ignored(self):
        aggregates = compute_aggregates(
            [_review(4.5, 4, 4, 4.5, 4.5), _review(1, 1, 1, 1, 1, deleted=True)]
        )
        self.assertEqual(aggregates.review_count, 1)
        self.assertEqual(aggregates.average_rating, 4.5)
        self.assertEqual(aggregates.cleanliness_rating, 4.0)

    def test_only_deleted_reviews_is_all_zero(self):
        aggregates = compute_aggregates([_review(3, deleted=True)])
        self.assertEqual(aggregates, RatingAggregates())

    def test_missing_sub_ratings_count_as_zero(self):
        aggregates = compute_aggregates([_review(4, 4), _review(2)])
        self.assertEqual(aggregates.average_rating, 3.0)
        self.assertEqual(aggregates.cleanliness_rating, 2.0)
        self.assertEqual(aggregates.layout_rating, 0.0)


class RecomputeToiletAggregatesTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.toilet = self.db.save_toilet(
            ToiletRecord(
                name="Station WC",
                location=Location(lat=37.98, lng=23.72),
                average_rating=4.9,
                review_count=7,
            )
        )

    def _add_review(self, overall, **kwargs):
        return self.db.save_review(
            ReviewRecord(
                toilet_id=self.toilet.toilet_id,
                user_id=kwargs.pop("user_id", "u1"),
                overall_rating=overall,
                **kwargs,
            )
        )

    def test_writes_means_onto_toilet(self):
        self._add_review(4.5, cleanliness_rating=4.0, user_id="a")
        self._add_review(3.9, cleanliness_rating=3.8, user_id="b")

        updated = recompute_toilet_aggregates(self.db, self.toilet.toilet_id)

        self.assertEqual(updated.review_count, 2)
        self.assertAlmostEqual(updated.average_rating, 4.2)
        self.assertAlmostEqual(updated.cleanliness_rating, 3.9)
        stored = self.db.get_toilet(self.toilet.toilet_id)
        self.assertAlmostEqual(stored.average_rating, 4.2)

    def test_resets_to_zero_when_no_reviews_remain(self):
        review = self._add_review(5, cleanliness_rating=5)
        recompute_toilet_aggregates(self.db, self.toilet.toilet_id)
        review.is_deleted = True
        self.db.save_review(review)

        updated = recompute_toilet_aggregates(self.db, self.toilet.toilet_id)

        self.assertEqual(updated.review_count, 0)
        self.assertEqual(updated.average_rating, 0)
        self.assertEqual(updated.cleanliness_rating, 0)
        self.assertEqual(updated.layout_rating, 0)
        self.assertEqual(updated.spaciousness_rating, 0)
        self.assertEqual(updated.amenities_rating, 0)

    def test_missing_toilet_is_a_no_op(self):
        self.assertIsNone(recompute_toilet_aggregates(self.db, "does-not-exist"))


if __name__ == "__main__":
    unittest.main()
