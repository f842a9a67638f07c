import unittest

from toiletmap.db import Role
from toiletmap.routes.reviews import ALREADY_RATED
from toiletmap.tests.helpers import ApiTestCase


class ReviewApiTestCase(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.toilet = self.make_toilet()
        self.author, self.author_headers = self.make_user("Author")

    def post_review(self, headers=None, **fields):
        payload = {"toiletId": self.toilet.toilet_id, "overallRating": 4}
        payload.update(fields)
        return self.client.post(
            "/api/reviews", json=payload, headers=headers or self.author_headers
        )

    def stored_toilet(self):
        return self.db.get_toilet(self.toilet.toilet_id)


class CreateReviewTests(ReviewApiTestCase):
    def test_create_recomputes_aggregates(self):
        resp = self.post_review(
            overallRating=4.5,
            cleanlinessRating=4,
            layoutRating=3,
            spaciousnessRating=5,
            amenitiesRating=2,
            comment="Clean enough",
        )

        self.assertEqual(resp.status_code, 201)
        data = resp.json()["data"]
        self.assertEqual(data["userId"], self.author.user_id)
        self.assertEqual(data["comment"], "Clean enough")
        self.assertEqual(data["likes"], 0)
        self.assertEqual(data["replies"], [])

        toilet = self.stored_toilet()
        self.assertEqual(toilet.review_count, 1)
        self.assertEqual(toilet.average_rating, 4.5)
        self.assertEqual(toilet.cleanliness_rating, 4)
        self.assertEqual(toilet.layout_rating, 3)
        self.assertEqual(toilet.spaciousness_rating, 5)
        self.assertEqual(toilet.amenities_rating, 2)

    def test_average_across_users(self):
        _, other_headers = self.make_user("Other")
        self.post_review(overallRating=4.5)
        self.post_review(headers=other_headers, overallRating=3.9)

        self.assertEqual(self.stored_toilet().review_count, 2)
        self.assertAlmostEqual(self.stored_toilet().average_rating, 4.2)

    def test_second_review_by_same_user_conflicts(self):
        self.post_review()
        resp = self.post_review(overallRating=1)
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["message"], ALREADY_RATED)
        self.assertEqual(self.stored_toilet().average_rating, 4)

    def test_unknown_toilet(self):
        resp = self.post_review(toiletId="missing")
        self.assertEqual(resp.status_code, 404)

    def test_missing_overall_rating(self):
        resp = self.client.post(
            "/api/reviews",
            json={"toiletId": self.toilet.toilet_id},
            headers=self.author_headers,
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("overallRating", resp.json()["message"])

    def test_rating_out_of_range(self):
        self.assertEqual(self.post_review(overallRating=6).status_code, 400)
        self.assertEqual(self.post_review(cleanlinessRating=-1).status_code, 400)

    def test_requires_auth(self):
        resp = self.client.post(
            "/api/reviews", json={"toiletId": self.toilet.toilet_id, "overallRating": 4}
        )
        self.assertEqual(resp.status_code, 401)


class ListReviewsTests(ReviewApiTestCase):
    def test_lists_visible_reviews(self):
        kept = self.make_review(self.toilet.toilet_id, "u1", 5)
        hidden = self.make_review(self.toilet.toilet_id, "u2", 1)
        hidden.is_deleted = True
        self.make_review("other-toilet", "u3", 3)

        resp = self.client.get(f"/api/reviews/toilet/{self.toilet.toilet_id}")

        self.assertEqual(resp.status_code, 200)
        self.assertEqual([r["reviewId"] for r in resp.json()["data"]], [kept.review_id])


class UpdateReviewTests(ReviewApiTestCase):
    def setUp(self):
        super().setUp()
        self.review_id = self.post_review(overallRating=4, cleanlinessRating=4).json()[
            "data"
        ]["reviewId"]

    def test_author_updates_and_aggregates_follow(self):
        resp = self.client.put(
            f"/api/reviews/{self.review_id}",
            json={"overallRating": 2, "comment": "Got worse"},
            headers=self.author_headers,
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["comment"], "Got worse")
        toilet = self.stored_toilet()
        self.assertEqual(toilet.average_rating, 2)
        self.assertEqual(toilet.cleanliness_rating, 4)

    def test_sub_rating_can_be_cleared(self):
        self.client.put(
            f"/api/reviews/{self.review_id}",
            json={"cleanlinessRating": None},
            headers=self.author_headers,
        )
        self.assertIsNone(self.db.get_review(self.review_id).cleanliness_rating)
        self.assertEqual(self.stored_toilet().cleanliness_rating, 0)

    def test_overall_rating_cannot_be_null(self):
        resp = self.client.put(
            f"/api/reviews/{self.review_id}",
            json={"overallRating": None},
            headers=self.author_headers,
        )
        self.assertEqual(resp.status_code, 400)

    def test_other_user_is_forbidden(self):
        _, headers = self.make_user("Other")
        resp = self.client.put(
            f"/api/reviews/{self.review_id}", json={"overallRating": 1}, headers=headers
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(self.stored_toilet().average_rating, 4)

    def test_admin_can_update(self):
        _, headers = self.make_user("Admin", role=Role.ADMIN)
        resp = self.client.put(
            f"/api/reviews/{self.review_id}", json={"overallRating": 1}, headers=headers
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.stored_toilet().average_rating, 1)

    def test_not_found(self):
        resp = self.client.put(
            "/api/reviews/missing", json={"overallRating": 1}, headers=self.author_headers
        )
        self.assertEqual(resp.status_code, 404)


class DeleteAndRestoreReviewTests(ReviewApiTestCase):
    def setUp(self):
        super().setUp()
        self.review_id = self.post_review(
            overallRating=5,
            cleanlinessRating=5,
            layoutRating=5,
            spaciousnessRating=5,
            amenitiesRating=5,
        ).json()["data"]["reviewId"]

    def test_deleting_last_review_resets_ratings(self):
        resp = self.client.delete(
            f"/api/reviews/{self.review_id}", headers=self.author_headers
        )

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "Deleted")
        self.assertTrue(self.db.get_review(self.review_id).is_deleted)
        toilet = self.stored_toilet()
        self.assertEqual(toilet.review_count, 0)
        self.assertEqual(toilet.average_rating, 0)
        self.assertEqual(toilet.cleanliness_rating, 0)
        self.assertEqual(toilet.layout_rating, 0)
        self.assertEqual(toilet.spaciousness_rating, 0)
        self.assertEqual(toilet.amenities_rating, 0)

    def test_user_can_rate_again_after_delete(self):
        self.client.delete(f"/api/reviews/{self.review_id}", headers=self.author_headers)
        resp = self.post_review(overallRating=3)
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(self.stored_toilet().average_rating, 3)

    def test_restore(self):
        self.client.delete(f"/api/reviews/{self.review_id}", headers=self.author_headers)

        resp = self.client.post(
            f"/api/reviews/{self.review_id}/restore", headers=self.author_headers
        )

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "Restored")
        self.assertFalse(resp.json()["data"]["isDeleted"])
        self.assertEqual(self.stored_toilet().review_count, 1)
        self.assertEqual(self.stored_toilet().average_rating, 5)

    def test_restore_conflicts_with_newer_review(self):
        self.client.delete(f"/api/reviews/{self.review_id}", headers=self.author_headers)
        self.post_review(overallRating=2)

        resp = self.client.post(
            f"/api/reviews/{self.review_id}/restore", headers=self.author_headers
        )

        self.assertEqual(resp.status_code, 409)
        self.assertTrue(self.db.get_review(self.review_id).is_deleted)
        self.assertEqual(self.stored_toilet().average_rating, 2)

    def test_other_user_cannot_delete(self):
        _, headers = self.make_user("Other")
        resp = self.client.delete(f"/api/reviews/{self.review_id}", headers=headers)
        self.assertEqual(resp.status_code, 403)
        self.assertFalse(self.db.get_review(self.review_id).is_deleted)


class ReviewReactionTests(ReviewApiTestCase):
    def setUp(self):
        super().setUp()
        self.review = self.make_review(self.toilet.toilet_id, self.author.user_id, 4)
        self.voter, self.voter_headers = self.make_user("Voter")

    def test_like_is_idempotent(self):
        for _ in range(2):
            resp = self.client.post(
                f"/api/reviews/{self.review.review_id}/like", headers=self.voter_headers
            )
            self.assertEqual(resp.status_code, 200)
        data = resp.json()["data"]
        self.assertEqual(data["likes"], 1)
        self.assertEqual(data["likedBy"], [self.voter.user_id])

    def test_dislike_replaces_like(self):
        self.client.post(
            f"/api/reviews/{self.review.review_id}/like", headers=self.voter_headers
        )
        resp = self.client.post(
            f"/api/reviews/{self.review.review_id}/dislike", headers=self.voter_headers
        )
        data = resp.json()["data"]
        self.assertEqual(data["likes"], 0)
        self.assertEqual(data["dislikes"], 1)
        self.assertEqual(data["dislikedBy"], [self.voter.user_id])

    def test_like_replaces_dislike(self):
        self.client.post(
            f"/api/reviews/{self.review.review_id}/dislike", headers=self.voter_headers
        )
        self.client.post(
            f"/api/reviews/{self.review.review_id}/like", headers=self.voter_headers
        )
        stored = self.db.get_review(self.review.review_id)
        self.assertEqual(stored.liked_by, [self.voter.user_id])
        self.assertEqual(stored.disliked_by, [])

    def test_deleted_review_cannot_be_liked(self):
        self.review.is_deleted = True
        resp = self.client.post(
            f"/api/reviews/{self.review.review_id}/like", headers=self.voter_headers
        )
        self.assertEqual(resp.status_code, 404)

    def test_requires_auth(self):
        resp = self.client.post(f"/api/reviews/{self.review.review_id}/dislike")
        self.assertEqual(resp.status_code, 401)


if __name__ == "__main__":
    unittest.main()
