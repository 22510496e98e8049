import unittest
from datetime import datetime, timezone

from pydantic import ValidationError

from feed.models import ContentKind, EventPayload, PetitionPayload
from feed.schemas import FeedQueryParams, decode_feed_page
from utils.errors import DecodeFailure


def _petition_payload(**overrides):
    item = {
        "id": "t1",
        "kind": "petition",
        "title": "Fund the library",
        "body": "Extend opening hours",
        "authorId": "u1",
        "authorDisplayName": "Ada Park",
        "createdAt": "2024-02-01T10:00:00+00:00",
        "petitionSignatures": 42,
        "petitionTargetSignatures": 100,
        "petitionDeadline": "2024-03-01T00:00:00+00:00",
        "petitionCategory": "education",
    }
    item.update(overrides)
    return item


class DecodeFeedPageTests(unittest.TestCase):
    def test_kind_specific_fields_land_in_the_payload(self):
        event = {
            "id": "e1",
            "kind": "event",
            "title": "Cleanup",
            "body": "Gloves provided",
            "authorId": "u2",
            "authorDisplayName": "Ben",
            "createdAt": "2024-02-01T09:00:00Z",
            "eventDate": "2024-02-10T15:00:00Z",
            "eventLocation": "Riverside",
            "organizerFollowers": 80,
        }
        page = decode_feed_page(
            {"items": [_petition_payload(), event], "total": 2, "page": 1, "limit": 20, "hasMore": False}
        )
        petition, decoded_event = page.items
        self.assertIs(petition.kind, ContentKind.PETITION)
        self.assertIsInstance(petition.payload, PetitionPayload)
        self.assertEqual(petition.payload.signatures, 42)
        self.assertEqual(petition.payload.category, "education")
        self.assertIsInstance(decoded_event.payload, EventPayload)
        self.assertEqual(decoded_event.payload.location, "Riverside")
        self.assertEqual(decoded_event.payload.event_date, datetime(2024, 2, 10, 15, tzinfo=timezone.utc))

    def test_missing_fields_raise_decode_failure(self):
        with self.assertRaises(DecodeFailure):
            decode_feed_page({"items": [_petition_payload(kind="memo")], "total": 1, "page": 1, "limit": 20,
                              "hasMore": False})
        with self.assertRaises(DecodeFailure):
            decode_feed_page({"items": [], "page": 1, "limit": 20, "hasMore": False})
        with self.assertRaises(DecodeFailure):
            decode_feed_page([])

    def test_inconsistent_paging_is_not_treated_as_empty(self):
        with self.assertRaises(DecodeFailure):
            decode_feed_page({"items": [], "total": 50, "page": 1, "limit": 20, "hasMore": False})
        with self.assertRaises(DecodeFailure):
            decode_feed_page(
                {"items": [_petition_payload(), _petition_payload(id="t2")], "total": 2, "page": 1, "limit": 1,
                 "hasMore": True}
            )


class FeedQueryParamsTests(unittest.TestCase):
    def test_defaults_and_coercion(self):
        params = FeedQueryParams.model_validate({"page": "3", "limit": "15", "search": "  "})
        self.assertEqual((params.page, params.limit, params.search), (3, 15, None))

    def test_out_of_range_values_rejected(self):
        for payload in ({"page": 0}, {"limit": 0}, {"page": "abc"}):
            with self.subTest(payload=payload):
                with self.assertRaises(ValidationError):
                    FeedQueryParams.model_validate(payload)

    def test_upper_bounds_are_left_to_the_aggregator_settings(self):
        params = FeedQueryParams.model_validate({"limit": "250", "search": "x" * 300})
        self.assertEqual(params.limit, 250)
        self.assertEqual(len(params.search), 300)


if __name__ == "__main__":
    unittest.main()
