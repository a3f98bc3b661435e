"""
Unit Tests - Document codec

Module: tests.test_codec
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial tests
  - Timestamp formatting and parsing
  - Document set encoding layout
  - Schema validation on decode
  - Id counter derivation
"""

import json
import unittest
from datetime import datetime, timedelta, timezone

from chirpy_server.persistence.codec import (
    ZERO_TIME,
    Account,
    CorruptDataError,
    DocumentSet,
    Post,
    SessionTokenRecord,
    decode,
    encode,
    format_timestamp,
    parse_timestamp,
)


def _raw(data) -> bytes:
    return json.dumps(data).encode("utf-8")


def _empty_database():
    return {"users": {}, "chirps": {}, "revocations": {}}


class TestTimestamps(unittest.TestCase):
    """RFC 3339 helpers"""

    def test_zero_time_format(self):
        self.assertEqual(format_timestamp(ZERO_TIME), "0001-01-01T00:00:00Z")

    def test_format_converts_to_utc(self):
        value = datetime(2024, 5, 1, 14, 30, tzinfo=timezone(timedelta(hours=2)))
        self.assertEqual(format_timestamp(value), "2024-05-01T12:30:00Z")

    def test_format_keeps_microseconds(self):
        value = datetime(2024, 5, 1, 12, 0, 0, 1500, tzinfo=timezone.utc)
        self.assertEqual(format_timestamp(value), "2024-05-01T12:00:00.001500Z")

    def test_parse_offset_and_nanoseconds(self):
        value = parse_timestamp("2024-05-01T14:30:00.123456789+02:00")
        self.assertEqual(value, datetime(2024, 5, 1, 12, 30, 0, 123456, tzinfo=timezone.utc))

    def test_parse_zero_time(self):
        self.assertEqual(parse_timestamp("0001-01-01T00:00:00Z"), ZERO_TIME)

    def test_parse_rejects_garbage(self):
        for text in ("yesterday", "2024-13-01T00:00:00Z", "2024-05-01 12:00:00Z", 12):
            with self.subTest(text=text):
                with self.assertRaises(CorruptDataError):
                    parse_timestamp(text)


class TestEncode(unittest.TestCase):
    """Layout of the database file"""

    def test_empty_document_set(self):
        data = json.loads(encode(DocumentSet()))
        self.assertEqual(data["users"], {})
        self.assertEqual(data["chirps"], {})
        self.assertEqual(data["revocations"], {})
        self.assertEqual(data["next_ids"], {"users": 1, "chirps": 1})

    def test_records_keyed_by_id(self):
        documents = DocumentSet()
        documents.users[3] = Account(id=3, email="a@b.c", password="$2b$hash")
        documents.chirps[7] = Post(id=7, author_id=3, body="hello")
        documents.revocations["tok"] = SessionTokenRecord(id="tok")

        data = json.loads(encode(documents))

        self.assertEqual(
            data["users"]["3"],
            {"id": 3, "email": "a@b.c", "password": "$2b$hash", "is_chirpy_red": False},
        )
        self.assertEqual(data["chirps"]["7"], {"id": 7, "author_id": 3, "body": "hello"})
        self.assertEqual(
            data["revocations"]["tok"],
            {"id": "tok", "revoked_at": "0001-01-01T00:00:00Z"},
        )
        self.assertEqual(data["next_ids"], {"users": 4, "chirps": 8})

    def test_public_dict_hides_password(self):
        account = Account(id=1, email="a@b.c", password="secret-hash", is_chirpy_red=True)
        self.assertEqual(
            account.to_public_dict(),
            {"id": 1, "email": "a@b.c", "is_chirpy_red": True},
        )


class TestDecode(unittest.TestCase):
    """Schema validation"""

    def test_empty_database(self):
        documents = decode(_raw(_empty_database()))
        self.assertEqual(documents.users, {})
        self.assertEqual(documents.next_ids, {"users": 1, "chirps": 1})

    def test_counters_derived_without_next_ids(self):
        data = _empty_database()
        data["users"]["5"] = {"id": 5, "email": "x@y.z", "password": "h", "is_chirpy_red": True}
        data["chirps"]["2"] = {"id": 2, "author_id": 5, "body": "hi"}

        documents = decode(_raw(data))

        self.assertTrue(documents.users[5].is_chirpy_red)
        self.assertEqual(documents.chirps[2].author_id, 5)
        self.assertEqual(documents.next_ids, {"users": 6, "chirps": 3})

    def test_stored_counters_win_over_max_id(self):
        data = _empty_database()
        data["chirps"]["2"] = {"id": 2, "author_id": 1, "body": "hi"}
        data["next_ids"] = {"users": 10, "chirps": 9}

        documents = decode(_raw(data))

        self.assertEqual(documents.next_ids, {"users": 10, "chirps": 9})
        self.assertEqual(documents.allocate_id("chirps"), 9)
        self.assertEqual(documents.allocate_id("chirps"), 10)

    def test_revocation_timestamp(self):
        data = _empty_database()
        data["revocations"]["abc"] = {"id": "abc", "revoked_at": "2024-01-02T03:04:05Z"}

        record = decode(_raw(data)).revocations["abc"]

        self.assertTrue(record.is_revoked)
        self.assertEqual(record.revoked_at, datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))

    def test_rejects_invalid_bytes(self):
        for raw in (b"", b"not json", b"\xff\xfe", b"[]", b"null"):
            with self.subTest(raw=raw):
                with self.assertRaises(CorruptDataError):
                    decode(raw)

    def test_rejects_missing_collection(self):
        with self.assertRaises(CorruptDataError):
            decode(_raw({"users": {}, "chirps": {}}))

    def test_rejects_wrong_field_types(self):
        bad_users = (
            {"id": "1", "email": "a", "password": "h", "is_chirpy_red": False},
            {"id": True, "email": "a", "password": "h", "is_chirpy_red": False},
            {"id": 1, "email": 5, "password": "h", "is_chirpy_red": False},
            {"id": 1, "email": "a", "password": "h", "is_chirpy_red": 0},
            {"id": 1, "email": "a", "password": "h"},
        )
        for user in bad_users:
            with self.subTest(user=user):
                data = _empty_database()
                data["users"]["1"] = user
                with self.assertRaises(CorruptDataError):
                    decode(_raw(data))

    def test_rejects_key_id_mismatch(self):
        data = _empty_database()
        data["chirps"]["1"] = {"id": 2, "author_id": 1, "body": "hi"}
        with self.assertRaises(CorruptDataError):
            decode(_raw(data))

    def test_rejects_invalid_counter(self):
        data = _empty_database()
        data["next_ids"] = {"users": 0}
        with self.assertRaises(CorruptDataError):
            decode(_raw(data))

    def test_nanosecond_fraction_saved_as_microseconds(self):
        data = _empty_database()
        data["revocations"]["abc"] = {"id": "abc", "revoked_at": "2024-05-01T10:00:00.123456789Z"}

        rewritten = json.loads(encode(decode(_raw(data))))

        self.assertEqual(
            rewritten["revocations"]["abc"]["revoked_at"], "2024-05-01T10:00:00.123456Z"
        )

    def test_encode_decode_preserves_revocation(self):
        documents = DocumentSet()
        revoked_at = datetime(2024, 6, 1, 8, 0, 0, 250000, tzinfo=timezone.utc)
        documents.revocations["tok"] = SessionTokenRecord(id="tok", revoked_at=revoked_at)

        restored = decode(encode(documents))

        self.assertEqual(restored.revocations["tok"].revoked_at, revoked_at)


if __name__ == "__main__":
    unittest.main()
