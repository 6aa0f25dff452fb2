import json
from datetime import datetime, timedelta, timezone

import pytest

from repokeywords.models import ZERO_TIME, Document


def _sample() -> Document:
    return Document(
        name="readme.md",
        title="Readme",
        path="./repository/journal/readme.md",
        last_modified=datetime(2024, 5, 1, 12, 0, 0, 500000, tzinfo=timezone.utc),
        created=datetime(2023, 2, 3, 4, 5, 6, tzinfo=timezone(timedelta(hours=2))),
        keywords=["alpha", "beta"],
        content_length=12,
        content="alpha beta\n",
        is_orphan=True,
        file_type="markdown",
        org="repository",
        upvotes=3,
        downvotes=1,
        comments=["nice"],
    )


def test_round_trip_through_dict():
    document = _sample()
    assert Document.from_dict(document.to_dict()) == document


def test_round_trip_through_json_text():
    document = _sample()
    restored = Document.from_dict(json.loads(json.dumps(document.to_dict())))
    assert restored == document


def test_to_dict_uses_exported_field_names():
    keys = set(_sample().to_dict())
    assert keys == {
        "Name", "Title", "Path", "LastModified", "Created", "Keywords",
        "ContentLength", "Content", "IsOrphan", "FileType", "Org",
        "Upvotes", "Downvotes", "Comments",
    }


def test_zero_time_serialises_like_unset_timestamp():
    data = Document().to_dict()
    assert data["LastModified"] == "0001-01-01T00:00:00Z"
    assert data["Created"] == data["LastModified"]


def test_empty_lists_serialise_as_null():
    data = Document().to_dict()
    assert data["Keywords"] is None
    assert data["Comments"] is None


def test_fraction_and_offset_formatting():
    data = _sample().to_dict()
    assert data["LastModified"] == "2024-05-01T12:00:00.5Z"
    assert data["Created"].endswith("+02:00")


def test_from_dict_fills_missing_fields_with_defaults():
    document = Document.from_dict({"Path": "a.md"})
    assert document.path == "a.md"
    assert document.keywords == []
    assert document.last_modified == ZERO_TIME
    assert document.upvotes == 0


def test_from_dict_matches_keys_case_insensitively():
    document = Document.from_dict({"path": "b.md", "UPVOTES": 7, "keywords": None})
    assert (document.path, document.upvotes, document.keywords) == ("b.md", 7, [])


def test_from_dict_truncates_nanoseconds():
    document = Document.from_dict({"LastModified": "2024-05-01T12:00:00.123456789Z"})
    assert document.last_modified.microsecond == 123456


def test_from_dict_rejects_bad_timestamp():
    with pytest.raises(ValueError):
        Document.from_dict({"Created": "yesterday"})


def test_naive_time_is_treated_as_utc():
    naive = Document(last_modified=datetime(2024, 5, 1, 12, 0, 0))
    aware = Document(last_modified=datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc))
    assert naive.to_dict()["LastModified"] == aware.to_dict()["LastModified"]