"""Core data types: run settings, indexed documents and request payloads."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_TIME_PATTERN = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})$"
)


def _format_time(moment: datetime) -> str:
    """Format a timestamp as RFC 3339 with trimmed fractional seconds."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "+" if offset > timedelta(0) else "-"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _parse_time(text: str) -> datetime:
    """Parse an RFC 3339 timestamp, keeping at most microsecond precision."""
    match = _TIME_PATTERN.match(text)
    if match is None:
        raise ValueError(f"invalid timestamp: {text!r}")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    microsecond = int((fraction or "")[:6].ljust(6, "0"))
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = 1 if zone[0] == "+" else -1
        hours, minutes = int(zone[1:3]), int(zone[4:6])
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))
    return datetime(
        int(year), int(month), int(day),
        int(hour), int(minute), int(second), microsecond, tzinfo=tz,
    )


@dataclass(frozen=True)
class Settings:
    """Configuration for one indexing run and the server that follows it."""

    repo_urls: tuple[str, ...] = ()
    clone_dir: str = "repository"
    data_file: str = "./data/file_data.json"
    stopwords_file: str = "./data/stopwords.txt"
    custom_stopwords: tuple[str, ...] = ("org", "company", "inc", "llc")
    num_keywords: int = 5
    start_date: datetime = datetime(2023, 1, 1, tzinfo=timezone.utc)
    end_date: datetime = datetime(2026, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
    port: int = 8081


@dataclass
class WordScore:
    """A word with its tf-idf score within one document."""

    word: str
    score: float


@dataclass
class UpdateRequest:
    """A vote change for a document."""

    file_path: str
    change_value: int


@dataclass
class UpdateComment:
    """A comment to attach to a document."""

    file_path: str
    comment: str


@dataclass
class UpdateDesignDoc:
    """A design document reference."""

    url: str
    title: str


_FIELD_KEYS = {
    "name": "Name",
    "title": "Title",
    "path": "Path",
    "last_modified": "LastModified",
    "created": "Created",
    "keywords": "Keywords",
    "content_length": "ContentLength",
    "content": "Content",
    "is_orphan": "IsOrphan",
    "file_type": "FileType",
    "org": "Org",
    "upvotes": "Upvotes",
    "downvotes": "Downvotes",
    "comments": "Comments",
}


@dataclass
class Document:
    """A file found in a repository together with what was learnt about it."""

    name: str = ""
    title: str = ""
    path: str = ""
    last_modified: datetime = ZERO_TIME
    created: datetime = ZERO_TIME
    keywords: list[str] = field(default_factory=list)
    content_length: int = 0
    content: str = ""
    is_orphan: bool = False
    file_type: str = ""
    org: str = ""
    upvotes: int = 0
    downvotes: int = 0
    comments: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping stored in the data file."""
        return {
            "Name": self.name,
            "Title": self.title,
            "Path": self.path,
            "LastModified": _format_time(self.last_modified),
            "Created": _format_time(self.created),
            "Keywords": list(self.keywords) or None,
            "ContentLength": self.content_length,
            "Content": self.content,
            "IsOrphan": self.is_orphan,
            "FileType": self.file_type,
            "Org": self.org,
            "Upvotes": self.upvotes,
            "Downvotes": self.downvotes,
            "Comments": list(self.comments) or None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Document":
        """Build a document from a stored mapping; keys match case-insensitively."""
        lowered = {str(key).lower(): value for key, value in data.items()}

        def get(attribute: str) -> Any:
            return lowered.get(_FIELD_KEYS[attribute].lower())

        def as_time(value: Any) -> datetime:
            return _parse_time(value) if value else ZERO_TIME

        return cls(
            name=get("name") or "",
            title=get("title") or "",
            path=get("path") or "",
            last_modified=as_time(get("last_modified")),
            created=as_time(get("created")),
            keywords=list(get("keywords") or []),
            content_length=int(get("content_length") or 0),
            content=get("content") or "",
            is_orphan=bool(get("is_orphan")),
            file_type=get("file_type") or "",
            org=get("org") or "",
            upvotes=int(get("upvotes") or 0),
            downvotes=int(get("downvotes") or 0),
            comments=list(get("comments") or []),
        )