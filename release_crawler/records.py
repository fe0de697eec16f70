# release_crawler/records.py
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import NamedTuple

from release_crawler.errors import MalformedDateError, MalformedRecordError, MissingMappingError


@dataclass(frozen=True)
class Release:
    """One release document as returned by the search service."""
    author: str
    distribution: str
    archive: str
    date: str    # raw ISO-8601, converted on normalize

    @classmethod
    def from_record(cls, record):
        """Validate a raw record and build a Release from it.

        The record must carry exactly the four release fields, none of them
        null. Anything else raises MalformedRecordError holding the record.
        """
        expected = {f.name for f in fields(cls)}
        keys = set(record)
        missing = sorted(expected - keys)
        extra = sorted(keys - expected)
        if missing or extra:
            raise MalformedRecordError(
                f"Release record has missing fields {missing} / extra fields {extra}", record
            )
        nulls = sorted(k for k in expected if record[k] is None)
        if nulls:
            raise MalformedRecordError(f"Release record has null fields {nulls}", record)
        return cls(
            author=str(record["author"]),
            distribution=str(record["distribution"]),
            archive=str(record["archive"]),
            date=str(record["date"]),
        )


class ReleaseRow(NamedTuple):
    author_num: int
    dist_id: int
    filename: str
    date: int


def parse_date(value):
    """ISO-8601 string -> integer Unix epoch seconds. Naive values are UTC."""
    if not isinstance(value, str):
        raise MalformedDateError(f"Release date is not a string: {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise MalformedDateError(f"Unparseable release date: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


def format_date(epoch):
    """Integer epoch seconds -> ``YYYY-MM-DDTHH:MM:SS`` in UTC."""
    return datetime.fromtimestamp(int(epoch), tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")


def normalize(release, authors, dists):
    """Turn a Release into the row stored in releases.csv."""
    if release.author not in authors:
        raise MissingMappingError(f"No author_num assigned for author {release.author!r}")
    if release.distribution not in dists:
        raise MissingMappingError(f"No dist_id assigned for distribution {release.distribution!r}")
    return ReleaseRow(
        author_num=authors[release.author],
        dist_id=dists[release.distribution],
        filename=release.archive,
        date=parse_date(release.date),
    )
