# release_crawler/crawler.py
import logging
import os
import time
from dataclasses import dataclass
from pprint import pformat

from tqdm import tqdm

from release_crawler.config import (
    AUTHORS_CSV,
    DISTS_CSV,
    PAGE_DELAY,
    PAGE_SIZE,
    RELEASE_FIELDS,
    RELEASES_CSV,
)
from release_crawler.errors import MalformedRecordError
from release_crawler.records import Release, format_date, normalize
from release_crawler.registry import IdRegistry
from release_crawler.search_api import make_query
from release_crawler.storage import (
    AUTHORS_HEADER,
    DISTS_HEADER,
    RELEASES_HEADER,
    AppendWriter,
    load_tables,
    write_table,
)

log = logging.getLogger(__name__)


@dataclass
class CrawlSummary:
    mode: str
    fetched: int = 0
    dropped: int = 0
    authors_added: int = 0
    dists_added: int = 0
    releases_added: int = 0
    from_date: str = None


def fetch_releases(client, from_date=None, page_size=PAGE_SIZE, delay=PAGE_DELAY):
    """Scroll through every release dated at or after ``from_date``.

    Returns the raw records in fetch order. Sleeps ``delay`` seconds between
    pages to go easy on the search service.
    """
    query = make_query(from_date)
    count = client.count(query)
    log.info("Getting %d releases%s...", count, f" since {from_date}" if from_date else "")

    releases = []
    with tqdm(total=count, unit="release") as progress:
        for page in client.scroll(query, page_size, RELEASE_FIELDS):
            releases.extend(page)
            progress.update(len(page))
            time.sleep(delay)
    return releases


def validate_releases(records):
    """Keep well-formed records; dump the rest to the log and drop them."""
    valid, dropped = [], 0
    for record in records:
        try:
            valid.append(Release.from_record(record))
        except MalformedRecordError as exc:
            dropped += 1
            log.warning("Dropping malformed release (%s):\n%s", exc, pformat(exc.record))
    return valid, dropped


def create_files(client, data_dir, delay=PAGE_DELAY):
    """Full crawl: fetch everything and write the three tables from scratch."""
    summary = CrawlSummary(mode="create")
    records = fetch_releases(client, delay=delay)
    summary.fetched = len(records)
    releases, summary.dropped = validate_releases(records)

    authors = IdRegistry.from_keys(r.author for r in releases)
    dists = IdRegistry.from_keys(r.distribution for r in releases)

    rows, seen = [], set()
    for release in releases:
        if release.archive in seen:
            log.warning("Skipping duplicate archive %s", release.archive)
            continue
        seen.add(release.archive)
        rows.append(normalize(release, authors, dists))

    log.info("writing %s...", AUTHORS_CSV)
    summary.authors_added = write_table(os.path.join(data_dir, AUTHORS_CSV), AUTHORS_HEADER, authors.rows())
    log.info("writing %s...", DISTS_CSV)
    summary.dists_added = write_table(os.path.join(data_dir, DISTS_CSV), DISTS_HEADER, dists.rows())
    log.info("writing %s...", RELEASES_CSV)
    summary.releases_added = write_table(os.path.join(data_dir, RELEASES_CSV), RELEASES_HEADER, rows)
    return summary


def update_files(client, data_dir, delay=PAGE_DELAY):
    """Incremental crawl: append releases newer than what is already on disk."""
    existing = load_tables(data_dir)
    authors = IdRegistry.from_rows(existing.author_rows)
    dists = IdRegistry.from_rows(existing.dist_rows)
    known = set(existing.filenames)

    from_date = format_date(existing.max_date) if existing.max_date is not None else None
    summary = CrawlSummary(mode="update", from_date=from_date)

    with AppendWriter(os.path.join(data_dir, RELEASES_CSV)) as release_fh, \
            AppendWriter(os.path.join(data_dir, AUTHORS_CSV)) as author_fh, \
            AppendWriter(os.path.join(data_dir, DISTS_CSV)) as dist_fh:
        records = fetch_releases(client, from_date, delay=delay)
        summary.fetched = len(records)
        for record in records:
            release = Release.from_record(record)
            author_num, is_new = authors.get_or_create(release.author)
            if is_new:
                author_fh.write([author_num, release.author])
            dist_id, is_new = dists.get_or_create(release.distribution)
            if is_new:
                dist_fh.write([dist_id, release.distribution])
            # The date filter is inclusive, so the watermark instant comes back again
            if release.archive not in known:
                known.add(release.archive)
                release_fh.write(normalize(release, authors, dists))

    summary.authors_added = author_fh.written
    summary.dists_added = dist_fh.written
    summary.releases_added = release_fh.written
    return summary
