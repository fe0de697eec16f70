# release_crawler/storage.py
import csv
import logging
import os
from dataclasses import dataclass, field

import pandas as pd

from release_crawler.config import AUTHORS_CSV, DISTS_CSV, RELEASES_CSV
from release_crawler.errors import FileIOError

log = logging.getLogger(__name__)

AUTHORS_HEADER = ["author_num", "author_id"]
DISTS_HEADER = ["dist_id", "dist_name"]
RELEASES_HEADER = ["author_num", "dist_id", "filename", "date"]

# File name -> header row
TABLES = {
    AUTHORS_CSV: AUTHORS_HEADER,
    DISTS_CSV: DISTS_HEADER,
    RELEASES_CSV: RELEASES_HEADER,
}


def table_paths(data_dir):
    return {name: os.path.join(data_dir, name) for name in TABLES}


def tables_exist(data_dir):
    """True only when all three tables are present and readable."""
    return all(os.access(path, os.R_OK) for path in table_paths(data_dir).values())


@dataclass
class ExistingData:
    author_rows: list = field(default_factory=list)   # (author_num, author_id)
    dist_rows: list = field(default_factory=list)     # (dist_id, dist_name)
    filenames: set = field(default_factory=set)
    max_date: int = None


def _read_table(path, header):
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise FileIOError(f"couldn't read {os.path.basename(path)}: {exc}") from exc
    if len(df.columns) < len(header):
        raise FileIOError(
            f"couldn't read {os.path.basename(path)}: expected columns {header}, got {list(df.columns)}"
        )
    # Columns are positional; the header row is only skipped
    df = df.iloc[:, :len(header)]
    df.columns = header
    return df


def load_tables(data_dir):
    """Read the three tables back into id mappings, known filenames and the newest date."""
    paths = table_paths(data_dir)
    authors = _read_table(paths[AUTHORS_CSV], AUTHORS_HEADER)
    dists = _read_table(paths[DISTS_CSV], DISTS_HEADER)
    releases = _read_table(paths[RELEASES_CSV], RELEASES_HEADER)

    try:
        author_rows = [(int(num), key) for num, key in zip(authors["author_num"], authors["author_id"])]
        dist_rows = [(int(num), key) for num, key in zip(dists["dist_id"], dists["dist_name"])]
        dates = [int(value) for value in releases["date"]]
    except ValueError as exc:
        raise FileIOError(f"couldn't parse existing tables in {data_dir}: {exc}") from exc

    existing = ExistingData(
        author_rows=author_rows,
        dist_rows=dist_rows,
        filenames=set(releases["filename"]),
        max_date=max(dates) if dates else None,
    )
    log.info(
        "Loaded %d authors, %d dists, %d releases from %s",
        len(author_rows), len(dist_rows), len(releases), data_dir,
    )
    return existing


def write_table(path, header, rows):
    """Write a table from scratch: header row, then ``rows`` in the given order."""
    df = pd.DataFrame(list(rows), columns=header)
    try:
        df.to_csv(path, index=False, lineterminator="\n")
    except OSError as exc:
        raise FileIOError(f"couldn't write {os.path.basename(path)}: {exc}") from exc
    return len(df)


class AppendWriter:
    """Append-mode CSV handle held open for one update run."""

    def __init__(self, path):
        self.path = path
        self.name = os.path.basename(path)
        self.written = 0
        try:
            self._fh = open(path, "a", encoding="utf-8", newline="")
        except OSError as exc:
            raise FileIOError(f"couldn't open {self.name}: {exc}") from exc
        self._writer = csv.writer(self._fh, lineterminator="\n")

    def write(self, row):
        try:
            self._writer.writerow(row)
        except OSError as exc:
            raise FileIOError(f"couldn't write {self.name}: {exc}") from exc
        self.written += 1

    def close(self):
        try:
            self._fh.close()
        except OSError as exc:
            raise FileIOError(f"couldn't close {self.name}: {exc}") from exc

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
