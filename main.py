# main.py
import logging
import sys

from release_crawler.config import DATA_DIR, LOG_LEVEL
from release_crawler.crawler import create_files, update_files
from release_crawler.errors import ReleaseCrawlerError
from release_crawler.search_api import SearchClient
from release_crawler.storage import tables_exist

log = logging.getLogger("release_crawler")


def run(client=None, data_dir=DATA_DIR):
    """Update the tables in ``data_dir`` if they all exist, otherwise create them."""
    client = client or SearchClient()
    if tables_exist(data_dir):
        log.info("Updating data...")
        return update_files(client, data_dir)
    log.info("Creating data...")
    return create_files(client, data_dir)


def main():
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(message)s")
    try:
        summary = run()
    except ReleaseCrawlerError as exc:
        log.error("%s", exc)
        sys.exit(1)
    log.info(
        "Done (%s). fetched=%d dropped=%d authors+%d dists+%d releases+%d",
        summary.mode,
        summary.fetched,
        summary.dropped,
        summary.authors_added,
        summary.dists_added,
        summary.releases_added,
    )


if __name__ == "__main__":
    main()
