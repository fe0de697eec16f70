# release_crawler/config.py
import os

# Search service (Elasticsearch-style API)
SEARCH_URL = os.environ.get("RELEASE_CRAWLER_SEARCH_URL", "https://fastapi.metacpan.org/v1").rstrip("/")
SEARCH_INDEX = os.environ.get("RELEASE_CRAWLER_INDEX", "release")
SCROLL_TTL = os.environ.get("RELEASE_CRAWLER_SCROLL_TTL", "4h")
PAGE_SIZE = int(os.environ.get("RELEASE_CRAWLER_PAGE_SIZE", "100"))
PAGE_DELAY = float(os.environ.get("RELEASE_CRAWLER_PAGE_DELAY", "2"))   # seconds between pages
REQUEST_TIMEOUT = int(os.environ.get("RELEASE_CRAWLER_TIMEOUT", "60"))

RELEASE_FIELDS = ["distribution", "date", "author", "archive"]

# Output
DATA_DIR = os.environ.get("RELEASE_CRAWLER_DATA_DIR", ".")
AUTHORS_CSV = "authors.csv"
DISTS_CSV = "dists.csv"
RELEASES_CSV = "releases.csv"

LOG_LEVEL = os.environ.get("RELEASE_CRAWLER_LOG_LEVEL", "INFO")
