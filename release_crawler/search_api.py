# release_crawler/search_api.py
import logging

import requests

from release_crawler.config import REQUEST_TIMEOUT, SCROLL_TTL, SEARCH_INDEX, SEARCH_URL
from release_crawler.errors import RemoteServiceError

log = logging.getLogger(__name__)


def make_query(from_date=None):
    """Match everything, or everything dated at or after ``from_date``."""
    query = {"match_all": {}}
    if from_date:
        query = {
            "bool": {
                "must": query,
                "filter": {"range": {"date": {"gte": from_date}}},
            }
        }
    return query


def _flatten_hit(hit, fields):
    """Pull the projected fields out of one search hit."""
    source = hit.get("_source")
    if source is None:
        # `fields` projections come back as single-element lists
        source = {
            key: value[0] if isinstance(value, list) and len(value) == 1 else value
            for key, value in (hit.get("fields") or {}).items()
        }
    return {key: source[key] for key in source if key in fields}


class SearchClient:
    """Thin wrapper around the search service's count and scroll endpoints."""

    def __init__(self, base_url=SEARCH_URL, index=SEARCH_INDEX, scroll_ttl=SCROLL_TTL,
                 session=None, timeout=REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.index = index
        self.scroll_ttl = scroll_ttl
        self.session = session or requests.Session()
        self.timeout = timeout

    def _post(self, url, body, params=None):
        try:
            response = self.session.post(url, json=body, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise RemoteServiceError(f"Request to {url} failed: {exc}") from exc
        if response.status_code != 200:
            raise RemoteServiceError(
                f"Request to {url} failed: {response.status_code} - {response.text[:200]}"
            )
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteServiceError(f"Invalid JSON from {url}: {exc}") from exc

    @property
    def search_url(self):
        return f"{self.base_url}/{self.index}/_search"

    def count(self, query):
        """Number of documents matching ``query``."""
        data = self._post(self.search_url, {"query": query, "size": 0})
        total = data.get("hits", {}).get("total")
        if isinstance(total, dict):
            total = total.get("value")
        if total is None:
            raise RemoteServiceError(f"No hit count in response from {self.search_url}")
        return int(total)

    def scroll(self, query, page_size, fields):
        """Yield pages of records (lists of dicts) until the cursor runs dry."""
        body = {"query": query, "size": page_size, "_source": list(fields)}
        data = self._post(self.search_url, body, params={"scroll": self.scroll_ttl})
        while True:
            hits = data.get("hits", {}).get("hits", [])
            if not hits:
                return
            yield [_flatten_hit(hit, fields) for hit in hits]

            scroll_id = data.get("_scroll_id")
            if not scroll_id:
                log.warning("Search response carried no scroll id; stopping after this page")
                return
            data = self._post(
                f"{self.base_url}/_search/scroll",
                {"scroll": self.scroll_ttl, "scroll_id": scroll_id},
            )
