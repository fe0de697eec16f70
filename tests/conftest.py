import pytest

from release_crawler.records import parse_date


class FakeSearchClient:
    """In-memory stand-in for SearchClient that honours the date filter."""

    def __init__(self, records=None):
        self.records = list(records or [])
        self.queries = []

    def _matching(self, query):
        self.queries.append(query)
        try:
            since = query["bool"]["filter"]["range"]["date"]["gte"]
        except KeyError:
            return list(self.records)
        return [r for r in self.records if parse_date(r["date"]) >= parse_date(since)]

    def count(self, query):
        return len(self._matching(query))

    def scroll(self, query, page_size, fields):
        matching = self._matching(query)
        for start in range(0, len(matching), page_size):
            # records come back as stored, extra keys included
            yield [dict(r) for r in matching[start:start + page_size]]


def release(author, distribution, archive, date):
    return {"author": author, "distribution": distribution, "archive": archive, "date": date}


@pytest.fixture
def fake_client():
    return FakeSearchClient()


@pytest.fixture
def data_dir(tmp_path):
    return str(tmp_path)


@pytest.fixture(autouse=True)
def no_page_delay(monkeypatch):
    monkeypatch.setattr("release_crawler.crawler.time.sleep", lambda seconds: None)
