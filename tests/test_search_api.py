import pytest
import requests

from release_crawler.errors import RemoteServiceError
from release_crawler.search_api import SearchClient, make_query


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code
        self.text = str(payload)

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def post(self, url, json=None, params=None, timeout=None):
        self.calls.append((url, json, params))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def hits(*sources, scroll_id="cursor"):
    return {"_scroll_id": scroll_id, "hits": {"hits": [{"_source": s} for s in sources]}}


def test_make_query_without_date_matches_all():
    assert make_query() == {"match_all": {}}


def test_make_query_with_date_filters_inclusive():
    query = make_query("2014-05-13T16:53:20")
    assert query["bool"]["must"] == {"match_all": {}}
    assert query["bool"]["filter"] == {"range": {"date": {"gte": "2014-05-13T16:53:20"}}}


def test_count_reads_hit_total():
    session = FakeSession([FakeResponse({"hits": {"total": 42, "hits": []}})])
    client = SearchClient(base_url="http://search.test/v1/", session=session)
    assert client.count(make_query()) == 42
    url, body, _ = session.calls[0]
    assert url == "http://search.test/v1/release/_search"
    assert body["size"] == 0


def test_count_reads_object_total():
    session = FakeSession([FakeResponse({"hits": {"total": {"value": 7, "relation": "eq"}}})])
    assert SearchClient(base_url="http://search.test", session=session).count(make_query()) == 7


def test_scroll_follows_cursor_until_empty_page():
    fields = ["distribution", "date", "author", "archive"]
    first = {"distribution": "Foo", "date": "2014-01-01T00:00:00", "author": "X", "archive": "Foo-1.tar.gz"}
    second = dict(first, archive="Foo-2.tar.gz", status="latest")
    session = FakeSession([
        FakeResponse(hits(first, scroll_id="c1")),
        FakeResponse(hits(second, scroll_id="c2")),
        FakeResponse(hits(scroll_id="c3")),
    ])
    client = SearchClient(base_url="http://search.test", scroll_ttl="4h", session=session)

    pages = list(client.scroll(make_query(), 1, fields))

    assert pages == [[first], [{k: v for k, v in second.items() if k in fields}]]
    url, body, params = session.calls[0]
    assert params == {"scroll": "4h"}
    assert body["_source"] == fields
    assert body["size"] == 1
    assert session.calls[1][0] == "http://search.test/_search/scroll"
    assert session.calls[1][1] == {"scroll": "4h", "scroll_id": "c1"}
    assert session.calls[2][1]["scroll_id"] == "c2"


def test_scroll_unwraps_field_lists():
    payload = {"_scroll_id": "c", "hits": {"hits": [{"fields": {"author": ["X"], "archive": ["Foo-1.tar.gz"]}}]}}
    session = FakeSession([FakeResponse(payload), FakeResponse(hits())])
    client = SearchClient(base_url="http://search.test", session=session)
    assert list(client.scroll(make_query(), 10, ["author", "archive"])) == [[{"author": "X", "archive": "Foo-1.tar.gz"}]]


def test_http_error_raises_remote_service_error():
    session = FakeSession([FakeResponse({"error": "boom"}, status_code=503)])
    with pytest.raises(RemoteServiceError):
        SearchClient(base_url="http://search.test", session=session).count(make_query())


def test_connection_error_raises_remote_service_error():
    session = FakeSession([requests.ConnectionError("refused")])
    with pytest.raises(RemoteServiceError):
        list(SearchClient(base_url="http://search.test", session=session).scroll(make_query(), 10, ["author"]))


def test_bad_json_raises_remote_service_error():
    session = FakeSession([FakeResponse(ValueError("not json"))])
    with pytest.raises(RemoteServiceError):
        SearchClient(base_url="http://search.test", session=session).count(make_query())
