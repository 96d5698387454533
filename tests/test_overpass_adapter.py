import asyncio
import json

import pytest
import requests

from core.exceptions import NetworkFetchError
from modules.isochrone.adapter import OverpassFetcher, build_overpass_query, radius_to_bbox


def _response(status_code=200, body=""):
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = body.encode("utf-8")
    resp.encoding = "utf-8"
    return resp


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, data=None, timeout=None):
        self.calls.append({"url": url, "data": data, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def _fetch(session):
    fetcher = OverpassFetcher("http://overpass.test/api/interpreter", timeout_s=12, session=session)
    return asyncio.run(fetcher(-6.2, 106.8, 1113.2, "walking"))


def test_bbox_is_padded_degrees():
    south, west, north, east = radius_to_bbox(-6.2, 106.8, 1113.2)
    assert north - (-6.2) == pytest.approx(0.015)
    assert south == pytest.approx(-6.215)
    assert west == pytest.approx(106.785)
    assert east == pytest.approx(106.815)


@pytest.mark.parametrize(
    "mode, tag",
    [
        ("walking", '["footway"!~"no"]'),
        ("cycling", '["bicycle"!~"no"]'),
        ("driving", '["motorcar"!~"no"]'),
    ],
)
def test_query_filters_by_mode(mode, tag):
    query = build_overpass_query(-6.2, 106.8, 1000, mode)
    assert "[out:json][timeout:25];" in query
    assert f'way["highway"]{tag}["access"!~"private"]' in query
    assert "out body;" in query and ">;" in query and "out skel qt;" in query


def test_query_contains_bbox():
    query = build_overpass_query(-6.2, 106.8, 1113.2, "driving")
    assert "(-6.2150000,106.7850000,-6.1850000,106.8150000)" in query


def test_fetch_returns_elements():
    elements = [{"type": "node", "id": 1, "lat": -6.2, "lon": 106.8}, {"type": "way", "id": 2, "nodes": [1]}]
    session = FakeSession(_response(200, json.dumps({"elements": elements})))

    assert _fetch(session) == elements
    call = session.calls[0]
    assert call["url"] == "http://overpass.test/api/interpreter"
    assert call["timeout"] == 12
    assert "way[" in call["data"]["data"]


def test_missing_elements_key_is_empty_list():
    assert _fetch(FakeSession(_response(200, "{}"))) == []


def test_http_error_raises_fetch_error():
    session = FakeSession(_response(504, "Gateway Timeout"))
    with pytest.raises(NetworkFetchError) as excinfo:
        _fetch(session)
    assert excinfo.value.code == 502
    assert "504" in excinfo.value.message
    assert len(session.calls) == 1


def test_connection_error_raises_fetch_error():
    session = FakeSession(error=requests.ConnectionError("connection refused"))
    with pytest.raises(NetworkFetchError) as excinfo:
        _fetch(session)
    assert "connection refused" in excinfo.value.payload["original_error"]


@pytest.mark.parametrize("body", ["", "<html>runtime error: Query timed out</html>", "{not json"])
def test_bad_body_raises_fetch_error(body):
    with pytest.raises(NetworkFetchError):
        _fetch(FakeSession(_response(200, body)))
