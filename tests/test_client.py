"""Tests for PrestoClient failure handling, using httpx's mock transport."""

import httpx
import pytest

from presto_exporter.collector.client import PrestoClient, UpstreamError
from presto_exporter.mock.fake_presto_server import sample_cluster, sample_info, sample_query


def _client(handler) -> PrestoClient:
    return PrestoClient("http://presto.test:8080/", transport=httpx.MockTransport(handler))


def _routes(request: httpx.Request) -> httpx.Response:
    payloads = {
        "/v1/cluster": sample_cluster(),
        "/v1/info": sample_info(),
        "/v1/query": [sample_query()],
    }
    if request.url.path not in payloads:
        return httpx.Response(404)
    return httpx.Response(200, json=payloads[request.url.path])


def test_fetches_all_three_resources():
    client = _client(_routes)
    try:
        assert client.fetch_cluster().active_workers == 8
        assert client.fetch_info().uptime == "5.20d"
        queries = client.fetch_queries()
        assert len(queries) == 1
        assert queries[0].stats.total_drivers == 7
    finally:
        client.close()


def test_base_url_trailing_slash_is_dropped():
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return _routes(request)

    client = _client(handler)
    client.fetch_cluster()
    client.close()

    assert seen == ["http://presto.test:8080/v1/cluster"]
    assert client.base_url == "http://presto.test:8080"


@pytest.mark.parametrize("status", [201, 204, 404, 500, 503])
def test_non_200_status_is_an_error(status):
    client = _client(lambda request: httpx.Response(status, json=sample_cluster()))
    with pytest.raises(UpstreamError) as excinfo:
        client.fetch_cluster()
    client.close()

    assert excinfo.value.resource == "cluster"
    assert str(status) in str(excinfo.value)


def test_transport_error_is_an_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    with pytest.raises(UpstreamError) as excinfo:
        client.fetch_info()
    client.close()

    assert excinfo.value.resource == "info"
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


def test_invalid_json_is_an_error():
    client = _client(lambda request: httpx.Response(200, content=b"<html>oops</html>"))
    with pytest.raises(UpstreamError, match="invalid JSON"):
        client.fetch_queries()
    client.close()


def test_wrong_document_shape_is_an_error():
    client = _client(lambda request: httpx.Response(200, json={"not": "a list"}))
    with pytest.raises(UpstreamError, match="unexpected document shape"):
        client.fetch_queries()
    client.close()


def test_redirects_are_followed():
    def handler(request):
        if request.url.path == "/v1/cluster":
            return httpx.Response(302, headers={"Location": "http://presto.test:8080/ui/v1/cluster"})
        return httpx.Response(200, json=sample_cluster())

    client = _client(handler)
    assert client.fetch_cluster().running_queries == 3
    client.close()
