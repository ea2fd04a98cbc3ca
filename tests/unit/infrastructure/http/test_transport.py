import httpx
import pytest

from seaplanecli.domain.errors import InsecureUrlRejected, ResourceNotFound, TransportFailure, UnclassifiedHttpStatus
from seaplanecli.domain.models.request import BoundRequest, RequestShape, TransportOptions
from seaplanecli.infrastructure.http.errors import map_api_error
from seaplanecli.infrastructure.http.transport import (
    HttpRequestSender,
    build_http_client,
    decode_body,
    join_url,
    require_secure,
)


def _bound(url="https://metadata.test/v1/config/base64:Zm9v", transport=TransportOptions()):
    return BoundRequest("metadata", RequestShape.SINGLE, url, "tok", transport, query=(("from", "base64:YQ"),))


def test_join_url_treats_base_as_directory():
    assert join_url("https://a.test", "v1/token") == "https://a.test/v1/token"
    assert join_url("https://a.test/api/", "/v1/token") == "https://a.test/api/v1/token"


def test_require_secure_rejects_plain_http_by_default():
    with pytest.raises(InsecureUrlRejected) as exc_info:
        require_secure("http://a.test/", TransportOptions())
    assert exc_info.value.url == "http://a.test/"


def test_require_secure_allows_plain_http_when_enabled():
    require_secure("http://a.test/", TransportOptions(allow_insecure_transport=True))
    require_secure("https://a.test/", TransportOptions())


def test_build_http_client_verifies_certificates_by_default(mocker):
    client_cls = mocker.patch("seaplanecli.infrastructure.http.transport.httpx.Client")
    build_http_client(TransportOptions())
    assert client_cls.call_args.kwargs["verify"] is True

    build_http_client(TransportOptions(allow_invalid_certificates=True))
    assert client_cls.call_args.kwargs["verify"] is False


def test_map_api_error_parses_json_body():
    request = httpx.Request("GET", "https://a.test/")
    response = httpx.Response(404, json={"status": 404, "title": "Not Found", "detail": "no such key"}, request=request)
    with pytest.raises(ResourceNotFound) as exc_info:
        map_api_error(response)
    assert exc_info.value.title == "Not Found"
    assert exc_info.value.detail == "no such key"


def test_map_api_error_falls_back_to_reason_phrase():
    request = httpx.Request("GET", "https://a.test/")
    response = httpx.Response(502, text="upstream down", request=request)
    with pytest.raises(UnclassifiedHttpStatus) as exc_info:
        map_api_error(response)
    assert exc_info.value.status == 502
    assert exc_info.value.title == "Bad Gateway"
    assert exc_info.value.detail == "upstream down"


def test_map_api_error_passes_success_through():
    response = httpx.Response(200, request=httpx.Request("GET", "https://a.test/"))
    assert map_api_error(response) is response


def test_decode_body():
    assert decode_body(httpx.Response(200, json={"a": 1})) == {"a": 1}
    assert decode_body(httpx.Response(200, text="plain")) == "plain"
    assert decode_body(httpx.Response(204)) is None


def test_sender_merges_query_and_sets_bearer_header():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    sender = HttpRequestSender(transport=httpx.MockTransport(handler))
    body = sender.send(_bound(), "POST", params={"ttl": "30"}, content=b"raw", content_type="application/octet-stream")

    assert body == {"ok": True}
    request = seen[0]
    assert request.method == "POST"
    assert request.headers["authorization"] == "Bearer tok"
    assert request.headers["content-type"] == "application/octet-stream"
    assert request.url.params["from"] == "base64:YQ"
    assert request.url.params["ttl"] == "30"
    assert request.content == b"raw"
    sender.close()


def test_sender_refuses_insecure_bound_request():
    sender = HttpRequestSender(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    with pytest.raises(InsecureUrlRejected):
        sender.send(_bound(url="http://metadata.test/v1/config/"), "GET")


def test_sender_wraps_transport_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    sender = HttpRequestSender(transport=httpx.MockTransport(handler))
    with pytest.raises(TransportFailure) as exc_info:
        sender.send(_bound(), "GET")
    assert isinstance(exc_info.value.original_exception, httpx.ConnectError)


def test_sender_reuses_client_per_transport_options():
    sender = HttpRequestSender(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    assert sender.client_for(TransportOptions()) is sender.client_for(TransportOptions())
    assert sender.client_for(TransportOptions()) is not sender.client_for(TransportOptions(True, False))
    sender.close()
