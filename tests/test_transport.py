"""
Tests for the httpx transport and the JSON codec.
"""

import httpx
import pytest
import respx
from pydantic import ValidationError as PydanticValidationError

from libvault import (
    CodecError,
    HTTPAdapterError,
    HTTPOptions,
    HttpxTransport,
    JSONCodec,
    TransportError,
    Vault,
)

URL = "http://vault.test/v1/secret/data/app"


class TestHttpxTransport:
    @respx.mock
    def test_get_drops_empty_json_body(self):
        route = respx.get(URL).mock(return_value=httpx.Response(200, content=b'{"data":{}}'))

        response = HttpxTransport().request("GET", URL, "{}", [("X-Vault-Token", "t")], {})

        assert response.status == 200
        assert response.body == b'{"data":{}}'
        request = route.calls.last.request
        assert request.content == b""
        assert request.headers["X-Vault-Token"] == "t"

    @respx.mock
    def test_post_sends_body(self):
        route = respx.post(URL).mock(return_value=httpx.Response(204))

        response = HttpxTransport().request(
            "POST", URL, '{"data":{"foo":"bar"}}', [("Content-Type", "application/json")], {}
        )

        assert response.status == 204
        assert response.body == b""
        assert route.calls.last.request.content == b'{"data":{"foo":"bar"}}'

    @respx.mock
    def test_connection_error(self):
        respx.get(URL).mock(side_effect=httpx.ConnectError("connection refused"))

        with pytest.raises(TransportError) as exc_info:
            HttpxTransport().request("GET", URL, None, [], {})
        assert "ConnectError" in exc_info.value.details

    @respx.mock
    def test_retries_connection_errors(self):
        route = respx.get(URL).mock(
            side_effect=[httpx.ConnectError("boom"), httpx.Response(200, json={"data": {}})]
        )
        options = {"max_retries": 2, "retry_backoff_factor": 0}

        response = HttpxTransport().request("GET", URL, None, [], options)

        assert response.status == 200
        assert route.call_count == 2

    @respx.mock
    def test_no_retries_by_default(self):
        route = respx.get(URL).mock(side_effect=httpx.ConnectError("boom"))

        with pytest.raises(TransportError):
            HttpxTransport().request("GET", URL, None, [], {})
        assert route.call_count == 1

    def test_injected_client(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": {"id": "token", "ttl": 60}})

        client = httpx.Client(transport=httpx.MockTransport(handler))
        response = HttpxTransport(client=client).request("GET", URL, None, [], {})

        assert response.status == 200
        assert seen[0].url == URL
        assert not client.is_closed

    @pytest.mark.parametrize("body", [{}, None, b"", "{}"])
    def test_bodyless_verbs_drop_empty_bodies(self, body):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(204)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        HttpxTransport(client=client).request("DELETE", URL, body, [], {})

        assert seen[0].content == b""

    def test_rejects_unencoded_body(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(204)))

        with pytest.raises(TransportError) as exc_info:
            HttpxTransport(client=client).request("POST", URL, {"foo": "bar"}, [], {})
        assert "dict" in exc_info.value.details

    def test_rejects_unknown_options(self):
        with pytest.raises(PydanticValidationError):
            HttpxTransport().request("GET", URL, None, [], {"retries": 3})


class TestHTTPOptions:
    def test_defaults(self):
        options = HTTPOptions()
        assert options.timeout == 30.0
        assert options.max_retries == 0
        assert options.follow_redirects is True
        assert options.verify is True

    def test_ca_bundle(self):
        assert HTTPOptions(ca_bundle="/etc/ssl/vault.pem").verify == "/etc/ssl/vault.pem"
        assert HTTPOptions(verify_ssl=False, ca_bundle="/etc/ssl/vault.pem").verify is False


class TestJSONCodec:
    def test_encode_is_compact(self):
        assert JSONCodec().encode({"versions": [1, 2]}) == '{"versions":[1,2]}'

    def test_decode_bytes(self):
        assert JSONCodec().decode(b'{"data": {"foo": "bar"}}') == {"data": {"foo": "bar"}}

    def test_encode_error(self):
        with pytest.raises(CodecError) as exc_info:
            JSONCodec().encode({"value": object()})
        assert exc_info.value.errors[0] == "JSON encode error"

    def test_decode_error(self):
        with pytest.raises(CodecError) as exc_info:
            JSONCodec().decode(b"{")
        assert exc_info.value.errors[0] == "JSON decode error"


class TestWithoutCodec:
    """Raw bodies pass through when the client has no codec."""

    @pytest.fixture
    def sent(self):
        return []

    @pytest.fixture
    def raw_vault(self, sent):
        def handler(request):
            sent.append(request)
            return httpx.Response(204)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        return Vault(host="http://vault.test", transport=HttpxTransport(client=client), codec=None)

    @pytest.mark.parametrize("operation", ["read", "list", "delete"])
    def test_bodyless_operations(self, raw_vault, sent, operation):
        assert getattr(raw_vault, operation)("cubbyhole/app") == {}
        assert sent[0].content == b""

    def test_unencoded_write_is_an_adapter_error(self, raw_vault, sent):
        with pytest.raises(HTTPAdapterError) as exc_info:
            raw_vault.write("cubbyhole/app", {"foo": "bar"})

        assert exc_info.value.errors[0] == "Http Adapter error"
        assert sent == []

    def test_encoded_write(self, raw_vault, sent):
        assert raw_vault.write("cubbyhole/app", '{"foo":"bar"}') == {"value": '{"foo":"bar"}'}
        assert sent[0].content == b'{"foo":"bar"}'
