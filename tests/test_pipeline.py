"""
Tests for the request pipeline.
"""

import pytest

from libvault import (
    Codec,
    CodecError,
    HTTPAdapterError,
    TransportResponse,
    UnknownResponseError,
    Vault,
)
from libvault import pipeline
from conftest import HOST, RecordingTransport


class ExplodingCodec(Codec):
    """Fails the test if the pipeline reaches for the codec."""

    def encode(self, value):
        raise AssertionError("encode should not be called")

    def decode(self, payload):
        raise AssertionError("decode should not be called")


class TestRequestAssembly:
    """URL, header and body assembly."""

    def test_request_with_current_token(self, vault, transport):
        assert vault.request("get", "path/to/call") is None

        call = transport.calls[0]
        assert call.method == "GET"
        assert call.url == "http://localhost/v1/path/to/call"
        assert call.headers == [("X-Vault-Token", "token")]
        assert call.body == "{}"

    def test_leading_slash_is_stripped(self, vault, transport):
        vault.request("get", "/path/to/call")
        assert transport.calls[0].url == "http://localhost/v1/path/to/call"

    def test_custom_headers_follow_token(self, vault, transport):
        headers = [("X-Forwarded-For", "http://localhost")]
        vault.request("get", "path/to/call", headers=headers)

        assert transport.calls[0].headers == [
            ("X-Vault-Token", "token"),
            ("X-Forwarded-For", "http://localhost"),
        ]

    def test_no_token_header_without_token(self, anonymous_vault, transport):
        anonymous_vault.request("get", "sys/health")
        assert transport.calls[0].headers == []

    def test_query_params(self, vault, transport):
        vault.request("get", "path/to/call", query_params={"cas": 0})
        assert transport.calls[0].url == "http://localhost/v1/path/to/call?cas=0"

    def test_ordered_query_params(self, vault, transport):
        vault.request("get", "path", query_params=[("b", "2"), ("a", "1")])
        assert transport.calls[0].url == "http://localhost/v1/path?b=2&a=1"

    def test_empty_query_params_leave_no_question_mark(self, vault, transport):
        vault.request("get", "path/to/call", query_params={})
        assert transport.calls[0].url == "http://localhost/v1/path/to/call"

    def test_api_version(self, vault, transport):
        vault.request("get", "path/to/call", version="v3")
        assert transport.calls[0].url == "http://localhost/v3/path/to/call"

    def test_body_is_encoded(self, vault, transport):
        vault.request("post", "path/to/call", body={"foo": "bar"})
        assert transport.calls[0].json == {"foo": "bar"}

    def test_transport_options_are_forwarded(self, transport):
        options = {"timeout": 5, "verify_ssl": False}
        vault = Vault(host=HOST, transport=transport, transport_options=options)
        vault.request("get", "sys/health")
        assert transport.calls[0].options == options

    def test_verb_helpers(self, vault, transport):
        pipeline.put(vault, "a")
        pipeline.patch(vault, "b")
        pipeline.delete(vault, "c")
        pipeline.head(vault, "d")
        assert [call.method for call in transport.calls] == ["PUT", "PATCH", "DELETE", "HEAD"]


class TestCodecHandling:
    """Encoding and decoding through the codec."""

    def test_none_body_skips_codec(self, transport):
        vault = Vault(host=HOST, transport=transport, codec=ExplodingCodec())
        assert vault.request("get", "sys/health", body=None) is None
        assert transport.calls[0].body is None

    def test_empty_response_skips_codec(self):
        transport = RecordingTransport(TransportResponse(status=200, body=b""))
        vault = Vault(host=HOST, transport=transport, codec=ExplodingCodec())
        assert vault.request("get", "sys/health", body=None) is None

    def test_response_is_decoded(self, vault, transport):
        transport.reply({"data": {"foo": "bar"}})
        assert vault.request("get", "secret/foo") == {"data": {"foo": "bar"}}

    def test_without_codec_bodies_pass_through(self):
        transport = RecordingTransport(TransportResponse(status=200, body=b"raw"))
        vault = Vault(host=HOST, transport=transport, codec=None)

        assert vault.request("post", "raw/path", body={"foo": "bar"}) == b"raw"
        assert transport.calls[0].body == {"foo": "bar"}

    def test_codec_failure_propagates(self):
        transport = RecordingTransport(TransportResponse(status=200, body=b"<html>"))
        vault = Vault.new(host=HOST, transport=transport)

        with pytest.raises(CodecError) as exc_info:
            vault.request("get", "sys/health")
        assert exc_info.value.errors[0] == "JSON decode error"


class TestErrors:
    """Transport failures and unknown transport results."""

    def test_transport_error(self, vault):
        vault = vault.set_transport(RecordingTransport(error="connection refused"))

        with pytest.raises(HTTPAdapterError) as exc_info:
            vault.request("get", "sys/health")
        assert exc_info.value.errors == ["Http Adapter error", "connection refused"]

    def test_unknown_transport_result(self, vault):
        transport = RecordingTransport({"status": 200})
        vault = vault.set_transport(transport)

        with pytest.raises(UnknownResponseError) as exc_info:
            vault.request("get", "sys/health")
        assert exc_info.value.errors[0] == "Unknown response"


def test_build_url():
    assert pipeline.build_url("https://vault", "v1", "/a/b", {"list": "true"}) == "https://vault/v1/a/b?list=true"
    assert pipeline.build_url("https://vault", "v1", "a/b") == "https://vault/v1/a/b"
