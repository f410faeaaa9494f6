"""Tests for oauth_unpacker.request module."""

import dataclasses

import pytest

from oauth_unpacker.params import OAuthParams
from oauth_unpacker.request import (
    OAuth1RequestBuilder,
    OAuth2Request,
    SimpleHttpRequest,
)


def complete_params():
    return OAuthParams(
        consumer_key="ck",
        token="tk",
        signature_method="HMAC-SHA1",
        signature="sig",
        timestamp="123",
        nonce="abc",
    )


class TestSimpleHttpRequest:
    """Tests for the in-memory request."""

    def test_defaults(self):
        request = SimpleHttpRequest()

        assert request.method == "GET"
        assert request.scheme == "http"
        assert request.server_name == "localhost"
        assert request.server_port == 80
        assert request.path == "/"
        assert request.query_string is None
        assert request.content_type is None
        assert request.content_length == 0
        assert request.read(10) == b""

    def test_headers_case_insensitive(self):
        request = SimpleHttpRequest(headers={"Authorization": "Bearer x"})

        assert request.get_header("authorization") == "Bearer x"
        assert request.get_header("AUTHORIZATION") == "Bearer x"
        assert request.get_header("X-Missing") is None

    def test_content_type_from_headers(self):
        request = SimpleHttpRequest(headers={"Content-Type": "text/plain"})

        assert request.content_type == "text/plain"

    def test_body_read_in_chunks(self):
        request = SimpleHttpRequest(body=b"abcdef")

        assert request.content_length == 6
        assert request.read(4) == b"abcd"
        assert request.read(4) == b"ef"
        assert request.read(4) == b""

    def test_explicit_content_length(self):
        request = SimpleHttpRequest(body=b"abcdef", content_length=3)

        assert request.content_length == 3


class TestOAuth1RequestBuilder:
    """Tests for OAuth1RequestBuilder."""

    def test_build(self):
        builder = OAuth1RequestBuilder([("a", "1")], complete_params())
        builder.scheme = "http"
        builder.verb = "get"
        builder.host = "api.example.com"
        builder.port = 80
        builder.path = "/1/statuses"

        request = builder.build()

        assert request.scheme == "HTTP"
        assert request.verb == "GET"
        assert request.host == "api.example.com"
        assert request.port == 80
        assert request.path == "/1/statuses"
        assert request.params == (("a", "1"),)
        assert request.consumer_key == "ck"
        assert request.token == "tk"
        assert request.version is None

    def test_build_incomplete_raises(self):
        builder = OAuth1RequestBuilder([], OAuthParams(token="tk"))

        with pytest.raises(ValueError):
            builder.build()

    def test_built_request_is_frozen(self):
        request = OAuth1RequestBuilder([], complete_params()).build()

        with pytest.raises(dataclasses.FrozenInstanceError):
            request.nonce = "other"

    def test_builder_params_copied(self):
        params = [("a", "1")]
        request = OAuth1RequestBuilder(params, complete_params()).build()

        params.append(("b", "2"))

        assert request.params == (("a", "1"),)


class TestOAuth1Request:
    def test_to_dict(self):
        builder = OAuth1RequestBuilder([("a", "1")], complete_params())
        builder.scheme = "https"
        builder.verb = "post"
        builder.host = "h"
        builder.port = 443
        builder.path = "/p"

        data = builder.build().to_dict()

        assert data == {
            "oauth_version": 1,
            "scheme": "HTTPS",
            "verb": "POST",
            "host": "h",
            "port": 443,
            "path": "/p",
            "params": [["a", "1"]],
            "oauth_params": {
                "oauth_consumer_key": "ck",
                "oauth_token": "tk",
                "oauth_signature_method": "HMAC-SHA1",
                "oauth_signature": "sig",
                "oauth_timestamp": "123",
                "oauth_nonce": "abc",
            },
        }


class TestOAuth2Request:
    def test_equality(self):
        assert OAuth2Request("abc") == OAuth2Request("abc")
        assert OAuth2Request("abc") != OAuth2Request("def")

    def test_to_dict(self):
        assert OAuth2Request("abc").to_dict() == {"oauth_version": 2, "token": "abc"}
