"""Tests for oauth_unpacker.handlers module."""

from unittest.mock import Mock

import pytest

from oauth_unpacker.handlers import (
    DuplicateKeyValueHandler,
    KeyValueHandler,
    NotOAuthKeyValueHandler,
    OAuth2HeaderKeyValueHandler,
    OAuthKeyValueHandler,
    QuotedValueKeyValueHandler,
    fold_last_wins,
)
from oauth_unpacker.params import OAuthParams


class TestFoldLastWins:
    def test_last_value_first_position(self):
        pairs = [("a", "1"), ("b", "2"), ("a", "3")]

        assert fold_last_wins(pairs) == [("a", "3"), ("b", "2")]

    def test_empty(self):
        assert fold_last_wins([]) == []


class TestKeyValueHandler:
    def test_cannot_instantiate_base(self):
        with pytest.raises(TypeError):
            KeyValueHandler()

    def test_call_delegates_to_handle(self):
        handler = DuplicateKeyValueHandler()

        handler("a", "1")

        assert handler.to_list() == [("a", "1")]


class TestDuplicateKeyValueHandler:
    """Tests for DuplicateKeyValueHandler."""

    def test_keeps_every_occurrence(self):
        handler = DuplicateKeyValueHandler()
        handler.handle("a", "1")
        handler.handle("a", "2")

        assert handler.to_list() == [("a", "1"), ("a", "2")]
        assert len(handler) == 2

    def test_folded_view(self):
        handler = DuplicateKeyValueHandler()
        handler.handle("a", "1")
        handler.handle("b", "x")
        handler.handle("a", "2")

        assert handler.to_list(keep_duplicates=False) == [("a", "2"), ("b", "x")]

    def test_to_list_returns_copy(self):
        handler = DuplicateKeyValueHandler()
        handler.handle("a", "1")

        handler.to_list().append(("b", "2"))

        assert handler.to_list() == [("a", "1")]


class TestNotOAuthKeyValueHandler:
    """Tests for NotOAuthKeyValueHandler."""

    def test_forwards_plain_keys(self):
        inner = Mock()

        NotOAuthKeyValueHandler(inner).handle("status", "hello")

        inner.assert_called_once_with("status", "hello")

    def test_drops_oauth_keys(self):
        inner = Mock()
        handler = NotOAuthKeyValueHandler(inner)

        handler.handle("oauth_token", "tk")
        handler.handle("oauth_unknown", "x")

        inner.assert_not_called()

    def test_prefix_is_case_sensitive(self):
        inner = Mock()

        NotOAuthKeyValueHandler(inner).handle("OAUTH_token", "tk")

        inner.assert_called_once_with("OAUTH_token", "tk")


class TestOAuthKeyValueHandler:
    """Tests for OAuthKeyValueHandler."""

    def test_collects_known_fields(self):
        params = OAuthParams()
        handler = OAuthKeyValueHandler(params)

        handler.handle("oauth_consumer_key", "ck")
        handler.handle("oauth_token", "tk")
        handler.handle("oauth_callback", "oob")

        assert params.consumer_key == "ck"
        assert params.token == "tk"
        assert params.callback == "oob"

    def test_last_write_wins(self):
        params = OAuthParams()
        handler = OAuthKeyValueHandler(params)

        handler.handle("oauth_nonce", "first")
        handler.handle("oauth_nonce", "second")

        assert params.nonce == "second"

    def test_ignores_unknown_and_plain_keys(self):
        params = OAuthParams()
        handler = OAuthKeyValueHandler(params)

        handler.handle("oauth_body_hash", "x")
        handler.handle("status", "hello")

        assert params == OAuthParams()


class TestQuotedValueKeyValueHandler:
    """Tests for QuotedValueKeyValueHandler."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ('"abc"', "abc"),
            ("abc", "abc"),
            ('""', ""),
            ('"', '"'),
            ('"abc', '"abc'),
            ('""abc""', '"abc"'),
        ],
    )
    def test_unquote(self, value, expected):
        inner = Mock()

        QuotedValueKeyValueHandler(inner).handle("k", value)

        inner.assert_called_once_with("k", expected)


class TestOAuth2HeaderKeyValueHandler:
    """Tests for OAuth2HeaderKeyValueHandler."""

    def test_key_becomes_token(self):
        inner = Mock()

        OAuth2HeaderKeyValueHandler(inner).handle("abc123", "")

        inner.assert_called_once_with("oauth_token", "abc123")

    def test_writes_into_accumulator(self):
        params = OAuthParams()

        OAuth2HeaderKeyValueHandler(OAuthKeyValueHandler(params)).handle("abc123", "")

        assert params.token == "abc123"
        assert params.only_oauth_token_set
