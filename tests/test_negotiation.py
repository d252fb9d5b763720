"""Tests for crumb.server.negotiation: handler return value dispatch."""

import json

import pytest

from crumb.errors import ConfigurationError
from crumb.http.response import Response
from crumb.server.negotiation import negotiate


class TestNegotiate:
    def test_response_passthrough(self) -> None:
        original = Response(body="hello", status=201)
        assert negotiate(original) is original

    def test_none_is_empty(self) -> None:
        result = negotiate(None)
        assert result.status == 200
        assert result.body == ""

    def test_str(self) -> None:
        result = negotiate("hello")
        assert result.text == "hello"
        assert result.content_type.startswith("text/plain")

    def test_bytes(self) -> None:
        result = negotiate(b"\x00\x01")
        assert result.content_type == "application/octet-stream"

    def test_dict_is_json(self) -> None:
        result = negotiate({"a": 1})
        assert result.content_type.startswith("application/json")
        assert json.loads(result.text) == {"a": 1}

    def test_list_is_json(self) -> None:
        assert json.loads(negotiate([1, 2]).text) == [1, 2]

    def test_tuple_with_status(self) -> None:
        result = negotiate(("created", 201))
        assert result.status == 201
        assert result.text == "created"

    def test_tuple_with_status_and_headers(self) -> None:
        result = negotiate(("gone", 410, {"X-Reason": "expired"}))
        assert result.status == 410
        assert ("X-Reason", "expired") in result.headers

    def test_unknown_type_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="Cannot convert"):
            negotiate(object())
