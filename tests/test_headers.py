"""Tests for crumb.http.headers: immutable, case-insensitive headers."""

from crumb.http.headers import Headers


def _headers(*pairs: tuple[str, str]) -> Headers:
    return Headers(tuple((k.encode("latin-1"), v.encode("latin-1")) for k, v in pairs))


class TestHeaders:
    def test_case_insensitive_lookup(self) -> None:
        headers = _headers(("content-type", "text/html"))
        assert headers["Content-Type"] == "text/html"
        assert "CONTENT-TYPE" in headers

    def test_first_value_wins(self) -> None:
        headers = _headers(("x-forwarded-proto", "https"), ("x-forwarded-proto", "http"))
        assert headers["x-forwarded-proto"] == "https"

    def test_get_default(self) -> None:
        assert _headers().get("missing") is None
        assert _headers().get("missing", "fallback") == "fallback"

    def test_get_list(self) -> None:
        headers = _headers(("cookie", "a=1"), ("Cookie", "b=2"), ("host", "x"))
        assert headers.get_list("cookie") == ["a=1", "b=2"]
        assert headers.get_list("missing") == []

    def test_iteration_deduplicates(self) -> None:
        headers = _headers(("cookie", "a=1"), ("Cookie", "b=2"), ("host", "x"))
        assert list(headers) == ["cookie", "host"]
        assert len(headers) == 2

    def test_non_string_key_not_contained(self) -> None:
        assert 1 not in _headers(("host", "x"))

    def test_first_value(self) -> None:
        headers = _headers(("X-Forwarded-Proto", "HTTPS , http"))
        assert headers.first_value("x-forwarded-proto") == "https"
        assert headers.first_value("missing") is None

    def test_repr(self) -> None:
        assert repr(_headers(("host", "x"))) == "Headers({'host': 'x'})"
