"""Tests for crumb.sessions.state: change detection and cookie actions."""

import pytest

from crumb.errors import SessionSerializationError, SessionUsageError
from crumb.sessions.state import CookieAction, Session, SessionState


class TestSession:
    def test_is_a_dict(self) -> None:
        session = Session({"a": 1})
        assert isinstance(session, dict)
        assert session == {"a": 1}

    def test_is_new_and_populated(self) -> None:
        session = Session(is_new=True)
        assert session.is_new is True
        assert session.populated is False
        session["a"] = 1
        assert session.populated is True

    def test_copies_input(self) -> None:
        data = {"a": 1}
        session = Session(data)
        session["b"] = 2
        assert data == {"a": 1}

    def test_repr(self) -> None:
        assert repr(Session({"a": 1}, is_new=True)) == "Session({'a': 1}, is_new=True)"


class TestLoad:
    def test_no_cookie_is_new(self) -> None:
        state = SessionState(None)
        assert state.is_new is True
        assert state.session == {}
        assert state.session.is_new is True
        assert state.initial_hash == "{}"

    def test_loaded_cookie(self) -> None:
        state = SessionState({"message": "hi"})
        assert state.is_new is False
        assert state.session == {"message": "hi"}
        assert state.initial_hash == '{"message":"hi"}'
        assert state.populated is True

    def test_loaded_empty_object_is_not_new(self) -> None:
        state = SessionState({})
        assert state.is_new is False
        assert state.populated is False


class TestClassifyNewSession:
    def test_untouched(self) -> None:
        assert SessionState(None).classify() is CookieAction.NONE

    def test_read_only(self) -> None:
        state = SessionState(None)
        assert state.session.get("missing") is None
        assert state.classify() is CookieAction.NONE

    def test_populated(self) -> None:
        state = SessionState(None)
        state.session["message"] = "hello"
        assert state.classify() is CookieAction.SAVE

    def test_populated_then_cleared(self) -> None:
        state = SessionState(None)
        state.session["message"] = "hello"
        del state.session["message"]
        assert state.classify() is CookieAction.NONE

    def test_replaced_with_empty_mapping(self) -> None:
        state = SessionState(None)
        state.replace({})
        assert state.classify() is CookieAction.NONE

    def test_destroyed(self) -> None:
        state = SessionState(None)
        state.replace(None)
        assert state.destroyed is True
        assert state.classify() is CookieAction.EXPIRE


class TestClassifyLoadedSession:
    def test_unchanged(self) -> None:
        state = SessionState({"message": "hello"})
        assert state.session["message"] == "hello"
        assert state.classify() is CookieAction.NONE

    def test_same_value_written_back(self) -> None:
        state = SessionState({"message": "hello"})
        state.session["message"] = "hello"
        assert state.classify() is CookieAction.NONE

    def test_changed(self) -> None:
        state = SessionState({"message": "hello"})
        state.session["message"] = "goodbye"
        assert state.classify() is CookieAction.SAVE

    def test_nested_change(self) -> None:
        state = SessionState({"cart": {"items": [1]}})
        state.session["cart"]["items"].append(2)
        assert state.classify() is CookieAction.SAVE

    def test_key_order_change(self) -> None:
        state = SessionState({"a": 1, "b": 2})
        state.replace({"b": 2, "a": 1})
        assert state.classify() is CookieAction.SAVE

    def test_emptied(self) -> None:
        state = SessionState({"message": "hello"})
        state.session.clear()
        assert state.classify() is CookieAction.SAVE

    def test_replaced_with_empty_mapping(self) -> None:
        state = SessionState({"message": "hello"})
        state.replace({})
        assert state.destroyed is False
        assert state.classify() is CookieAction.SAVE

    def test_replaced_with_equal_mapping(self) -> None:
        state = SessionState({"message": "hello"})
        state.replace({"message": "hello"})
        assert state.classify() is CookieAction.NONE

    def test_destroyed(self) -> None:
        state = SessionState({"message": "hello"})
        state.replace(None)
        assert state.session is None
        assert state.classify() is CookieAction.EXPIRE

    @pytest.mark.parametrize("falsy", [False, 0, "", []])
    def test_any_falsy_value_destroys(self, falsy: object) -> None:
        state = SessionState({"message": "hello"})
        state.replace(falsy)
        assert state.destroyed is True
        assert state.classify() is CookieAction.EXPIRE


class TestReplace:
    def test_mapping_becomes_session(self) -> None:
        state = SessionState({"a": 1})
        session = state.replace({"b": 2})
        assert isinstance(session, Session)
        assert session is state.session
        assert session.is_new is False

    def test_keeps_is_new_of_request(self) -> None:
        state = SessionState(None)
        assert state.replace({"b": 2}).is_new is True

    def test_non_mapping_returns_none(self) -> None:
        state = SessionState(None)
        assert state.replace("oops") is None
        assert state.value == "oops"


class TestClassifyErrors:
    @pytest.mark.parametrize("value", ["string", 42, True, ["list"]])
    def test_truthy_non_mapping_raises(self, value: object) -> None:
        state = SessionState(None)
        state.replace(value)
        with pytest.raises(SessionUsageError, match="mapping or None"):
            state.classify()

    def test_usage_error_is_type_error(self) -> None:
        state = SessionState(None)
        state.replace("string")
        with pytest.raises(TypeError):
            state.classify()

    def test_unserializable_value_raises(self) -> None:
        state = SessionState(None)
        state.session["when"] = object()
        with pytest.raises(SessionSerializationError):
            state.classify()
