# tests/domain/test_errors.py
import pytest
from domain.errors import (
    ConflictError,
    ExpandError,
    InvalidEscapeError,
    MatchError,
    ParseError,
    TestDriveError,
    UnknownCommandError,
)


class TestTestDriveError:
    def test_str_without_location(self):
        assert str(TestDriveError("boom")) == "boom"

    def test_with_location_formats_source_and_line(self):
        err = TestDriveError("boom").with_location("api.testdrive", 7)
        assert str(err) == "api.testdrive:7: boom"
        assert err.message == "boom"

    def test_with_location_keeps_existing_location(self):
        err = ParseError("boom", source_name="inner.testdrive", line=2)
        err.with_location("outer.testdrive", 9)
        assert err.source_name == "inner.testdrive"
        assert err.line == 2

    def test_source_without_line(self):
        err = TestDriveError("boom", source_name="api.testdrive")
        assert str(err) == "api.testdrive: boom"
        err.with_location("api.testdrive", 4)
        assert str(err) == "api.testdrive:4: boom"

    def test_unnamed_source(self):
        err = TestDriveError("boom", line=3)
        assert str(err) == "<script>:3: boom"


class TestUnknownCommandError:
    def test_names_keyword_and_line(self):
        err = UnknownCommandError("FOO", 3, source_name="x.testdrive")
        assert isinstance(err, ParseError)
        assert err.keyword == "FOO"
        assert err.line == 3
        assert "FOO" in str(err)
        assert str(err).startswith("x.testdrive:3:")


class TestConflictError:
    def test_joins_conflicts(self):
        err = ConflictError([("a.b", "conflicting values 1 and 2"), ("", "top level")])
        assert err.message == "a.b: conflicting values 1 and 2; top level"
        assert err.paths == ["a.b", ""]

    def test_match_error_prefix(self):
        err = MatchError([("foo", "conflicting values \"a\" and \"b\"")])
        assert isinstance(err, ConflictError)
        assert err.message.startswith("value does not match: foo: ")


class TestExpandErrors:
    def test_expand_error_message(self):
        cause = TestDriveError("reference \"x\" not found")
        err = ExpandError("x", 5, cause)
        assert err.expr == "x"
        assert err.position == 5
        assert err.cause is cause
        assert err.message == 'cannot evaluate expression x at position 5: reference "x" not found'

    def test_invalid_escape_message(self):
        err = InvalidEscapeError(4)
        assert err.message == "invalid escape sequence at position 4 ())"


def test_errors_are_not_collected_as_tests():
    assert TestDriveError.__test__ is False
    with pytest.raises(TestDriveError):
        raise MatchError([])
