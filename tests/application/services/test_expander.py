# tests/application/services/test_expander.py
import pytest
from application.services.expander import Expander
from domain.errors import ExpandError, InvalidEscapeError
from domain.run import RunState
from infrastructure.values import ExpressionEngine


@pytest.fixture
def state() -> RunState:
    state = RunState(values=ExpressionEngine())
    state.push_value(state.encode_value({"s": "abc", "n": 21, "b": True, "a": 1}))
    return state


def expand(text, state):
    return Expander().expand(text, state)


class TestExpander:
    @pytest.mark.parametrize(
        "text",
        ["", "no vars", "plain (parens) stay", '{"json": [1, 2]}'],
    )
    def test_text_without_placeholders_is_unchanged(self, text, state):
        assert expand(text, state) == text

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("string \\($.s)", "string abc"),
            ("int \\($.n)", "int 21"),
            ("bool \\($.b)", "bool true"),
            ("\\($.n)", "21"),
            ("brackets ($.a) are kept", "brackets ($.a) are kept"),
            ("\\($.s)-\\($.n)", "abc-21"),
            ("a \\(1+1) b", "a 2 b"),
            ("nested \\(($.n + 1) * 2)", "nested 44"),
        ],
    )
    def test_placeholders(self, text, expected, state):
        assert expand(text, state) == expected

    def test_structured_value_renders_compact(self, state):
        assert expand("\\($)", state) == '{s: "abc", n: 21, b: true, a: 1}'

    def test_unterminated_expression_is_kept(self, state):
        assert expand("x \\(y", state) == "x \\(y"
        assert expand("not closed \\($.s", state) == "not closed \\($.s"

    def test_escaped_backslash(self, state):
        assert expand("a\\\\b", state) == "a\\b"
        assert expand("\\\\(not an expr)", state) == "\\(not an expr)"

    def test_other_escapes_are_kept(self, state):
        assert expand('{"line": "one\\ntwo"}', state) == '{"line": "one\\ntwo"}'

    def test_escaped_close_paren(self, state):
        with pytest.raises(InvalidEscapeError) as excinfo:
            expand("oops \\)", state)
        assert excinfo.value.position == 6

    def test_evaluation_failure(self, state):
        with pytest.raises(ExpandError) as excinfo:
            expand("value: \\($.missing)", state)

        err = excinfo.value
        assert err.expr == "$.missing"
        assert err.position == 9
        assert "undefined field: missing" in err.message

    def test_history_reference(self, state):
        state.push_value(state.encode_value({"s": "newer"}))
        assert expand("\\($.s) \\($history[1].s)", state) == "newer abc"
