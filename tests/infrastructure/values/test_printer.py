# tests/infrastructure/values/test_printer.py
import pytest
from infrastructure.values.model import TOP, Atom, Disjunction, Kind, ListValue, Struct
from infrastructure.values.printer import format_label, render, stringify


@pytest.mark.parametrize(
    "label, expected",
    [("foo", "foo"), ("$id", "$id"), ("Content-Type", '"Content-Type"'), ("true", '"true"'), ("", '""')],
)
def test_format_label(label, expected):
    assert format_label(label) == expected


def test_render_compact():
    value = Struct(
        (
            ("foo", Atom.of("bar")),
            ("n", ListValue((Atom.of(1), Atom.of(2.5)))),
            ("ok", Atom.of(True)),
            ("none", Atom.of(None)),
        )
    )
    assert render(value) == '{foo: "bar", n: [1, 2.5], ok: true, none: null}'


def test_render_constraints():
    assert render(TOP) == "_"
    assert render(Disjunction((Kind("int"), Atom.of("x")))) == 'int | "x"'
    assert render(ListValue((), TOP)) == "[...]"
    assert render(Struct()) == "{}"


def test_stringify_top_level_string_is_raw():
    assert stringify(Atom.of('say "hi"')) == 'say "hi"'
    assert stringify(Struct((("s", Atom.of("x")),))) == '{s: "x"}'
    assert stringify(Atom.of(21)) == "21"
