# tests/infrastructure/values/test_expression_engine.py
import math

import pytest
from domain.errors import EncodeError
from infrastructure.values import ExpressionEngine, Struct
from infrastructure.values.model import to_python


@pytest.fixture
def engine() -> ExpressionEngine:
    return ExpressionEngine()


class TestEncode:
    def test_plain_data(self, engine):
        data = {"status": {"code": 200, "line": "200 OK"}, "body": [1, None, True, 2.5], "headers": {}}
        value = engine.encode(data)
        assert to_python(value) == data

    def test_tuple_as_list(self, engine):
        assert to_python(engine.encode((1, 2))) == [1, 2]

    def test_values_pass_through(self, engine):
        value = engine.compile("{a: int}", {})
        assert engine.encode({"x": value}) == Struct((("x", value),))

    @pytest.mark.parametrize("data", [math.nan, {"a": [math.inf]}])
    def test_non_finite_numbers(self, engine, data):
        with pytest.raises(EncodeError):
            engine.encode(data)

    def test_non_string_keys(self, engine):
        with pytest.raises(EncodeError, match="labels must be strings"):
            engine.encode({1: "x"})

    def test_unknown_type(self, engine):
        with pytest.raises(EncodeError, match="a.0: cannot encode value of type object"):
            engine.encode({"a": [object()]})


class TestCompile:
    def test_scope_data_is_encoded(self, engine):
        value = engine.compile("$.n * 2", {"$": {"n": 21}, "$history": [{"n": 21}]})
        assert engine.stringify(value) == "42"

    def test_unify_and_top(self, engine):
        value = engine.compile("{a: 1}", {})
        assert engine.unify(engine.top(), value) == value
