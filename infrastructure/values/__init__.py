from infrastructure.values.engine import ExpressionEngine
from infrastructure.values.model import TOP, Atom, Kind, ListValue, Struct, Value

__all__ = [
    "ExpressionEngine",
    "TOP",
    "Atom",
    "Kind",
    "ListValue",
    "Struct",
    "Value",
]
