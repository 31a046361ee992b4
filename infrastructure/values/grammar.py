# infrastructure/values/grammar.py
from __future__ import annotations

from functools import lru_cache

from lark import Lark

# Newlines and commas separate fields and list items; everything else
# between tokens is insignificant.
GRAMMAR = r"""
start: _SEP?
     | _SEP? fields _SEP?
     | _SEP? expr _SEP?

fields: field
      | fields _SEP field

field: label ":" field   -> nested_field
     | label ":" expr    -> field

label: IDENT             -> ident_label
     | STRING            -> string_label

?expr: disj

?disj: conj
     | conj ("|" conj)+  -> disjunction

?conj: cmp
     | cmp ("&" cmp)+    -> conjunction

?cmp: sum
    | sum CMP sum        -> compare
    | CMP sum            -> bound

?sum: product
    | sum "+" product    -> add
    | sum "-" product    -> sub

?product: unary
        | product "*" unary  -> mul
        | product "/" unary  -> div

?unary: postfix
      | "-" unary        -> neg
      | "+" unary
      | "!" unary        -> not_

?postfix: primary
        | postfix "." selector   -> select
        | postfix "[" expr "]"   -> index

selector: IDENT | STRING | INT

?primary: STRING         -> string
        | INT            -> int
        | FLOAT          -> float
        | IDENT          -> ref
        | "(" expr ")"
        | struct
        | list

struct: "{" _SEP? "}"
      | "{" _SEP? fields _SEP? "}"

list: "[" _SEP? "]"
    | "[" _SEP? items _SEP? "]"

items: item
     | items _SEP item

item: expr               -> elem
    | "..." expr?        -> ellipsis

CMP.2: /==|!=|<=|>=|=~|!~|<|>/
IDENT: /[A-Za-z_$#][A-Za-z0-9_$#]*/
FLOAT.2: /\d+\.\d+([eE][+-]?\d+)?|\d+[eE][+-]?\d+/
INT: /\d+/
STRING: /"(\\.|[^"\\\n])*"/

_SEP: /((\/\/[^\n]*)?[,\n][ \t\r]*)+/
COMMENT: /\/\/[^\n]*/

%ignore /[ \t\f\r]+/
%ignore COMMENT
"""


@lru_cache(maxsize=1)
def expression_parser() -> Lark:
    return Lark(GRAMMAR, parser="lalr", maybe_placeholders=False)
