# tests/test_sexp.py
"""S-expression layer: sexpdata reading with comments and form offsets."""

import pytest
import sexpdata

from mcsl.sexp import (
    SexpSyntaxError,
    SList,
    Symbol,
    dumps,
    is_symbol,
    is_symbol_text,
    loads_all,
    symbol_name,
)


class TestReader:

    def test_nested_forms(self):
        (chain,) = loads_all("(chain c (initial s0)) ; done")
        assert [symbol_name(x) for x in chain[:2]] == ["chain", "c"]
        assert [symbol_name(x) for x in chain[2]] == ["initial", "s0"]

    def test_symbols_are_sexpdata_symbols(self):
        (form,) = loads_all("(a)")
        assert isinstance(form[0], sexpdata.Symbol)
        assert is_symbol(form[0], "a")
        assert not is_symbol(form[0], "b")

    def test_atoms(self):
        (form,) = loads_all('(foo "bar" 42 -1.5 +3 1abc)')
        assert symbol_name(form[0]) == "foo"
        assert form[1] == "bar" and symbol_name(form[1]) is None
        assert form[2] == 42 and isinstance(form[2], int)
        assert form[3] == -1.5
        assert form[4] == 3
        assert symbol_name(form[5]) == "1abc"

    def test_t_and_nil_stay_symbols(self):
        (form,) = loads_all("(t nil)")
        assert [symbol_name(x) for x in form] == ["t", "nil"]

    def test_comments_and_whitespace(self):
        text = "; header\n(a ; inline (\n  b)\n; trailer )\n"
        (form,) = loads_all(text)
        assert [symbol_name(x) for x in form] == ["a", "b"]

    def test_parens_inside_strings(self):
        (form,) = loads_all('(a "x ( ; y" (b))')
        assert form[1] == "x ( ; y"
        assert form[2].offset == 13

    def test_empty(self):
        assert loads_all("") == []
        assert loads_all("  ; only a comment") == []
        assert loads_all("()") == [[]]

    def test_offsets(self):
        outer = loads_all("  (a (b))\n(c)")[0]
        assert isinstance(outer, SList)
        assert outer.offset == 2
        assert outer[1].offset == 5
        assert loads_all("  (a (b))\n(c)")[1].offset == 10

    @pytest.mark.parametrize("text,offset", [
        ("(a b", 0),
        ("a)", 1),
        ('(x "open', 3),
        ("(a) (b", 4),
    ])
    def test_malformed(self, text, offset):
        with pytest.raises(SexpSyntaxError) as info:
            loads_all(text)
        assert info.value.offset == offset


class TestWriter:

    def test_atoms(self):
        assert dumps(Symbol("x")) == "x"
        assert dumps("x y") == '"x y"'
        assert dumps(True) == "t"
        assert dumps(False) == "nil"
        assert dumps(None) == "nil"
        assert dumps(-3) == "-3"

    def test_forms(self):
        assert dumps([Symbol("state"), ("one", 2), "Spawn"]) == (
            '(state ("one" 2) "Spawn")')
        assert dumps([]) == "()"

    def test_quoting_round_trips(self):
        text = 'say "hi"\\'
        assert loads_all(dumps([text])) == [[text]]

    def test_unsupported(self):
        with pytest.raises(TypeError):
            dumps(object())

    @pytest.mark.parametrize("text,expected", [
        ("abc", True), ("two-words", True), ("12", False), ("-1.5", False),
        ("a b", False), ("", False), ("(x", False), ("a.b", False),
    ])
    def test_is_symbol_text(self, text, expected):
        assert is_symbol_text(text) is expected
