"""Tests for the Reader layer."""

import pytest

from foam_lookup.errors import DictionaryReadError, ParseError
from foam_lookup.model import DictEntry, PrimitiveEntry
from foam_lookup.reader import read_dictionary, read_file
from foam_lookup.tokenizer import TokenType


def _first(dictionary, key):
    return dictionary.lookup_entry(key).tokens[0].value


# ---------------------------------------------------------------------------
# Entries and sub-dictionaries
# ---------------------------------------------------------------------------

def test_primitive_entries():
    d = read_dictionary("a 1; b hello; c 2.5;")
    assert d.keys() == ["a", "b", "c"]
    assert _first(d, "a") == 1
    assert _first(d, "b") == "hello"
    assert _first(d, "c") == 2.5

def test_multi_token_entry():
    d = read_dictionary("internalField uniform (0 0 1);")
    entry = d.lookup_entry("internalField")
    assert isinstance(entry, PrimitiveEntry)
    assert [t.value for t in entry.tokens] == ["uniform", "(", 0, 0, 1, ")"]

def test_semicolon_inside_list_is_not_a_terminator():
    d = read_dictionary("l (a; b); next 1;")
    assert [t.value for t in d.lookup_entry("l").tokens] == ["(", "a", ";", "b", ")"]
    assert d.found("next")

def test_nested_dictionaries():
    d = read_dictionary("a { b { c 5; } }")
    a = d.sub_dict("a")
    b = a.sub_dict("b")
    assert _first(b, "c") == 5
    assert a.name == "a"
    assert b.name == "a.b"
    assert b.parent is a

def test_named_root_scopes_sub_dictionary_names():
    d = read_dictionary("a { b { c 5; } }", name="system/controlDict")
    assert d.name == "system/controlDict"
    assert d.sub_dict("a").sub_dict("b").name == "system/controlDict.a.b"

def test_stray_semicolons_ignored():
    d = read_dictionary("a { x 1; }; ; b 2;")
    assert d.keys() == ["a", "b"]

def test_empty_sub_dictionary():
    d = read_dictionary("a {}")
    assert isinstance(d.lookup_entry("a"), DictEntry)
    assert len(d.sub_dict("a")) == 0

def test_empty_input():
    assert len(read_dictionary("")) == 0

def test_numeric_keyword():
    d = read_dictionary("0 zero;")
    assert _first(d, "0") == "zero"

def test_enclosing_braces_accepted():
    d = read_dictionary("{\n    c 5;\n}\n")
    assert _first(d, "c") == 5

def test_foamfile_header_is_an_ordinary_entry():
    text = (
        "FoamFile\n{\n    version 2.0;\n    format ascii;\n"
        "    class dictionary;\n    object controlDict;\n}\n"
        "// * * * * * //\n"
        "application simpleFoam;\n"
    )
    d = read_dictionary(text)
    assert _first(d.sub_dict("FoamFile"), "object") == "controlDict"
    assert _first(d, "application") == "simpleFoam"


# ---------------------------------------------------------------------------
# Duplicates and patterns
# ---------------------------------------------------------------------------

def test_duplicate_keyword_last_wins():
    d = read_dictionary("a 1; b 2; a 3;")
    assert d.keys() == ["a", "b"]
    assert _first(d, "a") == 3

def test_duplicate_dictionaries_merge():
    d = read_dictionary("s { x 1; y 1; } s { y 2; z 3; }")
    s = d.sub_dict("s")
    assert s.keys() == ["x", "y", "z"]
    assert _first(s, "y") == 2

def test_quoted_keyword_is_pattern():
    d = read_dictionary('"(U|k|epsilon)" { solver smoothSolver; }')
    entry = d.lookup_entry("epsilon")
    assert isinstance(entry, DictEntry)
    assert entry.is_pattern

def test_invalid_pattern():
    with pytest.raises(ParseError, match="invalid keyword pattern"):
        read_dictionary('"(U" 1;')


# ---------------------------------------------------------------------------
# Variables
# ---------------------------------------------------------------------------

def test_variable_expands_to_tokens():
    d = read_dictionary("x 5; y $x;")
    assert _first(d, "y") == 5

def test_variable_inside_longer_stream():
    d = read_dictionary("v (1 2); w uniform $v;")
    assert [t.value for t in d.lookup_entry("w").tokens] == ["uniform", "(", 1, 2, ")"]

def test_variable_resolved_in_parent_scope():
    d = read_dictionary("x 5; s { y $x; }")
    assert _first(d.sub_dict("s"), "y") == 5

def test_variable_copies_dictionary():
    d = read_dictionary("base { a 1; } derived $base;")
    derived = d.sub_dict("derived")
    assert derived is not None
    assert derived.name == "derived"
    assert derived == d.sub_dict("base")
    assert derived is not d.sub_dict("base")

def test_bare_variable_merges_dictionary():
    d = read_dictionary("base { a 1; b 1; } s { $base; b 2; }")
    s = d.sub_dict("s")
    assert s.keys() == ["a", "b"]
    assert _first(s, "b") == 2

def test_undefined_variable():
    with pytest.raises(ParseError, match=r"undefined variable \$nope"):
        read_dictionary("y $nope;")

def test_dictionary_variable_inside_stream():
    with pytest.raises(ParseError, match="is a dictionary"):
        read_dictionary("base { a 1; } y 1 $base;")

def test_merging_primitive_variable():
    with pytest.raises(ParseError, match="not a dictionary"):
        read_dictionary("x 1; s { $x; }")

def test_dotted_variable_reaches_into_sub_dictionary():
    d = read_dictionary("s { a 3; } y $s.a;")
    assert _first(d, "y") == 3

def test_dotted_variable_prefers_literal_keyword():
    d = read_dictionary("s { a 3; } s.a 7; y $s.a;")
    assert _first(d, "y") == 7

def test_root_scoped_variable():
    d = read_dictionary("a 0; s { a 3; } t { a 1; u { y $:s.a; z $:a; } }")
    u = d.sub_dict("t").sub_dict("u")
    assert _first(u, "y") == 3
    assert _first(u, "z") == 0

def test_parent_scoped_variable():
    d = read_dictionary("x 1; s { x 2; t { x 3; y $..x; z $.x; w $...x; } }")
    t = d.sub_dict("s").sub_dict("t")
    assert _first(t, "y") == 2
    assert _first(t, "z") == 3
    assert _first(t, "w") == 1

def test_scoped_variable_copies_dictionary():
    d = read_dictionary("s { inner { a 1; } } t { c $:s.inner; }")
    assert d.sub_dict("t").sub_dict("c") == d.sub_dict("s").sub_dict("inner")

@pytest.mark.parametrize("text", [
    "s { a 1; } y $s.b;",
    "s { a 1; } y $:s.b.c;",
    "x 1; y $..x;",
    "s { y $:nope; }",
])
def test_undefined_scoped_variable(text):
    with pytest.raises(ParseError, match="undefined variable"):
        read_dictionary(text)


# ---------------------------------------------------------------------------
# Directives
# ---------------------------------------------------------------------------

def test_include_relative_to_file(tmp_path):
    (tmp_path / "inc").write_text("x 1; s { a 1; }\n", encoding="utf-8")
    main = tmp_path / "main"
    main.write_text('#include "inc"\ny 2;\ns { b 2; }\n', encoding="utf-8")
    d = read_file(main)
    assert d.keys() == ["x", "s", "y"]
    assert d.sub_dict("s").keys() == ["a", "b"]
    assert d.sub_dict("s").name == f"{main}.s"

def test_include_inside_sub_dictionary(tmp_path):
    (tmp_path / "inc").write_text("x 1;", encoding="utf-8")
    d = read_dictionary('s { #include "inc" }', base_dir=tmp_path)
    assert _first(d.sub_dict("s"), "x") == 1

def test_include_missing_file(tmp_path):
    with pytest.raises(DictionaryReadError):
        read_dictionary('#include "nothere"', base_dir=tmp_path)

def test_include_if_present_skips_missing(tmp_path):
    d = read_dictionary('#includeIfPresent "nothere"\na 1;', base_dir=tmp_path)
    assert d.keys() == ["a"]

def test_recursive_include_is_bounded(tmp_path):
    (tmp_path / "loop").write_text('#include "loop"', encoding="utf-8")
    with pytest.raises(ParseError, match="nested deeper"):
        read_file(tmp_path / "loop")

def test_remove_single_and_list():
    d = read_dictionary("a 1; b 2; c 3; d 4; #remove a #remove (b c)")
    assert d.keys() == ["d"]

def test_remove_pattern():
    d = read_dictionary('ax 1; ay 2; b 3; #remove "a.*"')
    assert d.keys() == ["b"]

def test_input_mode_ignored():
    d = read_dictionary("#inputMode merge\na 1;")
    assert d.keys() == ["a"]

def test_unsupported_directive():
    with pytest.raises(ParseError, match="unsupported directive #calc"):
        read_dictionary('#calc "1+1";')


# ---------------------------------------------------------------------------
# Malformed input
# ---------------------------------------------------------------------------

def test_missing_closing_brace():
    with pytest.raises(ParseError) as exc_info:
        read_dictionary("a 1;\nb {\n c 2;\n", name="cfg")
    assert exc_info.value.line == 3
    assert str(exc_info.value).startswith("cfg:3: missing '}'")

def test_missing_semicolon():
    with pytest.raises(ParseError, match="missing ';' after entry 'a'"):
        read_dictionary("a 1")

def test_unexpected_closing_brace():
    with pytest.raises(ParseError, match="unexpected '}'"):
        read_dictionary("a 1; }")

def test_entry_without_value():
    with pytest.raises(ParseError, match="has no value"):
        read_dictionary("a ;")

def test_unbalanced_list():
    with pytest.raises(ParseError, match="unbalanced"):
        read_dictionary("a (1 2];")

def test_keyword_expected():
    with pytest.raises(ParseError, match="keyword expected"):
        read_dictionary("(a) 1;")

def test_trailing_input_after_enclosing_braces():
    with pytest.raises(ParseError, match="after closing"):
        read_dictionary("{ a 1; } b 2;")


# ---------------------------------------------------------------------------
# read_file
# ---------------------------------------------------------------------------

def test_read_file_names_root(tmp_path):
    path = tmp_path / "dict"
    path.write_text("a 1;", encoding="utf-8")
    d = read_file(path)
    assert d.name == str(path)

def test_read_file_directory(tmp_path):
    with pytest.raises(DictionaryReadError) as exc_info:
        read_file(tmp_path)
    assert exc_info.value.code == 16

def test_read_file_token_types(tmp_path):
    path = tmp_path / "dict"
    path.write_text('s "quoted value";', encoding="utf-8")
    assert read_file(path).lookup_entry("s").tokens[0].type == TokenType.STRING
