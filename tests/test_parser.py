"""Tests for the form text parser."""

import pytest

from urlform_core.errors import MalformedInputError, URLFormError
from urlform_core.model import FormDict, FormList, FormText
from urlform_core.parser import FormParser, parse, split_key, unescape


# ---------------------------------------------------------------------------
# unescape / split_key
# ---------------------------------------------------------------------------

def test_unescape_plus_is_space():
    assert unescape("hello+world") == "hello world"

def test_unescape_percent():
    assert unescape("a%26b%3Dc") == "a&b=c"

def test_unescape_utf8():
    assert unescape("caf%C3%A9") == "café"

@pytest.mark.parametrize("text", ["%", "%2", "a%ZZ", "100%"])
def test_unescape_bad_escape(text):
    with pytest.raises(MalformedInputError):
        unescape(text)

def test_unescape_invalid_utf8():
    with pytest.raises(MalformedInputError):
        unescape("%C3")

def test_split_key_plain():
    assert split_key("name") == ["name"]

def test_split_key_brackets():
    assert split_key("a[b][]") == ["a", "b", ""]

@pytest.mark.parametrize("key", ["", "[a]", "a]", "a[b", "a[b]c", "a[[b]]"])
def test_split_key_malformed(key):
    with pytest.raises(MalformedInputError):
        split_key(key)


# ---------------------------------------------------------------------------
# parse
# ---------------------------------------------------------------------------

def test_parse_simple():
    assert parse("name=Vapor&age=3") == FormDict({
        "name": FormText("Vapor"),
        "age": FormText("3"),
    })

def test_parse_empty_input():
    assert parse("") == FormDict()

def test_parse_skips_empty_segments():
    assert parse("&&a=1&") == FormDict({"a": FormText("1")})

def test_parse_value_keeps_later_equals():
    assert parse("a=b=c") == FormDict({"a": FormText("b=c")})

def test_parse_repeated_key_last_wins():
    assert parse("a=1&a=2") == FormDict({"a": FormText("2")})

def test_parse_nested_mapping():
    assert parse("user[name]=Vapor&user[age]=3") == FormDict({
        "user": FormDict({"name": FormText("Vapor"), "age": FormText("3")}),
    })

def test_parse_sequence_keeps_order():
    assert parse("n[]=3&n[]=1&n[]=2") == FormDict({
        "n": FormList((FormText("3"), FormText("1"), FormText("2"))),
    })

def test_parse_sequence_inside_mapping():
    tree = parse("user[tags][]=a&user[tags][]=b")
    assert tree.entries["user"] == FormDict({
        "tags": FormList((FormText("a"), FormText("b"))),
    })

def test_parse_sequence_of_mappings():
    tree = parse("items[][sku]=A&items[][sku]=B")
    assert tree.entries["items"] == FormList((
        FormDict({"sku": FormText("A")}),
        FormDict({"sku": FormText("B")}),
    ))

def test_parse_sequence_of_mappings_fills_last_element():
    tree = parse("items[][sku]=A&items[][qty]=1&items[][sku]=B&items[][qty]=2")
    assert tree.entries["items"] == FormList((
        FormDict({"sku": FormText("A"), "qty": FormText("1")}),
        FormDict({"sku": FormText("B"), "qty": FormText("2")}),
    ))

def test_parse_sequence_inside_sequence_element():
    tree = parse("items[][tags][]=a&items[][tags][]=b")
    assert tree.entries["items"] == FormList((
        FormDict({"tags": FormList((FormText("a"), FormText("b")))}),
    ))

def test_parse_sequence_of_sequences():
    tree = parse("m[][]=1&m[][]=2")
    assert tree.entries["m"] == FormList((
        FormList((FormText("1"),)),
        FormList((FormText("2"),)),
    ))

def test_parse_encoded_brackets():
    assert parse("a%5Bb%5D=1") == FormDict({"a": FormDict({"b": FormText("1")})})

def test_parse_later_shape_replaces_earlier():
    assert parse("a=1&a[b]=2") == FormDict({"a": FormDict({"b": FormText("2")})})

def test_parse_decodes_values():
    assert parse("q=hello+world%21").entries["q"] == FormText("hello world!")

def test_parse_bytes():
    assert parse(b"a=1") == FormDict({"a": FormText("1")})

def test_parse_bytes_not_utf8():
    with pytest.raises(MalformedInputError):
        parse(b"a=\xff")

def test_parse_malformed_escape():
    with pytest.raises(MalformedInputError) as exc_info:
        parse("name=%E")
    assert isinstance(exc_info.value, URLFormError)
    assert isinstance(exc_info.value, ValueError)

def test_parse_malformed_key():
    with pytest.raises(MalformedInputError):
        parse("a[b=1")


# ---------------------------------------------------------------------------
# Flags and empty values
# ---------------------------------------------------------------------------

class TestFlagsAndEmptyValues:
    def test_flag_is_true(self):
        assert parse("isAdmin").entries["isAdmin"] == FormText("true")

    def test_omit_flags(self):
        tree = FormParser(omit_flags=True).parse("name=Vapor&isAdmin&age=3")
        assert "isAdmin" not in tree
        assert len(tree) == 2

    def test_empty_value_kept(self):
        assert parse("name=Vapor&age=").entries["age"] == FormText("")

    def test_omit_empty_values(self):
        tree = FormParser(omit_empty_values=True).parse("name=Vapor&age=")
        assert tree == FormDict({"name": FormText("Vapor")})

    def test_omit_empty_values_keeps_flags(self):
        tree = parse("age=&isAdmin", omit_empty_values=True)
        assert tree == FormDict({"isAdmin": FormText("true")})

    def test_omit_flags_keeps_empty_values(self):
        tree = parse("age=&isAdmin", omit_flags=True)
        assert tree == FormDict({"age": FormText("")})
