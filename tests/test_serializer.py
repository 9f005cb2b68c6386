"""Tests for the form tree serializer."""

import pytest

from urlform_core.model import FormDict, FormList, FormText
from urlform_core.parser import parse
from urlform_core.serializer import serialize


def test_flat():
    assert serialize(FormDict({"a": FormText("1"), "b": FormText("x y")})) == "a=1&b=x+y"


def test_escapes_reserved_characters():
    assert serialize(FormDict({"q": FormText("a&b=c")})) == "q=a%26b%3Dc"


def test_nested_mapping():
    tree = FormDict({"user": FormDict({"name": FormText("Vapor")})})
    assert serialize(tree) == "user[name]=Vapor"


def test_sequence():
    tree = FormDict({"n": FormList((FormText("1"), FormText("2")))})
    assert serialize(tree) == "n[]=1&n[]=2"


def test_empty_value():
    assert serialize(FormDict({"age": FormText("")})) == "age="


def test_empty_tree():
    assert serialize(FormDict()) == ""


def test_reparse():
    tree = FormDict({
        "user": FormDict({
            "name": FormText("Jürgen"),
            "roles": FormList((FormText("admin"), FormText("ops"))),
        }),
    })
    assert parse(serialize(tree)) == tree


def test_nested_key_with_reserved_characters():
    tree = FormDict({"user": FormDict({"a&b=c": FormText("1")})})
    assert serialize(tree) == "user[a%26b%3Dc]=1"
    assert parse(serialize(tree)) == tree


@pytest.mark.parametrize(
    "tree",
    [
        FormDict({"a[b": FormText("1")}),
        FormDict({"a]": FormText("1")}),
        FormDict({"": FormText("1")}),
        FormDict({"user": FormDict({"": FormText("1")})}),
        FormDict({"user": FormDict({"x[y]": FormText("1")})}),
    ],
)
def test_keys_without_bracket_form_rejected(tree):
    with pytest.raises(ValueError):
        serialize(tree)


def test_reparse_list_of_records():
    tree = FormDict({
        "k": FormList((
            FormDict({"n": FormText("x"), "t": FormList((FormText("1"),))}),
            FormDict({"n": FormText("y"), "t": FormList((FormText("2"), FormText("3")))}),
        )),
    })
    assert parse(serialize(tree)) == tree


def test_reparse_merges_records_without_shared_leading_key():
    tree = FormDict({
        "k": FormList((
            FormDict({"a": FormText("1")}),
            FormDict({"b": FormText("2")}),
        )),
    })
    assert parse(serialize(tree)) == FormDict({
        "k": FormList((FormDict({"a": FormText("1"), "b": FormText("2")}),)),
    })


def test_reparse_merges_records_led_by_a_sequence():
    tree = FormDict({
        "k": FormList((
            FormDict({"t": FormList((FormText("1"),))}),
            FormDict({"t": FormList((FormText("2"),))}),
        )),
    })
    assert parse(serialize(tree)) == FormDict({
        "k": FormList((FormDict({"t": FormList((FormText("1"), FormText("2")))}),)),
    })
