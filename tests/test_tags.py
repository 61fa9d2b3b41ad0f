"""
test_tags.py - Testes do parser de tags de campos

Proposito:
    Validar leitura, mescla e reescrita de tags no formato key:"value".
"""

from __future__ import annotations

import pytest

from gorpc.ast.definition import FieldTag
from gorpc.ast.results import MalformedTag
from gorpc.semantic.tags import (
    json_tag_name,
    json_tag_omit_empty,
    merge_tags,
    parse_tags,
    split_tags,
    tag_string,
)


def test_parse_tags_with_options():
    tags = parse_tags('json:"name,omitempty" db:"person_name"')
    assert tags == {
        "json": FieldTag(value="name", options=["omitempty"]),
        "db": FieldTag(value="person_name", options=[]),
    }
    assert json_tag_name(tags) == "name"
    assert json_tag_omit_empty(tags)


def test_parse_empty_tag():
    assert parse_tags("") == {}
    assert json_tag_name({}) == ""
    assert not json_tag_omit_empty({})


def test_omitempty_requires_json_tag():
    assert not json_tag_omit_empty(parse_tags('yaml:"name,omitempty"'))


def test_escaped_quotes_in_value():
    tags = parse_tags(r'validate:"regexp=^\"a\"$"')
    assert tags["validate"].value == 'regexp=^"a"$'


def test_repeated_key_last_wins():
    tags = parse_tags('json:"first" json:"second"')
    assert tags["json"].value == "second"
    assert [key for key, _ in split_tags('json:"first" json:"second"')] == ["json", "json"]


@pytest.mark.parametrize(
    "tag",
    [
        "json",
        "json:name",
        'json:"name',
        ':"name"',
        'json :"name"',
    ],
)
def test_malformed_tags(tag: str):
    with pytest.raises(MalformedTag) as exc:
        parse_tags(tag)
    assert exc.value.tag == tag


def test_merge_tags_replaces_in_place():
    merged = merge_tags('json:"name" db:"name"', 'json:"other,omitempty"')
    assert tag_string(merged) == 'json:"other,omitempty" db:"name"'
