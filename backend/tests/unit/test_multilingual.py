"""Tests for the bilingual text value object."""

import pytest
from pydantic import ValidationError

from evenlyo.domain.multilingual import MultilingualText


def test_plain_string_fills_every_language():
    text = MultilingualText.of("  Broken speaker  ")
    assert text.en == "Broken speaker"
    assert text.nl == "Broken speaker"


def test_partial_object_falls_back_to_english():
    text = MultilingualText.of({"en": "Late delivery"})
    assert text.to_dict() == {"en": "Late delivery", "nl": "Late delivery"}


def test_dutch_only_object_is_used_for_english():
    text = MultilingualText.of({"nl": "Te laat"})
    assert text.en == "Te laat"


def test_full_object_kept_as_is():
    text = MultilingualText.of({"en": "Hello", "nl": "Hallo"})
    assert text.get("nl") == "Hallo"
    assert str(text) == "Hello"


@pytest.mark.parametrize("value", ["", "   ", {}, {"en": "  "}])
def test_empty_text_rejected(value):
    with pytest.raises(ValidationError):
        MultilingualText.of(value)


def test_unknown_language_rejected():
    with pytest.raises(ValidationError):
        MultilingualText.of({"en": "Hi", "de": "Hallo"})


def test_optional_treats_blank_as_missing():
    assert MultilingualText.optional(None) is None
    assert MultilingualText.optional("  ") is None
    assert MultilingualText.optional("x") == MultilingualText.pair("x", "x")


def test_shortest_length():
    assert MultilingualText.pair("long english text", "kort").shortest_length() == 4
