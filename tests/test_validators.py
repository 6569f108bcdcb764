"""Tests for route parameter validation."""

import pytest

from comic_client.exceptions import ValidationError
from comic_client.utils.validators import (
    quote_segment,
    validate_chapter_number,
    validate_slug,
    validate_username,
)


@pytest.mark.parametrize("username, valid", [
    ("ink", True),
    ("night.owl_99", True),
    ("", False),
    ("two words", False),
    ("../root", False),
])
def test_validate_username(username, valid):
    assert validate_username(username) is valid


@pytest.mark.parametrize("slug, valid", [
    ("night-shift", True),
    ("night_shift_2", True),
    ("night.shift", False),
    ("a/b", False),
])
def test_validate_slug(slug, valid):
    assert validate_slug(slug) is valid


@pytest.mark.parametrize("number, valid", [
    (1, True),
    ("12", True),
    (0, False),
    ("-1", False),
    ("one", False),
    (True, False),
])
def test_validate_chapter_number(number, valid):
    assert validate_chapter_number(number) is valid


def test_quote_segment():
    assert quote_segment("a b/c") == "a%20b%2Fc"
    assert quote_segment(7) == "7"

    with pytest.raises(ValidationError):
        quote_segment("")
