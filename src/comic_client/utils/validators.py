"""
Validation functions for Comic Client.

Route parameters end up inside URL paths: the page service checks them
before loading, and fetch steps quote every value they substitute.
"""

import re
from typing import Any
from urllib.parse import quote

from comic_client.exceptions import ValidationError

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")
SLUG_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


def validate_username(username: str) -> bool:
    """
    Validate that a username can be used as a path segment.

    Usernames may contain letters, digits, underscores, dots and dashes.
    """
    return bool(username) and bool(USERNAME_PATTERN.match(username))


def validate_slug(slug: str) -> bool:
    """Validate that a comic slug is made of letters, digits, underscores and dashes."""
    return bool(slug) and bool(SLUG_PATTERN.match(slug))


def validate_chapter_number(chapter_number: Any) -> bool:
    """Chapter numbers are positive integers (given as int or digit string)."""
    if isinstance(chapter_number, bool):
        return False
    if isinstance(chapter_number, int):
        return chapter_number > 0
    return isinstance(chapter_number, str) and chapter_number.isdigit() and int(chapter_number) > 0


def quote_segment(value: Any) -> str:
    """
    Quote a value for use as a single URL path segment.

    Raises:
        ValidationError: If the value is empty
    """
    text = str(value)
    if not text:
        raise ValidationError("Path segment cannot be empty")
    return quote(text, safe="")
