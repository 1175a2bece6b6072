"""Tests for the hiring-post content policy."""

import pytest

from hn_digest.core.filters import is_hiring_post


@pytest.mark.parametrize(
    "title",
    [
        "Acme Corp is hiring backend engineers",
        "Ask HN: Who is hiring? (October 2026)",
        "Ask HN: Who wants to be hired? (October 2026)",
        "Gadget (YC W24) Is Hiring a Founding Engineer",
        "Join our team at Initech",
    ],
)
def test_is_hiring_post_match(title):
    """Test hiring titles are detected case-insensitively."""
    assert is_hiring_post(title)


@pytest.mark.parametrize(
    "title",
    [
        "New AI model released",
        "Gardening tips",
        "Gadget (YC W24) launches an open-source database",
    ],
)
def test_is_hiring_post_no_match(title):
    """Test ordinary stories pass through."""
    assert not is_hiring_post(title)


def test_is_hiring_post_custom_keywords():
    """Test a custom keyword list replaces the default one."""
    assert is_hiring_post("Weekly Rust newsletter", keywords=("newsletter",))
    assert not is_hiring_post("We are hiring", keywords=("newsletter",))
