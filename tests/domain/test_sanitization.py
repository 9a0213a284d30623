"""Tests for free-text sanitization."""

import pytest

from src.domain.services.sanitization import sanitize_input


def test_sanitize_trims_and_strips_angle_brackets() -> None:
    """Markup characters should be removed after trimming."""
    assert sanitize_input("  <b>Hello</b>  ") == "bHello/b"


def test_sanitize_removes_javascript_scheme_case_insensitively() -> None:
    """The javascript: scheme should disappear whatever its casing."""
    assert sanitize_input("JavaScript:alert(1)") == "alert(1)"


def test_sanitize_removes_inline_event_handlers() -> None:
    """on<word>= patterns should be dropped."""
    assert sanitize_input("img onerror=alert(1)") == "img alert(1)"
    assert sanitize_input("ONCLICK=run()") == "run()"


def test_sanitize_truncates_to_hard_limit() -> None:
    """Text longer than 1000 characters should be cut."""
    assert len(sanitize_input("a" * 1500)) == 1000


def test_sanitize_returns_empty_string_for_non_strings() -> None:
    """Non-string input should yield an empty string."""
    assert sanitize_input(None) == ""
    assert sanitize_input(42) == ""
    assert sanitize_input(["<b>"]) == ""


def test_sanitize_removes_patterns_reformed_by_a_removal() -> None:
    """A removal that re-forms a pattern should be caught on the next pass."""
    assert sanitize_input("javajavascript:script:x") == "x"
    assert sanitize_input("oonclick=nclick=") == ""


def test_sanitize_trims_whitespace_exposed_by_truncation() -> None:
    """Trailing whitespace left by truncation should be trimmed."""
    result = sanitize_input("a" * 999 + " b")

    assert result == "a" * 999


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "plain text",
        "< a",
        "  <<>>  ",
        "javajavascript:script:alert(1)",
        "oonclick=nclick=x",
        "a" * 999 + " <b>",
        "x" * 2000,
        "\t Lunch <script>onload=steal()</script> \n",
    ],
)
def test_sanitize_is_idempotent(raw: str) -> None:
    """Sanitizing twice should give the same result as sanitizing once."""
    once = sanitize_input(raw)

    assert sanitize_input(once) == once
