"""Tests for notewise.utils module."""

from notewise.utils import preview, truncate


class TestPreview:
    def test_flattens_newlines(self):
        assert preview("line one\nline two") == "line one line two"

    def test_limit(self):
        assert preview("x" * 500, limit=10) == "x" * 10

    def test_none(self):
        assert preview(None) == ""


class TestTruncate:
    def test_short_text_unchanged(self):
        assert truncate("short", 500) == "short"

    def test_cuts_to_limit(self):
        assert truncate("abcdef", 3) == "abc"

    def test_none(self):
        assert truncate(None, 5) == ""
