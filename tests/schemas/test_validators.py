"""Tests for tag normalization."""
import pytest

from schemas.validators import (
    DEFAULT_MAX_TAG_LENGTH,
    DEFAULT_MAX_TAGS,
    TAG_PATTERN,
    normalize_preview,
    normalize_tag,
    normalize_tags,
)


class TestNormalizeTag:
    """Tests for normalize_tag."""

    def test__normalize_tag__trims_and_lowercases(self) -> None:
        """Whitespace is trimmed and case folded."""
        assert normalize_tag("  Machine-Learning ") == "machine-learning"

    def test__normalize_tag__collapses_inner_whitespace(self) -> None:
        """Runs of inner whitespace become one space."""
        assert normalize_tag("web   dev") == "web dev"

    def test__normalize_tag__allows_underscore(self) -> None:
        """Underscores are allowed."""
        assert normalize_tag("to_read") == "to_read"

    @pytest.mark.parametrize("tag", ["", "   ", "c++", "naïve", "a/b", "#tag"])
    def test__normalize_tag__rejects_invalid(self, tag: str) -> None:
        """Empty tags and disallowed characters are dropped."""
        assert normalize_tag(tag) is None

    def test__normalize_tag__too_long(self) -> None:
        """Tags over the length limit are dropped."""
        assert normalize_tag("a" * (DEFAULT_MAX_TAG_LENGTH + 1)) is None
        assert normalize_tag("a" * DEFAULT_MAX_TAG_LENGTH) == "a" * DEFAULT_MAX_TAG_LENGTH

    def test__normalize_tag__non_string(self) -> None:
        """Non-string entries are dropped."""
        assert normalize_tag(5) is None
        assert normalize_tag(None) is None


class TestNormalizeTags:
    """Tests for normalize_tags."""

    def test__normalize_tags__dedupes_preserving_order(self) -> None:
        """First occurrence wins after normalization."""
        assert normalize_tags(["Work", "work", " TODO "]) == ["work", "todo"]

    def test__normalize_tags__none_and_empty(self) -> None:
        """None and empty lists produce an empty list."""
        assert normalize_tags(None) == []
        assert normalize_tags([]) == []

    def test__normalize_tags__drops_invalid_entries(self) -> None:
        """Invalid entries are skipped, valid ones kept."""
        assert normalize_tags(["ok", "", "bad!", 3, "fine"]) == ["ok", "fine"]

    def test__normalize_tags__caps_count(self) -> None:
        """At most max_tags tags are kept."""
        tags = [f"tag{i}" for i in range(DEFAULT_MAX_TAGS + 5)]
        result = normalize_tags(tags)
        assert len(result) == DEFAULT_MAX_TAGS
        assert result == tags[:DEFAULT_MAX_TAGS]

    def test__normalize_tags__custom_caps(self) -> None:
        """Caps can be overridden."""
        assert normalize_tags(["abc", "abcdef", "xy"], max_tags=2, max_length=3) == ["abc", "xy"]

    @pytest.mark.parametrize("raw", [
        ["Work", "work", " TODO "],
        ["  a  b ", "A B", "c_d", "c-d", "E"],
        ["x" * 60, "ok", "ok ", "OK", "", "!!", "z"] * 5,
        [f"T{i}" for i in range(40)],
    ])
    def test__normalize_tags__output_invariants(self, raw: list[str]) -> None:
        """Output is unique, within caps, pattern-valid and idempotent."""
        result = normalize_tags(raw)

        assert len(result) == len(set(result))
        assert len(result) <= DEFAULT_MAX_TAGS
        for tag in result:
            assert 0 < len(tag) <= DEFAULT_MAX_TAG_LENGTH
            assert TAG_PATTERN.match(tag)
        assert normalize_tags(result) == result


def test__normalize_preview__collapses_whitespace() -> None:
    """Newlines and tabs are collapsed into single spaces."""
    assert normalize_preview(" a\n\tb  c ") == "a b c"
    assert normalize_preview(None) is None
