"""Tests for search relevance scoring."""
from datetime import UTC, datetime, timedelta

from models.bookmark import Bookmark
from services.ranking import (
    query_terms,
    rank_bookmarks,
    recency_bonus,
    relevance_score,
)

NOW = datetime(2026, 3, 1, tzinfo=UTC)
OLD = NOW - timedelta(days=365)


def _bookmark(
    title: str = "",
    url: str = "https://example.com/",
    summary: str = "",
    tags: list[str] | None = None,
    position: int = 1,
    created_at: datetime = OLD,
) -> Bookmark:
    return Bookmark(
        url=url,
        title=title,
        summary=summary,
        favicon="",
        tags=tags or [],
        position=position,
        created_at=created_at,
    )


class TestQueryTerms:
    """Tests for query_terms."""

    def test__query_terms__whole_query_by_default(self) -> None:
        """Without fuzzy mode the whole query is one term."""
        assert query_terms("  Go Tutorial ") == ["go tutorial"]

    def test__query_terms__fuzzy_splits_and_dedupes(self) -> None:
        """Fuzzy mode splits on whitespace and drops repeats."""
        assert query_terms("go  Tutorial go", fuzzy=True) == ["go", "tutorial"]

    def test__query_terms__empty(self) -> None:
        """Blank queries produce no terms."""
        assert query_terms(None) == []
        assert query_terms("   ", fuzzy=True) == []


class TestRecencyBonus:
    """Tests for recency_bonus."""

    def test__recency_bonus__new_bookmark(self) -> None:
        """A bookmark created now gets the full bonus."""
        assert recency_bonus(NOW, NOW) == 5.0

    def test__recency_bonus__decays_linearly(self) -> None:
        """25 days old is half the bonus."""
        assert recency_bonus(NOW - timedelta(days=25), NOW) == 2.5

    def test__recency_bonus__floored_at_zero(self) -> None:
        """Bookmarks older than 50 days get nothing."""
        assert recency_bonus(NOW - timedelta(days=50), NOW) == 0.0
        assert recency_bonus(NOW - timedelta(days=400), NOW) == 0.0

    def test__recency_bonus__naive_created_at(self) -> None:
        """Naive timestamps (as read back from SQLite) are treated as UTC."""
        naive = (NOW - timedelta(days=10)).replace(tzinfo=None)
        assert recency_bonus(naive, NOW) == 4.0


class TestRelevanceScore:
    """Tests for relevance_score weights."""

    def test__relevance_score__title_match(self) -> None:
        """A title match is worth 10."""
        assert relevance_score(_bookmark(title="Go Tutorial"), ["tutorial"], [], NOW) == 10

    def test__relevance_score__url_match(self) -> None:
        """A url match is worth 5."""
        bookmark = _bookmark(url="https://tutorial.dev/")
        assert relevance_score(bookmark, ["tutorial"], [], NOW) == 5

    def test__relevance_score__summary_match(self) -> None:
        """A summary match is worth 3."""
        bookmark = _bookmark(summary="A short tutorial.")
        assert relevance_score(bookmark, ["tutorial"], [], NOW) == 3

    def test__relevance_score__tag_matches(self) -> None:
        """Each tag containing the term is worth 7."""
        bookmark = _bookmark(tags=["tutorial", "tutorials", "go"])
        assert relevance_score(bookmark, ["tutorial"], [], NOW) == 14

    def test__relevance_score__filter_tags(self) -> None:
        """Each filter tag carried by the bookmark is worth 7."""
        bookmark = _bookmark(tags=["go", "web"])
        assert relevance_score(bookmark, [], ["go", "web", "rust"], NOW) == 14

    def test__relevance_score__fields_add_up(self) -> None:
        """All matching fields and the recency bonus are summed."""
        bookmark = _bookmark(
            title="Go tutorial",
            url="https://example.com/tutorial",
            summary="tutorial for gophers",
            tags=["go"],
            created_at=NOW,
        )
        score = relevance_score(bookmark, ["tutorial"], ["go"], NOW)
        assert score == 10 + 5 + 3 + 7 + 5.0

    def test__relevance_score__case_insensitive(self) -> None:
        """Fields are compared lower-cased."""
        assert relevance_score(_bookmark(title="PYTHON"), ["python"], [], NOW) == 10


class TestRankBookmarks:
    """Tests for rank_bookmarks ordering."""

    def test__rank_bookmarks__descending_score(self) -> None:
        """Higher scores come first."""
        summary_only = _bookmark(summary="about tutorial", position=1)
        title_hit = _bookmark(title="tutorial", position=2)
        nothing = _bookmark(title="other", position=3)

        ranked = rank_bookmarks([summary_only, title_hit, nothing], "tutorial", [], NOW)

        assert [b for b, _ in ranked] == [title_hit, summary_only, nothing]
        assert [s for _, s in ranked] == [10, 3, 0]

    def test__rank_bookmarks__ties_by_position(self) -> None:
        """Equal scores keep the manual order."""
        second = _bookmark(title="tutorial", position=2)
        first = _bookmark(title="tutorial", position=1)

        ranked = rank_bookmarks([second, first], "tutorial", [], NOW)

        assert [b for b, _ in ranked] == [first, second]

    def test__rank_bookmarks__fuzzy_counts_each_term(self) -> None:
        """In fuzzy mode every matching term adds to the score."""
        bookmark = _bookmark(title="async python")
        ranked = rank_bookmarks([bookmark], "python async", [], NOW, fuzzy=True)
        assert ranked[0][1] == 20

    def test__rank_bookmarks__recent_wins_tie(self) -> None:
        """The recency bonus separates otherwise equal matches."""
        old = _bookmark(title="tutorial", position=1, created_at=OLD)
        new = _bookmark(title="tutorial", position=2, created_at=NOW)

        ranked = rank_bookmarks([old, new], "tutorial", [], NOW)

        assert ranked[0][0] is new
