"""Unit tests for the grep expression parser."""

from specgrep.grep.models import TagGroup, TagTerm, TitleTerm
from specgrep.grep.parser import parse_grep, parse_tags_grep, parse_title_grep
from specgrep.grep.tags import get_mentioned_tags


class TestParseTitleGrep:
    """Test title filter parsing."""

    def test_empty(self) -> None:
        assert parse_title_grep(None) is None
        assert parse_title_grep("") is None
        assert parse_title_grep(" , ") is None

    def test_single_title(self) -> None:
        assert parse_title_grep("logs in") == [TitleTerm(title="logs in")]

    def test_alternatives(self) -> None:
        assert parse_title_grep("login, checkout") == [
            TitleTerm(title="login"),
            TitleTerm(title="checkout"),
        ]

    def test_inverted_alternative(self) -> None:
        assert parse_title_grep("login,-slow") == [
            TitleTerm(title="login"),
            TitleTerm(title="slow", invert=True),
        ]

    def test_bare_dash_is_literal(self) -> None:
        assert parse_title_grep("-") == [TitleTerm(title="-")]


class TestParseTagsGrep:
    """Test tag expression parsing."""

    def test_empty_matches_all(self) -> None:
        assert parse_tags_grep(None) == []
        assert parse_tags_grep("") == []

    def test_single_tag(self) -> None:
        groups = parse_tags_grep("@smoke")
        assert groups == [TagGroup(terms=[TagTerm(tag="@smoke")])]

    def test_or_groups(self) -> None:
        groups = parse_tags_grep("@smoke,@fast")
        assert [str(g) for g in groups] == ["@smoke", "@fast"]

    def test_and_within_group(self) -> None:
        groups = parse_tags_grep("@smoke+@fast")
        assert len(groups) == 1
        assert groups[0].terms == [TagTerm(tag="@smoke"), TagTerm(tag="@fast")]

    def test_negated_literal(self) -> None:
        groups = parse_tags_grep("@smoke+-@slow")
        assert groups[0].terms == [
            TagTerm(tag="@smoke"),
            TagTerm(tag="@slow", invert=True),
        ]

    def test_global_exclusion_added_to_every_group(self) -> None:
        groups = parse_tags_grep("@smoke,@fast,--@slow")
        assert [str(g) for g in groups] == ["@smoke+-@slow", "@fast+-@slow"]

    def test_global_exclusion_alone(self) -> None:
        groups = parse_tags_grep("--@slow")
        assert groups == [TagGroup(terms=[TagTerm(tag="@slow", invert=True)])]

    def test_global_exclusion_inside_and_group(self) -> None:
        groups = parse_tags_grep("--@slow+@x")
        assert groups == [
            TagGroup(terms=[TagTerm(tag="@x"), TagTerm(tag="@slow", invert=True)])
        ]

    def test_global_exclusion_inside_and_group_applies_everywhere(self) -> None:
        groups = parse_tags_grep("@a+--@slow,@b")
        assert [str(g) for g in groups] == ["@a+-@slow", "@b+-@slow"]

    def test_global_exclusion_agrees_with_mentioned_tags(self) -> None:
        expression = "--@slow+@x"
        groups = parse_tags_grep(expression)
        parsed = {term.tag for group in groups for term in group.terms}
        assert sorted(parsed) == get_mentioned_tags(expression) == ["@slow", "@x"]

    def test_whitespace_trimmed(self) -> None:
        groups = parse_tags_grep(" @smoke + @fast , @slow ")
        assert [str(g) for g in groups] == ["@smoke+@fast", "@slow"]

    def test_force_prefix(self) -> None:
        groups = parse_tags_grep("smoke+-slow", force_prefix=True)
        assert str(groups[0]) == "@smoke+-@slow"

    def test_dangling_plus_is_tolerated(self) -> None:
        """Empty fragments are dropped instead of raising."""
        assert [str(g) for g in parse_tags_grep("@smoke+")] == ["@smoke"]
        assert [str(g) for g in parse_tags_grep("+,@fast,")] == ["@fast"]

    def test_bare_dash_is_literal_tag(self) -> None:
        groups = parse_tags_grep("-")
        assert groups == [TagGroup(terms=[TagTerm(tag="-")])]


class TestParseGrep:
    """Test the combined parser."""

    def test_empty_filter(self) -> None:
        parsed = parse_grep()
        assert parsed.title is None
        assert parsed.tags == []
        assert parsed.is_empty

    def test_title_and_tags(self) -> None:
        parsed = parse_grep("login", "@smoke", grep_untagged=True)
        assert parsed.title == [TitleTerm(title="login")]
        assert [str(g) for g in parsed.tags] == ["@smoke"]
        assert parsed.grep_untagged is True
        assert not parsed.is_empty

    def test_requested_tags_exclude_negated(self) -> None:
        parsed = parse_grep(None, "@a+-@b,@c,--@d")
        assert parsed.requested_tags == {"@a", "@c"}
