"""Evaluation of parsed grep filters against tests."""

from collections.abc import Iterable

from specgrep.grep.models import ParsedGrep, TagGroup, TitleTerm


def title_matches(terms: list[TitleTerm] | None, title: str | None) -> bool:
    """Check a full test title against title alternatives.

    Positive alternatives are OR-ed; every inverted alternative must be
    absent from the title regardless of which positive one matched.
    """
    if not terms or title is None:
        return True

    if any(term.invert and term.title in title for term in terms):
        return False

    positives = [term for term in terms if not term.invert]
    if not positives:
        return True
    return any(term.title in title for term in positives)


def tags_match(
    groups: list[TagGroup], tags: set[str], grep_untagged: bool = False
) -> bool:
    """Check test tags against OR-ed tag groups."""
    if grep_untagged and not tags:
        return True
    if not groups:
        # With only --grep-untagged set, tagged tests are filtered out
        return not grep_untagged
    return any(group.is_satisfied_by(tags) for group in groups)


def required_tags_requested(parsed: ParsedGrep, required_tags: set[str]) -> bool:
    """Check every required tag is asked for by the filter."""
    if not required_tags:
        return True
    return required_tags <= parsed.requested_tags


def should_test_run(
    parsed: ParsedGrep,
    title: str | None = None,
    tags: Iterable[str] | None = None,
    invert: bool = False,
    required_tags: Iterable[str] | None = None,
) -> bool:
    """Decide whether a test passes the filter.

    Args:
        parsed: Parsed filter from ``parse_grep``
        title: Full test title (suite titles and test name joined by spaces);
            the title step is skipped when None
        tags: Effective tags of the test
        invert: Flip the final decision
        required_tags: Tags the test only runs with when explicitly requested

    Returns:
        True if the test should run

    Example:
        >>> from specgrep.grep.parser import parse_grep
        >>> should_test_run(parse_grep(None, "@smoke"), tags={"@smoke"})
        True
        >>> should_test_run(parse_grep(None, "@smoke"), tags={"@smoke"},
        ...                 required_tags={"@nightly"})
        False
    """
    tag_set = set(tags or ())
    required_set = set(required_tags or ())

    result = (
        title_matches(parsed.title, title)
        and tags_match(parsed.tags, tag_set, parsed.grep_untagged)
        and required_tags_requested(parsed, required_set)
    )
    return result != invert
