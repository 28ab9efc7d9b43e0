"""Parser for title and tag grep expressions.

Title filters are comma-separated substrings; a leading ``-`` turns a
substring into an exclusion:

    "login,checkout"        title contains "login" OR "checkout"
    "login,-slow"           title contains "login" AND NOT "slow"

Tag expressions are comma-separated OR groups of ``+``-joined literals:

    "@smoke,@fast"          tagged @smoke OR @fast
    "@smoke+@fast"          tagged @smoke AND @fast
    "@smoke+-@slow"         tagged @smoke AND NOT @slow
    "@smoke,--@slow"        (@smoke OR anything) AND NOT @slow in every group

Parsing never fails: empty fragments are dropped and anything else is taken
as a literal tag.
"""

from specgrep.grep.models import ParsedGrep, TagGroup, TagTerm, TitleTerm
from specgrep.grep.tags import normalize_tag


def parse_title_grep(expression: str | None) -> list[TitleTerm] | None:
    """Parse a comma-separated title filter.

    Returns:
        Title alternatives, or None when the expression holds none
    """
    if not expression:
        return None

    terms = []
    for part in expression.split(","):
        part = part.strip()
        if not part:
            continue
        if part.startswith("-") and len(part) > 1:
            terms.append(TitleTerm(title=part[1:], invert=True))
        else:
            terms.append(TitleTerm(title=part))

    return terms or None


def _parse_literal(literal: str, force_prefix: bool) -> TagTerm:
    if literal.startswith("-") and len(literal) > 1:
        return TagTerm(tag=normalize_tag(literal[1:], force_prefix), invert=True)
    return TagTerm(tag=normalize_tag(literal, force_prefix))


def parse_tags_grep(
    expression: str | None, force_prefix: bool = False
) -> list[TagGroup]:
    """Parse a tag expression into OR-ed groups.

    Args:
        expression: Tag expression, e.g. ``"@smoke+@fast,@regression"``
        force_prefix: Force every tag to start with ``@``

    Returns:
        Tag groups; an empty list matches every test
    """
    if not expression:
        return []

    groups: list[list[TagTerm]] = []
    # "--tag" excludes the tag from every group
    global_exclusions: list[TagTerm] = []

    for part in expression.split(","):
        part = part.strip()
        if not part:
            continue

        terms = []
        for literal in part.split("+"):
            literal = literal.strip()
            if not literal:
                continue
            if literal.startswith("--") and len(literal) > 2:
                global_exclusions.append(
                    TagTerm(tag=normalize_tag(literal[2:], force_prefix), invert=True)
                )
            else:
                terms.append(_parse_literal(literal, force_prefix))
        if terms:
            groups.append(terms)

    if global_exclusions:
        if groups:
            groups = [terms + global_exclusions for terms in groups]
        else:
            groups = [global_exclusions]

    return [TagGroup(terms=terms) for terms in groups]


def parse_grep(
    title: str | None = None,
    tags: str | None = None,
    force_prefix: bool = False,
    grep_untagged: bool = False,
) -> ParsedGrep:
    """Parse the combined title and tag filter.

    Example:
        >>> parsed = parse_grep(None, "@smoke+@fast,@regression")
        >>> [str(group) for group in parsed.tags]
        ['@smoke+@fast', '@regression']
    """
    return ParsedGrep(
        title=parse_title_grep(title),
        tags=parse_tags_grep(tags, force_prefix),
        grep_untagged=grep_untagged,
    )
