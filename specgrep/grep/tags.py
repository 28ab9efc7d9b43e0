"""Tag literal helpers."""

import re

# Characters that separate literals in a tag expression
TAG_SEPARATORS = re.compile(r"[,+]")


def normalize_tag(tag: str, force_prefix: bool = False) -> str:
    """Canonicalize a tag literal.

    Surrounding whitespace is removed and, when ``force_prefix`` is set,
    a missing ``@`` is prepended. Applying it twice changes nothing.

    Example:
        >>> normalize_tag(" smoke ", force_prefix=True)
        '@smoke'
        >>> normalize_tag("@smoke", force_prefix=True)
        '@smoke'
    """
    tag = tag.strip()
    if force_prefix and not tag.startswith("@"):
        return f"@{tag}"
    return tag


def strip_negation(literal: str) -> str:
    """Remove a leading ``--`` or ``-`` negation marker."""
    if literal.startswith("--") and len(literal) > 2:
        return literal[2:]
    if literal.startswith("-") and len(literal) > 1:
        return literal[1:]
    return literal


def get_mentioned_tags(expression: str | None, force_prefix: bool = False) -> list[str]:
    """List every tag literal referenced in a tag expression.

    The boolean structure is ignored; negated literals are reported without
    their ``-`` marker. Used for diagnostics only.

    Args:
        expression: Tag expression such as ``"@smoke+-@slow,@fast"``
        force_prefix: Force every tag to start with ``@``

    Returns:
        Sorted list of distinct tags
    """
    if not expression:
        return []

    tags = set()
    for part in TAG_SEPARATORS.split(expression):
        part = part.strip()
        if not part:
            continue
        tags.add(normalize_tag(strip_negation(part), force_prefix))
    return sorted(tags)
