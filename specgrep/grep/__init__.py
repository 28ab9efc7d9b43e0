"""Title and tag grep expression language."""

from specgrep.grep.matcher import should_test_run
from specgrep.grep.models import ParsedGrep, TagGroup, TagTerm, TitleTerm
from specgrep.grep.parser import parse_grep
from specgrep.grep.tags import get_mentioned_tags, normalize_tag

__all__ = [
    "ParsedGrep",
    "TagGroup",
    "TagTerm",
    "TitleTerm",
    "get_mentioned_tags",
    "normalize_tag",
    "parse_grep",
    "should_test_run",
]
