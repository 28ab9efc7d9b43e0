"""Data models for spec selection."""

from collections.abc import Callable
from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from specgrep.grep.models import ParsedGrep

if TYPE_CHECKING:
    from specgrep.selection.extractors import SpecExtractor


class TestTagInfo(BaseModel):
    """Tags that apply to one test."""

    model_config = ConfigDict(frozen=True)

    effective_tags: frozenset[str] = Field(
        default_factory=frozenset,
        description="Tags declared on the test or inherited from its suites",
    )
    required_tags: frozenset[str] = Field(
        default_factory=frozenset,
        description="Tags that must be requested for the test to run",
    )


class ExtractedTest(BaseModel):
    """A test found in a spec file, in source order."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Suite titles and test name joined by spaces")
    tags: TestTagInfo = Field(default_factory=TestTagInfo)


@dataclass
class SpecFile:
    """A candidate spec file with lazily extracted test data.

    Accessing ``titles`` or ``test_tags`` may raise ExtractionError.
    """

    path: str
    extractor: "SpecExtractor"

    @cached_property
    def titles(self) -> list[str]:
        return self.extractor.get_test_names(self.path)

    @cached_property
    def test_tags(self) -> dict[str, TestTagInfo]:
        return self.extractor.find_effective_test_tags(self.path)


# =============================================================================
# Filter modes
# =============================================================================


@dataclass(frozen=True)
class TitleMode:
    """Keep files with at least one test whose title matches."""

    parsed: ParsedGrep
    grep: str


@dataclass(frozen=True)
class TagMode:
    """Keep files with at least one test whose tags match."""

    parsed: ParsedGrep
    grep_tags: str
    mentioned_tags: list[str]


@dataclass(frozen=True)
class UntaggedEliminationMode:
    """Drop files whose tests all require tags nobody asked for."""


FilterMode = TitleMode | TagMode | UntaggedEliminationMode

PatternResolver = Callable[[str | list[str]], list[str]]


@dataclass
class SelectionResult:
    """Outcome of spec selection.

    ``specs`` is ordered and free of duplicates. When ``run_all`` is set the
    filter eliminated everything and ``specs`` holds every candidate.
    """

    specs: list[str] = field(default_factory=list)
    extra_specs: list[str] = field(default_factory=list)
    run_all: bool = False
    found_tags: set[str] = field(default_factory=set)
    unknown_tags: list[str] = field(default_factory=list)
