"""Per-test decisions made while a spec file runs.

File selection only decides which spec files start. Inside a file every test
is checked again: filtered tests are reported as pending (or omitted
entirely), and matched tests can be repeated ("burned") to hunt flakiness.
"""

import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from specgrep.core.settings import GrepSettings
from specgrep.grep.matcher import should_test_run
from specgrep.grep.parser import parse_grep
from specgrep.selection.extractors import YamlSpecExtractor
from specgrep.selection.models import ExtractedTest

logger = logging.getLogger(__name__)


class TestStatus(str, Enum):
    """What the runner does with a test."""

    RUN = "run"
    PENDING = "pending"


class PlannedTest(BaseModel):
    """A test as the runner will see it."""

    title: str = Field(..., description="Title shown by the runner")
    source_title: str = Field(..., description="Full title in the spec file")
    status: TestStatus = Field(..., description="Run or report as pending")
    repeat: int | None = Field(None, description="Burn iteration, 1-based")


def plan_tests(tests: list[ExtractedTest], settings: GrepSettings) -> list[PlannedTest]:
    """Decide how each test of a spec file runs.

    Args:
        tests: Tests of one spec file in source order
        settings: Grep options

    Returns:
        Planned tests in run order
    """
    parsed = parse_grep(
        settings.grep,
        settings.grep_tags,
        settings.grep_prefix_at,
        grep_untagged=settings.grep_untagged,
    )
    burn = settings.grep_burn or 1

    planned: list[PlannedTest] = []
    for test in tests:
        matched = should_test_run(
            parsed,
            test.title,
            test.tags.effective_tags,
            required_tags=test.tags.required_tags,
        )

        if not matched:
            if settings.grep_omit_filtered:
                logger.debug("omitting test %s", test.title)
            else:
                planned.append(
                    PlannedTest(
                        title=test.title,
                        source_title=test.title,
                        status=TestStatus.PENDING,
                    )
                )
            continue

        if burn > 1:
            for k in range(1, burn + 1):
                planned.append(
                    PlannedTest(
                        title=f"{test.title}: burning {k} of {burn}",
                        source_title=test.title,
                        status=TestStatus.RUN,
                        repeat=k,
                    )
                )
        else:
            planned.append(
                PlannedTest(
                    title=test.title, source_title=test.title, status=TestStatus.RUN
                )
            )

    return planned


def plan_suite(
    spec_file: str | Path,
    settings: GrepSettings,
    extractor: YamlSpecExtractor | None = None,
) -> list[PlannedTest]:
    """Plan the tests of a YAML spec file.

    Raises:
        ExtractionError: If the spec file cannot be read
    """
    extractor = extractor or YamlSpecExtractor()
    return plan_tests(extractor.load_tests(spec_file), settings)
