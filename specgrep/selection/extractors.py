"""Extraction of test titles and tags from spec files.

The orchestrator only depends on the ``SpecExtractor`` protocol. The bundled
``YamlSpecExtractor`` reads spec files written as nested YAML suites:

    describe: Login page
    tags: "@auth"
    tests:
      - it: logs in
        tags: [ "@smoke" ]
      - describe: errors
        requiredTags: "@nightly"
        tests:
          - it: shows a message for a wrong password

Tags and required tags are inherited from enclosing suites. A required tag
also counts as an effective tag so that requesting it selects the test.
"""

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import MarkedYAMLError, YAMLError

from specgrep.core.exceptions import ExtractionError
from specgrep.selection.models import ExtractedTest, TestTagInfo


@runtime_checkable
class SpecExtractor(Protocol):
    """Reads test data from a spec file.

    Both methods raise ExtractionError when the file cannot be read or parsed.
    """

    def get_test_names(self, path: str) -> list[str]:
        """Return full test titles in source order."""
        ...

    def find_effective_test_tags(self, path: str) -> dict[str, TestTagInfo]:
        """Return tag information keyed by full test title."""
        ...


def _as_tag_list(v: Any) -> list[str]:
    if v is None:
        return []
    if isinstance(v, str):
        return [tag.strip() for tag in v.split(",") if tag.strip()]
    if isinstance(v, list):
        return [str(tag).strip() for tag in v if str(tag).strip()]
    raise ValueError("tags must be a string or a list of strings")


class SpecTestNode(BaseModel):
    """A single test entry."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    it: str = Field(..., description="Test name")
    tags: list[str] = Field(default_factory=list)
    required_tags: list[str] = Field(default_factory=list, alias="requiredTags")

    @field_validator("tags", "required_tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> list[str]:
        return _as_tag_list(v)


class SpecSuiteNode(BaseModel):
    """A suite grouping tests and nested suites."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    describe: str = Field(..., description="Suite title")
    tags: list[str] = Field(default_factory=list)
    required_tags: list[str] = Field(default_factory=list, alias="requiredTags")
    tests: list["SpecTestNode | SpecSuiteNode"] = Field(default_factory=list)

    @field_validator("tags", "required_tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> list[str]:
        return _as_tag_list(v)


SpecSuiteNode.model_rebuild()


class YamlSpecExtractor:
    """Extract tests from YAML spec files."""

    def __init__(self) -> None:
        self.yaml = YAML(typ="safe")

    def load_tests(self, path: str | Path) -> list[ExtractedTest]:
        """Load every test of a spec file in source order.

        Raises:
            ExtractionError: If the file cannot be read or has an invalid shape
        """
        path = Path(path)
        return self._tests_from_data(self._parse_file(path), str(path))

    def load_string(self, content: str) -> list[ExtractedTest]:
        """Load tests from YAML text."""
        try:
            data = self.yaml.load(content)
        except MarkedYAMLError as e:
            line = e.problem_mark.line + 1 if e.problem_mark else None
            raise ExtractionError(f"YAML parsing error: {e.problem}", line=line) from e
        except YAMLError as e:
            raise ExtractionError(f"YAML parsing error: {e}") from e
        return self._tests_from_data(data, None)

    def _tests_from_data(self, data: Any, file_path: str | None) -> list[ExtractedTest]:
        if data is None:
            return []
        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            raise ExtractionError(
                "Spec file must hold a suite or a list of suites and tests",
                file_path=file_path,
            )

        tests: list[ExtractedTest] = []
        for i, item in enumerate(data):
            node = self._build_node(item, f"[{i}]", file_path)
            self._collect(node, [], set(), set(), tests)
        return tests

    def get_test_names(self, path: str) -> list[str]:
        return [test.title for test in self.load_tests(path)]

    def find_effective_test_tags(self, path: str) -> dict[str, TestTagInfo]:
        result: dict[str, TestTagInfo] = {}
        for test in self.load_tests(path):
            previous = result.get(test.title)
            if previous is None:
                result[test.title] = test.tags
            else:
                # Tests sharing a title merge their tags
                result[test.title] = TestTagInfo(
                    effective_tags=previous.effective_tags | test.tags.effective_tags,
                    required_tags=previous.required_tags | test.tags.required_tags,
                )
        return result

    def _parse_file(self, path: Path) -> Any:
        try:
            with path.open("r", encoding="utf-8") as f:
                return self.yaml.load(f)
        except MarkedYAMLError as e:
            line = e.problem_mark.line + 1 if e.problem_mark else None
            raise ExtractionError(
                f"YAML parsing error: {e.problem}", file_path=str(path), line=line
            ) from e
        except YAMLError as e:
            raise ExtractionError(
                f"YAML parsing error: {e}", file_path=str(path)
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise ExtractionError(
                f"Cannot read spec file: {e}", file_path=str(path)
            ) from e

    def _build_node(
        self, item: Any, location: str, file_path: str | None
    ) -> SpecTestNode | SpecSuiteNode:
        if not isinstance(item, dict):
            raise ExtractionError(
                f"{location}: expected a mapping, got {type(item).__name__}",
                file_path=file_path,
            )
        model = SpecSuiteNode if "describe" in item else SpecTestNode
        try:
            return model.model_validate(item)
        except PydanticValidationError as e:
            errors = []
            for error in e.errors():
                loc = ".".join(str(x) for x in error["loc"])
                errors.append(f"{location}.{loc}: {error['msg']}")
            raise ExtractionError(
                "Invalid spec structure:\n  " + "\n  ".join(errors),
                file_path=file_path,
            ) from e

    def _collect(
        self,
        node: SpecTestNode | SpecSuiteNode,
        titles: list[str],
        inherited_tags: set[str],
        inherited_required: set[str],
        out: list[ExtractedTest],
    ) -> None:
        required = inherited_required | set(node.required_tags)
        tags = inherited_tags | set(node.tags) | required

        if isinstance(node, SpecTestNode):
            out.append(
                ExtractedTest(
                    title=" ".join([*titles, node.it]),
                    tags=TestTagInfo(
                        effective_tags=frozenset(tags),
                        required_tags=frozenset(required),
                    ),
                )
            )
            return

        for child in node.tests:
            self._collect(child, [*titles, node.describe], tags, required, out)
