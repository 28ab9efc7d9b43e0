"""Data models for parsed grep filters."""

from pydantic import BaseModel, ConfigDict, Field


class TitleTerm(BaseModel):
    """One title alternative of a grep filter."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Substring searched in the full test title")
    invert: bool = Field(False, description="Title must NOT contain the substring")


class TagTerm(BaseModel):
    """One literal inside a tag group."""

    model_config = ConfigDict(frozen=True)

    tag: str = Field(..., description="Normalized tag literal")
    invert: bool = Field(False, description="Tag must be absent")


class TagGroup(BaseModel):
    """Tag terms joined by AND."""

    model_config = ConfigDict(frozen=True)

    terms: list[TagTerm] = Field(default_factory=list)

    def is_satisfied_by(self, tags: set[str]) -> bool:
        """Check every positive term is present and every inverted one absent."""
        return all((term.tag in tags) != term.invert for term in self.terms)

    @property
    def positive_tags(self) -> list[str]:
        """Tags this group requires to be present."""
        return [term.tag for term in self.terms if not term.invert]

    def __str__(self) -> str:
        return "+".join(f"-{t.tag}" if t.invert else t.tag for t in self.terms)


class ParsedGrep(BaseModel):
    """A parsed title and/or tag filter.

    ``title`` alternatives are OR-ed with inverted ones AND-ed in as
    exclusions. ``tags`` groups are OR-ed. An empty filter matches everything.
    """

    model_config = ConfigDict(frozen=True)

    title: list[TitleTerm] | None = Field(
        None, description="Title alternatives, None when no title filter is set"
    )
    tags: list[TagGroup] = Field(default_factory=list, description="OR-ed tag groups")
    grep_untagged: bool = Field(
        False, description="Tests without tags satisfy the tag filter"
    )

    @property
    def is_empty(self) -> bool:
        """Check if neither a title nor a tag filter is set."""
        return not self.title and not self.tags

    @property
    def requested_tags(self) -> set[str]:
        """Tags the filter asks for positively in any group."""
        return {tag for group in self.tags for tag in group.positive_tags}
