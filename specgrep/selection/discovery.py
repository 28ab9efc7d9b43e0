"""Filesystem discovery of candidate and extra spec files."""

import glob
import logging
import os
from collections.abc import Iterable
from functools import lru_cache
from typing import Any

from pathspec import PathSpec

logger = logging.getLogger(__name__)

# Defaults of the legacy (integration folder) host schema
DEFAULT_INTEGRATION_FOLDER = "cypress/integration"
DEFAULT_TEST_FILES = "**/*.*"
DEFAULT_IGNORE_TEST_FILES = "*.hot-update.js"


def _split_top_level(text: str) -> list[str]:
    """Split on commas that are not inside braces."""
    parts, depth, start = [], 0, 0
    for i, c in enumerate(text):
        if c == "{":
            depth += 1
        elif c == "}" and depth:
            depth -= 1
        elif c == "," and not depth:
            parts.append(text[start:i])
            start = i + 1
    parts.append(text[start:])
    return parts


def _split_patterns(patterns: str | Iterable[str] | None) -> list[str]:
    """Normalize a comma-separated string or a list into glob patterns."""
    if not patterns:
        return []
    if isinstance(patterns, str):
        patterns = _split_top_level(patterns)
    return [p.strip() for p in patterns if p and p.strip()]


def expand_braces(pattern: str) -> list[str]:
    """Expand the first ``{a,b}`` group of a glob, recursively.

    Example:
        >>> expand_braces("e2e/*.{js,ts}")
        ['e2e/*.js', 'e2e/*.ts']
    """
    start = pattern.find("{")
    if start == -1:
        return [pattern]
    depth = 0
    for end in range(start, len(pattern)):
        if pattern[end] == "{":
            depth += 1
        elif pattern[end] == "}":
            depth -= 1
            if depth == 0:
                break
    else:
        return [pattern]

    head, body, tail = pattern[:start], pattern[start + 1 : end], pattern[end + 1 :]
    expanded = []
    for option in _split_top_level(body):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


@lru_cache(maxsize=256)
def _compile_pattern(pattern: str) -> PathSpec | None:
    """Compile one glob, with its ``{a,b}`` groups expanded, to a PathSpec.

    An invalid pattern is logged and compiles to None so it matches nothing.
    """
    lines = expand_braces(pattern.replace(os.sep, "/"))
    try:
        return PathSpec.from_lines("gitwildmatch", lines)
    except ValueError as e:
        logger.warning("ignoring invalid spec pattern %r: %s", pattern, e)
        return None


def matches_spec_pattern(path: str, pattern: str | Iterable[str]) -> bool:
    """Check a spec path against one or more glob patterns.

    Patterns follow gitignore rules: a pattern without a ``/`` matches at any
    depth, ``**/`` matches zero or more directories.
    """
    normalized = path.replace(os.sep, "/")
    for p in _split_patterns(pattern):
        spec = _compile_pattern(p)
        if spec is not None and spec.match_file(normalized):
            return True
    return False


def _glob_under(root: str | None, pattern: str) -> list[str]:
    matches = sorted(
        {
            match
            for expanded in expand_braces(pattern)
            for match in glob.glob(expanded, root_dir=root, recursive=True)
        }
    )
    files = [m for m in matches if os.path.isfile(os.path.join(root or "", m))]
    if root:
        return [os.path.join(root, m) for m in files]
    return files


def _unique(paths: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(paths))


def resolve_file_patterns(
    patterns: str | Iterable[str], root: str | None = None
) -> list[str]:
    """Resolve glob patterns to existing files.

    Args:
        patterns: Comma-separated globs or a list of globs
        root: Directory the globs are relative to (current directory if None)

    Returns:
        Matching file paths, sorted per pattern, without duplicates
    """
    resolved = _unique(
        path
        for pattern in _split_patterns(patterns)
        for path in _glob_under(root, pattern)
    )
    logger.debug("resolved %s to %d file(s)", patterns, len(resolved))
    return resolved


def list_candidate_specs(config: dict[str, Any]) -> list[str]:
    """Enumerate the spec files a host configuration would run.

    The current schema uses ``specPattern`` (relative to ``projectRoot``) and
    ``excludeSpecPattern``; the legacy schema uses ``integrationFolder``,
    ``testFiles`` and ``ignoreTestFiles``.
    """
    if "specPattern" in config:
        root = config.get("projectRoot")
        specs = resolve_file_patterns(config["specPattern"] or [], root=root)
        exclude = _split_patterns(config.get("excludeSpecPattern"))
        if exclude:
            specs = [
                spec
                for spec in specs
                if not matches_spec_pattern(
                    os.path.relpath(spec, root) if root else spec, exclude
                )
            ]
        return specs

    folder = config.get("integrationFolder") or DEFAULT_INTEGRATION_FOLDER
    specs = resolve_file_patterns(
        config.get("testFiles") or DEFAULT_TEST_FILES, root=folder
    )
    ignore = config.get("ignoreTestFiles", DEFAULT_IGNORE_TEST_FILES)
    ignore_patterns = _split_patterns(ignore)
    if ignore_patterns:
        specs = [
            spec
            for spec in specs
            if not matches_spec_pattern(os.path.relpath(spec, folder), ignore_patterns)
        ]
    return specs
