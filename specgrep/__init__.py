"""spec-grep: select spec files and tests by title and tag expressions."""

__version__ = "1.0.0"

from specgrep.plugin import grep_plugin  # noqa: E402

__all__ = ["__version__", "grep_plugin"]
