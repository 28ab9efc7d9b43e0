"""Spec file selection."""

from specgrep.selection.config_adapter import (
    CurrentConfigAdapter,
    HostConfigAdapter,
    LegacyConfigAdapter,
    adapter_for,
)
from specgrep.selection.discovery import list_candidate_specs, resolve_file_patterns
from specgrep.selection.extractors import SpecExtractor, YamlSpecExtractor
from specgrep.selection.models import SelectionResult, TestTagInfo
from specgrep.selection.orchestrator import select_specs

__all__ = [
    "CurrentConfigAdapter",
    "HostConfigAdapter",
    "LegacyConfigAdapter",
    "SelectionResult",
    "SpecExtractor",
    "TestTagInfo",
    "YamlSpecExtractor",
    "adapter_for",
    "list_candidate_specs",
    "resolve_file_patterns",
    "select_specs",
]
