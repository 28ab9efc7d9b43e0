"""Writes a spec selection into a host runner configuration.

Two configuration schemas exist. The legacy one lists spec files in
``testFiles`` relative to ``integrationFolder``; the current one takes the
paths as they are in ``specPattern``.
"""

import logging
import os
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class HostConfigAdapter(Protocol):
    """Capability interface over a host configuration schema."""

    def supports_spec_pattern(self) -> bool:
        """Return True if the schema selects files through ``specPattern``."""
        ...

    def apply(self, config: dict[str, Any], specs: list[str]) -> None:
        """Write the selected spec files into ``config`` in place."""
        ...


class LegacyConfigAdapter:
    """Schema with ``integrationFolder`` and ``testFiles``."""

    def supports_spec_pattern(self) -> bool:
        return False

    def apply(self, config: dict[str, Any], specs: list[str]) -> None:
        folder = config.get("integrationFolder") or os.curdir
        relative_names = [os.path.relpath(spec, folder) for spec in specs]
        logger.debug("setting selected %d specs (legacy schema)", len(specs))
        logger.debug(
            "specs in the integration folder %s %s",
            folder,
            ", ".join(relative_names),
        )
        config["testFiles"] = relative_names


class CurrentConfigAdapter:
    """Schema with ``specPattern``."""

    def supports_spec_pattern(self) -> bool:
        return True

    def apply(self, config: dict[str, Any], specs: list[str]) -> None:
        logger.debug("setting selected %d specs (spec pattern schema)", len(specs))
        config["specPattern"] = list(specs)


ADAPTERS: tuple[HostConfigAdapter, ...] = (
    CurrentConfigAdapter(),
    LegacyConfigAdapter(),
)


def adapter_for(config: dict[str, Any]) -> HostConfigAdapter:
    """Pick the adapter matching the schema of ``config``."""
    uses_spec_pattern = "specPattern" in config
    for adapter in ADAPTERS:
        if adapter.supports_spec_pattern() == uses_spec_pattern:
            return adapter
    raise LookupError("no host configuration adapter registered")
