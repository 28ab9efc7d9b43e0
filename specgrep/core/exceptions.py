"""spec-grep exceptions."""


class SpecGrepError(Exception):
    """Base exception for all spec-grep errors."""


class InvocationError(SpecGrepError):
    """Plugin entry point called with the wrong number of arguments."""


class ConfigError(SpecGrepError):
    """Host configuration file could not be read."""


class ExtractionError(SpecGrepError):
    """A spec file could not be read or parsed for titles and tags."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        line: int | None = None,
    ):
        self.message = message
        self.file_path = file_path
        self.line = line

        location_parts = []
        if file_path:
            location_parts.append(f"File: {file_path}")
        if line is not None:
            location_parts.append(f"Line: {line}")

        if location_parts:
            full_message = f"{', '.join(location_parts)}: {message}"
        else:
            full_message = message

        super().__init__(full_message)
