# src/todoist_recent/errors.py

"""Error taxonomy shared by the core, the Todoist client and the webhook boundary."""

from __future__ import annotations


class RecencyError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(RecencyError):
    """Missing or invalid configuration (e.g. no API token). Fatal at start-up."""


class MalformedTimestamp(RecencyError):
    """An item timestamp could not be parsed. The item is skipped, the batch continues."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Malformed timestamp: {value!r}")
        self.value = value


class RemoteCallFailure(RecencyError):
    """Network or store error on a single remote operation. Never retried in-process."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DuplicateLabel(RemoteCallFailure):
    """The store refused to create a label because one with that name already exists."""

    def __init__(self, name: str, *, status_code: int | None = None) -> None:
        super().__init__(f"Label already exists: {name!r}", status_code=status_code)
        self.name = name


class UnverifiedPayload(RecencyError):
    """Inbound webhook body failed signature verification."""


class InvalidPayload(RecencyError):
    """Inbound webhook body is not JSON or does not have a recognised shape."""
