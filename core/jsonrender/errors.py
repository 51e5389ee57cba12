"""Document-level errors raised by the dashboard engine.

Per-node problems never raise; they are collected as `ValidationIssue` values
and the offending node is skipped. The exceptions below are reserved for
failures that make a whole document untrustworthy.
"""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for document-level dashboard failures."""


class InvalidDocument(DashboardError):
    """Raised when a payload is not a dashboard document at all."""


class SchemaVersionMismatch(DashboardError):
    """Raised when a document declares a schema version other than 1."""

    def __init__(self, version: object) -> None:
        super().__init__(f'Invalid dashboard: "version" must be 1, got {version!r}.')
        self.version = version


class StreamDecodeFailure(DashboardError):
    """Raised when a finished stream never reconstructs into a valid dashboard."""


class SourceIOError(DashboardError):
    """Raised when the underlying chunk source fails while streaming."""
