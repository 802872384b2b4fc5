"""
Exceptions raised while querying the host management interface.

QueryError is fatal to an enumeration call. FieldReadError only ever
affects a single record and is recovered by the listers.
"""

from __future__ import annotations
from typing import Optional


class USBViewerError(Exception):
    """Base class for USB Viewer errors."""


class QueryError(USBViewerError):
    """The management subsystem is unreachable or a query could not run."""

    def __init__(self, message: str, wmi_class: Optional[str] = None):
        super().__init__(message)
        self.wmi_class = wmi_class


class QueryTimeoutError(QueryError):
    """A query did not complete within the configured timeout."""


class FieldReadError(USBViewerError):
    """A record is missing a property or the property could not be read."""

    def __init__(self, property_name: str, message: Optional[str] = None):
        super().__init__(message or f"Cannot read property {property_name!r}")
        self.property_name = property_name
