"""
Access to the Windows Management Instrumentation (WMI) service.

The enumeration code only needs to run a query against a named WMI class,
iterate the resulting records and read named properties from them. That
surface is described by QueryBackend; WMIBackend implements it on top of
the wmi package.
"""

from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import Any, ContextManager, Iterable, Iterator, Protocol

from .errors import FieldReadError, QueryError

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "root\\cimv2"


class QueryRecord(Protocol):
    """A single record returned by a query."""

    def get(self, name: str) -> Any:
        """Return the raw value of a property, raising FieldReadError if unreadable."""
        ...


class QueryBackend(Protocol):
    """Something that can run read-only queries against the host."""

    def query(self, wmi_class: str) -> ContextManager[Iterable[QueryRecord]]:
        """Query every instance of ``wmi_class``.

        The records are only valid inside the context; they are released
        when it exits, whether or not an error occurred.
        """
        ...


class WMIRecord:
    """QueryRecord wrapping a wmi._wmi_object."""

    def __init__(self, wmi_object: Any):
        self._object = wmi_object

    def get(self, name: str) -> Any:
        import pythoncom
        import wmi

        # wmi_property gives the raw value; attribute access would turn
        # reference properties such as Dependent into WMI objects
        try:
            return self._object.wmi_property(name).value
        except (wmi.x_wmi, pythoncom.com_error, AttributeError) as e:
            raise FieldReadError(name, f"Cannot read property {name!r}: {e}") from e


class WMIBackend:
    """QueryBackend talking to the local WMI service."""

    def __init__(self, namespace: str = DEFAULT_NAMESPACE, computer: str = ""):
        self.namespace = namespace
        self.computer = computer

    @contextmanager
    def query(self, wmi_class: str) -> Iterator[list[WMIRecord]]:
        try:
            import pythoncom
            import wmi
        except ImportError as e:
            raise QueryError(f"WMI is not available on this platform: {e}", wmi_class) from e

        # COM must be initialised on every thread that talks to WMI
        pythoncom.CoInitialize()
        try:
            try:
                connection = wmi.WMI(computer=self.computer, namespace=self.namespace)
                records = [WMIRecord(obj) for obj in connection.query(f"SELECT * FROM {wmi_class}")]
            except (wmi.x_wmi, pythoncom.com_error) as e:
                raise QueryError(f"WMI query for {wmi_class} failed: {e}", wmi_class) from e

            logger.debug(f"{wmi_class}: {len(records)} records")
            try:
                yield records
            finally:
                # Drop COM references before uninitialising
                records.clear()
                del connection
        finally:
            pythoncom.CoUninitialize()
