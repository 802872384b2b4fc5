"""
Listers for the two WMI classes the enumeration is built from.

Win32_USBControllerDevice associates USB controllers with the devices they
serve. Win32_PnPEntity holds the descriptive metadata for every
plug-and-play device. Records in both are often partially populated, so
a record that cannot be read is skipped rather than failing the listing.
"""

from __future__ import annotations
import logging
from typing import Any, Optional

from .errors import FieldReadError
from .models import RawPnpEntry
from .wmi_backend import QueryBackend, QueryRecord

logger = logging.getLogger(__name__)

USB_CONTROLLER_DEVICE_CLASS = "Win32_USBControllerDevice"
PNP_ENTITY_CLASS = "Win32_PnPEntity"


def normalize_device_path(value: Optional[str]) -> Optional[str]:
    """Collapse escaped backslashes, e.g. 'USB\\\\VID_1' -> 'USB\\VID_1'."""
    if value is None:
        return None
    return value.replace("\\\\", "\\")


def parse_dependent_reference(reference: Optional[str]) -> Optional[str]:
    """Extract the device instance ID from a Dependent reference.

    References look like
    ``\\\\HOST\\root\\cimv2:Win32_PnPEntity.DeviceID="USB\\\\VID_1234&PID_5678\\\\6&ABC"``.
    Returns None if the reference has no '=' or names nothing.
    """
    if not reference or "=" not in reference:
        return None
    _, _, value = reference.partition("=")
    device_id = normalize_device_path(value.strip().strip('"')).strip()
    return device_id or None


def _read_text(record: QueryRecord, name: str) -> Optional[str]:
    """Read an optional string property, raising FieldReadError on other types."""
    value: Any = record.get(name)
    if value is not None and not isinstance(value, str):
        raise FieldReadError(name, f"Property {name!r} is {type(value).__name__}, not str")
    return value


class ControllerDeviceLister:
    """Lists the instance IDs of devices attached to any USB controller."""

    def __init__(self, backend: QueryBackend):
        self.backend = backend

    def _read_dependent(self, record: QueryRecord) -> Optional[str]:
        try:
            reference = _read_text(record, "Dependent")
        except FieldReadError as e:
            logger.debug(f"Skipping controller record: {e}")
            return None

        device_id = parse_dependent_reference(reference)
        if device_id is None:
            logger.debug(f"Skipping malformed Dependent reference: {reference!r}")
        return device_id

    def list(self) -> set[str]:
        """Return the set of attached device instance IDs."""
        with self.backend.query(USB_CONTROLLER_DEVICE_CLASS) as records:
            device_ids = {self._read_dependent(record) for record in records}
        device_ids.discard(None)

        logger.debug(f"{len(device_ids)} devices attached to USB controllers")
        return device_ids  # type: ignore


class PnpCatalogLister:
    """Lists the plug-and-play device catalog in query order."""

    def __init__(self, backend: QueryBackend):
        self.backend = backend

    def _read_entry(self, record: QueryRecord) -> Optional[RawPnpEntry]:
        try:
            return RawPnpEntry(
                instance_id=normalize_device_path(_read_text(record, "PNPDeviceID")),
                caption=_read_text(record, "Caption"),
                manufacturer=_read_text(record, "Manufacturer"),
                description=_read_text(record, "Description"),
                device_id=normalize_device_path(_read_text(record, "DeviceID")),
            )
        except FieldReadError as e:
            logger.debug(f"Skipping PnP record: {e}")
            return None

    def list(self) -> list[RawPnpEntry]:
        """Return every readable Win32_PnPEntity record."""
        entries: list[RawPnpEntry] = []
        skipped = 0

        with self.backend.query(PNP_ENTITY_CLASS) as records:
            for record in records:
                entry = self._read_entry(record)
                if entry is None:
                    skipped += 1
                    continue
                entries.append(entry)

        logger.debug(f"{len(entries)} PnP entities read, {skipped} skipped")
        return entries
