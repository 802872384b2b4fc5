"""
Pydantic models for USB devices and enumeration results.

Defines the data structures passed between the host queries, the
enumeration engine and the table shown to the user.
"""

from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# Column headers of the device table, in display order
TABLE_COLUMNS = ["Name", "Manufacturer", "Description", "VID", "PID"]


class DeviceRecord(BaseModel):
    """A USB-attached device as shown in the device table."""

    model_config = ConfigDict(frozen=True)

    # Caption of the Win32_PnPEntity (short description of the object)
    device_name: Optional[str] = Field(default=None, description="Friendly device name")
    manufacturer_name: Optional[str] = Field(default=None, description="Manufacturer of the device")
    description: Optional[str] = Field(default=None, description="Device description")

    # Parsed out of the DeviceID, e.g. 'USB\\VID_046D&PID_C52B\\5&2A1F'
    vendor_id: Optional[str] = Field(default=None, description="Vendor ID e.g. '046D'")
    product_id: Optional[str] = Field(default=None, description="Product ID e.g. 'C52B'")

    def to_row(self) -> tuple[Optional[str], ...]:
        """Project onto the table columns."""
        return (
            self.device_name,
            self.manufacturer_name,
            self.description,
            self.vendor_id,
            self.product_id,
        )


class RawPnpEntry(BaseModel):
    """One record of the plug-and-play catalog, before correlation."""

    model_config = ConfigDict(frozen=True)

    instance_id: Optional[str] = Field(default=None, description="Normalized PNPDeviceID")
    caption: Optional[str] = None
    manufacturer: Optional[str] = None
    description: Optional[str] = None
    device_id: Optional[str] = Field(default=None, description="Normalized DeviceID")


class ParsedIds(BaseModel):
    """Vendor and product IDs parsed from a device identifier."""

    model_config = ConfigDict(frozen=True)

    vendor_id: Optional[str] = None
    product_id: Optional[str] = None


class EnumerationResult(BaseModel):
    """Outcome of one enumeration, as handed to the presentation layer."""

    devices: list[DeviceRecord] = Field(default_factory=list)
    error: Optional[str] = Field(default=None, description="Failure reason if the query failed")
    timestamp: float = Field(default=0.0)

    @property
    def ok(self) -> bool:
        return self.error is None

    def rows(self) -> list[tuple[Optional[str], ...]]:
        return [device.to_row() for device in self.devices]

    def to_table(self) -> dict:
        """Serialize for the frontend as columns plus rows."""
        return {
            "columns": list(TABLE_COLUMNS),
            "rows": [list(row) for row in self.rows()],
            "error": self.error,
            "timestamp": self.timestamp,
        }


class AppConfig(BaseModel):
    """Application configuration."""

    port: int = Field(default=8080)
    host: str = Field(default="127.0.0.1")
    auto_open_browser: bool = Field(default=True)

    # Host query settings
    query_timeout: float = Field(default=30.0, gt=0, description="Seconds allowed per WMI query")
    query_retries: int = Field(default=0, ge=0, description="Extra attempts after a failed query")
    parallel_queries: bool = Field(default=True, description="Run both WMI queries concurrently")
    wmi_namespace: str = Field(default="root\\cimv2")
