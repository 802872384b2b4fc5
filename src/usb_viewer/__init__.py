"""
USB Viewer - Currently attached USB devices for Windows.

Lists the USB devices attached to the host through WMI, with their name,
manufacturer, description and vendor/product IDs.
"""

__version__ = "0.1.0"
__all__ = ["run_server", "enumerate_usb_devices", "USBEnumerator", "DeviceRecord", "QueryError"]

from .enumerator import USBEnumerator, enumerate_usb_devices
from .errors import QueryError
from .main import run_server
from .models import DeviceRecord
