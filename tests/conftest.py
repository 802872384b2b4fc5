from contextlib import contextmanager

import pytest

from usb_viewer.errors import FieldReadError, QueryError


class FakeRecord:
    """In-memory stand-in for a WMI record."""

    def __init__(self, **properties):
        self.properties = properties

    def get(self, name):
        if name not in self.properties:
            raise FieldReadError(name)
        return self.properties[name]


class FakeBackend:
    """QueryBackend serving fixed records per WMI class."""

    def __init__(self, classes=None, failing=(), failures_before_success=None):
        self.classes = classes or {}
        self.failing = set(failing)
        self.failures_before_success = dict(failures_before_success or {})
        self.calls = []
        self.open_queries = 0

    @contextmanager
    def query(self, wmi_class):
        self.calls.append(wmi_class)
        if wmi_class in self.failing:
            raise QueryError(f"{wmi_class} unavailable", wmi_class)
        if self.failures_before_success.get(wmi_class, 0) > 0:
            self.failures_before_success[wmi_class] -= 1
            raise QueryError(f"{wmi_class} busy", wmi_class)

        self.open_queries += 1
        try:
            yield [FakeRecord(**props) for props in self.classes.get(wmi_class, [])]
        finally:
            self.open_queries -= 1


def dependent(device_id):
    """Build a Win32_USBControllerDevice Dependent reference as WMI reports it."""
    escaped = device_id.replace("\\", "\\\\")
    return f'\\\\HOST\\root\\cimv2:Win32_PnPEntity.DeviceID="{escaped}"'


def pnp(device_id, caption="Device", manufacturer="Acme", description="USB device", **extra):
    props = {
        "PNPDeviceID": device_id,
        "Caption": caption,
        "Manufacturer": manufacturer,
        "Description": description,
        "DeviceID": device_id,
    }
    props.update(extra)
    return props


@pytest.fixture
def make_backend():
    def factory(controller_ids=(), catalog=(), **kwargs):
        classes = {
            "Win32_USBControllerDevice": [{"Dependent": dependent(d)} for d in controller_ids],
            "Win32_PnPEntity": list(catalog),
        }
        return FakeBackend(classes, **kwargs)
    return factory
