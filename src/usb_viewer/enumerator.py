"""
USB device enumeration.

Correlates the devices attached to USB controllers with the plug-and-play
catalog and builds the records shown in the device table.
"""

from __future__ import annotations
import logging
import threading
import time
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from typing import Callable, Optional, TypeVar

from .device_id import parse_device_id
from .errors import QueryError, QueryTimeoutError
from .listers import ControllerDeviceLister, PnpCatalogLister
from .models import AppConfig, DeviceRecord, EnumerationResult, RawPnpEntry
from .wmi_backend import QueryBackend, WMIBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_in_daemon_thread(name: str, func: Callable[[], T]) -> Future[T]:
    """Run ``func`` on a daemon thread, reporting its outcome through a Future.

    A query that never returns leaves only a daemon thread behind, which
    does not hold up interpreter exit.
    """
    future: Future[T] = Future()

    def run() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            result = func()
        except BaseException as e:
            future.set_exception(e)
        else:
            future.set_result(result)

    threading.Thread(target=run, name=f"wmi-query-{name}", daemon=True).start()
    return future


def correlate(controller_ids: set[str], catalog: list[RawPnpEntry]) -> list[DeviceRecord]:
    """Build records for catalog entries attached to a USB controller.

    An entry is kept when its instance ID is in ``controller_ids`` and it
    has a caption. Entries without an instance ID are never members.
    Catalog order is preserved.
    """
    devices: list[DeviceRecord] = []

    for entry in catalog:
        if entry.instance_id is None or entry.instance_id not in controller_ids:
            continue
        if entry.caption is None:
            continue

        ids = parse_device_id(entry.device_id)
        devices.append(DeviceRecord(
            device_name=entry.caption,
            manufacturer_name=entry.manufacturer,
            description=entry.description,
            vendor_id=ids.vendor_id,
            product_id=ids.product_id,
        ))

    return devices


class USBEnumerator:
    """Enumerates USB devices through a QueryBackend."""

    def __init__(
        self,
        backend: Optional[QueryBackend] = None,
        timeout: Optional[float] = 30.0,
        retries: int = 0,
        parallel: bool = True,
    ):
        self.backend = backend or WMIBackend()
        self.timeout = timeout
        self.retries = retries
        self.parallel = parallel

    @classmethod
    def from_config(cls, config: AppConfig, backend: Optional[QueryBackend] = None) -> USBEnumerator:
        """Create an enumerator from the application configuration."""
        return cls(
            backend=backend or WMIBackend(namespace=config.wmi_namespace),
            timeout=config.query_timeout,
            retries=config.query_retries,
            parallel=config.parallel_queries,
        )

    def _with_retries(self, name: str, func: Callable[[], T]) -> Callable[[], T]:
        """Wrap a query so subsystem failures are retried up to self.retries times."""
        def run() -> T:
            attempt = 0
            while True:
                try:
                    return func()
                except QueryError as e:
                    if attempt >= self.retries:
                        raise
                    attempt += 1
                    logger.warning(f"{name} query failed ({e}), retrying ({attempt}/{self.retries})")
        return run

    def _deadline(self) -> Optional[float]:
        if self.timeout is None:
            return None
        return time.monotonic() + self.timeout

    def _result(self, name: str, future: Future[T], deadline: Optional[float]) -> T:
        """Wait for a query until ``deadline`` (a time.monotonic() value)."""
        remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
        try:
            return future.result(timeout=remaining)
        except FutureTimeoutError as e:
            future.cancel()
            raise QueryTimeoutError(f"{name} query timed out after {self.timeout}s") from e

    def enumerate(self) -> list[DeviceRecord]:
        """Return the USB devices currently attached to the host.

        Raises QueryError if either query fails; no partial result is
        returned in that case.
        """
        list_controller_ids = self._with_retries(
            "USB controller", ControllerDeviceLister(self.backend).list
        )
        list_catalog = self._with_retries(
            "PnP catalog", PnpCatalogLister(self.backend).list
        )

        # Queries always run on worker threads so each can be timed out.
        # Concurrent queries share one deadline, both started together
        if self.parallel:
            deadline = self._deadline()
            controller_future = run_in_daemon_thread("controller", list_controller_ids)
            catalog_future = run_in_daemon_thread("catalog", list_catalog)
            controller_ids = self._result("USB controller", controller_future, deadline)
            catalog = self._result("PnP catalog", catalog_future, deadline)
        else:
            controller_ids = self._result(
                "USB controller", run_in_daemon_thread("controller", list_controller_ids), self._deadline()
            )
            catalog = self._result(
                "PnP catalog", run_in_daemon_thread("catalog", list_catalog), self._deadline()
            )

        devices = correlate(controller_ids, catalog)
        logger.info(
            f"Found {len(devices)} USB devices "
            f"({len(controller_ids)} controller entries, {len(catalog)} PnP entities)"
        )
        return devices

    def snapshot(self) -> EnumerationResult:
        """Enumerate, reporting a failed query as an error-flagged empty result."""
        try:
            devices = self.enumerate()
        except QueryError as e:
            logger.warning(f"USB enumeration failed: {e}")
            return EnumerationResult(devices=[], error=str(e), timestamp=time.time())
        return EnumerationResult(devices=devices, timestamp=time.time())


def enumerate_usb_devices(
    backend: Optional[QueryBackend] = None,
    config: Optional[AppConfig] = None,
) -> list[DeviceRecord]:
    """Convenience function enumerating USB devices with default settings."""
    return USBEnumerator.from_config(config or AppConfig(), backend=backend).enumerate()
