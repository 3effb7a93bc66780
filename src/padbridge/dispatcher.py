"""
Dispatcher: single owner of per-device controller state.

Each serviced device gets its own `CanonicalGamepad` and `MappingTable`;
nothing is shared between devices. Callers address devices by index and get
read-only views back, so only the dispatcher ever mutates a gamepad.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .gamepad import CanonicalGamepad, GamepadAxis, GamepadButton
from .mapping import MappingTable, RawEvent
from .x360 import X360Report

logger = logging.getLogger(__name__)


@dataclass
class _Device:
    name: str
    table: MappingTable
    gamepad: CanonicalGamepad


class DeviceView:
    """Read-only access to one device's canonical state."""

    def __init__(self, device: _Device, encoder: X360Report):
        self._device = device
        self._encoder = encoder

    @property
    def name(self) -> str:
        return self._device.name

    def button(self, button: GamepadButton) -> bool:
        return self._device.gamepad.get_button(button)

    def axis_value(self, axis: GamepadAxis) -> int:
        return self._device.gamepad.get_axis_ref(axis).value

    def snapshot(self) -> Dict[str, Any]:
        return self._device.gamepad.snapshot()

    def report(self) -> bytes:
        return self._encoder.encode(self._device.gamepad)


class Dispatcher:
    def __init__(self, encoder: Optional[X360Report] = None):
        self._encoder = encoder or X360Report()
        self._devices: List[_Device] = []

    def __len__(self) -> int:
        return len(self._devices)

    def add_device(self, name: str, table: MappingTable) -> int:
        """
        Register a device with its mapping table.

        Returns:
            Index used to address the device from now on
        """
        self._devices.append(_Device(name, table, CanonicalGamepad()))
        index = len(self._devices) - 1
        logger.info(f"Device {index}: {name} ({len(table.mappings)} bindings)")
        return index

    def dispatch(self, index: int, event: RawEvent) -> int:
        """Route an event into device `index`; returns the number of bindings applied."""
        device = self._devices[index]
        return device.table.handle_event(device.gamepad, event)

    def view(self, index: int) -> DeviceView:
        return DeviceView(self._devices[index], self._encoder)

    def emit(self, index: int, sink) -> bool:
        """
        Encode device `index` and hand the report to `sink`.

        Args:
            index: Device index
            sink: Object with a `write_report(bytes) -> bool` method

        Returns:
            The sink's result; failures are not retried
        """
        report = self._encoder.encode(self._devices[index].gamepad)
        ok = sink.write_report(report)
        if not ok:
            logger.debug(f"Report for device {index} was not written")
        return ok
