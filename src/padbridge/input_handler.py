"""
Input device handler for reading physical controllers through evdev.

Reads from Linux evdev devices (e.g., /dev/input/event6 for an Xbox 360 pad
or the Wii Remote nunchuk node) and turns key and absolute-axis events into
padbridge raw events for the mapping table.
"""

import logging
import threading
from typing import Callable, Dict, Optional, Tuple

import evdev
from evdev import InputDevice, ecodes

from .mapping import ButtonEvent, MotionEvent, RawControl, RawEvent

logger = logging.getLogger(__name__)


def translate_event(event) -> Optional[RawEvent]:
    """
    Convert an evdev event into a raw event.

    Key values 1 (press) and 2 (autorepeat) count as pressed. Events other
    than EV_KEY and EV_ABS return None.
    """
    if event.type == ecodes.EV_KEY:
        return ButtonEvent(RawControl.key(event.code), event.value != 0)
    if event.type == ecodes.EV_ABS:
        return MotionEvent(RawControl.absolute(event.code), event.value)
    return None


def find_gamepad() -> Optional[str]:
    """
    Auto-detect a gamepad-like input device.

    Returns:
        Device path if found, None otherwise
    """
    try:
        devices = [InputDevice(path) for path in evdev.list_devices()]
    except OSError as e:
        logger.error(f"Error listing input devices: {e}")
        return None

    for device in devices:
        caps = device.capabilities(absinfo=False)
        if ecodes.EV_KEY in caps and ecodes.EV_ABS in caps:
            keys = caps[ecodes.EV_KEY]
            if ecodes.BTN_SOUTH in keys or ecodes.BTN_A in keys:
                logger.info(f"Found gamepad: {device.name} at {device.path}")
                return device.path

    logger.warning("No suitable gamepad found")
    return None


class InputHandler:
    """
    Reads one evdev device on a background thread and forwards every
    translated event to a single callback.
    """

    def __init__(
        self,
        device_path: Optional[str] = None,
        on_event: Optional[Callable[[RawEvent], None]] = None,
        grab: bool = True,
        verbose: bool = False,
    ):
        """
        Initialize the input handler.

        Args:
            device_path: Path to input device (e.g., /dev/input/event6)
                        If None, will try to auto-detect a gamepad
            on_event: Callback receiving each translated raw event
            grab: Take exclusive access to the device
            verbose: Log every forwarded event
        """
        self.device_path = device_path
        self.on_event = on_event
        self.grab = grab
        self.verbose = verbose

        self._device: Optional[InputDevice] = None
        self._thread: Optional[threading.Thread] = None
        self._running = False

    def start(self) -> bool:
        """
        Open the device and start the reader thread.

        Returns:
            True once the reader thread runs, False if the device could not be opened
        """
        if self._running:
            logger.warning("Input handler already running")
            return True

        if not self.device_path:
            self.device_path = find_gamepad()
            if not self.device_path:
                logger.error("No input device specified and auto-detection failed")
                return False

        try:
            self._device = InputDevice(self.device_path)
        except OSError as e:
            logger.error(f"Failed to open input device {self.device_path}: {e}")
            return False
        logger.info(f"Opened input device: {self._device.name} at {self.device_path}")

        if self.grab:
            try:
                self._device.grab()
                logger.info("Grabbed exclusive access to input device")
            except OSError as e:
                logger.warning(f"Could not grab device (non-exclusive mode): {e}")

        self._running = True
        self._thread = threading.Thread(target=self._read_loop, name="InputHandler", daemon=True)
        self._thread.start()
        logger.info("Input handler started successfully")
        return True

    def stop(self) -> None:
        """Stop the reader thread and release the device."""
        if not self._running:
            return

        logger.info("Stopping input handler...")
        self._running = False

        if self._device:
            if self.grab:
                try:
                    self._device.ungrab()
                except OSError as e:
                    logger.debug(f"Ungrab failed: {e}")
            self._device.close()
            self._device = None

        if self._thread:
            self._thread.join(timeout=2.0)

        logger.info("Input handler stopped")

    def axis_ranges(self) -> Dict[RawControl, Tuple[int, int, int]]:
        """
        Reported (min, max, current value) of every absolute axis of the open device.

        evdev only reports an axis once it changes, so these seed both the
        calibration and the resting position.
        """
        if self._device is None:
            return {}
        caps = self._device.capabilities(absinfo=True)
        return {
            RawControl.absolute(code): (info.min, info.max, info.value)
            for code, info in caps.get(ecodes.EV_ABS, [])
        }

    def _read_loop(self) -> None:
        """Forward events until stopped or the device goes away."""
        logger.debug(f"Reader thread started for {self.device_path}")

        try:
            for event in self._device.read_loop():
                if not self._running:
                    break
                self._handle_event(event)
        except OSError as e:
            if self._running:
                logger.error(f"Lost input device {self.device_path}: {e}")
            self._running = False

        logger.info("Reader thread exited")

    def _handle_event(self, event) -> None:
        raw = translate_event(event)
        if raw is None:
            return
        if self.verbose:
            logger.debug(f"Input {raw}")
        if self.on_event:
            self.on_event(raw)

    @property
    def is_running(self) -> bool:
        """True while the reader thread is forwarding events."""
        return self._running
