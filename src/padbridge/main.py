"""
Main entrypoint: forward one physical controller to the USB gadget.

Usage:
    sudo python3 -m padbridge --profile profiles/generic_gamepad.yaml
    sudo python3 -m padbridge --profile nunchuk.yaml --input-device /dev/input/event7 --verbose
"""

import argparse
import logging
import queue
import signal
import sys
import threading
import time
from typing import Dict, Optional, Tuple

from .config import Profile, ProfileError
from .dispatcher import Dispatcher
from .input_handler import InputHandler
from .mapping import MotionEvent, RawControl, RawEvent
from .usb_gadget import USBGadgetHID

logger = logging.getLogger(__name__)


class Bridge:
    """
    Wires an evdev reader, the dispatcher and the gadget sink together.

    The reader thread only enqueues raw events; dispatching and report
    emission both happen on the thread calling `run()`.
    """

    def __init__(
        self,
        profile: Profile,
        input_device: Optional[str] = None,
        gadget: Optional[str] = None,
        rate: Optional[int] = None,
        verbose: bool = False,
    ):
        self.profile = profile
        self.input_device = input_device
        self.rate = rate or profile.rate
        self.verbose = verbose

        self.dispatcher = Dispatcher()
        self.table = profile.build_table()
        self.device_index = self.dispatcher.add_device(profile.name, self.table)
        self.gadget = USBGadgetHID(gadget or profile.gadget, verbose=verbose)

        self._events: "queue.Queue[RawEvent]" = queue.Queue()
        self._stop = threading.Event()
        self._input_handler: Optional[InputHandler] = None
        self._failures = 0

    def _on_event(self, event: RawEvent) -> None:
        self._events.put(event)

    def stop(self, *_args) -> None:
        self._stop.set()

    def seed_axes(self, axes: Dict[RawControl, Tuple[int, int, int]]) -> None:
        """Calibrate from reported (min, max, value) and apply each resting value."""
        for control, (minimum, maximum, value) in axes.items():
            if minimum == maximum:
                continue
            self.table.calibrate(control, minimum, maximum)
            self.dispatcher.dispatch(self.device_index, MotionEvent(control, value))

    def record_emit(self, ok: bool) -> None:
        if ok:
            self._failures = 0
            return
        self._failures += 1
        # once per second of consecutive failures
        if (self._failures - 1) % self.rate == 0:
            logger.warning(f"Report write failing ({self._failures} in a row)")

    def pump(self, timeout: float) -> int:
        """Dispatch queued events, waiting up to `timeout` for the first one."""
        handled = 0
        try:
            event = self._events.get(timeout=timeout)
        except queue.Empty:
            return 0
        while True:
            self.dispatcher.dispatch(self.device_index, event)
            handled += 1
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                return handled

    def run(self) -> int:
        """Run until interrupted. Returns exit code."""
        if not self.gadget.open():
            return 1

        self._input_handler = InputHandler(
            device_path=None if self.input_device in (None, "auto") else self.input_device,
            on_event=self._on_event,
            verbose=self.verbose,
        )
        if not self._input_handler.start():
            self.gadget.close()
            return 1

        self.seed_axes(self._input_handler.axis_ranges())

        logger.info(f"Forwarding at {self.rate}Hz (press Ctrl+C to stop)")
        period = 1.0 / self.rate
        try:
            while not self._stop.is_set() and self._input_handler.is_running:
                deadline = time.monotonic() + period
                self.pump(period)
                remaining = deadline - time.monotonic()
                if remaining > 0:
                    self.pump(remaining)
                self.record_emit(self.dispatcher.emit(self.device_index, self.gadget))
        except KeyboardInterrupt:
            pass
        finally:
            logger.info("Shutting down...")
            self._input_handler.stop()
            self.gadget.close()

        return 0


def main():
    """Main entrypoint."""
    parser = argparse.ArgumentParser(
        description="Forward a physical controller to a USB gadget as an Xbox 360 pad",
    )
    parser.add_argument("--profile", required=True, help="YAML mapping profile")
    parser.add_argument(
        "--input-device",
        default="auto",
        help="Input device path (default: auto)",
    )
    parser.add_argument("--gadget", default=None, help="HID gadget device (default: from profile, /dev/hidg0)")
    parser.add_argument("--rate", type=int, default=None, help="Report rate in Hz (default: from profile)")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    try:
        profile = Profile.load(args.profile)
    except (OSError, ProfileError) as e:
        logger.error(f"Could not load profile {args.profile}: {e}")
        sys.exit(1)

    bridge = Bridge(
        profile,
        input_device=args.input_device,
        gadget=args.gadget,
        rate=args.rate,
        verbose=args.verbose,
    )
    signal.signal(signal.SIGTERM, bridge.stop)
    sys.exit(bridge.run())


if __name__ == "__main__":
    main()
