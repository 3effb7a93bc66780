"""
USB gadget report sink.

Writes controller input reports to the /dev/hidgX character device the
kernel's USB gadget framework creates for an HID function. The gadget itself
must be configured externally (configfs); this module only opens the device
node and writes reports.
"""

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_GADGET_DEVICE = "/dev/hidg0"


class USBGadgetHID:
    """
    Byte sink for one HID gadget function.

    `write_report()` reports success or failure and never retries; the caller
    decides whether to stop, retry or reopen.
    """

    def __init__(self, device: str = DEFAULT_GADGET_DEVICE, verbose: bool = False):
        """
        Initialize USB gadget HID sink.

        Args:
            device: Path to the HID gadget device node
            verbose: Log every report written
        """
        self.device = device
        self.verbose = verbose

        self._fd: Optional[int] = None
        self._reports_written = 0

    def open(self) -> bool:
        """
        Open the HID gadget device for writing.

        Returns:
            True if successful, False otherwise
        """
        if self._fd is not None:
            logger.warning("USB gadget HID already open")
            return True

        if not os.path.exists(self.device):
            logger.error(f"Gadget device not found: {self.device}")
            return False

        try:
            self._fd = os.open(self.device, os.O_RDWR | os.O_NONBLOCK)
        except OSError as e:
            logger.error(f"Failed to open gadget device {self.device}: {e}")
            return False

        logger.info(f"Opened gadget device: {self.device} (fd={self._fd})")
        return True

    def close(self) -> None:
        """Close the HID gadget device."""
        if self._fd is None:
            return

        try:
            os.close(self._fd)
        except OSError as e:
            logger.warning(f"Error closing gadget device: {e}")
        self._fd = None
        logger.info(f"USB gadget HID closed after {self._reports_written} reports")

    def is_active(self) -> bool:
        """Check if the gadget device is open."""
        return self._fd is not None

    @property
    def reports_written(self) -> int:
        return self._reports_written

    def write_report(self, report: bytes) -> bool:
        """
        Write one report to the gadget.

        Args:
            report: Complete report, written verbatim

        Returns:
            True if the whole report was written, False otherwise
        """
        if self._fd is None:
            logger.debug("Gadget device not open; dropping report")
            return False

        try:
            written = os.write(self._fd, report)
        except BlockingIOError:
            # host is not polling the endpoint
            logger.debug("Gadget device busy; report dropped")
            return False
        except OSError as e:
            logger.error(f"Failed to send report: {e}")
            return False

        if written != len(report):
            logger.warning(f"Short write to gadget: {written}/{len(report)} bytes")
            return False

        self._reports_written += 1
        if self.verbose:
            logger.debug(f"Report: {report.hex()}")
        return True

    def __enter__(self) -> "USBGadgetHID":
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.close()
