"""
Xbox 360 wired controller input report.

Layout of the 20-byte report (all multi-byte fields little-endian):

    byte 0       report id (0x00)
    byte 1       report length (0x14)
    byte 2       d-pad, start, back, left/right stick click
    byte 3       LB, RB, guide, A, B, X, Y
    byte 4       left trigger (0-255)
    byte 5       right trigger (0-255)
    bytes 6-13   left X, left Y, right X, right Y (signed 16-bit each)
    bytes 14-19  reserved, zero
"""

import logging
import struct
from typing import Tuple

from .buttons import BitPackedButton, BitPackedButtonSet
from .gamepad import CanonicalGamepad, GamepadAxis, GamepadButton
from .scalar import I16, U8

logger = logging.getLogger(__name__)

REPORT_ID = 0x00
REPORT_LENGTH = 0x14

# (canonical button, report name, bit address)
CONTROL_BYTE_2: Tuple[Tuple[GamepadButton, str, int], ...] = (
    (GamepadButton.DPAD_UP, "DPAD_UP", 0x00),
    (GamepadButton.DPAD_DOWN, "DPAD_DOWN", 0x01),
    (GamepadButton.DPAD_LEFT, "DPAD_LEFT", 0x02),
    (GamepadButton.DPAD_RIGHT, "DPAD_RIGHT", 0x03),
    (GamepadButton.START, "START", 0x04),
    (GamepadButton.SELECT, "BACK", 0x05),
    (GamepadButton.LEFT_THUMB, "L3", 0x06),
    (GamepadButton.RIGHT_THUMB, "R3", 0x07),
)

CONTROL_BYTE_3: Tuple[Tuple[GamepadButton, str, int], ...] = (
    (GamepadButton.LEFT_SHOULDER, "LB", 0x00),
    (GamepadButton.RIGHT_SHOULDER, "RB", 0x01),
    (GamepadButton.MODE, "XBOX", 0x02),
    (GamepadButton.SOUTH, "A", 0x04),
    (GamepadButton.EAST, "B", 0x05),
    (GamepadButton.WEST, "X", 0x06),
    (GamepadButton.NORTH, "Y", 0x07),
)

JOYSTICK_AXES = (
    GamepadAxis.LEFT_JOYSTICK_X,
    GamepadAxis.LEFT_JOYSTICK_Y,
    GamepadAxis.RIGHT_JOYSTICK_X,
    GamepadAxis.RIGHT_JOYSTICK_Y,
)


class X360Report:
    """
    Encodes a `CanonicalGamepad` into the 20-byte Xbox 360 input report.

    The two button bytes are assembled once; `encode()` only refreshes the
    pressed states before folding them.
    """

    def __init__(self):
        self._byte_2 = self._assemble(CONTROL_BYTE_2)
        self._byte_3 = self._assemble(CONTROL_BYTE_3)

    @staticmethod
    def _assemble(layout) -> Tuple[Tuple[GamepadButton, ...], BitPackedButtonSet]:
        buttons = tuple(button for button, _, _ in layout)
        packed = BitPackedButtonSet(BitPackedButton(name, address) for _, name, address in layout)
        return buttons, packed

    @staticmethod
    def _fold(assembled, gamepad: CanonicalGamepad) -> int:
        buttons, packed = assembled
        for button, bit in zip(buttons, packed):
            bit.pressed = gamepad.get_button(button)
        return packed.to_bytes_repr()

    def encode(self, gamepad: CanonicalGamepad) -> bytes:
        """
        Build the report for the gamepad's current state.

        Axes are converted with deadzones disabled; they were resolved when
        the gamepad was written.

        Returns:
            20 bytes, ready to write to the gadget
        """
        report = bytearray(REPORT_LENGTH)
        report[0] = REPORT_ID
        report[1] = REPORT_LENGTH
        report[2] = self._fold(self._byte_2, gamepad)
        report[3] = self._fold(self._byte_3, gamepad)
        report[4] = gamepad.get_axis_ref(GamepadAxis.LEFT_TRIGGER).convert_into(U8, False)
        report[5] = gamepad.get_axis_ref(GamepadAxis.RIGHT_TRIGGER).convert_into(U8, False)
        struct.pack_into(
            "<hhhh", report, 6,
            *(gamepad.get_axis_ref(axis).convert_into(I16, False) for axis in JOYSTICK_AXES)
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"X360 report: {report.hex()}")
        return bytes(report)


def encode_report(gamepad: CanonicalGamepad) -> bytes:
    return X360Report().encode(gamepad)
