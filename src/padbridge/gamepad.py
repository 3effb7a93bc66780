"""
Canonical gamepad model.

Every input backend writes into a `CanonicalGamepad` and every output
encoder reads from one. The set of buttons and axes is closed and every
entry exists from construction on, so lookups never fail.
"""

from enum import Enum
from typing import Any, Dict, List

from .axis import Axis


class GamepadButton(Enum):
    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3
    LEFT_SHOULDER = 4
    RIGHT_SHOULDER = 5
    SELECT = 6
    START = 7
    MODE = 8
    LEFT_THUMB = 9
    RIGHT_THUMB = 10
    DPAD_UP = 11
    DPAD_DOWN = 12
    DPAD_LEFT = 13
    DPAD_RIGHT = 14


class GamepadAxis(Enum):
    LEFT_TRIGGER = 0
    RIGHT_TRIGGER = 1
    LEFT_JOYSTICK_X = 2
    LEFT_JOYSTICK_Y = 3
    RIGHT_JOYSTICK_X = 4
    RIGHT_JOYSTICK_Y = 5


class CanonicalGamepad:
    """
    Full controller state: one bool per `GamepadButton` and one `Axis` per
    `GamepadAxis`, stored in lists indexed by the enum value.
    """

    def __init__(self):
        self._buttons: List[bool] = [False] * len(GamepadButton)
        self._axes: List[Axis] = [Axis() for _ in GamepadAxis]

    def set_button(self, button: GamepadButton, pressed: bool) -> None:
        self._buttons[button.value] = bool(pressed)

    def get_button(self, button: GamepadButton) -> bool:
        return self._buttons[button.value]

    def get_axis_ref(self, axis: GamepadAxis) -> Axis:
        """Return the live `Axis` for `axis`; mutations apply to the gamepad."""
        return self._axes[axis.value]

    def reset(self) -> None:
        """Release every button and return every axis to its default."""
        self._buttons = [False] * len(GamepadButton)
        self._axes = [Axis() for _ in GamepadAxis]

    def snapshot(self) -> Dict[str, Any]:
        """Plain-dict view of the state, for logging."""
        return {
            "buttons": [button.name for button in GamepadButton if self._buttons[button.value]],
            "axes": {axis.name: round(self._axes[axis.value].get_normalized_value(), 3) for axis in GamepadAxis},
        }
