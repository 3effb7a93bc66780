import struct

import pytest

from padbridge import x360
from padbridge.buttons import ButtonSetError
from padbridge.gamepad import CanonicalGamepad, GamepadAxis, GamepadButton
from padbridge.x360 import REPORT_LENGTH, X360Report, encode_report

NEUTRAL_STICKS = b"\x00\x80" * 4  # default axes sit at the canonical minimum


def test_default_report():
    report = encode_report(CanonicalGamepad())
    assert len(report) == REPORT_LENGTH == 20
    assert report == b"\x00\x14" + b"\x00" * 4 + NEUTRAL_STICKS + b"\x00" * 6


def test_button_bytes():
    gamepad = CanonicalGamepad()
    for button in (GamepadButton.DPAD_UP, GamepadButton.START, GamepadButton.SOUTH, GamepadButton.MODE):
        gamepad.set_button(button, True)
    report = X360Report().encode(gamepad)
    assert report[2] == 0x11
    assert report[3] == 0x14


def test_face_and_shoulder_buttons():
    gamepad = CanonicalGamepad()
    for button in (GamepadButton.NORTH, GamepadButton.LEFT_SHOULDER, GamepadButton.RIGHT_THUMB):
        gamepad.set_button(button, True)
    report = encode_report(gamepad)
    assert report[2] == 0x80
    assert report[3] == 0x81


def test_triggers_and_sticks():
    gamepad = CanonicalGamepad()
    left_trigger = gamepad.get_axis_ref(GamepadAxis.LEFT_TRIGGER)
    left_trigger.value = left_trigger.maximum
    gamepad.get_axis_ref(GamepadAxis.RIGHT_TRIGGER).set_values(50, 0, 100)
    left_x = gamepad.get_axis_ref(GamepadAxis.LEFT_JOYSTICK_X)
    left_x.value = left_x.maximum
    gamepad.get_axis_ref(GamepadAxis.LEFT_JOYSTICK_Y).value = 2 ** 63
    gamepad.get_axis_ref(GamepadAxis.RIGHT_JOYSTICK_Y).set_values(64, -128, 128)

    report = encode_report(gamepad)
    assert report[4] == 255
    assert report[5] == 127
    assert struct.unpack_from("<hhhh", report, 6) == (32767, 0, -32768, 16383)
    assert report[14:] == b"\x00" * 6


def test_axis_deadzones_are_not_applied():
    gamepad = CanonicalGamepad()
    axis = gamepad.get_axis_ref(GamepadAxis.RIGHT_JOYSTICK_X)
    axis.set_values(120, -128, 128)
    axis.set_deadzones(axis.make_deadzone([(109, 128)], -128, 128))
    report = encode_report(gamepad)
    assert struct.unpack_from("<h", report, 10) == (30719,)


def test_encoder_is_reusable():
    encoder = X360Report()
    gamepad = CanonicalGamepad()
    gamepad.set_button(GamepadButton.EAST, True)
    assert encoder.encode(gamepad)[3] == 0x20
    gamepad.set_button(GamepadButton.EAST, False)
    assert encoder.encode(gamepad)[3] == 0x00


def test_button_sets_are_assembled_once(monkeypatch):
    encoder = X360Report()

    def assemble_again(buttons):
        raise AssertionError("button set rebuilt while encoding")

    monkeypatch.setattr(x360, "BitPackedButtonSet", assemble_again)
    gamepad = CanonicalGamepad()
    gamepad.set_button(GamepadButton.WEST, True)
    assert encoder.encode(gamepad)[3] == 0x40


def test_colliding_layout_fails_at_assembly():
    with pytest.raises(ButtonSetError):
        X360Report._assemble(((GamepadButton.SOUTH, "A", 4), (GamepadButton.EAST, "B", 4)))
