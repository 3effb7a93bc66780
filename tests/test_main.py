import logging

import pytest

pytest.importorskip("evdev")

from padbridge.axis import Axis  # noqa: E402
from padbridge.config import Profile  # noqa: E402
from padbridge.gamepad import GamepadAxis, GamepadButton  # noqa: E402
from padbridge.main import Bridge  # noqa: E402
from padbridge.mapping import ButtonEvent, MotionEvent, RawControl  # noqa: E402


@pytest.fixture
def profile():
    return Profile.from_dict({
        "name": "test-pad",
        "rate": 100,
        "bindings": [
            {"input": "key:304", "target": "button:SOUTH"},
            {"input": "abs:0", "target": "axis:LEFT_JOYSTICK_X"},
        ],
    })


def test_pump_dispatches_queued_events(profile):
    bridge = Bridge(profile)
    bridge.table.calibrate(RawControl.absolute(0), -128, 128)

    bridge._on_event(ButtonEvent(RawControl.key(304), True))
    bridge._on_event(MotionEvent(RawControl.absolute(0), 0))
    assert bridge.pump(0.1) == 2

    view = bridge.dispatcher.view(bridge.device_index)
    assert view.name == "test-pad"
    assert view.button(GamepadButton.SOUTH) is True
    assert view.axis_value(GamepadAxis.LEFT_JOYSTICK_X) == 2 ** 63


def test_pump_with_empty_queue(profile):
    assert Bridge(profile).pump(0.01) == 0


def test_rate_override(profile):
    assert Bridge(profile).rate == 100
    assert Bridge(profile, rate=500).rate == 500


def test_run_fails_without_gadget(profile, tmp_path):
    bridge = Bridge(profile, gadget=str(tmp_path / "hidg0"))
    assert bridge.run() == 1


def test_seed_axes_applies_resting_values(profile):
    bridge = Bridge(profile)
    bridge.seed_axes({
        RawControl.absolute(0): (-128, 128, 0),
        RawControl.absolute(5): (0, 0, 0),
    })

    view = bridge.dispatcher.view(bridge.device_index)
    assert view.axis_value(GamepadAxis.LEFT_JOYSTICK_X) == 2 ** 63
    assert view.report()[6:8] == b"\x00\x00"
    assert bridge.table.calibration(RawControl.absolute(5)) is None


def test_seed_axes_off_center(profile):
    bridge = Bridge(profile)
    bridge.seed_axes({RawControl.absolute(0): (-128, 128, 64)})
    calibration = bridge.table.calibration(RawControl.absolute(0))
    assert (calibration.minimum, calibration.maximum) == (-128, 128)
    assert bridge.dispatcher.view(bridge.device_index).axis_value(GamepadAxis.LEFT_JOYSTICK_X) == (
        Axis.new(64, -128, 128).value
    )


@pytest.mark.parametrize("rate, failures, warnings", [(1, 3, 3), (3, 4, 2), (100, 5, 1)])
def test_write_failures_are_logged_once_per_second(profile, caplog, rate, failures, warnings):
    bridge = Bridge(profile, rate=rate)
    with caplog.at_level(logging.WARNING, logger="padbridge.main"):
        for _ in range(failures):
            bridge.record_emit(False)
    assert len([r for r in caplog.records if "Report write failing" in r.message]) == warnings


def test_successful_write_resets_failures(profile, caplog):
    bridge = Bridge(profile, rate=100)
    with caplog.at_level(logging.WARNING, logger="padbridge.main"):
        bridge.record_emit(False)
        bridge.record_emit(True)
        bridge.record_emit(False)
    assert len(caplog.records) == 2
