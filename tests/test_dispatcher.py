from padbridge.dispatcher import Dispatcher
from padbridge.gamepad import CanonicalGamepad, GamepadAxis, GamepadButton
from padbridge.mapping import AxisOutput, ButtonEvent, ButtonOutput, MappingTable, RawControl
from padbridge.x360 import encode_report

BTN_SOUTH = RawControl.key(304)


class FakeSink:
    def __init__(self, ok=True):
        self.ok = ok
        self.reports = []

    def write_report(self, report):
        self.reports.append(report)
        return self.ok


def make_table(output):
    table = MappingTable()
    table.map_event(BTN_SOUTH, output)
    return table


def test_devices_are_independent():
    dispatcher = Dispatcher()
    first = dispatcher.add_device("pad", make_table(ButtonOutput(GamepadButton.SOUTH)))
    second = dispatcher.add_device("nunchuk", make_table(AxisOutput(GamepadAxis.RIGHT_TRIGGER)))
    assert (first, second) == (0, 1)
    assert len(dispatcher) == 2

    assert dispatcher.dispatch(first, ButtonEvent(BTN_SOUTH, True)) == 1
    assert dispatcher.view(first).button(GamepadButton.SOUTH) is True
    assert dispatcher.view(second).button(GamepadButton.SOUTH) is False
    assert dispatcher.view(second).axis_value(GamepadAxis.RIGHT_TRIGGER) == 0

    dispatcher.dispatch(second, ButtonEvent(BTN_SOUTH, True))
    assert dispatcher.view(second).axis_value(GamepadAxis.RIGHT_TRIGGER) > 0
    assert dispatcher.view(first).axis_value(GamepadAxis.RIGHT_TRIGGER) == 0


def test_view():
    dispatcher = Dispatcher()
    index = dispatcher.add_device("pad", make_table(ButtonOutput(GamepadButton.START)))
    dispatcher.dispatch(index, ButtonEvent(BTN_SOUTH, True))

    view = dispatcher.view(index)
    assert view.name == "pad"
    assert view.snapshot()["buttons"] == ["START"]

    expected = CanonicalGamepad()
    expected.set_button(GamepadButton.START, True)
    assert view.report() == encode_report(expected)


def test_emit_hands_report_to_sink():
    dispatcher = Dispatcher()
    index = dispatcher.add_device("pad", make_table(ButtonOutput(GamepadButton.SOUTH)))
    dispatcher.dispatch(index, ButtonEvent(BTN_SOUTH, True))

    sink = FakeSink()
    assert dispatcher.emit(index, sink) is True
    assert len(sink.reports) == 1
    assert sink.reports[0][3] == 0x10


def test_emit_failure_is_not_retried():
    dispatcher = Dispatcher()
    index = dispatcher.add_device("pad", MappingTable())
    sink = FakeSink(ok=False)
    assert dispatcher.emit(index, sink) is False
    assert len(sink.reports) == 1


def test_custom_encoder():
    class FixedEncoder:
        def encode(self, gamepad):
            return b"\x01\x02"

    dispatcher = Dispatcher(encoder=FixedEncoder())
    index = dispatcher.add_device("pad", MappingTable())
    sink = FakeSink()
    dispatcher.emit(index, sink)
    assert sink.reports == [b"\x01\x02"]
    assert dispatcher.view(index).report() == b"\x01\x02"
