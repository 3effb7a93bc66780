import pytest

from padbridge import usb_gadget
from padbridge.usb_gadget import USBGadgetHID

REPORT = bytes(range(20))


@pytest.fixture
def device(tmp_path):
    path = tmp_path / "hidg0"
    path.write_bytes(b"")
    return path


def test_open_missing_device(tmp_path):
    gadget = USBGadgetHID(str(tmp_path / "missing"))
    assert gadget.open() is False
    assert gadget.is_active() is False


def test_write_report(device):
    gadget = USBGadgetHID(str(device))
    assert gadget.open() is True
    assert gadget.is_active()
    assert gadget.write_report(REPORT) is True
    gadget.close()

    assert device.read_bytes() == REPORT
    assert gadget.reports_written == 1
    assert gadget.is_active() is False


def test_write_when_closed():
    gadget = USBGadgetHID("/dev/hidg-unused")
    assert gadget.write_report(REPORT) is False
    assert gadget.reports_written == 0


def test_context_manager(device):
    with USBGadgetHID(str(device)) as gadget:
        assert gadget.is_active()
        gadget.write_report(REPORT)
    assert not gadget.is_active()
    assert device.read_bytes() == REPORT


@pytest.mark.parametrize("error", [BlockingIOError(11, "busy"), OSError(108, "shutdown")])
def test_write_errors_return_false(device, monkeypatch, error):
    def fail(fd, data):
        raise error

    with USBGadgetHID(str(device)) as gadget:
        monkeypatch.setattr(usb_gadget.os, "write", fail)
        assert gadget.write_report(REPORT) is False
        monkeypatch.undo()
    assert gadget.reports_written == 0


def test_short_write_returns_false(device, monkeypatch):
    with USBGadgetHID(str(device)) as gadget:
        monkeypatch.setattr(usb_gadget.os, "write", lambda fd, data: 3)
        assert gadget.write_report(REPORT) is False
        monkeypatch.undo()
    assert gadget.reports_written == 0
