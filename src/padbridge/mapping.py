"""
Mapping table: routes raw input events onto a canonical gamepad.

A raw control is identified by its kind (boolean key or continuous absolute
axis) and a backend specific code. The table holds ordered bindings from raw
controls to canonical buttons or axes and applies every binding that matches
an incoming event.

Continuous controls are calibrated on the fly: the table remembers the
smallest and largest sample seen per control and rescales every new sample
against that running range, with a deadzone sized as a fraction of it.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Union

from .axis import CANONICAL, Axis
from .gamepad import CanonicalGamepad, GamepadAxis, GamepadButton
from .scalar import Number

logger = logging.getLogger(__name__)

DEFAULT_DEADZONE_PERCENTAGE = 0.05
DEFAULT_BUTTON_THRESHOLD = 0.5
# A wider rest deadzone reaches CENTER_LOW and would classify as an edge.
MAX_DEADZONE_PERCENTAGE = 0.2


class ControlKind(Enum):
    KEY = "key"
    ABS = "abs"


@dataclass(frozen=True)
class RawControl:
    """Backend specific identifier of a physical button or axis."""

    kind: ControlKind
    code: int

    @classmethod
    def key(cls, code: int) -> "RawControl":
        return cls(ControlKind.KEY, code)

    @classmethod
    def absolute(cls, code: int) -> "RawControl":
        return cls(ControlKind.ABS, code)

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.code}"


@dataclass(frozen=True)
class ButtonEvent:
    control: RawControl
    pressed: bool


@dataclass(frozen=True)
class MotionEvent:
    control: RawControl
    sample: Number


RawEvent = Union[ButtonEvent, MotionEvent]


@dataclass(frozen=True)
class ButtonOutput:
    button: GamepadButton


@dataclass(frozen=True)
class AxisOutput:
    axis: GamepadAxis


OutputMapping = Union[ButtonOutput, AxisOutput]


@dataclass(frozen=True)
class ControllerMapping:
    control: RawControl
    output: OutputMapping


@dataclass
class Calibration:
    """Running observed range of one continuous control."""

    minimum: Number
    maximum: Number

    def observe(self, sample: Number) -> None:
        if sample < self.minimum:
            self.minimum = sample
        if sample > self.maximum:
            self.maximum = sample

    @property
    def span(self) -> Number:
        return abs(self.maximum - self.minimum)


class MappingTable:
    """
    Ordered raw-control -> canonical-output bindings.

    The table owns the calibration state of the controls it has seen; the
    gamepad it writes into is passed to `handle_event()` by its owner.
    """

    def __init__(
        self,
        deadzone_percentage: float = DEFAULT_DEADZONE_PERCENTAGE,
        edge_deadzones: bool = False,
        center: Number = 0,
        button_threshold: float = DEFAULT_BUTTON_THRESHOLD,
    ):
        """
        Args:
            deadzone_percentage: Deadzone width as a fraction of the observed
                range of a continuous control
            edge_deadzones: Also place deadzones at both observed extremes
            center: Raw value the rest deadzone is centered on
            button_threshold: Normalized position above which a continuous
                control bound to a button counts as pressed
        """
        self.deadzone_percentage = deadzone_percentage
        self.edge_deadzones = edge_deadzones
        self.center = center
        self.button_threshold = button_threshold

        self.mappings: List[ControllerMapping] = []
        self._calibrations: Dict[RawControl, Calibration] = {}

    def map_event(self, control: RawControl, output: OutputMapping) -> None:
        """Append a binding; bindings are applied in insertion order."""
        self.mappings.append(ControllerMapping(control, output))

    def calibrate(self, control: RawControl, minimum: Number, maximum: Number) -> None:
        """Seed the observed range of a continuous control, e.g. from device absinfo."""
        self._calibrations[control] = Calibration(minimum, maximum)

    def calibration(self, control: RawControl) -> Optional[Calibration]:
        return self._calibrations.get(control)

    def reset_calibration(self) -> None:
        self._calibrations.clear()

    def handle_event(self, gamepad: CanonicalGamepad, event: RawEvent) -> int:
        """
        Apply every binding matching `event` to `gamepad`.

        Bindings match on the raw control only, never on the carried value.

        Returns:
            Number of bindings applied
        """
        matches = [mapping for mapping in self.mappings if mapping.control == event.control]
        if not matches:
            logger.debug(f"Unmapped input {event.control}")
            return 0

        if isinstance(event, ButtonEvent):
            for mapping in matches:
                self._apply_button(gamepad, mapping.output, event.pressed)
            return len(matches)

        source = self._sample_axis(event)
        if source is None:
            return 0
        for mapping in matches:
            self._apply_motion(gamepad, mapping.output, source)
        return len(matches)

    @staticmethod
    def _apply_button(gamepad: CanonicalGamepad, output: OutputMapping, pressed: bool) -> None:
        if isinstance(output, ButtonOutput):
            gamepad.set_button(output.button, pressed)
        else:
            axis = gamepad.get_axis_ref(output.axis)
            axis.value = axis.maximum if pressed else axis.minimum

    def _apply_motion(self, gamepad: CanonicalGamepad, output: OutputMapping, source: Axis) -> None:
        if isinstance(output, AxisOutput):
            gamepad.get_axis_ref(output.axis).value = source.convert_into(CANONICAL, True)
        else:
            gamepad.set_button(output.button, source.get_normalized_value() > self.button_threshold)

    def _sample_axis(self, event: MotionEvent) -> Optional[Axis]:
        """Calibrate with the new sample and return it as a transient axis."""
        sample = event.sample
        calibration = self._calibrations.get(event.control)
        if calibration is None:
            calibration = self._calibrations[event.control] = Calibration(sample, sample)
        calibration.observe(sample)

        if calibration.span == 0:
            logger.debug(f"{event.control} not calibrated yet ({sample})")
            return None

        source = Axis.new(sample, calibration.minimum, calibration.maximum)
        if self.deadzone_percentage > 0:
            width = self.deadzone_percentage * calibration.span
            ranges = [(self.center - width, self.center + width)]
            if self.edge_deadzones:
                ranges.append((calibration.minimum, calibration.minimum + width))
                ranges.append((calibration.maximum - width, calibration.maximum))
            source.set_deadzones(source.make_deadzone(ranges, calibration.minimum, calibration.maximum))
        return source
