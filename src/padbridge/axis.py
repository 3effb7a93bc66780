"""
Axis: a sampled control value held in the canonical domain.

Axis values are stored as unsigned 64-bit integers spanning the whole U64
range, so any device range can be mapped in and any report range mapped out
without losing more precision than the narrower side has. Deadzones are kept
in the same canonical domain and are resolved when the axis is converted
into an output domain.
"""

from enum import Enum
from typing import Iterable, List, NamedTuple, Optional, Sequence

from .scalar import F64, U64, Number, Scalar, normalize

CANONICAL = U64

# A deadzone that starts above CENTER_LOW and ends below CENTER_HIGH is a
# rest-position deadzone; anything else saturates to an edge.
CENTER_LOW = 0.3
CENTER_HIGH = 0.7


class Deadzone(NamedTuple):
    """Canonical range collapsed to one output value, inclusive on both ends."""

    start: int
    end: int

    def contains(self, value: int) -> bool:
        low, high = min(self.start, self.end), max(self.start, self.end)
        return low <= value <= high


class DeadzoneKind(Enum):
    CENTER = "center"
    LOW_EDGE = "low_edge"
    HIGH_EDGE = "high_edge"


class Axis:
    """
    A control value in the canonical domain with optional deadzones.

    Use `Axis.new()` to sample a value from a foreign range. The plain
    constructor takes an already canonical value.
    """

    def __init__(self, value: int = CANONICAL.minimum, deadzones: Optional[Iterable[Deadzone]] = None):
        self.minimum = CANONICAL.minimum
        self.maximum = CANONICAL.maximum
        self._value = self.minimum
        self.value = value
        self._deadzones: List[Deadzone] = list(deadzones or [])

    @classmethod
    def new(
        cls,
        value: Number,
        minimum: Optional[Number] = None,
        maximum: Optional[Number] = None,
        scalar: Optional[Scalar] = None,
    ) -> "Axis":
        """
        Sample `value` from [minimum, maximum] into a new canonical axis.

        Args:
            value: Raw value
            minimum: Lower bound of the raw range (default: scalar minimum)
            maximum: Upper bound of the raw range (default: scalar maximum)
            scalar: Domain of the raw value; inferred from `value` when omitted
        """
        axis = cls()
        axis.set_values(value, minimum, maximum, scalar)
        return axis

    @property
    def value(self) -> int:
        return self._value

    @value.setter
    def value(self, value: int) -> None:
        self._value = max(self.minimum, min(self.maximum, int(value)))

    def set_values(
        self,
        value: Number,
        minimum: Optional[Number] = None,
        maximum: Optional[Number] = None,
        scalar: Optional[Scalar] = None,
    ) -> None:
        """Re-sample the axis in place from a raw value and its range."""
        self.value = normalize(value, minimum, maximum, self.minimum, self.maximum, source=scalar, target=CANONICAL)

    def get_normalized_value(self) -> float:
        """Position of the value within [minimum, maximum], from 0.0 to 1.0."""
        return normalize(self.value, self.minimum, self.maximum, 0.0, 1.0, source=CANONICAL, target=F64)

    def set_deadzones(self, deadzones: Iterable[Deadzone]) -> None:
        self._deadzones = list(deadzones)

    def get_deadzones(self) -> List[Deadzone]:
        return self._deadzones

    def make_deadzone(
        self,
        ranges: Iterable[Sequence[Number]],
        minimum: Number,
        maximum: Number,
        scalar: Optional[Scalar] = None,
    ) -> List[Deadzone]:
        """
        Convert deadzone ranges from a foreign range into this axis' domain.

        Args:
            ranges: (start, end) pairs expressed in [minimum, maximum]
            minimum: Lower bound of the foreign range
            maximum: Upper bound of the foreign range
            scalar: Domain of the foreign values, only needed for defaults

        Returns:
            Canonical deadzones, ready for `set_deadzones()`
        """
        deadzones = []
        for start, end in ranges:
            deadzones.append(Deadzone(
                normalize(start, minimum, maximum, self.minimum, self.maximum, source=scalar, target=CANONICAL),
                normalize(end, minimum, maximum, self.minimum, self.maximum, source=scalar, target=CANONICAL),
            ))
        return deadzones

    def invert(self) -> "Axis":
        """Return a mirrored copy of this axis; bounds and deadzones are kept."""
        return Axis(self.minimum + (self.maximum - self.value), self._deadzones)

    def _ratio(self, value: int) -> float:
        span = abs(float(self.minimum) - float(self.maximum))
        return (float(value) - float(self.minimum)) / span

    def _matching_deadzone(self) -> Optional[Deadzone]:
        for deadzone in self._deadzones:
            if deadzone.contains(self.value):
                return deadzone
        return None

    def classify_deadzone(self) -> Optional[DeadzoneKind]:
        """
        Classify the deadzone the current value falls in.

        Returns:
            The deadzone kind, or None when no deadzone contains the value
        """
        deadzone = self._matching_deadzone()
        if deadzone is None:
            return None

        start_ratio = self._ratio(deadzone.start)
        end_ratio = self._ratio(deadzone.end)
        if start_ratio > CENTER_LOW and end_ratio < CENTER_HIGH:
            return DeadzoneKind.CENTER
        if self._ratio(self.value) < CENTER_LOW:
            return DeadzoneKind.LOW_EDGE
        return DeadzoneKind.HIGH_EDGE

    def convert_into(self, target: Scalar, use_deadzones: bool = True) -> Number:
        """
        Convert the axis into an output domain.

        Args:
            target: Output domain
            use_deadzones: Collapse values inside a deadzone to the domain's
                midpoint (rest deadzone) or to its minimum/maximum (edge
                deadzones)

        Returns:
            The value in the target domain
        """
        if use_deadzones:
            kind = self.classify_deadzone()
            if kind is DeadzoneKind.CENTER:
                return target.midpoint
            if kind is DeadzoneKind.LOW_EDGE:
                return target.minimum
            if kind is DeadzoneKind.HIGH_EDGE:
                return target.maximum

        return normalize(self.value, self.minimum, self.maximum, source=CANONICAL, target=target)

    def __repr__(self) -> str:
        return f"Axis(value={self.value}, deadzones={self._deadzones})"
