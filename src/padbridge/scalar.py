"""
Numeric domains and the linear normalization between them.

Every value that moves through padbridge lives in one of a handful of
numeric domains: the raw range a device reports, the unsigned 64-bit
canonical range axes are stored in, and the byte-sized or 16-bit ranges the
output report expects. A `Scalar` describes one such domain, and
`normalize()` rescales a value from one domain into another.

Normalization never raises. Results that do not fit the target domain
saturate to its minimum or maximum.
"""

import math
import struct
from typing import Optional, Union

Number = Union[int, float]


class Scalar:
    """
    A numeric domain with fixed bounds.

    Integral domains truncate toward zero when converting from float, the
    same way a C cast would. Float domains keep the value as is (rounded to
    single precision for `F32`).
    """

    def __init__(self, name: str, minimum: Number, maximum: Number, integral: bool = True):
        self.name = name
        self.minimum = minimum
        self.maximum = maximum
        self.integral = integral

    def __repr__(self) -> str:
        return f"Scalar({self.name})"

    @property
    def midpoint(self) -> Number:
        """Exact middle of the domain, converted into the domain."""
        return self.from_float((float(self.minimum) + float(self.maximum)) / 2.0)

    def contains(self, value: Number) -> bool:
        return self.minimum <= value <= self.maximum

    def from_float(self, value: float) -> Number:
        """
        Convert an intermediate float into this domain.

        Args:
            value: Value computed in the float domain

        Returns:
            The value in this domain, saturated to minimum/maximum when it
            cannot be represented. NaN resolves to the minimum.
        """
        if math.isnan(value):
            return self.minimum

        if self.integral:
            # Anything strictly between minimum - 1 and maximum + 1 truncates
            # into range.
            if value <= self.minimum - 1:
                return self.minimum
            if value >= self.maximum + 1:
                return self.maximum
            return int(value)

        if value < self.minimum:
            return self.minimum
        if value > self.maximum:
            return self.maximum
        if self.name == "f32":
            return struct.unpack("<f", struct.pack("<f", value))[0]
        return float(value)


U8 = Scalar("u8", 0, 0xFF)
I8 = Scalar("i8", -0x80, 0x7F)
U16 = Scalar("u16", 0, 0xFFFF)
I16 = Scalar("i16", -0x8000, 0x7FFF)
U32 = Scalar("u32", 0, 0xFFFFFFFF)
I32 = Scalar("i32", -0x80000000, 0x7FFFFFFF)
U64 = Scalar("u64", 0, 0xFFFFFFFFFFFFFFFF)
I64 = Scalar("i64", -0x8000000000000000, 0x7FFFFFFFFFFFFFFF)
F32 = Scalar("f32", -3.4028234663852886e38, 3.4028234663852886e38, integral=False)
F64 = Scalar("f64", -1.7976931348623157e308, 1.7976931348623157e308, integral=False)


def scalar_of(value: Number) -> Scalar:
    """Pick the widest domain matching a Python value's type."""
    if isinstance(value, float):
        return F64
    return I64


def normalize(
    value: Number,
    source_min: Optional[Number] = None,
    source_max: Optional[Number] = None,
    target_min: Optional[Number] = None,
    target_max: Optional[Number] = None,
    source: Optional[Scalar] = None,
    target: Scalar = F64,
) -> Number:
    """
    Linearly rescale `value` from [source_min, source_max] into
    [target_min, target_max].

    Args:
        value: Value to rescale
        source_min: Lower source bound (default: source domain minimum)
        source_max: Upper source bound (default: source domain maximum)
        target_min: Lower target bound (default: target domain minimum)
        target_max: Upper target bound (default: target domain maximum)
        source: Source domain; inferred from `value` when omitted
        target: Target domain

    Returns:
        The rescaled value in the target domain. A zero-width source range
        returns the target minimum.
    """
    if source is None:
        source = scalar_of(value)

    from_min = float(source.minimum if source_min is None else source_min)
    from_max = float(source.maximum if source_max is None else source_max)
    to_min = float(target.minimum if target_min is None else target_min)
    to_max = float(target.maximum if target_max is None else target_max)

    # Work on halved bounds so spans of the float domains stay finite.
    from_half = abs(from_max / 2 - from_min / 2)
    if from_half == 0:
        return target.from_float(to_min)

    to_half = abs(to_max / 2 - to_min / 2)
    fraction = (float(value) / 2 - from_min / 2) / from_half
    return target.from_float((fraction * to_half + to_min / 2) * 2)
