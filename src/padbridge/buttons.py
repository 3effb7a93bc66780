"""
Bit-packed button bytes.

Reports carry digital buttons as single bits. A `BitPackedButtonSet` groups
up to eight buttons, each at its own bit address, and folds their states into
one byte.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional


class ButtonSetError(ValueError):
    """Raised when a button set is assembled with invalid bit addresses."""


@dataclass
class BitPackedButton:
    name: Optional[str]
    address: int
    pressed: bool = False


class BitPackedButtonSet:
    """
    One report byte worth of buttons.

    Addresses are validated once, when the set is assembled; encoding does
    not check them again.
    """

    def __init__(self, buttons: Iterable[BitPackedButton]):
        self.buttons: List[BitPackedButton] = list(buttons)

        seen = {}
        for button in self.buttons:
            if not 0 <= button.address <= 7:
                raise ButtonSetError(f"Button {button.name!r} has address {button.address}, expected 0-7")
            if button.address in seen:
                raise ButtonSetError(
                    f"Buttons {seen[button.address]!r} and {button.name!r} share address {button.address}"
                )
            seen[button.address] = button.name

    def __iter__(self) -> Iterator[BitPackedButton]:
        return iter(self.buttons)

    def __len__(self) -> int:
        return len(self.buttons)

    def get_by_name(self, name: str) -> Optional[BitPackedButton]:
        for button in self.buttons:
            if button.name == name:
                return button
        return None

    def to_bytes_repr(self) -> int:
        """
        Fold the button states into one byte.

        Returns:
            Integer 0-255 with bit `address` set for every pressed button
        """
        value = 0
        for button in sorted(self.buttons, key=lambda b: b.address):
            value |= int(button.pressed) << button.address
        return value
