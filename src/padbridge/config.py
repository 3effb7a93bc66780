"""
Mapping profiles: YAML files describing how a device maps onto the
canonical gamepad.

Example:

    name: generic-gamepad
    deadzone_percentage: 0.05
    edge_deadzones: false
    bindings:
      - input: key:BTN_SOUTH
        target: button:SOUTH
      - input: abs:ABS_X
        target: axis:LEFT_JOYSTICK_X

Inputs are `key:<code>` or `abs:<code>`; codes are integers or evdev names.
Targets are `button:<GamepadButton>` or `axis:<GamepadAxis>`.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

import yaml

from .gamepad import GamepadAxis, GamepadButton
from .mapping import (
    DEFAULT_BUTTON_THRESHOLD,
    DEFAULT_DEADZONE_PERCENTAGE,
    MAX_DEADZONE_PERCENTAGE,
    AxisOutput,
    ButtonOutput,
    ControlKind,
    ControllerMapping,
    MappingTable,
    OutputMapping,
    RawControl,
)
from .usb_gadget import DEFAULT_GADGET_DEVICE

logger = logging.getLogger(__name__)

DEFAULT_RATE = 250


class ProfileError(ValueError):
    """Raised for malformed mapping profiles."""


def _resolve_code(kind: ControlKind, code: Union[int, str]) -> int:
    if isinstance(code, int):
        return code
    if code.isdigit():
        return int(code)

    from evdev import ecodes

    resolved = ecodes.ecodes.get(code.upper())
    if resolved is None:
        raise ProfileError(f"Unknown {kind.value} code {code!r}")
    return resolved


def parse_input(text: str) -> RawControl:
    """Parse `key:<code>` / `abs:<code>` into a raw control."""
    kind_name, sep, code = str(text).partition(":")
    if not sep or not code:
        raise ProfileError(f"Input {text!r} must look like 'key:<code>' or 'abs:<code>'")
    try:
        kind = ControlKind(kind_name.strip().lower())
    except ValueError:
        raise ProfileError(f"Input {text!r} has unknown kind {kind_name!r}") from None
    return RawControl(kind, _resolve_code(kind, code.strip()))


def parse_target(text: str) -> OutputMapping:
    """Parse `button:<name>` / `axis:<name>` into an output mapping."""
    kind, sep, name = str(text).partition(":")
    name = name.strip().upper()
    try:
        if kind == "button":
            return ButtonOutput(GamepadButton[name])
        if kind == "axis":
            return AxisOutput(GamepadAxis[name])
    except KeyError:
        raise ProfileError(f"Target {text!r} names no known {kind}") from None
    raise ProfileError(f"Target {text!r} must look like 'button:<name>' or 'axis:<name>'")


@dataclass
class Profile:
    name: str = "default"
    deadzone_percentage: float = DEFAULT_DEADZONE_PERCENTAGE
    edge_deadzones: bool = False
    center: float = 0
    button_threshold: float = DEFAULT_BUTTON_THRESHOLD
    gadget: str = DEFAULT_GADGET_DEVICE
    rate: int = DEFAULT_RATE
    bindings: List[ControllerMapping] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Profile":
        """
        Build a profile from parsed YAML.

        Raises:
            ProfileError: if a binding or setting is malformed
        """
        if not isinstance(data, dict):
            raise ProfileError("Profile must be a mapping")

        bindings = []
        for index, binding in enumerate(data.get("bindings") or []):
            if not isinstance(binding, dict) or "input" not in binding or "target" not in binding:
                raise ProfileError(f"Binding {index} needs 'input' and 'target': {binding!r}")
            bindings.append(ControllerMapping(parse_input(binding["input"]), parse_target(binding["target"])))

        try:
            profile = cls(
                name=str(data.get("name", cls.name)),
                deadzone_percentage=float(data.get("deadzone_percentage", DEFAULT_DEADZONE_PERCENTAGE)),
                edge_deadzones=bool(data.get("edge_deadzones", False)),
                center=float(data.get("center", 0)),
                button_threshold=float(data.get("button_threshold", DEFAULT_BUTTON_THRESHOLD)),
                gadget=str(data.get("gadget", DEFAULT_GADGET_DEVICE)),
                rate=int(data.get("rate", DEFAULT_RATE)),
                bindings=bindings,
            )
        except (TypeError, ValueError) as e:
            raise ProfileError(f"Invalid profile setting: {e}") from None

        if not 0 <= profile.deadzone_percentage < MAX_DEADZONE_PERCENTAGE:
            raise ProfileError(
                f"deadzone_percentage must be in [0, {MAX_DEADZONE_PERCENTAGE}), got {profile.deadzone_percentage}"
            )
        if profile.rate <= 0:
            raise ProfileError(f"rate must be positive, got {profile.rate}")
        return profile

    @classmethod
    def load(cls, path: str) -> "Profile":
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ProfileError(f"{path} is not valid YAML: {e}") from None
        profile = cls.from_dict(data or {})
        logger.info(f"Loaded profile {profile.name!r} from {path} ({len(profile.bindings)} bindings)")
        return profile

    def build_table(self) -> MappingTable:
        table = MappingTable(
            deadzone_percentage=self.deadzone_percentage,
            edge_deadzones=self.edge_deadzones,
            center=self.center,
            button_threshold=self.button_threshold,
        )
        for binding in self.bindings:
            table.map_event(binding.control, binding.output)
        return table
