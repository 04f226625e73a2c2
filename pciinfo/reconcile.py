# pciinfo/reconcile.py
"""
Reconciliation of repeated contributions for one device property.

Some sources describe one device with several identification strings
(hardware ids and compatible ids on Windows, for example); each carries
its own copy of some fields. A `ConflictSet` collects every contribution
for one field and either settles on one value or reports the conflict.

The states are immutable and transitions are pure functions:

    Empty  --value-->  Single(v)
    Single(v) --v-->   Single(v)
    Single(v) --w-->   Conflict({v, w})
    Error(e) --value--> Single(v)
    Conflict(s) --v--> Conflict(s | {v})
    Empty  --error-->  Error(e)        (errors are ignored in any other state)
"""

from __future__ import annotations
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, FrozenSet, Generic, Hashable, Optional, TypeVar, Union

from .device import PciDevice
from .errors import (
    InconsistentValue,
    MissingValue,
    ParseError,
    PciInfoError,
)
from .location import PciLocation
from .property import PropertyField

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class Single(Generic[T]):
    value: T


@dataclass(frozen=True)
class Error:
    error: PciInfoError


@dataclass(frozen=True)
class Conflict(Generic[T]):
    values: FrozenSet[T]


ConflictState = Union[Empty, Single, Error, Conflict]

EMPTY = Empty()


def contribute(state: ConflictState, value: Any) -> ConflictState:
    if isinstance(state, Single):
        if state.value == value:
            return state
        return Conflict(frozenset((state.value, value)))
    if isinstance(state, Conflict):
        return Conflict(state.values | {value})
    # Empty, or an earlier error superseded by a real value
    return Single(value)


def contribute_error(state: ConflictState, error: PciInfoError) -> ConflictState:
    if isinstance(state, Empty):
        return Error(error)
    return state


def _conflict_error(values: FrozenSet[Any]) -> InconsistentValue:
    try:
        ordered = sorted(values)
    except TypeError:
        ordered = sorted(values, key=str)
    return InconsistentValue(_describe(v) for v in ordered)


def _describe(value: Any) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return f"0x{value:X}"
    return str(value)


def finalize_required(state: ConflictState, name: Optional[str] = None) -> Any:
    if isinstance(state, Single):
        return state.value
    if isinstance(state, Error):
        raise state.error
    if isinstance(state, Conflict):
        raise _conflict_error(state.values)
    raise MissingValue(name)


def finalize_optional(state: ConflictState) -> Any:
    if isinstance(state, Empty):
        return None
    return finalize_required(state)


class ConflictSet(Generic[T]):
    """Mutable holder of one field's reconciliation state."""

    __slots__ = ("name", "state")

    def __init__(self, name: Optional[str] = None):
        self.name = name
        self.state: ConflictState = EMPTY

    def contribute(self, value: T) -> None:
        self.state = contribute(self.state, value)

    def contribute_error(self, error: PciInfoError) -> None:
        self.state = contribute_error(self.state, error)

    def contribute_result(self, result: Union[T, PciInfoError]) -> None:
        if isinstance(result, PciInfoError):
            self.contribute_error(result)
        else:
            self.contribute(result)

    def contribute_call(self, fn: Callable[..., T], *args: Any) -> None:
        try:
            value = fn(*args)
        except PciInfoError as e:
            self.contribute_error(e)
        else:
            self.contribute(value)

    @property
    def is_empty(self) -> bool:
        return isinstance(self.state, Empty)

    def finalize_required(self) -> T:
        return finalize_required(self.state, self.name)

    def finalize_optional(self) -> Optional[T]:
        return finalize_optional(self.state)

    def __repr__(self) -> str:
        return f"ConflictSet({self.name!r}, {self.state!r})"


# ----- hex tokens -----

_HEX_RE = re.compile(r"[0-9A-Fa-f]+")


def parse_hex(value: str, bits: int) -> int:
    """Strict hex parse (digits only, no prefix or sign) into an unsigned `bits` integer."""
    if not _HEX_RE.fullmatch(value):
        raise ParseError(f"attempted to parse invalid hex: '{value}'")
    v = int(value, 16)
    if v >> bits:
        raise ParseError(f"hex value '{value}' does not fit into u{bits}")
    return v


# ----- device assembly -----


def _finalize_into(prop: PropertyField, cs: ConflictSet) -> None:
    prop.set_from_call(cs.finalize_required)


@dataclass
class DeviceEntry:
    """Accumulates the contributions for one device before it becomes a `PciDevice`."""

    vendor_id: ConflictSet[int] = field(default_factory=lambda: ConflictSet("vendor_id"))
    device_id: ConflictSet[int] = field(default_factory=lambda: ConflictSet("device_id"))
    revision: ConflictSet[int] = field(default_factory=lambda: ConflictSet("revision"))
    subsystem: ConflictSet[int] = field(default_factory=lambda: ConflictSet("subsystem"))
    class_code_long: ConflictSet[int] = field(
        default_factory=lambda: ConflictSet("class_code")
    )
    class_code_short: ConflictSet[int] = field(
        default_factory=lambda: ConflictSet("class_code")
    )
    location: ConflictSet[PciLocation] = field(
        default_factory=lambda: ConflictSet("location")
    )

    def into_device(self, location_mandatory: bool = False) -> PciDevice:
        """
        Finalize every field. Raises if vendor or device id cannot be
        settled; any other field failure stays local to that field.
        """
        vendor_id = self.vendor_id.finalize_required()
        device_id = self.device_id.finalize_required()

        dev = PciDevice(vendor_id, device_id)
        p = dev.properties

        _finalize_into(p.revision, self.revision)

        try:
            cc = self.class_code_long.finalize_required()
        except PciInfoError as long_err:
            try:
                cc = self.class_code_short.finalize_required()
            except PciInfoError:
                for prop in (p.device_class, p.device_subclass, p.device_iface):
                    prop.set_error(long_err)
            else:
                p.device_class.set_value((cc >> 8) & 0xFF)
                p.device_subclass.set_value(cc & 0xFF)
                p.device_iface.set_error(MissingValue("device_iface"))
        else:
            p.device_class.set_value((cc >> 16) & 0xFF)
            p.device_subclass.set_value((cc >> 8) & 0xFF)
            p.device_iface.set_value(cc & 0xFF)

        try:
            subsys = self.subsystem.finalize_optional()
        except PciInfoError as e:
            p.subsystem_vendor_id.set_error(e)
            p.subsystem_device_id.set_error(e)
        else:
            if subsys is None:
                p.subsystem_vendor_id.set_value(None)
                p.subsystem_device_id.set_value(None)
            else:
                p.subsystem_vendor_id.set_value(subsys >> 16)
                p.subsystem_device_id.set_value(subsys & 0xFFFF)

        if location_mandatory or not self.location.is_empty:
            _finalize_into(p.location, self.location)

        return dev


def parse_hardware_id(entry: DeviceEntry, hwid: str) -> None:
    """
    Feed the `&`-separated tokens of one hardware id (without its `PCI\\`
    prefix), e.g. `VEN_8086&DEV_7000&SUBSYS_00000000&REV_00&CC_060100`.
    Unknown keys and tokens without `_` are ignored.
    """
    for token in hwid.split("&"):
        key, sep, value = token.partition("_")
        if not sep:
            continue
        if key == "VEN":
            entry.vendor_id.contribute_call(parse_hex, value, 16)
        elif key == "DEV":
            entry.device_id.contribute_call(parse_hex, value, 16)
        elif key == "SUBSYS":
            entry.subsystem.contribute_call(parse_hex, value, 32)
        elif key == "REV":
            entry.revision.contribute_call(parse_hex, value, 8)
        elif key == "CC" and len(value) <= 4:
            entry.class_code_short.contribute_call(parse_hex, value, 16)
        elif key == "CC":
            entry.class_code_long.contribute_call(parse_hex, value, 24)
        else:
            logger.debug("ignoring hardware id token %r", token)


_LOCATION_NUMBERS = re.compile(r"\d+")


def parse_location_information(text: str) -> PciLocation:
    """Parse SetupAPI style `PCI bus 0, device 31, function 3`."""
    parts = [p for p in text.split(",")]
    nums = []
    for p in parts:
        m = _LOCATION_NUMBERS.findall(p)
        if len(m) == 1:
            nums.append(int(m[0]))
    if len(nums) != 3:
        raise ParseError(
            f"Expected 3 integer elements in pci location, found {len(nums)} in '{text}'"
        )
    return PciLocation.with_bdf(nums[0], nums[1], nums[2])
