# pciinfo/errors.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple, Union, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .location import PciBusNumber, PciLocation


class PciInfoError(Exception):
    """Base class for every error raised or stored by pciinfo."""


class ParseError(PciInfoError):
    """Text, hex or numeric data could not be interpreted."""

    def __init__(self, description: str):
        super().__init__(f"error while parsing value: {description}")
        self.description = description


class BoundsError(PciInfoError):
    """A register range was requested that the buffer does not cover."""


class UnknownHeaderType(PciInfoError):
    def __init__(self, header_type: int):
        super().__init__(f"unknown PCI header type 0x{header_type:02X}")
        self.header_type = header_type


class MissingValue(PciInfoError):
    def __init__(self, name: Optional[str] = None):
        if name is None:
            msg = "the expected value was not found"
        else:
            msg = f"the expected value for '{name}' was not found"
        super().__init__(msg)
        self.name = name


class InconsistentValue(PciInfoError):
    """Several sources reported different values for one property."""

    def __init__(self, values: Iterable[str]):
        self.values: Tuple[str, ...] = tuple(values)
        super().__init__(
            "an inconsistent value was read; considered values were: "
            + ", ".join(self.values)
        )


class UnexpectedEof(PciInfoError):
    def __init__(self, what: str = "data"):
        super().__init__(f"unexpected eof while reading {what}")


class BdfLocationOutOfRange(PciInfoError):
    def __init__(self, bus: int, device: int, function: int):
        super().__init__(
            f"the PCI location {bus:02X}:{device:02X}.{function:X} has out of range components"
        )
        self.bus = bus
        self.device = device
        self.function = function


class NoDefaultPciEnumeratorForPlatform(PciInfoError):
    def __init__(self, platform: str):
        super().__init__(f"platform '{platform}' does not support a default PCI enumerator")
        self.platform = platform


class EnumerationInterrupted(PciInfoError):
    """The record source stopped before the walk was complete."""

    def __init__(self, reason: str):
        super().__init__(f"the enumeration has been interrupted: {reason}")
        self.reason = reason


class PciIoError(PciInfoError):
    """Wraps an OSError raised while reading from a transport."""

    def __init__(self, err: OSError):
        super().__init__(f"i/o error: {err}")
        self.errno = err.errno


# ----- property access -----


class PciInfoPropertyError(Exception):
    """Raised when reading a property that does not hold a value."""


class PropertyUnsupported(PciInfoPropertyError):
    def __init__(self, name: Optional[str] = None):
        where = f" '{name}'" if name else ""
        super().__init__(f"property{where} unsupported by current enumerator")
        self.name = name


class PropertyFailed(PciInfoPropertyError):
    def __init__(self, error: PciInfoError, name: Optional[str] = None):
        where = f" '{name}'" if name else ""
        super().__init__(f"property{where} failed: {error}")
        self.error = error
        self.name = name


# ----- non-fatal enumeration errors -----


class EnumerationErrorImpact(Enum):
    # an entire bus may be missing from the results
    BUS = "bus"
    # an entire device may be missing
    DEVICE = "device"
    # some properties of some device may be missing; the device usually
    # cannot be identified anymore
    DEVICE_PROPERTIES = "device-properties"


@dataclass(frozen=True)
class DeviceEnumerationError:
    impact: EnumerationErrorImpact
    error: PciInfoError
    location: Optional[Union["PciBusNumber", "PciLocation"]] = None

    def __str__(self) -> str:
        at = f" at {self.location}" if self.location is not None else ""
        if self.impact is EnumerationErrorImpact.BUS:
            return f"pci bus enumeration error{at}: {self.error}"
        if self.impact is EnumerationErrorImpact.DEVICE:
            return f"pci device enumeration error{at}: {self.error}"
        return (
            f"an error might have caused properties to be missing "
            f"from a pci device{at}: {self.error}"
        )
