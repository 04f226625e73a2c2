# pciinfo/location.py
from __future__ import annotations
from dataclasses import dataclass

from .errors import BdfLocationOutOfRange, ParseError


@dataclass(frozen=True, slots=True, order=True)
class PciBusNumber:
    segment: int
    bus: int

    def __str__(self) -> str:
        return f"{self.segment:04X}:{self.bus:02X}"


@dataclass(frozen=True, slots=True, order=True)
class PciLocation:
    """A segment:bus:device.function tuple.

    The segment (PCI domain) is zero on nearly every system and most
    enumerators cannot report anything else.
    """

    segment: int
    bus: int
    device: int
    function: int

    @classmethod
    def with_bdf(
        cls, bus: int, device: int, function: int, segment: int = 0
    ) -> "PciLocation":
        if not (0 <= device < 32) or not (0 <= function < 8):
            raise BdfLocationOutOfRange(bus, device, function)
        if not (0 <= bus < 256) or not (0 <= segment < 0x10000):
            raise BdfLocationOutOfRange(bus, device, function)
        return cls(segment, bus, device, function)

    @classmethod
    def from_bdf_u16(cls, bdf: int, segment: int = 0) -> "PciLocation":
        # bus in the high byte, then 5 bits of device and 3 of function
        return cls(segment, (bdf >> 8) & 0xFF, (bdf & 0xF8) >> 3, bdf & 0x7)

    @classmethod
    def parse(cls, s: str) -> "PciLocation":
        """Parse `ssss:bb:dd.f` (or `bb:dd.f`) as found in sysfs names."""
        try:
            head, func = s.strip().rsplit(".", 1)
            parts = head.split(":")
            if len(parts) == 2:
                parts.insert(0, "0")
            if len(parts) != 3:
                raise ValueError(s)
            seg, bus, dev = (int(p, 16) for p in parts)
            fn = int(func, 16)
        except ValueError:
            raise ParseError(f"'{s}' is not a PCI location") from None
        return cls.with_bdf(bus, dev, fn, segment=seg)

    @property
    def bus_number(self) -> PciBusNumber:
        return PciBusNumber(self.segment, self.bus)

    def __str__(self) -> str:
        return f"{self.segment:04X}:{self.bus:02X}:{self.device:02X}.{self.function:X}"
