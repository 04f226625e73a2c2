# pciinfo/enumerators/procfs.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..device import PciDevice
from ..errors import (
    EnumerationErrorImpact,
    ParseError,
    PciInfoError,
    PciIoError,
    UnexpectedEof,
    UnknownHeaderType,
)
from ..headers import (
    COMMON_HEADER_LEN,
    MAX_HEADER_LEN,
    SpecializedHeader,
    decode_common,
    decode_specialized,
    length_of_subheader,
)
from ..info import PciInfo
from ..location import PciBusNumber, PciLocation
from ..reconcile import parse_hex

logger = logging.getLogger(__name__)

PROCFS_DEFAULT = "/proc/bus/pci"
DEVICES_FILE = "devices"

# field index of the bound driver name in a devices file line
_DRIVER_FIELD = 17


class ProcFsMode(Enum):
    # devices file only: location, ids, IRQ and driver
    FASTEST = "fastest"
    # config files only, common and specialized headers
    HEADERS_ONLY = "headers-only"
    # config files (common header only) plus the devices file
    SKIP_NONCOMMON_HEADERS = "skip-noncommon-headers"
    # everything
    EXHAUSTIVE = "exhaustive"


# mode -> (read config files, decode specialized headers, read devices file)
_PLANS: Dict[ProcFsMode, Tuple[bool, bool, bool]] = {
    ProcFsMode.FASTEST: (False, False, True),
    ProcFsMode.HEADERS_ONLY: (True, True, False),
    ProcFsMode.SKIP_NONCOMMON_HEADERS: (True, False, True),
    ProcFsMode.EXHAUSTIVE: (True, True, True),
}


@dataclass(frozen=True)
class DevicesFileEntry:
    """One line of `/proc/bus/pci/devices`."""

    location: PciLocation
    vendor_id: int
    device_id: int
    irq: Optional[int]
    driver: Optional[str]

    @classmethod
    def parse_line(cls, line: str) -> "DevicesFileEntry":
        fields = [s.strip() for s in line.split("\t")]
        if len(fields) < 4:
            raise ParseError("devices file line has not enough entries")

        try:
            bdf = parse_hex(fields[0], 16)
        except ParseError:
            raise ParseError(
                f"bus id in devices file is invalid hex: '{fields[0]}'"
            ) from None
        try:
            ids = parse_hex(fields[1], 32)
        except ParseError:
            raise ParseError(
                f"device+vendor id in devices file is invalid hex: '{fields[1]}'"
            ) from None

        try:
            irq: Optional[int] = parse_hex(fields[2], 32) or None
        except ParseError:
            irq = None

        driver = fields[_DRIVER_FIELD] if len(fields) > _DRIVER_FIELD else ""

        return cls(
            location=PciLocation.from_bdf_u16(bdf),
            vendor_id=ids >> 16,
            device_id=ids & 0xFFFF,
            irq=irq,
            driver=driver or None,
        )


DevicesFileResult = Union[DevicesFileEntry, PciInfoError]


def read_devices_file(path: Path) -> List[DevicesFileResult]:
    """Parse every non-blank line; a bad line becomes its error, not an exception."""
    try:
        text = path.read_text(encoding="ascii", errors="replace")
    except OSError as e:
        raise PciIoError(e) from e

    out: List[DevicesFileResult] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        try:
            out.append(DevicesFileEntry.parse_line(line))
        except PciInfoError as e:
            out.append(e)
    return out


def parse_bus_dir_name(name: str) -> PciBusNumber:
    """`bb` or `ssss:bb`."""
    seg_str, sep, bus_str = name.rpartition(":")
    try:
        bus = parse_hex(bus_str, 8)
        segment = parse_hex(seg_str, 16) if sep else 0
    except ParseError:
        raise ParseError(f"bus id is invalid hex: '{name}'") from None
    return PciBusNumber(segment, bus)


def parse_slot_and_func(name: str) -> Tuple[int, int]:
    """`dd.f`."""
    slot_str, sep, func_str = name.partition(".")
    if not sep:
        raise ParseError(f"slot id is invalid pattern, hh.h expected: '{name}'")
    try:
        slot = parse_hex(slot_str, 8)
    except ParseError:
        raise ParseError(f"slot id is invalid hex: '{slot_str}'") from None
    try:
        func = parse_hex(func_str, 8)
    except ParseError:
        raise ParseError(f"func id is invalid hex: '{func_str}'") from None
    return slot, func


class LinuxProcFsPciEnumerator:
    """
    Enumerates PCI devices from the Linux `/proc/bus/pci` tree.

    The tree holds one directory per bus with one raw configuration
    space file per device, plus a `devices` summary file that also
    carries the IRQ and the bound driver.
    """

    def __init__(
        self,
        mode: ProcFsMode = ProcFsMode.EXHAUSTIVE,
        root: Union[str, Path] = PROCFS_DEFAULT,
    ):
        self.mode = mode
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"LinuxProcFsPciEnumerator({self.mode.name}, {str(self.root)!r})"

    def enumerate_pci(self) -> PciInfo:
        read_headers, read_extended, read_devices = _PLANS[self.mode]

        try:
            entries_in_root = sorted(self.root.iterdir())
        except OSError as e:
            raise PciIoError(e) from e

        info = PciInfo()

        if not read_headers:
            # nothing to fall back on: an unreadable devices file is fatal here
            for entry in read_devices_file(self.root / DEVICES_FILE):
                if isinstance(entry, PciInfoError):
                    info.push_error(EnumerationErrorImpact.DEVICE, entry)
                else:
                    info.push_device(_device_from_entry(entry))
            return info

        for path in entries_in_root:
            if not path.is_dir():
                continue
            try:
                self._read_bus_directory(path, info, read_extended)
            except PciInfoError as e:
                logger.warning("skipping bus directory %s: %s", path.name, e)
                info.push_error(EnumerationErrorImpact.BUS, e)

        if read_devices:
            try:
                entries = read_devices_file(self.root / DEVICES_FILE)
            except PciIoError as e:
                logger.warning("cannot read %s: %s", self.root / DEVICES_FILE, e)
                for dev in info.devices():
                    dev.properties.os_irq.set_error(e)
                    dev.properties.os_driver.set_error(e)
            else:
                _merge_devices_file(info, entries)

        return info

    def _read_bus_directory(
        self, path: Path, info: PciInfo, read_extended: bool
    ) -> None:
        bus = parse_bus_dir_name(path.name)
        try:
            files = sorted(path.iterdir())
        except OSError as e:
            raise PciIoError(e) from e

        for f in files:
            if not f.is_file():
                continue
            try:
                info.push_device(_read_config_file(f, bus, read_extended))
            except PciInfoError as e:
                logger.debug("cannot read %s: %s", f, e)
                info.push_error(EnumerationErrorImpact.DEVICE, e, bus)


def _read_config_file(path: Path, bus: PciBusNumber, read_extended: bool) -> PciDevice:
    slot, func = parse_slot_and_func(path.name)
    location = PciLocation.with_bdf(bus.bus, slot, func, segment=bus.segment)

    try:
        with path.open("rb") as f:
            raw = f.read(MAX_HEADER_LEN)
    except OSError as e:
        raise PciIoError(e) from e

    if len(raw) < COMMON_HEADER_LEN:
        raise UnexpectedEof("common header")
    header = decode_common(raw)

    specialized: Union[SpecializedHeader, PciInfoError, None] = None
    if read_extended:
        length = length_of_subheader(header.header_type)
        if length is None:
            specialized = UnknownHeaderType(header.header_type)
        elif len(raw) < length:
            specialized = UnexpectedEof("specialized header")
        else:
            try:
                specialized = decode_specialized(header.header_type, raw[:length])
            except PciInfoError as e:
                specialized = e

    dev = PciDevice.from_headers(header, specialized)
    dev.properties.location.set_value(location)
    return dev


def _device_from_entry(entry: DevicesFileEntry) -> PciDevice:
    dev = PciDevice(entry.vendor_id, entry.device_id)
    dev.properties.location.set_value(entry.location)
    dev.properties.os_irq.set_value(entry.irq)
    dev.properties.os_driver.set_value(entry.driver)
    return dev


def _merge_devices_file(info: PciInfo, entries: List[DevicesFileResult]) -> None:
    for entry in entries:
        if isinstance(entry, PciInfoError):
            info.push_error(EnumerationErrorImpact.DEVICE_PROPERTIES, entry)
            continue
        dev = info.find_device(entry.location)
        if dev is None:
            logger.debug("devices file names %s, which has no config file", entry.location)
            continue
        dev.properties.os_irq.set_value(entry.irq)
        dev.properties.os_driver.set_value(entry.driver)
