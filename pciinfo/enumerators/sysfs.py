# pciinfo/enumerators/sysfs.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import Callable, Optional, TypeVar, Union

from ..device import PciDevice
from ..errors import (
    EnumerationErrorImpact,
    PciInfoError,
    PciIoError,
    ParseError,
    UnexpectedEof,
)
from ..headers import COMMON_HEADER_LEN, MAX_HEADER_LEN, decode_common, decode_specialized
from ..info import PciInfo
from ..location import PciLocation
from ..reconcile import parse_hex

logger = logging.getLogger(__name__)

SYSFS_DEVICES_DEFAULT = "/sys/bus/pci/devices"

T = TypeVar("T")


def _read_text(p: Path) -> str:
    try:
        return p.read_text(encoding="ascii", errors="ignore").strip()
    except OSError as e:
        raise PciIoError(e) from e


def _read_hex(p: Path, bits: int) -> int:
    s = _read_text(p)
    if s[:2] in ("0x", "0X"):
        s = s[2:]
    try:
        return parse_hex(s, bits)
    except ParseError:
        raise ParseError(f"{p.name}: '{s}' is not a valid u{bits}") from None


def _read_irq(p: Path) -> Optional[int]:
    s = _read_text(p)
    if not s.isdigit():
        raise ParseError(f"{p.name}: '{s}' is not a valid irq number")
    return int(s) or None


def _read_driver(d: Path) -> Optional[str]:
    link = d / "driver"
    if not link.exists():
        return None
    try:
        return link.resolve().name
    except OSError as e:
        raise PciIoError(e) from e


def _read_config(p: Path) -> bytes:
    try:
        with p.open("rb") as f:
            return f.read(MAX_HEADER_LEN)
    except OSError as e:
        raise PciIoError(e) from e


def _attempt(fn: Callable[..., T], *args) -> Union[T, PciInfoError]:
    try:
        return fn(*args)
    except PciInfoError as e:
        return e


def _is_bdf_name(name: str) -> bool:
    return ":" in name and "." in name


class LinuxSysfsPciEnumerator:
    """
    Enumerates PCI devices from `/sys/bus/pci/devices`, one directory per
    device named `ssss:bb:dd.f`.

    Unlike `/proc/bus/pci` the attribute files are readable without
    privileges, so this works where the procfs config files come back
    truncated.
    """

    def __init__(self, root: Union[str, Path] = SYSFS_DEVICES_DEFAULT):
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"LinuxSysfsPciEnumerator({str(self.root)!r})"

    def enumerate_pci(self) -> PciInfo:
        try:
            entries = sorted(self.root.iterdir())
        except OSError as e:
            raise PciIoError(e) from e

        info = PciInfo()
        for d in entries:
            if not _is_bdf_name(d.name):  # skip non-BDF entries
                continue
            try:
                location = PciLocation.parse(d.name)
            except PciInfoError as e:
                logger.debug("skipping %s: %s", d.name, e)
                info.push_error(EnumerationErrorImpact.DEVICE, e)
                continue
            try:
                info.push_device(self._read_device(d, location))
            except PciInfoError as e:
                logger.debug("cannot read %s: %s", d, e)
                info.push_error(EnumerationErrorImpact.DEVICE, e, location)
        return info

    def _read_device(self, d: Path, location: PciLocation) -> PciDevice:
        vendor = _read_hex(d / "vendor", 16)
        device = _read_hex(d / "device", 16)

        dev = PciDevice(vendor, device)
        p = dev.properties
        p.location.set_value(location)

        p.revision.set_from_checked_cast(_attempt(_read_hex, d / "revision", 32), 8)

        cls24 = _attempt(_read_hex, d / "class", 24)
        if isinstance(cls24, PciInfoError):
            p.device_class.set_error(cls24)
            p.device_subclass.set_error(cls24)
            p.device_iface.set_error(cls24)
        else:
            p.device_class.set_value((cls24 >> 16) & 0xFF)
            p.device_subclass.set_value((cls24 >> 8) & 0xFF)
            p.device_iface.set_value(cls24 & 0xFF)

        p.subsystem_vendor_id.set_from_call(_read_hex, d / "subsystem_vendor", 16)
        p.subsystem_device_id.set_from_call(_read_hex, d / "subsystem_device", 16)
        p.os_irq.set_from_call(_read_irq, d / "irq")
        p.os_driver.set_from_call(_read_driver, d)

        self._read_headers(d, dev)
        return dev

    @staticmethod
    def _read_headers(d: Path, dev: PciDevice) -> None:
        p = dev.properties
        raw = _attempt(_read_config, d / "config")
        if isinstance(raw, PciInfoError):
            p.pci_common_header.set_error(raw)
            p.pci_specialized_header.set_error(raw)
            return
        if len(raw) < COMMON_HEADER_LEN:
            err = UnexpectedEof("common header")
            p.pci_common_header.set_error(err)
            p.pci_specialized_header.set_error(err)
            return

        header = decode_common(raw)
        p.pci_common_header.set_value(header)
        p.pci_specialized_header.set_from_call(
            decode_specialized, header.header_type, raw
        )
