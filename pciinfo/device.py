# pciinfo/device.py
from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterator, Optional, Tuple, Union

from .classes import describe_class
from .errors import PciInfoError
from .headers import CommonHeader, PciToPciBridgeHeader, SpecializedHeader
from .location import PciLocation
from .property import PropertyField


def _prop(name: str):
    return field(default_factory=lambda: PropertyField(name))


@dataclass
class DeviceProperties:
    location: PropertyField[PciLocation] = _prop("location")
    subsystem_vendor_id: PropertyField[Optional[int]] = _prop("subsystem_vendor_id")
    subsystem_device_id: PropertyField[Optional[int]] = _prop("subsystem_device_id")
    revision: PropertyField[int] = _prop("revision")
    device_class: PropertyField[int] = _prop("device_class")
    device_subclass: PropertyField[int] = _prop("device_subclass")
    device_iface: PropertyField[int] = _prop("device_iface")
    os_irq: PropertyField[Optional[int]] = _prop("os_irq")
    os_driver: PropertyField[Optional[str]] = _prop("os_driver")
    pci_common_header: PropertyField[CommonHeader] = _prop("pci_common_header")
    pci_specialized_header: PropertyField[SpecializedHeader] = _prop(
        "pci_specialized_header"
    )

    def items(self) -> Iterator[Tuple[str, PropertyField]]:
        for f in fields(self):
            yield f.name, getattr(self, f.name)

    def __getitem__(self, name: str) -> PropertyField:
        if name not in {f.name for f in fields(self)}:
            raise KeyError(name)
        return getattr(self, name)


class PciDevice:
    """
    One enumerated PCI device.

    Only `vendor_id` and `device_id` are guaranteed; every other property
    may be unsupported by the enumerator that produced the device, or may
    have failed on its own. Accessors raise `PropertyUnsupported` or
    `PropertyFailed` in those cases.

    Note the difference between `vendor_id` and `subsystem_vendor_id`:
    the former is the maker of the chip, the latter the maker of the
    board built around it.
    """

    __slots__ = ("vendor_id", "device_id", "properties")

    def __init__(
        self,
        vendor_id: int,
        device_id: int,
        properties: Optional[DeviceProperties] = None,
    ):
        self.vendor_id = vendor_id
        self.device_id = device_id
        self.properties = properties if properties is not None else DeviceProperties()

    @classmethod
    def from_headers(
        cls,
        header: CommonHeader,
        specialized: Union[SpecializedHeader, PciInfoError, None] = None,
    ) -> "PciDevice":
        """
        Build a device from a decoded common header and the outcome of
        decoding the specialized header: the header itself, the error
        raised while decoding it, or None when it was never read.
        """
        dev = cls(header.vendor_id, header.device_id)
        p = dev.properties
        p.revision.set_value(header.revision_id)
        p.device_class.set_value(header.class_code)
        p.device_subclass.set_value(header.subclass_code)
        p.device_iface.set_value(header.prog_iface_code)
        p.pci_common_header.set_value(header)

        if specialized is None:
            return dev

        if isinstance(specialized, PciInfoError):
            p.subsystem_vendor_id.set_error(specialized)
            p.subsystem_device_id.set_error(specialized)
            p.pci_specialized_header.set_error(specialized)
            return dev

        # bridges have no subsystem ids; those fields stay unsupported
        ids = specialized.subsystem_ids
        if ids is not None:
            p.subsystem_vendor_id.set_value(ids[0])
            p.subsystem_device_id.set_value(ids[1])
        p.pci_specialized_header.set_value(specialized)
        return dev

    # ----- accessors -----
    @property
    def location(self) -> PciLocation:
        return self.properties.location.get()

    @property
    def subsystem_vendor_id(self) -> Optional[int]:
        return self.properties.subsystem_vendor_id.get()

    @property
    def subsystem_device_id(self) -> Optional[int]:
        return self.properties.subsystem_device_id.get()

    @property
    def revision(self) -> int:
        return self.properties.revision.get()

    @property
    def device_class(self) -> int:
        return self.properties.device_class.get()

    @property
    def device_subclass(self) -> int:
        return self.properties.device_subclass.get()

    @property
    def device_iface(self) -> int:
        return self.properties.device_iface.get()

    @property
    def os_irq(self) -> Optional[int]:
        return self.properties.os_irq.get()

    @property
    def os_driver(self) -> Optional[str]:
        return self.properties.os_driver.get()

    @property
    def pci_common_header(self) -> CommonHeader:
        return self.properties.pci_common_header.get()

    @property
    def pci_specialized_header(self) -> SpecializedHeader:
        return self.properties.pci_specialized_header.get()

    @property
    def is_bridge(self) -> bool:
        return isinstance(
            self.properties.pci_specialized_header.as_option(), PciToPciBridgeHeader
        )

    def device_class_name(self) -> str:
        return describe_class(
            self.device_class, self.properties.device_subclass.as_option()
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "vendor_id": f"0x{self.vendor_id:04x}",
            "device_id": f"0x{self.device_id:04x}",
        }
        for name, prop in self.properties.items():
            if name in ("pci_common_header", "pci_specialized_header"):
                continue
            if prop.is_unsupported:
                out[name] = None
            elif prop.is_failed:
                out[name] = {"error": str(prop.error)}
            else:
                out[name] = _jsonable(name, prop.get())
        return out

    def __repr__(self) -> str:
        p = self.properties
        bits = [
            repr(p.location),
            f"vendor: {self.vendor_id:04X}",
            f"device: {self.device_id:04X}",
            f"revision: {p.revision!r}",
            f"class: {p.device_class!r}",
            f"sub-class: {p.device_subclass!r}",
            f"iface-func: {p.device_iface!r}",
        ]
        if p.device_class.is_present:
            bits.append(f"({self.device_class_name()})")
        bits.append(f"subsys-vendor: {p.subsystem_vendor_id!r}")
        bits.append(f"subsys-device: {p.subsystem_device_id!r}")
        if p.os_irq.is_present:
            bits.append(f"os_irq: {p.os_irq!r}")
        if p.os_driver.is_present:
            bits.append(f"os_driver: '{p.os_driver!r}'")
        return "[ " + " ".join(bits) + " ]"


def _jsonable(name: str, value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, PciLocation):
        return str(value)
    if name == "os_irq":
        return value
    if name in ("subsystem_vendor_id", "subsystem_device_id"):
        return f"0x{value:04x}"
    return f"0x{value:02x}"
