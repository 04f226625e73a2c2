# pciinfo/info.py
from __future__ import annotations
from typing import TYPE_CHECKING, Iterator, List, Optional, Union

from .device import PciDevice
from .errors import DeviceEnumerationError, EnumerationErrorImpact, PciInfoError
from .location import PciBusNumber, PciLocation

if TYPE_CHECKING:  # pragma: no cover
    from .enumerators import PciEnumerator

EnumerationResult = Union[PciDevice, DeviceEnumerationError]


class PciInfo:
    """
    The outcome of one enumeration: devices and non-fatal errors, in the
    order the enumerator produced them.
    """

    def __init__(self) -> None:
        self.results: List[EnumerationResult] = []

    @classmethod
    def enumerate(cls, enumerator: Optional["PciEnumerator"] = None) -> "PciInfo":
        if enumerator is None:
            from .enumerators import default_pci_enumerator

            enumerator = default_pci_enumerator()
        return enumerator.enumerate_pci()

    def push_device(self, device: PciDevice) -> None:
        self.results.append(device)

    def push_error(
        self,
        impact: EnumerationErrorImpact,
        error: PciInfoError,
        location: Optional[Union[PciBusNumber, PciLocation]] = None,
    ) -> DeviceEnumerationError:
        err = DeviceEnumerationError(impact, error, location)
        self.results.append(err)
        return err

    def devices(self) -> List[PciDevice]:
        return [r for r in self.results if isinstance(r, PciDevice)]

    def errors(self) -> List[DeviceEnumerationError]:
        return [r for r in self.results if isinstance(r, DeviceEnumerationError)]

    def find_device(self, location: PciLocation) -> Optional[PciDevice]:
        for dev in self.devices():
            if dev.properties.location.as_option() == location:
                return dev
        return None

    def __iter__(self) -> Iterator[EnumerationResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __repr__(self) -> str:
        return (
            f"PciInfo(devices={len(self.devices())}, errors={len(self.errors())})"
        )
