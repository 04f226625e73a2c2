"""
pciinfo: PCI configuration space decoding + device enumeration.

Public API:
    - Enumeration:
        PciInfo, PciDevice, PciLocation, default_pci_enumerator
    - Enumerators (if callers want to force one):
        LinuxProcFsPciEnumerator, ProcFsMode, LinuxSysfsPciEnumerator,
        HardwareIdPciEnumerator
    - Raw headers:
        decode_common, decode_specialized, RegisterBuffer
    - Per-property results and reconciliation:
        PropertyField, ConflictSet
"""

from __future__ import annotations

# Version from installed dist; falls back to dev string when run from source tree.
from importlib.metadata import version, PackageNotFoundError

try:  # pragma: no cover
    __version__ = version("pciinfo")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0.dev0"

# Public API re-exports
from .classes import PciDeviceClass, describe_class
from .device import DeviceProperties, PciDevice
from .errors import (
    DeviceEnumerationError,
    EnumerationErrorImpact,
    PciInfoError,
    PciInfoPropertyError,
    PropertyFailed,
    PropertyUnsupported,
)
from .headers import (
    CommonHeader,
    GenericDeviceHeader,
    PciToCardbusBridgeHeader,
    PciToPciBridgeHeader,
    RegisterBuffer,
    decode_common,
    decode_specialized,
)
from .info import PciInfo
from .location import PciBusNumber, PciLocation
from .property import PropertyField, PropertyState
from .reconcile import ConflictSet, DeviceEntry
from .enumerators import (
    HardwareIdPciEnumerator,
    LinuxProcFsPciEnumerator,
    LinuxSysfsPciEnumerator,
    PciEnumerator,
    ProcFsMode,
    default_pci_enumerator,
)

__all__ = [
    "__version__",
    # Enumeration
    "PciInfo",
    "PciDevice",
    "DeviceProperties",
    "PciLocation",
    "PciBusNumber",
    "PciEnumerator",
    "default_pci_enumerator",
    # Enumerators
    "LinuxProcFsPciEnumerator",
    "ProcFsMode",
    "LinuxSysfsPciEnumerator",
    "HardwareIdPciEnumerator",
    # Headers
    "RegisterBuffer",
    "CommonHeader",
    "GenericDeviceHeader",
    "PciToPciBridgeHeader",
    "PciToCardbusBridgeHeader",
    "decode_common",
    "decode_specialized",
    # Properties
    "PropertyField",
    "PropertyState",
    "ConflictSet",
    "DeviceEntry",
    # Classes
    "PciDeviceClass",
    "describe_class",
    # Errors
    "PciInfoError",
    "PciInfoPropertyError",
    "PropertyFailed",
    "PropertyUnsupported",
    "DeviceEnumerationError",
    "EnumerationErrorImpact",
]
