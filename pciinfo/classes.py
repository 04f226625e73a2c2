# pciinfo/classes.py
from __future__ import annotations

import enum
from typing import Dict, Optional, Tuple


class PciDeviceClass(enum.IntEnum):
    # fmt: off
    UNCLASSIFIED                = 0x00
    MASS_STORAGE_CONTROLLER     = 0x01
    NETWORK_CONTROLLER          = 0x02
    DISPLAY_CONTROLLER          = 0x03
    MULTIMEDIA_CONTROLLER       = 0x04
    MEMORY_CONTROLLER           = 0x05
    BRIDGE                      = 0x06
    COMMUNICATION_CONTROLLER    = 0x07
    BASE_SYSTEM_PERIPHERAL      = 0x08
    INPUT_DEVICE_CONTROLLER     = 0x09
    DOCKING_STATION             = 0x0A
    PROCESSOR                   = 0x0B
    SERIAL_BUS_CONTROLLER       = 0x0C
    WIRELESS_CONTROLLER         = 0x0D
    INTELLIGENT_CONTROLLER      = 0x0E
    SATELLITE_COMM_CONTROLLER   = 0x0F
    ENCRYPTION_CONTROLLER       = 0x10
    SIGNAL_PROCESSING_CONTROLLER = 0x11
    PROCESSING_ACCELERATOR      = 0x12
    NON_ESSENTIAL_INSTRUMENTATION = 0x13
    COPROCESSOR                 = 0x40
    UNASSIGNED                  = 0xFF
    # fmt: on

    @classmethod
    def from_code(cls, code: int) -> Optional["PciDeviceClass"]:
        try:
            return cls(code)
        except ValueError:
            return None


CLASS_NAMES: Dict[PciDeviceClass, str] = {
    PciDeviceClass.UNCLASSIFIED: "Unclassified device",
    PciDeviceClass.MASS_STORAGE_CONTROLLER: "Mass storage controller",
    PciDeviceClass.NETWORK_CONTROLLER: "Network controller",
    PciDeviceClass.DISPLAY_CONTROLLER: "Display controller",
    PciDeviceClass.MULTIMEDIA_CONTROLLER: "Multimedia controller",
    PciDeviceClass.MEMORY_CONTROLLER: "Memory controller",
    PciDeviceClass.BRIDGE: "Bridge",
    PciDeviceClass.COMMUNICATION_CONTROLLER: "Communication controller",
    PciDeviceClass.BASE_SYSTEM_PERIPHERAL: "Generic system peripheral",
    PciDeviceClass.INPUT_DEVICE_CONTROLLER: "Input device controller",
    PciDeviceClass.DOCKING_STATION: "Docking station",
    PciDeviceClass.PROCESSOR: "Processor",
    PciDeviceClass.SERIAL_BUS_CONTROLLER: "Serial bus controller",
    PciDeviceClass.WIRELESS_CONTROLLER: "Wireless controller",
    PciDeviceClass.INTELLIGENT_CONTROLLER: "Intelligent controller",
    PciDeviceClass.SATELLITE_COMM_CONTROLLER: "Satellite communications controller",
    PciDeviceClass.ENCRYPTION_CONTROLLER: "Encryption controller",
    PciDeviceClass.SIGNAL_PROCESSING_CONTROLLER: "Signal processing controller",
    PciDeviceClass.PROCESSING_ACCELERATOR: "Processing accelerators",
    PciDeviceClass.NON_ESSENTIAL_INSTRUMENTATION: "Non-Essential Instrumentation",
    PciDeviceClass.COPROCESSOR: "Coprocessor",
    PciDeviceClass.UNASSIGNED: "Unassigned class",
}

# (class, subclass) -> name; 0x80 is "other" in nearly every class
SUBCLASS_NAMES: Dict[Tuple[int, int], str] = {
    (0x00, 0x00): "Non-VGA unclassified device",
    (0x00, 0x01): "VGA compatible unclassified device",
    (0x01, 0x00): "SCSI storage controller",
    (0x01, 0x01): "IDE interface",
    (0x01, 0x02): "Floppy disk controller",
    (0x01, 0x03): "IPI bus controller",
    (0x01, 0x04): "RAID bus controller",
    (0x01, 0x05): "ATA controller",
    (0x01, 0x06): "SATA controller",
    (0x01, 0x07): "Serial Attached SCSI controller",
    (0x01, 0x08): "Non-Volatile memory controller",
    (0x01, 0x09): "Universal Flash Storage controller",
    (0x01, 0x80): "Mass storage controller",
    (0x02, 0x00): "Ethernet controller",
    (0x02, 0x01): "Token ring network controller",
    (0x02, 0x02): "FDDI network controller",
    (0x02, 0x03): "ATM network controller",
    (0x02, 0x04): "ISDN controller",
    (0x02, 0x05): "WorldFip controller",
    (0x02, 0x06): "PICMG controller",
    (0x02, 0x07): "Infiniband controller",
    (0x02, 0x80): "Network controller",
    (0x03, 0x00): "VGA compatible controller",
    (0x03, 0x01): "XGA compatible controller",
    (0x03, 0x02): "3D controller",
    (0x03, 0x80): "Display controller",
    (0x04, 0x00): "Multimedia video controller",
    (0x04, 0x01): "Multimedia audio controller",
    (0x04, 0x02): "Computer telephony device",
    (0x04, 0x03): "Audio device",
    (0x04, 0x80): "Multimedia controller",
    (0x05, 0x00): "RAM memory",
    (0x05, 0x01): "FLASH memory",
    (0x05, 0x02): "CXL",
    (0x05, 0x80): "Memory controller",
    (0x06, 0x00): "Host bridge",
    (0x06, 0x01): "ISA bridge",
    (0x06, 0x02): "EISA bridge",
    (0x06, 0x03): "MicroChannel bridge",
    (0x06, 0x04): "PCI bridge",
    (0x06, 0x05): "PCMCIA bridge",
    (0x06, 0x06): "NuBus bridge",
    (0x06, 0x07): "CardBus bridge",
    (0x06, 0x08): "RACEway bridge",
    (0x06, 0x09): "Semi-transparent PCI-to-PCI bridge",
    (0x06, 0x0A): "InfiniBand to PCI host bridge",
    (0x06, 0x0B): "Advanced Switching to PCI host bridge",
    (0x06, 0x80): "Bridge",
    (0x07, 0x00): "Serial controller",
    (0x07, 0x01): "Parallel controller",
    (0x07, 0x02): "Multiport serial controller",
    (0x07, 0x03): "Modem",
    (0x07, 0x04): "GPIB controller",
    (0x07, 0x05): "Smard Card controller",
    (0x07, 0x80): "Communication controller",
    (0x08, 0x00): "PIC",
    (0x08, 0x01): "DMA controller",
    (0x08, 0x02): "Timer",
    (0x08, 0x03): "RTC",
    (0x08, 0x04): "PCI Hot-plug controller",
    (0x08, 0x05): "SD Host controller",
    (0x08, 0x06): "IOMMU",
    (0x08, 0x07): "Root Complex Event Collector",
    (0x08, 0x80): "System peripheral",
    (0x09, 0x00): "Keyboard controller",
    (0x09, 0x01): "Digitizer Pen",
    (0x09, 0x02): "Mouse controller",
    (0x09, 0x03): "Scanner controller",
    (0x09, 0x04): "Gameport controller",
    (0x09, 0x80): "Input device controller",
    (0x0A, 0x00): "Generic Docking Station",
    (0x0A, 0x80): "Docking Station",
    (0x0B, 0x00): "386",
    (0x0B, 0x01): "486",
    (0x0B, 0x02): "Pentium",
    (0x0B, 0x10): "Alpha",
    (0x0B, 0x20): "Power PC",
    (0x0B, 0x30): "MIPS",
    (0x0B, 0x40): "Co-processor",
    (0x0B, 0x80): "Processor",
    (0x0C, 0x00): "FireWire (IEEE 1394)",
    (0x0C, 0x01): "ACCESS Bus",
    (0x0C, 0x02): "SSA",
    (0x0C, 0x03): "USB controller",
    (0x0C, 0x04): "Fibre Channel",
    (0x0C, 0x05): "SMBus",
    (0x0C, 0x06): "InfiniBand",
    (0x0C, 0x07): "IPMI Interface",
    (0x0C, 0x08): "SERCOS interface",
    (0x0C, 0x09): "CANBUS",
    (0x0C, 0x0A): "MIPI I3C",
    (0x0C, 0x80): "Serial bus controller",
    (0x0D, 0x00): "IRDA controller",
    (0x0D, 0x01): "Consumer IR controller",
    (0x0D, 0x10): "RF controller",
    (0x0D, 0x11): "Bluetooth",
    (0x0D, 0x12): "Broadband",
    (0x0D, 0x20): "802.1a controller",
    (0x0D, 0x21): "802.1b controller",
    (0x0D, 0x40): "Cellular controller",
    (0x0D, 0x41): "Cellular controller with Ethernet",
    (0x0D, 0x80): "Wireless controller",
    (0x0E, 0x00): "I2O",
    (0x0F, 0x01): "Satellite TV controller",
    (0x0F, 0x02): "Satellite audio communication controller",
    (0x0F, 0x03): "Satellite voice communication controller",
    (0x0F, 0x04): "Satellite data communication controller",
    (0x0F, 0x80): "Satellite communications controller",
    (0x10, 0x00): "Network and computing encryption device",
    (0x10, 0x10): "Entertainment encryption device",
    (0x10, 0x80): "Encryption controller",
    (0x11, 0x00): "DPIO module",
    (0x11, 0x01): "Performance counters",
    (0x11, 0x10): "Communication synchronizer",
    (0x11, 0x20): "Signal processing management",
    (0x11, 0x80): "Signal processing controller",
    (0x12, 0x00): "Processing accelerators",
    (0x12, 0x01): "SNIA Smart Data Accelerator Interface (SDXI) controller",
    (0x13, 0x00): "Non-Essential Instrumentation",
}


def class_name(code: int) -> str:
    cls = PciDeviceClass.from_code(code)
    if cls is None:
        return f"Unknown class {code:02x}"
    return CLASS_NAMES[cls]


def subclass_name(class_code: int, subclass_code: int) -> Optional[str]:
    return SUBCLASS_NAMES.get((class_code & 0xFF, subclass_code & 0xFF))


def describe_class(class_code: int, subclass_code: Optional[int] = None) -> str:
    """Most specific known name, falling back to the base class."""
    if subclass_code is not None:
        name = subclass_name(class_code, subclass_code)
        if name is not None:
            return name
    return class_name(class_code)
