# pciinfo/headers/specialized.py
from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Dict, Optional, Tuple, Type, Union

from ..errors import UnknownHeaderType
from .buffer import RegisterBuffer
from .common import COMMON_HEADER_LEN

HEADER_TYPE_MASK = 0x7F

U32 = "u32"
U16_LO = "u16_lo"
U16_HI = "u16_hi"
U8 = "u8"


class HeaderType(IntEnum):
    GENERIC_DEVICE = 0
    PCI_TO_PCI_BRIDGE = 1
    PCI_TO_CARDBUS_BRIDGE = 2


@dataclass(frozen=True)
class FieldSpec:
    """One row of a header layout: where a field lives and how wide it is.

    `count` > 1 reads that many consecutive u32 registers into a tuple.
    """

    name: str
    register: int
    width: str
    lane: int = 0
    count: int = 1

    def read(self, buf: RegisterBuffer):
        if self.count > 1:
            return tuple(buf.read_u32(self.register + i) for i in range(self.count))
        if self.width == U32:
            return buf.read_u32(self.register)
        if self.width == U16_LO:
            return buf.read_u16_lo(self.register)
        if self.width == U16_HI:
            return buf.read_u16_hi(self.register)
        return buf.read_u8(self.register, self.lane)


class _LayoutHeader:
    ID: ClassVar[int]
    LENGTH: ClassVar[int]
    LAYOUT: ClassVar[Tuple[FieldSpec, ...]]
    FIRST_REGISTER: ClassVar[int] = COMMON_HEADER_LEN // 4

    @classmethod
    def last_register(cls) -> int:
        return cls.LENGTH // 4 - 1

    @classmethod
    def from_buffer(cls, buf: RegisterBuffer):
        buf.assert_available(cls.FIRST_REGISTER, cls.last_register())
        return cls(**{f.name: f.read(buf) for f in cls.LAYOUT})

    @property
    def subsystem_ids(self) -> Optional[Tuple[int, int]]:
        """(subsystem vendor, subsystem device), or None for headers without them."""
        return None


@dataclass(frozen=True)
class GenericDeviceHeader(_LayoutHeader):
    """
        reg  off   31-24        23-16        15-8           7-0
        0x4  0x10  Base address #0 .. #5 (0x4 - 0x9)
        0xA  0x28  Cardbus CIS pointer
        0xB  0x2C  Subsystem ID              Subsystem vendor ID
        0xC  0x30  Expansion ROM base address
        0xD  0x34  Reserved                                 Capabilities ptr
        0xE  0x38  Reserved
        0xF  0x3C  Max latency  Min grant    Interrupt pin  Interrupt line
    """

    ID: ClassVar[int] = HeaderType.GENERIC_DEVICE
    LENGTH: ClassVar[int] = 64
    LAYOUT: ClassVar[Tuple[FieldSpec, ...]] = (
        FieldSpec("base_addr", 0x4, U32, count=6),
        FieldSpec("cardbus_cis_ptr", 0xA, U32),
        FieldSpec("subsystem_device_id", 0xB, U16_HI),
        FieldSpec("subsystem_vendor_id", 0xB, U16_LO),
        FieldSpec("expansion_rom_base_addr", 0xC, U32),
        FieldSpec("capabilities_ptr", 0xD, U8, 0),
        FieldSpec("max_latency", 0xF, U8, 3),
        FieldSpec("min_grant", 0xF, U8, 2),
        FieldSpec("interrupt_pin", 0xF, U8, 1),
        FieldSpec("interrupt_line", 0xF, U8, 0),
    )

    base_addr: Tuple[int, ...]
    cardbus_cis_ptr: int
    subsystem_device_id: int
    subsystem_vendor_id: int
    expansion_rom_base_addr: int
    capabilities_ptr: int
    max_latency: int
    min_grant: int
    interrupt_pin: int
    interrupt_line: int

    @property
    def subsystem_ids(self) -> Optional[Tuple[int, int]]:
        return (self.subsystem_vendor_id, self.subsystem_device_id)


@dataclass(frozen=True)
class PciToPciBridgeHeader(_LayoutHeader):
    """
        reg  off   31-24        23-16        15-8           7-0
        0x4  0x10  Base address #0, #1 (0x4 - 0x5)
        0x6  0x18  Sec. lat.    Subord. bus  Secondary bus  Primary bus
        0x7  0x1C  Secondary status          I/O limit      I/O base
        0x8  0x20  Memory limit              Memory base
        0x9  0x24  Prefetchable mem limit    Prefetchable mem base
        0xA  0x28  Prefetchable base upper 32 bits
        0xB  0x2C  Prefetchable limit upper 32 bits
        0xC  0x30  I/O limit upper 16 bits   I/O base upper 16 bits
        0xD  0x34  Reserved                                 Capabilities ptr
        0xE  0x38  Expansion ROM base address
        0xF  0x3C  Bridge control            Interrupt pin  Interrupt line
    """

    ID: ClassVar[int] = HeaderType.PCI_TO_PCI_BRIDGE
    LENGTH: ClassVar[int] = 64
    LAYOUT: ClassVar[Tuple[FieldSpec, ...]] = (
        FieldSpec("base_addr", 0x4, U32, count=2),
        FieldSpec("secondary_latency_timer", 0x6, U8, 3),
        FieldSpec("subordinate_bus_number", 0x6, U8, 2),
        FieldSpec("secondary_bus_number", 0x6, U8, 1),
        FieldSpec("primary_bus_number", 0x6, U8, 0),
        FieldSpec("secondary_status", 0x7, U16_HI),
        FieldSpec("io_limit", 0x7, U8, 1),
        FieldSpec("io_base", 0x7, U8, 0),
        FieldSpec("memory_limit", 0x8, U16_HI),
        FieldSpec("memory_base", 0x8, U16_LO),
        FieldSpec("prefetchable_memory_limit", 0x9, U16_HI),
        FieldSpec("prefetchable_memory_base", 0x9, U16_LO),
        FieldSpec("prefetchable_base_upper_32_bits", 0xA, U32),
        FieldSpec("prefetchable_limit_upper_32_bits", 0xB, U32),
        FieldSpec("io_limit_upper_16_bits", 0xC, U16_HI),
        FieldSpec("io_base_upper_16_bits", 0xC, U16_LO),
        FieldSpec("capabilities_ptr", 0xD, U8, 0),
        FieldSpec("expansion_rom_base_addr", 0xE, U32),
        FieldSpec("bridge_control", 0xF, U16_HI),
        FieldSpec("interrupt_pin", 0xF, U8, 1),
        FieldSpec("interrupt_line", 0xF, U8, 0),
    )

    base_addr: Tuple[int, ...]
    secondary_latency_timer: int
    subordinate_bus_number: int
    secondary_bus_number: int
    primary_bus_number: int
    secondary_status: int
    io_limit: int
    io_base: int
    memory_limit: int
    memory_base: int
    prefetchable_memory_limit: int
    prefetchable_memory_base: int
    prefetchable_base_upper_32_bits: int
    prefetchable_limit_upper_32_bits: int
    io_limit_upper_16_bits: int
    io_base_upper_16_bits: int
    capabilities_ptr: int
    expansion_rom_base_addr: int
    bridge_control: int
    interrupt_pin: int
    interrupt_line: int


@dataclass(frozen=True)
class PciToCardbusBridgeHeader(_LayoutHeader):
    """
        reg   off   31-24        23-16        15-8           7-0
        0x4   0x10  CardBus socket/ExCa base address
        0x5   0x14  Secondary status          Reserved       Caps list offset
        0x6   0x18  CardBus lat. Subord. bus  CardBus bus    PCI bus
        0x7   0x1C  Memory base 0, limit 0, base 1, limit 1 (0x7 - 0xA)
        0xB   0x2C  I/O base 0, limit 0, base 1, limit 1 (0xB - 0xE)
        0xF   0x3C  Bridge control            Interrupt pin  Interrupt line
        0x10  0x40  Subsystem vendor ID       Subsystem device ID
        0x11  0x44  16-bit PC Card legacy mode base address
    """

    ID: ClassVar[int] = HeaderType.PCI_TO_CARDBUS_BRIDGE
    LENGTH: ClassVar[int] = 72
    LAYOUT: ClassVar[Tuple[FieldSpec, ...]] = (
        FieldSpec("cardbus_socket_exca_base_addr", 0x4, U32),
        FieldSpec("secondary_status", 0x5, U16_HI),
        FieldSpec("offset_of_capabilities_list", 0x5, U8, 0),
        FieldSpec("cardbus_latency_timer", 0x6, U8, 3),
        FieldSpec("subordinate_bus_number", 0x6, U8, 2),
        FieldSpec("cardbus_bus_number", 0x6, U8, 1),
        FieldSpec("pci_bus_number", 0x6, U8, 0),
        FieldSpec("memory_base_addr_0", 0x7, U32),
        FieldSpec("memory_limit_0", 0x8, U32),
        FieldSpec("memory_base_addr_1", 0x9, U32),
        FieldSpec("memory_limit_1", 0xA, U32),
        FieldSpec("io_base_addr_0", 0xB, U32),
        FieldSpec("io_limit_0", 0xC, U32),
        FieldSpec("io_base_addr_1", 0xD, U32),
        FieldSpec("io_limit_1", 0xE, U32),
        FieldSpec("bridge_control", 0xF, U16_HI),
        FieldSpec("interrupt_pin", 0xF, U8, 1),
        FieldSpec("interrupt_line", 0xF, U8, 0),
        FieldSpec("subsystem_vendor_id", 0x10, U16_HI),
        FieldSpec("subsystem_device_id", 0x10, U16_LO),
        FieldSpec("pc_card_16bit_legacy_mode_base_addr", 0x11, U32),
    )

    cardbus_socket_exca_base_addr: int
    secondary_status: int
    offset_of_capabilities_list: int
    cardbus_latency_timer: int
    subordinate_bus_number: int
    cardbus_bus_number: int
    pci_bus_number: int
    memory_base_addr_0: int
    memory_limit_0: int
    memory_base_addr_1: int
    memory_limit_1: int
    io_base_addr_0: int
    io_limit_0: int
    io_base_addr_1: int
    io_limit_1: int
    bridge_control: int
    interrupt_pin: int
    interrupt_line: int
    subsystem_vendor_id: int
    subsystem_device_id: int
    pc_card_16bit_legacy_mode_base_addr: int

    @property
    def subsystem_ids(self) -> Optional[Tuple[int, int]]:
        return (self.subsystem_vendor_id, self.subsystem_device_id)


SpecializedHeader = Union[
    GenericDeviceHeader, PciToPciBridgeHeader, PciToCardbusBridgeHeader
]

HEADER_TYPES: Dict[int, Type[_LayoutHeader]] = {
    GenericDeviceHeader.ID: GenericDeviceHeader,
    PciToPciBridgeHeader.ID: PciToPciBridgeHeader,
    PciToCardbusBridgeHeader.ID: PciToCardbusBridgeHeader,
}

MAX_HEADER_LEN = max(h.LENGTH for h in HEADER_TYPES.values())


def length_of_subheader(header_type: int) -> Optional[int]:
    """Total header length (common part included) for `header_type`, if known."""
    cls = HEADER_TYPES.get(header_type & HEADER_TYPE_MASK)
    return cls.LENGTH if cls is not None else None


def decode_specialized(
    header_type: int, data: bytes, includes_common_header: bool = True
) -> SpecializedHeader:
    """
    Decode the sub-header selected by `header_type`.

    `data` starts at configuration space offset 0 when `includes_common_header`
    is true, otherwise at offset 16 (the first byte after the common header).
    """
    offset = 0 if includes_common_header else COMMON_HEADER_LEN
    buf = RegisterBuffer(data, offset)
    cls = HEADER_TYPES.get(header_type & HEADER_TYPE_MASK)
    if cls is None:
        raise UnknownHeaderType(header_type)
    return cls.from_buffer(buf)
