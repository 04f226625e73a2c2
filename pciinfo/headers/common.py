# pciinfo/headers/common.py
from __future__ import annotations
from dataclasses import dataclass

from .buffer import RegisterBuffer

COMMON_HEADER_LEN = 16


@dataclass(frozen=True, slots=True)
class CommonHeader:
    """
    The first 16 bytes of configuration space, laid out identically for
    every device.

        reg  off   31-24        23-16        15-8           7-0
        0x0  0x0   Device ID                 Vendor ID
        0x1  0x4   Status                    Command
        0x2  0x8   Class code   Subclass     Prog IF        Revision ID
        0x3  0xC   BIST         Header type  Latency timer  Cache line size
    """

    vendor_id: int
    device_id: int
    status: int
    command: int
    class_code: int
    subclass_code: int
    prog_iface_code: int
    revision_id: int
    bist: int
    header_type: int
    latency_timer: int
    cache_line_size: int

    @classmethod
    def from_bytes(cls, data: bytes) -> "CommonHeader":
        return cls.from_buffer(RegisterBuffer(data, 0))

    @classmethod
    def from_buffer(cls, buf: RegisterBuffer) -> "CommonHeader":
        buf.assert_available(0, 3)
        return cls(
            vendor_id=buf.read_u16_lo(0),
            device_id=buf.read_u16_hi(0),
            command=buf.read_u16_lo(1),
            status=buf.read_u16_hi(1),
            revision_id=buf.read_u8(2, 0),
            prog_iface_code=buf.read_u8(2, 1),
            subclass_code=buf.read_u8(2, 2),
            class_code=buf.read_u8(2, 3),
            cache_line_size=buf.read_u8(3, 0),
            latency_timer=buf.read_u8(3, 1),
            header_type=buf.read_u8(3, 2),
            bist=buf.read_u8(3, 3),
        )

    @property
    def is_multi_function(self) -> bool:
        return bool(self.header_type & 0x80)


def decode_common(data: bytes) -> CommonHeader:
    return CommonHeader.from_bytes(data)
