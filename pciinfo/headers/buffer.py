# pciinfo/headers/buffer.py
from __future__ import annotations
import struct

from ..errors import BoundsError

REGISTER_SIZE = 4

_U32 = struct.Struct("<I")
_U16 = struct.Struct("<H")


class RegisterBuffer:
    """
    Read-only view over raw configuration space bytes, addressed in 4-byte
    registers. `offset` is the byte offset in configuration space of
    `data[0]`; it must be register aligned.
    """

    __slots__ = ("_data", "_offset")

    def __init__(self, data: bytes, offset: int = 0):
        if offset < 0 or offset % REGISTER_SIZE != 0:
            raise ValueError(f"buffer offset {offset} is not register aligned")
        self._data = bytes(data)
        self._offset = offset

    def __len__(self) -> int:
        return len(self._data)

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def first_register(self) -> int:
        return self._offset // REGISTER_SIZE

    @property
    def end_register(self) -> int:
        # exclusive; trailing bytes of a partial register don't count
        return self.first_register + len(self._data) // REGISTER_SIZE

    def assert_available(self, first_register: int, last_register: int) -> None:
        if first_register < self.first_register:
            raise BoundsError(
                f"not enough bytes at start of header: register 0x{first_register:X} "
                f"precedes buffer start (register 0x{self.first_register:X})"
            )
        if last_register >= self.end_register:
            raise BoundsError(
                f"not enough bytes at end of header: register 0x{last_register:X} "
                f"requested, {len(self._data)} bytes available"
            )

    def _base(self, register: int) -> int:
        base = register * REGISTER_SIZE - self._offset
        if base < 0 or base + REGISTER_SIZE > len(self._data):
            raise BoundsError(f"register 0x{register:X} outside of buffer")
        return base

    def read_u32(self, register: int) -> int:
        return _U32.unpack_from(self._data, self._base(register))[0]

    def read_u16_lo(self, register: int) -> int:
        return _U16.unpack_from(self._data, self._base(register))[0]

    def read_u16_hi(self, register: int) -> int:
        return _U16.unpack_from(self._data, self._base(register) + 2)[0]

    def read_u8(self, register: int, lane: int) -> int:
        if not (0 <= lane < REGISTER_SIZE):
            raise ValueError(f"byte lane {lane} out of range")
        return self._data[self._base(register) + lane]
