# pciinfo/property.py
from __future__ import annotations
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from .errors import (
    ParseError,
    PciInfoError,
    PropertyFailed,
    PropertyUnsupported,
)

T = TypeVar("T")


class PropertyState(Enum):
    UNSUPPORTED = "unsupported"
    PRESENT = "present"
    FAILED = "failed"


class PropertyField(Generic[T]):
    """
    A single device property that is, independently of every other one,
    either present, unsupported by the source in use, or failed.

    Fields start unsupported. Setters overwrite unconditionally; readers
    never raise anything but `PropertyUnsupported` / `PropertyFailed`.
    """

    __slots__ = ("name", "_state", "_value", "_error")

    def __init__(self, name: Optional[str] = None):
        self.name = name
        self._state = PropertyState.UNSUPPORTED
        self._value: Optional[T] = None
        self._error: Optional[PciInfoError] = None

    # ----- constructors -----
    @classmethod
    def with_value(cls, value: T, name: Optional[str] = None) -> "PropertyField[T]":
        f: PropertyField[T] = cls(name)
        f.set_value(value)
        return f

    @classmethod
    def with_error(
        cls, error: PciInfoError, name: Optional[str] = None
    ) -> "PropertyField[T]":
        f: PropertyField[T] = cls(name)
        f.set_error(error)
        return f

    @classmethod
    def with_result(
        cls, result: Union[T, PciInfoError], name: Optional[str] = None
    ) -> "PropertyField[T]":
        f: PropertyField[T] = cls(name)
        f.set_from_result(result)
        return f

    # ----- setters -----
    def set_value(self, value: T) -> None:
        self._state = PropertyState.PRESENT
        self._value = value
        self._error = None

    def set_error(self, error: PciInfoError) -> None:
        self._state = PropertyState.FAILED
        self._value = None
        self._error = error

    def set_from_result(self, result: Union[T, PciInfoError]) -> None:
        """Store `result` as the error it is, or as a value otherwise."""
        if isinstance(result, PciInfoError):
            self.set_error(result)
        else:
            self.set_value(result)

    def set_from_call(self, fn: Callable[..., T], *args: Any) -> None:
        try:
            value = fn(*args)
        except PciInfoError as e:
            self.set_error(e)
        else:
            self.set_value(value)

    def set_from_checked_cast(
        self, result: Union[int, PciInfoError], bits: int, signed: bool = False
    ) -> None:
        """Narrow an integer result to `bits`; out of range values fail."""
        if isinstance(result, PciInfoError):
            self.set_error(result)
            return
        if signed:
            lo, hi = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
            tname = f"i{bits}"
        else:
            lo, hi = 0, (1 << bits) - 1
            tname = f"u{bits}"
        if isinstance(result, bool) or not isinstance(result, int):
            self.set_error(ParseError(f"Value {result!r} cannot fit into a {tname}"))
        elif not (lo <= result <= hi):
            self.set_error(ParseError(f"Value {result} cannot fit into a {tname}"))
        else:
            self.set_value(result)  # type: ignore[arg-type]

    # ----- readers -----
    @property
    def state(self) -> PropertyState:
        return self._state

    @property
    def error(self) -> Optional[PciInfoError]:
        return self._error

    @property
    def is_present(self) -> bool:
        return self._state is PropertyState.PRESENT

    @property
    def is_unsupported(self) -> bool:
        return self._state is PropertyState.UNSUPPORTED

    @property
    def is_failed(self) -> bool:
        return self._state is PropertyState.FAILED

    def get(self) -> T:
        if self._state is PropertyState.PRESENT:
            return self._value  # type: ignore[return-value]
        if self._state is PropertyState.FAILED:
            assert self._error is not None
            raise PropertyFailed(self._error, self.name) from self._error
        raise PropertyUnsupported(self.name)

    def get_or(self, default: T) -> T:
        return self._value if self.is_present else default  # type: ignore[return-value]

    def as_option(self) -> Optional[T]:
        return self._value if self.is_present else None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PropertyField):
            return NotImplemented
        return (self._state, self._value, self._error) == (
            other._state,
            other._value,
            other._error,
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self._state is PropertyState.UNSUPPORTED:
            return "n/a"
        if self._state is PropertyState.FAILED:
            return "ERROR"
        return format_value(self._value)


def format_value(value: Any) -> str:
    if value is None:
        return "none"
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return f"{value:04X}" if value > 0xFF else f"{value:02X}"
    if isinstance(value, str):
        return value
    return str(value)
