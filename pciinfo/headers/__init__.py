"""
Raw PCI configuration space headers.

Decoding starts from the common header; its `header_type` selects the
specialized header:

    common = decode_common(config_bytes)
    specialized = decode_specialized(common.header_type, config_bytes)

The two calls are independent: a failure decoding the specialized part
says nothing about the common part.
"""

from __future__ import annotations

from .buffer import REGISTER_SIZE, RegisterBuffer
from .common import COMMON_HEADER_LEN, CommonHeader, decode_common
from .specialized import (
    HEADER_TYPES,
    MAX_HEADER_LEN,
    FieldSpec,
    GenericDeviceHeader,
    HeaderType,
    PciToCardbusBridgeHeader,
    PciToPciBridgeHeader,
    SpecializedHeader,
    decode_specialized,
    length_of_subheader,
)

__all__ = [
    "REGISTER_SIZE",
    "RegisterBuffer",
    "COMMON_HEADER_LEN",
    "CommonHeader",
    "decode_common",
    "HEADER_TYPES",
    "MAX_HEADER_LEN",
    "FieldSpec",
    "GenericDeviceHeader",
    "HeaderType",
    "PciToCardbusBridgeHeader",
    "PciToPciBridgeHeader",
    "SpecializedHeader",
    "decode_specialized",
    "length_of_subheader",
]
