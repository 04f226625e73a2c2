# pciinfo/enumerators/hwid.py
"""
Enumeration from Windows plug and play records.

Windows does not hand out configuration space; it describes each device
with hardware ids such as

    PCI\\VEN_8086&DEV_7000&SUBSYS_00000000&REV_00
    PCI\\VEN_8086&DEV_7000&CC_060100

and a human readable `LocationInformation`. The records come from a WMI
`Win32_PnPEntity` query or a SetupAPI walk; this module only consumes
them, so the transport is supplied by the caller.
"""

from __future__ import annotations
import logging
from typing import Any, Callable, Iterable, List, Mapping, Union

from ..errors import (
    EnumerationErrorImpact,
    EnumerationInterrupted,
    MissingValue,
    PciInfoError,
)
from ..info import PciInfo
from ..reconcile import DeviceEntry, parse_hardware_id, parse_location_information

logger = logging.getLogger(__name__)

PCI_PREFIX = "PCI\\"

Record = Mapping[str, Any]
RecordSource = Union[Iterable[Record], Callable[[], Iterable[Record]]]


def _id_list(record: Record, key: str) -> List[str]:
    value = record.get(key)
    if value is None:
        raise MissingValue(key)
    if isinstance(value, str):
        value = [value]
    return [v for v in value if isinstance(v, str)]


def read_device_entry(record: Record) -> DeviceEntry:
    """Collect every `PCI\\` hardware and compatible id of one record."""
    hwids = _id_list(record, "HardwareID")
    compids = _id_list(record, "CompatibleID")

    entry = DeviceEntry()
    for hwid in hwids + compids:
        if not hwid.startswith(PCI_PREFIX):
            continue
        parse_hardware_id(entry, hwid[len(PCI_PREFIX):])

    loc = record.get("LocationInformation")
    if isinstance(loc, str):
        entry.location.contribute_call(parse_location_information, loc)
    return entry


class HardwareIdPciEnumerator:
    """
    Builds devices out of plug and play records (mappings with
    `DeviceID`, `HardwareID`, `CompatibleID` and optionally
    `LocationInformation`). Records whose `DeviceID` is not a `PCI\\` id
    are skipped.

    `records` may be a callable; it is then called once per enumeration.
    With `location_mandatory` a record without a usable location still
    yields a device, with `location` failed rather than unsupported.
    """

    def __init__(self, records: RecordSource, location_mandatory: bool = False):
        self.records = records
        self.location_mandatory = location_mandatory

    def enumerate_pci(self) -> PciInfo:
        info = PciInfo()
        try:
            records = self.records() if callable(self.records) else self.records
            for record in records:
                self._add_record(info, record)
        except OSError as e:
            raise EnumerationInterrupted(str(e)) from e
        return info

    def _add_record(self, info: PciInfo, record: Record) -> None:
        devid = record.get("DeviceID")
        if not isinstance(devid, str) or not devid.startswith(PCI_PREFIX):
            return
        try:
            entry = read_device_entry(record)
            info.push_device(entry.into_device(self.location_mandatory))
        except PciInfoError as e:
            logger.debug("skipping %s: %s", devid, e)
            info.push_error(EnumerationErrorImpact.DEVICE, e)
