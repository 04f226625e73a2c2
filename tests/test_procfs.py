# tests/test_procfs.py
from __future__ import annotations
import pytest

from pciinfo import PciInfo
from pciinfo.enumerators import LinuxProcFsPciEnumerator, ProcFsMode
from pciinfo.enumerators.procfs import (
    DevicesFileEntry,
    parse_bus_dir_name,
    parse_slot_and_func,
)
from pciinfo.errors import (
    EnumerationErrorImpact,
    ParseError,
    PciIoError,
    UnexpectedEof,
    UnknownHeaderType,
)
from pciinfo.headers import GenericDeviceHeader, PciToPciBridgeHeader
from pciinfo.location import PciBusNumber, PciLocation
from conftest import config_space, devices_line


def _loc(bus, dev, fn):
    return PciLocation(0, bus, dev, fn)


def test_exhaustive(fake_procfs):
    info = LinuxProcFsPciEnumerator(ProcFsMode.EXHAUSTIVE, fake_procfs).enumerate_pci()

    devs = info.devices()
    assert [str(d.location) for d in devs] == [
        "0000:00:00.0",
        "0000:00:01.0",
        "0000:00:1F.3",
        "0000:01:00.0",
    ]

    host = info.find_device(_loc(0, 0, 0))
    assert host.vendor_id == 0x8086
    assert host.device_id == 0x1237
    assert host.revision == 0x02
    assert host.device_class == 0x06
    assert host.device_subclass == 0x00
    assert host.os_irq is None
    assert host.os_driver is None
    assert isinstance(host.pci_specialized_header, GenericDeviceHeader)

    bridge = info.find_device(_loc(0, 1, 0))
    assert bridge.is_bridge
    assert isinstance(bridge.pci_specialized_header, PciToPciBridgeHeader)
    # bridges carry no subsystem ids
    assert bridge.properties.subsystem_vendor_id.is_unsupported
    assert bridge.properties.subsystem_device_id.is_unsupported
    assert bridge.os_driver == "pcieport"
    assert bridge.os_irq == 0x10

    audio = info.find_device(_loc(0, 0x1F, 3))
    assert audio.pci_common_header.is_multi_function
    assert audio.subsystem_vendor_id == 0x1AF4
    assert audio.subsystem_device_id == 0x1100
    assert audio.os_irq == 0x0B
    assert audio.os_driver == "snd_hda_intel"
    assert audio.device_class_name() == "Audio device"

    # common header decoded, specialized header cut short
    gpu = info.find_device(_loc(1, 0, 0))
    assert gpu.device_class == 0x03
    assert gpu.os_driver == "nvidia"
    assert isinstance(gpu.properties.pci_specialized_header.error, UnexpectedEof)
    assert isinstance(gpu.properties.subsystem_vendor_id.error, UnexpectedEof)

    errors = info.errors()
    assert len(errors) == 1
    assert errors[0].impact is EnumerationErrorImpact.DEVICE
    assert isinstance(errors[0].error, UnexpectedEof)
    assert errors[0].location == PciBusNumber(0, 0)


def test_headers_only_leaves_os_properties_unsupported(fake_procfs):
    info = LinuxProcFsPciEnumerator(ProcFsMode.HEADERS_ONLY, fake_procfs).enumerate_pci()
    audio = info.find_device(_loc(0, 0x1F, 3))
    assert audio.subsystem_vendor_id == 0x1AF4
    assert audio.properties.os_irq.is_unsupported
    assert audio.properties.os_driver.is_unsupported


def test_skip_noncommon_headers(fake_procfs):
    info = LinuxProcFsPciEnumerator(
        ProcFsMode.SKIP_NONCOMMON_HEADERS, fake_procfs
    ).enumerate_pci()
    audio = info.find_device(_loc(0, 0x1F, 3))
    assert audio.revision == 0x04
    assert audio.os_driver == "snd_hda_intel"
    assert audio.properties.subsystem_vendor_id.is_unsupported
    assert audio.properties.pci_specialized_header.is_unsupported
    # the short specialized header is not read, so the gpu is clean
    gpu = info.find_device(_loc(1, 0, 0))
    assert gpu.properties.pci_specialized_header.is_unsupported


def test_unknown_header_type_keeps_common_header(fake_procfs):
    (fake_procfs / "00" / "03.0").write_bytes(
        config_space(vendor=0x1B36, device=0x0005, klass24=0x00FF00, header_type=0x05)
    )
    info = LinuxProcFsPciEnumerator(ProcFsMode.HEADERS_ONLY, fake_procfs).enumerate_pci()
    odd = info.find_device(_loc(0, 3, 0))
    assert odd.vendor_id == 0x1B36
    assert odd.pci_common_header.header_type == 0x05
    err = odd.properties.pci_specialized_header.error
    assert isinstance(err, UnknownHeaderType)
    assert err.header_type == 0x05
    assert odd.properties.subsystem_vendor_id.error is err


def test_fastest_reads_devices_file_only(fake_procfs):
    info = LinuxProcFsPciEnumerator(ProcFsMode.FASTEST, fake_procfs).enumerate_pci()
    devs = info.devices()
    assert len(devs) == 5
    assert info.errors() == []
    truncated = info.find_device(_loc(0, 2, 0))
    assert truncated.vendor_id == 0x1234
    assert truncated.properties.revision.is_unsupported
    assert info.find_device(_loc(1, 0, 0)).os_irq == 0x1A


def test_fastest_bad_line_is_device_error(fake_procfs):
    (fake_procfs / "devices").write_text(
        devices_line(0x0000, 0x8086, 0x1237) + "zzzz\t80861237\t0\t0\n",
        encoding="ascii",
    )
    info = LinuxProcFsPciEnumerator(ProcFsMode.FASTEST, fake_procfs).enumerate_pci()
    assert len(info.devices()) == 1
    (err,) = info.errors()
    assert err.impact is EnumerationErrorImpact.DEVICE
    assert isinstance(err.error, ParseError)


def test_exhaustive_bad_line_is_device_properties_error(fake_procfs):
    with (fake_procfs / "devices").open("a", encoding="ascii") as f:
        f.write("0000\n")
    info = LinuxProcFsPciEnumerator(ProcFsMode.EXHAUSTIVE, fake_procfs).enumerate_pci()
    impacts = [e.impact for e in info.errors()]
    assert EnumerationErrorImpact.DEVICE_PROPERTIES in impacts


def test_missing_devices_file_fails_os_properties(fake_procfs):
    (fake_procfs / "devices").unlink()
    info = LinuxProcFsPciEnumerator(ProcFsMode.EXHAUSTIVE, fake_procfs).enumerate_pci()
    for dev in info.devices():
        assert isinstance(dev.properties.os_irq.error, PciIoError)
        assert isinstance(dev.properties.os_driver.error, PciIoError)
        assert dev.device_class is not None

    with pytest.raises(PciIoError):
        LinuxProcFsPciEnumerator(ProcFsMode.FASTEST, fake_procfs).enumerate_pci()


def test_bad_bus_directory_is_bus_error(fake_procfs):
    (fake_procfs / "not-a-bus").mkdir()
    info = LinuxProcFsPciEnumerator(ProcFsMode.HEADERS_ONLY, fake_procfs).enumerate_pci()
    bus_errors = [e for e in info.errors() if e.impact is EnumerationErrorImpact.BUS]
    assert len(bus_errors) == 1
    assert len(info.devices()) == 4


def test_segment_bus_directory(fake_procfs):
    (fake_procfs / "01").rename(fake_procfs / "0001:01")
    info = LinuxProcFsPciEnumerator(ProcFsMode.HEADERS_ONLY, fake_procfs).enumerate_pci()
    assert info.find_device(PciLocation(1, 1, 0, 0)) is not None


def test_missing_root_raises(tmp_path):
    with pytest.raises(PciIoError):
        LinuxProcFsPciEnumerator(root=tmp_path / "nope").enumerate_pci()


def test_pci_info_enumerate_with_explicit_enumerator(fake_procfs):
    info = PciInfo.enumerate(LinuxProcFsPciEnumerator(root=fake_procfs))
    assert len(info) == len(info.devices()) + len(info.errors())
    assert list(info) == info.results


def test_devices_file_entry_parse():
    e = DevicesFileEntry.parse_line(devices_line(0x00FB, 0x8086, 0x2668, 0x0B, "snd"))
    assert e.location == PciLocation(0, 0, 0x1F, 3)
    assert (e.vendor_id, e.device_id) == (0x8086, 0x2668)
    assert e.irq == 0x0B
    assert e.driver == "snd"

    e = DevicesFileEntry.parse_line(devices_line(0x0008, 0x8086, 0x2448))
    assert e.irq is None
    assert e.driver is None

    with pytest.raises(ParseError):
        DevicesFileEntry.parse_line("0008\t80862448")


def test_name_parsers():
    assert parse_bus_dir_name("0a") == PciBusNumber(0, 0x0A)
    assert parse_bus_dir_name("0001:0a") == PciBusNumber(1, 0x0A)
    assert parse_slot_and_func("1f.3") == (0x1F, 3)
    with pytest.raises(ParseError):
        parse_bus_dir_name("devices")
    with pytest.raises(ParseError):
        parse_slot_and_func("1f")
    with pytest.raises(ParseError):
        parse_slot_and_func("1f.x")
