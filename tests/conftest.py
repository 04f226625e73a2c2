# tests/conftest.py
from __future__ import annotations
import struct
from pathlib import Path
from typing import Optional
import pytest

# Intel 82371SB PIIX3 ISA bridge, first 16 bytes of its config space
PIIX3_COMMON = bytes(
    [0x86, 0x80, 0x00, 0x70, 0x03, 0, 0, 0, 0, 0, 0x01, 0x06, 0, 0, 0x80, 0]
)


def config_space(
    *,
    vendor: int,
    device: int,
    klass24: int,
    revision: int = 0x00,
    header_type: int = 0x00,
    subvendor: int = 0x0000,
    subdevice: int = 0x0000,
    irq_line: int = 0x00,
    length: Optional[int] = None,
) -> bytes:
    """Raw configuration space bytes; `length` defaults to the header's size."""
    buf = bytearray(72)
    struct.pack_into("<HH", buf, 0x00, vendor, device)
    struct.pack_into("<I", buf, 0x08, (klass24 << 8) | revision)
    buf[0x0E] = header_type

    kind = header_type & 0x7F
    if kind == 0:
        struct.pack_into("<HH", buf, 0x2C, subvendor, subdevice)
        buf[0x3C] = irq_line
        default_len = 64
    elif kind == 1:
        # primary 0, secondary 1, subordinate 1
        struct.pack_into("<BBB", buf, 0x18, 0, 1, 1)
        buf[0x3C] = irq_line
        default_len = 64
    else:
        # subsystem vendor sits in the high half on cardbus bridges
        struct.pack_into("<HH", buf, 0x40, subdevice, subvendor)
        default_len = 72

    return bytes(buf[: length if length is not None else default_len])


def devices_line(
    bdf16: int,
    vendor: int,
    device: int,
    irq: int = 0,
    driver: Optional[str] = None,
) -> str:
    """One `/proc/bus/pci/devices` line: bdf, ids, irq, 7 base addresses, 7 sizes, driver."""
    fields = [f"{bdf16:04x}", f"{vendor:04x}{device:04x}", f"{irq:x}"]
    fields += ["0"] * 14
    if driver is not None:
        fields.append(driver)
    return "\t".join(fields) + "\n"


@pytest.fixture
def fake_procfs(tmp_path: Path) -> Path:
    """
    A /proc/bus/pci tree:
        00/00.0  host bridge, generic header
        00/01.0  PCI bridge
        00/1f.3  audio device with driver and irq
        00/02.0  truncated to 8 bytes
        01/00.0  GPU whose config file stops after the common header
        devices  summary of every device above
    """
    root = tmp_path / "proc_bus_pci"
    bus0 = root / "00"
    bus1 = root / "01"
    bus0.mkdir(parents=True)
    bus1.mkdir()

    (bus0 / "00.0").write_bytes(
        config_space(vendor=0x8086, device=0x1237, klass24=0x060000, revision=0x02)
    )
    (bus0 / "01.0").write_bytes(
        config_space(vendor=0x8086, device=0x2448, klass24=0x060400, header_type=0x01)
    )
    (bus0 / "1f.3").write_bytes(
        config_space(
            vendor=0x8086,
            device=0x2668,
            klass24=0x040300,
            revision=0x04,
            header_type=0x80,
            subvendor=0x1AF4,
            subdevice=0x1100,
            irq_line=0x0B,
        )
    )
    (bus0 / "02.0").write_bytes(
        config_space(vendor=0x1234, device=0x1111, klass24=0x030000, length=8)
    )
    (bus1 / "00.0").write_bytes(
        config_space(vendor=0x10DE, device=0x1DB6, klass24=0x030200, revision=0x01, length=16)
    )

    (root / "devices").write_text(
        devices_line(0x0000, 0x8086, 0x1237)
        + devices_line(0x0008, 0x8086, 0x2448, irq=0x10, driver="pcieport")
        + devices_line(0x00FB, 0x8086, 0x2668, irq=0x0B, driver="snd_hda_intel")
        + devices_line(0x0010, 0x1234, 0x1111)
        + devices_line(0x0100, 0x10DE, 0x1DB6, irq=0x1A, driver="nvidia"),
        encoding="ascii",
    )
    return root


def write_hex_file(p: Path, value: int, width: int = 4) -> None:
    p.write_text(f"0x{value:0{width}x}\n", encoding="ascii")


def make_device_dir(
    root: Path,
    bdf: str,
    *,
    vendor: int,
    device: int,
    klass24: int,
    revision: int = 0x00,
    subvendor: int = 0x0000,
    subdevice: int = 0x0000,
    irq: int = 0,
    driver: Optional[str] = None,
    config: Optional[bytes] = None,
) -> Path:
    d = root / bdf
    d.mkdir(parents=True, exist_ok=True)
    write_hex_file(d / "vendor", vendor)
    write_hex_file(d / "device", device)
    # class file in sysfs is 24-bit hex; write as 0xHHHHHH
    write_hex_file(d / "class", klass24, width=6)
    write_hex_file(d / "revision", revision, width=2)
    write_hex_file(d / "subsystem_vendor", subvendor)
    write_hex_file(d / "subsystem_device", subdevice)
    # irq is decimal in sysfs
    (d / "irq").write_text(f"{irq}\n", encoding="ascii")
    if driver:
        drv = root.parent / "drivers" / driver
        drv.mkdir(parents=True, exist_ok=True)
        (d / "driver").symlink_to(drv, target_is_directory=True)
    if config is None:
        config = config_space(
            vendor=vendor,
            device=device,
            klass24=klass24,
            revision=revision,
            subvendor=subvendor,
            subdevice=subdevice,
        )
    (d / "config").write_bytes(config)
    return d


@pytest.fixture
def fake_sysfs(tmp_path: Path) -> Path:
    """A /sys/bus/pci/devices tree with a bridge, a GPU, a corrupt device and a non-BDF entry."""
    root = tmp_path / "sys_bus_pci" / "devices"
    root.mkdir(parents=True)

    make_device_dir(
        root,
        "0000:00:01.0",
        vendor=0x8086,
        device=0x2448,
        klass24=0x060400,
        config=config_space(
            vendor=0x8086, device=0x2448, klass24=0x060400, header_type=0x01
        ),
        driver="pcieport",
        irq=16,
    )
    make_device_dir(
        root,
        "0000:65:00.0",
        vendor=0x10DE,
        device=0x1DB6,
        klass24=0x030000,
        revision=0x01,
        subvendor=0x10DE,
        subdevice=0x1212,
        irq=130,
        driver="nvidia",
    )

    # unparsable vendor/device ids
    bad = root / "0000:67:00.0"
    bad.mkdir()
    (bad / "vendor").write_text("0xbogusvendor")
    (bad / "device").write_text("0xbogusdevice")

    # Dummy to exercise non-bdf check
    (root / "dummy").mkdir()

    return root
