# tests/test_cli.py
from __future__ import annotations
import json

from pciinfo.cli_enumpci import ProgramArgs, run

expected_stdout = """\
0000:00:00.0 8086:1237 Host bridge (rev 02)
0000:00:01.0 8086:2448 PCI bridge (rev 00) [pcieport]
0000:00:1F.3 8086:2668 Audio device (rev 04) [snd_hda_intel]
0000:01:00.0 10de:1db6 3D controller (rev 01) [nvidia]
"""


def test_cli_procfs(capsys, fake_procfs):
    args = ProgramArgs(enumerator="procfs", root=str(fake_procfs))
    assert run(args) == 0
    out, err = capsys.readouterr()
    assert out == expected_stdout
    assert "pci device enumeration error at 0000:00" in err
    assert "unexpected eof" in err


def test_cli_fastest_has_no_class(capsys, fake_procfs):
    args = ProgramArgs(enumerator="procfs-fastest", root=str(fake_procfs))
    assert run(args) == 0
    out, _ = capsys.readouterr()
    first = out.splitlines()[0]
    assert first == "0000:00:00.0 8086:1237 Unknown class"


def test_cli_sysfs_json(capsys, fake_sysfs):
    args = ProgramArgs(enumerator="sysfs", root=str(fake_sysfs), json=True)
    assert run(args) == 0
    out, err = capsys.readouterr()
    records = json.loads(out)
    assert [r["location"] for r in records] == ["0000:00:01.0", "0000:65:00.0"]
    assert records[1]["os_driver"] == "nvidia"
    assert records[1]["subsystem_device_id"] == "0x1212"
    assert "0000:67:00.0" not in out
    assert "0000:67:00.0" in err


def test_cli_missing_root(capsys, tmp_path):
    args = ProgramArgs(enumerator="sysfs", root=str(tmp_path / "nope"))
    assert run(args) == 1
    _, err = capsys.readouterr()
    assert err.startswith("pciinfo-enum: ")
