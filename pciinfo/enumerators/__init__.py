# pciinfo/enumerators/__init__.py
from __future__ import annotations
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Protocol

from ..errors import NoDefaultPciEnumeratorForPlatform
from ..info import PciInfo
from .hwid import HardwareIdPciEnumerator
from .procfs import PROCFS_DEFAULT, LinuxProcFsPciEnumerator, ProcFsMode
from .sysfs import SYSFS_DEVICES_DEFAULT, LinuxSysfsPciEnumerator

logger = logging.getLogger(__name__)


class PciEnumerator(Protocol):
    def enumerate_pci(self) -> PciInfo: ...


@dataclass(frozen=True)
class Candidate:
    """One enumerator the default selection may fall back to."""

    kind: str  # one of ENUMERATOR_KINDS
    ref: str  # root path, for debugging
    opener: Callable[[], PciEnumerator]  # returns a ready enumerator, or raises


_PROCFS_MODES = {
    "procfs": ProcFsMode.EXHAUSTIVE,
    "procfs-fastest": ProcFsMode.FASTEST,
    "procfs-headers": ProcFsMode.HEADERS_ONLY,
    "procfs-common": ProcFsMode.SKIP_NONCOMMON_HEADERS,
}

ENUMERATOR_KINDS = tuple(_PROCFS_MODES) + ("sysfs",)


def _procfs_candidate(kind: str, root: str) -> Candidate:
    mode = _PROCFS_MODES[kind]

    def open_procfs() -> PciEnumerator:
        if not Path(root).is_dir():
            raise FileNotFoundError(root)
        return LinuxProcFsPciEnumerator(mode, root)

    return Candidate(kind, root, open_procfs)


def _sysfs_candidate(root: str) -> Candidate:
    def open_sysfs() -> PciEnumerator:
        if not Path(root).is_dir():
            raise FileNotFoundError(root)
        return LinuxSysfsPciEnumerator(root)

    return Candidate("sysfs", root, open_sysfs)


def _resolve_candidates(
    *,
    platform: str,
    forced: Optional[str],
    procfs_root: str,
    sysfs_root: str,
) -> List[Candidate]:
    """
    Build the ordered candidate list. Pure function -> easy to unit test:
    - `forced` (PCIINFO_ENUMERATOR) yields exactly that enumerator on any platform
    - otherwise Linux tries the exhaustive procfs reader, then sysfs
    """
    if forced:
        if forced == "sysfs":
            return [_sysfs_candidate(sysfs_root)]
        if forced in _PROCFS_MODES:
            return [_procfs_candidate(forced, procfs_root)]
        raise ValueError(
            f"PCIINFO_ENUMERATOR must be one of {', '.join(ENUMERATOR_KINDS)}, got {forced!r}"
        )

    if not platform.startswith("linux"):
        return []

    return [
        _procfs_candidate("procfs", procfs_root),
        _sysfs_candidate(sysfs_root),
    ]


# -------- public entry --------


def default_pci_enumerator(
    platform: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> PciEnumerator:
    """
    The enumerator for this platform, or raise
    `NoDefaultPciEnumeratorForPlatform`. `platform` defaults to
    `sys.platform` and `environ` to `os.environ`.
    """
    platform = sys.platform if platform is None else platform
    env = os.environ if environ is None else environ

    cands = _resolve_candidates(
        platform=platform,
        forced=env.get("PCIINFO_ENUMERATOR"),
        procfs_root=env.get("PCIINFO_PROCFS_ROOT", PROCFS_DEFAULT),
        sysfs_root=env.get("PCIINFO_SYSFS_ROOT", SYSFS_DEVICES_DEFAULT),
    )

    last_err: Optional[Exception] = None
    for c in cands:
        try:
            enumerator = c.opener()
        except OSError as e:
            logger.debug("enumerator %s unavailable at %s: %s", c.kind, c.ref, e)
            last_err = e
            continue
        logger.debug("using enumerator %s at %s", c.kind, c.ref)
        return enumerator

    raise NoDefaultPciEnumeratorForPlatform(platform) from last_err


__all__ = [
    "PciEnumerator",
    "Candidate",
    "ENUMERATOR_KINDS",
    "default_pci_enumerator",
    "HardwareIdPciEnumerator",
    "LinuxProcFsPciEnumerator",
    "LinuxSysfsPciEnumerator",
    "ProcFsMode",
    "PROCFS_DEFAULT",
    "SYSFS_DEVICES_DEFAULT",
]
