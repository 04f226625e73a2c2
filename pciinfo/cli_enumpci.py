#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import argparse
import json
import logging
import sys
from dataclasses import dataclass
from typing import Optional, TextIO

import pciinfo
from pciinfo.enumerators import (
    ENUMERATOR_KINDS,
    PROCFS_DEFAULT,
    SYSFS_DEVICES_DEFAULT,
    PciEnumerator,
    default_pci_enumerator,
)

logger = logging.getLogger("pciinfo.cli")


@dataclass
class ProgramArgs:
    enumerator: Optional[str]
    root: Optional[str]
    json: bool = False
    verbose: int = 0


def make_enumerator(args: ProgramArgs) -> PciEnumerator:
    if args.enumerator is None:
        return default_pci_enumerator()

    env = {"PCIINFO_ENUMERATOR": args.enumerator}
    if args.root is not None:
        key = "PCIINFO_SYSFS_ROOT" if args.enumerator == "sysfs" else "PCIINFO_PROCFS_ROOT"
        env[key] = args.root
    return default_pci_enumerator(environ=env)


def format_line(dev: pciinfo.PciDevice) -> str:
    p = dev.properties

    loc = p.location.as_option()
    where = str(loc) if loc is not None else "????:??:??.?"

    if p.device_class.is_present:
        cname = dev.device_class_name()
    else:
        cname = "Unknown class"

    rev = p.revision.as_option()
    revdesc = f" (rev {rev:02x})" if rev is not None else ""

    driver = p.os_driver.as_option()
    drvdesc = f" [{driver}]" if driver else ""

    return f"{where} {dev.vendor_id:04x}:{dev.device_id:04x} {cname}{revdesc}{drvdesc}"


def run(
    args: ProgramArgs, out: Optional[TextIO] = None, err: Optional[TextIO] = None
) -> int:
    out = out or sys.stdout
    err = err or sys.stderr
    try:
        enumerator = make_enumerator(args)
        logger.debug("enumerating with %r", enumerator)
        info = pciinfo.PciInfo.enumerate(enumerator)
    except pciinfo.PciInfoError as e:
        print(f"pciinfo-enum: {e}", file=err)
        return 1

    if args.json:
        records = [d.to_dict() for d in info.devices()]
        json.dump(records, out, indent=2)
        out.write("\n")
    else:
        for dev in info.devices():
            print(format_line(dev), file=out)

    for e in info.errors():
        print(str(e), file=err)

    return 0


def main() -> None:  # pragma: no cover
    ap = argparse.ArgumentParser(
        description="List PCI devices using the platform enumerator"
    )
    ap.add_argument(
        "--enumerator",
        choices=ENUMERATOR_KINDS,
        default=None,
        help="force an enumerator instead of the platform default",
    )
    ap.add_argument(
        "--root",
        default=None,
        help=f"tree to read instead of {PROCFS_DEFAULT} or {SYSFS_DEVICES_DEFAULT}",
    )
    ap.add_argument("--json", action="store_true", help="dump device records as JSON")
    ap.add_argument("-v", "--verbose", action="count", default=0)
    args = ProgramArgs(**vars(ap.parse_args()))

    if args.root is not None and args.enumerator is None:
        ap.error("--root requires --enumerator")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(run(args))


if __name__ == "__main__":  # pragma: no cover
    main()
