#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List

from eisenmatrix.config import Settings
from eisenmatrix.persist import STORAGE_KEY, FileBlobStore
from eisenmatrix.validate import validate_records

PROG = "eisenmatrix-validate-store"


def _die(msg: str, rc: int = 2) -> int:
    print(f"[{PROG}] ERROR: {msg}", file=sys.stderr)
    return rc


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog=PROG,
        description=(
            "Validate the persisted task collection strictly.\n"
            "Exit codes: 0 = valid, 1 = invalid records, 2 = missing or unreadable store."
        ),
    )
    ap.add_argument("--home", default=None, help="Store directory (default: env EISENMATRIX_HOME or ~/.eisenmatrix)")
    ap.add_argument("--key", default=STORAGE_KEY, help=f"Storage key (default: {STORAGE_KEY})")
    ns = ap.parse_args(argv)

    if ns.home:
        home = Path(ns.home).expanduser()
    else:
        try:
            home = Settings.from_env().home
        except ValueError as e:
            return _die(str(e))

    blob = FileBlobStore(home)
    p = blob.path_for(ns.key)
    try:
        text = blob.read(ns.key)
    except OSError as e:
        return _die(f"Failed to read store: {p} ({e})")
    if text is None:
        return _die(f"Missing store file: {p}")

    try:
        records = json.loads(text)
    except ValueError as e:
        return _die(f"Store is not valid JSON: {p} ({e})")

    errs = validate_records(records)
    if errs:
        print(f"[{PROG}] FAIL", file=sys.stderr)
        for e in errs:
            print(f"  - {e}", file=sys.stderr)
        return 1

    print(f"[{PROG}] OK: {len(records)} task(s) in {p}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
