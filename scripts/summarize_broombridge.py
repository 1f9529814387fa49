#!/usr/bin/env python3
"""
Summarize one or more Broombridge files: format version, orbital and
electron counts, SCF energy.

Usage:
  python scripts/summarize_broombridge.py h2.yaml lih.yaml
"""

import argparse
import sys
from pathlib import Path

import yaml

_src = Path(__file__).resolve().parent.parent / "src"
if _src.exists() and str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from nwchem_docker.broombridge import print_broombridge_summary, summarize_broombridge


def main() -> None:
    parser = argparse.ArgumentParser(description="Summarize Broombridge (.yaml) files")
    parser.add_argument("files", type=Path, nargs="+", help="Broombridge files")
    args = parser.parse_args()

    failed = 0
    for path in args.files:
        try:
            summary = summarize_broombridge(path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            print(f"Error: {path}: {e}")
            failed += 1
            continue
        print_broombridge_summary(summary)
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
