#!/usr/bin/env python3
"""
Convert NWChem input decks to Broombridge with the NWChem Docker image.

Usage (from repo root, after: pip install -e .  or  PYTHONPATH=src):
  python scripts/convert_nwchem.py convert h2.nw
  python scripts/convert_nwchem.py convert h2.nw -o h2.yaml --summary

Or use the installed entry point:
  nwchem-docker convert h2.nw
"""
import sys
from pathlib import Path

# Allow running from repo root when package is not installed (src layout)
_script_dir = Path(__file__).resolve().parent
_repo_root = _script_dir.parent
_src = _repo_root / "src"
if _src.exists() and str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from nwchem_docker.cli import main

if __name__ == "__main__":
    main()
