"""
Read-only summary of Broombridge files produced by the NWChem container.

Supports the v0.2 layout (`problem_description`) and the older v0.1 layout
(`integral_sets`).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

PROBLEM_KEYS = ("problem_description", "integral_sets")


def load_broombridge(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a Broombridge YAML document.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the document is not a Broombridge mapping.
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        document = yaml.safe_load(f)

    if not isinstance(document, dict):
        raise ValueError(f"{path.name} is not a Broombridge document (expected a mapping)")
    if not any(key in document for key in PROBLEM_KEYS):
        raise ValueError(
            f"{path.name} is not a Broombridge document (no problem_description or integral_sets)"
        )
    return document


def _value(entry: Any) -> Optional[float]:
    # Quantities are stored either bare or as {units: ..., value: ...}
    if isinstance(entry, dict):
        entry = entry.get("value")
    if entry is None:
        return None
    try:
        return float(entry)
    except (TypeError, ValueError):
        return None


def _summarize_problem(problem: Dict[str, Any]) -> Dict[str, Any]:
    basis = problem.get("basis_set")
    basis_name = basis.get("name") if isinstance(basis, dict) else basis
    geometry = problem.get("geometry")
    atoms = geometry.get("atoms") if isinstance(geometry, dict) else None
    return {
        "n_orbitals": problem.get("n_orbitals"),
        "n_electrons": problem.get("n_electrons"),
        "scf_energy": _value(problem.get("scf_energy")),
        "basis_set": basis_name,
        "geometry_atoms": len(atoms) if isinstance(atoms, list) else None,
    }


def summarize_broombridge(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Summarize a Broombridge file.

    Returns:
        Dict with:
            - file: Path of the summarized file
            - format_version: Value of format.version (None if absent)
            - problem_count: Number of problem descriptions
            - problems: Per-problem n_orbitals, n_electrons, scf_energy,
              basis_set, geometry_atoms (None when absent)
    """
    document = load_broombridge(path)
    fmt = document.get("format")
    version = fmt.get("version") if isinstance(fmt, dict) else None

    problems: List[Dict[str, Any]] = []
    for key in PROBLEM_KEYS:
        entries = document.get(key)
        if isinstance(entries, list):
            problems = [_summarize_problem(p) for p in entries if isinstance(p, dict)]
            break

    return {
        "file": str(path),
        "format_version": None if version is None else str(version),
        "problem_count": len(problems),
        "problems": problems,
    }


def print_broombridge_summary(summary: Dict[str, Any]) -> None:
    print("\n" + "=" * 50)
    print("   BROOMBRIDGE SUMMARY")
    print("=" * 50)
    print(f"File:            {summary['file']}")
    print(f"Format version:  {summary['format_version'] or '(unknown)'}")
    print(f"Problems:        {summary['problem_count']}")
    for i, problem in enumerate(summary["problems"]):
        print("-" * 50)
        print(f"Problem {i}:")
        print(f"  Orbitals:      {problem['n_orbitals']}")
        print(f"  Electrons:     {problem['n_electrons']}")
        if problem["scf_energy"] is not None:
            print(f"  SCF energy:    {problem['scf_energy']:15.8f} Hartree")
        else:
            print(f"  SCF energy:    {'(not reported)':>15}")
        if problem["basis_set"]:
            print(f"  Basis set:     {problem['basis_set']}")
    print("=" * 50)


def write_summary_json(summary: Dict[str, Any], path: Union[str, Path]) -> None:
    with open(path, "w") as f:
        json.dump(summary, f, indent=2)
