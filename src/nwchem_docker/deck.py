"""
Light inspection of NWChem input decks.

Reads the title and task directives and the geometry block so the CLI can
report what is about to be converted. Cartesian geometries are parsed by
ASE's nwchem-in reader; z-matrix geometries only contribute their element
list.
"""

from __future__ import annotations

import io
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

try:
    from ase import Atoms
    from ase.data import chemical_symbols
    from ase.io import read
    ASE_AVAILABLE = True
except ImportError:
    ASE_AVAILABLE = False
    Atoms = None  # type: ignore[misc, assignment]

_TITLE_RE = re.compile(r"^\s*title\s+(.+?)\s*$", re.IGNORECASE | re.MULTILINE)
_TASK_RE = re.compile(r"^\s*task\s+(.+?)\s*$", re.IGNORECASE | re.MULTILINE)
_GEOMETRY_RE = re.compile(r"^\s*geometry\b", re.IGNORECASE | re.MULTILINE)
_END_RE = re.compile(r"^\s*end\s*$", re.IGNORECASE)
# Sub-blocks of a geometry block that carry their own `end`
_SUBBLOCK_RE = re.compile(r"^\s*(system|zmatrix|zcoord)\b", re.IGNORECASE)
_ZMATRIX_STOP = ("variables", "constants", "end")


@dataclass
class DeckInfo:
    path: Path
    formula: str
    n_atoms: int
    title: Optional[str] = None
    tasks: List[str] = field(default_factory=list)


def read_deck_directives(text: str) -> Tuple[Optional[str], List[str]]:
    """
    Extract the title and task directives from deck text.

    Args:
        text: Contents of an NWChem input deck.

    Returns:
        (title, tasks). Title has surrounding quotes removed; each task is the
        directive body with whitespace collapsed, e.g. "scf energy".
    """
    title = None
    match = _TITLE_RE.search(text)
    if match:
        title = match.group(1).strip("\"'")
    tasks = [" ".join(m.split()) for m in _TASK_RE.findall(text)]
    return title, tasks


def extract_geometry_block(text: str) -> Optional[List[str]]:
    """
    Return the body lines of the first geometry block, or None if there is none.

    Comments and blank lines are dropped. Nested system/zmatrix/zcoord
    sub-blocks are kept, including their own `end` lines.

    Raises:
        ValueError: If the geometry block is never closed.
    """
    lines = text.splitlines()
    for i, line in enumerate(lines):
        if not _GEOMETRY_RE.match(line):
            continue
        body = []
        depth = 0
        for inner in lines[i + 1:]:
            inner = inner.split("#", 1)[0].rstrip()
            if not inner.strip():
                continue
            if _END_RE.match(inner):
                if depth == 0:
                    return body
                depth -= 1
            elif _SUBBLOCK_RE.match(inner):
                depth += 1
            body.append(inner)
        raise ValueError("Geometry block is missing its closing 'end'")
    return None


def _symbol_from_tag(tag: str) -> str:
    """Element symbol for an NWChem atom tag (e.g. 'h1' -> 'H', 'Zn2' -> 'Zn')."""
    match = re.match(r"[A-Za-z]+", tag)
    if not match:
        raise ValueError(f"Cannot determine element of atom tag '{tag}'")
    letters = match.group(0)
    two = letters[:2].capitalize()
    if len(letters) > 1 and two in chemical_symbols:
        return two
    one = letters[0].upper()
    if one not in chemical_symbols:
        raise ValueError(f"Cannot determine element of atom tag '{tag}'")
    return one


def _is_number(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True


def _zmatrix_symbols(body: List[str]) -> Optional[List[str]]:
    for i, line in enumerate(body):
        if line.split()[0].lower() in ("zmatrix", "zcoord"):
            symbols = []
            for row in body[i + 1:]:
                if row.split()[0].lower() in _ZMATRIX_STOP:
                    break
                symbols.append(_symbol_from_tag(row.split()[0]))
            return symbols
    return None


def _cartesian_atoms(body: List[str]) -> "Atoms":
    # ASE's reader wants "Sym x y z" rows and a lowercase block closed by "end" + blank line
    rows = []
    for line in body:
        tokens = line.split()
        if len(tokens) >= 4 and tokens[0][0].isalpha() and all(_is_number(t) for t in tokens[1:4]):
            rows.append(f"  {_symbol_from_tag(tokens[0])} {' '.join(tokens[1:4])}")
        else:
            rows.append(line)
    normalized = "geometry\n" + "\n".join(rows) + "\nend\n\n"
    return read(io.StringIO(normalized), format="nwchem-in")


def describe_input_deck(path: Union[str, Path]) -> DeckInfo:
    """
    Summarize an NWChem input deck.

    Raises:
        FileNotFoundError: If the deck does not exist.
        ValueError: If the deck has no geometry block or its geometry cannot
            be read (e.g. it is loaded from an external file).
    """
    if not ASE_AVAILABLE:
        raise ImportError("ASE is required. Install with: pip install ase")

    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Input deck not found: {path}")

    text = path.read_text(encoding="utf-8", errors="replace")
    body = extract_geometry_block(text)
    if body is None:
        raise ValueError(f"No geometry block found in {path.name}")
    if any(line.split()[0].lower() == "load" for line in body):
        raise ValueError(
            f"Could not read geometry from {path.name}: it is loaded from an external file"
        )

    try:
        symbols = _zmatrix_symbols(body)
        if symbols is not None:
            atoms = Atoms(symbols)
        else:
            atoms = _cartesian_atoms(body)
    except (IndexError, KeyError, ValueError) as e:
        raise ValueError(f"Could not read geometry from {path.name}: {e}") from e
    if len(atoms) == 0:
        raise ValueError(f"Could not read geometry from {path.name}: no atoms found")

    title, tasks = read_deck_directives(text)
    return DeckInfo(
        path=path,
        formula=atoms.get_chemical_formula(),
        n_atoms=len(atoms),
        title=title,
        tasks=tasks,
    )
