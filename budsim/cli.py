"""Command line entry: read a mesh scheme file and set up a membrane system."""

from __future__ import annotations

import re
import sys
import time
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from budsim.model import MembraneSystem, SystemBuilder
from budsim.storage import Storage

DEFAULT_TIMESTEP = 0.001
DEFAULT_SOLVE_TIME = 10000

_NUMBER = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

# (XML tag, builder attribute, label printed when set)
_SETTINGS = [
    ("Tau", "default_tau", "tau"),
    ("KBT", "default_kbt", "kbt"),
    ("Linear_Const", "default_linear_const", "linear const"),
    ("Area_Const", "default_area_const", "area const"),
    ("Bend_Const", "default_bending_const", "bending const"),
    ("LJ_Eps", "default_lj_eps", "lj eps"),
    ("LJ_Rmin", "default_lj_rmin", "lj rmin"),
    ("LJ_Rmax", "default_lj_rmax", "lj rmax"),
    ("LJ_Const", "default_lj_const", "lj const"),
    ("LJ_X", "default_lj_x", "lj x"),
    ("LJ_Y", "default_lj_y", "lj y"),
    ("LJ_Z", "default_lj_z", "lj z"),
]


class SchemeError(Exception):
    """A scheme file could not be read or holds a malformed entry."""


def _as_double(text: Optional[str]) -> float:
    match = _NUMBER.match(text or "")
    return float(match.group(1)) if match else 0.0


def _scan(text: Optional[str], count: int, convert: Callable[[str], object], what: str) -> list:
    tokens = (text or "").split()
    if len(tokens) < count:
        raise SchemeError(f"parse {what} error")
    try:
        return [convert(t) for t in tokens[:count]]
    except ValueError as exc:
        raise SchemeError(f"parse {what} error") from exc


def _entries(root: Optional[ET.Element], section: str, tag: str) -> List[ET.Element]:
    if root is None:
        return []
    parent = root.find(section)
    return [] if parent is None else parent.findall(tag)


def load_scheme(path: str | Path, builder: SystemBuilder) -> MembraneSystem:
    """Read settings and mesh tables from an XML scheme into ``builder``.

    Ids in the file are 1-based.  Returns the system the builder creates.
    Raises SchemeError when the file cannot be parsed or an entry is malformed.
    """
    try:
        tree = ET.parse(path)
    except (ET.ParseError, OSError) as exc:
        raise SchemeError(f"parse error in createNodeSystem: {exc}") from exc
    top = tree.getroot()
    root = top if top.tag == "data" else None

    props = root.find("settings") if root is not None else None
    if props is not None:
        for tag, attr, label in _SETTINGS:
            element = props.find(tag)
            if element is not None:
                value = _as_double(element.text)
                setattr(builder, attr, value)
                print(f"Setting {label}: {value:g}")

    for node in _entries(root, "nodes", "node"):
        x, y, z = _scan(node.text, 3, float, "node")
        builder.add_node(x, y, z)
    print("parse node success")

    for edge in _entries(root, "edgeinfos", "edgeinfo"):
        a, b = _scan(edge.text, 2, int, "link")
        builder.add_edge(a - 1, b - 1, builder.default_edge_eq)
    print("parse link success")

    for elem in _entries(root, "elems", "elem"):
        a, b, c = _scan(elem.text, 3, int, "elem")
        builder.add_element(a - 1, b - 1, c - 1)
    print("parse elem success")

    for elem in _entries(root, "elem2edges", "elem2edge"):
        a, b, c = _scan(elem.text, 3, int, "elem2edge")
        builder.add_element_edges(a - 1, b - 1, c - 1)
    print("parse elem2edge success")

    for entry in _entries(root, "nndatas", "nndata"):
        values = _scan(entry.text, 9, int, "nndata")
        builder.add_nndata(*(v - 1 for v in values))
    print("parse nndata success")

    for entry in _entries(root, "edge2elems", "edge2elem"):
        a, b = _scan(entry.text, 2, int, "edge2elem")
        builder.add_edge_elements(a - 1, b - 1)
    print("parse edge2elem success")

    for node in _entries(root, "capsidnodes", "capsidnode"):
        x, y, z = _scan(node.text, 3, float, "capsid node")
        builder.add_capsid_node(x, y, z)
    print("parse capsid node success")

    for fix in _entries(root, "fixed", "fix"):
        (node_id,) = _scan(fix.text, 1, int, "fixnode")
        try:
            builder.fix_node(node_id - 1)
        except IndexError as exc:
            raise SchemeError(f"parse fixnode error: {exc}") from exc
    print("parse fixnode success")

    return builder.create_system()


def generate_output_file_name(
    input_file_name: str, now: Optional[datetime] = None
) -> str:
    """Append a UTC timestamp ``_YYYY.MM.DD_hh-mm-ss`` to a file name."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return input_file_name + now.strftime("_%Y.%m.%d_%H-%M-%S")


def parse_arguments(args: Sequence[str]) -> Tuple[float, int, str]:
    """Return ``(timestep, solve_time, scheme_file)`` from the command line.

    The last argument is the scheme file; those before it may be
    ``-dt=<value>`` and ``-solve_time=<value>``.
    """
    if not args:
        raise ValueError("missing scheme file argument")
    timestep = DEFAULT_TIMESTEP
    solve_time = DEFAULT_SOLVE_TIME
    for arg in args[:-1]:
        key, sep, val = arg.partition("=")
        if not sep:
            val = arg
        if key == "-dt":
            timestep = _as_double(val)
            print(f"setting timestep: {timestep:g}")
        elif key == "-solve_time":
            solve_time = int(_as_double(val))
            print(f"setting solve time: {solve_time}")
    return timestep, solve_time, args[-1]


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Load a scheme, attach storage and write the initial snapshot."""
    start = time.monotonic()
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        timestep, solve_time, scheme = parse_arguments(args)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    builder = SystemBuilder(timestep, solve_time)
    try:
        system = load_scheme(scheme, builder)
    except SchemeError as exc:
        print(exc, file=sys.stderr)
        return 1

    storage = Storage(system)
    system.storage = storage
    storage.print_vtk_file()
    storage.store_variables()

    total = int(time.monotonic() - start)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    print(f"Total time hh: {hours} mm:{minutes} ss:{seconds}")
    return 0