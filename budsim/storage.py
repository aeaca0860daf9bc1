"""Writing simulation snapshots: VTK frames for viewing and ``.sta`` state files.

A :class:`Storage` holds a weak reference to its system, so it never keeps
a finished simulation alive.  Once the system is gone, writing does nothing.
"""

from __future__ import annotations

import weakref
from pathlib import Path
from typing import Callable, Iterable, Optional, TextIO

from budsim.geometry import INT_MAX
from budsim.model import MembraneSystem

DEFAULT_VTK_PREFIX = "Animation_realistic/Simulations_with_flat_sheet_tests/FINALLY_FLAT_"
DEFAULT_VARIABLES_PREFIX = "Variables_realistic/YB_cellwall4_newinitialmesh6_"
SUMMARY_FILE_NAME = "Temp.sta"

#: Strain written for the cell of the LJ particle.
_LJ_CELL_VALUE = 0.1


def frame_number(iteration: int) -> str:
    """Zero-padded frame label for the ``iteration``-th file written (1-based)."""
    if iteration < 1:
        raise ValueError(f"iteration must be at least 1, got {iteration}")
    return f"{iteration - 1:05d}"


def _fixed(value: float) -> str:
    return f"{value:.5f}"


def _is_valid_edge(a: int, b: int) -> bool:
    return 0 <= a < INT_MAX - 100 and 0 <= b < INT_MAX - 100


def _one_based(ids: Iterable[int]) -> str:
    return " ".join(str(i + 1) for i in ids)


class Storage:
    """Writes snapshots of a :class:`MembraneSystem` into a directory.

    On creation a small summary file with node, edge and triangle counts is
    written.  Each call to :meth:`print_vtk_file` or :meth:`store_variables`
    writes the next numbered file of its series.
    """

    def __init__(
        self,
        system: Optional[MembraneSystem],
        directory: str | Path = ".",
        vtk_prefix: str = DEFAULT_VTK_PREFIX,
        variables_prefix: str = DEFAULT_VARIABLES_PREFIX,
    ) -> None:
        self._system: Callable[[], Optional[MembraneSystem]]
        if system is None:
            self._system = lambda: None
        else:
            self._system = weakref.ref(system)
        self.directory = Path(directory)
        self.vtk_prefix = vtk_prefix
        self.variables_prefix = variables_prefix
        self.vtk_iteration = 0
        self.variables_iteration = 0

        self.directory.mkdir(parents=True, exist_ok=True)
        with open(self.directory / SUMMARY_FILE_NAME, "w", encoding="ascii") as out:
            if system is not None:
                out.write(f"node_count {system.max_node_count}\n")
                out.write(f"edge_count {system.num_edges}\n")
                out.write(f"elem_count {system.num_triangles}\n")

    @property
    def system(self) -> Optional[MembraneSystem]:
        """The system written out, or None once it no longer exists."""
        return self._system()

    def _open_next(self, prefix: str, iteration: int, suffix: str) -> tuple[Path, TextIO]:
        path = self.directory / f"{prefix}{frame_number(iteration)}{suffix}"
        path.parent.mkdir(parents=True, exist_ok=True)
        return path, open(path, "w", encoding="ascii")

    def print_vtk_file(self) -> Optional[Path]:
        """Write the mesh edges, node positions and edge strains as a VTK frame.

        Returns the path written, or None when the system no longer exists.
        """
        system = self.system
        if system is None:
            return None
        self.vtk_iteration += 1
        path, out = self._open_next(self.vtk_prefix, self.vtk_iteration, ".vtk")
        with out:
            self._write_vtk(system, out)
        return path

    @staticmethod
    def _write_vtk(system: MembraneSystem, out: TextIO) -> None:
        num_particles = system.max_node_count
        out.write("# vtk DataFile Version 3.0\n")
        out.write("Point representing Sub_cellular elem model\n")
        out.write("ASCII\n\n")
        out.write("DATASET UNSTRUCTURED_GRID\n")

        out.write(f"POINTS {num_particles + 1} float\n")
        for x, y, z in system.node_positions:
            out.write(f"{_fixed(x)} {_fixed(y)} {_fixed(z)} \n")
        lx, ly, lz = system.lj_position
        out.write(f"{_fixed(lx)} {_fixed(ly)} {_fixed(lz)} \n")

        valid_edges = [(a, b) for a, b in system.edges if _is_valid_edge(a, b)]
        num_edges = len(valid_edges)
        num_cells = num_edges + 1
        out.write(f"CELLS {num_cells} {3 * num_edges + 2}\n")
        for a, b in valid_edges:
            out.write(f"2 {a} {b}\n")
        out.write(f"1 {num_particles}\n")

        out.write(f"CELL_TYPES {num_cells}\n")
        out.write("3\n" * num_edges)
        out.write("1\n")

        out.write(f"CELL_DATA {num_cells}\n")
        out.write("SCALARS Strain double \n")
        out.write("LOOKUP_TABLE default \n")
        rest = system.rmin
        for a, b in valid_edges:
            pa, pb = system.node_positions[a], system.node_positions[b]
            length = sum((u - v) ** 2 for u, v in zip(pa, pb)) ** 0.5
            out.write(f"{_fixed((length - rest) / rest)}\n")
        out.write(f"{_fixed(_LJ_CELL_VALUE)}\n")

    def store_variables(self) -> Optional[Path]:
        """Write nodes and all connectivity tables to the next ``.sta`` file.

        Node, edge and triangle ids are written 1-based.  Returns the path
        written, or None when the system no longer exists.
        """
        system = self.system
        if system is None:
            return None
        self.variables_iteration += 1
        path, out = self._open_next(
            self.variables_prefix, self.variables_iteration, ".sta"
        )
        with out:
            out.write(f"number of LJ particles {system.max_node_count_lj}\n")
            for x, y, z in system.node_positions:
                out.write(f"<node>{_fixed(x)} {_fixed(y)} {_fixed(z)}</node>\n")
            for tri in system.triangles:
                out.write(f"<elem> {_one_based(tri)} </elem>\n")
            for tri_edges in system.triangle_edges:
                out.write(f"<elem2edge> {_one_based(tri_edges)} </elem2edge>\n")
            for edge in system.edges:
                out.write(f"<edgeinfo> {_one_based(edge)} </edgeinfo>\n")
            for pair in system.edge_triangles:
                out.write(f"<edge2elem> {_one_based(pair)} </edge2elem>\n")
            for neighbours in system.nndata[: system.max_node_count]:
                out.write(f"<nndata> {_one_based(neighbours)} </nndata> \n")
        return path