"""Mesh assembly and the simulated membrane system.

A :class:`SystemBuilder` collects nodes, edges, triangles and their
connectivity tables in a :class:`HostMesh`, together with default physical
constants.  :meth:`SystemBuilder.create_system` turns these into a
:class:`MembraneSystem`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from budsim.geometry import INT_MAX, Vec3

#: Number of neighbour entries stored per node in the ``nndata`` table.
NNDATA_WIDTH = 9


@dataclass
class HostMesh:
    """Mesh tables as they are read in, before a system is made from them."""

    node_positions: List[Vec3] = field(default_factory=list)
    is_node_fixed: List[bool] = field(default_factory=list)
    nndata: List[Tuple[int, ...]] = field(default_factory=list)
    edges: List[Tuple[int, int]] = field(default_factory=list)
    edge_initial_length: List[float] = field(default_factory=list)
    triangles: List[Tuple[int, int, int]] = field(default_factory=list)
    triangle_edges: List[Tuple[int, int, int]] = field(default_factory=list)
    edge_triangles: List[Tuple[int, int]] = field(default_factory=list)
    capsid_nodes: List[Vec3] = field(default_factory=list)


@dataclass
class MembraneSystem:
    """State and parameters of a membrane simulation."""

    dt: float
    solve_time: int
    tau: float = 1.0
    kt: float = 1.0
    node_mass: float = 1.0
    iteration: int = 0

    node_positions: List[Vec3] = field(default_factory=list)
    is_node_fixed: List[bool] = field(default_factory=list)
    nndata: List[Tuple[int, ...]] = field(default_factory=list)
    edges: List[Tuple[int, int]] = field(default_factory=list)
    edge_initial_length: List[float] = field(default_factory=list)
    triangles: List[Tuple[int, int, int]] = field(default_factory=list)
    triangle_edges: List[Tuple[int, int, int]] = field(default_factory=list)
    edge_triangles: List[Tuple[int, int]] = field(default_factory=list)
    capsid_nodes: List[Vec3] = field(default_factory=list)

    linear_spring_constant: float = 9.0
    area_spring_constant: float = 10.0
    bending_spring_constant: float = 4.0
    scalar_edge_length: float = 1.0
    initial_area: float = 0.433
    initial_angle: float = 0.0
    rmin: float = 1.0

    lj_epsilon: float = 0.1
    lj_rmin: float = 2.0
    lj_rcutoff: float = 2.8
    lj_spring_constant: float = 1.0
    lj_position: Vec3 = (0.0, 0.0, -0.1)
    max_node_count_lj: int = 0

    nodes_in_tip: List[int] = field(default_factory=list)
    nodes_in_upperhem: List[int] = field(default_factory=list)

    linear_spring_energy: float = 0.0
    area_triangle_energy: float = 0.0
    bending_triangle_energy: float = 0.0
    lj_energy: float = 0.0

    storage: Optional[Any] = None

    @property
    def max_node_count(self) -> int:
        """Number of membrane nodes."""
        return len(self.node_positions)

    @property
    def num_edges(self) -> int:
        """Number of edge slots, including removed ones."""
        return len(self.edges)

    @property
    def num_triangles(self) -> int:
        """Number of triangle slots."""
        return len(self.triangles)

    @property
    def true_num_edges(self) -> int:
        """Number of edges whose two ends are both valid nodes."""
        return sum(
            1
            for a, b in self.edges
            if 0 <= a < INT_MAX - 100 and 0 <= b < INT_MAX - 100
        )

    @property
    def total_energy(self) -> float:
        """Sum of the spring and LJ energies last computed."""
        return (
            self.linear_spring_energy
            + self.area_triangle_energy
            + self.bending_triangle_energy
            + self.lj_energy
        )


class SystemBuilder:
    """Collects a mesh and default constants, then creates a system."""

    def __init__(self, dt: float, solve_time: int) -> None:
        self.dt = dt
        self.solve_time = solve_time

        self.default_tau = 1.0
        self.default_kbt = 1.0
        self.default_linear_const = 9.0
        self.default_area_const = 10.0
        self.default_bending_const = 4.0
        self.default_lj_eps = 0.1
        self.default_lj_rmin = 2.0
        self.default_lj_rmax = 2.0 * 1.4
        self.default_lj_const = 1.0
        self.default_lj_x = 0.0
        self.default_lj_y = 0.0
        self.default_lj_z = -0.1

        self.default_edge_eq = 1.0
        self.default_area_eq = 0.0
        self.default_angle_eq = 0.0

        self.mesh = HostMesh()

    def add_node(self, x: float, y: float, z: float) -> None:
        """Add a free node at ``(x, y, z)``."""
        self.mesh.node_positions.append((float(x), float(y), float(z)))
        self.mesh.is_node_fixed.append(False)

    def add_nndata(self, *args: int) -> None:
        """Add the neighbour list of the next node (nine node ids)."""
        if len(args) != NNDATA_WIDTH:
            raise ValueError(
                f"expected {NNDATA_WIDTH} neighbour entries, got {len(args)}"
            )
        self.mesh.nndata.append(tuple(int(a) for a in args))

    def add_edge(
        self, id_l: int, id_r: int, initial_length: Optional[float] = None
    ) -> None:
        """Add an edge; without a length, its rest length is the current distance."""
        if initial_length is None:
            count = len(self.mesh.node_positions)
            for node_id in (id_l, id_r):
                if not 0 <= node_id < count:
                    raise IndexError(f"edge refers to unknown node {node_id}")
            initial_length = math.dist(
                self.mesh.node_positions[id_l], self.mesh.node_positions[id_r]
            )
        self.mesh.edges.append((id_l, id_r))
        self.mesh.edge_initial_length.append(float(initial_length))

    def add_element(self, id_a: int, id_b: int, id_c: int) -> None:
        """Add a triangle given by three node ids."""
        self.mesh.triangles.append((id_a, id_b, id_c))

    def add_element_edges(self, id_a: int, id_b: int, id_c: int) -> None:
        """Add the three edge ids of the next triangle."""
        self.mesh.triangle_edges.append((id_a, id_b, id_c))

    def add_edge_elements(self, id_a: int, id_b: int) -> None:
        """Add the two triangle ids on either side of the next edge."""
        self.mesh.edge_triangles.append((id_a, id_b))

    def fix_node(self, node_id: int) -> None:
        """Mark a node as fixed."""
        if not 0 <= node_id < len(self.mesh.is_node_fixed):
            raise IndexError(f"cannot fix unknown node {node_id}")
        self.mesh.is_node_fixed[node_id] = True

    def add_capsid_node(self, x: float, y: float, z: float) -> None:
        """Add a capsid node at ``(x, y, z)``."""
        self.mesh.capsid_nodes.append((float(x), float(y), float(z)))

    def create_system(self) -> MembraneSystem:
        """Create a system from the collected mesh and current defaults."""
        mesh = self.mesh
        return MembraneSystem(
            dt=self.dt,
            solve_time=self.solve_time,
            tau=self.default_tau,
            kt=self.default_kbt,
            node_positions=list(mesh.node_positions),
            is_node_fixed=list(mesh.is_node_fixed),
            nndata=list(mesh.nndata),
            edges=list(mesh.edges),
            edge_initial_length=list(mesh.edge_initial_length),
            triangles=list(mesh.triangles),
            triangle_edges=list(mesh.triangle_edges),
            edge_triangles=list(mesh.edge_triangles),
            capsid_nodes=list(mesh.capsid_nodes),
            linear_spring_constant=self.default_linear_const,
            area_spring_constant=self.default_area_const,
            bending_spring_constant=self.default_bending_const,
            scalar_edge_length=self.default_edge_eq,
            initial_area=self.default_area_eq,
            initial_angle=self.default_angle_eq,
            rmin=self.default_edge_eq,
            lj_epsilon=self.default_lj_eps,
            lj_rmin=self.default_lj_rmin,
            lj_rcutoff=self.default_lj_rmax,
            lj_spring_constant=self.default_lj_const,
            lj_position=(self.default_lj_x, self.default_lj_y, self.default_lj_z),
        )