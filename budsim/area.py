"""Area springs that hold each mesh triangle near a rest area.

The energy of a triangle is ``k/2 * (A - A0)^2 / A0``.  The stiffness ``k``
may be weakened per triangle from the scaling of its three edges or from the
region the triangle lies in.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from budsim.geometry import INT_MAX, Vec3, add, cross, norm, scale, subtract

NodeForce = Tuple[int, Vec3]


@dataclass(frozen=True)
class AreaSpringParams:
    """Constants of the area springs and the rule for weakening them.

    ``scale_type`` selects how the stiffness of a triangle is derived from
    its three edges:

    * 0: Gaussian weakening averaged over the edges, never below the weak value;
    * 1: power-law blend between twice the weak constant and the weak constant;
    * 2: linear blend between the strong and weak constants;
    * 3: by region (bud, boundary, rest);
    * 4: Hill-function weakening when ``nonuniform_wall_weakening`` is set,
      otherwise as 3.
    """

    spring_constant: float
    spring_constant_weak: float
    area_0: float
    scale_type: int = 3
    nonuniform_wall_weakening: bool = False
    max_spring_scaler: float = 1.0
    scaling_pow: float = 4.0
    gauss_sigma: float = 1.0
    hill_const: float = 1.0
    hill_pow: float = 1.0


def _region_constant(params: AreaSpringParams, region: int) -> float:
    if region == 1:
        return params.spring_constant_weak
    if region == 0:
        return (params.spring_constant_weak + params.spring_constant) / 2.0
    return params.spring_constant


def area_spring_constant(
    params: AreaSpringParams,
    scaling_per_edge: Sequence[float],
    triangles_in_upperhem: Sequence[int],
    counter: int,
    edges: Sequence[int],
) -> Tuple[float, float]:
    """Stiffness and target area of triangle ``counter`` with edges ``edges``.

    Raises ValueError for an unknown ``scale_type``.
    """
    k = params.spring_constant
    weak = params.spring_constant_weak
    kind = params.scale_type
    scalings = [scaling_per_edge[e] for e in edges]

    if kind == 0:
        sigma = params.gauss_sigma
        norm_factor = 1.0 / math.sqrt(2 * 3.14159 * sigma)
        value = k * sum(
            1.0 - norm_factor * math.exp(-(s**2.0) / sigma) for s in scalings
        ) / 3.0
        return max(value, weak), params.area_0
    if kind == 1:
        value = sum(
            (weak * 2.0) * s**params.scaling_pow + weak * (1 - s**params.scaling_pow)
            for s in scalings
        ) / 3.0
        return value, params.area_0
    if kind == 2:
        value = sum(k - (k - weak) * s for s in scalings) / 3.0
        return value, params.area_0
    if kind == 3:
        return _region_constant(params, triangles_in_upperhem[counter]), params.area_0
    if kind == 4:
        if not params.nonuniform_wall_weakening:
            return (
                _region_constant(params, triangles_in_upperhem[counter]),
                params.area_0,
            )
        spectrum = params.max_spring_scaler * k - weak

        def hill(s: float) -> float:
            if s == 0:
                return 0.0
            return 1.0 / (1.0 + (params.hill_const / s) ** params.hill_pow)

        value = sum(weak + hill(s) * spectrum for s in scalings) / 3.0
        return max(value, weak), params.area_0
    raise ValueError(f"unknown scale type {kind}")


def _is_valid_node(node_id: int) -> bool:
    return 0 <= node_id < INT_MAX - 100


def area_spring(
    params: AreaSpringParams,
    positions: Sequence[Sequence[float]],
    scaling_per_edge: Sequence[float],
    triangles_in_upperhem: Sequence[int],
    counter: int,
    nodes: Sequence[int],
    edges: Sequence[int],
) -> Tuple[float, List[NodeForce]]:
    """Energy and node forces of the area spring on triangle ``counter``.

    ``nodes`` are the triangle's node ids (i, j, k) and ``edges`` its edge
    ids.  A triangle with a removed node gives zero energy and no forces.
    Forces are listed for nodes i, j, k in that order.  Raises ValueError
    for a degenerate triangle or a zero target area.
    """
    id_i, id_j, id_k = nodes
    if not all(_is_valid_node(n) for n in nodes):
        return 0.0, []
    what_k, target_area = area_spring_constant(
        params, scaling_per_edge, triangles_in_upperhem, counter, edges
    )
    if params.area_0 == 0.0 or target_area == 0.0:
        raise ValueError("target area must be non-zero")

    ri, rj, rk = positions[id_i], positions[id_j], positions[id_k]
    rkj = subtract(rk, rj)
    rij = subtract(ri, rj)
    a_vec = cross(rkj, rij)
    area_current = norm(a_vec) / 2.0
    if area_current == 0.0:
        raise ValueError(f"triangle {counter} is degenerate")

    d_rj = (
        (0.0, -rij[2] + rkj[2], -rkj[1] + rij[1]),
        (rij[2] - rkj[2], 0.0, rkj[0] - rij[0]),
        (-rij[1] + rkj[1], -rkj[0] + rij[0], 0.0),
    )
    d_rk = (
        (0.0, rij[2], -rij[1]),
        (-rij[2], 0.0, rij[0]),
        (rij[1], -rij[0], 0.0),
    )
    d_ri = (
        (0.0, -rkj[2], rkj[1]),
        (rkj[2], 0.0, -rkj[0]),
        (-rkj[1], rkj[0], 0.0),
    )

    magnitude = -(what_k * (area_current - params.area_0) / params.area_0) / (
        2.0 * area_current
    )

    def force(d: Sequence[Sequence[float]]) -> Vec3:
        return scale(
            magnitude,
            add(scale(a_vec[0], d[0]), scale(a_vec[1], d[1]), scale(a_vec[2], d[2])),
        )

    forces = [(id_i, force(d_ri)), (id_j, force(d_rj)), (id_k, force(d_rk))]
    energy = (what_k / 2.0) * (area_current - target_area) ** 2 / target_area
    return energy, forces


def compute_area_springs(
    params: AreaSpringParams,
    positions: Sequence[Sequence[float]],
    triangles: Sequence[Sequence[int]],
    triangle_edges: Sequence[Sequence[int]],
    scaling_per_edge: Sequence[float],
    triangles_in_upperhem: Sequence[int],
) -> Tuple[float, Dict[int, Vec3]]:
    """Total area energy and the summed force on every node touched."""
    if len(triangles) != len(triangle_edges):
        raise ValueError(
            f"{len(triangles)} triangles but {len(triangle_edges)} edge triples"
        )
    total = 0.0
    summed: Dict[int, Vec3] = {}
    for counter, (nodes, edges) in enumerate(zip(triangles, triangle_edges)):
        energy, forces = area_spring(
            params, positions, scaling_per_edge, triangles_in_upperhem,
            counter, nodes, edges,
        )
        total += energy
        for node_id, f in forces:
            old = summed.get(node_id, (0.0, 0.0, 0.0))
            summed[node_id] = (old[0] + f[0], old[1] + f[1], old[2] + f[2])
    return total, summed