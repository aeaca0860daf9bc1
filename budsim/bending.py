"""Cosine bending springs between pairs of triangles that share an edge.

The energy of a pair is ``k * (1 - cos(theta - theta0))``, with ``theta``
the angle between the two triangle normals.  Forces come from the same
expression, split into a ``cos(theta0)`` and a ``sin(theta0)`` part.  The
node labels follow :mod:`budsim.bending_terms`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from budsim.bending_terms import (
    NODES,
    cross_product_derivative,
    norm_product_derivative,
    normal_derivatives,
    unit_direction_derivatives,
)
from budsim.geometry import INT_MAX, Vec3, cross, dot, norm, scale, subtract

NodeForce = Tuple[int, Vec3]


@dataclass(frozen=True)
class BendingParams:
    """Constants of the bending springs and the rule for weakening them.

    ``scale_type`` selects how the stiffness of an edge is derived:

    * 0: Gaussian weakening by the edge scaling, never below the weak value;
    * 1: power-law blend between the strong and weak constants;
    * 2: linear blend between the strong and weak constants;
    * 3: by region (bud, boundary, rest), which also picks the rest angle;
    * 4: Hill-function weakening when ``nonuniform_wall_weakening`` is set,
      otherwise as 3.
    """

    spring_constant: float
    spring_constant_weak: float
    angle_0: float = 0.0
    angle_0_bud: float = 0.0
    scale_type: int = 3
    nonuniform_wall_weakening: bool = False
    max_spring_scaler: float = 1.0
    scaling_pow: float = 4.0
    gauss_sigma: float = 1.0
    hill_const: float = 1.0
    hill_pow: float = 1.0


def _region_constants(params: BendingParams, region: int) -> Tuple[float, float]:
    if region == 1:
        return params.spring_constant_weak, params.angle_0_bud
    if region == 0:
        return (
            (params.spring_constant_weak + params.spring_constant) / 2.0,
            (params.angle_0 + params.angle_0_bud) / 2.0,
        )
    return params.spring_constant, params.angle_0


def _region_angle(params: BendingParams, region: int) -> float:
    return _region_constants(params, region)[1]


def bending_spring_constant(
    params: BendingParams,
    scaling_per_edge: Sequence[float],
    edges_in_upperhem: Sequence[int],
    counter: int,
) -> Tuple[float, float]:
    """Stiffness and rest angle of the bending spring on edge ``counter``.

    Raises ValueError for an unknown ``scale_type``.
    """
    k = params.spring_constant
    weak = params.spring_constant_weak
    kind = params.scale_type
    if kind == 0:
        s = scaling_per_edge[counter]
        sigma = params.gauss_sigma
        gauss = (1.0 / math.sqrt(2 * 3.14159 * sigma)) * math.exp(-(s * s) / sigma)
        return max(k * (1.0 - gauss), weak), params.angle_0
    if kind == 1:
        p = scaling_per_edge[counter] ** params.scaling_pow
        return k * p + weak * (1 - p), params.angle_0
    if kind == 2:
        return k - (k - weak) * scaling_per_edge[counter], params.angle_0
    if kind == 3:
        return _region_constants(params, edges_in_upperhem[counter])
    if kind == 4:
        region = edges_in_upperhem[counter]
        if not params.nonuniform_wall_weakening:
            return _region_constants(params, region)
        s = scaling_per_edge[counter]
        spectrum = params.max_spring_scaler * k - weak
        hill = 0.0 if s == 0 else 1.0 / (1.0 + (params.hill_const / s) ** params.hill_pow)
        return max(weak + hill * spectrum, weak), _region_angle(params, region)
    raise ValueError(f"unknown scale type {kind}")


def _opposite_node(triangle: Sequence[int], id_i: int, id_k: int, index: int) -> int:
    for node in triangle:
        if node != id_i and node != id_k:
            return node
    raise ValueError(f"triangle {index} has no node off the edge ({id_i}, {id_k})")


def bending_spring(
    params: BendingParams,
    positions: Sequence[Sequence[float]],
    triangles: Sequence[Sequence[int]],
    scaling_per_edge: Sequence[float],
    edges_in_upperhem: Sequence[int],
    counter: int,
    t1: int,
    t2: int,
    id_k: int,
    id_i: int,
) -> Tuple[float, List[NodeForce]]:
    """Energy and node forces of the bending spring on one edge.

    ``t1`` and ``t2`` are the triangles on either side of edge ``counter``,
    whose ends are ``id_k`` and ``id_i``.  Boundary edges (a missing or
    repeated triangle) give zero energy and no forces.  When a triangle is
    degenerate the forces are left out and the energy is NaN.  Forces are
    listed for nodes i, j, k, l in that order.
    """
    if t1 == INT_MAX or t2 == INT_MAX or t1 == t2:
        return 0.0, []
    what_k, angle0 = bending_spring_constant(
        params, scaling_per_edge, edges_in_upperhem, counter
    )
    id_j = _opposite_node(triangles[t1], id_i, id_k, t1)
    id_l = _opposite_node(triangles[t2], id_i, id_k, t2)

    ri, rj, rk, rl = (positions[n] for n in (id_i, id_j, id_k, id_l))
    rjk = subtract(rk, rj)
    rji = subtract(ri, rj)
    rli = subtract(ri, rl)
    rlk = subtract(rk, rl)
    rki = subtract(ri, rk)

    terms = normal_derivatives(rjk, rji, rli, rlk)
    n1, n2 = terms.normal_1, terms.normal_2
    nn1, nn2 = norm(n1), norm(n2)
    if nn1 == 0.0 or nn2 == 0.0:
        return math.nan, []

    cos_angle = min(1.0, max(-1.0, dot(n1, n2) / (nn1 * nn2)))
    energy = params.spring_constant * (1 - math.cos(math.acos(cos_angle) - angle0))

    ids = {"i": id_i, "j": id_j, "k": id_k, "l": id_l}
    forces = _pair_forces(params.angle_0, what_k, rki, terms, ids)
    return energy, forces


def _pair_forces(angle_0, what_k, rki, terms, ids) -> List[NodeForce]:
    n1, n2 = terms.normal_1, terms.normal_2
    prod = norm(n1) * norm(n2)
    unit_dir = scale(1.0 / norm(rki), rki)
    d_unit = unit_direction_derivatives(rki)
    c12 = cross(n1, n2)
    dot12 = dot(n1, n2)
    sin_num = dot(c12, unit_dir)
    cos0, sin0 = math.cos(angle_0), math.sin(angle_0)

    forces: List[NodeForce] = []
    for node in NODES:
        d1 = terms.d_normal_1[node]
        d2 = terms.d_normal_2[node]
        d_norms = norm_product_derivative(n1, n2, d1, d2)
        d_cross = cross_product_derivative(n1, n2, d1, d2)
        force = []
        for m in range(3):
            d_dot = sum(a * db[m] + b * da[m] for a, b, da, db in zip(n1, n2, d1, d2))
            cose = d_dot / prod - dot12 / prod**2 * d_norms[m]
            sine = (
                (dot(c12, d_unit[node][m]) + dot(d_cross[m], unit_dir)) / prod
                - sin_num / prod**2 * d_norms[m]
            )
            force.append(what_k * (cos0 * cose + sin0 * sine))
        forces.append((ids[node], (force[0], force[1], force[2])))
    return forces


def compute_bending_springs(
    params: BendingParams,
    positions: Sequence[Sequence[float]],
    triangles: Sequence[Sequence[int]],
    edge_triangles: Sequence[Sequence[int]],
    edge_nodes: Sequence[Sequence[int]],
    scaling_per_edge: Sequence[float],
    edges_in_upperhem: Sequence[int],
) -> Tuple[float, Dict[int, Vec3]]:
    """Total bending energy and the summed force on every node touched.

    ``edge_triangles[e]`` holds the two triangles of edge ``e`` and
    ``edge_nodes[e]`` its two end nodes.
    """
    if len(edge_triangles) != len(edge_nodes):
        raise ValueError(
            f"{len(edge_triangles)} edge triangle pairs but {len(edge_nodes)} edges"
        )
    total = 0.0
    summed: Dict[int, Vec3] = {}
    for counter, ((t1, t2), (id_k, id_i)) in enumerate(zip(edge_triangles, edge_nodes)):
        energy, forces = bending_spring(
            params, positions, triangles, scaling_per_edge, edges_in_upperhem,
            counter, t1, t2, id_k, id_i,
        )
        total += energy
        for node_id, f in forces:
            old = summed.get(node_id, (0.0, 0.0, 0.0))
            summed[node_id] = (old[0] + f[0], old[1] + f[1], old[2] + f[2])
    return total, summed