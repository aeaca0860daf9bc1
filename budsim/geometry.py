"""Small 3-vector helpers and triangle area terms for a membrane mesh.

Vectors are plain tuples ``(x, y, z)``; node positions are any sequence of
such tuples indexed by node id.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

Vec3 = Tuple[float, float, float]

#: Sentinel used by the mesh tables for a missing node, edge or triangle.
INT_MAX = 2**31 - 1


def subtract(a: Sequence[float], b: Sequence[float]) -> Vec3:
    """Return ``a - b``."""
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def add(*args: Sequence[float]) -> Vec3:
    """Return the component-wise sum of any number of vectors."""
    return (
        sum(v[0] for v in args),
        sum(v[1] for v in args),
        sum(v[2] for v in args),
    )


def scale(factor: float, v: Sequence[float]) -> Vec3:
    """Return ``factor * v``."""
    return (factor * v[0], factor * v[1], factor * v[2])


def dot(a: Sequence[float], b: Sequence[float]) -> float:
    """Return the dot product of two vectors."""
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross(a: Sequence[float], b: Sequence[float]) -> Vec3:
    """Return the cross product ``a x b``."""
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def norm(v: Sequence[float]) -> float:
    """Return the Euclidean length of a vector."""
    return math.sqrt(dot(v, v))


def triangle_area(
    ri: Sequence[float], rj: Sequence[float], rk: Sequence[float]
) -> float:
    """Area of the triangle with corners ``ri``, ``rj``, ``rk``."""
    rkj = subtract(rk, rj)
    rij = subtract(ri, rj)
    return norm(cross(rkj, rij)) / 2.0


def area_energy(
    positions: Sequence[Sequence[float]],
    triangle: Sequence[int],
    area_0: float,
    spring_constant: float,
) -> float:
    """Harmonic area energy ``k/2 * (A - A0)^2 / A0`` of one triangle."""
    id_i, id_j, id_k = triangle
    area_current = triangle_area(positions[id_i], positions[id_j], positions[id_k])
    return spring_constant / 2.0 * (area_current - area_0) ** 2 / area_0


def bud_area(
    positions: Sequence[Sequence[float]],
    triangle: Sequence[int],
    in_upper_hemisphere: int | bool,
) -> float:
    """Area of a triangle counted towards the bud, by Heron's formula.

    Triangles outside the upper hemisphere, or with a missing node, count
    as zero.
    """
    r1, r2, r3 = triangle
    if in_upper_hemisphere != 1 or INT_MAX in (r1, r2, r3):
        return 0.0
    p1, p2, p3 = positions[r1], positions[r2], positions[r3]
    a = norm(subtract(p2, p1))
    b = norm(subtract(p3, p2))
    c = norm(subtract(p3, p1))
    s = (a + b + c) / 2.0
    return math.sqrt(max(s * (s - a) * (s - b) * (s - c), 0.0))