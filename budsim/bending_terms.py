"""Derivative terms used by the cosine bending energy of a triangle pair.

The pair of triangles sharing the edge ``ri``-``rk`` is labelled::

           rl
          /  \\
        ri -- rk
          \\  /
           rj

with ``rjk = rk - rj`` and so on.  The normals are ``N1 = rjk x rji`` and
``N2 = rli x rlk``.  A matrix here is a tuple of three vectors.  For the
derivatives of a normal, the rows are the gradients of its A, B and C
components with respect to one node's coordinates.  For the derivatives of
a vector quantity, row ``m`` is that vector differentiated by the node's
``m``-th coordinate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Sequence, Tuple

from budsim.geometry import Vec3, cross, norm, scale

Mat3 = Tuple[Vec3, Vec3, Vec3]

#: Node labels of a bending pair, in the order forces are written out.
NODES = ("i", "j", "k", "l")

_ZERO: Vec3 = (0.0, 0.0, 0.0)
_ZERO_MAT: Mat3 = (_ZERO, _ZERO, _ZERO)
_UNIT: Mat3 = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))


@dataclass(frozen=True)
class NormalDerivatives:
    """The two normals of a triangle pair and their gradients.

    ``d_normal_1[node]`` and ``d_normal_2[node]`` hold the gradients of the
    (A, B, C) components of each normal with respect to that node, for every
    node label in :data:`NODES`.
    """

    normal_1: Vec3
    normal_2: Vec3
    d_normal_1: Mapping[str, Mat3]
    d_normal_2: Mapping[str, Mat3]


def unit_direction_derivatives(rki: Sequence[float]) -> Dict[str, Mat3]:
    """Derivatives of the unit vector ``rki / |rki|`` for every node.

    ``rki = ri - rk``, so only ``ri`` and ``rk`` contribute; the rows for
    ``rj`` and ``rl`` are zero.  Raises ValueError when ``rki`` has no length.
    """
    nrki = norm(rki)
    if nrki == 0.0:
        raise ValueError("shared edge has zero length")
    inv_sq = 1.0 / (nrki * nrki)

    def row(sign: float, m: int) -> Vec3:
        along = scale(nrki * sign, _UNIT[m])
        back = scale(-sign * rki[m] / nrki, rki)
        return scale(inv_sq, (along[0] + back[0], along[1] + back[1], along[2] + back[2]))

    d_ri: Mat3 = (row(1.0, 0), row(1.0, 1), row(1.0, 2))
    d_rk: Mat3 = (row(-1.0, 0), row(-1.0, 1), row(-1.0, 2))
    return {"i": d_ri, "j": _ZERO_MAT, "k": d_rk, "l": _ZERO_MAT}


def normal_derivatives(
    rjk: Sequence[float],
    rji: Sequence[float],
    rli: Sequence[float],
    rlk: Sequence[float],
) -> NormalDerivatives:
    """Normals ``N1 = rjk x rji``, ``N2 = rli x rlk`` and their node gradients."""
    n1 = cross(rjk, rji)
    n2 = cross(rli, rlk)

    d1: Dict[str, Mat3] = {
        "j": (
            (0.0, -rji[2] + rjk[2], -rjk[1] + rji[1]),
            (rji[2] - rjk[2], 0.0, rjk[0] - rji[0]),
            (-rji[1] + rjk[1], -rjk[0] + rji[0], 0.0),
        ),
        "k": (
            (0.0, rji[2], -rji[1]),
            (-rji[2], 0.0, rji[0]),
            (rji[1], -rji[0], 0.0),
        ),
        "i": (
            (0.0, -rjk[2], rjk[1]),
            (rjk[2], 0.0, -rjk[0]),
            (-rjk[1], rjk[0], 0.0),
        ),
        "l": _ZERO_MAT,
    }
    d2: Dict[str, Mat3] = {
        "j": _ZERO_MAT,
        "k": (
            (0.0, -rli[2], rli[1]),
            (rli[2], 0.0, -rli[0]),
            (-rli[1], rli[0], 0.0),
        ),
        "i": (
            (0.0, rlk[2], -rlk[1]),
            (-rlk[2], 0.0, rlk[0]),
            (rlk[1], -rlk[0], 0.0),
        ),
        "l": (
            (0.0, -rlk[2] + rli[2], -rli[1] + rlk[1]),
            (rlk[2] - rli[2], 0.0, rli[0] - rlk[0]),
            (-rlk[1] + rli[1], -rli[0] + rlk[0], 0.0),
        ),
    }
    return NormalDerivatives(n1, n2, d1, d2)


def cross_product_derivative(
    n1: Sequence[float],
    n2: Sequence[float],
    d1: Sequence[Sequence[float]],
    d2: Sequence[Sequence[float]],
) -> Mat3:
    """Derivative of ``N1 x N2`` with respect to one node.

    ``d1`` and ``d2`` are the (A, B, C) gradients of each normal for that
    node; row ``m`` of the result is ``d(N1 x N2)/d r_m``.
    """
    a1, b1, c1 = n1
    a2, b2, c2 = n2
    da1, db1, dc1 = d1
    da2, db2, dc2 = d2

    def row(m: int) -> Vec3:
        return (
            (b1 * dc2[m] + c2 * db1[m]) - (b2 * dc1[m] + c1 * db2[m]),
            -(a1 * dc2[m] + c2 * da1[m]) + (a2 * dc1[m] + c1 * da2[m]),
            (a1 * db2[m] + b2 * da1[m]) - (a2 * db1[m] + b1 * da2[m]),
        )

    return (row(0), row(1), row(2))


def norm_product_derivative(
    n1: Sequence[float],
    n2: Sequence[float],
    d1: Sequence[Sequence[float]],
    d2: Sequence[Sequence[float]],
) -> Vec3:
    """Gradient of ``|N1| * |N2|`` with respect to one node.

    Raises ValueError when either normal vanishes (a degenerate triangle).
    """
    nn1 = norm(n1)
    nn2 = norm(n2)
    if nn1 == 0.0 or nn2 == 0.0:
        raise ValueError("degenerate triangle: normal has zero length")
    a1, b1, c1 = n1
    a2, b2, c2 = n2
    da1, db1, dc1 = d1
    da2, db2, dc2 = d2
    return tuple(
        nn1 / nn2 * (a2 * da2[m] + b2 * db2[m] + c2 * dc2[m])
        + nn2 / nn1 * (a1 * da1[m] + b1 * db1[m] + c1 * dc1[m])
        for m in range(3)
    )