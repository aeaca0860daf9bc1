"""Linear edge springs, the Lennard-Jones particle and explicit node advance."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence

from budsim.geometry import Vec3, subtract


@dataclass(frozen=True)
class LinearSpringResult:
    """Forces on both ends of an edge spring and its energy."""

    id_left: int
    id_right: int
    force_left: Vec3
    force_right: Vec3
    energy: float


@dataclass(frozen=True)
class LJResult:
    """Force on a node from the LJ particle, the reaction on the particle, and the energy."""

    node_force: Vec3
    reaction: Vec3
    energy: float


def linear_spring(
    positions: Sequence[Sequence[float]],
    edge_l: int,
    edge_r: int,
    length_zero: float,
    spring_constant: float,
) -> LinearSpringResult:
    """Hookean spring between nodes ``edge_l`` and ``edge_r``.

    Raises ValueError when both ends sit at the same point, where the
    spring direction is undefined.
    """
    d = subtract(positions[edge_l], positions[edge_r])
    length_current = math.sqrt(d[0] ** 2 + d[1] ** 2 + d[2] ** 2)
    if length_current == 0.0:
        raise ValueError(f"nodes {edge_l} and {edge_r} coincide")
    magnitude = -spring_constant * (length_current - length_zero)
    force_left = tuple(magnitude * c / length_current for c in d)
    force_right = tuple(-f for f in force_left)
    energy = (spring_constant / 2.0) * (length_current - length_zero) ** 2
    return LinearSpringResult(edge_l, edge_r, force_left, force_right, energy)


def lj_spring(
    position: Sequence[float],
    lj_position: Sequence[float],
    rmin: float,
    rcutoff: float,
    epsilon: float,
) -> LJResult:
    """Lennard-Jones interaction between one node and the LJ particle.

    The force is applied only inside ``rcutoff``; the energy is always
    reported.
    """
    d = subtract(lj_position, position)
    r = math.sqrt(d[0] ** 2 + d[1] ** 2 + d[2] ** 2)
    if r < rcutoff:
        coeff = epsilon * (-12.0 * rmin**12 / r**14 + 12.0 * rmin**6 / r**8)
        node_force = (coeff * d[0], coeff * d[1], coeff * d[2])
    else:
        node_force = (0.0, 0.0, 0.0)
    energy = epsilon * ((rmin / r) ** 12 - 2.0 * (rmin / r) ** 6)
    reaction = tuple(-f for f in node_force)
    return LJResult(node_force, reaction, energy)


def advance_position(
    position: Sequence[float], force: Sequence[float], dt: float, mass: float
) -> Vec3:
    """One explicit overdamped step: ``x + dt/mass * f``."""
    step = dt / mass
    return (
        position[0] + step * force[0],
        position[1] + step * force[1],
        position[2] + step * force[2],
    )


def advance_positions(
    positions: Sequence[Sequence[float]],
    forces: Sequence[Sequence[float]],
    dt: float,
    mass: float,
) -> List[Vec3]:
    """Advance every node by its force."""
    if len(positions) != len(forces):
        raise ValueError(
            f"{len(positions)} positions but {len(forces)} forces"
        )
    return [advance_position(p, f, dt, mass) for p, f in zip(positions, forces)]