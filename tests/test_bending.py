import math

import pytest

from budsim.bending import (
    BendingParams,
    bending_spring,
    bending_spring_constant,
    compute_bending_springs,
)
from budsim.geometry import INT_MAX

# Nodes: 0 = i, 1 = k, 2 = j, 3 = l.  Triangle 0 holds j, triangle 1 holds l.
FLAT = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.5, -1.0, 0.0), (0.5, 1.0, 0.0)]
BENT = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.5, -1.0, 0.0), (0.5, 1.0, 0.6)]
TRIANGLES = [(0, 1, 2), (0, 1, 3)]


def _params(**kw):
    base = dict(spring_constant=4.0, spring_constant_weak=1.0, scale_type=3)
    base.update(kw)
    return BendingParams(**base)


def _spring(params, positions, region=2, scaling=0.0, t1=0, t2=1):
    return bending_spring(params, positions, TRIANGLES, [scaling], [region], 0, t1, t2, 1, 0)


def _total(forces):
    return tuple(sum(f[m] for _, f in forces) for m in range(3))


def test_flat_pair_has_no_energy_and_no_force():
    energy, forces = _spring(_params(), FLAT)
    assert energy == pytest.approx(0.0, abs=1e-12)
    assert [n for n, _ in forces] == [0, 2, 1, 3]
    for _, f in forces:
        assert f == pytest.approx((0.0, 0.0, 0.0), abs=1e-12)


def test_boundary_edges_are_skipped():
    params = _params()
    assert _spring(params, BENT, t1=INT_MAX) == (0.0, [])
    assert _spring(params, BENT, t2=INT_MAX) == (0.0, [])
    assert _spring(params, BENT, t1=1, t2=1) == (0.0, [])


@pytest.mark.parametrize("angle", [0.0, 0.3, -0.5])
def test_forces_sum_to_zero(angle):
    _, forces = _spring(_params(angle_0=angle), BENT)
    assert _total(forces) == pytest.approx((0.0, 0.0, 0.0), abs=1e-10)


def test_forces_are_minus_energy_gradient():
    params = _params()
    _, forces = _spring(params, BENT)
    h = 1e-6
    for node_id, f in forces:
        for m in range(3):
            plus = [list(p) for p in BENT]
            minus = [list(p) for p in BENT]
            plus[node_id][m] += h
            minus[node_id][m] -= h
            e_plus, _ = _spring(params, plus)
            e_minus, _ = _spring(params, minus)
            assert f[m] == pytest.approx(-(e_plus - e_minus) / (2 * h), abs=1e-5)


def test_energy_uses_full_constant_while_forces_scale():
    params = _params(scale_type=2)
    e_strong, f_strong = _spring(params, BENT, scaling=0.0)
    e_weak, f_weak = _spring(params, BENT, scaling=1.0)
    assert e_strong == pytest.approx(e_weak)
    ratio = params.spring_constant_weak / params.spring_constant
    for (_, fs), (_, fw) in zip(f_strong, f_weak):
        assert fw == pytest.approx(tuple(ratio * c for c in fs))


def test_energy_matches_cosine_form():
    params = _params(angle_0=0.2)
    energy, _ = _spring(params, BENT)
    n1 = (0.0, 0.0, 1.0)
    # Normal of triangle (i, k, l) computed from the positions above.
    rli = tuple(a - b for a, b in zip(BENT[0], BENT[3]))
    rlk = tuple(a - b for a, b in zip(BENT[1], BENT[3]))
    n2 = (
        rli[1] * rlk[2] - rli[2] * rlk[1],
        rli[2] * rlk[0] - rli[0] * rlk[2],
        rli[0] * rlk[1] - rli[1] * rlk[0],
    )
    cos_t = sum(a * b for a, b in zip(n1, n2)) / math.sqrt(sum(c * c for c in n2))
    expected = params.spring_constant * (1 - math.cos(math.acos(cos_t) - 0.2))
    assert energy == pytest.approx(expected)


def test_region_constants():
    params = _params(angle_0=0.4, angle_0_bud=0.8)
    assert bending_spring_constant(params, [0.0], [1], 0) == (1.0, 0.8)
    assert bending_spring_constant(params, [0.0], [0], 0) == pytest.approx((2.5, 0.6000000000000001))
    assert bending_spring_constant(params, [0.0], [2], 0) == (4.0, 0.4)


def test_blend_constants():
    lin = _params(scale_type=2)
    assert bending_spring_constant(lin, [0.0], [2], 0)[0] == lin.spring_constant
    assert bending_spring_constant(lin, [1.0], [2], 0)[0] == lin.spring_constant_weak
    power = _params(scale_type=1)
    assert bending_spring_constant(power, [1.0], [2], 0)[0] == power.spring_constant
    assert bending_spring_constant(power, [0.0], [2], 0)[0] == power.spring_constant_weak


def test_gaussian_constant_is_clamped_to_weak():
    params = _params(scale_type=0, gauss_sigma=0.01)
    k, _ = bending_spring_constant(params, [0.0], [2], 0)
    assert k == params.spring_constant_weak
    far, _ = bending_spring_constant(params, [10.0], [2], 0)
    assert far == pytest.approx(params.spring_constant)


def test_hill_constant_stays_in_range():
    params = _params(scale_type=4, nonuniform_wall_weakening=True, max_spring_scaler=1.0,
                     hill_const=0.5, hill_pow=2.0, angle_0_bud=0.7)
    low, angle = bending_spring_constant(params, [0.0], [1], 0)
    assert low == params.spring_constant_weak
    assert angle == 0.7
    high, _ = bending_spring_constant(params, [1e6], [1], 0)
    assert high == pytest.approx(params.spring_constant)
    mid, _ = bending_spring_constant(params, [0.5], [1], 0)
    assert params.spring_constant_weak < mid < params.spring_constant


def test_type_four_without_weakening_uses_regions():
    params = _params(scale_type=4, angle_0_bud=0.9)
    assert bending_spring_constant(params, [0.0], [1], 0) == (1.0, 0.9)


def test_unknown_scale_type():
    with pytest.raises(ValueError):
        bending_spring_constant(_params(scale_type=7), [0.0], [2], 0)


def test_triangle_without_opposite_node():
    with pytest.raises(ValueError):
        bending_spring(_params(), BENT, [(0, 1, 0), (0, 1, 3)], [0.0], [2], 0, 0, 1, 1, 0)


def test_degenerate_triangle_gives_nan_and_no_force():
    collapsed = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.5, 0.0, 0.0), (0.5, 1.0, 0.0)]
    energy, forces = _spring(_params(), collapsed)
    assert math.isnan(energy)
    assert forces == []


def test_compute_sums_edges():
    params = _params(angle_0=0.1)
    edge_triangles = [(0, 1), (0, INT_MAX)]
    edge_nodes = [(1, 0), (0, 2)]
    total, forces = compute_bending_springs(
        params, BENT, TRIANGLES, edge_triangles, edge_nodes, [0.0, 0.0], [2, 2]
    )
    single, single_forces = _spring(params, BENT)
    assert total == pytest.approx(single)
    assert set(forces) == {0, 1, 2, 3}
    for node_id, f in single_forces:
        assert forces[node_id] == pytest.approx(f)


def test_compute_rejects_mismatched_tables():
    with pytest.raises(ValueError):
        compute_bending_springs(_params(), BENT, TRIANGLES, [(0, 1)], [], [0.0], [2])