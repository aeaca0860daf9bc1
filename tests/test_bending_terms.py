import pytest

from budsim.bending_terms import (
    NODES,
    cross_product_derivative,
    norm_product_derivative,
    normal_derivatives,
    unit_direction_derivatives,
)
from budsim.geometry import cross, norm, subtract

H = 1e-6

BASE = {
    "i": (1.0, 0.0, 0.1),
    "j": (0.1, -1.0, 0.3),
    "k": (-1.0, 0.0, -0.2),
    "l": (-0.2, 1.0, 0.4),
}


def _edges(pos):
    ri, rj, rk, rl = pos["i"], pos["j"], pos["k"], pos["l"]
    return {
        "rjk": subtract(rk, rj),
        "rji": subtract(ri, rj),
        "rli": subtract(ri, rl),
        "rlk": subtract(rk, rl),
        "rki": subtract(ri, rk),
    }


def _terms(pos):
    e = _edges(pos)
    return normal_derivatives(e["rjk"], e["rji"], e["rli"], e["rlk"])


def _shifted(node, m, delta):
    pos = dict(BASE)
    p = list(pos[node])
    p[m] += delta
    pos[node] = tuple(p)
    return pos


def _numeric(func, node, m):
    plus = func(_shifted(node, m, H))
    minus = func(_shifted(node, m, -H))
    if isinstance(plus, tuple):
        return tuple((a - b) / (2 * H) for a, b in zip(plus, minus))
    return (plus - minus) / (2 * H)


@pytest.mark.parametrize("node", NODES)
@pytest.mark.parametrize("m", range(3))
def test_normal_gradients_match_finite_differences(node, m):
    terms = _terms(BASE)
    num1 = _numeric(lambda p: _terms(p).normal_1, node, m)
    num2 = _numeric(lambda p: _terms(p).normal_2, node, m)
    for c in range(3):
        assert terms.d_normal_1[node][c][m] == pytest.approx(num1[c], abs=1e-5)
        assert terms.d_normal_2[node][c][m] == pytest.approx(num2[c], abs=1e-5)


def test_normals_are_the_cross_products():
    e = _edges(BASE)
    terms = _terms(BASE)
    assert terms.normal_1 == cross(e["rjk"], e["rji"])
    assert terms.normal_2 == cross(e["rli"], e["rlk"])


def test_far_nodes_do_not_move_the_other_normal():
    terms = _terms(BASE)
    for row in terms.d_normal_1["l"] + terms.d_normal_2["j"]:
        assert row == (0.0, 0.0, 0.0)


@pytest.mark.parametrize("node", NODES)
def test_cross_product_derivative_matches_finite_differences(node):
    terms = _terms(BASE)
    result = cross_product_derivative(
        terms.normal_1, terms.normal_2, terms.d_normal_1[node], terms.d_normal_2[node]
    )

    def crossed(p):
        t = _terms(p)
        return cross(t.normal_1, t.normal_2)

    for m in range(3):
        expected = _numeric(crossed, node, m)
        assert result[m] == pytest.approx(expected, abs=1e-5)


@pytest.mark.parametrize("node", NODES)
def test_norm_product_derivative_matches_finite_differences(node):
    terms = _terms(BASE)
    result = norm_product_derivative(
        terms.normal_1, terms.normal_2, terms.d_normal_1[node], terms.d_normal_2[node]
    )

    def product(p):
        t = _terms(p)
        return norm(t.normal_1) * norm(t.normal_2)

    expected = tuple(_numeric(product, node, m) for m in range(3))
    assert result == pytest.approx(expected, abs=1e-5)


def test_norm_product_derivative_rejects_degenerate_normal():
    zero = ((0.0, 0.0, 0.0),) * 3
    with pytest.raises(ValueError):
        norm_product_derivative((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), zero, zero)


@pytest.mark.parametrize("node", NODES)
def test_unit_direction_derivatives_match_finite_differences(node):
    result = unit_direction_derivatives(_edges(BASE)["rki"])

    def unit(p):
        rki = _edges(p)["rki"]
        n = norm(rki)
        return tuple(c / n for c in rki)

    for m in range(3):
        expected = _numeric(unit, node, m)
        assert result[node][m] == pytest.approx(expected, abs=1e-5)


def test_unit_direction_along_x_has_no_radial_derivative():
    result = unit_direction_derivatives((2.0, 0.0, 0.0))
    assert result["i"][0] == pytest.approx((0.0, 0.0, 0.0))
    assert result["i"][1] == pytest.approx((0.0, 0.5, 0.0))
    assert result["k"][1] == pytest.approx((0.0, -0.5, 0.0))


def test_unit_direction_rejects_zero_edge():
    with pytest.raises(ValueError):
        unit_direction_derivatives((0.0, 0.0, 0.0))