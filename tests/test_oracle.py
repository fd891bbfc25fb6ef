import numpy as np
import pytest

from robfolio import (
    AssetUniverse,
    EllipsoidalUncertainty,
    OracleInfeasibleError,
    WorstCaseOracle,
)


def _uncertainty(n=6, gamma=np.sqrt(10)):
    return EllipsoidalUncertainty.from_universe(AssetUniverse.synthetic(n), gamma)


def test_qp_matches_closed_form():
    region = _uncertainty()
    qp = WorstCaseOracle(region, method="qp")
    closed = WorstCaseOracle(region, method="closed_form")
    rng = np.random.default_rng(0)
    for _ in range(5):
        x = rng.dirichlet(np.ones(region.dim))
        p_qp, v_qp = qp.worst_case(x)
        p_cf, v_cf = closed.worst_case(x)
        assert np.isclose(v_qp, v_cf, atol=1e-6)
        assert np.allclose(p_qp, p_cf, atol=1e-4)
        assert np.isclose(v_cf, region.robust_return(x))


def test_zero_gamma_returns_mean_exactly():
    region = _uncertainty(gamma=0.0)
    for method in WorstCaseOracle.METHODS:
        worst, value = WorstCaseOracle(region, method=method).worst_case(np.full(6, 1 / 6))
        assert np.array_equal(worst, region.mean)
        assert np.isclose(value, region.mean.mean())


def test_cut_admission_respects_tolerance():
    region = _uncertainty()
    oracle = WorstCaseOracle(region, tolerance=1e-2, method="closed_form")
    x = np.zeros(6)
    x[-1] = 1.0
    _, worst = oracle.worst_case(x)

    cut = oracle.propose_cut(x, worst + 0.5)
    assert cut is not None
    assert np.isclose(cut.worst_value, worst)
    assert np.isclose(cut.violation, 0.5)
    assert np.isclose(cut.evaluate(x), worst)

    assert oracle.propose_cut(x, worst) is None
    assert oracle.propose_cut(x, worst + 5e-3) is None


def test_cut_is_valid_everywhere():
    region = _uncertainty()
    oracle = WorstCaseOracle(region, method="closed_form")
    cut = oracle.propose_cut(np.full(6, 1 / 6), 10.0)
    rng = np.random.default_rng(3)
    # coefficients lie in U, so the cut never excludes a portfolio's true worst case
    for x in rng.dirichlet(np.ones(6), size=20):
        assert cut.evaluate(x) >= region.robust_return(x) - 1e-12


class _BrokenUncertainty(EllipsoidalUncertainty):
    def cvxpy_constraints(self, p_var, d_var):
        return super().cvxpy_constraints(p_var, d_var) + [d_var >= self.gamma + 1.0]


def test_infeasible_subproblem_is_fatal():
    base = _uncertainty()
    broken = _BrokenUncertainty(base.mean, base.stddev, base.gamma)
    oracle = WorstCaseOracle(broken, method="qp")
    with pytest.raises(OracleInfeasibleError):
        oracle.propose_cut(np.full(6, 1 / 6), 10.0)


def test_invalid_arguments():
    region = _uncertainty()
    with pytest.raises(ValueError):
        WorstCaseOracle(region, method="bisection")
    with pytest.raises(ValueError):
        WorstCaseOracle(region, tolerance=-1.0)
    with pytest.raises(ValueError):
        WorstCaseOracle(region).worst_case(np.ones(3))
