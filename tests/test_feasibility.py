import numpy as np
import pytest

from robfolio import FeasibilityError, assert_feasible, check_portfolio


def test_feasible_portfolio():
    report = check_portfolio(np.array([0.25, 0.75, 0.0, 0.0]), max_assets=2)
    assert report.ok
    assert report.held == 2
    assert report.min_weight == 0.0


def test_each_violation_is_reported():
    report = check_portfolio(np.array([0.5, 0.5, 0.5, -0.5]), max_assets=2)
    assert not report.ok
    assert report.held == 3
    assert len(report.violations) == 2  # cardinality and short position

    report = check_portfolio(np.array([0.5, 0.5 + 1e-9]), max_assets=2)
    assert len(report.violations) == 1
    assert report.sum_error > 1e-12


def test_dust_weights_count_as_held():
    weights = np.array([1.0 - 2e-12, 1e-12, 1e-12])
    assert not check_portfolio(weights, max_assets=1).ok
    assert check_portfolio(weights, max_assets=3).ok


def test_assert_feasible_raises():
    with pytest.raises(FeasibilityError) as info:
        assert_feasible(np.array([0.9, 0.2]), max_assets=2)
    assert "sum" in str(info.value)
    assert len(info.value.violations) == 1
