import numpy as np
import pytest

from robfolio import AssetUniverse, SolverConfig


def test_synthetic_formulas():
    universe = AssetUniverse.synthetic(20)
    assert len(universe) == 20
    assert np.isclose(universe.mean[0], 1.15 + 0.05 / 20)
    assert np.isclose(universe.mean[-1], 1.2)
    assert np.isclose(universe.stddev[0], 0.05 / 60 * np.sqrt(2 * 20 * 21))
    assert np.all(np.diff(universe.mean) > 0)
    assert np.all(np.diff(universe.stddev) > 0)
    assert universe.max_assets == 5
    assert np.isclose(universe.max_mean, 1.2)


def test_universe_is_read_only():
    mean = np.array([1.0, 1.1])
    universe = AssetUniverse(mean, [0.1, 0.2])
    mean[0] = 5.0  # caller's array is copied
    assert universe.mean[0] == 1.0
    with pytest.raises(ValueError):
        universe.mean[0] = 2.0
    asset = universe[1]
    assert asset.index == 1 and asset.mean == 1.1 and asset.stddev == 0.2
    assert [a.index for a in universe] == [0, 1]


def test_universe_validation():
    with pytest.raises(ValueError):
        AssetUniverse([1.0, 1.1], [0.1])
    with pytest.raises(ValueError):
        AssetUniverse([1.0], [-0.1])
    with pytest.raises(ValueError):
        AssetUniverse([], [])
    with pytest.raises(ValueError):
        AssetUniverse([[1.0]], [[0.1]])
    with pytest.raises(ValueError):
        AssetUniverse([np.nan], [0.1])


def test_small_universe_still_holds_one_asset():
    assert AssetUniverse([1.0, 1.1, 1.2], [0.1, 0.1, 0.1]).max_assets == 1


def test_config_validation():
    cfg = SolverConfig()
    assert cfg.backend == "cvxpy"
    assert cfg.with_overrides(cut_tolerance=1e-6).cut_tolerance == 1e-6
    assert cfg.mip_gap == 1e-9 and cfg.seed_cuts and cfg.refine_support
    with pytest.raises(ValueError):
        SolverConfig(backend="cplex")
    with pytest.raises(ValueError):
        SolverConfig(oracle_method="bisection")
    with pytest.raises(ValueError):
        SolverConfig(max_rounds=0)
    with pytest.raises(ValueError):
        SolverConfig(mip_gap=-1e-3)
