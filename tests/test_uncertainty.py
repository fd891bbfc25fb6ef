import numpy as np
import pytest

from robfolio import AssetUniverse, EllipsoidalUncertainty


def test_contains_and_sample():
    mean = np.array([1.0, 1.2])
    stddev = np.array([0.1, 0.2])
    region = EllipsoidalUncertainty(mean, stddev, gamma=2.0)
    assert region.contains(mean)
    assert region.contains(mean + np.array([0.2, 0.0]))  # d = (2, 0)
    assert not region.contains(mean + np.array([0.2, 0.2]))
    samples = region.sample(50, rng=np.random.default_rng(0))
    assert samples.shape == (50, 2)
    assert all(region.contains(p) for p in samples)


def test_radius_is_gamma_not_sqrt_gamma():
    region = EllipsoidalUncertainty(np.zeros(1), np.ones(1), gamma=np.sqrt(10))
    # |d| = 3 lies inside ||d|| <= sqrt(10) but outside ||d||^2 <= sqrt(10)
    assert region.contains(np.array([-3.0]))
    _, value = region.worst_case(np.array([1.0]))
    assert np.isclose(value, -np.sqrt(10))


def test_worst_case_closed_form():
    region = EllipsoidalUncertainty(np.array([1.0, 1.0]), np.array([3.0, 4.0]), gamma=1.0)
    x = np.array([1.0, 1.0])
    worst, value = region.worst_case(x)
    # ||stddev * x|| = 5
    assert np.allclose(worst, [1.0 - 9.0 / 5.0, 1.0 - 16.0 / 5.0])
    assert np.isclose(value, 2.0 - 5.0)
    assert np.isclose(region.robust_return(x), value)
    assert region.contains(worst)


def test_worst_case_beats_samples():
    universe = AssetUniverse.synthetic(8)
    region = EllipsoidalUncertainty.from_universe(universe, gamma=1.5)
    x = np.full(8, 1 / 8)
    _, value = region.worst_case(x)
    samples = region.sample(500, rng=np.random.default_rng(1))
    assert np.all(samples @ x >= value - 1e-12)


def test_zero_gamma_and_zero_weights():
    mean = np.array([1.1, 1.2])
    region = EllipsoidalUncertainty(mean, np.array([0.1, 0.1]), gamma=0.0)
    worst, _ = region.worst_case(np.array([0.5, 0.5]))
    assert np.array_equal(worst, mean)
    region = EllipsoidalUncertainty(mean, np.array([0.1, 0.1]), gamma=1.0)
    worst, value = region.worst_case(np.zeros(2))
    assert np.array_equal(worst, mean) and value == 0.0


def test_invalid_gamma():
    with pytest.raises(ValueError):
        EllipsoidalUncertainty(np.zeros(2), np.ones(2), gamma=-1.0)
    with pytest.raises(ValueError):
        EllipsoidalUncertainty(np.zeros(2), np.ones(2), gamma=np.inf)
