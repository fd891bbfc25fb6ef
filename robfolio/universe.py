from __future__ import annotations

import dataclasses
from typing import Iterator, Sequence, Union

import numpy as np

ArrayLike = Union[Sequence[float], np.ndarray]


@dataclasses.dataclass(frozen=True)
class Asset:
    index: int
    mean: float
    stddev: float


def _frozen_vector(values: ArrayLike, name: str) -> np.ndarray:
    arr = np.array(values, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be one-dimensional, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} contains non-finite values")
    arr.setflags(write=False)
    return arr


class AssetUniverse:
    """
    Immutable per-asset return statistics.

    Holds the historical mean return and standard deviation of each asset.
    Both arrays are copied and made read-only so a universe can be shared
    between repeated or parallel solves without cross-contamination.
    """

    def __init__(self, mean: ArrayLike, stddev: ArrayLike):
        mean_arr = _frozen_vector(mean, "mean")
        stddev_arr = _frozen_vector(stddev, "stddev")
        if mean_arr.shape != stddev_arr.shape:
            raise ValueError(
                f"mean and stddev must have the same length, got {mean_arr.size} and {stddev_arr.size}"
            )
        if mean_arr.size == 0:
            raise ValueError("universe must contain at least one asset")
        if np.any(stddev_arr < 0):
            raise ValueError("stddev must be non-negative")
        self._mean = mean_arr
        self._stddev = stddev_arr

    @classmethod
    def synthetic(cls, n: int) -> "AssetUniverse":
        """
        Deterministic test universe of n assets with increasing mean and risk.

        mean_i = 1.15 + i * 0.05 / n
        stddev_i = 0.05 / (3 n) * sqrt(2 i n (n + 1)),  i = 1..n

        For n = 20 with at most 5 holdings, the robust optimum is about 1.1050
        at gamma = sqrt(10) and about 1.1274 at radius 10 ** 0.25.
        """
        if n < 1:
            raise ValueError("n must be positive")
        idx = np.arange(1, n + 1, dtype=float)
        mean = 1.15 + idx * 0.05 / n
        stddev = 0.05 / (3.0 * n) * np.sqrt(2.0 * idx * n * (n + 1))
        return cls(mean, stddev)

    @property
    def mean(self) -> np.ndarray:
        return self._mean

    @property
    def stddev(self) -> np.ndarray:
        return self._stddev

    @property
    def n_assets(self) -> int:
        return int(self._mean.size)

    @property
    def max_assets(self) -> int:
        # at most a quarter of the universe may be held
        return max(1, self.n_assets // 4)

    @property
    def max_mean(self) -> float:
        return float(self._mean.max())

    def __len__(self) -> int:
        return self.n_assets

    def __getitem__(self, i: int) -> Asset:
        return Asset(index=i, mean=float(self._mean[i]), stddev=float(self._stddev[i]))

    def __iter__(self) -> Iterator[Asset]:
        for i in range(self.n_assets):
            yield self[i]

    def __repr__(self) -> str:
        return f"AssetUniverse(n_assets={self.n_assets})"
