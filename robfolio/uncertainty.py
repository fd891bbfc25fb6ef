from __future__ import annotations

from typing import List, Optional, Tuple

import cvxpy as cp
import numpy as np

from .universe import AssetUniverse


class EllipsoidalUncertainty:
    """
    Return uncertainty set around historical means.

    U = {p : p_i = mean_i + stddev_i * d_i, ||d||_2 <= gamma}

    The ball constraint is written sum(d_i^2) <= gamma^2. In the original
    (mean, stddev) coordinates this is an axis-aligned ellipsoid with shape
    matrix diag(1 / stddev^2).
    """

    def __init__(self, mean: np.ndarray, stddev: np.ndarray, gamma: float):
        gamma = float(gamma)
        if not np.isfinite(gamma) or gamma < 0:
            raise ValueError(f"gamma must be finite and non-negative, got {gamma}")
        self.mean = np.asarray(mean, dtype=float)
        self.stddev = np.asarray(stddev, dtype=float)
        if self.mean.shape != self.stddev.shape:
            raise ValueError("mean and stddev must have the same shape")
        self.gamma = gamma

    @classmethod
    def from_universe(cls, universe: AssetUniverse, gamma: float) -> "EllipsoidalUncertainty":
        return cls(mean=universe.mean, stddev=universe.stddev, gamma=gamma)

    @property
    def dim(self) -> int:
        return int(self.mean.size)

    def _check_weights(self, x: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        if x.shape != self.mean.shape:
            raise ValueError(f"weights must have shape {self.mean.shape}, got {x.shape}")
        return x

    def worst_case(self, x: np.ndarray) -> Tuple[np.ndarray, float]:
        """
        Minimizer of p . x over the set, by Cauchy-Schwarz.

        d* = -gamma * (stddev * x) / ||stddev * x||_2, so
        worst_p_i = mean_i - gamma * stddev_i^2 * x_i / ||stddev * x||_2.
        """
        x = self._check_weights(x)
        scaled = self.stddev * x
        norm = float(np.linalg.norm(scaled))
        if self.gamma == 0.0 or norm == 0.0:
            worst = self.mean.copy()
        else:
            worst = self.mean - self.gamma * self.stddev * scaled / norm
        return worst, float(worst @ x)

    def robust_return(self, x: np.ndarray) -> float:
        x = self._check_weights(x)
        return float(self.mean @ x - self.gamma * np.linalg.norm(self.stddev * x))

    def robust_return_expression(self, x_var: "cp.Expression") -> "cp.Expression":
        """Worst-case return of x_var as a concave cvxpy expression."""
        return self.mean @ x_var - self.gamma * cp.norm(cp.multiply(self.stddev, x_var), 2)

    def cvxpy_constraints(self, p_var: "cp.Variable", d_var: "cp.Variable") -> List["cp.Constraint"]:
        """Affine map from perturbation d to returns p, and the radius-gamma ball on d."""
        return [
            p_var == self.mean + cp.multiply(self.stddev, d_var),
            cp.sum_squares(d_var) <= self.gamma**2,
        ]

    def contains(self, p: np.ndarray, tol: float = 1e-8) -> bool:
        p = np.asarray(p, dtype=float)
        diff = p - self.mean
        fixed = self.stddev == 0
        # assets without volatility cannot move
        if np.any(np.abs(diff[fixed]) > tol):
            return False
        d = diff[~fixed] / self.stddev[~fixed]
        return float(np.linalg.norm(d)) <= self.gamma + tol

    def sample(self, n: int, rng: Optional[np.random.Generator] = None) -> np.ndarray:
        """Draw return vectors uniformly from the perturbation ball."""
        if rng is None:
            rng = np.random.default_rng()
        dim = self.dim
        # Sample from isotropic normal and project to the ball radius.
        raw = rng.normal(size=(n, dim))
        norms = np.linalg.norm(raw, axis=1, keepdims=True)
        norms[norms == 0] = 1.0
        directions = raw / norms
        radii = rng.random(size=(n, 1)) ** (1.0 / dim) * self.gamma
        return self.mean + self.stddev * (directions * radii)

    def __repr__(self) -> str:
        return f"EllipsoidalUncertainty(dim={self.dim}, gamma={self.gamma:g})"
