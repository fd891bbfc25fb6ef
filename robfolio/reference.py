from __future__ import annotations

import itertools
import math
from typing import Optional, Tuple

import cvxpy as cp
import numpy as np

from .exceptions import MasterSolveError
from .uncertainty import EllipsoidalUncertainty
from .universe import AssetUniverse

MAX_SUPPORTS = 5000


def best_on_support(
    uncertainty: EllipsoidalUncertainty,
    support: np.ndarray,
    solver: str = "CLARABEL",
) -> Tuple[np.ndarray, float]:
    """
    Best robust portfolio restricted to the assets flagged in support.

    Solves max mean . x - gamma * ||stddev * x||_2 over the simplex face
    {x >= 0, sum(x) = 1, x_i = 0 off support} as an SOCP. The returned
    weights are clipped and renormalised onto that face.
    """
    support = np.asarray(support, dtype=bool)
    if support.shape != uncertainty.mean.shape or not support.any():
        raise ValueError("support must flag at least one asset")
    x = cp.Variable(uncertainty.dim, nonneg=True)
    constraints = [cp.sum(x) == 1]
    if not support.all():
        constraints.append(x[np.flatnonzero(~support)] == 0)
    prob = cp.Problem(cp.Maximize(uncertainty.robust_return_expression(x)), constraints)
    prob.solve(solver=solver)
    if prob.status not in (cp.OPTIMAL, cp.OPTIMAL_INACCURATE):
        raise MasterSolveError(f"Support SOCP failed with status {prob.status}")
    w = np.where(support, np.clip(np.array(x.value).astype(float), 0.0, None), 0.0)
    w = w / w.sum()
    return w, uncertainty.robust_return(w)


def solve_reference(
    universe: AssetUniverse,
    gamma: float,
    max_assets: Optional[int] = None,
    solver: str = "CLARABEL",
) -> Tuple[np.ndarray, float]:
    """
    Robust optimum by enumerating supports, without cuts.

    Calls best_on_support for every support of size max_assets. Smaller
    supports are covered because weights may be zero. Only meant for small
    universes.
    """
    n = universe.n_assets
    k = universe.max_assets if max_assets is None else int(max_assets)
    k = min(k, n)
    n_supports = math.comb(n, k)
    if n_supports > MAX_SUPPORTS:
        raise ValueError(f"{n_supports} supports to enumerate, limit is {MAX_SUPPORTS}")

    uncertainty = EllipsoidalUncertainty.from_universe(universe, gamma)
    best_w: Optional[np.ndarray] = None
    best_val = -np.inf
    for combo in itertools.combinations(range(n), k):
        support = np.zeros(n, dtype=bool)
        support[list(combo)] = True
        w, val = best_on_support(uncertainty, support, solver=solver)
        if val > best_val:
            best_w, best_val = w, val
    assert best_w is not None
    return best_w, best_val
