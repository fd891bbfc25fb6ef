from __future__ import annotations

import dataclasses
from typing import List, Optional

import cvxpy as cp
import numpy as np

from .exceptions import MasterSolveError
from .oracle import Cut
from .universe import AssetUniverse


@dataclasses.dataclass
class MasterIterate:
    x: np.ndarray
    y: np.ndarray
    z: float


@dataclasses.dataclass
class PortfolioSolution:
    """
    Result of a robust portfolio search.

    objective is the final surrogate z, an upper bound on the robust optimum.
    worst_case_return is the exact worst-case return of weights.
    history holds the surrogate z of every master solve, in order.
    """

    weights: np.ndarray
    selected: np.ndarray
    objective: float
    status: str
    rounds: int
    cuts: List[Cut]
    worst_case_return: Optional[float] = None
    history: List[float] = dataclasses.field(default_factory=list)

    @property
    def held_assets(self) -> np.ndarray:
        return np.flatnonzero(self.selected)


def _gap_options(solver: Optional[str], mip_gap: float) -> dict:
    # HiGHS stops at a relative gap of 1e-4 unless told otherwise
    if solver == "SCIPY":
        return {"scipy_options": {"mip_rel_gap": mip_gap}}
    if solver == "HIGHS":
        return {"mip_rel_gap": mip_gap}
    if solver == "GUROBI":
        return {"MIPGap": mip_gap}
    return {}


class MasterProblem:
    """
    Cardinality-constrained relaxation of the robust portfolio problem.

    maximize z
    s.t. sum(x) = 1, 0 <= x <= y, y binary, sum(y) <= max_assets,
         z <= max_i mean_i, and z <= c . x for each accumulated cut c.

    Cuts are only ever appended.
    """

    def __init__(self, universe: AssetUniverse, max_assets: Optional[int] = None):
        if max_assets is None:
            max_assets = universe.max_assets
        if not 1 <= max_assets <= universe.n_assets:
            raise ValueError(f"max_assets must be in [1, {universe.n_assets}], got {max_assets}")
        self.universe = universe
        self.max_assets = int(max_assets)
        self.z_upper = universe.max_mean
        self.cuts: List[Cut] = []

    @property
    def n_assets(self) -> int:
        return self.universe.n_assets

    def add_cut(self, cut: Cut) -> None:
        if cut.coefficients.shape != (self.n_assets,):
            raise ValueError("cut coefficients do not match the number of assets")
        self.cuts.append(cut)

    def build(self):
        n = self.n_assets
        x = cp.Variable(n, nonneg=True)
        y = cp.Variable(n, boolean=True)
        z = cp.Variable()
        constraints = [
            cp.sum(x) == 1,
            x <= y,
            cp.sum(y) <= self.max_assets,
            z <= self.z_upper,
        ]
        if self.cuts:
            coeffs = np.vstack([cut.coefficients for cut in self.cuts])
            constraints.append(z <= coeffs @ x)
        return cp.Problem(cp.Maximize(z), constraints), x, y, z

    def solve(self, solver: Optional[str] = "SCIPY", mip_gap: float = 1e-9) -> MasterIterate:
        prob, x, y, z = self.build()
        prob.solve(solver=solver, **_gap_options(solver, mip_gap))
        if prob.status != cp.OPTIMAL:
            raise MasterSolveError(f"Master problem failed with status {prob.status}")
        return MasterIterate(
            x=np.array(x.value).astype(float),
            y=np.array(y.value).astype(float),
            z=float(z.value),
        )

    @staticmethod
    def polish(x: np.ndarray, y: np.ndarray) -> np.ndarray:
        """
        Round solver output to an exactly feasible portfolio.

        Weights of deselected assets are dropped, negatives clipped and the
        rest renormalised to sum to one.
        """
        selected = np.asarray(y) > 0.5
        w = np.where(selected, np.clip(x, 0.0, None), 0.0)
        total = w.sum()
        if total <= 0:
            raise MasterSolveError("Master solution holds no assets")
        return w / total
