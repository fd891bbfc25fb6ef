from __future__ import annotations

import abc
import dataclasses
from typing import Optional, Tuple

import cvxpy as cp
import numpy as np

from .exceptions import OracleInfeasibleError
from .uncertainty import EllipsoidalUncertainty


@dataclasses.dataclass(frozen=True, eq=False)
class Cut:
    """
    Linear inequality z <= coefficients . x for the master problem.

    incumbent_value and worst_value record the candidate that produced the
    cut: its surrogate z and its true worst-case return.
    """

    coefficients: np.ndarray
    incumbent_value: float
    worst_value: float

    @property
    def violation(self) -> float:
        return self.incumbent_value - self.worst_value

    def evaluate(self, x: np.ndarray) -> float:
        return float(self.coefficients @ np.asarray(x, dtype=float))


class CutGenerator(abc.ABC):
    """Contract between a search driver and a separation routine."""

    @abc.abstractmethod
    def propose_cut(self, x_val: np.ndarray, z_val: float) -> Optional[Cut]:
        """Return a violated cut for the candidate (x_val, z_val), or None."""


class WorstCaseOracle(CutGenerator):
    """
    Separation oracle for the worst-case expected return.

    For a candidate x_val, finds worst_p = argmin_{p in U} p . x_val and
    emits z <= worst_p . x when worst_p . x_val < z_val - tolerance.
    The tolerance keeps floating-point noise from re-adding the same cut.

    method="qp" solves the subproblem with cvxpy; method="closed_form" uses
    the Cauchy-Schwarz projection. Calls hold no state, so one oracle can be
    shared between search workers.
    """

    METHODS = ("qp", "closed_form")

    def __init__(
        self,
        uncertainty: EllipsoidalUncertainty,
        tolerance: float = 1e-4,
        method: str = "qp",
        solver: str = "CLARABEL",
    ):
        if method not in self.METHODS:
            raise ValueError(f"method must be one of {self.METHODS}, got {method!r}")
        if tolerance < 0:
            raise ValueError("tolerance must be non-negative")
        self.uncertainty = uncertainty
        self.tolerance = float(tolerance)
        self.method = method
        self.solver = solver

    def _solve_subproblem(self, x_val: np.ndarray) -> Tuple[np.ndarray, float]:
        dim = self.uncertainty.dim
        p = cp.Variable(dim)
        d = cp.Variable(dim)
        obj = cp.Minimize(p @ x_val)
        prob = cp.Problem(obj, self.uncertainty.cvxpy_constraints(p, d))
        prob.solve(solver=self.solver)
        if prob.status not in (cp.OPTIMAL, cp.OPTIMAL_INACCURATE):
            raise OracleInfeasibleError(f"Worst-case subproblem failed with status {prob.status}")
        worst = np.array(p.value).astype(float)
        return worst, float(worst @ x_val)

    def worst_case(self, x_val: np.ndarray) -> Tuple[np.ndarray, float]:
        x_val = np.asarray(x_val, dtype=float)
        if x_val.shape != self.uncertainty.mean.shape:
            raise ValueError(f"x_val must have shape {self.uncertainty.mean.shape}, got {x_val.shape}")
        if self.uncertainty.gamma == 0.0:
            worst = self.uncertainty.mean.copy()
            return worst, float(worst @ x_val)
        if self.method == "closed_form":
            return self.uncertainty.worst_case(x_val)
        return self._solve_subproblem(x_val)

    def propose_cut(self, x_val: np.ndarray, z_val: float) -> Optional[Cut]:
        worst, worst_z = self.worst_case(x_val)
        if worst_z < float(z_val) - self.tolerance:
            return Cut(coefficients=worst, incumbent_value=float(z_val), worst_value=worst_z)
        return None
