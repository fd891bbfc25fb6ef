from __future__ import annotations

import dataclasses
from typing import List

import numpy as np

from .exceptions import FeasibilityError


@dataclasses.dataclass
class FeasibilityReport:
    sum_error: float
    held: int
    max_assets: int
    min_weight: float
    violations: List[str]

    @property
    def ok(self) -> bool:
        return not self.violations


def check_portfolio(weights: np.ndarray, max_assets: int, tol: float = 1e-12) -> FeasibilityReport:
    """
    Check a portfolio against budget, cardinality and no-short-selling.

    - |sum(x) - 1| <= tol
    - at most max_assets weights >= tol
    - min(x) >= -tol
    """
    w = np.asarray(weights, dtype=float)
    sum_error = float(abs(w.sum() - 1.0))
    held = int(np.count_nonzero(w >= tol))
    min_weight = float(w.min()) if w.size else 0.0
    violations = []
    if sum_error > tol:
        violations.append(f"weights sum to {w.sum():.17g}, off by {sum_error:.3e}")
    if held > max_assets:
        violations.append(f"{held} assets held, cap is {max_assets}")
    if min_weight < -tol:
        violations.append(f"negative weight {min_weight:.3e}")
    return FeasibilityReport(
        sum_error=sum_error,
        held=held,
        max_assets=max_assets,
        min_weight=min_weight,
        violations=violations,
    )


def assert_feasible(weights: np.ndarray, max_assets: int, tol: float = 1e-12) -> FeasibilityReport:
    report = check_portfolio(weights, max_assets, tol=tol)
    if not report.ok:
        raise FeasibilityError(report.violations)
    return report
