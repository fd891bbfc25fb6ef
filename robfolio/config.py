from __future__ import annotations

import dataclasses
from typing import Optional


@dataclasses.dataclass(frozen=True)
class SolverConfig:
    """
    Settings shared by the search drivers and the oracle.

    backend:
    - "cvxpy": outer cutting-plane loop re-solving the master MILP.
    - "gurobi": one branch-and-bound run with lazy cuts from a callback.

    mip_gap is the relative optimality gap handed to the master MILP solver.
    seed_cuts adds tangent cuts at every single-asset portfolio and at the
    equal-weight portfolio before the first round. refine_support solves
    the continuous robust problem on each support the master picks and cuts
    at that point as well.
    """

    backend: str = "cvxpy"
    cut_tolerance: float = 1e-4
    max_rounds: int = 1000
    master_solver: str = "SCIPY"
    mip_gap: float = 1e-9
    seed_cuts: bool = True
    refine_support: bool = True
    oracle_method: str = "qp"
    oracle_solver: str = "CLARABEL"
    time_limit: Optional[float] = None
    feasibility_tol: float = 1e-12
    verbose: bool = False

    def __post_init__(self):
        if self.backend not in ("cvxpy", "gurobi"):
            raise ValueError(f"Unknown backend {self.backend!r}")
        if self.oracle_method not in ("qp", "closed_form"):
            raise ValueError(f"Unknown oracle method {self.oracle_method!r}")
        if self.cut_tolerance < 0:
            raise ValueError("cut_tolerance must be non-negative")
        if self.mip_gap < 0:
            raise ValueError("mip_gap must be non-negative")
        if self.max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")
        if self.time_limit is not None and self.time_limit <= 0:
            raise ValueError("time_limit must be positive")
        if self.feasibility_tol < 0:
            raise ValueError("feasibility_tol must be non-negative")

    def with_overrides(self, **kwargs) -> "SolverConfig":
        return dataclasses.replace(self, **kwargs)
