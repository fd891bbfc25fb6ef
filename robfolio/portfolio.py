from __future__ import annotations

from typing import Optional

import numpy as np

from .config import SolverConfig
from .feasibility import assert_feasible
from .lazy import LazyCutSolver
from .master import MasterProblem, PortfolioSolution
from .oracle import Cut, WorstCaseOracle
from .reference import best_on_support
from .search import CuttingPlaneSolver
from .uncertainty import EllipsoidalUncertainty
from .universe import AssetUniverse


class RobustPortfolio:
    """
    Cardinality-constrained portfolio maximizing the worst-case expected return.

    Wires a MasterProblem to a WorstCaseOracle and hands both to the search
    driver selected by config.backend. Every solve ends with the feasibility
    checks; a violation raises FeasibilityError rather than returning.
    """

    def __init__(
        self,
        universe: AssetUniverse,
        gamma: float,
        max_assets: Optional[int] = None,
        config: Optional[SolverConfig] = None,
    ):
        self.universe = universe
        self.uncertainty = EllipsoidalUncertainty.from_universe(universe, gamma)
        self.max_assets = universe.max_assets if max_assets is None else int(max_assets)
        self.config = config or SolverConfig()
        self.solution: Optional[PortfolioSolution] = None
        self.master: Optional[MasterProblem] = None

    @classmethod
    def nominal(
        cls,
        universe: AssetUniverse,
        max_assets: Optional[int] = None,
        config: Optional[SolverConfig] = None,
    ) -> "RobustPortfolio":
        return cls(universe, gamma=0.0, max_assets=max_assets, config=config)

    @property
    def gamma(self) -> float:
        return self.uncertainty.gamma

    def make_oracle(self) -> WorstCaseOracle:
        return WorstCaseOracle(
            self.uncertainty,
            tolerance=self.config.cut_tolerance,
            method=self.config.oracle_method,
            solver=self.config.oracle_solver,
        )

    def seed_cuts(self, master: MasterProblem, oracle: WorstCaseOracle) -> None:
        """
        Add tangent cuts at each single-asset portfolio and at equal weights.

        Every worst-case return vector lies in the uncertainty set, so these
        cuts are valid for all portfolios, not only the point they touch.
        """
        n = master.n_assets
        points = list(np.eye(n)) + [np.full(n, 1.0 / n)]
        for point in points:
            worst, value = oracle.worst_case(point)
            master.add_cut(Cut(coefficients=worst, incumbent_value=master.z_upper, worst_value=value))

    def refine(self, support: np.ndarray) -> np.ndarray:
        weights, _ = best_on_support(self.uncertainty, support, solver=self.config.oracle_solver)
        return weights

    def _driver(self, master: MasterProblem, oracle: WorstCaseOracle):
        cfg = self.config
        refiner = self.refine if cfg.refine_support else None
        if cfg.backend == "gurobi":
            return LazyCutSolver(
                master,
                oracle,
                time_limit=cfg.time_limit,
                mip_gap=cfg.mip_gap,
                refiner=refiner,
                verbose=cfg.verbose,
            )
        return CuttingPlaneSolver(
            master,
            oracle,
            max_rounds=cfg.max_rounds,
            solver=cfg.master_solver,
            mip_gap=cfg.mip_gap,
            refiner=refiner,
            verbose=cfg.verbose,
        )

    def solve(self) -> PortfolioSolution:
        self.master = MasterProblem(self.universe, max_assets=self.max_assets)
        oracle = self.make_oracle()
        if self.config.seed_cuts:
            self.seed_cuts(self.master, oracle)
        solution = self._driver(self.master, oracle).solve()
        solution.worst_case_return = self.uncertainty.robust_return(solution.weights)
        assert_feasible(solution.weights, self.max_assets, tol=self.config.feasibility_tol)
        if self.config.verbose:
            print(
                f"{solution.status}: {len(solution.held_assets)} assets, "
                f"z={solution.objective:.6f}, worst-case return={solution.worst_case_return:.6f}"
            )
        self.solution = solution
        return solution

    @property
    def weights(self) -> np.ndarray:
        if self.solution is None:
            raise RuntimeError("solve() must be called before reading weights.")
        return self.solution.weights
