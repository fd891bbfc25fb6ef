"""
Robfolio: robust cardinality-constrained portfolios by cut generation.

Exposes:
- AssetUniverse and EllipsoidalUncertainty for problem data.
- WorstCaseOracle, the separation routine behind every cut, and the CutGenerator contract.
- MasterProblem with two search drivers: CuttingPlaneSolver (cvxpy) and LazyCutSolver (Gurobi).
- RobustPortfolio facade, feasibility checks, a per-support SOCP and an enumeration reference solver.
"""

from .config import SolverConfig
from .exceptions import FeasibilityError, MasterSolveError, OracleInfeasibleError, RobfolioError
from .feasibility import FeasibilityReport, assert_feasible, check_portfolio
from .lazy import LazyCutSolver
from .master import MasterIterate, MasterProblem, PortfolioSolution
from .oracle import Cut, CutGenerator, WorstCaseOracle
from .portfolio import RobustPortfolio
from .reference import best_on_support, solve_reference
from .search import CuttingPlaneSolver
from .uncertainty import EllipsoidalUncertainty
from .universe import Asset, AssetUniverse

__all__ = [
    "Asset",
    "AssetUniverse",
    "EllipsoidalUncertainty",
    "Cut",
    "CutGenerator",
    "WorstCaseOracle",
    "MasterIterate",
    "MasterProblem",
    "PortfolioSolution",
    "CuttingPlaneSolver",
    "LazyCutSolver",
    "RobustPortfolio",
    "SolverConfig",
    "FeasibilityReport",
    "check_portfolio",
    "assert_feasible",
    "solve_reference",
    "best_on_support",
    "RobfolioError",
    "OracleInfeasibleError",
    "MasterSolveError",
    "FeasibilityError",
]
