class RobfolioError(RuntimeError):
    """Base class for solve-time failures."""


class OracleInfeasibleError(RobfolioError):
    """The worst-case subproblem did not solve to optimality."""


class MasterSolveError(RobfolioError):
    """The master problem ended without a usable portfolio."""


class FeasibilityError(RobfolioError):
    """A returned portfolio violates a physical constraint."""

    def __init__(self, violations):
        self.violations = list(violations)
        super().__init__("infeasible portfolio: " + "; ".join(self.violations))
