from __future__ import annotations

from typing import Callable, List, Optional, Set, Tuple

import numpy as np

try:
    import gurobipy as gp
    from gurobipy import GRB
except Exception:  # pragma: no cover - gurobipy is an optional backend
    gp = None  # type: ignore
    GRB = None  # type: ignore

from .exceptions import MasterSolveError
from .master import MasterProblem, PortfolioSolution
from .oracle import CutGenerator


class LazyCutSolver:
    """
    Solver-driven cut generation with Gurobi lazy constraints.

    The master is solved once. At every new incumbent (MIPSOL) the callback
    reads (x, z), asks the generator for a cut and injects it with cbLazy,
    so branch-and-bound never accepts a candidate whose z overstates its
    worst-case return by more than the generator's tolerance.

    With a refiner the callback also cuts at the best portfolio on the
    candidate's support and hands that portfolio back to Gurobi as a heuristic
    solution at the next MIPNODE, so the search holds an incumbent early.
    """

    def __init__(
        self,
        master: MasterProblem,
        generator: CutGenerator,
        time_limit: Optional[float] = None,
        mip_gap: float = 1e-9,
        refiner: Optional[Callable[[np.ndarray], np.ndarray]] = None,
        verbose: bool = False,
    ):
        if gp is None:
            raise ImportError("gurobipy is required for the lazy-constraint backend.")
        self.master = master
        self.generator = generator
        self.time_limit = time_limit
        self.mip_gap = mip_gap
        self.refiner = refiner
        self.verbose = verbose
        self.callback_calls = 0
        self._error: Optional[BaseException] = None

    def _build(self):
        n = self.master.n_assets
        model = gp.Model("robust_portfolio_master")
        model.Params.OutputFlag = 1 if self.verbose else 0
        model.Params.LazyConstraints = 1
        model.Params.MIPGap = self.mip_gap
        if self.time_limit is not None:
            model.Params.TimeLimit = self.time_limit
        x = model.addVars(n, lb=0.0, ub=1.0, name="x")
        y = model.addVars(n, vtype=GRB.BINARY, name="y")
        z = model.addVar(lb=-GRB.INFINITY, ub=self.master.z_upper, name="z")
        model.addConstr(x.sum() == 1, name="budget")
        model.addConstrs((x[i] <= y[i] for i in range(n)), name="link")
        model.addConstr(y.sum() <= self.master.max_assets, name="cardinality")
        for k, cut in enumerate(self.master.cuts):
            model.addConstr(z <= gp.quicksum(float(cut.coefficients[i]) * x[i] for i in range(n)), name=f"cut_{k}")
        model.setObjective(z, GRB.MAXIMIZE)
        return model, x, y, z

    def _surrogate(self, weights: np.ndarray) -> float:
        """Largest z the master accepts for weights under the cuts found so far."""
        bounds = [float(cut.evaluate(weights)) for cut in self.master.cuts]
        return min([self.master.z_upper] + bounds)

    def solve(self) -> PortfolioSolution:
        model, x, y, z = self._build()
        n = self.master.n_assets
        x_list = [x[i] for i in range(n)]
        y_list = [y[i] for i in range(n)]
        history: List[float] = []
        refined: Set[Tuple[bool, ...]] = set()
        pending: List[np.ndarray] = []

        def add_cut(cb_model, cut) -> None:
            self.master.add_cut(cut)
            cb_model.cbLazy(z <= gp.quicksum(float(cut.coefficients[i]) * x_list[i] for i in range(n)))

        def add_cutting_plane(cb_model, where):
            if where == GRB.Callback.MIPNODE:
                if pending:
                    weights = pending.pop()
                    cb_model.cbSetSolution(x_list, weights.tolist())
                    cb_model.cbSetSolution(y_list, (weights > 0).astype(float).tolist())
                    cb_model.cbSetSolution(z, self._surrogate(weights))
                    cb_model.cbUseSolution()
                return
            if where != GRB.Callback.MIPSOL:
                return
            self.callback_calls += 1
            x_val = np.array(cb_model.cbGetSolution(x_list), dtype=float)
            y_val = np.array(cb_model.cbGetSolution(y_list), dtype=float)
            z_val = float(cb_model.cbGetSolution(z))
            history.append(z_val)
            try:
                cut = self.generator.propose_cut(x_val, z_val)
                if cut is not None:
                    add_cut(cb_model, cut)
                    if self.verbose:
                        print(f"callback {self.callback_calls}: z={z_val:.6f}, worst={cut.worst_value:.6f}")
                support = y_val > 0.5
                if self.refiner is None or tuple(support) in refined:
                    return
                refined.add(tuple(support))
                weights = self.refiner(support)
                cut = self.generator.propose_cut(weights, z_val)
                if cut is not None:
                    add_cut(cb_model, cut)
                pending.append(weights)
            except Exception as exc:
                self._error = exc
                cb_model.terminate()

        self._error = None
        model.optimize(add_cutting_plane)
        if self._error is not None:
            raise self._error

        if model.Status == GRB.OPTIMAL:
            status = "optimal"
        elif model.Status == GRB.TIME_LIMIT and model.SolCount > 0:
            status = "time_limit"
        else:
            raise MasterSolveError(f"Master problem failed with Gurobi status {model.Status}")

        weights = MasterProblem.polish(
            np.array([v.X for v in x_list]), np.array([v.X for v in y_list])
        )
        return PortfolioSolution(
            weights=weights,
            selected=weights > 0,
            objective=float(z.X),
            status=status,
            rounds=self.callback_calls,
            cuts=list(self.master.cuts),
            history=history,
        )
