from __future__ import annotations

from typing import Callable, List, Optional

import numpy as np

from .master import MasterIterate, MasterProblem, PortfolioSolution
from .oracle import CutGenerator

# maps a boolean support mask to the best weights on that support
Refiner = Callable[[np.ndarray], np.ndarray]


class CuttingPlaneSolver:
    """
    Outer cutting-plane loop over the master MILP.

    Each round re-solves the master with every cut found so far, then asks
    the generator to separate the new candidate. The loop stops when the
    generator has nothing to add; the master's z is then within the
    generator's tolerance of the candidate's worst-case return.

    With a refiner, every round also cuts at the best portfolio on the
    support the master picked. Because that point is optimal on its face,
    the cut bounds z on the whole support by the refined value, so each
    support is revisited at most once before the best incumbent closes the
    gap. The incumbent is re-checked against the new z at the start of each
    round.
    """

    def __init__(
        self,
        master: MasterProblem,
        generator: CutGenerator,
        max_rounds: int = 1000,
        solver: Optional[str] = "SCIPY",
        mip_gap: float = 1e-9,
        refiner: Optional[Refiner] = None,
        verbose: bool = False,
    ):
        self.master = master
        self.generator = generator
        self.max_rounds = max_rounds
        self.solver = solver
        self.mip_gap = mip_gap
        self.refiner = refiner
        self.verbose = verbose

    def _solution(
        self, weights: np.ndarray, z: float, status: str, rounds: int, history: List[float]
    ) -> PortfolioSolution:
        return PortfolioSolution(
            weights=weights,
            selected=weights > 0,
            objective=z,
            status=status,
            rounds=rounds,
            cuts=list(self.master.cuts),
            history=list(history),
        )

    def solve(self) -> PortfolioSolution:
        best: Optional[np.ndarray] = None
        best_val = -np.inf
        history: List[float] = []
        for rnd in range(1, self.max_rounds + 1):
            it: MasterIterate = self.master.solve(solver=self.solver, mip_gap=self.mip_gap)
            history.append(it.z)
            if best is not None and self.generator.propose_cut(best, it.z) is None:
                if self.verbose:
                    print(f"round {rnd}: z={it.z:.6f}, incumbent {best_val:.6f} within tolerance")
                return self._solution(best, it.z, "optimal", rnd, history)

            weights = MasterProblem.polish(it.x, it.y)
            candidates = [weights]
            if self.refiner is not None:
                candidates.append(self.refiner(it.y > 0.5))
            for x_val in candidates:
                cut = self.generator.propose_cut(x_val, it.z)
                if cut is None:
                    if self.verbose:
                        print(f"round {rnd}: z={it.z:.6f}, no violated cut")
                    return self._solution(x_val, it.z, "optimal", rnd, history)
                if cut.worst_value > best_val:
                    best, best_val = x_val, cut.worst_value
                self.master.add_cut(cut)
            if self.verbose:
                print(f"round {rnd}: z={it.z:.6f}, best={best_val:.6f}, cuts={len(self.master.cuts)}")
        assert best is not None
        if self.verbose:
            print(f"stopped after {self.max_rounds} rounds, best worst-case return {best_val:.6f}")
        return self._solution(best, history[-1], "max_rounds", self.max_rounds, history)
