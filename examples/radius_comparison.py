"""
Squared vs unsquared ball constraint.

The uncertainty ball must be written sum(d_i^2) <= gamma^2. Writing
sum(d_i^2) <= gamma instead shrinks the radius to sqrt(gamma) when gamma > 1,
and the resulting "optimal" worst-case return is too optimistic. Compare both
against the nominal (gamma = 0) portfolio.

On the 20-asset synthetic universe the squared model settles near 1.1050
and the unsquared one near 1.1274.
"""

import numpy as np

from robfolio import AssetUniverse, RobustPortfolio, SolverConfig


def main():
    gamma = np.sqrt(10)
    universe = AssetUniverse.synthetic(20)
    config = SolverConfig(oracle_method="closed_form")

    runs = {
        "squared": RobustPortfolio(universe, gamma=gamma, config=config),
        "unsquared": RobustPortfolio(universe, gamma=np.sqrt(gamma), config=config),
        "nominal": RobustPortfolio.nominal(universe, config=config),
    }
    print(f"{'model':<12}{'radius':>10}{'worst-case':>14}{'held':>8}")
    for name, model in runs.items():
        solution = model.solve()
        print(
            f"{name:<12}{model.gamma:>10.4f}{solution.worst_case_return:>14.6f}"
            f"{len(solution.held_assets):>8}"
        )


if __name__ == "__main__":
    main()
