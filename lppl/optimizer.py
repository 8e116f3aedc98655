from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from numbers import Integral, Real
from typing import Callable, Dict, List, Tuple
import numpy as np
from scipy.optimize import minimize
from lppl.errors import InvalidInput
from lppl.lppl_dataclasses import FitStatus
from lppl.lppl_defaults import (
    MAX_ITERATIONS,
    MAX_EVALUATIONS,
    X_ABSOLUTE_TOLERANCE,
    F_ABSOLUTE_TOLERANCE,
    INITIAL_STEP,
    ZERO_STEP,
    RESTARTS,
)


Objective = Callable[[np.ndarray], float]


def is_whole(value) -> bool:
    # True and False pass as 1 and 0 otherwise
    return isinstance(value, Integral) and not isinstance(value, bool)


def is_real(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and bool(np.isfinite(value))


@dataclass
class OptimizerSettings:
    max_iterations: int = MAX_ITERATIONS
    max_evaluations: int = MAX_EVALUATIONS
    xatol: float = X_ABSOLUTE_TOLERANCE
    fatol: float = F_ABSOLUTE_TOLERANCE
    initial_step: float = INITIAL_STEP
    zero_step: float = ZERO_STEP
    restarts: int = RESTARTS
    adaptive: bool = False

    def __post_init__(self):
        for name in ["max_iterations", "max_evaluations"]:
            value = getattr(self, name)
            if not is_whole(value) or value < 1:
                raise InvalidInput(f"{name} must be a whole number of at least 1, got {value!r}")
        if not is_whole(self.restarts) or self.restarts < 0:
            raise InvalidInput(f"restarts must be a whole number, got {self.restarts!r}")
        for name in ["xatol", "fatol"]:
            value = getattr(self, name)
            if not is_real(value) or value < 0:
                raise InvalidInput(f"{name} must be a non-negative number, got {value!r}")
        for name in ["initial_step", "zero_step"]:
            value = getattr(self, name)
            if not is_real(value) or value <= 0:
                raise InvalidInput(f"{name} must be a positive number, got {value!r}")
        if not isinstance(self.adaptive, bool):
            raise InvalidInput(f"adaptive must be true or false, got {self.adaptive!r}")

    @staticmethod
    def from_config(config: Dict | None) -> "OptimizerSettings":
        if not config:
            return OptimizerSettings()

        known = {f.name for f in fields(OptimizerSettings)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise InvalidInput(f"unknown optimizer settings: {', '.join(unknown)}")
        return OptimizerSettings(**config)


@dataclass(frozen=True)
class OptimizeOutcome:
    x: np.ndarray
    cost: float
    status: FitStatus
    iterations: int
    evaluations: int
    message: str


class BudgetExhausted(Exception):
    pass


class NonFiniteCost(Exception):
    def __init__(self, x: np.ndarray, cost: float):
        super().__init__(f"objective is {cost} at {np.array2string(x, precision=4)}")
        self.x = x
        self.cost = cost


class CountingObjective:
    """
    Wraps an objective to count evaluations and iterations, enforce the evaluation budget
    and remember the best point seen, so the best known cost can only go down.
    """

    def __init__(self, objective: Objective, max_evaluations: int):
        self.objective = objective
        self.max_evaluations = max_evaluations
        self.evaluations = 0
        self.iterations = 0
        self.best_x: np.ndarray | None = None
        self.best_cost = np.inf

    def __call__(self, x: np.ndarray) -> float:
        if self.evaluations >= self.max_evaluations:
            raise BudgetExhausted(f"reached {self.max_evaluations} function evaluations")

        x = np.array(x, dtype=float)
        cost = float(self.objective(x))
        self.evaluations += 1

        if not np.isfinite(cost):
            raise NonFiniteCost(x, cost)
        if cost < self.best_cost:
            self.best_cost = cost
            self.best_x = x
        return cost

    def count_iteration(self, xk) -> None:
        self.iterations += 1


class Optimizer(ABC):
    @abstractmethod
    def minimize(self, objective: Objective, x0: np.ndarray) -> OptimizeOutcome:
        pass

    @staticmethod
    def evaluate_start(counted: CountingObjective, x0: np.ndarray) -> OptimizeOutcome | None:
        """
        Evaluates the seed. Returns the outcome to report when the search can't start from it,
        None when it can.
        """
        try:
            counted(x0)
        except NonFiniteCost as e:
            return OptimizeOutcome(
                x=x0,
                cost=e.cost,
                status=FitStatus.NUMERICAL_FAILURE,
                iterations=0,
                evaluations=counted.evaluations,
                message=f"starting point is not usable: {e}",
            )
        except BudgetExhausted as e:
            return OptimizeOutcome(
                x=x0,
                cost=np.inf,
                status=FitStatus.NON_CONVERGENCE,
                iterations=0,
                evaluations=counted.evaluations,
                message=str(e),
            )
        return None

    @staticmethod
    def outcome(counted: CountingObjective, status: FitStatus, message: str) -> OptimizeOutcome:
        return OptimizeOutcome(
            x=counted.best_x,
            cost=counted.best_cost,
            status=status,
            iterations=counted.iterations,
            evaluations=counted.evaluations,
            message=message,
        )


class NelderMeadOptimizer(Optimizer):
    """
    Downhill simplex search, no derivatives needed.

    Once the simplex has collapsed it's rebuilt around the best vertex, up to settings.restarts
    times, because in 7 dimensions the simplex regularly collapses before reaching the minimum.
    """

    def __init__(self, settings: OptimizerSettings | None = None):
        self.settings = settings if settings is not None else OptimizerSettings()

    def minimize(self, objective: Objective, x0: np.ndarray) -> OptimizeOutcome:
        s = self.settings
        x0 = np.asarray(x0, dtype=float).ravel()
        counted = CountingObjective(objective, s.max_evaluations)
        failed = Optimizer.evaluate_start(counted, x0)
        if failed is not None:
            return failed

        try:
            for attempt in range(s.restarts + 1):
                previous_best = counted.best_cost
                simplex, costs = self.build_simplex(counted, counted.best_x)
                self.run_simplex(counted, simplex, costs)
                if attempt > 0 and previous_best - counted.best_cost <= s.fatol:
                    break
        except BudgetExhausted as e:
            return self.outcome(counted, FitStatus.NON_CONVERGENCE, str(e))
        except NonFiniteCost as e:
            return self.outcome(counted, FitStatus.NUMERICAL_FAILURE, str(e))

        return self.outcome(counted, FitStatus.CONVERGED, "tolerances reached")

    def build_simplex(
        self, counted: CountingObjective, x: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        n = len(x)
        simplex = np.tile(x, (n + 1, 1))
        for i in range(n):
            if x[i] != 0:
                simplex[i + 1, i] = (1 + self.settings.initial_step) * x[i]
            else:
                simplex[i + 1, i] = self.settings.zero_step

        costs = np.empty(n + 1)
        costs[0] = counted.best_cost
        for i in range(1, n + 1):
            costs[i] = counted(simplex[i])
        return simplex, costs

    def coefficients(self, n: int) -> List[float]:
        # reflection, expansion, contraction, shrink
        if self.settings.adaptive:
            return [1.0, 1 + 2 / n, 0.75 - 1 / (2 * n), 1 - 1 / n]
        return [1.0, 2.0, 0.5, 0.5]

    def run_simplex(
        self,
        counted: CountingObjective,
        simplex: np.ndarray,
        costs: np.ndarray,
    ) -> None:
        s = self.settings
        n = simplex.shape[1]
        rho, chi, psi, sigma = self.coefficients(n)

        while True:
            order = np.argsort(costs, kind="stable")
            simplex[:] = simplex[order]
            costs[:] = costs[order]

            x_spread = np.max(np.abs(simplex[1:] - simplex[0]))
            f_spread = np.max(np.abs(costs[1:] - costs[0]))
            if x_spread <= s.xatol and f_spread <= s.fatol:
                return

            if counted.iterations >= s.max_iterations:
                raise BudgetExhausted(f"reached {s.max_iterations} iterations")
            counted.iterations += 1

            centroid = np.mean(simplex[:-1], axis=0)
            worst = simplex[-1]

            xr = centroid + rho * (centroid - worst)
            fr = counted(xr)

            if fr < costs[0]:
                xe = centroid + rho * chi * (centroid - worst)
                fe = counted(xe)
                if fe < fr:
                    simplex[-1], costs[-1] = xe, fe
                else:
                    simplex[-1], costs[-1] = xr, fr
                continue

            if fr < costs[-2]:
                simplex[-1], costs[-1] = xr, fr
                continue

            if fr < costs[-1]:
                xc = centroid + psi * rho * (centroid - worst)
                fc = counted(xc)
                if fc <= fr:
                    simplex[-1], costs[-1] = xc, fc
                    continue
            else:
                xcc = centroid - psi * (centroid - worst)
                fcc = counted(xcc)
                if fcc < costs[-1]:
                    simplex[-1], costs[-1] = xcc, fcc
                    continue

            # shrink towards the best vertex
            for j in range(1, n + 1):
                simplex[j] = simplex[0] + sigma * (simplex[j] - simplex[0])
                costs[j] = counted(simplex[j])


class ScipyOptimizer(Optimizer):
    """
    Any scipy.optimize.minimize method, see
    https://docs.scipy.org/doc/scipy/reference/generated/scipy.optimize.minimize.html
    No bounds are passed, the search stays unconstrained.
    """

    def __init__(self, method: str = "Nelder-Mead", settings: OptimizerSettings | None = None):
        self.method = method
        self.settings = settings if settings is not None else OptimizerSettings()

    def options(self) -> Dict:
        s = self.settings
        options: Dict = {"maxiter": s.max_iterations}
        if self.method == "Nelder-Mead":
            options.update(
                {
                    "maxfev": s.max_evaluations,
                    "xatol": s.xatol,
                    "fatol": s.fatol,
                    "adaptive": s.adaptive,
                }
            )
        return options

    def minimize(self, objective: Objective, x0: np.ndarray) -> OptimizeOutcome:
        x0 = np.asarray(x0, dtype=float).ravel()
        counted = CountingObjective(objective, self.settings.max_evaluations)

        failed = Optimizer.evaluate_start(counted, x0)
        if failed is not None:
            return failed

        try:
            cofs = minimize(
                fun=counted,
                x0=x0,
                method=self.method,
                callback=counted.count_iteration,
                options=self.options(),
            )
        except BudgetExhausted as e:
            return self.outcome(counted, FitStatus.NON_CONVERGENCE, str(e))
        except NonFiniteCost as e:
            return self.outcome(counted, FitStatus.NUMERICAL_FAILURE, str(e))

        status = FitStatus.CONVERGED if cofs.success else FitStatus.NON_CONVERGENCE
        return self.outcome(counted, status, str(cofs.message))


def build_optimizer(
    name: str, settings: OptimizerSettings | None = None, method: str = "Nelder-Mead"
) -> Optimizer:
    if name == "nelder-mead":
        return NelderMeadOptimizer(settings)
    elif name == "scipy":
        return ScipyOptimizer(method, settings)
    raise InvalidInput(f"Optimizer type not supported: {name}")
