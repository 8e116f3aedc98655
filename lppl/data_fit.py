from typing import Callable, List, Tuple
from multiprocessing import Pool
import sys
import numpy as np
from tqdm import tqdm
from common.typechecking import TypeCheckBase
from lppl.errors import InvalidInput
from lppl.initial_guess import InitialGuess
from lppl.lppl_dataclasses import FitResult, LPPLParams, ObservationSeries, WindowFit
from lppl.lppl_defaults import MULTI_START_COUNT, MULTI_START_RANDOM_SEED
from lppl.lppl_math import LPPLMath, LPPLObjective
from lppl.optimizer import NelderMeadOptimizer, Optimizer


class DataFit(TypeCheckBase):
    def __init__(self, optimizer: Optimizer | None = None):
        self.optimizer = optimizer if optimizer is not None else NelderMeadOptimizer()

    def fit(self, series: ObservationSeries, seed: LPPLParams | None = None) -> FitResult:
        """
        Args:
            series: chronologically ordered observations with positive prices.
            seed: starting parameters, InitialGuess.from_series(series) if not given.
        Returns:
            The best parameters found, with the final cost and how the search ended.
            A fit that didn't converge or hit a non-finite cost is returned, not raised.
        Raises:
            InvalidInput: the series can't be fitted; raised before the optimizer starts.
        """
        objective = LPPLMath.make_objective(series)
        if seed is None:
            seed = InitialGuess.from_series(series)
        return self.fit_seed((objective, seed))

    def fit_seed(self, args: Tuple[LPPLObjective, LPPLParams]) -> FitResult:
        objective, seed = args
        outcome = self.optimizer.minimize(objective, seed.to_array())

        return FitResult(
            params=LPPLParams.from_array(outcome.x),
            cost=outcome.cost,
            status=outcome.status,
            iterations=outcome.iterations,
            evaluations=outcome.evaluations,
            message=outcome.message,
        )

    def fit_multi_start(
        self,
        series: ObservationSeries,
        starts: int = MULTI_START_COUNT,
        random_seed: int = MULTI_START_RANDOM_SEED,
        workers: int = 1,
    ) -> FitResult:
        # The LPPL cost has many local minima, so a single seed is often not enough.
        objective = LPPLMath.make_objective(series)
        seeds = InitialGuess.multi_start_seeds(series, starts, random_seed)

        results = DataFit.run_all(self.fit_seed, [(objective, seed) for seed in seeds], workers)
        return DataFit.select_best(results)

    @staticmethod
    def select_best(results: List[FitResult]) -> FitResult:
        if not results:
            raise InvalidInput("no fits to choose from")

        converged = [r for r in results if r.converged]
        finite = [r for r in results if np.isfinite(r.cost)]
        candidates = converged or finite
        if not candidates:
            return results[0]
        return min(candidates, key=lambda r: r.cost)

    def fit_windows(
        self, series: ObservationSeries, window_size: int, step: int = 1, workers: int = 1
    ) -> List[WindowFit]:
        """
        Independent fits on every window of window_size consecutive observations,
        window starts step observations apart. Each window has its own time axis,
        so tc is counted in days from the window's first observation.
        """
        series.validate()
        if window_size < 2 or window_size > len(series):
            raise InvalidInput(
                f"window size must be between 2 and {len(series)}, got {window_size}"
            )
        if step < 1:
            raise InvalidInput(f"step must be positive, got {step}")

        windows_args = []
        for start in range(0, len(series) - window_size + 1, step):
            end = start + window_size
            windows_args.append((series[start:end], start, end))

        return DataFit.run_all(self.fit_window, windows_args, workers)

    def fit_window(self, args: Tuple[ObservationSeries, int, int]) -> WindowFit:
        window, start, end = args
        return WindowFit(start_index=start, end_index=end, result=self.fit(window))

    @staticmethod
    def run_all(func: Callable, args: List, workers: int) -> List:
        # fits share nothing, so they can run in any number of processes
        if workers <= 1:
            return [func(a) for a in args]

        with Pool(processes=workers) as pool:
            return list(
                tqdm(
                    pool.imap(func, args),
                    total=len(args),
                    dynamic_ncols=True,
                    file=sys.stdout,
                    position=0,
                )
            )
