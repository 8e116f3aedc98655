import numpy as np
import pytest
from lppl.data_fit import DataFit
from lppl.errors import InvalidInput
from lppl.initial_guess import InitialGuess
from lppl.lppl_dataclasses import FitResult, FitStatus, LPPLParams, ObservationSeries
from lppl.lppl_math import LPPLMath
from lppl.optimizer import NelderMeadOptimizer, Optimizer, OptimizerSettings
from lppl.tests.helpers import TRUE_PARAMS, build_series


class SpyOptimizer(Optimizer):
    def __init__(self):
        self.calls = 0

    def minimize(self, objective, x0):
        self.calls += 1
        return NelderMeadOptimizer(OptimizerSettings(max_evaluations=200)).minimize(objective, x0)


@pytest.fixture
def quick_fit():
    return DataFit(NelderMeadOptimizer(OptimizerSettings(max_evaluations=300)))


def result_with(cost: float, status: FitStatus) -> FitResult:
    return FitResult(
        params=TRUE_PARAMS, cost=cost, status=status, iterations=1, evaluations=1, message=""
    )


def test_recovers_synthetic_parameters(synthetic_series):
    seed = LPPLParams(tc=122.0, m=0.51, omega=6.1, a=5.05, b=-0.31, c=0.11, phi=1.05)
    settings = OptimizerSettings(max_iterations=20000, max_evaluations=40000, restarts=4)

    result = DataFit(NelderMeadOptimizer(settings)).fit(synthetic_series, seed)

    objective = LPPLMath.make_objective(synthetic_series)
    noise_floor = objective(TRUE_PARAMS.to_array())
    assert result.status is not FitStatus.NUMERICAL_FAILURE
    assert abs(result.params.tc - TRUE_PARAMS.tc) / TRUE_PARAMS.tc < 0.05
    assert result.cost <= 10 * noise_floor
    assert result.cost < objective(seed.to_array())


def test_fit_from_the_default_seed(three_day_series, quick_fit):
    result = quick_fit.fit(three_day_series)

    seed_cost = LPPLMath.make_objective(three_day_series)(
        InitialGuess.from_series(three_day_series).to_array()
    )
    assert np.isfinite(result.cost)
    assert result.cost <= seed_cost
    assert result.evaluations <= 300
    assert result.converged == (result.status is FitStatus.CONVERGED)


def test_fit_is_deterministic(three_day_series, quick_fit):
    assert quick_fit.fit(three_day_series) == quick_fit.fit(three_day_series)


def test_empty_series_is_rejected():
    optimizer = SpyOptimizer()
    with pytest.raises(InvalidInput):
        DataFit(optimizer).fit(ObservationSeries([]))
    assert optimizer.calls == 0


@pytest.mark.parametrize("bad_price", [0.0, -1.0])
def test_non_positive_price_is_rejected_before_optimizing(bad_price):
    optimizer = SpyOptimizer()
    series = build_series([100.0, 105.0, bad_price, 110.0])

    with pytest.raises(InvalidInput):
        DataFit(optimizer).fit(series)
    with pytest.raises(InvalidInput):
        DataFit(optimizer).fit_multi_start(series, starts=3)
    assert optimizer.calls == 0


def test_unordered_series_is_rejected():
    series = build_series([100.0, 105.0, 110.0])
    series.observations.reverse()
    with pytest.raises(InvalidInput):
        DataFit(SpyOptimizer()).fit(series)


def test_select_best_prefers_converged_fits():
    results = [
        result_with(0.5, FitStatus.NON_CONVERGENCE),
        result_with(2.0, FitStatus.CONVERGED),
        result_with(1.0, FitStatus.CONVERGED),
    ]
    assert DataFit.select_best(results) is results[2]


def test_select_best_falls_back_to_lowest_finite_cost():
    results = [
        result_with(float("nan"), FitStatus.NUMERICAL_FAILURE),
        result_with(3.0, FitStatus.NON_CONVERGENCE),
        result_with(0.7, FitStatus.NUMERICAL_FAILURE),
    ]
    assert DataFit.select_best(results) is results[2]


def test_select_best_with_nothing_usable():
    results = [result_with(float("inf"), FitStatus.NUMERICAL_FAILURE)]
    assert DataFit.select_best(results) is results[0]
    with pytest.raises(InvalidInput):
        DataFit.select_best([])


def test_multi_start_keeps_the_best_seed(synthetic_series, quick_fit):
    best = quick_fit.fit_multi_start(synthetic_series, starts=3, random_seed=5)

    seeds = InitialGuess.multi_start_seeds(synthetic_series, 3, random_seed=5)
    single_fits = [quick_fit.fit(synthetic_series, seed) for seed in seeds]
    assert best == DataFit.select_best(single_fits)


def test_fit_windows(synthetic_series, quick_fit):
    window_fits = quick_fit.fit_windows(synthetic_series, window_size=60, step=20)

    assert [(w.start_index, w.end_index) for w in window_fits] == [(0, 60), (20, 80), (40, 100)]
    assert window_fits[1].result == quick_fit.fit(synthetic_series[20:80])


def test_fit_windows_in_worker_processes(synthetic_series, quick_fit):
    sequential = quick_fit.fit_windows(synthetic_series, window_size=80, step=10)
    pooled = quick_fit.fit_windows(synthetic_series, window_size=80, step=10, workers=2)
    assert pooled == sequential


@pytest.mark.parametrize("window_size, step", [(1, 1), (101, 1), (50, 0)])
def test_fit_windows_rejects_bad_windows(synthetic_series, quick_fit, window_size, step):
    with pytest.raises(InvalidInput):
        quick_fit.fit_windows(synthetic_series, window_size=window_size, step=step)


def test_spent_budget_is_a_result_not_an_error():
    settings = OptimizerSettings()
    settings.max_evaluations = 0

    result = DataFit(NelderMeadOptimizer(settings)).fit(build_series([100.0, 110.0, 90.0]))

    assert result.status is FitStatus.NON_CONVERGENCE
    assert not result.converged
    assert result.evaluations == 0
