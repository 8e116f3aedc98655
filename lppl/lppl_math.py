import numpy as np
from common.typechecking import TypeCheckBase
from lppl.lppl_dataclasses import LPPLParams, ObservationSeries
from lppl.time_index import TimeIndex


class LPPLMath(TypeCheckBase):
    @staticmethod
    def predict_log_price(t: float, params: LPPLParams) -> float:
        dt = params.tc - t
        # At or past the critical time only the level survives.
        if not dt > 0:
            return float(params.a)

        with np.errstate(all="ignore"):
            return float(
                params.a
                + params.b
                * np.power(dt, params.m)
                * (1 + params.c * np.cos(params.omega * np.log(dt) + params.phi))
            )

    @staticmethod
    def get_log_price_predictions(time_index: np.ndarray, params: LPPLParams) -> np.ndarray:
        dt = params.tc - np.asarray(time_index, dtype=float)
        before_tc = dt > 0
        # dt is replaced by 1 where it's clamped so log and power stay defined there.
        safe_dt = np.where(before_tc, dt, 1.0)

        # overflow shows up as inf/nan in the result, the optimizer decides what to do with it
        with np.errstate(all="ignore"):
            oscillation = 1 + params.c * np.cos(params.omega * np.log(safe_dt) + params.phi)
            predictions = params.a + params.b * np.power(safe_dt, params.m) * oscillation

        return np.where(before_tc, predictions, params.a)

    @staticmethod
    def sum_of_squared_residuals(
        log_prices: np.ndarray, time_index: np.ndarray, params: LPPLParams
    ) -> float:
        predictions = LPPLMath.get_log_price_predictions(time_index, params)
        with np.errstate(all="ignore"):
            delta = np.subtract(log_prices, predictions)
            return float(np.sum(np.power(delta, 2)))

    @staticmethod
    def make_objective(series: ObservationSeries) -> "LPPLObjective":
        series.validate()
        return LPPLObjective(series.get_log_prices(), TimeIndex.from_series(series))


class LPPLObjective:
    """
    Cost of a raw 7-element parameter vector against one series.

    Log prices and the time index are derived once, here, and reused by every evaluation.
    Plain class rather than a closure so that it can be sent to worker processes.
    """

    def __init__(self, log_prices: np.ndarray, time_index: np.ndarray):
        self.log_prices = log_prices
        self.time_index = time_index

    def __call__(self, x: np.ndarray) -> float:
        return LPPLMath.sum_of_squared_residuals(
            self.log_prices, self.time_index, LPPLParams.from_array(x)
        )

    def __len__(self):
        return len(self.log_prices)
