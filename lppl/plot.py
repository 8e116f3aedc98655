import numpy as np
from matplotlib import pyplot as plt
from common.typechecking import TypeCheckBase
from lppl.lppl_dataclasses import LPPLParams, ObservationSeries
from lppl.lppl_defaults import PLOT_WIDTH_INCHES, PLOT_HEIGHT_INCHES, PLOT_POINTS
from lppl.lppl_math import LPPLMath
from lppl.time_index import TimeIndex


class LPPLPlot(TypeCheckBase):
    @staticmethod
    def curve_end(last_day: float, tc: float) -> float:
        # Show the run-up to tc unless it is further out than half the series span.
        if np.isfinite(tc) and last_day < tc <= last_day * 1.5:
            return tc
        return last_day

    @staticmethod
    def plot_fit(
        series: ObservationSeries,
        params: LPPLParams,
        output_path: str,
        title: str = "LPPL model",
    ) -> None:
        time_index = TimeIndex.from_series(series)
        last_day = float(time_index[-1])
        grid = np.linspace(0, LPPLPlot.curve_end(last_day, params.tc), PLOT_POINTS)

        with np.errstate(all="ignore"):
            fitted_prices = np.exp(LPPLMath.get_log_price_predictions(grid, params))
        # nan leaves a gap in the line, inf would break the axis limits
        fitted_prices[~np.isfinite(fitted_prices)] = np.nan

        fig, ax = plt.subplots(nrows=1, ncols=1, figsize=(PLOT_WIDTH_INCHES, PLOT_HEIGHT_INCHES))
        ax.scatter(time_index, series.get_prices(), label="data", color="blue", s=10)
        ax.plot(grid, fitted_prices, label="lppl fit", color="red")

        ax.set_title(title)
        ax.set_xlabel("days since start")
        ax.set_ylabel("price")
        ax.grid(which="major", axis="both", linestyle="--")
        ax.legend(loc=2)

        fig.savefig(output_path)
        plt.close(fig)
