import argparse
import sys
import time
from lppl.data_fit import DataFit
from lppl.data_loader import DataLoader, load_config
from lppl.errors import InvalidInput
from lppl.lppl_dataclasses import FitResult, ObservationSeries
from lppl.lppl_defaults import (
    CSV_DELIMITER,
    CSV_DATE_COLUMN,
    CSV_DATE_FORMAT,
    CSV_PRICE_COLUMN,
    DEFAULT_PLOT_FILE,
    MULTI_START_COUNT,
)
from lppl.optimizer import OptimizerSettings, build_optimizer
from lppl.plot import LPPLPlot
from lppl.report import format_fit_report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fit the LPPL model to a price history.")
    parser.add_argument("csv_file", help="Delimited price history, one row per observation.")
    parser.add_argument(
        "--output", default=DEFAULT_PLOT_FILE, help="Where to save the plot of the fit."
    )
    parser.add_argument("--config", help="JSON file with optimizer settings.")
    parser.add_argument(
        "--optimizer",
        choices=["nelder-mead", "scipy"],
        default="nelder-mead",
        help="Built-in simplex search, or scipy.optimize.minimize.",
    )
    parser.add_argument(
        "--method",
        default="Nelder-Mead",
        help="scipy.optimize.minimize method, only used with --optimizer scipy.",
    )
    parser.add_argument(
        "--starts",
        type=int,
        nargs="?",
        const=MULTI_START_COUNT,
        default=1,
        help="Number of seeds to fit from; the lowest cost converged fit is kept.",
    )
    parser.add_argument("--workers", type=int, default=1, help="Processes for multi-start fits.")
    parser.add_argument("--delimiter", default=CSV_DELIMITER)
    parser.add_argument("--date-column", type=int, default=CSV_DATE_COLUMN)
    parser.add_argument("--date-format", default=CSV_DATE_FORMAT)
    parser.add_argument("--price-column", type=int, default=CSV_PRICE_COLUMN)
    parser.add_argument("--no-plot", action="store_true", help="Only print the fitted parameters.")
    return parser


def run_fit(series: ObservationSeries, args: argparse.Namespace) -> FitResult:
    settings = OptimizerSettings.from_config(load_config(args.config))
    data_fit = DataFit(build_optimizer(args.optimizer, settings, args.method))

    if args.starts > 1:
        return data_fit.fit_multi_start(series, starts=args.starts, workers=args.workers)
    return data_fit.fit(series)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    start_time = time.time()
    try:
        series = DataLoader.load_csv(
            args.csv_file,
            delimiter=args.delimiter,
            date_column=args.date_column,
            price_column=args.price_column,
            date_format=args.date_format,
        )
        if not series.has_regular_spacing():
            print("Note: observations are unevenly spaced in time, the fit may be less accurate.")
        result = run_fit(series, args)
    except InvalidInput as e:
        parser.error(str(e))

    for line in format_fit_report(result, series):
        print(line)
    print(f"Fit took {time.time() - start_time:.2f} seconds.")

    if not args.no_plot:
        LPPLPlot.plot_fit(series, result.params, args.output)
        print(f"Plot saved to {args.output}")

    return 0 if result.converged else 1


if __name__ == "__main__":
    sys.exit(main())

# To fit a CoinMarketCap export:
# python -m lppl.demo.demo_fit_csv Bitcoin_historical_data_coinmarketcap.csv

# To keep the best of 8 seeds, fitted in 4 processes:
# python -m lppl.demo.demo_fit_csv prices.csv --starts 8 --workers 4
