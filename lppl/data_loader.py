import json
from typing import Dict
import pandas as pd
from common.typechecking import TypeCheckBase
from lppl.errors import InvalidInput
from lppl.lppl_dataclasses import Observation, ObservationSeries
from lppl.lppl_defaults import CSV_DELIMITER, CSV_DATE_COLUMN, CSV_PRICE_COLUMN, CSV_DATE_FORMAT


class DataLoader(TypeCheckBase):
    @staticmethod
    def load_csv(
        path: str,
        delimiter: str = CSV_DELIMITER,
        date_column: int = CSV_DATE_COLUMN,
        price_column: int = CSV_PRICE_COLUMN,
        date_format: str = CSV_DATE_FORMAT,
        has_header: bool = True,
    ) -> ObservationSeries:
        """
        Reads (timestamp, price) rows from a delimited file, by default a CoinMarketCap
        historical export. Rows with a date or price that doesn't parse are reported and
        skipped, the rest are returned in chronological order.
        """
        frame = pd.read_csv(
            path,
            sep=delimiter,
            header=0 if has_header else None,
            dtype=str,
            keep_default_na=False,
            on_bad_lines="skip",
        )

        nr_columns = frame.shape[1]
        if date_column >= nr_columns or price_column >= nr_columns:
            raise InvalidInput(
                f"{path} has {nr_columns} columns, need columns {date_column} and {price_column}"
            )

        raw_dates = frame.iloc[:, date_column].str.strip().str.strip('"')
        raw_prices = frame.iloc[:, price_column].str.strip().str.strip('"')
        dates = pd.to_datetime(raw_dates, format=date_format, errors="coerce", utc=True)
        prices = pd.to_numeric(raw_prices, errors="coerce")

        observations = []
        for i in range(len(frame)):
            if pd.isna(dates.iloc[i]):
                print(f"Skipping row {i}: cannot parse date '{raw_dates.iloc[i]}'")
                continue
            if pd.isna(prices.iloc[i]):
                print(f"Skipping row {i}: cannot parse price '{raw_prices.iloc[i]}'")
                continue
            observations.append(Observation(dates.iloc[i], float(prices.iloc[i])))

        if not observations:
            raise InvalidInput(f"no usable rows in {path}")

        observations.sort(key=lambda o: o.timestamp)
        return ObservationSeries(observations)


def load_config(config_file: str | None) -> Dict | None:
    if config_file:
        with open(config_file, "r") as f:
            return json.load(f)
    return None
