from datetime import datetime, timedelta
from typing import List
from lppl.lppl_dataclasses import LPPLParams, Observation, ObservationSeries

START = datetime(2025, 3, 11)

# tc lies 20 days after the last of 100 daily observations
TRUE_PARAMS = LPPLParams(tc=120.0, m=0.5, omega=6.0, a=5.0, b=-0.3, c=0.1, phi=1.0)


def build_series(prices: List[float], step: timedelta = timedelta(days=1)) -> ObservationSeries:
    return ObservationSeries([Observation(START + i * step, p) for i, p in enumerate(prices)])
