import numpy as np
from common.date_utils import DateUtils as du
from common.typechecking import TypeCheckBase
from lppl.errors import InvalidInput
from lppl.lppl_dataclasses import ObservationSeries


class TimeIndex(TypeCheckBase):
    @staticmethod
    def from_series(series: ObservationSeries) -> np.ndarray:
        """
        Elapsed days since the first observation, one value per observation.
        Non-uniform gaps are kept as they are.
        """
        if len(series) == 0:
            raise InvalidInput("cannot build a time index for an empty series")

        start = series[0].timestamp
        return np.array([du.elapsed_days(start, o.timestamp) for o in series], dtype=float)
