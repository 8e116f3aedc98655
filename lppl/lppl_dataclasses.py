from enum import Enum
from dataclasses import dataclass, fields
from datetime import datetime
from typing import List, Sequence
import numpy as np
from common.date_utils import DateUtils as du
from lppl.errors import InvalidInput
from lppl.lppl_defaults import NR_PARAMS


@dataclass(frozen=True)
class Observation:
    timestamp: datetime
    price: float


@dataclass
class ObservationSeries:
    observations: List[Observation]

    def __len__(self):
        return len(self.observations)

    def __getitem__(self, key):
        if isinstance(key, slice):
            return ObservationSeries(self.observations[key])
        elif isinstance(key, int):
            return self.observations[key]
        else:
            raise TypeError("Invalid argument type.")

    def __iter__(self):
        return iter(self.observations)

    def get_prices(self) -> List[float]:
        return [o.price for o in self.observations]

    def get_log_prices(self) -> np.ndarray:
        return np.log(np.asarray(self.get_prices(), dtype=float))

    def get_timestamps(self) -> List[datetime]:
        return [o.timestamp for o in self.observations]

    def validate(self) -> None:
        """
        Checks everything the fit relies on, so that nothing fails once the optimizer runs.
        Raises:
            InvalidInput: empty series, a price that is not strictly positive, or
                timestamps out of chronological order.
        """
        if not self.observations:
            raise InvalidInput("the series is empty")

        for i, observation in enumerate(self.observations):
            if not np.isfinite(observation.price) or observation.price <= 0:
                raise InvalidInput(
                    f"price at position {i} must be positive, got {observation.price}"
                )

        timestamps = self.get_timestamps()
        for i in range(1, len(timestamps)):
            if timestamps[i] < timestamps[i - 1]:
                raise InvalidInput(f"timestamp at position {i} is earlier than the one before it")

    def has_regular_spacing(self, tolerance_days: float = 1e-6) -> bool:
        # Irregular gaps are accepted by the fit, this only tells the caller about them.
        if len(self.observations) < 3:
            return True
        start = self.observations[0].timestamp
        elapsed = np.array([du.elapsed_days(start, o.timestamp) for o in self.observations])
        gaps = np.diff(elapsed)
        return bool(np.max(gaps) - np.min(gaps) <= tolerance_days)


@dataclass(frozen=True)
class LPPLParams:
    tc: float
    m: float
    omega: float
    a: float
    b: float
    c: float
    phi: float

    def to_array(self) -> np.ndarray:
        return np.array([getattr(self, f.name) for f in fields(self)], dtype=float)

    @staticmethod
    def from_array(values: Sequence[float]) -> "LPPLParams":
        values = np.asarray(values, dtype=float).ravel()
        if len(values) != NR_PARAMS:
            raise InvalidInput(f"expected {NR_PARAMS} parameters, got {len(values)}")
        return LPPLParams(*[float(v) for v in values])

    @staticmethod
    def names() -> List[str]:
        return [f.name for f in fields(LPPLParams)]


class FitStatus(Enum):
    CONVERGED = "converged"
    NON_CONVERGENCE = "non_convergence"
    NUMERICAL_FAILURE = "numerical_failure"


@dataclass(frozen=True)
class FitResult:
    params: LPPLParams
    cost: float
    status: FitStatus
    iterations: int
    evaluations: int
    message: str = ""

    @property
    def converged(self) -> bool:
        return self.status is FitStatus.CONVERGED


@dataclass(frozen=True)
class WindowFit:
    start_index: int
    end_index: int
    result: FitResult
