from typing import List
import numpy as np
from common.typechecking import TypeCheckBase
from lppl.errors import InvalidInput
from lppl.lppl_dataclasses import LPPLParams, ObservationSeries
from lppl.lppl_defaults import (
    TC_OFFSET,
    M_SEED,
    OMEGA_SEED,
    B_SEED,
    C_SEED,
    PHI_SEED,
    TC_MIN_EXTRA_DAYS,
    M_RANGE,
    OMEGA_RANGE,
    MULTI_START_RANDOM_SEED,
)
from lppl.time_index import TimeIndex


class InitialGuess(TypeCheckBase):
    @staticmethod
    def from_series(series: ObservationSeries) -> LPPLParams:
        """
        Only the series length and the first price are used.
        tc is expressed in elapsed days but derived from the number of observations,
        so for daily data it lands TC_OFFSET days after the end of the series.
        """
        if len(series) == 0:
            raise InvalidInput("cannot seed a fit from an empty series")

        first_price = series[0].price
        if not first_price > 0:
            raise InvalidInput(f"first price must be positive, got {first_price}")

        return LPPLParams(
            tc=float(len(series) + TC_OFFSET),
            m=M_SEED,
            omega=OMEGA_SEED,
            a=float(np.log(first_price)),
            b=B_SEED,
            c=C_SEED,
            phi=PHI_SEED,
        )

    @staticmethod
    def multi_start_seeds(
        series: ObservationSeries, count: int, random_seed: int = MULTI_START_RANDOM_SEED
    ) -> List[LPPLParams]:
        """
        The heuristic seed followed by count - 1 random ones.

        Random seeds keep a, b and c from the heuristic and draw tc, m, omega and phi,
        since those are the ones the LPPL cost surface has several local minima in.
        """
        if count < 1:
            raise InvalidInput(f"need at least one seed, got {count}")

        base = InitialGuess.from_series(series)
        seeds = [base]

        last_day = float(TimeIndex.from_series(series)[-1])
        # from just past the last observation to twice the series span beyond it
        tc_low = last_day + TC_MIN_EXTRA_DAYS
        tc_high = max(last_day + 2 * max(last_day, 1.0), base.tc)

        rng = np.random.default_rng(random_seed)
        for _ in range(count - 1):
            seeds.append(
                LPPLParams(
                    tc=float(rng.uniform(tc_low, tc_high)),
                    m=float(rng.uniform(*M_RANGE)),
                    omega=float(rng.uniform(*OMEGA_RANGE)),
                    a=base.a,
                    b=base.b,
                    c=base.c,
                    phi=float(rng.uniform(0, 2 * np.pi)),
                )
            )

        return seeds
