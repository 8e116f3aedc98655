import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest
from lppl.lppl_math import LPPLMath
from lppl.tests.helpers import TRUE_PARAMS, build_series


@pytest.fixture
def three_day_series():
    return build_series([100.0, 110.0, 90.0])


@pytest.fixture
def synthetic_series():
    days = np.arange(100, dtype=float)
    log_prices = LPPLMath.get_log_price_predictions(days, TRUE_PARAMS)
    noise = np.random.default_rng(42).normal(0, 0.002, size=len(days))
    return build_series(list(np.exp(log_prices + noise)))
