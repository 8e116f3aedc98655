from typing import List
import numpy as np
from common.date_utils import DateUtils as du
from lppl.lppl_dataclasses import FitResult, LPPLParams, ObservationSeries

PARAM_LABELS = {
    "tc": "tc",
    "m": "m",
    "omega": "omega",
    "a": "A",
    "b": "B",
    "c": "C",
    "phi": "phi",
}


def format_fit_report(result: FitResult, series: ObservationSeries | None = None) -> List[str]:
    params = result.params
    lines = ["Fitted parameters:", f"tc: {params.tc:.2f} days"]
    # tc leads the list and is printed above with its unit
    for name in LPPLParams.names()[1:]:
        lines.append(f"{PARAM_LABELS[name]}: {getattr(params, name):.4f}")

    if series is not None and len(series) > 0 and np.isfinite(params.tc):
        critical_date = du.add_days(series[0].timestamp, params.tc)
        lines.append(f"critical date: {du.format_date(critical_date)}")

    lines.append(f"cost: {result.cost:.6f}")
    lines.append(
        f"status: {result.status.value} "
        f"({result.iterations} iterations, {result.evaluations} evaluations)"
    )
    if result.message:
        lines.append(f"message: {result.message}")
    return lines
