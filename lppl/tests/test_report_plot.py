import os
from lppl.lppl_dataclasses import FitResult, FitStatus, LPPLParams
from lppl.plot import LPPLPlot
from lppl.report import format_fit_report
from lppl.tests.helpers import TRUE_PARAMS


def make_result(params: LPPLParams, status: FitStatus = FitStatus.CONVERGED) -> FitResult:
    return FitResult(
        params=params,
        cost=0.00123456,
        status=status,
        iterations=42,
        evaluations=80,
        message="tolerances reached",
    )


def test_report_lines(three_day_series):
    lines = format_fit_report(make_result(TRUE_PARAMS), three_day_series)

    assert lines == [
        "Fitted parameters:",
        "tc: 120.00 days",
        "m: 0.5000",
        "omega: 6.0000",
        "A: 5.0000",
        "B: -0.3000",
        "C: 0.1000",
        "phi: 1.0000",
        "critical date: 2025-07-09",
        "cost: 0.001235",
        "status: converged (42 iterations, 80 evaluations)",
        "message: tolerances reached",
    ]


def test_report_without_series():
    lines = format_fit_report(make_result(TRUE_PARAMS, FitStatus.NON_CONVERGENCE))
    assert not any(line.startswith("critical date") for line in lines)
    assert "status: non_convergence (42 iterations, 80 evaluations)" in lines


def test_curve_end():
    assert LPPLPlot.curve_end(100.0, 120.0) == 120.0
    assert LPPLPlot.curve_end(100.0, 500.0) == 100.0
    assert LPPLPlot.curve_end(100.0, 50.0) == 100.0
    assert LPPLPlot.curve_end(100.0, float("nan")) == 100.0


def test_plot_is_saved(synthetic_series, tmp_path):
    output = str(tmp_path / "fit.png")
    LPPLPlot.plot_fit(synthetic_series, TRUE_PARAMS, output)

    assert os.path.getsize(output) > 0
    with open(output, "rb") as f:
        assert f.read(8) == b"\x89PNG\r\n\x1a\n"


def test_plot_with_tc_inside_the_data(three_day_series, tmp_path):
    params = LPPLParams(tc=1.5, m=0.7, omega=8.0, a=4.6, b=-1.0, c=0.1, phi=0.0)
    output = str(tmp_path / "clamped.png")
    LPPLPlot.plot_fit(three_day_series, params, output)
    assert os.path.getsize(output) > 0
