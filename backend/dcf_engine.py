import logging
from typing import Sequence, Tuple

from .cash_flows import project_cash_flows
from .models import (
    ERROR_MARKER,
    FORECAST_YEARS,
    ForecastSeries,
    InverseResult,
    SbcMode,
    ValuationInputs,
    ValuationResult,
    YearBreakdown,
)
from .numeric import safe_divide, safe_pow

logger = logging.getLogger(__name__)

SOLVER_LOW = 0.001
SOLVER_HIGH = 0.99
SOLVER_TOLERANCE = 0.0001
SOLVER_MAX_ITERATIONS = 1000
MAX_TERMINAL_GROWTH = 0.99


class DCFComputationError(RuntimeError):
    """Raised when the engine is handed a forecast that does not span the horizon."""
    pass


def _require_horizon(fcf_values: Sequence[float]) -> None:
    if len(fcf_values) != FORECAST_YEARS:
        raise DCFComputationError(
            "expected %d forecast years, got %d" % (FORECAST_YEARS, len(fcf_values))
        )


def present_value(value: float, rate: float, year: int) -> float:
    # A -100% rate gives a zero factor, so the value saturates to a signed infinity
    return safe_divide(value, safe_pow(1.0 + rate, year))


def compute_terminal_value(final_fcf: float, rate: float, terminal_growth: float) -> float:
    """Gordon growth value at the end of the forecast; 0 when the rate equals terminal growth."""
    if rate == terminal_growth:
        logger.warning("Discount rate equals terminal growth (%.4f); terminal value set to 0", rate)
        return 0.0
    return final_fcf * (1.0 + terminal_growth) / (rate - terminal_growth)


def compute_enterprise_value(
    adjusted_fcf: Sequence[float],
    rate: float,
    terminal_growth: float,
) -> Tuple[float, float, float, float]:
    """Return (pv_explicit, terminal_value, pv_terminal, enterprise_value)."""
    _require_horizon(adjusted_fcf)
    pv_explicit = 0.0
    for year, fcf in enumerate(adjusted_fcf, start=1):
        pv_explicit += present_value(fcf, rate, year)
    terminal_value = compute_terminal_value(adjusted_fcf[-1], rate, terminal_growth)
    pv_terminal = present_value(terminal_value, rate, FORECAST_YEARS)
    return pv_explicit, terminal_value, pv_terminal, pv_explicit + pv_terminal


def dilution_factor(annual_dilution_rate: float, years: int = FORECAST_YEARS) -> float:
    return safe_pow(1.0 - annual_dilution_rate, years)


def value_forward(
    forecast: ForecastSeries,
    discount_rate: float,
    terminal_growth_rate: float,
    net_cash: float = 0.0,
    sbc_mode: SbcMode = SbcMode.PERCENTAGE,
    annual_dilution_rate: float = 0.0,
) -> ValuationResult:
    _require_horizon(forecast.raw_fcf)
    pv_explicit, terminal_value, pv_terminal, enterprise_value = compute_enterprise_value(
        forecast.adjusted_fcf,
        discount_rate,
        terminal_growth_rate,
    )

    undiluted_equity = enterprise_value + net_cash
    equity_value = undiluted_equity
    if sbc_mode == SbcMode.DILUTION and annual_dilution_rate > 0:
        # One five-year haircut on the final equity value; enterprise value is untouched
        equity_value = undiluted_equity * dilution_factor(annual_dilution_rate)
        sbc_impact = undiluted_equity - equity_value
    else:
        # Zero unless the percentage haircut changed the cash flows
        sbc_impact = sum(forecast.raw_fcf) - sum(forecast.adjusted_fcf)

    breakdown = tuple(
        YearBreakdown(
            year=year,
            raw_fcf=raw,
            adjusted_fcf=adjusted,
            present_value=present_value(adjusted, discount_rate, year),
        )
        for year, (raw, adjusted) in enumerate(zip(forecast.raw_fcf, forecast.adjusted_fcf), start=1)
    )

    return ValuationResult(
        present_value_explicit=pv_explicit,
        terminal_value=terminal_value,
        present_value_terminal=pv_terminal,
        enterprise_value=enterprise_value,
        net_cash=net_cash,
        equity_value=equity_value,
        sbc_impact=sbc_impact,
        breakdown=breakdown,
    )


def solve_discount_rate(
    adjusted_fcf: Sequence[float],
    terminal_growth_rate: float,
    market_cap: float,
    net_cash: float = 0.0,
    sbc_mode: SbcMode = SbcMode.PERCENTAGE,
    annual_dilution_rate: float = 0.0,
    *,
    low: float = SOLVER_LOW,
    high: float = SOLVER_HIGH,
    tolerance: float = SOLVER_TOLERANCE,
    max_iterations: int = SOLVER_MAX_ITERATIONS,
) -> InverseResult:
    """Bisect for the discount rate whose enterprise value matches the market price.

    Enterprise value falls as the rate rises (for positive cash flows and rate above terminal
    growth), so a computed value above the target means the rate is still too low. Midpoints at
    or below terminal growth are treated as too low without being evaluated.
    """
    _require_horizon(adjusted_fcf)

    target_equity_value = market_cap
    if sbc_mode == SbcMode.DILUTION and annual_dilution_rate > 0:
        # Equity the business must reach before the dilution haircut
        target_equity_value = safe_divide(market_cap, dilution_factor(annual_dilution_rate))
    implied_enterprise_value = target_equity_value - net_cash

    if terminal_growth_rate >= MAX_TERMINAL_GROWTH:
        logger.warning(
            "Terminal growth %.4f is outside the solvable range (< %.2f)",
            terminal_growth_rate,
            MAX_TERMINAL_GROWTH,
        )
        return InverseResult(
            implied_discount_rate=None,
            implied_enterprise_value=implied_enterprise_value,
            target_equity_value=target_equity_value,
            iteration_count=0,
            converged=False,
            error=ERROR_MARKER,
        )

    lower_bound, upper_bound = low, high
    iterations = 0
    while high - low > tolerance and iterations < max_iterations:
        mid = (low + high) / 2.0
        iterations += 1
        if mid <= terminal_growth_rate:
            low = mid
            continue
        _, _, _, calculated_ev = compute_enterprise_value(adjusted_fcf, mid, terminal_growth_rate)
        if calculated_ev > implied_enterprise_value:
            low = mid
        else:
            high = mid

    implied_rate = (low + high) / 2.0
    converged = high - low <= tolerance
    floor = max(lower_bound, terminal_growth_rate)
    at_boundary = implied_rate - floor <= tolerance or upper_bound - implied_rate <= tolerance

    if not converged:
        logger.warning("Discount rate search stopped at the %d iteration cap", max_iterations)
    if at_boundary:
        logger.warning(
            "Implied discount rate %.4f sits on the search boundary; target may be unreachable",
            implied_rate,
        )
    logger.debug("Implied discount rate %.6f after %d iterations", implied_rate, iterations)

    return InverseResult(
        implied_discount_rate=implied_rate,
        implied_enterprise_value=implied_enterprise_value,
        target_equity_value=target_equity_value,
        iteration_count=iterations,
        converged=converged,
        at_boundary=at_boundary,
    )


def run_dcf(inputs: ValuationInputs) -> ValuationResult:
    forecast = project_cash_flows(inputs)
    return value_forward(
        forecast,
        inputs.discount_rate,
        inputs.terminal_growth_rate,
        net_cash=inputs.net_cash,
        sbc_mode=inputs.sbc_mode,
        annual_dilution_rate=inputs.annual_dilution_rate,
    )


def run_inverse_dcf(inputs: ValuationInputs) -> InverseResult:
    forecast = project_cash_flows(inputs)
    return solve_discount_rate(
        forecast.adjusted_fcf,
        inputs.terminal_growth_rate,
        inputs.market_cap,
        net_cash=inputs.net_cash,
        sbc_mode=inputs.sbc_mode,
        annual_dilution_rate=inputs.annual_dilution_rate,
    )
