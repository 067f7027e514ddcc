import logging
from typing import List, Optional, Sequence

from .models import FORECAST_YEARS, ForecastMode, ForecastSeries, SbcMode, ValuationInputs
from .numeric import safe_pow, to_float

logger = logging.getLogger(__name__)


def build_growth_fcf(base_fcf: float, growth_rate: float, years: int = FORECAST_YEARS) -> List[float]:
    """Year 1 is ``base_fcf`` itself; each later year compounds ``growth_rate`` once more."""
    base = to_float(base_fcf)
    growth = to_float(growth_rate)
    if base == 0:
        return [0.0] * years
    return [base * safe_pow(1.0 + growth, idx) for idx in range(years)]


def normalize_explicit_fcf(values: Optional[Sequence[float]], years: int = FORECAST_YEARS) -> List[float]:
    cleaned = [to_float(v) for v in (values or ())]
    if len(cleaned) > years:
        logger.warning("Explicit forecast has %d values; only the first %d are used", len(cleaned), years)
        cleaned = cleaned[:years]
    # Missing years count as zero cash flow
    cleaned.extend([0.0] * (years - len(cleaned)))
    return cleaned


def build_fcf_values(inputs: ValuationInputs) -> List[float]:
    if inputs.forecast_mode == ForecastMode.GROWTH:
        return build_growth_fcf(inputs.base_fcf, inputs.fcf_growth_rate)
    return normalize_explicit_fcf(inputs.explicit_fcf)


def apply_sbc_adjustment(fcf_values: Sequence[float], sbc_mode: SbcMode, sbc_percentage: float) -> List[float]:
    """Haircut every year by the same SBC share of FCF.

    Dilution is not a cash-flow adjustment; it is applied to equity value by the engine,
    so the values come back unchanged in that mode.
    """
    pct = to_float(sbc_percentage)
    if sbc_mode != SbcMode.PERCENTAGE or pct <= 0:
        return list(fcf_values)
    multiplier = 1.0 - pct
    return [fcf * multiplier for fcf in fcf_values]


def project_cash_flows(inputs: ValuationInputs) -> ForecastSeries:
    raw = build_fcf_values(inputs)
    adjusted = apply_sbc_adjustment(raw, inputs.sbc_mode, inputs.sbc_percentage)
    return ForecastSeries(raw_fcf=tuple(raw), adjusted_fcf=tuple(adjusted))
