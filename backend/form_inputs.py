"""Turn raw calculator form values into engine inputs.

The form collects rates as percentages (``10`` for 10%) and keeps whatever text the user
typed; blank or unparseable entries count as zero.
"""

import logging
from enum import Enum
from typing import Any, Dict, Mapping, Type, TypeVar

from .models import FORECAST_YEARS, CalculationMode, ForecastMode, SbcMode, ValuationInputs
from .numeric import to_float

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

DEFAULT_FORM: Dict[str, Any] = {
    "discountRate": 10,
    "marketCap": 1000,
    "netCash": 50,
    "fcfApproach": ForecastMode.EXPLICIT.value,
    "fcf1": 10,
    "fcf2": 11,
    "fcf3": 12,
    "fcf4": 13,
    "fcf5": 14,
    "baseFcf": 10,
    "fcfGrowthRate": 10,
    "terminalGrowthRate": 3,
    "sbcApproach": SbcMode.PERCENTAGE.value,
    "sbcPercentage": 0,
    "annualDilution": 0,
}

EXPLICIT_FCF_FIELDS = tuple("fcf%d" % year for year in range(1, FORECAST_YEARS + 1))


def parse_percent(raw: Any) -> float:
    return to_float(raw) / 100.0


def parse_mode(raw: Any, mode_cls: Type[E], default: E) -> E:
    if raw is None:
        return default
    try:
        return mode_cls(str(raw).strip().lower())
    except ValueError:
        logger.debug("Unknown %s %r; using %s", mode_cls.__name__, raw, default.value)
        return default


def parse_calculation_mode(raw: Any) -> CalculationMode:
    return parse_mode(raw, CalculationMode, CalculationMode.DCF)


def build_valuation_inputs(params: Mapping[str, Any]) -> ValuationInputs:
    """Build engine inputs from form fields, converting percentages to fractions."""
    return ValuationInputs(
        discount_rate=parse_percent(params.get("discountRate")),
        market_cap=to_float(params.get("marketCap")),
        net_cash=to_float(params.get("netCash")),
        forecast_mode=parse_mode(params.get("fcfApproach"), ForecastMode, ForecastMode.EXPLICIT),
        explicit_fcf=tuple(to_float(params.get(name)) for name in EXPLICIT_FCF_FIELDS),
        base_fcf=to_float(params.get("baseFcf")),
        fcf_growth_rate=parse_percent(params.get("fcfGrowthRate")),
        terminal_growth_rate=parse_percent(params.get("terminalGrowthRate")),
        sbc_mode=parse_mode(params.get("sbcApproach"), SbcMode, SbcMode.PERCENTAGE),
        sbc_percentage=parse_percent(params.get("sbcPercentage")),
        annual_dilution_rate=parse_percent(params.get("annualDilution")),
    )
