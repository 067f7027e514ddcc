import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

FORECAST_YEARS = 5
DISPLAY_DECIMALS = 2
ERROR_MARKER = "Error"


class ForecastMode(str, Enum):
    EXPLICIT = "specific"
    GROWTH = "growth"

    @classmethod
    def _missing_(cls, value):
        if value == "explicit":
            return cls.EXPLICIT
        return None


class SbcMode(str, Enum):
    PERCENTAGE = "percentage"
    DILUTION = "dilution"


class CalculationMode(str, Enum):
    DCF = "dcf"
    INVERSE = "inverse"


def _display(value: float) -> Optional[float]:
    # Saturated infinities are not JSON compliant, so they render as null
    if not math.isfinite(value):
        return None
    return round(value, DISPLAY_DECIMALS)


@dataclass(frozen=True)
class ValuationInputs:
    """Numeric inputs for one calculation. Rates are fractions (0.10 for 10%).

    ``forecast_mode`` selects between ``explicit_fcf`` and ``base_fcf``/``fcf_growth_rate``;
    ``sbc_mode`` selects between ``sbc_percentage`` and ``annual_dilution_rate``.
    """

    discount_rate: float = 0.0
    market_cap: float = 0.0
    net_cash: float = 0.0
    forecast_mode: ForecastMode = ForecastMode.EXPLICIT
    explicit_fcf: Tuple[float, ...] = (0.0,) * FORECAST_YEARS
    base_fcf: float = 0.0
    fcf_growth_rate: float = 0.0
    terminal_growth_rate: float = 0.0
    sbc_mode: SbcMode = SbcMode.PERCENTAGE
    sbc_percentage: float = 0.0
    annual_dilution_rate: float = 0.0


@dataclass(frozen=True)
class ForecastSeries:
    raw_fcf: Tuple[float, ...]
    adjusted_fcf: Tuple[float, ...]


@dataclass(frozen=True)
class YearBreakdown:
    year: int
    raw_fcf: float
    adjusted_fcf: float
    present_value: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "originalFcf": _display(self.raw_fcf),
            "fcf": _display(self.adjusted_fcf),
            "pv": _display(self.present_value),
        }


@dataclass(frozen=True)
class ValuationResult:
    present_value_explicit: float
    terminal_value: float
    present_value_terminal: float
    enterprise_value: float
    net_cash: float
    equity_value: float
    sbc_impact: float
    breakdown: Tuple[YearBreakdown, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Display payload; monetary fields are rounded here and nowhere else."""
        return {
            "equityValue": _display(self.equity_value),
            "enterpriseValue": _display(self.enterprise_value),
            "netCash": _display(self.net_cash),
            "pvExplicit": _display(self.present_value_explicit),
            "pvTerminal": _display(self.present_value_terminal),
            "terminalValue": _display(self.terminal_value),
            "sbcImpact": _display(self.sbc_impact),
            "breakdown": [row.to_dict() for row in self.breakdown],
        }


@dataclass(frozen=True)
class InverseResult:
    implied_discount_rate: Optional[float]
    implied_enterprise_value: float
    target_equity_value: float
    iteration_count: int
    converged: bool = True
    at_boundary: bool = False
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        if self.implied_discount_rate is None:
            implied_return: Any = self.error or ERROR_MARKER
        else:
            implied_return = _display(self.implied_discount_rate * 100)
        return {
            "impliedReturn": implied_return,
            "impliedDiscountRate": self.implied_discount_rate,
            "impliedEV": _display(self.implied_enterprise_value),
            "targetEquityValue": _display(self.target_equity_value),
            "iterations": self.iteration_count,
            "converged": self.converged,
            "atBoundary": self.at_boundary,
        }
