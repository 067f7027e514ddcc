import math
import unittest

from backend.cash_flows import normalize_explicit_fcf
from backend.form_inputs import build_valuation_inputs
from backend.numeric import safe_divide, safe_pow, to_float


class NumericHelperTests(unittest.TestCase):
    def test_to_float_coerces_bad_values_to_zero(self):
        for raw in (None, "", "   ", "abc", "nan", "inf", float("nan"), float("inf"), True, False, [1]):
            self.assertEqual(to_float(raw), 0.0, raw)
        self.assertEqual(to_float(" 12.5 "), 12.5)
        self.assertEqual(to_float("-3"), -3.0)
        self.assertEqual(to_float(7), 7.0)
        self.assertEqual(to_float(None, default=4.0), 4.0)

    def test_form_and_forecast_share_coercion_rules(self):
        raw = [True, "5", "", None, float("nan")]
        inputs = build_valuation_inputs(dict(zip(("fcf1", "fcf2", "fcf3", "fcf4", "fcf5"), raw)))
        self.assertEqual(list(inputs.explicit_fcf), normalize_explicit_fcf(raw))
        self.assertEqual(list(inputs.explicit_fcf), [0.0, 5.0, 0.0, 0.0, 0.0])

    def test_safe_pow_saturates_on_overflow(self):
        self.assertEqual(safe_pow(1.1, 2), math.pow(1.1, 2))
        self.assertEqual(safe_pow(1e80, 5), math.inf)
        self.assertEqual(safe_pow(-1e80, 5), -math.inf)
        self.assertEqual(safe_pow(-1e80, 4), math.inf)
        self.assertEqual(safe_pow(0.0, 5), 0.0)

    def test_safe_divide_by_zero(self):
        self.assertEqual(safe_divide(6.0, 3.0), 2.0)
        self.assertEqual(safe_divide(10.0, 0.0), math.inf)
        self.assertEqual(safe_divide(-10.0, 0.0), -math.inf)
        self.assertEqual(safe_divide(0.0, 0.0), 0.0)
        self.assertEqual(safe_divide(10.0, math.inf), 0.0)


if __name__ == "__main__":
    unittest.main()
