"""
Calculator framework tests: base class helpers and the registry.

Tests:
1-6.   Parsing and validation helpers
7-9.   Math helpers
10-14. Registry lookup and catalog
15-16. Output contract across every calculator
"""

import json

import pytest

from lasercalc.calculators.base import BaseCalculator, CalculationInputError
from lasercalc.calculators.registry import (
    CALCULATOR_REGISTRY, calculator_catalog, get_calculator, has_calculator, list_calculators,
)
from lasercalc.calculators.sheet_optimization import SheetOptimizationCalculator


class _Probe(BaseCalculator):
    calculator_id = "probe"
    DEFAULT_INPUTS = {"a": 1, "b": "x"}

    def calculate(self, fields):
        return {}


# ============================================================
# Parsing and validation helpers
# ============================================================

def test_parse_number_handles_strings_and_garbage():
    """Numeric strings parse; garbage and blanks fall back to the default."""
    calc = _Probe()
    assert calc.parse_number("12.5") == 12.5
    assert calc.parse_number(" 3 ") == 3.0
    assert calc.parse_number("abc", default=7.0) == 7.0
    assert calc.parse_number(None, default=2.0) == 2.0
    assert calc.parse_number("", default=1.0) == 1.0


def test_parse_bool_accepts_common_truthy_strings():
    calc = _Probe()
    assert calc.parse_bool(True) is True
    assert calc.parse_bool("yes") is True
    assert calc.parse_bool("1") is True
    assert calc.parse_bool("false") is False
    assert calc.parse_bool(None, default=True) is True


def test_require_positive_rejects_zero_with_field():
    """Zero or negative values raise CalculationInputError naming the field."""
    calc = _Probe()
    with pytest.raises(CalculationInputError) as exc:
        calc.require_positive(0, "cutting_speed")
    assert exc.value.field == "cutting_speed"
    assert exc.value.message == "Cutting speed must be greater than 0"


def test_require_range_bounds_are_inclusive():
    calc = _Probe()
    assert calc.require_range(10, "thickness", 10, 20) == 10
    assert calc.require_range(20, "thickness", 10, 20) == 20
    with pytest.raises(CalculationInputError) as exc:
        calc.require_range(20.5, "thickness", 10, 20)
    assert "between 10 and 20" in exc.value.message


def test_parse_choice_missing_uses_default_unknown_rejects():
    """Missing -> default, unknown value -> error, case-insensitive match."""
    calc = _Probe()
    assert calc.parse_choice(None, ("a", "b"), "kind", default="a") == "a"
    assert calc.parse_choice("B", ("a", "b"), "kind") == "b"
    with pytest.raises(CalculationInputError) as exc:
        calc.parse_choice("z", ("a", "b"), "kind")
    assert exc.value.field == "kind"
    with pytest.raises(CalculationInputError):
        calc.parse_choice(None, ("a", "b"), "kind")


def test_with_defaults_treats_none_as_missing():
    calc = _Probe()
    merged = calc.with_defaults({"a": None, "c": 3})
    assert merged == {"a": 1, "b": "x", "c": 3}


def test_calculation_input_error_is_value_error():
    """Callers that catch ValueError also catch validation failures."""
    assert issubclass(CalculationInputError, ValueError)


# ============================================================
# Math helpers
# ============================================================

def test_pct_zero_denominator_is_zero():
    calc = _Probe()
    assert calc.pct(5, 0) == 0.0
    assert calc.pct(1, 4) == 25.0


def test_clamp():
    calc = _Probe()
    assert calc.clamp(15, 0, 10) == 10
    assert calc.clamp(-1, 0, 10) == 0
    assert calc.clamp(5, 0, 10) == 5


def test_round_to():
    calc = _Probe()
    assert calc.round_to(1.23456) == 1.23
    assert calc.round_to(1.23456, 3) == 1.235


# ============================================================
# Registry
# ============================================================

def test_registry_has_all_eight_calculators():
    ids = list_calculators()
    for calculator_id in ["batch_processing", "cut_path", "gas_consumption", "warping_risk",
                          "market_sizing", "lead_qualification", "sheet_optimization",
                          "precision_instrument"]:
        assert calculator_id in ids
        assert has_calculator(calculator_id)
    assert len(ids) == 8


def test_get_calculator_returns_instance():
    calc = get_calculator("sheet_optimization")
    assert isinstance(calc, SheetOptimizationCalculator)
    assert calc.calculator_id == "sheet_optimization"


def test_get_calculator_unknown_raises_value_error():
    with pytest.raises(ValueError, match="No calculator registered"):
        get_calculator("flux_capacitor")
    assert not has_calculator("flux_capacitor")


def test_registry_ids_match_calculator_ids():
    """Every registered class reports the id it is registered under."""
    for calculator_id, cls in CALCULATOR_REGISTRY.items():
        assert cls.calculator_id == calculator_id


def test_catalog_has_metadata_for_each_calculator():
    catalog = calculator_catalog()
    assert len(catalog) == len(CALCULATOR_REGISTRY)
    for entry in catalog:
        assert set(entry) == {"id", "name", "description", "category", "version"}
        assert entry["name"]


# ============================================================
# Output contract
# ============================================================

@pytest.mark.parametrize("calculator_id", list(CALCULATOR_REGISTRY))
def test_defaults_calculate_and_serialize(calculator_id):
    """Each calculator runs on its own DEFAULT_INPUTS and returns JSON-safe output."""
    calc = get_calculator(calculator_id)
    results = calc.calculate(dict(calc.DEFAULT_INPUTS))
    assert isinstance(results, dict) and results
    json.dumps(results)


@pytest.mark.parametrize("calculator_id", list(CALCULATOR_REGISTRY))
def test_calculate_is_deterministic(calculator_id):
    """Same inputs, same outputs."""
    calc = get_calculator(calculator_id)
    assert calc.calculate(dict(calc.DEFAULT_INPUTS)) == calc.calculate(dict(calc.DEFAULT_INPUTS))
