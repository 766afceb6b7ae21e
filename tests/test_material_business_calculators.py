"""
Material and business calculator tests: sheet optimization, market sizing,
lead qualification, precision instrument specification.

Tests:
1-7.   Sheet optimization
8-12.  Market sizing
13-18. Lead qualification
19-23. Precision instrument
"""

import pytest

from lasercalc.calculators.base import CalculationInputError
from lasercalc.calculators.lead_qualification import LeadQualificationCalculator, MAX_POSSIBLE_SCORE
from lasercalc.calculators.market_sizing import MarketSizingCalculator
from lasercalc.calculators.precision_instrument import PrecisionInstrumentCalculator
from lasercalc.calculators.sheet_optimization import SheetOptimizationCalculator


def _best_lead():
    return {
        "company_size": "large", "industry": "manufacturing", "project_budget": "enterprise",
        "timeline": "immediate", "decision_maker": "direct", "current_supplier": "no_supplier",
        "pain_points": "quality", "volume_potential": "high",
    }


def _worst_lead():
    return {
        "company_size": "startup", "industry": "other", "project_budget": "low",
        "timeline": "future", "decision_maker": "unknown", "current_supplier": "in_house",
        "pain_points": "none", "volume_potential": "one_time",
    }


# ============================================================
# Sheet optimization
# ============================================================

def test_sheet_comparison_sorted_by_cost_per_part():
    result = SheetOptimizationCalculator().calculate({})
    comparison = result["sheet_comparison"]
    costs = [s["cost_per_part"] for s in comparison]
    assert costs == sorted(costs)
    assert [s["rank"] for s in comparison] == list(range(1, len(comparison) + 1))
    assert result["optimal_sheet_size"]["name"] == comparison[0]["name"]


def test_sheet_weight_and_cost():
    """1250x2500 x 3mm steel at 7.85 g/cm3 = 73.59 kg per sheet."""
    result = SheetOptimizationCalculator().calculate({})
    sheet = next(s for s in result["sheet_comparison"] if s["name"] == "1250x2500")
    assert sheet["sheet_weight"] == pytest.approx(73.59, abs=0.01)
    assert sheet["sheet_cost"] == pytest.approx(73.59 * 5, abs=0.1)
    assert sheet["parts_per_sheet"] == 48
    assert sheet["sheets_needed"] == 3
    assert sheet["excess_parts"] == 44


def test_sheet_oversized_part_skips_small_sheets():
    """Only the largest standard sheet fits a 2000x3000 part."""
    result = SheetOptimizationCalculator().calculate({"part_width": 2000, "part_length": 3000})
    assert [s["name"] for s in result["sheet_comparison"]] == ["2500x5000"]
    assert result["infeasible_sheets"] == ["1250x2500", "1500x3000", "2000x4000"]
    assert result["optimal_sheet_size"]["savings"]["compared_to"] is None


def test_sheet_part_fits_nowhere():
    with pytest.raises(CalculationInputError, match="does not fit"):
        SheetOptimizationCalculator().calculate({
            "part_width": 2000, "part_length": 3000, "available_sheet_sizes": "custom",
        })


def test_sheet_custom_sizes_are_considered():
    result = SheetOptimizationCalculator().calculate({
        "custom_sheet_sizes": [{"name": "jumbo", "width": 3000, "length": 6000}],
    })
    names = [s["name"] for s in result["sheet_comparison"]]
    assert "jumbo" in names
    assert len(names) == 5


def test_sheet_invalid_quantity():
    with pytest.raises(CalculationInputError) as exc:
        SheetOptimizationCalculator().calculate({"part_quantity": 0})
    assert exc.value.field == "part_quantity"


def test_sheet_custom_sizes_must_be_objects_in_a_list():
    with pytest.raises(CalculationInputError) as exc:
        SheetOptimizationCalculator().calculate({"custom_sheet_sizes": "abc"})
    assert exc.value.field == "custom_sheet_sizes"

    with pytest.raises(CalculationInputError) as exc:
        SheetOptimizationCalculator().calculate({"custom_sheet_sizes": ["3000x6000"]})
    assert exc.value.field == "custom_sheet_sizes[0]"


# ============================================================
# Market sizing
# ============================================================

def test_market_tam_sam_som_defaults():
    """2.5M people, moderate density, regional scope, $2,500 projects."""
    result = MarketSizingCalculator().calculate({})
    sizing = result["market_sizing"]
    assert sizing["tam"] == pytest.approx(16875000, rel=1e-6)
    assert sizing["sam"] == pytest.approx(4050000, rel=1e-6)
    assert sizing["som"] == pytest.approx(729000, rel=1e-6)
    assert sizing["tam"] >= sizing["sam"] >= sizing["som"]
    assert sizing["som_breakdown"]["achievable_share"] == 18


def test_market_share_capped_at_forty_percent():
    result = MarketSizingCalculator().calculate({"market_maturity": "emerging", "geographic_scope": "local"})
    # 25% base share * 1.5 local adjustment = 37.5%, under the cap
    assert result["market_sizing"]["som_breakdown"]["achievable_share"] == 38
    assert result["market_sizing"]["som_breakdown"]["achievable_share"] <= 40


def test_market_segments_sorted_and_growth_projected():
    result = MarketSizingCalculator().calculate({})
    sizes = [s["market_size"] for s in result["market_segments"]]
    assert sizes == sorted(sizes, reverse=True)
    growth = result["growth_projections"]
    assert growth["base_growth_rate"] == 10
    assert [p["year"] for p in growth["projections"]] == [1, 2, 3, 4, 5]
    assert growth["projections"][-1]["tam"] > result["market_sizing"]["tam"]


def test_market_entry_strategy_is_known():
    result = MarketSizingCalculator().calculate({})
    entry = result["market_entry"]
    assert entry["recommended_approach"]["strategy"] in (
        "Aggressive Entry", "Focused Entry", "Niche Entry", "Gradual Entry")
    assert entry["target_segments"][0]["segment"] == "Primary Target"
    assert len(entry["timeline"]) == 3


@pytest.mark.parametrize("field,value", [
    ("population_base", 1000),
    ("average_project_value", 60000),
    ("geographic_scope", "galactic"),
    ("competitor_count", 500),
])
def test_market_invalid_inputs_rejected(field, value):
    with pytest.raises(CalculationInputError) as exc:
        MarketSizingCalculator().calculate({field: value})
    assert exc.value.field == field


# ============================================================
# Lead qualification
# ============================================================

def test_lead_max_possible_score():
    assert MAX_POSSIBLE_SCORE == 170


def test_lead_default_scores_tier_b():
    result = LeadQualificationCalculator().calculate({})
    score = result["qualification_score"]
    assert score["total_score"] == 122
    assert score["percentage_score"] == 72
    assert result["lead_ranking"]["tier"] == "B"
    # 45 base + 10 for a quality pain point
    assert result["lead_ranking"]["conversion_probability"] == 55


def test_lead_best_case_tier_a_conversion_capped():
    result = LeadQualificationCalculator().calculate(_best_lead())
    assert result["qualification_score"]["total_score"] == 170
    assert result["qualification_score"]["percentage_score"] == 100
    assert result["lead_ranking"]["tier"] == "A"
    assert result["lead_ranking"]["conversion_probability"] == 90
    assert result["action_plan"][0]["action"] == "Immediate Contact"
    assert len(result["action_plan"]) <= 5


def test_lead_worst_case_tier_d_high_risk():
    result = LeadQualificationCalculator().calculate(_worst_lead())
    assert result["qualification_score"]["total_score"] == 43
    assert result["lead_ranking"]["tier"] == "D"
    risk = result["risk_assessment"]
    assert risk["overall_risk_level"] == "High"
    assert risk["risk_score"] == 10
    assert "Prioritize stakeholder mapping and access" in risk["mitigation"]


def test_lead_unknown_value_scores_neutral():
    """Half-filled CRM data is scored, not rejected."""
    result = LeadQualificationCalculator().calculate({"company_size": "galactic"})
    assert result["qualification_score"]["breakdown"]["company_size"] == 10


def test_lead_no_risks_is_very_low():
    lead = _best_lead()
    result = LeadQualificationCalculator().calculate(lead)
    assert result["risk_assessment"]["risks"] == []
    assert result["risk_assessment"]["overall_risk_level"] == "Very Low"


# ============================================================
# Precision instrument
# ============================================================

def test_precision_tolerances_for_class():
    result = PrecisionInstrumentCalculator().calculate({"precision_class": "nano_precision"})
    tolerances = result["precision_analysis"]["tolerance_specifications"]
    assert tolerances["linear"] == "±0.001mm"
    assert len(tolerances) == 8
    suitability = result["precision_analysis"]["material_suitability"]
    assert suitability["precision_suitability"] == "Consider ultra-stable materials"


def test_precision_invar_suits_ultra_classes():
    result = PrecisionInstrumentCalculator().calculate({
        "precision_class": "atomic_precision", "material_selection": "invar_36",
    })
    assert result["precision_analysis"]["material_suitability"]["precision_suitability"] == "Suitable"


def test_precision_calibration_interval():
    """12 months x 0.75 for high stability = 9; reference standards halve it."""
    calc = PrecisionInstrumentCalculator()
    assert calc.calculate({})["calibration_specs"]["calibration_interval_months"] == 9
    specs = calc.calculate({"instrument_type": "calibration_standard",
                            "stability_requirement": "ultra_stability"})["calibration_specs"]
    assert specs["calibration_interval_months"] == 6
    assert specs["reference_uncertainty"] == "±0.025 µm"


def test_precision_manufacturing_cost_defaults():
    """1200 base x 0.85 batch x 1.6 precision x 1.5 surface, 5 units + 960 setup."""
    cost = PrecisionInstrumentCalculator().calculate({})["manufacturing_cost"]
    assert cost["unit_cost"] == pytest.approx(2448.0, abs=0.01)
    assert cost["setup_cost"] == pytest.approx(960.0, abs=0.01)
    assert cost["total_cost"] == pytest.approx(13200.0, abs=0.01)
    assert cost["lead_time_weeks"] == 8
    assert cost["cost_drivers"] == ["Precision class", "Surface quality"]


@pytest.mark.parametrize("field,value", [
    ("component_thickness", 25),
    ("component_thickness", 0),
    ("material_selection", "unobtainium"),
    ("precision_class", "roughly"),
])
def test_precision_invalid_inputs_rejected(field, value):
    with pytest.raises(CalculationInputError) as exc:
        PrecisionInstrumentCalculator().calculate({field: value})
    assert exc.value.field == field
