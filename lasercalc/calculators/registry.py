"""
Calculator registry: maps calculator ids to calculator classes.
"""

from .base import BaseCalculator
from .batch_processing import BatchProcessingCalculator
from .cut_path import CutPathCalculator
from .gas_consumption import GasConsumptionCalculator
from .lead_qualification import LeadQualificationCalculator
from .market_sizing import MarketSizingCalculator
from .precision_instrument import PrecisionInstrumentCalculator
from .sheet_optimization import SheetOptimizationCalculator
from .warping_risk import WarpingRiskCalculator

CALCULATOR_REGISTRY: dict[str, type] = {
    "batch_processing": BatchProcessingCalculator,
    "cut_path": CutPathCalculator,
    "gas_consumption": GasConsumptionCalculator,
    "warping_risk": WarpingRiskCalculator,
    "market_sizing": MarketSizingCalculator,
    "lead_qualification": LeadQualificationCalculator,
    "sheet_optimization": SheetOptimizationCalculator,
    "precision_instrument": PrecisionInstrumentCalculator,
}


def get_calculator(calculator_id: str) -> BaseCalculator:
    """Returns an instance of the calculator for an id, or raises ValueError."""
    if calculator_id not in CALCULATOR_REGISTRY:
        raise ValueError(
            f"No calculator registered for id: {calculator_id}. "
            f"Available: {list(CALCULATOR_REGISTRY.keys())}"
        )
    return CALCULATOR_REGISTRY[calculator_id]()


def has_calculator(calculator_id: str) -> bool:
    """Check if a calculator exists for an id."""
    return calculator_id in CALCULATOR_REGISTRY


def list_calculators() -> list[str]:
    """List all registered calculator ids."""
    return list(CALCULATOR_REGISTRY.keys())


def calculator_catalog() -> list[dict]:
    """Metadata for every registered calculator, in registry order."""
    return [cls().metadata() for cls in CALCULATOR_REGISTRY.values()]
