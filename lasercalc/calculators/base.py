"""
Abstract base class for all laser cutting calculators.

Input: plain dict of user inputs (JSON body, preset parameters, or share link)
Output: nested results dict, always JSON-serializable
"""

import logging
import math
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class CalculationInputError(ValueError):
    """Raised when an input fails validation. Nothing is computed."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.message = message
        self.field = field


class BaseCalculator(ABC):
    """All calculators inherit from this."""

    calculator_id = ""
    name = ""
    description = ""
    category = "general"
    version = "1.0.0"

    # Example inputs. Also fill in optional fields the caller left out.
    DEFAULT_INPUTS: dict = {}

    @abstractmethod
    def calculate(self, fields: dict) -> dict:
        """
        Validate the fields, then compute.
        Raises CalculationInputError before any computation on bad input.
        """
        pass

    def metadata(self) -> dict:
        return {
            "id": self.calculator_id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "version": self.version,
        }

    def with_defaults(self, fields: dict) -> dict:
        """Merge supplied fields over DEFAULT_INPUTS. None counts as missing."""
        merged = dict(self.DEFAULT_INPUTS)
        for key, value in (fields or {}).items():
            if value is not None:
                merged[key] = value
        return merged

    # --- Parsing helpers ---

    def parse_number(self, value, default: float = 0.0) -> float:
        """Parse a numeric value from user input."""
        if value is None or value == "":
            return default
        try:
            return float(str(value).strip())
        except (ValueError, TypeError):
            return default

    def parse_int(self, value, default: int = 0) -> int:
        """Parse an integer from user input."""
        if value is None or value == "":
            return default
        try:
            return int(float(str(value).strip()))
        except (ValueError, TypeError):
            return default

    def parse_bool(self, value, default: bool = False) -> bool:
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in ("true", "yes", "1", "on", "y")

    def parse_choice(self, value, choices, field: str, default=None) -> str:
        """Missing -> default. Present but not one of choices -> CalculationInputError."""
        if value is None or value == "":
            if default is None:
                self.reject(f"{_label(field)} is required", field)
            return default
        key = str(value).strip().lower()
        if key not in choices:
            self.reject(
                f"{_label(field)} must be one of: {', '.join(choices)} (got '{value}')",
                field,
            )
        return key

    # --- Validation helpers ---

    def reject(self, message: str, field: str = None):
        logger.info(f"{self.calculator_id}: rejected input {field}: {message}")
        raise CalculationInputError(message, field)

    def require_positive(self, value, field: str, label: str = None) -> float:
        number = self.parse_number(value, default=float("nan"))
        if not math.isfinite(number) or number <= 0:
            self.reject(f"{label or _label(field)} must be greater than 0", field)
        return number

    def require_non_negative(self, value, field: str, label: str = None) -> float:
        number = self.parse_number(value, default=float("nan"))
        if not math.isfinite(number) or number < 0:
            self.reject(f"{label or _label(field)} cannot be negative", field)
        return number

    def require_range(self, value, field: str, lo: float, hi: float, label: str = None) -> float:
        number = self.parse_number(value, default=float("nan"))
        if not math.isfinite(number) or number < lo or number > hi:
            self.reject(f"{label or _label(field)} must be between {lo:g} and {hi:g}", field)
        return number

    def require_items(self, items, field: str, message: str) -> list:
        if not isinstance(items, list) or not items:
            self.reject(message, field)
        return items

    def optional_items(self, items, field: str) -> list:
        """Missing -> []. Present but not a list -> CalculationInputError."""
        if items is None:
            return []
        if not isinstance(items, list):
            self.reject(f"{field} must be a list", field)
        return items

    def require_object(self, value, field: str) -> dict:
        """Missing -> {}. Present but not a JSON object -> CalculationInputError."""
        if value is None:
            return {}
        if not isinstance(value, dict):
            self.reject(f"{field} must be an object", field)
        return value

    # --- Math helpers ---

    def round_to(self, value: float, places: int = 2) -> float:
        return round(float(value), places)

    def clamp(self, value: float, lo: float, hi: float) -> float:
        return max(lo, min(hi, value))

    def pct(self, numerator: float, denominator: float) -> float:
        """numerator / denominator * 100, or 0 when the denominator is 0."""
        if not denominator:
            return 0.0
        return numerator / denominator * 100.0


def _label(field: str) -> str:
    """'cutting_speed' -> 'Cutting speed'"""
    return field.replace("_", " ").capitalize() if field else "Value"
