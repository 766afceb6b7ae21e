"""
Batch processing calculator.

Splits a production run into batches, sums setup + processing time,
checks the material inventory, and suggests an economic batch size (EOQ).
All volumes are in litres (mm³ / 1e6), all times in minutes.
"""

import logging
import math

from .base import BaseCalculator

logger = logging.getLogger(__name__)

DEFAULT_SETUP_TIME_MIN = 30.0
DEFAULT_SETUP_COST = 50.0
DEFAULT_LABOR_RATE = 25.0
DEFAULT_MATERIAL_COST_PER_UNIT = 10.0
DEFAULT_PROCESSING_TIME_MIN = 5.0

# EOQ holding cost as a fraction of unit material cost
HOLDING_COST_RATE = 0.1

# Warn when the parts consume more than this share of inventory
INVENTORY_WARNING_RATIO = 0.8


class BatchProcessingCalculator(BaseCalculator):
    calculator_id = "batch_processing"
    name = "Batch Processing Optimizer"
    description = "Batch count, production time, cost per unit and economic batch size for a production run."
    category = "production"

    DEFAULT_INPUTS = {
        "part_specifications": [
            {"part_id": "P-001", "quantity": 100, "length": 200, "width": 100,
             "thickness": 3, "processing_time": 5},
        ],
        "material_inventory": [
            {"material": "mild_steel", "available_sheets": 10, "sheet_length": 3000,
             "sheet_width": 1500, "thickness": 3},
        ],
        "batch_size": 25,
        "total_quantity": 100,
        "shift_duration": 8,
        "shifts_per_day": 1,
        "setup_time_per_batch": DEFAULT_SETUP_TIME_MIN,
        "setup_cost_per_batch": DEFAULT_SETUP_COST,
        "labor_cost_per_hour": DEFAULT_LABOR_RATE,
        "material_cost_per_unit": DEFAULT_MATERIAL_COST_PER_UNIT,
    }

    def calculate(self, fields: dict) -> dict:
        parts = self.require_items(
            (fields or {}).get("part_specifications"), "part_specifications",
            "At least one part specification must be defined")
        inventory = self.require_items(
            (fields or {}).get("material_inventory"), "material_inventory",
            "At least one material inventory item must be defined")
        parts = [self._part(p, i) for i, p in enumerate(parts)]
        inventory = [self._sheet(s, i) for i, s in enumerate(inventory)]
        fields = self.with_defaults(fields)

        batch_size = self.require_positive(fields.get("batch_size"), "batch_size")
        total_quantity = self.require_positive(fields.get("total_quantity"), "total_quantity")
        shift_duration = self.require_positive(fields.get("shift_duration"), "shift_duration")
        shifts_per_day = self.require_positive(fields.get("shifts_per_day"), "shifts_per_day")
        setup_time = self.require_non_negative(fields.get("setup_time_per_batch"), "setup_time_per_batch")
        setup_cost = self.require_non_negative(fields.get("setup_cost_per_batch"), "setup_cost_per_batch")
        labor_rate = self.require_non_negative(fields.get("labor_cost_per_hour"), "labor_cost_per_hour")
        unit_cost = self.require_positive(fields.get("material_cost_per_unit"), "material_cost_per_unit")

        warnings = []

        # 1. Material check
        needed = sum(self._part_volume(p) for p in parts)
        available = sum(self._sheet_volume(s) for s in inventory)
        if needed > available * INVENTORY_WARNING_RATIO:
            msg = "Material requirement (%.2f L) exceeds 80%% of available inventory (%.2f L)" % (
                needed, available)
            logger.warning(msg)
            warnings.append(msg)

        # 2. Batches and time
        batches = math.ceil(total_quantity / batch_size)
        avg_processing = self._average_processing_time(parts)
        total_setup_time = batches * setup_time
        processing_time = total_quantity * avg_processing
        production_time = total_setup_time + processing_time

        utilization = min(needed / available, 1.0) * 100 if available > 0 else 0.0
        wasted = max(0.0, available - needed)
        setup_ratio = self.pct(total_setup_time, production_time)
        processing_efficiency = max(0.0, 100.0 - setup_ratio)

        daily_minutes = shift_duration * shifts_per_day * 60
        days = math.ceil(production_time / daily_minutes)
        minutes_per_batch = setup_time + batch_size * avg_processing
        batches_per_day = math.floor(daily_minutes / minutes_per_batch) if minutes_per_batch > 0 else 0

        # 3. Cost
        total_setup_cost = batches * setup_cost
        labor_cost = production_time / 60 * labor_rate
        material_cost = total_quantity * unit_cost
        total_cost = total_setup_cost + labor_cost + material_cost
        cost_per_unit = total_cost / total_quantity

        # 4. Economic batch size
        eoq = math.sqrt(2 * total_quantity * setup_cost / (unit_cost * HOLDING_COST_RATE))
        recommended = int(self.clamp(round(eoq), 1, total_quantity))
        opt_batches = math.ceil(total_quantity / recommended)
        opt_setup_time = opt_batches * setup_time
        opt_production = opt_setup_time + processing_time
        opt_efficiency = max(0.0, 100.0 - self.pct(opt_setup_time, opt_production))
        time_savings = max(0.0, production_time - opt_production)
        cost_savings = time_savings / 60 * labor_rate + (batches - opt_batches) * setup_cost

        return {
            "batch_analysis": {
                "total_batches": batches,
                "batch_size": batch_size,
                "parts_per_batch": min(batch_size, total_quantity),
                "material_required": self.round_to(needed, 3),
                "material_available": self.round_to(available, 3),
                "material_utilization": self.round_to(utilization),
                "wasted_material": self.round_to(wasted, 3),
            },
            "time_analysis": {
                "setup_time_total": self.round_to(total_setup_time),
                "processing_time_total": self.round_to(processing_time),
                "total_production_time": self.round_to(production_time),
                "average_processing_time": self.round_to(avg_processing),
                "production_days": days,
                "batches_per_day": batches_per_day,
                "daily_capacity_minutes": self.round_to(daily_minutes),
            },
            "cost_analysis": {
                "setup_cost_total": self.round_to(total_setup_cost),
                "labor_cost": self.round_to(labor_cost),
                "material_cost": self.round_to(material_cost),
                "total_cost": self.round_to(total_cost),
                "cost_per_unit": self.round_to(cost_per_unit),
            },
            "efficiency_metrics": {
                "setup_time_ratio": self.round_to(setup_ratio),
                "processing_efficiency": self.round_to(processing_efficiency),
                "material_utilization": self.round_to(utilization),
            },
            "optimization_results": {
                "economic_batch_size": self.round_to(eoq),
                "recommended_batch_size": recommended,
                "optimized_batches": opt_batches,
                "optimized_production_time": self.round_to(opt_production),
                "optimized_efficiency": self.round_to(opt_efficiency),
                "time_savings": self.round_to(time_savings),
                "cost_savings": self.round_to(cost_savings),
            },
            "recommendations": _recommendations(setup_ratio, utilization, processing_efficiency,
                                                recommended, batch_size),
            "warnings": warnings,
        }

    def _part(self, raw, index: int) -> dict:
        field = "part_specifications[%d]" % index
        raw = self.require_object(raw, field)
        part = {key: self.require_positive(raw.get(key), "%s.%s" % (field, key), "Part " + key)
                for key in ("quantity", "length", "width", "thickness")}
        processing_time = raw.get("processing_time")
        if processing_time is None or processing_time == "":
            processing_time = DEFAULT_PROCESSING_TIME_MIN
        part["processing_time"] = self.require_non_negative(
            processing_time, field + ".processing_time", "Part processing time")
        return part

    def _sheet(self, raw, index: int) -> dict:
        field = "material_inventory[%d]" % index
        raw = self.require_object(raw, field)
        sheet = {"available_sheets": self.require_non_negative(
            raw.get("available_sheets"), field + ".available_sheets", "Available sheets")}
        for key, label in (("sheet_length", "Sheet length"), ("sheet_width", "Sheet width"),
                           ("thickness", "Sheet thickness")):
            sheet[key] = self.require_positive(raw.get(key), "%s.%s" % (field, key), label)
        return sheet

    def _part_volume(self, part: dict) -> float:
        return part["quantity"] * part["length"] * part["width"] * part["thickness"] / 1e6

    def _sheet_volume(self, sheet: dict) -> float:
        return (sheet["available_sheets"] * sheet["sheet_length"]
                * sheet["sheet_width"] * sheet["thickness"]) / 1e6

    def _average_processing_time(self, parts: list) -> float:
        return sum(p["processing_time"] for p in parts) / len(parts)


def _recommendations(setup_ratio, utilization, efficiency, recommended, batch_size) -> list:
    recs = []
    if setup_ratio > 20:
        recs.append("Setup time exceeds 20% of production time - consider larger batches or quick-change fixturing")
    if utilization < 80:
        recs.append("Material utilization is below 80% - review nesting or reduce inventory on hand")
    if efficiency < 70:
        recs.append("Processing efficiency is below 70% - consolidate batches to cut setup overhead")
    if recommended != batch_size:
        recs.append("Economic batch size is %d parts - adjust batch size from %d to balance setup and holding cost" % (
            recommended, int(batch_size)))
    if not recs:
        recs.append("Batch plan is well balanced - no changes recommended")
    return recs
