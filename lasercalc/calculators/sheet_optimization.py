"""
Sheet size optimization calculator.

For each candidate sheet: grid-fit the part (plus kerf) inside the edge
margin in both orientations, keep the better one, and cost the sheets
needed by weight. Candidates are ranked by cost per part.
Dimensions in mm, density in g/cm³, cost per kg.
"""

import math

from .base import BaseCalculator

STANDARD_SHEETS = [
    {"name": "1250x2500", "width": 1250, "length": 2500},
    {"name": "1500x3000", "width": 1500, "length": 3000},
    {"name": "2000x4000", "width": 2000, "length": 4000},
    {"name": "2500x5000", "width": 2500, "length": 5000},
]
CUSTOM_SHEETS = [
    {"name": "1000x2000", "width": 1000, "length": 2000},
    {"name": "1200x2400", "width": 1200, "length": 2400},
    {"name": "1800x3600", "width": 1800, "length": 3600},
]
SHEET_SETS = ("standard", "custom", "all")

LOW_EFFICIENCY = 70
CLOSE_ALTERNATIVE_COST = 0.10


class SheetOptimizationCalculator(BaseCalculator):
    calculator_id = "sheet_optimization"
    name = "Sheet Size Optimizer"
    description = "Picks the sheet size with the lowest material cost per part for a production quantity."
    category = "material"

    DEFAULT_INPUTS = {
        "part_width": 200,
        "part_length": 300,
        "part_quantity": 100,
        "available_sheet_sizes": "standard",
        "material_cost_per_kg": 5,
        "material_density": 7.85,
        "thickness": 3,
        "kerf_width": 0.1,
        "edge_distance": 5,
    }

    def calculate(self, fields: dict) -> dict:
        fields = self.with_defaults(fields)
        job = {
            "part_width": self.require_range(self.require_positive(fields.get("part_width"), "part_width"),
                                             "part_width", 10, 2000),
            "part_length": self.require_range(self.require_positive(fields.get("part_length"), "part_length"),
                                              "part_length", 10, 3000),
            "part_quantity": int(self.require_range(fields.get("part_quantity"), "part_quantity", 1, 10000,
                                                    "Quantity")),
            "material_cost_per_kg": self.require_positive(fields.get("material_cost_per_kg"),
                                                          "material_cost_per_kg", "Material cost per kg"),
            "material_density": self.require_positive(fields.get("material_density"), "material_density"),
            "thickness": self.require_positive(fields.get("thickness"), "thickness"),
            "kerf_width": self.require_positive(fields.get("kerf_width"), "kerf_width"),
            "edge_distance": self.require_non_negative(fields.get("edge_distance"), "edge_distance"),
        }
        sheet_set = self.parse_choice(fields.get("available_sheet_sizes"), SHEET_SETS, "available_sheet_sizes")
        sheets = self._sheets(sheet_set, fields.get("custom_sheet_sizes"))

        analyses = [self._analyze(sheet, job) for sheet in sheets]
        feasible = [a for a in analyses if a["feasible"]]
        infeasible = [a["name"] for a in analyses if not a["feasible"]]
        if not feasible:
            self.reject("Part does not fit on any available sheet size", "part_width")

        feasible.sort(key=lambda a: a["cost_per_part"])
        for rank, analysis in enumerate(feasible, start=1):
            analysis["rank"] = rank

        optimal = dict(feasible[0])
        optimal["savings"] = self._savings(optimal, feasible)

        return {
            "optimal_sheet_size": optimal,
            "sheet_comparison": feasible,
            "infeasible_sheets": infeasible,
            "cost_analysis": self._cost_analysis(optimal),
            "recommendations": self._recommendations(feasible, optimal, job),
        }

    def _sheets(self, sheet_set: str, extra) -> list:
        if sheet_set == "standard":
            sheets = list(STANDARD_SHEETS)
        elif sheet_set == "custom":
            sheets = list(CUSTOM_SHEETS)
        else:
            sheets = STANDARD_SHEETS + CUSTOM_SHEETS

        for idx, raw in enumerate(self.optional_items(extra, "custom_sheet_sizes")):
            field = "custom_sheet_sizes[%d]" % idx
            raw = self.require_object(raw, field)
            width = self.require_positive(raw.get("width"), field + ".width", "Sheet width")
            length = self.require_positive(raw.get("length"), field + ".length", "Sheet length")
            sheets.append({"name": raw.get("name") or "%gx%g" % (width, length), "width": width, "length": length})
        return sheets

    def _analyze(self, sheet: dict, job: dict) -> dict:
        edge = job["edge_distance"]
        usable_w = sheet["width"] - 2 * edge
        usable_l = sheet["length"] - 2 * edge
        space_w = job["part_width"] + job["kerf_width"]
        space_l = job["part_length"] + job["kerf_width"]

        standard = _grid_fit(usable_w, space_w) * _grid_fit(usable_l, space_l)
        rotated = _grid_fit(usable_w, space_l) * _grid_fit(usable_l, space_w)
        per_sheet = max(standard, rotated)

        result = {
            "name": sheet["name"],
            "width": sheet["width"],
            "length": sheet["length"],
            "parts_per_sheet": per_sheet,
            "best_orientation": "standard" if standard >= rotated else "rotated",
            "feasible": per_sheet > 0,
        }
        if not per_sheet:
            return result

        qty = job["part_quantity"]
        sheets_needed = math.ceil(qty / per_sheet)
        total_parts = sheets_needed * per_sheet
        sheet_area = sheet["width"] * sheet["length"]
        efficiency = self.clamp(self.pct(per_sheet * job["part_width"] * job["part_length"], sheet_area), 0, 100)
        sheet_weight = sheet_area * job["thickness"] / 1e6 * job["material_density"]  # kg
        sheet_cost = sheet_weight * job["material_cost_per_kg"]
        total_cost = sheets_needed * sheet_cost

        result.update({
            "sheets_needed": sheets_needed,
            "total_parts": total_parts,
            "excess_parts": total_parts - qty,
            "material_efficiency": self.round_to(efficiency, 1),
            "waste_percentage": self.round_to(100 - efficiency, 1),
            "sheet_weight": self.round_to(sheet_weight),
            "sheet_cost": self.round_to(sheet_cost),
            "total_cost": self.round_to(total_cost),
            "cost_per_part": self.round_to(total_cost / qty, 4),
        })
        return result

    def _savings(self, optimal: dict, ranked: list) -> dict:
        if len(ranked) < 2:
            return {"amount": 0.0, "percentage": 0.0, "compared_to": None}
        worst = ranked[-1]
        amount = worst["total_cost"] - optimal["total_cost"]
        return {
            "amount": self.round_to(amount),
            "percentage": self.round_to(self.pct(amount, worst["total_cost"]), 1),
            "compared_to": worst["name"],
        }

    def _cost_analysis(self, optimal: dict) -> dict:
        material = optimal["total_cost"]
        waste = optimal["waste_percentage"] / 100 * material
        excess = (optimal["excess_parts"] / optimal["total_parts"] * material) if optimal["excess_parts"] else 0.0
        return {
            "material_cost": self.round_to(material),
            "waste_cost": self.round_to(waste),
            "useful_material_cost": self.round_to(material - waste),
            "cost_per_part": optimal["cost_per_part"],
            "material_efficiency": optimal["material_efficiency"],
            "sheets_required": optimal["sheets_needed"],
            "breakdown": {
                "raw_material": self.round_to(material),
                "waste": self.round_to(waste),
                "excess_parts": self.round_to(excess),
            },
        }

    def _recommendations(self, ranked: list, optimal: dict, job: dict) -> list:
        recs = []
        if optimal["material_efficiency"] < LOW_EFFICIENCY:
            recs.append({"type": "Efficiency", "impact": "High",
                         "suggestion": "Material efficiency is low. Consider adjusting part dimensions "
                                       "or using custom sheet sizes."})
        if len(ranked) > 1:
            second = ranked[1]
            diff = second["cost_per_part"] - optimal["cost_per_part"]
            if diff < CLOSE_ALTERNATIVE_COST:
                recs.append({"type": "Alternative", "impact": "Low",
                             "suggestion": "%s is only $%.2f more per part and might offer other advantages."
                                           % (second["name"], diff)})
        if optimal["excess_parts"] > optimal["parts_per_sheet"] * 0.3:
            recs.append({"type": "Quantity", "impact": "Medium",
                         "suggestion": "Consider increasing order to %d parts to utilize excess material."
                                       % optimal["total_parts"]})
        part_aspect = job["part_length"] / job["part_width"]
        sheet_aspect = optimal["length"] / optimal["width"]
        if abs(part_aspect - sheet_aspect) > 1:
            recs.append({"type": "Design", "impact": "Medium",
                         "suggestion": "Part proportions don't match sheet proportions well. "
                                       "Consider adjusting part design."})
        if optimal["best_orientation"] == "rotated":
            recs.append({"type": "Layout", "impact": "Low",
                         "suggestion": "Rotating parts 90 degrees provides better material utilization."})
        return recs


def _grid_fit(usable: float, space: float) -> int:
    if usable <= 0:
        return 0
    return math.floor(usable / space)
