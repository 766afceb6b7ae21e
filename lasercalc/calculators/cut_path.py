"""
Cut path calculator.

Orders cut features by a weighted priority score and times each step
(rapid travel + pierce + cut). This is a sort plus linear formulas, not a
path search. Thermal load per step is a heuristic on a 1-10 scale.
"""

import math

from .base import BaseCalculator

FEATURE_TYPES = ("external", "internal", "hole", "slot", "notch")
PRIORITIES = ("critical", "high", "medium", "low")
COMPLEXITIES = ("simple", "moderate", "complex")

PRIORITY_WEIGHTS = {"critical": 10, "high": 8, "medium": 5, "low": 2}
COMPLEXITY_WEIGHTS = {"complex": 1.3, "moderate": 1.1, "simple": 1.0}
THERMAL_TYPE_WEIGHTS = {"external": 1.0, "internal": 1.1, "hole": 0.8, "slot": 1.2, "notch": 0.9}

# thermal_conductivity W/m·K, thermal_expansion 1/K
MATERIAL_PRESETS = {
    "mild_steel": {"thermal_conductivity": 50, "thermal_expansion": 12e-6},
    "stainless_steel": {"thermal_conductivity": 16, "thermal_expansion": 17e-6},
    "aluminum": {"thermal_conductivity": 205, "thermal_expansion": 23e-6},
    "copper": {"thermal_conductivity": 401, "thermal_expansion": 17e-6},
    "brass": {"thermal_conductivity": 120, "thermal_expansion": 19e-6},
    "titanium": {"thermal_conductivity": 22, "thermal_expansion": 8.6e-6},
}

# Rapid moves are estimated as a quarter of the sheet diagonal
TRAVEL_DIAGONAL_FRACTION = 4
AVERAGE_TRAVEL_MM = 150

# (name, time multiplier, quality score, thermal risk, description, tradeoffs)
ALTERNATIVE_STRATEGIES = [
    ("Speed Optimized", 0.8, 7, "high",
     "Shortest sequence with minimal cooling pauses",
     ["Faster cycle time", "Higher thermal distortion risk", "Reduced edge quality"]),
    ("Quality Optimized", 1.3, 9, "low",
     "Precision features first with cooling between thermally sensitive cuts",
     ["Best dimensional accuracy", "Longer cycle time", "Lowest scrap rate"]),
    ("Thermal Balanced", 1.1, 8, "low",
     "Alternates cuts across the sheet to spread heat input",
     ["Low distortion", "More rapid travel", "Moderate cycle time"]),
    ("Balanced", 1.0, 8, "medium",
     "Priority-ordered sequence as calculated",
     ["Good quality", "Reasonable cycle time", "Moderate thermal load"]),
]

RECOMMENDATIONS = [
    "Cut internal features before external contours to keep the part anchored in the sheet",
    "Schedule thermally sensitive features early while the sheet is cool",
    "Use micro-joints on small parts to prevent tip-ups",
    "Verify lead-in positions stay out of precision edges",
]

RISK_MITIGATION = [
    "Insert cooling pauses when continuous cutting exceeds the limit",
    "Distribute cuts across the sheet rather than clustering them",
    "Reduce power on thermally sensitive features",
    "Inspect the first part for dimensional drift before running the batch",
]


class CutPathCalculator(BaseCalculator):
    calculator_id = "cut_path"
    name = "Cut Path Optimizer"
    description = "Cutting sequence, cycle time, thermal load and quality prediction for a sheet of features."
    category = "process"

    DEFAULT_INPUTS = {
        "sheet_dimensions": {"length": 3000, "width": 1500},
        "cut_features": [
            {"id": "F1", "part_id": "P1", "type": "hole", "length": 94.2, "priority": "high",
             "complexity": "simple", "thermal_sensitive": False, "requires_precision": True,
             "start_point": {"x": 100, "y": 100}},
            {"id": "F2", "part_id": "P1", "type": "external", "length": 800, "priority": "medium",
             "complexity": "moderate", "thermal_sensitive": False, "requires_precision": False,
             "start_point": {"x": 50, "y": 50}},
        ],
        "cutting_parameters": {"cutting_speed": 2500, "rapid_speed": 15000,
                               "pierce_time": 0.8, "kerf_width": 0.15},
        "material_properties": {"material_type": "mild_steel", "thickness": 3,
                                "thermal_conductivity": 50, "thermal_expansion": 12e-6},
        "optimization_goals": {"maximize_quality": 25},
        "quality_requirements": {"dimensional_tolerance": 0.1},
        "constraints": {"max_continuous_cutting_time": 15},
    }

    def calculate(self, fields: dict) -> dict:
        fields = fields or {}
        sheet = self.require_object(fields.get("sheet_dimensions"), "sheet_dimensions")
        sheet_length = self.require_positive(sheet.get("length"), "sheet_dimensions.length", "Sheet length")
        sheet_width = self.require_positive(sheet.get("width"), "sheet_dimensions.width", "Sheet width")
        raw_features = self.require_items(fields.get("cut_features"), "cut_features",
                                          "At least one cut feature must be defined")

        params = {**self.DEFAULT_INPUTS["cutting_parameters"],
                  **self.require_object(fields.get("cutting_parameters"), "cutting_parameters")}
        cutting_speed = self.require_positive(params.get("cutting_speed"), "cutting_parameters.cutting_speed",
                                              "Cutting speed")
        rapid_speed = self.require_positive(params.get("rapid_speed"), "cutting_parameters.rapid_speed",
                                            "Rapid speed")
        pierce_time = self.require_non_negative(params.get("pierce_time"), "cutting_parameters.pierce_time",
                                                "Pierce time")
        kerf = self.require_non_negative(params.get("kerf_width"), "cutting_parameters.kerf_width", "Kerf width")

        material = self._material(self.require_object(fields.get("material_properties"), "material_properties"))
        goals = self.require_object(fields.get("optimization_goals"), "optimization_goals")
        quality_weight = self.clamp(self.parse_number(goals.get("maximize_quality"), 25), 0, 100)
        quality = self.require_object(fields.get("quality_requirements"), "quality_requirements")
        tolerance = self.parse_number(quality.get("dimensional_tolerance"), 0.1)
        max_continuous = self.require_positive(
            self.require_object(fields.get("constraints"), "constraints").get("max_continuous_cutting_time", 15),
            "constraints.max_continuous_cutting_time", "Maximum continuous cutting time")

        features = [self._feature(f, i) for i, f in enumerate(raw_features)]
        for f in features:
            f["priority_score"] = self._priority_score(f, quality_weight)
        ordered = sorted(features, key=lambda f: f["priority_score"], reverse=True)

        # 1. Sequence
        diagonal = math.sqrt(sheet_length ** 2 + sheet_width ** 2)
        travel_time = diagonal / TRAVEL_DIAGONAL_FRACTION / rapid_speed
        pierce_min = pierce_time / 60
        steps = []
        clock = 0.0
        for idx, f in enumerate(ordered):
            cut_time = f["length"] / cutting_speed
            load = self._thermal_load(f, idx, material)
            steps.append({
                "sequence_number": idx + 1,
                "feature_id": f["id"],
                "part_id": f["part_id"],
                "feature_type": f["type"],
                "priority_score": self.round_to(f["priority_score"], 3),
                "start_time": self.round_to(clock, 4),
                "travel_time": self.round_to(travel_time, 4),
                "pierce_time": self.round_to(pierce_min, 4),
                "cutting_time": self.round_to(cut_time, 4),
                "thermal_load": self.round_to(load),
                "quality_risk": _quality_risk(f, load),
            })
            clock += travel_time + pierce_min + cut_time

        total_cut = sum(f["length"] / cutting_speed for f in ordered)
        total_travel = travel_time * len(ordered)
        total_pierce = pierce_min * len(ordered)
        total_time = total_cut + total_travel + total_pierce
        loads = [s["thermal_load"] for s in steps]
        avg_load = sum(loads) / len(loads)
        high_risk = sum(1 for s in steps if s["quality_risk"] == "high")

        summary = {
            "total_features": len(ordered),
            "total_cutting_length": self.round_to(sum(f["length"] for f in ordered)),
            "total_time": self.round_to(total_time, 3),
            "cutting_time": self.round_to(total_cut, 3),
            "travel_time": self.round_to(total_travel, 3),
            "pierce_time": self.round_to(total_pierce, 3),
            "travel_distance": len(ordered) * AVERAGE_TRAVEL_MM,
            "pierce_count": len(ordered),
            "cooling_breaks": math.floor(total_time / max_continuous),
        }

        return {
            "optimized_sequence": steps,
            "path_summary": summary,
            "thermal_analysis": self._thermal_analysis(ordered, steps, loads, avg_load),
            "quality_prediction": self._quality_prediction(steps, avg_load, high_risk, tolerance, material),
            "efficiency_metrics": self._efficiency(ordered, total_cut, total_time, summary["travel_distance"],
                                                   diagonal, kerf, sheet_length * sheet_width),
            "alternative_strategies": [
                {
                    "name": name,
                    "total_time": self.round_to(total_time * mult, 3),
                    "quality_score": quality,
                    "thermal_risk": risk,
                    "description": desc,
                    "tradeoffs": list(tradeoffs),
                }
                for name, mult, quality, risk, desc, tradeoffs in ALTERNATIVE_STRATEGIES
            ],
            "recommendations": list(RECOMMENDATIONS),
            "risk_mitigation": list(RISK_MITIGATION),
        }

    def _material(self, props: dict) -> dict:
        material_type = str(props.get("material_type") or "mild_steel").lower()
        preset = MATERIAL_PRESETS.get(material_type, MATERIAL_PRESETS["mild_steel"])
        return {
            "material_type": material_type,
            "thickness": self.require_positive(props.get("thickness", 3), "material_properties.thickness",
                                               "Thickness"),
            "thermal_conductivity": self.parse_number(props.get("thermal_conductivity"),
                                                      preset["thermal_conductivity"]),
            "thermal_expansion": self.parse_number(props.get("thermal_expansion"), preset["thermal_expansion"]),
        }

    def _feature(self, raw: dict, index: int) -> dict:
        field = "cut_features[%d]" % index
        raw = self.require_object(raw, field)
        return {
            "id": str(raw.get("id") or "F%d" % (index + 1)),
            "part_id": str(raw.get("part_id") or "P1"),
            "type": self.parse_choice(raw.get("type"), FEATURE_TYPES, field + ".type", "external"),
            "length": self.require_positive(raw.get("length"), field + ".length", "Feature length"),
            "priority": self.parse_choice(raw.get("priority"), PRIORITIES, field + ".priority", "medium"),
            "complexity": self.parse_choice(raw.get("complexity"), COMPLEXITIES, field + ".complexity", "simple"),
            "thermal_sensitive": self.parse_bool(raw.get("thermal_sensitive")),
            "requires_precision": self.parse_bool(raw.get("requires_precision")),
        }

    def _priority_score(self, feature: dict, quality_weight: float) -> float:
        score = PRIORITY_WEIGHTS[feature["priority"]] * COMPLEXITY_WEIGHTS[feature["complexity"]]
        if feature["thermal_sensitive"]:
            score *= 1.2
        if feature["requires_precision"]:
            score *= 1.1
        return score * (quality_weight / 100 + 0.5)

    def _thermal_load(self, feature: dict, index: int, material: dict) -> float:
        load = (THERMAL_TYPE_WEIGHTS[feature["type"]]
                * (feature["length"] / 100)
                * (material["thickness"] / 3)
                + index * 0.1)
        load *= 1 - material["thermal_conductivity"] / 500
        return self.clamp(load, 1, 10)

    def _thermal_analysis(self, ordered, steps, loads, avg_load) -> dict:
        peak = max(loads)
        if peak > 7:
            distortion = "high"
        elif peak > 5:
            distortion = "medium"
        else:
            distortion = "low"

        hot_spots = []
        for f, step in zip(ordered, steps):
            if f["thermal_sensitive"]:
                hot_spots.append({
                    "feature_id": f["id"],
                    "sequence_number": step["sequence_number"],
                    "risk_level": self.round_to(self.clamp(step["thermal_load"] + 3, 7, 10), 1),
                })

        return {
            "peak_thermal_load": self.round_to(peak),
            "average_thermal_load": self.round_to(avg_load),
            "distortion_risk": distortion,
            "hot_spots": hot_spots,
            "cooling_strategy": [
                "Pause between thermally sensitive features",
                "Alternate cutting zones across the sheet",
                "Use assist gas cooling on long contours",
            ],
        }

    def _quality_prediction(self, steps, avg_load, high_risk, tolerance, material) -> dict:
        score = self.clamp(8 - avg_load * 0.3 - high_risk * 0.5, 1, 10)
        risk_areas = [
            "%s (%s)" % (s["feature_id"], s["feature_type"])
            for s in steps if s["quality_risk"] == "high"
        ]
        return {
            "overall_quality_score": self.round_to(score, 1),
            "dimensional_accuracy": self.round_to(
                tolerance + material["thermal_expansion"] * avg_load * 100, 4),
            "surface_roughness": self.round_to(max(1.0, 5 - avg_load * 0.3)),
            "edge_quality": self.round_to(max(1.0, 5 - high_risk * 0.2)),
            "high_risk_features": high_risk,
            "risk_areas": risk_areas,
        }

    def _efficiency(self, ordered, total_cut, total_time, travel_distance, diagonal, kerf, sheet_area) -> dict:
        cutting_eff = self.pct(total_cut, total_time)
        path_eff = min(100.0, self.pct(diagonal, travel_distance))
        total_length = sum(f["length"] for f in ordered)
        material_util = min(100.0, self.pct(total_length * kerf, sheet_area) * 10)
        unique_parts = len({f["part_id"] for f in ordered})
        productivity = unique_parts / total_time * 60 if total_time else 0.0
        return {
            "cutting_efficiency": self.round_to(self.clamp(cutting_eff, 0, 100)),
            "path_efficiency": self.round_to(self.clamp(path_eff, 0, 100)),
            "material_utilization": self.round_to(self.clamp(material_util, 0, 100)),
            "energy_efficiency": self.round_to(self.clamp(cutting_eff, 0, 100)),
            "productivity": self.round_to(productivity),
        }


def _quality_risk(feature: dict, load: float) -> str:
    if (feature["requires_precision"] and load > 7) or (feature["thermal_sensitive"] and load > 6) or load > 8:
        return "high"
    if load > 5:
        return "medium"
    return "low"
