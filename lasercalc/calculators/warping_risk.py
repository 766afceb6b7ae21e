"""
Warping risk calculator.

Scores thermal distortion risk 0-10 from four capped components:
thermal stress vs yield (0-3), geometry and support (0-3),
material tendency (0-2), and process heat input (0-2).
Stress in MPa, temperatures in °C, lengths in mm.
"""

import math

from .base import BaseCalculator

# expansion 1/K, conductivity W/m·K, specific_heat J/kg·K, density kg/m³,
# yield_strength MPa, elastic_modulus MPa, warping_tendency 0-1
MATERIAL_PROPERTIES = {
    "steel": {"thermal_expansion": 12e-6, "thermal_conductivity": 50, "specific_heat": 490,
              "density": 7850, "yield_strength": 250, "elastic_modulus": 200000, "warping_tendency": 0.7},
    "stainless_steel": {"thermal_expansion": 17e-6, "thermal_conductivity": 16, "specific_heat": 500,
                        "density": 8000, "yield_strength": 205, "elastic_modulus": 200000,
                        "warping_tendency": 0.8},
    "aluminum": {"thermal_expansion": 23e-6, "thermal_conductivity": 237, "specific_heat": 896,
                 "density": 2700, "yield_strength": 276, "elastic_modulus": 70000, "warping_tendency": 0.9},
    "copper": {"thermal_expansion": 17e-6, "thermal_conductivity": 401, "specific_heat": 385,
               "density": 8960, "yield_strength": 70, "elastic_modulus": 110000, "warping_tendency": 0.6},
    "titanium": {"thermal_expansion": 8.6e-6, "thermal_conductivity": 22, "specific_heat": 520,
                 "density": 4500, "yield_strength": 275, "elastic_modulus": 114000, "warping_tendency": 0.5},
    "brass": {"thermal_expansion": 19e-6, "thermal_conductivity": 120, "specific_heat": 380,
              "density": 8500, "yield_strength": 310, "elastic_modulus": 100000, "warping_tendency": 0.7},
}

SUPPORT_FACTORS = {"none": 0.0, "minimal": 0.3, "moderate": 0.7, "extensive": 1.0}
COOLING_FACTORS = {"none": 0.1, "natural": 0.3, "forced": 0.6, "controlled": 1.0}

# Share of peak thermal stress left in the part after cooling
RESIDUAL_STRESS_FACTOR = 0.7


class WarpingRiskCalculator(BaseCalculator):
    calculator_id = "warping_risk"
    name = "Warping Risk Analyzer"
    description = "Thermal and mechanical distortion risk for a laser-cut part, with prevention strategies."
    category = "quality"

    DEFAULT_INPUTS = {
        "material_type": "steel",
        "thickness": 3,
        "length": 500,
        "width": 200,
        "laser_power": 2000,
        "cutting_speed": 2500,
        "number_of_passes": 1,
        "support_type": "moderate",
        "cooling_method": "natural",
        "ambient_temperature": 20,
    }

    def calculate(self, fields: dict) -> dict:
        fields = fields or {}
        for required in ("thickness", "length", "width", "laser_power", "cutting_speed"):
            if fields.get(required) in (None, ""):
                self.reject("%s is required" % required.replace("_", " ").capitalize(), required)
        fields = self.with_defaults(fields)

        job = {
            "material_type": self.parse_choice(fields.get("material_type"), tuple(MATERIAL_PROPERTIES),
                                               "material_type"),
            "thickness": self.require_positive(fields.get("thickness"), "thickness"),
            "length": self.require_positive(fields.get("length"), "length"),
            "width": self.require_positive(fields.get("width"), "width"),
            "laser_power": self.require_positive(fields.get("laser_power"), "laser_power", "Laser power"),
            "cutting_speed": self.require_positive(fields.get("cutting_speed"), "cutting_speed", "Cutting speed"),
        }
        job["thickness"] = self.require_range(job["thickness"], "thickness", 0.5, 50)
        job["length"] = self.require_range(job["length"], "length", 10, 3000)
        job["width"] = self.require_range(job["width"], "width", 10, 3000)
        job["laser_power"] = self.require_range(job["laser_power"], "laser_power", 500, 20000, "Laser power")
        job["cutting_speed"] = self.require_range(job["cutting_speed"], "cutting_speed", 100, 15000,
                                                  "Cutting speed")
        job["number_of_passes"] = int(self.require_range(fields.get("number_of_passes"), "number_of_passes", 1, 10))
        job["support_type"] = self.parse_choice(fields.get("support_type"), tuple(SUPPORT_FACTORS),
                                                "support_type")
        job["cooling_method"] = self.parse_choice(fields.get("cooling_method"), tuple(COOLING_FACTORS),
                                                  "cooling_method")
        job["ambient_temperature"] = self.require_range(fields.get("ambient_temperature"),
                                                        "ambient_temperature", -10, 50)

        material = MATERIAL_PROPERTIES[job["material_type"]]
        thermal = self._thermal(job, material)
        mechanical = self._mechanical(job, material, thermal)
        geometry = self._geometry(job)
        score = self._risk_score(job, material, thermal, geometry)
        level = risk_level(score)

        return {
            "overall_risk_score": self.round_to(score, 1),
            "risk_level": level,
            "thermal_analysis": {
                "heat_input": self.round_to(thermal["heat_input"], 2),
                "power_density": self.round_to(thermal["power_density"], 4),
                "peak_temperature": round(thermal["peak_temperature"]),
                "temperature_gradient": self.round_to(thermal["temperature_gradient"]),
                "thermal_stress": round(thermal["thermal_stress"]),
                "cooling_rate": self.round_to(thermal["cooling_rate"], 1),
                "heat_affected_area": round(thermal["heat_affected_area"]),
            },
            "mechanical_analysis": {
                "residual_stress": round(mechanical["residual_stress"]),
                "elastic_deformation": self.round_to(mechanical["elastic_deformation"], 3),
                "plastic_deformation": self.round_to(mechanical["plastic_deformation"], 3),
                "total_deformation": self.round_to(mechanical["total_deformation"], 3),
                "stress_concentration": self.round_to(mechanical["stress_concentration"]),
            },
            "geometric_factors": {
                "aspect_ratio": self.round_to(geometry["aspect_ratio"]),
                "thickness_ratio": self.round_to(geometry["thickness_ratio"], 4),
                "support_adequacy": geometry["support_adequacy"],
                "shape_complexity": self.round_to(geometry["shape_complexity"]),
            },
            "prevention_strategies": self._prevention(job, score),
            "predictions": self._predictions(job, mechanical, geometry),
            "recommendations": self._recommendations(job, score, level, geometry),
            "warnings": self._warnings(job, score, level, geometry),
            "input_warnings": self._input_warnings(job, geometry),
        }

    def _thermal(self, job: dict, material: dict) -> dict:
        heat_input = job["laser_power"] * 60 / job["cutting_speed"]  # J/mm
        power_density = job["laser_power"] / (job["length"] * job["width"])  # W/mm²
        energy_density = heat_input / job["thickness"]
        rise = energy_density / (material["density"] * material["specific_heat"] / 1e6)
        return {
            "heat_input": heat_input,
            "power_density": power_density,
            "temperature_rise": rise,
            "peak_temperature": job["ambient_temperature"] + rise,
            "temperature_gradient": rise / (job["thickness"] * 2),
            "thermal_stress": material["thermal_expansion"] * rise * material["elastic_modulus"],
            "cooling_rate": COOLING_FACTORS[job["cooling_method"]] * material["thermal_conductivity"] / 10,
            "heat_affected_area": math.pi * (job["thickness"] * 3) ** 2,
        }

    def _mechanical(self, job: dict, material: dict, thermal: dict) -> dict:
        residual = thermal["thermal_stress"] * RESIDUAL_STRESS_FACTOR
        modulus = material["elastic_modulus"]
        elastic = residual / modulus * job["length"]
        plastic = max(0.0, (residual - material["yield_strength"]) / modulus * job["length"])
        aspect = _aspect_ratio(job)
        return {
            "residual_stress": residual,
            "elastic_deformation": elastic,
            "plastic_deformation": plastic,
            "total_deformation": elastic + plastic,
            "stress_concentration": 1 + (aspect - 1) * 0.1,
        }

    def _geometry(self, job: dict) -> dict:
        aspect = _aspect_ratio(job)
        return {
            "aspect_ratio": aspect,
            "thickness_ratio": job["thickness"] / max(job["length"], job["width"]),
            "support_adequacy": SUPPORT_FACTORS[job["support_type"]],
            "shape_complexity": min(1.0, aspect / 10),
        }

    def _risk_score(self, job, material, thermal, geometry) -> float:
        thermal_risk = min(3.0, thermal["thermal_stress"] / material["yield_strength"] * 3)
        geometric_risk = min(3.0, geometry["aspect_ratio"] / 10 * 2 + (1 - geometry["support_adequacy"]))
        material_risk = material["warping_tendency"] * 2
        process_risk = min(2.0, thermal["power_density"] * 2 + (job["number_of_passes"] - 1) * 0.5)
        return self.clamp(thermal_risk + geometric_risk + material_risk + process_risk, 0, 10)

    def _prevention(self, job: dict, score: float) -> dict:
        support = []
        if job["support_type"] == "none" and score > 4:
            support.append("Add workpiece support to reduce warping")
        if score > 6:
            support.append("Use extensive support with clamping")
            support.append("Consider fixture design for thermal expansion")

        cooling = []
        if job["cooling_method"] == "none" and score > 3:
            cooling.append("Implement forced air cooling")
        if score > 6:
            cooling.append("Use controlled cooling between passes")
            cooling.append("Consider water-cooled fixtures")

        sequence = []
        if score > 5:
            sequence.append("Cut from center outward to balance thermal stress")
            sequence.append("Use skip cutting pattern to distribute heat")
            sequence.append("Allow cooling time between sections")

        return {
            "parameter_adjustments": {
                "recommended_power": round(job["laser_power"] * (0.8 if score > 6 else 0.9)),
                "recommended_speed": round(job["cutting_speed"] * (1.2 if score > 6 else 1.1)),
                "recommended_passes": job["number_of_passes"] + (1 if score > 7 else 0),
            },
            "support_recommendations": support,
            "cooling_strategies": cooling,
            "sequence_optimization": sequence,
        }

    def _predictions(self, job: dict, mechanical: dict, geometry: dict) -> dict:
        aspect = geometry["aspect_ratio"]
        critical = []
        if aspect > 5:
            critical.append("Ends of long dimension")
        if job["support_type"] == "none":
            critical.append("Unsupported areas")
        if geometry["support_adequacy"] < 0.5:
            critical.append("Center of the part")
        return {
            "expected_flatness": self.round_to(mechanical["total_deformation"] * (1 + aspect / 10), 3),
            "dimensional_accuracy": self.round_to(mechanical["total_deformation"] * 0.5, 3),
            "warping_direction": ("Primarily along the longer dimension" if aspect > 2
                                  else "Uniform in all directions"),
            "critical_areas": critical,
        }

    def _recommendations(self, job, score, level, geometry) -> list:
        recs = []
        if level == "critical":
            recs.append("Critical warping risk - consider alternative cutting strategy")
        if score > 6:
            recs.append("Reduce laser power and increase cutting speed")
            recs.append("Implement extensive workpiece support")
            recs.append("Use controlled cooling between passes")
        if job["support_type"] == "none" and score > 3:
            recs.append("Add workpiece support to minimize warping")
        if job["cooling_method"] == "none" and score > 4:
            recs.append("Implement active cooling to reduce thermal stress")
        if geometry["aspect_ratio"] > 8:
            recs.append("Consider cutting in sections for very long parts")
        if job["number_of_passes"] > 3:
            recs.append("Allow cooling time between multiple passes")
        return recs

    def _warnings(self, job, score, level, geometry) -> list:
        warnings = []
        if level == "critical":
            warnings.append("Critical warping risk - parts may not meet dimensional tolerances")
        if level == "high":
            warnings.append("High warping risk - implement prevention strategies")
        if job["support_type"] == "none" and score > 5:
            warnings.append("Unsupported cutting with high risk - expect significant warping")
        if geometry["thickness_ratio"] < 0.005:
            warnings.append("Very thin material - extremely prone to warping")
        if job["material_type"] == "aluminum" and score > 4:
            warnings.append("Aluminum has high thermal expansion - warping likely")
        return warnings

    def _input_warnings(self, job: dict, geometry: dict) -> list:
        """Soft checks on the inputs themselves. These never block the calculation."""
        warnings = []
        if geometry["aspect_ratio"] > 10:
            warnings.append({"field": "length", "code": "HIGH_ASPECT_RATIO",
                             "message": "High aspect ratio (>10:1) significantly increases warping risk"})
        if geometry["thickness_ratio"] < 0.01:
            warnings.append({"field": "thickness", "code": "THIN_MATERIAL",
                             "message": "Very thin material relative to dimensions increases warping risk"})
        if job["laser_power"] / (job["length"] * job["width"]) > 1.0:
            warnings.append({"field": "laser_power", "code": "HIGH_POWER_DENSITY",
                             "message": "High power density may cause excessive thermal stress and warping"})
        if job["support_type"] == "none" and geometry["aspect_ratio"] > 5:
            warnings.append({"field": "support_type", "code": "INADEQUATE_SUPPORT",
                             "message": "Large parts without support are prone to warping. Consider adding support."})
        return warnings


def _aspect_ratio(job: dict) -> float:
    return max(job["length"], job["width"]) / min(job["length"], job["width"])


def risk_level(score: float) -> str:
    if score <= 3:
        return "low"
    if score <= 6:
        return "medium"
    if score <= 8:
        return "high"
    return "critical"
