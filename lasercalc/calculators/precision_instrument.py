"""
Precision instrument specification calculator.

Mostly lookup tables: tolerance, surface, stability and environment specs by
class, plus material characteristics. Calibration specs and manufacturing
cost are built from interval and cost multipliers keyed on the same classes.
"""

from .base import BaseCalculator

INSTRUMENT_TYPES = (
    "measurement_device", "optical_component", "scientific_instrument", "calibration_standard",
    "sensor_housing", "precision_fixture", "metrology_tool", "laboratory_equipment",
)
MATERIALS = (
    "stainless_316l", "stainless_17_4ph", "titanium_grade2", "titanium_6al4v", "aluminum_6061",
    "aluminum_7075", "invar_36", "kovar", "beryllium_copper", "tungsten",
)
PRECISION_CLASSES = ("high_precision", "ultra_precision", "micro_precision", "nano_precision", "atomic_precision")
SURFACE_QUALITIES = ("precision_machined", "fine_finish", "optical_grade", "mirror_finish", "super_mirror")
STABILITY_REQUIREMENTS = ("standard_stability", "high_stability", "ultra_stability", "metrology_grade",
                          "reference_standard")
OPERATING_CONDITIONS = ("ambient_conditions", "controlled_environment", "precision_environment",
                        "metrology_lab", "vacuum_chamber", "cryogenic_conditions")
MEASUREMENT_ACCURACIES = ("standard_accuracy", "high_accuracy", "sub_micron", "nano_scale", "atomic_scale")
CALIBRATION_REQUIREMENTS = ("internal_calibration", "iso_17025", "nist_traceable", "primary_standard",
                            "international_standard")
PRODUCTION_QUANTITIES = ("one_off", "small_batch", "limited_production", "series_production")

ULTRA_CLASSES = ("nano_precision", "atomic_precision")
ULTRA_STABLE_MATERIALS = ("invar_36", "tungsten", "kovar")
ALUMINUM = ("aluminum_6061", "aluminum_7075")

# linear, angular, flatness, straightness, roundness, concentricity, parallelism, perpendicularity
TOLERANCES = {
    "high_precision": ("±0.01mm", "±0.1°", "0.005mm", "0.003mm", "0.005mm", "±0.01mm", "±0.005mm", "±0.005mm"),
    "ultra_precision": ("±0.005mm", "±0.05°", "0.002mm", "0.001mm", "0.002mm", "±0.005mm", "±0.002mm",
                        "±0.002mm"),
    "micro_precision": ("±0.002mm", "±0.02°", "0.001mm", "0.0005mm", "0.001mm", "±0.002mm", "±0.001mm",
                        "±0.001mm"),
    "nano_precision": ("±0.001mm", "±0.01°", "0.0005mm", "0.0002mm", "0.0005mm", "±0.001mm", "±0.0005mm",
                       "±0.0005mm"),
    "atomic_precision": ("±0.0005mm", "±0.005°", "0.0002mm", "0.0001mm", "0.0002mm", "±0.0005mm", "±0.0002mm",
                         "±0.0002mm"),
}
TOLERANCE_KEYS = ("linear", "angular", "flatness", "straightness", "roundness", "concentricity",
                  "parallelism", "perpendicularity")

# roughness, waviness, lay, defects, measurement method
SURFACES = {
    "precision_machined": ("Ra 0.4µm", "Wa 2.0µm", "Multidirectional", "No visible tool marks",
                           "Stylus profilometer"),
    "fine_finish": ("Ra 0.2µm", "Wa 1.0µm", "Controlled direction", "No scratches > 0.5µm",
                    "Optical profilometer"),
    "optical_grade": ("Ra 0.1µm", "Wa 0.5µm", "Random", "No scratches > 0.2µm", "White light interferometer"),
    "mirror_finish": ("Ra 0.05µm", "Wa 0.2µm", "Random", "No visible defects", "Atomic force microscope"),
    "super_mirror": ("Ra 0.025µm", "Wa 0.1µm", "Atomic level", "Atomic level smoothness",
                     "Scanning tunneling microscope"),
}

# stability, machinability, expansion (1e-6/°C), suitability
MATERIAL_PROPERTIES = {
    "stainless_316l": ("Good", "Good", 16.0, "Good for general precision applications"),
    "stainless_17_4ph": ("Very Good", "Good", 10.8, "Excellent for high-strength precision parts"),
    "titanium_grade2": ("Excellent", "Moderate", 8.6, "Excellent for corrosive environments"),
    "titanium_6al4v": ("Excellent", "Challenging", 8.6, "Excellent for high-strength applications"),
    "aluminum_6061": ("Good", "Excellent", 23.6, "Good for moderate precision applications"),
    "aluminum_7075": ("Good", "Good", 23.2, "Good for high-strength precision parts"),
    "invar_36": ("Outstanding", "Moderate", 1.2, "Outstanding for ultra-stable applications"),
    "kovar": ("Excellent", "Moderate", 5.9, "Excellent for glass-to-metal seals"),
    "beryllium_copper": ("Very Good", "Good", 17.0, "Excellent for electrical applications"),
    "tungsten": ("Outstanding", "Very Challenging", 4.5, "Outstanding for ultimate stability"),
}

# thermal stability, dimensional stability, aging rate, stress relief
MATERIAL_STABILITY = {
    "stainless_316l": ("Good", "Good", "Low", "Required"),
    "stainless_17_4ph": ("Very Good", "Very Good", "Very Low", "Recommended"),
    "titanium_grade2": ("Excellent", "Excellent", "Minimal", "Minimal"),
    "titanium_6al4v": ("Excellent", "Excellent", "Minimal", "Recommended"),
    "aluminum_6061": ("Moderate", "Good", "Moderate", "Required"),
    "aluminum_7075": ("Moderate", "Good", "Moderate", "Required"),
    "invar_36": ("Outstanding", "Outstanding", "Minimal", "Critical"),
    "kovar": ("Excellent", "Excellent", "Low", "Required"),
    "beryllium_copper": ("Good", "Very Good", "Low", "Required"),
    "tungsten": ("Outstanding", "Outstanding", "Negligible", "Minimal"),
}

# short term, long term, temperature, humidity, vibration
STABILITY_SPECS = {
    "standard_stability": ("±0.1% over 24 hours", "±1% over 1 year", "±0.01%/°C", "±0.05%/%RH",
                           "Standard vibration resistance"),
    "high_stability": ("±0.01% over 24 hours", "±0.1% over 1 year", "±0.001%/°C", "±0.005%/%RH",
                       "Enhanced vibration resistance"),
    "ultra_stability": ("±0.001% over 24 hours", "±0.01% over 1 year", "±0.0001%/°C", "±0.0005%/%RH",
                        "High vibration resistance"),
    "metrology_grade": ("±0.0001% over 24 hours", "±0.001% over 1 year", "±0.00001%/°C", "±0.00005%/%RH",
                        "Ultra-high vibration resistance"),
    "reference_standard": ("±0.00001% over 24 hours", "±0.0001% over 1 year", "±0.000001%/°C",
                           "±0.000005%/%RH", "Maximum vibration resistance"),
}

# temperature variation, humidity variation, vibration level, stability impact
ENVIRONMENT_FACTORS = {
    "ambient_conditions": ("±20°C", "±30% RH", "Standard", "Moderate"),
    "controlled_environment": ("±1°C", "±5% RH", "Low", "Low"),
    "precision_environment": ("±0.1°C", "±2% RH", "Very Low", "Very Low"),
    "metrology_lab": ("±0.01°C", "±1% RH", "Isolated", "Minimal"),
    "vacuum_chamber": ("±0.1°C", "None", "Isolated", "Minimal"),
    "cryogenic_conditions": ("±0.01°C", "None", "Isolated", "Material dependent"),
}

AGING = {
    "stainless_316l": ("Low - minimal dimensional change over time", "1-2 years to stabilize",
                       ["Stress relief", "Thermal cycling"]),
    "invar_36": ("Very Low - excellent long-term stability", "6 months to stabilize",
                 ["Critical stress relief", "Controlled cooling"]),
    "tungsten": ("Negligible - ultimate stability", "Immediate stability", ["Minimal processing required"]),
    "aluminum_6061": ("Moderate - some dimensional change expected", "2-3 years to stabilize",
                      ["Artificial aging", "Stress relief"]),
}

# --- Calibration ---

# base interval months, traceability, certificate
CALIBRATION_LEVELS = {
    "internal_calibration": (12, "Internal reference standards", "Internal calibration certificate"),
    "iso_17025": (12, "ISO/IEC 17025 accredited laboratory", "Accredited calibration certificate"),
    "nist_traceable": (12, "Unbroken chain to NIST standards", "NIST traceable certificate with uncertainty"),
    "primary_standard": (24, "Primary realization of the SI unit", "Primary standard certificate"),
    "international_standard": (36, "National metrology institute key comparison",
                               "International comparison report"),
}
# More stable parts hold calibration longer
STABILITY_INTERVAL_FACTOR = {
    "standard_stability": 0.5, "high_stability": 0.75, "ultra_stability": 1.0,
    "metrology_grade": 1.25, "reference_standard": 1.5,
}
# Required measurement accuracy in µm
ACCURACY_UM = {
    "standard_accuracy": 10.0, "high_accuracy": 1.0, "sub_micron": 0.1, "nano_scale": 0.01, "atomic_scale": 0.001,
}
TEST_UNCERTAINTY_RATIO = 4
REFERENCE_INSTRUMENTS = ("calibration_standard", "metrology_tool")

# --- Manufacturing cost ---

BASE_UNIT_COST = {
    "measurement_device": 1200, "optical_component": 1800, "scientific_instrument": 2500,
    "calibration_standard": 3000, "sensor_housing": 600, "precision_fixture": 900,
    "metrology_tool": 1500, "laboratory_equipment": 1000,
}
MATERIAL_COST_FACTOR = {
    "stainless_316l": 1.0, "stainless_17_4ph": 1.3, "titanium_grade2": 2.2, "titanium_6al4v": 2.8,
    "aluminum_6061": 0.7, "aluminum_7075": 0.9, "invar_36": 3.0, "kovar": 3.2,
    "beryllium_copper": 2.5, "tungsten": 4.5,
}
PRECISION_COST_FACTOR = {
    "high_precision": 1.0, "ultra_precision": 1.6, "micro_precision": 2.5,
    "nano_precision": 4.0, "atomic_precision": 6.5,
}
SURFACE_COST_FACTOR = {
    "precision_machined": 1.0, "fine_finish": 1.2, "optical_grade": 1.5, "mirror_finish": 2.0, "super_mirror": 3.0,
}
# units, per-unit cost factor
QUANTITY_FACTORS = {
    "one_off": (1, 1.0), "small_batch": (5, 0.85), "limited_production": (25, 0.7), "series_production": (100, 0.55),
}
COST_SPLIT = {"material": 0.2, "machining": 0.4, "finishing": 0.15, "inspection": 0.15, "calibration": 0.1}
SETUP_COST_SHARE = 0.5


class PrecisionInstrumentCalculator(BaseCalculator):
    calculator_id = "precision_instrument"
    name = "Precision Instrument Specification"
    description = "Tolerance, surface, stability and calibration specs with a cost estimate for precision parts."
    category = "quality"

    DEFAULT_INPUTS = {
        "instrument_type": "measurement_device",
        "material_selection": "stainless_316l",
        "component_thickness": 2.0,
        "precision_class": "ultra_precision",
        "surface_quality": "optical_grade",
        "stability_requirement": "high_stability",
        "operating_conditions": "controlled_environment",
        "measurement_accuracy": "sub_micron",
        "calibration_requirement": "nist_traceable",
        "production_quantity": "small_batch",
    }

    def calculate(self, fields: dict) -> dict:
        fields = self.with_defaults(fields)
        spec = {
            "instrument_type": self.parse_choice(fields.get("instrument_type"), INSTRUMENT_TYPES, "instrument_type"),
            "material": self.parse_choice(fields.get("material_selection"), MATERIALS, "material_selection"),
            "precision_class": self.parse_choice(fields.get("precision_class"), PRECISION_CLASSES,
                                                 "precision_class"),
            "surface_quality": self.parse_choice(fields.get("surface_quality"), SURFACE_QUALITIES,
                                                 "surface_quality"),
            "stability": self.parse_choice(fields.get("stability_requirement"), STABILITY_REQUIREMENTS,
                                           "stability_requirement"),
            "conditions": self.parse_choice(fields.get("operating_conditions"), OPERATING_CONDITIONS,
                                            "operating_conditions"),
            "accuracy": self.parse_choice(fields.get("measurement_accuracy"), MEASUREMENT_ACCURACIES,
                                          "measurement_accuracy"),
            "calibration": self.parse_choice(fields.get("calibration_requirement"), CALIBRATION_REQUIREMENTS,
                                             "calibration_requirement"),
            "quantity": self.parse_choice(fields.get("production_quantity"), PRODUCTION_QUANTITIES,
                                          "production_quantity"),
        }
        thickness = self.require_positive(fields.get("component_thickness"), "component_thickness",
                                          "Component thickness")
        spec["thickness"] = self.require_range(thickness, "component_thickness", 0.1, 20.0, "Component thickness")

        return {
            "precision_analysis": self._precision(spec),
            "stability_analysis": self._stability(spec),
            "calibration_specs": self._calibration(spec),
            "manufacturing_cost": self._cost(spec),
        }

    # --- Precision ---

    def _precision(self, spec: dict) -> dict:
        pclass = spec["precision_class"]
        roughness, waviness, lay, defects, method = SURFACES[spec["surface_quality"]]
        return {
            "tolerance_specifications": dict(zip(TOLERANCE_KEYS, TOLERANCES[pclass])),
            "surface_specifications": {"roughness": roughness, "waviness": waviness, "lay": lay,
                                       "defects": defects, "measurement": method},
            "manufacturing_requirements": _manufacturing_requirements(pclass, spec["surface_quality"]),
            "material_suitability": _material_suitability(spec["material"], pclass),
            "quality_control": _quality_control(pclass),
            "environmental_requirements": _environment_requirements(pclass),
        }

    # --- Stability ---

    def _stability(self, spec: dict) -> dict:
        material = spec["material"]
        short, long_, temp, humidity, vibration = STABILITY_SPECS[spec["stability"]]
        thermal, dimensional, aging_rate, stress_relief = MATERIAL_STABILITY[material]
        t_var, h_var, vib_level, impact = ENVIRONMENT_FACTORS[spec["conditions"]]

        compensation = []
        if material in ALUMINUM:
            compensation += ["Thermal compensation recommended", "Temperature monitoring required"]
        if material == "invar_36":
            compensation += ["Minimal thermal compensation needed", "Excellent thermal stability"]
        if spec["conditions"] in ("ambient_conditions", "controlled_environment"):
            compensation += ["Environmental temperature control important", "Consider thermal isolation"]

        mechanical_recs = []
        if material == "invar_36":
            mechanical_recs += ["Critical stress relief required", "Slow cooling after stress relief",
                                "Minimize machining stresses"]
        if material in ALUMINUM:
            mechanical_recs += ["Stress relief before final machining",
                                "Symmetric machining to minimize distortion"]
        mechanical_recs += ["Use appropriate cutting parameters", "Monitor part temperature during machining",
                            "Allow adequate settling time"]

        aging_desc, time_constant, methods = AGING.get(material, AGING["stainless_316l"])
        methods = list(methods)
        if spec["stability"] in ("metrology_grade", "reference_standard"):
            methods += ["Extended stabilization period", "Accelerated aging procedures"]

        return {
            "stability_specifications": {"short_term": short, "long_term": long_, "temperature": temp,
                                         "humidity": humidity, "vibration": vibration},
            "material_stability": {"thermal_stability": thermal, "dimensional_stability": dimensional,
                                   "aging_rate": aging_rate, "stress_relief": stress_relief},
            "environmental_factors": {"temperature_variation": t_var, "humidity_variation": h_var,
                                      "vibration_level": vib_level, "stability_impact": impact},
            "thermal_stability": {
                "thermal_expansion_coeff": "%.1fe-6 /°C" % MATERIAL_PROPERTIES[material][2],
                "temperature_sensitivity": thermal,
                "environmental_impact": impact,
                "compensation_required": compensation,
            },
            "mechanical_stability": {
                "dimensional_stability": dimensional,
                "stress_relief_requirement": stress_relief,
                "thickness_considerations": _thickness_considerations(spec["thickness"]),
                "mechanical_recommendations": mechanical_recs,
            },
            "aging_characteristics": {"aging_rate": aging_desc, "time_constant": time_constant,
                                      "mitigation_methods": methods},
        }

    # --- Calibration ---

    def _calibration(self, spec: dict) -> dict:
        base_months, traceability, certificate = CALIBRATION_LEVELS[spec["calibration"]]
        interval = base_months * STABILITY_INTERVAL_FACTOR[spec["stability"]]
        if spec["instrument_type"] in REFERENCE_INSTRUMENTS:
            interval *= 0.5
        interval = max(1, round(interval))

        accuracy = ACCURACY_UM[spec["accuracy"]]
        reference = accuracy / TEST_UNCERTAINTY_RATIO

        if accuracy <= 0.1:
            environment = "Metrology lab, 20 ±0.1°C, vibration isolated"
        elif accuracy <= 1.0:
            environment = "Controlled lab, 20 ±0.5°C"
        else:
            environment = "Controlled environment, 20 ±1°C"

        documentation = ["Calibration certificate", "As-found and as-left measurement data",
                         "Measurement uncertainty statement"]
        if spec["calibration"] != "internal_calibration":
            documentation.append("Traceability chain documentation")
        if spec["calibration"] in ("primary_standard", "international_standard"):
            documentation.append("Uncertainty budget per GUM")

        return {
            "calibration_level": spec["calibration"],
            "calibration_interval_months": interval,
            "required_accuracy": "±%g µm" % accuracy,
            "reference_uncertainty": "±%g µm" % reference,
            "test_uncertainty_ratio": "%d:1" % TEST_UNCERTAINTY_RATIO,
            "traceability": traceability,
            "certification": certificate,
            "calibration_environment": environment,
            "documentation": documentation,
        }

    # --- Cost ---

    def _cost(self, spec: dict) -> dict:
        units, qty_factor = QUANTITY_FACTORS[spec["quantity"]]
        base = BASE_UNIT_COST[spec["instrument_type"]]
        factors = {
            "material": MATERIAL_COST_FACTOR[spec["material"]],
            "precision": PRECISION_COST_FACTOR[spec["precision_class"]],
            "surface": SURFACE_COST_FACTOR[spec["surface_quality"]],
            "thickness": _thickness_cost_factor(spec["thickness"]),
        }
        unit_cost = base * qty_factor
        for value in factors.values():
            unit_cost *= value
        setup_cost = base * factors["precision"] * SETUP_COST_SHARE
        total = unit_cost * units + setup_cost

        lead_time = (4 + PRECISION_CLASSES.index(spec["precision_class"]) * 2
                     + SURFACE_QUALITIES.index(spec["surface_quality"]) + units // 25)

        labels = {"material": "Material selection", "precision": "Precision class",
                  "surface": "Surface quality", "thickness": "Component thickness"}
        drivers = [labels[k] for k, v in sorted(factors.items(), key=lambda kv: kv[1], reverse=True) if v >= 1.5]

        return {
            "units": units,
            "unit_cost": self.round_to(unit_cost),
            "setup_cost": self.round_to(setup_cost),
            "total_cost": self.round_to(total),
            "cost_breakdown": {k: self.round_to(unit_cost * share) for k, share in COST_SPLIT.items()},
            "cost_factors": {k: self.round_to(v, 3) for k, v in factors.items()},
            "lead_time_weeks": lead_time,
            "cost_drivers": drivers,
        }


def _manufacturing_requirements(pclass: str, surface: str) -> list:
    if pclass == "atomic_precision" or surface == "super_mirror":
        return ["Ultra-precision diamond turning", "Vibration-isolated manufacturing environment",
                "Temperature control ±0.01°C", "Humidity control ±1%", "Clean room Class 100 or better",
                "Atomic-level surface metrology"]
    if pclass == "nano_precision" or surface == "mirror_finish":
        return ["Precision diamond turning or grinding", "Vibration control systems",
                "Temperature control ±0.1°C", "Humidity control ±2%", "Clean room Class 1000",
                "Nanometer-level metrology"]
    if pclass == "micro_precision" or surface == "optical_grade":
        return ["High-precision machining centers", "Environmental control systems",
                "Temperature control ±0.5°C", "Clean manufacturing environment", "Sub-micron metrology equipment"]
    return ["Precision machining equipment", "Controlled manufacturing environment",
            "Calibrated measurement systems", "Quality control procedures"]


def _material_suitability(material: str, pclass: str) -> dict:
    stability, machinability, expansion, suitability = MATERIAL_PROPERTIES[material]

    precision_suitability = "Suitable"
    recs = []
    if pclass in ULTRA_CLASSES:
        if material not in ULTRA_STABLE_MATERIALS:
            precision_suitability = "Consider ultra-stable materials"
        if material == "invar_36":
            recs += ["Excellent choice for ultra-stable applications",
                     "Minimize thermal gradients during machining"]
        elif material == "tungsten":
            recs += ["Ultimate stability but very difficult to machine", "Consider EDM or specialized machining"]
        else:
            recs += ["Consider Invar 36 or tungsten for better stability", "Implement strict thermal control"]
    if material in ALUMINUM:
        recs += ["Good machinability but higher thermal expansion", "Implement thermal compensation if required"]
    recs += ["Stress relieve material before machining", "Use appropriate cutting parameters for material"]

    return {
        "material_properties": {"stability": stability, "machinability": machinability,
                                "thermal_expansion": "%.1fe-6 /°C" % expansion, "suitability": suitability},
        "precision_suitability": precision_suitability,
        "recommendations": recs,
    }


def _quality_control(pclass: str) -> dict:
    if pclass in ULTRA_CLASSES:
        inspection = ["Coordinate measuring machine (CMM) with nanometer resolution",
                      "Laser interferometer measurement", "Atomic force microscope (AFM) surface analysis",
                      "100% dimensional inspection"]
    elif pclass == "micro_precision":
        inspection = ["High-precision CMM measurement", "Optical measurement systems",
                      "Surface roughness measurement", "Statistical sampling inspection"]
    else:
        inspection = ["Precision measurement equipment", "Calibrated gauges and fixtures",
                      "Standard dimensional inspection"]

    equipment = []
    if pclass in ULTRA_CLASSES:
        equipment += ["Nanometer-resolution measurement systems", "Vibration-isolated metrology lab",
                      "Temperature-controlled environment"]
    equipment += ["Calibrated measurement instruments", "Traceability to national standards"]

    return {
        "inspection": inspection,
        "documentation": ["Complete dimensional inspection reports", "Surface finish measurement data",
                          "Material certificates and traceability", "Process parameter records",
                          "Environmental condition logs"],
        "equipment": equipment,
    }


def _environment_requirements(pclass: str) -> dict:
    if pclass in ULTRA_CLASSES:
        values = ("±0.01°C stability", "±1% RH control", "Vibration isolation < 0.1 µm",
                  "Clean room Class 100", "Stable, non-heating illumination")
    elif pclass == "micro_precision":
        values = ("±0.1°C stability", "±2% RH control", "Vibration control < 1 µm",
                  "Clean room Class 1000", "Controlled lighting conditions")
    else:
        values = ("±0.5°C stability", "±5% RH control", "Minimal vibration environment",
                  "Clean manufacturing area", "Adequate task lighting")
    return dict(zip(("temperature", "humidity", "vibration", "cleanliness", "lighting"), values))


def _thickness_considerations(thickness: float) -> list:
    if thickness < 1.0:
        return ["Thin section - high stress sensitivity", "Careful handling required",
                "Consider stress relief after machining"]
    if thickness > 10.0:
        return ["Thick section - potential internal stresses", "Stress relief highly recommended",
                "Monitor for warping during machining"]
    return ["Standard thickness - normal precautions", "Follow standard stress relief procedures"]


def _thickness_cost_factor(thickness: float) -> float:
    factor = 1.0 + max(0.0, thickness - 5.0) * 0.03
    if thickness < 1.0:
        factor += 0.2  # thin sections need extra fixturing
    return factor
