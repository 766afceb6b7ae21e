"""
Assist-gas consumption calculator.

Consumption is split into cutting, piercing, setup purge and idle bleed.
Flow is in l/min, times in minutes, volumes in m³, price per m³.
"""

from .base import BaseCalculator

GAS_TYPES = ("oxygen", "nitrogen", "air", "argon")
MATERIAL_TYPES = ("steel", "stainless", "aluminum")
MATERIAL_ALIASES = {
    "carbon_steel": "steel",
    "mild_steel": "steel",
    "stainless_steel": "stainless",
}

GAS_PROPERTIES = {
    "oxygen": {"density": 1.429, "thermal_conductivity": 0.0263, "purity": "99.5%",
               "reactivity": "Reactive (exothermic)"},
    "nitrogen": {"density": 1.251, "thermal_conductivity": 0.0259, "purity": "99.9%",
                 "reactivity": "Inert"},
    "air": {"density": 1.225, "thermal_conductivity": 0.0257, "purity": "78% N2, 21% O2",
            "reactivity": "Mildly reactive"},
    "argon": {"density": 1.784, "thermal_conductivity": 0.0177, "purity": "99.9%",
              "reactivity": "Inert"},
}

PIERCE_FLOW_MULTIPLIER = {"oxygen": 1.5, "nitrogen": 1.8, "air": 1.3, "argon": 2.0}

# Flow share of the cutting flow during setup purge and idle
SETUP_FLOW_FACTOR = 0.5
IDLE_FLOW_FACTOR = 0.2

# (base, per mm of thickness)
OPTIMAL_FLOW = {"oxygen": (15, 2), "nitrogen": (20, 3), "air": (12, 1.5), "argon": (18, 2.5)}
OPTIMAL_PRESSURE = {"oxygen": (1.5, 0.2), "nitrogen": (2.0, 0.3), "air": (1.2, 0.15), "argon": (1.8, 0.25)}

# Industry averages for the benchmark comparison
BENCHMARK_CONSUMPTION_PER_METER = 0.0006
BENCHMARK_COST_PER_METER = 0.009
BENCHMARK_UTILIZATION = 78.0

SENSITIVITY_STEPS = (-20, -10, 10, 20)


class GasConsumptionCalculator(BaseCalculator):
    calculator_id = "gas_consumption"
    name = "Gas Consumption Calculator"
    description = "Assist-gas volume, cost, utilization and optimization potential for a cutting job."
    category = "cost"

    DEFAULT_INPUTS = {
        "gas_type": "nitrogen",
        "material_type": "steel",
        "thickness": 3,
        "cutting_length": 5000,
        "cutting_time": 10,
        "piercing_points": 20,
        "gas_flow": 25,
        "gas_pressure": 2.5,
        "gas_price": 0.5,
        "efficiency": 0.85,
        "setup_time": 5,
        "idle_time": 2,
    }

    def calculate(self, fields: dict) -> dict:
        job = self._validate(self.with_defaults(fields))
        base = self._consumption(job)

        suitability = gas_suitability(job["gas_type"], job["material_type"], job["thickness"])
        optimization = self._optimization(job, base)

        return {
            "consumption": base["consumption"],
            "cost": base["cost"],
            "efficiency": {
                "utilization_rate": self.round_to(base["utilization_rate"]),
                "waste_reduction_potential": self.round_to(optimization["waste_reduction"]),
                "optimization_potential": optimization["potential"],
            },
            "gas_properties": {"gas_type": job["gas_type"], **GAS_PROPERTIES[job["gas_type"]]},
            "suitability": suitability,
            "optimal_parameters": {
                "gas_flow": self.round_to(optimization["optimal_flow"]),
                "gas_pressure": self.round_to(optimization["optimal_pressure"]),
            },
            "recommendations": self._recommendations(job, base, suitability, optimization),
            "sensitivity_analysis": self._sensitivity(job, base),
            "alternative_gases": self._alternatives(job, base),
            "benchmark_comparison": self._benchmark(job, base),
        }

    def _validate(self, fields: dict) -> dict:
        material = str(fields.get("material_type") or "").strip().lower()
        material = MATERIAL_ALIASES.get(material, material)
        job = {
            "gas_type": self.parse_choice(fields.get("gas_type"), GAS_TYPES, "gas_type"),
            "material_type": self.parse_choice(material, MATERIAL_TYPES, "material_type"),
            "thickness": self.require_positive(fields.get("thickness"), "thickness"),
            "cutting_length": self.require_positive(fields.get("cutting_length"), "cutting_length"),
            "cutting_time": self.require_positive(fields.get("cutting_time"), "cutting_time"),
            "piercing_points": self.require_non_negative(fields.get("piercing_points"), "piercing_points"),
            "gas_flow": self.require_positive(fields.get("gas_flow"), "gas_flow", "Gas flow"),
            "gas_pressure": self.require_positive(fields.get("gas_pressure"), "gas_pressure", "Gas pressure"),
            "gas_price": self.require_positive(fields.get("gas_price"), "gas_price", "Gas price"),
            "efficiency": self.require_range(fields.get("efficiency"), "efficiency", 0.5, 1.0),
            "setup_time": self.require_non_negative(fields.get("setup_time"), "setup_time"),
            "idle_time": self.require_non_negative(fields.get("idle_time"), "idle_time"),
            "quantity": self.parse_int(fields.get("quantity"), 0),
        }
        return job

    def _consumption(self, job: dict) -> dict:
        """Volumes and costs only. No sensitivity or alternatives, so it can be rerun freely."""
        flow = job["gas_flow"]
        t = job["thickness"]

        cutting = flow * job["cutting_time"] / 1000 * job["efficiency"]
        pierce_flow = flow * PIERCE_FLOW_MULTIPLIER[job["gas_type"]] * (1 + t / 20)
        pierce_minutes = job["piercing_points"] * _pierce_seconds(job["material_type"], t) / 60
        piercing = pierce_flow * pierce_minutes / 1000
        setup = flow * SETUP_FLOW_FACTOR * job["setup_time"] / 1000
        idle = flow * IDLE_FLOW_FACTOR * job["idle_time"] / 1000
        total = cutting + piercing + setup + idle

        total_cost = total * job["gas_price"]
        meters = job["cutting_length"] / 1000
        cost = {
            "total_cost": self.round_to(total_cost, 4),
            "cost_per_meter": self.round_to(total_cost / meters, 4),
            "cost_per_piece": self.round_to(total_cost / job["quantity"], 4) if job["quantity"] > 0 else None,
            "cutting_cost": self.round_to(cutting * job["gas_price"], 4),
            "piercing_cost": self.round_to(piercing * job["gas_price"], 4),
            "setup_cost": self.round_to(setup * job["gas_price"], 4),
            "idle_cost": self.round_to(idle * job["gas_price"], 4),
        }
        return {
            "consumption": {
                "cutting_consumption": self.round_to(cutting, 4),
                "piercing_consumption": self.round_to(piercing, 4),
                "setup_consumption": self.round_to(setup, 4),
                "idle_consumption": self.round_to(idle, 4),
                "total_consumption": self.round_to(total, 4),
                "consumption_per_meter": self.round_to(total / meters, 6),
            },
            "cost": cost,
            "total": total,
            "total_cost": total_cost,
            "utilization_rate": self.pct(cutting + piercing, total),
        }

    def _optimization(self, job: dict, base: dict) -> dict:
        t = job["thickness"]
        flow_base, flow_slope = OPTIMAL_FLOW[job["gas_type"]]
        pres_base, pres_slope = OPTIMAL_PRESSURE[job["gas_type"]]
        optimal_flow = flow_base + flow_slope * t
        optimal_pressure = pres_base + pres_slope * t

        current_waste = 1 - job["efficiency"]
        optimized_waste = 1 - min(0.95, job["efficiency"] + 0.1)
        if current_waste > 0:
            waste_reduction = max(0.0, (current_waste - optimized_waste) / current_waste * 100)
        else:
            waste_reduction = 0.0

        potential = 0
        if job["gas_flow"] > optimal_flow:
            potential += 15
        if job["gas_pressure"] > optimal_pressure:
            potential += 10
        if job["idle_time"] > job["cutting_time"] * 0.2:
            potential += 8

        return {
            "optimal_flow": optimal_flow,
            "optimal_pressure": optimal_pressure,
            "waste_reduction": waste_reduction,
            "potential": min(30, potential),
        }

    def _recommendations(self, job, base, suitability, optimization) -> list:
        recs = []
        if suitability["rating"] == "Poor":
            better = [g for g in GAS_TYPES if g != job["gas_type"]
                      and gas_suitability(g, job["material_type"], job["thickness"])["rating"]
                      in ("Excellent", "Good")]
            recs.append("%s is poorly suited to %s at %gmm - consider %s" % (
                job["gas_type"].title(), job["material_type"], job["thickness"],
                " or ".join(better) if better else "a different gas"))
        if job["gas_flow"] > optimization["optimal_flow"] * 1.2:
            recs.append("Gas flow is more than 20%% above the optimal %.1f l/min - reduce flow" %
                        optimization["optimal_flow"])
        if base["utilization_rate"] < 70:
            recs.append("Less than 70% of gas goes to productive cutting - cut setup purge and idle time")
        if base["total_cost"] > 50:
            recs.append("Gas cost is high - consider bulk supply or an on-site nitrogen generator")
        if job["efficiency"] < 0.85:
            recs.append("System efficiency is below 85% - check nozzles and lines for leaks")
        if not recs:
            recs.append("Gas settings are within optimal ranges")
        return recs

    def _sensitivity(self, job: dict, base: dict) -> dict:
        results = {}
        for param in ("gas_flow", "gas_price"):
            rows = []
            for step in SENSITIVITY_STEPS:
                varied = dict(job)
                varied[param] = job[param] * (1 + step / 100)
                outcome = self._consumption(varied)
                rows.append({
                    "change_percent": step,
                    "value": self.round_to(varied[param], 4),
                    "total_cost": self.round_to(outcome["total_cost"], 4),
                    "cost_change_percent": self.round_to(
                        self.pct(outcome["total_cost"] - base["total_cost"], base["total_cost"])),
                })
            results[param] = rows
        return results

    def _alternatives(self, job: dict, base: dict) -> list:
        options = []
        for gas in GAS_TYPES:
            if gas == job["gas_type"]:
                continue
            flow_base, flow_slope = OPTIMAL_FLOW[gas]
            outcome = self._consumption({**job, "gas_type": gas,
                                         "gas_flow": flow_base + flow_slope * job["thickness"]})
            options.append({
                "gas_type": gas,
                "estimated_consumption": self.round_to(outcome["total"], 4),
                "estimated_cost": self.round_to(outcome["total_cost"], 4),
                "consumption_change_percent": self.round_to(
                    self.pct(outcome["total"] - base["total"], base["total"])),
                "suitability": gas_suitability(gas, job["material_type"], job["thickness"])["rating"],
            })
        return options

    def _benchmark(self, job: dict, base: dict) -> dict:
        per_meter = base["total"] / (job["cutting_length"] / 1000)
        cost_per_meter = base["total_cost"] / (job["cutting_length"] / 1000)
        if per_meter <= BENCHMARK_CONSUMPTION_PER_METER * 0.9:
            rating = "Above average"
        elif per_meter <= BENCHMARK_CONSUMPTION_PER_METER * 1.1:
            rating = "Average"
        else:
            rating = "Below average"
        return {
            "consumption_per_meter": self.round_to(per_meter, 6),
            "industry_consumption_per_meter": BENCHMARK_CONSUMPTION_PER_METER,
            "cost_per_meter": self.round_to(cost_per_meter, 4),
            "industry_cost_per_meter": BENCHMARK_COST_PER_METER,
            "utilization_rate": self.round_to(base["utilization_rate"]),
            "industry_utilization_rate": BENCHMARK_UTILIZATION,
            "performance_rating": rating,
        }


def _pierce_seconds(material: str, thickness: float) -> float:
    if material == "stainless":
        return 0.8 + 0.4 * thickness
    if material == "aluminum":
        return 0.3 + 0.2 * thickness
    return 0.5 + 0.3 * thickness


def gas_suitability(gas: str, material: str, thickness: float) -> dict:
    """Rate a gas/material pairing: Excellent, Good, Fair or Poor."""
    rating = "Fair"
    if gas == "oxygen":
        if material == "steel":
            rating = "Excellent" if thickness <= 25 else "Good"
        elif material == "aluminum":
            rating = "Poor"
        elif material == "stainless":
            rating = "Fair" if thickness <= 6 else "Poor"
    elif gas == "nitrogen":
        rating = "Good" if material == "steel" else "Excellent"
    elif gas == "air":
        if material == "steel":
            rating = "Good" if thickness <= 3 else "Fair"
        elif material == "aluminum":
            rating = "Fair" if thickness <= 2 else "Poor"
        else:
            rating = "Poor"
    notes = {
        "Excellent": "Recommended combination",
        "Good": "Suitable for production",
        "Fair": "Acceptable with edge quality tradeoffs",
        "Poor": "Not recommended",
    }
    return {"rating": rating, "notes": notes[rating]}
