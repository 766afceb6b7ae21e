"""
Market sizing calculator (TAM / SAM / SOM).

TAM = companies in the population x manufacturing share x laser cutting
adoption x annual spend per customer. SAM narrows TAM by industry focus and
market maturity. SOM is the share of SAM a new shop can realistically win,
capped at 40%. Everything downstream (segments, growth, entry strategy) is
table lookups keyed on the enumerated inputs.
"""

from .base import BaseCalculator

GEOGRAPHIC_SCOPES = ("local", "regional", "state", "multi_state", "national")
INDUSTRIES = ("manufacturing", "automotive", "aerospace", "electronics", "medical", "construction", "mixed")
DENSITIES = ("low", "moderate", "high", "very_high")
MATURITIES = ("emerging", "developing", "mature", "saturated")
CAPABILITIES = ("basic", "standard", "advanced", "comprehensive")

COMPANIES_PER_CAPITA = {"low": 0.015, "moderate": 0.025, "high": 0.035, "very_high": 0.045}
MANUFACTURING_SHARE = {"low": 0.08, "moderate": 0.15, "high": 0.25, "very_high": 0.35}
ADOPTION_RATE = {"local": 0.12, "regional": 0.18, "state": 0.22, "multi_state": 0.25, "national": 0.30}
PROJECTS_PER_YEAR = {"local": 3, "regional": 4, "state": 5, "multi_state": 6, "national": 8}

INDUSTRY_FACTOR = {
    "manufacturing": 0.4, "automotive": 0.15, "aerospace": 0.08, "electronics": 0.12,
    "medical": 0.10, "construction": 0.10, "mixed": 0.6,
}
MATURITY_FACTOR = {"emerging": 0.3, "developing": 0.6, "mature": 0.85, "saturated": 0.95}

BASE_SHARE = {"emerging": 0.25, "developing": 0.15, "mature": 0.08, "saturated": 0.03}
SCOPE_SHARE_ADJUSTMENT = {"local": 1.5, "regional": 1.2, "state": 1.0, "multi_state": 0.8, "national": 0.5}
MAX_ACHIEVABLE_SHARE = 0.4

FOCUS_RATIONALE = {
    "manufacturing": "General manufacturing provides broad market opportunity",
    "automotive": "Automotive industry has high precision requirements",
    "aerospace": "Aerospace demands highest quality and certification",
    "electronics": "Electronics requires precision and clean cutting",
    "medical": "Medical devices need regulatory compliance and precision",
    "construction": "Construction industry uses laser cutting for structural components",
    "mixed": "Multiple industries provide diversified market opportunity",
}

REALIZATION_TIMEFRAME = {
    "emerging": "2-3 years", "developing": "3-5 years", "mature": "5-7 years", "saturated": "7-10 years",
}
KEY_SUCCESS_FACTORS = {
    "emerging": ["Market education", "Early adoption", "Technology leadership"],
    "developing": ["Competitive pricing", "Service quality", "Market presence"],
    "mature": ["Differentiation", "Efficiency", "Customer relationships"],
    "saturated": ["Innovation", "Niche focus", "Cost leadership"],
}

MIXED_SEGMENTS = ("manufacturing", "automotive", "electronics", "construction")
RELATED_INDUSTRIES = {
    "manufacturing": ["construction", "electronics"],
    "automotive": ["manufacturing", "aerospace"],
    "aerospace": ["automotive", "medical"],
    "electronics": ["manufacturing", "medical"],
    "medical": ["electronics", "aerospace"],
    "construction": ["manufacturing"],
}

# growth %/yr, competition, entry barriers, profitability, required capability
INDUSTRY_PROFILE = {
    "manufacturing": (5, "High", "Low", "Medium", "standard"),
    "automotive": (3, "Medium", "Medium", "Medium", "advanced"),
    "aerospace": (7, "Low", "High", "High", "comprehensive"),
    "electronics": (8, "High", "Medium", "Medium", "advanced"),
    "medical": (12, "Medium", "High", "High", "comprehensive"),
    "construction": (4, "Medium", "Low", "Low", "basic"),
}
KEY_REQUIREMENTS = {
    "manufacturing": ["Cost efficiency", "Reliability", "Flexibility"],
    "automotive": ["Quality standards", "Volume capability", "Lean processes"],
    "aerospace": ["Certification", "Precision", "Traceability"],
    "electronics": ["Precision", "Clean environment", "Small features"],
    "medical": ["FDA compliance", "Biocompatibility", "Documentation"],
    "construction": ["Durability", "Weather resistance", "Cost efficiency"],
}

MATURITY_GROWTH = {"emerging": 15, "developing": 10, "mature": 5, "saturated": 2}
INDUSTRY_GROWTH_ADJUSTMENT = {
    "manufacturing": 0, "automotive": -1, "aerospace": 2, "electronics": 3,
    "medical": 5, "construction": -2, "mixed": 1,
}
GROWTH_DRIVERS = {
    "manufacturing": ["Automation adoption", "Reshoring trends", "Customization demand"],
    "automotive": ["Electric vehicle growth", "Lightweighting trends", "Autonomous vehicles"],
    "aerospace": ["Commercial aviation recovery", "Space industry growth", "Defense spending"],
    "electronics": ["IoT expansion", "5G deployment", "Miniaturization trends"],
    "medical": ["Aging population", "Personalized medicine", "Regulatory approvals"],
    "construction": ["Infrastructure investment", "Green building trends", "Prefabrication"],
    "mixed": ["Digital transformation", "Supply chain localization", "Sustainability focus"],
}
GROWTH_RISKS = {
    "emerging": ["Market education challenges", "Technology adoption barriers"],
    "developing": ["Competitive pressure", "Economic sensitivity"],
    "mature": ["Market saturation", "Price competition"],
    "saturated": ["Declining demand", "Substitution threats"],
}
PROJECTION_YEARS = 5

ENTRY_INVESTMENT_MULTIPLIER = {
    "Aggressive Entry": 1.5, "Focused Entry": 1.0, "Niche Entry": 0.7, "Gradual Entry": 0.5,
}
INVESTMENT_SPLIT = {"marketing": 0.3, "equipment": 0.4, "operations": 0.2, "working_capital": 0.1}

ENTRY_TIMELINE = [
    {"phase": 1, "name": "Market Preparation", "duration": "3-6 months",
     "activities": ["Market research and validation", "Capability assessment and development",
                    "Initial customer outreach"]},
    {"phase": 2, "name": "Market Entry", "duration": "6-12 months",
     "activities": ["Launch marketing campaigns", "Acquire first customers", "Establish market presence"]},
    {"phase": 3, "name": "Market Growth", "duration": "12-24 months",
     "activities": ["Scale operations", "Expand customer base", "Achieve target market share"]},
]

CAPABILITY_LEVEL = {"basic": 1, "standard": 2, "advanced": 3, "comprehensive": 4}


class MarketSizingCalculator(BaseCalculator):
    calculator_id = "market_sizing"
    name = "Market Sizing Calculator"
    description = "TAM, SAM and SOM for a laser cutting service area, with segments, growth and entry strategy."
    category = "business"

    DEFAULT_INPUTS = {
        "geographic_scope": "regional",
        "target_industries": "manufacturing",
        "population_base": 2500000,
        "manufacturing_density": "moderate",
        "average_project_value": 2500,
        "market_maturity": "developing",
        "competitor_count": 8,
        "your_capabilities": "standard",
    }

    def calculate(self, fields: dict) -> dict:
        fields = self.with_defaults(fields)
        scope = self.parse_choice(fields.get("geographic_scope"), GEOGRAPHIC_SCOPES, "geographic_scope")
        industry = self.parse_choice(fields.get("target_industries"), INDUSTRIES, "target_industries")
        density = self.parse_choice(fields.get("manufacturing_density"), DENSITIES, "manufacturing_density")
        maturity = self.parse_choice(fields.get("market_maturity"), MATURITIES, "market_maturity")
        capabilities = self.parse_choice(fields.get("your_capabilities"), CAPABILITIES, "your_capabilities")
        population = self.require_positive(fields.get("population_base"), "population_base", "Population")
        population = self.require_range(population, "population_base", 50000, 50000000, "Population")
        project_value = self.require_positive(fields.get("average_project_value"), "average_project_value",
                                              "Average project value")
        project_value = self.require_range(project_value, "average_project_value", 100, 50000,
                                           "Average project value")
        competitors = int(self.require_range(fields.get("competitor_count"), "competitor_count", 0, 100,
                                             "Competitor count"))

        # 1. TAM
        total_companies = population * COMPANIES_PER_CAPITA[density]
        manufacturing_companies = total_companies * MANUFACTURING_SHARE[density]
        potential_customers = manufacturing_companies * ADOPTION_RATE[scope]
        annual_spend = project_value * PROJECTS_PER_YEAR[scope]
        tam = potential_customers * annual_spend

        # 2. SAM
        sam = tam * INDUSTRY_FACTOR[industry] * MATURITY_FACTOR[maturity]

        # 3. SOM
        share = min(MAX_ACHIEVABLE_SHARE, BASE_SHARE[maturity] * SCOPE_SHARE_ADJUSTMENT[scope])
        som = sam * share

        sizing = {
            "tam": round(tam),
            "sam": round(sam),
            "som": round(som),
            "tam_breakdown": {
                "population_base": round(population),
                "total_companies": round(total_companies),
                "manufacturing_companies": round(manufacturing_companies),
                "potential_customers": round(potential_customers),
                "average_annual_spend": round(annual_spend),
            },
            "sam_breakdown": {
                "industry_focus": industry,
                "industry_factor": round(INDUSTRY_FACTOR[industry] * 100),
                "maturity_factor": round(MATURITY_FACTOR[maturity] * 100),
                "addressable_market": round(sam),
                "excluded_market": round(tam - sam),
                "focus_rationale": FOCUS_RATIONALE[industry],
            },
            "som_breakdown": {
                "achievable_share": round(share * 100),
                "obtainable_market": round(som),
                "competitive_market": round(sam - som),
                "market_maturity": maturity,
                "realization_timeframe": REALIZATION_TIMEFRAME[maturity],
                "key_success_factors": list(KEY_SUCCESS_FACTORS[maturity]),
            },
            "market_penetration": {
                "sam_as_tam_percentage": round(self.pct(sam, tam)),
                "som_as_sam_percentage": round(self.pct(som, sam)),
                "som_as_tam_percentage": round(self.pct(som, tam)),
            },
        }

        return {
            "market_sizing": sizing,
            "market_segments": self._segments(industry, tam, capabilities),
            "growth_projections": self._growth(tam, sam, som, maturity, industry),
            "market_entry": self._entry(sam, som, industry, maturity, competitors),
        }

    def _segments(self, industry: str, tam: float, capabilities: str) -> list:
        if industry == "mixed":
            picks = [(i, False) for i in MIXED_SEGMENTS]
        else:
            picks = [(industry, False)] + [(i, True) for i in RELATED_INDUSTRIES[industry]]

        segments = []
        for name, secondary in picks:
            growth, competition, barriers, profitability, _ = INDUSTRY_PROFILE[name]
            size = round(tam * INDUSTRY_FACTOR[name] * (0.5 if secondary else 1))
            segments.append({
                "industry": name,
                "market_size": size,
                "growth_rate": growth,
                "competition_level": competition,
                "entry_barriers": barriers,
                "profitability": profitability,
                "key_requirements": list(KEY_REQUIREMENTS[name]),
                "opportunity": _opportunity(name, capabilities),
            })
        segments.sort(key=lambda s: s["market_size"], reverse=True)
        return segments

    def _growth(self, tam, sam, som, maturity, industry) -> dict:
        rate = max(1, MATURITY_GROWTH[maturity] + INDUSTRY_GROWTH_ADJUSTMENT[industry])
        factor = 1 + rate / 100
        projections = []
        for year in range(1, PROJECTION_YEARS + 1):
            grown = factor ** year
            projections.append({
                "year": year,
                "tam": round(tam * grown),
                "sam": round(sam * grown),
                "som": round(som * grown),
                "growth_rate": rate,
            })
        return {
            "base_growth_rate": rate,
            "projections": projections,
            "drivers": list(GROWTH_DRIVERS[industry]),
            "risks": list(GROWTH_RISKS[maturity]),
        }

    def _entry(self, sam, som, industry, maturity, competitors) -> dict:
        approach = _entry_approach(som, competitors)

        targets = [{"segment": "Primary Target", "industry": industry, "market_size": round(sam * 0.6),
                    "priority": "High", "rationale": "Core competency alignment"}]
        for idx, related in enumerate(RELATED_INDUSTRIES.get(industry, [])[:2]):
            targets.append({"segment": "Secondary Target %d" % (idx + 1), "industry": related,
                            "market_size": round(sam * 0.2), "priority": "Medium",
                            "rationale": "Adjacent market opportunity"})

        barriers = []
        if competitors > 10:
            barriers.append({"barrier": "High Competition", "severity": "High",
                             "description": "Many established competitors",
                             "mitigation": "Differentiation and niche focus"})
        if maturity in ("mature", "saturated"):
            barriers.append({"barrier": "Market Maturity", "severity": "Medium",
                             "description": "Established customer relationships",
                             "mitigation": "Superior value proposition"})
        barriers.append({"barrier": "Capital Requirements", "severity": "Medium",
                         "description": "Equipment and facility investment needed",
                         "mitigation": "Phased investment approach"})

        investment = som * 0.05 * ENTRY_INVESTMENT_MULTIPLIER[approach["strategy"]]

        return {
            "recommended_approach": approach,
            "target_segments": targets,
            "entry_barriers": barriers,
            "timeline": [dict(phase, activities=list(phase["activities"])) for phase in ENTRY_TIMELINE],
            "investment_requirements": {
                "total_investment": round(investment),
                "breakdown": {k: round(investment * v) for k, v in INVESTMENT_SPLIT.items()},
                "payback_period": _payback_period(investment, som),
            },
            "success_metrics": [
                {"metric": "Market Share", "target": "5-10% of SOM", "timeframe": "3 years"},
                {"metric": "Revenue", "target": "$%dK annually" % round(som * 0.05 / 1000),
                 "timeframe": "2 years"},
                {"metric": "Customer Acquisition", "target": "50+ active customers", "timeframe": "18 months"},
                {"metric": "Brand Recognition", "target": "Top 3 in target segments", "timeframe": "3 years"},
            ],
        }


def _opportunity(industry: str, capabilities: str) -> dict:
    growth, competition, _, profitability, required = INDUSTRY_PROFILE[industry]

    have = CAPABILITY_LEVEL[capabilities]
    need = CAPABILITY_LEVEL[required]
    if have >= need:
        match = "High"
    elif have >= need - 1:
        match = "Medium"
    else:
        match = "Low"

    score = 0
    score += 2 if growth > 7 else 1 if growth > 4 else 0
    score += {"High": 2, "Medium": 1}.get(profitability, 0)
    score += {"Low": 2, "Medium": 1}.get(competition, 0)
    attractiveness = "High" if score >= 5 else "Medium" if score >= 3 else "Low"

    if match == "High" and attractiveness == "High":
        level = "High"
    elif match == "Low" or attractiveness == "Low":
        level = "Low"
    else:
        level = "Medium"

    if level == "High":
        action = "Aggressive pursuit" if match == "High" else "Capability development"
    elif level == "Medium":
        action = "Selective targeting"
    else:
        action = "Monitor for changes"

    return {
        "level": level,
        "capability_match": match,
        "market_attractiveness": attractiveness,
        "recommended_action": action,
    }


def _entry_approach(som: float, competitors: int) -> dict:
    if competitors > 10:
        competition = "High"
    elif competitors > 5:
        competition = "Medium"
    else:
        competition = "Low"

    if som > 5000000 and competition == "Low":
        return {"strategy": "Aggressive Entry", "competition_level": competition,
                "description": "Large market with low competition - aggressive expansion", "risk_level": "Medium"}
    if som > 2000000 and competition == "Medium":
        return {"strategy": "Focused Entry", "competition_level": competition,
                "description": "Target specific segments with differentiation", "risk_level": "Medium"}
    if competition == "High":
        return {"strategy": "Niche Entry", "competition_level": competition,
                "description": "Focus on underserved niches and specialization", "risk_level": "Low"}
    return {"strategy": "Gradual Entry", "competition_level": competition,
            "description": "Gradual market entry with capability building", "risk_level": "Low"}


def _payback_period(investment: float, som: float) -> str:
    annual_revenue = som * 0.1
    if annual_revenue <= 0:
        return "More than 3 years"
    years = investment / annual_revenue
    if years < 1:
        return "Less than 1 year"
    if years < 2:
        return "1-2 years"
    if years < 3:
        return "2-3 years"
    return "More than 3 years"
