"""
Lead qualification calculator.

Eight weighted categories summed into a qualification score, then a tier
(A-D) with a conversion probability, an action plan and a risk assessment.
Values outside a category's table score a neutral 10 rather than failing,
since leads often arrive with half-filled CRM fields.
"""

from .base import BaseCalculator

NEUTRAL_SCORE = 10

SCORE_TABLES = {
    "company_size": {"startup": 5, "small": 10, "medium": 15, "large": 20},
    "industry": {"manufacturing": 20, "automotive": 18, "aerospace": 16, "electronics": 15,
                 "medical": 14, "construction": 12, "other": 8},
    "project_budget": {"low": 5, "medium": 15, "high": 20, "enterprise": 25},
    "timeline": {"immediate": 25, "urgent": 20, "normal": 15, "future": 5},
    "decision_maker": {"direct": 20, "indirect": 12, "unknown": 5},
    "current_supplier": {"no_supplier": 20, "has_supplier": 10, "multiple_suppliers": 15, "in_house": 8},
    "pain_points": {"cost": 15, "quality": 20, "delivery": 18, "capacity": 16, "service": 14, "none": 2},
    "volume_potential": {"one_time": 5, "occasional": 10, "medium": 15, "high": 20},
}
MAX_POSSIBLE_SCORE = sum(max(table.values()) for table in SCORE_TABLES.values())

# (minimum total score, tier, priority, base conversion %)
TIERS = [
    (130, "A", "High", 70),
    (100, "B", "Medium", 45),
    (70, "C", "Low", 25),
    (0, "D", "Very Low", 10),
]
MAX_CONVERSION = 90

TIER_DESCRIPTIONS = {
    "A": "Hot lead - Immediate attention required",
    "B": "Warm lead - Active pursuit recommended",
    "C": "Cool lead - Nurture and monitor",
    "D": "Cold lead - Minimal resources allocated",
}
FOLLOW_UP = {"A": "Daily until closed", "B": "Weekly", "C": "Monthly", "D": "Quarterly"}

MAX_ACTIONS = 5
SEVERITY_POINTS = {"High": 3, "Medium": 2, "Low": 1}


class LeadQualificationCalculator(BaseCalculator):
    calculator_id = "lead_qualification"
    name = "Lead Qualification Scorer"
    description = "Scores a sales lead, assigns a tier, and builds an action plan and risk assessment."
    category = "business"

    DEFAULT_INPUTS = {
        "company_size": "medium",
        "industry": "manufacturing",
        "project_budget": "medium",
        "timeline": "normal",
        "decision_maker": "indirect",
        "current_supplier": "has_supplier",
        "pain_points": "quality",
        "volume_potential": "medium",
    }

    def calculate(self, fields: dict) -> dict:
        fields = self.with_defaults(fields)
        lead = {key: str(fields.get(key)).strip().lower() for key in SCORE_TABLES}

        score = self._score(lead)
        ranking = self._ranking(score["total_score"], lead)
        return {
            "qualification_score": score,
            "lead_ranking": ranking,
            "action_plan": _action_plan(ranking["tier"], lead),
            "risk_assessment": _risk_assessment(lead, score["percentage_score"]),
        }

    def _score(self, lead: dict) -> dict:
        breakdown = {key: table.get(lead[key], NEUTRAL_SCORE) for key, table in SCORE_TABLES.items()}
        total = sum(breakdown.values())
        percentage = round(self.clamp(self.pct(total, MAX_POSSIBLE_SCORE), 0, 100))
        return {
            "breakdown": breakdown,
            "total_score": total,
            "percentage_score": percentage,
            "max_possible_score": MAX_POSSIBLE_SCORE,
            "score_interpretation": _interpretation(percentage),
        }

    def _ranking(self, total: int, lead: dict) -> dict:
        for threshold, tier, priority, conversion in TIERS:
            if total >= threshold:
                break

        if lead["timeline"] == "immediate":
            conversion += 15
        if lead["pain_points"] in ("quality", "delivery"):
            conversion += 10
        if lead["decision_maker"] == "direct":
            conversion += 10

        if tier == "A":
            action = ("Schedule immediate meeting/call" if lead["timeline"] == "immediate"
                      else "Prepare detailed proposal within 24 hours")
        elif tier == "B":
            action = "Schedule discovery call within 3 days"
        elif tier == "C":
            action = "Add to nurture campaign, follow up monthly"
        else:
            action = "Add to database, quarterly check-in"

        return {
            "tier": tier,
            "priority": priority,
            "conversion_probability": min(MAX_CONVERSION, conversion),
            "description": TIER_DESCRIPTIONS[tier],
            "recommended_action": action,
            "follow_up_frequency": FOLLOW_UP[tier],
        }


def _interpretation(percentage: float) -> str:
    if percentage >= 80:
        return "Excellent - High priority lead"
    if percentage >= 65:
        return "Good - Strong potential"
    if percentage >= 50:
        return "Fair - Moderate potential"
    if percentage >= 35:
        return "Poor - Low priority"
    return "Very Poor - Consider disqualifying"


def _action_plan(tier: str, lead: dict) -> list:
    actions = []
    if tier == "A":
        actions.append({"action": "Immediate Contact", "priority": "Critical", "timeframe": "Within 2 hours",
                        "description": "Contact lead immediately while interest is high",
                        "owner": "Sales Manager"})
    if lead["timeline"] in ("immediate", "urgent"):
        actions.append({"action": "Fast-Track Proposal", "priority": "High", "timeframe": "Within 24 hours",
                        "description": "Prepare and deliver proposal quickly", "owner": "Sales Team"})
    if lead["decision_maker"] != "direct":
        actions.append({"action": "Identify Decision Maker", "priority": "High", "timeframe": "Within 1 week",
                        "description": "Map decision-making process and key stakeholders",
                        "owner": "Account Executive"})
    if lead["pain_points"] != "none":
        actions.append({"action": "Pain Point Discovery", "priority": "Medium", "timeframe": "Next call",
                        "description": "Deep dive into specific pain points and quantify impact",
                        "owner": "Sales Team"})
    if lead["current_supplier"] == "has_supplier":
        actions.append({"action": "Competitive Analysis", "priority": "Medium", "timeframe": "Within 3 days",
                        "description": "Research current supplier and identify differentiation opportunities",
                        "owner": "Sales Support"})
    if lead["volume_potential"] == "high":
        actions.append({"action": "Volume Pricing Strategy", "priority": "Medium", "timeframe": "Before proposal",
                        "description": "Develop volume-based pricing and terms", "owner": "Pricing Team"})
    return actions[:MAX_ACTIONS]


def _risk_assessment(lead: dict, percentage: float) -> dict:
    risks = []
    if percentage < 50:
        risks.append({"risk": "Low Qualification Score", "severity": "High", "probability": "High",
                      "impact": "Wasted sales resources", "mitigation": "Focus on higher-scoring leads first"})
    if lead["project_budget"] == "low":
        risks.append({"risk": "Limited Budget", "severity": "Medium", "probability": "Medium",
                      "impact": "Low margin or no deal", "mitigation": "Emphasize value proposition and ROI"})
    if lead["timeline"] == "future":
        risks.append({"risk": "Distant Timeline", "severity": "Medium", "probability": "High",
                      "impact": "Deal may not materialize", "mitigation": "Nurture relationship, stay top-of-mind"})
    if lead["decision_maker"] == "unknown":
        risks.append({"risk": "No Decision Maker Access", "severity": "High", "probability": "High",
                      "impact": "Unable to close deal",
                      "mitigation": "Map organization and find path to decision maker"})
    if lead["current_supplier"] == "has_supplier" and lead["pain_points"] == "none":
        risks.append({"risk": "Satisfied with Current Supplier", "severity": "High", "probability": "Medium",
                      "impact": "Difficult to win business",
                      "mitigation": "Find hidden pain points or create new value"})

    high = sum(1 for r in risks if r["severity"] == "High")
    medium = sum(1 for r in risks if r["severity"] == "Medium")
    if high >= 2:
        overall = "High"
    elif high >= 1 or medium >= 3:
        overall = "Medium"
    elif medium >= 1:
        overall = "Low"
    else:
        overall = "Very Low"

    if not risks:
        mitigation = ["Continue with standard sales process", "Monitor for new risks"]
    else:
        mitigation = []
        names = " ".join(r["risk"] for r in risks)
        if "Decision Maker" in names:
            mitigation.append("Prioritize stakeholder mapping and access")
        if "Budget" in names:
            mitigation.append("Focus on value-based selling and ROI demonstration")
        if "Timeline" in names:
            mitigation.append("Implement lead nurturing campaign")
        mitigation.append("Regular risk assessment and mitigation review")

    return {
        "risks": risks,
        "overall_risk_level": overall,
        "risk_score": min(10, sum(SEVERITY_POINTS[r["severity"]] for r in risks)),
        "mitigation": mitigation,
    }
