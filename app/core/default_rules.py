from typing import Any, Dict, List


DEFAULT_QUALIFICATION_RULES: List[Dict[str, Any]] = [
    {
        "id": "high-credit-score",
        "name": "High Credit Score Qualification",
        "description": "Qualify leads with excellent credit scores",
        "enabled": True,
        "priority": 90,
        "conditions": [
            {"field": "features.creditScore", "operator": "gte", "value": 750, "weight": 30},
        ],
        "actions": [
            {
                "type": "qualify",
                "value": True,
                "reasoning": "Excellent credit score indicates high qualification likelihood",
            },
            {
                "type": "tag",
                "value": ["excellent_credit", "high_priority"],
                "reasoning": "Credit score based tagging",
            },
            {"type": "score_adjustment", "value": 15, "reasoning": "Bonus for excellent credit score"},
        ],
    },
    {
        "id": "high-income",
        "name": "High Income Qualification",
        "description": "Qualify leads with high income levels",
        "enabled": True,
        "priority": 85,
        "conditions": [
            {"field": "features.income", "operator": "gte", "value": 75000, "weight": 25},
        ],
        "actions": [
            {"type": "tag", "value": ["high_income"], "reasoning": "Income-based qualification"},
            {"type": "score_adjustment", "value": 10, "reasoning": "Bonus for high income"},
        ],
    },
    {
        "id": "fraud-risk-check",
        "name": "Fraud Risk Disqualification",
        "description": "Disqualify high fraud risk leads",
        "enabled": True,
        "priority": 95,
        "conditions": [
            {"field": "aiScore.fraudRiskScore", "operator": "gt", "value": 0.7, "weight": 40},
        ],
        "actions": [
            {"type": "disqualify", "value": True, "reasoning": "High fraud risk detected"},
            {"type": "review", "value": True, "reasoning": "Manual review required for fraud risk"},
            {
                "type": "tag",
                "value": ["fraud_risk", "requires_verification"],
                "reasoning": "Risk-based tagging",
            },
        ],
    },
    {
        "id": "quality-source",
        "name": "Quality Traffic Source",
        "description": "Boost qualification for high-quality traffic sources",
        "enabled": True,
        "priority": 70,
        "conditions": [
            {
                "field": "features.sourceChannel",
                "operator": "in",
                "value": ["organic_search", "referral", "direct"],
                "weight": 20,
            },
        ],
        "actions": [
            {"type": "tag", "value": ["quality_source"], "reasoning": "High-quality traffic source"},
            {"type": "score_adjustment", "value": 8, "reasoning": "Bonus for quality source"},
        ],
    },
    {
        "id": "fast-form-completion",
        "name": "Suspicious Form Completion Speed",
        "description": "Flag leads with unusually fast form completion",
        "enabled": True,
        "priority": 88,
        "conditions": [
            {"field": "features.formCompletionTime", "operator": "lt", "value": 30, "weight": 35},
        ],
        "actions": [
            {
                "type": "review",
                "value": True,
                "reasoning": "Unusually fast form completion - potential bot activity",
            },
            {
                "type": "tag",
                "value": ["fast_completion", "requires_verification"],
                "reasoning": "Flagged for completion speed",
            },
        ],
    },
]


DEFAULT_TAG_RULES: List[Dict[str, Any]] = [
    # Quality
    {
        "id": "excellent-credit",
        "name": "Excellent Credit Score",
        "description": "Leads with credit scores 750+",
        "tag": "excellent_credit",
        "priority": 90,
        "conditions": [
            {"field": "features.creditScore", "operator": "gte", "value": 750, "weight": 30},
        ],
        "confidence": 0.95,
        "category": "quality",
        "enabled": True,
    },
    {
        "id": "high-income",
        "name": "High Income Bracket",
        "description": "Leads with income $75k+",
        "tag": "high_income",
        "priority": 85,
        "conditions": [
            {"field": "features.income", "operator": "gte", "value": 75000, "weight": 25},
        ],
        "confidence": 0.90,
        "category": "demographics",
        "enabled": True,
    },
    # Source
    {
        "id": "organic-traffic",
        "name": "Organic Search Traffic",
        "description": "Leads from organic search channels",
        "tag": "organic_lead",
        "priority": 75,
        "conditions": [
            {
                "field": "features.sourceChannel",
                "operator": "in",
                "value": ["organic_search", "seo"],
                "weight": 20,
            },
        ],
        "confidence": 0.85,
        "category": "source",
        "enabled": True,
    },
    {
        "id": "paid-advertising",
        "name": "Paid Advertising Traffic",
        "description": "Leads from paid advertising channels",
        "tag": "paid_lead",
        "priority": 70,
        "conditions": [
            {"field": "features.sourceChannel", "operator": "contains", "value": "paid", "weight": 20},
        ],
        "confidence": 0.80,
        "category": "source",
        "enabled": True,
    },
    # Behaviour
    {
        "id": "fast-form-completion",
        "name": "Fast Form Completion",
        "description": "Leads who completed forms very quickly",
        "tag": "fast_completion",
        "priority": 60,
        "conditions": [
            {"field": "features.formCompletionTime", "operator": "lt", "value": 60, "weight": 15},
        ],
        "confidence": 0.70,
        "category": "behavior",
        "enabled": True,
    },
    {
        "id": "thorough-researcher",
        "name": "Thorough Researcher",
        "description": "Leads with high page views and session time",
        "tag": "thorough_researcher",
        "priority": 75,
        "conditions": [
            {"field": "features.pageViews", "operator": "gte", "value": 8, "weight": 15},
            {"field": "features.sessionDuration", "operator": "gte", "value": 600, "weight": 15},
        ],
        "confidence": 0.85,
        "category": "behavior",
        "enabled": True,
    },
    # Risk
    {
        "id": "fraud-risk",
        "name": "Fraud Risk Indicator",
        "description": "Leads with elevated fraud risk scores",
        "tag": "fraud_risk",
        "priority": 95,
        "conditions": [
            {"field": "aiScore.fraudRiskScore", "operator": "gt", "value": 0.5, "weight": 30},
        ],
        "confidence": 0.90,
        "category": "risk",
        "enabled": True,
    },
    # Geography
    {
        "id": "high-value-location",
        "name": "High Value Geographic Location",
        "description": "Leads from high-value geographic areas",
        "tag": "premium_location",
        "priority": 65,
        "conditions": [
            {
                "field": "features.location.state",
                "operator": "in",
                "value": ["CA", "NY", "TX", "FL", "WA"],
                "weight": 10,
            },
        ],
        "confidence": 0.75,
        "category": "demographics",
        "enabled": True,
    },
    # Device
    {
        "id": "mobile-user",
        "name": "Mobile Device User",
        "description": "Leads using mobile devices",
        "tag": "mobile_user",
        "priority": 50,
        "conditions": [
            {"field": "features.deviceType", "operator": "eq", "value": "mobile", "weight": 10},
        ],
        "confidence": 0.80,
        "category": "behavior",
        "enabled": True,
    },
]
