"""
config.py
Configuration and constants for the deal-by-deal waterfall calculator
"""

# ============================================================
# IRR SOLVER SETTINGS
# ============================================================
IRR_INITIAL_GUESS = 0.10
IRR_TOLERANCE = 1e-6          # early exit inside the Newton loop
IRR_ACCEPT_TOLERANCE = 1e-4   # last-chance acceptance after the loop
IRR_MAX_ITERATIONS = 100

# ============================================================
# PERSISTENCE
# ============================================================
DB_PATH = "waterfall_calculator.db"

# ============================================================
# NEW RECORD DEFAULTS
# ============================================================
DEFAULT_TIMELINE_YEARS = 5

NEW_DEAL_DEFAULTS = {
    "is_active": True,
    "participants": [],
    "projected_annual_return": 10.0,
    "management_fee": 0.0,
    "timeline_years": DEFAULT_TIMELINE_YEARS,
    "preferred_return": 8.0,
    "gp_catch_up": {"applies": True, "percentage": 100.0, "hurdle": 10.0},
    "first_tier": {"split": {"lp": 80.0, "gp": 20.0}, "hurdle": 15.0},
    "second_tier": {"split": {"lp": 60.0, "gp": 40.0}},
}

# ============================================================
# SAMPLE PORTFOLIO (seeded on first run and by "Reset to defaults")
# ============================================================
DEFAULT_INVESTORS = [
    {"id": "gp1", "name": "Abhi", "is_gp": True, "carry_percentage": 50.0, "commitment": 0.0},
    {"id": "gp2", "name": "Ovi", "is_gp": True, "carry_percentage": 50.0, "commitment": 0.0},
    {"id": "lp1", "name": "Family Office", "is_gp": False, "commitment": 1_000_000.0},
    {"id": "lp2", "name": "Angel Investor", "is_gp": False, "commitment": 500_000.0},
]

DEFAULT_DEALS = [
    {
        "id": "deal1",
        "name": "Commercial Property Alpha",
        "is_active": True,
        "participants": [
            {"investor_id": "lp1", "amount": 750_000.0},
            {"investor_id": "lp2", "amount": 250_000.0},
        ],
        "projected_annual_return": 10.0,
        "actual_annual_returns": [15.0, 18.0, 25.0, 30.0, 10.0],
        "management_fee": 0.0,
        "timeline_years": 5,
        "preferred_return": 8.0,
        "gp_catch_up": {"applies": True, "percentage": 100.0, "hurdle": 10.0},
        "first_tier": {"split": {"lp": 80.0, "gp": 20.0}, "hurdle": 15.0},
        "second_tier": {"split": {"lp": 60.0, "gp": 40.0}},
    },
]

# ============================================================
# VALIDATION
# ============================================================
CARRY_TARGET_TOTAL = 100.0
SPLIT_TOLERANCE = 1e-6

# ============================================================
# DISPLAY
# ============================================================
SCENARIOS = {
    "projected": "Projected",
    "valuation": "Valuation",
}

# Tier chart categories, in stacking order
TIER_CATEGORIES = {
    "lp_pref": "LP Pref",
    "lp_profit_share": "LP Profit Share",
    "gp_catch_up": "GP Catch-up",
    "gp_profit_share": "GP Profit Share",
    "gp_mgmt_fee": "GP Mgmt Fee",
}

TIER_COLORS = {
    "lp_pref": "#60a5fa",
    "lp_profit_share": "#4ade80",
    "gp_catch_up": "#facc15",
    "gp_profit_share": "#fb923c",
    "gp_mgmt_fee": "#c084fc",
}

CLR_PROJECTED = "#3b82f6"
CLR_VALUATION = "#16a34a"
