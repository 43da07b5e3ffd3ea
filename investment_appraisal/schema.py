from __future__ import annotations
from typing import Dict, Any

# Input schema: units, type, lower bound, and description.
# "exclusive_min": True means the value must be strictly greater than "min".
SCHEMA: Dict[str, Dict[str, Any]] = {
    "initial_investment":  {"unit": "currency", "type": "float", "min": 0.0, "exclusive_min": True,  "desc": "Up-front outflow at period 0"},
    "discount_rate":       {"unit": "fraction", "type": "float", "min": 0.0, "exclusive_min": False, "desc": "Rate used to discount period cash flows"},
    "project_duration":    {"unit": "periods",  "type": "int",   "min": 0,   "exclusive_min": True,  "desc": "Number of modelled periods"},
    "annual_cash_inflow":  {"unit": "currency", "type": "float", "min": 0.0, "exclusive_min": True,  "desc": "Flat inflow received every period"},
    "annual_cash_outflow": {"unit": "currency", "type": "float", "min": 0.0, "exclusive_min": False, "desc": "Recurring operating outflow per period"},
}

# Top-level keys accepted in a request file (strict mode rejects anything else).
REQUEST_KEYS = frozenset({
    "project_title",
    "capex",
    "opex",
    "start_year",
    "end_year",
    "business_case_type",
    "initial_investment",
    "discount_rate",
    "project_duration",
    "annual_cash_inflow",
    "annual_cash_outflow",
    "yearly_breakdown",
})
