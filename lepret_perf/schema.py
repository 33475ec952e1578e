from __future__ import annotations
from typing import Dict, Any

DEFAULT_CURRENCY = "COP"

TRANSACTION_TYPES = frozenset({"contribution", "distribution", "interest", "fee"})
TRANSACTION_STATUS = frozenset({"pending", "processing", "settled", "cancelled", "scheduled"})

# Ledger row schema: type, requirement and description per field.
TRANSACTION_SCHEMA: Dict[str, Dict[str, Any]] = {
    "id":          {"type": "str",   "required": False, "desc": "Ledger row identifier"},
    "type":        {"type": "enum",  "required": True,  "choices": sorted(TRANSACTION_TYPES), "desc": "Cash event kind"},
    "amount":      {"type": "float", "required": True,  "min": 0.0, "desc": "Magnitude in the position currency; sign comes from type"},
    "currency":    {"type": "str",   "required": False, "default": DEFAULT_CURRENCY, "desc": "ISO currency code"},
    "date":        {"type": "date",  "required": True,  "desc": "Value date (ISO-8601)"},
    "description": {"type": "str",   "required": False, "desc": "Free text shown on statements"},
    "status":      {"type": "enum",  "required": False, "choices": sorted(TRANSACTION_STATUS), "desc": "Settlement status"},
    "position_id": {"type": "str",   "required": False, "desc": "Owning position"},
    "positionId":  {"type": "str",   "required": False, "desc": "Owning position (camelCase export)"},
}

# Position / valuation keys accepted at the top level of a ledger file
# (after grouped sections are flattened).
POSITION_SCHEMA: Dict[str, Dict[str, Any]] = {
    "id":           {"type": "str",   "desc": "Position identifier"},
    "name":         {"type": "str",   "desc": "Display name"},
    "strategy":     {"type": "str",   "desc": "Factoring, Credito, Supply Chain, ..."},
    "currency":     {"type": "str",   "default": DEFAULT_CURRENCY, "desc": "Reporting currency of the position"},
    "ending_value": {"type": "float", "desc": "Current value folded into IRR/TWR"},
    "as_of":        {"type": "date",  "desc": "Valuation date of ending_value (default: now)"},
}

LEDGER_TOP_LEVEL_KEYS = frozenset({"position", "valuation", "transactions"}) | frozenset(POSITION_SCHEMA)
