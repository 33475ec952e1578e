from __future__ import annotations

from typing import Any, Dict, List, Tuple
import os
import io
import json
import yaml


def _parse_yaml_fallback(text: str) -> Dict[str, Any]:
    """
    Super-tolerant parser for top-level key: value lines (only for emergencies).
    Numbers are coerced when obvious. Transactions cannot be recovered this way.
    """
    data: Dict[str, Any] = {}
    for raw in text.splitlines():
        if raw[:1].isspace():
            continue
        line = raw.strip()
        if not line or line.startswith("#") or line.startswith("-"):
            continue
        if ":" not in line:
            continue
        k, v = line.split(":", 1)
        k = k.strip()
        v = v.strip().strip('"').strip("'")
        if not v:
            continue
        try:
            data[k] = float(v) if "." in v else int(v)
        except ValueError:
            data[k] = v
    return data


# Grouped sections flattened into the position record. Aliases cover the
# camelCase names used by the portal exports.
_GROUPS = ("position", "valuation")
_KEY_ALIASES = {
    "endingValue": "ending_value",
    "currentValue": "ending_value",
    "current_value": "ending_value",
    "asOfDate": "as_of",
    "as_of_date": "as_of",
}
_VALUATION_ALIASES = {
    "amount": "ending_value",
    "value": "ending_value",
    "valuationAmount": "ending_value",
    "date": "as_of",
    "valuationDate": "as_of",
}


def _flatten_grouped(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """
    Flatten {'position': {...}, 'valuation': {...}} into one level.
    Prefers top-level keys if collisions occur.
    """
    flat: Dict[str, Any] = {}
    for k, v in cfg.items():
        if k not in _GROUPS:
            flat[_KEY_ALIASES.get(k, k)] = v
    for group in _GROUPS:
        section = cfg.get(group)
        if not isinstance(section, dict):
            continue
        for sk, sv in section.items():
            key = _KEY_ALIASES.get(sk, sk)
            if group == "valuation":
                key = _VALUATION_ALIASES.get(key, key)
            flat.setdefault(key, sv)
    return flat


def _split_position_and_transactions(d: Dict[str, Any]) -> Tuple[Dict[str, Any], List[Any]]:
    txs = d.pop("transactions", None)
    if not isinstance(txs, list):
        txs = []
    return d, txs


def load_text(source: str | os.PathLike | io.StringIO) -> Tuple[str, str]:
    """Return (text, suffix) from a path or text stream."""
    if hasattr(source, "read"):
        return str(source.read()), ""
    p = os.fspath(source)
    with open(p, "r", encoding="utf-8") as f:
        return f.read(), os.path.splitext(p)[1].lower()


def parse_ledger_text(text: str, suffix: str = "") -> Dict[str, Any]:
    """YAML (or JSON, which YAML also reads) to a dict; tolerant fallback on YAML errors."""
    if suffix == ".json":
        data = json.loads(text or "{}")
        return data if isinstance(data, dict) else {}
    try:
        data = yaml.safe_load(text) or {}
        if isinstance(data, list):
            # a bare list of rows is a ledger without position metadata
            data = {"transactions": data}
        if not isinstance(data, dict):
            data = {}
    except yaml.YAMLError:
        data = _parse_yaml_fallback(text)
    return data


def load_ledger_dict(source: str | os.PathLike | io.StringIO) -> Dict[str, Any]:
    """Flattened ledger document (position and valuation keys at the top level)."""
    text, suffix = load_text(source)
    return _flatten_grouped(parse_ledger_text(text, suffix))


def load_ledger_config(
    source: str | os.PathLike | io.StringIO,
) -> Tuple[Dict[str, Any], List[Any]]:
    """
    Load a position ledger from a path or text stream.
    Returns (position, transactions): flat position/valuation record and raw rows.
    """
    return _split_position_and_transactions(load_ledger_dict(source))
