from __future__ import annotations

"""
Configuration Validation Service.

Gatekeeper between untrusted configuration sources (JSON files, CLI
overrides) and the analysis pipeline. Coerces types, normalises symbol-state
spellings and fills missing keys with domain defaults, collecting a warning
for every correction instead of failing (unless strict mode is requested).
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from deadregions.domain.config import get_default_config, parse_symbol_state
from deadregions.domain.directive_models import SymbolState

logger = logging.getLogger(__name__)

_STRING_FIELDS = ["base_dir"]
_LIST_FIELDS = [
    "sources", "defined_symbols", "undefined_symbols", "varying_symbols", "ignored_symbols",
]
_BOOL_FIELDS = ["edit", "patch", "print_enabled", "print_disabled", "print_varying"]


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize an analysis configuration.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raise on invalid values instead of coercing them.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and
        the list of warnings produced while normalizing it.

    Raises:
        TypeError: In strict mode, on a value of the wrong type.
        ValueError: In strict mode, on an unknown symbol state.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    unknown = sorted(set(config) - set(defaults))
    if unknown:
        warnings.append(f"Unknown configuration keys ignored: {', '.join(unknown)}.")

    merged: Dict[str, Any] = dict(defaults)
    merged.update({k: v for k, v in config.items() if k in defaults})

    for field in _STRING_FIELDS:
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)

    for field in _LIST_FIELDS:
        merged[field] = _as_list_str(merged.get(field), defaults[field], field, warnings, strict)

    for field in _BOOL_FIELDS:
        merged[field] = _as_bool(merged.get(field), defaults[field], field, warnings, strict)

    merged["max_workers"] = _as_workers(merged.get("max_workers"), warnings, strict)
    merged["configurations"] = _as_configurations(
        merged.get("configurations"), warnings, strict
    )

    _check_symbol_conflicts(merged, warnings)

    if merged["edit"] and merged["patch"]:
        warnings.append("Both 'edit' and 'patch' requested; files will not be modified.")
        merged["edit"] = False

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    if value is None:
        return fallback
    if isinstance(value, str):
        return value.strip()

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    """Ensure input is a list of stripped strings, accepting a CSV string."""
    if value is None:
        return list(fallback)

    if isinstance(value, str) and not strict:
        return [x.strip() for x in value.split(",") if x.strip()]

    if isinstance(value, (list, tuple)):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str):
                s = item.strip()
                if s:
                    out.append(s)
            else:
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise TypeError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)


def _as_workers(value: Any, warnings: List[str], strict: bool) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool) and value >= 1:
        return value

    msg = f"Invalid field 'max_workers': expected a positive int, received {value!r}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using the executor default.")
    return None


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: DOMAIN NORMALIZATION
# -----------------------------------------------------------------------------

def _as_configurations(value: Any, warnings: List[str], strict: bool) -> List[Dict[str, Any]]:
    """Normalize the 'configurations' list into {name, symbols, sources} entries."""
    if value is None:
        return []
    if not isinstance(value, list):
        msg = f"Invalid field 'configurations': expected list, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Ignored.")
        return []

    out: List[Dict[str, Any]] = []
    for i, entry in enumerate(value):
        if not isinstance(entry, dict):
            msg = f"Invalid item in 'configurations[{i}]': expected dict."
            if strict:
                raise TypeError(msg)
            warnings.append(f"{msg} Item discarded.")
            continue

        field = f"configurations[{i}]"
        name = _as_str(entry.get("name"), f"configuration{i + 1}", f"{field}.name", warnings, strict)
        sources = _as_list_str(entry.get("sources"), [], f"{field}.sources", warnings, strict)
        symbols = _as_symbol_states(entry.get("symbols"), field, warnings, strict)
        out.append({"name": name or f"configuration{i + 1}", "symbols": symbols, "sources": sources})

    return out


def _as_symbol_states(
        value: Any,
        field: str,
        warnings: List[str],
        strict: bool,
) -> Dict[str, SymbolState]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"Invalid field '{field}.symbols': expected dict, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Ignored.")
        return {}

    states: Dict[str, SymbolState] = {}
    for name, raw in value.items():
        try:
            states[str(name).strip()] = parse_symbol_state(raw)
        except ValueError as e:
            if strict:
                raise
            warnings.append(f"{field}.symbols.{name}: {e} Treated as varying.")
            states[str(name).strip()] = SymbolState.VARYING
    return states


def _check_symbol_conflicts(cfg: Dict[str, Any], warnings: List[str]) -> None:
    """A symbol listed as both defined and undefined cannot be decided: it varies."""
    conflicting = sorted(set(cfg["defined_symbols"]) & set(cfg["undefined_symbols"]))
    for name in conflicting:
        warnings.append(f"Symbol '{name}' is both defined and undefined; treated as varying.")
        if name not in cfg["varying_symbols"]:
            cfg["varying_symbols"].append(name)
