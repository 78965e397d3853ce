from __future__ import annotations

"""
Configuration Domain Management.

Defines the dict-based analysis configuration, its defaults, JSON loading,
and the typed build-configuration view consumed by the pipeline.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from deadregions.domain.directive_models import SymbolState
from deadregions.infra.fs import expand_source_patterns

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
DEFAULT_CONFIGURATION_NAME = "default"

# Accepted spellings of a forced symbol state
SYMBOL_STATE_ALIASES: Dict[str, SymbolState] = {
    "enabled": SymbolState.ALWAYS_ENABLED,
    "always_enabled": SymbolState.ALWAYS_ENABLED,
    "defined": SymbolState.ALWAYS_ENABLED,
    "true": SymbolState.ALWAYS_ENABLED,
    "on": SymbolState.ALWAYS_ENABLED,
    "disabled": SymbolState.ALWAYS_DISABLED,
    "always_disabled": SymbolState.ALWAYS_DISABLED,
    "undefined": SymbolState.ALWAYS_DISABLED,
    "false": SymbolState.ALWAYS_DISABLED,
    "off": SymbolState.ALWAYS_DISABLED,
    "varying": SymbolState.VARYING,
    "varies": SymbolState.VARYING,
}


@dataclass(frozen=True)
class BuildConfiguration:
    """
    One build variant to analyse.

    Attributes:
        name: Label used in logs.
        symbol_states: Forced state per symbol; unlisted symbols are disabled.
        sources: Absolute paths of the documents compiled by this variant.
    """
    name: str
    symbol_states: Dict[str, SymbolState] = field(default_factory=dict)
    sources: Tuple[str, ...] = ()


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default analysis configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Documents
        "sources": [],
        "base_dir": "",

        # Single-configuration symbol table
        "defined_symbols": [],
        "undefined_symbols": [],
        "varying_symbols": [],

        # Symbols never treated as dead, in any configuration
        "ignored_symbols": [],

        # Multiple build configurations (overrides the symbol lists above)
        "configurations": [],

        # Output
        "edit": False,
        "patch": False,
        "print_enabled": False,
        "print_disabled": False,
        "print_varying": False,

        # Execution
        "max_workers": None,
    }


def parse_symbol_state(value: Any) -> SymbolState:
    """
    Convert a configured state spelling into a SymbolState.

    Raises:
        ValueError: If the spelling is not recognised.
    """
    if isinstance(value, SymbolState):
        return value
    if isinstance(value, bool):
        return SymbolState.ALWAYS_ENABLED if value else SymbolState.ALWAYS_DISABLED
    key = str(value).strip().lower()
    if key not in SYMBOL_STATE_ALIASES:
        raise ValueError(f"Unknown symbol state '{value}'.")
    return SYMBOL_STATE_ALIASES[key]


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config_file(path: str) -> Dict[str, Any]:
    """
    Load an analysis configuration from a JSON file.

    Relative source patterns are resolved against the file's directory
    unless the file sets 'base_dir' itself.

    Args:
        path: Path to the JSON configuration file.

    Returns:
        Dict[str, Any]: The raw (unvalidated) configuration.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not a JSON object.
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration '{path}': {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Configuration '{path}' must contain a JSON object.")

    data.setdefault("base_dir", os.path.dirname(os.path.abspath(path)))
    logger.debug(f"Loaded configuration from {path}")
    return data


# -----------------------------------------------------------------------------
# Typed View
# -----------------------------------------------------------------------------
def build_configurations(cfg: Dict[str, Any]) -> List[BuildConfiguration]:
    """
    Turn a validated configuration into typed build configurations.

    Without an explicit 'configurations' list, a single configuration is
    derived from 'defined_symbols', 'undefined_symbols' and 'varying_symbols'.
    Source patterns are expanded relative to 'base_dir'.

    Args:
        cfg: Configuration returned by validate_config().

    Returns:
        List[BuildConfiguration]: At least one configuration.
    """
    base_dir = cfg["base_dir"]
    default_sources = tuple(expand_source_patterns(cfg["sources"], base_dir))

    if not cfg["configurations"]:
        states: Dict[str, SymbolState] = {}
        for name in cfg["undefined_symbols"]:
            states[name] = SymbolState.ALWAYS_DISABLED
        for name in cfg["defined_symbols"]:
            states[name] = SymbolState.ALWAYS_ENABLED
        for name in cfg["varying_symbols"]:
            states[name] = SymbolState.VARYING
        return [BuildConfiguration(DEFAULT_CONFIGURATION_NAME, states, default_sources)]

    configurations: List[BuildConfiguration] = []
    for entry in cfg["configurations"]:
        if entry["sources"]:
            sources = tuple(expand_source_patterns(entry["sources"], base_dir))
        else:
            sources = default_sources
        configurations.append(BuildConfiguration(entry["name"], dict(entry["symbols"]), sources))
    return configurations
