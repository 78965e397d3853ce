from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures for configuration dictionaries and in-memory analysis.
"""

import os
import sys
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from deadregions.core.pipeline.stages.worker import analyze_text  # noqa: E402
from deadregions.domain.directive_models import (  # noqa: E402
    DocumentConditionalRegionInfo,
    SymbolState,
)

# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def mock_config_dict() -> Dict[str, Any]:
    """
    Return a valid, complete configuration dictionary for testing.

    Reflects the structure defined in 'deadregions.domain.config'.
    """
    return {
        # Documents
        "sources": ["src/*.cs"],
        "base_dir": "/tmp/project",

        # Symbol table
        "defined_symbols": ["DEBUG"],
        "undefined_symbols": ["TRACE"],
        "varying_symbols": ["FEATURE"],
        "ignored_symbols": [],
        "configurations": [],

        # Output
        "edit": False,
        "patch": False,
        "print_enabled": False,
        "print_disabled": False,
        "print_varying": False,

        # Execution
        "max_workers": 2,
    }


@pytest.fixture
def analyze() -> Callable[..., DocumentConditionalRegionInfo]:
    """
    Return a helper analysing in-memory text.

    Symbol states are given as plain strings ('enabled', 'disabled', 'varying').
    """
    def _analyze(
            text: str,
            symbols: Optional[Mapping[str, str]] = None,
            ignored: Iterable[str] = (),
            path: str = "doc.cs",
    ) -> DocumentConditionalRegionInfo:
        states = {name: SymbolState(value) for name, value in (symbols or {}).items()}
        return analyze_text(text, path, path, states, frozenset(ignored))

    return _analyze
