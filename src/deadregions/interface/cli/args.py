from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the argparse namespace into
configuration overrides understood by validate_config().
"""

import argparse
from typing import Any, Dict, List, Optional

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the deadregions CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="deadregions",
        description=(
            "Find preprocessor conditional regions that are always enabled or always "
            "disabled across build configurations, and optionally remove them."
        ),
    )

    p.add_argument(
        "sources",
        nargs="*",
        metavar="SOURCES",
        help="Source files or glob patterns to analyse.",
    )
    p.add_argument(
        "-c", "--config",
        dest="config_file",
        default=None,
        help="JSON configuration file (symbols, sources, build configurations).",
    )

    # --- Symbol Table ---
    p.add_argument(
        "-D", "--define",
        dest="defined_symbols",
        action="append",
        metavar="SYMBOL",
        help="Symbol that is always defined. Repeatable; accepts comma-separated lists.",
    )
    p.add_argument(
        "-U", "--undefine",
        dest="undefined_symbols",
        action="append",
        metavar="SYMBOL",
        help="Symbol that is never defined. Repeatable.",
    )
    p.add_argument(
        "-V", "--varying",
        dest="varying_symbols",
        action="append",
        metavar="SYMBOL",
        help="Symbol whose definition varies between builds. Repeatable.",
    )
    p.add_argument(
        "--ignore",
        dest="ignored_symbols",
        action="append",
        metavar="SYMBOL",
        help="Symbol whose regions are never reported as dead. Repeatable.",
    )

    # --- Output Strategies ---
    mode = p.add_mutually_exclusive_group()
    mode.add_argument(
        "--edit",
        action="store_true",
        help="Remove unnecessary regions in place.",
    )
    mode.add_argument(
        "--patch",
        action="store_true",
        help="Print a unified diff of the removal instead of editing files.",
    )
    p.add_argument("--print-enabled", action="store_true", help="Print always enabled regions.")
    p.add_argument("--print-disabled", action="store_true", help="Print always disabled regions.")
    p.add_argument("--print-varying", action="store_true", help="Print varying regions.")
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the result as JSON.",
    )

    # --- Execution & Diagnostics ---
    p.add_argument(
        "--workers",
        dest="max_workers",
        type=int,
        default=None,
        help="Maximum number of worker threads.",
    )
    p.add_argument("--debug", action="store_true", help="Enable debug logging.")
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write logs to this rotating file.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the merged configuration as JSON and exit.",
    )

    return p


# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Map argparse results to a dictionary of configuration overrides.

    Only options given on the command line produce an override, so values
    from a configuration file are not clobbered by argparse defaults.

    Args:
        args: The parsed arguments.

    Returns:
        Dict[str, Any]: Configuration overrides.
    """
    overrides: Dict[str, Any] = {}

    if args.sources:
        overrides["sources"] = list(args.sources)

    for field in ("defined_symbols", "undefined_symbols", "varying_symbols", "ignored_symbols"):
        values = _split_repeated(getattr(args, field))
        if values:
            overrides[field] = values

    if args.edit:
        overrides["edit"] = True
    if args.patch:
        overrides["patch"] = True
    if args.print_enabled:
        overrides["print_enabled"] = True
    if args.print_disabled:
        overrides["print_disabled"] = True
    if args.print_varying:
        overrides["print_varying"] = True
    if args.max_workers is not None:
        overrides["max_workers"] = args.max_workers

    return overrides


# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_repeated(values: Optional[List[str]]) -> List[str]:
    """Flatten repeated options, each possibly a comma-separated list."""
    out: List[str] = []
    for value in values or []:
        out.extend(x.strip() for x in value.split(",") if x.strip())
    return out
