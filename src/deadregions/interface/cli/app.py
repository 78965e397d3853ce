from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, merging of the optional
JSON configuration file with command-line overrides, analysis execution and
result rendering (region listings, summary, JSON or unified diff).
"""

import json
import sys
from typing import Any, Dict, List, Optional

from deadregions.core.pipeline.engine import run_analysis
from deadregions.core.pipeline.validator import validate_config
from deadregions.domain.config import get_default_config, load_config_file
from deadregions.domain.directive_models import SymbolState
from deadregions.domain.pipeline_models import AnalysisResult
from deadregions.infra.logging import LoggingConfig, configure_logging, get_logger
from deadregions.interface.cli import args as cli_args

logger = get_logger(__name__)

# Option lists given on the command line extend those of the configuration file
_ACCUMULATED_KEYS = ["defined_symbols", "undefined_symbols", "varying_symbols", "ignored_symbols"]

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: 0 on success, 1 on analysis failure, 2 on configuration
        errors, 130 when interrupted.
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    log_level = "DEBUG" if args.debug else "INFO"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=args.log_file))

    logger.debug("CLI execution initiated. Resolving configuration...")

    # 1. Base configuration (defaults or JSON file)
    if args.config_file:
        try:
            base_conf = load_config_file(args.config_file)
        except (OSError, ValueError) as e:
            logger.error(f"Cannot load configuration: {e}")
            print(f"ERROR: {e}", file=sys.stderr)
            return 2
    else:
        base_conf = get_default_config()

    # 2. Command-line overrides
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))

    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(_jsonable_config(clean_conf), ensure_ascii=False, indent=2))
        return 0

    has_sources = clean_conf["sources"] or any(c["sources"] for c in clean_conf["configurations"])
    if not has_sources:
        msg = "No source files given."
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 2

    # 3. Analysis
    try:
        result = run_analysis(clean_conf)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return 130

    # 4. Rendering
    if args.json_output:
        print(json.dumps(_result_to_json(result), ensure_ascii=False, indent=2))
    elif clean_conf["patch"]:
        sys.stdout.write(result.patch)
    else:
        _print_human_summary(result, clean_conf)

    return 0 if result.ok else 1


# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge command-line overrides into the base configuration.

    Symbol lists are concatenated; every other key is replaced.
    """
    out = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if key in _ACCUMULATED_KEYS and isinstance(out.get(key), list):
            out[key] = list(out[key]) + list(value)
        else:
            out[key] = value
    return out


def _jsonable_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(cfg)
    out["configurations"] = [
        {**c, "symbols": {k: v.value for k, v in c["symbols"].items()}}
        for c in cfg["configurations"]
    ]
    return out


# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _print_human_summary(result: AnalysisResult, cfg: Dict[str, Any]) -> None:
    """
    Print the requested region listings followed by the summary.

    Args:
        result: The analysis result to render.
        cfg: Validated configuration (print flags).
    """
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    wanted = {
        SymbolState.ALWAYS_DISABLED: cfg["print_disabled"],
        SymbolState.ALWAYS_ENABLED: cfg["print_enabled"],
        SymbolState.VARYING: cfg["print_varying"],
    }
    for info in result.documents:
        for region in info.regions():
            if wanted.get(region.state):
                print(f"{info.path}{region}")

    for line in format_summary(result):
        print(line)

    for error in result.errors:
        print(f"ERROR: {error.path}: {error.error}", file=sys.stderr)

    if result.modified_files:
        print(f"\nRemoved unnecessary regions from {len(result.modified_files)} file(s).")


def format_summary(result: AnalysisResult) -> List[str]:
    """
    Build the summary block of a run.

    The 'always' qualifier is only meaningful when several configurations
    were intersected.
    """
    counts = result.counts
    lines = [""]

    if counts.total == 0:
        lines.append("Did not find any conditional regions.")

    lines.append("Found")
    lines.append(f"  {counts.total:5} conditional regions total")

    always = "always " if len(result.configuration_names) > 1 else ""

    if counts.disabled > 0:
        lines.append(f"  {counts.disabled:5} {always}disabled")
    if counts.enabled > 0:
        lines.append(f"  {counts.enabled:5} {always}enabled")
    if counts.varying > 0:
        lines.append(f"  {counts.varying:5} varying")
        lines.append(f"    {counts.varying - counts.explicitly_varying:5} due to real varying symbols")
        lines.append(f"    {counts.explicitly_varying:5} due to ignored symbols")

    return lines


def _result_to_json(result: AnalysisResult) -> Dict[str, Any]:
    documents = []
    for info in result.documents:
        regions = []
        for region in info.regions():
            regions.append({
                "start_line": region.start.line + 1,
                "end_line": region.end.line + 1,
                "start": region.span_start,
                "end": region.span_end,
                "directive": region.start.text.strip(),
                "state": region.state.value if region.state else None,
                "explicitly_varies": region.explicitly_varies,
            })
        documents.append({"path": info.path, "regions": regions})

    return {
        "ok": result.ok,
        "error": result.error,
        "cancelled": result.cancelled,
        "configurations": result.configuration_names,
        "counts": result.counts.as_dict(),
        "documents": documents,
        "errors": [{"path": e.path, "error": e.error} for e in result.errors],
        "modified_files": result.modified_files,
        "summary": result.summary,
    }


# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
