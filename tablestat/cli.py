"""Command-line interface for tablestat."""

import argparse
import json
import logging
import math
import sys
from typing import Any

from tablestat import __version__
from tablestat.config import get_settings


def _json_safe(value: Any) -> Any:
    """Replace NaN and infinities with None so the output is strict JSON."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


def _build_request(args: argparse.Namespace) -> dict:
    if args.request:
        return json.loads(args.request)

    request: dict = {"operation": args.op}
    for name in ("column", "column2", "columns", "stat", "double_stat", "p", "multiplier",
                 "grouping", "column_names"):
        value = getattr(args, name)
        if value is not None:
            request[name] = value
    if args.as_percentage:
        request["as_percentage"] = True
    return request


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="tablestat",
        description="Descriptive statistics and cross-table analysis for CSV data",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("path", help="CSV file to analyse ('-' for stdin)")
    parser.add_argument(
        "--op",
        default="describe",
        help="Operation to run (default: describe)",
    )
    parser.add_argument(
        "--request",
        help="Full request as JSON (overrides --op and the other request options)",
    )
    parser.add_argument("--column", help="Primary column")
    parser.add_argument("--column2", help="Second column")
    parser.add_argument("--columns", nargs="+", help="Columns for describe")
    parser.add_argument("--stat", help="Statistic for single_stat (e.g. mean)")
    parser.add_argument("--double-stat", dest="double_stat", help="correlation or covariance")
    parser.add_argument("--p", type=float, help="Quantile step")
    parser.add_argument("--multiplier", type=float, help="IQR multiplier for fences")
    parser.add_argument(
        "--as-percentage",
        action="store_true",
        help="Report one-way table entries as percentages",
    )
    parser.add_argument(
        "--grouping",
        nargs="+",
        help="Space-delimited value groups for cross_table (quote each group)",
    )
    parser.add_argument(
        "--column-names",
        dest="column_names",
        nargs="+",
        help="Names for the cross_table groups",
    )
    parser.add_argument(
        "--types",
        help="Comma-separated column types (numeric, character, boolean); inferred if omitted",
    )
    parser.add_argument("--sep", default=",", help="Field delimiter (default: ',')")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: from TABLESTAT_LOG_LEVEL or WARNING)",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=(args.log_level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from tablestat.core.table import Table
    from tablestat.tools.runner import run_request

    types = [t.strip() for t in args.types.split(",")] if args.types else None
    source = sys.stdin if args.path == "-" else args.path

    try:
        table = Table.read_csv(source, types, sep=args.sep)
    except (OSError, ValueError) as e:
        print(f"Error: could not read {args.path}: {e}", file=sys.stderr)
        return 1

    if table.size == 0:
        print(f"Error: no table could be loaded from {args.path}", file=sys.stderr)
        return 1

    try:
        request = _build_request(args)
    except json.JSONDecodeError as e:
        print(f"Error: --request is not valid JSON: {e}", file=sys.stderr)
        return 1

    result = run_request(table, request)
    print(json.dumps(_json_safe(result.to_dict()), indent=2, default=str, allow_nan=False))

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
