"""Grouped aggregation of a table column, computed partition by partition."""

from __future__ import annotations

import argparse
import json
import logging
import math
import operator
from pathlib import Path
from typing import Any

import pandas as pd

from partgraph.api import mapreducebykey, partition, reducebykey, scheme
from partgraph.runtime import SerialContext, ThreadPoolContext, compute

log = logging.getLogger("partgraph.cli.reduce_by_key")

_OPS = {
    "sum": (operator.add, 0),
    "min": (min, math.inf),
    "max": (max, -math.inf),
    "count": (operator.add, 0),
}


def _load_table(path: Path, fmt: str | None = None) -> pd.DataFrame:
    if fmt is None:
        suffix = path.suffix.lower()
        if suffix in {".parquet", ".pq"}:
            fmt = "parquet"
        elif suffix in {".json", ".jsonl"}:
            fmt = "json"
        else:
            fmt = "csv"
    if fmt == "parquet":
        return pd.read_parquet(path)
    if fmt == "json":
        return pd.read_json(path, lines=path.suffix.lower() == ".jsonl")
    return pd.read_csv(path)


def _count_one(row: tuple[Any, Any]) -> tuple[Any, int]:
    return row[0], 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Input table (csv/json/parquet)",
    )
    parser.add_argument(
        "--format",
        choices=["csv", "json", "parquet"],
        default=None,
    )
    parser.add_argument("--key", required=True, help="Grouping column")
    parser.add_argument(
        "--value",
        default=None,
        help="Value column (not needed for --op count)",
    )
    parser.add_argument("--op", choices=sorted(_OPS), default="sum")
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of partitions",
    )
    parser.add_argument(
        "--executor",
        choices=["serial", "threads"],
        default="serial",
    )
    parser.add_argument(
        "--out",
        type=Path,
        required=True,
        help="Output JSON path",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.op != "count" and args.value is None:
        parser.error("--value is required unless --op count")

    table = _load_table(args.input, args.format)
    columns = [args.key] if args.op == "count" else [args.key, args.value]
    missing = [col for col in columns if col not in table.columns]
    if missing:
        parser.error(f"Columns not found: {missing}")

    source = partition(table.loc[:, columns], scheme.cut(0))
    op, v0 = _OPS[args.op]
    if args.op == "count":
        node = mapreducebykey(_count_one, op, v0, source)
    else:
        node = reducebykey(op, v0, source)

    if args.executor == "threads":
        ctx = ThreadPoolContext(args.workers)
    else:
        ctx = SerialContext(args.workers)
    result = compute(ctx, node)
    log.info("reduce_by_key: %d keys over %d partitions", len(result), ctx.nworkers)

    payload: dict[str, Any] = {
        "op": args.op,
        "workers": ctx.nworkers,
        "result": {str(key): value for key, value in result.items()},
    }
    args.out.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
