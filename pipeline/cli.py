from pathlib import Path
from typing import Any, Dict, List
import json
import logging
import sys

import pandas as pd

from .constants import CATEGORIES
from .pipeline import load_config, run_pipeline


def _parse_args(argv=None) -> Dict[str, Any]:
    import argparse

    p = argparse.ArgumentParser(description="Tabular business data insights")
    p.add_argument("--input", type=str, required=True, help="CSV, JSON/JSONL or Excel file")
    p.add_argument("--category", type=str, default="general", help="|".join(CATEGORIES))
    p.add_argument("--config", type=str, default=None, help="Path to config.yaml or config.json")
    p.add_argument("--output", type=str, default=None, help="Write the report here instead of stdout")
    return vars(p.parse_args(argv))


def read_records(path: str) -> List[Dict[str, Any]]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    ext = p.suffix.lower()
    if ext in (".csv", ".tsv", ".txt"):
        df = pd.read_csv(p, sep=None, engine="python")
    elif ext == ".jsonl":
        df = pd.read_json(p, lines=True)
    elif ext == ".json":
        df = pd.read_json(p)
    elif ext in (".xlsx", ".xls"):
        df = pd.read_excel(p)
    else:
        raise ValueError(f"Unsupported input type: {ext}")
    # NaN cells become None so the cleaner sees them as missing
    return df.astype(object).where(df.notna(), None).to_dict("records")


def main(argv=None) -> None:
    args = _parse_args(argv)
    cfg = load_config(args.get("config"))

    level = (cfg.logging.get("level") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )

    records = read_records(args["input"])
    report = run_pipeline(records, args.get("category"), cfg)
    text = json.dumps(report, indent=2, ensure_ascii=False)
    if args.get("output"):
        Path(args["output"]).write_text(text, encoding="utf-8")
        logging.getLogger("pipeline.cli").info("Report written to %s", args["output"])
    else:
        sys.stdout.write(text + "\n")


if __name__ == "__main__":
    main()
