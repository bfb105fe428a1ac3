from dataclasses import dataclass, asdict, field, fields
from pathlib import Path
from typing import Any, Dict, Optional
import json
import logging
import time

import yaml

from .constants import DEFAULT_CONFIG
from .cleaner import clean_records
from .errors import ConfigError, InvalidInputError
from .profiler import numeric_overview, profile
from .schema import infer_schema
from .utils import to_jsonable
from .validator import validate_records
from insights.registry import get_engine

log = logging.getLogger("pipeline")


@dataclass
class PipelineConfig:
    async_row_threshold: int = DEFAULT_CONFIG["async_row_threshold"]
    preview_rows: int = DEFAULT_CONFIG["preview_rows"]
    top_n: int = DEFAULT_CONFIG["top_n"]
    top_values: int = DEFAULT_CONFIG["top_values"]
    type_threshold: float = DEFAULT_CONFIG["type_threshold"]
    date_sample_size: int = DEFAULT_CONFIG["date_sample_size"]
    date_sample_hits: int = DEFAULT_CONFIG["date_sample_hits"]
    excel_serial_min: float = DEFAULT_CONFIG["excel_serial_min"]
    excel_serial_max: float = DEFAULT_CONFIG["excel_serial_max"]
    dynamic_breakdown_min_unique: int = DEFAULT_CONFIG["dynamic_breakdown_min_unique"]
    dynamic_breakdown_max_unique: int = DEFAULT_CONFIG["dynamic_breakdown_max_unique"]
    min_forecast_points: int = DEFAULT_CONFIG["min_forecast_points"]
    max_outliers: int = DEFAULT_CONFIG["max_outliers"]
    heartbeat_seconds: float = DEFAULT_CONFIG["heartbeat_seconds"]
    logging: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_CONFIG["logging"]))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {unknown}")
        return cls(**data)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config(config_path: Optional[str]) -> PipelineConfig:
    """Merge a YAML or JSON file over the defaults."""
    if not config_path:
        return PipelineConfig()

    p = Path(config_path)
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    text = p.read_text(encoding="utf-8", errors="ignore")
    if p.suffix.lower() in (".yaml", ".yml"):
        user_cfg = yaml.safe_load(text) or {}
    elif p.suffix.lower() == ".json":
        user_cfg = json.loads(text)
    else:
        raise ConfigError("Config must be .yaml/.yml or .json")
    if not isinstance(user_cfg, dict):
        raise ConfigError("Config file must hold a mapping")

    return PipelineConfig.from_dict(_deep_merge(DEFAULT_CONFIG, user_cfg))


def _prepare(records: Any, category: str, cfg: PipelineConfig):
    opts = cfg.as_dict()
    rows, warnings, errors = validate_records(records, opts)
    if errors:
        raise InvalidInputError("; ".join(errors))
    table = clean_records(rows, opts)
    log.info("Cleaned %d rows into %d columns (category=%s)", len(rows), len(table.columns), category)
    return rows, table, warnings, opts


def run_pipeline(records: Any, category: str = "general", cfg: Optional[PipelineConfig] = None) -> Dict[str, Any]:
    """Full analysis: schema, per-column stats, category insights and forecast."""
    cfg = cfg or PipelineConfig()
    start = time.time()
    log.info("Starting analysis...")
    rows, table, warnings, opts = _prepare(records, category, cfg)

    schema = infer_schema(table)
    log.debug("Schema inferred: %s", schema)
    stats = profile(table, opts)

    engine = get_engine(category, opts)
    report = engine.compute(table)

    result: Dict[str, Any] = {
        "meta": {
            "recordCount": {"raw": len(rows), "cleaned": table.row_count},
            "schema": schema,
            "category": engine.category,
            "roles": report.roles,
            "warnings": warnings,
            "elapsed_seconds": round(time.time() - start, 3),
        },
        "stats": stats,
        "insights": report.to_dict(),
    }
    if report.forecast is not None:
        result["prediction"] = report.forecast.to_dict()
    return to_jsonable(result)


def analyze_file(records: Any, category: str = "general", cfg: Optional[PipelineConfig] = None) -> Dict[str, Any]:
    """Per-file entry point returning ``{summary, insights}``."""
    cfg = cfg or PipelineConfig()
    _, table, _, opts = _prepare(records, category, cfg)
    report = get_engine(category, opts).compute(table)
    return to_jsonable({"summary": numeric_overview(table), "insights": report.to_dict()})
