from typing import Any, Dict, Optional, Type
import logging

from .base import InsightEngineBase

log = logging.getLogger("insights.registry")

_REGISTRY: Dict[str, Type[InsightEngineBase]] = {}


def register(name: str, engine_cls):
    _REGISTRY[name] = engine_cls
    return engine_cls


def get_engine(name: Optional[str], config: Optional[Dict[str, Any]] = None) -> InsightEngineBase:
    name = (name or "general").strip().lower()
    cls = _REGISTRY.get(name)
    if cls:
        return cls(config)
    log.info("No insight engine for category %r, using general", name)
    cls = _REGISTRY.get("general")
    if cls:
        return cls(config)
    raise KeyError("No insight engine registered")


def registered() -> Dict[str, Type[InsightEngineBase]]:
    return dict(_REGISTRY)


from .general import GeneralInsightEngine
from .retail import RetailInsightEngine
from .finance import FinanceInsightEngine
from .healthcare import HealthcareInsightEngine
from .education import EducationInsightEngine
from .manufacturing import ManufacturingInsightEngine

register("general", GeneralInsightEngine)
register("retail", RetailInsightEngine)
register("finance", FinanceInsightEngine)
register("healthcare", HealthcareInsightEngine)
register("education", EducationInsightEngine)
register("manufacturing", ManufacturingInsightEngine)
register("technology", ManufacturingInsightEngine)
