from .base import InsightReport, InsightEngineBase
from .registry import get_engine, register

__all__ = ["InsightReport", "InsightEngineBase", "get_engine", "register"]
