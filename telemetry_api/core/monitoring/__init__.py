"""Monitoring layer - Métricas y observabilidad."""

from .stats import Stats, WriteStats

__all__ = ["Stats", "WriteStats"]
