"""Pipeline layer - Orquestación por mensaje."""

from .ingestion import IngestionPipeline

__all__ = ["IngestionPipeline"]
