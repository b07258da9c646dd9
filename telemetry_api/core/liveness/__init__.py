"""Liveness layer - Estado del broker y del nodo crítico."""

from .tracker import LivenessTracker

__all__ = ["LivenessTracker"]
