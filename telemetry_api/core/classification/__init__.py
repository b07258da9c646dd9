"""Classification layer - Reglas de enrutamiento por topic."""

from .topic_classifier import (
    ClassifierConfig,
    TopicClassifier,
    extract_voltage,
    node_id_from_topic,
)

__all__ = [
    "ClassifierConfig",
    "TopicClassifier",
    "extract_voltage",
    "node_id_from_topic",
]
