"""
Feature transforms applied by the composer.

Each feature is a function ``(graph, config) -> graph`` that creates its
constructs in ``graph.scope`` and registers them. Gated features return the
graph unchanged when their configuration flag is off.
"""
from typing import Tuple

from . import budget, compute, guardrails, identity, monitoring, network, scheduling, secrets, spot
from .base import Feature, LogicalIds, logical_ids

FEATURE_PIPELINE: Tuple[Tuple[str, Feature], ...] = (
    (network.FEATURE, network.apply),
    (identity.FEATURE, identity.apply),
    (secrets.FEATURE, secrets.apply),
    (guardrails.FEATURE, guardrails.apply),
    (compute.FEATURE, compute.apply),
    (monitoring.FEATURE, monitoring.apply),
    (budget.FEATURE, budget.apply),
    (scheduling.FEATURE, scheduling.apply),
    (spot.FEATURE, spot.apply),
)

__all__ = ["FEATURE_PIPELINE", "Feature", "LogicalIds", "logical_ids"]
