"""Centralized configuration for repograph."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LayoutConfig:
    """Spacing constants for the layout engine and the default sizing policy."""

    node_separation: float = 80
    rank_separation: float = 100
    edge_separation: float = 30
    margin_x: float = 50
    margin_y: float = 50

    # Caller-side sizing policy (see repograph.sizing)
    base_node_width: float = 280
    base_node_height: float = 100
    extra_height: float = 30
    file_count_threshold: int = 5

    # Crossing reduction
    ordering: str = "barycenter"
    max_ordering_passes: int = 24


DEFAULT_CONFIG = LayoutConfig()
