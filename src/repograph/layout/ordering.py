"""Crossing-reduction strategies.

A strategy turns the positions of a node's neighbours in the reference rank
into a sort weight. The engine picks one by name from ``LayoutConfig.ordering``.
"""

from __future__ import annotations

from typing import Protocol

from repograph.errors import LayoutError


class OrderingStrategy(Protocol):
    """Protocol that all crossing-reduction heuristics must implement."""

    name: str

    def weight(self, positions: list[float]) -> float:
        """Sort weight for a node whose neighbours sit at ``positions`` (never empty)."""
        ...


class Barycenter:
    name = "barycenter"

    def weight(self, positions: list[float]) -> float:
        return sum(positions) / len(positions)


class Median:
    """Median heuristic; even counts are interpolated towards the denser side."""

    name = "median"

    def weight(self, positions: list[float]) -> float:
        ordered = sorted(positions)
        count = len(ordered)
        mid = count // 2
        if count % 2 == 1:
            return ordered[mid]
        if count == 2:
            return (ordered[0] + ordered[1]) / 2
        left = ordered[mid - 1] - ordered[0]
        right = ordered[-1] - ordered[mid]
        if left + right == 0:
            return (ordered[mid - 1] + ordered[mid]) / 2
        return (ordered[mid - 1] * right + ordered[mid] * left) / (left + right)


_STRATEGIES: dict[str, type[OrderingStrategy]] = {
    Barycenter.name: Barycenter,
    Median.name: Median,
}


def available_strategies() -> list[str]:
    return sorted(_STRATEGIES)


def get_strategy(name: str) -> OrderingStrategy:
    """Instantiate the strategy registered under ``name``."""
    strategy_cls = _STRATEGIES.get(name)
    if strategy_cls is None:
        raise LayoutError(f"unknown ordering strategy {name!r}; use one of {', '.join(available_strategies())}")
    return strategy_cls()
