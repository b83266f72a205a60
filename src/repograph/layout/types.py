"""Layout types shared across the layout phases and the flow operations."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    """A 2D point in canvas pixels."""

    x: float
    y: float


@dataclass
class LayoutNode:
    """A sized node. ``position``, ``rank`` and ``order`` are filled in by the engine."""

    id: str
    width: float
    height: float
    position: Point | None = None
    rank: int | None = None
    order: int | None = None

    @property
    def center(self) -> Point | None:
        if self.position is None:
            return None
        return Point(x=self.position.x + self.width / 2, y=self.position.y + self.height / 2)


@dataclass(frozen=True)
class LayoutEdge:
    """A directed edge between two node ids. Parallel edges are allowed."""

    source: str
    target: str


@dataclass(frozen=True, order=True)
class DummyNode:
    """Virtual node standing in for one rank crossed by a long edge."""

    edge: int
    step: int
