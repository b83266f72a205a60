"""Shared type definitions for repograph.

Enums and small types used across the graph IR, layout engine, and CLI.
"""

from __future__ import annotations

from enum import Enum

from repograph.errors import InvalidDirectionError


class LayoutDirection(Enum):
    TOP_TO_BOTTOM = "TB"  # ranks grow along y
    LEFT_TO_RIGHT = "LR"  # ranks grow along x

    @classmethod
    def default(cls) -> LayoutDirection:
        return cls.TOP_TO_BOTTOM

    @classmethod
    def parse(cls, value: object) -> LayoutDirection:
        """Resolve an enum member, its value ("TB"/"LR") or its name.

        ``None`` resolves to the default direction.
        """
        if value is None:
            return cls.default()
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper()
            for member in cls:
                if key in (member.value, member.name):
                    return member
        raise InvalidDirectionError(value)

    @property
    def is_horizontal(self) -> bool:
        return self is LayoutDirection.LEFT_TO_RIGHT
