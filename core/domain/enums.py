from __future__ import annotations

from enum import Enum


class RelationshipType(str, Enum):
    FINISH_TO_START = "FS"
    START_TO_START = "SS"
    FINISH_TO_FINISH = "FF"
    START_TO_FINISH = "SF"

    @classmethod
    def parse(cls, value: object) -> "RelationshipType":
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().upper()
        for member in cls:
            if member.value == normalized:
                return member
        return cls.FINISH_TO_START


class CriticalityMode(str, Enum):
    LONGEST_PATH = "longestPath"
    FLOAT_BASED = "floatBased"

    @classmethod
    def parse(cls, value: object) -> "CriticalityMode":
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower()
        if normalized in {"floatbased", "float_based", "float"}:
            return cls.FLOAT_BASED
        return cls.LONGEST_PATH


class TraceDirection(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"

    @classmethod
    def parse(cls, value: object) -> "TraceDirection":
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower()
        return cls.FORWARD if normalized == "forward" else cls.BACKWARD


__all__ = ["RelationshipType", "CriticalityMode", "TraceDirection"]
