from core.domain.enums import CriticalityMode, RelationshipType, TraceDirection
from core.domain.task import Relationship, Task

__all__ = [
    "CriticalityMode",
    "RelationshipType",
    "TraceDirection",
    "Task",
    "Relationship",
]
