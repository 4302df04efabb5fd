from __future__ import annotations

import math
from datetime import date, datetime
from typing import Optional

from core.domain.enums import RelationshipType
from core.domain.task import Relationship, Task

_SECONDS_PER_DAY = 86_400.0


def day_number(value: Optional[date]) -> Optional[float]:
    """Days since the proleptic epoch; datetimes keep their fraction of a day."""
    if value is None:
        return None
    if isinstance(value, datetime):
        seconds = value.hour * 3600 + value.minute * 60 + value.second + value.microsecond / 1e6
        return value.toordinal() + seconds / _SECONDS_PER_DAY
    return float(value.toordinal())


def relationship_float_from_dates(
    relationship: Relationship,
    predecessor: Optional[Task],
    successor: Optional[Task],
) -> float:
    """
    Day offset between permissible and scheduled timing of the successor:
    - FS: succ start  - (pred finish + lag)
    - SS: succ start  - (pred start  + lag)
    - FF: succ finish - (pred finish + lag)
    - SF: succ finish - (pred start  + lag)
    Missing dates on either side give +inf.
    """
    if predecessor is None or successor is None:
        return math.inf

    pred_start = day_number(predecessor.start_date)
    pred_finish = day_number(predecessor.finish_date)
    succ_start = day_number(successor.start_date)
    succ_finish = day_number(successor.finish_date)
    if None in (pred_start, pred_finish, succ_start, succ_finish):
        return math.inf

    lag = float(relationship.lag_days or 0.0)
    if not math.isfinite(lag):
        lag = 0.0
    rel_type = RelationshipType.parse(relationship.relationship_type)

    if rel_type == RelationshipType.START_TO_START:
        return succ_start - (pred_start + lag)
    if rel_type == RelationshipType.FINISH_TO_FINISH:
        return succ_finish - (pred_finish + lag)
    if rel_type == RelationshipType.START_TO_FINISH:
        return succ_finish - (pred_start + lag)
    return succ_start - (pred_finish + lag)


__all__ = ["day_number", "relationship_float_from_dates"]
