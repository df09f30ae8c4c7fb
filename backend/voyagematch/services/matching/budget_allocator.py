"""Budget allocator — splits a trip budget into per-pool price ceilings."""

import math
from dataclasses import dataclass
from datetime import date, datetime

from voyagematch.services.matching.config import MatchingPolicy, matching_policy

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class BudgetAllocation:
    flight_ceiling: float
    nightly_lodging_ceiling: float


def calculate_nights(check_in: date | datetime, check_out: date | datetime) -> int:
    """Nights between two dates, rounded up, never less than one."""
    if isinstance(check_in, datetime) or isinstance(check_out, datetime):
        start = check_in if isinstance(check_in, datetime) else datetime.combine(check_in, datetime.min.time())
        end = check_out if isinstance(check_out, datetime) else datetime.combine(check_out, datetime.min.time())
        days = abs((end - start).total_seconds()) / SECONDS_PER_DAY
    else:
        days = abs((check_out - check_in).days)
    return max(1, math.ceil(days))


def allocate(
    total_budget: float,
    nights: int,
    policy: MatchingPolicy = matching_policy,
) -> BudgetAllocation:
    """Flight ceiling and nightly lodging ceiling for a total budget."""
    nights = max(1, nights)
    return BudgetAllocation(
        flight_ceiling=total_budget * policy.budget.flight,
        nightly_lodging_ceiling=(total_budget * policy.budget.lodging) / nights,
    )
