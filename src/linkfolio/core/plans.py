"""Subscription plan limits."""

import math
from dataclasses import dataclass
from typing import Dict

from .enums import Plan


@dataclass(frozen=True)
class PlanLimits:
    """Feature limits attached to a plan."""

    name: str
    max_links: float  # math.inf for unlimited
    analytics_days: int


PLANS: Dict[Plan, PlanLimits] = {
    Plan.FREE: PlanLimits(name="Free", max_links=5, analytics_days=7),
    Plan.PRO: PlanLimits(name="Pro", max_links=math.inf, analytics_days=365),
}


def get_plan_limits(plan: str) -> PlanLimits:
    """Limits for a stored plan value; unknown plans get the free limits."""
    try:
        return PLANS[Plan(plan)]
    except ValueError:
        return PLANS[Plan.FREE]
