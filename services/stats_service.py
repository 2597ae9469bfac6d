"""
Admin dashboard statistics (read-only).

Figures:
- total_telecallers: principals with the telecaller role
- total_calls: leads currently connected
- total_customers: leads contacted at all (connected or not_connected)
- recent_calls: the 10 most recent connected leads by call date, with owner
- call_trends: connected calls per UTC day over the past 7 days, oldest first
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from domain.lead import LeadStatus
from domain.principal import Role
from domain.time import utc_now
from repositories import lead_repository, user_repository
from services.lead_service import LeadWithOwner, attach_owners

RECENT_CALLS_LIMIT = 10
TREND_WINDOW = timedelta(days=7)


@dataclass(frozen=True, slots=True)
class CallTrendPoint:
    date: str  # YYYY-MM-DD
    count: int


@dataclass(frozen=True, slots=True)
class LeadStats:
    total_telecallers: int
    total_calls: int
    total_customers: int
    recent_calls: List[LeadWithOwner]
    call_trends: List[CallTrendPoint]


def call_trends(now: Optional[datetime] = None) -> List[CallTrendPoint]:
    now = now or utc_now()
    recent = lead_repository.list_connected_leads(since=now - TREND_WINDOW)
    per_day = Counter(lead.call_date.date().isoformat() for lead in recent if lead.call_date)
    return [CallTrendPoint(date=day, count=count) for day, count in sorted(per_day.items())]


def get_lead_stats(now: Optional[datetime] = None) -> LeadStats:
    return LeadStats(
        total_telecallers=user_repository.count_users_by_role(Role.TELECALLER),
        total_calls=lead_repository.count_leads_by_status([LeadStatus.CONNECTED]),
        total_customers=lead_repository.count_leads_by_status(
            [LeadStatus.CONNECTED, LeadStatus.NOT_CONNECTED]
        ),
        recent_calls=attach_owners(
            lead_repository.list_connected_leads(limit=RECENT_CALLS_LIMIT)
        ),
        call_trends=call_trends(now),
    )


__all__ = ["CallTrendPoint", "LeadStats", "call_trends", "get_lead_stats"]
