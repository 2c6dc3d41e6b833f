"""Dashboard statistics over the session store."""

import logging
from calendar import monthrange
from datetime import date as Date, timedelta

from clinic_scheduler.schemas.session_schema import DashboardStats, SessionStatus
from clinic_scheduler.stores.base import SessionStore

logger = logging.getLogger(__name__)


def week_bounds(day: Date) -> tuple[str, str]:
    """Monday..Sunday of the week containing ``day``, as ISO dates."""
    start = day - timedelta(days=day.weekday())
    return start.isoformat(), (start + timedelta(days=6)).isoformat()


def month_bounds(day: Date) -> tuple[str, str]:
    last = monthrange(day.year, day.month)[1]
    return day.replace(day=1).isoformat(), day.replace(day=last).isoformat()


async def dashboard_stats(sessions: SessionStore, today: Date) -> DashboardStats:
    """Today's and this week's live sessions; today's and this month's completions."""
    todays = await sessions.list_by_date(today.isoformat())
    week = await sessions.list_by_date_range(*week_bounds(today))
    month = await sessions.list_by_date_range(*month_bounds(today))

    stats = DashboardStats(
        today_sessions=sum(1 for s in todays if s.status != SessionStatus.CANCELLED),
        today_completed=sum(1 for s in todays if s.status == SessionStatus.COMPLETED),
        week_sessions=sum(1 for s in week if s.status != SessionStatus.CANCELLED),
        month_completed=sum(1 for s in month if s.status == SessionStatus.COMPLETED),
    )
    logger.debug("Dashboard stats for %s: %s", today, stats)
    return stats
