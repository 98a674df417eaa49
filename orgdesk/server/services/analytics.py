"""
Analytics shaping helpers.

Turns raw page-view and event aggregates into the chart and table shapes
served by the analytics endpoints, and classifies visitor devices.
"""

from __future__ import annotations

import math
import re
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Set, Tuple

from orgdesk.core.database.base import utc_now
from orgdesk.core.models.io.analytics import ChartPoint, DeviceUsage, VisitorsRead

YEARLY_DAYS = 365
DEFAULT_DAYS = 30

_BOT = re.compile(r"bot|crawler|spider|crawling|headless", re.IGNORECASE)
_TABLET = re.compile(r"ipad|tablet|kindle|silk|playbook", re.IGNORECASE)
_MOBILE = re.compile(r"mobile|iphone|ipod|android|blackberry|opera mini|iemobile", re.IGNORECASE)
_DESKTOP = re.compile(r"windows|macintosh|mac os x|x11|linux|cros", re.IGNORECASE)


def range_days(time_frame: Optional[str]) -> int:
    """Length of the reporting window: a year for ``yearly``, a month otherwise."""
    return YEARLY_DAYS if time_frame == "yearly" else DEFAULT_DAYS


def window_start(time_frame: Optional[str], now: Optional[datetime] = None) -> datetime:
    return (now or utc_now()) - timedelta(days=range_days(time_frame))


def classify_device(user_agent: Optional[str]) -> str:
    """Classify a user agent as bot, tablet, mobile, desktop or unknown."""
    if not user_agent:
        return "unknown"
    if _BOT.search(user_agent):
        return "bot"
    # Android tablets omit the "Mobile" token
    if _TABLET.search(user_agent) or ("android" in user_agent.lower() and "mobile" not in user_agent.lower()):
        return "tablet"
    if _MOBILE.search(user_agent):
        return "mobile"
    if _DESKTOP.search(user_agent):
        return "desktop"
    return "unknown"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def device_usage(rows: Iterable[Tuple[Optional[str], int]]) -> List[DeviceUsage]:
    """
    Group page-view counts by capitalised device type.

    Counts of device types that capitalise to the same name are summed.
    Percentages are whole numbers and the list is ordered by amount, largest first.
    """
    totals: Dict[str, int] = {}
    for device_type, count in rows:
        raw = device_type or "unknown"
        name = raw[:1].upper() + raw[1:]
        totals[name] = totals.get(name, 0) + int(count)

    grand_total = sum(totals.values())
    usage = [
        DeviceUsage(
            name=name,
            amount=amount,
            percentage=_round_half_up(amount / grand_total * 100) if grand_total else 0,
        )
        for name, amount in totals.items()
    ]
    usage.sort(key=lambda item: item.amount, reverse=True)
    return usage


def visitors_summary(page_views: Iterable[Tuple[datetime, str]]) -> VisitorsRead:
    """Unique sessions per day plus the window totals."""
    sessions_by_day: Dict[object, Set[str]] = defaultdict(set)
    all_sessions: Set[str] = set()
    total_views = 0
    for created_at, session_id in page_views:
        sessions_by_day[created_at.date()].add(session_id)
        all_sessions.add(session_id)
        total_views += 1

    chart = [ChartPoint(x=day, y=len(sessions)) for day, sessions in sorted(sessions_by_day.items())]
    return VisitorsRead(total_visitors=len(all_sessions), total_page_views=total_views, chart=chart)
