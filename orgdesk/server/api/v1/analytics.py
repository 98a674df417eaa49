"""
Analytics API Endpoints.

Page views and custom events are recorded anonymously against a client
session. The reporting endpoints are restricted to administrators.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Query, status

from orgdesk.core.database.entities import AnalyticsEvent, AnalyticsSession, PageView
from orgdesk.core.database.repositories import AnalyticsRepository
from orgdesk.core.errors import BadRequestError
from orgdesk.core.logging_config import get_logger
from orgdesk.core.models.domain.enums import RoleId
from orgdesk.core.models.io.analytics import (
    DeviceUsage,
    EventCount,
    TrackEventRequest,
    TrackPageViewRequest,
    TrackResponse,
    VisitorsRead,
)
from orgdesk.server.services.analytics import classify_device, device_usage, visitors_summary, window_start
from orgdesk.server.services.deps import CurrentUserDep, SessionDep, require_role

logger = get_logger(__name__)

router = APIRouter()

RangeParam = Annotated[str, Query(alias="range", description="`monthly` (30 days) or `yearly` (365 days)")]


def _session_row(session_id: str, user_agent: Optional[str], utm=None) -> AnalyticsSession:
    return AnalyticsSession(
        id=session_id,
        user_agent=user_agent,
        device_type=classify_device(user_agent),
        utm_source=utm.source if utm else None,
        utm_medium=utm.medium if utm else None,
        utm_campaign=utm.campaign if utm else None,
    )


@router.post(
    "/track",
    response_model=TrackResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Track Page View",
    description="Record a page view, creating the analytics session on first sight.",
    responses={
        400: {"description": "sessionId or pageUrl missing"},
    },
)
async def track_page_view(body: TrackPageViewRequest, session: SessionDep) -> TrackResponse:
    """
    Track a page view.

    - **sessionId**: Client-generated session ID.
    - **pageUrl**: Page that was viewed.
    - **userAgent**: Used to classify the session's device type.
    - **utmParams**: Campaign parameters stored on the session.
    """
    if not body.sessionId or not body.pageUrl:
        raise BadRequestError("sessionId and pageUrl are required")
    view = await AnalyticsRepository(session).record_page_view(
        _session_row(body.sessionId, body.userAgent, body.utmParams),
        PageView(
            session_id=body.sessionId,
            page_url=body.pageUrl,
            page_title=body.pageTitle,
            referrer=body.referrer,
            load_time=body.loadTime,
        ),
    )
    return TrackResponse(id=view.id)


@router.post(
    "/event",
    response_model=TrackResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Track Custom Event",
    responses={
        400: {"description": "sessionId or eventName missing"},
    },
)
async def track_event(body: TrackEventRequest, session: SessionDep) -> TrackResponse:
    if not body.sessionId or not body.eventName:
        raise BadRequestError("sessionId and eventName are required")
    event = await AnalyticsRepository(session).record_event(
        _session_row(body.sessionId, body.userAgent),
        AnalyticsEvent(
            session_id=body.sessionId,
            event_name=body.eventName,
            event_category=body.eventCategory,
            event_action=body.eventAction,
            event_label=body.eventLabel,
            event_value=body.eventValue,
            page_url=body.pageUrl,
            event_metadata=body.metadata,
        ),
    )
    return TrackResponse(id=event.id)


@router.get(
    "/visitors",
    response_model=VisitorsRead,
    summary="Get Visitors",
    description="Unique visitors per day over the last 30 days, or 365 for `range=yearly`. Administrators only.",
    responses={
        403: {"description": "Caller is not an administrator"},
    },
)
async def get_visitors(user: CurrentUserDep, session: SessionDep, time_frame: RangeParam = "monthly") -> VisitorsRead:
    require_role(user, RoleId.ADMIN, message="Only administrators can read analytics")
    rows = await AnalyticsRepository(session).page_views_since(window_start(time_frame))
    return visitors_summary(rows)


@router.get(
    "/devices",
    response_model=List[DeviceUsage],
    summary="Get Device Usage",
    description="Page views grouped by device type, with whole-number percentages. Administrators only.",
    responses={
        403: {"description": "Caller is not an administrator"},
    },
)
async def get_devices(user: CurrentUserDep, session: SessionDep, time_frame: RangeParam = "monthly") -> List[DeviceUsage]:
    require_role(user, RoleId.ADMIN, message="Only administrators can read analytics")
    rows = await AnalyticsRepository(session).device_counts_since(window_start(time_frame))
    return device_usage(rows)


@router.get(
    "/events",
    response_model=List[EventCount],
    summary="Get Event Counts",
    description="Custom events counted by name, most frequent first. Administrators only.",
    responses={
        403: {"description": "Caller is not an administrator"},
    },
)
async def get_event_counts(
    user: CurrentUserDep, session: SessionDep, time_frame: RangeParam = "monthly"
) -> List[EventCount]:
    require_role(user, RoleId.ADMIN, message="Only administrators can read analytics")
    rows = await AnalyticsRepository(session).event_counts_since(window_start(time_frame))
    return [EventCount(name=name, count=count) for name, count in rows]
