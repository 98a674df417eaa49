"""
Calendar API Endpoints.

Scheduled events filtered by the caller's role, SLS events, and coach hour
logs. Hour logs a coach has just submitted are kept in a pending ledger and
merged into calendar reads until the database returns them.
"""

from datetime import date
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, Query, status

from orgdesk.calendar import (
    HourLogEntry,
    can_see_hour_logs,
    can_view_sls,
    hour_log_to_event,
    is_event_visible,
    merge_calendar,
)
from orgdesk.calendar.aggregation import DEFAULT_EVENT_COLOR, UNKNOWN_LOCATION
from orgdesk.core.database.entities import (
    CalendarEvent,
    CalendarPermission,
    CoachDailyReport,
    EventType,
    Profile,
    WorkLocation,
)
from orgdesk.core.database.repositories import (
    CalendarEventRepository,
    CalendarPermissionRepository,
    CoachReportRepository,
    EventTypeRepository,
    ProfileRepository,
    WorkLocationRepository,
)
from orgdesk.core.database.repositories.calendar import SLS_TITLE_PREFIX
from orgdesk.core.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from orgdesk.core.logging_config import get_logger
from orgdesk.core.models.domain.enums import EventPriority, EventStatus, RoleId
from orgdesk.core.models.io.calendar import (
    CalendarEventCreate,
    CalendarEventUpdate,
    CalendarEventView,
    DailyHoursRead,
    EventTypeRead,
    HourLogCreate,
    HourLogRead,
    HourLogUpdate,
    OptimisticHourRead,
    SLSEventCreate,
    SLSEventsResponse,
    WorkLocationRead,
)
from orgdesk.server.services.deps import (
    CurrentUserDep,
    LedgerDep,
    SessionDep,
    require_permissions,
    require_role,
    role_of,
)

logger = get_logger(__name__)

router = APIRouter()

MIN_HOURS = 0.25
MAX_HOURS = 12

can_create_events = require_permissions("canCreateEvents", message="You do not have permission to create events")
can_edit_events = require_permissions("canEditEvents", message="You do not have permission to edit events")
can_delete_events = require_permissions("canDeleteEvents", message="You do not have permission to delete events")
can_create_sls = require_permissions("canCreateSLS", message="You do not have permission to create SLS events")


def _person_name(profile: Optional[Profile], unknown: str) -> str:
    if profile is None:
        return unknown
    return profile.full_name or profile.display_name or profile.email or unknown


def _initials(profile: Optional[Profile]) -> Optional[str]:
    name = profile and (profile.full_name or profile.display_name)
    if not name:
        return None
    return "".join(part[0] for part in name.split() if part).upper()


def _duration_minutes(start_time: str, end_time: str) -> Optional[int]:
    try:
        sh, sm = (int(p) for p in start_time.split(":")[:2])
        eh, em = (int(p) for p in end_time.split(":")[:2])
    except ValueError:
        return None
    return max((eh * 60 + em) - (sh * 60 + sm), 0)


def _event_view(
    event: CalendarEvent, event_type: Optional[EventType], profiles: Dict[str, Profile]
) -> CalendarEventView:
    return CalendarEventView(
        id=event.id,
        title=event.title,
        description=event.description,
        event_date=event.event_date,
        start_time=event.start_time,
        end_time=event.end_time,
        event_type=event_type.name if event_type else "Event",
        color=(event_type.color if event_type else None) or DEFAULT_EVENT_COLOR,
        status=event.status,
        priority=event.priority,
        client_id=event.client_id,
        coach_id=event.coach_id,
        client_name=_person_name(profiles.get(event.client_id), "Unknown Client") if event.client_id else None,
        coach_name=_person_name(profiles.get(event.coach_id), "Unknown Coach") if event.coach_id else None,
        location=event.location,
        duration_minutes=_duration_minutes(event.start_time, event.end_time),
    )


def _location_label(report: CoachDailyReport, location: Optional[WorkLocation]) -> str:
    if location is not None:
        return location.label
    return report.custom_location or UNKNOWN_LOCATION


def _hour_log_read(report: CoachDailyReport, location: Optional[WorkLocation]) -> HourLogRead:
    return HourLogRead(
        id=report.id,
        coach_id=report.coach_id,
        report_date=report.report_date,
        hours_worked=report.hours_worked,
        activity_type=report.activity_type,
        location=_location_label(report, location),
        notes=report.notes,
        created_by=report.created_by,
        created_at=report.created_at,
    )


def _require_range(start_date: Optional[date], end_date: Optional[date]) -> Tuple[date, date]:
    if start_date is None or end_date is None:
        raise BadRequestError("start_date and end_date are required")
    if end_date < start_date:
        raise BadRequestError("end_date must not be before start_date")
    return start_date, end_date


def _check_hours(hours: float) -> None:
    if hours < MIN_HOURS or hours > MAX_HOURS:
        raise BadRequestError(f"Hours must be between {MIN_HOURS} and {MAX_HOURS}")


async def _hour_log_coach(session: SessionDep, user: Profile, coach_id: Optional[str]) -> Profile:
    """The coach an hour log is for: the caller, or a coach chosen by an admin."""
    if not coach_id or coach_id == user.id:
        require_role(user, RoleId.COACH, message="Only coaches can log hours")
        return user
    require_role(user, RoleId.ADMIN, message="Only admins can log hours for another coach")
    coach = await ProfileRepository(session).get_by_id(coach_id)
    if coach is None:
        raise NotFoundError("Coach", coach_id)
    if role_of(coach) != RoleId.COACH:
        raise BadRequestError(f"User {coach_id} is not a coach")
    return coach


async def _resolve_location(
    session: SessionDep, work_location_id: Optional[str], location: Optional[str]
) -> Tuple[Optional[WorkLocation], Optional[str]]:
    """Return the chosen work location or the free-text location; one of them is required."""
    if work_location_id:
        work_location = await WorkLocationRepository(session).get_by_id(work_location_id)
        if work_location is None:
            raise BadRequestError(f"Unknown work location: {work_location_id}")
        return work_location, None
    if location and location.strip():
        return None, location.strip()
    raise BadRequestError("A work location or a custom location is required")


@router.get(
    "/events",
    response_model=List[CalendarEventView],
    summary="List Calendar Events",
    description="List the events between two dates that the caller may see, optionally merged with coach hour logs.",
    response_description="Calendar entries ordered by date and start time.",
    responses={
        400: {"description": "start_date or end_date missing"},
        401: {"description": "Caller is not authenticated"},
    },
)
async def list_events(
    user: CurrentUserDep,
    session: SessionDep,
    ledger: LedgerDep,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    include_hour_logs: bool = False,
) -> List[CalendarEventView]:
    """
    List calendar events in a date range.

    Visibility follows the event type flags: admins see every typed event unless
    hidden from admins, coaches and clients see their own events plus types
    flagged visible to their role. Untyped events are admin-only.

    - **start_date** / **end_date**: Inclusive range, `YYYY-MM-DD`.
    - **include_hour_logs**: Merge logged hours (admins and coaches only; coaches see their own).
    """
    start, end = _require_range(start_date, end_date)
    role = role_of(user)

    pairs = await CalendarEventRepository(session).list_range(start, end)
    visible = [(e, et) for e, et in pairs if is_event_visible(e, et, role.value, user.id)]
    profiles = await ProfileRepository(session).get_many(
        pid for e, _ in visible for pid in (e.client_id, e.coach_id)
    )
    events = [_event_view(e, et, profiles) for e, et in visible]

    if not include_hour_logs or not can_see_hour_logs(role.value):
        return events

    coach_filter = user.id if role == RoleId.COACH else None
    reports = await CoachReportRepository(session).list_range(start, end, coach_id=coach_filter)
    coaches = await ProfileRepository(session).get_many(r.coach_id for r, _ in reports)
    hour_logs = []
    for report, location in reports:
        view = hour_log_to_event(report, _location_label(report, location), _initials(coaches.get(report.coach_id)))
        view.coach_name = _person_name(coaches.get(report.coach_id), "Unknown Coach")
        hour_logs.append(view)

    pending: List[HourLogEntry] = []
    if role == RoleId.COACH:
        ledger.reconcile(user.id, hour_logs)
        pending = [entry for entry in ledger.entries(user.id) if start <= entry.date <= end]

    return merge_calendar(events, hour_logs, pending)


@router.post(
    "/events",
    response_model=CalendarEventView,
    status_code=status.HTTP_201_CREATED,
    summary="Create Calendar Event",
    description="Schedule a new calendar event.",
    response_description="The created event.",
    responses={
        400: {"description": "Missing required fields"},
        403: {"description": "Caller may not create events"},
    },
    dependencies=[Depends(can_create_events)],
)
async def create_event(body: CalendarEventCreate, user: CurrentUserDep, session: SessionDep) -> CalendarEventView:
    """
    Create a calendar event.

    - **title**, **event_date**, **start_time**, **end_time**: Required.
    - **event_type**: Event type name; unknown names leave the event untyped.
    - **priority**: Defaults to `medium`.
    """
    if not body.title or body.event_date is None or not body.start_time or not body.end_time:
        raise BadRequestError("title, event_date, start_time and end_time are required")

    event_type = await EventTypeRepository(session).get_by_name(body.event_type) if body.event_type else None
    event = CalendarEvent(
        title=body.title,
        description=body.description,
        event_date=body.event_date,
        start_time=body.start_time,
        end_time=body.end_time,
        event_type_id=event_type.id if event_type else None,
        client_id=body.client_id,
        coach_id=body.coach_id,
        created_by_id=user.id,
        status=EventStatus.SCHEDULED.value,
        priority=body.priority or EventPriority.MEDIUM.value,
        location=body.location,
        notes=body.notes,
    )
    event = await CalendarEventRepository(session).create(event)
    logger.info(f"User '{user.id}' created event '{event.id}' on {event.event_date}")
    profiles = await ProfileRepository(session).get_many([event.client_id, event.coach_id])
    return _event_view(event, event_type, profiles)


@router.put(
    "/events",
    response_model=CalendarEventView,
    summary="Update Calendar Event",
    description="Partially update a calendar event.",
    responses={
        400: {"description": "id missing"},
        403: {"description": "Caller may not edit events"},
        404: {"description": "Event not found"},
    },
    dependencies=[Depends(can_edit_events)],
)
async def update_event(
    body: CalendarEventUpdate,
    user: CurrentUserDep,
    session: SessionDep,
    id: Optional[str] = None,
) -> CalendarEventView:
    """
    Update a calendar event.

    - **id**: Event ID, passed as a query parameter.

    Only fields present in the body are changed.
    """
    if not id:
        raise BadRequestError("Event id is required")
    events = CalendarEventRepository(session)
    event = await events.get_by_id(id)
    if event is None:
        raise NotFoundError("Event", id)

    changes = body.model_dump(exclude_unset=True)
    type_name = changes.pop("event_type", None)
    types = EventTypeRepository(session)
    if type_name is not None:
        event_type = await types.get_by_name(type_name)
        event.event_type_id = event_type.id if event_type else None
    for field, value in changes.items():
        setattr(event, field, value)

    event = await events.update(event)
    event_type = await types.get_by_id(event.event_type_id) if event.event_type_id else None
    profiles = await ProfileRepository(session).get_many([event.client_id, event.coach_id])
    return _event_view(event, event_type, profiles)


@router.delete(
    "/events",
    summary="Delete Calendar Event",
    description="Delete a calendar event and its permission grants.",
    responses={
        400: {"description": "id missing"},
        403: {"description": "Caller may not delete events"},
        404: {"description": "Event not found"},
    },
    dependencies=[Depends(can_delete_events)],
)
async def delete_event(user: CurrentUserDep, session: SessionDep, id: Optional[str] = None):
    """
    Delete a calendar event.

    - **id**: Event ID, passed as a query parameter.
    """
    if not id:
        raise BadRequestError("Event id is required")
    events = CalendarEventRepository(session)
    event = await events.get_by_id(id)
    if event is None:
        raise NotFoundError("Event", id)
    for grant in await CalendarPermissionRepository(session).list_for_event(id):
        await session.delete(grant)
    await events.delete(id)
    logger.info(f"User '{user.id}' deleted event '{id}'")
    return {"success": True}


@router.get(
    "/event-types",
    response_model=List[EventTypeRead],
    summary="List Event Types",
    description="List active event types ordered by name.",
)
async def list_event_types(session: SessionDep) -> List[EventTypeRead]:
    types = await EventTypeRepository(session).list_active()
    return [
        EventTypeRead.model_validate({**et.model_dump(), "color": et.color or DEFAULT_EVENT_COLOR}) for et in types
    ]


@router.get(
    "/public-events",
    response_model=List[CalendarEventView],
    summary="List Public Events",
    description="List the events between two dates that are assigned to neither a coach nor a client.",
    responses={
        400: {"description": "start_date or end_date missing"},
        401: {"description": "Caller is not authenticated"},
    },
)
async def list_public_events(
    user: CurrentUserDep,
    session: SessionDep,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[CalendarEventView]:
    start, end = _require_range(start_date, end_date)
    pairs = await CalendarEventRepository(session).list_public(start, end)
    return [
        _event_view(event, event_type, {}).model_copy(
            update={"is_public": True, "event_type": event_type.name if event_type else "Unknown"}
        )
        for event, event_type in pairs
    ]


@router.get(
    "/work-locations",
    response_model=List[WorkLocationRead],
    summary="List Work Locations",
    description="List the active work locations hours can be logged against, ordered by name.",
    responses={
        401: {"description": "Caller is not authenticated"},
    },
)
async def list_work_locations(user: CurrentUserDep, session: SessionDep) -> List[WorkLocationRead]:
    locations = await WorkLocationRepository(session).list_active()
    return [WorkLocationRead.model_validate(location) for location in locations]


@router.post(
    "/sls-events",
    status_code=status.HTTP_201_CREATED,
    summary="Create SLS Event",
    description="Create an SLS event for a client or a coach.",
    response_description="The created event.",
    responses={
        400: {"description": "Missing fields, or the target user is neither client nor coach"},
        403: {"description": "Caller may not create SLS events"},
        404: {"description": "Target user not found"},
    },
    dependencies=[Depends(can_create_sls)],
)
async def create_sls_event(body: SLSEventCreate, user: CurrentUserDep, session: SessionDep):
    """
    Create an SLS event.

    The title is prefixed with `SLS: `. The target user's role decides whether
    they are recorded as the event's client or its coach. A view grant for the
    target user is written alongside the event when possible.

    - **title**, **event_date**, **start_time**, **end_time**, **user_id**: Required.
    """
    if not body.title or body.event_date is None or not body.start_time or not body.end_time or not body.user_id:
        raise BadRequestError("title, event_date, start_time, end_time and user_id are required")

    target = await ProfileRepository(session).get_by_id(body.user_id)
    if target is None:
        raise NotFoundError("User", body.user_id)
    target_role = role_of(target)
    if target_role not in (RoleId.CLIENT, RoleId.COACH):
        raise BadRequestError("SLS events can only be created for clients or coaches")

    event = CalendarEvent(
        title=f"{SLS_TITLE_PREFIX}{body.title}",
        description=body.description,
        event_date=body.event_date,
        start_time=body.start_time,
        end_time=body.end_time,
        client_id=body.user_id if target_role == RoleId.CLIENT else None,
        coach_id=body.user_id if target_role == RoleId.COACH else None,
        created_by_id=user.id,
        status=EventStatus.SCHEDULED.value,
        priority=body.priority or EventPriority.MEDIUM.value,
        location=body.location,
        notes=body.notes,
    )
    event = await CalendarEventRepository(session).create(event)
    view = _event_view(event, None, {target.id: target})

    try:
        session.add(
            CalendarPermission(
                event_id=event.id,
                user_id=body.user_id,
                permission_level="view",
                specific_actions=["view"],
                granted_by=user.id,
            )
        )
        await session.commit()
    except Exception as e:
        logger.warning(f"Could not grant SLS event '{event.id}' to '{body.user_id}': {e}")
        await session.rollback()

    return {"success": True, "event": view}


@router.get(
    "/sls-events",
    response_model=SLSEventsResponse,
    summary="List SLS Events",
    description="List SLS events. Only administrators and clients may read them; clients see their own.",
    responses={
        403: {"description": "Caller may not view SLS events"},
    },
)
async def list_sls_events(
    user: CurrentUserDep,
    session: SessionDep,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> SLSEventsResponse:
    """
    List SLS events.

    - **start_date** / **end_date**: Optional inclusive bounds.
    """
    role = role_of(user)
    if not can_view_sls(role.value):
        raise ForbiddenError("Access denied. SLS events are only visible to admins and clients.")

    client_id = user.id if role == RoleId.CLIENT else None
    events = await CalendarEventRepository(session).list_sls(
        client_id=client_id, start_date=start_date, end_date=end_date
    )
    profiles = await ProfileRepository(session).get_many(pid for e in events for pid in (e.client_id, e.coach_id))
    return SLSEventsResponse(events=[_event_view(e, None, profiles) for e in events])


@router.get(
    "/log-hours",
    response_model=DailyHoursRead,
    summary="Get Logged Hours For A Day",
    description="Total hours a coach logged on a given day.",
    responses={
        400: {"description": "date missing"},
    },
)
async def get_daily_hours(
    user: CurrentUserDep,
    session: SessionDep,
    report_date: Optional[date] = Query(default=None, alias="date"),
    coach_id: Optional[str] = None,
) -> DailyHoursRead:
    """
    Get the hours logged on one day.

    - **date**: Day to total, `YYYY-MM-DD`.
    - **coach_id**: Coach to total; defaults to the caller.
    """
    if report_date is None:
        raise BadRequestError("date is required")
    target = coach_id or user.id
    total = await CoachReportRepository(session).total_for_day(target, report_date)
    return DailyHoursRead(totalHours=total, date=report_date, coach_id=target)


@router.post(
    "/log-hours",
    response_model=HourLogRead,
    status_code=status.HTTP_201_CREATED,
    summary="Log Hours",
    description="Record the hours a coach worked on one day.",
    responses={
        400: {"description": "Missing fields, missing location or hours out of range"},
        403: {"description": "Caller is not a coach, or logs for another coach without being an admin"},
        404: {"description": "Coach not found"},
        409: {"description": "Hours already logged for that day"},
    },
)
async def log_hours(
    body: HourLogCreate, user: CurrentUserDep, session: SessionDep, ledger: LedgerDep
) -> HourLogRead:
    """
    Log hours for a day.

    - **report_date**, **hours_worked**, **activity_type**: Required.
    - **work_location_id** or **location**: One of them is required.
    - **hours_worked**: Between 0.25 and 12.
    - **coach_id**: Coach the hours are for. Admins may log for any coach; defaults to the caller.

    The new entry shows up in the coach's calendar straight away and is
    replaced by the stored entry on the next calendar read.
    """
    coach = await _hour_log_coach(session, user, body.coach_id)
    if body.report_date is None or body.hours_worked is None or not body.activity_type:
        raise BadRequestError("report_date, hours_worked and activity_type are required")
    work_location, custom_location = await _resolve_location(session, body.work_location_id, body.location)
    _check_hours(body.hours_worked)

    reports = CoachReportRepository(session)
    if await reports.get_for_day(coach.id, body.report_date) is not None:
        raise ConflictError(f"Hours already logged for {body.report_date}")

    report = await reports.create(
        CoachDailyReport(
            coach_id=coach.id,
            report_date=body.report_date,
            hours_worked=body.hours_worked,
            activity_type=body.activity_type,
            work_location_id=work_location.id if work_location else None,
            custom_location=custom_location,
            notes=body.notes,
            created_by=user.id,
        )
    )
    label = _location_label(report, work_location)
    ledger.add(
        coach.id,
        HourLogEntry(
            id=report.id,
            date=report.report_date,
            hours=report.hours_worked,
            activity=report.activity_type,
            location=label,
            notes=report.notes,
            coach_name=_person_name(coach, "Coach"),
        ),
    )
    logger.info(f"User '{user.id}' logged {report.hours_worked}h for coach '{coach.id}' on {report.report_date}")
    return _hour_log_read(report, work_location)


@router.put(
    "/log-hours",
    response_model=HourLogRead,
    summary="Update Logged Hours",
    description="Update the hour log of a coach for a given day.",
    responses={
        400: {"description": "report_date missing or hours out of range"},
        403: {"description": "Caller may not edit another coach's hours"},
        404: {"description": "No hours logged for that day"},
    },
)
async def update_logged_hours(body: HourLogUpdate, user: CurrentUserDep, session: SessionDep) -> HourLogRead:
    """
    Update an hour log.

    - **report_date**: Day of the entry to update.
    - **coach_id**: Coach owning the entry; defaults to the caller. Only admins may edit other coaches.
    """
    if body.report_date is None:
        raise BadRequestError("report_date is required")
    coach_id = body.coach_id or user.id
    if coach_id != user.id:
        require_role(user, RoleId.ADMIN, message="Only admins can edit another coach's hours")

    reports = CoachReportRepository(session)
    report = await reports.get_for_day(coach_id, body.report_date)
    if report is None:
        raise NotFoundError("Hour log", f"for {body.report_date}")

    if body.hours_worked is not None:
        _check_hours(body.hours_worked)
        report.hours_worked = body.hours_worked
    if body.activity_type:
        report.activity_type = body.activity_type
    if body.work_location_id or body.location:
        work_location, custom_location = await _resolve_location(session, body.work_location_id, body.location)
        report.work_location_id = work_location.id if work_location else None
        report.custom_location = custom_location
    if body.notes is not None:
        report.notes = body.notes

    report = await reports.update(report)
    location = await WorkLocationRepository(session).get_by_id(report.work_location_id) if report.work_location_id else None
    return _hour_log_read(report, location)


@router.get(
    "/logged-hours-range",
    response_model=List[HourLogRead],
    summary="List Logged Hours In Range",
    description="List hour logs between two dates. Coaches see their own; admins may filter by coach.",
    responses={
        400: {"description": "start_date or end_date missing"},
        403: {"description": "Caller may not read hour logs"},
    },
)
async def list_logged_hours(
    user: CurrentUserDep,
    session: SessionDep,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    coach_id: Optional[str] = None,
) -> List[HourLogRead]:
    start, end = _require_range(start_date, end_date)
    role = role_of(user)
    if not can_see_hour_logs(role.value):
        raise ForbiddenError("Only admins and coaches can read hour logs")
    if role == RoleId.COACH:
        coach_id = user.id
    rows = await CoachReportRepository(session).list_range(start, end, coach_id=coach_id)
    return [_hour_log_read(report, location) for report, location in rows]


@router.get(
    "/optimistic-hours",
    response_model=List[OptimisticHourRead],
    summary="List Pending Hour Logs",
    description="Hour logs submitted by the caller that a calendar read has not confirmed yet.",
)
async def list_pending_hours(user: CurrentUserDep, ledger: LedgerDep) -> List[OptimisticHourRead]:
    return [
        OptimisticHourRead(
            id=e.id,
            date=e.date,
            hours=e.hours,
            activity=e.activity,
            location=e.location,
            notes=e.notes,
            coach_name=e.coach_name,
            timestamp=e.timestamp,
        )
        for e in ledger.entries(user.id)
    ]
