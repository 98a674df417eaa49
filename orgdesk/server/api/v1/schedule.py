"""
Cleaning Schedule API Endpoints.

Businesses are cleaned on a four-week rota. These endpoints manage the
businesses and their notes, the rota itself, the cleaning crew, and the
daily instances the crew ticks businesses off on.
"""

import time
from datetime import date
from typing import List, Optional
from uuid import uuid4

from fastapi import APIRouter, Query, status
from sqlalchemy.exc import IntegrityError

from orgdesk.core.database.base import utc_now
from orgdesk.core.database.entities import Business, DailyCleanInstance, Profile, ScheduleMember
from orgdesk.core.database.repositories import BusinessRepository, ScheduleMemberRepository, ScheduleRepository
from orgdesk.core.errors import BadRequestError, NotFoundError
from orgdesk.core.logging_config import get_logger
from orgdesk.core.models.domain.enums import CleanStatus, InstanceStatus, RoleId, Weekday
from orgdesk.core.models.io.schedule import (
    BusinessCreate,
    BusinessCreated,
    BusinessNotes,
    BusinessRead,
    BusinessSummary,
    CleanItemRead,
    CleanItemUpdate,
    CleanItemUpdated,
    DateRange,
    DayMove,
    IdBody,
    InstanceRead,
    InstanceUpdate,
    InstanceUpdated,
    InstanceWithItems,
    InstanceWithItemsRead,
    MemberRead,
    MemberWrite,
    MonthlyReport,
    MonthlySummary,
    MovedBusiness,
    MovedBusinesses,
    NoteCreate,
    NoteCreated,
    NoteDelete,
    NotesChanged,
    NoteUpdate,
    ScheduledBusiness,
    ScheduledJob,
    ScheduleForDay,
    ScheduleWeek,
)
from orgdesk.server.services.deps import CurrentUserDep, SessionDep, require_role

logger = get_logger(__name__)

router = APIRouter()

CYCLE_WEEKS = 4
STAFF_ONLY = "Only staff can manage the cleaning schedule"
DAY_FIELDS = tuple(day.value for day in Weekday)


def _require_staff(user: Profile) -> None:
    require_role(user, RoleId.ADMIN, RoleId.COACH, message=STAFF_ONLY)


def _weekday(value: str) -> str:
    try:
        return Weekday(value.lower()).value
    except ValueError:
        raise BadRequestError(f"Invalid day: {value}") from None


def _cycle_week(week: int) -> int:
    if week < 1 or week > CYCLE_WEEKS:
        raise BadRequestError(f"week must be between 1 and {CYCLE_WEEKS}")
    return week


def _new_note_id() -> str:
    return f"note_{int(time.time() * 1000)}_{uuid4().hex[:9]}"


async def _get_business(session: SessionDep, business_id: int) -> Business:
    business = await BusinessRepository(session).get_by_id(business_id)
    if business is None:
        raise NotFoundError("Business", business_id)
    return business


@router.get(
    "",
    response_model=ScheduleForDay,
    summary="Get Day Schedule",
    description="The businesses visited on one day of one rota week, with their jobs and assigned members.",
    responses={
        400: {"description": "Missing or invalid week or day"},
    },
)
async def get_schedule(
    user: CurrentUserDep,
    session: SessionDep,
    week: Optional[int] = None,
    day: Optional[str] = None,
) -> ScheduleForDay:
    if week is None or not day:
        raise BadRequestError("Missing week or day parameters")
    schedules = ScheduleRepository(session)
    rows = await schedules.scheduled_on(_cycle_week(week), _weekday(day))
    jobs = await schedules.jobs_for([schedule.id for schedule, _ in rows])
    return ScheduleForDay(
        schedule=[
            ScheduledBusiness(
                business_name=business.business_name or "Unknown",
                jobs=[
                    ScheduledJob(
                        job_type=job.job_type or "Unknown",
                        member_name=member.name if member is not None else "Unassigned",
                    )
                    for job, member in jobs.get(schedule.id, [])
                ],
            )
            for schedule, business in rows
        ]
    )


@router.get("/businesses", response_model=List[BusinessSummary], summary="List Businesses")
async def list_businesses(user: CurrentUserDep, session: SessionDep) -> List[BusinessSummary]:
    return [BusinessSummary.model_validate(b) for b in await BusinessRepository(session).list_by_name()]


@router.post(
    "/businesses",
    response_model=BusinessCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Add Business",
    responses={
        400: {"description": "business_name or address missing"},
        403: {"description": "Caller is not staff"},
    },
)
async def create_business(body: BusinessCreate, user: CurrentUserDep, session: SessionDep) -> BusinessCreated:
    """
    Add a business to the rota.

    The business starts with an empty rota row for every week of the cycle.
    """
    _require_staff(user)
    if not body.business_name or not body.address:
        raise BadRequestError("Missing fields")
    business = await BusinessRepository(session).create_with_rota(
        Business(business_name=body.business_name, address=body.address, before_open=body.before_open),
        CYCLE_WEEKS,
    )
    logger.info(f"User '{user.id}' added business {business.id} '{business.business_name}'")
    return BusinessCreated(data=BusinessRead.model_validate(business))


@router.delete(
    "/businesses",
    summary="Delete Business",
    responses={
        400: {"description": "Business id missing"},
        403: {"description": "Caller is not staff"},
        404: {"description": "Business not found"},
    },
)
async def delete_business(body: IdBody, user: CurrentUserDep, session: SessionDep):
    _require_staff(user)
    if body.id is None:
        raise BadRequestError("Missing business ID")
    if not await BusinessRepository(session).delete_with_rota(body.id):
        raise NotFoundError("Business", body.id)
    logger.info(f"User '{user.id}' deleted business {body.id}")
    return {"success": True}


@router.get(
    "/businesses/notes",
    response_model=BusinessNotes,
    summary="List Business Notes",
    responses={
        400: {"description": "business_id missing"},
        404: {"description": "Business not found"},
    },
)
async def list_business_notes(
    user: CurrentUserDep, session: SessionDep, business_id: Optional[int] = None
) -> BusinessNotes:
    if business_id is None:
        raise BadRequestError("business_id parameter is required")
    business = await _get_business(session, business_id)
    return BusinessNotes(business_id=business.id, notes=business.business_notes or [])


@router.post(
    "/businesses/notes",
    response_model=NoteCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Add Business Note",
    responses={
        400: {"description": "business_id or content missing"},
        403: {"description": "Caller is not staff"},
        404: {"description": "Business not found"},
    },
)
async def add_business_note(body: NoteCreate, user: CurrentUserDep, session: SessionDep) -> NoteCreated:
    """
    Append a note to a business.

    - **business_id**, **content**: Required.
    - **type**: Defaults to `general`.
    - **title**: Defaults to an empty string.
    """
    _require_staff(user)
    if body.business_id is None or not body.content:
        raise BadRequestError("Missing required fields: business_id and content")
    business = await _get_business(session, body.business_id)

    note = {
        "id": _new_note_id(),
        "type": body.type or "general",
        "title": body.title or "",
        "content": body.content,
        "created_at": utc_now().isoformat(),
    }
    # Reassign so the JSON column is flagged dirty
    business.business_notes = [*(business.business_notes or []), note]
    business = await BusinessRepository(session).update(business)
    return NoteCreated(note=note, all_notes=business.business_notes)


@router.patch(
    "/businesses/notes",
    response_model=NotesChanged,
    summary="Update Business Note",
    responses={
        400: {"description": "business_id or note_id missing"},
        403: {"description": "Caller is not staff"},
        404: {"description": "Business or note not found"},
    },
)
async def update_business_note(body: NoteUpdate, user: CurrentUserDep, session: SessionDep) -> NotesChanged:
    _require_staff(user)
    if body.business_id is None or not body.note_id:
        raise BadRequestError("Missing required fields: business_id and note_id")
    business = await _get_business(session, body.business_id)

    notes = [dict(note) for note in business.business_notes or []]
    target = next((note for note in notes if note.get("id") == body.note_id), None)
    if target is None:
        raise NotFoundError("Note")
    for field in ("type", "title", "content"):
        value = getattr(body, field)
        if value is not None:
            target[field] = value
    target["updated_at"] = utc_now().isoformat()

    business.business_notes = notes
    business = await BusinessRepository(session).update(business)
    return NotesChanged(notes=business.business_notes)


@router.delete(
    "/businesses/notes",
    response_model=NotesChanged,
    summary="Delete Business Note",
    responses={
        400: {"description": "business_id or note_id missing"},
        403: {"description": "Caller is not staff"},
        404: {"description": "Business or note not found"},
    },
)
async def delete_business_note(body: NoteDelete, user: CurrentUserDep, session: SessionDep) -> NotesChanged:
    _require_staff(user)
    if body.business_id is None or not body.note_id:
        raise BadRequestError("Missing required fields: business_id and note_id")
    business = await _get_business(session, body.business_id)

    current = business.business_notes or []
    remaining = [note for note in current if note.get("id") != body.note_id]
    if len(remaining) == len(current):
        raise NotFoundError("Note")

    business.business_notes = remaining
    business = await BusinessRepository(session).update(business)
    return NotesChanged(notes=business.business_notes)


@router.get(
    "/update",
    response_model=List[ScheduleWeek],
    summary="Get Business Rota",
    responses={
        400: {"description": "business_id missing"},
    },
)
async def get_business_rota(
    user: CurrentUserDep, session: SessionDep, business_id: Optional[int] = None
) -> List[ScheduleWeek]:
    if business_id is None:
        raise BadRequestError("Missing business_id")
    return [ScheduleWeek.model_validate(s) for s in await ScheduleRepository(session).list_for_business(business_id)]


@router.put(
    "/update",
    summary="Update Business Rota",
    description="Set the weekdays of several rota rows at once; either every row is updated or none is.",
    responses={
        400: {"description": "The body is not a list of rota rows"},
        403: {"description": "Caller is not staff"},
        404: {"description": "A rota row was not found"},
    },
)
async def update_business_rota(body: List[ScheduleWeek], user: CurrentUserDep, session: SessionDep):
    _require_staff(user)
    schedules = ScheduleRepository(session)
    for entry in body:
        schedule = await schedules.get_by_id(entry.id)
        if schedule is None:
            await session.rollback()
            raise NotFoundError("Schedule", entry.id)
        for day in DAY_FIELDS:
            value = getattr(entry, day)
            if value is not None:
                setattr(schedule, day, value)
        session.add(schedule)
    await session.commit()
    logger.info(f"User '{user.id}' updated {len(body)} rota rows")
    return {"success": True}


@router.post(
    "/update",
    summary="Move Business To Another Day",
    responses={
        400: {"description": "Missing fields or invalid day"},
        403: {"description": "Caller is not staff"},
        404: {"description": "The business has no rota row for that week"},
    },
)
async def move_business_day(body: DayMove, user: CurrentUserDep, session: SessionDep):
    """Clear **currentDay** and set **newDay** on a business's rota row for **week**."""
    _require_staff(user)
    if body.business_id is None or body.week is None or not body.currentDay or not body.newDay:
        raise BadRequestError("Missing required fields")
    current_day, new_day = _weekday(body.currentDay), _weekday(body.newDay)

    schedules = ScheduleRepository(session)
    schedule = await schedules.get_week(body.business_id, _cycle_week(body.week))
    if schedule is None:
        raise NotFoundError("Schedule")
    setattr(schedule, current_day, False)
    setattr(schedule, new_day, True)
    await schedules.update(schedule)
    logger.info(f"User '{user.id}' moved business {body.business_id} week {body.week} from {current_day} to {new_day}")
    return {"success": True}


@router.get("/members", response_model=List[MemberRead], summary="List Crew Members")
async def list_members(user: CurrentUserDep, session: SessionDep) -> List[MemberRead]:
    return [MemberRead.model_validate(m) for m in await ScheduleMemberRepository(session).list_by_name()]


@router.post(
    "/members",
    response_model=MemberRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add Crew Member",
    responses={
        400: {"description": "Name missing"},
        403: {"description": "Caller is not staff"},
    },
)
async def create_member(body: MemberWrite, user: CurrentUserDep, session: SessionDep) -> MemberRead:
    _require_staff(user)
    if not body.name:
        raise BadRequestError("Name is required")
    member = ScheduleMember(name=body.name, **{day: bool(getattr(body, day)) for day in DAY_FIELDS})
    return MemberRead.model_validate(await ScheduleMemberRepository(session).create(member))


@router.put(
    "/members",
    response_model=MemberRead,
    summary="Update Crew Member",
    description="Replace a member's name and working days; omitted days become false.",
    responses={
        400: {"description": "Id or name missing"},
        403: {"description": "Caller is not staff"},
        404: {"description": "Member not found"},
    },
)
async def update_member(body: MemberWrite, user: CurrentUserDep, session: SessionDep) -> MemberRead:
    _require_staff(user)
    if body.id is None:
        raise BadRequestError("Member ID is required")
    if not body.name:
        raise BadRequestError("Name is required")
    members = ScheduleMemberRepository(session)
    member = await members.get_by_id(body.id)
    if member is None:
        raise NotFoundError("Member", body.id)
    member.name = body.name
    for day in DAY_FIELDS:
        setattr(member, day, bool(getattr(body, day)))
    return MemberRead.model_validate(await members.update(member))


@router.delete(
    "/members",
    summary="Delete Crew Member",
    responses={
        400: {"description": "Id missing"},
        403: {"description": "Caller is not staff"},
        404: {"description": "Member not found"},
    },
)
async def delete_member(body: IdBody, user: CurrentUserDep, session: SessionDep):
    _require_staff(user)
    if body.id is None:
        raise BadRequestError("Member ID is required")
    if not await ScheduleMemberRepository(session).delete_and_unassign(body.id):
        raise NotFoundError("Member", body.id)
    return {"success": True}


@router.get(
    "/daily-instances",
    response_model=InstanceWithItems,
    summary="Get Daily Cleaning Instance",
    responses={
        400: {"description": "Missing or invalid date, week or day"},
    },
)
async def get_daily_instance(
    user: CurrentUserDep,
    session: SessionDep,
    instance_date: Optional[date] = Query(default=None, alias="date"),
    week: Optional[int] = None,
    day: Optional[str] = None,
) -> InstanceWithItems:
    """
    Fetch the cleaning instance of a day, creating it on first access.

    A new instance gets one `pending` item for each business the rota
    schedules on **day** of **week**.
    """
    if instance_date is None or week is None or not day:
        raise BadRequestError("Missing required parameters: date, week, day")
    week, day = _cycle_week(week), _weekday(day)

    schedules = ScheduleRepository(session)
    instance = await schedules.get_instance(instance_date, week, day)
    if instance is None:
        businesses = [business for _, business in await schedules.scheduled_on(week, day)]
        try:
            instance, items = await schedules.create_instance(
                DailyCleanInstance(instance_date=instance_date, week_number=week, day_name=day, created_by=user.id),
                businesses,
            )
        except IntegrityError:
            # Another request created the same day first
            await session.rollback()
            instance = await schedules.get_instance(instance_date, week, day)
            if instance is None:
                raise
        else:
            logger.info(f"Created cleaning instance {instance.id} for {instance_date} with {len(items)} items")
            return InstanceWithItems(
                instance=InstanceRead.model_validate(instance),
                items=[CleanItemRead.model_validate(i) for i in items],
            )

    items = (await schedules.items_of([instance.id])).get(instance.id, [])
    return InstanceWithItems(
        instance=InstanceRead.model_validate(instance), items=[CleanItemRead.model_validate(i) for i in items]
    )


@router.post(
    "/daily-instances",
    response_model=CleanItemUpdated,
    summary="Mark Cleaning Item",
    responses={
        400: {"description": "Missing fields or invalid status"},
        403: {"description": "Caller is not staff"},
        404: {"description": "Item not found"},
    },
)
async def mark_clean_item(body: CleanItemUpdate, user: CurrentUserDep, session: SessionDep) -> CleanItemUpdated:
    """
    Set the status of one business in a daily instance.

    - `cleaned` stamps **cleaned_at** and clears any moved date.
    - `moved` requires **moved_to_date** and clears **cleaned_at**.
    - `pending` clears both.
    """
    _require_staff(user)
    if not body.instance_id or body.business_id is None or not body.status:
        raise BadRequestError("Missing required fields: instance_id, business_id, status")
    try:
        new_status = CleanStatus(body.status)
    except ValueError:
        raise BadRequestError(f"Invalid status: {body.status}") from None
    if new_status is CleanStatus.MOVED and body.moved_to_date is None:
        raise BadRequestError("moved_to_date is required when status is moved")

    schedules = ScheduleRepository(session)
    item = await schedules.get_item(body.instance_id, body.business_id)
    if item is None:
        raise NotFoundError("Clean item")

    item.status = new_status.value
    item.marked_by = user.id
    if new_status is CleanStatus.CLEANED:
        item.cleaned_at, item.moved_to_date = utc_now(), None
    elif new_status is CleanStatus.MOVED:
        item.cleaned_at, item.moved_to_date = None, body.moved_to_date
    else:
        item.cleaned_at, item.moved_to_date = None, None
    if body.notes is not None:
        item.notes = body.notes

    session.add(item)
    await session.commit()
    await session.refresh(item)
    logger.debug(f"User '{user.id}' marked item {item.id} {new_status.value}")
    return CleanItemUpdated(item=CleanItemRead.model_validate(item))


@router.patch(
    "/daily-instances",
    response_model=InstanceUpdated,
    summary="Update Daily Instance Status",
    responses={
        400: {"description": "Missing fields or invalid status"},
        403: {"description": "Caller is not staff"},
        404: {"description": "Instance not found"},
    },
)
async def update_daily_instance(body: InstanceUpdate, user: CurrentUserDep, session: SessionDep) -> InstanceUpdated:
    _require_staff(user)
    if not body.instance_id or not body.status:
        raise BadRequestError("Missing required fields: instance_id, status")
    try:
        new_status = InstanceStatus(body.status)
    except ValueError:
        raise BadRequestError(f"Invalid status: {body.status}") from None

    schedules = ScheduleRepository(session)
    instance = await schedules.get_instance_by_id(body.instance_id)
    if instance is None:
        raise NotFoundError("Daily instance", body.instance_id)
    instance.status = new_status.value
    session.add(instance)
    await session.commit()
    await session.refresh(instance)
    return InstanceUpdated(instance=InstanceRead.model_validate(instance))


@router.get(
    "/daily-instances/moved",
    response_model=MovedBusinesses,
    summary="List Businesses Moved To A Date",
    responses={
        400: {"description": "date missing"},
    },
)
async def list_moved_businesses(
    user: CurrentUserDep,
    session: SessionDep,
    target: Optional[date] = Query(default=None, alias="date"),
) -> MovedBusinesses:
    """Businesses moved to **date** from another day, presented as pending work for that date."""
    if target is None:
        raise BadRequestError("Missing required parameter: date")
    moved = await ScheduleRepository(session).moved_to(target)
    return MovedBusinesses(
        movedBusinesses=[
            MovedBusiness(
                id=item.id,
                business_id=item.business_id,
                business_name=item.business_name,
                address=item.address,
                before_open=item.before_open,
                notes=f"Moved from {instance.day_name}",
                original_date=instance.instance_date,
                moved_from=instance.day_name,
            )
            for item, instance in moved
        ]
    )


@router.get(
    "/daily-instances/monthly",
    response_model=MonthlyReport,
    summary="Monthly Cleaning Report",
    responses={
        400: {"description": "Missing or inverted date range"},
    },
)
async def monthly_report(
    user: CurrentUserDep,
    session: SessionDep,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> MonthlyReport:
    """
    Every daily instance between **start_date** and **end_date** inclusive,
    with a completion summary.

    The completion rate is the rounded percentage of items marked `cleaned`.
    """
    if start_date is None or end_date is None:
        raise BadRequestError("Missing required parameters: start_date, end_date")
    if start_date > end_date:
        raise BadRequestError("start_date must not be after end_date")

    schedules = ScheduleRepository(session)
    instances = await schedules.list_instances(start_date, end_date)
    items = await schedules.items_of([instance.id for instance in instances])

    total = cleaned = 0
    active_days = set()
    rows = []
    for instance in instances:
        instance_items = items.get(instance.id, [])
        if instance_items:
            active_days.add(instance.instance_date)
        total += len(instance_items)
        cleaned += sum(1 for item in instance_items if item.status == CleanStatus.CLEANED.value)
        rows.append(
            InstanceWithItemsRead.model_validate(
                {
                    **InstanceRead.model_validate(instance).model_dump(),
                    "items": [CleanItemRead.model_validate(i) for i in instance_items],
                }
            )
        )

    return MonthlyReport(
        instances=rows,
        summary=MonthlySummary(
            total_instances=len(instances),
            total_businesses_cleaned=cleaned,
            total_cleaning_sessions=cleaned,
            days_with_activity=len(active_days),
            completion_rate=round(cleaned / total * 100) if total else 0,
        ),
        date_range=DateRange(start_date=start_date, end_date=end_date),
    )
