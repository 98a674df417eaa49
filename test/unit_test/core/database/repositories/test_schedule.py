"""Unit tests for the cleaning schedule repositories."""

from __future__ import annotations

from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError

from orgdesk.core.database.entities import Business, DailyCleanInstance, Schedule, ScheduleJob, ScheduleMember
from orgdesk.core.database.repositories import BusinessRepository, ScheduleMemberRepository, ScheduleRepository


@pytest_asyncio.fixture
async def businesses(in_memory_session):
    repo = BusinessRepository(in_memory_session)
    office = await repo.create_with_rota(Business(business_name="Office", address="1 Main St"), weeks=4)
    bakery = await repo.create_with_rota(Business(business_name="Bakery", address="2 High St"), weeks=4)
    return {"office": office, "bakery": bakery}


async def test_create_with_rota_adds_one_row_per_week(in_memory_session, businesses):
    rows = await ScheduleRepository(in_memory_session).list_for_business(businesses["office"].id)

    assert [row.week for row in rows] == [1, 2, 3, 4]
    assert not any(row.monday for row in rows)


async def test_list_filters_orders_and_pages(in_memory_session, businesses):
    repo = ScheduleRepository(in_memory_session)

    page = await repo.list(filters={"week": 2}, order_by=Schedule.business_id, limit=1, offset=1)
    everything = await repo.list(filters={"week": None})
    unknown_column = await repo.list(filters={"colour": "red"})

    assert [(row.business_id, row.week) for row in page] == [(businesses["bakery"].id, 2)]
    assert len(everything) == 8
    assert len(unknown_column) == 8


async def test_delete_with_rota_removes_rows_and_jobs(in_memory_session, businesses):
    repo = ScheduleRepository(in_memory_session)
    week1 = await repo.get_week(businesses["office"].id, 1)
    in_memory_session.add(ScheduleJob(schedule_id=week1.id, job_type="Vacuum"))
    await in_memory_session.commit()

    assert await BusinessRepository(in_memory_session).delete_with_rota(businesses["office"].id) is True
    assert await BusinessRepository(in_memory_session).delete_with_rota(businesses["office"].id) is False
    assert await repo.list_for_business(businesses["office"].id) == []
    assert await repo.jobs_for([week1.id]) == {}


async def test_scheduled_on_joins_businesses(in_memory_session, businesses):
    repo = ScheduleRepository(in_memory_session)
    week1 = await repo.get_week(businesses["office"].id, 1)
    week1.tuesday = True
    await repo.update(week1)

    rows = await repo.scheduled_on(1, "tuesday")

    assert [business.business_name for _, business in rows] == ["Office"]
    assert await repo.scheduled_on(1, "monday") == []


async def test_deleting_member_unassigns_jobs(in_memory_session, businesses):
    repo = ScheduleRepository(in_memory_session)
    members = ScheduleMemberRepository(in_memory_session)
    ana = await members.create(ScheduleMember(name="Ana"))
    week1 = await repo.get_week(businesses["office"].id, 1)
    in_memory_session.add(ScheduleJob(schedule_id=week1.id, job_type="Vacuum", member_id=ana.id))
    await in_memory_session.commit()

    assert await members.delete_and_unassign(ana.id) is True

    [(job, member)] = (await repo.jobs_for([week1.id]))[week1.id]
    assert job.member_id is None
    assert member is None


async def test_instance_snapshot_and_uniqueness(in_memory_session, businesses):
    repo = ScheduleRepository(in_memory_session)
    day = date(2026, 10, 19)

    instance, items = await repo.create_instance(
        DailyCleanInstance(instance_date=day, week_number=1, day_name="monday"), list(businesses.values())
    )

    assert {item.business_name for item in items} == {"Office", "Bakery"}
    assert all(item.status == "pending" for item in items)
    assert (await repo.get_instance(day, 1, "monday")).id == instance.id
    with pytest.raises(IntegrityError):
        await repo.create_instance(DailyCleanInstance(instance_date=day, week_number=1, day_name="monday"), [])
