"""
Cleaning schedule repository.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Tuple

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.schedule import (
    Business,
    DailyCleanInstance,
    DailyCleanItem,
    Schedule,
    ScheduleJob,
    ScheduleMember,
)
from .base import SQLModelRepository


class BusinessRepository(SQLModelRepository[Business]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Business)

    async def list_by_name(self) -> List[Business]:
        return await self.list(order_by=Business.business_name)

    async def create_with_rota(self, business: Business, weeks: int) -> Business:
        """Store a business with an empty rota row for each week of the cycle."""
        self.session.add(business)
        await self.session.flush()
        self.session.add_all([Schedule(business_id=business.id, week=week) for week in range(1, weeks + 1)])
        await self.session.commit()
        await self.session.refresh(business)
        return business

    async def delete_with_rota(self, business_id: int) -> bool:
        business = await self.get_by_id(business_id)
        if business is None:
            return False
        schedule_ids = select(Schedule.id).where(Schedule.business_id == business_id)
        await self.session.execute(delete(ScheduleJob).where(ScheduleJob.schedule_id.in_(schedule_ids)))
        await self.session.execute(delete(Schedule).where(Schedule.business_id == business_id))
        await self.session.delete(business)
        await self.session.commit()
        return True


class ScheduleMemberRepository(SQLModelRepository[ScheduleMember]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ScheduleMember)

    async def list_by_name(self) -> List[ScheduleMember]:
        return await self.list(order_by=ScheduleMember.name)

    async def delete_and_unassign(self, member_id: int) -> bool:
        """Delete a member; their jobs stay on the rota unassigned."""
        member = await self.get_by_id(member_id)
        if member is None:
            return False
        await self.session.execute(
            update(ScheduleJob).where(ScheduleJob.member_id == member_id).values(member_id=None)
        )
        await self.session.delete(member)
        await self.session.commit()
        return True


class ScheduleRepository(SQLModelRepository[Schedule]):
    """Rota rows, their jobs, and the daily cleaning instances built from them."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Schedule)

    async def list_for_business(self, business_id: int) -> List[Schedule]:
        return await self.list(filters={"business_id": business_id}, order_by=Schedule.week)

    async def scheduled_on(self, week: int, day: str) -> List[Tuple[Schedule, Business]]:
        """Rota rows of ``week`` with ``day`` set, joined with their business."""
        result = await self.session.execute(
            select(Schedule, Business)
            .join(Business, Business.id == Schedule.business_id)
            .where(Schedule.week == week, getattr(Schedule, day).is_(True))
            .order_by(Business.business_name)
        )
        return list(result.all())

    async def jobs_for(self, schedule_ids: List[int]) -> Dict[int, List[Tuple[ScheduleJob, Optional[ScheduleMember]]]]:
        if not schedule_ids:
            return {}
        result = await self.session.execute(
            select(ScheduleJob, ScheduleMember)
            .outerjoin(ScheduleMember, ScheduleMember.id == ScheduleJob.member_id)
            .where(ScheduleJob.schedule_id.in_(schedule_ids))
            .order_by(ScheduleJob.id)
        )
        jobs: Dict[int, List[Tuple[ScheduleJob, Optional[ScheduleMember]]]] = {}
        for job, member in result.all():
            jobs.setdefault(job.schedule_id, []).append((job, member))
        return jobs

    async def get_week(self, business_id: int, week: int) -> Optional[Schedule]:
        rows = await self.list(filters={"business_id": business_id, "week": week}, limit=1)
        return rows[0] if rows else None

    async def get_instance(self, instance_date: date, week: int, day: str) -> Optional[DailyCleanInstance]:
        result = await self.session.execute(
            select(DailyCleanInstance).where(
                DailyCleanInstance.instance_date == instance_date,
                DailyCleanInstance.week_number == week,
                DailyCleanInstance.day_name == day,
            )
        )
        return result.scalars().first()

    async def create_instance(
        self, instance: DailyCleanInstance, businesses: List[Business]
    ) -> Tuple[DailyCleanInstance, List[DailyCleanItem]]:
        """Store a new instance with one pending item per scheduled business."""
        self.session.add(instance)
        await self.session.flush()
        items = [
            DailyCleanItem(
                instance_id=instance.id,
                business_id=business.id,
                business_name=business.business_name,
                address=business.address,
                before_open=business.before_open,
            )
            for business in businesses
        ]
        self.session.add_all(items)
        await self.session.commit()
        return instance, items

    async def get_instance_by_id(self, instance_id: str) -> Optional[DailyCleanInstance]:
        return await self.session.get(DailyCleanInstance, instance_id)

    async def items_of(self, instance_ids: List[str]) -> Dict[str, List[DailyCleanItem]]:
        if not instance_ids:
            return {}
        result = await self.session.execute(
            select(DailyCleanItem)
            .where(DailyCleanItem.instance_id.in_(instance_ids))
            .order_by(DailyCleanItem.business_name)
        )
        items: Dict[str, List[DailyCleanItem]] = {}
        for item in result.scalars().all():
            items.setdefault(item.instance_id, []).append(item)
        return items

    async def get_item(self, instance_id: str, business_id: int) -> Optional[DailyCleanItem]:
        result = await self.session.execute(
            select(DailyCleanItem).where(
                DailyCleanItem.instance_id == instance_id, DailyCleanItem.business_id == business_id
            )
        )
        return result.scalars().first()

    async def list_instances(self, start: date, end: date) -> List[DailyCleanInstance]:
        result = await self.session.execute(
            select(DailyCleanInstance)
            .where(DailyCleanInstance.instance_date >= start, DailyCleanInstance.instance_date <= end)
            .order_by(DailyCleanInstance.instance_date)
        )
        return list(result.scalars().all())

    async def moved_to(self, target: date) -> List[Tuple[DailyCleanItem, DailyCleanInstance]]:
        result = await self.session.execute(
            select(DailyCleanItem, DailyCleanInstance)
            .join(DailyCleanInstance, DailyCleanInstance.id == DailyCleanItem.instance_id)
            .where(DailyCleanItem.status == "moved", DailyCleanItem.moved_to_date == target)
            .order_by(DailyCleanItem.business_name)
        )
        return list(result.all())
