"""
Product catalog repository.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.catalog import CatalogSection, CatalogSubsection, Product
from .base import SQLModelRepository


class CatalogRepository(SQLModelRepository[Product]):
    """Repository for catalog sections, subsections and products."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Product)

    async def list_sections(self) -> List[CatalogSection]:
        result = await self.session.execute(select(CatalogSection).order_by(CatalogSection.name))
        return list(result.scalars().all())

    async def list_subsections(self, section_id: int) -> List[CatalogSubsection]:
        result = await self.session.execute(
            select(CatalogSubsection)
            .where(CatalogSubsection.section_id == section_id)
            .order_by(CatalogSubsection.name)
        )
        return list(result.scalars().all())

    async def get_subsection(self, subsection_id: int) -> Optional[CatalogSubsection]:
        return await self.session.get(CatalogSubsection, subsection_id)

    async def list_products(
        self, section_id: Optional[int] = None, subsection_id: Optional[int] = None
    ) -> List[Product]:
        stmt = select(Product)
        if section_id is not None:
            stmt = stmt.where(Product.section_id == section_id)
        if subsection_id is not None:
            stmt = stmt.where(Product.subsection_id == subsection_id)
        result = await self.session.execute(stmt.order_by(Product.name))
        return list(result.scalars().all())
