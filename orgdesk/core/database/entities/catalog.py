"""
Product catalog entity models.

Products belong to a subsection, which belongs to a section.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, UTCDateTime, utc_now


class CatalogSection(Base, table=True):
    """Table: catalog_sections"""

    __tablename__ = "catalog_sections"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)


class CatalogSubsection(Base, table=True):
    """Table: catalog_subsections"""

    __tablename__ = "catalog_subsections"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    section_id: int = Field(foreign_key="catalog_sections.id", index=True)
    name: str


class Product(Base, table=True):
    """Table: products"""

    __tablename__ = "products"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    price: float
    subsection_id: int = Field(foreign_key="catalog_subsections.id", index=True)
    section_id: Optional[int] = Field(default=None, foreign_key="catalog_sections.id", index=True)
    description: Optional[str] = Field(default=None)
    image_url: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})
