"""
Catalog I/O models for API requests and responses.

Product requests accept the field names used by the catalog front-end
(``Product_Name``, ``Price``, ``Sub_Section_ID``) as aliases.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SectionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class SubsectionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    section_id: int
    name: str


class ProductRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: float
    subsection_id: int
    section_id: Optional[int] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


class ProductCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, alias="Product_Name")
    price: Optional[float] = Field(default=None, alias="Price")
    subsection_id: Optional[int] = Field(default=None, alias="Sub_Section_ID")
    description: Optional[str] = Field(default=None, alias="Description")
    image_url: Optional[str] = Field(default=None, alias="Image_URL")


class ProductUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, alias="Product_Name")
    price: Optional[float] = Field(default=None, alias="Price")
    subsection_id: Optional[int] = Field(default=None, alias="Sub_Section_ID")
    description: Optional[str] = Field(default=None, alias="Description")
    image_url: Optional[str] = Field(default=None, alias="Image_URL")


class ProductCreated(BaseModel):
    message: str = "Product added successfully"
    product: ProductRead
