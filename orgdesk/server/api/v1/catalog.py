"""
Catalog and Products API Endpoints.

Read access to the section / subsection / product catalogue, and product
management for authenticated users.
"""

from typing import Optional

from fastapi import APIRouter, status

from orgdesk.core.database.entities import Product
from orgdesk.core.database.repositories import CatalogRepository
from orgdesk.core.errors import BadRequestError, NotFoundError
from orgdesk.core.logging_config import get_logger
from orgdesk.core.models.io.catalog import (
    ProductCreate,
    ProductCreated,
    ProductRead,
    ProductUpdate,
    SectionRead,
    SubsectionRead,
)
from orgdesk.server.services.deps import CurrentUserDep, SessionDep

logger = get_logger(__name__)

router = APIRouter()
products_router = APIRouter()


@router.get(
    "",
    summary="Query Catalog",
    description="List sections, the subsections of a section, or products filtered by section or subsection.",
    response_description="A list of sections, subsections or products depending on the query.",
    responses={
        400: {"description": "sectionId missing for a subcategory query"},
    },
)
async def query_catalog(
    session: SessionDep,
    getSections: bool = False,
    getSubcategories: bool = False,
    sectionId: Optional[int] = None,
    subcategoryId: Optional[int] = None,
):
    """
    Query the catalog.

    - **getSections=true**: Every section.
    - **getSubcategories=true&sectionId=**: The subsections of one section.
    - Otherwise products, optionally filtered by **sectionId** or **subcategoryId**.
    """
    catalog = CatalogRepository(session)
    if getSections:
        return [SectionRead.model_validate(s) for s in await catalog.list_sections()]
    if getSubcategories:
        if sectionId is None:
            raise BadRequestError("sectionId is required")
        return [SubsectionRead.model_validate(s) for s in await catalog.list_subsections(sectionId)]
    products = await catalog.list_products(section_id=sectionId, subsection_id=subcategoryId)
    return [ProductRead.model_validate(p) for p in products]


@products_router.post(
    "",
    response_model=ProductCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Add Product",
    responses={
        400: {"description": "Missing fields or unknown subsection"},
    },
)
async def create_product(body: ProductCreate, user: CurrentUserDep, session: SessionDep) -> ProductCreated:
    """
    Add a product to a subsection.

    - **Product_Name**, **Price**, **Sub_Section_ID**: Required.
    - **Description**, **Image_URL**: Optional.
    """
    if not body.name or body.price is None or body.subsection_id is None:
        raise BadRequestError("Product_Name, Price and Sub_Section_ID are required")
    catalog = CatalogRepository(session)
    subsection = await catalog.get_subsection(body.subsection_id)
    if subsection is None:
        raise BadRequestError(f"Unknown subsection: {body.subsection_id}")

    product = await catalog.create(
        Product(
            name=body.name,
            price=body.price,
            subsection_id=subsection.id,
            section_id=subsection.section_id,
            description=body.description,
            image_url=body.image_url,
        )
    )
    logger.info(f"User '{user.id}' added product {product.id} to subsection {subsection.id}")
    return ProductCreated(product=ProductRead.model_validate(product))


@products_router.put(
    "/{product_id}",
    response_model=ProductRead,
    summary="Update Product",
    responses={
        400: {"description": "Unknown subsection"},
        404: {"description": "Product not found"},
    },
)
async def update_product(
    product_id: int, body: ProductUpdate, user: CurrentUserDep, session: SessionDep
) -> ProductRead:
    catalog = CatalogRepository(session)
    product = await catalog.get_by_id(product_id)
    if product is None:
        raise NotFoundError("Product", product_id)

    changes = body.model_dump(exclude_unset=True)
    if changes.get("subsection_id") is not None:
        subsection = await catalog.get_subsection(changes["subsection_id"])
        if subsection is None:
            raise BadRequestError(f"Unknown subsection: {changes['subsection_id']}")
        product.section_id = subsection.section_id
    for field, value in changes.items():
        if value is not None:
            setattr(product, field, value)
    return ProductRead.model_validate(await catalog.update(product))


@products_router.delete(
    "/{product_id}",
    summary="Delete Product",
    responses={
        404: {"description": "Product not found"},
    },
)
async def delete_product(product_id: int, user: CurrentUserDep, session: SessionDep):
    if not await CatalogRepository(session).delete(product_id):
        raise NotFoundError("Product", product_id)
    return {"success": True, "message": "Product deleted successfully"}
