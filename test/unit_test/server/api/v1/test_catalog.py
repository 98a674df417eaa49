from typing import Dict

import pytest_asyncio
from httpx import AsyncClient

from orgdesk.core.database.entities import CatalogSection, CatalogSubsection, Product

CATALOG = "/api/v1/catalog"
PRODUCTS = "/api/v1/products"


@pytest_asyncio.fixture
async def catalog(session) -> Dict[str, int]:
    tools = CatalogSection(name="Tools")
    books = CatalogSection(name="Books")
    session.add_all([tools, books])
    await session.flush()
    hammers = CatalogSubsection(section_id=tools.id, name="Hammers")
    novels = CatalogSubsection(section_id=books.id, name="Novels")
    session.add_all([hammers, novels])
    await session.flush()
    hammer = Product(name="Claw hammer", price=19.5, subsection_id=hammers.id, section_id=tools.id)
    session.add(hammer)
    await session.commit()
    return {"tools": tools.id, "books": books.id, "hammers": hammers.id, "novels": novels.id, "hammer": hammer.id}


class TestCatalogQueries:
    async def test_sections_are_public(self, client: AsyncClient, catalog):
        response = await client.get(CATALOG, params={"getSections": "true"})

        assert response.status_code == 200
        assert [s["name"] for s in response.json()] == ["Books", "Tools"]

    async def test_subcategories_of_section(self, client: AsyncClient, catalog):
        response = await client.get(CATALOG, params={"getSubcategories": "true", "sectionId": catalog["tools"]})

        assert response.json() == [{"id": catalog["hammers"], "section_id": catalog["tools"], "name": "Hammers"}]

    async def test_subcategories_need_section(self, client: AsyncClient, catalog):
        response = await client.get(CATALOG, params={"getSubcategories": "true"})

        assert response.status_code == 400
        assert response.json() == {"error": "sectionId is required"}

    async def test_products_filtered(self, client: AsyncClient, catalog):
        everything = await client.get(CATALOG)
        by_section = await client.get(CATALOG, params={"sectionId": catalog["books"]})
        by_subsection = await client.get(CATALOG, params={"subcategoryId": catalog["hammers"]})

        assert [p["name"] for p in everything.json()] == ["Claw hammer"]
        assert by_section.json() == []
        assert [p["price"] for p in by_subsection.json()] == [19.5]


class TestProducts:
    async def test_create_product_with_front_end_names(self, client: AsyncClient, as_user, catalog):
        response = await client.post(
            PRODUCTS,
            json={"Product_Name": "Paperback", "Price": 9.99, "Sub_Section_ID": catalog["novels"]},
            headers=as_user("admin"),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Product added successfully"
        assert body["product"]["name"] == "Paperback"
        assert body["product"]["section_id"] == catalog["books"]

    async def test_create_requires_authentication(self, client: AsyncClient, users, catalog):
        response = await client.post(
            PRODUCTS, json={"Product_Name": "Paperback", "Price": 9.99, "Sub_Section_ID": catalog["novels"]}
        )

        assert response.status_code == 401

    async def test_create_validation(self, client: AsyncClient, as_user, catalog):
        missing = await client.post(PRODUCTS, json={"Product_Name": "Paperback"}, headers=as_user("admin"))
        unknown = await client.post(
            PRODUCTS, json={"Product_Name": "Paperback", "Price": 1, "Sub_Section_ID": 999}, headers=as_user("admin")
        )

        assert missing.json() == {"error": "Product_Name, Price and Sub_Section_ID are required"}
        assert unknown.json() == {"error": "Unknown subsection: 999"}

    async def test_update_moves_section_with_subsection(self, client: AsyncClient, as_user, catalog):
        response = await client.put(
            f"{PRODUCTS}/{catalog['hammer']}",
            json={"Price": 21.0, "Sub_Section_ID": catalog["novels"]},
            headers=as_user("admin"),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["price"] == 21.0
        assert body["subsection_id"] == catalog["novels"]
        assert body["section_id"] == catalog["books"]
        assert body["name"] == "Claw hammer"

    async def test_update_missing_product(self, client: AsyncClient, as_user, catalog):
        response = await client.put(f"{PRODUCTS}/999", json={"Price": 1}, headers=as_user("admin"))

        assert response.status_code == 404
        assert response.json() == {"error": "Product 999 not found"}

    async def test_delete_product(self, client: AsyncClient, as_user, catalog):
        response = await client.delete(f"{PRODUCTS}/{catalog['hammer']}", headers=as_user("admin"))
        again = await client.delete(f"{PRODUCTS}/{catalog['hammer']}", headers=as_user("admin"))

        assert response.json() == {"success": True, "message": "Product deleted successfully"}
        assert again.status_code == 404
