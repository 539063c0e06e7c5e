"""Menu tree API tests: categories, subcategories, items and bulk actions."""

from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from menu_portal.db import session as db_session
from menu_portal.db.base import Base
from menu_portal.main import app
from menu_portal.models import MenuCategory, Property, Restaurant


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _use_test_database(tmp_path: Path, monkeypatch, name: str) -> sessionmaker:
    engine = _build_test_engine(tmp_path / name)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)
    return testing_session_local


def _auth_headers(client: TestClient, email: str, role: str, property_id: str | None = None) -> dict[str, str]:
    payload = {"name": email.split("@")[0], "email": email, "password": "secret123", "role": role}
    if property_id is not None:
        payload["propertyId"] = property_id
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}


def _seed_two_properties(testing_session_local: sessionmaker) -> dict[str, str]:
    with testing_session_local() as setup_session:
        north = Property(name="North Wing")
        south = Property(name="South Wing")
        setup_session.add_all([north, south])
        setup_session.flush()
        bistro = Restaurant(property_id=north.id, name="Bistro")
        grill = Restaurant(property_id=south.id, name="Grill")
        setup_session.add_all([bistro, grill])
        setup_session.flush()
        setup_session.add(MenuCategory(restaurant_id=grill.id, name="Steaks"))
        setup_session.commit()
        return {
            "north_id": north.id,
            "south_id": south.id,
            "bistro_id": bistro.id,
            "grill_id": grill.id,
        }


def test_menu_tree_crud_flow(tmp_path: Path, monkeypatch) -> None:
    _use_test_database(tmp_path, monkeypatch, "test_menu_tree_crud.db")

    with TestClient(app) as client:
        headers = _auth_headers(client, "root@example.com", "SuperAdmin")
        prop = client.post("/api/properties", json={"name": "Harbour"}, headers=headers)
        assert prop.status_code == 201
        restaurant = client.post(
            "/api/restaurants",
            json={"propertyId": prop.json()["data"]["id"], "name": "Dockside", "cuisine": "Seafood"},
            headers=headers,
        )
        assert restaurant.status_code == 201
        restaurant_id = restaurant.json()["data"]["id"]

        category = client.post(
            "/api/categories", json={"restaurantId": restaurant_id, "name": "Mains", "sortOrder": 2}, headers=headers
        )
        assert category.status_code == 201
        category_id = category.json()["data"]["id"]
        subcategory = client.post(
            "/api/subcategories", json={"categoryId": category_id, "name": "Fish"}, headers=headers
        )
        assert subcategory.status_code == 201
        subcategory_id = subcategory.json()["data"]["id"]
        allergen = client.post("/api/allergens", json={"name": "Fish"}, headers=headers)
        assert allergen.status_code == 201
        allergen_id = allergen.json()["data"]["id"]

        created = client.post(
            "/api/menu-items",
            json={
                "categoryId": category_id,
                "subCategoryId": subcategory_id,
                "name": "Sea bass",
                "price": "18.50",
                "currency": "EUR",
                "allergenIds": [allergen_id],
                "specialType": "Chef's Special",
            },
            headers=headers,
        )
        assert created.status_code == 201
        item = created.json()["data"]
        assert item["price"] == 18.5
        assert item["currency"] == "EUR"
        assert item["subCategoryId"] == subcategory_id
        assert item["allergenIds"] == [allergen_id]
        assert item["availabilityFlag"] is True
        assert item["maxOrderQty"] == 10

        listed = client.get(f"/api/menu-items?categoryId={category_id}", headers=headers)
        assert [entry["id"] for entry in listed.json()["data"]] == [item["id"]]

        updated = client.put(
            f"/api/menu-items/{item['id']}",
            json={"soldOut": True, "allergenIds": [], "price": 19},
            headers=headers,
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["soldOut"] is True
        assert updated.json()["data"]["allergenIds"] == []
        assert updated.json()["data"]["price"] == 19.0
        assert updated.json()["data"]["name"] == "Sea bass"

        deleted = client.delete(f"/api/menu-items/{item['id']}", headers=headers)
        assert deleted.status_code == 200
        missing = client.get(f"/api/menu-items/{item['id']}", headers=headers)

    assert missing.status_code == 404
    assert missing.json() == {"success": False, "message": "Menu item not found"}


def test_item_subcategory_must_belong_to_its_category(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_database(tmp_path, monkeypatch, "test_menu_subcategory_check.db")
    ids = _seed_two_properties(testing_session_local)

    with TestClient(app) as client:
        headers = _auth_headers(client, "root@example.com", "SuperAdmin")
        starters = client.post(
            "/api/categories", json={"restaurantId": ids["bistro_id"], "name": "Starters"}, headers=headers
        ).json()["data"]
        desserts = client.post(
            "/api/categories", json={"restaurantId": ids["bistro_id"], "name": "Desserts"}, headers=headers
        ).json()["data"]
        soups = client.post(
            "/api/subcategories", json={"categoryId": starters["id"], "name": "Soups"}, headers=headers
        ).json()["data"]
        response = client.post(
            "/api/menu-items",
            json={"categoryId": desserts["id"], "subCategoryId": soups["id"], "name": "Tiramisu", "price": 6},
            headers=headers,
        )

    assert response.status_code == 400
    assert response.json()["message"] == "Subcategory does not belong to the item's category"


def test_invalid_item_payload_uses_error_envelope(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_database(tmp_path, monkeypatch, "test_menu_item_payload.db")
    _seed_two_properties(testing_session_local)

    with TestClient(app) as client:
        headers = _auth_headers(client, "root@example.com", "SuperAdmin")
        response = client.post(
            "/api/menu-items",
            json={"categoryId": "whatever", "name": "Broken", "price": -1},
            headers=headers,
        )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "price" in body["message"]


def test_bulk_actions(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_database(tmp_path, monkeypatch, "test_menu_bulk.db")
    ids = _seed_two_properties(testing_session_local)

    with TestClient(app) as client:
        headers = _auth_headers(client, "root@example.com", "SuperAdmin")
        category = client.post(
            "/api/categories", json={"restaurantId": ids["bistro_id"], "name": "Drinks"}, headers=headers
        ).json()["data"]
        item_ids = [
            client.post(
                "/api/menu-items", json={"categoryId": category["id"], "name": name, "price": 3}, headers=headers
            ).json()["data"]["id"]
            for name in ("Lemonade", "Iced tea")
        ]

        disabled = client.post("/api/menu-items/bulk", json={"action": "disable", "itemIds": item_ids}, headers=headers)
        missing_currency = client.post(
            "/api/menu-items/bulk", json={"action": "change_currency", "itemIds": item_ids}, headers=headers
        )
        changed = client.post(
            "/api/menu-items/bulk",
            json={"action": "change_currency", "itemIds": item_ids, "currency": "GBP"},
            headers=headers,
        )
        unknown = client.post("/api/menu-items/bulk", json={"action": "explode", "itemIds": item_ids}, headers=headers)
        items = client.get(f"/api/menu-items?categoryId={category['id']}", headers=headers).json()["data"]

    assert disabled.status_code == 200
    assert disabled.json()["data"] == {"action": "disable", "updated": 2}
    assert missing_currency.status_code == 400
    assert missing_currency.json()["message"] == "Currency is required for change_currency"
    assert changed.json()["data"]["updated"] == 2
    assert unknown.status_code == 400
    assert {item["currency"] for item in items} == {"GBP"}
    assert {item["availabilityFlag"] for item in items} == {False}


def test_manager_is_scoped_to_own_property(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_database(tmp_path, monkeypatch, "test_menu_scope.db")
    ids = _seed_two_properties(testing_session_local)

    with TestClient(app) as client:
        manager = _auth_headers(client, "manager@example.com", "Manager", ids["north_id"])
        visible = client.get("/api/restaurants", headers=manager)
        own = client.post("/api/categories", json={"restaurantId": ids["bistro_id"], "name": "Brunch"}, headers=manager)
        foreign = client.post(
            "/api/categories", json={"restaurantId": ids["grill_id"], "name": "Sides"}, headers=manager
        )
        foreign_list = client.get(f"/api/categories?restaurantId={ids['grill_id']}", headers=manager)
        scoped_list = client.get("/api/categories", headers=manager)

    assert [restaurant["id"] for restaurant in visible.json()["data"]] == [ids["bistro_id"]]
    assert own.status_code == 201
    assert foreign.status_code == 403
    assert foreign.json()["message"] == "Access to this restaurant is not allowed"
    assert foreign_list.status_code == 403
    assert [category["name"] for category in scoped_list.json()["data"]] == ["Brunch"]


def test_staff_cannot_write_menu(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_database(tmp_path, monkeypatch, "test_menu_staff.db")
    ids = _seed_two_properties(testing_session_local)

    with TestClient(app) as client:
        staff = _auth_headers(client, "staff@example.com", "Staff", ids["north_id"])
        read = client.get(f"/api/categories?restaurantId={ids['bistro_id']}", headers=staff)
        write = client.post("/api/categories", json={"restaurantId": ids["bistro_id"], "name": "Nope"}, headers=staff)

    assert read.status_code == 200
    assert write.status_code == 403
    assert write.json() == {"success": False, "message": "Manager role required"}


def test_deleting_category_via_api_removes_items(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_database(tmp_path, monkeypatch, "test_menu_delete_category.db")
    ids = _seed_two_properties(testing_session_local)

    with TestClient(app) as client:
        headers = _auth_headers(client, "root@example.com", "SuperAdmin")
        category = client.post(
            "/api/categories", json={"restaurantId": ids["bistro_id"], "name": "Specials"}, headers=headers
        ).json()["data"]
        item = client.post(
            "/api/menu-items", json={"categoryId": category["id"], "name": "Soup of the day", "price": 5}, headers=headers
        ).json()["data"]
        deleted = client.delete(f"/api/categories/{category['id']}", headers=headers)
        item_after = client.get(f"/api/menu-items/{item['id']}", headers=headers)
        audit = client.get("/api/audit-logs?entityType=Category", headers=headers)

    assert deleted.status_code == 200
    assert item_after.status_code == 404
    actions = [entry["actionType"] for entry in audit.json()["data"]]
    assert "Delete" in actions
    assert "Create" in actions
