"""Guest-facing menu tree tests."""

from decimal import Decimal
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from menu_portal.db import session as db_session
from menu_portal.db.base import Base
from menu_portal.main import app
from menu_portal.models import Allergen, MenuCategory, MenuItem, ModifierGroup, ModifierItem, Property, Restaurant, SubCategory


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


def _seed_menu(testing_session_local: sessionmaker) -> str:
    with testing_session_local() as setup_session:
        prop = Property(name="Riverside")
        setup_session.add(prop)
        setup_session.flush()
        restaurant = Restaurant(property_id=prop.id, name="Noodle Bar")
        setup_session.add(restaurant)
        setup_session.flush()
        soups = MenuCategory(restaurant_id=restaurant.id, name="Soups", sort_order=2)
        starters = MenuCategory(restaurant_id=restaurant.id, name="Starters", sort_order=1)
        hidden = MenuCategory(restaurant_id=restaurant.id, name="Staff meals", sort_order=0, active_flag=False)
        setup_session.add_all([soups, starters, hidden])
        setup_session.flush()
        ramen = SubCategory(category_id=soups.id, name="Ramen")
        setup_session.add(ramen)
        setup_session.flush()
        peanuts = Allergen(name="Peanuts")
        sesame = Allergen(name="Sesame")
        group = ModifierGroup(restaurant_id=restaurant.id, name="Toppings")
        group.items.append(ModifierItem(name="Egg", price=Decimal("1.20")))
        setup_session.add_all([peanuts, sesame, group])
        setup_session.flush()

        tonkotsu = MenuItem(
            category_id=soups.id, subcategory_id=ramen.id, name="Tonkotsu", price=Decimal("13.00"), sort_order=2
        )
        shoyu = MenuItem(category_id=soups.id, subcategory_id=ramen.id, name="Shoyu", price=Decimal("12.00"), sort_order=1)
        miso = MenuItem(category_id=soups.id, name="Miso soup", price=Decimal("4.00"))
        gyoza = MenuItem(category_id=starters.id, name="Gyoza", price=Decimal("6.50"), sold_out=True)
        gyoza.allergens = [sesame, peanuts]
        gyoza.set_modifier_group_ids([group.id])
        retired = MenuItem(category_id=starters.id, name="Retired roll", price=Decimal("5.00"), availability_flag=False)
        secret = MenuItem(category_id=hidden.id, name="Family meal", price=Decimal("0.00"))
        setup_session.add_all([tonkotsu, shoyu, miso, gyoza, retired, secret])
        setup_session.commit()
        return restaurant.id


def test_public_menu_lists_active_categories_and_available_items(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_database(tmp_path, monkeypatch, "test_public_menu.db")
    restaurant_id = _seed_menu(testing_session_local)

    with TestClient(app) as client:
        response = client.get(f"/api/public/menu/{restaurant_id}")

    assert response.status_code == 200
    menu = response.json()["data"]
    assert menu["restaurant"]["name"] == "Noodle Bar"
    assert [category["name"] for category in menu["categories"]] == ["Starters", "Soups"]

    starters, soups = menu["categories"]
    assert [item["name"] for item in starters["items"]] == ["Gyoza"]
    gyoza = starters["items"][0]
    assert gyoza["soldOut"] is True
    assert gyoza["allergens"] == ["Peanuts", "Sesame"]
    assert gyoza["modifierGroupIds"] == [menu["modifierGroups"][0]["id"]]
    assert menu["modifierGroups"][0]["items"][0]["price"] == 1.2

    assert [item["name"] for item in soups["items"]] == ["Miso soup"]
    assert [sub["name"] for sub in soups["subcategories"]] == ["Ramen"]
    assert [item["name"] for item in soups["subcategories"][0]["items"]] == ["Shoyu", "Tonkotsu"]


def test_public_menu_by_query_matches_path_variant(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_database(tmp_path, monkeypatch, "test_public_menu_query.db")
    restaurant_id = _seed_menu(testing_session_local)

    with TestClient(app) as client:
        by_path = client.get(f"/api/public/menu/{restaurant_id}")
        by_query = client.get(f"/api/public/menu?restaurantId={restaurant_id}")

    assert by_query.status_code == 200
    assert by_query.json()["data"]["categories"] == by_path.json()["data"]["categories"]


def test_public_menu_for_unknown_restaurant(tmp_path: Path, monkeypatch) -> None:
    _use_test_database(tmp_path, monkeypatch, "test_public_menu_missing.db")

    with TestClient(app) as client:
        response = client.get("/api/public/menu/nope")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Restaurant not found"}
