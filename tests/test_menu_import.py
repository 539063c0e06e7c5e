"""Menu import reconciler tests."""

from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from menu_portal.core.errors import NotFoundError
from menu_portal.db.base import Base
from menu_portal.models import MenuCategory, MenuItem, ModifierGroup, ModifierItem, Property, Restaurant, SubCategory
from menu_portal.schemas.menu_import import JsonMenuPayload, SystemImportPayload
from menu_portal.services.crud import name_key
from menu_portal.services.menu_import import (
    SystemMenuImporter,
    import_menu_from_json,
    import_system_menu,
    parse_whole_number,
    split_condiment_codes,
)


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _build_session_local(tmp_path: Path, name: str) -> sessionmaker:
    engine = _build_test_engine(tmp_path / name)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def _seed_restaurants(session: Session) -> tuple[str, str]:
    prop = Property(name="Grand Plaza")
    session.add(prop)
    session.flush()
    cafe = Restaurant(property_id=prop.id, name="Cafe Mosaic")
    grill = Restaurant(property_id=prop.id, name="Ember Grill")
    session.add_all([cafe, grill])
    session.commit()
    return cafe.id, grill.id


def _system_payload(cafe_id: str) -> SystemImportPayload:
    return SystemImportPayload.model_validate(
        {
            "restaurantCategory": [
                {
                    "restaurantId": cafe_id,
                    "restaurantName": "Cafe Mosaic",
                    "categories": [
                        {
                            "id": 1,
                            "name": "Breakfast",
                            "sortOrder": 1,
                            "categories": [
                                {
                                    "id": 11,
                                    "name": "Eggs",
                                    "categories": [{"id": 111, "name": "Omelettes"}],
                                }
                            ],
                        },
                        {"id": 2, "name": "Drinks", "sortOrder": 2},
                    ],
                },
                {"restaurantId": 999, "restaurantName": "Ghost Kitchen", "categories": [{"name": "Soups"}]},
                {"restaurantName": "ember grill", "categories": [{"name": "Steaks"}]},
            ],
            "items": [
                {
                    "itemName": "Masala Omelette",
                    "itemCode": 501,
                    "itemPrice": "240",
                    "restaurantId": cafe_id,
                    "restaurantName": "Cafe Mosaic",
                    "category": "breakfast",
                    "calorificValue": "310 kcal",
                    "preparationTime": "12 min",
                    "perServe": 2,
                    "condimentCodes": "C1, C2,C1",
                },
                {
                    "itemName": "Filter Coffee",
                    "itemCode": "502",
                    "itemPrice": 90,
                    "restaurantName": "Cafe Mosaic",
                    "category": "Drinks",
                    "condimentCodes": "C1",
                },
                {"itemName": "Lost Item", "itemCode": "503", "restaurantName": "Cafe Mosaic", "category": "Dessert"},
                {"itemName": "Ghost Soup", "itemCode": "504", "restaurantName": "Ghost Kitchen", "category": "Soups"},
            ],
            "condiments": [
                {
                    "condimentName": "Milk Options",
                    "condimentCode": "C1",
                    "condimentItems": [
                        {"condimentItemName": "Oat milk", "condimentItemCode": "C1-1", "calorificValue": 40},
                        {"condimentItemName": "Soy milk", "condimentItemCode": "C1-2"},
                    ],
                },
                {"condimentName": "Toast", "condimentCode": "C2", "condimentItems": [{"condimentItemName": "Sourdough"}]},
            ],
        }
    )


def _count(session: Session, model) -> int:
    return session.scalar(select(func.count()).select_from(model))


def test_parsing_helpers() -> None:
    assert parse_whole_number("310 kcal") == 310
    assert parse_whole_number("12.6") == 13
    assert parse_whole_number(7) == 7
    assert parse_whole_number("n/a") is None
    assert parse_whole_number(None) is None
    assert split_condiment_codes(" C1, ,C2 ") == ["C1", "C2"]
    assert split_condiment_codes(None) == []


def test_system_import_builds_menu_and_reports_skips(tmp_path: Path) -> None:
    session_local = _build_session_local(tmp_path, "test_import_system.db")
    with session_local() as session:
        cafe_id, grill_id = _seed_restaurants(session)
        stats = import_system_menu(session, _system_payload(cafe_id))

        assert stats.restaurants_processed == 2
        assert [(skip.id, skip.name) for skip in stats.restaurants_skipped] == [("999", "Ghost Kitchen")]
        assert stats.categories_created == 3
        assert stats.subcategories_created == 2
        assert stats.nodes_flattened == 1
        assert stats.items_created == 2
        assert stats.items_skipped == 2
        assert stats.modifier_groups_created == 2
        assert stats.modifier_items_created == 3
        assert stats.allergens_created == 0

        breakfast = session.scalar(select(MenuCategory).where(MenuCategory.name == "Breakfast"))
        assert breakfast.restaurant_id == cafe_id
        subcategory_names = sorted(
            session.scalars(select(SubCategory.name).where(SubCategory.category_id == breakfast.id)).all()
        )
        assert subcategory_names == ["Eggs", "Omelettes"]
        assert session.scalar(select(MenuCategory).where(MenuCategory.name == "Steaks")).restaurant_id == grill_id

        omelette = session.scalar(select(MenuItem).where(MenuItem.item_code == "501"))
        assert omelette.price == Decimal("240")
        assert omelette.currency == "INR"
        assert omelette.calories == 310
        assert omelette.prep_time == 12
        assert omelette.portion == "2"
        assert len(omelette.modifier_group_ids) == 2

        oat = session.scalar(select(ModifierItem).where(ModifierItem.name == "Oat milk"))
        assert oat.calories == 40
        assert oat.price == Decimal("0")


def test_system_import_is_idempotent(tmp_path: Path) -> None:
    session_local = _build_session_local(tmp_path, "test_import_idempotent.db")
    with session_local() as session:
        cafe_id, _ = _seed_restaurants(session)
        import_system_menu(session, _system_payload(cafe_id))
        before = {model: _count(session, model) for model in (MenuCategory, SubCategory, MenuItem, ModifierGroup)}

        second = import_system_menu(session, _system_payload(cafe_id))
        after = {model: _count(session, model) for model in (MenuCategory, SubCategory, MenuItem, ModifierGroup)}

    assert before == after
    assert second.categories_created == 0
    assert second.subcategories_created == 0
    assert second.items_created == 0
    assert second.items_updated == 2
    assert second.modifier_groups_created == 0


def test_condiment_group_is_shared_by_items_of_a_restaurant(tmp_path: Path) -> None:
    session_local = _build_session_local(tmp_path, "test_import_group_reuse.db")
    with session_local() as session:
        cafe_id, _ = _seed_restaurants(session)
        import_system_menu(session, _system_payload(cafe_id))

        milk_groups = session.scalars(select(ModifierGroup).where(ModifierGroup.name == "Milk Options")).all()
        assert len(milk_groups) == 1
        omelette = session.scalar(select(MenuItem).where(MenuItem.item_code == "501"))
        coffee = session.scalar(select(MenuItem).where(MenuItem.item_code == "502"))
        assert milk_groups[0].id in omelette.modifier_group_ids
        assert coffee.modifier_group_ids == [milk_groups[0].id]


def test_existing_group_with_same_name_is_reused(tmp_path: Path) -> None:
    session_local = _build_session_local(tmp_path, "test_import_existing_group.db")
    with session_local() as session:
        cafe_id, _ = _seed_restaurants(session)
        existing = ModifierGroup(restaurant_id=cafe_id, name="milk options")
        session.add(existing)
        session.commit()

        existing_id = existing.id
        stats = import_system_menu(session, _system_payload(cafe_id))
        coffee = session.scalar(select(MenuItem).where(MenuItem.item_code == "502"))

        assert stats.modifier_groups_created == 1
        assert coffee.modifier_group_ids == [existing_id]


def test_atomic_import_rolls_back_everything_on_failure(tmp_path: Path, monkeypatch) -> None:
    session_local = _build_session_local(tmp_path, "test_import_atomic.db")
    with session_local() as session:
        cafe_id, _ = _seed_restaurants(session)

        def _explode(self, *args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(SystemMenuImporter, "_upsert_item", _explode)
        with pytest.raises(RuntimeError):
            import_system_menu(session, _system_payload(cafe_id), atomic=True)
        assert _count(session, MenuCategory) == 0

        with pytest.raises(RuntimeError):
            import_system_menu(session, _system_payload(cafe_id), atomic=False)
        assert _count(session, MenuCategory) == 3


def test_json_import_merges_by_name_and_code(tmp_path: Path) -> None:
    session_local = _build_session_local(tmp_path, "test_import_json.db")
    payload = JsonMenuPayload.model_validate(
        {
            "categories": [
                {
                    "name": "Mains",
                    "items": [{"name": "Dal Makhani", "itemCode": 11, "price": 320}],
                    "subcategories": [
                        {"name": "Tandoor", "items": [{"name": "Paneer Tikka", "price": "280.50", "currency": "INR"}]}
                    ],
                }
            ]
        }
    )
    with session_local() as session:
        cafe_id, _ = _seed_restaurants(session)
        first = import_menu_from_json(session, cafe_id, payload)
        second = import_menu_from_json(session, cafe_id, payload)

        assert (first.categories_created, first.subcategories_created, first.items_created) == (1, 1, 2)
        assert (second.categories_created, second.subcategories_created, second.items_created) == (0, 0, 0)
        assert second.items_updated == 2
        assert _count(session, MenuItem) == 2

        tikka = session.scalar(select(MenuItem).where(MenuItem.name == "Paneer Tikka"))
        assert tikka.subcategory_id is not None
        assert tikka.price == Decimal("280.50")

        with pytest.raises(NotFoundError):
            import_menu_from_json(session, "missing", payload)


def test_accented_names_match_regardless_of_case(tmp_path: Path) -> None:
    session_local = _build_session_local(tmp_path, "test_import_accents.db")
    with session_local() as session:
        prop = Property(name="Grand Plaza")
        session.add(prop)
        session.flush()
        cafe = Restaurant(property_id=prop.id, name="Café Été")
        session.add(cafe)
        session.commit()
        cafe_id = cafe.id

        payload = SystemImportPayload.model_validate(
            {
                "restaurantCategory": [
                    {"restaurantName": "CAFÉ ÉTÉ", "categories": [{"name": "Éclairs"}]},
                    {"restaurantId": cafe_id, "restaurantName": "Cafe Ete", "categories": [{"name": "ÉCLAIRS"}]},
                ],
                "items": [
                    {
                        "itemName": "Vanilla Éclair",
                        "itemCode": "E1",
                        "itemPrice": 150,
                        "restaurantName": "café été",
                        "category": "éclairs",
                    }
                ],
            }
        )
        first = import_system_menu(session, payload)
        second = import_system_menu(session, payload)

        assert first.restaurants_skipped == []
        assert first.restaurants_processed == 2
        assert first.categories_created == 1
        assert first.items_created == 1
        assert second.categories_created == 0
        assert second.items_created == 0
        assert second.items_updated == 1
        assert _count(session, MenuCategory) == 1
        assert _count(session, MenuItem) == 1


def test_name_key_folds_non_ascii_case() -> None:
    assert name_key("  ÉCLAIRS ") == name_key("éclairs")
    assert name_key("Straße") == name_key("STRASSE")
    assert name_key(None) == ""
