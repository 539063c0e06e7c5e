"""Cascade delete policy tests."""

from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from menu_portal.core.errors import NotFoundError
from menu_portal.db.base import Base
from menu_portal.models import (
    Allergen,
    ApiToken,
    Attribute,
    LiveOrder,
    LiveOrderItem,
    MenuCategory,
    MenuItem,
    MenuItemModifierGroup,
    ModifierGroup,
    ModifierItem,
    Property,
    Restaurant,
    Sale,
    SubCategory,
    User,
)
from menu_portal.services.cascade import CASCADE_POLICY, delete_entity


def _build_session_local(tmp_path: Path, name: str) -> sessionmaker:
    engine: Engine = create_engine(f"sqlite:///{tmp_path / name}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def _count(session: Session, model) -> int:
    return session.scalar(select(func.count()).select_from(model))


def _seed(session: Session) -> dict[str, str]:
    prop = Property(name="Lakeside")
    session.add(prop)
    session.flush()
    restaurant = Restaurant(property_id=prop.id, name="Pier 9")
    session.add(restaurant)
    session.flush()
    category = MenuCategory(restaurant_id=restaurant.id, name="Seafood")
    session.add(category)
    session.flush()
    subcategory = SubCategory(category_id=category.id, name="Grilled")
    allergen = Allergen(name="Shellfish")
    attribute = Attribute(name="Spice level", type="Number")
    group = ModifierGroup(restaurant_id=restaurant.id, name="Sauces")
    group.items.append(ModifierItem(name="Aioli", price=Decimal("1.00")))
    session.add_all([subcategory, allergen, attribute, group])
    session.flush()
    item = MenuItem(
        category_id=category.id,
        subcategory_id=subcategory.id,
        name="Prawns",
        price=Decimal("14.00"),
        attributes={attribute.id: 3, "other": "kept"},
    )
    item.allergens = [allergen]
    item.set_modifier_group_ids([group.id])
    session.add(item)
    order = LiveOrder(restaurant_id=restaurant.id, status="New", total_amount=Decimal("14.00"))
    order.items.append(LiveOrderItem(name="Prawns", quantity=1, unit_price=Decimal("14.00"), line_total=Decimal("14.00")))
    session.add(order)
    session.add(Sale(restaurant_id=restaurant.id, total_amount=Decimal("30.00")))
    session.add(ApiToken(name="Board", token_hash="h" * 64, token_preview="tb_...", restaurant_id=restaurant.id))
    session.add(User(name="Staffer", email="staff@example.com", role="Staff", property_id=prop.id))
    session.commit()
    return {
        "property_id": prop.id,
        "restaurant_id": restaurant.id,
        "category_id": category.id,
        "subcategory_id": subcategory.id,
        "item_id": item.id,
        "group_id": group.id,
        "allergen_id": allergen.id,
        "attribute_id": attribute.id,
    }


def test_every_kind_has_a_rule() -> None:
    assert set(CASCADE_POLICY) == {
        "property",
        "restaurant",
        "category",
        "subcategory",
        "menu_item",
        "modifier_group",
        "modifier_item",
        "allergen",
        "attribute",
        "order",
    }


def test_deleting_restaurant_removes_its_whole_tree(tmp_path: Path) -> None:
    session_local = _build_session_local(tmp_path, "test_cascade_restaurant.db")
    with session_local() as session:
        ids = _seed(session)
        name = delete_entity(session, "restaurant", ids["restaurant_id"])

        assert name == "Pier 9"
        for model in (
            Restaurant,
            MenuCategory,
            SubCategory,
            MenuItem,
            MenuItemModifierGroup,
            ModifierGroup,
            ModifierItem,
            LiveOrder,
            LiveOrderItem,
            Sale,
            ApiToken,
        ):
            assert _count(session, model) == 0, model.__name__
        assert _count(session, Property) == 1
        assert _count(session, Allergen) == 1


def test_deleting_property_detaches_users(tmp_path: Path) -> None:
    session_local = _build_session_local(tmp_path, "test_cascade_property.db")
    with session_local() as session:
        ids = _seed(session)
        delete_entity(session, "property", ids["property_id"])

        assert _count(session, Property) == 0
        assert _count(session, Restaurant) == 0
        assert _count(session, MenuItem) == 0
        user = session.scalar(select(User).where(User.email == "staff@example.com"))
        assert user.property_id is None


def test_deleting_subcategory_keeps_items_under_category(tmp_path: Path) -> None:
    session_local = _build_session_local(tmp_path, "test_cascade_subcategory.db")
    with session_local() as session:
        ids = _seed(session)
        delete_entity(session, "subcategory", ids["subcategory_id"])
        session.expire_all()

        item = session.get(MenuItem, ids["item_id"])
        assert item.subcategory_id is None
        assert item.category_id == ids["category_id"]


def test_deleting_vocabulary_unlinks_items(tmp_path: Path) -> None:
    session_local = _build_session_local(tmp_path, "test_cascade_vocabulary.db")
    with session_local() as session:
        ids = _seed(session)
        delete_entity(session, "allergen", ids["allergen_id"])
        delete_entity(session, "attribute", ids["attribute_id"])
        delete_entity(session, "modifier_group", ids["group_id"])
        session.expire_all()

        item = session.get(MenuItem, ids["item_id"])
        assert item.allergen_ids == []
        assert item.attributes == {"other": "kept"}
        assert item.modifier_group_ids == []
        assert _count(session, ModifierItem) == 0


def test_deleting_unknown_entity_raises(tmp_path: Path) -> None:
    session_local = _build_session_local(tmp_path, "test_cascade_missing.db")
    with session_local() as session:
        with pytest.raises(NotFoundError) as exc_info:
            delete_entity(session, "category", "missing")

    assert exc_info.value.message == "Category not found"
