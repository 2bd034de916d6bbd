"""
Tests del servicio de categorías.
"""
import re

import pytest
from sqlalchemy.exc import SQLAlchemyError

from catalog_admin.core.exceptions import ConflictException, NotFoundException, ValidationException
from catalog_admin.crud.category import category as category_crud
from catalog_admin.models import Category, CategoryAttribute, Product, PromotionCategory
from catalog_admin.services.category_service import category_service
from catalog_admin.utils.slug import MAX_SLUG_LENGTH, generate_slug, with_timestamp_suffix


# ================================================================
# SLUGS Y CREACION
# ================================================================

def test_slug_folds_accents_and_strips_punctuation():
    assert generate_slug("Électronique & Gadgets!!") == "electronique-gadgets"
    assert generate_slug("  Robes d'été  ") == "robes-dete"
    assert generate_slug("!!!") == "category"


def test_timestamp_suffix_keeps_slug_within_column_length():
    slug = with_timestamp_suffix("a" * MAX_SLUG_LENGTH)

    assert len(slug) <= MAX_SLUG_LENGTH
    assert re.fullmatch(r"a+-\d+", slug)
    assert re.fullmatch(r"short-\d+", with_timestamp_suffix("short"))


def test_update_to_taken_long_slug_stays_within_column_length(db, make_category):
    long_slug = "-".join(["part"] * 24)
    make_category("Taken", slug=long_slug)
    category = make_category("Other")

    updated = category_service.update(db, category.id, {"slug": long_slug})

    assert updated.slug != long_slug
    assert len(updated.slug) <= MAX_SLUG_LENGTH


def test_create_generates_slug_and_suffixes_duplicates(db):
    first = category_service.create(db, {"name": "Électronique & Gadgets!!"})
    second = category_service.create(db, {"name": "Électronique & Gadgets!!"})

    assert first.slug == "electronique-gadgets"
    assert re.fullmatch(r"electronique-gadgets-\d+", second.slug)


def test_create_assigns_next_sort_order_among_siblings(db, make_category):
    root = make_category("Root", sort_order=5)

    sibling = category_service.create(db, {"name": "Sibling"})
    child = category_service.create(db, {"name": "Child", "parent_id": root.id})
    explicit = category_service.create(db, {"name": "Explicit", "sort_order": 0})

    assert sibling.sort_order == 6
    assert child.sort_order == 1
    assert explicit.sort_order == 0


def test_create_returns_parent_and_counts(db, make_category):
    root = make_category("Root")

    created = category_service.create(db, {"name": "Child", "parent_id": root.id})

    assert created.parent.id == root.id
    assert created.parent.slug == "root"
    assert created.counts.products == 0
    assert created.counts.children == 0


def test_create_requires_name(db):
    with pytest.raises(ValidationException):
        category_service.create(db, {"name": ""})


# ================================================================
# ACTUALIZACION
# ================================================================

def test_update_regenerates_slug_on_rename(db, make_category):
    category = make_category("Old Name")

    updated = category_service.update(db, category.id, {"name": "New Name"})

    assert updated.name == "New Name"
    assert updated.slug == "new-name"


def test_update_keeps_own_slug_and_suffixes_foreign_one(db, make_category):
    category = make_category("Shoes")
    make_category("Boots")

    same = category_service.update(db, category.id, {"slug": "shoes", "description": "Footwear"})
    assert same.slug == "shoes"
    assert same.description == "Footwear"

    taken = category_service.update(db, category.id, {"slug": "boots"})
    assert re.fullmatch(r"boots-\d+", taken.slug)


def test_update_only_touches_supplied_fields(db, make_category):
    category = make_category("Shoes", description="Footwear", is_active=True)

    updated = category_service.update(db, category.id, {"is_active": False})

    assert updated.is_active is False
    assert updated.description == "Footwear"
    assert updated.name == "Shoes"


def test_update_missing_category(db):
    with pytest.raises(NotFoundException, match="Category not found"):
        category_service.update(db, "missing", {"name": "Nope"})


def test_update_status(db, make_category):
    category = make_category("Shoes")

    result = category_service.update_status(db, category.id, False)

    assert result.is_active is False


# ================================================================
# BORRADO
# ================================================================

def test_delete_rejects_category_with_children(db, make_category):
    root = make_category("Root")
    make_category("Child", parent=root)

    with pytest.raises(ConflictException, match="subcategories"):
        category_service.delete(db, root.id)


def test_delete_with_products_requires_valid_target(db, make_category, make_product):
    category = make_category("Shoes")
    make_product("Sneaker", category)

    with pytest.raises(ConflictException, match="Category has products"):
        category_service.delete(db, category.id)

    with pytest.raises(ValidationException, match="Target category not found"):
        category_service.delete(db, category.id, move_products_to="missing")

    with pytest.raises(ValidationException, match="Target category not found"):
        category_service.delete(db, category.id, move_products_to=category.id)

    assert db.query(Category).filter(Category.id == category.id).count() == 1


def test_delete_moves_products_and_removes_dependents(
    db, make_category, make_product, make_attribute, make_promotion
):
    source = make_category("Source")
    target = make_category("Target")
    make_product("Sneaker", source)
    make_product("Boot", source)
    make_attribute(source, "Size")
    make_promotion("Summer", categories=[source, target])

    moved = category_service.delete(db, source.id, move_products_to=target.id)

    assert moved == 2
    assert db.query(Category).filter(Category.id == source.id).first() is None
    assert db.query(Product).filter(Product.category_id == target.id).count() == 2
    assert db.query(CategoryAttribute).count() == 0
    links = db.query(PromotionCategory).all()
    assert [link.category_id for link in links] == [target.id]


def test_delete_rolls_back_everything_when_a_step_fails(
    db, make_category, make_product, make_attribute, make_promotion, monkeypatch
):
    source = make_category("Source")
    target = make_category("Target")
    make_product("Sneaker", source)
    make_attribute(source, "Size")
    make_promotion("Summer", categories=[source])

    def failing_remove(db, *, id, commit=True):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(category_crud, "remove", failing_remove)

    with pytest.raises(SQLAlchemyError):
        category_service.delete(db, source.id, move_products_to=target.id)

    assert db.query(Category).filter(Category.id == source.id).count() == 1
    assert db.query(Product).filter(Product.category_id == source.id).count() == 1
    assert db.query(Product).filter(Product.category_id == target.id).count() == 0
    assert db.query(CategoryAttribute).filter(CategoryAttribute.category_id == source.id).count() == 1
    assert db.query(PromotionCategory).filter(PromotionCategory.category_id == source.id).count() == 1


def test_delete_empty_category(db, make_category):
    category = make_category("Empty")

    assert category_service.delete(db, category.id) == 0
    assert db.query(Category).count() == 0

    with pytest.raises(NotFoundException):
        category_service.delete(db, category.id)


# ================================================================
# REORDEN Y ACTUALIZACION MASIVA
# ================================================================

def test_reorder_many_applies_positions(db, make_category):
    a = make_category("A", sort_order=1)
    b = make_category("B", sort_order=2)

    applied = category_service.reorder_many(db, [
        {"id": a.id, "sort_order": 2},
        {"id": b.id, "sort_order": 1},
    ])

    assert applied == 2
    db.refresh(a)
    db.refresh(b)
    assert (a.sort_order, b.sort_order) == (2, 1)


def test_reorder_many_is_best_effort(db, make_category):
    a = make_category("A", sort_order=1)

    with pytest.raises(NotFoundException):
        category_service.reorder_many(db, [
            {"id": a.id, "sort_order": 7},
            {"id": "missing", "sort_order": 1},
        ])

    db.refresh(a)
    assert a.sort_order == 7


def test_bulk_update_patches_all_rows(db, make_category):
    a = make_category("A")
    b = make_category("B")
    c = make_category("C")

    count = category_service.bulk_update(db, [a.id, b.id], {"is_active": False})

    assert count == 2
    assert not db.get(Category, a.id).is_active
    assert not db.get(Category, b.id).is_active
    assert db.get(Category, c.id).is_active


def test_bulk_update_requires_fields(db, make_category):
    a = make_category("A")

    with pytest.raises(ValidationException):
        category_service.bulk_update(db, [a.id], {"name": "ignored"})


# ================================================================
# LECTURA
# ================================================================

def test_hierarchy_nests_sorted_children_with_counts(db, make_category, make_product):
    second = make_category("Second", sort_order=2)
    first = make_category("First", sort_order=1)
    late = make_category("Late", parent=first, sort_order=2)
    early = make_category("Early", parent=first, sort_order=1)
    deep = make_category("Deep", parent=early)
    make_product("Widget", early)
    make_product("Hidden", early, is_active=False)

    tree = category_service.get_hierarchy(db)

    assert [node.id for node in tree] == [first.id, second.id]
    assert [node.id for node in tree[0].children] == [early.id, late.id]
    assert tree[0].counts.children == 2
    early_node = tree[0].children[0]
    assert early_node.counts.products == 2
    assert early_node.products is None
    assert [node.id for node in early_node.children] == [deep.id]


def test_hierarchy_filters_roots_only_and_includes_active_products(
    db, make_category, make_product
):
    root = make_category("Root")
    inactive = make_category("Inactive", parent=root, is_active=False, sort_order=1)
    active = make_category("Active", parent=root, sort_order=2)
    make_category("Disabled Root", is_active=False)
    make_product("Widget", active, images=None)
    make_product("Hidden", active, is_active=False)

    tree = category_service.get_hierarchy(db, is_active=True, include_products=True)

    assert [node.id for node in tree] == [root.id]
    assert [node.id for node in tree[0].children] == [inactive.id, active.id]
    assert tree[0].children[0].is_active is False
    products = tree[0].children[1].products
    assert [p.name for p in products] == ["Widget"]
    assert products[0].images == []


def test_get_flat_paginates_in_sort_order(db, make_category):
    root = make_category("Root", sort_order=1)
    for index in range(3):
        make_category(f"Child {index}", parent=root, sort_order=index + 2)

    items, total = category_service.get_flat(db, page=2, limit=2)

    assert total == 4
    assert [item.name for item in items] == ["Child 1", "Child 2"]
    assert items[0].parent.id == root.id


def test_get_by_id_details(db, make_category, make_product, make_attribute):
    root = make_category("Root")
    child = make_category("Child", parent=root)
    make_product("Widget", root)
    make_product("Gadget", child)
    make_attribute(root, "Size", sort_order=2)
    make_attribute(root, "Color", type="COLOR", sort_order=1)

    detail = category_service.get_by_id(db, root.id, include_products=True)

    assert [a.name for a in detail.attributes] == ["Color", "Size"]
    assert [c.id for c in detail.children] == [child.id]
    assert detail.children[0].counts.products == 1
    assert [p.name for p in detail.products] == ["Widget"]
    assert detail.counts.products == 1
    assert detail.counts.children == 1


def test_get_by_id_missing_returns_none(db):
    assert category_service.get_by_id(db, "missing") is None


def test_search_matches_active_categories_by_name_or_description(db, make_category):
    parent = make_category("Clothing")
    make_category("Summer Shirts", parent=parent)
    make_category("Accessories", description="Hats for SUMMER")
    make_category("Summer Archive", is_active=False)

    results = category_service.search(db, "summer")

    assert [r.name for r in results] == ["Accessories", "Summer Shirts"]
    assert results[1].parent.name == "Clothing"
    assert results[0].parent is None


def test_search_treats_wildcards_literally(db, make_category):
    make_category("Shoes")
    make_category("Hats")
    make_category("Sale 50%", slug="sale-50")
    make_category("Back_Office", slug="back-office")

    assert category_service.search(db, "_") == []
    assert [r.name for r in category_service.search(db, "%")] == ["Sale 50%"]
    assert [r.name for r in category_service.search(db, "k_o")] == ["Back_Office"]
    assert category_service.search(db, "\\") == []


def test_search_rejects_blank_query(db, make_category):
    make_category("Shoes")

    with pytest.raises(ValidationException, match="Search query is required"):
        category_service.search(db, "   ")

    assert [r.name for r in category_service.search(db, "  shoe  ")] == ["Shoes"]


def test_search_limit_is_capped(db, make_category):
    for index in range(3):
        make_category(f"Item {index}")

    assert len(category_service.search(db, "item", limit=2)) == 2
    assert len(category_service.search(db, "item", limit=500)) == 3


def test_breadcrumb_goes_from_root_to_leaf(db, make_category):
    root = make_category("Root")
    mid = make_category("Mid", parent=root)
    leaf = make_category("Leaf", parent=mid)

    trail = category_service.breadcrumb(db, leaf.id)

    assert [item.slug for item in trail] == ["root", "mid", "leaf"]
    assert [item.slug for item in category_service.breadcrumb(db, root.id)] == ["root"]

    with pytest.raises(NotFoundException):
        category_service.breadcrumb(db, "missing")


def test_statistics_rounds_average_half_up(db, make_category, make_product):
    a = make_category("A")
    make_category("B", parent=a, is_active=False)
    for index in range(3):
        make_product(f"Product {index}", a)

    stats = category_service.statistics(db)

    assert stats.total_categories == 2
    assert stats.active_categories == 1
    assert stats.inactive_categories == 1
    assert stats.root_categories == 1
    assert stats.categories_with_products == 1
    # 3 / 2 = 1.5
    assert stats.average_products_per_category == 2


def test_statistics_on_empty_catalog(db):
    stats = category_service.statistics(db)

    assert stats.total_categories == 0
    assert stats.average_products_per_category == 0
