"""
Tests de las reglas de jerarquía: profundidad, ciclos y re-parentado.
"""
import pytest

from catalog_admin.core.exceptions import NotFoundException, ValidationException
from catalog_admin.models import Category
from catalog_admin.services.category_service import category_service
from catalog_admin.services.hierarchy_service import MAX_CATEGORY_DEPTH, hierarchy_service


def test_depth_counts_hops_to_root(db, make_category):
    root = make_category("Root")
    child = make_category("Child", parent=root)
    grandchild = make_category("Grandchild", parent=child)

    assert hierarchy_service.compute_depth(db, root.id) == 0
    assert hierarchy_service.compute_depth(db, child.id) == 1
    assert hierarchy_service.compute_depth(db, grandchild.id) == 2


def test_depth_walk_stops_on_corrupted_cycle(db):
    db.add_all([
        Category(id="x", name="X", slug="x", parent_id="y", sort_order=0),
        Category(id="y", name="Y", slug="y", parent_id="x", sort_order=0),
    ])
    db.commit()

    assert hierarchy_service.compute_depth(db, "x") == 1


def test_fifth_level_is_rejected(db):
    mode = category_service.create(db, {"name": "Mode"})
    femme = category_service.create(db, {"name": "Mode Femme", "parent_id": mode.id})
    robes = category_service.create(db, {"name": "Robes", "parent_id": femme.id})
    summer = category_service.create(db, {"name": "Robes d'été", "parent_id": robes.id})

    assert hierarchy_service.compute_depth(db, summer.id) == MAX_CATEGORY_DEPTH

    with pytest.raises(ValidationException, match="Maximum category depth exceeded"):
        category_service.create(db, {"name": "Longues", "parent_id": summer.id})

    assert db.query(Category).count() == 4


def test_moving_into_own_descendant_fails_and_keeps_tree(db, make_category):
    a = make_category("A")
    b = make_category("B")

    category_service.move(db, b.id, a.id)

    with pytest.raises(ValidationException, match="circular reference"):
        category_service.move(db, a.id, b.id)

    db.refresh(a)
    db.refresh(b)
    assert b.parent_id == a.id
    assert a.parent_id is None


def test_category_cannot_be_its_own_parent(db, make_category):
    a = make_category("A")

    with pytest.raises(ValidationException, match="cannot be its own parent"):
        category_service.update(db, a.id, {"parent_id": a.id})

    with pytest.raises(ValidationException, match="cannot be its own parent"):
        category_service.move(db, a.id, a.id)


def test_missing_parent_is_rejected(db, make_category):
    a = make_category("A")

    with pytest.raises(ValidationException, match="Parent category not found"):
        category_service.create(db, {"name": "Orphan", "parent_id": "missing"})

    with pytest.raises(ValidationException, match="Parent category not found"):
        category_service.move(db, a.id, "missing")


def test_move_accounts_for_subtree_height(db, make_category):
    branch = make_category("Branch")
    mid = make_category("Mid", parent=branch)
    make_category("Leaf", parent=mid)

    other_root = make_category("Other")
    other_child = make_category("Other Child", parent=other_root)

    assert hierarchy_service.subtree_height(db, branch.id) == 2

    # Leaf quedaría en profundidad 4
    with pytest.raises(ValidationException, match="Maximum category depth exceeded"):
        category_service.move(db, branch.id, other_child.id)

    category_service.move(db, branch.id, other_root.id)
    db.refresh(branch)
    assert branch.parent_id == other_root.id


def test_move_to_root_and_missing_category(db, make_category):
    root = make_category("Root")
    child = make_category("Child", parent=root)

    moved = category_service.move(db, child.id, None)

    assert moved.parent_id is None
    assert moved.parent is None
    assert moved.counts is None

    with pytest.raises(NotFoundException):
        category_service.move(db, "missing", root.id)


def test_update_with_null_parent_moves_to_root(db, make_category):
    root = make_category("Root")
    child = make_category("Child", parent=root)

    updated = category_service.update(db, child.id, {"parent_id": None})

    assert updated.parent_id is None
