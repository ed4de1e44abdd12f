#!/usr/bin/env python3
"""
Test script for ingredient reconciliation.
Tests pantry matching, instruction filtering, quantity scaling, and the
commit routing of ingredients to the pantry or shopping list.
"""

import sys
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent))

from models import PantryItem, Recipe, RecipeIngredient
from services.database_service import DatabaseService
from services.errors import ReconciliationError, StoreError
from services.reconciliation_service import (
    ReconciliationService, build_reconciliation, filter_reconcilable_ingredients,
    is_instruction_text, matches_pantry, scale_quantity
)


class FlakyStore(DatabaseService):
    """In-memory store whose Nth kitchen insert fails like a dropped request"""

    def __init__(self, fail_on: int):
        super().__init__(":memory:")
        self.fail_on = fail_on
        self.kitchen_inserts = 0

    def insert(self, table, values):
        if table in ('pantry_items', 'shopping_list'):
            self.kitchen_inserts += 1
            if self.kitchen_inserts == self.fail_on:
                raise StoreError("network timeout", table)
        return super().insert(table, values)


def create_test_user(store, email="cook@example.com"):
    return store.insert('users', {'email': email, 'password_hash': 'x', 'name': 'Cook'})['id']


def pantry_item(name, user_id="u1"):
    return PantryItem(id=f"p-{name}", user_id=user_id, ingredient_name=name)


def create_test_recipe(servings=4):
    return Recipe(
        id="mealdb-52772",
        name="Tomato Basil Spaghetti",
        servings=servings,
        ingredients=[
            RecipeIngredient(id="1", name="Tomato", amount=2, unit="cups"),
            RecipeIngredient(id="2", name="Basil", amount=1, unit="bunch"),
            RecipeIngredient(id="3", name="Preheat oven to 350F and grease a pan", amount=1),
            RecipeIngredient(id="4", name="Spaghetti", amount=400, unit="g"),
        ]
    )


def test_pantry_match_is_case_insensitive_and_symmetric():
    """Tomato matches a pantry 'tomato sauce' and the reverse"""
    print("\nTesting pantry matching...")

    assert matches_pantry("Tomato", [pantry_item("tomato sauce")])
    assert matches_pantry("Cherry Tomatoes", [pantry_item("tomato")])
    assert matches_pantry("egg", [pantry_item("Eggplant")]), "Loose matching accepts egg/eggplant"
    assert not matches_pantry("Basil", [pantry_item("tomato sauce")])
    assert not matches_pantry("", [pantry_item("salt")])
    assert not matches_pantry("salt", [])

    print("[OK] Pantry matching working correctly")


def test_default_choice_follows_pantry_match():
    print("\nTesting default choices...")

    plan = build_reconciliation(create_test_recipe(), 4, [pantry_item("tomato sauce")])
    choices = {entry.name: entry.have_it for entry in plan.entries}

    assert choices["Tomato"] is True
    assert choices["Basil"] is False
    assert choices["Spaghetti"] is False

    print("[OK] Defaults follow pantry match")


def test_quantity_scaling():
    print("\nTesting quantity scaling...")

    assert scale_quantity(2, 6, 4) == 3.0
    assert scale_quantity(400, 2, 4) == 200.0
    assert scale_quantity(1, 3, 0) == 3.0, "Zero recipe servings counts as 1"
    assert scale_quantity(1, 3, None) == 3.0
    assert scale_quantity(2, 0, 4) == 0.5, "Zero planned servings counts as 1"
    assert scale_quantity(None, 4, 4) == 0.0

    plan = build_reconciliation(create_test_recipe(servings=4), 6, [])
    quantities = {entry.name: entry.quantity for entry in plan.entries}
    assert quantities["Tomato"] == 3.0
    assert quantities["Spaghetti"] == 600.0

    print("[OK] Quantity scaling working correctly")


def test_instruction_text_is_filtered():
    print("\nTesting instruction filtering...")

    assert is_instruction_text("Preheat oven to 350F and grease a pan")
    assert is_instruction_text("Then add the rest")
    assert is_instruction_text("")
    assert is_instruction_text("   ")
    assert is_instruction_text("a" * 101)
    assert not is_instruction_text("Olive oil")
    assert not is_instruction_text("a" * 100)

    # excluded even when it would match the pantry
    plan = build_reconciliation(create_test_recipe(), 4, [pantry_item("oven")])
    names = [entry.name for entry in plan.entries]
    assert "Preheat oven to 350F and grease a pan" not in names
    assert names == ["Tomato", "Basil", "Spaghetti"]

    kept = filter_reconcilable_ingredients(create_test_recipe().ingredients)
    assert len(kept) == 3

    print("[OK] Instruction-like entries excluded")


def test_commit_routes_each_ingredient_once():
    print("\nTesting commit routing...")

    store = DatabaseService(":memory:")
    user_id = create_test_user(store)
    store.insert('pantry_items', {'user_id': user_id, 'ingredient_name': 'tomato sauce'})
    service = ReconciliationService(store)

    plan = service.open_plan(user_id, create_test_recipe(), 6)
    assert [e.have_it for e in plan.entries] == [True, False, False]

    plan.set_choice(2, True)  # user already has spaghetti
    committed = service.commit(user_id, plan)
    assert committed == 3

    pantry = store.select('pantry_items', [('user_id', 'eq', user_id)], order_by=[('ingredient_name', True)])
    shopping = store.select('shopping_list', [('user_id', 'eq', user_id)])

    pantry_by_name = {row['ingredient_name']: row for row in pantry}
    assert set(pantry_by_name) == {"tomato sauce", "Tomato", "Spaghetti"}
    assert pantry_by_name["Tomato"]['unit'] == "cups"
    assert pantry_by_name["Tomato"]['quantity'] is None, "Pantry rows record no quantity"

    assert len(shopping) == 1
    assert shopping[0]['ingredient_name'] == "Basil"
    assert shopping[0]['quantity'] == 1.5
    assert shopping[0]['unit'] == "bunch"
    assert shopping[0]['is_completed'] == 0

    print("[OK] Every ingredient routed to exactly one destination")


def test_set_choice_out_of_range():
    plan = build_reconciliation(create_test_recipe(), 4, [])
    try:
        plan.set_choice(3, True)
        assert False, "Position past the last entry should raise IndexError"
    except IndexError:
        pass


def test_set_choice_with_repeated_ingredient_ids():
    """Two entries sharing a provider id keep independent choices"""
    recipe = Recipe(
        id="spoonacular-1",
        name="Brined Roast",
        servings=4,
        ingredients=[
            RecipeIngredient(id="2047", name="salt", amount=1, unit="tbsp"),
            RecipeIngredient(id="2047", name="salt", amount=1, unit="tsp"),
        ]
    )
    plan = build_reconciliation(recipe, 4, [])
    for index, have_it in enumerate([False, True]):
        plan.set_choice(index, have_it)

    assert [e.have_it for e in plan.entries] == [False, True]
    assert [e.unit for e in plan.pantry_entries] == ["tsp"]
    assert [e.unit for e in plan.shopping_entries] == ["tbsp"]
    print("[OK] Repeated ingredient ids chosen independently")


def test_partial_failure_keeps_committed_rows():
    print("\nTesting partial commit failure...")

    store = FlakyStore(fail_on=2)
    user_id = create_test_user(store)
    service = ReconciliationService(store)
    plan = service.open_plan(user_id, create_test_recipe(), 4)
    plan.set_choice(0, True)

    try:
        service.commit(user_id, plan)
        assert False, "Commit should fail on the second insert"
    except ReconciliationError as e:
        assert e.committed == 1

    pantry = store.select('pantry_items', [('user_id', 'eq', user_id)])
    shopping = store.select('shopping_list', [('user_id', 'eq', user_id)])
    assert [row['ingredient_name'] for row in pantry] == ["Tomato"], "No rollback of earlier inserts"
    assert shopping == []

    # retry writes everything again, duplicating the first row
    assert service.commit(user_id, plan) == 3
    pantry = store.select('pantry_items', [('user_id', 'eq', user_id)])
    assert [row['ingredient_name'] for row in pantry] == ["Tomato", "Tomato"]

    print("[OK] Partial failure reported without rollback")


if __name__ == "__main__":
    tests = [
        test_pantry_match_is_case_insensitive_and_symmetric,
        test_default_choice_follows_pantry_match,
        test_quantity_scaling,
        test_instruction_text_is_filtered,
        test_commit_routes_each_ingredient_once,
        test_set_choice_out_of_range,
        test_set_choice_with_repeated_ingredient_ids,
        test_partial_failure_keeps_committed_rows,
    ]
    try:
        for test in tests:
            test()
        print("\n[SUCCESS] All reconciliation tests passed!")
        sys.exit(0)
    except Exception as e:
        print(f"[ERROR] Reconciliation test failed with error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
