#!/usr/bin/env python3
"""
Test script for the application context.
Tests that user data follows the session: loaded on sign-in and restore,
cleared on sign-out, and kept as-is when a load fails.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent))

from models import Recipe
from services.app_context import AppContext
from services.database_service import DatabaseService
from services.errors import StoreError
from utils import Config


def create_test_context():
    store = DatabaseService(":memory:")
    context = AppContext(Config(), store, recipe_service=MagicMock())
    return context


def recipe(recipe_id, name):
    return Recipe(id=recipe_id, name=name, image="https://img.example/r.jpg", servings=2)


def test_sign_up_populates_context():
    print("\nTesting sign-up populates the context...")
    context = create_test_context()
    assert not context.is_authenticated
    assert context.user_id is None

    session = context.auth.sign_up("Ada", "ada@example.com", "secret1")
    assert context.is_authenticated
    assert context.session is session
    assert context.data.favorites == []
    assert context.week.user_id == session.user_id
    print("[OK] Context follows sign-up")


def test_sign_out_clears_and_sign_in_reloads():
    print("\nTesting sign-out and sign-in...")
    context = create_test_context()
    session = context.auth.sign_up("Ada", "ada@example.com", "secret1")

    context.favorites.add_favorite(session.user_id, recipe("mealdb-1", "Stew"))
    context.pantry.add_pantry_item(session.user_id, "rice", 1, "kg")
    context.meal_plans.add_meal_plan(session.user_id, context.week.selected_date, "dinner",
                                     recipe("mealdb-1", "Stew"))
    context.refresh_favorites()
    context.refresh_pantry()
    context.refresh_meal_plans()
    assert context.data.favorite_ids == {"mealdb-1"}
    assert len(context.week.items) == 1

    context.sign_out()
    assert not context.is_authenticated
    assert context.data.favorites == []
    assert context.data.pantry == []
    assert context.week.items == []

    context.auth.sign_in("ada@example.com", "secret1")
    assert context.is_authenticated
    assert context.data.favorite_ids == {"mealdb-1"}
    assert [p.ingredient_name for p in context.data.pantry] == ["rice"]
    assert len(context.data.meal_plans) == 1
    assert len(context.week.items) == 1
    print("[OK] Data cleared on sign-out and reloaded on sign-in")


def test_failed_load_keeps_previous_data():
    print("\nTesting failed load handling...")
    context = create_test_context()
    session = context.auth.sign_up("Ada", "ada@example.com", "secret1")
    context.shopping_list.add_shopping_item(session.user_id, "eggs", 12)
    assert context.load_user_data() is True
    before = context.data

    with patch.object(context.pantry, 'get_pantry_items',
                      side_effect=StoreError("connection reset", "pantry_items")):
        assert context.load_user_data() is False

    assert context.data is before
    assert [i.ingredient_name for i in context.data.shopping_list] == ["eggs"]
    print("[OK] Previous data kept after a failed load")


def test_restore_session_token():
    context = create_test_context()
    session = context.auth.sign_up("Ada", "ada@example.com", "secret1")
    context.favorites.add_favorite(session.user_id, recipe("spoonacular-9", "Salad"))

    fresh = AppContext(Config(), context.store, recipe_service=MagicMock())
    assert fresh.restore(session.token) is True
    assert fresh.user_id == session.user_id
    assert fresh.data.favorite_ids == {"spoonacular-9"}

    other = AppContext(Config(), context.store, recipe_service=MagicMock())
    assert other.restore("not-a-token") is False
    assert not other.is_authenticated


def test_load_without_session():
    context = create_test_context()
    assert context.load_user_data() is False
    context.refresh_favorites()
    assert context.data.favorites == []


def test_close_stops_following_session():
    context = create_test_context()
    context.close()
    context.auth.sign_up("Ada", "ada@example.com", "secret1")
    assert context.session is None


if __name__ == "__main__":
    tests = [
        test_sign_up_populates_context,
        test_sign_out_clears_and_sign_in_reloads,
        test_failed_load_keeps_previous_data,
        test_restore_session_token,
        test_load_without_session,
        test_close_stops_following_session,
    ]
    try:
        for test in tests:
            test()
        print("\n[SUCCESS] All application context tests passed!")
        sys.exit(0)
    except Exception as e:
        print(f"[ERROR] Application context test failed with error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
