#!/usr/bin/env python3
"""
Test script for meal plan service functionality.
Tests slot replacement, date-range reads, week calculation, grouping, and
the weekly view's stale-but-consistent behaviour on read failures.
"""

import sys
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent))

from models import MealType, Recipe
from services.database_service import DatabaseService
from services.errors import RecordNotFoundError, StoreError, ValidationError
from services.meal_plan_service import MealPlanService, WeeklyMealPlan, get_week_dates, group_by_slot


def create_test_service():
    store = DatabaseService(":memory:")
    user_id = store.insert('users', {'email': 'planner@example.com', 'password_hash': 'x'})['id']
    return store, MealPlanService(store), user_id


def recipe(recipe_id, name, image="https://img.example/x.jpg"):
    return Recipe(id=recipe_id, name=name, image=image, servings=4)


def test_slot_replace_keeps_one_row():
    """Adding A then B to the same slot leaves only B"""
    print("\nTesting meal slot replacement...")
    store, service, user_id = create_test_service()

    service.add_meal_plan(user_id, "2024-01-01", "dinner", recipe("mealdb-1", "Recipe A"), 2)
    service.add_meal_plan(user_id, date(2024, 1, 1), MealType.DINNER, recipe("mealdb-2", "Recipe B"), 3)

    rows = store.select('meal_plans', [('user_id', 'eq', user_id), ('date', 'eq', '2024-01-01'),
                                       ('meal_type', 'eq', 'dinner')])
    assert len(rows) == 1, f"Expected one row for the slot, found {len(rows)}"
    assert rows[0]['recipe_id'] == "mealdb-2"
    assert rows[0]['recipe_title'] == "Recipe B"
    assert rows[0]['servings'] == 3

    print("[OK] Slot holds exactly one recipe")


def test_different_slots_coexist():
    store, service, user_id = create_test_service()

    service.add_meal_plan(user_id, "2024-01-01", "breakfast", recipe("mealdb-1", "Pancakes"))
    service.add_meal_plan(user_id, "2024-01-01", "dinner", recipe("mealdb-2", "Curry"))
    service.add_meal_plan(user_id, "2024-01-02", "dinner", recipe("mealdb-3", "Soup"))

    assert len(service.get_meal_plans(user_id)) == 3


def test_date_range_is_inclusive_and_ordered():
    print("\nTesting date range reads...")
    store, service, user_id = create_test_service()

    for day, rid in [("2024-01-10", "c"), ("2024-01-01", "a"), ("2024-01-07", "b"), ("2024-01-11", "d")]:
        service.add_meal_plan(user_id, day, "lunch", recipe(f"mealdb-{rid}", rid))

    items = service.get_meal_plans(user_id, "2024-01-01", date(2024, 1, 10))
    assert [item.date for item in items] == [date(2024, 1, 1), date(2024, 1, 7), date(2024, 1, 10)]
    assert all(item.meal_type == MealType.LUNCH for item in items)

    other_user = store.insert('users', {'email': 'other@example.com', 'password_hash': 'x'})['id']
    assert service.get_meal_plans(other_user) == [], "Rows are scoped to their owner"

    print("[OK] Range reads working correctly")


def test_week_dates_run_sunday_to_saturday():
    print("\nTesting week calculation...")

    week = get_week_dates(date(2024, 1, 3))  # a Wednesday
    assert week[0] == date(2023, 12, 31)
    assert week[-1] == date(2024, 1, 6)
    assert len(week) == 7
    assert week[0].weekday() == 6, "Week starts on Sunday"

    assert get_week_dates(date(2023, 12, 31))[0] == date(2023, 12, 31)
    assert get_week_dates("2024-01-06")[0] == date(2023, 12, 31)

    print("[OK] Weeks run Sunday through Saturday")


def test_group_by_slot():
    store, service, user_id = create_test_service()
    service.add_meal_plan(user_id, "2024-01-01", "breakfast", recipe("mealdb-1", "Oats"), 1)
    service.add_meal_plan(user_id, "2024-01-01", "dinner", recipe("mealdb-2", "Stew"), 4)

    grouped = group_by_slot(service.get_meal_plans(user_id))
    day = grouped[date(2024, 1, 1)]
    assert set(day) == {MealType.BREAKFAST, MealType.DINNER}
    assert day[MealType.DINNER].name == "Stew"
    assert day[MealType.DINNER].servings == 4
    assert day[MealType.BREAKFAST].image == "https://img.example/x.jpg"


def test_update_servings_and_remove():
    print("\nTesting servings update and removal...")
    store, service, user_id = create_test_service()
    item = service.add_meal_plan(user_id, "2024-01-01", "dinner", recipe("mealdb-1", "Stew"), 2)

    updated = service.update_servings(user_id, item.id, 5)
    assert updated.servings == 5

    try:
        service.update_servings(user_id, item.id, 0)
        assert False, "Zero servings should be rejected"
    except ValidationError:
        pass

    assert service.remove_meal_plan(user_id, item.id) is True
    assert service.get_meal_plans(user_id) == []
    assert service.remove_meal_plan(user_id, item.id) is False

    print("[OK] Servings update and removal working")


def test_meal_plans_of_another_user_are_untouchable():
    store, service, user_id = create_test_service()
    other_id = store.insert('users', {'email': 'other@example.com', 'password_hash': 'x'})['id']
    item = service.add_meal_plan(user_id, "2024-01-01", "dinner", recipe("mealdb-1", "Stew"), 2)

    try:
        service.update_servings(other_id, item.id, 9)
        assert False, "Updating another user's meal plan should raise"
    except RecordNotFoundError:
        pass
    assert service.remove_meal_plan(other_id, item.id) is False

    plans = service.get_meal_plans(user_id)
    assert [(p.id, p.servings) for p in plans] == [(item.id, 2)]


def test_invalid_meal_type_rejected():
    store, service, user_id = create_test_service()
    try:
        service.add_meal_plan(user_id, "2024-01-01", "brunch", recipe("mealdb-1", "Eggs"))
        assert False, "Unknown meal type should be rejected"
    except ValidationError as e:
        assert e.field_name == "meal_type"


def test_weekly_view_navigation():
    print("\nTesting weekly view navigation...")
    store, service, user_id = create_test_service()
    service.add_meal_plan(user_id, "2024-01-03", "dinner", recipe("mealdb-1", "This week"))
    service.add_meal_plan(user_id, "2024-01-10", "dinner", recipe("mealdb-2", "Next week"))

    week = WeeklyMealPlan(service, anchor=date(2024, 1, 3))
    assert week.load(user_id) is True
    assert week.meals_for(date(2024, 1, 3))[MealType.DINNER].name == "This week"
    assert date(2024, 1, 10) not in week.slots

    assert week.next_week() is True
    assert week.week_dates[0] == date(2024, 1, 7)
    assert week.meals_for(date(2024, 1, 10))[MealType.DINNER].name == "Next week"

    week.previous_week()
    week.previous_week()
    assert week.week_dates[0] == date(2023, 12, 24)
    assert week.slots == {}

    print("[OK] Weekly navigation working")


def test_select_date_without_a_day_falls_back_to_today():
    store, service, user_id = create_test_service()
    week = WeeklyMealPlan(service, anchor=date(2024, 1, 3))
    week.load(user_id)

    assert week.select_date(None) is True
    assert week.selected_date == date.today()
    start, end = week.date_range
    assert start <= date.today() <= end


def test_weekly_view_keeps_state_on_read_failure():
    print("\nTesting read failure handling...")
    store, service, user_id = create_test_service()
    service.add_meal_plan(user_id, "2024-01-03", "dinner", recipe("mealdb-1", "Stew"))

    week = WeeklyMealPlan(service, anchor=date(2024, 1, 3))
    week.load(user_id)
    before = dict(week.slots)

    failing = MagicMock(spec=MealPlanService)
    failing.get_meal_plans.side_effect = StoreError("connection reset", "meal_plans")
    week.service = failing

    assert week.select_date(date(2024, 1, 4)) is False
    assert week.slots == before, "Previous state kept after failed read"
    assert week.selected_date == date(2024, 1, 4)

    print("[OK] Failed reads leave previous state")


if __name__ == "__main__":
    tests = [
        test_slot_replace_keeps_one_row,
        test_different_slots_coexist,
        test_date_range_is_inclusive_and_ordered,
        test_week_dates_run_sunday_to_saturday,
        test_group_by_slot,
        test_update_servings_and_remove,
        test_meal_plans_of_another_user_are_untouchable,
        test_invalid_meal_type_rejected,
        test_weekly_view_navigation,
        test_select_date_without_a_day_falls_back_to_today,
        test_weekly_view_keeps_state_on_read_failure,
    ]
    try:
        for test in tests:
            test()
        print("\n[SUCCESS] All meal plan tests passed!")
        sys.exit(0)
    except Exception as e:
        print(f"[ERROR] Meal plan test failed with error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
