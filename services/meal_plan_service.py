"""
Meal plan service for TastyTray application.

A meal plan is a set of slots, one per (date, meal type), each holding at
most one recipe. Slot assignment is an upsert against the
UNIQUE(user_id, date, meal_type) constraint, so concurrent writers to the
same slot still leave exactly one row.
"""

from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Union

from models import MealPlanItem, MealSummary, MealType, Recipe, format_date, parse_date
from utils import get_logger
from .database_service import BackendStore, get_database_service
from .errors import RecordNotFoundError, StoreError, ValidationError

logger = get_logger(__name__)

DateLike = Union[str, date]
SlotMap = Dict[date, Dict[MealType, MealSummary]]


def get_week_dates(anchor: Optional[DateLike] = None) -> List[date]:
    """The Sunday..Saturday week containing ``anchor``"""
    anchor = parse_date(anchor) or date.today()
    # date.weekday() counts from Monday
    sunday = anchor - timedelta(days=(anchor.weekday() + 1) % 7)
    return [sunday + timedelta(days=i) for i in range(7)]


def group_by_slot(items: Iterable[MealPlanItem]) -> SlotMap:
    """Group meal plan rows into {date: {meal_type: summary}}"""
    grouped: SlotMap = defaultdict(dict)
    for item in items:
        grouped[item.date][item.meal_type] = MealSummary(
            meal_plan_id=item.id,
            recipe_id=item.recipe_id,
            name=item.recipe_title,
            servings=item.servings,
            image=item.recipe_image
        )
    return dict(grouped)


def _meal_type(value: Union[str, MealType]) -> MealType:
    try:
        return value if isinstance(value, MealType) else MealType(str(value).lower())
    except ValueError:
        raise ValidationError(f"Unknown meal type: {value}", "meal_type") from None


class MealPlanService:
    """Accessor for the meal_plans table"""

    def __init__(self, store: Optional[BackendStore] = None):
        self.store = store or get_database_service()

    def get_meal_plans(self, user_id: str, start: Optional[DateLike] = None,
                       end: Optional[DateLike] = None) -> List[MealPlanItem]:
        """Rows for the user with start <= date <= end (either bound optional), by date"""
        filters = [('user_id', 'eq', user_id)]
        if start is not None:
            filters.append(('date', 'gte', format_date(start)))
        if end is not None:
            filters.append(('date', 'lte', format_date(end)))
        rows = self.store.select('meal_plans', filters, order_by=[('date', True)])
        return [MealPlanItem.from_row(r) for r in rows]

    def add_meal_plan(self, user_id: str, day: DateLike, meal_type: Union[str, MealType],
                      recipe: Recipe, servings: int = 1) -> MealPlanItem:
        """Put ``recipe`` in the (day, meal_type) slot, replacing whatever was there"""
        if servings is None or int(servings) < 1:
            raise ValidationError("Servings must be at least 1", "servings")
        slot_type = _meal_type(meal_type)

        row = self.store.upsert('meal_plans', {
            'user_id': user_id,
            'date': format_date(day),
            'meal_type': slot_type.value,
            'recipe_id': recipe.id,
            'recipe_title': recipe.name,
            'recipe_image': recipe.image or None,
            'servings': int(servings),
        }, conflict_columns=['user_id', 'date', 'meal_type'])
        logger.info(f"Planned {recipe.id} for {format_date(day)} {slot_type.value} (user {user_id})")
        return MealPlanItem.from_row(row)

    def remove_meal_plan(self, user_id: str, meal_plan_id: str) -> bool:
        filters = [('id', 'eq', meal_plan_id), ('user_id', 'eq', user_id)]
        return self.store.delete('meal_plans', filters) > 0

    def update_servings(self, user_id: str, meal_plan_id: str, servings: int) -> MealPlanItem:
        if servings is None or int(servings) < 1:
            raise ValidationError("Servings must be at least 1", "servings")
        rows = self.store.update('meal_plans', [('id', 'eq', meal_plan_id), ('user_id', 'eq', user_id)],
                                 {'servings': int(servings)})
        if not rows:
            raise RecordNotFoundError(f"Meal plan {meal_plan_id} not found", 'meal_plans')
        return MealPlanItem.from_row(rows[0])


class WeeklyMealPlan:
    """
    In-memory week view backing the meal planner page.

    Holds the week being viewed, the selected day and the grouped slots for
    that range. A failed reload is logged and keeps the previous contents.
    """

    def __init__(self, service: MealPlanService, anchor: Optional[DateLike] = None):
        self.service = service
        self.selected_date: date = parse_date(anchor) or date.today()
        self.week_dates: List[date] = get_week_dates(self.selected_date)
        self.items: List[MealPlanItem] = []
        self.slots: SlotMap = {}
        self.user_id: Optional[str] = None

    @property
    def date_range(self):
        start = min(self.week_dates[0], self.selected_date)
        end = max(self.week_dates[-1], self.selected_date)
        return start, end

    def load(self, user_id: Optional[str] = None) -> bool:
        """Fetch the visible range; returns False (state unchanged) on failure"""
        if user_id is not None:
            self.user_id = user_id
        if self.user_id is None:
            return False

        start, end = self.date_range
        try:
            items = self.service.get_meal_plans(self.user_id, start, end)
        except StoreError as e:
            logger.error(f"Failed to load meal plans {start}..{end}: {e}")
            return False

        self.items = items
        self.slots = group_by_slot(items)
        return True

    def next_week(self) -> bool:
        return self._shift(7)

    def previous_week(self) -> bool:
        return self._shift(-7)

    def select_date(self, day: Optional[DateLike]) -> bool:
        self.selected_date = parse_date(day) or date.today()
        self.week_dates = get_week_dates(self.selected_date)
        return self.load()

    def meals_for(self, day: date) -> Dict[MealType, MealSummary]:
        return self.slots.get(day, {})

    def _shift(self, days: int) -> bool:
        self.week_dates = [d + timedelta(days=days) for d in self.week_dates]
        self.selected_date = self.selected_date + timedelta(days=days)
        return self.load()
