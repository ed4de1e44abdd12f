"""
User-scoped kitchen models: favorites, pantry, shopping list and meal plan.

Each model maps to one table of the backend store and is built from the plain
dict rows the store returns. All rows carry the owning ``user_id``.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional, Union


class MealType(Enum):
    """Meal slots available for each day"""
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class ExpiryStatus(Enum):
    """Display-time freshness of a pantry item"""
    NONE = "none"
    FRESH = "fresh"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"


def parse_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """Coerce a stored date value (ISO text or date) into a date"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def format_date(value: Union[str, date, datetime, None]) -> Optional[str]:
    """Format a date as the ISO ``YYYY-MM-DD`` text the store keys on"""
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else None


def _optional_float(value: Any) -> Optional[float]:
    return float(value) if value is not None and value != "" else None


@dataclass
class Favorite:
    """Saved recipe, keyed by (user_id, recipe_id)"""
    id: str
    user_id: str
    recipe_id: str
    recipe_title: str
    recipe_image: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Favorite':
        return cls(
            id=row['id'],
            user_id=row['user_id'],
            recipe_id=row['recipe_id'],
            recipe_title=row['recipe_title'],
            recipe_image=row.get('recipe_image'),
            created_at=row.get('created_at')
        )


@dataclass
class PantryItem:
    """Ingredient the user already has"""
    id: str
    user_id: str
    ingredient_name: str
    quantity: Optional[float] = None
    unit: Optional[str] = None
    expiry_date: Optional[date] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'PantryItem':
        return cls(
            id=row['id'],
            user_id=row['user_id'],
            ingredient_name=row['ingredient_name'],
            quantity=_optional_float(row.get('quantity')),
            unit=row.get('unit'),
            expiry_date=parse_date(row.get('expiry_date')),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at')
        )

    def expiry_status(self, today: Optional[date] = None, soon_days: int = 3) -> ExpiryStatus:
        """
        Compute freshness relative to ``today``.

        Expired means strictly before today; expiring soon covers today through
        ``today + soon_days`` inclusive.
        """
        if self.expiry_date is None:
            return ExpiryStatus.NONE
        today = today or date.today()
        if self.expiry_date < today:
            return ExpiryStatus.EXPIRED
        if self.expiry_date <= today + timedelta(days=soon_days):
            return ExpiryStatus.EXPIRING_SOON
        return ExpiryStatus.FRESH


@dataclass
class ShoppingListItem:
    """Ingredient the user needs to buy"""
    id: str
    user_id: str
    ingredient_name: str
    quantity: Optional[float] = None
    unit: Optional[str] = None
    is_completed: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'ShoppingListItem':
        return cls(
            id=row['id'],
            user_id=row['user_id'],
            ingredient_name=row['ingredient_name'],
            quantity=_optional_float(row.get('quantity')),
            unit=row.get('unit'),
            is_completed=bool(row.get('is_completed')),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at')
        )

    def get_display_text(self) -> str:
        if self.quantity is None:
            return self.ingredient_name
        return f"{self.quantity:.1f} {self.unit or ''} {self.ingredient_name}".replace("  ", " ")


@dataclass
class MealPlanItem:
    """Recipe assigned to one (date, meal_type) slot"""
    id: str
    user_id: str
    date: date
    meal_type: MealType
    recipe_id: str
    recipe_title: str
    servings: int = 1
    recipe_image: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'MealPlanItem':
        return cls(
            id=row['id'],
            user_id=row['user_id'],
            date=parse_date(row['date']),
            meal_type=MealType(row['meal_type']),
            recipe_id=row['recipe_id'],
            recipe_title=row['recipe_title'],
            servings=int(row.get('servings') or 1),
            recipe_image=row.get('recipe_image'),
            created_at=row.get('created_at')
        )


@dataclass
class MealSummary:
    """Recipe summary shown in a meal-plan calendar cell"""
    meal_plan_id: str
    recipe_id: str
    name: str
    servings: int
    image: Optional[str] = None
