"""
Pantry management service for TastyTray application.

Manages the user's ingredient inventory: plain CRUD over ``pantry_items``,
moving items over to the shopping list, and display-time expiry summaries.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional, Union

from models import ExpiryStatus, PantryItem, ShoppingListItem, format_date
from utils import get_logger
from .database_service import BackendStore, get_database_service
from .errors import RecordNotFoundError, ValidationError

logger = get_logger(__name__)

DateLike = Union[str, date, None]


def search_pantry(items: Iterable[PantryItem], term: str) -> List[PantryItem]:
    """Case-insensitive substring filter on ingredient name"""
    term = (term or "").strip().lower()
    if not term:
        return list(items)
    return [item for item in items if term in item.ingredient_name.lower()]


def summarize_expiry(items: Iterable[PantryItem], today: Optional[date] = None,
                     soon_days: int = 3) -> Dict[ExpiryStatus, int]:
    """Count items per expiry status"""
    counts = {status: 0 for status in ExpiryStatus}
    for item in items:
        counts[item.expiry_status(today, soon_days)] += 1
    return counts


def _owned(user_id: str, item_id: str):
    """Filters matching one row only if it belongs to ``user_id``"""
    return [('id', 'eq', item_id), ('user_id', 'eq', user_id)]


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Please enter an ingredient name", "ingredient_name")
    return name


class PantryService:
    """
    Service for managing a user's pantry.

    Store errors propagate; callers decide how to surface them.
    """

    def __init__(self, store: Optional[BackendStore] = None):
        self.store = store or get_database_service()

    def get_pantry_items(self, user_id: str) -> List[PantryItem]:
        """Get user's pantry ordered by ingredient name"""
        rows = self.store.select('pantry_items', [('user_id', 'eq', user_id)],
                                 order_by=[('ingredient_name', True)])
        return [PantryItem.from_row(r) for r in rows]

    def add_pantry_item(self, user_id: str, ingredient_name: str, quantity: Optional[float] = None,
                        unit: Optional[str] = None, expiry_date: DateLike = None) -> PantryItem:
        row = self.store.insert('pantry_items', {
            'user_id': user_id,
            'ingredient_name': _clean_name(ingredient_name),
            'quantity': quantity,
            'unit': (unit or "").strip() or None,
            'expiry_date': format_date(expiry_date),
        })
        logger.info(f"Added pantry item '{row['ingredient_name']}' for user {user_id}")
        return PantryItem.from_row(row)

    def update_pantry_item(self, user_id: str, item_id: str, quantity: Optional[float] = None,
                           unit: Optional[str] = None, expiry_date: DateLike = None) -> PantryItem:
        """Replace quantity, unit and expiry; updated_at is refreshed by the store"""
        rows = self.store.update('pantry_items', _owned(user_id, item_id), {
            'quantity': quantity,
            'unit': (unit or "").strip() or None,
            'expiry_date': format_date(expiry_date),
        })
        if not rows:
            raise RecordNotFoundError(f"Pantry item {item_id} not found", 'pantry_items')
        return PantryItem.from_row(rows[0])

    def remove_pantry_item(self, user_id: str, item_id: str) -> bool:
        return self.store.delete('pantry_items', _owned(user_id, item_id)) > 0

    def move_to_shopping_list(self, user_id: str, item: PantryItem) -> ShoppingListItem:
        """
        Move a pantry item onto the shopping list.

        The shopping row is written before the pantry row is deleted, so a
        failure in between leaves the item in both places rather than neither.
        """
        if item.user_id != user_id:
            raise RecordNotFoundError(f"Pantry item {item.id} not found", 'pantry_items')
        row = self.store.insert('shopping_list', {
            'user_id': user_id,
            'ingredient_name': item.ingredient_name,
            'quantity': item.quantity,
            'unit': item.unit,
            'is_completed': False,
        })
        self.remove_pantry_item(user_id, item.id)
        logger.info(f"Moved '{item.ingredient_name}' from pantry to shopping list")
        return ShoppingListItem.from_row(row)
