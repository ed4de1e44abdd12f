"""
Shopping list service for TastyTray application.
"""

from typing import List, Optional

from models import PantryItem, ShoppingListItem
from utils import get_logger
from .database_service import BackendStore, get_database_service
from .errors import RecordNotFoundError, ValidationError

logger = get_logger(__name__)


class ShoppingListService:
    """Per-user shopping list; open items sort before completed ones"""

    def __init__(self, store: Optional[BackendStore] = None):
        self.store = store or get_database_service()

    def get_shopping_list(self, user_id: str) -> List[ShoppingListItem]:
        rows = self.store.select('shopping_list', [('user_id', 'eq', user_id)],
                                 order_by=[('is_completed', True), ('ingredient_name', True)])
        return [ShoppingListItem.from_row(r) for r in rows]

    def add_shopping_item(self, user_id: str, ingredient_name: str,
                          quantity: Optional[float] = None, unit: Optional[str] = None) -> ShoppingListItem:
        name = (ingredient_name or "").strip()
        if not name:
            raise ValidationError("Please enter an item name", "ingredient_name")

        row = self.store.insert('shopping_list', {
            'user_id': user_id,
            'ingredient_name': name,
            'quantity': quantity,
            'unit': (unit or "").strip() or None,
            'is_completed': False,
        })
        logger.info(f"Added shopping item '{name}' for user {user_id}")
        return ShoppingListItem.from_row(row)

    def toggle_shopping_item(self, user_id: str, item_id: str, is_completed: bool) -> ShoppingListItem:
        """Set the completed flag to ``is_completed``"""
        rows = self.store.update('shopping_list', [('id', 'eq', item_id), ('user_id', 'eq', user_id)],
                                 {'is_completed': bool(is_completed)})
        if not rows:
            raise RecordNotFoundError(f"Shopping item {item_id} not found", 'shopping_list')
        return ShoppingListItem.from_row(rows[0])

    def remove_shopping_item(self, user_id: str, item_id: str) -> bool:
        return self.store.delete('shopping_list', [('id', 'eq', item_id), ('user_id', 'eq', user_id)]) > 0

    def clear_completed(self, user_id: str) -> int:
        """Delete every completed item, returning how many went"""
        removed = self.store.delete('shopping_list', [('user_id', 'eq', user_id),
                                                      ('is_completed', 'eq', True)])
        logger.info(f"Cleared {removed} completed shopping items for user {user_id}")
        return removed

    def move_to_pantry(self, user_id: str, item: ShoppingListItem) -> PantryItem:
        """Insert into the pantry, then drop from the list"""
        if item.user_id != user_id:
            raise RecordNotFoundError(f"Shopping item {item.id} not found", 'shopping_list')
        row = self.store.insert('pantry_items', {
            'user_id': user_id,
            'ingredient_name': item.ingredient_name,
            'quantity': item.quantity,
            'unit': item.unit,
            'expiry_date': None,
        })
        self.remove_shopping_item(user_id, item.id)
        logger.info(f"Moved '{item.ingredient_name}' from shopping list to pantry")
        return PantryItem.from_row(row)
