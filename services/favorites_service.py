"""
Favorites service for TastyTray application.

Saved recipes are denormalized (title and image copied in) so the favorites
page renders without refetching from the recipe providers.
"""

from typing import List, Optional

from models import Favorite, Recipe
from utils import get_logger
from .database_service import BackendStore, get_database_service

logger = get_logger(__name__)


class FavoritesService:
    """Per-user favorite recipes, one row per (user, recipe)"""

    def __init__(self, store: Optional[BackendStore] = None):
        self.store = store or get_database_service()

    def get_favorites(self, user_id: str) -> List[Favorite]:
        """Favorites newest first"""
        rows = self.store.select('favorites', [('user_id', 'eq', user_id)],
                                 order_by=[('created_at', False)])
        return [Favorite.from_row(r) for r in rows]

    def is_favorite(self, user_id: str, recipe_id: str) -> bool:
        row = self.store.select_one('favorites', [('user_id', 'eq', user_id),
                                                  ('recipe_id', 'eq', recipe_id)])
        return row is not None

    def add_favorite(self, user_id: str, recipe: Recipe) -> Favorite:
        """Save a recipe; saving it twice keeps a single row"""
        row = self.store.upsert('favorites', {
            'user_id': user_id,
            'recipe_id': recipe.id,
            'recipe_title': recipe.name,
            'recipe_image': recipe.image or None,
        }, conflict_columns=['user_id', 'recipe_id'])
        logger.info(f"Added favorite {recipe.id} for user {user_id}")
        return Favorite.from_row(row)

    def remove_favorite(self, user_id: str, recipe_id: str) -> bool:
        removed = self.store.delete('favorites', [('user_id', 'eq', user_id),
                                                  ('recipe_id', 'eq', recipe_id)])
        logger.info(f"Removed favorite {recipe_id} for user {user_id}")
        return removed > 0

    def toggle_favorite(self, user_id: str, recipe: Recipe) -> bool:
        """Flip membership and return whether the recipe is now a favorite"""
        if self.is_favorite(user_id, recipe.id):
            self.remove_favorite(user_id, recipe.id)
            return False
        self.add_favorite(user_id, recipe)
        return True
