"""
Data models for TastyTray application.

Recipe shapes normalized from the recipe providers, user/session/profile
records, and the user-scoped kitchen entities stored in the backend.
"""

from .recipe_models import Recipe, RecipeIngredient, RecipeStep, NutritionData, Difficulty, SearchOptions
from .user_models import User, UserSession, UserProfile, NutritionGoals
from .kitchen_models import (
    Favorite, PantryItem, ShoppingListItem, MealPlanItem, MealSummary,
    MealType, ExpiryStatus, parse_date, format_date
)

__all__ = [
    'Recipe',
    'RecipeIngredient',
    'RecipeStep',
    'NutritionData',
    'Difficulty',
    'SearchOptions',
    'User',
    'UserSession',
    'UserProfile',
    'NutritionGoals',
    'Favorite',
    'PantryItem',
    'ShoppingListItem',
    'MealPlanItem',
    'MealSummary',
    'MealType',
    'ExpiryStatus',
    'parse_date',
    'format_date'
]
