"""
UI components for TastyTray application.

Thin Streamlit pages over the AppContext: authentication, recipe discovery,
meal planning with ingredient reconciliation, pantry, shopping list,
favorites and profile settings.
"""

from .auth import AuthenticationInterface, create_auth_interface
from .recipe_browser import RecipeBrowser, create_recipe_browser
from .meal_planner import MealPlannerInterface, create_meal_planner
from .pantry_manager import PantryManagerInterface, create_pantry_manager
from .shopping_list import ShoppingListInterface, create_shopping_list_interface
from .favorites import FavoritesInterface, create_favorites_interface
from .profile import ProfileInterface, create_profile_interface

__all__ = [
    'AuthenticationInterface',
    'create_auth_interface',
    'RecipeBrowser',
    'create_recipe_browser',
    'MealPlannerInterface',
    'create_meal_planner',
    'PantryManagerInterface',
    'create_pantry_manager',
    'ShoppingListInterface',
    'create_shopping_list_interface',
    'FavoritesInterface',
    'create_favorites_interface',
    'ProfileInterface',
    'create_profile_interface'
]
