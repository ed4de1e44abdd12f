"""
Services package for TastyTray application.

Contains the backend stores, authentication, the recipe source adapter, the
user-scoped accessors and the ingredient reconciliation flow.
"""

from .errors import (
    TastyTrayError, StoreError, RecordNotFoundError,
    AuthenticationError, ValidationError, ReconciliationError
)
from .database_service import BackendStore, DatabaseService, get_database_service
from .auth_service import AuthService, SessionEvent
from .profile_service import ProfileService
from .favorites_service import FavoritesService
from .pantry_service import PantryService, search_pantry, summarize_expiry
from .shopping_list_service import ShoppingListService
from .meal_plan_service import (
    MealPlanService, WeeklyMealPlan, get_week_dates, group_by_slot
)
from .reconciliation_service import (
    ReconciliationService, ReconciliationPlan, ReconciliationEntry, build_reconciliation,
    is_instruction_text, matches_pantry, scale_quantity
)
from .recipe_service import RecipeService, SpoonacularProvider, MealDBProvider
from .app_context import AppContext, UserData

__all__ = [
    'TastyTrayError',
    'StoreError',
    'RecordNotFoundError',
    'AuthenticationError',
    'ValidationError',
    'ReconciliationError',
    'BackendStore',
    'DatabaseService',
    'get_database_service',
    'AuthService',
    'SessionEvent',
    'ProfileService',
    'FavoritesService',
    'PantryService',
    'search_pantry',
    'summarize_expiry',
    'ShoppingListService',
    'MealPlanService',
    'WeeklyMealPlan',
    'get_week_dates',
    'group_by_slot',
    'ReconciliationService',
    'ReconciliationPlan',
    'ReconciliationEntry',
    'build_reconciliation',
    'is_instruction_text',
    'matches_pantry',
    'scale_quantity',
    'RecipeService',
    'SpoonacularProvider',
    'MealDBProvider',
    'AppContext',
    'UserData'
]
