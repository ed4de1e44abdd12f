"""
Application context for TastyTray.

One AppContext is built per browser session. It owns the services, the
current UserSession and the user's loaded data, and keeps that data in step
with sign-in and sign-out through the auth service's subscription interface.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

from config.database_config import get_backend_store
from models import Favorite, MealPlanItem, PantryItem, ShoppingListItem, UserSession
from utils import Config, get_config, get_logger, log_operation
from .auth_service import AuthService, SessionEvent
from .database_service import BackendStore
from .favorites_service import FavoritesService
from .meal_plan_service import MealPlanService, WeeklyMealPlan
from .pantry_service import PantryService
from .profile_service import ProfileService
from .reconciliation_service import ReconciliationService
from .recipe_service import RecipeService
from .shopping_list_service import ShoppingListService

logger = get_logger(__name__)


@dataclass
class UserData:
    """Snapshot of the signed-in user's four datasets"""
    favorites: List[Favorite] = field(default_factory=list)
    pantry: List[PantryItem] = field(default_factory=list)
    shopping_list: List[ShoppingListItem] = field(default_factory=list)
    meal_plans: List[MealPlanItem] = field(default_factory=list)

    @property
    def favorite_ids(self):
        return {f.recipe_id for f in self.favorites}


class AppContext:
    """
    Explicit application context replacing ambient session state.

    Pages read ``session`` and ``data`` from here and call ``refresh_*``
    after their own writes.
    """

    def __init__(self, config: Optional[Config] = None, store: Optional[BackendStore] = None,
                 recipe_service: Optional[RecipeService] = None):
        self.config = config or get_config()
        self.store = store or get_backend_store(self.config)

        self.profiles = ProfileService(self.store)
        self.auth = AuthService(self.store, self.profiles, self.config)
        self.favorites = FavoritesService(self.store)
        self.pantry = PantryService(self.store)
        self.shopping_list = ShoppingListService(self.store)
        self.meal_plans = MealPlanService(self.store)
        self.reconciliation = ReconciliationService(self.store)
        self.recipes = recipe_service or RecipeService(self.config)

        self.session: Optional[UserSession] = None
        self.data = UserData()
        self.week = WeeklyMealPlan(self.meal_plans)
        self._unsubscribe = self.auth.subscribe(self._on_session_change)

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None and not self.session.is_expired()

    @property
    def user_id(self) -> Optional[str]:
        return self.session.user_id if self.session else None

    def restore(self, token: Optional[str]) -> bool:
        """Resume a stored session token, loading the user's data"""
        session = self.auth.restore_session(token)
        if session is None:
            return False
        self._on_session_change(SessionEvent.SIGNED_IN, session)
        return True

    def sign_out(self):
        self.auth.sign_out(self.session)

    def close(self):
        self._unsubscribe()

    def _on_session_change(self, event: SessionEvent, session: Optional[UserSession]):
        if event == SessionEvent.SIGNED_OUT:
            logger.info("Session ended; clearing user data")
            self.session = None
            self.data = UserData()
            self.week = WeeklyMealPlan(self.meal_plans)
            return

        self.session = session
        if event == SessionEvent.SIGNED_IN and session is not None:
            self.load_user_data()
            self.week.load(session.user_id)

    def load_user_data(self) -> bool:
        """
        Load favorites, pantry, shopping list and meal plans concurrently.

        Returns False and keeps the previous data if any load fails.
        """
        user_id = self.user_id
        if user_id is None:
            return False

        try:
            with log_operation(logger, f"load user data for {user_id}"):
                with ThreadPoolExecutor(max_workers=4) as executor:
                    favorites = executor.submit(self.favorites.get_favorites, user_id)
                    pantry = executor.submit(self.pantry.get_pantry_items, user_id)
                    shopping = executor.submit(self.shopping_list.get_shopping_list, user_id)
                    meal_plans = executor.submit(self.meal_plans.get_meal_plans, user_id)

                    loaded = UserData(
                        favorites=favorites.result(),
                        pantry=pantry.result(),
                        shopping_list=shopping.result(),
                        meal_plans=meal_plans.result()
                    )
        except Exception as e:
            logger.error(f"Keeping previous user data after failed load: {e}")
            return False

        self.data = loaded
        return True

    # Per-dataset refreshes after a page's own write

    def refresh_favorites(self):
        if self.user_id:
            self.data.favorites = self.favorites.get_favorites(self.user_id)

    def refresh_pantry(self):
        if self.user_id:
            self.data.pantry = self.pantry.get_pantry_items(self.user_id)

    def refresh_shopping_list(self):
        if self.user_id:
            self.data.shopping_list = self.shopping_list.get_shopping_list(self.user_id)

    def refresh_meal_plans(self):
        if self.user_id:
            self.data.meal_plans = self.meal_plans.get_meal_plans(self.user_id)
            self.week.load(self.user_id)
