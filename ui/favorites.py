"""
Favorites UI for TastyTray application.

Lists saved recipes from their denormalized rows; full details are fetched
from the recipe provider only when the user opens one.
"""

import streamlit as st

from models import Favorite
from services import AppContext, TastyTrayError
from ui.recipe_browser import RecipeBrowser
from utils import get_logger

logger = get_logger(__name__)


class FavoritesInterface:
    """Favorites page"""

    def __init__(self, context: AppContext):
        self.ctx = context
        self.browser = RecipeBrowser(context)

        # Session state keys
        self.OPEN_KEY = "open_favorite_recipe"

    def render_favorites(self):
        st.title("❤️ Favorites")
        favorites = self.ctx.data.favorites

        if not favorites:
            st.info("No favorites yet. Save recipes from the Discover page.")
            return

        opened = st.session_state.get(self.OPEN_KEY)
        if opened is not None:
            if st.button("⬅️ Back to favorites"):
                st.session_state.pop(self.OPEN_KEY, None)
                st.rerun()
            self.browser.render_recipe_card(opened)
            return

        cols = st.columns(3)
        for index, favorite in enumerate(favorites):
            with cols[index % 3]:
                self._render_favorite(favorite)

    def _render_favorite(self, favorite: Favorite):
        with st.container(border=True):
            if favorite.recipe_image:
                st.image(favorite.recipe_image)
            st.markdown(f"**{favorite.recipe_title}**")

            col1, col2 = st.columns(2)
            with col1:
                if st.button("View", key=f"view_{favorite.id}"):
                    with st.spinner("Loading recipe..."):
                        recipe = self.ctx.recipes.get_recipe(favorite.recipe_id)
                    if recipe is None:
                        st.warning("This recipe is no longer available from its source.")
                    else:
                        st.session_state[self.OPEN_KEY] = recipe
                        st.rerun()
            with col2:
                if st.button("Remove", key=f"unfav_{favorite.id}"):
                    try:
                        self.ctx.favorites.remove_favorite(self.ctx.user_id, favorite.recipe_id)
                        self.ctx.refresh_favorites()
                    except TastyTrayError as e:
                        st.error(f"❌ {e.message}")
                    else:
                        st.rerun()


def create_favorites_interface(context: AppContext) -> FavoritesInterface:
    return FavoritesInterface(context)
