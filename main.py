#!/usr/bin/env python3
"""
TastyTray - Main Application Entry Point

Recipe discovery and meal planning with a pantry and shopping list.
Run with ``streamlit run main.py``.
"""

import sys
from pathlib import Path

import streamlit as st
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent))

from config.database_config import get_database_info
from services import AppContext, TastyTrayError
from ui import (
    create_auth_interface, create_recipe_browser, create_meal_planner, create_pantry_manager,
    create_shopping_list_interface, create_favorites_interface, create_profile_interface
)
from utils import get_config, get_logger, setup_logging

logger = get_logger(__name__)

PAGES = {
    "🍳 Discover": lambda ctx: create_recipe_browser(ctx).render_recipe_browser(),
    "📅 Meal Plan": lambda ctx: create_meal_planner(ctx).render_meal_planner(),
    "🥫 Pantry": lambda ctx: create_pantry_manager(ctx).render_pantry_manager(),
    "🛒 Shopping List": lambda ctx: create_shopping_list_interface(ctx).render_shopping_list(),
    "❤️ Favorites": lambda ctx: create_favorites_interface(ctx).render_favorites(),
    "⚙️ Profile": lambda ctx: create_profile_interface(ctx).render_profile(),
}


def get_app_context() -> AppContext:
    """One AppContext per browser session"""
    if 'app_context' not in st.session_state:
        config = get_config()
        setup_logging(config.log_level, config.log_file)
        db_info = get_database_info(config)
        logger.info(f"Starting TastyTray with {db_info['description']} ({db_info['location']})")
        st.session_state.app_context = AppContext(config)
    return st.session_state.app_context


def main():
    """Main application entry point"""
    st.set_page_config(
        page_title="TastyTray",
        page_icon="🍽️",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    try:
        ctx = get_app_context()
    except TastyTrayError as e:
        st.error(f"❌ Could not connect to the backend: {e.message}")
        st.stop()

    auth = create_auth_interface(ctx)
    if auth.restore_session() is None:
        auth.render_login_page()
        return

    with st.sidebar:
        st.title("🍽️ TastyTray")
        page = st.radio("Navigate", list(PAGES), label_visibility="collapsed")
        pending = st.session_state.get("pending_reconciliation")
        if pending is not None:
            st.info(f"🧺 Ingredients to review for {pending.recipe.name}")

    auth.render_auth_sidebar()

    if ctx.config.debug_mode:
        with st.sidebar.expander("Backend"):
            info = get_database_info(ctx.config)
            st.caption(f"{info['description']}  \n{info['location']}")

    PAGES[page](ctx)


if __name__ == "__main__":
    main()
