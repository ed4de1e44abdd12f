"""
Recipe browsing UI for TastyTray application.

Random recipe feed, filtered search across the recipe providers, favorite
toggles, and the add-to-meal-plan form that opens ingredient reconciliation.
"""

import streamlit as st
from datetime import date
from typing import List

from models import MealType, Recipe, SearchOptions
from services import AppContext, TastyTrayError
from utils import get_logger

logger = get_logger(__name__)

CUISINES = ["African", "American", "British", "Chinese", "French", "Greek", "Indian", "Italian",
            "Japanese", "Korean", "Mediterranean", "Mexican", "Middle Eastern", "Spanish", "Thai",
            "Vietnamese"]
DIETS = ["Gluten Free", "Ketogenic", "Vegetarian", "Vegan", "Pescetarian", "Paleo", "Whole30"]
INTOLERANCES = ["Dairy", "Egg", "Gluten", "Peanut", "Seafood", "Sesame", "Shellfish", "Soy",
                "Tree Nut", "Wheat"]

DIFFICULTY_BADGES = {
    'easy': "🟢 Easy",
    'medium': "🟡 Medium",
    'hard': "🔴 Hard",
}


def split_terms(text: str) -> List[str]:
    """Comma-separated input to a clean list"""
    return [t.strip() for t in (text or "").split(",") if t.strip()]


class RecipeBrowser:
    """
    Recipe discovery page.

    Results are kept in session state so reruns (favorite clicks, form
    submissions) don't refetch from the providers.
    """

    def __init__(self, context: AppContext):
        self.ctx = context

        # Session state keys
        self.RESULTS_KEY = "recipe_results"
        self.RESULTS_LABEL_KEY = "recipe_results_label"
        self.PENDING_KEY = "pending_reconciliation"

    def render_recipe_browser(self):
        st.title("🍳 Discover Recipes")

        self._render_search_form()

        if self.RESULTS_KEY not in st.session_state:
            self._load_random_feed()

        recipes = st.session_state.get(self.RESULTS_KEY, [])
        col1, col2 = st.columns([4, 1])
        with col1:
            st.subheader(st.session_state.get(self.RESULTS_LABEL_KEY, "Recipes"))
        with col2:
            if st.button("🎲 Surprise me", use_container_width=True):
                self._load_random_feed()
                st.rerun()

        if not recipes:
            st.info("No recipes found. Try a different search or check your connection.")
            return

        self._render_recipe_grid(recipes)

    def _render_search_form(self):
        with st.form("recipe_search_form"):
            query = st.text_input("Search recipes", placeholder="e.g. chicken curry, pasta, tacos")

            with st.expander("🔍 Filters"):
                col1, col2 = st.columns(2)
                with col1:
                    cuisine = st.multiselect("Cuisine", CUISINES)
                    diet = st.multiselect("Diet", DIETS)
                    allergies = st.multiselect("Allergies / intolerances", INTOLERANCES)
                with col2:
                    max_time = st.number_input("Max ready time (minutes, 0 = any)", min_value=0,
                                               max_value=240, value=0, step=5)
                    include = st.text_input("Must include ingredients", placeholder="comma separated")
                    exclude = st.text_input("Exclude ingredients", placeholder="comma separated")

            submitted = st.form_submit_button("Search", type="primary")

        if not submitted:
            return

        options = SearchOptions(
            query=query,
            cuisine=cuisine,
            diet=diet,
            allergies=allergies,
            max_time=int(max_time) or None,
            include_ingredients=split_terms(include),
            exclude_ingredients=split_terms(exclude)
        )
        if options.is_empty():
            st.warning("Enter a search term or pick at least one filter")
            return

        with st.spinner("Searching recipes..."):
            results = self.ctx.recipes.search_recipes(options)
        st.session_state[self.RESULTS_KEY] = results
        st.session_state[self.RESULTS_LABEL_KEY] = f"Results for '{options.query}'" if options.query \
            else "Filtered results"

    def _load_random_feed(self):
        with st.spinner("Fetching recipes..."):
            st.session_state[self.RESULTS_KEY] = self.ctx.recipes.fetch_random_recipes()
        st.session_state[self.RESULTS_LABEL_KEY] = "Recipes for you"

    def _render_recipe_grid(self, recipes: List[Recipe]):
        recipes_per_row = 3
        for i in range(0, len(recipes), recipes_per_row):
            cols = st.columns(recipes_per_row)
            for col, recipe in zip(cols, recipes[i:i + recipes_per_row]):
                with col:
                    self.render_recipe_card(recipe)

    def render_recipe_card(self, recipe: Recipe):
        with st.container(border=True):
            if recipe.image:
                st.image(recipe.image)
            st.markdown(f"**{recipe.name}**")

            meta = [f"⏱️ {recipe.cook_time} min", f"👥 {recipe.servings}",
                    DIFFICULTY_BADGES.get(recipe.difficulty.value, recipe.difficulty.value)]
            if recipe.rating is not None:
                meta.append(f"⭐ {recipe.rating:.1f}")
            st.caption(" · ".join(meta))

            self._render_favorite_button(recipe)

            with st.expander("Details"):
                self.render_recipe_details(recipe)

            with st.expander("📅 Add to meal plan"):
                self._render_add_to_plan_form(recipe)

    def render_recipe_details(self, recipe: Recipe):
        if recipe.description:
            st.write(recipe.description)
        if recipe.cuisines or recipe.tags:
            st.caption(", ".join(recipe.cuisines + recipe.tags))

        st.markdown("**Ingredients**")
        for ingredient in recipe.ingredients:
            st.markdown(f"- {ingredient.get_display_text()}")

        if recipe.steps:
            st.markdown("**Steps**")
            for step in recipe.steps:
                st.markdown(f"{step.num}. {step.instruction}")

        n = recipe.nutrition
        st.markdown("**Nutrition (per serving)**")
        st.caption(f"{n.calories:.0f} kcal · protein {n.protein:.0f} g · carbs {n.carbs:.0f} g · "
                   f"fat {n.fat:.0f} g · fiber {n.fiber:.0f} g · sugar {n.sugar:.0f} g · "
                   f"sodium {n.sodium:.0f} mg")

    def _render_favorite_button(self, recipe: Recipe):
        is_favorite = recipe.id in self.ctx.data.favorite_ids
        label = "❤️ Saved" if is_favorite else "🤍 Save"
        if st.button(label, key=f"fav_{recipe.id}"):
            try:
                self.ctx.favorites.toggle_favorite(self.ctx.user_id, recipe)
                self.ctx.refresh_favorites()
            except TastyTrayError as e:
                st.error(f"❌ Could not update favorites: {e.message}")
                return
            st.rerun()

    def _render_add_to_plan_form(self, recipe: Recipe):
        with st.form(f"plan_form_{recipe.id}"):
            day = st.date_input("Date", value=date.today(), key=f"plan_date_{recipe.id}")
            meal_type = st.selectbox("Meal", list(MealType), format_func=lambda m: m.label,
                                     index=2, key=f"plan_meal_{recipe.id}")
            servings = st.number_input("Servings", min_value=1, max_value=20,
                                       value=recipe.effective_servings, key=f"plan_servings_{recipe.id}")
            submitted = st.form_submit_button("Add to plan")

        if submitted:
            self.add_to_meal_plan(recipe, day, meal_type, int(servings))

    def add_to_meal_plan(self, recipe: Recipe, day: date, meal_type: MealType, servings: int):
        try:
            self.ctx.meal_plans.add_meal_plan(self.ctx.user_id, day, meal_type, recipe, servings)
            self.ctx.refresh_meal_plans()
        except TastyTrayError as e:
            st.error(f"❌ Could not add to meal plan: {e.message}")
            return

        st.success(f"✅ {recipe.name} planned for {meal_type.label.lower()} on {day:%a %b %d}")
        if not recipe.has_ingredients():
            return

        try:
            plan = self.ctx.reconciliation.open_plan(self.ctx.user_id, recipe, servings)
        except TastyTrayError as e:
            st.error(f"❌ Could not load your pantry: {e.message}")
            return

        if plan.entries:
            st.session_state[self.PENDING_KEY] = plan
            st.info("🧺 Review ingredients on the Meal Plan page")


def create_recipe_browser(context: AppContext) -> RecipeBrowser:
    """Factory function to create recipe browser"""
    return RecipeBrowser(context)
