"""
Meal planner UI for TastyTray application.

Weekly Sunday..Saturday grid with previous/next navigation, per-slot servings
and removal, and the ingredient reconciliation form shown after a recipe is
added to the plan.
"""

import streamlit as st
from datetime import date

from models import MealType
from services import AppContext, ReconciliationError, ReconciliationPlan, TastyTrayError
from utils import get_logger

logger = get_logger(__name__)

PENDING_KEY = "pending_reconciliation"


class MealPlannerInterface:
    """Weekly meal plan page"""

    def __init__(self, context: AppContext):
        self.ctx = context

    def render_meal_planner(self):
        st.title("📅 Meal Plan")

        plan = st.session_state.get(PENDING_KEY)
        if plan is not None:
            self.render_reconciliation_form(plan)
            st.divider()

        self._render_week_navigation()
        self._render_week_grid()

    def _render_week_navigation(self):
        week = self.ctx.week
        col1, col2, col3, col4 = st.columns([1, 2, 1, 1])

        with col1:
            if st.button("⬅️ Previous", use_container_width=True):
                week.previous_week()
                st.rerun()
        with col2:
            st.markdown(f"### {week.week_dates[0]:%b %d} - {week.week_dates[-1]:%b %d, %Y}")
        with col3:
            if st.button("Next ➡️", use_container_width=True):
                week.next_week()
                st.rerun()
        with col4:
            if st.button("Today", use_container_width=True):
                week.select_date(date.today())
                st.rerun()

        picked = st.date_input("Jump to date", value=week.selected_date)
        if picked != week.selected_date:
            week.select_date(picked)
            st.rerun()

    def _render_week_grid(self):
        week = self.ctx.week
        cols = st.columns(7)

        for col, day in zip(cols, week.week_dates):
            with col:
                marker = "📍 " if day == date.today() else ""
                st.markdown(f"**{marker}{day:%a}**  \n{day:%b %d}")
                meals = week.meals_for(day)
                for meal_type in MealType:
                    summary = meals.get(meal_type)
                    st.caption(meal_type.label)
                    if summary is None:
                        st.markdown("·")
                        continue
                    self._render_slot(summary)

    def _render_slot(self, summary):
        with st.container(border=True):
            if summary.image:
                st.image(summary.image)
            st.markdown(f"**{summary.name}**")

            servings = st.number_input("Servings", min_value=1, max_value=20, value=summary.servings,
                                       key=f"servings_{summary.meal_plan_id}")
            if servings != summary.servings:
                try:
                    self.ctx.meal_plans.update_servings(self.ctx.user_id, summary.meal_plan_id,
                                                       int(servings))
                    self.ctx.refresh_meal_plans()
                except TastyTrayError as e:
                    st.error(f"❌ {e.message}")
                else:
                    st.rerun()

            if st.button("🗑️", key=f"remove_{summary.meal_plan_id}", help="Remove from plan"):
                try:
                    self.ctx.meal_plans.remove_meal_plan(self.ctx.user_id, summary.meal_plan_id)
                    self.ctx.refresh_meal_plans()
                except TastyTrayError as e:
                    st.error(f"❌ Could not remove meal: {e.message}")
                else:
                    st.rerun()

    def render_reconciliation_form(self, plan: ReconciliationPlan):
        """Per-ingredient "I have this" choices for a just-planned recipe"""
        st.subheader(f"🧺 Ingredients for {plan.recipe.name}")
        st.caption(f"Planned for {plan.planned_servings} servings (recipe makes "
                   f"{plan.recipe.effective_servings}). Checked items go to your pantry, "
                   f"the rest to your shopping list.")

        with st.form("reconciliation_form"):
            choices = []
            for index, entry in enumerate(plan.entries):
                amount = f"{entry.quantity:.1f} {entry.unit}".strip()
                hint = " (in pantry)" if entry.in_pantry else ""
                choices.append(st.checkbox(
                    f"I have {entry.name} · {amount}{hint}",
                    value=entry.have_it,
                    key=f"have_{plan.recipe.id}_{index}"
                ))
            submitted = st.form_submit_button("Save choices", type="primary")

        if st.button("Skip for now"):
            st.session_state.pop(PENDING_KEY, None)
            st.rerun()

        if not submitted:
            return

        for index, have_it in enumerate(choices):
            plan.set_choice(index, have_it)

        try:
            with st.spinner("Saving..."):
                self.ctx.reconciliation.commit(self.ctx.user_id, plan)
        except ReconciliationError as e:
            # form stays open; retry writes every entry again
            st.error(f"❌ {e.message}")
            self.ctx.refresh_pantry()
            self.ctx.refresh_shopping_list()
            return

        st.session_state.pop(PENDING_KEY, None)
        self.ctx.refresh_pantry()
        self.ctx.refresh_shopping_list()
        st.success(f"✅ {len(plan.pantry_entries)} added to pantry, "
                   f"{len(plan.shopping_entries)} added to shopping list")


def create_meal_planner(context: AppContext) -> MealPlannerInterface:
    """Factory function to create meal planner interface"""
    return MealPlannerInterface(context)
