"""
Profile settings UI for TastyTray application.

Display name, email and password changes, plus dietary preferences and
daily nutrition goals stored on the profile row.
"""

import streamlit as st

from models import NutritionGoals, UserProfile
from services import AppContext, TastyTrayError
from ui.recipe_browser import CUISINES, DIETS, INTOLERANCES
from utils import get_logger

logger = get_logger(__name__)


class ProfileInterface:
    """Account and preference settings"""

    def __init__(self, context: AppContext):
        self.ctx = context

    def render_profile(self):
        session = self.ctx.session
        st.title(f"⚙️ Settings for {session.get_display_name()}")

        tab1, tab2, tab3 = st.tabs(["👤 Account", "🍽️ Preferences", "🔒 Security"])

        with tab1:
            self._render_account_settings()
        with tab2:
            self._render_preference_settings()
        with tab3:
            self._render_security_settings()

    def _render_account_settings(self):
        session = self.ctx.session

        with st.form("profile_name_form"):
            name = st.text_input("Display name", value=session.name)
            if st.form_submit_button("Update name"):
                try:
                    self.ctx.auth.update_name(session, name)
                    st.success("✅ Name updated")
                except TastyTrayError as e:
                    st.error(f"❌ {e.message}")

        with st.form("profile_email_form"):
            st.caption(f"Current email: {session.email}")
            email = st.text_input("New email")
            password = st.text_input("Current password", type="password", key="email_current_password")
            if st.form_submit_button("Update email"):
                try:
                    self.ctx.auth.update_email(session, email, password)
                    st.success("✅ Email updated")
                except TastyTrayError as e:
                    st.error(f"❌ {e.message}")

    def _render_preference_settings(self):
        session = self.ctx.session
        try:
            profile = self.ctx.profiles.get_profile(session.user_id)
        except TastyTrayError as e:
            st.error(f"❌ Could not load your profile: {e.message}")
            return
        profile = profile or UserProfile(user_id=session.user_id, name=session.name, email=session.email)
        goals = profile.nutritional_goals

        with st.form("preferences_form"):
            dietary = st.multiselect("Dietary restrictions", DIETS,
                                     default=[d for d in profile.dietary_restrictions if d in DIETS])
            cuisines = st.multiselect("Favorite cuisines", CUISINES,
                                      default=[c for c in profile.cuisine_preferences if c in CUISINES])
            allergies = st.multiselect("Allergies", INTOLERANCES,
                                       default=[a for a in profile.allergies if a in INTOLERANCES])

            st.markdown("**Daily nutrition goals**")
            col1, col2, col3, col4, col5 = st.columns(5)
            calories = col1.number_input("Calories", min_value=0, value=goals.daily_calories, step=50)
            protein = col2.number_input("Protein (g)", min_value=0, value=goals.protein)
            carbs = col3.number_input("Carbs (g)", min_value=0, value=goals.carbs)
            fat = col4.number_input("Fat (g)", min_value=0, value=goals.fat)
            fiber = col5.number_input("Fiber (g)", min_value=0, value=goals.fiber)

            if st.form_submit_button("Save preferences", type="primary"):
                profile.dietary_restrictions = dietary
                profile.cuisine_preferences = cuisines
                profile.allergies = allergies
                profile.nutritional_goals = NutritionGoals(
                    daily_calories=int(calories), protein=int(protein), carbs=int(carbs),
                    fat=int(fat), fiber=int(fiber)
                )
                try:
                    self.ctx.profiles.save_profile(profile)
                    st.success("✅ Preferences saved")
                except TastyTrayError as e:
                    st.error(f"❌ {e.message}")

    def _render_security_settings(self):
        with st.form("password_form", clear_on_submit=True):
            current = st.text_input("Current password", type="password")
            new = st.text_input("New password", type="password",
                                help=f"At least {self.ctx.config.password_min_length} characters")
            confirm = st.text_input("Confirm new password", type="password")

            if st.form_submit_button("Change password"):
                try:
                    self.ctx.auth.update_password(self.ctx.session, current, new, confirm)
                    st.success("✅ Password updated")
                except TastyTrayError as e:
                    st.error(f"❌ {e.message}")


def create_profile_interface(context: AppContext) -> ProfileInterface:
    return ProfileInterface(context)
