"""
User authentication UI for TastyTray application.

Login and sign-up forms plus the signed-in sidebar. Session changes go
through the AppContext's auth service, which reloads or clears user data.
"""

import streamlit as st
from typing import Optional

from models import UserSession
from services import AppContext, TastyTrayError
from utils import get_logger

logger = get_logger(__name__)

SESSION_TOKEN_KEY = "session_token"


class AuthenticationInterface:
    """Login / sign-up page and the account sidebar"""

    def __init__(self, context: AppContext):
        self.ctx = context

    def restore_session(self) -> Optional[UserSession]:
        """Resume the session whose token is kept in Streamlit session state"""
        if self.ctx.is_authenticated:
            return self.ctx.session

        token = st.session_state.get(SESSION_TOKEN_KEY)
        if token and self.ctx.restore(token):
            return self.ctx.session

        st.session_state.pop(SESSION_TOKEN_KEY, None)
        return None

    def render_login_page(self) -> Optional[UserSession]:
        st.title("🍽️ Welcome to TastyTray")
        st.markdown("*Discover recipes, plan your week, and keep your kitchen stocked*")

        tab1, tab2 = st.tabs(["🔑 Sign In", "📝 Create Account"])

        with tab1:
            session = self._render_login_form()
            if session:
                return session

        with tab2:
            session = self._render_registration_form()
            if session:
                return session

        return None

    def render_auth_sidebar(self):
        session = self.ctx.session
        if session is None:
            return

        with st.sidebar:
            st.markdown(f"👋 **{session.get_display_name()}**")
            st.caption(session.email)
            if st.button("🚪 Sign Out", use_container_width=True):
                self.logout()
                st.rerun()

    def logout(self):
        try:
            self.ctx.sign_out()
        except TastyTrayError as e:
            # the local session is cleared regardless
            logger.error(f"Sign-out failed: {e}")
        st.session_state.pop(SESSION_TOKEN_KEY, None)

    def _render_login_form(self) -> Optional[UserSession]:
        with st.form("login_form"):
            email = st.text_input("Email", placeholder="you@example.com")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign In", type="primary", use_container_width=True)

        if not submitted:
            return None

        try:
            with st.spinner("Signing in..."):
                session = self.ctx.auth.sign_in(email, password)
        except TastyTrayError as e:
            st.error(f"❌ {e.message}")
            return None

        return self._complete_sign_in(session)

    def _render_registration_form(self) -> Optional[UserSession]:
        with st.form("registration_form"):
            name = st.text_input("Full name")
            email = st.text_input("Email", placeholder="you@example.com", key="signup_email")
            password = st.text_input("Password", type="password", key="signup_password",
                                     help=f"At least {self.ctx.config.password_min_length} characters")
            confirm = st.text_input("Confirm password", type="password")
            submitted = st.form_submit_button("Create Account", type="primary", use_container_width=True)

        if not submitted:
            return None

        if password != confirm:
            st.error("❌ Passwords do not match")
            return None

        try:
            with st.spinner("Creating your account..."):
                session = self.ctx.auth.sign_up(name, email, password)
        except TastyTrayError as e:
            st.error(f"❌ {e.message}")
            return None

        st.success("🎉 Account created!")
        return self._complete_sign_in(session)

    def _complete_sign_in(self, session: UserSession) -> UserSession:
        st.session_state[SESSION_TOKEN_KEY] = session.token
        logger.info(f"UI session started for {session.email}")
        st.rerun()
        return session


def create_auth_interface(context: AppContext) -> AuthenticationInterface:
    """Factory function to create authentication interface"""
    return AuthenticationInterface(context)
