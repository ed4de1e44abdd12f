"""
Pantry management UI for TastyTray application.

Add, edit, remove and search pantry items, move them to the shopping list,
and show expiry badges and counts computed at display time.
"""

import streamlit as st
import pandas as pd
from datetime import date
from typing import List

from models import ExpiryStatus, PantryItem
from services import AppContext, TastyTrayError, search_pantry, summarize_expiry
from utils import get_logger

logger = get_logger(__name__)

EXPIRY_BADGES = {
    ExpiryStatus.EXPIRED: "🔴 Expired",
    ExpiryStatus.EXPIRING_SOON: "🟠 Expiring soon",
    ExpiryStatus.FRESH: "🟢 Fresh",
    ExpiryStatus.NONE: "",
}


def pantry_dataframe(items: List[PantryItem], today: date, soon_days: int) -> pd.DataFrame:
    """Tabular pantry view"""
    return pd.DataFrame([{
        'Ingredient': item.ingredient_name,
        'Quantity': item.quantity,
        'Unit': item.unit or "",
        'Expires': item.expiry_date,
        'Status': EXPIRY_BADGES[item.expiry_status(today, soon_days)],
    } for item in items], columns=['Ingredient', 'Quantity', 'Unit', 'Expires', 'Status'])


class PantryManagerInterface:
    """Pantry page"""

    def __init__(self, context: AppContext):
        self.ctx = context
        self.soon_days = context.config.expiring_soon_days

        # Session state keys
        self.VIEW_MODE_KEY = "pantry_view_mode"

    def render_pantry_manager(self):
        st.title("🥫 My Pantry")
        items = self.ctx.data.pantry
        today = date.today()

        self._render_pantry_header(items, today)
        self._render_add_form()

        term = st.text_input("🔍 Search pantry", placeholder="Filter by name")
        visible = search_pantry(items, term)

        view = st.radio("View", ["Cards", "Table"], horizontal=True, key=self.VIEW_MODE_KEY)
        if not visible:
            st.info("Your pantry is empty." if not items else "No items match your search.")
            return

        if view == "Table":
            st.dataframe(pantry_dataframe(visible, today, self.soon_days),
                         hide_index=True, use_container_width=True)
            return

        for item in visible:
            self._render_pantry_item(item, today)

    def _render_pantry_header(self, items: List[PantryItem], today: date):
        counts = summarize_expiry(items, today, self.soon_days)
        col1, col2, col3 = st.columns(3)
        col1.metric("Items", len(items))
        col2.metric("Expiring soon", counts[ExpiryStatus.EXPIRING_SOON])
        col3.metric("Expired", counts[ExpiryStatus.EXPIRED])

        if counts[ExpiryStatus.EXPIRED]:
            st.warning(f"⚠️ {counts[ExpiryStatus.EXPIRED]} item(s) have expired")

    def _render_add_form(self):
        with st.expander("➕ Add item"):
            with st.form("add_pantry_item", clear_on_submit=True):
                name = st.text_input("Ingredient")
                col1, col2 = st.columns(2)
                quantity = col1.number_input("Quantity (0 = unspecified)", min_value=0.0, step=0.5)
                unit = col2.text_input("Unit", placeholder="g, cups, pcs")
                has_expiry = st.checkbox("Has expiry date")
                expiry = st.date_input("Expiry date", value=date.today())
                submitted = st.form_submit_button("Add to pantry", type="primary")

        if not submitted:
            return

        try:
            self.ctx.pantry.add_pantry_item(self.ctx.user_id, name, quantity or None, unit,
                                            expiry if has_expiry else None)
            self.ctx.refresh_pantry()
        except TastyTrayError as e:
            st.error(f"❌ {e.message}")
            return
        st.rerun()

    def _render_pantry_item(self, item: PantryItem, today: date):
        with st.container(border=True):
            col1, col2, col3, col4 = st.columns([3, 2, 1, 1])
            with col1:
                amount = f"{item.quantity:g} {item.unit or ''}".strip() if item.quantity is not None \
                    else (item.unit or "")
                st.markdown(f"**{item.ingredient_name}**  \n{amount}")
            with col2:
                badge = EXPIRY_BADGES[item.expiry_status(today, self.soon_days)]
                if item.expiry_date:
                    st.caption(f"{badge} · {item.expiry_date:%b %d, %Y}")
            with col3:
                if st.button("🛒", key=f"to_shop_{item.id}", help="Move to shopping list"):
                    self._run(lambda: self.ctx.pantry.move_to_shopping_list(self.ctx.user_id, item),
                              refresh_shopping=True)
            with col4:
                if st.button("🗑️", key=f"del_pantry_{item.id}", help="Remove"):
                    self._run(lambda: self.ctx.pantry.remove_pantry_item(self.ctx.user_id, item.id))

            with st.expander("Edit"):
                self._render_edit_form(item)

    def _render_edit_form(self, item: PantryItem):
        with st.form(f"edit_pantry_{item.id}"):
            col1, col2 = st.columns(2)
            quantity = col1.number_input("Quantity", min_value=0.0, step=0.5, value=float(item.quantity or 0))
            unit = col2.text_input("Unit", value=item.unit or "")
            has_expiry = st.checkbox("Has expiry date", value=item.expiry_date is not None)
            expiry = st.date_input("Expiry date", value=item.expiry_date or date.today())
            submitted = st.form_submit_button("Save")

        if submitted:
            self._run(lambda: self.ctx.pantry.update_pantry_item(
                self.ctx.user_id, item.id, quantity or None, unit, expiry if has_expiry else None))

    def _run(self, action, refresh_shopping: bool = False):
        try:
            action()
            self.ctx.refresh_pantry()
            if refresh_shopping:
                self.ctx.refresh_shopping_list()
        except TastyTrayError as e:
            st.error(f"❌ {e.message}")
            return
        st.rerun()


def create_pantry_manager(context: AppContext) -> PantryManagerInterface:
    """Factory function to create pantry manager interface"""
    return PantryManagerInterface(context)
