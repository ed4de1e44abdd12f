"""
Shopping list UI for TastyTray application.
"""

import streamlit as st

from models import ShoppingListItem
from services import AppContext, TastyTrayError
from utils import get_logger

logger = get_logger(__name__)


class ShoppingListInterface:
    """Shopping list page: add, check off, remove, move to pantry, clear completed"""

    def __init__(self, context: AppContext):
        self.ctx = context

    def render_shopping_list(self):
        st.title("🛒 Shopping List")
        items = self.ctx.data.shopping_list
        completed = [i for i in items if i.is_completed]

        col1, col2 = st.columns([3, 1])
        col1.caption(f"{len(items) - len(completed)} to buy · {len(completed)} done")
        with col2:
            if st.button("🧹 Clear completed", disabled=not completed, use_container_width=True):
                self._run(lambda: self.ctx.shopping_list.clear_completed(self.ctx.user_id))

        self._render_add_form()

        if not items:
            st.info("Your shopping list is empty.")
            return

        for item in items:
            self._render_item(item)

    def _render_add_form(self):
        with st.form("add_shopping_item", clear_on_submit=True):
            col1, col2, col3 = st.columns([3, 1, 1])
            name = col1.text_input("Item")
            quantity = col2.number_input("Qty", min_value=0.0, step=0.5)
            unit = col3.text_input("Unit")
            submitted = st.form_submit_button("➕ Add")

        if submitted:
            self._run(lambda: self.ctx.shopping_list.add_shopping_item(
                self.ctx.user_id, name, quantity or None, unit))

    def _render_item(self, item: ShoppingListItem):
        col1, col2, col3 = st.columns([5, 1, 1])
        with col1:
            checked = st.checkbox(item.get_display_text(), value=item.is_completed, key=f"shop_{item.id}")
            if checked != item.is_completed:
                self._run(lambda: self.ctx.shopping_list.toggle_shopping_item(
                    self.ctx.user_id, item.id, checked))
        with col2:
            if st.button("🥫", key=f"to_pantry_{item.id}", help="Move to pantry"):
                self._run(lambda: self.ctx.shopping_list.move_to_pantry(self.ctx.user_id, item),
                          refresh_pantry=True)
        with col3:
            if st.button("🗑️", key=f"del_shop_{item.id}", help="Remove"):
                self._run(lambda: self.ctx.shopping_list.remove_shopping_item(self.ctx.user_id, item.id))

    def _run(self, action, refresh_pantry: bool = False):
        try:
            action()
            self.ctx.refresh_shopping_list()
            if refresh_pantry:
                self.ctx.refresh_pantry()
        except TastyTrayError as e:
            st.error(f"❌ {e.message}")
            return
        st.rerun()


def create_shopping_list_interface(context: AppContext) -> ShoppingListInterface:
    return ShoppingListInterface(context)
