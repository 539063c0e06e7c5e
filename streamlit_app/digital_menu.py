"""Digital signage menu display for one restaurant (``?restaurantId=...``)."""

import streamlit as st

from menu_portal.client.polling import MENU_POLL_INTERVAL
from streamlit_app.common import get_client, get_poll_source, render_visibility_toggle

st.set_page_config(page_title="Menu", layout="wide")

restaurant_id = st.query_params.get("restaurantId")
if not restaurant_id:
    st.error("Add ?restaurantId=<id> to the URL to choose a restaurant.")
    st.stop()

client = get_client()
render_visibility_toggle()


def _render_items(items: list[dict]) -> None:
    for item in items:
        price = f"{item['price']:.2f} {item['currency']}"
        label = item.get("displayName") or item["name"]
        tags = []
        if item.get("soldOut"):
            tags.append("sold out")
        if item.get("bogo"):
            tags.append("BOGO")
        if item.get("specialType") and item["specialType"] != "None":
            tags.append(item["specialType"])
        suffix = f"  _({', '.join(tags)})_" if tags else ""
        st.markdown(f"**{label}** · {price}{suffix}")
        if item.get("description"):
            st.caption(item["description"])


@st.fragment(run_every=MENU_POLL_INTERVAL)
def render_menu() -> None:
    source = get_poll_source("menu", lambda: client.get_public_menu(restaurant_id), MENU_POLL_INTERVAL)
    state = source.poll_once(force=source.state.data is None)
    if state.data is None:
        st.warning(state.error or "Menu is loading...")
        return
    menu = state.data
    st.title(menu["restaurant"]["name"])
    for category in menu["categories"]:
        st.header(category["name"])
        if category.get("description"):
            st.caption(category["description"])
        _render_items(category["items"])
        for subcategory in category["subcategories"]:
            st.subheader(subcategory["name"])
            _render_items(subcategory["items"])


render_menu()
