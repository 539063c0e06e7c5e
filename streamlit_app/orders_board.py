"""Live order kanban board with table service calls.

Orders and service calls poll every few seconds; the restaurant list and the
rest of the page soft-refresh once a minute. Pausing live updates in the
sidebar stops both.
"""

from datetime import datetime

import httpx
import streamlit as st

from menu_portal.client.order_board import BOARD_COLUMNS, OrderBoard
from menu_portal.client.polling import ORDER_POLL_INTERVAL, PORTAL_REFRESH_INTERVAL
from menu_portal.core.errors import AuthenticationError, PortalError
from menu_portal.services.order_status import next_status
from menu_portal.utils.time import parse_timestamp, utcnow
from streamlit_app.common import (
    get_client,
    get_poll_source,
    render_login,
    render_visibility_toggle,
    reset_session,
)

st.set_page_config(page_title="Live Orders", layout="wide")
st.title("Live Orders")

client = get_client()
if "user" not in st.session_state:
    render_login(client)
    st.stop()

if "order_board" not in st.session_state:
    st.session_state.order_board = OrderBoard()
board: OrderBoard = st.session_state.order_board
render_visibility_toggle()

restaurant_source = get_poll_source("restaurants", client.get_restaurants, PORTAL_REFRESH_INTERVAL)
try:
    if restaurant_source.state.data is None:
        restaurants = restaurant_source.poll_once(force=True).data or []
    else:
        restaurants = restaurant_source.refresh_if_due().data or []
except AuthenticationError:
    reset_session()
    st.rerun()
if not restaurants:
    st.warning("No restaurants available for your account.")
    st.stop()

restaurant_map = {restaurant["name"]: restaurant["id"] for restaurant in restaurants}
restaurant_name = st.selectbox("Restaurant", list(restaurant_map.keys()))
restaurant_id = restaurant_map[restaurant_name]

if st.session_state.get("board_restaurant") != restaurant_id:
    st.session_state.board_restaurant = restaurant_id
    st.session_state.order_board = board = OrderBoard()
    st.session_state.pop("poll_orders", None)
    st.session_state.pop("poll_service_requests", None)


def _age(order: dict) -> str:
    minutes = int((utcnow() - parse_timestamp(order["placedAt"])).total_seconds() // 60)
    return "just now" if minutes < 1 else f"{minutes} min ago"


def _advance(order_id: str, target: str) -> None:
    try:
        board.replace(client.update_order_status(order_id, target))
    except AuthenticationError:
        reset_session()
    except (httpx.HTTPError, PortalError) as exc:
        st.session_state.board_error = str(exc)


@st.fragment(run_every=ORDER_POLL_INTERVAL)
def render_board() -> None:
    source = get_poll_source("orders", lambda: client.get_orders(restaurant_id), ORDER_POLL_INTERVAL)
    try:
        state = source.poll_once()
    except AuthenticationError:
        reset_session()
        st.rerun()
    if state.data is not None:
        arrived = board.merge(state.data)
        if arrived:
            st.toast(f"{len(arrived)} new order(s)")
    if state.error:
        st.caption(f"Connection problem, showing last known orders: {state.error}")
    if st.session_state.get("board_error"):
        st.error(st.session_state.pop("board_error"))

    now = utcnow()
    for column, status in zip(st.columns(len(BOARD_COLUMNS)), BOARD_COLUMNS):
        orders = board.columns()[status]
        column.subheader(f"{status} ({len(orders)})")
        for order in orders:
            with column.container(border=True):
                badge = " :red[NEW!]" if board.is_new(order, now) else ""
                st.markdown(f"**Table {order.get('tableNumber') or '-'}**{badge}  \n{_age(order)}")
                for line in order.get("items", []):
                    st.write(f"{line['quantity']} x {line['name']}")
                target = next_status(status)
                if target is not None:
                    st.button(
                        f"Mark {target}",
                        key=f"advance_{order['id']}_{target}",
                        on_click=_advance,
                        args=(order["id"], target),
                    )
    st.caption(f"Updated {datetime.now().strftime('%H:%M:%S')}")


def _handle_call(action, request_id: str) -> None:
    try:
        action(request_id)
    except AuthenticationError:
        reset_session()
    except (httpx.HTTPError, PortalError) as exc:
        st.session_state.board_error = str(exc)


@st.fragment(run_every=ORDER_POLL_INTERVAL)
def render_service_calls() -> None:
    source = get_poll_source(
        "service_requests", lambda: client.get_service_requests(restaurant_id), ORDER_POLL_INTERVAL
    )
    try:
        state = source.poll_once()
    except AuthenticationError:
        reset_session()
        st.rerun()
    open_calls = [call for call in state.data or [] if call["status"] != "completed"]
    st.subheader(f"Service calls ({len(open_calls)})")
    for call in open_calls:
        with st.container(border=True):
            note = f": {call['message']}" if call.get("message") else ""
            st.markdown(f"**Table {call['tableNumber']}** · {call['requestType']}{note}  \n_{call['status']}_")
            if call["status"] == "pending":
                st.button(
                    "Acknowledge",
                    key=f"ack_{call['id']}",
                    on_click=_handle_call,
                    args=(client.acknowledge_service_request, call["id"]),
                )
            st.button(
                "Done",
                key=f"done_{call['id']}",
                on_click=_handle_call,
                args=(client.complete_service_request, call["id"]),
            )


@st.fragment(run_every=PORTAL_REFRESH_INTERVAL)
def portal_refresh() -> None:
    if restaurant_source.refresh_wanted():
        st.rerun(scope="app")


render_board()
render_service_calls()
portal_refresh()
