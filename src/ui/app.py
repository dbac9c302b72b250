"""Bank Portal.

A Streamlit front end for the banking backend. Customers, tellers, managers
and administrators sign in to one app; each role lands on its own layout
(``/customer``, ``/teller``, ``/manager``, ``/admin``) and sees the menu
entries its roles allow.

Run with ``streamlit run src/ui/app.py`` once the package is installed.
"""

import logging

import streamlit as st
from pydantic import ValidationError

from banking_client import BankingClient, Session
from banking_client.exceptions import BankingClientError
from banking_client.roles import primary_role
from banking_client.schemas import RegisterRequest
from ui.navigation import (
    LAYOUT_TITLES,
    LOGIN_PATH,
    PORTAL_MENU,
    REGISTER_PATH,
    can_access,
    filter_menu,
    full_path,
    landing_path,
    layout_prefix,
    parse_route,
)
from ui.pages_customer import (
    render_account_details,
    render_dashboard,
    render_external_transfer,
    render_internal_transfer,
    render_make_payment,
    render_my_groups,
    render_my_transactions,
    render_notification_badge,
    render_notifications,
    render_profile,
)
from ui.pages_groups import render_all_groups, render_create_group, render_group_details
from ui.pages_staff import (
    render_account_features,
    render_all_accounts,
    render_all_transactions,
    render_all_users,
    render_check_account,
    render_create_account,
    render_deposit,
    render_edit_account,
    render_interest_management,
    render_pending_transactions,
    render_user_details,
    render_withdraw,
)
from ui.state import (
    current_path,
    flash,
    get_client,
    get_session,
    go,
    logout,
    navigate,
    render_flash,
    show_error,
)

logger = logging.getLogger(__name__)

# Page configuration
st.set_page_config(
    page_title="Bank Portal",
    page_icon="🏦",
    layout="wide",
    initial_sidebar_state="expanded",
)


def render_login(client: BankingClient) -> None:
    """Render the sign-in form and route to the role's dashboard on success."""
    st.title("🏦 Bank Portal")
    st.subheader("Sign in")

    with st.form("login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")

    if st.button("Create an account"):
        go(REGISTER_PATH)

    if not submitted:
        return
    if not username or not password:
        st.error("Username and password are required.")
        return

    try:
        session = client.auth.login(username, password)
    except BankingClientError as e:
        show_error(e, "Invalid username or password.")
        return
    go(landing_path(session.roles))


def render_register(client: BankingClient) -> None:
    st.title("🏦 Bank Portal")
    st.subheader("Open a customer profile")

    with st.form("register"):
        col1, col2 = st.columns(2)
        first_name = col1.text_input("First name")
        last_name = col2.text_input("Last name")
        username = st.text_input("Username")
        email = st.text_input("Email")
        phone_number = st.text_input("Phone number (optional)")
        address = st.text_input("Address (optional)")
        national_id = st.text_input("National ID (optional)")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Register", type="primary")

    if st.button("Back to sign in"):
        go(LOGIN_PATH)

    if not submitted:
        return

    try:
        request = RegisterRequest(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            phone_number=phone_number or None,
            address=address or None,
            national_id=national_id or None,
        )
    except ValidationError as e:
        for error in e.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            st.error(f"{field}: {error['msg']}")
        return

    try:
        client.auth.register(request)
    except BankingClientError as e:
        show_error(e, "Registration failed.")
        return
    flash("Registration successful. Please sign in.", "success")
    go(LOGIN_PATH)


def render_sidebar(client: BankingClient, session: Session) -> None:
    """Role-filtered menu plus the notification badge and sign-out."""
    roles = session.roles
    role = primary_role(roles)

    st.sidebar.title("🏦 Bank Portal")
    if role is None:
        st.sidebar.info("Loading your profile...")
        return
    st.sidebar.caption(LAYOUT_TITLES[role])
    st.sidebar.markdown(f"**{session.user.display_name}**")
    st.sidebar.markdown("---")

    active = current_path()
    for item in filter_menu(PORTAL_MENU, roles):
        path = full_path(roles, item)
        if st.sidebar.button(
            f"{item.icon} {item.label}",
            key=f"nav_{item.path}",
            use_container_width=True,
            type="primary" if active == path else "secondary",
        ):
            go(path)

    st.sidebar.markdown("---")
    with st.sidebar:
        render_notification_badge(client, session)
    if st.sidebar.button("Sign out", use_container_width=True):
        logout()
        st.rerun()


def render_page(client: BankingClient, session: Session, path: str) -> None:
    """Dispatch ``path`` to its page, refusing pages the roles do not allow."""
    prefix, page, param = parse_route(path)
    expected = layout_prefix(session.roles)
    if prefix != expected or not can_access(session.roles, page):
        logger.info(
            "User %s may not open %s; redirecting", session.user.username, path
        )
        go(landing_path(session.roles))

    pages = {
        "dashboard": lambda: render_dashboard(client, session, prefix),
        "account": lambda: render_account_details(client, session, param),
        "internal-transfer": lambda: render_internal_transfer(client, session),
        "external-transfer": lambda: render_external_transfer(client, session),
        "my-transfers": lambda: render_my_transactions(client, session),
        "make-payment": lambda: render_make_payment(client, session),
        "my-groups": lambda: render_my_groups(client, session, prefix),
        "groups": lambda: render_group_details(client, session, param, prefix),
        "notifications": lambda: render_notifications(client, session),
        "profile": lambda: render_profile(client, session),
        "pending-transactions": lambda: render_pending_transactions(client, session),
        "deposit": lambda: render_deposit(client, session),
        "withdraw": lambda: render_withdraw(client, session),
        "create-account": lambda: render_create_account(client, session),
        "all-accounts": lambda: render_all_accounts(client, session, prefix),
        "edit-account": lambda: render_edit_account(client, session, param),
        "check-account": lambda: render_check_account(client, session),
        "all-users": lambda: render_all_users(client, session, prefix),
        "user": lambda: render_user_details(client, session, param),
        "all-transactions": lambda: render_all_transactions(client, session),
        "all-groups": lambda: render_all_groups(client, session, prefix),
        "create-group": lambda: render_create_group(client, session, prefix),
        "interest": lambda: render_interest_management(client, session),
        "features": lambda: render_account_features(client, session),
    }
    render = pages.get(page)
    if render is None:
        st.error(f"Page not found: {path}")
        return
    render()


def main() -> None:
    """Main application entry point."""
    client = get_client()
    render_flash()

    session = get_session()
    path = current_path()

    if session is None:
        if path == REGISTER_PATH:
            render_register(client)
        else:
            if path != LOGIN_PATH:
                navigate(LOGIN_PATH)
            render_login(client)
        return

    render_sidebar(client, session)
    if primary_role(session.roles) is None:
        st.warning("Your profile has no role assigned yet.")
        return

    if path in (LOGIN_PATH, REGISTER_PATH):
        go(landing_path(session.roles))
    render_page(client, session, path)


if __name__ == "__main__":
    main()
