"""Account group pages: list, create and per-group management."""

import pandas as pd
import plotly.express as px
import streamlit as st

from banking_client import BankingClient, Session
from banking_client.exceptions import BankingClientError
from banking_client.roles import has_any_role
from banking_client.schemas import (
    AccountStatus,
    CreateGroupRequest,
    GroupStatistics,
    GroupType,
)
from ui.interest import format_money
from ui.navigation import APPROVERS
from ui.pages_customer import (
    form_orchestrator,
    render_confirmation,
    render_transfer_feedback,
    submit_transfer,
)
from ui.state import flash, go, show_error
from ui.tables import accounts_frame
from ui.transfer import GroupTransferOrchestrator, TransferState


def render_all_groups(
    client: BankingClient, session: Session, path_prefix: str | None = None
) -> None:
    st.header("All Account Groups")

    if st.button("Create group", type="primary"):
        go(f"{path_prefix or ''}/create-group")

    try:
        groups = client.groups.list_all()
    except BankingClientError as e:
        show_error(e, "Failed to load account groups.")
        return

    if not groups:
        st.info("No account groups yet.")
        return

    rows = [
        {
            "ID": g.id,
            "Name": g.group_name,
            "Type": g.group_type,
            "Owner": g.owner_id,
            "Accounts": len(g.accounts),
            "Total Balance ($)": g.total_balance,
        }
        for g in groups
    ]
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

    by_id = {g.id: g for g in groups}
    selected = st.selectbox(
        "Group", options=list(by_id), format_func=lambda i: by_id[i].group_name
    )
    if st.button("Open group"):
        go(f"{path_prefix or ''}/groups/{selected}")


def render_create_group(
    client: BankingClient, session: Session, path_prefix: str | None = None
) -> None:
    st.header("Create Account Group")

    with st.form("create_group"):
        name = st.text_input("Group name")
        group_type = st.selectbox("Type", options=[t.value for t in GroupType])
        owner_id = st.number_input(
            "Owner user ID", min_value=1, step=1, value=session.user.id
        )
        max_accounts = st.number_input("Maximum accounts", min_value=1, value=10)
        description = st.text_area("Description")
        submitted = st.form_submit_button("Create", type="primary")

    if not submitted:
        return
    if not name.strip():
        st.error("group name is required")
        return

    request = CreateGroupRequest(
        group_name=name.strip(),
        group_type=GroupType(group_type),
        owner_id=int(owner_id),
        max_accounts=int(max_accounts),
        description=description or None,
    )
    try:
        group = client.groups.create(request)
    except BankingClientError as e:
        show_error(e, "Failed to create the group.")
        return
    flash(f"Group {group.group_name} created.", "success")
    go(f"{path_prefix or ''}/groups/{group.id}")


def render_group_statistics(
    stats: GroupStatistics, total_balance: float | None = None
) -> None:
    """Show group figures; ``total_balance`` overrides the statistics total."""
    total = stats.total_balance if total_balance is None else total_balance
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Accounts", stats.total_accounts)
    col2.metric("Active", stats.active_accounts)
    col3.metric("Total Balance", format_money(total))
    col4.metric("Average Balance", format_money(stats.average_balance))
    if stats.largest_account_number:
        st.caption(
            f"Largest: {stats.largest_account_number} "
            f"({format_money(stats.largest_account_balance)}), "
            f"smallest: {stats.smallest_account_number} "
            f"({format_money(stats.smallest_account_balance)})"
        )


def _balance_chart(accounts) -> None:
    df = pd.DataFrame(
        {
            "account": [a.account_number for a in accounts],
            "balance": [a.balance for a in accounts],
        }
    )
    fig = px.bar(
        df,
        x="account",
        y="balance",
        title="Balance by Member Account",
        labels={"account": "Account", "balance": "Balance ($)"},
    )
    st.plotly_chart(fig, use_container_width=True)


def render_group_details(
    client: BankingClient,
    session: Session,
    group_id: str | None,
    path_prefix: str | None = None,
) -> None:
    st.header("Account Group")
    if group_id is None or not group_id.isdigit():
        st.error("No group selected.")
        return

    try:
        group = client.groups.get(int(group_id))
        members = client.groups.accounts(group.id)
        stats = client.groups.statistics(group.id)
        balance = client.groups.balance(group.id)
    except BankingClientError as e:
        show_error(e, "Failed to load the group.")
        return

    st.subheader(group.group_name)
    if group.description:
        st.caption(group.description)
    render_group_statistics(stats, balance)

    manages = group.owner_id == session.user.id or has_any_role(
        session.roles, APPROVERS
    )

    tab1, tab2, tab3 = st.tabs(["Members", "Transfer", "Settings"])

    with tab1:
        st.dataframe(accounts_frame(members), use_container_width=True, hide_index=True)
        if members:
            _balance_chart(members)
        if manages:
            _render_membership(client, session, group.id, members)

    with tab2:
        _render_group_transfer(client, group.id)

    with tab3:
        if not manages:
            st.info("Only the group owner or a manager can change this group.")
        else:
            _render_group_settings(client, group.id, path_prefix)


def _render_membership(
    client: BankingClient, session: Session, group_id: int, members
) -> None:
    member_ids = {a.id for a in members}
    try:
        candidates = [
            a
            for a in client.accounts.list_for_user(session.user.id)
            if a.id not in member_ids
        ]
    except BankingClientError as e:
        show_error(e, "Failed to load your accounts.")
        return

    col1, col2 = st.columns(2)
    if candidates:
        by_id = {a.id: a for a in candidates}
        to_add = col1.selectbox(
            "Add account", options=list(by_id), format_func=lambda i: by_id[i].label
        )
        if col1.button("Add to group"):
            try:
                client.groups.add_account(group_id, to_add)
            except BankingClientError as e:
                show_error(e, "Failed to add the account.")
                return
            st.rerun()

    if members:
        by_member = {a.id: a for a in members}
        to_remove = col2.selectbox(
            "Remove account",
            options=list(by_member),
            format_func=lambda i: by_member[i].label,
        )
        if col2.button("Remove from group"):
            try:
                client.groups.remove_account(group_id, to_remove)
            except BankingClientError as e:
                show_error(e, "Failed to remove the account.")
                return
            st.rerun()


def _render_group_transfer(client: BankingClient, group_id: int) -> None:
    orchestrator = form_orchestrator(
        f"group_transfer_{group_id}",
        lambda: GroupTransferOrchestrator(client, group_id),
    )
    render_transfer_feedback(orchestrator)

    if orchestrator.state is TransferState.CONFIRMING:
        draft = orchestrator.draft
        render_confirmation(
            orchestrator,
            f"move ${draft.amount} from {draft.from_account} to {draft.to_account}",
        )
        return

    numbers = [a.account_number for a in orchestrator.accounts]
    if len(numbers) < 2:
        st.info("A group transfer needs at least two member accounts.")
        return

    with st.form(f"group_transfer_form_{group_id}"):
        from_number = st.selectbox("From account", options=numbers)
        to_number = st.selectbox("To account", options=numbers, index=1)
        amount = st.text_input("Amount", placeholder="0.00")
        submitted = st.form_submit_button("Continue", type="primary")

    if submitted:
        orchestrator.set_fields(from_number, to_number, amount)
        submit_transfer(orchestrator)


def _render_group_settings(
    client: BankingClient, group_id: int, path_prefix: str | None
) -> None:
    statuses = [s.value for s in AccountStatus if not s.is_terminal]
    status = st.selectbox("Group status", options=statuses)
    if st.button("Set status"):
        try:
            client.groups.set_status(group_id, AccountStatus(status))
        except BankingClientError as e:
            show_error(e, "Failed to change the group status.")
            return
        flash(f"Group status set to {status}.", "success")
        st.rerun()

    st.divider()
    confirm = st.checkbox("I understand the group will be deleted")
    if st.button("Delete group", disabled=not confirm):
        try:
            client.groups.delete(group_id)
        except BankingClientError as e:
            show_error(e, "Failed to delete the group.")
            return
        flash("Group deleted.", "success")
        go(f"{path_prefix or ''}/my-groups")
