"""Pages available to every signed-in user.

Each ``render_*`` function draws one page. Data is fetched on every render
and never cached across mutations: after any command the page reruns and
reads the backend again.
"""

import streamlit as st

from banking_client import BankingClient, Session
from banking_client.exceptions import BankingClientError, SessionExpiredError
from banking_client.roles import APPROVER_ROLES, has_any_role
from banking_client.schemas import (
    Account,
    AccountStatus,
    NotificationPreference,
    PaymentRequest,
)
from ui.interest import InterestPanel, format_money, format_rate
from ui.notifications import NotificationPoller
from ui.state import POLLER_KEY, flash, go, show_error
from ui.tables import decorators_frame, transactions_frame
from ui.transfer import (
    AccountTransferOrchestrator,
    ExternalTransferOrchestrator,
    TransferOrchestrator,
    TransferState,
    parse_amount,
    validate_amount,
)

PREFERENCE_LABELS = {
    "email_enabled": "Email",
    "sms_enabled": "SMS",
    "in_app_enabled": "In-app",
    "low_balance_alert": "Low balance alerts",
    "transfer_alert": "Transfer alerts",
    "login_alert": "Login alerts",
    "marketing_emails": "Marketing emails",
    "monthly_statement": "Monthly statement",
}


def _prefix(path_prefix: str | None) -> str:
    return path_prefix or ""


def render_dashboard(
    client: BankingClient, session: Session, path_prefix: str | None = None
) -> None:
    """Render the dashboard: accounts, total balance and recent activity."""
    st.header(f"Welcome, {session.user.display_name}")

    try:
        accounts = client.accounts.list_for_user(session.user.id)
        total_balance = client.accounts.total_balance(session.user.id)
        recent = client.transactions.recent_for_user(session.user.id, limit=10)
    except BankingClientError as e:
        show_error(e, "Failed to load your accounts.")
        return

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric(label="Total Balance", value=format_money(total_balance))
    with col2:
        st.metric(label="Accounts", value=len(accounts))
    with col3:
        active = sum(1 for a in accounts if a.status is AccountStatus.ACTIVE)
        st.metric(label="Active Accounts", value=active)

    st.markdown("---")
    st.subheader("My Accounts")

    if not accounts:
        st.info("You have no accounts yet.")
    for account in accounts:
        cols = st.columns([3, 2, 2, 1])
        cols[0].markdown(f"**{account.account_number}**  \n{account.account_type.value}")
        cols[1].markdown(f"Balance: **{format_money(account.balance)}**")
        cols[2].markdown(f"Status: {account.status.value}")
        if cols[3].button("Open", key=f"open_account_{account.id}"):
            go(f"{_prefix(path_prefix)}/account/{account.id}")

    st.markdown("---")
    st.subheader("Recent Transactions")
    if recent:
        st.dataframe(transactions_frame(recent), use_container_width=True, hide_index=True)
    else:
        st.caption("No recent transactions.")


def render_account_details(
    client: BankingClient, session: Session, account_id: str | None
) -> None:
    """Render one account with its transactions, features and interest."""
    if account_id is None or not account_id.isdigit():
        st.error("No account selected.")
        return

    try:
        account = client.accounts.get(int(account_id))
        balance = client.accounts.balance(account.id)
        rate = client.interest.effective_rate(account.id)
        decorators = client.decorators.active_for_account(account.id)
    except BankingClientError as e:
        show_error(e, "Failed to load the account.")
        return

    st.header(f"Account {account.account_number}")
    col1, col2, col3 = st.columns(3)
    col1.metric("Balance", format_money(balance))
    col2.metric("Available", format_money(account.available_balance))
    col3.metric("Status", account.status.value)

    st.caption(
        f"Type: {account.account_type.value} | "
        f"Effective rate: {format_rate(rate)} | "
        f"Overdraft limit: {format_money(account.overdraft_limit)}"
    )

    tab_tx, tab_features, tab_interest = st.tabs(
        ["Transactions", "Features", "Interest"]
    )

    with tab_tx:
        latest_only = st.toggle("Latest 10 only")
        try:
            if latest_only:
                transactions = client.transactions.recent_for_account(account.id)
            else:
                transactions = client.transactions.for_account(account.id)
        except BankingClientError as e:
            show_error(e, "Failed to load transactions.")
            transactions = []
        if transactions:
            st.dataframe(
                transactions_frame(transactions),
                use_container_width=True,
                hide_index=True,
            )
        else:
            st.info("No transactions on this account.")
        render_account_statistics(client, session, account.id)

    with tab_features:
        if decorators:
            st.dataframe(
                decorators_frame(decorators), use_container_width=True, hide_index=True
            )
        else:
            st.info("No active features on this account.")
        try:
            features = client.decorators.features(account.id)
        except BankingClientError as e:
            show_error(e, "Failed to load the feature summary.")
        else:
            if features:
                st.caption("Included features")
                st.write(features)

    with tab_interest:
        panel = InterestPanel(client, account.id)
        try:
            report = panel.load()
        except BankingClientError as e:
            show_error(e, "Failed to load the interest report.")
            return
        if panel.error:
            st.error(panel.error)
        elif report is not None:
            render_interest_report(report)


def render_account_statistics(
    client: BankingClient, session: Session, account_id: int
) -> None:
    """Show the statistics expander to staff; the endpoint refuses customers."""
    if not has_any_role(session.roles, APPROVER_ROLES):
        return
    with st.expander("Statistics"):
        try:
            st.json(client.transactions.account_statistics(account_id))
        except BankingClientError as e:
            show_error(e, "Failed to load account statistics.")


def render_interest_report(report) -> None:
    col1, col2, col3 = st.columns(3)
    col1.metric("Strategy", report.current_strategy or "--")
    col2.metric("Effective Annual Rate", format_rate(report.effective_annual_rate))
    col3.metric("Monthly Interest", format_money(report.monthly_interest))
    col4, col5, col6 = st.columns(3)
    col4.metric("Current Balance", format_money(report.current_balance))
    col5.metric("Yearly Interest", format_money(report.yearly_interest))
    col6.metric("Projected (5 years)", format_money(report.projected5_year_interest))
    if report.next_interest_date:
        st.caption(f"Next interest date: {report.next_interest_date:%Y-%m-%d}")


def form_orchestrator(key: str, factory) -> TransferOrchestrator:
    """Keep one orchestrator per form across reruns.

    The account list is read again on every render; a failed read keeps the
    previous list.
    """
    orchestrator = st.session_state.get(key)
    if orchestrator is None:
        orchestrator = factory()
        st.session_state[key] = orchestrator
    if not orchestrator.is_busy:
        try:
            orchestrator.load_accounts()
        except BankingClientError as e:
            show_error(e, "Failed to load your accounts.")
    return orchestrator


def submit_transfer(orchestrator: TransferOrchestrator) -> None:
    """Submit the form's draft and rerun to show the outcome."""
    try:
        orchestrator.request_submit()
    except BankingClientError as e:
        show_error(e, "The transfer failed.")
        return
    st.rerun()


def render_transfer_feedback(orchestrator: TransferOrchestrator) -> None:
    if orchestrator.error:
        st.error(orchestrator.error)
    if orchestrator.state is TransferState.SUCCEEDED and orchestrator.outcome:
        st.success(orchestrator.outcome.message)


def render_confirmation(orchestrator: TransferOrchestrator, summary: str) -> None:
    st.warning(f"Please confirm: {summary}")
    col1, col2 = st.columns(2)
    if col1.button("Confirm", type="primary", key=f"confirm_{id(orchestrator)}"):
        try:
            orchestrator.confirm()
        except BankingClientError as e:
            show_error(e, "The transfer failed.")
        st.rerun()
    if col2.button("Cancel", key=f"cancel_{id(orchestrator)}"):
        orchestrator.cancel()
        st.rerun()


def render_internal_transfer(client: BankingClient, session: Session) -> None:
    """Render the transfer form between the user's own accounts."""
    st.header("Transfer Between My Accounts")

    orchestrator = form_orchestrator(
        "internal_transfer_form",
        lambda: AccountTransferOrchestrator(client, session.user.id),
    )
    render_transfer_feedback(orchestrator)

    accounts = {str(a.id): a for a in orchestrator.accounts}
    if len(accounts) < 2:
        st.info("You need at least two accounts to transfer between them.")
        return

    with st.form("internal_transfer"):
        from_id = st.selectbox(
            "From account",
            options=list(accounts),
            format_func=lambda k: accounts[k].label,
        )
        to_id = st.selectbox(
            "To account",
            options=list(accounts),
            index=1,
            format_func=lambda k: accounts[k].label,
        )
        amount = st.text_input("Amount", placeholder="0.00")
        description = st.text_input("Description (optional)")
        submitted = st.form_submit_button(
            "Transfer", type="primary", disabled=orchestrator.is_busy
        )

    if submitted:
        orchestrator.set_fields(from_id, to_id, amount, description)
        submit_transfer(orchestrator)


def render_external_transfer(client: BankingClient, session: Session) -> None:
    """Render the transfer form to an account number outside the user's own."""
    st.header("External Transfer")

    orchestrator = form_orchestrator(
        "external_transfer_form",
        lambda: ExternalTransferOrchestrator(client, session.user.id),
    )
    render_transfer_feedback(orchestrator)

    if orchestrator.state is TransferState.CONFIRMING:
        draft = orchestrator.draft
        render_confirmation(
            orchestrator,
            f"send ${draft.amount} from {draft.from_account} to {draft.to_account}",
        )
        return

    numbers = [a.account_number for a in orchestrator.accounts]
    if not numbers:
        st.info("You have no account to transfer from.")
        return

    with st.form("external_transfer"):
        from_number = st.selectbox("From account", options=numbers)
        to_number = st.text_input("Recipient account number")
        amount = st.text_input("Amount", placeholder="0.00")
        description = st.text_input("Description (optional)")
        submitted = st.form_submit_button("Continue", type="primary")

    if submitted:
        orchestrator.set_fields(from_number, to_number, amount, description)
        submit_transfer(orchestrator)


def render_my_transactions(client: BankingClient, session: Session) -> None:
    st.header("My Transactions")
    try:
        transactions = client.transactions.recent_for_user(session.user.id, limit=50)
    except BankingClientError as e:
        show_error(e, "Failed to load your transactions.")
        return

    if not transactions:
        st.info("No transactions yet.")
        return

    statuses = sorted({t.status.value for t in transactions})
    selected = st.multiselect("Status", options=statuses, default=statuses)
    visible = [t for t in transactions if t.status.value in selected]
    st.dataframe(transactions_frame(visible), use_container_width=True, hide_index=True)

    cancellable = [t for t in visible if t.status.is_pending]
    if cancellable:
        st.subheader("Cancel a pending transaction")
        choice = st.selectbox(
            "Transaction",
            options=[t.id for t in cancellable],
            format_func=lambda i: next(
                f"#{t.id} {t.transaction_type.value} {format_money(t.amount)}"
                for t in cancellable
                if t.id == i
            ),
        )
        reason = st.text_input("Reason for cancelling")
        if st.button("Cancel transaction"):
            if not reason.strip():
                st.error("A reason is required to cancel a transaction.")
                return
            try:
                client.transactions.cancel(choice, session.user.id, reason.strip())
            except BankingClientError as e:
                show_error(e, "Failed to cancel the transaction.")
                return
            flash("Transaction cancelled.", "success")
            st.rerun()


def render_make_payment(client: BankingClient, session: Session) -> None:
    st.header("Make a Payment")
    try:
        accounts: list[Account] = client.accounts.list_for_user(session.user.id)
    except BankingClientError as e:
        show_error(e, "Failed to load your accounts.")
        return

    if not accounts:
        st.info("You have no account to pay from.")
        return

    with st.form("make_payment"):
        account_number = st.selectbox(
            "Pay from", options=[a.account_number for a in accounts]
        )
        recipient = st.text_input("Recipient")
        amount = st.text_input("Amount", placeholder="0.00")
        currency = st.selectbox("Currency", options=["USD", "EUR", "GBP"])
        description = st.text_input("Description (optional)")
        submitted = st.form_submit_button("Pay", type="primary")

    if not submitted:
        return

    amount_error = validate_amount(amount)
    if amount_error:
        st.error(amount_error)
        return
    if not recipient.strip():
        st.error("recipient is required")
        return

    try:
        result = client.payments.process(
            PaymentRequest(
                account_number=account_number,
                recipient=recipient.strip(),
                amount=float(parse_amount(amount)),
                currency=currency,
                description=description or None,
            )
        )
    except BankingClientError as e:
        show_error(e, "The payment failed.")
        return
    st.success(result.message or "Payment processed.")


def _get_poller(client: BankingClient, session: Session) -> NotificationPoller:
    poller = st.session_state.get(POLLER_KEY)
    if poller is None or poller.user_id != session.user.id:
        interval = client.config.notification_poll_seconds
        poller = NotificationPoller(client, session.user.id, interval=interval)
        st.session_state[POLLER_KEY] = poller
    return poller


def render_notification_badge(client: BankingClient, session: Session) -> None:
    """Sidebar unread counter, refreshed on the poll interval."""
    poller = _get_poller(client, session)

    @st.fragment(run_every=poller.interval)
    def _badge() -> None:
        try:
            poller.poll_once()
        except SessionExpiredError:
            st.rerun(scope="app")
        count = poller.unread_count
        st.caption(f"🔔 {count} unread notification{'s' if count != 1 else ''}")

    _badge()


def render_notifications(client: BankingClient, session: Session) -> None:
    st.header("Notifications")
    tab_inbox, tab_preferences = st.tabs(["Inbox", "Preferences"])
    with tab_inbox:
        _render_inbox(client, session)
    with tab_preferences:
        _render_preferences(client, session)


def _render_inbox(client: BankingClient, session: Session) -> None:
    poller = _get_poller(client, session)
    try:
        poller.poll_once()
        stats = client.notifications.stats(session.user.id)
        if st.button("Mark all as read", disabled=poller.unread_count == 0):
            poller.mark_all_read()
            st.rerun()
    except BankingClientError as e:
        show_error(e, "Failed to load notifications.")
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Total", stats.get("totalNotifications", len(poller.notifications)))
    col2.metric("Unread", stats.get("unreadNotifications", poller.unread_count))
    col3.metric("Last 24h", stats.get("todayNotifications", 0))

    if poller.error:
        st.error("Failed to load notifications.")
    if not poller.notifications:
        st.info("No notifications.")
        return

    for notification in poller.notifications:
        with st.container(border=True):
            marker = "" if notification.is_read else "🆕 "
            st.markdown(f"**{marker}{notification.title}**")
            st.write(notification.message)
            if notification.created_at:
                st.caption(f"{notification.created_at:%Y-%m-%d %H:%M}")
            read_col, delete_col = st.columns(2)
            try:
                if not notification.is_read and read_col.button(
                    "Mark as read", key=f"read_{notification.id}"
                ):
                    poller.mark_read(notification.id)
                    st.rerun()
                if delete_col.button("Delete", key=f"delete_{notification.id}"):
                    client.notifications.delete(notification.id)
                    poller.poll_once()
                    st.rerun()
            except BankingClientError as e:
                show_error(e, "Failed to update the notification.")
                return


def _render_preferences(client: BankingClient, session: Session) -> None:
    try:
        current = client.notifications.preferences(session.user.id)
    except BankingClientError as e:
        show_error(e, "Failed to load notification preferences.")
        return

    with st.form("notification_preferences"):
        values = {
            field: st.checkbox(label, value=bool(getattr(current, field)))
            for field, label in PREFERENCE_LABELS.items()
        }
        submitted = st.form_submit_button("Save preferences")

    if not submitted:
        return
    try:
        client.notifications.update_preferences(
            session.user.id, NotificationPreference(user_id=session.user.id, **values)
        )
    except BankingClientError as e:
        show_error(e, "Failed to save notification preferences.")
        return
    st.success("Preferences saved.")


def render_profile(client: BankingClient, session: Session) -> None:
    st.header("Profile")
    try:
        user = client.auth.me()
        summary = client.banking.user_summary(user.id)
    except BankingClientError as e:
        show_error(e, "Failed to load your profile.")
        return

    col1, col2 = st.columns(2)
    with col1:
        st.markdown(f"**Name:** {user.display_name}")
        st.markdown(f"**Username:** {user.username}")
        st.markdown(f"**Email:** {user.email or '--'}")
        st.markdown(
            f"**Roles:** {', '.join(sorted(r.value for r in user.roles)) or '--'}"
        )
    with col2:
        st.metric("Accounts", summary.total_accounts)
        st.metric("Total Balance", format_money(summary.total_balance))
        if summary.member_since:
            st.caption(f"Member since {summary.member_since:%Y-%m-%d}")


def render_my_groups(
    client: BankingClient, session: Session, path_prefix: str | None = None
) -> None:
    st.header("My Account Groups")
    try:
        groups = client.groups.for_user(session.user.id)
    except BankingClientError as e:
        show_error(e, "Failed to load your groups.")
        return

    if not groups:
        st.info("You are not part of any account group.")
        return

    for group in groups:
        cols = st.columns([3, 2, 2, 1])
        cols[0].markdown(f"**{group.group_name}**  \n{group.group_type or ''}")
        cols[1].markdown(f"{len(group.accounts)} accounts")
        cols[2].markdown(format_money(group.total_balance))
        if cols[3].button("Open", key=f"open_group_{group.id}"):
            go(f"{_prefix(path_prefix)}/groups/{group.id}")
