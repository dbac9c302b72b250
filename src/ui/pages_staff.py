"""Pages for tellers, managers and administrators."""

import streamlit as st

from banking_client import BankingClient, Session
from banking_client.exceptions import BankingClientError
from banking_client.roles import APPROVER_ROLES, Role, has_any_role
from banking_client.schemas import (
    AccountStatus,
    AccountType,
    AddDecoratorRequest,
    AmountRequest,
    CreateAccountRequest,
    CreateTransactionRequest,
    DecoratorType,
    OpenAccountRequest,
    RegisterRequest,
    TransactionType,
    UpdateAccountRequest,
)
from ui.approvals import ApprovalQueue
from ui.interest import InterestPanel, format_money
from ui.pages_customer import render_interest_report
from ui.state import flash, go, show_error
from ui.tables import (
    accounts_frame,
    decorators_frame,
    transactions_frame,
    users_frame,
)
from ui.transfer import parse_amount, validate_amount

APPROVALS_KEY = "approval_queue"


# =============================================================================
# Approval workflow
# =============================================================================


def render_pending_transactions(client: BankingClient, session: Session) -> None:
    """Render the manager approval queue.

    The list is re-read after every approve/reject; rows are never removed
    locally.
    """
    st.header("Pending Transactions")

    queue = st.session_state.get(APPROVALS_KEY)
    if queue is None or queue.manager_id != session.user.id:
        queue = ApprovalQueue(client, session.user.id)
        st.session_state[APPROVALS_KEY] = queue

    try:
        queue.refresh()
    except BankingClientError as e:
        show_error(e, "Failed to load pending transactions.")
        return

    if queue.error:
        st.error(queue.error)

    if st.button("Process all", disabled=not queue.transactions):
        _run_queue_command(queue, queue.process_all, "Pending transactions processed.")

    if not queue.transactions:
        st.info("No transactions are waiting for approval.")
        return

    for tx in queue.transactions:
        with st.container(border=True):
            col1, col2, col3 = st.columns([3, 2, 2])
            col1.markdown(
                f"**#{tx.id} {tx.transaction_type.value}**  \n"
                f"{tx.from_account or '--'} → {tx.to_account or '--'}"
            )
            col2.metric("Amount", format_money(tx.amount))
            if tx.created_at:
                col3.caption(f"{tx.created_at:%Y-%m-%d %H:%M}")
            if tx.description:
                st.caption(tx.description)

            approve_col, reject_col = st.columns(2)
            if approve_col.button("Approve", key=f"approve_{tx.id}", type="primary"):
                _run_queue_command(
                    queue,
                    lambda: queue.approve(tx.id),
                    f"Transaction #{tx.id} approved.",
                )
            with reject_col.popover("Reject"):
                reason = st.text_input("Rejection reason", key=f"reason_{tx.id}")
                if st.button("Confirm rejection", key=f"reject_{tx.id}"):
                    _run_queue_command(
                        queue,
                        lambda: queue.reject(tx.id, reason),
                        f"Transaction #{tx.id} rejected.",
                    )


def _run_queue_command(queue: ApprovalQueue, command, success: str) -> None:
    """Run an approval command, then rerun.

    The rerun refetches the queue and clears its error, so the outcome is
    carried over as a flash message.
    """
    try:
        ok = command()
    except BankingClientError as e:
        show_error(e, "The approval command failed.")
        return
    if ok:
        flash(success, "success")
    else:
        flash(queue.error, "error")
    st.rerun()


# =============================================================================
# Cash operations
# =============================================================================


def _render_cash_operation(client: BankingClient, kind: str) -> None:
    with st.form(f"{kind}_form"):
        account_number = st.text_input("Account number")
        amount = st.text_input("Amount", placeholder="0.00")
        description = st.text_input("Description (optional)")
        submitted = st.form_submit_button(kind.capitalize(), type="primary")

    if not submitted:
        return
    if not account_number.strip():
        st.error("account number is required")
        return
    amount_error = validate_amount(amount)
    if amount_error:
        st.error(amount_error)
        return

    request = AmountRequest(
        account_number=account_number.strip(),
        amount=float(parse_amount(amount)),
        description=description or None,
    )
    operation = client.banking.deposit if kind == "deposit" else client.banking.withdraw
    try:
        result = operation(request)
    except BankingClientError as e:
        show_error(e, f"The {kind} failed.")
        return

    if result.success is False:
        st.error(result.message or f"The {kind} failed.")
        return
    st.success(result.message or f"{kind.capitalize()} completed.")
    if result.balance is not None:
        st.metric("New balance", format_money(result.balance))


def render_deposit(client: BankingClient, session: Session) -> None:
    st.header("Deposit")
    _render_cash_operation(client, "deposit")


def render_withdraw(client: BankingClient, session: Session) -> None:
    st.header("Withdraw")
    _render_cash_operation(client, "withdraw")


# =============================================================================
# Accounts
# =============================================================================


def _opening_feature(
    decorator_type: DecoratorType, overdraft_limit: float
) -> AddDecoratorRequest:
    if decorator_type is DecoratorType.OVERDRAFT_PROTECTION:
        return AddDecoratorRequest(
            decorator_type=decorator_type, overdraft_limit=overdraft_limit or 500.0
        )
    if decorator_type is DecoratorType.INSURANCE:
        return AddDecoratorRequest(
            decorator_type=decorator_type,
            coverage_amount=10000.0,
            insurance_type="FRAUD",
        )
    return AddDecoratorRequest(decorator_type=decorator_type, tier_level="GOLD")


def render_create_account(client: BankingClient, session: Session) -> None:
    """Create an account directly, or open it with features through /banking."""
    st.header("Create Account")

    with st.form("create_account"):
        user_id = st.number_input("Customer ID", min_value=1, step=1)
        account_type = st.selectbox(
            "Account type", options=[t.value for t in AccountType]
        )
        initial_balance = st.number_input(
            "Initial balance", min_value=0.0, value=0.0, step=100.0, format="%.2f"
        )
        interest_rate = st.number_input(
            "Interest rate (%)", min_value=0.0, value=0.0, step=0.1
        )
        overdraft_limit = st.number_input(
            "Overdraft limit", min_value=0.0, value=0.0, step=100.0
        )
        minimum_balance = st.number_input(
            "Minimum balance", min_value=0.0, value=0.0, step=100.0
        )
        features = st.multiselect(
            "Open with features", options=[t.value for t in DecoratorType]
        )
        submitted = st.form_submit_button("Create", type="primary")

    if not submitted:
        return

    if features:
        request = OpenAccountRequest(
            user_id=int(user_id),
            account_type=AccountType(account_type),
            initial_balance=initial_balance,
            interest_rate=interest_rate or None,
            overdraft_limit=overdraft_limit or None,
            decorators=[
                _opening_feature(DecoratorType(f), overdraft_limit) for f in features
            ],
        )
        try:
            result = client.banking.open_account(request)
        except BankingClientError as e:
            show_error(e, "Failed to open the account.")
            return
        if result.success is False:
            st.error(result.message or "Failed to open the account.")
        else:
            st.success(result.message or "Account opened.")
        return

    request = CreateAccountRequest(
        account_type=AccountType(account_type),
        user_id=int(user_id),
        initial_balance=initial_balance,
        interest_rate=interest_rate or None,
        overdraft_limit=overdraft_limit or None,
        minimum_balance=minimum_balance or None,
    )
    try:
        account = client.accounts.create(request)
    except BankingClientError as e:
        show_error(e, "Failed to create the account.")
        return
    st.success(f"Account {account.account_number} created.")


def render_all_accounts(
    client: BankingClient, session: Session, path_prefix: str | None = None
) -> None:
    st.header("All Accounts")
    try:
        accounts = client.accounts.list_all()
    except BankingClientError as e:
        show_error(e, "Failed to load accounts.")
        return

    search = st.text_input("Search by account number")
    if search:
        accounts = [a for a in accounts if search.strip() in a.account_number]

    st.dataframe(accounts_frame(accounts), use_container_width=True, hide_index=True)
    if not accounts:
        return

    st.subheader("Manage")
    by_id = {a.id: a for a in accounts}
    selected_id = st.selectbox(
        "Account", options=list(by_id), format_func=lambda i: by_id[i].label
    )
    selected = by_id[selected_id]

    col1, col2, col3 = st.columns(3)
    if col1.button("Edit"):
        go(f"{path_prefix or ''}/edit-account/{selected.id}")

    status = col2.selectbox(
        "Status",
        options=[s.value for s in AccountStatus],
        index=[s.value for s in AccountStatus].index(selected.status.value),
        disabled=selected.status.is_terminal,
    )
    if col2.button("Set status", disabled=selected.status.is_terminal):
        try:
            client.accounts.set_status(selected.id, AccountStatus(status))
            flash(f"Account {selected.account_number} is now {status}.", "success")
        except BankingClientError as e:
            show_error(e, "Failed to change the account status.")
            return
        st.rerun()

    if has_any_role(session.roles, APPROVER_ROLES):
        if col3.button("Delete", type="secondary"):
            try:
                client.accounts.delete(selected.id)
                flash(f"Account {selected.account_number} deleted.", "success")
            except BankingClientError as e:
                show_error(e, "Failed to delete the account.")
                return
            st.rerun()


def render_edit_account(
    client: BankingClient, session: Session, account_id: str | None
) -> None:
    st.header("Edit Account")
    if account_id is None or not account_id.isdigit():
        st.error("No account selected.")
        return

    try:
        account = client.accounts.get(int(account_id))
    except BankingClientError as e:
        show_error(e, "Failed to load the account.")
        return

    if account.status.is_terminal:
        st.warning("This account is closed and can no longer be changed.")
        return

    statuses = [s.value for s in AccountStatus]
    with st.form("edit_account"):
        status = st.selectbox(
            "Status", options=statuses, index=statuses.index(account.status.value)
        )
        interest_rate = st.number_input(
            "Interest rate (%)", min_value=0.0, value=account.interest_rate or 0.0
        )
        overdraft_limit = st.number_input(
            "Overdraft limit", min_value=0.0, value=account.overdraft_limit or 0.0
        )
        minimum_balance = st.number_input(
            "Minimum balance", min_value=0.0, value=account.minimum_balance or 0.0
        )
        submitted = st.form_submit_button("Save", type="primary")

    if not submitted:
        return

    request = UpdateAccountRequest(
        status=AccountStatus(status),
        interest_rate=interest_rate,
        overdraft_limit=overdraft_limit,
        minimum_balance=minimum_balance,
    )
    try:
        client.accounts.update(account.id, request)
    except BankingClientError as e:
        show_error(e, "Failed to update the account.")
        return
    flash(f"Account {account.account_number} updated.", "success")
    st.rerun()


def render_check_account(client: BankingClient, session: Session) -> None:
    """Look up an account by number through the facade summary."""
    st.header("Check Account")
    account_number = st.text_input("Account number")
    if not st.button("Check", type="primary") or not account_number.strip():
        return

    number = account_number.strip()
    try:
        if not client.accounts.exists(number):
            st.warning(f"No account with number {number}.")
            return
        summary = client.banking.account_summary(number)
        transactions = client.banking.account_transactions(number)
    except BankingClientError as e:
        show_error(e, "Failed to check the account.")
        return

    st.json(summary)
    if transactions:
        st.dataframe(
            transactions_frame(transactions), use_container_width=True, hide_index=True
        )


# =============================================================================
# Users
# =============================================================================


def render_all_users(
    client: BankingClient, session: Session, path_prefix: str | None = None
) -> None:
    st.header("All Users")

    col1, col2 = st.columns(2)
    search = col1.text_input("Search by name")
    username = col2.text_input("Exact username")
    try:
        if username.strip():
            users = [client.users.by_username(username.strip())]
        elif search:
            users = client.users.search(search)
        else:
            users = client.users.list_all()
    except BankingClientError as e:
        show_error(e, "Failed to load users.")
        return

    st.dataframe(users_frame(users), use_container_width=True, hide_index=True)

    if users:
        by_id = {u.id: u for u in users}
        selected = st.selectbox(
            "User",
            options=list(by_id),
            format_func=lambda i: f"{by_id[i].username} ({by_id[i].display_name})",
        )
        if st.button("Open user"):
            go(f"{path_prefix or ''}/user/{selected}")

    if Role.ADMIN in session.roles:
        with st.expander("Create user"):
            _render_create_user(client)


def _render_create_user(client: BankingClient) -> None:
    with st.form("create_user"):
        username = st.text_input("Username")
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        first_name = st.text_input("First name")
        last_name = st.text_input("Last name")
        roles = st.multiselect(
            "Roles", options=[r.value for r in Role], default=[Role.CUSTOMER.value]
        )
        submitted = st.form_submit_button("Create user")

    if not submitted:
        return
    try:
        request = RegisterRequest(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
        )
    except ValueError as e:
        st.error(f"Invalid user details: {e}")
        return
    try:
        user = client.users.create(request, roles={Role(r) for r in roles})
    except BankingClientError as e:
        show_error(e, "Failed to create the user.")
        return
    st.success(f"User {user.username} created.")


def render_user_details(
    client: BankingClient, session: Session, user_id: str | None
) -> None:
    st.header("User Details")
    if user_id is None or not user_id.isdigit():
        st.error("No user selected.")
        return

    try:
        user = client.users.get(int(user_id))
        accounts = client.accounts.list_for_user(user.id)
    except BankingClientError as e:
        show_error(e, "Failed to load the user.")
        return

    st.markdown(f"**{user.display_name}** ({user.username})")
    st.markdown(f"Email: {user.email or '--'}")
    st.markdown(f"Roles: {', '.join(sorted(r.value for r in user.roles)) or '--'}")
    st.markdown(f"Active: {'yes' if user.is_active else 'no'}")

    st.subheader("Accounts")
    st.dataframe(accounts_frame(accounts), use_container_width=True, hide_index=True)

    if Role.ADMIN not in session.roles:
        return

    st.subheader("Administration")
    col1, col2 = st.columns(2)
    label = "Deactivate" if user.is_active else "Activate"
    if col1.button(label):
        try:
            client.users.set_status(user.id, not user.is_active)
            flash(f"User {user.username} updated.", "success")
        except BankingClientError as e:
            show_error(e, "Failed to change the user status.")
            return
        st.rerun()

    missing = [r.value for r in Role if r not in user.roles]
    if missing:
        role = col2.selectbox("Add role", options=missing)
        if col2.button("Add role"):
            try:
                client.users.add_role(user.id, Role(role))
                flash(f"Role {role} added to {user.username}.", "success")
            except BankingClientError as e:
                show_error(e, "Failed to add the role.")
                return
            st.rerun()


# =============================================================================
# Transactions, interest, features
# =============================================================================


def render_all_transactions(client: BankingClient, session: Session) -> None:
    st.header("All Transactions")
    try:
        transactions = client.transactions.list_all()
    except BankingClientError as e:
        show_error(e, "Failed to load transactions.")
        return

    if transactions:
        _render_transaction_table(transactions)
    else:
        st.info("No transactions.")

    with st.expander("Look up a transaction"):
        transaction_id = st.number_input("Transaction ID", min_value=1, step=1)
        if st.button("Look up"):
            try:
                found = client.transactions.get(int(transaction_id))
            except BankingClientError as e:
                show_error(e, "Transaction not found.")
            else:
                st.json(found.model_dump(mode="json", exclude_none=True))

    with st.expander("Record a transaction"):
        _render_create_transaction(client)


def _render_transaction_table(transactions) -> None:
    types = sorted({t.transaction_type.value for t in transactions})
    statuses = sorted({t.status.value for t in transactions})
    col1, col2 = st.columns(2)
    selected_types = col1.multiselect("Type", options=types, default=types)
    selected_statuses = col2.multiselect("Status", options=statuses, default=statuses)
    visible = [
        t
        for t in transactions
        if t.transaction_type.value in selected_types
        and t.status.value in selected_statuses
    ]
    st.dataframe(transactions_frame(visible), use_container_width=True, hide_index=True)
    st.caption(f"Showing {len(visible)} of {len(transactions)} transactions")


def _render_create_transaction(client: BankingClient) -> None:
    with st.form("create_transaction"):
        transaction_type = st.selectbox(
            "Type", options=[t.value for t in TransactionType]
        )
        from_account = st.text_input("From account (optional)")
        to_account = st.text_input("To account (optional)")
        amount = st.text_input("Amount", placeholder="0.00")
        description = st.text_input("Description (optional)")
        submitted = st.form_submit_button("Record")

    if not submitted:
        return
    amount_error = validate_amount(amount)
    if amount_error:
        st.error(amount_error)
        return

    request = CreateTransactionRequest(
        transaction_type=TransactionType(transaction_type),
        from_account_number=from_account.strip() or None,
        to_account_number=to_account.strip() or None,
        amount=float(parse_amount(amount)),
        description=description or None,
    )
    try:
        created = client.transactions.create(request)
    except BankingClientError as e:
        show_error(e, "Failed to record the transaction.")
        return
    flash(f"Transaction #{created.id} recorded.", "success")
    st.rerun()


def render_interest_management(client: BankingClient, session: Session) -> None:
    """Inspect and change interest strategies. Figures come from the backend."""
    st.header("Interest Management")

    try:
        accounts = client.accounts.list_all()
    except BankingClientError as e:
        show_error(e, "Failed to load accounts.")
        return

    if st.button("Apply interest to all accounts"):
        try:
            client.interest.apply_all()
            flash("Interest applied to all accounts.", "success")
        except BankingClientError as e:
            show_error(e, "Failed to apply interest.")
            return
        st.rerun()

    if not accounts:
        st.info("No accounts.")
        return

    by_id = {a.id: a for a in accounts}
    account_id = st.selectbox(
        "Account", options=list(by_id), format_func=lambda i: by_id[i].label
    )
    account = by_id[account_id]
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

    try:
        strategies = panel.available_strategies(account.account_type)
    except BankingClientError as e:
        show_error(e, "Failed to load interest strategies.")
        return

    if not strategies:
        st.info("No interest strategies are available for this account type.")
        return

    st.subheader("Change strategy")
    col1, col2 = st.columns(2)
    strategy = col1.selectbox("Strategy", options=strategies)
    if col1.button("Change strategy", type="primary"):
        try:
            changed = panel.change_strategy(strategy)
        except BankingClientError as e:
            show_error(e, "Failed to change the interest strategy.")
            return
        if changed:
            flash(f"Strategy changed to {strategy}.", "success")
            st.rerun()
        st.error(panel.error)
    if col2.button("Apply interest now"):
        try:
            applied = panel.apply_interest()
        except BankingClientError as e:
            show_error(e, "Failed to apply interest.")
            return
        if applied:
            flash(f"Interest applied to {account.account_number}.", "success")
            st.rerun()
        st.error(panel.error)

    st.subheader("Projection and comparison")
    col3, col4 = st.columns(2)
    months = col3.number_input("Months", min_value=1, max_value=120, value=12)
    if col3.button("Project interest"):
        try:
            value = panel.future_interest(int(months))
        except BankingClientError as e:
            show_error(e, "Failed to project interest.")
        else:
            col3.metric(f"Interest over {int(months)} months", format_money(value))

    if len(strategies) >= 2:
        first = col4.selectbox("Strategy A", options=strategies, index=0)
        second = col4.selectbox("Strategy B", options=strategies, index=1)
        if col4.button("Compare"):
            try:
                col4.json(panel.compare(first, second))
            except BankingClientError as e:
                show_error(e, "Failed to compare strategies.")


def render_account_features(client: BankingClient, session: Session) -> None:
    """Attach and remove account decorators (overdraft, insurance, premium)."""
    st.header("Account Features")

    try:
        accounts = client.accounts.list_all()
    except BankingClientError as e:
        show_error(e, "Failed to load accounts.")
        return

    if not accounts:
        st.info("No accounts.")
        return

    by_id = {a.id: a for a in accounts}
    account_id = st.selectbox(
        "Account", options=list(by_id), format_func=lambda i: by_id[i].label
    )

    try:
        decorators = client.decorators.for_account(account_id)
    except BankingClientError as e:
        show_error(e, "Failed to load account features.")
        return

    if decorators:
        st.dataframe(
            decorators_frame(decorators), use_container_width=True, hide_index=True
        )
        by_decorator = {d.id: d for d in decorators}
        selected = st.selectbox(
            "Feature",
            options=list(by_decorator),
            format_func=lambda i: f"#{i} {by_decorator[i].decorator_type.value}",
        )
        col1, col2 = st.columns(2)
        if col1.button("Activate", disabled=by_decorator[selected].is_active):
            try:
                client.decorators.activate(selected)
            except BankingClientError as e:
                show_error(e, "Failed to activate the feature.")
                return
            st.rerun()
        if col2.button("Remove"):
            try:
                client.decorators.remove(selected)
            except BankingClientError as e:
                show_error(e, "Failed to remove the feature.")
                return
            st.rerun()
    else:
        st.info("No features on this account.")

    with st.expander("Available features"):
        try:
            st.json(client.decorators.info())
        except BankingClientError as e:
            show_error(e, "Failed to load the feature catalogue.")

    if st.button("Apply monthly fees"):
        try:
            client.decorators.apply_fees()
        except BankingClientError as e:
            show_error(e, "Failed to apply feature fees.")
            return
        flash("Monthly feature fees applied.", "success")
        st.rerun()

    st.subheader("Add a feature")
    decorator_type = st.selectbox(
        "Feature type", options=[t.value for t in DecoratorType]
    )
    with st.form("add_decorator"):
        overdraft_limit = coverage_amount = None
        insurance_type = tier_level = None
        if decorator_type == DecoratorType.OVERDRAFT_PROTECTION.value:
            overdraft_limit = st.number_input(
                "Overdraft limit", min_value=0.0, value=500.0
            )
        elif decorator_type == DecoratorType.INSURANCE.value:
            coverage_amount = st.number_input(
                "Coverage amount", min_value=0.0, value=10000.0
            )
            insurance_type = st.selectbox(
                "Insurance type", options=["FRAUD", "THEFT", "LOSS"]
            )
        else:
            tier_level = st.selectbox(
                "Tier", options=["GOLD", "PLATINUM", "DIAMOND"]
            )
        description = st.text_input("Description (optional)")
        submitted = st.form_submit_button("Add feature", type="primary")

    if submitted:
        request = AddDecoratorRequest(
            decorator_type=DecoratorType(decorator_type),
            account_id=account_id,
            overdraft_limit=overdraft_limit,
            coverage_amount=coverage_amount,
            insurance_type=insurance_type,
            tier_level=tier_level,
            description=description or None,
        )
        try:
            client.decorators.add(request)
        except BankingClientError as e:
            show_error(e, "Failed to add the feature.")
            return
        flash("Feature added.", "success")
        st.rerun()
